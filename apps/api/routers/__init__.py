"""Routers package."""

from . import (
    health,
    comments,
)
