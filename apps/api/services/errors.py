"""Failure conditions of a single fetch-and-analyze operation."""

from __future__ import annotations

from typing import Optional


class CommentAnalysisError(RuntimeError):
    """Base class for terminal failures of a comment analysis request."""

    kind = "analysis_failed"
    http_status = 502


class InvalidVideoUrlError(CommentAnalysisError):
    """Raised when no YouTube video ID can be extracted from user input."""

    kind = "invalid_url"
    http_status = 400

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__("Invalid YouTube video URL. Please check the URL and try again.")


class CredentialNotConfiguredError(CommentAnalysisError):
    """Raised when the API key for an external service is missing."""

    kind = "credential_not_configured"
    http_status = 500

    ENV_NAMES = {
        "youtube": "YOUTUBE_API_KEY",
        "openai": "OPENAI_API_KEY",
    }

    def __init__(self, service: str) -> None:
        self.service = service
        self.env_name = self.ENV_NAMES.get(service, service.upper())
        super().__init__(f"{self.env_name} is not configured")


class YouTubeApiError(CommentAnalysisError):
    """Raised when a comment page request returns a non-success status."""

    kind = "youtube_api_error"

    def __init__(self, message: str, *, status_code: int, reason: Optional[str] = None) -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(message)


class InvalidApiKeyError(CommentAnalysisError):
    """Raised when the text-generation service rejects the API key."""

    kind = "invalid_api_key"
    http_status = 401


class ResponseFormatError(CommentAnalysisError):
    """Raised when the model output cannot be recovered into a result list."""

    kind = "response_format_error"


class AnalysisFailedError(CommentAnalysisError):
    """Generic failure wrapping an unexpected upstream error."""
