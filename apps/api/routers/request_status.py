"""In-memory per-client status of comment analysis requests."""

from __future__ import annotations

import asyncio
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, TypeVar

from fastapi import HTTPException, Request

T = TypeVar("T")


class RequestStatus(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    DONE = "done"
    ERRORED = "errored"


_local_states: Dict[str, RequestStatus] = {}
_local_workers: Dict[str, asyncio.Future] = {}
_local_lock = asyncio.Lock()


def _client_identifier(request: Request) -> str:
    if request.client and request.client.host:
        return request.client.host
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return "unknown"


def get_request_status(request: Request) -> RequestStatus:
    return _local_states.get(_client_identifier(request), RequestStatus.IDLE)


def _record_outcome(key: str, worker: asyncio.Future) -> None:
    _local_workers.pop(key, None)
    if worker.cancelled() or worker.exception() is not None:
        _local_states[key] = RequestStatus.ERRORED
    else:
        _local_states[key] = RequestStatus.DONE


async def run_tracked_analysis(request: Request, func: Callable[..., T], *args: Any) -> T:
    """
    Run a blocking analysis in a worker thread on behalf of the client.

    A second request from the same client is rejected with 409 while the
    first one runs. Cancelling the caller does not stop the worker: the
    client stays in flight until the worker finishes, and the worker's own
    result decides between done and errored.
    """
    key = _client_identifier(request)
    async with _local_lock:
        if _local_states.get(key) == RequestStatus.IN_FLIGHT:
            raise HTTPException(
                status_code=409,
                detail="An analysis is already in progress. Wait for it to finish.",
            )
        _local_states[key] = RequestStatus.IN_FLIGHT
        worker = asyncio.ensure_future(asyncio.to_thread(func, *args))
        _local_workers[key] = worker
        # Registered before shield() so the status is settled when the caller resumes
        worker.add_done_callback(partial(_record_outcome, key))

    return await asyncio.shield(worker)
