"""Request tracing middleware for FastAPI.

Injects/propagates `X-Request-ID` so every log line of a request carries the
same correlation id, and logs one timing line per request.
"""

from .logging import set_request_id
from fastapi import Request, Response
from typing import Awaitable, Callable
import logging
import time
import uuid

log = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def trace_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """ASGI middleware to attach a correlation id and echo it in the response.

    - Reads `X-Request-ID` from the incoming request or generates a UUIDv4.
    - Stores it in a ContextVar so logs include the same id.
    - Logs method, path, status and duration once the response is ready.

    Args:
        request: Incoming FastAPI request.
        call_next: The next ASGI callable that returns a `Response`.

    Returns:
        The downstream response with `X-Request-ID` header set.
    """
    rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    set_request_id(rid)
    start = time.perf_counter()
    try:
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        log.info(
            "%s %s -> %s in %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        response.headers[REQUEST_ID_HEADER] = rid
        return response
    finally:
        set_request_id(None)
