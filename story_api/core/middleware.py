"""HTTP middleware for request ID propagation and correlation.

Every request/response pair carries a correlation id:
- an incoming X-Request-ID header is reused, otherwise a UUID is generated
- the id lives in contextvars for the duration of the request so log records
  pick it up
- the id and the request duration are echoed back in response headers, on
  unexpected 500s as well

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from story_api.core.exception_handlers import general_exception_handler
from story_api.core.logging import clear_request_id, set_request_id


async def request_id_middleware(request: Request, call_next) -> Response:
    """Assign a request id, time the request and decorate the response.

    The header name comes from ``settings.log.request_id_header`` of the
    settings the app was built with.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with request id and duration headers.
    """

    header_name = request.app.state.settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    except Exception as exc:
        # Unhandled errors are rendered here so the 500 gets the headers below.
        response = await general_exception_handler(request, exc)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
