"""FastAPI middleware for request logging."""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from laylapet.logging import (
    clear_request_context,
    log_api_request,
    set_request_context,
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with timing and bind a request id to its logs."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())[:8]
        set_request_context(
            request_id=request_id,
            session_id=request.headers.get("X-Session-ID"),
        )
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            log_api_request(
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=(time.perf_counter() - start_time) * 1000,
                user_agent=request.headers.get("User-Agent"),
            )
            response.headers["X-Request-ID"] = request_id
            return response
        except Exception as e:
            log_api_request(
                method=request.method,
                path=request.url.path,
                status_code=500,
                duration_ms=(time.perf_counter() - start_time) * 1000,
                user_agent=request.headers.get("User-Agent"),
                error=str(e),
            )
            raise
        finally:
            clear_request_context()
