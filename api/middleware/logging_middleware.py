"""
Request logging middleware with correlation IDs for request tracing.

The request ID is bound into structlog's contextvars, so every record logged
while the request is handled (stdlib or structlog) carries a request_id field.
"""
import logging
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


def get_request_id() -> str:
    """Get the current request ID from context."""
    return structlog.contextvars.get_contextvars().get("request_id", "")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Assigns a short request ID to each request, logs start/end with timing
    and returns the ID in the X-Request-ID header.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Keep the caller's ID so frontend and backend logs line up
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        path = request.url.path

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.time()
        logger.info(f"→ {request.method} {path}", extra={"method": request.method, "path": path})

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"✗ Error: {str(e)[:100]} ({duration_ms:.0f}ms)",
                extra={"error": str(e), "duration_ms": duration_ms},
                exc_info=True,
            )
            raise
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        duration_ms = (time.time() - start_time) * 1000
        log_level = logging.INFO if response.status_code < 400 else logging.WARNING
        logger.log(
            log_level,
            f"← {response.status_code} {path} ({duration_ms:.0f}ms)",
            extra={"request_id": request_id, "status_code": response.status_code, "duration_ms": duration_ms},
        )

        response.headers["X-Request-ID"] = request_id
        return response


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger; request-scoped fields are merged in at render time."""
    return structlog.stdlib.get_logger(name)
