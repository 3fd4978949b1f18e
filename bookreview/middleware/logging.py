"""
Book Review Service — Access Logging Middleware
================================================

What:  One log line per HTTP request on the `bookreview.access` logger.
How:   Measures wall time around the handler and logs method, path, status,
       duration, caller IP and the signed-in user's id (when the access gate
       resolved one).

Level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Request bodies are never logged: review text and book submissions are
user content.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from bookreview.middleware.request_id import request_id_var

logger = logging.getLogger("bookreview.access")

QUIET_PATHS = {"/health"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its outcome and duration."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        user_id = getattr(request.state, "user_id", None) or "anonymous"
        status = response.status_code

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms user=%s from %s",
            request.method,
            path,
            status,
            duration_ms,
            user_id,
            client_ip,
            extra={
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_id": user_id,
                "rid": request_id_var.get(""),
            },
        )
        return response
