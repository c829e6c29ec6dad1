"""
API Middleware Module
Request logging middleware
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import time

from logging_config import http_request_summary


class LoggingMiddleware(BaseHTTPMiddleware):
    """Request/response logging middleware"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time

        # Prod Mode countdown is polled every second; keep it out of INFO logs
        if request.url.path not in ("/health", "/api/mode/prod") or response.status_code >= 400:
            http_request_summary(
                request.method,
                request.url.path,
                response.status_code,
                round(process_time * 1000, 2)
            )

        response.headers["X-Process-Time"] = str(process_time)
        return response
