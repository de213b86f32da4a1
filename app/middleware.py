"""HTTP middleware: request logging and security headers."""
import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from app.config.security import SecurityConfig

logger = logging.getLogger("app.requests")

SKIP_PATHS = ("/health", "/openapi.json", "/docs", "/redoc")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000
        response.headers["X-Request-ID"] = request_id
        if request.url.path not in SKIP_PATHS:
            logger.info(
                "%s %s -> %s (%.1f ms) [%s]",
                request.method, request.url.path, response.status_code, duration_ms, request_id,
            )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for header, value in SecurityConfig.SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response
