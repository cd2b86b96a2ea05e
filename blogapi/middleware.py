"""
Custom middleware for security headers, request logging and rate limiting.
"""
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .logging_config import api_logger
from .responses import error_response

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}

REQUEST_ID_HEADER = "X-Request-ID"


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses, including error envelopes."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request, tagged with a request id echoed back to the client."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:16]
        log = api_logger.bind(request_id=request_id)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        if response.status_code >= 500:
            emit = log.error
        elif response.status_code >= 400:
            emit = log.warning
        else:
            emit = log.info
        emit(
            f"{request.method} {request.url.path} -> {response.status_code}",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            client_ip=client_ip(request),
            duration_ms=duration_ms,
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject clients that exceed the fixed-window budget on ``app.state.rate_limiter``."""

    async def dispatch(self, request: Request, call_next) -> Response:
        rate_limiter = getattr(request.app.state, "rate_limiter", None)
        if rate_limiter is not None:
            ip = client_ip(request)
            if not rate_limiter.allow(ip):
                api_logger.warning("Rate limit exceeded", client_ip=ip, path=request.url.path)
                return error_response(
                    429,
                    "TOO_MANY_REQUESTS",
                    "too many requests",
                    headers={"Retry-After": str(int(rate_limiter.window_seconds))},
                )

        return await call_next(request)
