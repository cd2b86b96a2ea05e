"""
Blog API Response Utilities
Standardized response envelope and error handling
"""
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from typing import Any, Dict, Optional
from datetime import datetime, timezone

from .errors import BlogError
from .logging_config import api_logger


HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "BAD_REQUEST",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    429: "TOO_MANY_REQUESTS",
}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================
# SUCCESS RESPONSES
# ============================================================

def success(data: Any = None, message: str = None, meta: Dict = None) -> Dict:
    """Create success response"""
    response = {
        "success": True,
        "timestamp": _timestamp(),
    }

    if data is not None:
        response["data"] = data

    if message:
        response["message"] = message

    if meta:
        response["meta"] = meta

    return response


def created(data: Any, message: str = "Created successfully") -> Dict:
    """201 Created response"""
    return success(data, message)


def deleted(message: str = "Deleted successfully") -> Dict:
    """200 Deleted response"""
    return success(message=message)


def paginated(items: list, total: int, page: int, limit: int) -> Dict:
    """Paginated list response"""
    return success(
        items,
        meta={
            "page": page,
            "limit": limit,
            "total_count": total,
            "total_pages": (total + limit - 1) // limit if limit else 0,
        },
    )


# ============================================================
# ERROR RESPONSES
# ============================================================

def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[Dict] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the error envelope."""
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "timestamp": _timestamp()},
        headers=headers,
    )


# ============================================================
# EXCEPTION HANDLERS
# ============================================================

async def blog_error_handler(request: Request, exc: BlogError) -> JSONResponse:
    """Map domain errors to their status and code."""
    if exc.status_code >= 500:
        api_logger.error(
            f"API Error: {exc.message}",
            error=exc,
            path=request.url.path,
        )
        return error_response(exc.status_code, exc.error_code, "internal server error")

    api_logger.warning(
        f"API Error: {exc.message}",
        status_code=exc.status_code,
        error_code=exc.error_code,
        path=request.url.path,
    )
    return error_response(exc.status_code, exc.error_code, exc.message, exc.details)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Wrap framework HTTP errors (404 routes, 405 methods) in the envelope."""
    api_logger.warning(
        f"HTTP Error: {exc.detail}",
        status_code=exc.status_code,
        path=request.url.path,
    )
    code = HTTP_ERROR_CODES.get(exc.status_code, "INTERNAL_SERVER_ERROR")
    return error_response(exc.status_code, code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request body/query validation failures per field."""
    details = {}
    for err in exc.errors():
        location = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details[".".join(location) or "request"] = err.get("msg", "invalid value")

    api_logger.warning(
        "Validation failed",
        path=request.url.path,
        fields=list(details),
    )
    return error_response(400, "VALIDATION_ERROR", "validation failed", details)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """slowapi limit hit on a decorated route."""
    api_logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        limit=str(exc.detail),
    )
    return error_response(429, "TOO_MANY_REQUESTS", "too many requests")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the traceback and hide internals from the client."""
    api_logger.error(
        f"Unexpected error: {exc}",
        error=exc,
        path=request.url.path,
    )
    return error_response(500, "INTERNAL_SERVER_ERROR", "internal server error")
