"""
Personal Blog API - FastAPI application entry point.
"""
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from .background import PeriodicTask, cleanup_expired_sessions, make_rate_limiter_eviction
from .config import get_settings
from .database import engine, Base
from .errors import BlogError
from .limiter import limiter, FixedWindowRateLimiter
from .logging_config import api_logger
from .middleware import RateLimitMiddleware, RequestLoggingMiddleware, SecurityHeadersMiddleware
from .oauth import build_providers
from .responses import (
    blog_error_handler,
    http_exception_handler,
    rate_limit_exceeded_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from .routes import (
    auth_router,
    posts_router,
    comments_router,
    likes_router,
    media_router,
    profile_router,
    health_router,
)
from .services import ProfileCache

settings = get_settings()

# Create tables (schema changes need a manual migration)
if settings.auto_create_tables:
    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown"""
    os.makedirs(settings.media_upload_path, exist_ok=True)

    tasks = [
        PeriodicTask(
            "session-cleanup",
            settings.session_cleanup_interval_seconds,
            cleanup_expired_sessions,
            timeout=settings.session_cleanup_timeout_seconds,
        ),
    ]
    if app.state.rate_limiter is not None:
        tasks.append(PeriodicTask(
            "rate-limiter-eviction",
            settings.rate_limit_cleanup_interval_seconds,
            make_rate_limiter_eviction(app.state.rate_limiter),
        ))

    for task in tasks:
        task.start_background()
    api_logger.info("Application started", environment=settings.environment, providers=sorted(app.state.oauth_providers))

    yield  # App is running

    for task in tasks:
        task.stop()
    api_logger.info("Application stopped")


app = FastAPI(
    title=settings.app_name,
    description="Backend API for a personal blog",
    version="1.0.0",
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Shared state
app.state.limiter = limiter
app.state.rate_limiter = (
    FixedWindowRateLimiter(settings.rate_limit_requests, settings.rate_limit_window_seconds)
    if settings.rate_limit_enabled
    else None
)
app.state.profile_cache = ProfileCache(settings.profile_cache_ttl_seconds)
app.state.oauth_providers = build_providers(settings)

# Error envelope
app.add_exception_handler(BlogError, blog_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Middleware runs bottom-up: the last added sees the request first
app.add_middleware(RateLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

if settings.debug:
    app.add_middleware(RequestLoggingMiddleware)

if settings.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Authorization", "Content-Type", "X-CSRF-Token"],
        max_age=300,
    )

# Outermost, so every layer below sees the real client address
if settings.proxy_headers_enabled:
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=settings.forwarded_allow_ips)

# Routes
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(posts_router)
app.include_router(comments_router)
app.include_router(likes_router)
app.include_router(media_router)
app.include_router(profile_router)

# Uploaded files
app.mount("/media", StaticFiles(directory=settings.media_upload_path, check_dir=False), name="media")
app.mount("/uploads", StaticFiles(directory=settings.media_upload_path, check_dir=False), name="uploads")


@app.get("/")
def root():
    return {
        "message": settings.app_name,
        "docs": "/api/docs" if settings.debug else "Disabled in production",
    }
