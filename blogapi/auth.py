"""
Session cookie handling and the authentication dependencies.
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from .config import get_settings
from .database import get_db
from .errors import PermissionDeniedError, UnauthorizedError
from .models.user import User
from .services.auth import AuthService

settings = get_settings()


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.session_max_age_seconds,
        path="/",
        domain=settings.cookie_domain,
        secure=settings.cookie_secure,
        httponly=settings.cookie_http_only,
        samesite=settings.cookie_same_site,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.cookie_name,
        path="/",
        domain=settings.cookie_domain,
        secure=settings.cookie_secure,
        httponly=settings.cookie_http_only,
        samesite=settings.cookie_same_site,
    )


def get_session_token(request: Request) -> Optional[str]:
    return request.cookies.get(settings.cookie_name) or None


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Get the user behind the session cookie (optional auth)."""
    token = get_session_token(request)
    if not token:
        return None
    return AuthService(db).validate_session(token)


def get_required_user(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
) -> User:
    """Get the current user, raising 401 if not authenticated."""
    if current_user is None:
        if get_session_token(request):
            raise UnauthorizedError("invalid or expired session")
        raise UnauthorizedError("authentication required")
    return current_user


def get_admin_user(current_user: User = Depends(get_required_user)) -> User:
    """Get the current user, raising 403 unless they are an admin."""
    if not current_user.is_admin:
        raise PermissionDeniedError("admin access required")
    return current_user
