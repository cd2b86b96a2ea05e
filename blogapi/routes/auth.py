"""
OAuth login, current-user and logout routes.
"""
import hmac
import secrets
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from ..auth import clear_session_cookie, get_required_user, get_session_token, set_session_cookie
from ..config import get_settings
from ..dependencies import get_auth_service
from ..errors import UnauthorizedError, ValidationFailedError
from ..limiter import limiter
from ..logging_config import auth_logger
from ..models.user import User
from ..oauth import IdentityProvider, OAuthError
from ..oauth.state import STATE_COOKIE_NAME, decode_state, encode_state
from ..responses import success
from ..schemas.auth import UserResponse
from ..services import AuthService

settings = get_settings()
router = APIRouter(prefix="/auth", tags=["auth"])


def _provider(request: Request, name: str) -> IdentityProvider:
    providers: Dict[str, IdentityProvider] = request.app.state.oauth_providers
    provider = providers.get(name)
    if provider is None:
        raise ValidationFailedError(f"unsupported provider: {name}", {"provider": name})
    return provider


@router.get("/me")
def get_me(current_user: User = Depends(get_required_user)):
    """Get the logged-in user."""
    return success(UserResponse.model_validate(current_user))


@router.post("/logout")
def logout(
    request: Request,
    current_user: User = Depends(get_required_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    """End the current session and clear the cookie."""
    auth_service.logout(get_session_token(request))
    auth_logger.info("User logged out", user_id=current_user.id)

    response = JSONResponse(success(message="Logged out"))
    clear_session_cookie(response)
    return response


@router.get("/{provider}")
@limiter.limit(settings.login_rate_limit)
def begin_login(request: Request, provider: str):
    """Redirect to the provider's consent page."""
    identity_provider = _provider(request, provider)
    state = secrets.token_urlsafe(32)
    auth_request = identity_provider.begin_auth(state)

    response = RedirectResponse(auth_request.url, status_code=307)
    response.set_cookie(
        key=STATE_COOKIE_NAME,
        value=encode_state(settings, provider, state, auth_request.code_verifier),
        max_age=settings.oauth_state_ttl_minutes * 60,
        path="/auth",
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/{provider}/callback")
def oauth_callback(
    request: Request,
    provider: str,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Finish the OAuth flow, open a session and send the browser back to the blog."""
    identity_provider = _provider(request, provider)

    if error:
        raise UnauthorizedError(f"provider denied access: {error}")

    payload = decode_state(settings, request.cookies.get(STATE_COOKIE_NAME, ""))
    if (
        payload is None
        or payload.get("provider") != provider
        or not state
        or not hmac.compare_digest(str(payload.get("state", "")), state)
    ):
        raise UnauthorizedError("invalid oauth state")

    if not code:
        raise ValidationFailedError("missing authorization code", {"code": "required"})

    try:
        tokens = identity_provider.exchange(code, dict(request.query_params), payload.get("code_verifier"))
        oauth_user = identity_provider.fetch_user(tokens)
    except OAuthError as e:
        auth_logger.warning("OAuth exchange failed", provider=provider, error_message=str(e))
        raise UnauthorizedError("authentication with provider failed") from e

    user, session = auth_service.login_with_oauth(oauth_user)

    response = RedirectResponse(f"{settings.oauth_frontend_url}/blog", status_code=302)
    set_session_cookie(response, session.token)
    response.delete_cookie(STATE_COOKIE_NAME, path="/auth")
    return response
