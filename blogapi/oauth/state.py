"""
Signed, short-lived cookie that carries the OAuth state and PKCE verifier
from the redirect to the callback.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from ..config import Settings

STATE_COOKIE_NAME = "oauth_state"


def encode_state(settings: Settings, provider: str, state: str, code_verifier: Optional[str] = None) -> str:
    payload = {
        "provider": provider,
        "state": state,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=settings.oauth_state_ttl_minutes),
    }
    if code_verifier:
        payload["code_verifier"] = code_verifier
    return jwt.encode(payload, settings.session_secret, algorithm=settings.algorithm)


def decode_state(settings: Settings, token: str) -> Optional[dict]:
    """Payload of a valid, unexpired state cookie, or None."""
    try:
        return jwt.decode(token, settings.session_secret, algorithms=[settings.algorithm])
    except JWTError:
        return None
