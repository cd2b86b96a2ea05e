"""
Shared types and session helpers for OAuth identity providers.

A provider is anything with a ``name`` and the four methods of
``IdentityProvider``; routes never know which concrete provider they talk to.
The wire protocol (authorization URLs, token requests and responses, bearer
headers) is handled by requests-oauthlib.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence

import requests
from oauthlib.oauth2 import OAuth2Error, WebApplicationClient
from requests_oauthlib import OAuth2Session

REQUEST_TIMEOUT = 10
TOKEN_FIELDS = {"access_token", "refresh_token", "expires_in", "expires_at", "token_type", "scope"}


class OAuthError(Exception):
    """Provider rejected the exchange or returned something unusable."""


@dataclass
class AuthRequest:
    """Where to send the browser, plus anything the callback must prove (PKCE)."""
    url: str
    code_verifier: Optional[str] = None


@dataclass
class OAuthTokens:
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OAuthUser:
    """Identity normalized across providers."""
    provider: str
    provider_user_id: str
    email: Optional[str]
    name: str = ""
    avatar_url: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None


class IdentityProvider(Protocol):
    name: str

    def is_configured(self) -> bool: ...

    def begin_auth(self, state: str) -> AuthRequest: ...

    def exchange(self, code: str, params: Mapping[str, str], code_verifier: Optional[str] = None) -> OAuthTokens: ...

    def fetch_user(self, tokens: OAuthTokens) -> OAuthUser: ...


def oauth_session(
    client_id: str,
    redirect_uri: Optional[str] = None,
    scope: Optional[Sequence[str]] = None,
    access_token: Optional[str] = None,
) -> OAuth2Session:
    """Authorization-code session; with ``access_token`` it signs requests with a bearer header."""
    token = {"access_token": access_token, "token_type": "Bearer"} if access_token else None
    return OAuth2Session(
        client=WebApplicationClient(client_id),
        redirect_uri=redirect_uri,
        scope=list(scope) if scope else None,
        token=token,
    )


def fetch_token(
    session: OAuth2Session,
    token_url: str,
    code: str,
    client_secret: Optional[str] = None,
    **extra: str,
) -> OAuthTokens:
    """Trade an authorization code for tokens. ``extra`` goes into the request body."""
    try:
        token = session.fetch_token(
            token_url,
            code=code,
            include_client_id=True,
            client_secret=client_secret or None,
            timeout=REQUEST_TIMEOUT,
            **extra,
        )
    except (OAuth2Error, requests.RequestException, ValueError) as e:
        raise OAuthError(f"token request failed: {e}") from e

    expires_at = token.get("expires_at")
    return OAuthTokens(
        access_token=token["access_token"],
        refresh_token=token.get("refresh_token"),
        expires_at=datetime.fromtimestamp(expires_at, timezone.utc) if expires_at else None,
        extra={k: v for k, v in token.items() if k not in TOKEN_FIELDS},
    )


def get_json(session: OAuth2Session, url: str, params: Optional[Dict[str, str]] = None) -> Any:
    """GET a JSON resource on behalf of the session's token."""
    try:
        response = session.get(url, params=params, headers={"Accept": "application/json"}, timeout=REQUEST_TIMEOUT)
    except (OAuth2Error, requests.RequestException) as e:
        raise OAuthError(f"user info request failed: {e}") from e

    if response.status_code != 200:
        raise OAuthError(f"user info endpoint responded with {response.status_code}")

    try:
        return response.json()
    except ValueError as e:
        raise OAuthError("user info endpoint returned invalid JSON") from e
