"""
Google OAuth 2.0 (authorization code flow).
"""
from typing import Mapping, Optional

from .base import AuthRequest, OAuthError, OAuthTokens, OAuthUser, fetch_token, get_json, oauth_session

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USER_INFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
SCOPES = ["email", "profile"]


class GoogleProvider:
    name = "google"

    def __init__(self, client_id: str, client_secret: str, callback_url: str):
        self.client_id = client_id
        self.client_secret = client_secret
        self.callback_url = callback_url

    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def begin_auth(self, state: str) -> AuthRequest:
        session = oauth_session(self.client_id, self.callback_url, SCOPES)
        url, _ = session.authorization_url(AUTH_URL, state=state)
        return AuthRequest(url=url)

    def exchange(self, code: str, params: Mapping[str, str], code_verifier: Optional[str] = None) -> OAuthTokens:
        session = oauth_session(self.client_id, self.callback_url)
        return fetch_token(session, TOKEN_URL, code, client_secret=self.client_secret)

    def fetch_user(self, tokens: OAuthTokens) -> OAuthUser:
        data = get_json(oauth_session(self.client_id, access_token=tokens.access_token), USER_INFO_URL)
        if not data.get("id"):
            raise OAuthError("google user info has no id")

        return OAuthUser(
            provider=self.name,
            provider_user_id=str(data["id"]),
            email=data.get("email"),
            name=data.get("name") or "",
            avatar_url=data.get("picture"),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=tokens.expires_at,
        )
