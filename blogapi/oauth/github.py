"""
GitHub OAuth (authorization code flow).
"""
from typing import Mapping, Optional

from requests_oauthlib import OAuth2Session

from .base import AuthRequest, OAuthError, OAuthTokens, OAuthUser, fetch_token, get_json, oauth_session

AUTH_URL = "https://github.com/login/oauth/authorize"
TOKEN_URL = "https://github.com/login/oauth/access_token"
USER_URL = "https://api.github.com/user"
EMAILS_URL = "https://api.github.com/user/emails"
SCOPES = ["user:email"]


class GitHubProvider:
    name = "github"

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
        session = oauth_session(self.client_id, access_token=tokens.access_token)
        data = get_json(session, USER_URL)
        if not data.get("id"):
            raise OAuthError("github user has no id")

        email = data.get("email")
        if not email:
            # Private emails are only listed by the emails endpoint
            email = self._primary_email(session)

        return OAuthUser(
            provider=self.name,
            provider_user_id=str(data["id"]),
            email=email,
            name=data.get("name") or data.get("login") or "",
            avatar_url=data.get("avatar_url"),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=tokens.expires_at,
        )

    def _primary_email(self, session: OAuth2Session) -> Optional[str]:
        emails = get_json(session, EMAILS_URL)
        verified = [e for e in emails if e.get("verified")]
        for entry in verified:
            if entry.get("primary"):
                return entry.get("email")
        return verified[0].get("email") if verified else None
