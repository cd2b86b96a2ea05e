"""
VK ID (OAuth 2.1 with PKCE).

The token request must carry the PKCE verifier and the ``device_id`` VK
appends to the callback. The email may arrive with the token response
instead of the user info.
"""
from typing import Mapping, Optional

from oauthlib.oauth2 import WebApplicationClient

from ..logging_config import auth_logger
from .base import AuthRequest, OAuthError, OAuthTokens, OAuthUser, fetch_token, get_json, oauth_session

AUTH_URL = "https://id.vk.ru/authorize"
TOKEN_URL = "https://id.vk.com/oauth2/auth"
USER_INFO_URL = "https://id.vk.ru/oauth2/user_info"
SCOPES = ["email", "vkid.personal_info"]
CODE_VERIFIER_LENGTH = 43


def generate_code_verifier() -> str:
    return WebApplicationClient(None).create_code_verifier(CODE_VERIFIER_LENGTH)


def generate_code_challenge(verifier: str) -> str:
    return WebApplicationClient(None).create_code_challenge(verifier, "S256")


class VKIDProvider:
    name = "vk"

    def __init__(self, client_id: str, client_secret: str, callback_url: str):
        self.client_id = client_id
        self.client_secret = client_secret
        self.callback_url = callback_url

    def is_configured(self) -> bool:
        return bool(self.client_id)

    def begin_auth(self, state: str) -> AuthRequest:
        verifier = generate_code_verifier()
        session = oauth_session(self.client_id, self.callback_url, SCOPES)
        url, _ = session.authorization_url(
            AUTH_URL,
            state=state,
            code_challenge=generate_code_challenge(verifier),
            code_challenge_method="S256",
        )
        return AuthRequest(url=url, code_verifier=verifier)

    def exchange(self, code: str, params: Mapping[str, str], code_verifier: Optional[str] = None) -> OAuthTokens:
        if not code_verifier:
            raise OAuthError("vk: missing PKCE code verifier")

        device_id = params.get("device_id", "")
        if not device_id:
            auth_logger.warning("vk: no device_id in callback parameters")

        session = oauth_session(self.client_id, self.callback_url)
        return fetch_token(
            session,
            TOKEN_URL,
            code,
            client_secret=self.client_secret,
            code_verifier=code_verifier,
            device_id=device_id,
        )

    def fetch_user(self, tokens: OAuthTokens) -> OAuthUser:
        session = oauth_session(self.client_id, access_token=tokens.access_token)
        data = get_json(session, USER_INFO_URL, params={"client_id": self.client_id})
        user = data.get("user") or {}
        if not user.get("user_id"):
            raise OAuthError("vk user info has no user_id")

        name = f"{user.get('first_name', '')} {user.get('last_name', '')}".strip()
        email = user.get("email") or tokens.extra.get("email")

        return OAuthUser(
            provider=self.name,
            provider_user_id=str(user["user_id"]),
            email=email or None,
            name=name,
            avatar_url=user.get("avatar") or user.get("picture") or None,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=tokens.expires_at,
        )
