"""
Tests for the OAuth identity providers and the state cookie.
"""
import base64
import hashlib
import json
from types import SimpleNamespace
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from blogapi.config import get_settings
from blogapi.oauth import OAuthError, OAuthTokens, build_providers
from blogapi.oauth.github import GitHubProvider
from blogapi.oauth.google import GoogleProvider
from blogapi.oauth.state import decode_state, encode_state
from blogapi.oauth.vkid import VKIDProvider, generate_code_challenge, generate_code_verifier


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.text = json.dumps(payload)
        self.headers = {"Content-Type": "application/json"}
        self.request = SimpleNamespace(url="", headers={}, body="")

    def json(self):
        return self._payload


class FakeHTTP:
    """Stands in for ``requests.Session.request``, answering by URL."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def __call__(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.routes[url.split("?")[0]]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def http(monkeypatch):
    def install(routes):
        fake = FakeHTTP(routes)
        monkeypatch.setattr(requests.Session, "request", fake)
        return fake

    return install


def query_of(url):
    return {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}


class TestPKCE:
    """Test the S256 verifier and challenge."""

    def test_verifier_shape(self):
        verifier = generate_code_verifier()
        assert len(verifier) == 43
        assert "=" not in verifier
        assert generate_code_verifier() != verifier

    def test_challenge_is_s256(self):
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        expected = base64.urlsafe_b64encode(hashlib.sha256(verifier.encode()).digest()).rstrip(b"=").decode()
        assert generate_code_challenge(verifier) == expected
        assert generate_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


class TestBeginAuth:
    """Test authorization redirect URLs."""

    def test_vk_sends_challenge_and_keeps_verifier(self):
        provider = VKIDProvider("vk-app", "", "http://localhost:8080/auth/vk/callback")
        auth = provider.begin_auth("state-1")

        query = query_of(auth.url)
        assert auth.url.startswith("https://id.vk.ru/authorize?")
        assert query["state"] == "state-1"
        assert query["code_challenge_method"] == "S256"
        assert query["code_challenge"] == generate_code_challenge(auth.code_verifier)
        assert query["redirect_uri"] == "http://localhost:8080/auth/vk/callback"

    def test_google_has_no_verifier(self):
        auth = GoogleProvider("id", "secret", "http://cb").begin_auth("s")
        assert auth.code_verifier is None
        assert query_of(auth.url)["scope"] == "email profile"


class TestBuildProviders:
    """Test the provider registry."""

    def test_only_configured_providers(self, monkeypatch):
        settings = get_settings()
        monkeypatch.setattr(settings, "oauth_base_url", "https://blog.example.com")
        for name in ("google", "github", "vk"):
            monkeypatch.setattr(settings, f"{name}_enabled", True)
        monkeypatch.setattr(settings, "google_client_id", "gid")
        monkeypatch.setattr(settings, "google_client_secret", "gsecret")
        monkeypatch.setattr(settings, "github_client_id", "ghid")
        monkeypatch.setattr(settings, "github_client_secret", "")
        monkeypatch.setattr(settings, "vk_client_id", "vkid")
        monkeypatch.setattr(settings, "vk_client_secret", "")

        providers = build_providers(settings)

        assert sorted(providers) == ["google", "vk"]
        assert providers["vk"].callback_url == "https://blog.example.com/auth/vk/callback"

    def test_disabled_provider_skipped(self, monkeypatch):
        settings = get_settings()
        monkeypatch.setattr(settings, "google_client_id", "gid")
        monkeypatch.setattr(settings, "google_client_secret", "gsecret")
        monkeypatch.setattr(settings, "google_enabled", False)
        monkeypatch.setattr(settings, "github_enabled", False)
        monkeypatch.setattr(settings, "vk_enabled", False)

        assert "google" not in build_providers(settings)


class TestTokenExchange:
    """Test token requests against stubbed endpoints."""

    def test_vk_requires_verifier(self):
        provider = VKIDProvider("vk-app", "", "http://cb")
        with pytest.raises(OAuthError):
            provider.exchange("code", {"device_id": "dev"}, None)

    def test_vk_sends_device_and_verifier(self, http):
        fake = http({
            "https://id.vk.com/oauth2/auth": FakeResponse({
                "access_token": "at", "refresh_token": "rt", "expires_in": 3600, "email": "vk@example.com",
            }),
        })
        tokens = VKIDProvider("vk-app", "", "http://cb").exchange("code", {"device_id": "dev-1"}, "verifier")

        sent = fake.calls[0][2]["data"]
        assert sent["device_id"] == "dev-1"
        assert sent["code_verifier"] == "verifier"
        assert "client_secret" not in sent
        assert tokens.access_token == "at"
        assert tokens.extra["email"] == "vk@example.com"
        assert tokens.expires_at is not None

    def test_google_sends_client_credentials_in_body(self, http):
        fake = http({
            "https://oauth2.googleapis.com/token": FakeResponse({
                "access_token": "at", "token_type": "Bearer", "expires_in": 60, "scope": "email profile",
            }),
        })
        tokens = GoogleProvider("gid", "gsecret", "https://blog/cb").exchange("the-code", {})

        method, _, kwargs = fake.calls[0]
        assert method == "POST"
        assert kwargs["data"]["client_id"] == "gid"
        assert kwargs["data"]["client_secret"] == "gsecret"
        assert kwargs["data"]["code"] == "the-code"
        assert kwargs["data"]["redirect_uri"] == "https://blog/cb"
        assert tokens.extra == {}

    def test_error_payload_raises(self, http):
        http({"https://oauth2.googleapis.com/token": FakeResponse({"error": "invalid_grant"})})
        with pytest.raises(OAuthError, match="invalid_grant"):
            GoogleProvider("id", "secret", "http://cb").exchange("bad", {})

    def test_network_failure_raises(self, http):
        http({"https://oauth2.googleapis.com/token": requests.ConnectionError("down")})
        with pytest.raises(OAuthError):
            GoogleProvider("id", "secret", "http://cb").exchange("code", {})


class TestFetchUser:
    """Test normalizing provider user info."""

    def test_vk_email_from_token_response(self, http):
        fake = http({
            "https://id.vk.ru/oauth2/user_info": FakeResponse({
                "user": {"user_id": 777, "first_name": "Ivan", "last_name": "Petrov", "avatar": "https://vk/a.jpg"},
            }),
        })
        tokens = OAuthTokens(access_token="at", extra={"email": "ivan@example.com"})
        user = VKIDProvider("vk-app", "", "http://cb").fetch_user(tokens)

        assert fake.calls[0][2]["params"] == {"client_id": "vk-app"}
        assert user.provider_user_id == "777"
        assert user.name == "Ivan Petrov"
        assert user.email == "ivan@example.com"

    def test_github_falls_back_to_primary_email(self, http):
        http({
            "https://api.github.com/user": FakeResponse({"id": 5, "login": "octo", "email": None}),
            "https://api.github.com/user/emails": FakeResponse([
                {"email": "old@example.com", "verified": True, "primary": False},
                {"email": "main@example.com", "verified": True, "primary": True},
            ]),
        })
        user = GitHubProvider("id", "secret", "http://cb").fetch_user(OAuthTokens(access_token="at"))

        assert user.email == "main@example.com"
        assert user.name == "octo"

    def test_google_sends_bearer_token(self, http):
        fake = http({
            "https://www.googleapis.com/oauth2/v2/userinfo": FakeResponse({
                "id": "g-1", "email": "g@example.com", "name": "G", "picture": "https://g/p.png",
            }),
        })
        user = GoogleProvider("id", "secret", "http://cb").fetch_user(OAuthTokens(access_token="at"))

        method, _, kwargs = fake.calls[0]
        assert method == "GET"
        assert kwargs["headers"]["Authorization"] == "Bearer at"
        assert user.provider_user_id == "g-1"
        assert user.avatar_url == "https://g/p.png"

    def test_user_info_error_status(self, http):
        http({"https://www.googleapis.com/oauth2/v2/userinfo": FakeResponse({}, status_code=401)})
        with pytest.raises(OAuthError):
            GoogleProvider("id", "secret", "http://cb").fetch_user(OAuthTokens(access_token="expired"))


class TestStateCookie:
    """Test the signed state cookie."""

    def test_round_trip(self):
        settings = get_settings()
        token = encode_state(settings, "vk", "abc", "verifier")
        payload = decode_state(settings, token)
        assert payload["provider"] == "vk"
        assert payload["state"] == "abc"
        assert payload["code_verifier"] == "verifier"

    def test_foreign_signature_rejected(self):
        settings = get_settings()
        token = encode_state(settings.model_copy(update={"session_secret": "someone-else"}), "google", "abc")
        assert decode_state(settings, token) is None
        assert decode_state(settings, "") is None
