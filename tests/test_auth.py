"""
Tests for OAuth login, sessions and logout.
"""
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import pytest

from blogapi.config import get_settings
from blogapi.main import app
from blogapi.models.user import OAuthProvider, User, UserSession
from blogapi.oauth import AuthRequest, OAuthError, OAuthTokens, OAuthUser
from blogapi.services import AuthService


class FakeProvider:
    """Identity provider that hands out a fixed user without any network calls."""

    name = "fake"

    def __init__(self, user_id="fake-42", email="visitor@example.com", fail=False):
        self.user_id = user_id
        self.email = email
        self.fail = fail
        self.exchanged = []

    def is_configured(self):
        return True

    def begin_auth(self, state):
        return AuthRequest(url=f"https://idp.example.com/authorize?state={state}", code_verifier="verifier-123")

    def exchange(self, code, params, code_verifier=None):
        if self.fail:
            raise OAuthError("denied")
        self.exchanged.append((code, code_verifier))
        return OAuthTokens(access_token="access-" + code)

    def fetch_user(self, tokens):
        return OAuthUser(
            provider=self.name,
            provider_user_id=self.user_id,
            email=self.email,
            name="Visitor",
            avatar_url="https://idp.example.com/avatar.png",
            access_token=tokens.access_token,
        )


@pytest.fixture
def provider(client):
    fake = FakeProvider()
    app.state.oauth_providers = {"fake": fake}
    return fake


def start_login(client):
    response = client.get("/auth/fake", follow_redirects=False)
    assert response.status_code == 307
    return parse_qs(urlparse(response.headers["location"]).query)["state"][0]


def finish_login(client, state, code="abc"):
    return client.get(f"/auth/fake/callback?code={code}&state={state}", follow_redirects=False)


class TestOAuthFlow:
    """Test the redirect and callback round trip."""

    def test_login_me_logout(self, client, provider, db):
        state = start_login(client)
        callback = finish_login(client, state)

        assert callback.status_code == 302
        assert callback.headers["location"] == f"{get_settings().oauth_frontend_url}/blog"
        cookie_name = get_settings().cookie_name
        assert cookie_name in client.cookies
        assert provider.exchanged == [("abc", "verifier-123")]

        me = client.get("/auth/me")
        assert me.status_code == 200
        user = db.query(User).filter(User.email == "visitor@example.com").first()
        assert me.json()["data"]["id"] == user.id
        assert me.json()["data"]["role"] == "user"

        token = client.cookies[cookie_name]
        logout = client.post("/auth/logout")
        assert logout.status_code == 200
        assert db.query(UserSession).filter(UserSession.token == token).count() == 0

        assert client.get("/auth/me").status_code == 401
        replayed = client.get("/auth/me", headers={"Cookie": f"{cookie_name}={token}"})
        assert replayed.status_code == 401
        assert replayed.json()["error"]["message"] == "invalid or expired session"

    def test_second_login_reuses_user_and_link(self, client, provider, db):
        finish_login(client, start_login(client))
        client.cookies.clear()
        finish_login(client, start_login(client), code="second")

        assert db.query(User).count() == 1
        link = db.query(OAuthProvider).one()
        assert link.access_token == "access-second"

    def test_state_mismatch_rejected(self, client, provider):
        start_login(client)
        response = finish_login(client, "forged-state")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_callback_without_state_cookie(self, client, provider):
        response = finish_login(client, "anything")
        assert response.status_code == 401

    def test_provider_failure(self, client, provider):
        provider.fail = True
        response = finish_login(client, start_login(client))
        assert response.status_code == 401

    def test_missing_email_rejected(self, client, provider, db):
        provider.email = None
        response = finish_login(client, start_login(client))
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert db.query(User).count() == 0

    def test_unknown_provider(self, client):
        response = client.get("/auth/myspace", follow_redirects=False)
        assert response.status_code == 400

    def test_me_requires_auth(self, client):
        response = client.get("/auth/me")
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "authentication required"


class TestAuthService:
    """Test user resolution and session lifecycle."""

    def test_links_existing_user_by_email(self, db, test_user):
        user, session = AuthService(db).login_with_oauth(
            OAuthUser(provider="github", provider_user_id="gh-1", email=test_user.email, name="Reader")
        )
        assert user.id == test_user.id
        assert session.token and len(session.token) == 64
        assert db.query(OAuthProvider).filter(OAuthProvider.user_id == test_user.id).count() == 1

    def test_provider_identity_wins_over_email(self, db, test_user, other_user):
        service = AuthService(db)
        service.login_with_oauth(OAuthUser(provider="google", provider_user_id="g-1", email=test_user.email))

        user, _ = service.login_with_oauth(
            OAuthUser(provider="google", provider_user_id="g-1", email=other_user.email)
        )
        assert user.id == test_user.id

    def test_concurrent_first_login_reuses_winning_user(self, db, test_user, monkeypatch):
        """Test a sign-in that loses the insert race ends up on the other request's user."""
        user_id, email = test_user.id, test_user.email
        service = AuthService(db)
        lookup = service.users.get_by_email
        missed = []

        def not_yet_committed(address):
            if not missed:
                missed.append(address)
                return None
            return lookup(address)

        monkeypatch.setattr(service.users, "get_by_email", not_yet_committed)

        user, session = service.login_with_oauth(
            OAuthUser(provider="google", provider_user_id="g-race", email=email, name="Racer")
        )

        assert missed == [email]
        assert user.id == user_id
        assert session.user_id == user_id
        assert db.query(User).filter(User.email == email).count() == 1
        assert db.query(OAuthProvider).filter(OAuthProvider.provider_user_id == "g-race").count() == 1

    def test_admin_emails_get_admin_role(self, db, monkeypatch):
        settings = get_settings()
        monkeypatch.setattr(settings, "admin_emails", ["Owner@Example.com"])

        user, _ = AuthService(db, settings).login_with_oauth(
            OAuthUser(provider="vk", provider_user_id="1", email="owner@example.com", name="Owner")
        )
        assert user.is_admin

    def test_expired_session_is_invalid(self, db, test_user):
        service = AuthService(db)
        session = service.create_session(test_user.id)
        assert service.validate_session(session.token).id == test_user.id

        session.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        db.commit()
        assert service.validate_session(session.token) is None

    def test_cleanup_removes_only_expired(self, db, test_user):
        service = AuthService(db)
        live = service.create_session(test_user.id)
        expired = service.create_session(test_user.id)
        expired.expires_at = datetime.now(timezone.utc) - timedelta(hours=1)
        db.commit()

        assert service.cleanup_expired_sessions() == 1
        tokens = [s.token for s in db.query(UserSession).all()]
        assert tokens == [live.token]
