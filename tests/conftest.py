"""
Pytest configuration and fixtures for the blog API tests.
"""
import os
import tempfile

# Settings are read once at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("MEDIA_UPLOAD_PATH", tempfile.mkdtemp(prefix="blog-uploads-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from blogapi.config import get_settings
from blogapi.database import Base, get_db
from blogapi.limiter import limiter
from blogapi.main import app
from blogapi.models.user import User, ROLE_ADMIN
from blogapi.schemas.posts import PostCreate
from blogapi.services import AuthService, PostService, ProfileCache

# Disable per-route rate limiting for tests
limiter.enabled = False

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Global session for sharing across requests
_test_session = None


def get_test_db():
    """Get the shared test database session."""
    yield _test_session


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    global _test_session

    Base.metadata.create_all(bind=engine)
    _test_session = TestingSessionLocal()
    app.dependency_overrides[get_db] = get_test_db

    yield _test_session

    app.dependency_overrides.clear()
    _test_session.close()
    _test_session = None
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with fresh in-process state."""
    app.state.rate_limiter = None
    app.state.profile_cache = ProfileCache(get_settings().profile_cache_ttl_seconds)
    app.state.oauth_providers = {}
    with TestClient(app) as c:
        yield c


def make_user(db, email, name, role="user"):
    user = User(email=email, name=name, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def session_headers(db, user):
    """Cookie header carrying a fresh session for ``user``."""
    token = AuthService(db).create_session(user.id).token
    return {"Cookie": f"{get_settings().cookie_name}={token}"}


@pytest.fixture(scope="function")
def test_user(db):
    return make_user(db, "reader@example.com", "Reader")


@pytest.fixture(scope="function")
def other_user(db):
    return make_user(db, "other@example.com", "Other Reader")


@pytest.fixture(scope="function")
def admin_user(db):
    return make_user(db, "author@example.com", "Blog Author", role=ROLE_ADMIN)


@pytest.fixture(scope="function")
def auth_headers(db, test_user):
    return session_headers(db, test_user)


@pytest.fixture(scope="function")
def other_headers(db, other_user):
    return session_headers(db, other_user)


@pytest.fixture(scope="function")
def admin_headers(db, admin_user):
    return session_headers(db, admin_user)


@pytest.fixture(scope="function")
def published_post(db, admin_user):
    """A published post written by the admin."""
    return PostService(db).create_post(
        PostCreate(
            title="Hello World",
            content="The first post on this blog, with enough words.",
            preview="First post",
            published=True,
        ),
        admin_user,
    )


@pytest.fixture(scope="function")
def editor_headers(db):
    """Session for a second admin who did not write any posts."""
    return session_headers(db, make_user(db, "editor@example.com", "Editor", role=ROLE_ADMIN))
