"""
OAuth login, session lifecycle and expired-session cleanup.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import transaction
from ..errors import ValidationFailedError
from ..logging_config import auth_logger
from ..models.user import User, UserSession, ROLE_ADMIN, ROLE_USER
from ..oauth.base import OAuthUser
from ..repositories import SessionRepository, UserRepository


def generate_session_token() -> str:
    """32 random bytes, hex encoded."""
    return secrets.token_hex(32)


class AuthService:
    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.users = UserRepository(db)
        self.sessions = SessionRepository(db)

    def login_with_oauth(self, oauth_user: OAuthUser) -> Tuple[User, UserSession]:
        """
        Resolve the local user for a provider identity and open a session.

        Lookup goes by linked identity first, then by email; a new account is
        created only when neither matches, which requires an email. The user
        and provider link are written in one transaction. When a concurrent
        sign-in wins the race to insert the same user or link, the lookup is
        repeated once and finds that row.
        """
        try:
            user = self._resolve_user(oauth_user)
        except IntegrityError as e:
            auth_logger.warning(
                "Concurrent sign-in for the same identity, retrying lookup",
                provider=oauth_user.provider,
                error_message=str(e.orig),
            )
            user = self._resolve_user(oauth_user)

        session = self.create_session(user.id)
        auth_logger.info("User logged in", user_id=user.id, provider=oauth_user.provider)
        return user, session

    def _resolve_user(self, oauth_user: OAuthUser) -> User:
        with transaction(self.db):
            user = self.users.get_by_provider(oauth_user.provider, oauth_user.provider_user_id)
            if user is None and oauth_user.email:
                user = self.users.get_by_email(oauth_user.email)

            if user is None:
                if not oauth_user.email:
                    raise ValidationFailedError(
                        "email permission is required to sign in",
                        {"email": "not provided by " + oauth_user.provider},
                    )
                user = self.users.create(
                    email=oauth_user.email,
                    name=oauth_user.name,
                    avatar_url=oauth_user.avatar_url,
                    role=self._role_for(oauth_user.email),
                )
                auth_logger.info("User created", user_id=user.id, provider=oauth_user.provider)
            else:
                if not user.name and oauth_user.name:
                    user.name = oauth_user.name
                if not user.avatar_url and oauth_user.avatar_url:
                    user.avatar_url = oauth_user.avatar_url

            self.users.upsert_provider(
                user_id=user.id,
                provider=oauth_user.provider,
                provider_user_id=oauth_user.provider_user_id,
                access_token=oauth_user.access_token,
                refresh_token=oauth_user.refresh_token,
                expires_at=oauth_user.expires_at,
            )
        return user

    def create_session(self, user_id: int) -> UserSession:
        expires_at = datetime.now(timezone.utc) + timedelta(hours=self.settings.session_max_age_hours)
        with transaction(self.db):
            return self.sessions.create(user_id, generate_session_token(), expires_at)

    def validate_session(self, token: str) -> Optional[User]:
        """The user behind an unexpired session token."""
        if not token:
            return None
        session = self.sessions.get_valid(token)
        if session is None:
            return None
        return self.users.get_by_id(session.user_id)

    def logout(self, token: str) -> None:
        with transaction(self.db):
            self.sessions.delete(token)

    def cleanup_expired_sessions(self) -> int:
        with transaction(self.db):
            return self.sessions.delete_expired()

    def _role_for(self, email: str) -> str:
        admins = {e.lower() for e in self.settings.admin_emails}
        return ROLE_ADMIN if email.lower() in admins else ROLE_USER
