"""
Login sessions keyed by an opaque random token.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from ..models.user import UserSession


class SessionRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: int, token: str, expires_at: datetime) -> UserSession:
        session = UserSession(user_id=user_id, token=token, expires_at=expires_at)
        self.db.add(session)
        self.db.flush()
        return session

    def get_valid(self, token: str) -> Optional[UserSession]:
        """Session for ``token`` if it has not expired yet."""
        return (
            self.db.query(UserSession)
            .filter(
                UserSession.token == token,
                UserSession.expires_at > datetime.now(timezone.utc),
            )
            .first()
        )

    def delete(self, token: str) -> int:
        return self.db.query(UserSession).filter(UserSession.token == token).delete(synchronize_session=False)

    def delete_expired(self) -> int:
        return (
            self.db.query(UserSession)
            .filter(UserSession.expires_at < datetime.now(timezone.utc))
            .delete(synchronize_session=False)
        )
