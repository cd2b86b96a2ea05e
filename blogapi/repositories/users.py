"""
Users and their linked OAuth identities.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from ..models.user import User, OAuthProvider, ROLE_USER


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_by_provider(self, provider: str, provider_user_id: str) -> Optional[User]:
        return (
            self.db.query(User)
            .join(OAuthProvider, OAuthProvider.user_id == User.id)
            .filter(
                OAuthProvider.provider == provider,
                OAuthProvider.provider_user_id == provider_user_id,
            )
            .first()
        )

    def create(self, email: str, name: str, avatar_url: Optional[str] = None, role: str = ROLE_USER) -> User:
        user = User(email=email, name=name or "", avatar_url=avatar_url, role=role)
        self.db.add(user)
        self.db.flush()
        return user

    def set_role(self, user: User, role: str) -> User:
        user.role = role
        self.db.flush()
        return user

    def upsert_provider(
        self,
        user_id: int,
        provider: str,
        provider_user_id: str,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> OAuthProvider:
        """Link an OAuth identity to a user, refreshing stored tokens when the link exists."""
        link = (
            self.db.query(OAuthProvider)
            .filter(
                OAuthProvider.provider == provider,
                OAuthProvider.provider_user_id == provider_user_id,
            )
            .first()
        )
        if link is None:
            link = OAuthProvider(
                user_id=user_id,
                provider=provider,
                provider_user_id=provider_user_id,
            )
            self.db.add(link)

        link.access_token = access_token
        link.refresh_token = refresh_token
        link.expires_at = expires_at
        link.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return link
