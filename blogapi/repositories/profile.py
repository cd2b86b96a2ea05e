"""
The profile table holds a single row; the first one wins.
"""
from typing import Optional

from sqlalchemy.orm import Session

from ..models.profile import ProfileInfo


class ProfileRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self) -> Optional[ProfileInfo]:
        return self.db.query(ProfileInfo).order_by(ProfileInfo.id.asc()).first()

    def save(self, **fields) -> ProfileInfo:
        """Update the profile row, creating it if the table is empty."""
        profile = self.get()
        if profile is None:
            profile = ProfileInfo(**fields)
            self.db.add(profile)
        else:
            for key, value in fields.items():
                setattr(profile, key, value)
        self.db.flush()
        return profile
