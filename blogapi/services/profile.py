"""
Singleton profile with an in-process read cache.
"""
import os
import threading
import time
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..database import transaction
from ..errors import NotFoundError
from ..logging_config import api_logger
from ..repositories import ProfileRepository
from ..schemas.profile import ProfileResponse, ProfileUpdate

LOCAL_UPLOAD_PREFIX = "/uploads/"


class ProfileCache:
    """Holds the last loaded profile for ``ttl_seconds``. Safe to share across threads."""

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._value: Optional[ProfileResponse] = None
        self._expires_at = 0.0

    def get(self) -> Optional[ProfileResponse]:
        with self._lock:
            if self._value is None or self._clock() >= self._expires_at:
                return None
            return self._value.model_copy(deep=True)

    def set(self, value: ProfileResponse) -> None:
        with self._lock:
            self._value = value.model_copy(deep=True)
            self._expires_at = self._clock() + self.ttl_seconds

    def invalidate(self) -> None:
        with self._lock:
            self._value = None
            self._expires_at = 0.0


class ProfileService:
    def __init__(self, db: Session, cache: ProfileCache, upload_path: str):
        self.db = db
        self.cache = cache
        self.upload_path = upload_path
        self.profiles = ProfileRepository(db)

    def get_profile(self) -> ProfileResponse:
        cached = self.cache.get()
        if cached is not None:
            return cached

        profile = self.profiles.get()
        if profile is None:
            raise NotFoundError("profile")

        response = ProfileResponse.model_validate(profile)
        self.cache.set(response)
        return response

    def get_photo_url(self) -> Optional[str]:
        try:
            return self.get_profile().photo_url or None
        except NotFoundError:
            return None

    def update_profile(self, data: ProfileUpdate) -> ProfileResponse:
        existing = self.profiles.get()
        old_photo = existing.photo_url if existing is not None else None

        with transaction(self.db):
            profile = self.profiles.save(
                name=data.name,
                description=data.description,
                photo_url=data.photo_url,
                activity=data.activity,
                contacts=data.contacts.model_dump(mode="json"),
            )

        response = ProfileResponse.model_validate(profile)
        self.cache.set(response)

        if old_photo and old_photo != data.photo_url:
            self._remove_local_photo(old_photo)

        api_logger.info("Profile updated", profile_id=response.id)
        return response

    def _remove_local_photo(self, photo_url: str) -> None:
        """Delete a replaced photo if it lives in the upload directory."""
        if not photo_url.startswith(LOCAL_UPLOAD_PREFIX):
            return

        path = os.path.join(self.upload_path, os.path.basename(photo_url))
        try:
            os.remove(path)
            api_logger.info("Removed old profile photo", path=path)
        except FileNotFoundError:
            pass
        except OSError as e:
            api_logger.warning("Failed to remove old profile photo", path=path, error_message=str(e))
