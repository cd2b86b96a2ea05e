"""
FastAPI providers for the service objects.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .config import get_settings
from .database import get_db
from .services import (
    AuthService,
    CommentService,
    LikeService,
    MediaService,
    PostService,
    ProfileService,
)


def get_profile_service(request: Request, db: Session = Depends(get_db)) -> ProfileService:
    return ProfileService(db, request.app.state.profile_cache, get_settings().media_upload_path)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_post_service(
    db: Session = Depends(get_db),
    profile: ProfileService = Depends(get_profile_service),
) -> PostService:
    return PostService(db, profile)


def get_comment_service(
    db: Session = Depends(get_db),
    profile: ProfileService = Depends(get_profile_service),
) -> CommentService:
    return CommentService(db, profile)


def get_like_service(db: Session = Depends(get_db)) -> LikeService:
    return LikeService(db)


def get_media_service(db: Session = Depends(get_db)) -> MediaService:
    settings = get_settings()
    return MediaService(
        db,
        upload_path=settings.media_upload_path,
        base_url=settings.media_base_url,
        max_size=settings.max_upload_size,
    )
