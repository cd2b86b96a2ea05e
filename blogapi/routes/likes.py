"""
Like toggle and count routes.
"""
from fastapi import APIRouter, Depends

from ..auth import get_required_user
from ..dependencies import get_like_service
from ..models.user import User
from ..responses import success
from ..schemas.likes import LikesCountResponse
from ..services import LikeService

router = APIRouter(prefix="/api/v1", tags=["likes"])


@router.post("/posts/{post_id}/like")
def toggle_post_like(
    post_id: int,
    current_user: User = Depends(get_required_user),
    like_service: LikeService = Depends(get_like_service),
):
    return success(like_service.toggle_post_like(post_id, current_user))


@router.post("/comments/{comment_id}/like")
def toggle_comment_like(
    comment_id: int,
    current_user: User = Depends(get_required_user),
    like_service: LikeService = Depends(get_like_service),
):
    return success(like_service.toggle_comment_like(comment_id, current_user))


@router.get("/posts/{post_id}/likes")
def get_post_likes(post_id: int, like_service: LikeService = Depends(get_like_service)):
    return success(LikesCountResponse(count=like_service.get_post_likes_count(post_id)))


@router.get("/comments/{comment_id}/likes")
def get_comment_likes(comment_id: int, like_service: LikeService = Depends(get_like_service)):
    return success(LikesCountResponse(count=like_service.get_comment_likes_count(comment_id)))
