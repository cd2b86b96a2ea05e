"""
Comment thread routes.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from ..auth import get_current_user, get_required_user
from ..dependencies import get_comment_service, get_post_service
from ..models.user import User
from ..responses import created, deleted, success
from ..schemas.comments import CommentCreate, CommentResponse, CommentUpdate
from ..services import CommentService, PostService

router = APIRouter(prefix="/api/v1", tags=["comments"])


@router.get("/posts/{slug}/comments")
def get_comments(
    slug: str,
    current_user: Optional[User] = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
    comment_service: CommentService = Depends(get_comment_service),
):
    """Get the comment tree of a post, oldest first."""
    post = post_service.get_post_by_slug(slug, current_user)
    comments = comment_service.get_comments(post.id, current_user)
    return success([CommentResponse.model_validate(c) for c in comments])


@router.post("/posts/{slug}/comments", status_code=201)
def create_comment(
    slug: str,
    comment_data: CommentCreate,
    current_user: User = Depends(get_required_user),
    post_service: PostService = Depends(get_post_service),
    comment_service: CommentService = Depends(get_comment_service),
):
    """Comment on a post, or reply to a comment with ``parent_id``."""
    post = post_service.get_post_by_slug(slug, current_user)
    comment = comment_service.create_comment(post.id, comment_data, current_user)
    return created(CommentResponse.model_validate(comment))


@router.put("/comments/{comment_id}")
def update_comment(
    comment_id: int,
    comment_data: CommentUpdate,
    current_user: User = Depends(get_required_user),
    comment_service: CommentService = Depends(get_comment_service),
):
    """Edit a comment. Only its author may do this."""
    comment = comment_service.update_comment(comment_id, comment_data, current_user)
    return success(CommentResponse.model_validate(comment), "Comment updated")


@router.delete("/comments/{comment_id}")
def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_required_user),
    comment_service: CommentService = Depends(get_comment_service),
):
    comment_service.delete_comment(comment_id, current_user)
    return deleted("Comment deleted")
