"""
Post routes: public reading plus admin authoring.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth import get_admin_user, get_current_user
from ..dependencies import get_post_service
from ..models.user import User
from ..responses import created, deleted, paginated, success
from ..schemas.posts import PostCreate, PostUpdate
from ..services import PostService

router = APIRouter(prefix="/api/v1", tags=["posts"])


@router.get("/posts")
def list_posts(
    page: int = Query(1),
    limit: int = Query(10),
    published: Optional[bool] = None,
    current_user: Optional[User] = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
):
    """List posts, newest first. Drafts are only listed for admins."""
    posts, total, page, limit = post_service.list_posts(page, limit, published, current_user)
    return paginated(posts, total, page, limit)


@router.get("/posts/{slug}")
def get_post(
    slug: str,
    current_user: Optional[User] = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
):
    """Get a single post by slug."""
    return success(post_service.get_post_by_slug(slug, current_user))


@router.post("/admin/posts", status_code=201)
def create_post(
    post_data: PostCreate,
    current_user: User = Depends(get_admin_user),
    post_service: PostService = Depends(get_post_service),
):
    """Create a post. The slug is derived from the title."""
    return created(post_service.create_post(post_data, current_user))


@router.put("/admin/posts/{post_id}")
def update_post(
    post_id: int,
    post_data: PostUpdate,
    current_user: User = Depends(get_admin_user),
    post_service: PostService = Depends(get_post_service),
):
    return success(post_service.update_post(post_id, post_data, current_user), "Post updated")


@router.delete("/admin/posts/{post_id}")
def delete_post(
    post_id: int,
    current_user: User = Depends(get_admin_user),
    post_service: PostService = Depends(get_post_service),
):
    post_service.delete_post(post_id, current_user)
    return deleted("Post deleted")
