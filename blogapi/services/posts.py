"""
Post authoring, publishing and listing.
"""
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import transaction
from ..errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailedError
from ..logging_config import api_logger
from ..models.post import Post
from ..models.user import User, ROLE_ADMIN
from ..repositories import LikeRepository, PostRepository
from ..schemas.posts import PostCreate, PostResponse, PostUpdate
from ..utils import estimate_markdown, slugify
from .profile import ProfileService

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class PostService:
    def __init__(self, db: Session, profile: Optional[ProfileService] = None):
        self.db = db
        self.profile = profile
        self.posts = PostRepository(db)
        self.likes = LikeRepository(db)

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def get_post_by_slug(self, slug: str, viewer: Optional[User] = None) -> PostResponse:
        return self.present(self._visible(self.posts.get_by_slug(slug), viewer), viewer)

    def list_posts(
        self,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        published: Optional[bool] = None,
        viewer: Optional[User] = None,
    ) -> Tuple[List[PostResponse], int, int, int]:
        """Page of posts plus (total, page, limit). Only admins can list drafts."""
        page = max(page, 1)
        if limit < 1:
            limit = DEFAULT_PAGE_SIZE
        limit = min(limit, MAX_PAGE_SIZE)

        if viewer is None or not viewer.is_admin:
            published = True

        posts, total = self.posts.list_page((page - 1) * limit, limit, published)

        liked = set()
        if viewer is not None:
            liked = self.likes.liked_post_ids(viewer.id, [p.id for p in posts])

        admin_photo = self._admin_photo()
        items = [self._to_response(p, p.id in liked, admin_photo) for p in posts]
        return items, total, page, limit

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------

    def create_post(self, data: PostCreate, author: User) -> PostResponse:
        slug = self._available_slug(data.title)
        now = datetime.now(timezone.utc)

        try:
            with transaction(self.db):
                post = self.posts.create(
                    title=data.title,
                    slug=slug,
                    content=data.content,
                    preview=data.preview,
                    cover_image=data.cover_image,
                    read_time_minutes=estimate_markdown(data.content),
                    author_id=author.id,
                    published=data.published,
                    published_at=now if data.published else None,
                )
        except IntegrityError as e:
            raise ConflictError(f"post with slug '{slug}' already exists") from e

        api_logger.info("Post created", post_id=post.id, slug=slug, author_id=author.id)
        return self.present(post, author)

    def update_post(self, post_id: int, data: PostUpdate, user: User) -> PostResponse:
        post = self._owned(post_id, user)
        slug = self._available_slug(data.title, exclude_id=post.id)

        published_at = post.published_at
        if data.published and published_at is None:
            published_at = datetime.now(timezone.utc)

        try:
            with transaction(self.db):
                self.posts.update(
                    post,
                    title=data.title,
                    slug=slug,
                    content=data.content,
                    preview=data.preview,
                    cover_image=data.cover_image,
                    read_time_minutes=estimate_markdown(data.content),
                    published=data.published,
                    published_at=published_at,
                )
        except IntegrityError as e:
            raise ConflictError(f"post with slug '{slug}' already exists") from e

        api_logger.info("Post updated", post_id=post.id, user_id=user.id)
        return self.present(post, user)

    def delete_post(self, post_id: int, user: User) -> None:
        post = self._owned(post_id, user)
        with transaction(self.db):
            self.posts.delete(post)
        api_logger.info("Post deleted", post_id=post_id, user_id=user.id)

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def present(self, post: Post, viewer: Optional[User] = None) -> PostResponse:
        is_liked = viewer is not None and self.likes.is_post_liked(viewer.id, post.id)
        return self._to_response(post, is_liked, self._admin_photo())

    def _to_response(self, post: Post, is_liked: bool, admin_photo: Optional[str]) -> PostResponse:
        response = PostResponse.model_validate(post)
        response.is_liked = is_liked
        if response.author is not None and response.author.role == ROLE_ADMIN and admin_photo:
            response.author.avatar_url = admin_photo
        return response

    def _admin_photo(self) -> Optional[str]:
        return self.profile.get_photo_url() if self.profile is not None else None

    def _visible(self, post: Optional[Post], viewer: Optional[User]) -> Post:
        if post is None or (not post.published and not (viewer is not None and viewer.is_admin)):
            raise NotFoundError("post")
        return post

    def _owned(self, post_id: int, user: User) -> Post:
        post = self.posts.get_by_id(post_id)
        if post is None:
            raise NotFoundError("post")
        if post.author_id != user.id and not user.is_admin:
            raise PermissionDeniedError("you can only modify your own posts")
        return post

    def _available_slug(self, title: str, exclude_id: Optional[int] = None) -> str:
        slug = slugify(title)
        if not slug:
            raise ValidationFailedError(
                "title must contain letters or digits",
                {"title": "produces an empty slug"},
            )
        if self.posts.slug_exists(slug, exclude_id=exclude_id):
            raise ConflictError(f"post with slug '{slug}' already exists")
        return slug
