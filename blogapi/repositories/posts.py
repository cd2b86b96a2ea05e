"""
Post queries and denormalized counters.
"""
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from ..models.post import Post


class PostRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields) -> Post:
        post = Post(**fields)
        self.db.add(post)
        self.db.flush()
        return post

    def get_by_id(self, post_id: int) -> Optional[Post]:
        return (
            self.db.query(Post)
            .options(joinedload(Post.author))
            .filter(Post.id == post_id)
            .first()
        )

    def get_by_slug(self, slug: str) -> Optional[Post]:
        return (
            self.db.query(Post)
            .options(joinedload(Post.author))
            .filter(Post.slug == slug)
            .first()
        )

    def slug_exists(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Post.id).filter(Post.slug == slug)
        if exclude_id is not None:
            query = query.filter(Post.id != exclude_id)
        return query.first() is not None

    def list_page(self, offset: int, limit: int, published: Optional[bool] = None) -> Tuple[List[Post], int]:
        """Page of posts, newest publication first; drafts (no published_at) sort last."""
        query = self.db.query(Post)
        if published is not None:
            query = query.filter(Post.published == published)

        total = query.count()
        posts = (
            query.options(joinedload(Post.author))
            .order_by(Post.published_at.desc().nullslast(), Post.created_at.desc(), Post.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return posts, total

    def update(self, post: Post, **fields) -> Post:
        for key, value in fields.items():
            setattr(post, key, value)
        self.db.flush()
        return post

    def delete(self, post: Post) -> None:
        self.db.delete(post)
        self.db.flush()
