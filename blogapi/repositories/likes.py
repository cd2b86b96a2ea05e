"""
Like toggles for posts and comments.
"""
from typing import Iterable, Set

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.comment import Comment
from ..models.like import PostLike, CommentLike
from ..models.post import Post
from .counters import bump_counter


class LikeRepository:
    def __init__(self, db: Session):
        self.db = db

    def _toggle(self, like_model, target_model, target_column, user_id: int, target_id: int) -> bool:
        """Delete the like row if present, insert it otherwise. Returns the new liked state."""
        existing = (
            self.db.query(like_model)
            .filter(like_model.user_id == user_id, target_column == target_id)
            .first()
        )
        if existing is not None:
            self.db.delete(existing)
            self.db.flush()
            bump_counter(self.db, target_model, target_id, target_model.likes_count, -1)
            return False

        # A concurrent insert of the same pair fails on the composite key
        self.db.add(like_model(user_id=user_id, **{target_column.key: target_id}))
        self.db.flush()
        bump_counter(self.db, target_model, target_id, target_model.likes_count, 1)
        return True

    def toggle_post_like(self, user_id: int, post_id: int) -> bool:
        return self._toggle(PostLike, Post, PostLike.post_id, user_id, post_id)

    def toggle_comment_like(self, user_id: int, comment_id: int) -> bool:
        return self._toggle(CommentLike, Comment, CommentLike.comment_id, user_id, comment_id)

    def count_post_likes(self, post_id: int) -> int:
        return self.db.query(func.count()).select_from(PostLike).filter(PostLike.post_id == post_id).scalar() or 0

    def count_comment_likes(self, comment_id: int) -> int:
        return (
            self.db.query(func.count())
            .select_from(CommentLike)
            .filter(CommentLike.comment_id == comment_id)
            .scalar()
            or 0
        )

    def is_post_liked(self, user_id: int, post_id: int) -> bool:
        return (
            self.db.query(PostLike)
            .filter(PostLike.user_id == user_id, PostLike.post_id == post_id)
            .first()
            is not None
        )

    def liked_post_ids(self, user_id: int, post_ids: Iterable[int]) -> Set[int]:
        post_ids = list(post_ids)
        if not post_ids:
            return set()
        rows = (
            self.db.query(PostLike.post_id)
            .filter(PostLike.user_id == user_id, PostLike.post_id.in_(post_ids))
            .all()
        )
        return {post_id for (post_id,) in rows}

    def is_comment_liked(self, user_id: int, comment_id: int) -> bool:
        return (
            self.db.query(CommentLike)
            .filter(CommentLike.user_id == user_id, CommentLike.comment_id == comment_id)
            .first()
            is not None
        )
