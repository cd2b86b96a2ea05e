"""
Like toggles and counts.
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import transaction
from ..errors import ConflictError, NotFoundError
from ..models.comment import Comment
from ..models.post import Post
from ..models.user import User
from ..repositories import LikeRepository
from ..schemas.likes import LikeStatusResponse


class LikeService:
    def __init__(self, db: Session):
        self.db = db
        self.likes = LikeRepository(db)

    def toggle_post_like(self, post_id: int, user: User) -> LikeStatusResponse:
        self._require(Post, post_id, "post")
        try:
            with transaction(self.db):
                liked = self.likes.toggle_post_like(user.id, post_id)
        except IntegrityError as e:
            raise ConflictError("like was toggled concurrently, retry") from e
        return LikeStatusResponse(is_liked=liked, likes_count=self.likes.count_post_likes(post_id))

    def toggle_comment_like(self, comment_id: int, user: User) -> LikeStatusResponse:
        self._require(Comment, comment_id, "comment")
        try:
            with transaction(self.db):
                liked = self.likes.toggle_comment_like(user.id, comment_id)
        except IntegrityError as e:
            raise ConflictError("like was toggled concurrently, retry") from e
        return LikeStatusResponse(is_liked=liked, likes_count=self.likes.count_comment_likes(comment_id))

    def get_post_likes_count(self, post_id: int) -> int:
        self._require(Post, post_id, "post")
        return self.likes.count_post_likes(post_id)

    def get_comment_likes_count(self, comment_id: int) -> int:
        self._require(Comment, comment_id, "comment")
        return self.likes.count_comment_likes(comment_id)

    def _require(self, model, row_id: int, resource: str) -> None:
        if self.db.query(model.id).filter(model.id == row_id).first() is None:
            raise NotFoundError(resource)
