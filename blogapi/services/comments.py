"""
Comment threads and the comment mutation rules.

Only the author may edit a comment. The author or an admin may soft-delete
it, which leaves a tombstone so replies keep their place in the thread.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from ..database import transaction
from ..errors import InvalidStateError, NotFoundError, PermissionDeniedError
from ..logging_config import api_logger
from ..models.comment import Comment
from ..models.user import User
from ..repositories import CommentRepository, CommentView, LikeRepository
from ..schemas.comments import CommentCreate, CommentUpdate
from .profile import ProfileService


class CommentService:
    def __init__(self, db: Session, profile: Optional[ProfileService] = None):
        self.db = db
        self.profile = profile
        self.comments = CommentRepository(db)
        self.likes = LikeRepository(db)

    def get_comments(self, post_id: int, viewer: Optional[User] = None) -> List[CommentView]:
        """The post's comment forest as seen by ``viewer``."""
        return self.comments.list_for_post(
            post_id,
            viewer_id=viewer.id if viewer is not None else None,
            admin_avatar_url=self._admin_photo(),
        )

    def get_comment(self, comment_id: int) -> Comment:
        comment = self.comments.get_by_id(comment_id)
        if comment is None:
            raise NotFoundError("comment")
        return comment

    def create_comment(self, post_id: int, data: CommentCreate, user: User) -> CommentView:
        if data.parent_id is not None:
            parent = self.comments.get_by_id(data.parent_id)
            if parent is None:
                raise NotFoundError("parent comment")
            if parent.post_id != post_id:
                raise InvalidStateError("parent comment belongs to a different post")
            if parent.is_deleted:
                raise InvalidStateError("cannot reply to a deleted comment")

        with transaction(self.db):
            comment = self.comments.create(post_id, user.id, data.content, data.parent_id)

        api_logger.info("Comment created", comment_id=comment.id, post_id=post_id, user_id=user.id)
        return self.present(comment, user)

    def update_comment(self, comment_id: int, data: CommentUpdate, user: User) -> CommentView:
        comment = self.get_comment(comment_id)
        if comment.user_id != user.id:
            raise PermissionDeniedError("only the author can edit a comment")
        if comment.is_deleted:
            raise InvalidStateError("comment is deleted")

        with transaction(self.db):
            self.comments.update_content(comment, data.content)

        return self.present(comment, user)

    def delete_comment(self, comment_id: int, user: User) -> None:
        """Soft-delete: author or admin."""
        comment = self.get_comment(comment_id)
        if comment.user_id != user.id and not user.is_admin:
            raise PermissionDeniedError("you can only delete your own comments")
        if comment.is_deleted:
            raise InvalidStateError("comment already deleted")

        with transaction(self.db):
            self.comments.soft_delete(comment)

        api_logger.info("Comment deleted", comment_id=comment_id, user_id=user.id)

    def hard_delete_comment(self, comment_id: int, user: User) -> None:
        """Remove the row entirely. Admin only."""
        if not user.is_admin:
            raise PermissionDeniedError("admin access required")
        comment = self.get_comment(comment_id)

        with transaction(self.db):
            self.comments.hard_delete(comment)

        api_logger.info("Comment purged", comment_id=comment_id, user_id=user.id)

    def present(self, comment: Comment, viewer: Optional[User] = None) -> CommentView:
        is_liked = viewer is not None and self.likes.is_comment_liked(viewer.id, comment.id)
        return self.comments.to_view(comment, comment.author, is_liked, self._admin_photo())

    def _admin_photo(self) -> Optional[str]:
        return self.profile.get_photo_url() if self.profile is not None else None
