"""
Comment persistence and thread assembly.

Threads are read with a single query ordered by creation time and turned into
a forest in memory, see ``build_comment_tree``.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import and_, exists
from sqlalchemy.orm import Session

from ..logging_config import db_logger, timed
from ..models.comment import Comment, DELETED_COMMENT_PLACEHOLDER
from ..models.like import CommentLike
from ..models.post import Post
from ..models.user import User
from .counters import bump_counter


@dataclass
class CommentAuthor:
    id: int
    name: str
    avatar_url: Optional[str]
    role: str


@dataclass
class CommentView:
    """A comment as shown to one viewer, with its replies attached."""
    id: int
    post_id: int
    user_id: int
    parent_id: Optional[int]
    content: str
    likes_count: int
    is_liked: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
    user: Optional[CommentAuthor] = None
    replies: List["CommentView"] = field(default_factory=list)


def build_comment_tree(comments: List[CommentView]) -> List[CommentView]:
    """
    Turn a creation-ordered flat list into a forest.

    The first pass indexes every comment by id, the second walks the list in
    its original order and appends each comment to its parent's replies, so
    roots and every replies list keep creation order. A comment whose parent
    is not in the list is treated as a root.
    """
    by_id: Dict[int, CommentView] = {}
    for comment in comments:
        comment.replies = []
        by_id[comment.id] = comment

    roots: List[CommentView] = []
    for comment in comments:
        parent = by_id.get(comment.parent_id) if comment.parent_id is not None else None
        if parent is not None:
            parent.replies.append(comment)
        else:
            roots.append(comment)

    return roots


class CommentRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, post_id: int, user_id: int, content: str, parent_id: Optional[int] = None) -> Comment:
        comment = Comment(post_id=post_id, user_id=user_id, content=content, parent_id=parent_id)
        self.db.add(comment)
        self.db.flush()
        bump_counter(self.db, Post, post_id, Post.comments_count, 1)
        return comment

    def get_by_id(self, comment_id: int) -> Optional[Comment]:
        return self.db.query(Comment).filter(Comment.id == comment_id).first()

    def update_content(self, comment: Comment, content: str) -> Comment:
        comment.content = content
        comment.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return comment

    def soft_delete(self, comment: Comment) -> Comment:
        """Tombstone the comment and take it out of the post's live count."""
        now = datetime.now(timezone.utc)
        comment.deleted_at = now
        comment.updated_at = now
        comment.content = DELETED_COMMENT_PLACEHOLDER
        self.db.flush()
        bump_counter(self.db, Post, comment.post_id, Post.comments_count, -1)
        return comment

    def hard_delete(self, comment: Comment) -> None:
        """Remove the row; its replies become roots."""
        if comment.deleted_at is None:
            bump_counter(self.db, Post, comment.post_id, Post.comments_count, -1)
        self.db.query(Comment).filter(Comment.parent_id == comment.id).update(
            {Comment.parent_id: None}, synchronize_session="fetch"
        )
        self.db.delete(comment)
        self.db.flush()

    @timed(db_logger)
    def list_for_post(
        self,
        post_id: int,
        viewer_id: Optional[int] = None,
        admin_avatar_url: Optional[str] = None,
    ) -> List[CommentView]:
        """
        All comments of a post as a forest, soft-deleted ones included.

        ``is_liked`` is resolved per row for ``viewer_id``; anonymous viewers
        never match. Admin authors are shown with ``admin_avatar_url`` when set.
        """
        liked = exists().where(
            and_(
                CommentLike.comment_id == Comment.id,
                CommentLike.user_id == (viewer_id or 0),
            )
        ).label("is_liked")

        rows = (
            self.db.query(Comment, User, liked)
            .outerjoin(User, User.id == Comment.user_id)
            .filter(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all()
        )

        views = [self.to_view(comment, user, bool(is_liked), admin_avatar_url) for comment, user, is_liked in rows]
        return build_comment_tree(views)

    @staticmethod
    def to_view(comment: Comment, user: Optional[User], is_liked: bool, admin_avatar_url: Optional[str]) -> CommentView:
        author = None
        if user is not None:
            avatar = user.avatar_url
            if user.is_admin and admin_avatar_url:
                avatar = admin_avatar_url
            author = CommentAuthor(id=user.id, name=user.name, avatar_url=avatar, role=user.role)

        return CommentView(
            id=comment.id,
            post_id=comment.post_id,
            user_id=comment.user_id,
            parent_id=comment.parent_id,
            content=DELETED_COMMENT_PLACEHOLDER if comment.deleted_at is not None else comment.content,
            likes_count=comment.likes_count,
            is_liked=is_liked,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            deleted_at=comment.deleted_at,
            user=author,
        )
