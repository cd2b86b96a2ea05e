from .users import UserRepository
from .sessions import SessionRepository
from .posts import PostRepository
from .comments import CommentRepository, CommentView, build_comment_tree
from .likes import LikeRepository
from .media import MediaRepository
from .profile import ProfileRepository

__all__ = [
    "UserRepository",
    "SessionRepository",
    "PostRepository",
    "CommentRepository",
    "CommentView",
    "build_comment_tree",
    "LikeRepository",
    "MediaRepository",
    "ProfileRepository",
]
