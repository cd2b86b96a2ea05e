from .user import User, OAuthProvider, UserSession
from .post import Post
from .comment import Comment, DELETED_COMMENT_PLACEHOLDER
from .like import PostLike, CommentLike
from .media import MediaFile
from .profile import ProfileInfo

__all__ = [
    "User",
    "OAuthProvider",
    "UserSession",
    "Post",
    "Comment",
    "DELETED_COMMENT_PLACEHOLDER",
    "PostLike",
    "CommentLike",
    "MediaFile",
    "ProfileInfo",
]
