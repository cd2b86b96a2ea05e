from .auth import AuthService, generate_session_token
from .posts import PostService
from .comments import CommentService
from .likes import LikeService
from .media import MediaService
from .profile import ProfileCache, ProfileService

__all__ = [
    "AuthService",
    "generate_session_token",
    "PostService",
    "CommentService",
    "LikeService",
    "MediaService",
    "ProfileCache",
    "ProfileService",
]
