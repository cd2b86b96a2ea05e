from .auth import UserResponse, AuthorResponse
from .posts import PostCreate, PostUpdate, PostResponse
from .comments import CommentCreate, CommentUpdate, CommentResponse
from .likes import LikeStatusResponse, LikesCountResponse
from .media import MediaResponse, UploadResponse
from .profile import Contacts, ProfileUpdate, ProfileResponse

__all__ = [
    "UserResponse", "AuthorResponse",
    "PostCreate", "PostUpdate", "PostResponse",
    "CommentCreate", "CommentUpdate", "CommentResponse",
    "LikeStatusResponse", "LikesCountResponse",
    "MediaResponse", "UploadResponse",
    "Contacts", "ProfileUpdate", "ProfileResponse",
]
