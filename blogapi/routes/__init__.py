from .auth import router as auth_router
from .posts import router as posts_router
from .comments import router as comments_router
from .likes import router as likes_router
from .media import router as media_router
from .profile import router as profile_router
from .health import router as health_router

__all__ = [
    "auth_router",
    "posts_router",
    "comments_router",
    "likes_router",
    "media_router",
    "profile_router",
    "health_router",
]
