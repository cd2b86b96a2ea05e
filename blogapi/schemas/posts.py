from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from .auth import AuthorResponse


class PostBase(BaseModel):
    title: str = Field(min_length=3, max_length=255)
    content: str = Field(min_length=10)
    preview: str = Field(default="", max_length=1000)
    cover_image: Optional[str] = Field(default=None, max_length=1000)
    published: bool = False


class PostCreate(PostBase):
    pass


class PostUpdate(PostBase):
    pass


class PostResponse(BaseModel):
    id: int
    title: str
    slug: str
    content: str
    preview: str
    cover_image: Optional[str] = None
    read_time_minutes: int
    published: bool
    published_at: Optional[datetime] = None
    likes_count: int
    comments_count: int
    is_liked: bool = False
    author: Optional[AuthorResponse] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
