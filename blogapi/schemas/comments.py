from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime

from .auth import AuthorResponse


MAX_COMMENT_LENGTH = 5000


class CommentBase(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        # Length is measured after trimming
        value = value.strip()
        if not value:
            raise ValueError("content must not be empty")
        if len(value) > MAX_COMMENT_LENGTH:
            raise ValueError(f"content must be at most {MAX_COMMENT_LENGTH} characters")
        return value


class CommentCreate(CommentBase):
    parent_id: Optional[int] = None


class CommentUpdate(CommentBase):
    pass


class CommentResponse(BaseModel):
    id: int
    post_id: int
    user_id: int
    parent_id: Optional[int] = None
    content: str
    likes_count: int
    is_liked: bool = False
    user: Optional[AuthorResponse] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
    replies: List["CommentResponse"] = []

    class Config:
        from_attributes = True


CommentResponse.model_rebuild()
