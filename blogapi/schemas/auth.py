from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    avatar_url: Optional[str] = None
    role: str
    created_at: datetime

    class Config:
        from_attributes = True


class AuthorResponse(BaseModel):
    id: int
    name: str
    avatar_url: Optional[str] = None
    role: str

    class Config:
        from_attributes = True
