from pydantic import BaseModel


class LikeStatusResponse(BaseModel):
    is_liked: bool
    likes_count: int

    class Config:
        from_attributes = True


class LikesCountResponse(BaseModel):
    count: int
