from pydantic import BaseModel
from datetime import datetime


class MediaResponse(BaseModel):
    id: int
    filename: str
    url: str
    mime_type: str
    size: int
    uploader_id: int
    uploaded_at: datetime

    class Config:
        from_attributes = True


class UploadResponse(BaseModel):
    url: str
