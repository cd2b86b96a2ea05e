"""
Uploaded media records.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.media import MediaFile


class MediaRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, filename: str, mime_type: str, size: int, uploader_id: int, storage_path: str) -> MediaFile:
        media = MediaFile(
            filename=filename,
            mime_type=mime_type,
            size=size,
            uploader_id=uploader_id,
            storage_path=storage_path,
        )
        self.db.add(media)
        self.db.flush()
        return media

    def get_by_id(self, media_id: int) -> Optional[MediaFile]:
        return self.db.query(MediaFile).filter(MediaFile.id == media_id).first()

    def list_by_uploader(self, uploader_id: int) -> List[MediaFile]:
        return (
            self.db.query(MediaFile)
            .filter(MediaFile.uploader_id == uploader_id)
            .order_by(MediaFile.uploaded_at.desc(), MediaFile.id.desc())
            .all()
        )

    def delete(self, media: MediaFile) -> None:
        self.db.delete(media)
        self.db.flush()
