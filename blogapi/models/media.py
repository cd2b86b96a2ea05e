"""
Media model for uploaded images.
"""
from sqlalchemy import Column, Integer, String, DateTime, BigInteger, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base


class MediaFile(Base):
    __tablename__ = "media_files"

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String(255), nullable=False)  # original client filename
    mime_type = Column(String(100), nullable=False)
    size = Column(BigInteger, nullable=False, default=0)  # in bytes
    uploader_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    storage_path = Column(String(1000), nullable=False)
    uploaded_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), index=True)

    uploader = relationship("User")
