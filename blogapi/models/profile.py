"""
Singleton author profile shown on the blog.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from datetime import datetime, timezone
from ..database import Base


class ProfileInfo(Base):
    __tablename__ = "profile_info"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    photo_url = Column(String(1000), nullable=True)
    activity = Column(Text, nullable=False, default="")
    contacts = Column(JSON, nullable=False, default=dict)  # email, github, linkedin, vk
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
