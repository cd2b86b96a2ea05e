from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime


class Contacts(BaseModel):
    email: Optional[EmailStr] = None
    github: Optional[str] = Field(default=None, max_length=255)
    linkedin: Optional[str] = Field(default=None, max_length=255)
    vk: Optional[str] = Field(default=None, max_length=255)

    @field_validator("email", mode="before")
    @classmethod
    def empty_email_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ProfileUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
    photo_url: Optional[str] = Field(default=None, max_length=1000)
    activity: str = Field(default="", max_length=5000)
    contacts: Contacts = Contacts()


class ProfileResponse(BaseModel):
    id: int
    name: str
    description: str
    photo_url: Optional[str] = None
    activity: str
    contacts: Contacts
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
