"""User schema definitions."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Teacher(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    email: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[str] = None


class Student(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    class_id: Optional[str] = None
    name: str
    email: Optional[str] = None
    photo_url: Optional[str] = None
    phone_number: Optional[str] = None
    created_at: Optional[str] = None


class CurrentUser(BaseModel):
    """Identity resolved from a platform-issued access token."""

    user_id: str = Field(description="Auth platform user id (the token subject).")
    email: Optional[str] = None
    role: str = Field(description="'teacher' or 'student'.")
    display_name: Optional[str] = None
