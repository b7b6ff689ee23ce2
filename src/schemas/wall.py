"""Class wall schema definitions."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WallPost(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    class_id: str
    author_id: str
    author_name: Optional[str] = None
    author_is_teacher: bool = False
    content: str
    link: Optional[str] = None
    file_url: Optional[str] = None
    created_at: Optional[str] = None
    comments_count: int = 0


class WallComment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    post_id: str
    author_id: str
    content: str
    created_at: Optional[str] = None


class MutedStudent(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    class_id: str
    student_id: str
    muted_by: str
    muted_until: Optional[str] = None


class CreatePostRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str = Field(min_length=1)
    link: Optional[str] = None
    file_url: Optional[str] = Field(default=None, alias="fileUrl")


class CreateCommentRequest(BaseModel):
    content: str = Field(min_length=1)


class MuteStudentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    student_id: str = Field(alias="studentId")
    days: Optional[int] = Field(
        default=None, ge=1, description="Mute length in days; omit for indefinite."
    )
