"""Assignment schema definitions.

Request bodies keep the camelCase keys the web client sends. Every field is
optional at the schema level; the routes check required fields themselves so
that missing values produce a 400 with a readable message.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Assignment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    class_id: Optional[str] = None
    title: str
    description: Optional[str] = ""
    due_date: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None


class Submission(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    assignment_id: str
    status: str
    submission_date: Optional[str] = None
    photo_url: Optional[str] = None
    teacher_comment: Optional[str] = None
    grade: Optional[int] = None


class CreateAssignmentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    class_id: Optional[str] = Field(default=None, alias="classId")
    created_by: Optional[str] = Field(default=None, alias="createdBy")
    description: Optional[str] = None
    due_date: Optional[str] = Field(default=None, alias="dueDate")


class NotifyAssignmentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    assignment_id: Optional[str] = Field(default=None, alias="assignmentId")


class SubmitNotificationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    student_id: Optional[str] = Field(default=None, alias="studentId")
    assignment_id: Optional[str] = Field(default=None, alias="assignmentId")


class SubmitAssignmentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    assignment_id: str = Field(alias="assignmentId")
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")


class GradeSubmissionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    grade: int = Field(ge=0, le=100)
    teacher_comment: Optional[str] = Field(default=None, alias="teacherComment")
