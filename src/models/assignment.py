"""Assignment and submission database models."""

import uuid

from sqlalchemy import Column, Integer, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from utils.timeutils import utc_now_iso
from .base import Base


class AssignmentModel(Base):
    __tablename__ = "assignments"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    class_id = Column(String, ForeignKey("classes.id", ondelete="CASCADE"), index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    due_date = Column(String, nullable=True, index=True)  # ISO format string
    created_by = Column(String, ForeignKey("teachers.id"), nullable=True)
    created_at = Column(String, nullable=False, default=utc_now_iso)

    class_ = relationship("ClassModel", back_populates="assignments")
    submissions = relationship(
        "StudentAssignmentModel",
        back_populates="assignment",
        cascade="all, delete-orphan",
    )


class StudentAssignmentModel(Base):
    __tablename__ = "student_assignments"
    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "assignment_id",
            name="uq_student_assignments_student_assignment",
        ),
    )

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(
        String, ForeignKey("students.id", ondelete="CASCADE"), index=True, nullable=False
    )
    assignment_id = Column(
        String, ForeignKey("assignments.id", ondelete="CASCADE"), index=True, nullable=False
    )
    status = Column(String, nullable=False, default="not_submitted")
    submission_date = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    teacher_comment = Column(Text, nullable=True)
    grade = Column(Integer, nullable=True)
    created_at = Column(String, nullable=False, default=utc_now_iso)

    assignment = relationship("AssignmentModel", back_populates="submissions")
