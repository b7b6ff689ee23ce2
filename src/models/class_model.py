import uuid

from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship

from utils.timeutils import utc_now_iso
from .base import Base


class ClassModel(Base):
    __tablename__ = "classes"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    teacher_id = Column(String, ForeignKey("teachers.id"), index=True, nullable=False)
    created_at = Column(String, nullable=False, default=utc_now_iso)

    teacher = relationship("TeacherModel", back_populates="classes")
    students = relationship("StudentModel", back_populates="class_")
    invitations = relationship(
        "ClassInvitationModel",
        back_populates="class_",
        cascade="all, delete-orphan",
    )
    assignments = relationship(
        "AssignmentModel",
        back_populates="class_",
        cascade="all, delete-orphan",
    )
