import uuid

from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint

from utils.timeutils import utc_now_iso
from .base import Base


class StudentSolutionModel(Base):
    """Number of questions a student solved on a given day."""

    __tablename__ = "student_solutions"
    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "class_id",
            "date",
            name="uq_student_solutions_student_class_date",
        ),
    )

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(
        String, ForeignKey("students.id", ondelete="CASCADE"), index=True, nullable=False
    )
    class_id = Column(
        String, ForeignKey("classes.id", ondelete="CASCADE"), index=True, nullable=False
    )
    date = Column(String, index=True, nullable=False)  # YYYY-MM-DD
    solved_questions = Column(Integer, nullable=False, default=0)
    created_at = Column(String, nullable=False, default=utc_now_iso)
