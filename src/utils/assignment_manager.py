"""Assignment and submission management.

This module handles creating and reading assignments and recording student
submissions using SQLAlchemy.
"""

import logging
from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from config import DEFAULT_LIST_LIMIT
from core.exceptions import (
    AssignmentNotFoundError,
    ClassNotFoundError,
    PermissionDeniedError,
    StudentNotFoundError,
    TeacherNotFoundError,
    ValidationError,
)
from models.assignment import AssignmentModel, StudentAssignmentModel
from models.class_model import ClassModel
from models.student import StudentModel
from models.teacher import TeacherModel
from utils.timeutils import parse_timestamp, utc_isoformat, utc_now_iso

logger = logging.getLogger(__name__)


class AssignmentManager:
    """Manages assignments and their submissions."""

    def __init__(self, db: Session):
        """Initialize AssignmentManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def create_assignment(
        self,
        title: str,
        class_id: str,
        created_by: str,
        description: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> AssignmentModel:
        """Create an assignment for a class.

        Args:
            title: Assignment title.
            class_id: Class the assignment belongs to.
            created_by: Teacher id.
            description: Optional description.
            due_date: Optional ISO timestamp or YYYY-MM-DD date.

        Returns:
            The created AssignmentModel.

        Raises:
            ClassNotFoundError: If the class does not exist.
            TeacherNotFoundError: If the teacher does not exist.
            ValidationError: If the due date cannot be parsed.
        """
        if not self.db.query(ClassModel).filter(ClassModel.id == class_id).first():
            raise ClassNotFoundError(class_id)
        if not self.db.query(TeacherModel).filter(TeacherModel.id == created_by).first():
            raise TeacherNotFoundError(created_by)

        try:
            parsed_due = parse_timestamp(due_date)
        except ValueError as exc:
            raise ValidationError("Geçersiz son teslim tarihi") from exc

        model = AssignmentModel(
            title=title,
            description=description or "",
            class_id=class_id,
            created_by=created_by,
            due_date=utc_isoformat(parsed_due) if parsed_due else None,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Created assignment %s ('%s') in class %s", model.id, title, class_id)
        return model

    def get_assignment(self, assignment_id: str) -> AssignmentModel:
        model = (
            self.db.query(AssignmentModel)
            .filter(AssignmentModel.id == assignment_id)
            .first()
        )
        if not model:
            raise AssignmentNotFoundError(assignment_id)
        return model

    def list_assignments(
        self, class_id: Optional[str] = None, limit: int = DEFAULT_LIST_LIMIT
    ) -> List[AssignmentModel]:
        query = self.db.query(AssignmentModel)
        if class_id:
            query = query.filter(AssignmentModel.class_id == class_id)
        return query.order_by(AssignmentModel.created_at.desc()).limit(limit).all()

    def list_due_between(self, start: datetime, end: datetime) -> List[AssignmentModel]:
        """List assignments with ``start <= due_date < end``."""
        return (
            self.db.query(AssignmentModel)
            .filter(
                AssignmentModel.due_date.isnot(None),
                AssignmentModel.due_date >= utc_isoformat(start),
                AssignmentModel.due_date < utc_isoformat(end),
            )
            .order_by(AssignmentModel.due_date.asc())
            .all()
        )

    def list_students(self, class_id: str) -> List[StudentModel]:
        return (
            self.db.query(StudentModel)
            .filter(StudentModel.class_id == class_id)
            .order_by(StudentModel.created_at.asc())
            .all()
        )

    def list_submitted_student_ids(self, assignment_id: str) -> Set[str]:
        """Ids of students with a submission row for the assignment.

        Rows still marked ``not_submitted`` do not count.
        """
        rows = (
            self.db.query(StudentAssignmentModel.student_id)
            .filter(
                StudentAssignmentModel.assignment_id == assignment_id,
                StudentAssignmentModel.status != "not_submitted",
            )
            .all()
        )
        return {student_id for (student_id,) in rows}

    def list_submissions(self, assignment_id: str) -> List[StudentAssignmentModel]:
        return (
            self.db.query(StudentAssignmentModel)
            .filter(StudentAssignmentModel.assignment_id == assignment_id)
            .order_by(StudentAssignmentModel.submission_date.asc())
            .all()
        )

    def submit_assignment(
        self, student_id: str, assignment_id: str, photo_url: Optional[str] = None
    ) -> StudentAssignmentModel:
        """Record a student's submission, replacing any earlier one.

        Raises:
            AssignmentNotFoundError: If the assignment does not exist.
            StudentNotFoundError: If the student does not exist.
            PermissionDeniedError: If the student is not in the assignment's class.
        """
        assignment = self.get_assignment(assignment_id)
        student = self.db.query(StudentModel).filter(StudentModel.id == student_id).first()
        if not student:
            raise StudentNotFoundError(student_id)
        if student.class_id != assignment.class_id:
            raise PermissionDeniedError("Bu ödev sizin sınıfınıza ait değil")

        model = (
            self.db.query(StudentAssignmentModel)
            .filter(
                StudentAssignmentModel.student_id == student_id,
                StudentAssignmentModel.assignment_id == assignment_id,
            )
            .first()
        )
        if not model:
            model = StudentAssignmentModel(student_id=student_id, assignment_id=assignment_id)
            self.db.add(model)
        model.status = "submitted"
        model.submission_date = utc_now_iso()
        model.photo_url = photo_url
        self.db.commit()
        self.db.refresh(model)
        logger.info("Student %s submitted assignment %s", student_id, assignment_id)
        return model

    def grade_submission(
        self,
        submission_id: str,
        teacher_id: str,
        grade: int,
        teacher_comment: Optional[str] = None,
    ) -> StudentAssignmentModel:
        model = (
            self.db.query(StudentAssignmentModel)
            .filter(StudentAssignmentModel.id == submission_id)
            .first()
        )
        if not model:
            raise AssignmentNotFoundError(submission_id)
        if model.assignment.created_by != teacher_id:
            raise PermissionDeniedError("Bu ödevi yalnızca oluşturan öğretmen notlandırabilir")
        model.grade = grade
        model.teacher_comment = teacher_comment
        model.status = "graded"
        self.db.commit()
        self.db.refresh(model)
        logger.info("Graded submission %s: %d", submission_id, grade)
        return model
