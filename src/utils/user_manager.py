"""User lookup utilities.

Credentials live on the hosted auth platform; this module only resolves
platform user ids to teacher and student profiles.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from config import DEFAULT_LIST_LIMIT
from core.exceptions import StudentNotFoundError, TeacherNotFoundError
from models.student import StudentModel
from models.teacher import TeacherModel
from schemas.user import CurrentUser

logger = logging.getLogger(__name__)


class UserManager:
    """Reads teacher and student profiles using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def find_teacher(self, teacher_id: str) -> Optional[TeacherModel]:
        return self.db.query(TeacherModel).filter(TeacherModel.id == teacher_id).first()

    def find_student(self, student_id: str) -> Optional[StudentModel]:
        return self.db.query(StudentModel).filter(StudentModel.id == student_id).first()

    def get_teacher(self, teacher_id: str) -> TeacherModel:
        """Get a teacher by id.

        Raises:
            TeacherNotFoundError: If no teacher has this id.
        """
        model = self.find_teacher(teacher_id)
        if not model:
            raise TeacherNotFoundError(teacher_id)
        return model

    def get_student(self, student_id: str) -> StudentModel:
        """Get a student by id.

        Raises:
            StudentNotFoundError: If no student has this id.
        """
        model = self.find_student(student_id)
        if not model:
            raise StudentNotFoundError(student_id)
        return model

    def list_teachers(self, limit: int = DEFAULT_LIST_LIMIT) -> List[TeacherModel]:
        return (
            self.db.query(TeacherModel)
            .order_by(TeacherModel.created_at.desc())
            .limit(limit)
            .all()
        )

    def resolve_user(self, user_id: str, email: Optional[str] = None) -> Optional[CurrentUser]:
        """Resolve an auth user id to a role.

        Teachers take precedence, matching how the web client decides which
        dashboard to show.

        Args:
            user_id: Token subject.
            email: Email claim from the token, if any.

        Returns:
            CurrentUser, or None when the id matches no profile.
        """
        teacher = self.find_teacher(user_id)
        if teacher:
            return CurrentUser(
                user_id=user_id,
                email=email or teacher.email,
                role="teacher",
                display_name=teacher.full_name,
            )
        student = self.find_student(user_id)
        if student:
            return CurrentUser(
                user_id=user_id,
                email=email or student.email,
                role="student",
                display_name=student.name,
            )
        logger.warning("Authenticated user %s has no teacher or student profile", user_id)
        return None
