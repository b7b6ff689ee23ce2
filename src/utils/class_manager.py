"""Class management utilities."""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from config import DEFAULT_LIST_LIMIT
from core.exceptions import (
    ClassNotFoundError,
    PermissionDeniedError,
    SolutionNotFoundError,
    StudentNotFoundError,
    TeacherNotFoundError,
)
from models.class_model import ClassModel
from models.student import StudentModel
from models.student_solution import StudentSolutionModel
from models.teacher import TeacherModel
from models.wall import MutedStudentModel, WallPostCommentModel, WallPostModel
from utils.timeutils import today_utc

logger = logging.getLogger(__name__)


class ClassManager:
    """Manages classes, rosters and daily solution counts."""

    def __init__(self, db: Session):
        self.db = db

    def create_class(self, name: str, teacher_id: str) -> ClassModel:
        """Create a new class owned by a teacher."""
        teacher = self.db.query(TeacherModel).filter(TeacherModel.id == teacher_id).first()
        if not teacher:
            raise TeacherNotFoundError(teacher_id)
        class_model = ClassModel(name=name, teacher_id=teacher_id)
        self.db.add(class_model)
        self.db.commit()
        self.db.refresh(class_model)
        logger.info("Created class %s (%s) for teacher %s", class_model.id, name, teacher_id)
        return class_model

    def get_class(self, class_id: str) -> ClassModel:
        model = self.db.query(ClassModel).filter(ClassModel.id == class_id).first()
        if not model:
            raise ClassNotFoundError(class_id)
        return model

    def get_owned_class(self, class_id: str, teacher_id: str) -> ClassModel:
        """Get a class and check that ``teacher_id`` owns it.

        Raises:
            ClassNotFoundError: If class not found.
            PermissionDeniedError: If the teacher does not own the class.
        """
        class_model = self.get_class(class_id)
        if class_model.teacher_id != teacher_id:
            raise PermissionDeniedError("Bu sınıf üzerinde yetkiniz yok")
        return class_model

    def ensure_member(self, class_id: str, user_id: str) -> ClassModel:
        """Check that the user is the class teacher or one of its students.

        Raises:
            ClassNotFoundError: If class not found.
            PermissionDeniedError: If the user does not belong to the class.
        """
        class_model = self.get_class(class_id)
        if class_model.teacher_id == user_id:
            return class_model
        enrolled = (
            self.db.query(StudentModel)
            .filter(StudentModel.id == user_id, StudentModel.class_id == class_id)
            .first()
        )
        if not enrolled:
            raise PermissionDeniedError("Bu sınıfa erişiminiz yok")
        return class_model

    def list_classes(
        self, teacher_id: Optional[str] = None, limit: int = DEFAULT_LIST_LIMIT
    ) -> List[ClassModel]:
        query = self.db.query(ClassModel)
        if teacher_id:
            query = query.filter(ClassModel.teacher_id == teacher_id)
        return query.order_by(ClassModel.created_at.desc()).limit(limit).all()

    def delete_class(self, class_id: str, teacher_id: str) -> None:
        """Delete a class. Only the owner can delete it.

        Students are detached rather than deleted; assignments and
        invitations go with the class through ORM cascades, and wall content,
        mutes and solution rows are removed here since SQLite does not
        enforce ``ON DELETE CASCADE`` by default.
        """
        class_model = self.get_owned_class(class_id, teacher_id)
        self.db.query(StudentModel).filter(StudentModel.class_id == class_id).update(
            {StudentModel.class_id: None}, synchronize_session=False
        )
        post_ids = self.db.query(WallPostModel.id).filter(WallPostModel.class_id == class_id)
        self.db.query(WallPostCommentModel).filter(
            WallPostCommentModel.post_id.in_(post_ids.scalar_subquery())
        ).delete(synchronize_session=False)
        for model in (WallPostModel, MutedStudentModel, StudentSolutionModel):
            self.db.query(model).filter(model.class_id == class_id).delete(
                synchronize_session=False
            )
        self.db.delete(class_model)
        self.db.commit()
        logger.info("Deleted class: %s", class_id)

    def list_students(self, class_id: str) -> List[StudentModel]:
        return (
            self.db.query(StudentModel)
            .filter(StudentModel.class_id == class_id)
            .order_by(StudentModel.created_at.asc())
            .all()
        )

    def remove_student(self, class_id: str, student_id: str, teacher_id: str) -> None:
        self.get_owned_class(class_id, teacher_id)
        student = (
            self.db.query(StudentModel)
            .filter(StudentModel.id == student_id, StudentModel.class_id == class_id)
            .first()
        )
        if not student:
            raise StudentNotFoundError(student_id)
        student.class_id = None
        self.db.commit()
        logger.info("Removed student %s from class %s", student_id, class_id)

    def add_solution(
        self,
        teacher_id: str,
        class_id: str,
        student_id: str,
        solved_questions: int,
        on_date: Optional[date] = None,
    ) -> StudentSolutionModel:
        """Add solved questions to a student's row for the day.

        The count is added to an existing row for the same student, class and
        day; otherwise a new row is created.

        Args:
            teacher_id: Acting teacher, must own the class.
            class_id: Class the student belongs to.
            student_id: Student who solved the questions.
            solved_questions: Number to add.
            on_date: Day to record; defaults to today in UTC.

        Returns:
            The updated or created StudentSolutionModel.
        """
        self.get_owned_class(class_id, teacher_id)
        student = (
            self.db.query(StudentModel)
            .filter(StudentModel.id == student_id, StudentModel.class_id == class_id)
            .first()
        )
        if not student:
            raise StudentNotFoundError(student_id)

        day = (on_date or today_utc()).isoformat()
        existing = (
            self.db.query(StudentSolutionModel)
            .filter(
                StudentSolutionModel.student_id == student_id,
                StudentSolutionModel.class_id == class_id,
                StudentSolutionModel.date == day,
            )
            .first()
        )
        if existing:
            existing.solved_questions += solved_questions
            model = existing
        else:
            model = StudentSolutionModel(
                student_id=student_id,
                class_id=class_id,
                date=day,
                solved_questions=solved_questions,
            )
            self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info(
            "Recorded %d solved question(s) for student %s on %s",
            solved_questions,
            student_id,
            day,
        )
        return model

    def update_solution(
        self, teacher_id: str, solution_id: str, solved_questions: int
    ) -> StudentSolutionModel:
        model = (
            self.db.query(StudentSolutionModel)
            .filter(StudentSolutionModel.id == solution_id)
            .first()
        )
        if not model:
            raise SolutionNotFoundError(solution_id)
        self.get_owned_class(model.class_id, teacher_id)
        model.solved_questions = solved_questions
        self.db.commit()
        self.db.refresh(model)
        return model

    def list_solutions(self, class_id: str) -> List[StudentSolutionModel]:
        return (
            self.db.query(StudentSolutionModel)
            .filter(StudentSolutionModel.class_id == class_id)
            .order_by(StudentSolutionModel.date.asc())
            .all()
        )

    def teacher_ranking(self, teacher_id: str) -> List[dict]:
        """Total solved questions per student across a teacher's classes.

        Students without any solution rows are included with a total of 0.
        """
        total = func.coalesce(func.sum(StudentSolutionModel.solved_questions), 0)
        rows = (
            self.db.query(
                StudentModel.id,
                StudentModel.name,
                ClassModel.id,
                ClassModel.name,
                total.label("total"),
            )
            .join(ClassModel, ClassModel.id == StudentModel.class_id)
            .outerjoin(
                StudentSolutionModel,
                (StudentSolutionModel.student_id == StudentModel.id)
                & (StudentSolutionModel.class_id == ClassModel.id),
            )
            .filter(ClassModel.teacher_id == teacher_id)
            .group_by(StudentModel.id, StudentModel.name, ClassModel.id, ClassModel.name)
            .order_by(total.desc(), StudentModel.name.asc())
            .all()
        )
        return [
            {
                "student_id": student_id,
                "student_name": student_name,
                "class_id": class_id,
                "class_name": class_name,
                "total": int(total_solved),
            }
            for student_id, student_name, class_id, class_name, total_solved in rows
        ]
