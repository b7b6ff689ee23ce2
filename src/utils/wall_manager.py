"""Class wall: posts, comments and student mutes."""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.exceptions import (
    CommentNotFoundError,
    PermissionDeniedError,
    PostNotFoundError,
    StudentMutedError,
    StudentNotFoundError,
    ValidationError,
)
from models.class_model import ClassModel
from models.student import StudentModel
from models.teacher import TeacherModel
from models.wall import MutedStudentModel, WallPostCommentModel, WallPostModel
from utils.class_manager import ClassManager
from utils.timeutils import parse_timestamp, utc_isoformat, utc_now

logger = logging.getLogger(__name__)


def _require_content(content: str) -> str:
    content = (content or "").strip()
    if not content:
        raise ValidationError("İçerik boş olamaz")
    return content


class WallManager:
    """Manages the class wall and its moderation."""

    def __init__(self, db: Session):
        self.db = db
        self.classes = ClassManager(db)

    def _get_class(self, class_id: str) -> ClassModel:
        return self.classes.get_class(class_id)

    def ensure_member(self, class_id: str, user_id: str) -> ClassModel:
        return self.classes.ensure_member(class_id, user_id)

    def _resolve_author(self, author_id: str) -> Tuple[str, bool]:
        teacher = self.db.query(TeacherModel).filter(TeacherModel.id == author_id).first()
        if teacher:
            return teacher.full_name or "Öğretmen", True
        student = self.db.query(StudentModel).filter(StudentModel.id == author_id).first()
        if student:
            return student.name, False
        return "Kullanıcı", False

    def _check_not_muted(self, class_id: str, author_id: str) -> None:
        if self.is_muted(class_id, author_id):
            logger.info("Muted student %s tried to write on wall of class %s", author_id, class_id)
            raise StudentMutedError(author_id)

    # Posts

    def create_post(
        self,
        class_id: str,
        author_id: str,
        content: str,
        link: Optional[str] = None,
        file_url: Optional[str] = None,
    ) -> WallPostModel:
        """Create a wall post.

        Raises:
            ClassNotFoundError: If the class does not exist.
            PermissionDeniedError: If the author is not a class member.
            StudentMutedError: If the author is a muted student.
            ValidationError: If the content is blank.
        """
        content = _require_content(content)
        self.ensure_member(class_id, author_id)
        self._check_not_muted(class_id, author_id)
        author_name, is_teacher = self._resolve_author(author_id)

        post = WallPostModel(
            class_id=class_id,
            author_id=author_id,
            author_name=author_name,
            author_is_teacher=is_teacher,
            content=content,
            link=link,
            file_url=file_url,
        )
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        logger.info("Created wall post %s in class %s by %s", post.id, class_id, author_id)
        return post

    def get_post(self, post_id: str, class_id: Optional[str] = None) -> WallPostModel:
        post = self.db.query(WallPostModel).filter(WallPostModel.id == post_id).first()
        if not post or (class_id is not None and post.class_id != class_id):
            raise PostNotFoundError(post_id)
        return post

    def list_posts(self, class_id: str) -> List[dict]:
        """Posts of a class, newest first, each with ``comments_count``."""
        comment_counts = (
            self.db.query(
                WallPostCommentModel.post_id,
                func.count(WallPostCommentModel.id).label("count"),
            )
            .group_by(WallPostCommentModel.post_id)
            .subquery()
        )
        rows = (
            self.db.query(WallPostModel, func.coalesce(comment_counts.c.count, 0))
            .outerjoin(comment_counts, comment_counts.c.post_id == WallPostModel.id)
            .filter(WallPostModel.class_id == class_id)
            .order_by(WallPostModel.created_at.desc())
            .all()
        )
        return [
            {
                "id": post.id,
                "class_id": post.class_id,
                "author_id": post.author_id,
                "author_name": post.author_name,
                "author_is_teacher": post.author_is_teacher,
                "content": post.content,
                "link": post.link,
                "file_url": post.file_url,
                "created_at": post.created_at,
                "comments_count": int(count),
            }
            for post, count in rows
        ]

    def delete_post(self, post_id: str, user_id: str, class_id: Optional[str] = None) -> None:
        """Delete a post. Allowed for its author and the class teacher."""
        post = self.get_post(post_id, class_id)
        class_model = self._get_class(post.class_id)
        if user_id not in (post.author_id, class_model.teacher_id):
            raise PermissionDeniedError("Bu gönderiyi silme yetkiniz yok")
        self.db.delete(post)
        self.db.commit()
        logger.info("Deleted wall post %s by %s", post_id, user_id)

    # Comments

    def add_comment(
        self, post_id: str, author_id: str, content: str, class_id: Optional[str] = None
    ) -> WallPostCommentModel:
        content = _require_content(content)
        post = self.get_post(post_id, class_id)
        self.ensure_member(post.class_id, author_id)
        self._check_not_muted(post.class_id, author_id)
        comment = WallPostCommentModel(post_id=post_id, author_id=author_id, content=content)
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)
        logger.info("Added comment %s to post %s", comment.id, post_id)
        return comment

    def list_comments(
        self, post_id: str, class_id: Optional[str] = None
    ) -> List[WallPostCommentModel]:
        self.get_post(post_id, class_id)
        return (
            self.db.query(WallPostCommentModel)
            .filter(WallPostCommentModel.post_id == post_id)
            .order_by(WallPostCommentModel.created_at.asc())
            .all()
        )

    def delete_comment(
        self, comment_id: str, user_id: str, class_id: Optional[str] = None
    ) -> None:
        comment = (
            self.db.query(WallPostCommentModel)
            .filter(WallPostCommentModel.id == comment_id)
            .first()
        )
        if not comment or (class_id is not None and comment.post.class_id != class_id):
            raise CommentNotFoundError(comment_id)
        class_model = self._get_class(comment.post.class_id)
        if user_id not in (comment.author_id, class_model.teacher_id):
            raise PermissionDeniedError("Bu yorumu silme yetkiniz yok")
        self.db.delete(comment)
        self.db.commit()
        logger.info("Deleted comment %s by %s", comment_id, user_id)

    # Moderation

    def mute_student(
        self,
        class_id: str,
        student_id: str,
        muted_by: str,
        days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> MutedStudentModel:
        """Mute a student on the class wall.

        Args:
            class_id: Class whose wall is moderated.
            student_id: Student to mute; must be enrolled in the class.
            muted_by: Acting teacher; must own the class.
            days: Mute length in days; None mutes indefinitely.
            now: Current time; defaults to the wall clock.

        Returns:
            The created or updated MutedStudentModel.
        """
        class_model = self._get_class(class_id)
        if class_model.teacher_id != muted_by:
            raise PermissionDeniedError("Yalnızca sınıf öğretmeni öğrenci susturabilir")
        student = (
            self.db.query(StudentModel)
            .filter(StudentModel.id == student_id, StudentModel.class_id == class_id)
            .first()
        )
        if not student:
            raise StudentNotFoundError(student_id)

        muted_until = None
        if days is not None:
            muted_until = utc_isoformat((now or utc_now()) + timedelta(days=days))

        mute = self._find_mute(class_id, student_id)
        if mute:
            mute.muted_by = muted_by
            mute.muted_until = muted_until
        else:
            mute = MutedStudentModel(
                class_id=class_id,
                student_id=student_id,
                muted_by=muted_by,
                muted_until=muted_until,
            )
            self.db.add(mute)
        self.db.commit()
        self.db.refresh(mute)
        logger.info(
            "Muted student %s in class %s until %s",
            student_id,
            class_id,
            muted_until or "further notice",
        )
        return mute

    def unmute_student(self, class_id: str, student_id: str, teacher_id: str) -> None:
        class_model = self._get_class(class_id)
        if class_model.teacher_id != teacher_id:
            raise PermissionDeniedError("Yalnızca sınıf öğretmeni susturmayı kaldırabilir")
        mute = self._find_mute(class_id, student_id)
        if mute:
            self.db.delete(mute)
            self.db.commit()
            logger.info("Unmuted student %s in class %s", student_id, class_id)

    def _find_mute(self, class_id: str, student_id: str) -> Optional[MutedStudentModel]:
        return (
            self.db.query(MutedStudentModel)
            .filter(
                MutedStudentModel.class_id == class_id,
                MutedStudentModel.student_id == student_id,
            )
            .first()
        )

    def is_muted(self, class_id: str, student_id: str, now: Optional[datetime] = None) -> bool:
        mute = self._find_mute(class_id, student_id)
        if mute is None:
            return False
        until = parse_timestamp(mute.muted_until)
        return until is None or until > (now or utc_now())

    def list_muted(self, class_id: str, now: Optional[datetime] = None) -> List[MutedStudentModel]:
        """Mutes of a class that are still in effect."""
        now = now or utc_now()
        mutes = (
            self.db.query(MutedStudentModel)
            .filter(MutedStudentModel.class_id == class_id)
            .order_by(MutedStudentModel.created_at.desc())
            .all()
        )
        return [
            m for m in mutes
            if m.muted_until is None or parse_timestamp(m.muted_until) > now
        ]
