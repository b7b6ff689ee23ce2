"""Assignment notifications triggered by teacher and student actions."""

import logging
from dataclasses import dataclass
from typing import Optional

from utils.assignment_manager import AssignmentManager
from utils.mail_templates import NotificationKind, build_message
from utils.notifier import BatchResult, notify_recipients
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)


@dataclass
class SubmissionReceipt:
    sent: bool
    message: str
    error: Optional[str] = None


class NotificationService:
    """Sends the assignment-created and submission-received notifications."""

    def __init__(
        self,
        assignment_manager: AssignmentManager,
        user_manager: UserManager,
        mailer,
    ):
        self.assignments = assignment_manager
        self.users = user_manager
        self.mailer = mailer

    def notify_assignment_created(self, assignment_id: str) -> BatchResult:
        """Tell every student of the class about a new assignment.

        Raises:
            AssignmentNotFoundError: If the assignment does not exist.
            TeacherNotFoundError: If the owning teacher does not exist.
        """
        assignment = self.assignments.get_assignment(assignment_id)
        teacher = self.users.get_teacher(assignment.created_by)
        students = self.assignments.list_students(assignment.class_id)
        if not students:
            logger.warning("Class %s has no students", assignment.class_id)
        return notify_recipients(
            NotificationKind.ASSIGNMENT_CREATED,
            teacher=teacher,
            recipients=students,
            assignment=assignment,
            mailer=self.mailer,
        )

    def notify_submission(self, student_id: str, assignment_id: str) -> SubmissionReceipt:
        """Tell the teacher that a student submitted.

        A delivery failure does not undo the submission; it is reported in
        the receipt instead.

        Raises:
            AssignmentNotFoundError: If the assignment does not exist.
            StudentNotFoundError: If the student does not exist.
            TeacherNotFoundError: If the owning teacher does not exist.
        """
        assignment = self.assignments.get_assignment(assignment_id)
        student = self.users.get_student(student_id)
        teacher = self.users.get_teacher(assignment.created_by)

        if not teacher.email:
            logger.warning("Teacher %s has no email address", teacher.id)
            return SubmissionReceipt(
                sent=False,
                message=(
                    "Ödev teslimi kaydedildi ancak öğretmenin e-posta adresi "
                    "olmadığı için bildirim gönderilemedi."
                ),
            )

        message = build_message(
            NotificationKind.SUBMISSION_RECEIVED,
            teacher=teacher,
            assignment=assignment,
            to=teacher.email,
            settings=self.mailer.settings,
            student=student,
        )
        try:
            self.mailer.send_mail(message)
        except Exception as exc:
            logger.error("Submission receipt to %s failed: %s", teacher.email, exc)
            return SubmissionReceipt(
                sent=False,
                message="Ödev teslimi kaydedildi ancak öğretmene bildirim gönderilemedi.",
                error=str(exc),
            )
        return SubmissionReceipt(
            sent=True,
            message=(
                f"Ödev teslimi kaydedildi ve {teacher.full_name} öğretmene "
                "bildirim gönderildi."
            ),
        )
