"""Class invitation codes.

Teachers hand out codes that enroll a student into a class. A code is
redeemable while it is active, not expired and below its usage cap.
"""

import logging
import secrets
import string
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import (
    AlreadyEnrolled,
    ClassNotFoundError,
    CodeExhausted,
    CodeExpired,
    CodeInactive,
    CodeNotFound,
    StudentNotFoundError,
    ValidationError,
)
from models.class_invitation import ClassInvitationModel
from models.class_model import ClassModel
from models.student import StudentModel
from utils.timeutils import parse_timestamp, utc_isoformat, utc_now

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8
_MAX_CODE_ATTEMPTS = 5


def generate_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def is_expired(invitation: ClassInvitationModel, now: datetime) -> bool:
    expires_at = parse_timestamp(invitation.expires_at)
    return expires_at is not None and expires_at <= now


def is_exhausted(invitation: ClassInvitationModel) -> bool:
    return invitation.max_uses is not None and invitation.current_uses >= invitation.max_uses


def is_redeemable(invitation: ClassInvitationModel, now: Optional[datetime] = None) -> bool:
    now = now or utc_now()
    return bool(invitation.is_active) and not is_expired(invitation, now) and not is_exhausted(invitation)


def invitation_status(invitation: ClassInvitationModel, now: Optional[datetime] = None) -> str:
    """Display status: ``inactive``, ``expired``, ``exhausted`` or ``active``."""
    now = now or utc_now()
    if not invitation.is_active:
        return "inactive"
    if is_expired(invitation, now):
        return "expired"
    if is_exhausted(invitation):
        return "exhausted"
    return "active"


class InvitationManager:
    """Manages invitation codes and their redemption."""

    def __init__(self, db: Session):
        self.db = db

    def create_invitation(
        self,
        class_id: str,
        created_by: str,
        expires_at: Optional[str] = None,
        max_uses: Optional[int] = None,
    ) -> ClassInvitationModel:
        """Create an active invitation code for a class.

        Args:
            class_id: Target class.
            created_by: Teacher id.
            expires_at: Optional ISO timestamp after which the code stops working.
            max_uses: Optional usage cap.

        Returns:
            The created ClassInvitationModel.

        Raises:
            ClassNotFoundError: If the class does not exist.
            ValidationError: If expires_at or max_uses is invalid.
        """
        if not self.db.query(ClassModel).filter(ClassModel.id == class_id).first():
            raise ClassNotFoundError(class_id)
        if max_uses is not None and max_uses < 1:
            raise ValidationError("Maksimum kullanım sayısı en az 1 olmalıdır")
        try:
            parsed_expiry = parse_timestamp(expires_at)
        except ValueError as exc:
            raise ValidationError("Geçersiz son kullanma tarihi") from exc

        for _ in range(_MAX_CODE_ATTEMPTS):
            model = ClassInvitationModel(
                class_id=class_id,
                invitation_code=generate_code(),
                created_by=created_by,
                expires_at=utc_isoformat(parsed_expiry) if parsed_expiry else None,
                is_active=True,
                max_uses=max_uses,
                current_uses=0,
            )
            self.db.add(model)
            try:
                self.db.commit()
            except IntegrityError:
                # code collision, try another one
                self.db.rollback()
                continue
            self.db.refresh(model)
            logger.info(
                "Created invitation %s for class %s (expires_at=%s, max_uses=%s)",
                model.invitation_code,
                class_id,
                model.expires_at,
                max_uses,
            )
            return model
        raise RuntimeError("Could not generate a unique invitation code")

    def get_invitation(self, invitation_id: str) -> ClassInvitationModel:
        model = (
            self.db.query(ClassInvitationModel)
            .filter(ClassInvitationModel.id == invitation_id)
            .first()
        )
        if not model:
            raise CodeNotFound()
        return model

    def find_by_code(self, code: str) -> Optional[ClassInvitationModel]:
        return (
            self.db.query(ClassInvitationModel)
            .filter(ClassInvitationModel.invitation_code == code.strip().upper())
            .first()
        )

    def list_invitations(self, class_id: str) -> List[ClassInvitationModel]:
        return (
            self.db.query(ClassInvitationModel)
            .filter(ClassInvitationModel.class_id == class_id)
            .order_by(ClassInvitationModel.created_at.desc())
            .all()
        )

    def set_active(self, invitation_id: str, is_active: bool) -> ClassInvitationModel:
        model = self.get_invitation(invitation_id)
        model.is_active = is_active
        self.db.commit()
        self.db.refresh(model)
        logger.info(
            "Invitation %s %s", model.invitation_code, "enabled" if is_active else "disabled"
        )
        return model

    def delete_invitation(self, invitation_id: str) -> None:
        model = self.get_invitation(invitation_id)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted invitation: %s", model.invitation_code)

    def validate(
        self, code: str, student: StudentModel, now: Optional[datetime] = None
    ) -> ClassInvitationModel:
        """Run the redemption checks in order; the first failing one wins.

        Raises:
            CodeNotFound, CodeInactive, CodeExpired, CodeExhausted, AlreadyEnrolled.
        """
        now = now or utc_now()
        invitation = self.find_by_code(code)
        if not invitation:
            raise CodeNotFound()
        if not invitation.is_active:
            raise CodeInactive()
        if is_expired(invitation, now):
            raise CodeExpired()
        if is_exhausted(invitation):
            raise CodeExhausted()
        if student.class_id == invitation.class_id:
            raise AlreadyEnrolled()
        return invitation

    def redeem(
        self, code: str, student_id: str, now: Optional[datetime] = None
    ) -> ClassInvitationModel:
        """Enroll a student into the invitation's class.

        Enrolling the student and counting the use are committed together;
        if either write fails neither is kept.

        Args:
            code: Invitation code as typed by the student.
            student_id: Student redeeming the code.
            now: Current time; defaults to the wall clock.

        Returns:
            The redeemed invitation.

        Raises:
            StudentNotFoundError: If the student does not exist.
            InvitationError: One of its subclasses when a check fails.
        """
        student = self.db.query(StudentModel).filter(StudentModel.id == student_id).first()
        if not student:
            raise StudentNotFoundError(student_id)
        invitation = self.validate(code, student, now)

        try:
            student.class_id = invitation.class_id
            invitation.current_uses = ClassInvitationModel.current_uses + 1
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(invitation)
        logger.info(
            "Student %s joined class %s with code %s (%d use(s))",
            student_id,
            invitation.class_id,
            invitation.invitation_code,
            invitation.current_uses,
        )
        return invitation
