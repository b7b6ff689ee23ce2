"""Custom exception classes for the classroom tracker.

This module defines application-specific exceptions following Google Python
Style Guide. Messages are user-facing and written in Turkish.
"""


class ClassroomError(Exception):
    """Base exception for all classroom tracker errors."""

    pass


class EntityNotFoundError(ClassroomError):
    """Raised when a referenced entity does not exist."""

    entity = "Kayıt"

    def __init__(self, entity_id: str):
        """Initialize the exception.

        Args:
            entity_id: The ID of the entity that was not found.
        """
        self.entity_id = entity_id
        super().__init__(f"{self.entity} bulunamadı")


class AssignmentNotFoundError(EntityNotFoundError):
    entity = "Ödev"


class TeacherNotFoundError(EntityNotFoundError):
    entity = "Öğretmen"


class StudentNotFoundError(EntityNotFoundError):
    entity = "Öğrenci"


class ClassNotFoundError(EntityNotFoundError):
    entity = "Sınıf"


class PostNotFoundError(EntityNotFoundError):
    entity = "Gönderi"


class CommentNotFoundError(EntityNotFoundError):
    entity = "Yorum"


class SolutionNotFoundError(EntityNotFoundError):
    entity = "Çözüm kaydı"


class InvitationError(ClassroomError):
    """Base exception for invitation redemption failures.

    Attributes:
        code: Stable machine-readable error code.
    """

    code = "InvitationError"
    default_message = "Davet kodu kullanılamıyor"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class CodeNotFound(InvitationError):
    code = "CodeNotFound"
    default_message = "Geçersiz davet kodu"


class CodeInactive(InvitationError):
    code = "CodeInactive"
    default_message = "Bu davet kodu artık aktif değil"


class CodeExpired(InvitationError):
    code = "CodeExpired"
    default_message = "Bu davet kodunun süresi dolmuş"


class CodeExhausted(InvitationError):
    code = "CodeExhausted"
    default_message = "Bu davet kodu maksimum kullanım sayısına ulaşmış"


class AlreadyEnrolled(InvitationError):
    code = "AlreadyEnrolled"
    default_message = "Zaten bu sınıfa kayıtlısınız"


class StudentMutedError(ClassroomError):
    """Raised when a muted student tries to post or comment on the wall."""

    def __init__(self, student_id: str):
        self.student_id = student_id
        super().__init__("Bu sınıfta susturuldunuz, gönderi veya yorum yapamazsınız")


class PermissionDeniedError(ClassroomError):
    """Raised when the acting user may not perform the operation."""

    pass


class MailDeliveryError(ClassroomError):
    """Raised when the SMTP transport fails to deliver a message.

    Attributes:
        category: One of "auth", "socket", "timeout", "envelope", "unknown".
    """

    def __init__(self, category: str, message: str):
        self.category = category
        super().__init__(message)


class ConfigurationError(ClassroomError):
    """Raised when there is a configuration error."""

    pass


class ValidationError(ClassroomError):
    """Raised when data validation fails."""

    pass
