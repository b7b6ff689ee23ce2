"""Translation of domain exceptions into HTTP errors.

Error bodies always have the shape ``{"success": false, "error": ..., "message"?: ...}``;
the app's exception handler renders the ``detail`` built here.
"""

import re
from typing import Optional

from fastapi import HTTPException, status

from core.exceptions import (
    ClassroomError,
    EntityNotFoundError,
    InvitationError,
    PermissionDeniedError,
    StudentMutedError,
    ValidationError,
)

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)

UNEXPECTED_ERROR_MESSAGE = (
    "İşlem sırasında beklenmeyen bir hata oluştu. Lütfen daha sonra tekrar deneyin."
)


def is_uuid(value: Optional[str]) -> bool:
    return bool(value) and UUID_RE.match(value) is not None


def http_error(
    status_code: int, error: str, message: Optional[str] = None, **extra
) -> HTTPException:
    detail = {"error": error}
    if message:
        detail["message"] = message
    detail.update(extra)
    return HTTPException(status_code=status_code, detail=detail)


def to_http_error(exc: ClassroomError) -> HTTPException:
    """Map a domain exception to the matching HTTP status."""
    if isinstance(exc, EntityNotFoundError):
        return http_error(status.HTTP_404_NOT_FOUND, str(exc))
    if isinstance(exc, InvitationError):
        status_code = (
            status.HTTP_404_NOT_FOUND
            if exc.code == "CodeNotFound"
            else status.HTTP_409_CONFLICT
        )
        return http_error(status_code, str(exc), code=exc.code)
    if isinstance(exc, (PermissionDeniedError, StudentMutedError)):
        return http_error(status.HTTP_403_FORBIDDEN, str(exc))
    if isinstance(exc, ValidationError):
        return http_error(status.HTTP_400_BAD_REQUEST, str(exc))
    return http_error(
        status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), UNEXPECTED_ERROR_MESSAGE
    )
