"""Assignment routes.

Creation, notification and the overdue reminder job. These endpoints are
called by the web client right after it writes an assignment and by an
external scheduler, so most of them are not behind user authentication.
"""

import logging
from datetime import timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query, status

from api.errors import UNEXPECTED_ERROR_MESSAGE, http_error, is_uuid, to_http_error
from api.routes.auth import require_student, require_teacher
from config import ASSIGNMENT_NOTIFY_API_KEY, DEFAULT_LIST_LIMIT
from core.dependencies import (
    AssignmentManagerDep,
    MailerDep,
    NotificationServiceDep,
    OverdueScannerDep,
)
from core.exceptions import ClassroomError
from schemas.assignment import (
    Assignment,
    CreateAssignmentRequest,
    GradeSubmissionRequest,
    NotifyAssignmentRequest,
    Submission,
    SubmitAssignmentRequest,
    SubmitNotificationRequest,
)
from schemas.user import CurrentUser
from utils.mail import MailMessage
from utils.timeutils import utc_isoformat, utc_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assignments", tags=["Assignments"])


def _notify_response(result) -> dict:
    counts = {"total": result.total, **result.as_counts()}
    if result.total == 0:
        message = "Ödev kaydedildi ancak sınıfta öğrenci bulunmadığı için bildirim gönderilmedi."
    elif result.success == 0 and result.failed_count == 0:
        message = (
            "Ödev kaydedildi ancak öğrencilerin e-posta adresleri olmadığı için "
            "bildirim gönderilemedi."
        )
    elif result.success > 0:
        message = f"Ödev kaydedildi ve {result.success} öğrenciye bildirim gönderildi."
    else:
        message = "Ödev kaydedildi ancak bildirim gönderilemedi."

    body = {"success": True, "message": message, "results": counts}
    if result.skipped:
        body["skippedStudents"] = [
            f"{student.name} (e-posta adresi yok)" for student in result.skipped
        ]
    if result.failed:
        body["failures"] = result.failure_details()
    return body


@router.post("/create", summary="Ödev oluştur")
def create_assignment(
    req: CreateAssignmentRequest,
    assignment_manager: AssignmentManagerDep,
) -> dict:
    if not req.title or not req.class_id or not req.created_by:
        raise http_error(
            status.HTTP_400_BAD_REQUEST,
            "Başlık, sınıf ID ve öğretmen ID parametreleri gereklidir",
        )
    if not is_uuid(req.class_id) or not is_uuid(req.created_by):
        raise http_error(
            status.HTTP_400_BAD_REQUEST,
            "Geçersiz ID formatı. Sınıf ID ve öğretmen ID, UUID formatında olmalıdır.",
        )
    try:
        model = assignment_manager.create_assignment(
            title=req.title,
            class_id=req.class_id,
            created_by=req.created_by,
            description=req.description,
            due_date=req.due_date,
        )
    except ClassroomError as exc:
        raise to_http_error(exc)
    except Exception as exc:
        logger.exception("Assignment creation failed")
        raise http_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"Ödev oluşturulamadı: {exc}",
            UNEXPECTED_ERROR_MESSAGE,
        )
    return {
        "success": True,
        "message": "Ödev başarıyla oluşturuldu",
        "assignment": Assignment.model_validate(model).model_dump(),
    }


@router.post("/notify", summary="Yeni ödev bildirimi gönder")
def notify_assignment(
    notification_service: NotificationServiceDep,
    req: Optional[NotifyAssignmentRequest] = None,
    assignment_id_param: Optional[str] = Query(default=None, alias="assignmentId"),
) -> dict:
    """Email every student of the class about a new assignment.

    The id may come from the body or the ``assignmentId`` query parameter.
    Individual send failures are reported in the result, not as an error.
    """
    assignment_id = (req.assignment_id if req else None) or assignment_id_param
    if not assignment_id:
        raise http_error(status.HTTP_400_BAD_REQUEST, "Ödev ID'si gereklidir")
    if not is_uuid(assignment_id):
        raise http_error(
            status.HTTP_400_BAD_REQUEST,
            "Geçersiz Ödev ID formatı. UUID formatında bir ID gönderilmelidir.",
        )
    try:
        result = notification_service.notify_assignment_created(assignment_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    except Exception as exc:
        logger.exception("Assignment notification failed")
        raise http_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"Ödev bildirimleri işlenemedi: {exc}",
            UNEXPECTED_ERROR_MESSAGE,
        )
    return _notify_response(result)


@router.post("/notify-overdue", summary="Gecikmiş ödev hatırlatmaları")
def notify_overdue(
    scanner: OverdueScannerDep,
    x_api_key: Optional[str] = Header(default=None),
    lookback_days: Optional[int] = Query(default=None, alias="lookbackDays", ge=1),
) -> dict:
    """Remind non-submitters of assignments that went overdue.

    Meant for a daily scheduler. When ``ASSIGNMENT_NOTIFY_API_KEY`` is set the
    caller must send it in ``x-api-key``.
    """
    if ASSIGNMENT_NOTIFY_API_KEY and x_api_key != ASSIGNMENT_NOTIFY_API_KEY:
        logger.error("Overdue job called with an invalid API key")
        raise http_error(status.HTTP_401_UNAUTHORIZED, "Yetkisiz erişim")
    if lookback_days is not None:
        scanner.lookback_days = lookback_days

    try:
        summary = scanner.run()
    except Exception as exc:
        logger.exception("Overdue scan failed")
        raise http_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"Hatırlatma bildirimleri gönderilemedi: {exc}",
            UNEXPECTED_ERROR_MESSAGE,
        )

    if summary.total_assignments == 0:
        message = "Son teslim tarihi geçmiş ödev bulunamadı"
    else:
        message = "Son teslim tarihi geçmiş ödevler için bildirimler tamamlandı"
    return {"success": True, "message": message, **summary.as_dict()}


@router.post("/submit-notification", summary="Ödev teslim bildirimi")
def submit_notification(
    req: SubmitNotificationRequest,
    notification_service: NotificationServiceDep,
) -> dict:
    if not req.student_id or not req.assignment_id:
        raise http_error(
            status.HTTP_400_BAD_REQUEST,
            "Öğrenci ID ve Ödev ID parametreleri gereklidir",
        )
    if not is_uuid(req.assignment_id) or not is_uuid(req.student_id):
        raise http_error(
            status.HTTP_400_BAD_REQUEST,
            "Geçersiz ID formatı. Öğrenci ID ve Ödev ID, UUID formatında olmalıdır.",
        )
    try:
        receipt = notification_service.notify_submission(req.student_id, req.assignment_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    except Exception as exc:
        logger.exception("Submission notification failed")
        raise http_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"Bildirim gönderilemedi: {exc}",
            UNEXPECTED_ERROR_MESSAGE,
        )
    # The submission itself is already stored, so a mail failure is still a success.
    body = {"success": True, "message": receipt.message}
    if receipt.error:
        body["error"] = receipt.error
    return body


@router.get("/create-test", summary="Test ödevi oluştur")
def create_test_assignment(
    assignment_manager: AssignmentManagerDep,
    notification_service: NotificationServiceDep,
    class_id: Optional[str] = Query(default=None, alias="classId"),
    teacher_id: Optional[str] = Query(default=None, alias="teacherId"),
    title: Optional[str] = None,
    notify: bool = False,
) -> dict:
    """Debugging helper: create a sample assignment due in a week."""
    if not class_id:
        raise http_error(status.HTTP_400_BAD_REQUEST, "Sınıf ID'si gereklidir")
    if not teacher_id:
        raise http_error(status.HTTP_400_BAD_REQUEST, "Öğretmen ID'si gereklidir")
    if not is_uuid(class_id) or not is_uuid(teacher_id):
        raise http_error(
            status.HTTP_400_BAD_REQUEST,
            "Geçersiz ID formatı. Sınıf ID ve öğretmen ID, UUID formatında olmalıdır.",
        )

    now = utc_now()
    try:
        model = assignment_manager.create_assignment(
            title=title or f"Test Ödevi - {now:%d.%m.%Y %H:%M}",
            class_id=class_id,
            created_by=teacher_id,
            description=f"Bu otomatik oluşturulmuş bir test ödevidir. ({now:%d.%m.%Y %H:%M})",
            due_date=utc_isoformat(now + timedelta(days=7)),
        )
    except ClassroomError as exc:
        raise to_http_error(exc)
    logger.info("Created test assignment %s", model.id)

    notify_result = None
    if notify:
        try:
            notify_result = _notify_response(
                notification_service.notify_assignment_created(model.id)
            )
        except Exception as exc:
            logger.error("Test notification failed: %s", exc)
            notify_result = {"success": False, "error": str(exc)}

    return {
        "success": True,
        "message": "Test ödevi başarıyla oluşturuldu",
        "assignment": Assignment.model_validate(model).model_dump(),
        "notifyResult": notify_result,
    }


@router.get("/list", summary="Ödevleri listele")
def list_assignments(
    assignment_manager: AssignmentManagerDep,
    class_id: Optional[str] = Query(default=None, alias="classId"),
    limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=100),
) -> dict:
    models = assignment_manager.list_assignments(class_id=class_id, limit=limit)
    assignments = [Assignment.model_validate(m).model_dump() for m in models]
    return {"success": True, "count": len(assignments), "assignments": assignments}


@router.post("/submit", summary="Ödev teslim et")
def submit_assignment(
    req: SubmitAssignmentRequest,
    assignment_manager: AssignmentManagerDep,
    notification_service: NotificationServiceDep,
    current_user: CurrentUser = Depends(require_student),
) -> dict:
    """Record the student's submission and notify the teacher."""
    try:
        model = assignment_manager.submit_assignment(
            current_user.user_id, req.assignment_id, req.photo_url
        )
        receipt = notification_service.notify_submission(
            current_user.user_id, req.assignment_id
        )
    except ClassroomError as exc:
        raise to_http_error(exc)
    return {
        "success": True,
        "message": receipt.message,
        "submission": Submission.model_validate(model).model_dump(),
        "notificationSent": receipt.sent,
    }


@router.get(
    "/{assignment_id}/submissions",
    response_model=List[Submission],
    summary="Ödev teslimlerini listele",
)
def list_submissions(
    assignment_id: str,
    assignment_manager: AssignmentManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> List[Submission]:
    try:
        assignment = assignment_manager.get_assignment(assignment_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    if assignment.created_by != current_user.user_id:
        raise http_error(status.HTTP_403_FORBIDDEN, "Bu ödev üzerinde yetkiniz yok")
    return [Submission.model_validate(m) for m in assignment_manager.list_submissions(assignment_id)]


@router.post(
    "/submissions/{submission_id}/grade",
    response_model=Submission,
    summary="Teslimi notlandır",
)
def grade_submission(
    submission_id: str,
    req: GradeSubmissionRequest,
    assignment_manager: AssignmentManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> Submission:
    try:
        model = assignment_manager.grade_submission(
            submission_id, current_user.user_id, req.grade, req.teacher_comment
        )
    except ClassroomError as exc:
        raise to_http_error(exc)
    return Submission.model_validate(model)


@router.get("/test-mail", summary="SMTP test e-postası")
def test_mail(
    mailer: MailerDep,
    to: Optional[str] = None,
    subject: str = "Test E-postası",
) -> dict:
    """Send a test message to check the SMTP configuration."""
    settings = mailer.settings
    if not settings.has_credentials:
        raise http_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "SMTP kullanıcı adı veya şifresi tanımlanmamış",
            "Lütfen .env dosyasında SMTP_USER ve SMTP_PASS değerlerini tanımlayın",
        )
    if not mailer.verify_connection():
        raise http_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "SMTP sunucusu ile bağlantı kurulamadı",
        )
    recipient = to or settings.username
    message = MailMessage(
        sender=settings.system_sender,
        to=recipient,
        subject=subject,
        text="Bu bir test e-postasıdır. SMTP ayarlarınız doğru çalışıyor.",
        html="<p>Bu bir test e-postasıdır. SMTP ayarlarınız doğru çalışıyor.</p>",
    )
    try:
        mailer.send_mail(message)
    except ClassroomError as exc:
        raise http_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Test e-postası gönderilemedi",
            str(exc),
        )
    return {
        "success": True,
        "message": "Test e-postası başarıyla gönderildi",
        "details": {
            "to": recipient,
            "host": settings.host,
            "port": settings.port,
            "profile": settings.profile.value,
        },
    }
