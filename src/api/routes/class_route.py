"""Class management routes.

Classes, rosters, invitation codes, daily solution counts and the
charts/rankings built from them.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from api.errors import UNEXPECTED_ERROR_MESSAGE, http_error, to_http_error
from api.routes.auth import get_current_user, require_student, require_teacher
from config import DEFAULT_LIST_LIMIT
from core.dependencies import ClassManagerDep, InvitationManagerDep, UserManagerDep
from core.exceptions import ClassroomError
from schemas.class_schema import (
    AddSolutionRequest,
    ChartResponse,
    ClassInfo,
    ClassInvitationInfo,
    CreateClassRequest,
    CreateInvitationRequest,
    JoinClassRequest,
    RankingResponse,
    Solution,
    UpdateInvitationRequest,
    UpdateSolutionRequest,
)
from schemas.user import CurrentUser, Student, Teacher
from utils import charts
from utils.invitation_manager import invitation_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/classes", tags=["Class"])
teachers_router = APIRouter(prefix="/api/teachers", tags=["Teacher"])


def _build_invitation_info(model) -> ClassInvitationInfo:
    info = ClassInvitationInfo.model_validate(model)
    info.status = invitation_status(model)
    return info


def _timeframe_solutions(class_manager, class_id: str, timeframe: str):
    try:
        return charts.filter_by_timeframe(class_manager.list_solutions(class_id), timeframe)
    except ValueError:
        raise http_error(
            status.HTTP_400_BAD_REQUEST,
            "Geçersiz zaman aralığı. 'all', '30days' veya '7days' kullanın.",
        )


@router.get("/list", summary="Sınıfları listele")
def list_classes(
    class_manager: ClassManagerDep,
    teacher_id: Optional[str] = Query(default=None, alias="teacherId"),
    limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=100),
) -> dict:
    try:
        models = class_manager.list_classes(teacher_id=teacher_id, limit=limit)
    except Exception as exc:
        logger.exception("Listing classes failed")
        raise http_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"Sınıf listesi alınamadı: {exc}",
            UNEXPECTED_ERROR_MESSAGE,
        )
    classes = []
    for model in models:
        item = ClassInfo.model_validate(model).model_dump()
        item["teacher"] = Teacher.model_validate(model.teacher).model_dump() if model.teacher else None
        classes.append(item)
    return {
        "success": True,
        "classes": classes,
        "count": len(classes),
        "params": {"teacherId": teacher_id, "limit": limit},
    }


@router.post("", response_model=ClassInfo, summary="Sınıf oluştur")
def create_class(
    req: CreateClassRequest,
    class_manager: ClassManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> ClassInfo:
    name = req.name.strip()
    if not name:
        raise http_error(status.HTTP_400_BAD_REQUEST, "Sınıf adı boş olamaz")
    try:
        model = class_manager.create_class(name, current_user.user_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return ClassInfo.model_validate(model)


@router.delete("/{class_id}", summary="Sınıfı sil")
def delete_class(
    class_id: str,
    class_manager: ClassManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> dict:
    try:
        class_manager.delete_class(class_id, current_user.user_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return {"success": True, "message": "Sınıf silindi"}


@router.get("/{class_id}/students", response_model=List[Student], summary="Sınıf öğrencileri")
def list_students(
    class_id: str,
    class_manager: ClassManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[Student]:
    try:
        class_manager.ensure_member(class_id, current_user.user_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return [Student.model_validate(m) for m in class_manager.list_students(class_id)]


@router.delete("/{class_id}/students/{student_id}", summary="Öğrenciyi sınıftan çıkar")
def remove_student(
    class_id: str,
    student_id: str,
    class_manager: ClassManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> dict:
    try:
        class_manager.remove_student(class_id, student_id, current_user.user_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return {"success": True, "message": "Öğrenci sınıftan çıkarıldı"}


# --- Invitations ---


@router.post(
    "/{class_id}/invitations",
    response_model=ClassInvitationInfo,
    summary="Davet kodu oluştur",
)
def create_invitation(
    class_id: str,
    req: CreateInvitationRequest,
    class_manager: ClassManagerDep,
    invitation_manager: InvitationManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> ClassInvitationInfo:
    try:
        class_manager.get_owned_class(class_id, current_user.user_id)
        model = invitation_manager.create_invitation(
            class_id,
            current_user.user_id,
            expires_at=req.expires_at,
            max_uses=req.max_uses,
        )
    except ClassroomError as exc:
        raise to_http_error(exc)
    return _build_invitation_info(model)


@router.get(
    "/{class_id}/invitations",
    response_model=List[ClassInvitationInfo],
    summary="Davet kodlarını listele",
)
def list_invitations(
    class_id: str,
    class_manager: ClassManagerDep,
    invitation_manager: InvitationManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> List[ClassInvitationInfo]:
    try:
        class_manager.get_owned_class(class_id, current_user.user_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return [_build_invitation_info(m) for m in invitation_manager.list_invitations(class_id)]


@router.patch(
    "/{class_id}/invitations/{invitation_id}",
    response_model=ClassInvitationInfo,
    summary="Davet kodunu etkinleştir / devre dışı bırak",
)
def update_invitation(
    class_id: str,
    invitation_id: str,
    req: UpdateInvitationRequest,
    class_manager: ClassManagerDep,
    invitation_manager: InvitationManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> ClassInvitationInfo:
    try:
        class_manager.get_owned_class(class_id, current_user.user_id)
        invitation = invitation_manager.get_invitation(invitation_id)
        if invitation.class_id != class_id:
            raise http_error(status.HTTP_404_NOT_FOUND, "Davet kodu bulunamadı")
        model = invitation_manager.set_active(invitation_id, req.is_active)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return _build_invitation_info(model)


@router.delete("/{class_id}/invitations/{invitation_id}", summary="Davet kodunu sil")
def delete_invitation(
    class_id: str,
    invitation_id: str,
    class_manager: ClassManagerDep,
    invitation_manager: InvitationManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> dict:
    try:
        class_manager.get_owned_class(class_id, current_user.user_id)
        invitation = invitation_manager.get_invitation(invitation_id)
        if invitation.class_id != class_id:
            raise http_error(status.HTTP_404_NOT_FOUND, "Davet kodu bulunamadı")
        invitation_manager.delete_invitation(invitation_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return {"success": True, "message": "Davet kodu silindi"}


@router.post("/join", summary="Davet koduyla sınıfa katıl")
def join_class(
    req: JoinClassRequest,
    class_manager: ClassManagerDep,
    invitation_manager: InvitationManagerDep,
    current_user: CurrentUser = Depends(require_student),
) -> dict:
    """Join a class using an invitation code.

    Failures carry a ``code`` (CodeNotFound, CodeInactive, CodeExpired,
    CodeExhausted, AlreadyEnrolled) so the client can pick its message.
    """
    if not req.code.strip():
        raise http_error(status.HTTP_400_BAD_REQUEST, "Davet kodu gereklidir")
    try:
        invitation = invitation_manager.redeem(req.code, current_user.user_id)
        class_model = class_manager.get_class(invitation.class_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return {
        "success": True,
        "message": f"{class_model.name} sınıfına katıldınız",
        "class": ClassInfo.model_validate(class_model).model_dump(),
    }


# --- Solutions, charts and rankings ---


@router.post("/{class_id}/solutions", response_model=Solution, summary="Çözülen soru ekle")
def add_solution(
    class_id: str,
    req: AddSolutionRequest,
    class_manager: ClassManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> Solution:
    try:
        model = class_manager.add_solution(
            current_user.user_id, class_id, req.student_id, req.solved_questions
        )
    except ClassroomError as exc:
        raise to_http_error(exc)
    return Solution.model_validate(model)


@router.put(
    "/{class_id}/solutions/{solution_id}",
    response_model=Solution,
    summary="Çözülen soru sayısını güncelle",
)
def update_solution(
    class_id: str,
    solution_id: str,
    req: UpdateSolutionRequest,
    class_manager: ClassManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> Solution:
    try:
        model = class_manager.update_solution(
            current_user.user_id, solution_id, req.solved_questions
        )
    except ClassroomError as exc:
        raise to_http_error(exc)
    if model.class_id != class_id:
        raise http_error(status.HTTP_404_NOT_FOUND, "Çözüm kaydı bulunamadı")
    return Solution.model_validate(model)


@router.get("/{class_id}/solutions", response_model=List[Solution], summary="Çözüm kayıtları")
def list_solutions(
    class_id: str,
    class_manager: ClassManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[Solution]:
    try:
        class_manager.ensure_member(class_id, current_user.user_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return [Solution.model_validate(m) for m in class_manager.list_solutions(class_id)]


@router.get("/{class_id}/chart", response_model=ChartResponse, summary="Grafik verisi")
def class_chart(
    class_id: str,
    class_manager: ClassManagerDep,
    timeframe: str = "all",
    current_user: CurrentUser = Depends(get_current_user),
) -> ChartResponse:
    try:
        class_manager.ensure_member(class_id, current_user.user_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    solutions = _timeframe_solutions(class_manager, class_id, timeframe)
    students = class_manager.list_students(class_id)
    return ChartResponse(rows=charts.to_series(students, solutions))


@router.get("/{class_id}/ranking", response_model=RankingResponse, summary="Öğrenci sıralaması")
def class_ranking(
    class_id: str,
    class_manager: ClassManagerDep,
    timeframe: str = "all",
    current_user: CurrentUser = Depends(get_current_user),
) -> RankingResponse:
    try:
        class_manager.ensure_member(class_id, current_user.user_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    solutions = _timeframe_solutions(class_manager, class_id, timeframe)
    rankings = charts.rank_students(class_manager.list_students(class_id), solutions)
    return RankingResponse(rankings=rankings, weekly_best=charts.weekly_best(rankings))


# --- Teachers ---


@teachers_router.get("/list", summary="Öğretmenleri listele")
def list_teachers(
    user_manager: UserManagerDep,
    limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=100),
) -> dict:
    try:
        models = user_manager.list_teachers(limit=limit)
    except Exception as exc:
        logger.exception("Listing teachers failed")
        raise http_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"Öğretmen listesi alınamadı: {exc}",
            UNEXPECTED_ERROR_MESSAGE,
        )
    teachers = [Teacher.model_validate(m).model_dump() for m in models]
    return {"success": True, "teachers": teachers, "count": len(teachers)}


@teachers_router.get("/me/ranking", summary="Tüm sınıflarda öğrenci sıralaması")
def teacher_ranking(
    class_manager: ClassManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> dict:
    rankings = class_manager.teacher_ranking(current_user.user_id)
    return {"success": True, "rankings": rankings}
