"""Class wall routes: posts, comments and moderation."""

from typing import List

from fastapi import APIRouter, Depends

from api.errors import to_http_error
from api.routes.auth import get_current_user, require_teacher
from core.dependencies import WallManagerDep
from core.exceptions import ClassroomError
from schemas.user import CurrentUser
from schemas.wall import (
    CreateCommentRequest,
    CreatePostRequest,
    MutedStudent,
    MuteStudentRequest,
    WallComment,
    WallPost,
)

router = APIRouter(prefix="/api/classes/{class_id}/wall", tags=["Wall"])


@router.get("/posts", response_model=List[WallPost], summary="Pano gönderileri")
def list_posts(
    class_id: str,
    wall_manager: WallManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[WallPost]:
    try:
        wall_manager.ensure_member(class_id, current_user.user_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return [WallPost(**post) for post in wall_manager.list_posts(class_id)]


@router.post("/posts", response_model=WallPost, summary="Gönderi paylaş")
def create_post(
    class_id: str,
    req: CreatePostRequest,
    wall_manager: WallManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> WallPost:
    try:
        post = wall_manager.create_post(
            class_id,
            current_user.user_id,
            req.content,
            link=req.link,
            file_url=req.file_url,
        )
    except ClassroomError as exc:
        raise to_http_error(exc)
    return WallPost.model_validate(post)


@router.delete("/posts/{post_id}", summary="Gönderiyi sil")
def delete_post(
    class_id: str,
    post_id: str,
    wall_manager: WallManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> dict:
    try:
        wall_manager.delete_post(post_id, current_user.user_id, class_id=class_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return {"success": True, "message": "Gönderi silindi"}


@router.get(
    "/posts/{post_id}/comments",
    response_model=List[WallComment],
    summary="Gönderi yorumları",
)
def list_comments(
    class_id: str,
    post_id: str,
    wall_manager: WallManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[WallComment]:
    try:
        wall_manager.ensure_member(class_id, current_user.user_id)
        comments = wall_manager.list_comments(post_id, class_id=class_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return [WallComment.model_validate(c) for c in comments]


@router.post("/posts/{post_id}/comments", response_model=WallComment, summary="Yorum yap")
def add_comment(
    class_id: str,
    post_id: str,
    req: CreateCommentRequest,
    wall_manager: WallManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> WallComment:
    try:
        comment = wall_manager.add_comment(
            post_id, current_user.user_id, req.content, class_id=class_id
        )
    except ClassroomError as exc:
        raise to_http_error(exc)
    return WallComment.model_validate(comment)


@router.delete("/comments/{comment_id}", summary="Yorumu sil")
def delete_comment(
    class_id: str,
    comment_id: str,
    wall_manager: WallManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> dict:
    try:
        wall_manager.delete_comment(comment_id, current_user.user_id, class_id=class_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return {"success": True, "message": "Yorum silindi"}


@router.get("/mutes", response_model=List[MutedStudent], summary="Susturulan öğrenciler")
def list_muted(
    class_id: str,
    wall_manager: WallManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> List[MutedStudent]:
    try:
        wall_manager.ensure_member(class_id, current_user.user_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return [MutedStudent.model_validate(m) for m in wall_manager.list_muted(class_id)]


@router.post("/mutes", response_model=MutedStudent, summary="Öğrenciyi sustur")
def mute_student(
    class_id: str,
    req: MuteStudentRequest,
    wall_manager: WallManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> MutedStudent:
    try:
        mute = wall_manager.mute_student(
            class_id, req.student_id, current_user.user_id, days=req.days
        )
    except ClassroomError as exc:
        raise to_http_error(exc)
    return MutedStudent.model_validate(mute)


@router.delete("/mutes/{student_id}", summary="Susturmayı kaldır")
def unmute_student(
    class_id: str,
    student_id: str,
    wall_manager: WallManagerDep,
    current_user: CurrentUser = Depends(require_teacher),
) -> dict:
    try:
        wall_manager.unmute_student(class_id, student_id, current_user.user_id)
    except ClassroomError as exc:
        raise to_http_error(exc)
    return {"success": True, "message": "Susturma kaldırıldı"}
