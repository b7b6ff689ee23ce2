from datetime import timedelta

import pytest

from conftest import auth_headers
from models import StudentSolutionModel
from utils.invitation_manager import InvitationManager
from utils.timeutils import today_utc


@pytest.fixture
def classroom(factory):
    teacher = factory.teacher()
    class_ = factory.class_(teacher)
    return teacher, class_


def test_invalid_token_is_rejected(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_unknown_user_is_rejected(client):
    response = client.get("/api/auth/me", headers=auth_headers("nobody"))

    assert response.status_code == 401


def test_me_resolves_role(client, factory):
    teacher = factory.teacher()
    student = factory.student(name="Ali")

    as_teacher = client.get("/api/auth/me", headers=auth_headers(teacher.id))
    as_student = client.get("/api/auth/me", headers=auth_headers(student.id, "ali@example.com"))

    assert as_teacher.json()["role"] == "teacher"
    assert as_student.json()["role"] == "student"
    assert as_student.json()["email"] == "ali@example.com"


def test_teacher_creates_and_lists_classes(client, factory):
    teacher = factory.teacher()

    created = client.post("/api/classes", json={"name": "10-C"}, headers=auth_headers(teacher.id))
    listed = client.get("/api/classes/list", params={"teacherId": teacher.id})

    assert created.status_code == 200
    assert created.json()["teacher_id"] == teacher.id
    body = listed.json()
    assert body["count"] == 1
    assert body["classes"][0]["teacher"]["full_name"] == teacher.full_name


def test_student_cannot_create_class(client, factory):
    student = factory.student()

    response = client.post("/api/classes", json={"name": "X"}, headers=auth_headers(student.id))

    assert response.status_code == 403


def test_join_flow(client, factory, classroom, db):
    teacher, class_ = classroom
    student = factory.student(name="Ali")
    created = client.post(
        f"/api/classes/{class_.id}/invitations",
        json={"maxUses": 1},
        headers=auth_headers(teacher.id),
    )
    code = created.json()["invitation_code"]
    assert created.json()["status"] == "active"

    joined = client.post("/api/classes/join", json={"code": code}, headers=auth_headers(student.id))
    again = client.post("/api/classes/join", json={"code": code}, headers=auth_headers(student.id))

    assert joined.status_code == 200
    assert joined.json()["class"]["id"] == class_.id
    assert again.status_code == 409
    assert again.json()["code"] == "CodeExhausted"


@pytest.mark.parametrize(
    "setup, expected_status, expected_code",
    [
        ("missing", 404, "CodeNotFound"),
        ("inactive", 409, "CodeInactive"),
        ("expired", 409, "CodeExpired"),
        ("enrolled", 409, "AlreadyEnrolled"),
    ],
)
def test_join_errors(client, factory, classroom, db, setup, expected_status, expected_code):
    teacher, class_ = classroom
    student = factory.student(class_ if setup == "enrolled" else None)
    manager = InvitationManager(db)
    expires_at = "2020-01-01T00:00:00Z" if setup == "expired" else None
    invitation = manager.create_invitation(class_.id, teacher.id, expires_at=expires_at)
    if setup == "inactive":
        manager.set_active(invitation.id, False)
    code = "ZZZZZZZZ" if setup == "missing" else invitation.invitation_code

    response = client.post("/api/classes/join", json={"code": code}, headers=auth_headers(student.id))

    assert response.status_code == expected_status
    assert response.json()["code"] == expected_code
    assert response.json()["success"] is False


def test_other_teacher_cannot_manage_invitations(client, factory, classroom):
    _, class_ = classroom
    other = factory.teacher(full_name="Mehmet Kaya", email="mehmet@example.com")

    response = client.get(f"/api/classes/{class_.id}/invitations", headers=auth_headers(other.id))

    assert response.status_code == 403


def test_toggle_invitation(client, factory, classroom, db):
    teacher, class_ = classroom
    invitation = InvitationManager(db).create_invitation(class_.id, teacher.id)

    response = client.patch(
        f"/api/classes/{class_.id}/invitations/{invitation.id}",
        json={"isActive": False},
        headers=auth_headers(teacher.id),
    )

    assert response.status_code == 200
    assert response.json()["status"] == "inactive"


def test_solutions_accumulate_per_day(client, factory, classroom):
    teacher, class_ = classroom
    student = factory.student(class_, "Ali")
    headers = auth_headers(teacher.id)

    client.post(
        f"/api/classes/{class_.id}/solutions",
        json={"studentId": student.id, "solvedQuestions": 5},
        headers=headers,
    )
    second = client.post(
        f"/api/classes/{class_.id}/solutions",
        json={"studentId": student.id, "solvedQuestions": 7},
        headers=headers,
    )

    assert second.json()["solved_questions"] == 12
    listed = client.get(f"/api/classes/{class_.id}/solutions", headers=headers)
    assert len(listed.json()) == 1


def test_ranking_and_chart(client, factory, classroom, db):
    teacher, class_ = classroom
    ali = factory.student(class_, "Ali")
    ayse = factory.student(class_, "Ayşe")
    today = today_utc()
    db.add_all(
        [
            StudentSolutionModel(
                student_id=ali.id, class_id=class_.id, date=today.isoformat(), solved_questions=3
            ),
            StudentSolutionModel(
                student_id=ayse.id,
                class_id=class_.id,
                date=(today - timedelta(days=1)).isoformat(),
                solved_questions=8,
            ),
        ]
    )
    db.commit()

    ranking = client.get(
        f"/api/classes/{class_.id}/ranking", params={"timeframe": "7days"},
        headers=auth_headers(ali.id),
    )
    chart = client.get(f"/api/classes/{class_.id}/chart", headers=auth_headers(teacher.id))
    teacher_ranking = client.get("/api/teachers/me/ranking", headers=auth_headers(teacher.id))

    rankings = ranking.json()["rankings"]
    assert [r["student_name"] for r in rankings] == ["Ayşe", "Ali"]
    assert ranking.json()["weekly_best"]["student_id"] == ayse.id
    assert len(chart.json()["rows"]) == 2
    assert [r["total"] for r in teacher_ranking.json()["rankings"]] == [8, 3]


def test_invalid_timeframe(client, classroom):
    teacher, class_ = classroom

    response = client.get(
        f"/api/classes/{class_.id}/chart",
        params={"timeframe": "year"},
        headers=auth_headers(teacher.id),
    )

    assert response.status_code == 400


def test_outsider_cannot_read_ranking(client, factory, classroom):
    _, class_ = classroom
    outsider = factory.student(name="Yabancı")

    response = client.get(f"/api/classes/{class_.id}/ranking", headers=auth_headers(outsider.id))

    assert response.status_code == 403


def test_wall_endpoints(client, factory, classroom):
    teacher, class_ = classroom
    student = factory.student(class_, "Ali")
    base = f"/api/classes/{class_.id}/wall"

    post = client.post(f"{base}/posts", json={"content": "Merhaba"}, headers=auth_headers(student.id))
    muted = client.post(
        f"{base}/mutes", json={"studentId": student.id, "days": 1}, headers=auth_headers(teacher.id)
    )
    blocked = client.post(f"{base}/posts", json={"content": "Tekrar"}, headers=auth_headers(student.id))
    listed = client.get(f"{base}/posts", headers=auth_headers(teacher.id))

    assert post.status_code == 200
    assert post.json()["author_name"] == "Ali"
    assert muted.status_code == 200
    assert muted.json()["muted_until"] is not None
    assert blocked.status_code == 403
    assert [p["content"] for p in listed.json()] == ["Merhaba"]


def test_teachers_list(client, factory):
    factory.teacher()

    response = client.get("/api/teachers/list")

    assert response.json()["count"] == 1


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_wall_rejects_blank_post(client, factory, classroom):
    _, class_ = classroom
    student = factory.student(class_, "Ali")

    response = client.post(
        f"/api/classes/{class_.id}/wall/posts",
        json={"content": "   "},
        headers=auth_headers(student.id),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "İçerik boş olamaz"


def test_wall_delete_checks_class_in_path(client, factory, classroom):
    teacher, class_ = classroom
    other_class = factory.class_(teacher, name="10-B")
    student = factory.student(class_, "Ali")
    post = client.post(
        f"/api/classes/{class_.id}/wall/posts",
        json={"content": "Soru"},
        headers=auth_headers(student.id),
    ).json()

    wrong = client.delete(
        f"/api/classes/{other_class.id}/wall/posts/{post['id']}",
        headers=auth_headers(teacher.id),
    )
    right = client.delete(
        f"/api/classes/{class_.id}/wall/posts/{post['id']}",
        headers=auth_headers(teacher.id),
    )

    assert wrong.status_code == 404
    assert right.status_code == 200
