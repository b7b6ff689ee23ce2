import uuid
from datetime import timedelta

import pytest

from api.routes import assignments as assignments_route
from conftest import auth_headers
from utils.timeutils import start_of_day, utc_now


@pytest.fixture
def classroom(factory):
    teacher = factory.teacher()
    class_ = factory.class_(teacher)
    return teacher, class_


def test_create_requires_fields(client):
    response = client.post("/api/assignments/create", json={"title": "Ödev"})

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Başlık, sınıf ID ve öğretmen ID parametreleri gereklidir",
    }


def test_create_rejects_malformed_ids(client):
    response = client.post(
        "/api/assignments/create",
        json={"title": "Ödev", "classId": "abc", "createdBy": "def"},
    )

    assert response.status_code == 400
    assert "UUID" in response.json()["error"]


def test_create_unknown_class(client, classroom):
    teacher, _ = classroom

    response = client.post(
        "/api/assignments/create",
        json={"title": "Ödev", "classId": str(uuid.uuid4()), "createdBy": teacher.id},
    )

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Sınıf bulunamadı"}


def test_create_assignment(client, classroom):
    teacher, class_ = classroom

    response = client.post(
        "/api/assignments/create",
        json={
            "title": "Kesirler",
            "classId": class_.id,
            "createdBy": teacher.id,
            "description": "Sayfa 12",
            "dueDate": "2024-03-10T12:00:00Z",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["assignment"]["title"] == "Kesirler"
    assert body["assignment"]["due_date"] == "2024-03-10T12:00:00.000000+00:00"


def test_malformed_body_is_a_400(client):
    response = client.post(
        "/api/assignments/create",
        content="not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_notify_reports_partial_failure(client, factory, classroom, mailer):
    teacher, class_ = classroom
    factory.student(class_, "A", "a@example.com")
    factory.student(class_, "B", "b@example.com")
    factory.student(class_, "C", None)
    assignment = factory.assignment(class_, teacher)
    mailer.fail_for = {"b@example.com"}

    response = client.post("/api/assignments/notify", json={"assignmentId": assignment.id})

    assert response.status_code == 200
    body = response.json()
    assert body["results"] == {"total": 3, "success": 1, "failed": 1, "skipped": 1}
    assert body["skippedStudents"] == ["C (e-posta adresi yok)"]
    assert body["failures"][0]["name"] == "B"


def test_notify_accepts_query_parameter(client, factory, classroom, mailer):
    teacher, class_ = classroom
    factory.student(class_, "A", "a@example.com")
    assignment = factory.assignment(class_, teacher)

    response = client.post(f"/api/assignments/notify?assignmentId={assignment.id}")

    assert response.status_code == 200
    assert response.json()["results"]["success"] == 1
    assert mailer.sent[0].subject == f"Yeni Ödev: {assignment.title}"


def test_notify_validation(client):
    missing = client.post("/api/assignments/notify", json={})
    malformed = client.post("/api/assignments/notify", json={"assignmentId": "123"})
    unknown = client.post("/api/assignments/notify", json={"assignmentId": str(uuid.uuid4())})

    assert missing.status_code == 400
    assert malformed.status_code == 400
    assert unknown.status_code == 404
    assert unknown.json()["error"] == "Ödev bulunamadı"


def test_notify_empty_class(client, factory, classroom):
    teacher, class_ = classroom
    assignment = factory.assignment(class_, teacher)

    response = client.post("/api/assignments/notify", json={"assignmentId": assignment.id})

    assert response.status_code == 200
    assert response.json()["results"] == {"total": 0, "success": 0, "failed": 0, "skipped": 0}


def test_notify_overdue(client, factory, classroom, mailer):
    teacher, class_ = classroom
    factory.student(class_, "A", "a@example.com")
    yesterday = start_of_day(utc_now()) - timedelta(hours=12)
    factory.assignment(class_, teacher, due_date=yesterday)
    factory.assignment(class_, teacher, title="Gelecek", due_date=utc_now() + timedelta(days=2))

    response = client.post("/api/assignments/notify-overdue")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["summary"]["totalAssignments"] == 1
    assert body["summary"]["totalEmailReminded"] == 1
    assert mailer.attempted == ["a@example.com"]


def test_notify_overdue_lookback(client, factory, classroom):
    teacher, class_ = classroom
    factory.student(class_, "A", "a@example.com")
    factory.assignment(class_, teacher, due_date=start_of_day(utc_now()) - timedelta(days=3))

    default = client.post("/api/assignments/notify-overdue")
    catch_up = client.post("/api/assignments/notify-overdue?lookbackDays=4")

    assert default.json()["summary"]["totalAssignments"] == 0
    assert catch_up.json()["summary"]["totalAssignments"] == 1


def test_notify_overdue_api_key(client, monkeypatch):
    monkeypatch.setattr(assignments_route, "ASSIGNMENT_NOTIFY_API_KEY", "s3cret")

    rejected = client.post("/api/assignments/notify-overdue", headers={"x-api-key": "wrong"})
    accepted = client.post("/api/assignments/notify-overdue", headers={"x-api-key": "s3cret"})

    assert rejected.status_code == 401
    assert rejected.json() == {"success": False, "error": "Yetkisiz erişim"}
    assert accepted.status_code == 200


def test_submit_notification(client, factory, classroom, mailer):
    teacher, class_ = classroom
    student = factory.student(class_, "Ali", "ali@example.com")
    assignment = factory.assignment(class_, teacher, title="Kesirler")

    response = client.post(
        "/api/assignments/submit-notification",
        json={"studentId": student.id, "assignmentId": assignment.id},
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Ödev teslimi kaydedildi ve Ayşe Yılmaz öğretmene bildirim gönderildi.",
    }
    (message,) = mailer.sent
    assert message.to == teacher.email
    assert message.subject == "Ödev Teslimi: Kesirler"
    assert "system@example.com" in message.sender


def test_submit_notification_mail_failure_is_still_success(client, factory, classroom, mailer):
    teacher, class_ = classroom
    student = factory.student(class_, "Ali")
    assignment = factory.assignment(class_, teacher)
    mailer.fail_for = {teacher.email}

    response = client.post(
        "/api/assignments/submit-notification",
        json={"studentId": student.id, "assignmentId": assignment.id},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Ödev teslimi kaydedildi ancak öğretmene bildirim gönderilemedi."
    assert "error" in body


def test_submit_notification_unknown_student(client, factory, classroom):
    teacher, class_ = classroom
    assignment = factory.assignment(class_, teacher)

    response = client.post(
        "/api/assignments/submit-notification",
        json={"studentId": str(uuid.uuid4()), "assignmentId": assignment.id},
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Öğrenci bulunamadı"


def test_create_test_assignment(client, factory, classroom, mailer):
    teacher, class_ = classroom
    factory.student(class_, "A", "a@example.com")

    response = client.get(
        "/api/assignments/create-test",
        params={"classId": class_.id, "teacherId": teacher.id, "notify": "true"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["assignment"]["due_date"] > body["assignment"]["created_at"]
    assert body["notifyResult"]["results"]["success"] == 1
    assert len(mailer.sent) == 1


def test_create_test_requires_ids(client):
    response = client.get("/api/assignments/create-test")

    assert response.status_code == 400
    assert response.json()["error"] == "Sınıf ID'si gereklidir"


def test_list_assignments(client, factory, classroom):
    teacher, class_ = classroom
    factory.assignment(class_, teacher, title="Bir")
    factory.assignment(class_, teacher, title="İki")

    response = client.get("/api/assignments/list", params={"classId": class_.id, "limit": 1})

    body = response.json()
    assert body["success"] is True
    assert body["count"] == 1


def test_student_submits_and_teacher_is_notified(client, factory, classroom, mailer):
    teacher, class_ = classroom
    student = factory.student(class_, "Ali")
    assignment = factory.assignment(class_, teacher)

    response = client.post(
        "/api/assignments/submit",
        json={"assignmentId": assignment.id, "photoUrl": "https://cdn.example.com/1.jpg"},
        headers=auth_headers(student.id),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["submission"]["status"] == "submitted"
    assert body["notificationSent"] is True
    assert mailer.sent[0].to == teacher.email


def test_submit_requires_student_token(client, factory, classroom):
    teacher, class_ = classroom
    assignment = factory.assignment(class_, teacher)

    anonymous = client.post("/api/assignments/submit", json={"assignmentId": assignment.id})
    as_teacher = client.post(
        "/api/assignments/submit",
        json={"assignmentId": assignment.id},
        headers=auth_headers(teacher.id),
    )

    assert anonymous.status_code == 401
    assert as_teacher.status_code == 403


def test_test_mail(client, mailer):
    response = client.get("/api/assignments/test-mail", params={"to": "me@example.com"})

    assert response.status_code == 200
    assert response.json()["details"]["profile"] == "ssl"
    assert mailer.sent[0].to == "me@example.com"


def test_test_mail_connection_failure(client, mailer):
    mailer.connection_ok = False

    response = client.get("/api/assignments/test-mail")

    assert response.status_code == 500
    assert response.json()["error"] == "SMTP sunucusu ile bağlantı kurulamadı"


@pytest.mark.parametrize(
    "class_id, teacher_id",
    [("abc", None), (None, "def"), ("abc", "def")],
)
def test_create_test_rejects_malformed_ids(client, classroom, class_id, teacher_id):
    teacher, class_ = classroom

    response = client.get(
        "/api/assignments/create-test",
        params={"classId": class_id or class_.id, "teacherId": teacher_id or teacher.id},
    )

    assert response.status_code == 400
    assert "UUID" in response.json()["error"]
