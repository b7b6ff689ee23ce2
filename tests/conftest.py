import os

# Keep the application engine off the on-disk database during tests.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ASSIGNMENT_NOTIFY_API_KEY", "")

import uuid
from datetime import datetime

import pytest
import pytz
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import config
from app import app
from core.database import get_db
from core.dependencies import get_mailer
from core.exceptions import MailDeliveryError
from models import (
    AssignmentModel,
    Base,
    ClassModel,
    StudentAssignmentModel,
    StudentModel,
    TeacherModel,
)
from utils.mail import SmtpSettings, TransportProfile
from utils.timeutils import utc_isoformat


class FakeMailer:
    """Records messages instead of talking to an SMTP server."""

    def __init__(self):
        self.settings = SmtpSettings(
            host="smtp.test",
            port=465,
            username="system@example.com",
            password="secret",
            profile=TransportProfile.SSL,
        )
        self.fail_for = set()
        self.attempted = []
        self.sent = []
        self.connection_ok = True

    def send_mail(self, message):
        self.attempted.append(message.to)
        if message.to in self.fail_for:
            raise MailDeliveryError("envelope", f"Recipient address rejected: {message.to}")
        self.sent.append(message)
        return True

    def verify_connection(self):
        return self.connection_ok


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(db, mailer):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


class Factory:
    """Creates rows with sensible defaults."""

    def __init__(self, db):
        self.db = db

    def _save(self, model):
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return model

    def teacher(self, full_name="Ayşe Yılmaz", email="ayse@example.com"):
        return self._save(
            TeacherModel(id=str(uuid.uuid4()), full_name=full_name, email=email)
        )

    def class_(self, teacher, name="9-A"):
        return self._save(ClassModel(name=name, teacher_id=teacher.id))

    def student(self, class_=None, name="Öğrenci", email=None):
        return self._save(
            StudentModel(
                id=str(uuid.uuid4()),
                class_id=class_.id if class_ else None,
                name=name,
                email=email,
            )
        )

    def assignment(self, class_, teacher, title="Ödev", due_date=None):
        if isinstance(due_date, datetime):
            due_date = utc_isoformat(due_date)
        return self._save(
            AssignmentModel(
                title=title,
                class_id=class_.id,
                created_by=teacher.id,
                due_date=due_date,
            )
        )

    def submission(self, student, assignment, status="submitted"):
        return self._save(
            StudentAssignmentModel(
                student_id=student.id,
                assignment_id=assignment.id,
                status=status,
            )
        )


@pytest.fixture
def factory(db):
    return Factory(db)


def auth_headers(user_id, email=None):
    claims = {"sub": user_id}
    if email:
        claims["email"] = email
    token = jwt.encode(claims, config.AUTH_JWT_SECRET, algorithm=config.AUTH_JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


def utc(*args):
    return datetime(*args, tzinfo=pytz.utc)
