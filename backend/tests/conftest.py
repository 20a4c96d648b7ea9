"""
Shared fixtures. Every test gets a fresh SQLite database (tables dropped and recreated);
DATABASE_URL is pointed at a temp file before proximos is imported.
Requests authenticate with real JWTs (Authorization: Bearer) built for the fixture users.
"""
import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone

import pytest

_TMP_DIR = tempfile.mkdtemp(prefix="proximos-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ.setdefault("ENV", "test")

from fastapi.testclient import TestClient  # noqa: E402

from proximos.database import Base, SessionLocal, engine, import_models  # noqa: E402
from proximos.main import app  # noqa: E402
from proximos.models.user import User, UserRole  # noqa: E402
from proximos.services.auth import create_access_token  # noqa: E402
from proximos.services.users import create_user  # noqa: E402


def reset_schema():
    """Drop and recreate every table. Foreign keys are off while dropping: DROP TABLE on SQLite
    deletes the rows first, and the RESTRICT on topics.parent_id rejects that when child topics exist."""
    import_models()
    with engine.connect().execution_options(isolation_level="AUTOCOMMIT") as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        try:
            Base.metadata.drop_all(bind=conn)
        finally:
            conn.exec_driver_sql("PRAGMA foreign_keys=ON")
    Base.metadata.create_all(bind=engine)


@pytest.fixture(autouse=True)
def fresh_database():
    reset_schema()
    yield
    reset_schema()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    def _make(role: UserRole = UserRole.REGULAR, name: str = "Test User") -> User:
        email = f"user-{uuid.uuid4().hex[:8]}@tests.example.com"
        return create_user(db, name, email, "testpass123", role=role)
    return _make


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN, "Admin")


@pytest.fixture
def student(make_user):
    return make_user(UserRole.REGULAR, "Student")


def auth_headers(user: User) -> dict:
    token = create_access_token(user)
    return {"Authorization": f"Bearer {token}"}


def in_days(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


@pytest.fixture
def as_admin(admin):
    return auth_headers(admin)


@pytest.fixture
def as_student(student):
    return auth_headers(student)


# ---------------------------------------------------------------------------
# Content builders (through the API, as an admin would)
# ---------------------------------------------------------------------------


def create_topic(client, headers, name, parent_id=None, description=None) -> dict:
    body = {"name": name}
    if parent_id is not None:
        body["parent_id"] = parent_id
    if description is not None:
        body["description"] = description
    r = client.post("/topics", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def create_closed_question(client, headers, statement="2 + 2 = ?", correct=1, topic_ids=None) -> dict:
    options = [{"text": text, "is_correct": i == correct} for i, text in enumerate(["3", "4", "5"])]
    r = client.post(
        "/questions",
        json={"type": "closed_ended", "statement": statement, "options": options, "topic_ids": topic_ids or []},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


def create_open_question(client, headers, statement="Explain recursion.", passing_score=60) -> dict:
    r = client.post(
        "/questions",
        json={
            "type": "open_ended",
            "statement": statement,
            "expected_answer_text": "A function calling itself on a smaller input.",
            "passing_score": passing_score,
        },
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


def create_handout(client, headers, title="Handout 1", topic_ids=None) -> dict:
    r = client.post(
        "/handouts",
        json={"title": title, "file_url": "https://files.example.com/h1.pdf", "topic_ids": topic_ids or []},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


def create_video_lesson(client, headers, title="Lesson 1", topic_ids=None) -> dict:
    r = client.post(
        "/video-lessons",
        json={
            "title": title,
            "video_url": "https://videos.example.com/1",
            "duration_minutes": 12,
            "topic_ids": topic_ids or [],
        },
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


def create_group(client, headers, name="Turma A") -> dict:
    r = client.post("/groups", json={"name": name}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def create_activity(client, headers, group_id, title="Semana 1", days=7) -> dict:
    r = client.post(
        f"/groups/{group_id}/activities", json={"title": title, "due_date": in_days(days)}, headers=headers
    )
    assert r.status_code == 201, r.text
    return r.json()
