import pytest
from fastapi.testclient import TestClient

from cccd_portal.config import Settings
from cccd_portal.main import create_app
from cccd_portal.models.models import Role
from cccd_portal.services.accounts import create_user

STUDENT_PASSWORD = "secret123"
TEACHER_PASSWORD = "teach123"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        storage_provider="mock",
        bcrypt_rounds=4,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def pwd_context(app):
    return app.state.pwd_context


def make_user(db, pwd_context, *, email, cccd, name, role, password):
    return create_user(
        db,
        email=email,
        password=password,
        cccd=cccd,
        name=name,
        role=role,
        pwd_context=pwd_context,
    )


@pytest.fixture
def student(db, pwd_context):
    return make_user(
        db,
        pwd_context,
        email="student@example.com",
        cccd="001200000001",
        name="Nguyen Van An",
        role=Role.STUDENT,
        password=STUDENT_PASSWORD,
    )


@pytest.fixture
def other_student(db, pwd_context):
    return make_user(
        db,
        pwd_context,
        email="le.thi@example.com",
        cccd="079300000002",
        name="Le Thi Binh",
        role=Role.STUDENT,
        password=STUDENT_PASSWORD,
    )


@pytest.fixture
def teacher(db, pwd_context):
    return make_user(
        db,
        pwd_context,
        email="teacher@example.com",
        cccd="001100000009",
        name="Tran Minh Chau",
        role=Role.TEACHER,
        password=TEACHER_PASSWORD,
    )


def login_headers(client, email, password):
    response = client.post(
        "/login", json={"email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    # Keep tests explicit about which identity they use
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest.fixture
def student_headers(client, student):
    return login_headers(client, student.email, STUDENT_PASSWORD)


@pytest.fixture
def teacher_headers(client, teacher):
    return login_headers(client, teacher.email, TEACHER_PASSWORD)
