"""Pytest configuration and shared fixtures.

Integration tests run the FastAPI app against a private in-memory SQLite
database; the module catalog and skill pathways are seeded the same way the
app does on startup.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENROLLMENT_STORE"] = "sql"
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["SEED_DEMO_USERS"] = "false"

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from grove_backend.app import app, init_database
from grove_backend.database import get_db_session
from grove_backend.enrollment_module.models import SkillPathway
from grove_backend.rbac_module.models import Role, School, SubscriptionStatus
from grove_backend.rbac_module.security import issue_session_token
from grove_backend.rbac_module.services import create_account

TEST_PASSWORD = "Sup3rSecret!"


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    init_database(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def client(session_factory: sessionmaker) -> Generator[TestClient, None, None]:
    def override_get_db_session():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db_session] = override_get_db_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def school(db_session: Session) -> School:
    school = School(school_name="Maple Grove Preschool", subscription_status=SubscriptionStatus.ACTIVE.value)
    db_session.add(school)
    db_session.commit()
    db_session.refresh(school)
    return school


@pytest.fixture
def pathways(db_session: Session) -> dict[str, SkillPathway]:
    return {p.problem_category: p for p in db_session.query(SkillPathway).all()}


def _account_headers(db: Session, school: School, role: Role, email: str, name: str) -> dict[str, str]:
    user = create_account(db, role=role, email=email, password=TEST_PASSWORD, name=name, school_id=school.id)
    token = issue_session_token(user.id, role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def account_password() -> str:
    return TEST_PASSWORD


@pytest.fixture
def admin_headers(db_session: Session, school: School) -> dict[str, str]:
    return _account_headers(db_session, school, Role.ADMIN, "admin@maplegrove.test", "Alice Admin")


@pytest.fixture
def teacher_headers(db_session: Session, school: School) -> dict[str, str]:
    return _account_headers(db_session, school, Role.TEACHER, "teacher@maplegrove.test", "Tom Teacher")


@pytest.fixture
def parent_headers(db_session: Session, school: School) -> dict[str, str]:
    return _account_headers(db_session, school, Role.PARENT, "parent@maplegrove.test", "Pat Parent")


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: pure logic tests with no database")
    config.addinivalue_line("markers", "integration: API tests against an in-memory SQLite database")
