"""Pytest configuration and shared fixtures."""
import os

# Keep the app module's startup init_db off the local database file
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.database import init_db
from app.models.domain import Service, User
from app.models.enums import Role
from app.services.authorization import Identity


@pytest.fixture
def db_session():
    """Create a fresh in-memory database for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)

    TestingSessionLocal = sessionmaker(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()


def _make_user(db_session, email, role, name=None):
    user = User(email=email, name=name, role=role, is_approved=role is not None)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session):
    return _make_user(db_session, "admin@example.com", Role.ADMIN, name="Asha Admin")


@pytest.fixture
def member_user(db_session):
    """An approved, non-admin user."""
    return _make_user(db_session, "ops@example.com", Role.OPERATIONS, name="Omar Ops")


@pytest.fixture
def admin_identity(admin_user):
    return Identity(subject="sub-admin", email=admin_user.email)


@pytest.fixture
def member_identity(member_user):
    return Identity(subject="sub-ops", email=member_user.email)


@pytest.fixture
def sample_service(db_session, member_user):
    """A protected entity owned by the member user."""
    service = Service(
        name="Laser Cutting Co",
        service_type="laser_cutting",
        contact_person="Ravi",
        created_by=member_user.id
    )
    db_session.add(service)
    db_session.commit()
    db_session.refresh(service)
    return service
