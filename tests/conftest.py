# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import os
from datetime import datetime, timezone

# Must be set before core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_AUTO_CREATE", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine
from typing import Generator, Optional

import models  # noqa: F401  (registers tables)
from main import create_app
from core.errors import IdentityProviderError
from core.identity_provider import IdentityProviderClient, get_identity_provider
from core.rate_limiter import reset_rate_limits
from database import get_session
from dependencies.auth import CurrentUser, get_current_user
from models.enums import EventStatus, EventType, PropertyType, RequestStatus, Role
from models.event import Event
from models.family import Family
from models.join_request import JoinRequest
from models.property import Property
from models.user import User


# -----------------------------------------------------
# Fake identity provider
# -----------------------------------------------------
class FakeIdentityProvider(IdentityProviderClient):
    """In-memory identity provider. Add an operation name to `fail_on` to make it raise."""

    def __init__(self):
        self.identities = {}
        self.passwords = {}
        self.sign_in_links = []
        self.fail_on = set()

    def _check(self, operation: str):
        if operation in self.fail_on:
            raise IdentityProviderError(f"{operation} unavailable")

    def find_user(self, email: str) -> Optional[str]:
        self._check("find_user")
        return self.identities.get(email)

    def create_user(self, email: str, password: str, metadata: dict = None) -> str:
        self._check("create_user")
        identity_id = self.identities.setdefault(email, f"auth-{len(self.identities) + 1}")
        self.passwords[email] = password
        return identity_id

    def issue_sign_in_link(self, email, redirect_to=None, create_identity=False) -> None:
        self._check("issue_sign_in_link")
        if create_identity:
            self.identities.setdefault(email, f"auth-{len(self.identities) + 1}")
        self.sign_in_links.append({"email": email, "redirect_to": redirect_to, "create_identity": create_identity})

    def update_email(self, email: str, new_email: str) -> bool:
        self._check("update_email")
        if email not in self.identities:
            return False
        self.identities[new_email] = self.identities.pop(email)
        return True

    def delete_user(self, email: str) -> bool:
        self._check("delete_user")
        return self.identities.pop(email, None) is not None


# -----------------------------------------------------
# Database
# -----------------------------------------------------
@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


# -----------------------------------------------------
# Record factories
# -----------------------------------------------------
@pytest.fixture
def make_user(session):
    def factory(email="admin@example.com", role=Role.ADMIN, name="Test User") -> User:
        user = User(email=email, name=name, password="not-a-real-hash", role=role)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return factory


@pytest.fixture
def make_join_request(session):
    def factory(
        email="applicant@example.com",
        name="Applicant Family",
        role=Role.TENANT,
        message=None,
        family_size=None,
        status=RequestStatus.PENDING,
    ) -> JoinRequest:
        join_request = JoinRequest(
            email=email,
            name=name,
            role=role,
            message=message,
            family_size=family_size,
            status=status,
        )
        session.add(join_request)
        session.commit()
        session.refresh(join_request)
        return join_request
    return factory


@pytest.fixture
def make_family(session):
    def factory(name="Family", size=2, credit_score=0, status=None) -> Family:
        family = Family(name=name, size=size, credit_score=credit_score)
        if status is not None:
            family.status = status
        session.add(family)
        session.commit()
        session.refresh(family)
        return family
    return factory


@pytest.fixture
def make_property(session):
    def factory(label="Maple Court", type=PropertyType.BUILDING, parent_id=None, **fields) -> Property:
        prop = Property(label=label, type=type, parent_id=parent_id, **fields)
        session.add(prop)
        session.commit()
        session.refresh(prop)
        return prop
    return factory


@pytest.fixture
def make_event(session):
    def factory(resource_id, label="Move in", type=EventType.MOVE_IN, status=EventStatus.PENDING) -> Event:
        event = Event(
            label=label,
            type=type,
            status=status,
            resource_id=resource_id,
            start_date=datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc),
        )
        session.add(event)
        session.commit()
        session.refresh(event)
        return event
    return factory


# -----------------------------------------------------
# Application
# -----------------------------------------------------
@pytest.fixture(scope="function")
def app(session, identity_provider):
    """Test FastAPI app bound to the per-test session and fake identity provider."""
    app = create_app()
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    yield app
    app.dependency_overrides = {}


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login_as(app, make_user):
    """Create an application user with `role` and authenticate every request as them."""
    def login(role=Role.ADMIN, email=None) -> CurrentUser:
        user = make_user(email=email or f"{role.value.lower()}@example.com", role=role)
        current = CurrentUser(
            id=user.id,
            auth_user_id=f"auth-{user.id}",
            email=user.email,
            role=user.role,
            name=user.name,
        )
        app.dependency_overrides[get_current_user] = lambda: current
        return current
    return login


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Reset rate limiter before each test."""
    reset_rate_limits()
    yield
    reset_rate_limits()
