import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from dinner_circles.database import get_session
from dinner_circles.main import app
from dinner_circles.models.event import Event
from dinner_circles.models.opt_in import MatchingOptIn
from dinner_circles.models.user import User

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so every session shares one DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. Tables are created and dropped per test (see session_fixture)
# 4. The app's get_session is overridden to hand out the test session
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a fresh test database session"""
    # Import all models to ensure they're registered BEFORE create_all
    from dinner_circles.models.circle import Circle, CircleMember  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client bound to the test session

    The override MUST be set before TestClient() and stay in place for the
    whole test so the app never touches its own engine.
    """

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


# ============================================================================
# Data builders
# ============================================================================


@pytest.fixture
def make_user(session: Session):
    counter = itertools.count(1)

    def _make(name=None, email=None, role="user", **profile) -> User:
        n = next(counter)
        user = User(
            email=email or f"diner{n}@example.com",
            name=name or f"Diner {n}",
            role=role,
            **profile,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user(name="Admin", email="admin@example.com", role="admin")


@pytest.fixture
def make_event(session: Session):
    def _make(title="Supper Club", **fields) -> Event:
        event = Event(title=title, total_spots=24, **fields)
        session.add(event)
        session.commit()
        session.refresh(event)
        return event

    return _make


@pytest.fixture
def add_opt_in(session: Session):
    """Insert opt-ins with strictly increasing created_at so pool order is explicit."""
    base = datetime(2026, 3, 1, 18, 0, tzinfo=timezone.utc)
    counter = itertools.count()

    def _add(event: Event, user: User, partner: User = None, hosting: bool = False) -> MatchingOptIn:
        opt_in = MatchingOptIn(
            event_id=event.id,
            user_id=user.id,
            partner_id=partner.id if partner else None,
            hosting_available=hosting,
            created_at=base + timedelta(minutes=next(counter)),
        )
        session.add(opt_in)
        session.commit()
        session.refresh(opt_in)
        return opt_in

    return _add


@pytest.fixture
def add_couple(make_user, add_opt_in):
    """Create two users and opt both in, linked to each other, back to back."""

    def _add(event: Event, hosting: bool = False, **profile):
        a = make_user(**profile)
        b = make_user()
        add_opt_in(event, a, partner=b, hosting=hosting)
        add_opt_in(event, b, partner=a)
        return a, b

    return _add


@pytest.fixture
def add_singles(make_user, add_opt_in):
    def _add(event: Event, count: int, hosting: bool = False, **profile):
        users = []
        for _ in range(count):
            user = make_user(**profile)
            add_opt_in(event, user, hosting=hosting)
            users.append(user)
        return users

    return _add


@pytest.fixture
def auth_headers():
    """Headers the upstream gateway would forward for a user."""

    def _headers(user: User) -> dict:
        role = getattr(user.role, "value", user.role)
        return {"X-User-Id": str(user.id), "X-User-Role": role}

    return _headers
