"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Must be set before the app (and its settings) are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("OUTBOX_PROCESSOR_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from shared.infrastructure.db import get_db
from rest_api.models import Base, MenuItem, PopupSession, User
from shared.config.constants import Roles
from shared.security.auth import sign_access_token
from shared.security.password import hash_password

# Low bcrypt cost keeps the suite fast
TEST_BCRYPT_ROUNDS = 4
TEST_PASSWORD = "testpass123"


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Users
# =============================================================================


@pytest.fixture
def make_user(db_session):
    """Factory creating a staff user with TEST_PASSWORD."""
    def _make_user(email: str, role: str = Roles.WORKER, name: str | None = None) -> User:
        user = User(
            email=email,
            password_hash=hash_password(TEST_PASSWORD, rounds=TEST_BCRYPT_ROUNDS),
            role=role,
            name=name or email.split("@")[0].title(),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def owner_user(make_user):
    return make_user("owner@example.com", Roles.OWNER, "Olive Owner")


@pytest.fixture
def admin_user(make_user):
    return make_user("admin@example.com", Roles.ADMIN, "Ada Admin")


@pytest.fixture
def worker_user(make_user):
    return make_user("worker@example.com", Roles.WORKER, "Wes Worker")


@pytest.fixture
def other_worker(make_user):
    return make_user("other@example.com", Roles.WORKER, "Otto Other")


def headers_for(user: User) -> dict[str, str]:
    """Bearer headers for a user, signed without going through /login."""
    token = sign_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return headers_for(admin_user)


@pytest.fixture
def worker_headers(worker_user):
    return headers_for(worker_user)


@pytest.fixture
def other_worker_headers(other_worker):
    return headers_for(other_worker)


# =============================================================================
# Sessions and menu
# =============================================================================


@pytest.fixture
def active_session(db_session):
    session = PopupSession(name="Saturday Market", is_active=True)
    db_session.add(session)
    db_session.commit()
    db_session.refresh(session)
    return session


@pytest.fixture
def inactive_session(db_session):
    session = PopupSession(name="Sunday Market", is_active=False)
    db_session.add(session)
    db_session.commit()
    db_session.refresh(session)
    return session


@pytest.fixture
def make_menu_item(db_session):
    """Factory creating a menu item at the end of the display order."""
    counter = {"rank": 0}

    def _make_menu_item(name: str, price_cents: int = 450, is_active: bool = True) -> MenuItem:
        item = MenuItem(
            name=name,
            price_cents=price_cents,
            is_active=is_active,
            sort_order=counter["rank"],
        )
        counter["rank"] += 1
        db_session.add(item)
        db_session.commit()
        db_session.refresh(item)
        return item

    return _make_menu_item


@pytest.fixture
def latte(make_menu_item):
    return make_menu_item("Oat Latte", 550)


@pytest.fixture
def cold_brew(make_menu_item):
    return make_menu_item("Cold Brew", 475)


@pytest.fixture
def retired_item(make_menu_item):
    return make_menu_item("Pumpkin Spice", 600, is_active=False)


@pytest.fixture
def place_order(client):
    """Place an order through the public API and return the JSON body."""
    def _place_order(lines: list[dict], customer_name: str = "Jamie", customer_phone: str | None = None):
        response = client.post(
            "/api/public/orders",
            json={"customer_name": customer_name, "customer_phone": customer_phone, "items": lines},
        )
        assert response.status_code == 201, response.json()
        return response.json()

    return _place_order


@pytest.fixture
def auth_headers_for():
    """Bearer headers for any user object."""
    return headers_for


@pytest.fixture
def session_factory(db_session):
    """Session factory bound to the test database, for code that opens its own sessions."""
    return TestingSessionLocal
