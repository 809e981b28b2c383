import os

# Settings are read at import time; provide test values before importing nexus
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from nexus.database import get_db
from nexus.config import settings
# Import all model classes to ensure they're registered with SQLAlchemy
from nexus.models import Base, Organization, OrganizationMembership, User
from nexus.models.role import OrganizationRole
# Import FastAPI app AFTER model imports
from nexus.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(
    user_id: str = "test-user-123", org_id: int | None = None, expired: bool = False
) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        org_id: Optional organization to act on ('org_id' claim)
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": user_id, "exp": exp, "iat": datetime.now(UTC)}
    if org_id is not None:
        payload["org_id"] = org_id

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


def headers_for(user_id: str = "test-user-123", org_id: int | None = None) -> dict:
    return {"Authorization": f"Bearer {create_test_token(user_id=user_id, org_id=org_id)}"}


@pytest.fixture
def mock_jwt_token():
    """Generate valid JWT token"""
    return create_test_token()


@pytest.fixture
def auth_headers(mock_jwt_token):
    """
    Authorization headers for authenticated requests.

    On first use the user gets a personal organization as OWNER.
    """
    return {"Authorization": f"Bearer {mock_jwt_token}"}


@pytest.fixture
def user_a_headers():
    """Authorization headers for user A"""
    return headers_for("user-a")


@pytest.fixture
def user_b_headers():
    """Authorization headers for user B"""
    return headers_for("user-b")


@pytest.fixture
def test_user(db_session):
    user = User(auth_user_id="test-user-123")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def organization(db_session):
    org = Organization(name="Test Business")
    db_session.add(org)
    db_session.commit()
    db_session.refresh(org)
    return org


@pytest.fixture
def owner_membership(db_session, test_user, organization):
    membership = OrganizationMembership(
        org_id=organization.id, user_id=test_user.id, role=OrganizationRole.OWNER
    )
    db_session.add(membership)
    db_session.commit()
    db_session.refresh(membership)
    return membership


def add_member(db_session, organization, auth_user_id: str, role: OrganizationRole) -> User:
    """Create a user with the given role in `organization`."""
    user = User(auth_user_id=auth_user_id)
    db_session.add(user)
    db_session.commit()
    db_session.add(OrganizationMembership(org_id=organization.id, user_id=user.id, role=role))
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def owner_headers(owner_membership, organization):
    return headers_for("test-user-123", org_id=organization.id)


@pytest.fixture
def viewer_headers(db_session, organization, owner_membership):
    add_member(db_session, organization, "viewer-user", OrganizationRole.VIEWER)
    return headers_for("viewer-user", org_id=organization.id)


@pytest.fixture
def member_headers(db_session, organization, owner_membership):
    add_member(db_session, organization, "member-user", OrganizationRole.MEMBER)
    return headers_for("member-user", org_id=organization.id)


@pytest.fixture
def building(client, auth_headers):
    """A 3-unit building in the default user's organization"""
    response = client.post(
        "/api/buildings",
        json={"name": "Sunset Flats", "address": "12 Main Road", "total_units": 3},
        headers=auth_headers,
    )
    assert response.status_code == 201
    return response.json()


def add_tenant(client, headers, building_id: int, **overrides) -> dict:
    payload = {
        "building_id": building_id,
        "first_name": "Thandi",
        "last_name": "Mokoena",
        "email": "thandi@example.com",
        "lease_start_date": "2025-01-01",
        "monthly_rent": 5000.00,
    }
    payload.update(overrides)
    response = client.post("/api/tenants", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def create_product(client, headers, **overrides) -> dict:
    payload = {
        "name": "Widget",
        "sku": "WID-001",
        "category": "Hardware",
        "price": 100.00,
        "cost_price": 60.00,
        "stock_quantity": 50,
    }
    payload.update(overrides)
    response = client.post("/api/products", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def create_customer(client, headers, **overrides) -> dict:
    payload = {"first_name": "Sipho", "last_name": "Dlamini", "email": "sipho@example.com"}
    payload.update(overrides)
    response = client.post("/api/customers", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()
