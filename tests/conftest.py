# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["RBAC_ENFORCEMENT"] = "enforce"

from contract_manager.config import settings
from contract_manager.database import get_db
from contract_manager.main import app
from contract_manager.models import Company, User
from contract_manager.models.base import Base
from contract_manager.rbac.roles import PLATFORM_ADMINISTRATOR
from contract_manager.services import auth_service, permission_view, rbac_service
from contract_manager.services.rbac_seed_service import seed_rbac_data

# Test database setup
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def reset_rbac_state(monkeypatch):
    """Give every test an empty permission cache and default RBAC settings."""
    permission_view.permission_cache.invalidate_all()
    monkeypatch.setattr(settings, "rbac_enforcement", "enforce")
    monkeypatch.setattr(settings, "rbac_audit_enabled", True)
    monkeypatch.setattr(settings, "environment", "test")
    yield
    permission_view.permission_cache.invalidate_all()


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(db_session):
    """Seed core permissions and default roles."""
    return seed_rbac_data(db_session)


@pytest.fixture
def company(db_session) -> Company:
    company = Company(name="Acme Staffing")
    db_session.add(company)
    db_session.commit()
    db_session.refresh(company)
    return company


@pytest.fixture
def make_user(db_session):
    """Factory creating a user holding the named roles."""
    counter = {"n": 0}

    def _make_user(*role_names: str, company: Company | None = None) -> User:
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            full_name=f"User {counter['n']}",
            is_active=True,
            company_id=company.id if company else None,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)

        for name in role_names:
            role = rbac_service.get_role_by_name(db_session, name)
            assert role is not None, f"role {name} not seeded"
            rbac_service.assign_role_to_user(db_session, user.id, role.id)
        return user

    return _make_user


@pytest.fixture
def auth_headers(db_session):
    """Factory returning bearer headers with a fresh session for a user."""

    def _auth_headers(user: User) -> dict[str, str]:
        token = auth_service.create_session(db_session, user.id)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def admin_user(seeded, make_user) -> User:
    """A user holding the Platform Administrator role."""
    return make_user(PLATFORM_ADMINISTRATOR)


@pytest.fixture
def admin_headers(admin_user, auth_headers) -> dict[str, str]:
    return auth_headers(admin_user)
