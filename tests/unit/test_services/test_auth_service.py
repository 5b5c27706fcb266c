# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for auth_service."""

from datetime import datetime, timedelta

from contract_manager.models import User
from contract_manager.models.session import Session as SessionModel
from contract_manager.services import auth_service


def create_user(db_session, email: str = "existing@example.com", active: bool = True) -> User:
    """Helper to create a persisted user."""
    user = User(email=email, full_name="Existing", is_active=active)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def test_create_and_resolve_session(db_session):
    user = create_user(db_session)
    token = auth_service.create_session(db_session, user.id)

    assert len(token) >= 32
    assert auth_service.resolve_user(db_session, token).id == user.id


def test_resolve_user_without_token(db_session):
    assert auth_service.resolve_user(db_session, None) is None
    assert auth_service.resolve_user(db_session, "") is None
    assert auth_service.resolve_user(db_session, "unknown") is None


def test_resolve_user_ignores_inactive_users(db_session):
    user = create_user(db_session, active=False)
    token = auth_service.create_session(db_session, user.id)
    assert auth_service.resolve_user(db_session, token) is None


def test_expired_session_is_removed(db_session):
    user = create_user(db_session)
    token = auth_service.create_session(
        db_session, user.id, expires_in=timedelta(seconds=-1)
    )

    assert auth_service.get_session(db_session, token) is None
    assert db_session.query(SessionModel).count() == 0


def test_delete_session(db_session):
    user = create_user(db_session)
    token = auth_service.create_session(db_session, user.id)

    assert auth_service.delete_session(db_session, token) is True
    assert auth_service.delete_session(db_session, token) is False


def test_cleanup_expired_sessions(db_session):
    user = create_user(db_session)
    auth_service.create_session(db_session, user.id)
    db_session.add(
        SessionModel(
            user_id=user.id,
            token="stale-token",
            expires_at=datetime.utcnow() - timedelta(days=1),
        )
    )
    db_session.commit()

    assert auth_service.cleanup_expired_sessions(db_session) == 1
    assert db_session.query(SessionModel).count() == 1


def test_get_user_by_email(db_session):
    user = create_user(db_session, email="lookup@example.com")
    assert auth_service.get_user_by_email(db_session, "lookup@example.com").id == user.id
    assert auth_service.get_user_by_email(db_session, "missing@example.com") is None
