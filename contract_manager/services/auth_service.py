# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Session service.

Credentials are verified by the identity provider. This module only maps the
session tokens it issues to local user identities.
"""

import secrets
import uuid
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from contract_manager.config import settings
from contract_manager.models import User
from contract_manager.models.session import Session as SessionModel


def create_session(
    db: Session, user_id: uuid.UUID, expires_in: timedelta | None = None
) -> str:
    """Create a new session for a user and return its token."""
    token = secrets.token_urlsafe(32)
    expires_at = datetime.utcnow() + (
        expires_in or timedelta(days=settings.session_expiry_days)
    )

    session = SessionModel(
        user_id=user_id,
        token=token,
        expires_at=expires_at,
    )
    db.add(session)
    db.commit()
    return token


def get_session(db: Session, token: str) -> SessionModel | None:
    """Get a valid session by token."""
    session = db.query(SessionModel).filter(SessionModel.token == token).first()
    if not session:
        return None
    if session.expires_at < datetime.utcnow():
        db.delete(session)
        db.commit()
        return None
    return session


def delete_session(db: Session, token: str) -> bool:
    """Delete a session by token."""
    session = db.query(SessionModel).filter(SessionModel.token == token).first()
    if session:
        db.delete(session)
        db.commit()
        return True
    return False


def get_user_by_id(db: Session, user_id: uuid.UUID) -> User | None:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email).first()


def resolve_user(db: Session, token: str | None) -> User | None:
    """Resolve an active user from a session token."""
    if not token:
        return None

    session = get_session(db, token)
    if not session:
        return None

    user = get_user_by_id(db, session.user_id)
    if not user or not user.is_active:
        return None
    return user


def cleanup_expired_sessions(db: Session) -> int:
    """Delete all expired sessions. Returns count of deleted sessions."""
    count = (
        db.query(SessionModel)
        .filter(SessionModel.expires_at < datetime.utcnow())
        .delete()
    )
    db.commit()
    return count
