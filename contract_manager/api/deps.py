# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""API dependencies for dependency injection."""

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from contract_manager.config import settings
from contract_manager.database import get_db
from contract_manager.models import User
from contract_manager.services import auth_service

__all__ = ["get_current_user", "get_db", "get_optional_user", "get_session_token"]


def get_session_token(request: Request) -> str | None:
    """Get the session token from the cookie or an ``Authorization: Bearer`` header."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token

    authorization = request.headers.get("authorization")
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return None


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User | None:
    """Get current user if authenticated, otherwise return None."""
    return auth_service.resolve_user(db, get_session_token(request))


def get_current_user(
    current_user: User | None = Depends(get_optional_user),
) -> User:
    """Get current authenticated user from the session."""
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "UNAUTHENTICATED", "message": "Not authenticated"},
        )
    return current_user
