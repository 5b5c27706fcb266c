# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authentication API endpoints.

Sign-in happens at the identity provider; these endpoints only describe and
end the local session.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from contract_manager.api.deps import get_current_user, get_db, get_session_token
from contract_manager.config import settings
from contract_manager.models import User
from contract_manager.schemas.user import UserResponse
from contract_manager.services import auth_service, permission_view

router = APIRouter()


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    """Get current authenticated user."""
    permissions = permission_view.load_effective_permissions(db, current_user.id)
    return UserResponse(
        id=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name,
        is_active=current_user.is_active,
        company_id=current_user.company_id,
        permissions=sorted(permissions),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    """End the current session."""
    token = get_session_token(request)
    if token:
        auth_service.delete_session(db, token)
    response.delete_cookie(key=settings.session_cookie_name)
