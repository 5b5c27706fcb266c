# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Role and permission administration endpoints."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from contract_manager.api.deps import get_current_user, get_db
from contract_manager.models import AuditEventType, Role, User
from contract_manager.rbac.drift import check_drift, declared_permissions
from contract_manager.rbac.exceptions import (
    InvalidPermissionError,
    NotFoundError,
    PermissionLoadError,
    ProtectedRoleError,
)
from contract_manager.rbac.guard import (
    RBACContext,
    permission_check_failed,
    with_rbac,
)
from contract_manager.schemas.rbac import (
    AuditLogSchema,
    CacheStatsSchema,
    DriftReportSchema,
    PermissionSchema,
    RefreshResultSchema,
    RoleCreateSchema,
    RolePermissionChangeSchema,
    RoleSchema,
    RoleUpdateSchema,
    RoleWithPermissionsSchema,
    UserPermissionsSchema,
    UserRoleAssignmentSchema,
    UserRoleSchema,
)
from contract_manager.services import audit_service, permission_view, rbac_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rbac", tags=["rbac"])


def _error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status_code, detail={"code": code, "message": message}
    )


def _get_role_or_404(db: Session, role_id: uuid.UUID) -> Role:
    role = rbac_service.get_role(db, role_id)
    if not role:
        raise _error(status.HTTP_404_NOT_FOUND, "ROLE_NOT_FOUND", "Role not found")
    return role


def _role_with_permissions(role: Role) -> RoleWithPermissionsSchema:
    return RoleWithPermissionsSchema(
        id=role.id,
        name=role.name,
        category=role.category,
        is_system=role.is_system,
        description=role.description,
        permissions=role.permission_names,
    )


@router.get("/permissions", response_model=list[PermissionSchema], summary="List all available permissions")
def list_permissions(
    resource: str | None = None,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("role:read:all")),
):
    """Retrieve the permission catalog, optionally for one resource."""
    return rbac_service.list_permissions(db, resource=resource)


@router.get("/roles", response_model=list[RoleSchema], summary="List all roles")
def list_roles(
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("role:read:all")),
):
    return rbac_service.list_roles(db)


@router.get("/roles/{role_id}", response_model=RoleWithPermissionsSchema, summary="Get a role by ID with its permissions")
def get_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("role:read:all")),
):
    return _role_with_permissions(_get_role_or_404(db, role_id))


@router.post("/roles", response_model=RoleWithPermissionsSchema, status_code=status.HTTP_201_CREATED, summary="Create a new custom role")
def create_role(
    role_in: RoleCreateSchema,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("role:manage:all")),
):
    """Create a new custom role with the given permissions.

    A role created without permissions denies every check.
    """
    if rbac_service.get_role_by_name(db, role_in.name):
        raise _error(
            status.HTTP_409_CONFLICT,
            "ROLE_EXISTS",
            "Role with this name already exists",
        )

    for name in role_in.permissions:
        if rbac_service.get_permission_by_name(db, name) is None:
            raise _error(
                status.HTTP_400_BAD_REQUEST,
                "PERMISSION_NOT_FOUND",
                f"Permission '{name}' not found",
            )

    role_id = rbac_service.upsert_role(
        db,
        name=role_in.name,
        category=role_in.category,
        description=role_in.description,
        refresh=not role_in.permissions,
    )
    role = _get_role_or_404(db, role_id)
    if role_in.permissions:
        role = rbac_service.set_role_permissions(db, role, role_in.permissions)
    return _role_with_permissions(role)


@router.put("/roles/{role_id}", response_model=RoleWithPermissionsSchema, summary="Update an existing role")
def update_role(
    role_id: uuid.UUID,
    role_in: RoleUpdateSchema,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("role:manage:all")),
):
    """Update a custom role's metadata and, if given, replace its permissions.

    System roles cannot be modified.
    """
    role = _get_role_or_404(db, role_id)
    try:
        role = rbac_service.update_role(
            db,
            role,
            name=role_in.name,
            category=role_in.category,
            description=role_in.description,
        )
        if role_in.permissions is not None:
            role = rbac_service.set_role_permissions(db, role, role_in.permissions)
    except ProtectedRoleError as e:
        raise _error(status.HTTP_403_FORBIDDEN, "PROTECTED_ROLE", str(e)) from e
    except NotFoundError as e:
        raise _error(status.HTTP_400_BAD_REQUEST, "PERMISSION_NOT_FOUND", str(e)) from e
    except ValueError as e:
        raise _error(status.HTTP_409_CONFLICT, "ROLE_EXISTS", str(e)) from e
    return _role_with_permissions(role)


@router.delete("/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a custom role")
def delete_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("role:manage:all")),
):
    """Retire a custom role and its assignments. System roles cannot be deleted."""
    _get_role_or_404(db, role_id)
    try:
        rbac_service.delete_role(db, role_id)
    except ProtectedRoleError as e:
        raise _error(status.HTTP_403_FORBIDDEN, "PROTECTED_ROLE", str(e)) from e


def _change_permission(
    db: Session, role_id: uuid.UUID, permission: str, attach: bool
) -> RolePermissionChangeSchema:
    role = _get_role_or_404(db, role_id)
    if role.is_system:
        raise _error(
            status.HTTP_403_FORBIDDEN,
            "PROTECTED_ROLE",
            f"System role '{role.name}' cannot be modified",
        )
    try:
        found = rbac_service.get_permission_by_name(db, permission)
    except InvalidPermissionError as e:
        raise _error(status.HTTP_400_BAD_REQUEST, "INVALID_PERMISSION", str(e)) from e
    if found is None:
        raise _error(
            status.HTTP_404_NOT_FOUND,
            "PERMISSION_NOT_FOUND",
            f"Permission '{permission}' not found",
        )

    if attach:
        changed = rbac_service.attach_permission(db, role.id, found.id)
    else:
        changed = rbac_service.detach_permission(db, role.id, found.id)
    return RolePermissionChangeSchema(
        role_id=role.id, permission=found.name, changed=changed
    )


@router.post("/roles/{role_id}/permissions/{permission}", response_model=RolePermissionChangeSchema, summary="Attach a permission to a role")
def attach_permission(
    role_id: uuid.UUID,
    permission: str,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("role:manage:all")),
):
    """Attach a permission; attaching twice reports ``changed: false``."""
    return _change_permission(db, role_id, permission, attach=True)


@router.delete("/roles/{role_id}/permissions/{permission}", response_model=RolePermissionChangeSchema, summary="Detach a permission from a role")
def detach_permission(
    role_id: uuid.UUID,
    permission: str,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("role:manage:all")),
):
    return _change_permission(db, role_id, permission, attach=False)


@router.get("/users/{user_id}/roles", response_model=list[UserRoleSchema], summary="Get a user's role assignments")
def get_user_role_assignments(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("user:read:all", "user:assign_role:all")),
):
    return rbac_service.get_user_assignments(db, user_id)


@router.post("/users/{user_id}/roles", response_model=UserRoleSchema, status_code=status.HTTP_201_CREATED, summary="Assign a role to a user")
def assign_role_to_user_api(
    user_id: uuid.UUID,
    assignment: UserRoleAssignmentSchema,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("user:assign_role:all")),
):
    """Assign a role to a user, optionally for a company and until a date.

    Re-assigning an existing combination updates it in place.
    """
    try:
        user_role = rbac_service.assign_role_to_user(
            db,
            user_id=user_id,
            role_id=assignment.role_id,
            company_id=assignment.company_id,
            assigned_by=rbac.user,
            valid_until=assignment.valid_until,
        )
    except NotFoundError as e:
        raise _error(status.HTTP_404_NOT_FOUND, "NOT_FOUND", str(e)) from e
    db.refresh(user_role)
    return user_role


@router.delete("/users/{user_id}/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Remove a role from a user")
def remove_role_from_user_api(
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    company_id: uuid.UUID | None = None,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("user:assign_role:all")),
):
    success = rbac_service.remove_role_from_user(
        db, user_id, role_id, company_id, removed_by=rbac.user
    )
    if not success:
        raise _error(
            status.HTTP_404_NOT_FOUND,
            "ASSIGNMENT_NOT_FOUND",
            "Role assignment not found",
        )


@router.get("/me/permissions", response_model=UserPermissionsSchema, summary="Get current user's effective permissions")
def get_my_permissions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Retrieve the authenticated user's roles and effective permissions.

    Only identity is required: every user may read their own set.
    """
    try:
        permissions = permission_view.load_effective_permissions(db, current_user.id)
        roles = rbac_service.get_user_roles(db, current_user.id)
    except (PermissionLoadError, SQLAlchemyError) as e:
        logger.error(f"Could not load permissions for user {current_user.id}: {e}")
        raise permission_check_failed() from e
    return UserPermissionsSchema(
        user_id=current_user.id,
        roles=sorted({role.name for role in roles}),
        permissions=sorted(permissions),
    )


@router.post("/refresh", response_model=RefreshResultSchema, summary="Rebuild the materialized permission view")
def refresh_permissions(
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("system:manage:all")),
):
    return permission_view.refresh_user_permissions(db)


@router.get("/audit", response_model=list[AuditLogSchema], summary="List audit entries")
def list_audit_logs(
    user_id: uuid.UUID | None = None,
    event_type: AuditEventType | None = None,
    result: str | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("audit:read:all")),
):
    return audit_service.get_audit_logs(
        db, user_id=user_id, event_type=event_type, result=result, limit=limit
    )


@router.get("/drift", response_model=DriftReportSchema, summary="Compare guard requirements with the catalog")
def get_drift_report(
    request: Request,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("system:manage:all")),
):
    """P0 entries are required by a guard but missing from the catalog."""
    seeded = [p.name for p in rbac_service.list_permissions(db)]
    report = check_drift(declared_permissions(request.app.routes), seeded)
    return DriftReportSchema(
        ok=report.ok,
        summary=report.summary(),
        p0_critical=report.p0_critical,
        p2_unused=report.p2_unused,
        invalid=report.invalid,
        sources=report.sources,
    )


@router.get("/cache", response_model=CacheStatsSchema, summary="Permission cache statistics")
def get_cache_stats(
    rbac: RBACContext = Depends(with_rbac("system:manage:all")),
):
    return permission_view.permission_cache.stats()
