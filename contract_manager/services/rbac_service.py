# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission catalog, role registry and user-role assignments.

Every upsert and attach is idempotent so seeding and admin actions are safe
to retry. Mutations that can change a user's effective permissions refresh
the materialized view unless the caller passes ``refresh=False`` and refreshes
once itself (as the seeding tool does).
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from contract_manager.events import AppEvent, event_bus
from contract_manager.models import (
    AuditEventType,
    Permission,
    Role,
    RoleCategory,
    RolePermission,
    User,
    UserRole,
)
from contract_manager.rbac.evaluator import has_permission
from contract_manager.rbac.exceptions import (
    NotFoundError,
    ProtectedRoleError,
    SeedingConflictError,
)
from contract_manager.rbac.types import Action, PermissionKey, Resource, Scope

from . import audit_service, permission_view

logger = logging.getLogger(__name__)


def _refresh(db: Session, refresh: bool) -> None:
    if refresh:
        permission_view.refresh_user_permissions(db)


# Permission catalog


def get_permission(db: Session, permission_id: uuid.UUID) -> Permission | None:
    return db.get(Permission, permission_id)


def get_permission_by_name(db: Session, name: str | PermissionKey) -> Permission | None:
    """Get a permission by its ``resource:action:scope`` name."""
    key = PermissionKey.parse(name)
    return db.query(Permission).filter(Permission.name == key.name).first()


def list_permissions(db: Session, resource: str | None = None) -> list[Permission]:
    query = db.query(Permission)
    if resource:
        query = query.filter(Permission.resource == resource)
    return query.order_by(Permission.name).all()


def upsert_permission(
    db: Session,
    resource: Resource | str,
    action: Action | str,
    scope: Scope | str,
    display_name: str | None = None,
    description: str | None = None,
) -> uuid.UUID:
    """Register a permission, or update its descriptive metadata if it exists.

    The (resource, action, scope) triple of an existing row is never touched.

    Raises:
        InvalidPermissionError: if the triple is not a known permission.
    """
    key = PermissionKey.of(resource, action, scope)
    permission = db.query(Permission).filter(Permission.name == key.name).first()

    if permission is None:
        permission = Permission(
            name=key.name,
            resource=key.resource.value,
            action=key.action.value,
            scope=key.scope.value,
            display_name=display_name,
            description=description,
        )
        try:
            with db.begin_nested():
                db.add(permission)
        except IntegrityError:
            # Inserted concurrently; fall through to the metadata update
            permission = db.query(Permission).filter(Permission.name == key.name).one()
            logger.debug(f"Permission {key.name} was created concurrently")
        else:
            db.commit()
            logger.info(f"Registered permission {key.name}")
            return permission.id

    if display_name is not None:
        permission.display_name = display_name
    if description is not None:
        permission.description = description
    db.commit()
    return permission.id


# Role registry


def get_role(db: Session, role_id: uuid.UUID) -> Role | None:
    return db.get(Role, role_id)


def get_role_by_name(db: Session, name: str) -> Role | None:
    """Get a role by its name."""
    return db.query(Role).filter(Role.name == name).first()


def list_roles(db: Session) -> list[Role]:
    return db.query(Role).order_by(Role.name).all()


def upsert_role(
    db: Session,
    name: str,
    category: RoleCategory = RoleCategory.CLIENT,
    description: str | None = None,
    is_system: bool = False,
    refresh: bool = True,
) -> uuid.UUID:
    """Create a role, or update category and description of an existing one."""
    role = get_role_by_name(db, name)
    created = role is None

    if role is None:
        role = Role(
            name=name,
            category=category,
            description=description,
            is_system=is_system,
        )
        try:
            with db.begin_nested():
                db.add(role)
        except IntegrityError:
            role = db.query(Role).filter(Role.name == name).one()
            created = False

    if not created:
        role.category = category
        if description is not None:
            role.description = description
        if is_system:
            role.is_system = True
    db.commit()

    event_bus.publish(
        AppEvent.ROLE_CREATED if created else AppEvent.ROLE_UPDATED,
        {"role_id": str(role.id), "name": role.name},
    )
    _refresh(db, refresh)
    return role.id


def update_role(
    db: Session,
    role: Role,
    name: str | None = None,
    category: RoleCategory | None = None,
    description: str | None = None,
) -> Role:
    """Update the metadata of a non-system role.

    Raises:
        ProtectedRoleError: for system roles.
        ValueError: if another role already uses the name.
    """
    if role.is_system:
        raise ProtectedRoleError(f"System role '{role.name}' cannot be modified")
    if name is not None and name != role.name:
        existing = get_role_by_name(db, name)
        if existing is not None and existing.id != role.id:
            raise ValueError(f"Role '{name}' already exists")
        role.name = name
    if category is not None:
        role.category = category
    if description is not None:
        role.description = description
    db.commit()
    db.refresh(role)
    event_bus.publish(
        AppEvent.ROLE_UPDATED, {"role_id": str(role.id), "name": role.name}
    )
    return role


def _require_role_and_permission(
    db: Session, role_id: uuid.UUID, permission_id: uuid.UUID
) -> tuple[Role, Permission]:
    role = db.get(Role, role_id)
    if role is None:
        raise SeedingConflictError(f"Role {role_id} does not exist")
    permission = db.get(Permission, permission_id)
    if permission is None:
        raise SeedingConflictError(f"Permission {permission_id} does not exist")
    return role, permission


def attach_permission(
    db: Session,
    role_id: uuid.UUID,
    permission_id: uuid.UUID,
    refresh: bool = True,
) -> bool:
    """Attach a permission to a role. Returns False if it was already attached.

    Raises:
        SeedingConflictError: if the role or permission does not exist.
    """
    role, permission = _require_role_and_permission(db, role_id, permission_id)

    existing = db.get(RolePermission, (role_id, permission_id))
    if existing is not None:
        return False

    try:
        with db.begin_nested():
            db.add(RolePermission(role_id=role_id, permission_id=permission_id))
    except IntegrityError:
        return False
    db.commit()

    logger.info(f"Attached {permission.name} to role {role.name}")
    event_bus.publish(
        AppEvent.ROLE_PERMISSIONS_CHANGED,
        {"role_id": str(role_id), "attached": [permission.name]},
    )
    _refresh(db, refresh)
    return True


def detach_permission(
    db: Session,
    role_id: uuid.UUID,
    permission_id: uuid.UUID,
    refresh: bool = True,
) -> bool:
    """Detach a permission from a role. Returns False if it was not attached.

    Raises:
        SeedingConflictError: if the role or permission does not exist.
    """
    role, permission = _require_role_and_permission(db, role_id, permission_id)

    existing = db.get(RolePermission, (role_id, permission_id))
    if existing is None:
        return False

    db.delete(existing)
    db.commit()

    logger.info(f"Detached {permission.name} from role {role.name}")
    event_bus.publish(
        AppEvent.ROLE_PERMISSIONS_CHANGED,
        {"role_id": str(role_id), "detached": [permission.name]},
    )
    _refresh(db, refresh)
    return True


def set_role_permissions(
    db: Session, role: Role, permission_names: list[str], refresh: bool = True
) -> Role:
    """Replace the permissions attached to a non-system role.

    Raises:
        ProtectedRoleError: for system roles.
        NotFoundError: if a permission name is not in the catalog.
    """
    if role.is_system:
        raise ProtectedRoleError(f"System role '{role.name}' cannot be modified")

    wanted: dict[uuid.UUID, Permission] = {}
    for name in permission_names:
        permission = get_permission_by_name(db, name)
        if permission is None:
            raise NotFoundError(f"Permission '{name}' not found")
        wanted[permission.id] = permission

    current = {rp.permission_id: rp for rp in role.permissions}
    for permission_id, rp in current.items():
        if permission_id not in wanted:
            db.delete(rp)
    for permission_id in wanted:
        if permission_id not in current:
            db.add(RolePermission(role_id=role.id, permission_id=permission_id))
    db.commit()
    db.refresh(role)

    event_bus.publish(
        AppEvent.ROLE_PERMISSIONS_CHANGED,
        {"role_id": str(role.id), "permissions": sorted(p.name for p in wanted.values())},
    )
    _refresh(db, refresh)
    return role


def delete_role(db: Session, role_id: uuid.UUID, refresh: bool = True) -> bool:
    """Retire a non-system role together with its assignments.

    Users holding only this role lose its permissions at the next view read.
    Returns False if the role does not exist.

    Raises:
        ProtectedRoleError: for system roles.
    """
    role = db.get(Role, role_id)
    if role is None:
        return False
    if role.is_system:
        raise ProtectedRoleError(f"System role '{role.name}' cannot be deleted")

    name = role.name
    holders = [ur.user_id for ur in role.user_roles]
    db.delete(role)
    db.commit()

    logger.info(f"Retired role {name} ({len(holders)} assignments removed)")
    event_bus.publish(
        AppEvent.ROLE_DELETED, {"role_id": str(role_id), "name": name}
    )
    _refresh(db, refresh)
    return True


# User-role assignments


def get_user_assignments(db: Session, user_id: uuid.UUID) -> list[UserRole]:
    return (
        db.query(UserRole)
        .options(joinedload(UserRole.role))
        .filter(UserRole.user_id == user_id)
        .order_by(UserRole.assigned_at)
        .all()
    )


def get_user_roles(db: Session, user_id: uuid.UUID) -> list[Role]:
    """Get the roles currently granting permissions to a user."""
    now = datetime.utcnow()
    return [ur.role for ur in get_user_assignments(db, user_id) if ur.is_effective(now)]


def _assignments_query(
    db: Session,
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    company_id: uuid.UUID | None,
):
    query = db.query(UserRole).filter(
        UserRole.user_id == user_id, UserRole.role_id == role_id
    )
    if company_id is None:
        return query.filter(UserRole.company_id.is_(None))
    return query.filter(UserRole.company_id == company_id)


def _find_assignment(
    db: Session,
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    company_id: uuid.UUID | None,
) -> UserRole | None:
    return _assignments_query(db, user_id, role_id, company_id).first()


def assign_role_to_user(
    db: Session,
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    company_id: uuid.UUID | None = None,
    assigned_by: User | None = None,
    valid_until: datetime | None = None,
    refresh: bool = True,
) -> UserRole:
    """Assign a role to a user.

    Assigning an existing (user, role, company) combination reactivates it
    and updates its expiry instead of creating a duplicate.

    Raises:
        NotFoundError: if the user or role does not exist.
    """
    if db.get(User, user_id) is None:
        raise NotFoundError(f"User {user_id} not found")
    role = db.get(Role, role_id)
    if role is None:
        raise NotFoundError(f"Role {role_id} not found")

    user_role = _find_assignment(db, user_id, role_id, company_id)
    created = user_role is None
    if user_role is None:
        user_role = UserRole(
            user_id=user_id,
            role_id=role_id,
            company_id=company_id,
            assigned_by_id=assigned_by.id if assigned_by else None,
            valid_until=valid_until,
        )
        try:
            with db.begin_nested():
                db.add(user_role)
        except IntegrityError:
            # Assigned concurrently; update that row instead
            user_role = _assignments_query(db, user_id, role_id, company_id).one()
            created = False
            logger.debug(f"Role {role.name} was assigned to {user_id} concurrently")

    if not created:
        user_role.is_active = True
        user_role.valid_until = valid_until
        if assigned_by is not None:
            user_role.assigned_by_id = assigned_by.id
    db.commit()

    audit_service.log_role_change(
        db,
        AuditEventType.ROLE_ASSIGNED,
        user_id=user_id,
        role_name=role.name,
        actor_id=assigned_by.id if assigned_by else None,
        company_id=company_id,
    )
    event_bus.publish(
        AppEvent.USER_ROLE_ASSIGNED,
        {"user_id": str(user_id), "role_id": str(role_id), "role": role.name},
    )
    _refresh(db, refresh)
    return user_role


def remove_role_from_user(
    db: Session,
    user_id: uuid.UUID,
    role_id: uuid.UUID,
    company_id: uuid.UUID | None = None,
    removed_by: User | None = None,
    refresh: bool = True,
) -> bool:
    """Remove a role from a user. Returns True if removed, False if not found.

    Every row matching (user, role, company) is deleted, so a duplicate left
    by a store without the partial unique index cannot keep granting the role.
    """
    user_roles = _assignments_query(db, user_id, role_id, company_id).all()
    if not user_roles:
        return False

    role_name = user_roles[0].role.name
    for user_role in user_roles:
        db.delete(user_role)
    db.commit()
    if len(user_roles) > 1:
        logger.warning(
            f"Removed {len(user_roles)} duplicate assignments of {role_name} "
            f"for user {user_id}"
        )

    audit_service.log_role_change(
        db,
        AuditEventType.ROLE_REMOVED,
        user_id=user_id,
        role_name=role_name,
        actor_id=removed_by.id if removed_by else None,
        company_id=company_id,
    )
    event_bus.publish(
        AppEvent.USER_ROLE_REMOVED,
        {"user_id": str(user_id), "role_id": str(role_id), "role": role_name},
    )
    _refresh(db, refresh)
    return True


def user_has_permission(db: Session, user: User, permission: str | PermissionKey) -> bool:
    """Check if a user has a specific permission."""
    if not user.is_active:
        return False
    return has_permission(
        permission_view.load_effective_permissions(db, user.id), permission
    )
