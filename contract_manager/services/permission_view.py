# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Materialized user permission view and effective-set loading.

The view holds one row per (user, permission) and is rebuilt wholesale by
:func:`refresh_user_permissions`. Reads never wait for a rebuild; between a
mutation and the next refresh they may return outdated sets. Registry and
assignment operations in ``rbac_service`` call the refresh explicitly.
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from contract_manager.config import settings
from contract_manager.events import AppEvent, event_bus
from contract_manager.models import (
    Permission,
    PermissionViewState,
    RolePermission,
    UserPermissionView,
    UserRole,
)
from contract_manager.rbac.cache import PermissionCache
from contract_manager.rbac.exceptions import PermissionLoadError

logger = logging.getLogger(__name__)

# Serializes refreshes within this process; PostgreSQL additionally takes a
# table lock so refreshes from other processes queue behind it.
_refresh_lock = threading.Lock()

permission_cache = PermissionCache(ttl_seconds=settings.permission_cache_ttl_seconds)
permission_cache.register(event_bus)


@dataclass
class RefreshResult:
    """Outcome of a view rebuild."""

    refreshed_at: datetime
    row_count: int
    user_count: int


def _effective_assignments_query(now: datetime) -> sa.Select:
    """(user_id, permission name, valid_until) for every counted assignment."""
    return (
        sa.select(UserRole.user_id, Permission.name, UserRole.valid_until)
        .join(RolePermission, RolePermission.role_id == UserRole.role_id)
        .join(Permission, Permission.id == RolePermission.permission_id)
        .where(
            UserRole.is_active.is_(True),
            sa.or_(UserRole.valid_until.is_(None), UserRole.valid_until > now),
        )
    )


def compute_permission_rows(db: Session) -> dict[tuple[uuid.UUID, str], datetime | None]:
    """Flatten role assignments into (user, permission) -> expiry.

    A permission granted by several assignments keeps the latest expiry, or
    none at all when any granting assignment never expires.
    """
    rows: dict[tuple[uuid.UUID, str], datetime | None] = {}
    for user_id, name, valid_until in db.execute(
        _effective_assignments_query(datetime.utcnow())
    ):
        key = (user_id, name)
        if key not in rows:
            rows[key] = valid_until
            continue
        current = rows[key]
        if current is None or valid_until is None:
            rows[key] = None
        else:
            rows[key] = max(current, valid_until)
    return rows


def refresh_user_permissions(db: Session) -> RefreshResult:
    """Rebuild the whole view in a single transaction.

    Readers see either the previous or the new view, never a partial one.
    Concurrent calls are serialized and each produces a complete view.
    """
    with _refresh_lock:
        try:
            if db.get_bind().dialect.name == "postgresql":
                db.execute(
                    sa.text(
                        f"LOCK TABLE {UserPermissionView.__tablename__} "
                        "IN EXCLUSIVE MODE"
                    )
                )

            rows = compute_permission_rows(db)
            db.execute(sa.delete(UserPermissionView))
            if rows:
                db.execute(
                    sa.insert(UserPermissionView),
                    [
                        {
                            "user_id": user_id,
                            "permission_name": name,
                            "valid_until": valid_until,
                        }
                        for (user_id, name), valid_until in rows.items()
                    ],
                )

            refreshed_at = datetime.utcnow()
            user_count = len({user_id for user_id, _ in rows})
            state = db.get(PermissionViewState, 1)
            if state is None:
                state = PermissionViewState(id=1, refreshed_at=refreshed_at)
                db.add(state)
            state.refreshed_at = refreshed_at
            state.row_count = len(rows)
            state.user_count = user_count
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Materialized permission view refresh failed")
            raise

    logger.info(
        f"Refreshed permission view: {len(rows)} rows for {user_count} users"
    )
    event_bus.publish(
        AppEvent.PERMISSIONS_REFRESHED,
        {"row_count": len(rows), "user_count": user_count},
    )
    return RefreshResult(
        refreshed_at=refreshed_at, row_count=len(rows), user_count=user_count
    )


def get_view_state(db: Session) -> PermissionViewState | None:
    """Get bookkeeping for the last refresh, if any ran."""
    return db.get(PermissionViewState, 1)


def get_materialized_permissions(db: Session, user_id: uuid.UUID) -> frozenset[str]:
    """Read a user's unexpired permissions from the view."""
    now = datetime.utcnow()
    result = db.execute(
        sa.select(UserPermissionView.permission_name).where(
            UserPermissionView.user_id == user_id,
            sa.or_(
                UserPermissionView.valid_until.is_(None),
                UserPermissionView.valid_until > now,
            ),
        )
    )
    return frozenset(result.scalars())


def get_live_permissions(db: Session, user_id: uuid.UUID) -> frozenset[str]:
    """Compute a user's effective set straight from the role tables."""
    query = _effective_assignments_query(datetime.utcnow()).where(
        UserRole.user_id == user_id
    )
    return frozenset(name for _, name, _ in db.execute(query))


def load_effective_permissions(
    db: Session, user_id: uuid.UUID, use_cache: bool = True
) -> frozenset[str]:
    """Load the effective permission set for a user.

    Order: in-process cache, materialized view, then a live join when the
    view lookup fails or comes back empty. Empty sets are not cached, so a
    grant made by another process is seen on the next request.

    Raises:
        PermissionLoadError: if neither the view nor the live join could be read.
    """
    if use_cache:
        cached = permission_cache.get(user_id)
        if cached is not None:
            return cached

    permissions: frozenset[str] = frozenset()
    try:
        permissions = get_materialized_permissions(db, user_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(
            f"Permission view lookup failed for user {user_id}, "
            f"falling back to live join: {e}"
        )

    if not permissions:
        try:
            permissions = get_live_permissions(db, user_id)
        except SQLAlchemyError as e:
            db.rollback()
            raise PermissionLoadError(
                f"Could not load permissions for user {user_id}"
            ) from e

    if use_cache and permissions:
        permission_cache.set(user_id, permissions)
    return permissions
