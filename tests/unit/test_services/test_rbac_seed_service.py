# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for RBAC seeding."""

from contract_manager.models import Permission, Role, RolePermission
from contract_manager.rbac.permissions import CORE_PERMISSIONS
from contract_manager.rbac.roles import DEFAULT_ROLES, PLATFORM_ADMINISTRATOR
from contract_manager.services import rbac_service
from contract_manager.services.rbac_seed_service import seed_rbac_data


def _counts(db_session) -> tuple[int, int, int]:
    return (
        db_session.query(Permission).count(),
        db_session.query(Role).count(),
        db_session.query(RolePermission).count(),
    )


def test_seed_creates_catalog(db_session):
    report = seed_rbac_data(db_session)

    expected_attachments = sum(len(r["permissions"]) for r in DEFAULT_ROLES)
    assert report.permissions_created == len(CORE_PERMISSIONS)
    assert report.roles_created == len(DEFAULT_ROLES)
    assert report.attachments_created == expected_attachments
    assert _counts(db_session) == (
        len(CORE_PERMISSIONS),
        len(DEFAULT_ROLES),
        expected_attachments,
    )


def test_seed_twice_is_idempotent(db_session):
    seed_rbac_data(db_session)
    first = _counts(db_session)

    report = seed_rbac_data(db_session)

    assert _counts(db_session) == first
    assert report.changed is False
    assert report.permissions_created == 0
    assert report.roles_created == 0
    assert report.attachments_created == 0


def test_platform_administrator_holds_every_permission(db_session):
    seed_rbac_data(db_session)
    role = rbac_service.get_role_by_name(db_session, PLATFORM_ADMINISTRATOR)
    assert role.is_system is True
    assert len(role.permission_names) == len(CORE_PERMISSIONS)


def test_seed_restores_detached_permission(db_session):
    seed_rbac_data(db_session)
    role = rbac_service.get_role_by_name(db_session, "Basic Client")
    permission = rbac_service.get_permission_by_name(db_session, "booking:create:own")
    rbac_service.detach_permission(db_session, role.id, permission.id)

    report = seed_rbac_data(db_session)

    assert report.attachments_created == 1
    db_session.refresh(role)
    assert "booking:create:own" in role.permission_names
