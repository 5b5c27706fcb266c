# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from contract_manager.models import Permission, RolePermission
from contract_manager.rbac.permissions import CORE_PERMISSIONS
from contract_manager.rbac.roles import DEFAULT_ROLES
from contract_manager.rbac.types import PermissionKey

from . import permission_view, rbac_service

logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    """Counts of what a seeding run actually changed."""

    permissions_created: int = 0
    roles_created: int = 0
    attachments_created: int = 0
    view_rows: int = 0
    view_users: int = 0
    roles: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(
            self.permissions_created or self.roles_created or self.attachments_created
        )


def seed_rbac_data(db: Session) -> SeedReport:
    """Seeds the database with core permissions and default roles.

    This function is idempotent: a second run creates nothing and leaves
    every role with the same permission set. The view is refreshed once
    at the end.
    @param db: SQLAlchemy Session object
    """
    report = SeedReport()

    existing = {name for (name,) in db.query(Permission.name)}
    permission_ids = {}
    for perm_data in CORE_PERMISSIONS:
        key = PermissionKey.of(perm_data["resource"], perm_data["action"], perm_data["scope"])
        permission_ids[key.name] = rbac_service.upsert_permission(db, **perm_data)
        if key.name not in existing:
            report.permissions_created += 1

    for role_data in DEFAULT_ROLES:
        created = rbac_service.get_role_by_name(db, role_data["name"]) is None
        role_id = rbac_service.upsert_role(
            db,
            name=role_data["name"],
            category=role_data["category"],
            description=role_data["description"],
            is_system=role_data["is_system"],
            refresh=False,
        )
        if created:
            report.roles_created += 1
        report.roles.append(role_data["name"])

        attached = {
            permission_id
            for (permission_id,) in db.query(RolePermission.permission_id).filter(
                RolePermission.role_id == role_id
            )
        }
        for perm_name in role_data["permissions"]:
            permission_id = permission_ids[PermissionKey.parse(perm_name).name]
            if permission_id in attached:
                continue
            if rbac_service.attach_permission(db, role_id, permission_id, refresh=False):
                report.attachments_created += 1

    result = permission_view.refresh_user_permissions(db)
    report.view_rows = result.row_count
    report.view_users = result.user_count

    logger.info(
        f"RBAC seed complete: {report.permissions_created} permissions, "
        f"{report.roles_created} roles, {report.attachments_created} attachments created"
    )
    return report
