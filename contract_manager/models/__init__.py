# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database models package."""

from contract_manager.models.audit_log import AuditLog
from contract_manager.models.base import Base, TimestampMixin
from contract_manager.models.company import Company
from contract_manager.models.contract import Contract
from contract_manager.models.enums import (
    AuditEventType,
    AuditResult,
    ContractStatus,
    RoleCategory,
)
from contract_manager.models.permission import Permission
from contract_manager.models.role import Role
from contract_manager.models.role_permission import RolePermission
from contract_manager.models.session import Session
from contract_manager.models.user import User
from contract_manager.models.user_permission_view import (
    PermissionViewState,
    UserPermissionView,
)
from contract_manager.models.user_role import UserRole

__all__ = [
    "AuditEventType",
    "AuditLog",
    "AuditResult",
    "Base",
    "Company",
    "Contract",
    "ContractStatus",
    "Permission",
    "PermissionViewState",
    "Role",
    "RoleCategory",
    "RolePermission",
    "Session",
    "TimestampMixin",
    "User",
    "UserPermissionView",
    "UserRole",
]
