# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumeration types for database models."""

from enum import Enum


class RoleCategory(str, Enum):
    """Role grouping used for display only."""

    CLIENT = "client"
    PROVIDER = "provider"
    ADMIN = "admin"


class ContractStatus(str, Enum):
    """Contract lifecycle status."""

    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    ARCHIVED = "archived"


class AuditEventType(str, Enum):
    """Kinds of audit log entries."""

    PERMISSION_CHECK = "permission_check"
    ROLE_ASSIGNED = "role_assigned"
    ROLE_REMOVED = "role_removed"


class AuditResult(str, Enum):
    """Outcome recorded for a permission check."""

    ALLOW = "ALLOW"
    DENY = "DENY"
    WOULD_BLOCK = "WOULD_BLOCK"
    ERROR = "ERROR"
