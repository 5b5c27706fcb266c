# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Structured permission values.

Permissions are stored and sent over the wire as ``resource:action:scope``
strings. Inside the application they are parsed into :class:`PermissionKey`
so that a misspelled resource, action or scope fails loudly instead of
creating a permission nobody can ever hold.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from contract_manager.rbac.exceptions import InvalidPermissionError

SEPARATOR = ":"


class Resource(str, Enum):
    """Entity types that permissions act upon."""

    CONTRACT = "contract"
    PARTY = "party"
    PROMOTER = "promoter"
    USER = "user"
    PROFILE = "profile"
    COMPANY = "company"
    BOOKING = "booking"
    ATTENDANCE = "attendance"
    PERMIT = "permit"
    DASHBOARD = "dashboard"
    SETTINGS = "settings"
    REPORT = "report"
    AUDIT = "audit"
    ROLE = "role"
    SYSTEM = "system"


class Action(str, Enum):
    """Operations a permission allows."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"
    GENERATE = "generate"
    ARCHIVE = "archive"
    EXPORT = "export"
    MESSAGE = "message"
    VIEW = "view"
    MANAGE = "manage"
    ASSIGN_ROLE = "assign_role"
    CHECK_IN = "check_in"
    UPLOAD = "upload"


class Scope(str, Enum):
    """Reach of a permission within the tenant."""

    OWN = "own"
    ALL = "all"


class ResolvedScope(str, Enum):
    """Outcome of resolving a scoped permission against a resource."""

    ALL = "all"
    OWN = "own"
    DENIED = "denied"


class Match(str, Enum):
    """How a list of required permissions is combined."""

    ANY = "any"
    ALL = "all"


@dataclass(frozen=True, order=True)
class PermissionKey:
    """A (resource, action, scope) triple."""

    resource: Resource
    action: Action
    scope: Scope

    @classmethod
    def parse(cls, value: str | PermissionKey) -> PermissionKey:
        """Parse a ``resource:action:scope`` string.

        Raises:
            InvalidPermissionError: if the string is not a known triple.
        """
        if isinstance(value, PermissionKey):
            return value
        if not isinstance(value, str):
            raise InvalidPermissionError(repr(value), "not a string")

        parts = value.split(SEPARATOR)
        if len(parts) != 3:
            raise InvalidPermissionError(value, "expected resource:action:scope")

        resource, action, scope = parts
        try:
            return cls(Resource(resource), Action(action), Scope(scope))
        except ValueError as e:
            raise InvalidPermissionError(value, str(e)) from e

    @classmethod
    def of(cls, resource: Resource | str, action: Action | str, scope: Scope | str) -> PermissionKey:
        """Build a key from its parts, validating each one."""
        return cls.parse(
            SEPARATOR.join(
                p.value if isinstance(p, Enum) else str(p)
                for p in (resource, action, scope)
            )
        )

    @property
    def name(self) -> str:
        return SEPARATOR.join((self.resource.value, self.action.value, self.scope.value))

    def with_scope(self, scope: Scope) -> PermissionKey:
        return PermissionKey(self.resource, self.action, scope)

    def __str__(self) -> str:
        return self.name


def permission_name(value: str | PermissionKey) -> str:
    """Normalize a permission to its serialized name, validating it."""
    return PermissionKey.parse(value).name


def is_valid_permission(value: str) -> bool:
    """Check if a string is a well-formed, known permission."""
    try:
        PermissionKey.parse(value)
        return True
    except InvalidPermissionError:
        return False
