# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""RBAC exception hierarchy."""


class RBACError(Exception):
    """Base exception for RBAC errors."""


class InvalidPermissionError(RBACError):
    """A permission string is malformed or names an unknown part."""

    def __init__(self, value: str, reason: str = "") -> None:
        self.value = value
        self.reason = reason
        message = f"Invalid permission '{value}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class SeedingConflictError(RBACError):
    """A registry operation referenced a role or permission that does not exist."""


class PermissionLoadError(RBACError):
    """The caller's effective permission set could not be loaded."""


class EmptyRequirementError(RBACError):
    """A guard was declared without any required permission."""


class NotFoundError(RBACError):
    """A role, user or permission referenced by an operation does not exist."""


class ProtectedRoleError(RBACError):
    """System roles cannot be modified or retired."""
