# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission evaluation over an already-loaded effective permission set.

Everything here is pure and synchronous. Matching is exact set membership:
holding ``contract:read:all`` does not imply ``contract:read:own``, and there
is no prefix or wildcard matching. Scope disambiguation lives in
:mod:`contract_manager.rbac.scope`.
"""

from collections.abc import Collection, Iterable

from contract_manager.rbac.types import (
    Action,
    Match,
    PermissionKey,
    Resource,
    Scope,
    permission_name,
)

EffectiveSet = Collection[str]


def normalize_required(required: Iterable[str | PermissionKey]) -> list[str]:
    """Validate and serialize a list of required permissions.

    Raises:
        InvalidPermissionError: if any entry is malformed.
    """
    return [permission_name(p) for p in required]


def has_permission(effective: EffectiveSet, required: str | PermissionKey) -> bool:
    """Check if a single permission is in the effective set."""
    return permission_name(required) in effective


def can_perform_action(
    effective: EffectiveSet, resource: Resource | str, action: Action | str
) -> bool:
    """Check if the set holds the action at either scope.

    Which scope applies to a concrete resource is decided by the scope
    resolver, not here.
    """
    return any(
        PermissionKey.of(resource, action, scope).name in effective for scope in Scope
    )


def has_any_permission(
    effective: EffectiveSet, required: Iterable[str | PermissionKey]
) -> bool:
    """True if at least one required permission is held. Empty lists deny."""
    names = normalize_required(required)
    if not names:
        return False
    return any(name in effective for name in names)


def has_all_permissions(
    effective: EffectiveSet, required: Iterable[str | PermissionKey]
) -> bool:
    """True only if every required permission is held. Empty lists deny."""
    names = normalize_required(required)
    if not names:
        return False
    return all(name in effective for name in names)


def missing_permissions(
    effective: EffectiveSet, required: Iterable[str | PermissionKey]
) -> list[str]:
    """Return the required permissions that are not in the effective set."""
    return [name for name in normalize_required(required) if name not in effective]


def evaluate(
    effective: EffectiveSet,
    required: Iterable[str | PermissionKey],
    match: Match = Match.ANY,
) -> bool:
    """Evaluate a requirement list with ANY or ALL semantics."""
    if match is Match.ALL:
        return has_all_permissions(effective, required)
    return has_any_permission(effective, required)


def granted_permissions(
    effective: EffectiveSet, required: Iterable[str | PermissionKey]
) -> list[str]:
    """Return the required permissions that are held."""
    return [name for name in normalize_required(required) if name in effective]
