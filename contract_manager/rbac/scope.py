# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Resolve ``own``/``all`` scoped permissions against concrete resources."""

import uuid
from dataclasses import dataclass

from contract_manager.rbac.evaluator import EffectiveSet
from contract_manager.rbac.types import Action, PermissionKey, Resource, ResolvedScope, Scope


@dataclass(frozen=True)
class CallerContext:
    """Who is asking."""

    user_id: uuid.UUID
    company_id: uuid.UUID | None = None


@dataclass(frozen=True)
class ResourceContext:
    """Ownership of the resource being acted upon."""

    owner_id: uuid.UUID | None = None
    company_id: uuid.UUID | None = None


def query_scope(
    effective: EffectiveSet, resource: Resource | str, action: Action | str
) -> ResolvedScope:
    """Broadest scope held for an action, used to filter list queries.

    ``all`` is checked first: a caller holding both scopes must get
    unfiltered results.
    """
    if PermissionKey.of(resource, action, Scope.ALL).name in effective:
        return ResolvedScope.ALL
    if PermissionKey.of(resource, action, Scope.OWN).name in effective:
        return ResolvedScope.OWN
    return ResolvedScope.DENIED


def owns(caller: CallerContext, target: ResourceContext) -> bool:
    """Check if the caller owns the resource or shares its company.

    A missing company id on either side never counts as a match.
    """
    if target.owner_id is not None and target.owner_id == caller.user_id:
        return True
    return (
        target.company_id is not None
        and caller.company_id is not None
        and target.company_id == caller.company_id
    )


def resolve_scope(
    effective: EffectiveSet,
    resource: Resource | str,
    action: Action | str,
    caller: CallerContext,
    target: ResourceContext,
) -> ResolvedScope:
    """Decide whether the caller may act on one resource, and at what scope."""
    scope = query_scope(effective, resource, action)
    if scope is ResolvedScope.ALL:
        return ResolvedScope.ALL
    if scope is ResolvedScope.OWN and owns(caller, target):
        return ResolvedScope.OWN
    return ResolvedScope.DENIED
