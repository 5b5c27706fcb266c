# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for own/all scope resolution."""

import uuid

from contract_manager.rbac.scope import (
    CallerContext,
    ResourceContext,
    owns,
    query_scope,
    resolve_scope,
)
from contract_manager.rbac.types import ResolvedScope

USER_ID = uuid.uuid4()
OTHER_ID = uuid.uuid4()
COMPANY_ID = uuid.uuid4()


def test_all_wins_over_own():
    effective = {"contract:read:own", "contract:read:all"}
    caller = CallerContext(user_id=USER_ID)
    target = ResourceContext(owner_id=OTHER_ID)
    assert query_scope(effective, "contract", "read") is ResolvedScope.ALL
    assert resolve_scope(effective, "contract", "read", caller, target) is ResolvedScope.ALL


def test_own_scope_for_owned_resource():
    caller = CallerContext(user_id=USER_ID)
    target = ResourceContext(owner_id=USER_ID)
    assert (
        resolve_scope({"contract:read:own"}, "contract", "read", caller, target)
        is ResolvedScope.OWN
    )


def test_own_scope_for_same_company():
    caller = CallerContext(user_id=USER_ID, company_id=COMPANY_ID)
    target = ResourceContext(owner_id=OTHER_ID, company_id=COMPANY_ID)
    assert (
        resolve_scope({"contract:update:own"}, "contract", "update", caller, target)
        is ResolvedScope.OWN
    )


def test_own_scope_denied_for_foreign_resource():
    caller = CallerContext(user_id=USER_ID, company_id=COMPANY_ID)
    target = ResourceContext(owner_id=OTHER_ID, company_id=uuid.uuid4())
    assert (
        resolve_scope({"contract:read:own"}, "contract", "read", caller, target)
        is ResolvedScope.DENIED
    )


def test_missing_company_ids_never_match():
    caller = CallerContext(user_id=USER_ID, company_id=None)
    target = ResourceContext(owner_id=OTHER_ID, company_id=None)
    assert owns(caller, target) is False


def test_no_permission_is_denied():
    assert query_scope(set(), "contract", "read") is ResolvedScope.DENIED
