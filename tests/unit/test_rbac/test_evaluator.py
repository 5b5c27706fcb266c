# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for permission evaluation."""

import pytest

from contract_manager.rbac.evaluator import (
    can_perform_action,
    evaluate,
    granted_permissions,
    has_all_permissions,
    has_any_permission,
    has_permission,
    missing_permissions,
)
from contract_manager.rbac.exceptions import InvalidPermissionError
from contract_manager.rbac.types import Match, PermissionKey

EFFECTIVE = frozenset({"contract:read:all", "booking:create:own", "user:update:all"})


def test_has_permission_is_exact_membership():
    assert has_permission(EFFECTIVE, "contract:read:all") is True
    # holding :all does not imply :own
    assert has_permission(EFFECTIVE, "contract:read:own") is False


def test_has_permission_accepts_keys():
    assert has_permission(EFFECTIVE, PermissionKey.parse("booking:create:own"))


def test_has_permission_rejects_malformed():
    with pytest.raises(InvalidPermissionError):
        has_permission(EFFECTIVE, "contract:*:all")


def test_any_and_all_deny_on_empty_list():
    assert has_any_permission(EFFECTIVE, []) is False
    assert has_all_permissions(EFFECTIVE, []) is False
    assert evaluate(EFFECTIVE, [], Match.ANY) is False
    assert evaluate(EFFECTIVE, [], Match.ALL) is False


def test_any_passes_with_one_match():
    assert has_any_permission(EFFECTIVE, ["user:update:own", "user:update:all"])


def test_all_requires_every_permission():
    assert has_all_permissions(EFFECTIVE, ["contract:read:all", "user:update:all"])
    assert not has_all_permissions(EFFECTIVE, ["contract:read:all", "user:read:all"])


def test_empty_effective_set_denies_everything():
    assert has_any_permission(frozenset(), ["contract:read:own"]) is False
    assert evaluate(frozenset(), ["contract:read:own"], Match.ALL) is False


def test_missing_and_granted():
    required = ["booking:create:own", "booking:create:all"]
    assert missing_permissions(EFFECTIVE, required) == ["booking:create:all"]
    assert granted_permissions(EFFECTIVE, required) == ["booking:create:own"]


def test_can_perform_action_checks_either_scope():
    assert can_perform_action(EFFECTIVE, "contract", "read")
    assert can_perform_action(EFFECTIVE, "booking", "create")
    assert not can_perform_action(EFFECTIVE, "contract", "delete")
