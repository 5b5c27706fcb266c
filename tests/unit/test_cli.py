# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for the operator CLI."""

import pytest
from fastapi import APIRouter

from contract_manager import cli


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_parser_commands():
    parser = cli.build_parser()
    assert parser.parse_args(["seed"]).func is cli.cmd_seed
    assert parser.parse_args(["refresh-permissions"]).func is cli.cmd_refresh_permissions
    args = parser.parse_args(["drift-check", "--catalog"])
    assert args.func is cli.cmd_drift_check
    assert args.catalog is True
    assert parser.parse_args(["guard-lint"]).func is cli.cmd_guard_lint


def test_drift_check_against_catalog(capsys):
    assert cli.main(["drift-check", "--catalog"]) == 0
    assert "0 critical (P0)" in capsys.readouterr().out


def test_guard_lint_passes_for_application(capsys):
    assert cli.main(["guard-lint"]) == 0
    assert "0 unguarded critical routes" in capsys.readouterr().out


def test_guard_lint_fails_on_unguarded_route(capsys, monkeypatch):
    from contract_manager.api.v1 import router as router_module

    unguarded = APIRouter()

    @unguarded.get("/users/export")
    def export_users():
        return []

    monkeypatch.setattr(router_module, "api_router", unguarded)

    assert cli.main(["guard-lint"]) == 1
    assert "UNGUARDED GET /users/export" in capsys.readouterr().out
