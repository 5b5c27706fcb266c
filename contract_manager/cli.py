# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Operator commands for the database and the RBAC catalog."""

from __future__ import annotations

import argparse
import logging
import sys

from contract_manager.config import settings
from contract_manager.database import SessionLocal, init_db

logger = logging.getLogger(__name__)


def cmd_init_db(args: argparse.Namespace) -> int:
    init_db()
    print("Database tables created.")
    return 0


def cmd_seed(args: argparse.Namespace) -> int:
    from contract_manager.services.rbac_seed_service import seed_rbac_data

    init_db()
    db = SessionLocal()
    try:
        report = seed_rbac_data(db)
    finally:
        db.close()

    print(
        f"Permissions created: {report.permissions_created}\n"
        f"Roles created:       {report.roles_created}\n"
        f"Attachments created: {report.attachments_created}\n"
        f"View rows:           {report.view_rows} ({report.view_users} users)"
    )
    if not report.changed:
        print("Catalog already up to date.")
    return 0


def cmd_refresh_permissions(args: argparse.Namespace) -> int:
    from contract_manager.services.permission_view import refresh_user_permissions

    db = SessionLocal()
    try:
        result = refresh_user_permissions(db)
    finally:
        db.close()
    print(f"Refreshed {result.row_count} rows for {result.user_count} users.")
    return 0


def cmd_drift_check(args: argparse.Namespace) -> int:
    """Exit non-zero when a guard requires a permission nobody can hold."""
    from contract_manager.api.v1.router import api_router
    from contract_manager.rbac.drift import check_drift, declared_permissions
    from contract_manager.rbac.permissions import CORE_PERMISSION_NAMES
    from contract_manager.services.rbac_service import list_permissions

    if args.catalog:
        seeded = CORE_PERMISSION_NAMES
    else:
        db = SessionLocal()
        try:
            seeded = [p.name for p in list_permissions(db)]
        finally:
            db.close()

    report = check_drift(declared_permissions(api_router.routes), seeded)
    for name in report.p0_critical:
        print(f"P0 {name} (required by {', '.join(report.sources[name])})")
    for name in report.invalid:
        print(f"INVALID {name} (required by {', '.join(report.sources[name])})")
    if args.verbose:
        for name in report.p2_unused:
            print(f"P2 {name}")
    print(report.summary())
    return 0 if report.ok else 1


def cmd_guard_lint(args: argparse.Namespace) -> int:
    """Exit non-zero when a critical route is reachable without any guard."""
    from contract_manager.api.v1.router import api_router
    from contract_manager.rbac.drift import CRITICAL_PREFIXES, find_unguarded_routes

    unguarded = find_unguarded_routes(api_router.routes, args.prefix or CRITICAL_PREFIXES)
    for route in unguarded:
        print(f"UNGUARDED {route}")
    print(f"{len(unguarded)} unguarded critical routes")
    return 1 if unguarded else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contract-manager",
        description="Manage the contract manager database and RBAC catalog.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init-db", help="Create missing database tables.")
    init.set_defaults(func=cmd_init_db)

    seed = subparsers.add_parser(
        "seed", help="Seed core permissions and default roles (idempotent)."
    )
    seed.set_defaults(func=cmd_seed)

    refresh = subparsers.add_parser(
        "refresh-permissions", help="Rebuild the materialized permission view."
    )
    refresh.set_defaults(func=cmd_refresh_permissions)

    drift = subparsers.add_parser(
        "drift-check",
        help="Compare permissions required by routes with the seeded catalog.",
    )
    drift.add_argument(
        "--catalog",
        action="store_true",
        help="Compare against the built-in catalog instead of the database.",
    )
    drift.add_argument(
        "--verbose",
        action="store_true",
        help="Also list seeded permissions no route requires (P2).",
    )
    drift.set_defaults(func=cmd_drift_check)

    lint = subparsers.add_parser(
        "guard-lint",
        help="List critical routes that have neither a permission guard nor identity.",
    )
    lint.add_argument(
        "--prefix",
        action="append",
        help="Critical path prefix to check (repeatable; replaces the defaults).",
    )
    lint.set_defaults(func=cmd_guard_lint)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``contract-manager`` command."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = build_parser().parse_args(argv)
    logger.debug(f"Running command {args.command}")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
