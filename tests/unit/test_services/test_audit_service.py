# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for audit_service."""

import json
import uuid
from types import SimpleNamespace

from sqlalchemy.exc import OperationalError

from contract_manager.config import settings
from contract_manager.models import AuditEventType, AuditLog, AuditResult
from contract_manager.services import audit_service


def fake_request(headers: dict[str, str] | None = None, host: str = "10.0.0.1"):
    return SimpleNamespace(
        headers=headers or {},
        client=SimpleNamespace(host=host),
        url=SimpleNamespace(path="/api/v1/contracts"),
        method="GET",
    )


def test_client_ip_prefers_forwarded_for():
    request = fake_request({"x-forwarded-for": "203.0.113.7, 10.0.0.2", "x-real-ip": "1.1.1.1"})
    assert audit_service.get_client_ip(request) == "203.0.113.7"


def test_client_ip_falls_back_to_real_ip_and_peer():
    assert audit_service.get_client_ip(fake_request({"x-real-ip": "198.51.100.4"})) == "198.51.100.4"
    assert audit_service.get_client_ip(fake_request()) == "10.0.0.1"
    assert audit_service.get_client_ip(None) is None


def test_log_permission_check_joins_requirements(db_session):
    user_id = uuid.uuid4()
    entry = audit_service.log_permission_check(
        db_session,
        user_id,
        ["user:update:own", "user:update:all"],
        AuditResult.DENY,
        reason="missing",
        request=fake_request({"user-agent": "pytest"}),
    )

    assert entry.permission == "user:update:own OR user:update:all"
    assert entry.result == "DENY"
    assert entry.path == "/api/v1/contracts"
    assert entry.user_agent == "pytest"


def test_log_permission_check_all_match(db_session):
    entry = audit_service.log_permission_check(
        db_session, None, ["a:b:c", "d:e:f"], AuditResult.ALLOW, match="all"
    )
    assert entry.permission == "a:b:c AND d:e:f"


def test_disabled_audit_writes_nothing(db_session, monkeypatch):
    monkeypatch.setattr(settings, "rbac_audit_enabled", False)
    assert audit_service.log_permission_check(
        db_session, None, ["contract:read:own"], AuditResult.ALLOW
    ) is None
    assert db_session.query(AuditLog).count() == 0


def test_write_failure_is_not_raised(db_session, monkeypatch):
    def broken_commit():
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(db_session, "commit", broken_commit)

    assert audit_service.log_permission_check(
        db_session, None, ["contract:read:own"], AuditResult.ALLOW
    ) is None


def test_role_change_details(db_session):
    actor = uuid.uuid4()
    entry = audit_service.log_role_change(
        db_session, AuditEventType.ROLE_ASSIGNED, uuid.uuid4(), "Manager", actor_id=actor
    )
    assert entry.result == "ROLE_ASSIGNED"
    assert json.loads(entry.details) == {"role": "Manager", "actor_id": str(actor)}


def test_get_audit_logs_filters(db_session):
    user_id = uuid.uuid4()
    audit_service.log_permission_check(db_session, user_id, ["a:b:c"], AuditResult.DENY)
    audit_service.log_permission_check(db_session, user_id, ["a:b:c"], AuditResult.ALLOW)
    audit_service.log_permission_check(db_session, uuid.uuid4(), ["a:b:c"], AuditResult.DENY)

    assert len(audit_service.get_audit_logs(db_session, user_id=user_id)) == 2
    assert len(audit_service.get_audit_logs(db_session, result="DENY")) == 2
    assert len(audit_service.get_audit_logs(db_session, limit=1)) == 1
