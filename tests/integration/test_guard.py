# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Integration tests for the route guard."""

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from contract_manager.config import settings
from contract_manager.database import get_db
from contract_manager.events import AppEvent, event_bus
from contract_manager.models import AuditLog
from contract_manager.rbac.guard import RBACContext, with_rbac
from contract_manager.rbac.roles import PLATFORM_ADMINISTRATOR
from contract_manager.rbac.types import Match
from contract_manager.services import permission_view, rbac_service

guard_app = FastAPI()


@guard_app.post("/bookings/own")
def create_own_booking(rbac: RBACContext = Depends(with_rbac("booking:create:own"))):
    return {"granted": rbac.granted}


@guard_app.post("/bookings/any")
def create_any_booking(rbac: RBACContext = Depends(with_rbac("booking:create:all"))):
    return {"granted": rbac.granted}


@guard_app.put("/users/profile")
def update_user(
    rbac: RBACContext = Depends(with_rbac("user:update:own", "user:update:all")),
):
    return {"granted": rbac.granted, "permission": rbac.permission}


@guard_app.get("/reports")
def both_required(
    rbac: RBACContext = Depends(
        with_rbac("report:view:all", "report:export:all", match=Match.ALL)
    ),
):
    return {"granted": rbac.granted}


@guard_app.get("/nothing")
def empty_requirement(rbac: RBACContext = Depends(with_rbac())):
    return {"ok": True}


@guard_app.get("/malformed")
def malformed_requirement(rbac: RBACContext = Depends(with_rbac("booking.create"))):
    return {"ok": True}


@pytest.fixture
def guard_client(db_session):
    def override_get_db():
        yield db_session

    guard_app.dependency_overrides[get_db] = override_get_db
    with TestClient(guard_app) as test_client:
        yield test_client
    guard_app.dependency_overrides.clear()


class TestAuthentication:
    """No caller identity means 401 for every guarded route."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("post", "/bookings/own"),
            ("post", "/bookings/any"),
            ("put", "/users/profile"),
            ("get", "/nothing"),
        ],
    )
    def test_requires_authentication(self, guard_client, method, path):
        response = getattr(guard_client, method)(path)
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHENTICATED"

    def test_invalid_token_is_unauthenticated(self, guard_client):
        response = guard_client.post(
            "/bookings/own", headers={"Authorization": "Bearer not-a-session"}
        )
        assert response.status_code == 401

    def test_session_cookie_is_accepted(self, guard_client, seeded, make_user, auth_headers):
        user = make_user("Basic Client")
        token = auth_headers(user)["Authorization"].split(" ", 1)[1]
        guard_client.cookies.set(settings.session_cookie_name, token)

        assert guard_client.post("/bookings/own").status_code == 200


class TestDecisions:
    def test_basic_client_books_own_but_not_all(
        self, guard_client, seeded, make_user, auth_headers
    ):
        headers = auth_headers(make_user("Basic Client"))

        allowed = guard_client.post("/bookings/own", headers=headers)
        assert allowed.status_code == 200
        assert allowed.json()["granted"] == ["booking:create:own"]

        denied = guard_client.post("/bookings/any", headers=headers)
        assert denied.status_code == 403
        detail = denied.json()["detail"]
        assert detail["code"] == "PERMISSION_DENIED"
        assert detail["missing_permissions"] == ["booking:create:all"]

    def test_administrator_passes_via_all_scope(
        self, guard_client, seeded, make_user, auth_headers
    ):
        headers = auth_headers(make_user(PLATFORM_ADMINISTRATOR))

        response = guard_client.put("/users/profile", headers=headers)

        assert response.status_code == 200
        assert "user:update:all" in response.json()["granted"]

    def test_role_without_permissions_denies_everything(
        self, guard_client, db_session, make_user, auth_headers
    ):
        rbac_service.upsert_role(db_session, "Fresh Role")
        headers = auth_headers(make_user("Fresh Role"))

        for method, path in [
            ("post", "/bookings/own"),
            ("post", "/bookings/any"),
            ("put", "/users/profile"),
            ("get", "/reports"),
        ]:
            response = getattr(guard_client, method)(path, headers=headers)
            assert response.status_code == 403, path

    def test_all_match_requires_every_permission(
        self, guard_client, seeded, make_user, auth_headers
    ):
        manager = auth_headers(make_user("Manager"))
        viewer = auth_headers(make_user("Viewer"))

        assert guard_client.get("/reports", headers=manager).status_code == 200
        response = guard_client.get("/reports", headers=viewer)
        assert response.status_code == 403
        assert response.json()["detail"]["missing_permissions"] == [
            "report:view:all",
            "report:export:all",
        ]

    def test_denial_publishes_event(self, guard_client, seeded, make_user, auth_headers):
        received = []
        event_bus.subscribe(AppEvent.PERMISSION_DENIED, received.append, owner="test")
        try:
            guard_client.post("/bookings/any", headers=auth_headers(make_user("Viewer")))
        finally:
            event_bus.unsubscribe_owner("test")

        assert received[0].data["missing"] == ["booking:create:all"]

    def test_revocation_takes_effect(
        self, guard_client, db_session, seeded, make_user, auth_headers
    ):
        user = make_user("Basic Client")
        headers = auth_headers(user)
        assert guard_client.post("/bookings/own", headers=headers).status_code == 200

        role = rbac_service.get_role_by_name(db_session, "Basic Client")
        rbac_service.remove_role_from_user(db_session, user.id, role.id)

        assert guard_client.post("/bookings/own", headers=headers).status_code == 403


class TestEvaluationFailures:
    def test_empty_requirement_fails_closed(self, guard_client, seeded, make_user, auth_headers):
        headers = auth_headers(make_user(PLATFORM_ADMINISTRATOR))
        response = guard_client.get("/nothing", headers=headers)
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "PERMISSION_CHECK_FAILED"

    def test_malformed_requirement_fails_closed(
        self, guard_client, seeded, make_user, auth_headers
    ):
        headers = auth_headers(make_user(PLATFORM_ADMINISTRATOR))
        response = guard_client.get("/malformed", headers=headers)
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "PERMISSION_CHECK_FAILED"

    def test_load_failure_fails_closed(
        self, guard_client, seeded, make_user, auth_headers, monkeypatch
    ):
        headers = auth_headers(make_user(PLATFORM_ADMINISTRATOR))

        def broken(*args, **kwargs):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(permission_view, "load_effective_permissions", broken)

        response = guard_client.post("/bookings/own", headers=headers)
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "PERMISSION_CHECK_FAILED"

    def test_failures_deny_in_dry_run(
        self, guard_client, seeded, make_user, auth_headers, monkeypatch
    ):
        monkeypatch.setattr(settings, "rbac_enforcement", "dry-run")
        headers = auth_headers(make_user(PLATFORM_ADMINISTRATOR))
        assert guard_client.get("/nothing", headers=headers).status_code == 403


class TestEnforcementModes:
    def test_dry_run_allows_and_records_would_block(
        self, guard_client, db_session, seeded, make_user, auth_headers, monkeypatch
    ):
        monkeypatch.setattr(settings, "rbac_enforcement", "dry-run")
        headers = auth_headers(make_user("Viewer"))

        response = guard_client.post("/bookings/any", headers=headers)

        assert response.status_code == 200
        results = [e.result for e in db_session.query(AuditLog)]
        assert "WOULD_BLOCK" in results

    def test_disabled_allows_but_still_needs_identity(
        self, guard_client, seeded, make_user, auth_headers, monkeypatch
    ):
        monkeypatch.setattr(settings, "rbac_enforcement", "disabled")

        assert guard_client.post("/bookings/any").status_code == 401
        response = guard_client.post(
            "/bookings/any", headers=auth_headers(make_user("Viewer"))
        )
        assert response.status_code == 200

    def test_production_forces_enforce(
        self, guard_client, seeded, make_user, auth_headers, monkeypatch
    ):
        monkeypatch.setattr(settings, "rbac_enforcement", "disabled")
        monkeypatch.setattr(settings, "environment", "production")

        response = guard_client.post(
            "/bookings/any", headers=auth_headers(make_user("Viewer"))
        )
        assert response.status_code == 403


class TestAudit:
    def test_decisions_are_audited(
        self, guard_client, db_session, seeded, make_user, auth_headers
    ):
        headers = auth_headers(make_user("Basic Client"))
        guard_client.post("/bookings/own", headers=headers)
        guard_client.post("/bookings/any", headers=headers)

        entries = {e.permission: e for e in db_session.query(AuditLog).filter(AuditLog.path.isnot(None))}
        assert entries["booking:create:own"].result == "ALLOW"
        assert entries["booking:create:all"].result == "DENY"
        assert entries["booking:create:all"].path == "/bookings/any"
        assert entries["booking:create:all"].method == "POST"

    def test_audit_can_be_disabled(
        self, guard_client, db_session, seeded, make_user, auth_headers, monkeypatch
    ):
        headers = auth_headers(make_user("Basic Client"))
        before = db_session.query(AuditLog).count()
        monkeypatch.setattr(settings, "rbac_audit_enabled", False)

        guard_client.post("/bookings/any", headers=headers)

        assert db_session.query(AuditLog).count() == before
