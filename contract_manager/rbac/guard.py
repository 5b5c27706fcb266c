# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Route guard for permission-based authorization.

Usage::

    @router.post("/bookings")
    def create_booking(
        rbac: RBACContext = Depends(with_rbac("booking:create:own")),
    ) -> BookingResponse:
        ...

The guard resolves the caller, loads their effective permission set and
evaluates the requirement before the endpoint body runs. It fails closed:
a missing identity is a 401, while a denial or any error during evaluation
is a 403. It never redirects.
"""

import logging
from dataclasses import dataclass, field

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from contract_manager.api.deps import get_db, get_optional_user
from contract_manager.config import EnforcementMode, settings
from contract_manager.events import AppEvent, event_bus
from contract_manager.models import AuditResult, User
from contract_manager.rbac.evaluator import (
    evaluate,
    granted_permissions,
    missing_permissions,
    normalize_required,
)
from contract_manager.rbac.exceptions import EmptyRequirementError
from contract_manager.rbac.scope import (
    CallerContext,
    ResourceContext,
    query_scope,
    resolve_scope,
)
from contract_manager.rbac.types import (
    Action,
    Match,
    PermissionKey,
    ResolvedScope,
    Resource,
    Scope,
)
from contract_manager.services import audit_service, permission_view

logger = logging.getLogger(__name__)


def _unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": "UNAUTHENTICATED", "message": "Authentication required"},
    )


def _denied(missing: list[str]) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "code": "PERMISSION_DENIED",
            "message": "Insufficient permissions",
            "missing_permissions": missing,
        },
    )


def permission_check_failed() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "code": "PERMISSION_CHECK_FAILED",
            "message": "Permission check failed",
        },
    )


@dataclass
class RBACContext:
    """What a guarded endpoint knows about its caller."""

    user: User
    permissions: frozenset[str]
    required: list[str]
    granted: list[str]
    match: Match
    mode: EnforcementMode = "enforce"
    db: Session | None = field(default=None, repr=False)
    request: Request | None = field(default=None, repr=False)

    @property
    def enforce(self) -> bool:
        return self.mode == "enforce"

    @property
    def caller(self) -> CallerContext:
        return CallerContext(user_id=self.user.id, company_id=self.user.company_id)

    @property
    def permission(self) -> str | None:
        """The first required permission the caller holds."""
        return self.granted[0] if self.granted else None

    def has(self, permission: str | PermissionKey) -> bool:
        return PermissionKey.parse(permission).name in self.permissions

    def scope_for(self, resource: Resource | str, action: Action | str) -> ResolvedScope:
        """Broadest scope held for an action, for filtering list queries."""
        return query_scope(self.permissions, resource, action)

    def resolve(
        self,
        resource: Resource | str,
        action: Action | str,
        target: ResourceContext,
    ) -> ResolvedScope:
        """Scope at which the caller may act on one concrete resource."""
        return resolve_scope(self.permissions, resource, action, self.caller, target)

    def require(
        self,
        resource: Resource | str,
        action: Action | str,
        target: ResourceContext,
    ) -> ResolvedScope:
        """Resolve the scope and reject the request if it is denied.

        Outside enforce mode the denial is only logged and audited.
        """
        scope = self.resolve(resource, action, target)
        if scope is not ResolvedScope.DENIED or self.mode == "disabled":
            return scope

        missing = [
            PermissionKey.of(resource, action, s).name for s in (Scope.OWN, Scope.ALL)
        ]
        result = AuditResult.DENY if self.enforce else AuditResult.WOULD_BLOCK
        logger.warning(
            f"Scope check {result.value} for user {self.user.id}: "
            f"{' OR '.join(missing)} on resource owned by {target.owner_id}"
        )
        if self.db is not None:
            audit_service.log_permission_check(
                self.db,
                self.user.id,
                missing,
                result,
                reason="resource outside caller scope",
                request=self.request,
            )
        if self.enforce:
            raise _denied(missing)
        return scope


def with_rbac(*required: str | PermissionKey, match: Match = Match.ANY):
    """Build a FastAPI dependency that guards an endpoint.

    ``match`` selects whether any or all of ``required`` must be held. An
    empty or malformed requirement is reported as a failed check at request
    time, never as an allow.
    """
    names = [str(p) for p in required]

    def dependency(
        request: Request,
        db: Session = Depends(get_db),
        user: User | None = Depends(get_optional_user),
    ) -> RBACContext:
        if user is None:
            raise _unauthenticated()

        mode = settings.effective_enforcement_mode()
        label = f" {'AND' if match is Match.ALL else 'OR'} ".join(names) or "<none>"

        try:
            normalized = normalize_required(names)
            if not normalized:
                raise EmptyRequirementError("Guard declared without permissions")
            effective = permission_view.load_effective_permissions(db, user.id)
            allowed = evaluate(effective, normalized, match)
        except Exception as e:
            logger.error(
                f"Permission check failed for user {user.id} requiring {label}: {e}"
            )
            audit_service.log_permission_check(
                db,
                user.id,
                names,
                AuditResult.ERROR,
                reason=str(e),
                request=request,
                match=match.value,
            )
            raise permission_check_failed() from e

        context = RBACContext(
            user=user,
            permissions=effective,
            required=normalized,
            granted=granted_permissions(effective, normalized),
            match=match,
            mode=mode,
            db=db,
            request=request,
        )

        if allowed:
            logger.debug(
                f"Permission granted for user {user.id}: {label} "
                f"({len(effective)} effective)"
            )
            if mode != "disabled":
                audit_service.log_permission_check(
                    db, user.id, normalized, AuditResult.ALLOW,
                    request=request, match=match.value,
                )
            return context

        missing = missing_permissions(effective, normalized)

        if mode == "disabled":
            logger.debug(f"RBAC disabled, allowing user {user.id} without {label}")
            return context

        if mode == "dry-run":
            logger.warning(
                f"[dry-run] Would block user {user.id} requiring {label} "
                f"({len(effective)} effective) on {request.method} {request.url.path}"
            )
            audit_service.log_permission_check(
                db, user.id, normalized, AuditResult.WOULD_BLOCK,
                reason="dry-run", request=request, match=match.value,
            )
            return context

        logger.warning(
            f"Permission denied for user {user.id} requiring {label} "
            f"({len(effective)} effective) on {request.method} {request.url.path}"
        )
        audit_service.log_permission_check(
            db, user.id, normalized, AuditResult.DENY,
            reason=f"missing {', '.join(missing)}", request=request, match=match.value,
        )
        event_bus.publish(
            AppEvent.PERMISSION_DENIED,
            {
                "user_id": str(user.id),
                "required": normalized,
                "missing": missing,
                "path": request.url.path,
            },
        )
        raise _denied(missing)

    # Read by the drift check and the guard lint
    dependency.required_permissions = tuple(names)
    return dependency
