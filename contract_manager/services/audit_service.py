# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Audit logging for permission checks and role changes.

Audit writes are best effort: a failure is logged and never changes the
outcome of the operation being audited.
"""

import json
import logging
import uuid
from typing import Any

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from contract_manager.config import settings
from contract_manager.models import AuditEventType, AuditLog, AuditResult

logger = logging.getLogger(__name__)


def get_client_ip(request: Request | None) -> str | None:
    """Extract the client IP, honouring proxy headers."""
    if request is None:
        return None
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client:
        return request.client.host
    return None


def get_user_agent(request: Request | None) -> str | None:
    if request is None:
        return None
    return request.headers.get("user-agent")


def _write(db: Session, entry: AuditLog) -> AuditLog | None:
    try:
        db.add(entry)
        db.commit()
        return entry
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Failed to write audit entry {entry.event_type.value}: {e}")
        return None


def log_permission_check(
    db: Session,
    user_id: uuid.UUID | None,
    permissions: list[str],
    result: AuditResult,
    reason: str | None = None,
    request: Request | None = None,
    match: str | None = None,
) -> AuditLog | None:
    """Record the outcome of a guard decision."""
    if not settings.rbac_audit_enabled:
        return None

    joiner = " AND " if match == "all" else " OR "
    entry = AuditLog(
        event_type=AuditEventType.PERMISSION_CHECK,
        user_id=user_id,
        permission=joiner.join(permissions),
        result=result.value,
        reason=reason,
        path=request.url.path if request is not None else None,
        method=request.method if request is not None else None,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    return _write(db, entry)


def log_role_change(
    db: Session,
    event_type: AuditEventType,
    user_id: uuid.UUID,
    role_name: str,
    actor_id: uuid.UUID | None = None,
    company_id: uuid.UUID | None = None,
) -> AuditLog | None:
    """Record a role assignment or removal."""
    if not settings.rbac_audit_enabled:
        return None

    details: dict[str, Any] = {"role": role_name}
    if actor_id is not None:
        details["actor_id"] = str(actor_id)
    if company_id is not None:
        details["company_id"] = str(company_id)

    entry = AuditLog(
        event_type=event_type,
        user_id=user_id,
        result=event_type.value.upper(),
        details=json.dumps(details),
    )
    return _write(db, entry)


def get_audit_logs(
    db: Session,
    user_id: uuid.UUID | None = None,
    event_type: AuditEventType | None = None,
    result: str | None = None,
    limit: int = 100,
) -> list[AuditLog]:
    """List audit entries, newest first."""
    query = db.query(AuditLog)
    if user_id is not None:
        query = query.filter(AuditLog.user_id == user_id)
    if event_type is not None:
        query = query.filter(AuditLog.event_type == event_type)
    if result is not None:
        query = query.filter(AuditLog.result == result)
    return query.order_by(AuditLog.created_at.desc()).limit(limit).all()
