# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Contract service for CRUD and lifecycle transitions.

Callers pass the scope already resolved by the guard; this module only turns
it into query filters and performs the state changes.
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from contract_manager.models import Contract, ContractStatus, User
from contract_manager.rbac.scope import CallerContext, ResourceContext
from contract_manager.rbac.types import ResolvedScope

logger = logging.getLogger(__name__)

# Allowed status transitions
_TRANSITIONS: dict[ContractStatus, set[ContractStatus]] = {
    ContractStatus.DRAFT: {ContractStatus.PENDING_APPROVAL, ContractStatus.ARCHIVED},
    ContractStatus.PENDING_APPROVAL: {
        ContractStatus.DRAFT,
        ContractStatus.APPROVED,
        ContractStatus.ARCHIVED,
    },
    ContractStatus.APPROVED: {ContractStatus.ARCHIVED},
    ContractStatus.ARCHIVED: set(),
}


class InvalidTransitionError(ValueError):
    """A contract cannot move to the requested status."""


def resource_context(contract: Contract) -> ResourceContext:
    """Ownership of a contract for scope resolution."""
    return ResourceContext(owner_id=contract.owner_id, company_id=contract.company_id)


def get_contracts(
    db: Session,
    scope: ResolvedScope,
    caller: CallerContext,
    status: ContractStatus | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[Contract]:
    """List contracts visible at the given scope."""
    if scope is ResolvedScope.DENIED:
        return []

    query = db.query(Contract)
    if scope is ResolvedScope.OWN:
        conditions = [Contract.owner_id == caller.user_id]
        if caller.company_id is not None:
            conditions.append(Contract.company_id == caller.company_id)
        query = query.filter(or_(*conditions))
    if status is not None:
        query = query.filter(Contract.status == status)
    return (
        query.order_by(Contract.created_at.desc()).offset(offset).limit(limit).all()
    )


def get_contract(db: Session, contract_id: uuid.UUID) -> Contract | None:
    return db.get(Contract, contract_id)


def create_contract(
    db: Session,
    owner: User,
    title: str,
    description: str | None = None,
) -> Contract:
    """Create a draft contract owned by a user and their company."""
    contract = Contract(
        title=title,
        description=description,
        owner_id=owner.id,
        company_id=owner.company_id,
        status=ContractStatus.DRAFT,
    )
    db.add(contract)
    db.commit()
    db.refresh(contract)
    logger.info(f"Created contract {contract.id} for user {owner.id}")
    return contract


def update_contract(
    db: Session,
    contract: Contract,
    title: str | None = None,
    description: str | None = None,
    status: ContractStatus | None = None,
) -> Contract:
    """Update contract fields.

    Approval and archival have their own operations and cannot be reached
    through a plain update.
    """
    if title is not None:
        contract.title = title
    if description is not None:
        contract.description = description
    if status is not None and status != contract.status:
        if status in (ContractStatus.APPROVED, ContractStatus.ARCHIVED):
            raise InvalidTransitionError(
                f"Use the dedicated operation to set status '{status.value}'"
            )
        _check_transition(contract, status)
        contract.status = status
    db.commit()
    db.refresh(contract)
    return contract


def _check_transition(contract: Contract, target: ContractStatus) -> None:
    if target not in _TRANSITIONS[contract.status]:
        raise InvalidTransitionError(
            f"Cannot move contract from '{contract.status.value}' to '{target.value}'"
        )


def approve_contract(db: Session, contract: Contract, approver: User) -> Contract:
    """Approve a contract that is pending approval."""
    _check_transition(contract, ContractStatus.APPROVED)
    contract.status = ContractStatus.APPROVED
    contract.approved_by_id = approver.id
    contract.approved_at = datetime.utcnow()
    db.commit()
    db.refresh(contract)
    logger.info(f"Contract {contract.id} approved by {approver.id}")
    return contract


def archive_contract(db: Session, contract: Contract) -> Contract:
    _check_transition(contract, ContractStatus.ARCHIVED)
    contract.status = ContractStatus.ARCHIVED
    db.commit()
    db.refresh(contract)
    logger.info(f"Contract {contract.id} archived")
    return contract


def delete_contract(db: Session, contract: Contract) -> None:
    db.delete(contract)
    db.commit()
