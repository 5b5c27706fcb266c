# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Contract API endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from contract_manager.api.deps import get_db
from contract_manager.models import Contract, ContractStatus
from contract_manager.rbac.guard import RBACContext, with_rbac
from contract_manager.rbac.types import Action, Resource
from contract_manager.schemas.contract import (
    ContractCreate,
    ContractResponse,
    ContractUpdate,
)
from contract_manager.services import contract_service
from contract_manager.services.contract_service import InvalidTransitionError

router = APIRouter()


def _get_contract_or_404(db: Session, contract_id: uuid.UUID) -> Contract:
    contract = contract_service.get_contract(db, contract_id)
    if not contract:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "CONTRACT_NOT_FOUND", "message": "Contract not found"},
        )
    return contract


def _invalid_transition(e: InvalidTransitionError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"code": "INVALID_TRANSITION", "message": str(e)},
    )


@router.get("", response_model=list[ContractResponse])
def list_contracts(
    status_filter: ContractStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("contract:read:own", "contract:read:all")),
) -> list[ContractResponse]:
    """List contracts, limited to owned or company contracts without ``all`` scope."""
    scope = rbac.scope_for(Resource.CONTRACT, Action.READ)
    contracts = contract_service.get_contracts(
        db, scope, rbac.caller, status=status_filter, limit=limit, offset=offset
    )
    return [ContractResponse.model_validate(c) for c in contracts]


@router.post("", response_model=ContractResponse, status_code=status.HTTP_201_CREATED)
def create_contract(
    data: ContractCreate,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("contract:create:own")),
) -> ContractResponse:
    """Create a draft contract owned by the caller."""
    contract = contract_service.create_contract(
        db, rbac.user, title=data.title, description=data.description
    )
    return ContractResponse.model_validate(contract)


@router.get("/{contract_id}", response_model=ContractResponse)
def get_contract(
    contract_id: uuid.UUID,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("contract:read:own", "contract:read:all")),
) -> ContractResponse:
    contract = _get_contract_or_404(db, contract_id)
    rbac.require(
        Resource.CONTRACT, Action.READ, contract_service.resource_context(contract)
    )
    return ContractResponse.model_validate(contract)


@router.put("/{contract_id}", response_model=ContractResponse)
def update_contract(
    contract_id: uuid.UUID,
    data: ContractUpdate,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(
        with_rbac("contract:update:own", "contract:update:all")
    ),
) -> ContractResponse:
    """Update a contract at whichever scope the caller holds for it."""
    contract = _get_contract_or_404(db, contract_id)
    rbac.require(
        Resource.CONTRACT, Action.UPDATE, contract_service.resource_context(contract)
    )
    try:
        contract = contract_service.update_contract(
            db,
            contract,
            title=data.title,
            description=data.description,
            status=data.status,
        )
    except InvalidTransitionError as e:
        raise _invalid_transition(e) from e
    return ContractResponse.model_validate(contract)


@router.post("/{contract_id}/approve", response_model=ContractResponse)
def approve_contract(
    contract_id: uuid.UUID,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(
        with_rbac("contract:approve:own", "contract:approve:all")
    ),
) -> ContractResponse:
    contract = _get_contract_or_404(db, contract_id)
    rbac.require(
        Resource.CONTRACT, Action.APPROVE, contract_service.resource_context(contract)
    )
    try:
        contract = contract_service.approve_contract(db, contract, rbac.user)
    except InvalidTransitionError as e:
        raise _invalid_transition(e) from e
    return ContractResponse.model_validate(contract)


@router.post("/{contract_id}/archive", response_model=ContractResponse)
def archive_contract(
    contract_id: uuid.UUID,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(with_rbac("contract:archive:all")),
) -> ContractResponse:
    contract = _get_contract_or_404(db, contract_id)
    try:
        contract = contract_service.archive_contract(db, contract)
    except InvalidTransitionError as e:
        raise _invalid_transition(e) from e
    return ContractResponse.model_validate(contract)


@router.delete("/{contract_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_contract(
    contract_id: uuid.UUID,
    db: Session = Depends(get_db),
    rbac: RBACContext = Depends(
        with_rbac("contract:delete:own", "contract:delete:all")
    ),
) -> None:
    contract = _get_contract_or_404(db, contract_id)
    rbac.require(
        Resource.CONTRACT, Action.DELETE, contract_service.resource_context(contract)
    )
    contract_service.delete_contract(db, contract)
