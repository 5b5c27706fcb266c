# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for contract_service."""

import pytest

from contract_manager.models import Company, ContractStatus, User
from contract_manager.rbac.scope import CallerContext
from contract_manager.rbac.types import ResolvedScope
from contract_manager.services import contract_service
from contract_manager.services.contract_service import InvalidTransitionError


@pytest.fixture
def people(db_session):
    acme = Company(name="Acme")
    other = Company(name="Other")
    db_session.add_all([acme, other])
    db_session.commit()

    alice = User(email="alice@example.com", company_id=acme.id)
    bob = User(email="bob@example.com", company_id=acme.id)
    carol = User(email="carol@example.com", company_id=other.id)
    db_session.add_all([alice, bob, carol])
    db_session.commit()
    return alice, bob, carol


def caller(user: User) -> CallerContext:
    return CallerContext(user_id=user.id, company_id=user.company_id)


def test_create_contract_copies_ownership(db_session, people):
    alice, _, _ = people
    contract = contract_service.create_contract(db_session, alice, "Promoter agreement")

    assert contract.owner_id == alice.id
    assert contract.company_id == alice.company_id
    assert contract.status == ContractStatus.DRAFT


def test_list_filters_by_scope(db_session, people):
    alice, bob, carol = people
    contract_service.create_contract(db_session, alice, "A")
    contract_service.create_contract(db_session, bob, "B")
    contract_service.create_contract(db_session, carol, "C")

    own = contract_service.get_contracts(db_session, ResolvedScope.OWN, caller(alice))
    everything = contract_service.get_contracts(db_session, ResolvedScope.ALL, caller(alice))
    denied = contract_service.get_contracts(db_session, ResolvedScope.DENIED, caller(alice))

    assert {c.title for c in own} == {"A", "B"}
    assert len(everything) == 3
    assert denied == []


def test_approval_flow(db_session, people):
    alice, bob, _ = people
    contract = contract_service.create_contract(db_session, alice, "A")

    with pytest.raises(InvalidTransitionError):
        contract_service.approve_contract(db_session, contract, bob)

    contract = contract_service.update_contract(
        db_session, contract, status=ContractStatus.PENDING_APPROVAL
    )
    contract = contract_service.approve_contract(db_session, contract, bob)

    assert contract.status == ContractStatus.APPROVED
    assert contract.approved_by_id == bob.id
    assert contract.approved_at is not None


def test_update_cannot_approve_or_archive(db_session, people):
    alice, _, _ = people
    contract = contract_service.create_contract(db_session, alice, "A")
    with pytest.raises(InvalidTransitionError):
        contract_service.update_contract(db_session, contract, status=ContractStatus.APPROVED)


def test_archived_contract_is_final(db_session, people):
    alice, _, _ = people
    contract = contract_service.create_contract(db_session, alice, "A")
    contract = contract_service.archive_contract(db_session, contract)

    assert contract.status == ContractStatus.ARCHIVED
    with pytest.raises(InvalidTransitionError):
        contract_service.archive_contract(db_session, contract)
