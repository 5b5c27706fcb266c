# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Contract schemas for API request/response validation."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from contract_manager.models import ContractStatus


class ContractBase(BaseModel):
    """Base contract schema."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None


class ContractCreate(ContractBase):
    """Schema for creating a contract."""


class ContractUpdate(BaseModel):
    """Schema for updating a contract."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    status: ContractStatus | None = None


class ContractResponse(ContractBase):
    """Schema for contract response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    status: ContractStatus
    owner_id: uuid.UUID
    company_id: uuid.UUID | None
    approved_by_id: uuid.UUID | None
    approved_at: datetime | None
    created_at: datetime
    updated_at: datetime
