# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""User schemas."""

import uuid

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Schema for the authenticated user."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    full_name: str | None
    is_active: bool
    company_id: uuid.UUID | None
    permissions: list[str] = []
