# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Company (tenant) model."""

from __future__ import annotations

import uuid as uuid_lib
from typing import TYPE_CHECKING

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contract_manager.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from contract_manager.models.user import User
    from contract_manager.models.user_role import UserRole


class Company(Base, TimestampMixin):
    """A tenant that owns users, parties and contracts."""

    __tablename__ = "companies"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    users: Mapped[list[User]] = relationship("User", back_populates="company")
    user_roles: Mapped[list[UserRole]] = relationship(
        "UserRole",
        back_populates="company",
        cascade="all, delete-orphan",
    )
