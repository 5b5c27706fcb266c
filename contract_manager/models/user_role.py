# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""User to role assignment."""

from __future__ import annotations

import datetime
import uuid as uuid_lib
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contract_manager.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from contract_manager.models.company import Company
    from contract_manager.models.role import Role
    from contract_manager.models.user import User


class UserRole(Base, TimestampMixin):
    """Association between a user, role, and company including assignment metadata."""

    __tablename__ = "user_roles"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid_lib.uuid4
    )
    user_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False
    )
    company_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=True,
    )
    assigned_by_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True
    )
    assigned_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, default=datetime.datetime.utcnow, nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # NULL = never expires
    valid_until: Mapped[datetime.datetime | None] = mapped_column(
        DateTime, nullable=True
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id", "role_id", "company_id", name="_user_role_company_uc"
        ),
        # NULLs are distinct in the constraint above
        Index(
            "uq_user_role_without_company",
            "user_id",
            "role_id",
            unique=True,
            sqlite_where=text("company_id IS NULL"),
            postgresql_where=text("company_id IS NULL"),
        ),
    )

    user: Mapped[User] = relationship(
        "User", back_populates="user_roles", foreign_keys=[user_id]
    )
    role: Mapped[Role] = relationship("Role", back_populates="user_roles")
    company: Mapped[Company | None] = relationship(
        "Company", back_populates="user_roles"
    )
    assigned_by: Mapped[User | None] = relationship("User", foreign_keys=[assigned_by_id])

    def is_effective(self, now: datetime.datetime | None = None) -> bool:
        """Check whether this assignment currently grants its role."""
        if not self.is_active:
            return False
        if self.valid_until is None:
            return True
        return self.valid_until > (now or datetime.datetime.utcnow())
