# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Materialized user permission rows."""

import uuid as uuid_lib
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, PrimaryKeyConstraint, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from contract_manager.models.base import Base


class UserPermissionView(Base):
    """One row per (user, permission) in a user's effective set.

    Rebuilt wholesale by ``permission_view.refresh_user_permissions``; never
    written row by row.
    """

    __tablename__ = "user_permissions_mv"

    user_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE")
    )
    permission_name: Mapped[str] = mapped_column(String(150))
    # Latest expiry among the assignments granting it; NULL = never expires
    valid_until: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (PrimaryKeyConstraint("user_id", "permission_name"),)


class PermissionViewState(Base):
    """Single-row bookkeeping for the last view refresh."""

    __tablename__ = "user_permissions_mv_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    refreshed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    row_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    user_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
