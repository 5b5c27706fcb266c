# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission model."""

import uuid as uuid_lib

from sqlalchemy import String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from contract_manager.models.base import Base, TimestampMixin
from contract_manager.rbac.types import PermissionKey


class Permission(Base, TimestampMixin):
    """A resource:action:scope capability.

    Rows are append-only: once a role references a permission its triple never
    changes. Only ``display_name`` and ``description`` may be updated.
    """

    __tablename__ = "permissions"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    name: Mapped[str] = mapped_column(String(150), unique=True, nullable=False)
    resource: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    scope: Mapped[str] = mapped_column(String(10), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("resource", "action", "scope", name="_permission_triple_uc"),
    )

    @property
    def key(self) -> PermissionKey:
        return PermissionKey.parse(self.name)
