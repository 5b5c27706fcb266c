# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contract_manager.models import RoleCategory
from contract_manager.rbac.exceptions import InvalidPermissionError
from contract_manager.rbac.types import permission_name


def _validate_permission_names(value: list[str] | None) -> list[str] | None:
    if value is None:
        return None
    try:
        return [permission_name(p) for p in value]
    except InvalidPermissionError as e:
        raise ValueError(str(e)) from e


class PermissionSchema(BaseModel):
    """Schema representing a permission."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    resource: str
    action: str
    scope: str
    display_name: str | None
    description: str | None


class RoleSchema(BaseModel):
    """Schema representing a role."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    category: RoleCategory
    is_system: bool
    description: str | None


class RoleWithPermissionsSchema(RoleSchema):
    """Schema representing a role along with its permission names."""

    permissions: list[str]


class RoleCreateSchema(BaseModel):
    """Schema for creating a new role."""

    name: str = Field(min_length=1, max_length=100)
    category: RoleCategory = RoleCategory.CLIENT
    description: str | None = None
    permissions: list[str] = []

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v: list[str] | None) -> list[str] | None:
        return _validate_permission_names(v)


class RoleUpdateSchema(BaseModel):
    """Schema for updating a role."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    category: RoleCategory | None = None
    description: str | None = None
    permissions: list[str] | None = None

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v: list[str] | None) -> list[str] | None:
        return _validate_permission_names(v)


class RolePermissionChangeSchema(BaseModel):
    """Result of attaching or detaching one permission."""

    role_id: uuid.UUID
    permission: str
    changed: bool


class UserRoleSchema(BaseModel):
    """Schema representing a user's role assignment."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    role_id: uuid.UUID
    company_id: uuid.UUID | None
    assigned_by_id: uuid.UUID | None
    assigned_at: datetime
    is_active: bool
    valid_until: datetime | None
    role: RoleSchema


class UserRoleAssignmentSchema(BaseModel):
    """Schema for assigning a role to a user."""

    role_id: uuid.UUID
    company_id: uuid.UUID | None = None
    valid_until: datetime | None = None


class UserPermissionsSchema(BaseModel):
    """Schema representing a user's effective permissions."""

    user_id: uuid.UUID
    roles: list[str]
    permissions: list[str]


class RefreshResultSchema(BaseModel):
    """Outcome of a permission view refresh."""

    model_config = ConfigDict(from_attributes=True)

    refreshed_at: datetime
    row_count: int
    user_count: int


class AuditLogSchema(BaseModel):
    """Schema representing one audit entry."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    event_type: str
    user_id: uuid.UUID | None
    permission: str | None
    result: str
    reason: str | None
    path: str | None
    method: str | None
    ip_address: str | None
    details: str | None
    created_at: datetime


class DriftReportSchema(BaseModel):
    """Differences between guard requirements and the permission catalog."""

    ok: bool
    summary: str
    p0_critical: list[str]
    p2_unused: list[str]
    invalid: list[str]
    sources: dict[str, list[str]]


class CacheStatsSchema(BaseModel):
    """Permission cache statistics."""

    enabled: bool
    ttl_seconds: int
    size: int
    hits: int
    misses: int
