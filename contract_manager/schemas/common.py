# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Common schema types."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str


class ErrorDetail(BaseModel):
    """Machine-readable error body carried in ``HTTPException.detail``."""

    code: str
    message: str
    missing_permissions: list[str] | None = None
