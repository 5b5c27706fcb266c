# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from contract_manager.api.v1 import auth, contracts, rbac

api_router = APIRouter()

# Auth routes
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# Contract routes
api_router.include_router(contracts.router, prefix="/contracts", tags=["contracts"])

# RBAC routes
api_router.include_router(rbac.router)
