# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contract_manager import __version__
from contract_manager.config import settings
from contract_manager.database import SessionLocal, init_db
from contract_manager.schemas.common import HealthResponse

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Set the root log level from settings."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(settings.log_level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    mode = settings.effective_enforcement_mode()
    logger.info(f"Starting {settings.app_name} ({settings.environment}), RBAC mode: {mode}")
    if mode != "enforce":
        logger.warning(f"RBAC enforcement is '{mode}': denials are not blocked")

    if settings.seed_rbac_on_startup:
        from contract_manager.services.rbac_seed_service import seed_rbac_data

        init_db()
        db = SessionLocal()
        try:
            report = seed_rbac_data(db)
            logger.info(
                f"Seeded RBAC catalog: {report.permissions_created} permissions, "
                f"{report.roles_created} roles created"
            )
        finally:
            db.close()

    yield

    logger.info("Shutting down...")


configure_logging()

app = FastAPI(
    title="Contract Manager",
    description="Contract management backend with role-based access control",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


# Import and include API router after it's created
from contract_manager.api.v1.router import api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")
