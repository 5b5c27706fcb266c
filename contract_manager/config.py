# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application settings loaded from the environment."""

import logging
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

EnforcementMode = Literal["enforce", "dry-run", "disabled"]


class Settings(BaseSettings):
    """Runtime configuration."""

    # Database
    database_url: str = "sqlite:///./contract_manager.db"

    # App
    app_name: str = "contract-manager"
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Sessions issued by the identity provider
    session_cookie_name: str = "session"
    session_expiry_days: int = 7

    # RBAC
    rbac_enforcement: EnforcementMode = "enforce"
    rbac_audit_enabled: bool = True
    permission_cache_ttl_seconds: int = 60
    seed_rbac_on_startup: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def effective_enforcement_mode(self) -> EnforcementMode:
        """Return the enforcement mode, forcing ``enforce`` in production."""
        if self.is_production and self.rbac_enforcement != "enforce":
            logger.warning(
                f"RBAC enforcement '{self.rbac_enforcement}' ignored in "
                "production, using 'enforce'"
            )
            return "enforce"
        return self.rbac_enforcement


settings = Settings()
