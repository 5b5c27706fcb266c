"""Services package."""
from contract_manager.services import (
    audit_service,
    auth_service,
    contract_service,
    permission_view,
    rbac_seed_service,
    rbac_service,
)

__all__ = [
    "audit_service",
    "auth_service",
    "contract_service",
    "permission_view",
    "rbac_seed_service",
    "rbac_service",
]
