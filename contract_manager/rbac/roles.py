# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
from contract_manager.models.enums import RoleCategory

from .permissions import CORE_PERMISSION_NAMES

PLATFORM_ADMINISTRATOR = "Platform Administrator"

# Platform Administrator always gets every core permission
PLATFORM_ADMIN_PERMISSIONS = sorted(CORE_PERMISSION_NAMES)

# Default roles to seed. Only Platform Administrator is a system role
# (is_system=True); the others can be edited or retired through the API.
DEFAULT_ROLES = [
    {
        "name": PLATFORM_ADMINISTRATOR,
        "category": RoleCategory.ADMIN,
        "is_system": True,
        "description": "Full system access with all permissions.",
        "permissions": PLATFORM_ADMIN_PERMISSIONS,
    },
    {
        "name": "Manager",
        "category": RoleCategory.ADMIN,
        "is_system": False,
        "description": "Company manager with read access across the tenant.",
        "permissions": [
            "contract:create:own",
            "contract:read:own",
            "contract:read:all",
            "contract:update:own",
            "contract:delete:own",
            "contract:generate:own",
            "contract:export:own",
            "contract:approve:own",
            "party:create:own",
            "party:read:own",
            "party:read:all",
            "party:update:own",
            "party:delete:own",
            "promoter:create:own",
            "promoter:read:own",
            "promoter:read:all",
            "promoter:update:own",
            "user:read:own",
            "user:read:all",
            "user:update:own",
            "profile:read:own",
            "profile:update:own",
            "profile:read:all",
            "attendance:read:all",
            "attendance:approve:all",
            "permit:read:all",
            "dashboard:view:own",
            "dashboard:view:all",
            "settings:read:own",
            "settings:update:own",
            "report:view:own",
            "report:view:all",
            "report:export:all",
        ],
    },
    {
        "name": "Provider",
        "category": RoleCategory.PROVIDER,
        "is_system": False,
        "description": "Staffing provider managing its own promoters and contracts.",
        "permissions": [
            "contract:create:own",
            "contract:read:own",
            "contract:update:own",
            "contract:generate:own",
            "contract:message:own",
            "party:create:own",
            "party:read:own",
            "party:update:own",
            "promoter:create:own",
            "promoter:read:own",
            "promoter:update:own",
            "promoter:upload:own",
            "booking:read:own",
            "booking:update:own",
            "permit:read:own",
            "permit:upload:own",
            "profile:read:own",
            "profile:update:own",
            "dashboard:view:own",
            "report:view:own",
        ],
    },
    {
        "name": "Basic Client",
        "category": RoleCategory.CLIENT,
        "is_system": False,
        "description": "Client booking services and managing own records.",
        "permissions": [
            "booking:create:own",
            "booking:read:own",
            "contract:read:own",
            "user:read:own",
            "user:update:own",
            "profile:read:own",
            "profile:update:own",
            "dashboard:view:own",
            "settings:read:own",
            "settings:update:own",
        ],
    },
    {
        "name": "Promoter",
        "category": RoleCategory.CLIENT,
        "is_system": False,
        "description": "Employee checking in and reading own contracts.",
        "permissions": [
            "contract:read:own",
            "promoter:read:own",
            "promoter:update:own",
            "attendance:check_in:own",
            "attendance:read:own",
            "permit:read:own",
            "permit:upload:own",
            "profile:read:own",
            "profile:update:own",
            "dashboard:view:own",
        ],
    },
    {
        "name": "Viewer",
        "category": RoleCategory.CLIENT,
        "is_system": False,
        "description": "Read-only access to own records.",
        "permissions": [
            "contract:read:own",
            "party:read:own",
            "promoter:read:own",
            "user:read:own",
            "profile:read:own",
            "dashboard:view:own",
            "settings:read:own",
            "report:view:own",
        ],
    },
]
