# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Built-in permission catalog.

Entries are only ever added. Changing what a permission means requires a new
permission string, never an edit of an existing one.
"""

from contract_manager.rbac.types import Action, PermissionKey, Resource, Scope

_CATALOG: list[tuple[Resource, Action, Scope, str]] = [
    # Contracts
    (Resource.CONTRACT, Action.CREATE, Scope.OWN, "Create own contracts"),
    (Resource.CONTRACT, Action.READ, Scope.OWN, "Read own contracts"),
    (Resource.CONTRACT, Action.READ, Scope.ALL, "Read all contracts"),
    (Resource.CONTRACT, Action.UPDATE, Scope.OWN, "Update own contracts"),
    (Resource.CONTRACT, Action.UPDATE, Scope.ALL, "Update all contracts"),
    (Resource.CONTRACT, Action.DELETE, Scope.OWN, "Delete own contracts"),
    (Resource.CONTRACT, Action.DELETE, Scope.ALL, "Delete all contracts"),
    (Resource.CONTRACT, Action.GENERATE, Scope.OWN, "Generate contract documents"),
    (Resource.CONTRACT, Action.EXPORT, Scope.OWN, "Export own contracts"),
    (Resource.CONTRACT, Action.MESSAGE, Scope.OWN, "Message about own contracts"),
    (Resource.CONTRACT, Action.APPROVE, Scope.OWN, "Approve own company's contracts"),
    (Resource.CONTRACT, Action.APPROVE, Scope.ALL, "Approve any contract"),
    (Resource.CONTRACT, Action.ARCHIVE, Scope.ALL, "Archive any contract"),
    # Parties
    (Resource.PARTY, Action.CREATE, Scope.OWN, "Create parties"),
    (Resource.PARTY, Action.READ, Scope.OWN, "Read own parties"),
    (Resource.PARTY, Action.READ, Scope.ALL, "Read all parties"),
    (Resource.PARTY, Action.UPDATE, Scope.OWN, "Update own parties"),
    (Resource.PARTY, Action.UPDATE, Scope.ALL, "Update all parties"),
    (Resource.PARTY, Action.DELETE, Scope.OWN, "Delete own parties"),
    (Resource.PARTY, Action.DELETE, Scope.ALL, "Delete all parties"),
    # Promoters
    (Resource.PROMOTER, Action.CREATE, Scope.OWN, "Create promoters"),
    (Resource.PROMOTER, Action.READ, Scope.OWN, "Read own promoter profiles"),
    (Resource.PROMOTER, Action.READ, Scope.ALL, "Read all promoters"),
    (Resource.PROMOTER, Action.UPDATE, Scope.OWN, "Update own promoter profiles"),
    (Resource.PROMOTER, Action.UPDATE, Scope.ALL, "Update all promoters"),
    (Resource.PROMOTER, Action.DELETE, Scope.OWN, "Delete own promoters"),
    (Resource.PROMOTER, Action.DELETE, Scope.ALL, "Delete all promoters"),
    (Resource.PROMOTER, Action.UPLOAD, Scope.OWN, "Upload promoter documents"),
    # Users and profiles
    (Resource.USER, Action.CREATE, Scope.ALL, "Create users"),
    (Resource.USER, Action.READ, Scope.OWN, "Read own user record"),
    (Resource.USER, Action.READ, Scope.ALL, "Read all users"),
    (Resource.USER, Action.UPDATE, Scope.OWN, "Update own user record"),
    (Resource.USER, Action.UPDATE, Scope.ALL, "Update any user"),
    (Resource.USER, Action.DELETE, Scope.ALL, "Delete users"),
    (Resource.USER, Action.MANAGE, Scope.ALL, "Manage users"),
    (Resource.USER, Action.ASSIGN_ROLE, Scope.ALL, "Assign roles to users"),
    (Resource.PROFILE, Action.READ, Scope.OWN, "Read own profile"),
    (Resource.PROFILE, Action.READ, Scope.ALL, "Read all profiles"),
    (Resource.PROFILE, Action.UPDATE, Scope.OWN, "Update own profile"),
    (Resource.PROFILE, Action.UPDATE, Scope.ALL, "Update all profiles"),
    # Companies
    (Resource.COMPANY, Action.READ, Scope.OWN, "Read own company"),
    (Resource.COMPANY, Action.READ, Scope.ALL, "Read all companies"),
    (Resource.COMPANY, Action.MANAGE, Scope.OWN, "Manage own company"),
    (Resource.COMPANY, Action.MANAGE, Scope.ALL, "Manage all companies"),
    # Bookings
    (Resource.BOOKING, Action.CREATE, Scope.OWN, "Create own bookings"),
    (Resource.BOOKING, Action.CREATE, Scope.ALL, "Create bookings for anyone"),
    (Resource.BOOKING, Action.READ, Scope.OWN, "Read own bookings"),
    (Resource.BOOKING, Action.READ, Scope.ALL, "Read all bookings"),
    (Resource.BOOKING, Action.UPDATE, Scope.OWN, "Update own bookings"),
    (Resource.BOOKING, Action.UPDATE, Scope.ALL, "Update all bookings"),
    # Attendance
    (Resource.ATTENDANCE, Action.CHECK_IN, Scope.OWN, "Check in and out"),
    (Resource.ATTENDANCE, Action.READ, Scope.OWN, "Read own attendance"),
    (Resource.ATTENDANCE, Action.READ, Scope.ALL, "Read all attendance"),
    (Resource.ATTENDANCE, Action.APPROVE, Scope.ALL, "Approve attendance"),
    # Work permits
    (Resource.PERMIT, Action.READ, Scope.OWN, "Read own work permits"),
    (Resource.PERMIT, Action.READ, Scope.ALL, "Read all work permits"),
    (Resource.PERMIT, Action.UPLOAD, Scope.OWN, "Upload own work permits"),
    (Resource.PERMIT, Action.MANAGE, Scope.ALL, "Manage work permits"),
    # Dashboards, settings and reports
    (Resource.DASHBOARD, Action.VIEW, Scope.OWN, "View own dashboard"),
    (Resource.DASHBOARD, Action.VIEW, Scope.ALL, "View all dashboards"),
    (Resource.DASHBOARD, Action.MANAGE, Scope.ALL, "Manage dashboards"),
    (Resource.SETTINGS, Action.READ, Scope.OWN, "Read own settings"),
    (Resource.SETTINGS, Action.UPDATE, Scope.OWN, "Update own settings"),
    (Resource.SETTINGS, Action.MANAGE, Scope.ALL, "Manage system settings"),
    (Resource.REPORT, Action.VIEW, Scope.OWN, "View own reports"),
    (Resource.REPORT, Action.VIEW, Scope.ALL, "View all reports"),
    (Resource.REPORT, Action.EXPORT, Scope.ALL, "Export reports"),
    # Administration
    (Resource.AUDIT, Action.READ, Scope.ALL, "View audit logs"),
    (Resource.ROLE, Action.READ, Scope.ALL, "Read roles and permissions"),
    (Resource.ROLE, Action.MANAGE, Scope.ALL, "Create, edit and retire roles"),
    (Resource.SYSTEM, Action.MANAGE, Scope.ALL, "Full system administration"),
]

CORE_PERMISSIONS = [
    {
        "resource": resource,
        "action": action,
        "scope": scope,
        "display_name": description,
        "description": description,
    }
    for resource, action, scope, description in _CATALOG
]

CORE_PERMISSION_NAMES: frozenset[str] = frozenset(
    PermissionKey(resource, action, scope).name
    for resource, action, scope, _ in _CATALOG
)
