"""
Role-based access control tables.

Roles and permissions are closed enums; every check goes through
``has_any_permission`` so the ``*:*`` wildcard is handled in one place.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from teller_iam.domain.entities.enums import UserRole


class Permission(str, Enum):
    users_read = "users:read"
    users_create = "users:create"
    users_update = "users:update"
    users_delete = "users:delete"
    roles_read = "roles:read"
    roles_update = "roles:update"
    settings_update = "settings:update"
    profile_update = "profile:update"
    audit_read = "audit:read"
    clients_read = "clients:read"
    clients_create = "clients:create"
    clients_update = "clients:update"
    clients_delete = "clients:delete"
    transactions_read = "transactions:read"
    transactions_create = "transactions:create"
    transactions_update = "transactions:update"
    transactions_delete = "transactions:delete"
    transactions_approve = "transactions:approve"
    reports_read = "reports:read"
    kyc_approve = "kyc:approve"
    wildcard = "*:*"


P = Permission

ADMIN_ROLES: FrozenSet[UserRole] = frozenset({UserRole.org_admin, UserRole.agent_admin})

ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[Permission]] = {
    UserRole.org_admin: frozenset({P.wildcard}),
    UserRole.agent_admin: frozenset(
        {
            P.users_read,
            P.users_create,
            P.users_update,
            P.clients_read,
            P.clients_create,
            P.clients_update,
            P.transactions_read,
            P.transactions_create,
            P.transactions_update,
            P.transactions_approve,
            P.reports_read,
            P.profile_update,
        }
    ),
    UserRole.agent_user: frozenset(
        {
            P.clients_read,
            P.clients_create,
            P.clients_update,
            P.transactions_read,
            P.transactions_create,
            P.profile_update,
        }
    ),
    UserRole.compliance_user: frozenset(
        {
            P.clients_read,
            P.transactions_read,
            P.kyc_approve,
            P.reports_read,
            P.audit_read,
            P.profile_update,
        }
    ),
    UserRole.org_user: frozenset({P.profile_update}),
}

# Roles each role may act on (invite, change status, change role)
ROLE_HIERARCHY: Dict[UserRole, FrozenSet[UserRole]] = {
    UserRole.org_admin: frozenset(UserRole),
    UserRole.agent_admin: frozenset({UserRole.agent_admin, UserRole.agent_user}),
    UserRole.agent_user: frozenset({UserRole.agent_user}),
    UserRole.compliance_user: frozenset({UserRole.compliance_user}),
    UserRole.org_user: frozenset({UserRole.org_user}),
}

LANDING_ROUTES: Dict[UserRole, str] = {
    UserRole.org_admin: "/admin",
    UserRole.agent_admin: "/manager",
    UserRole.agent_user: "/teller",
    UserRole.compliance_user: "/compliance",
    UserRole.org_user: "/dashboard",
}
DEFAULT_LANDING_ROUTE = "/dashboard"

# Route prefix -> permissions, any one of which grants access.
# An empty tuple means "authenticated is enough".
ROUTE_PERMISSIONS: Dict[str, Tuple[Permission, ...]] = {
    "/dashboard": (),
    "/dashboard/teller": (),
    "/dashboard/compliance": (),
    "/admin": (P.settings_update, P.roles_read),
    "/admin/organization-settings": (P.settings_update,),
    "/admin/product": (P.settings_update,),
    "/admin/exchange-rates": (P.settings_update,),
    "/admin/users": (P.users_read,),
    "/admin/users/create": (P.users_create,),
    "/admin/users/update": (P.users_update,),
    "/admin/users/delete": (P.users_delete,),
    "/admin/operator": (P.users_read,),
    "/admin/roles": (P.roles_read,),
    "/admin/roles/update": (P.roles_update,),
    "/admin/audit-logs": (P.audit_read,),
    "/manager": (P.users_read,),
    "/teller": (P.transactions_create,),
    "/compliance": (P.kyc_approve,),
    "/settings": (P.settings_update,),
    "/settings/profile": (P.profile_update,),
    "/clients": (P.clients_read,),
    "/clients/create": (P.clients_create,),
    "/clients/update": (P.clients_update,),
    "/clients/delete": (P.clients_delete,),
    "/exchange": (P.transactions_create, P.transactions_read),
    "/payout": (P.transactions_create, P.transactions_read),
    "/send-money": (P.transactions_create,),
    "/transactions": (P.transactions_read,),
    "/transactions/create": (P.transactions_create,),
    "/transactions/update": (P.transactions_update,),
    "/transactions/delete": (P.transactions_delete,),
    "/transactions/approve": (P.transactions_approve,),
    "/reports": (P.reports_read,),
    "/kyc": (P.kyc_approve,),
}


def permissions_for(role: UserRole) -> FrozenSet[Permission]:
    return ROLE_PERMISSIONS.get(role, frozenset())


def has_any_permission(
    held: Iterable[Permission], required: Iterable[Permission]
) -> bool:
    """True when nothing is required, the wildcard is held, or any required permission is held"""
    held = frozenset(held)
    required = tuple(required)
    if not required:
        return True
    if Permission.wildcard in held:
        return True
    return any(permission in held for permission in required)


def has_role(role: UserRole, required: UserRole) -> bool:
    return required in ROLE_HIERARCHY.get(role, frozenset())


def can_manage_role(actor: UserRole, target: UserRole) -> bool:
    return has_role(actor, target) and actor != target


def landing_route(role: Optional[UserRole]) -> str:
    if role is None:
        return DEFAULT_LANDING_ROUTE
    return LANDING_ROUTES.get(role, DEFAULT_LANDING_ROUTE)


def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def required_permissions(path: str) -> Optional[Tuple[Permission, ...]]:
    """
    Permissions required for a page path, using the longest matching prefix.

    Returns None when no entry covers the path.
    """
    best: Optional[str] = None
    for prefix in ROUTE_PERMISSIONS:
        if _matches(path, prefix) and (best is None or len(prefix) > len(best)):
            best = prefix
    if best is None:
        return None
    return ROUTE_PERMISSIONS[best]


def parse_permissions(values: Iterable[str]) -> FrozenSet[Permission]:
    """Convert claim strings back to Permission members, dropping unknown codes"""
    parsed = set()
    for value in values:
        try:
            parsed.add(Permission(value))
        except ValueError:
            continue
    return frozenset(parsed)
