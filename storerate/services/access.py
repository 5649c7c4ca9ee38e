"""Access policy: which role may perform which operation.

The table is static. Routers declare the permission an endpoint needs and
the auth dependency checks the caller's role against it.
"""

from enum import Enum


class Role(str, Enum):
    """User role."""

    SYSTEM_ADMIN = "system_admin"
    USER = "user"
    STORE_OWNER = "store_owner"


class Permission(str, Enum):
    """Operations guarded by role."""

    VIEW_ADMIN_DASHBOARD = "admin:dashboard"
    LIST_USERS = "admin:users:list"
    CREATE_USER = "admin:users:create"
    LIST_ALL_STORES = "admin:stores:list"
    CREATE_STORE = "admin:stores:create"

    BROWSE_STORES = "stores:browse"
    VIEW_OWN_STATS = "user:stats"
    SUBMIT_RATING = "ratings:submit"
    UPDATE_RATING = "ratings:update"
    LIST_OWN_RATINGS = "ratings:mine"

    VIEW_OWNED_STORE = "store:dashboard"
    LIST_OWNED_STORE_RATINGS = "store:ratings"

    UPDATE_OWN_PASSWORD = "auth:password"


ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.SYSTEM_ADMIN: frozenset(
        {
            Permission.VIEW_ADMIN_DASHBOARD,
            Permission.LIST_USERS,
            Permission.CREATE_USER,
            Permission.LIST_ALL_STORES,
            Permission.CREATE_STORE,
            Permission.BROWSE_STORES,
            Permission.UPDATE_OWN_PASSWORD,
        }
    ),
    Role.USER: frozenset(
        {
            Permission.BROWSE_STORES,
            Permission.VIEW_OWN_STATS,
            Permission.SUBMIT_RATING,
            Permission.UPDATE_RATING,
            Permission.LIST_OWN_RATINGS,
            Permission.UPDATE_OWN_PASSWORD,
        }
    ),
    Role.STORE_OWNER: frozenset(
        {
            Permission.BROWSE_STORES,
            Permission.VIEW_OWNED_STORE,
            Permission.LIST_OWNED_STORE_RATINGS,
            Permission.UPDATE_OWN_PASSWORD,
        }
    ),
}


def permissions_for(role: Role) -> frozenset[Permission]:
    """Return the permissions granted to a role (empty for unknown roles)."""
    return ROLE_PERMISSIONS.get(role, frozenset())


def is_allowed(role: Role, permission: Permission) -> bool:
    """Check whether `role` may perform `permission`."""
    return permission in permissions_for(role)
