# regdesk/core/permissions.py
"""
Closed set of capabilities a role can hold, plus the default role definitions.

Roles store their permissions as a list of these string values; anything not in
the enum is rejected when the role is loaded.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable


class Permission(str, Enum):
    # Dashboard
    VIEW_DASHBOARD = "view-dashboard"

    # Registrations
    VIEW_REGISTRATIONS = "view-registrations"
    CREATE_REGISTRATION = "create-registration"
    EDIT_REGISTRATION = "edit-registration"
    DELETE_REGISTRATION = "delete-registration"
    SCAN_REGISTRATION = "scan-registration"

    # User management
    VIEW_USERS = "view-users"
    CREATE_USER = "create-user"
    EDIT_USER = "edit-user"
    DELETE_USER = "delete-user"

    # Settings
    VIEW_SETTINGS = "view-settings"
    EDIT_SETTINGS = "edit-settings"

    # Server mode
    VIEW_SERVER_MODE = "view-server-mode"
    EDIT_SERVER_MODE = "edit-server-mode"

    # Roles
    MANAGE_ROLES = "manage-roles"

    @classmethod
    def all(cls) -> FrozenSet["Permission"]:
        return frozenset(cls)


SUPERADMIN_ROLE = "superadmin"
ADMIN_ROLE = "admin"
USER_ROLE = "user"

# Default role definitions used when seeding the database
DEFAULT_ROLES: Dict[str, Dict] = {
    SUPERADMIN_ROLE: {
        "description": "Full System Control",
        "permissions": Permission.all(),
    },
    ADMIN_ROLE: {
        "description": "Event operations and Monitoring",
        "permissions": frozenset(
            {
                Permission.VIEW_DASHBOARD,
                Permission.VIEW_REGISTRATIONS,
                Permission.CREATE_REGISTRATION,
                Permission.EDIT_REGISTRATION,
                Permission.SCAN_REGISTRATION,
                Permission.VIEW_SERVER_MODE,
            }
        ),
    },
    USER_ROLE: {
        "description": "Attendee / Registrant",
        "permissions": frozenset(),
    },
}


def parse_permissions(values: Iterable[str]) -> FrozenSet[Permission]:
    """Convert stored permission strings to the enum, raising on unknown values."""
    return frozenset(Permission(value) for value in values or [])
