"""
RBAC (Role-Based Access Control) permission system

Role names are normalized once, when the session user is resolved, into a
set of capabilities. Operations check capabilities, never role names.
"""

from enum import Enum
from typing import FrozenSet, Optional, Set
from pydantic import BaseModel
import uuid


class Permission(str, Enum):
    """Permission definitions"""
    # Station permissions
    STATION_VIEW = "station:view"
    STATION_UPDATE = "station:update"
    TICKET_FORCE_STATUS = "ticket:force_status"

    # Order permissions
    ORDER_VIEW = "order:view"
    ORDER_CREATE = "order:create"
    ORDER_ADD_ITEMS = "order:add_items"


# Any authenticated staff member may move tickets within their business unit
STAFF_PERMISSIONS = {
    Permission.STATION_VIEW,
    Permission.STATION_UPDATE,
    Permission.ORDER_VIEW,
}

# Role permission mapping
ROLE_PERMISSIONS = {
    "admin": STAFF_PERMISSIONS | {
        Permission.TICKET_FORCE_STATUS,
        Permission.ORDER_CREATE,
        Permission.ORDER_ADD_ITEMS,
    },
    "manager": STAFF_PERMISSIONS | {
        Permission.TICKET_FORCE_STATUS,
        Permission.ORDER_CREATE,
        Permission.ORDER_ADD_ITEMS,
    },
    "waiter": STAFF_PERMISSIONS | {
        Permission.ORDER_CREATE,
        Permission.ORDER_ADD_ITEMS,
    },
    "cashier": STAFF_PERMISSIONS | {
        Permission.ORDER_CREATE,
    },
    "kitchen": set(STAFF_PERMISSIONS),
    "bar": set(STAFF_PERMISSIONS),
}


def normalize_role(role: Optional[str]) -> str:
    """Normalize a role name ("ADMIN", " Admin ") to its mapping key"""
    if not role:
        return ""
    return role.strip().lower()


def get_permissions_for_role(role: Optional[str]) -> FrozenSet[Permission]:
    """Get permissions for a given role"""
    return frozenset(ROLE_PERMISSIONS.get(normalize_role(role), set()))


def has_permission(required_permission: Permission, user_permissions: Set[Permission]) -> bool:
    """Check if user has required permission"""
    return required_permission in user_permissions


class CurrentUser(BaseModel):
    """Authenticated session user with capabilities resolved once"""
    id: uuid.UUID
    business_unit_id: uuid.UUID
    role: str
    name: str = ""
    permissions: FrozenSet[Permission] = frozenset()

    @classmethod
    def for_role(
        cls,
        user_id: uuid.UUID,
        business_unit_id: uuid.UUID,
        role: str,
        name: str = "",
    ) -> "CurrentUser":
        return cls(
            id=user_id,
            business_unit_id=business_unit_id,
            role=normalize_role(role),
            name=name,
            permissions=get_permissions_for_role(role),
        )

    def can(self, permission: Permission) -> bool:
        return has_permission(permission, self.permissions)
