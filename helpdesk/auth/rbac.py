"""
RBAC — Role-Based Access Control for the helpdesk API.
Maps the role names stored on a user to the read permissions each
resolver group requires.
"""

from typing import Dict, Iterable, List, Optional, Set
from enum import Enum
from pydantic import BaseModel, Field


class Permission(str, Enum):
    """Read permissions, one per resolver group."""
    SHOW_CONVERSATIONS = "show_conversations"
    SHOW_CHANNELS = "show_channels"
    SHOW_ENGAGES_MESSAGES = "show_engages_messages"
    SHOW_COMPANIES = "show_companies"


class Role(BaseModel):
    """A role with a set of permissions."""
    name: str
    description: str = ""
    permissions: Set[Permission] = Field(default_factory=set)
    is_system: bool = False


# ── Built-in Roles ───────────────────────────────────────────────

BUILT_IN_ROLES: Dict[str, Role] = {
    "admin": Role(
        name="admin",
        description="Full access",
        permissions=set(Permission),
        is_system=True,
    ),
    "support": Role(
        name="support",
        description="Works the inbox: conversations, channels and companies",
        permissions={
            Permission.SHOW_CONVERSATIONS, Permission.SHOW_CHANNELS,
            Permission.SHOW_COMPANIES,
        },
        is_system=True,
    ),
    "marketer": Role(
        name="marketer",
        description="Runs engage campaigns",
        permissions={
            Permission.SHOW_ENGAGES_MESSAGES, Permission.SHOW_COMPANIES,
        },
        is_system=True,
    ),
    "viewer": Role(
        name="viewer",
        description="Read-only access to channels and companies",
        permissions={Permission.SHOW_CHANNELS, Permission.SHOW_COMPANIES},
        is_system=True,
    ),
}


class RBACManager:
    """Resolves role names to permissions."""

    def __init__(self, roles: Optional[Dict[str, Role]] = None):
        self._roles: Dict[str, Role] = dict(roles or BUILT_IN_ROLES)

    def get_role(self, name: str) -> Optional[Role]:
        return self._roles.get(name)

    def list_roles(self) -> List[Role]:
        return list(self._roles.values())

    def get_permissions(self, role_names: Iterable[str]) -> Set[Permission]:
        perms = set()
        for role_name in role_names:
            role = self._roles.get(role_name)
            if role:
                perms.update(role.permissions)
        return perms

    def has_permission(self, role_names: Iterable[str], permission: Permission) -> bool:
        return permission in self.get_permissions(role_names)

    def require_permission(self, role_names: Iterable[str], permission: Permission) -> None:
        """Raise if none of the roles grants the permission."""
        if not self.has_permission(role_names, permission):
            raise PermissionError(f"Missing permission '{permission.value}'")


rbac_manager = RBACManager()
