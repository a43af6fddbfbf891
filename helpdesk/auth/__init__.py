from .rbac import RBACManager, Role, Permission, rbac_manager
from .viewer import Viewer

__all__ = ["RBACManager", "Role", "Permission", "rbac_manager", "Viewer"]
