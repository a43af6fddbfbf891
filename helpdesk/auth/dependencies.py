"""
FastAPI dependencies for login and permission checks.

Authentication itself happens upstream; the request arrives carrying the
authenticated user's id in ``settings.user_header``.
"""
import logging

from fastapi import Depends, HTTPException, Request

from helpdesk.auth.rbac import Permission, rbac_manager
from helpdesk.auth.viewer import Viewer
from helpdesk.config.settings import settings
from helpdesk.db.store import Store, get_store
from helpdesk.queries.predicates import FieldEquals, and_

logger = logging.getLogger(__name__)


async def get_viewer(request: Request, store: Store = Depends(get_store)) -> Viewer:
    """Login required: resolve the requesting user or reject with 401."""
    user_id = request.headers.get(settings.user_header, "").strip()
    if not user_id:
        raise HTTPException(401, "Login required")

    user = await store.users.find_one(
        and_(FieldEquals(field="id", value=user_id), FieldEquals(field="is_active", value=True))
    )
    if user is None:
        logger.warning(f"Rejected request for unknown or inactive user {user_id}")
        raise HTTPException(401, "Login required")
    return Viewer.from_user(user)


def require_permission(permission: Permission):
    """Dependency factory: the viewer must hold ``permission`` through a role."""

    async def dependency(viewer: Viewer = Depends(get_viewer)) -> Viewer:
        try:
            rbac_manager.require_permission(viewer.roles, permission)
        except PermissionError as e:
            raise HTTPException(403, str(e))
        return viewer

    return dependency
