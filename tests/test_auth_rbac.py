"""
Tests for RBAC permissions and the login/permission dependencies.
Run: pytest tests/test_auth_rbac.py -v
"""
import pytest
from fastapi import HTTPException
from starlette.requests import Request

from helpdesk.auth.dependencies import get_viewer, require_permission
from helpdesk.auth.rbac import BUILT_IN_ROLES, Permission, RBACManager, Role
from helpdesk.auth.viewer import Viewer


def request_with_headers(headers):
    raw = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


@pytest.fixture
def rbac_manager():
    return RBACManager()


# ══════════════════════════════════════════════════════════════════
# RBAC MANAGER
# ══════════════════════════════════════════════════════════════════


class TestRBAC:

    def test_list_roles(self, rbac_manager):
        names = [r.name for r in rbac_manager.list_roles()]
        assert sorted(names) == ["admin", "marketer", "support", "viewer"]

    def test_admin_has_everything(self, rbac_manager):
        assert rbac_manager.get_permissions(["admin"]) == set(Permission)

    def test_permissions_are_unioned_across_roles(self, rbac_manager):
        perms = rbac_manager.get_permissions(["viewer", "marketer"])
        assert Permission.SHOW_ENGAGES_MESSAGES in perms
        assert Permission.SHOW_CHANNELS in perms
        assert Permission.SHOW_CONVERSATIONS not in perms

    def test_unknown_roles_grant_nothing(self, rbac_manager):
        assert rbac_manager.get_permissions(["nonexistent_role"]) == set()
        assert not rbac_manager.has_permission([], Permission.SHOW_COMPANIES)

    def test_require_permission(self, rbac_manager):
        rbac_manager.require_permission(["support"], Permission.SHOW_CONVERSATIONS)
        with pytest.raises(PermissionError):
            rbac_manager.require_permission(["support"], Permission.SHOW_ENGAGES_MESSAGES)

    def test_custom_roles(self):
        manager = RBACManager({"auditor": Role(name="auditor", permissions={Permission.SHOW_COMPANIES})})
        assert manager.get_role("admin") is None
        assert manager.has_permission(["auditor"], Permission.SHOW_COMPANIES)

    def test_built_in_roles_are_system_roles(self):
        assert all(role.is_system for role in BUILT_IN_ROLES.values())


# ══════════════════════════════════════════════════════════════════
# DEPENDENCIES
# ══════════════════════════════════════════════════════════════════


class TestDependencies:

    @pytest.mark.asyncio
    async def test_get_viewer(self, seeded_store):
        viewer = await get_viewer(request_with_headers({"X-User-Id": "u1"}), seeded_store)
        assert viewer.id == "u1"
        assert viewer.roles == ["support"]
        assert viewer.starred_conversation_ids == ["cv1", "cv3"]

    @pytest.mark.asyncio
    async def test_missing_header(self, seeded_store):
        with pytest.raises(HTTPException) as info:
            await get_viewer(request_with_headers({}), seeded_store)
        assert info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_or_inactive_user(self, seeded_store):
        for user_id in ("nobody", "u4"):
            with pytest.raises(HTTPException) as info:
                await get_viewer(request_with_headers({"X-User-Id": user_id}), seeded_store)
            assert info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_require_permission(self):
        check = require_permission(Permission.SHOW_ENGAGES_MESSAGES)
        marketer = Viewer(id="u2", roles=["marketer"])
        assert await check(marketer) is marketer

        with pytest.raises(HTTPException) as info:
            await check(Viewer(id="u1", roles=["support"]))
        assert info.value.status_code == 403
