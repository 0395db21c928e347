"""
Tests for the permission and role services over the in-memory repository.
"""
import pytest

from rbac_composer.core.exceptions import NotFoundError, ValidationFailed
from rbac_composer.core.repository import InMemoryRepository
from rbac_composer.features.permissions.schemas import PermissionCreate, PermissionUpdate
from rbac_composer.features.permissions.service import PermissionService
from rbac_composer.features.roles.schemas import RoleCreate, RoleUpdate
from conftest import make_permission


class TestPermissionService:
    """Test permission create/update/delete flows."""

    @pytest.mark.asyncio
    async def test_create_custom_permission(self, permission_service, repository):
        permission = await permission_service.create_permission(
            PermissionCreate(name="Export Users", category="User Management", dependencies=["users.view"]),
            actor="admin-user",
        )

        assert permission.id.startswith("perm_")
        assert permission.type == "custom"
        assert await repository.get_permission(permission.id) == permission

        entries = await repository.list_audit_entries(resource_type="permission")
        assert [(e.action, e.actor, e.resource_id) for e in entries] == [("create", "admin-user", permission.id)]

    @pytest.mark.asyncio
    async def test_create_rejects_risk_escalation(self, permission_service, repository):
        before = await repository.list_permissions()
        with pytest.raises(ValidationFailed) as exc_info:
            await permission_service.create_permission(
                PermissionCreate(name="Purge", category="User Management", risk="low", dependencies=["users.delete"])
            )

        assert exc_info.value.errors[0].code == "risk_escalation"
        assert "users.delete" in str(exc_info.value)
        assert await repository.list_permissions() == before
        assert await repository.list_audit_entries() == []

    @pytest.mark.asyncio
    async def test_update_rejects_cycle(self, permission_service):
        x = await permission_service.create_permission(PermissionCreate(name="X", category="Custom"))
        y = await permission_service.create_permission(
            PermissionCreate(name="Y", category="Custom", dependencies=[x.id])
        )

        with pytest.raises(ValidationFailed) as exc_info:
            await permission_service.update_permission(x.id, PermissionUpdate(dependencies=[y.id]))

        assert exc_info.value.errors[0].code == "circular_dependency"
        assert (await permission_service.get_permission(x.id)).dependencies == []

    @pytest.mark.asyncio
    async def test_update_merges_set_fields(self, permission_service):
        x = await permission_service.create_permission(
            PermissionCreate(name="X", category="Custom", description="before")
        )
        updated = await permission_service.update_permission(x.id, PermissionUpdate(description="after"))

        assert updated.description == "after"
        assert updated.name == "X"

    @pytest.mark.asyncio
    async def test_update_system_permission_locked(self, permission_service):
        with pytest.raises(ValidationFailed) as exc_info:
            await permission_service.update_permission("users.view", PermissionUpdate(name="Renamed"))
        assert exc_info.value.fields() == ["name"]

        updated = await permission_service.update_permission("users.view", PermissionUpdate(description="Read users"))
        assert updated.description == "Read users"

    @pytest.mark.asyncio
    async def test_update_rejects_risk_raise_under_low_risk_dependent(self, permission_service):
        x = await permission_service.create_permission(PermissionCreate(name="X", category="Custom"))
        y = await permission_service.create_permission(
            PermissionCreate(name="Y", category="Custom", dependencies=[x.id])
        )

        with pytest.raises(ValidationFailed) as exc_info:
            await permission_service.update_permission(x.id, PermissionUpdate(risk="high"))

        issue = exc_info.value.errors[0]
        assert issue.code == "risk_escalation"
        assert issue.details == {"dependent": y.id}
        assert (await permission_service.get_permission(x.id)).risk == "low"

    @pytest.mark.asyncio
    async def test_update_rejects_dependency_missing_from_granting_role(
        self, permission_service, role_service, repository
    ):
        a = await permission_service.create_permission(PermissionCreate(name="A", category="Custom"))
        b = await permission_service.create_permission(PermissionCreate(name="B", category="Custom"))
        role = await role_service.create_role(RoleCreate(name="Only A", permissions=[a.id]))

        with pytest.raises(ValidationFailed) as exc_info:
            await permission_service.update_permission(a.id, PermissionUpdate(dependencies=[b.id]))

        issue = exc_info.value.errors[0]
        assert issue.code == "dependency_closure"
        assert issue.details == {"roles": [role.id], "missing": [b.id]}
        assert (await permission_service.get_permission(a.id)).dependencies == []
        assert [e.action for e in await repository.list_audit_entries(resource_id=a.id)] == ["create"]

    @pytest.mark.asyncio
    async def test_delete_blocked_by_references(self):
        repository = InMemoryRepository()
        repository.seed([
            make_permission("users_view"),
            make_permission("users_create", ["users_view"]),
        ])
        service = PermissionService(repository)

        with pytest.raises(ValidationFailed) as exc_info:
            await service.delete_permission("users_view")

        issue = exc_info.value.errors[0]
        assert issue.code == "blocked_by_references"
        assert issue.details["blocking_references"] == 1

        await service.delete_permission("users_create")
        await service.delete_permission("users_view")
        assert await repository.list_permissions() == []

    @pytest.mark.asyncio
    async def test_missing_permission(self, permission_service):
        with pytest.raises(NotFoundError):
            await permission_service.get_permission("ghost")
        with pytest.raises(NotFoundError):
            await permission_service.delete_permission("ghost")

    @pytest.mark.asyncio
    async def test_list_by_category(self, permission_service):
        permissions = await permission_service.list_permissions(category="Deployment")
        assert [p.id for p in permissions] == ["deploy.view", "deploy.create", "deploy.rollback"]

    @pytest.mark.asyncio
    async def test_layout_and_tree(self, permission_service):
        graph = await permission_service.get_layout(selected=["apps.view", "apps.edit"])
        assert graph.levels()[0] == ["users.view", "roles.view", "apps.view", "deploy.view"]
        assert [(e.source, e.target) for e in graph.edges if e.selected] == [("apps.edit", "apps.view")]

        tree = await permission_service.get_tree()
        assert [root.id for root in tree] == ["users.view", "roles.view", "apps.view", "deploy.view"]


class TestRoleService:
    """Test role create/update/delete flows."""

    @pytest.mark.asyncio
    async def test_create_role(self, role_service, repository):
        role = await role_service.create_role(
            RoleCreate(name="Project Manager", permissions=["deploy.create", "apps.view", "deploy.view"]),
            actor="admin-user",
        )

        assert role.id.startswith("role_")
        assert role.type == "custom"
        assert role.created_by == "admin-user"
        assert role.permissions == ["apps.view", "deploy.view", "deploy.create"]
        assert (await repository.list_audit_entries(resource_id=role.id))[0].action == "create"

    @pytest.mark.asyncio
    async def test_create_rejects_unclosed_role(self, role_service):
        with pytest.raises(ValidationFailed) as exc_info:
            await role_service.create_role(RoleCreate(name="Broken", permissions=["deploy.create"]))
        assert exc_info.value.errors[0].details == {"missing": ["deploy.view", "apps.view"]}

    @pytest.mark.asyncio
    async def test_create_requires_name_and_permissions(self, role_service):
        with pytest.raises(ValidationFailed) as exc_info:
            await role_service.create_role(RoleCreate(name=""))
        assert exc_info.value.fields() == ["name", "permissions"]

    @pytest.mark.asyncio
    async def test_editor_flow(self, role_service):
        """Toggle permissions the way the role editor does, then save."""
        selection = await role_service.toggle_permission(set(), "users.delete")
        selection = await role_service.toggle_permission(selection, "roles.assign")
        assert selection == {"users.view", "users.delete", "roles.view", "roles.assign"}

        selection = await role_service.toggle_permission(selection, "roles.view")
        assert selection == {"users.view", "users.delete"}

        role = await role_service.create_role(RoleCreate(name="User Admin", permissions=list(selection)))
        assert role.permissions == ["users.view", "users.delete"]

    @pytest.mark.asyncio
    async def test_update_role(self, role_service):
        role = await role_service.create_role(RoleCreate(name="Ops", permissions=["apps.view"]))
        updated = await role_service.update_role(
            role.id,
            RoleUpdate(permissions=["apps.edit", "apps.view"], status="inactive"),
            actor="someone",
        )

        assert updated.permissions == ["apps.view", "apps.edit"]
        assert updated.status == "inactive"
        assert updated.name == "Ops"
        assert updated.updated_by == "someone"

    @pytest.mark.asyncio
    async def test_system_role_locked(self, role_service):
        with pytest.raises(ValidationFailed) as exc_info:
            await role_service.update_role("role_viewer", RoleUpdate(type="custom"))
        assert exc_info.value.errors[0].code == "system_locked"

        with pytest.raises(ValidationFailed):
            await role_service.delete_role("role_viewer")

        updated = await role_service.update_role("role_viewer", RoleUpdate(description="Read only"))
        assert updated.description == "Read only"

    @pytest.mark.asyncio
    async def test_only_custom_roles_can_be_created(self, role_service, repository):
        with pytest.raises(ValidationFailed) as exc_info:
            await role_service.create_role(RoleCreate(name="Root", permissions=["users.view"], type="system"))
        assert [(i.field, i.code) for i in exc_info.value.errors] == [("type", "system_locked")]
        assert len(await repository.list_roles()) == 4

        role = await role_service.create_role(RoleCreate(name="Ops", permissions=["users.view"]))
        with pytest.raises(ValidationFailed):
            await role_service.update_role(role.id, RoleUpdate(type="system"))
        assert (await role_service.get_role(role.id)).type == "custom"

    @pytest.mark.asyncio
    async def test_delete_custom_role(self, role_service, repository):
        role = await role_service.create_role(RoleCreate(name="Temp", permissions=["users.view"]))
        await role_service.delete_role(role.id)

        with pytest.raises(NotFoundError):
            await role_service.get_role(role.id)
        actions = [e.action for e in await repository.list_audit_entries(resource_id=role.id)]
        assert actions == ["create", "delete"]

    @pytest.mark.asyncio
    async def test_role_reference_blocks_permission_delete(self, role_service, permission_service):
        permission = await permission_service.create_permission(
            PermissionCreate(name="Audit", category="Custom")
        )
        await role_service.create_role(RoleCreate(name="Auditor", permissions=[permission.id]))

        with pytest.raises(ValidationFailed) as exc_info:
            await permission_service.delete_permission(permission.id)
        assert exc_info.value.errors[0].details["roles"]

    @pytest.mark.asyncio
    async def test_effective_permissions(self, role_service):
        child = await role_service.create_role(
            RoleCreate(name="Child", permissions=["deploy.view"], inherited_from=["role_viewer"])
        )
        effective = await role_service.get_effective_permissions(child.id)
        assert [p.id for p in effective] == ["users.view", "roles.view", "apps.view", "deploy.view"]

    @pytest.mark.asyncio
    async def test_list_by_status(self, role_service):
        active = await role_service.list_roles(status="active")
        assert len(active) == 4
        assert await role_service.list_roles(status="deprecated") == []


class TestInMemoryRepository:
    """Test the repository's role bookkeeping."""

    @pytest.mark.asyncio
    async def test_actor_recorded_on_role_writes(self):
        repository = InMemoryRepository()
        role = await repository.create_role({"name": "Imported", "permissions": ["users.view"]}, actor="importer")

        assert role.created_by == "importer"
        assert role.updated_by == "importer"
        assert "actor" not in role.model_dump()

        updated = await repository.update_role(role.id, {"status": "inactive"}, actor="reviewer")
        assert updated.created_by == "importer"
        assert updated.updated_by == "reviewer"
        assert updated.status == "inactive"

    @pytest.mark.asyncio
    async def test_update_missing_role(self):
        with pytest.raises(NotFoundError):
            await InMemoryRepository().update_role("ghost", {}, actor="admin-user")
