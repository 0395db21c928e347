"""
Role management service.

Validates roles against a fresh catalog snapshot before handing them to
the injected repository, and exposes the composer to role editors.
"""
from typing import FrozenSet, Iterable, List, Optional

from rbac_composer.core import config
from rbac_composer.core.audit import create_audit_log
from rbac_composer.core.exceptions import NotFoundError
from rbac_composer.core.repository import Repository
from rbac_composer.features.permissions.catalog import PermissionCatalog
from rbac_composer.features.permissions.schemas import Permission
from rbac_composer.features.permissions.validator import ensure_valid
from rbac_composer.features.roles.composer import effective_permissions, ordered, toggle
from rbac_composer.features.roles.schemas import Role, RoleCreate, RoleUpdate
from rbac_composer.features.roles.validator import validate_role, validate_role_deletion
from rbac_composer.utils import get_logger


log = get_logger(__name__)

# Placeholder id for a role that has not been stored yet
PENDING_ID = "__pending__"


class RoleService:
    """Create, update and delete roles through a Repository."""

    def __init__(self, repository: Repository):
        self.repository = repository

    async def get_catalog(self) -> PermissionCatalog:
        return PermissionCatalog(await self.repository.list_permissions())

    async def list_roles(self, status: Optional[str] = None) -> List[Role]:
        roles = await self.repository.list_roles()
        if status:
            roles = [r for r in roles if r.status == status]
        return roles

    async def get_role(self, role_id: str) -> Role:
        """
        Get a specific role by ID.

        Raises:
            NotFoundError: if no such role exists
        """
        role = await self.repository.get_role(role_id)
        if role is None:
            raise NotFoundError("role", role_id)
        return role

    async def create_role(self, data: RoleCreate, actor: Optional[str] = None) -> Role:
        """
        Create a role. Permissions are stored in catalog order.

        Raises:
            ValidationFailed: if the role is invalid
        """
        catalog = await self.get_catalog()
        candidate = Role(id=PENDING_ID, **data.model_dump())
        ensure_valid(validate_role(candidate, catalog))

        actor = actor or config.DEFAULT_ACTOR
        payload = {**data.model_dump(), "permissions": ordered(data.permissions, catalog)}
        role = await self.repository.create_role(payload, actor)
        await create_audit_log(
            self.repository,
            actor=actor,
            action="create",
            resource_type="role",
            resource_id=role.id,
            details={"name": role.name, "permissions": role.permissions},
        )
        return role

    async def update_role(self, role_id: str, data: RoleUpdate, actor: Optional[str] = None) -> Role:
        """
        Update a role. The merged record is validated as a whole.

        Raises:
            NotFoundError: if no such role exists
            ValidationFailed: if the result would be invalid
        """
        existing = await self.get_role(role_id)
        catalog = await self.get_catalog()

        update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        candidate = Role(**{**existing.model_dump(), **update_data})
        ensure_valid(validate_role(candidate, catalog, existing=existing))

        if "permissions" in update_data:
            update_data["permissions"] = ordered(update_data["permissions"], catalog)
        actor = actor or config.DEFAULT_ACTOR
        role = await self.repository.update_role(role_id, update_data, actor)
        await create_audit_log(
            self.repository,
            actor=actor,
            action="update",
            resource_type="role",
            resource_id=role_id,
            details=update_data,
        )
        return role

    async def delete_role(self, role_id: str, actor: Optional[str] = None) -> None:
        """
        Delete a custom role.

        Raises:
            NotFoundError: if no such role exists
            ValidationFailed: if it is a system role
        """
        role = await self.get_role(role_id)
        ensure_valid(validate_role_deletion(role))

        await self.repository.delete_role(role_id)
        await create_audit_log(
            self.repository,
            actor=actor or config.DEFAULT_ACTOR,
            action="delete",
            resource_type="role",
            resource_id=role_id,
            details={"name": role.name},
        )

    async def toggle_permission(self, selection: Iterable[str], permission_id: str) -> FrozenSet[str]:
        """Apply a role editor checkbox toggle to an unsaved selection."""
        return toggle(selection, permission_id, await self.get_catalog())

    async def get_effective_permissions(self, role_id: str) -> List[Permission]:
        """Permissions granted by the role and every role it inherits from."""
        role = await self.get_role(role_id)
        roles = await self.repository.list_roles()
        return effective_permissions(role, roles, await self.get_catalog())
