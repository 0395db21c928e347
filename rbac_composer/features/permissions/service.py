"""
Permission management service.

Loads a fresh catalog snapshot from the injected repository for every
call, validates the change against it and only then persists it.
"""
from typing import Iterable, List, Optional

from rbac_composer.core import config
from rbac_composer.core.audit import create_audit_log
from rbac_composer.core.exceptions import NotFoundError
from rbac_composer.core.repository import Repository
from rbac_composer.features.permissions.catalog import PermissionCatalog
from rbac_composer.features.permissions.layout import dependency_tree, layout
from rbac_composer.features.permissions.schemas import (
    GraphLayout,
    Permission,
    PermissionCreate,
    PermissionUpdate,
    TreeNode,
)
from rbac_composer.features.permissions.validator import (
    ensure_valid,
    validate_granting_roles,
    validate_permission,
    validate_permission_deletion,
)
from rbac_composer.utils import get_logger


log = get_logger(__name__)

# Placeholder id for a permission that has not been stored yet
PENDING_ID = "__pending__"


class PermissionService:
    """Create, update and delete permissions through a Repository."""

    def __init__(self, repository: Repository):
        self.repository = repository

    async def get_catalog(self) -> PermissionCatalog:
        return PermissionCatalog(await self.repository.list_permissions())

    async def list_permissions(self, category: Optional[str] = None) -> List[Permission]:
        """List all permissions with optional category filtering."""
        permissions = await self.repository.list_permissions()
        if category:
            permissions = [p for p in permissions if p.category == category]
        return permissions

    async def get_permission(self, permission_id: str) -> Permission:
        """
        Get a specific permission by ID.

        Raises:
            NotFoundError: if no such permission exists
        """
        permission = await self.repository.get_permission(permission_id)
        if permission is None:
            raise NotFoundError("permission", permission_id)
        return permission

    async def create_permission(self, data: PermissionCreate, actor: Optional[str] = None) -> Permission:
        """
        Create a new custom permission.

        Raises:
            ValidationFailed: if the permission is invalid against the current catalog
        """
        catalog = await self.get_catalog()
        candidate = Permission(id=PENDING_ID, type="custom", **data.model_dump())
        ensure_valid(validate_permission(candidate, catalog))

        permission = await self.repository.create_permission(data.model_dump())
        await create_audit_log(
            self.repository,
            actor=actor or config.DEFAULT_ACTOR,
            action="create",
            resource_type="permission",
            resource_id=permission.id,
            details=data.model_dump(),
        )
        return permission

    async def update_permission(
        self,
        permission_id: str,
        data: PermissionUpdate,
        actor: Optional[str] = None,
    ) -> Permission:
        """
        Update a permission. The merged record is validated as a whole.

        Raises:
            NotFoundError: if no such permission exists
            ValidationFailed: if the result would be invalid
        """
        existing = await self.get_permission(permission_id)
        catalog = await self.get_catalog()
        roles = await self.repository.list_roles()

        update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        candidate = Permission(**{**existing.model_dump(), **update_data})
        ensure_valid(
            validate_permission(candidate, catalog, existing=existing)
            + validate_granting_roles(candidate, catalog, roles)
        )

        permission = await self.repository.update_permission(permission_id, update_data)
        await create_audit_log(
            self.repository,
            actor=actor or config.DEFAULT_ACTOR,
            action="update",
            resource_type="permission",
            resource_id=permission_id,
            details=update_data,
        )
        return permission

    async def delete_permission(self, permission_id: str, actor: Optional[str] = None) -> None:
        """
        Delete a permission nothing else refers to.

        Raises:
            NotFoundError: if no such permission exists
            ValidationFailed: if it is a system permission or still referenced
        """
        permission = await self.get_permission(permission_id)
        catalog = await self.get_catalog()
        roles = await self.repository.list_roles()
        ensure_valid(validate_permission_deletion(permission, catalog, roles))

        await self.repository.delete_permission(permission_id)
        await create_audit_log(
            self.repository,
            actor=actor or config.DEFAULT_ACTOR,
            action="delete",
            resource_type="permission",
            resource_id=permission_id,
            details={"name": permission.name},
        )

    async def get_layout(self, selected: Iterable[str] = ()) -> GraphLayout:
        """Dependency graph layout of the current catalog."""
        return layout(await self.get_catalog(), selected)

    async def get_tree(self) -> List[TreeNode]:
        """Permission tree of the current catalog."""
        return dependency_tree(await self.get_catalog())
