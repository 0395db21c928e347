"""
Persistence boundary for permissions, roles and audit entries.

The engine never talks to storage itself; services receive a Repository
and hand it validated payloads. InMemoryRepository is the mock backend
used by scripts and tests. It performs no validation of its own.

Usage:
    repository = InMemoryRepository()
    repository.seed(default_permissions(), default_roles())
    service = PermissionService(repository)
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ulid import ULID

from rbac_composer.core import config
from rbac_composer.core.audit import AuditEntry
from rbac_composer.core.exceptions import NotFoundError
from rbac_composer.features.permissions.schemas import Permission
from rbac_composer.features.roles.schemas import Role
from rbac_composer.utils import get_logger


log = get_logger(__name__)


def generate_id(prefix: str) -> str:
    """Generate a new prefixed ULID string."""
    return f"{prefix}{ULID()}"


class Repository(ABC):
    """Asynchronous CRUD interface for the permission catalog and roles."""

    # Permissions

    @abstractmethod
    async def list_permissions(self) -> List[Permission]:
        ...

    @abstractmethod
    async def get_permission(self, permission_id: str) -> Optional[Permission]:
        ...

    @abstractmethod
    async def create_permission(self, data: Dict[str, Any]) -> Permission:
        ...

    @abstractmethod
    async def update_permission(self, permission_id: str, data: Dict[str, Any]) -> Permission:
        ...

    @abstractmethod
    async def delete_permission(self, permission_id: str) -> None:
        ...

    # Roles

    @abstractmethod
    async def list_roles(self) -> List[Role]:
        ...

    @abstractmethod
    async def get_role(self, role_id: str) -> Optional[Role]:
        ...

    @abstractmethod
    async def create_role(self, data: Dict[str, Any], actor: str) -> Role:
        ...

    @abstractmethod
    async def update_role(self, role_id: str, data: Dict[str, Any], actor: str) -> Role:
        ...

    @abstractmethod
    async def delete_role(self, role_id: str) -> None:
        ...

    # Audit

    @abstractmethod
    async def add_audit_entry(self, entry: AuditEntry) -> AuditEntry:
        ...

    @abstractmethod
    async def list_audit_entries(
        self,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
    ) -> List[AuditEntry]:
        ...


class InMemoryRepository(Repository):
    """Dict-backed repository; records keep insertion order."""

    def __init__(self) -> None:
        self._permissions: Dict[str, Permission] = {}
        self._roles: Dict[str, Role] = {}
        self._audit: List[AuditEntry] = []

    def seed(self, permissions: Iterable[Permission] = (), roles: Iterable[Role] = ()) -> None:
        """Load records as-is, replacing any with the same id."""
        for permission in permissions:
            self._permissions[permission.id] = permission
        for role in roles:
            self._roles[role.id] = role
        log.info(f"Seeded repository with {len(self._permissions)} permissions and {len(self._roles)} roles")

    # Permissions

    async def list_permissions(self) -> List[Permission]:
        return list(self._permissions.values())

    async def get_permission(self, permission_id: str) -> Optional[Permission]:
        return self._permissions.get(permission_id)

    async def create_permission(self, data: Dict[str, Any]) -> Permission:
        permission = Permission(**{"type": "custom", **data, "id": generate_id(config.PERMISSION_ID_PREFIX)})
        self._permissions[permission.id] = permission
        return permission

    async def update_permission(self, permission_id: str, data: Dict[str, Any]) -> Permission:
        existing = self._permissions.get(permission_id)
        if existing is None:
            raise NotFoundError("permission", permission_id)
        updated = Permission(**{**existing.model_dump(), **data, "id": permission_id})
        self._permissions[permission_id] = updated
        return updated

    async def delete_permission(self, permission_id: str) -> None:
        if self._permissions.pop(permission_id, None) is None:
            raise NotFoundError("permission", permission_id)

    # Roles

    async def list_roles(self) -> List[Role]:
        return list(self._roles.values())

    async def get_role(self, role_id: str) -> Optional[Role]:
        return self._roles.get(role_id)

    async def create_role(self, data: Dict[str, Any], actor: str) -> Role:
        now = datetime.now(timezone.utc)
        role = Role(**{
            **data,
            "id": generate_id(config.ROLE_ID_PREFIX),
            "user_count": 0,
            "created_by": actor,
            "created_at": now,
            "updated_by": actor,
            "updated_at": now,
        })
        self._roles[role.id] = role
        return role

    async def update_role(self, role_id: str, data: Dict[str, Any], actor: str) -> Role:
        existing = self._roles.get(role_id)
        if existing is None:
            raise NotFoundError("role", role_id)
        updated = Role(**{
            **existing.model_dump(),
            **data,
            "id": role_id,
            "updated_by": actor,
            "updated_at": datetime.now(timezone.utc),
        })
        self._roles[role_id] = updated
        return updated

    async def delete_role(self, role_id: str) -> None:
        if self._roles.pop(role_id, None) is None:
            raise NotFoundError("role", role_id)

    # Audit

    async def add_audit_entry(self, entry: AuditEntry) -> AuditEntry:
        self._audit.append(entry)
        return entry

    async def list_audit_entries(
        self,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
    ) -> List[AuditEntry]:
        return [
            entry for entry in self._audit
            if (resource_type is None or entry.resource_type == resource_type)
            and (resource_id is None or entry.resource_id == resource_id)
        ]
