"""
Permission catalog: an immutable, id-indexed snapshot of every permission.

Every operation that "changes" the catalog returns a new catalog; the
snapshot handed in by the caller is never modified.
"""
from typing import Dict, Iterable, Iterator, List, Optional, Union

from rbac_composer.features.permissions.schemas import Permission


class PermissionCatalog:
    """
    Lookup structure over a list of permissions.

    Usage:
        catalog = PermissionCatalog(permissions)
        catalog.get("users.view")
        catalog.by_category()["User Management"]
    """

    def __init__(self, permissions: Iterable[Permission] = ()):
        self._permissions: List[Permission] = list(permissions)
        self._index: Dict[str, Permission] = {}
        for permission in self._permissions:
            if permission.id in self._index:
                raise ValueError(f"Duplicate permission id in catalog: {permission.id}")
            self._index[permission.id] = permission
        self._dependents: Optional[Dict[str, List[str]]] = None

    @classmethod
    def coerce(cls, permissions: Union["PermissionCatalog", Iterable[Permission]]) -> "PermissionCatalog":
        """Accept either a catalog or a plain list of permissions."""
        if isinstance(permissions, cls):
            return permissions
        return cls(permissions)

    def __len__(self) -> int:
        return len(self._permissions)

    def __iter__(self) -> Iterator[Permission]:
        return iter(self._permissions)

    def __contains__(self, permission_id: object) -> bool:
        return permission_id in self._index

    def __repr__(self) -> str:
        return f"<PermissionCatalog(size={len(self)})>"

    def get(self, permission_id: str) -> Optional[Permission]:
        return self._index.get(permission_id)

    def ids(self) -> List[str]:
        """Permission ids in catalog order."""
        return [p.id for p in self._permissions]

    def dependencies_of(self, permission_id: str) -> List[str]:
        """Direct dependencies; empty for unknown ids."""
        permission = self._index.get(permission_id)
        return list(permission.dependencies) if permission else []

    def dependents_of(self, permission_id: str) -> List[str]:
        """Ids of permissions that list `permission_id` as a direct dependency, in catalog order."""
        if self._dependents is None:
            reverse: Dict[str, List[str]] = {}
            for permission in self._permissions:
                for dep_id in permission.dependencies:
                    bucket = reverse.setdefault(dep_id, [])
                    if permission.id not in bucket:
                        bucket.append(permission.id)
            self._dependents = reverse
        return list(self._dependents.get(permission_id, []))

    def by_category(self) -> Dict[str, List[Permission]]:
        """Permissions grouped by category, categories and members in catalog order."""
        grouped: Dict[str, List[Permission]] = {}
        for permission in self._permissions:
            grouped.setdefault(permission.category, []).append(permission)
        return grouped

    def with_permission(self, permission: Permission) -> "PermissionCatalog":
        """New catalog with `permission` inserted, or replacing the entry with the same id in place."""
        if permission.id in self._index:
            return PermissionCatalog(
                permission if p.id == permission.id else p for p in self._permissions
            )
        return PermissionCatalog([*self._permissions, permission])

    def without(self, permission_id: str) -> "PermissionCatalog":
        """New catalog with `permission_id` removed."""
        return PermissionCatalog(p for p in self._permissions if p.id != permission_id)

    def to_list(self) -> List[Permission]:
        return list(self._permissions)
