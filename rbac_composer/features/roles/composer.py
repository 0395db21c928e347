"""
Role composition: keeping a role's permission selection closed under dependency.

Every function is pure. Selections come in as any iterable of ids and go
out as a new frozenset; the caller's collection is never modified.
"""
from typing import Dict, FrozenSet, Iterable, List, Set

from rbac_composer.core.exceptions import NotFoundError
from rbac_composer.features.permissions.catalog import PermissionCatalog
from rbac_composer.features.permissions.resolver import (
    CatalogLike,
    transitive_dependencies,
    transitive_dependents,
)
from rbac_composer.features.permissions.schemas import Permission
from rbac_composer.features.roles.schemas import Role
from rbac_composer.utils import get_logger


log = get_logger(__name__)


def select(selection: Iterable[str], permission_id: str, catalog: CatalogLike) -> FrozenSet[str]:
    """
    Add a permission together with everything it transitively requires.

    Raises:
        NotFoundError: if the permission is not in the catalog
    """
    catalog = PermissionCatalog.coerce(catalog)
    if permission_id not in catalog:
        raise NotFoundError("permission", permission_id)

    required = transitive_dependencies(catalog, permission_id)
    result = frozenset(selection) | {permission_id} | required
    log.debug(f"Selected {permission_id} pulling in {sorted(required)}")
    return result


def deselect(selection: Iterable[str], permission_id: str, catalog: CatalogLike) -> FrozenSet[str]:
    """
    Remove a permission and every selected permission that transitively requires it.

    Works for ids no longer in the catalog as well, so stale grants can be
    dropped.
    """
    catalog = PermissionCatalog.coerce(catalog)
    current = frozenset(selection)
    removed = (transitive_dependents(catalog, permission_id) & current) | {permission_id}
    log.debug(f"Deselected {permission_id} removing {sorted(removed & current)}")
    return current - removed


def toggle(selection: Iterable[str], permission_id: str, catalog: CatalogLike) -> FrozenSet[str]:
    """Deselect the permission if selected, select it otherwise."""
    current = frozenset(selection)
    if permission_id in current:
        return deselect(current, permission_id, catalog)
    return select(current, permission_id, catalog)


def close_selection(selection: Iterable[str], catalog: CatalogLike) -> FrozenSet[str]:
    """Selection plus the transitive dependencies of each member."""
    catalog = PermissionCatalog.coerce(catalog)
    result: Set[str] = set(selection)
    for permission_id in list(result):
        result |= transitive_dependencies(catalog, permission_id)
    return frozenset(result)


def is_closed(selection: Iterable[str], catalog: CatalogLike) -> bool:
    """True if every selected permission has all of its direct dependencies selected."""
    catalog = PermissionCatalog.coerce(catalog)
    current = frozenset(selection)
    return all(dep_id in current for pid in current for dep_id in catalog.dependencies_of(pid))


def ordered(selection: Iterable[str], catalog: CatalogLike) -> List[str]:
    """
    Selection as a list in catalog order.

    Ids unknown to the catalog keep their relative order at the end.
    """
    catalog = PermissionCatalog.coerce(catalog)
    current = list(dict.fromkeys(selection))
    members = set(current)
    known = [pid for pid in catalog.ids() if pid in members]
    return known + [pid for pid in current if pid not in catalog]


# ============================================================================
# Role Inheritance
# ============================================================================

def role_hierarchy(roles: Iterable[Role]) -> Dict[str, Set[str]]:
    """Map each parent role id to the ids of roles inheriting from it."""
    hierarchy: Dict[str, Set[str]] = {}
    for role in roles:
        for parent_id in role.inherited_from:
            hierarchy.setdefault(parent_id, set()).add(role.id)
    return hierarchy


def effective_permissions(role: Role, roles: Iterable[Role], catalog: CatalogLike) -> List[Permission]:
    """
    Permissions granted by a role and every role it inherits from.

    Parents are followed through `inherited_from` transitively; each role is
    visited at most once, so inheritance cycles terminate. Unknown parent
    ids are skipped.

    Returns:
        Permission records in catalog order
    """
    catalog = PermissionCatalog.coerce(catalog)
    by_id = {r.id: r for r in roles}
    granted: Set[str] = set(role.permissions)
    visited = {role.id}
    pending = list(role.inherited_from)

    while pending:
        parent_id = pending.pop()
        if parent_id in visited:
            continue
        visited.add(parent_id)
        parent = by_id.get(parent_id)
        if parent is None:
            log.debug(f"Role {role.id} inherits from unknown role {parent_id}")
            continue
        granted.update(parent.permissions)
        pending.extend(parent.inherited_from)

    return [permission for permission in catalog if permission.id in granted]
