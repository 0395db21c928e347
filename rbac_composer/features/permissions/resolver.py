"""
Dependency resolution over a permission catalog.

Pure functions: transitive dependency/dependent lookup, cycle detection
and the missing-dependency report used by role validation. None of them
mutate the catalog or the selections passed in.
"""
from typing import Dict, FrozenSet, Iterable, List, Optional, Union

from rbac_composer.features.permissions.catalog import PermissionCatalog
from rbac_composer.features.permissions.schemas import Permission
from rbac_composer.utils import get_logger


log = get_logger(__name__)

CatalogLike = Union[PermissionCatalog, Iterable[Permission]]

# Three-color DFS markers
WHITE, GRAY, BLACK = 0, 1, 2


def transitive_dependencies(catalog: CatalogLike, permission_id: str) -> FrozenSet[str]:
    """
    All permissions reachable by following `dependencies` from `permission_id`.

    The starting id is never part of the result. A node is expanded only
    the first time it is reached; every dependency of an expanded node is
    queued, so a diamond's shared dependency is still followed to the end
    and an accidental cycle stops when it reaches a node already seen.
    Each permission and edge is handled once.

    Dependencies that are not in the catalog are reported as reachable
    but have nothing further to follow.
    """
    catalog = PermissionCatalog.coerce(catalog)
    found: set = set()
    seen = {permission_id}
    queue = [permission_id]
    while queue:
        current = queue.pop()
        for dep_id in catalog.dependencies_of(current):
            if dep_id in seen:
                continue
            seen.add(dep_id)
            found.add(dep_id)
            queue.append(dep_id)
    return frozenset(found)


def transitive_dependents(catalog: CatalogLike, permission_id: str) -> FrozenSet[str]:
    """All permissions that directly or indirectly require `permission_id`."""
    catalog = PermissionCatalog.coerce(catalog)
    found: set = set()
    queue = [permission_id]
    while queue:
        current = queue.pop()
        for dependent_id in catalog.dependents_of(current):
            if dependent_id == permission_id or dependent_id in found:
                continue
            found.add(dependent_id)
            queue.append(dependent_id)
    return frozenset(found)


def find_cycle(catalog: CatalogLike) -> Optional[List[str]]:
    """
    Find one dependency cycle in the catalog.

    Whole-catalog three-color depth-first traversal: a permission that is
    still in progress (gray) and is reached again closes a cycle.

    Returns:
        The cycle as a list of ids whose first and last entries are equal
        (["a", "a"] for a self-loop), or None if the catalog is acyclic.
    """
    catalog = PermissionCatalog.coerce(catalog)
    color: Dict[str, int] = {pid: WHITE for pid in catalog.ids()}
    stack: List[str] = []

    def visit(permission_id: str) -> Optional[List[str]]:
        color[permission_id] = GRAY
        stack.append(permission_id)
        for dep_id in catalog.dependencies_of(permission_id):
            state = color.get(dep_id)
            if state is None:
                # Unknown id: nothing to follow
                continue
            if state == GRAY:
                return stack[stack.index(dep_id):] + [dep_id]
            if state == WHITE:
                cycle = visit(dep_id)
                if cycle:
                    return cycle
        stack.pop()
        color[permission_id] = BLACK
        return None

    for permission_id in catalog.ids():
        if color[permission_id] == WHITE:
            cycle = visit(permission_id)
            if cycle:
                log.debug(f"Dependency cycle found: {' -> '.join(cycle)}")
                return cycle
    return None


def has_cycle(catalog: CatalogLike) -> bool:
    """True if the dependency relation of the catalog is not a DAG."""
    return find_cycle(catalog) is not None


def missing_dependencies(catalog: CatalogLike, selection: Iterable[str]) -> List[str]:
    """
    Direct dependencies of selected permissions that are not selected.

    Returns:
        Unique missing ids in first-seen order; empty when the selection
        is closed under dependency.
    """
    catalog = PermissionCatalog.coerce(catalog)
    selected = list(selection)
    selected_set = set(selected)
    missing: List[str] = []
    for permission_id in selected:
        for dep_id in catalog.dependencies_of(permission_id):
            if dep_id not in selected_set and dep_id not in missing:
                missing.append(dep_id)
    return missing


def unknown_ids(catalog: CatalogLike, ids: Iterable[str]) -> List[str]:
    """Ids that do not exist in the catalog, unique, in input order."""
    catalog = PermissionCatalog.coerce(catalog)
    unknown: List[str] = []
    for permission_id in ids:
        if permission_id not in catalog and permission_id not in unknown:
            unknown.append(permission_id)
    return unknown
