"""
Layered layout of the permission dependency graph.

A permission's level is the length of its longest dependency chain:
permissions without dependencies sit on level 0 and every permission sits
one level above its deepest dependency. The renderer draws levels top to
bottom and nodes left to right in catalog order; no drawing happens here.
"""
from typing import Dict, Iterable, List, Set

from rbac_composer.core.exceptions import CyclicDependencyError
from rbac_composer.features.permissions.catalog import PermissionCatalog
from rbac_composer.features.permissions.resolver import CatalogLike, find_cycle
from rbac_composer.features.permissions.schemas import GraphLayout, LayoutEdge, LayoutNode, TreeNode
from rbac_composer.utils import get_logger


log = get_logger(__name__)


def compute_levels(catalog: CatalogLike) -> Dict[str, int]:
    """
    Map every permission id to its dependency level.

    Memoized longest-path computation: each level is computed once and
    cached, independent of traversal order. Dependencies missing from the
    catalog do not contribute a level.

    Raises:
        CyclicDependencyError: if the catalog contains a cycle
    """
    catalog = PermissionCatalog.coerce(catalog)
    levels: Dict[str, int] = {}
    in_progress: List[str] = []

    def level_of(permission_id: str) -> int:
        if permission_id in levels:
            return levels[permission_id]
        if permission_id in in_progress:
            start = in_progress.index(permission_id)
            raise CyclicDependencyError(in_progress[start:] + [permission_id])
        in_progress.append(permission_id)
        dep_levels = [level_of(dep_id) for dep_id in catalog.dependencies_of(permission_id) if dep_id in catalog]
        in_progress.pop()
        levels[permission_id] = max(dep_levels) + 1 if dep_levels else 0
        return levels[permission_id]

    for permission_id in catalog.ids():
        level_of(permission_id)

    return {permission_id: levels[permission_id] for permission_id in catalog.ids()}


def layout(catalog: CatalogLike, selected: Iterable[str] = ()) -> GraphLayout:
    """
    Lay the catalog out as a layered DAG.

    Nodes are grouped by level and ranked left to right in catalog order.
    Each permission gets one edge per direct dependency present in the
    catalog; an edge is `selected` when both of its endpoints are.

    Raises:
        CyclicDependencyError: if the catalog contains a cycle
    """
    catalog = PermissionCatalog.coerce(catalog)
    cycle = find_cycle(catalog)
    if cycle:
        raise CyclicDependencyError(cycle)

    levels = compute_levels(catalog)
    selected_ids: Set[str] = set(selected)

    ranks: Dict[int, int] = {}
    nodes: List[LayoutNode] = []
    for permission_id in catalog.ids():
        level = levels[permission_id]
        rank = ranks.get(level, 0)
        ranks[level] = rank + 1
        nodes.append(LayoutNode(id=permission_id, level=level, rank=rank))
    nodes.sort(key=lambda node: (node.level, node.rank))

    edges: List[LayoutEdge] = []
    for permission in catalog:
        for dep_id in permission.dependencies:
            if dep_id not in catalog:
                continue
            edges.append(LayoutEdge(
                source=permission.id,
                target=dep_id,
                selected=permission.id in selected_ids and dep_id in selected_ids,
            ))

    log.debug(f"Laid out {len(nodes)} permissions on {len(ranks)} levels with {len(edges)} edges")
    return GraphLayout(nodes=nodes, edges=edges)


def dependency_tree(catalog: CatalogLike) -> List[TreeNode]:
    """
    Permission tree rooted at permissions without dependencies.

    Children of a node are the permissions that list it as a direct
    dependency, so a permission with several dependencies shows up under
    each of them. A branch stops where it would revisit one of its own
    ancestors.
    """
    catalog = PermissionCatalog.coerce(catalog)

    def build(permission_id: str, depth: int, path: frozenset) -> TreeNode:
        children = [
            build(dependent_id, depth + 1, path | {dependent_id})
            for dependent_id in catalog.dependents_of(permission_id)
            if dependent_id not in path
        ]
        return TreeNode(id=permission_id, depth=depth, children=children)

    return [
        build(permission.id, 0, frozenset({permission.id}))
        for permission in catalog
        if not permission.dependencies
    ]
