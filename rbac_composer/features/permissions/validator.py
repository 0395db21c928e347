"""
Save-time and delete-time validation of permissions.

Validators never raise for bad input: they return the list of issues
found (empty when the payload is acceptable). `ensure_valid` turns a
non-empty list into a ValidationFailed for callers that want to stop.
"""
from typing import Iterable, List, Optional, Protocol

from rbac_composer.core.exceptions import ValidationFailed
from rbac_composer.features.permissions.catalog import PermissionCatalog
from rbac_composer.features.permissions.resolver import (
    CatalogLike,
    find_cycle,
    missing_dependencies,
    unknown_ids,
)
from rbac_composer.features.permissions.schemas import Permission, ValidationIssue
from rbac_composer.utils import get_logger


log = get_logger(__name__)

# Fields of a system permission that can never change
SYSTEM_LOCKED_FIELDS = ("name", "category", "risk", "dependencies", "type")


class HasPermissions(Protocol):
    """Anything that grants a set of permission ids (a role)."""
    id: str
    permissions: List[str]


def ensure_valid(issues: List[ValidationIssue]) -> None:
    """
    Raise if any issue was found.

    Raises:
        ValidationFailed: carrying every issue
    """
    if issues:
        log.warning(f"Validation rejected payload: {[issue.code for issue in issues]}")
        raise ValidationFailed(issues)


def validate_permission(
    candidate: Permission,
    catalog: CatalogLike,
    existing: Optional[Permission] = None,
) -> List[ValidationIssue]:
    """
    Validate a permission about to be created or updated.

    Checks, in order: required fields, system lock, dependency references,
    cycles and risk escalation. Risk is checked both ways: a permission
    below high risk may not depend on a high risk one, and a high risk
    permission may not be required by one below high risk. The cycle check
    runs on the catalog as it would look after the save, so a dependency
    chain that leads back to the permission being edited is caught, as is
    a self-reference.

    Args:
        candidate: The permission as it would be saved
        catalog: Current catalog snapshot (may or may not contain the candidate)
        existing: The stored version when updating, if any

    Returns:
        List of issues; empty if the permission can be saved
    """
    catalog = PermissionCatalog.coerce(catalog)
    issues: List[ValidationIssue] = []

    if not candidate.name.strip():
        issues.append(ValidationIssue(field="name", code="required", message="Permission name is required"))
    if not candidate.category.strip():
        issues.append(ValidationIssue(field="category", code="required", message="Category is required"))

    if existing is not None and existing.is_system:
        issues.extend(_system_lock_issues(candidate, existing))

    seen: List[str] = []
    for dep_id in candidate.dependencies:
        if dep_id in seen:
            issues.append(ValidationIssue(
                field="dependencies",
                code="duplicate_dependency",
                message=f"Dependency '{dep_id}' is listed more than once",
                details={"dependency": dep_id},
            ))
        else:
            seen.append(dep_id)

    # Self-references are reported as cycles below, not as unknown ids
    missing = [dep_id for dep_id in unknown_ids(catalog, candidate.dependencies) if dep_id != candidate.id]
    for dep_id in missing:
        issues.append(ValidationIssue(
            field="dependencies",
            code="unknown_dependency",
            message=f"Dependency '{dep_id}' does not exist",
            details={"dependency": dep_id},
        ))

    cycle = find_cycle(catalog.with_permission(candidate))
    if cycle:
        issues.append(ValidationIssue(
            field="dependencies",
            code="circular_dependency",
            message=f"Circular dependency detected: {' -> '.join(cycle)}",
            details={"cycle": cycle},
        ))

    if candidate.risk != "high":
        for dep_id in seen:
            dependency = catalog.get(dep_id)
            if dependency is not None and dependency.risk == "high":
                issues.append(ValidationIssue(
                    field="risk",
                    code="risk_escalation",
                    message=(
                        f"Permission must be high risk when depending on high risk "
                        f"permission '{dep_id}'"
                    ),
                    details={"dependency": dep_id},
                ))
    else:
        for dependent_id in catalog.dependents_of(candidate.id):
            dependent = catalog.get(dependent_id)
            if dependent_id != candidate.id and dependent is not None and dependent.risk != "high":
                issues.append(ValidationIssue(
                    field="risk",
                    code="risk_escalation",
                    message=(
                        f"Permission '{dependent_id}' depends on this permission and must "
                        f"be high risk before it can become high risk"
                    ),
                    details={"dependent": dependent_id},
                ))

    return issues


def validate_granting_roles(
    candidate: Permission,
    catalog: CatalogLike,
    roles: Iterable[HasPermissions],
) -> List[ValidationIssue]:
    """
    Check that roles granting `candidate` stay closed after it is saved.

    Adding a dependency to a permission that a role already grants would
    leave that role without the new prerequisite.
    """
    after = PermissionCatalog.coerce(catalog).with_permission(candidate)
    affected: List[str] = []
    missing: List[str] = []
    for role in roles:
        if candidate.id not in role.permissions:
            continue
        role_missing = missing_dependencies(after, role.permissions)
        if role_missing:
            affected.append(role.id)
            missing.extend(pid for pid in role_missing if pid not in missing)

    if not affected:
        return []
    return [ValidationIssue(
        field="dependencies",
        code="dependency_closure",
        message=(
            f"Roles {', '.join(affected)} grant this permission but not "
            f"{', '.join(missing)}"
        ),
        details={"roles": affected, "missing": missing},
    )]


def validate_permission_deletion(
    permission: Permission,
    catalog: CatalogLike,
    roles: Iterable[HasPermissions] = (),
) -> List[ValidationIssue]:
    """
    Check that a permission can be deleted.

    Deletion is blocked for system permissions, and for any permission still
    listed in another permission's dependencies or granted by a role.
    """
    catalog = PermissionCatalog.coerce(catalog)
    issues: List[ValidationIssue] = []

    if permission.is_system:
        issues.append(ValidationIssue(
            field="type",
            code="system_locked",
            message="Cannot delete system permissions",
        ))

    dependent_ids = [pid for pid in catalog.dependents_of(permission.id) if pid != permission.id]
    role_ids = [role.id for role in roles if permission.id in role.permissions]
    blocking = len(dependent_ids) + len(role_ids)
    if blocking:
        issues.append(ValidationIssue(
            field="id",
            code="blocked_by_references",
            message=(
                f"Cannot delete permission: {blocking} blocking reference(s) "
                f"({len(dependent_ids)} permission(s), {len(role_ids)} role(s))"
            ),
            details={"blocking_references": blocking, "permissions": dependent_ids, "roles": role_ids},
        ))

    return issues


def _system_lock_issues(candidate: Permission, existing: Permission) -> List[ValidationIssue]:
    issues = []
    for field in SYSTEM_LOCKED_FIELDS:
        if getattr(candidate, field) != getattr(existing, field):
            issues.append(ValidationIssue(
                field=field,
                code="system_locked",
                message=f"Cannot modify '{field}' of a system permission",
            ))
    return issues
