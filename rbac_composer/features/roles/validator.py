"""
Save-time and delete-time validation of roles.
"""
from typing import List, Optional

from rbac_composer.features.permissions.catalog import PermissionCatalog
from rbac_composer.features.permissions.resolver import CatalogLike, missing_dependencies, unknown_ids
from rbac_composer.features.permissions.schemas import ValidationIssue
from rbac_composer.features.roles.schemas import Role


# Fields of a system role that can never change
SYSTEM_LOCKED_FIELDS = ("name", "type", "permissions")


def validate_role(candidate: Role, catalog: CatalogLike, existing: Optional[Role] = None) -> List[ValidationIssue]:
    """
    Validate a role about to be created or updated.

    The role must be named, grant at least one permission, reference only
    known permissions and be closed under dependency.
    """
    catalog = PermissionCatalog.coerce(catalog)
    issues: List[ValidationIssue] = []

    if not candidate.name.strip():
        issues.append(ValidationIssue(field="name", code="required", message="Role name is required"))
    if not candidate.permissions:
        issues.append(ValidationIssue(
            field="permissions",
            code="required",
            message="At least one permission is required",
        ))

    if candidate.is_system and (existing is None or not existing.is_system):
        issues.append(ValidationIssue(
            field="type",
            code="system_locked",
            message="Only custom roles can be created or edited",
        ))

    if existing is not None and existing.is_system:
        for field in SYSTEM_LOCKED_FIELDS:
            before, after = getattr(existing, field), getattr(candidate, field)
            if field == "permissions":
                before, after = set(before), set(after)
            if before != after:
                issues.append(ValidationIssue(
                    field=field,
                    code="system_locked",
                    message=f"Cannot modify '{field}' of a system role",
                ))

    for permission_id in unknown_ids(catalog, candidate.permissions):
        issues.append(ValidationIssue(
            field="permissions",
            code="unknown_permission",
            message=f"Permission '{permission_id}' does not exist",
            details={"permission": permission_id},
        ))

    missing = missing_dependencies(catalog, candidate.permissions)
    if missing:
        issues.append(ValidationIssue(
            field="permissions",
            code="dependency_closure",
            message=f"Missing required permissions: {', '.join(missing)}",
            details={"missing": missing},
        ))

    return issues


def validate_role_deletion(role: Role) -> List[ValidationIssue]:
    """System roles can never be deleted."""
    if role.is_system:
        return [ValidationIssue(field="type", code="system_locked", message="Cannot delete system roles")]
    return []
