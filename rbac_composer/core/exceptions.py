"""
Domain exceptions raised by the engine and its services.
"""
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from rbac_composer.features.permissions.schemas import ValidationIssue


class NotFoundError(LookupError):
    """Raised when a permission or role id is not known."""

    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type.capitalize()} not found: {resource_id}")


class ValidationFailed(Exception):
    """
    Raised when a payload is rejected.

    Carries every issue found so the caller can render them against
    their form fields. Nothing has been persisted when this is raised.
    """

    def __init__(self, errors: List["ValidationIssue"]):
        if not errors:
            raise ValueError("ValidationFailed requires at least one issue")
        self.errors = list(errors)
        super().__init__("; ".join(issue.message for issue in self.errors))

    def fields(self) -> List[str]:
        return [issue.field for issue in self.errors]


class CyclicDependencyError(ValueError):
    """Raised by level computation when the catalog contains a cycle."""

    def __init__(self, cycle: Optional[List[str]] = None):
        self.cycle = cycle or []
        path = " -> ".join(self.cycle)
        message = "Circular dependency detected in permissions"
        super().__init__(f"{message}: {path}" if path else message)
