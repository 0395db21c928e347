"""
Audit trail for permission and role changes.

Tracks who did what, to which record, and when.
"""
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict

from rbac_composer.utils import get_logger

if TYPE_CHECKING:
    from rbac_composer.core.repository import Repository


log = get_logger(__name__)


class AuditEntry(BaseModel):
    """A single recorded change."""
    actor: str
    action: Literal["create", "update", "delete"]
    resource_type: Literal["permission", "role"]
    resource_id: str
    details: Optional[Dict[str, Any]] = None
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)


async def create_audit_log(
    repository: "Repository",
    actor: str,
    action: str,
    resource_type: str,
    resource_id: str,
    details: Optional[Dict[str, Any]] = None,
) -> AuditEntry:
    """
    Create an audit log entry.

    Args:
        repository: Where the entry is stored
        actor: User performing the action
        action: Action performed ("create", "update" or "delete")
        resource_type: "permission" or "role"
        resource_id: ID of the resource
        details: Additional details (payload or changed fields)

    Returns:
        Stored AuditEntry
    """
    entry = AuditEntry(
        actor=actor,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=details,
    )
    await repository.add_audit_entry(entry)

    log.info(f"Audit: user={actor} action={action} resource={resource_type}:{resource_id}")

    return entry
