"""
Seed script to populate the default permission catalog and roles.

Loads the default system permissions and roles into an in-memory
repository, checks that the catalog is a valid DAG and that every role is
closed under dependency, then logs the dependency levels.

Usage:
    uv run python -m scripts.seed_permissions
"""
import asyncio

from rbac_composer.core import config
from rbac_composer.core.repository import InMemoryRepository
from rbac_composer.features.permissions.defaults import default_permissions, default_roles
from rbac_composer.features.permissions.service import PermissionService
from rbac_composer.features.roles.composer import is_closed
from rbac_composer.features.roles.service import RoleService
from rbac_composer.utils import configure_logging, get_logger


log = get_logger(__name__)


async def seed_permissions(repository: InMemoryRepository) -> None:
    """Seed default permissions and roles, then verify them."""
    repository.seed(default_permissions(), default_roles())

    permission_service = PermissionService(repository)
    role_service = RoleService(repository)
    catalog = await permission_service.get_catalog()

    # Raises CyclicDependencyError if the defaults are broken
    graph = await permission_service.get_layout()
    for level, ids in enumerate(graph.levels()):
        log.info(f"Level {level}: {', '.join(ids)}")

    for role in await role_service.list_roles():
        if not is_closed(role.permissions, catalog):
            log.error(f"Role {role.id} is not closed under dependency")
        else:
            log.info(f"Role {role.id} ({role.name}): {len(role.permissions)} permissions")


async def main():
    configure_logging()
    if not config.SEED_DEFAULTS:
        log.warning("SEED_DEFAULTS disabled, nothing to do")
        return
    log.info("Seeding default permissions and roles...")
    await seed_permissions(InMemoryRepository())
    log.info("Seeding complete")


if __name__ == "__main__":
    asyncio.run(main())
