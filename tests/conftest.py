"""
Shared fixtures for engine and service tests.
"""
import pytest

from rbac_composer.core.repository import InMemoryRepository
from rbac_composer.features.permissions.catalog import PermissionCatalog
from rbac_composer.features.permissions.defaults import default_permissions, default_roles
from rbac_composer.features.permissions.schemas import Permission
from rbac_composer.features.permissions.service import PermissionService
from rbac_composer.features.roles.schemas import Role
from rbac_composer.features.roles.service import RoleService


def make_permission(permission_id, dependencies=(), risk="low", type="custom", category="Users", name=None):
    """Helper to build a permission with sensible display fields."""
    return Permission(
        id=permission_id,
        name=name if name is not None else permission_id.replace("_", " ").title(),
        category=category,
        risk=risk,
        type=type,
        dependencies=list(dependencies),
    )


def make_role(role_id, permissions, type="custom", name=None, inherited_from=()):
    """Helper to build a role."""
    return Role(
        id=role_id,
        name=name if name is not None else role_id,
        type=type,
        permissions=list(permissions),
        inherited_from=list(inherited_from),
    )


@pytest.fixture
def users_catalog():
    """users_view <- users_create, users_view <- users_delete (high risk)."""
    return PermissionCatalog([
        make_permission("users_view"),
        make_permission("users_create", ["users_view"]),
        make_permission("users_delete", ["users_view"], risk="high"),
    ])


@pytest.fixture
def diamond_catalog():
    """top depends on left and right, which both depend on base."""
    return PermissionCatalog([
        make_permission("base"),
        make_permission("left", ["base"]),
        make_permission("right", ["base"]),
        make_permission("top", ["left", "right"]),
    ])


@pytest.fixture
def default_catalog():
    return PermissionCatalog(default_permissions())


@pytest.fixture
def repository():
    """In-memory repository seeded with the default catalog and system roles."""
    repo = InMemoryRepository()
    repo.seed(default_permissions(), default_roles())
    return repo


@pytest.fixture
def permission_service(repository):
    return PermissionService(repository)


@pytest.fixture
def role_service(repository):
    return RoleService(repository)
