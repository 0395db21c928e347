"""
Default system permissions and roles.

Used to seed the in-memory repository. Every entry is a system record:
it cannot be deleted or structurally edited.
"""
from typing import List

from rbac_composer.features.permissions.schemas import Permission
from rbac_composer.features.roles.schemas import Role, RoleMetadata


# (id, name, category, risk, dependencies, description)
DEFAULT_PERMISSIONS = [
    # User management
    ("users.view", "View Users", "User Management", "low", [], "View user details and list"),
    ("users.create", "Create Users", "User Management", "medium", ["users.view"], "Create new user accounts"),
    ("users.edit", "Edit Users", "User Management", "medium", ["users.view"], "Modify user details and settings"),
    ("users.delete", "Delete Users", "User Management", "high", ["users.view"], "Delete user accounts"),

    # Role management
    ("roles.view", "View Roles", "Role Management", "low", [], "View role configurations"),
    ("roles.create", "Create Roles", "Role Management", "high", ["roles.view"], "Create new roles"),
    ("roles.edit", "Edit Roles", "Role Management", "high", ["roles.view"], "Modify existing roles"),
    ("roles.delete", "Delete Roles", "Role Management", "high", ["roles.view"], "Delete roles"),
    ("roles.assign", "Assign Roles", "Role Management", "medium", ["roles.view", "users.view"], "Assign roles to users"),

    # Application management
    ("apps.view", "View Applications", "Application Management", "low", [], "View application details and list"),
    ("apps.create", "Create Applications", "Application Management", "high", ["apps.view"], "Create new applications"),
    ("apps.edit", "Edit Applications", "Application Management", "high", ["apps.view"], "Modify application settings"),
    ("apps.delete", "Delete Applications", "Application Management", "high", ["apps.view"], "Delete applications"),

    # Deployment
    ("deploy.view", "View Deployments", "Deployment", "low", [], "View deployment status and history"),
    ("deploy.create", "Create Deployments", "Deployment", "high", ["deploy.view", "apps.view"], "Create new deployments"),
    ("deploy.rollback", "Rollback Deployments", "Deployment", "high", ["deploy.view", "deploy.create"], "Rollback deployments"),
]


DEFAULT_ROLES = {
    "role_system_admin": {
        "name": "System Administrator",
        "description": "Full system access with all privileges",
        "permissions": "ALL",  # Special case - gets all permissions
        "metadata": {"allow_delegation": False},
    },
    "role_security_admin": {
        "name": "Security Administrator",
        "description": "Manages user access and security settings",
        "permissions": [
            "users.view", "users.create", "users.edit", "users.delete",
            "roles.view", "roles.create", "roles.edit", "roles.delete", "roles.assign",
        ],
        "metadata": {"allow_delegation": True, "max_delegation_depth": 1},
    },
    "role_developer": {
        "name": "Developer",
        "description": "Application development and deployment access",
        "permissions": [
            "apps.view", "apps.create", "apps.edit",
            "deploy.view", "deploy.create",
        ],
        "metadata": {"allow_delegation": False},
    },
    "role_viewer": {
        "name": "Viewer",
        "description": "Read-only access to system resources",
        "permissions": ["users.view", "roles.view", "apps.view", "deploy.view"],
        "metadata": {"allow_delegation": False},
    },
}


def default_permissions() -> List[Permission]:
    """Fresh Permission records for the default catalog."""
    return [
        Permission(
            id=permission_id,
            name=name,
            category=category,
            risk=risk,
            dependencies=list(dependencies),
            description=description,
            type="system",
        )
        for permission_id, name, category, risk, dependencies, description in DEFAULT_PERMISSIONS
    ]


def default_roles() -> List[Role]:
    """Fresh Role records for the default system roles."""
    all_ids = [entry[0] for entry in DEFAULT_PERMISSIONS]
    roles = []
    for role_id, role_data in DEFAULT_ROLES.items():
        permissions = all_ids if role_data["permissions"] == "ALL" else role_data["permissions"]
        roles.append(Role(
            id=role_id,
            name=role_data["name"],
            description=role_data["description"],
            type="system",
            permissions=list(permissions),
            metadata=RoleMetadata(**role_data["metadata"]),
        ))
    return roles
