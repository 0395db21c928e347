"""
Permission catalog feature module.

Implements the permission dependency graph: catalog lookup, transitive
dependency resolution, cycle detection, layered layout and save-time
validation of permissions.
"""
