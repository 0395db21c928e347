"""
Permission dependency graph and role composition engine.
"""
