"""
Role composition feature module.

Keeps role permission selections closed under dependency and validates
roles before they are persisted.
"""
