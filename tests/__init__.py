"""
RepoVault Test Suite.

This package contains:
- unit/: Unit tests for levels, the grant table, validation, the gate and the registry
- integration/: Host service and replay tool tests
"""
