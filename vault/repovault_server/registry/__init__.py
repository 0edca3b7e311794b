"""
Registry module for RepoVault - repository records and their validation.

This module provides:
- RepositoryRecord: immutable record snapshots
- validate_fields: pure field constraint checks
- RepositoryRegistry: the state-owning registry context

Invariants:
    - Ids are monotonic and never reused
    - Every mutation is validated and authorized before it is applied
"""

from .store import DEFAULT_ADMIN_IDENTITY, RepositoryRegistry
from .types import RepositoryRecord
from .validate import (
    MAX_CONTRIBUTORS,
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    MAX_SIZE,
    MIN_CONTRIBUTORS,
    RepositoryFields,
    validate_fields,
)

__all__ = [
    "DEFAULT_ADMIN_IDENTITY",
    "RepositoryRegistry",
    "RepositoryRecord",
    "RepositoryFields",
    "validate_fields",
    "MAX_CONTRIBUTORS",
    "MAX_DESCRIPTION_LENGTH",
    "MAX_NAME_LENGTH",
    "MAX_SIZE",
    "MIN_CONTRIBUTORS",
]
