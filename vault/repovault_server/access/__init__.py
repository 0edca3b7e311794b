"""
Access module for RepoVault - permission levels and authorization.

This module handles:
- Access levels (0..4) and their derived capabilities
- The sparse (repository, identity) -> level table
- Authorization checks and access-management operations

Invariants:
    - Capabilities are derived from levels, never stored
    - A missing grant row means level 0
    - Every check reads current state
"""

from .acl import AccessControlTable, AccessGrant
from .gate import AuthorizationGate, RecordSource
from .levels import (
    AccessLevel,
    Capabilities,
    Capability,
    check_level_range,
    derive_capabilities,
    is_valid_level,
)

__all__ = [
    "AccessControlTable",
    "AccessGrant",
    "AuthorizationGate",
    "RecordSource",
    "AccessLevel",
    "Capabilities",
    "Capability",
    "check_level_range",
    "derive_capabilities",
    "is_valid_level",
]
