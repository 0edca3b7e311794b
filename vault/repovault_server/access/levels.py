"""
Access levels and derived capabilities.

A grant stores a single integer level. The four capabilities are always
recomputed from it and never stored alongside it.

Level table:
    0 NONE    - no capabilities
    1 READ    - read
    2 WRITE   - read, write
    3 DELETE  - read, write, delete
    4 MANAGE  - read, write, delete, manage

Invariants:
    - Capability sets are monotonic: level L+1 includes everything at level L
    - Out-of-range levels are rejected, never clamped

How to change safely:
    - New capabilities must be added at or above an existing threshold
    - Never change the meaning of an existing level
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any

from ..errors import InvalidAccessLevel


class AccessLevel(IntEnum):
    """Ordered access levels."""

    NONE = 0
    READ = 1
    WRITE = 2
    DELETE = 3
    MANAGE = 4


MIN_LEVEL = AccessLevel.NONE
MAX_LEVEL = AccessLevel.MANAGE


class Capability(Enum):
    """Discrete capabilities derived from an access level."""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    MANAGE = "manage"


# Minimum level that confers each capability
CAPABILITY_THRESHOLDS = {
    Capability.READ: AccessLevel.READ,
    Capability.WRITE: AccessLevel.WRITE,
    Capability.DELETE: AccessLevel.DELETE,
    Capability.MANAGE: AccessLevel.MANAGE,
}


@dataclass(frozen=True)
class Capabilities:
    """Capability flags for one (repository, identity) pair.

    Attributes:
        read: May fetch the record
        write: May replace the record's mutable fields
        delete: May remove the record
        manage: May grant and revoke access
    """

    read: bool = False
    write: bool = False
    delete: bool = False
    manage: bool = False

    def allows(self, capability: Capability) -> bool:
        return getattr(self, capability.value)

    def to_set(self) -> frozenset[Capability]:
        return frozenset(c for c in Capability if self.allows(c))

    def to_dict(self) -> dict[str, bool]:
        return {c.value: self.allows(c) for c in Capability}


NO_CAPABILITIES = Capabilities()


def is_valid_level(level: Any) -> bool:
    """Whether ``level`` is an integer in 0..4. Booleans are not levels."""
    if isinstance(level, bool) or not isinstance(level, int):
        return False
    return MIN_LEVEL <= level <= MAX_LEVEL


def check_level_range(level: Any) -> AccessLevel:
    """Validate a level and return it as an AccessLevel.

    Raises:
        InvalidAccessLevel: If level is not an integer in 0..4
    """
    if not is_valid_level(level):
        raise InvalidAccessLevel(level)
    return AccessLevel(level)


def derive_capabilities(level: int) -> Capabilities:
    """Map an access level to its capability flags.

    Args:
        level: Access level in 0..4

    Returns:
        Capabilities derived from the level

    Raises:
        InvalidAccessLevel: If level is out of range

    Example:
        >>> derive_capabilities(2)
        Capabilities(read=True, write=True, delete=False, manage=False)
    """
    level = check_level_range(level)
    return Capabilities(
        **{c.value: level >= threshold for c, threshold in CAPABILITY_THRESHOLDS.items()}
    )
