"""
Repository record type.

Records are immutable snapshots. A modify produces a new record via
``dataclasses.replace``; callers holding an older snapshot never observe
the change.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class RepositoryRecord:
    """Metadata for one registered repository.

    Attributes:
        id: Positive repository id, assigned once
        name: Display name (1-64 chars)
        owner: Identity that created the record or received it by transfer
        size: Size in bytes (0 < size < 1,000,000,000)
        created_at: Logical timestamp supplied by the host clock
        description: Free text (1-128 chars)
        contributors: Ordered contributor identities (1-10)
    """

    id: int
    name: str
    owner: str
    size: int
    created_at: int
    description: str
    contributors: Tuple[str, ...] = field(default_factory=tuple)

    def with_fields(
        self,
        name: str,
        size: int,
        description: str,
        contributors: Tuple[str, ...],
    ) -> RepositoryRecord:
        """Copy with the mutable metadata replaced."""
        return replace(
            self,
            name=name,
            size=size,
            description=description,
            contributors=tuple(contributors),
        )

    def with_owner(self, owner: str) -> RepositoryRecord:
        return replace(self, owner=owner)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "owner": self.owner,
            "size": self.size,
            "created_at": self.created_at,
            "description": self.description,
            "contributors": list(self.contributors),
        }
