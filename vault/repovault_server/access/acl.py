"""
Access control table for RepoVault.

Sparse relation (repository id, identity) -> access level. A missing row
means level 0; lookups return that default instead of None.

Invariants:
    - Only levels in 0..4 are ever stored
    - Rows hold the level only; capabilities are derived on read
    - Upsert is a full overwrite of the previous level

How to change safely:
    - Keep lookups side-effect free (no row creation on read)
    - Purge rows when their repository is removed
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List

from .levels import (
    NO_CAPABILITIES,
    AccessLevel,
    Capabilities,
    check_level_range,
    derive_capabilities,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessGrant:
    """A stored grant row.

    Attributes:
        repo_id: Repository the grant applies to
        user: Identity holding the grant
        level: Access level in 0..4
    """

    repo_id: int
    user: str
    level: AccessLevel

    @property
    def capabilities(self) -> Capabilities:
        return derive_capabilities(self.level)

    @property
    def can_read(self) -> bool:
        return self.capabilities.read

    @property
    def can_write(self) -> bool:
        return self.capabilities.write

    @property
    def can_delete(self) -> bool:
        return self.capabilities.delete

    @property
    def can_manage(self) -> bool:
        return self.capabilities.manage

    def to_dict(self) -> dict:
        return {
            "repo_id": self.repo_id,
            "user": self.user,
            "level": int(self.level),
            **self.capabilities.to_dict(),
        }


class AccessControlTable:
    """Per-repository access levels.

    Rows are grouped by repository id so that a repository's grants can be
    listed or purged without scanning the whole table.

    Example:
        >>> table = AccessControlTable()
        >>> table.set_level(1, "user:bob", 2)
        >>> table.get_effective(1, "user:bob").write
        True
        >>> table.get_level(1, "user:carol")
        0
    """

    def __init__(self) -> None:
        self._rows: Dict[int, Dict[str, AccessLevel]] = defaultdict(dict)

    def get_level(self, repo_id: int, user: str) -> int:
        """Stored level for (repo_id, user), or 0 if no row exists."""
        rows = self._rows.get(repo_id)
        if not rows:
            return int(AccessLevel.NONE)
        return int(rows.get(user, AccessLevel.NONE))

    def get_effective(self, repo_id: int, user: str) -> Capabilities:
        """Derived capabilities for (repo_id, user); all-false if no row."""
        level = self._rows.get(repo_id, {}).get(user)
        if level is None:
            return NO_CAPABILITIES
        return derive_capabilities(level)

    def has_row(self, repo_id: int, user: str) -> bool:
        return user in self._rows.get(repo_id, {})

    def set_level(self, repo_id: int, user: str, level: int) -> AccessGrant:
        """Upsert the row for (repo_id, user).

        Raises:
            InvalidAccessLevel: If level is not in 0..4
        """
        checked = check_level_range(level)
        previous = self._rows[repo_id].get(user)
        self._rows[repo_id][user] = checked
        logger.debug(
            "Access level set",
            extra={
                "repo_id": repo_id,
                "user": user,
                "level": int(checked),
                "previous": None if previous is None else int(previous),
            },
        )
        return AccessGrant(repo_id=repo_id, user=user, level=checked)

    def delete(self, repo_id: int, user: str) -> bool:
        """Delete the row for (repo_id, user). Returns whether it existed."""
        rows = self._rows.get(repo_id)
        if not rows or user not in rows:
            return False
        del rows[user]
        if not rows:
            del self._rows[repo_id]
        return True

    def purge(self, repo_id: int) -> int:
        """Delete every row for a repository. Returns the number removed."""
        rows = self._rows.pop(repo_id, {})
        return len(rows)

    def grants_for(self, repo_id: int) -> List[AccessGrant]:
        """All rows for a repository, sorted by identity."""
        rows = self._rows.get(repo_id, {})
        return [
            AccessGrant(repo_id=repo_id, user=user, level=level)
            for user, level in sorted(rows.items())
        ]

    def __len__(self) -> int:
        return sum(len(rows) for rows in self._rows.values())
