"""
Repository registry for RepoVault.

The RepositoryRegistry is the single context object that owns all mutable
state: the id counter, the record mapping and the access control table.
Every public operation validates, authorizes and then mutates; any failure
is raised before the first write.

Invariants:
    - Ids are issued as counter + 1 and never reused, even after removal
    - The counter only advances on a successful create
    - The creator receives a level-4 grant in the same step as creation
    - Removing a repository purges its grant rows
    - id and created_at never change after creation

How to change safely:
    - Run all checks before the first write in every operation
    - Never hold module-level registry state; pass the registry explicitly

Example:
    >>> registry = RepositoryRegistry(admin_identity="system:admin")
    >>> repo_id = registry.create("api", 1024, "API service", ["user:alice"],
    ...                           creator="user:alice", created_at=1)
    >>> registry.get(repo_id, caller="user:alice").name
    'api'
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from ..access.acl import AccessControlTable, AccessGrant
from ..access.gate import AuthorizationGate
from ..access.levels import AccessLevel, Capabilities, Capability
from ..errors import InvalidProjectId, InvalidRecipient, RepoNotFound
from .types import RepositoryRecord
from .validate import validate_fields

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_IDENTITY = "system:admin"


class RepositoryRegistry:
    """Permissioned registry of repository records.

    Attributes:
        admin_identity: Identity that can never be the target of a grant
        acl: Access control table
        gate: Authorization gate over this registry and its table

    Thread safety:
        Not thread-safe. The host must serialize calls (see RegistryService).
    """

    def __init__(self, admin_identity: str = DEFAULT_ADMIN_IDENTITY) -> None:
        self.admin_identity = admin_identity
        self._records: Dict[int, RepositoryRecord] = {}
        self._counter = 0
        self.acl = AccessControlTable()
        self.gate = AuthorizationGate(self, self.acl, admin_identity)

    @property
    def last_id(self) -> int:
        """Most recently issued id (0 before the first create)."""
        return self._counter

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, repo_id: object) -> bool:
        return repo_id in self._records

    # ------------------------------------------------------------------
    # Id resolution
    # ------------------------------------------------------------------

    def resolve(self, repo_id: Any) -> RepositoryRecord:
        """Return the live record for an id.

        Raises:
            InvalidProjectId: If repo_id is not a positive int <= last issued id
            RepoNotFound: If the id was issued but the record was removed
        """
        if (
            isinstance(repo_id, bool)
            or not isinstance(repo_id, int)
            or repo_id < 1
            or repo_id > self._counter
        ):
            raise InvalidProjectId(repo_id, self._counter)
        record = self._records.get(repo_id)
        if record is None:
            raise RepoNotFound(repo_id)
        return record

    # ------------------------------------------------------------------
    # Record operations
    # ------------------------------------------------------------------

    def create(
        self,
        name: Any,
        size: Any,
        description: Any,
        contributors: Iterable[str],
        creator: str,
        created_at: int,
    ) -> int:
        """Register a new repository owned by ``creator``.

        Returns:
            The new repository id

        Raises:
            FieldValidationError: If any field is invalid
        """
        fields = validate_fields(name, size, description, contributors)
        repo_id = self._counter + 1
        record = RepositoryRecord(
            id=repo_id,
            name=fields.name,
            owner=creator,
            size=fields.size,
            created_at=created_at,
            description=fields.description,
            contributors=tuple(fields.contributors),
        )
        self._records[repo_id] = record
        self.acl.set_level(repo_id, creator, AccessLevel.MANAGE)
        self._counter = repo_id
        logger.info(
            "Repository created",
            extra={"repo_id": repo_id, "owner": creator, "created_at": created_at},
        )
        return repo_id

    def modify(
        self,
        repo_id: Any,
        name: Any,
        size: Any,
        description: Any,
        contributors: Iterable[str],
        caller: str,
    ) -> RepositoryRecord:
        """Replace the mutable metadata of a repository.

        Requires write capability; ownership alone is not consulted.

        Raises:
            FieldValidationError: If any field is invalid
            InvalidProjectId, RepoNotFound: If the id does not resolve
            NotAuthorized: If caller lacks write
        """
        fields = validate_fields(name, size, description, contributors)
        record = self.resolve(repo_id)
        self.gate.require_capability(record, caller, Capability.WRITE)
        updated = record.with_fields(
            name=fields.name,
            size=fields.size,
            description=fields.description,
            contributors=tuple(fields.contributors),
        )
        self._records[record.id] = updated
        logger.info("Repository modified", extra={"repo_id": record.id, "caller": caller})
        return updated

    def remove(self, repo_id: Any, caller: str) -> None:
        """Delete a repository and all of its grant rows.

        Raises:
            InvalidProjectId, RepoNotFound: If the id does not resolve
            NotAuthorized: If caller lacks delete
        """
        record = self.resolve(repo_id)
        self.gate.require_capability(record, caller, Capability.DELETE)
        del self._records[record.id]
        purged = self.acl.purge(record.id)
        logger.info(
            "Repository removed",
            extra={"repo_id": record.id, "caller": caller, "grants_purged": purged},
        )

    def get(self, repo_id: Any, caller: str) -> RepositoryRecord:
        """Fetch a repository record.

        Raises:
            InvalidProjectId, RepoNotFound: If the id does not resolve
            AccessDenied: If caller lacks read
        """
        record = self.resolve(repo_id)
        self.gate.require_read(record, caller)
        return record

    def list_repositories(self, caller: str) -> List[RepositoryRecord]:
        """Records the caller can read, ascending by id."""
        return [
            record
            for repo_id, record in sorted(self._records.items())
            if self.acl.get_effective(repo_id, caller).read
        ]

    def transfer_ownership(self, repo_id: Any, new_owner: Any, caller: str) -> RepositoryRecord:
        """Hand a repository to a new owner.

        The new owner is raised to level 4. The previous owner keeps their
        current grant row, which becomes revocable.

        Raises:
            InvalidProjectId, RepoNotFound: If the id does not resolve
            NotAuthorized: If caller is not the current owner
            InvalidRecipient: If new_owner is empty, the administrative
                identity or already the owner
        """
        record = self.resolve(repo_id)
        self.gate.require_owner(record, caller)
        if not isinstance(new_owner, str) or not new_owner:
            raise InvalidRecipient(new_owner, "identity must be a non-empty string")
        if new_owner == self.admin_identity:
            raise InvalidRecipient(new_owner, "the administrative identity cannot own repositories")
        if new_owner == record.owner:
            raise InvalidRecipient(new_owner, "already the owner")
        updated = record.with_owner(new_owner)
        self._records[record.id] = updated
        self.acl.set_level(record.id, new_owner, AccessLevel.MANAGE)
        logger.info(
            "Repository ownership transferred",
            extra={"repo_id": record.id, "previous_owner": record.owner, "owner": new_owner},
        )
        return updated

    # ------------------------------------------------------------------
    # Access management (delegated to the gate)
    # ------------------------------------------------------------------

    def get_effective(self, repo_id: int, user: str) -> Capabilities:
        return self.acl.get_effective(repo_id, user)

    def grant(self, repo_id: Any, user: Any, level: Any, caller: str) -> AccessGrant:
        return self.gate.grant(repo_id, user, level, caller)

    def revoke(self, repo_id: Any, user: Any, caller: str) -> bool:
        return self.gate.revoke(repo_id, user, caller)

    def check_level(self, repo_id: Any, user: Any, caller: str) -> int:
        return self.gate.check_level(repo_id, user, caller)

    def list_grants(self, repo_id: Any, caller: str) -> List[AccessGrant]:
        return self.gate.list_grants(repo_id, caller)
