"""
Authorization gate for RepoVault.

The gate combines repository existence (via a RecordSource) with the
access control table to decide whether a caller may act on a repository.
It also implements the access-management operations: grant, revoke and
level queries.

Invariants:
    - Every check is recomputed from current state; nothing is cached
    - Checks run in a fixed order and the first failure is raised
    - A failed check never leaves a partial mutation behind
    - The owner's grant cannot be revoked or lowered while they remain owner

How to change safely:
    - Keep the precondition order stable, callers rely on which error wins
    - The identity-distinctness rule (not self, not the administrative
      identity) is a business rule; do not relax it without product sign-off
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Protocol

from ..errors import AccessDenied, InvalidUser, NotAuthorized, OwnerProtected
from .acl import AccessControlTable, AccessGrant
from .levels import AccessLevel, Capabilities, Capability, check_level_range

if TYPE_CHECKING:
    from ..registry.types import RepositoryRecord

logger = logging.getLogger(__name__)


class RecordSource(Protocol):
    """Anything that can resolve a repository id to its live record."""

    def resolve(self, repo_id: Any) -> RepositoryRecord:
        """Return the record or raise InvalidProjectId / RepoNotFound."""
        ...


class AuthorizationGate:
    """Ownership and capability checks over the access control table.

    Attributes:
        records: Source used to resolve repository ids
        table: Access control table holding grant rows
        admin_identity: Identity that can never be the target of a grant

    Example:
        >>> gate = AuthorizationGate(registry, table, admin_identity="system:admin")
        >>> gate.grant(1, "user:bob", 2, caller="user:alice")
        >>> gate.check_level(1, "user:bob", caller="user:carol")
        2
    """

    def __init__(
        self,
        records: RecordSource,
        table: AccessControlTable,
        admin_identity: str,
    ) -> None:
        self.records = records
        self.table = table
        self.admin_identity = admin_identity

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def effective(self, repo_id: int, user: str) -> Capabilities:
        return self.table.get_effective(repo_id, user)

    def require_valid_user(self, user: Any, caller: str) -> None:
        """Reject empty identities, the administrative identity and self-targeting.

        Raises:
            InvalidUser: If the target identity is not allowed
        """
        if not isinstance(user, str) or not user:
            raise InvalidUser(user, "identity must be a non-empty string")
        if user == self.admin_identity:
            raise InvalidUser(user, "the administrative identity cannot be targeted")
        if user == caller:
            raise InvalidUser(user, "callers cannot target themselves")

    def require_capability(
        self,
        record: RepositoryRecord,
        caller: str,
        capability: Capability,
    ) -> None:
        """Require the caller to hold a capability on the record.

        Raises:
            NotAuthorized: If the capability is missing
        """
        if not self.effective(record.id, caller).allows(capability):
            logger.debug(
                "Capability check failed",
                extra={"repo_id": record.id, "caller": caller, "required": capability.value},
            )
            raise NotAuthorized(
                f"{caller} lacks {capability.value} on repository {record.id}",
                caller=caller,
                repo_id=record.id,
                required=capability.value,
            )

    def require_read(self, record: RepositoryRecord, caller: str) -> None:
        """Require read capability.

        Raises:
            AccessDenied: If the caller cannot read the record
        """
        if not self.effective(record.id, caller).read:
            raise AccessDenied(caller, record.id)

    def require_owner_or_manage(self, record: RepositoryRecord, caller: str) -> None:
        """Require ownership or manage capability.

        Raises:
            NotAuthorized: If the caller is neither owner nor manager
        """
        if caller == record.owner:
            return
        self.require_capability(record, caller, Capability.MANAGE)

    def require_owner(self, record: RepositoryRecord, caller: str) -> None:
        """Require the caller to be the current owner.

        Raises:
            NotAuthorized: If the caller is not the owner
        """
        if caller != record.owner:
            raise NotAuthorized(
                f"{caller} is not the owner of repository {record.id}",
                caller=caller,
                repo_id=record.id,
                required="owner",
            )

    # ------------------------------------------------------------------
    # Access management
    # ------------------------------------------------------------------

    def grant(self, repo_id: Any, user: Any, level: Any, caller: str) -> AccessGrant:
        """Set the access level of ``user`` on a repository.

        Preconditions, in order: valid existing id, valid target identity,
        caller is owner or manager, level in 0..4, owner not lowered below
        level 4. Repeated grants overwrite the previous level.

        Raises:
            InvalidProjectId, RepoNotFound: If the id does not resolve
            InvalidUser: If user is the caller or the administrative identity
            NotAuthorized: If caller is neither owner nor manager
            InvalidAccessLevel: If level is out of range
            OwnerProtected: If the grant would lower the owner below level 4
        """
        record = self.records.resolve(repo_id)
        self.require_valid_user(user, caller)
        self.require_owner_or_manage(record, caller)
        checked = check_level_range(level)
        if user == record.owner and checked < AccessLevel.MANAGE:
            raise OwnerProtected(caller, record.id, record.owner)
        grant = self.table.set_level(record.id, user, checked)
        logger.info(
            "Access granted",
            extra={
                "repo_id": record.id,
                "user": user,
                "level": int(grant.level),
                "caller": caller,
            },
        )
        return grant

    def revoke(self, repo_id: Any, user: Any, caller: str) -> bool:
        """Delete the grant row of ``user``.

        Returns whether a row existed.

        Raises:
            InvalidProjectId, RepoNotFound: If the id does not resolve
            InvalidUser: If user is the caller or the administrative identity
            NotAuthorized: If caller is neither owner nor manager
            OwnerProtected: If user is the current owner
        """
        record = self.records.resolve(repo_id)
        self.require_valid_user(user, caller)
        self.require_owner_or_manage(record, caller)
        if user == record.owner:
            raise OwnerProtected(caller, record.id, record.owner)
        existed = self.table.delete(record.id, user)
        logger.info(
            "Access revoked",
            extra={"repo_id": record.id, "user": user, "caller": caller, "existed": existed},
        )
        return existed

    def check_level(self, repo_id: Any, user: Any, caller: str) -> int:
        """Stored level of ``user`` on a repository.

        Only the id and the target identity are checked; the caller does not
        need any capability on the repository.
        """
        record = self.records.resolve(repo_id)
        self.require_valid_user(user, caller)
        return self.table.get_level(record.id, user)

    def list_grants(self, repo_id: Any, caller: str) -> List[AccessGrant]:
        """All grant rows of a repository, for callers that can read it."""
        record = self.records.resolve(repo_id)
        self.require_read(record, caller)
        return self.table.grants_for(record.id)
