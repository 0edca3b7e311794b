"""
Host-facing operation surface for RepoVault.

The RegistryService stands in for the execution environment around the
registry core. It:
- binds an already-authenticated caller identity to each call
- supplies the logical clock value used as ``created_at``
- runs each operation under a lock so calls never interleave
- converts typed errors into tagged OperationResult values

Invariants:
    - One operation runs at a time per service
    - A failed operation returns exactly one error code and mutates nothing
    - Unexpected (non-RepoVault) exceptions propagate unchanged

Example:
    >>> service = RegistryService(RepositoryRegistry())
    >>> alice = service.session("user:alice")
    >>> result = alice.create_repository("api", 1024, "API service", ["user:alice"])
    >>> result.ok, result.value
    (True, 1)
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from .errors import RepoVaultError
from .registry.store import RepositoryRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LogicalClock:
    """Monotonic logical clock starting at 1."""

    def __init__(self, start: int = 1) -> None:
        self._ticks = itertools.count(start)

    def __call__(self) -> int:
        return next(self._ticks)


@dataclass
class OperationResult(Generic[T]):
    """Tagged result of one operation.

    Attributes:
        ok: Whether the operation succeeded
        value: Operation return value on success
        error_code: Error code on failure
        error: Error message on failure
    """

    ok: bool
    value: Optional[T] = None
    error_code: Optional[str] = None
    error: Optional[str] = None
    exception: Optional[RepoVaultError] = field(default=None, repr=False, compare=False)

    @classmethod
    def success(cls, value: T) -> OperationResult[T]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, exc: RepoVaultError) -> OperationResult[T]:
        return cls(ok=False, error_code=exc.code, error=exc.message, exception=exc)

    def unwrap(self) -> T:
        """Return the value, or re-raise the typed error."""
        if self.exception is not None:
            raise self.exception
        return self.value  # type: ignore[return-value]

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            value = self.value
            if hasattr(value, "to_dict"):
                value = value.to_dict()
            elif isinstance(value, list):
                value = [v.to_dict() if hasattr(v, "to_dict") else v for v in value]
            return {"success": True, "value": value}
        return {"success": False, "error": self.error, "error_code": self.error_code}


class RegistryService:
    """Serializing host around a RepositoryRegistry.

    Attributes:
        registry: The registry context all operations act on
        clock: Callable returning the next logical timestamp
    """

    def __init__(
        self,
        registry: RepositoryRegistry,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.registry = registry
        self.clock = clock or LogicalClock()
        self._lock = threading.RLock()

    def session(self, caller: str) -> Session:
        """Bind an authenticated caller identity."""
        return Session(self, caller)

    def execute(self, op: str, caller: str, fn: Callable[[], T]) -> OperationResult[T]:
        """Run one operation atomically and tag its outcome."""
        with self._lock:
            try:
                value = fn()
            except RepoVaultError as e:
                logger.debug(
                    f"{op} rejected: {e.message}",
                    extra={"op": op, "caller": caller, "error_code": e.code},
                )
                return OperationResult.failure(e)
        return OperationResult.success(value)


class Session:
    """Operations on behalf of a single caller."""

    def __init__(self, service: RegistryService, caller: str) -> None:
        self.service = service
        self.caller = caller

    @property
    def _registry(self) -> RepositoryRegistry:
        return self.service.registry

    def _run(self, op: str, fn: Callable[[], T]) -> OperationResult[T]:
        return self.service.execute(op, self.caller, fn)

    def create_repository(
        self,
        name: str,
        size: int,
        description: str,
        contributors: Sequence[str],
    ) -> OperationResult[int]:
        # The clock is read inside the lock so timestamps follow id order
        return self._run(
            "create_repository",
            lambda: self._registry.create(
                name,
                size,
                description,
                contributors,
                creator=self.caller,
                created_at=self.service.clock(),
            ),
        )

    def modify_repository(
        self,
        repo_id: int,
        name: str,
        size: int,
        description: str,
        contributors: Sequence[str],
    ) -> OperationResult[None]:
        def op() -> None:
            self._registry.modify(repo_id, name, size, description, contributors, caller=self.caller)

        return self._run("modify_repository", op)

    def remove_repository(self, repo_id: int) -> OperationResult[None]:
        return self._run(
            "remove_repository",
            lambda: self._registry.remove(repo_id, caller=self.caller),
        )

    def get_repository(self, repo_id: int) -> OperationResult:
        return self._run(
            "get_repository",
            lambda: self._registry.get(repo_id, caller=self.caller),
        )

    def grant_access(self, repo_id: int, user: str, level: int) -> OperationResult[None]:
        def op() -> None:
            self._registry.grant(repo_id, user, level, caller=self.caller)

        return self._run("grant_access", op)

    def revoke_access(self, repo_id: int, user: str) -> OperationResult[None]:
        def op() -> None:
            self._registry.revoke(repo_id, user, caller=self.caller)

        return self._run("revoke_access", op)

    def check_access_level(self, repo_id: int, user: str) -> OperationResult[int]:
        return self._run(
            "check_access_level",
            lambda: self._registry.check_level(repo_id, user, caller=self.caller),
        )

    def list_repositories(self) -> OperationResult:
        return self._run(
            "list_repositories",
            lambda: self._registry.list_repositories(caller=self.caller),
        )

    def list_grants(self, repo_id: int) -> OperationResult:
        return self._run(
            "list_grants",
            lambda: self._registry.list_grants(repo_id, caller=self.caller),
        )

    def transfer_ownership(self, repo_id: int, new_owner: str) -> OperationResult:
        return self._run(
            "transfer_ownership",
            lambda: self._registry.transfer_ownership(repo_id, new_owner, caller=self.caller),
        )
