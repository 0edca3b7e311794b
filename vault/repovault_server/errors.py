"""
Error types for RepoVault.

Every precondition failure in the registry or the access-control engine
is raised as one of these types. The host layer converts them into tagged
results; the core never catches them.

- RepoVaultError: Base exception
- FieldValidationError: Base for record field failures
- NotAuthorized / AccessDenied: Authorization failures
- InvalidProjectId / RepoNotFound: Id resolution failures

Invariants:
    - All errors inherit from RepoVaultError
    - Each error kind has a stable code for programmatic handling
    - Raising an error implies no state was mutated
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RepoVaultError(Exception):
    """Base exception for all RepoVault errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    code = "REPOVAULT_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RepoNotFound(RepoVaultError):
    """Repository id was issued but the record no longer exists."""

    code = "REPO_NOT_FOUND"

    def __init__(self, repo_id: int) -> None:
        super().__init__(
            f"Repository {repo_id} not found",
            details={"repo_id": repo_id},
        )
        self.repo_id = repo_id


class RepoAlreadyExists(RepoVaultError):
    """Reserved. No current operation can produce a duplicate id."""

    code = "REPO_ALREADY_EXISTS"


class InvalidProjectId(RepoVaultError):
    """Repository id is not a positive integer within the issued range."""

    code = "INVALID_PROJECT_ID"

    def __init__(self, repo_id: Any, last_id: int) -> None:
        super().__init__(
            f"Invalid repository id {repo_id!r} (last issued id is {last_id})",
            details={"repo_id": repo_id, "last_id": last_id},
        )
        self.repo_id = repo_id


class FieldValidationError(RepoVaultError):
    """A record field failed its constraint.

    Attributes:
        field_name: The offending field
    """

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field_name: str) -> None:
        super().__init__(message, details={"field": field_name})
        self.field_name = field_name


class InvalidName(FieldValidationError):
    code = "INVALID_NAME"


class InvalidSize(FieldValidationError):
    code = "INVALID_SIZE"


class InvalidDescription(FieldValidationError):
    code = "INVALID_DESCRIPTION"


class InvalidContributors(FieldValidationError):
    code = "INVALID_CONTRIBUTORS"


class NotAuthorized(RepoVaultError):
    """Caller lacks the ownership or capability a mutation requires.

    Raised when:
    - modify without write
    - remove without delete
    - grant/revoke without ownership or manage
    - transfer by anyone but the owner
    """

    code = "NOT_AUTHORIZED"

    def __init__(
        self,
        message: str,
        caller: str,
        repo_id: int,
        required: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            details={"caller": caller, "repo_id": repo_id, "required": required},
        )
        self.caller = caller
        self.repo_id = repo_id
        self.required = required


class OwnerProtected(NotAuthorized):
    """The current owner's grant cannot be revoked or lowered."""

    def __init__(self, caller: str, repo_id: int, owner: str) -> None:
        super().__init__(
            f"Cannot reduce access of {owner}: current owner of repository {repo_id}",
            caller=caller,
            repo_id=repo_id,
        )
        self.owner = owner


class AccessDenied(RepoVaultError):
    """Caller lacks read capability on a repository."""

    code = "ACCESS_DENIED"

    def __init__(self, caller: str, repo_id: int) -> None:
        super().__init__(
            f"Access denied: {caller} cannot read repository {repo_id}",
            details={"caller": caller, "repo_id": repo_id},
        )
        self.caller = caller
        self.repo_id = repo_id


class InvalidUser(RepoVaultError):
    """Target identity is the caller itself or the administrative identity."""

    code = "INVALID_USER"

    def __init__(self, user: Any, reason: str) -> None:
        super().__init__(f"Invalid user {user!r}: {reason}", details={"user": user})
        self.user = user


class InvalidRecipient(RepoVaultError):
    """Ownership transfer target is not allowed."""

    code = "INVALID_RECIPIENT"

    def __init__(self, recipient: Any, reason: str) -> None:
        super().__init__(
            f"Invalid recipient {recipient!r}: {reason}",
            details={"recipient": recipient},
        )
        self.recipient = recipient


class InvalidAccessLevel(RepoVaultError):
    """Access level outside 0..4."""

    code = "INVALID_ACCESS_LEVEL"

    def __init__(self, level: Any) -> None:
        super().__init__(
            f"Invalid access level {level!r}, must be an integer in 0..4",
            details={"level": level},
        )
        self.level = level
