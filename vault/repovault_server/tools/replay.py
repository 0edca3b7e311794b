"""
Replay tool for RepoVault.

Runs a scripted sequence of operations against a fresh in-memory registry
and reports the result of each step. Useful for reproducing authorization
scenarios without writing code.

Script format (JSON list):
    [
      {"caller": "user:alice", "op": "create_repository",
       "args": {"name": "api", "size": 1024, "description": "API",
                "contributors": ["user:alice"]}},
      {"caller": "user:alice", "op": "grant_access",
       "args": {"repo_id": 1, "user": "user:bob", "level": 2}}
    ]

Usage:
    repovault-replay script.json
    repovault-replay script.json --admin-identity system:root --strict

Invariants:
    - Each run starts from an empty registry
    - Output is one JSON object per line, in step order
    - With --strict, any failed step yields exit code 1
"""

from __future__ import annotations

import argparse
import inspect
import json
import logging
import sys
from typing import Any

from ..registry.store import DEFAULT_ADMIN_IDENTITY, RepositoryRegistry
from ..service import OperationResult, RegistryService, Session

logger = logging.getLogger(__name__)

OPERATIONS = frozenset(
    {
        "create_repository",
        "modify_repository",
        "remove_repository",
        "get_repository",
        "grant_access",
        "revoke_access",
        "check_access_level",
        "list_repositories",
        "list_grants",
        "transfer_ownership",
    }
)


class ReplayTool:
    """Replays operation scripts against a fresh registry.

    Example:
        >>> tool = ReplayTool()
        >>> results = tool.run([{"caller": "user:a", "op": "list_repositories"}])
        >>> results[0].ok
        True
    """

    def __init__(self, admin_identity: str = DEFAULT_ADMIN_IDENTITY) -> None:
        self.service = RegistryService(RepositoryRegistry(admin_identity=admin_identity))

    def run(self, steps: list[dict[str, Any]]) -> list[OperationResult]:
        """Execute every step in order.

        Raises:
            ValueError: If a step is malformed or names an unknown operation
        """
        return [self.run_step(i, step) for i, step in enumerate(steps)]

    def run_step(self, index: int, step: dict[str, Any]) -> OperationResult:
        if not isinstance(step, dict):
            raise ValueError(f"Step {index}: must be an object")
        caller = step.get("caller")
        if not isinstance(caller, str) or not caller:
            raise ValueError(f"Step {index}: missing 'caller'")
        op = step.get("op")
        if op not in OPERATIONS:
            raise ValueError(f"Step {index}: unknown operation {op!r}")
        args = step.get("args", {})
        if not isinstance(args, dict):
            raise ValueError(f"Step {index}: 'args' must be an object")

        session: Session = self.service.session(caller)
        method = getattr(session, op)
        try:
            inspect.signature(method).bind(**args)
        except TypeError as e:
            raise ValueError(f"Step {index}: bad arguments for {op}: {e}") from e
        return method(**args)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the replay tool."""
    parser = argparse.ArgumentParser(description="Replay RepoVault operation scripts")
    parser.add_argument("script", help="Path to JSON script")
    parser.add_argument(
        "--admin-identity",
        default=DEFAULT_ADMIN_IDENTITY,
        help="Administrative identity for the fresh registry",
    )
    parser.add_argument("--strict", action="store_true", help="Exit 1 if any step fails")
    args = parser.parse_args(argv)

    try:
        with open(args.script) as f:
            steps = json.load(f)
        if not isinstance(steps, list):
            raise ValueError("Script must be a JSON list of steps")
        results = ReplayTool(admin_identity=args.admin_identity).run(steps)
    except (OSError, ValueError) as e:
        print(f"Replay failed: {e}", file=sys.stderr)
        sys.exit(2)

    for i, result in enumerate(results):
        print(json.dumps({"step": i, **result.to_dict()}, sort_keys=True))

    failed = [r for r in results if not r.ok]
    if failed:
        logger.info(f"{len(failed)} of {len(results)} step(s) failed")
    sys.exit(1 if failed and args.strict else 0)


if __name__ == "__main__":
    main()
