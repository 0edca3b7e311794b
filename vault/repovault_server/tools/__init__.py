"""
CLI tools for RepoVault.

This module provides command-line tools for:
- replay: Run scripted operations against a fresh registry

Invariants:
    - Tools work offline against an in-memory registry
"""

from .replay import ReplayTool

__all__ = ["ReplayTool"]
