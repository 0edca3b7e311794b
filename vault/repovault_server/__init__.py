"""
RepoVault Server - permissioned registry of repository metadata.

This package implements a registry whose every mutation is gated by a
per-repository access-control engine:
- Access levels 0..4 with derived read/write/delete/manage capabilities
- A sparse (repository, identity) -> level grant table
- Authorization checks guarding create, modify, remove, grant and revoke
- A host service that serializes calls and returns tagged results

Architecture:
    ┌─────────────┐     ┌────────────────┐     ┌────────────────────┐
    │   Caller    │────▶│ RegistryService│────▶│ RepositoryRegistry │
    │ (identity)  │     │ (lock, clock)  │     │ (records, counter) │
    └─────────────┘     └────────────────┘     └─────────┬──────────┘
                                                         │
                                   ┌─────────────────────┼──────────────┐
                                   ▼                     ▼              ▼
                             ┌───────────┐      ┌──────────────┐  ┌──────────┐
                             │ Validator │      │ Authorization│  │  Access  │
                             │ (fields)  │      │     Gate     │─▶│  Table   │
                             └───────────┘      └──────────────┘  └──────────┘

Invariants:
    - Repository ids are immutable and never reused
    - Capabilities are always derived from the stored level
    - A failed operation leaves no partial state behind
    - The owner's grant cannot be revoked while they remain owner

How to change safely:
    - Keep precondition order stable in every operation
    - Add new error kinds as RepoVaultError subclasses with a stable code
"""

from ._version import __version__

__all__ = ["__version__"]
