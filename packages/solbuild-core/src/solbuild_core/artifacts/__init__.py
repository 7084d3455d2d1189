"""Artifact records and their persistence.

- ContractArtifact / ContractNetworkData: Persisted record models
- ArtifactStore: Load, merge and persist records
- needs_compilation: Staleness decision for one unit and network
"""

from __future__ import annotations

from solbuild_core.artifacts.models import ContractArtifact, ContractNetworkData
from solbuild_core.artifacts.store import ArtifactStore, needs_compilation

__all__ = [
    "ArtifactStore",
    "ContractArtifact",
    "ContractNetworkData",
    "needs_compilation",
]
