"""Artifact record models.

One ContractArtifact is persisted per source unit, holding a
ContractNetworkData entry for every network the unit has been built for.

File layout (``<artifacts_dir>/<ContractName>.json``, 4-space indent)::

    {
        "contract_name": "Token",
        "networks": {
            "50": {
                "solc_version": "0.4.11",
                "keccak256": "0x...",
                "optimizer_enabled": false,
                "abi": [...],
                "unlinked_binary": "0x...",
                "updated_at": 1500000000000
            }
        }
    }

Network entries are held as the raw JSON objects they were read as and are
only parsed into ContractNetworkData on access. Rewriting a record for one
network therefore leaves every other network's entry exactly as it was,
including key order, unknown keys and legacy ``0``/``1`` optimizer flags.
Unknown top-level keys are kept (``extra="allow"``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ContractNetworkData(BaseModel):
    """Result of one successful compilation of a unit for one network.

    Attributes:
        solc_version: Compiler version used.
        keccak256: ``0x``-prefixed keccak-256 of the exact source text.
        optimizer_enabled: Optimizer setting used.
        abi: Contract interface descriptor.
        unlinked_binary: ``0x``-prefixed unlinked bytecode.
        updated_at: Build time in epoch milliseconds.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    solc_version: str = Field(..., min_length=1, description="Compiler version used")
    keccak256: str = Field(..., min_length=1, description="Source digest")
    optimizer_enabled: bool = Field(..., description="Optimizer setting used")
    abi: Any = Field(..., description="Contract ABI")
    unlinked_binary: str = Field(..., description="Unlinked bytecode")
    updated_at: int = Field(..., ge=0, description="Build time (epoch millis)")

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ContractArtifact(BaseModel):
    """Persisted artifact record for one contract across all networks.

    Attributes:
        contract_name: Contract name (source base name without ``.sol``).
        networks: Network id -> raw JSON entry for that network.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    contract_name: str = Field(..., min_length=1, description="Contract name")
    networks: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Compiled results keyed by network id",
    )

    def get_network(self, network_id: str) -> ContractNetworkData | None:
        """Parse the entry for *network_id*.

        Returns:
            The entry, or None if there is none or it is malformed.
        """
        raw = self.networks.get(network_id)
        if raw is None:
            return None
        try:
            return ContractNetworkData.model_validate(raw)
        except ValidationError:
            return None

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
