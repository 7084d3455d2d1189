"""Compiler backend interface.

A backend is one concrete Solidity compiler version. It is invoked with the
unit's source text, the optimizer flag and an import callback, and returns
per-contract interface/bytecode plus any diagnostics.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from solbuild_core.sources import FindImports


class CompiledContract(BaseModel):
    """Interface and bytecode for one contract.

    Attributes:
        abi: Contract interface descriptor, passed through untouched.
        bytecode: Unlinked bytecode as hex without a ``0x`` prefix.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    abi: Any = Field(..., description="Contract ABI")
    bytecode: str = Field(..., description="Unlinked bytecode (hex, no 0x prefix)")


class BackendOutput(BaseModel):
    """Result of one backend invocation.

    Attributes:
        contracts: Compiled contracts keyed ``<sourceName>:<contractName>``.
        errors: Formatted diagnostics (warnings and errors) in emission order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    contracts: dict[str, CompiledContract] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)

    def get_contract(self, source_name: str, contract_name: str) -> CompiledContract | None:
        """Look up a contract by source and contract name."""
        return self.contracts.get(f"{source_name}:{contract_name}")


class CompilerBackend(ABC):
    """Base class for compiler backends.

    Attributes:
        version: Exact Solidity version this backend compiles with.

    Example:
        >>> class MyBackend(CompilerBackend):
        ...     def compile(self, sources, *, optimizer_enabled, find_imports,
        ...                 timeout_seconds=None):
        ...         return BackendOutput()
    """

    def __init__(self, version: str) -> None:
        self.version = version

    @abstractmethod
    def compile(
        self,
        sources: Mapping[str, str],
        *,
        optimizer_enabled: bool,
        find_imports: FindImports,
        timeout_seconds: float | None = None,
    ) -> BackendOutput:
        """Compile *sources* and return contracts and diagnostics.

        Args:
            sources: Source name -> source text for the unit being compiled.
            optimizer_enabled: Run the optimizer.
            find_imports: Callback resolving import paths to source text.
            timeout_seconds: Optional deadline for the invocation.

        Returns:
            BackendOutput with compiled contracts and diagnostics.

        Raises:
            CompilationError: If the compiler could not be run at all.
            BackendTimeoutError: If *timeout_seconds* was exceeded.
        """
