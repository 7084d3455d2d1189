"""solbuild-core: Incremental Solidity build engine.

Discovers Solidity sources, decides per contract whether recompilation is
needed for a network, drives a version-pinned solc backend and merges the
result into a per-contract, multi-network JSON artifact.
"""

from __future__ import annotations

from solbuild_core.artifacts import (
    ArtifactStore,
    ContractArtifact,
    ContractNetworkData,
    needs_compilation,
)
from solbuild_core.backends import (
    BackendOutput,
    CompiledContract,
    CompilerBackend,
    SolcExecutableBackend,
)
from solbuild_core.compiler import BuildResult, Compiler, UnitResult, UnitStatus
from solbuild_core.config import BuildConfig, load_config
from solbuild_core.diagnostics import ErrorDeduplicator, normalize_error_message
from solbuild_core.errors import (
    ArtifactWriteError,
    BackendTimeoutError,
    CompilationError,
    ConfigurationError,
    NoPathInMessageError,
    SolbuildError,
    SourceDirectoryNotFoundError,
    UnsupportedVersionError,
    VersionNotFoundError,
)
from solbuild_core.hashing import keccak256_hex
from solbuild_core.sources import ImportContents, create_find_imports, discover_contract_sources
from solbuild_core.versions import BackendRegistry, parse_solidity_version

__version__ = "0.1.0"

__all__ = [
    "ArtifactStore",
    "ArtifactWriteError",
    "BackendOutput",
    "BackendRegistry",
    "BackendTimeoutError",
    "BuildConfig",
    "BuildResult",
    "CompilationError",
    "CompiledContract",
    "Compiler",
    "CompilerBackend",
    "ConfigurationError",
    "ContractArtifact",
    "ContractNetworkData",
    "ErrorDeduplicator",
    "ImportContents",
    "NoPathInMessageError",
    "SolbuildError",
    "SolcExecutableBackend",
    "SourceDirectoryNotFoundError",
    "UnitResult",
    "UnitStatus",
    "UnsupportedVersionError",
    "VersionNotFoundError",
    "__version__",
    "create_find_imports",
    "discover_contract_sources",
    "keccak256_hex",
    "load_config",
    "needs_compilation",
    "normalize_error_message",
    "parse_solidity_version",
]
