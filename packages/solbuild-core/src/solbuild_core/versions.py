"""Compiler version extraction and backend selection.

This module provides:
- parse_solidity_version: Read the pinned version from ``pragma solidity``
- BackendRegistry: Exact version string -> backend factory

Selection is an exact string match. ``^0.4.11`` selects the 0.4.11 backend
and nothing else; there is no semver range resolution.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from pathlib import Path

import structlog

from solbuild_core.backends import CompilerBackend, SolcExecutableBackend
from solbuild_core.backends.solc import DEFAULT_OPTIMIZER_RUNS
from solbuild_core.errors import UnsupportedVersionError, VersionNotFoundError

logger = structlog.get_logger(__name__)

SOLIDITY_VERSION_PATTERN = re.compile(
    r"\bpragma\s+solidity\s+\^?\s*(?P<version>[0-9]{1,2}\.[0-9]{1,2}\.[0-9]{1,2})"
)

BackendFactory = Callable[[], CompilerBackend]


def parse_solidity_version(source: str, source_name: str | None = None) -> str:
    """Search Solidity source code for the compiler version.

    Args:
        source: Source code of the contract.
        source_name: Optional file name, used in the error message.

    Returns:
        Version string without the caret, e.g. ``"0.4.11"``.

    Raises:
        VersionNotFoundError: If no version declaration is present.

    Example:
        >>> parse_solidity_version("pragma solidity ^0.4.11;")
        '0.4.11'
    """
    match = SOLIDITY_VERSION_PATTERN.search(source)
    if match is None:
        raise VersionNotFoundError(source_name)
    return match.group("version")


class BackendRegistry:
    """Registry of available compiler backends keyed by exact version.

    Attributes:
        versions: Sorted list of registered version strings.

    Example:
        >>> registry = BackendRegistry.from_executables({"0.4.11": Path("bin/solc-0.4.11")})
        >>> backend = registry.select("0.4.11")
    """

    def __init__(self, factories: Mapping[str, BackendFactory] | None = None) -> None:
        self._factories: dict[str, BackendFactory] = dict(factories or {})

    @classmethod
    def from_executables(
        cls,
        executables: Mapping[str, Path],
        *,
        optimizer_runs: int = DEFAULT_OPTIMIZER_RUNS,
    ) -> BackendRegistry:
        """Build a registry of solc binaries.

        Args:
            executables: Exact version -> solc executable path.
            optimizer_runs: Optimizer runs passed to every backend.

        Returns:
            Registry with one SolcExecutableBackend factory per version.
        """
        registry = cls()
        for version, path in executables.items():
            registry.register(version, _solc_factory(version, path, optimizer_runs))
        return registry

    @property
    def versions(self) -> list[str]:
        return sorted(self._factories)

    def register(self, version: str, factory: BackendFactory) -> None:
        """Register *factory* for *version*, replacing any previous entry."""
        if version in self._factories:
            logger.debug("backend_replaced", version=version)
        self._factories[version] = factory

    def __contains__(self, version: object) -> bool:
        return version in self._factories

    def select(self, version: str) -> CompilerBackend:
        """Return a backend for exactly *version*.

        Raises:
            UnsupportedVersionError: If no backend is registered for *version*.
        """
        factory = self._factories.get(version)
        if factory is None:
            raise UnsupportedVersionError(version, self.versions)
        return factory()


def _solc_factory(version: str, path: Path, optimizer_runs: int) -> BackendFactory:
    def factory() -> CompilerBackend:
        return SolcExecutableBackend(version, path, optimizer_runs=optimizer_runs)

    return factory
