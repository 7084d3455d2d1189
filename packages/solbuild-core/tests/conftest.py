"""Shared pytest fixtures for solbuild-core tests.

This module provides common fixtures used across unit and integration
tests: a recording in-process backend, a fake solc executable and
helpers for building contract trees.
"""

from __future__ import annotations

import stat
import sys
import threading
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import pytest
import structlog

from solbuild_core.backends import BackendOutput, CompiledContract, CompilerBackend
from solbuild_core.config import BuildConfig
from solbuild_core.versions import BackendRegistry

SUPPORTED_VERSION = "0.4.11"

OWNER_ABI = [{"type": "function", "name": "owner", "inputs": [], "outputs": []}]


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    This fixture ensures structlog outputs to stdout so that capsys
    can capture the output in tests. Without this, structlog may use
    different processors depending on test execution order.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


class FakeBackend(CompilerBackend):
    """In-process backend that records every call.

    Emits one contract per source, named after the file. Sources listed in
    *fail_sources* produce no contract. *errors* are returned as diagnostics
    on every call. If *raise_error* is set it is raised instead.
    """

    def __init__(
        self,
        version: str = SUPPORTED_VERSION,
        *,
        errors: list[str] | None = None,
        fail_sources: set[str] | None = None,
        raise_error: Exception | None = None,
    ) -> None:
        super().__init__(version)
        self.errors = list(errors or [])
        self.fail_sources = set(fail_sources or ())
        self.raise_error = raise_error
        self.calls: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def compile(
        self,
        sources: Mapping[str, str],
        *,
        optimizer_enabled: bool,
        find_imports: Any,
        timeout_seconds: float | None = None,
    ) -> BackendOutput:
        with self._lock:
            self.calls.append(
                {
                    "sources": dict(sources),
                    "optimizer_enabled": optimizer_enabled,
                    "find_imports": find_imports,
                    "timeout_seconds": timeout_seconds,
                }
            )
        if self.raise_error is not None:
            raise self.raise_error

        contracts: dict[str, CompiledContract] = {}
        for source_name in sources:
            if source_name in self.fail_sources:
                continue
            contract_name = source_name.removesuffix(".sol")
            contracts[f"{source_name}:{contract_name}"] = CompiledContract(
                abi=OWNER_ABI,
                bytecode="6060604052" + ("01" if optimizer_enabled else "00"),
            )
        return BackendOutput(contracts=contracts, errors=list(self.errors))

    @property
    def compiled_sources(self) -> list[str]:
        with self._lock:
            return sorted(name for call in self.calls for name in call["sources"])


@pytest.fixture
def fake_backend_cls() -> type[FakeBackend]:
    """Return the FakeBackend class for tests that need custom behaviour."""
    return FakeBackend


@pytest.fixture
def fake_backend() -> FakeBackend:
    """Return a FakeBackend for the supported version."""
    return FakeBackend()


@pytest.fixture
def registry(fake_backend: FakeBackend) -> BackendRegistry:
    """Return a registry whose only version is served by fake_backend."""
    return BackendRegistry({SUPPORTED_VERSION: lambda: fake_backend})


@pytest.fixture
def contracts_dir(tmp_path: Path) -> Path:
    """Return an empty contracts directory."""
    path = tmp_path / "contracts"
    path.mkdir()
    return path


@pytest.fixture
def artifacts_dir(tmp_path: Path) -> Path:
    """Return the (not yet created) artifacts directory path."""
    return tmp_path / "build" / "contracts"


@pytest.fixture
def write_contract(contracts_dir: Path) -> Callable[..., Path]:
    """Return a helper writing a contract source under contracts_dir.

    Usage:
        write_contract("Token.sol")
        write_contract("lib/SafeMath.sol", "pragma solidity ^0.4.11; ...")
    """

    def _write(relative_path: str, source: str | None = None) -> Path:
        path = contracts_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if source is None:
            name = Path(relative_path).stem
            source = f"pragma solidity ^{SUPPORTED_VERSION};\n\ncontract {name} {{}}\n"
        path.write_bytes(source.encode("utf-8"))
        return path

    return _write


@pytest.fixture
def make_config(contracts_dir: Path, artifacts_dir: Path) -> Callable[..., BuildConfig]:
    """Return a factory for BuildConfig pointing at the test directories."""

    def _make(**overrides: Any) -> BuildConfig:
        values: dict[str, Any] = {
            "contracts_dir": contracts_dir,
            "artifacts_dir": artifacts_dir,
            "network_id": "50",
        }
        values.update(overrides)
        return BuildConfig(**values)

    return _make


@pytest.fixture
def fake_solc(tmp_path: Path) -> Path:
    """Install the fake solc script as an executable in tmp_path.

    Returns:
        Path to an executable that speaks ``--standard-json``.
    """
    script = (Path(__file__).parent / "fixtures" / "fake_solc.py").read_text()
    path = tmp_path / "bin" / "solc-fake"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!{sys.executable}\n{script}")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path
