"""Shared test fixtures for solbuild-cli tests.

Provides CliRunner fixtures, the fake solc executable shared with the
solbuild-core tests, and a helper for laying out a project in the runner's
isolated filesystem.
"""

from __future__ import annotations

import stat
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from solbuild_core.config import CONFIG_ENV_VAR
from solbuild_core.observability import configure_logging

# File name constants
SOLBUILD_YAML_FILENAME = "solbuild.yaml"

TOKEN_SOURCE = "pragma solidity ^0.4.11;\n\ncontract Token {}\n"

# The fake solc script is shared with the solbuild-core tests
FAKE_SOLC_SCRIPT = (
    Path(__file__).resolve().parents[2] / "solbuild-core" / "tests" / "fixtures" / "fake_solc.py"
)


@pytest.fixture(autouse=True)
def clear_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make sure a developer's SOLBUILD_CONFIG never leaks into tests."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture(autouse=True)
def quiet_logging() -> None:
    """Configure logging the way the group does when commands run standalone."""
    configure_logging(log_level="WARNING", add_timestamp=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    This fixture creates a temporary directory and changes to it
    for the duration of the test.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def fake_solc(tmp_path: Path) -> Path:
    """Install the fake solc script as an executable in tmp_path."""
    script = FAKE_SOLC_SCRIPT.read_text()
    path = tmp_path / "bin" / "solc-fake"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!{sys.executable}\n{script}")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def make_project(fake_solc: Path) -> Callable[..., Path]:
    """Return a helper that lays out a project in the current directory.

    The helper writes the given contracts under ``contracts/`` and a
    solbuild.yaml registering the fake solc for 0.4.11.

    Usage:
        make_project({"Token.sol": TOKEN_SOURCE}, network_id="42")
    """

    def _make(contracts: dict[str, str] | None = None, **settings: object) -> Path:
        root = Path.cwd()
        contracts_dir = root / "contracts"
        contracts_dir.mkdir(exist_ok=True)
        for relative_path, source in (contracts or {"Token.sol": TOKEN_SOURCE}).items():
            path = contracts_dir / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source)

        config: dict[str, object] = {
            "contracts_dir": "contracts",
            "artifacts_dir": "build/contracts",
            "compilers": {"0.4.11": str(fake_solc)},
        }
        config.update(settings)
        config_path = root / SOLBUILD_YAML_FILENAME
        config_path.write_text(yaml.safe_dump(config))
        return config_path

    return _make
