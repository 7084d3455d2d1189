"""Build configuration for solbuild.

This module handles loading and resolving solbuild.yaml configuration:
- BuildConfig: Validated, immutable build settings
- load_config: Explicit path, SOLBUILD_CONFIG, or ./solbuild.yaml discovery
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from solbuild_core.errors import ConfigurationError

logger = structlog.get_logger(__name__)

# Environment variable pointing at an explicit solbuild.yaml
CONFIG_ENV_VAR = "SOLBUILD_CONFIG"

# Standard configuration file name
CONFIG_FILE_NAME = "solbuild.yaml"

DEFAULT_NETWORK_ID = "50"


class BuildConfig(BaseModel):
    """Settings for one incremental build run.

    Attributes:
        contracts_dir: Root of the Solidity source tree.
        artifacts_dir: Output directory for per-contract JSON artifacts.
        network_id: Deployment target used as the artifact merge key.
        optimizer_enabled: Whether solc runs with the optimizer.
        optimizer_runs: Optimizer runs setting passed to solc.
        max_workers: Maximum number of concurrent compiler invocations.
        backend_timeout_seconds: Optional deadline for one compiler invocation.
        compilers: Exact Solidity version -> solc executable path.

    Example:
        >>> config = BuildConfig(network_id=42, optimizer_enabled=True)
        >>> config.network_id
        '42'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    contracts_dir: Path = Field(
        default=Path("contracts"),
        description="Root of the Solidity source tree",
    )
    artifacts_dir: Path = Field(
        default=Path("artifacts"),
        description="Output directory for contract artifacts",
    )
    network_id: str = Field(
        default=DEFAULT_NETWORK_ID,
        min_length=1,
        description="Deployment target identifier (artifact merge key)",
    )
    optimizer_enabled: bool = Field(
        default=False,
        description="Compile with the solc optimizer enabled",
    )
    optimizer_runs: int = Field(
        default=200,
        ge=1,
        description="Optimizer runs setting",
    )
    max_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Maximum concurrent compiler invocations",
    )
    backend_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Deadline for a single compiler invocation",
    )
    compilers: dict[str, Path] = Field(
        default_factory=dict,
        description="Exact Solidity version -> solc executable",
    )

    @field_validator("network_id", mode="before")
    @classmethod
    def coerce_network_id(cls, v: Any) -> Any:
        """Accept integer network ids (common in YAML) and store them as strings."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    def resolve_paths(self, base_dir: Path) -> BuildConfig:
        """Return a copy with relative paths resolved against *base_dir*.

        Args:
            base_dir: Directory relative paths are interpreted from.

        Returns:
            New BuildConfig with absolute paths.
        """

        def _resolve(path: Path) -> Path:
            return path if path.is_absolute() else base_dir / path

        return self.model_copy(
            update={
                "contracts_dir": _resolve(self.contracts_dir),
                "artifacts_dir": _resolve(self.artifacts_dir),
                "compilers": {v: _resolve(p) for v, p in self.compilers.items()},
            }
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> BuildConfig:
        """Load and validate BuildConfig from a YAML file.

        Relative paths in the file are resolved against the file's directory.

        Args:
            path: Path to solbuild.yaml.

        Returns:
            Validated BuildConfig instance.

        Raises:
            FileNotFoundError: If file doesn't exist.
            yaml.YAMLError: If YAML syntax is invalid.
            pydantic.ValidationError: If schema validation fails.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with path.open("r") as f:
            data: dict[str, Any] | None = yaml.safe_load(f)

        config = cls.model_validate(data or {})
        return config.resolve_paths(path.parent)


def find_config_file(path: Path | None = None) -> Path | None:
    """Locate the configuration file to use.

    Searches in the following order:
    1. Explicit *path* argument
    2. SOLBUILD_CONFIG environment variable
    3. ./solbuild.yaml

    Args:
        path: Explicit configuration path.

    Returns:
        Path to the configuration file, or None when nothing was found and
        no explicit path was requested.

    Raises:
        ConfigurationError: If an explicitly requested file does not exist.
    """
    if path is not None:
        if not path.exists():
            raise ConfigurationError("Configuration file not found", file_path=str(path))
        return path

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        candidate = Path(env_path)
        if not candidate.exists():
            raise ConfigurationError(
                f"Configuration file from {CONFIG_ENV_VAR} not found",
                file_path=env_path,
            )
        return candidate

    default = Path(CONFIG_FILE_NAME)
    if default.exists():
        return default

    return None


def load_config(path: Path | None = None, **overrides: Any) -> BuildConfig:
    """Load configuration and apply overrides.

    Overrides whose value is None are ignored so CLI options that were not
    given fall through to the file (or default) value.

    Args:
        path: Explicit configuration path.
        **overrides: Field values that take precedence over the file.

    Returns:
        Validated BuildConfig.

    Raises:
        ConfigurationError: If a requested configuration file is missing.
        yaml.YAMLError: If the file is not valid YAML.
        pydantic.ValidationError: If the file or an override fails validation.

    Example:
        >>> config = load_config(network_id="42", optimizer_enabled=True)
    """
    config_path = find_config_file(path)

    if config_path is None:
        logger.debug("config_defaults_used", searched=CONFIG_FILE_NAME)
        base = BuildConfig()
    else:
        logger.debug("config_loading", path=str(config_path))
        base = BuildConfig.from_yaml(config_path)

    updates = {k: v for k, v in overrides.items() if v is not None}
    if not updates:
        return base

    # Re-validate so overrides get the same coercion and bounds as the file
    return BuildConfig.model_validate({**base.model_dump(), **updates})
