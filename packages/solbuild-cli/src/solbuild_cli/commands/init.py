"""solbuild init command - Scaffold solbuild.yaml and a contracts directory."""

from __future__ import annotations

from pathlib import Path

import click

from solbuild_cli.errors import EXIT_SYSTEM_ERROR, CLIError
from solbuild_cli.output import success, warning

CONFIG_TEMPLATE = """\
# solbuild configuration
#
# Contracts are recompiled for a network only when their source or the
# optimizer setting changed since the last build for that network.

contracts_dir: {{ contracts_dir }}
artifacts_dir: {{ artifacts_dir }}
network_id: "{{ network_id }}"
optimizer_enabled: false

# Worker threads used to run compilers concurrently
max_workers: 4

# Exact Solidity version -> solc executable.
# A contract's `pragma solidity ^X.Y.Z;` selects the X.Y.Z entry.
compilers: {}
#  "0.4.11": /opt/solc/solc-v0.4.11
"""


@click.command()
@click.option(
    "--contracts-dir",
    default="contracts",
    show_default=True,
    help="Solidity source root to create",
)
@click.option(
    "--artifacts-dir",
    default="artifacts",
    show_default=True,
    help="Artifact output directory",
)
@click.option(
    "-n",
    "--network-id",
    default="50",
    show_default=True,
    help="Default network id",
)
@click.option(
    "--force",
    is_flag=True,
    default=False,
    help="Overwrite existing solbuild.yaml",
)
def init(contracts_dir: str, artifacts_dir: str, network_id: str, force: bool) -> None:
    """Scaffold a new solbuild project.

    Creates solbuild.yaml and an empty contracts directory.

    Examples:

        solbuild init

        solbuild init --network-id 42

        solbuild init --force
    """
    from jinja2.sandbox import SandboxedEnvironment

    from solbuild_core.config import CONFIG_FILE_NAME

    config_path = Path(CONFIG_FILE_NAME)
    existed = config_path.exists()
    if existed and not force:
        raise CLIError(f"{CONFIG_FILE_NAME} already exists.\nUse --force to overwrite.")

    env = SandboxedEnvironment(trim_blocks=True, lstrip_blocks=True)
    content = env.from_string(CONFIG_TEMPLATE).render(
        contracts_dir=contracts_dir,
        artifacts_dir=artifacts_dir,
        network_id=network_id,
    )

    try:
        config_path.write_text(content)
        Path(contracts_dir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CLIError(
            f"Cannot write {e.filename}: {e.strerror}", exit_code=EXIT_SYSTEM_ERROR
        ) from None

    if existed:
        warning(f"Overwrote existing {CONFIG_FILE_NAME}")

    success(f"Created {CONFIG_FILE_NAME}")
