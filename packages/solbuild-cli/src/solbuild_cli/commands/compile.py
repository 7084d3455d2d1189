"""solbuild compile command - Compile stale contracts."""

from __future__ import annotations

from pathlib import Path

import click

from solbuild_cli.errors import EXIT_USER_ERROR, handle_solbuild_error, load_build_config
from solbuild_cli.output import build_summary, diagnostic, unit_outcome


def _parse_compilers(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> dict[str, Path]:
    """Parse repeated ``--solc VERSION=PATH`` options."""
    compilers: dict[str, Path] = {}
    for value in values:
        version, sep, path = value.partition("=")
        if not sep or not version.strip() or not path.strip():
            raise click.BadParameter(f"expected VERSION=PATH, got '{value}'")
        compilers[version.strip()] = Path(path.strip())
    return compilers


@click.command("compile")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to solbuild.yaml [default: $SOLBUILD_CONFIG or ./solbuild.yaml]",
)
@click.option(
    "--contracts-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Solidity source root [default: contracts]",
)
@click.option(
    "-o",
    "--artifacts-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Artifact output directory [default: artifacts]",
)
@click.option(
    "-n",
    "--network-id",
    type=str,
    default=None,
    help="Network id used as the artifact key [default: 50]",
)
@click.option(
    "--optimize/--no-optimize",
    "optimizer_enabled",
    default=None,
    help="Enable the solc optimizer [default: off]",
)
@click.option(
    "--solc",
    "compilers",
    multiple=True,
    callback=_parse_compilers,
    metavar="VERSION=PATH",
    help="Register a solc executable for an exact version (repeatable)",
)
@click.option(
    "-j",
    "--jobs",
    type=click.IntRange(min=1, max=64),
    default=None,
    help="Maximum concurrent compiler invocations [default: 4]",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Per-contract compiler timeout in seconds",
)
def compile_cmd(
    config_path: str | None,
    contracts_dir: str | None,
    artifacts_dir: str | None,
    network_id: str | None,
    optimizer_enabled: bool | None,
    compilers: dict[str, Path],
    jobs: int | None,
    timeout: float | None,
) -> None:
    """Compile contracts whose artifacts are stale for a network.

    A contract is recompiled when it has no artifact entry for the network,
    its source changed, or the optimizer setting changed. Other networks'
    entries in the artifact are left untouched.

    Examples:

        solbuild compile

        solbuild compile --network-id 42 --optimize

        solbuild compile --solc 0.4.11=bin/solc-v0.4.11
    """
    # Import here to avoid heavy imports at CLI startup
    from solbuild_core import Compiler, SolbuildError

    config = load_build_config(
        config_path,
        contracts_dir=contracts_dir,
        artifacts_dir=artifacts_dir,
        network_id=network_id,
        optimizer_enabled=optimizer_enabled,
        max_workers=jobs,
        backend_timeout_seconds=timeout,
    )
    if compilers:
        config = config.model_copy(update={"compilers": {**config.compilers, **compilers}})

    try:
        result = Compiler(config, diagnostic_sink=diagnostic).compile_all()
    except SolbuildError as e:
        handle_solbuild_error(e)

    for unit in result.units:
        unit_outcome(unit)
    build_summary(result)

    if result.failed:
        raise SystemExit(EXIT_USER_ERROR)
