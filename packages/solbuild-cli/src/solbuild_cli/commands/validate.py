"""solbuild validate command - Check configuration and compiler coverage."""

from __future__ import annotations

import click

from solbuild_cli.errors import EXIT_USER_ERROR, handle_solbuild_error, load_build_config
from solbuild_cli.output import error, info, success


@click.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to solbuild.yaml [default: $SOLBUILD_CONFIG or ./solbuild.yaml]",
)
def validate(config_path: str | None) -> None:
    """Validate solbuild.yaml and the contracts it points at.

    Checks that the configuration is valid, that every contract declares a
    Solidity version, and that a compiler is registered for each version.
    Also reports how many contracts are stale for the configured network.

    Examples:

        solbuild validate

        solbuild validate --config path/to/solbuild.yaml
    """
    # Import here to avoid heavy imports at CLI startup
    from solbuild_core import (
        Compiler,
        SolbuildError,
        discover_contract_sources,
        parse_solidity_version,
    )

    config = load_build_config(config_path)
    success("Configuration valid")

    try:
        sources = discover_contract_sources(config.contracts_dir)
    except SolbuildError as e:
        handle_solbuild_error(e)

    compiler = Compiler(config)
    problems = 0
    for source_name in sorted(sources):
        try:
            version = parse_solidity_version(sources[source_name], source_name)
            compiler.registry.select(version)
        except SolbuildError as e:
            problems += 1
            error(f"{source_name}: {e.user_message}")

    stale = compiler.find_stale_sources(sources)
    info(
        f"{len(sources)} contracts, {len(stale)} stale for network {config.network_id}"
    )

    if problems:
        raise SystemExit(EXIT_USER_ERROR)
    success("All contracts have a registered compiler")
