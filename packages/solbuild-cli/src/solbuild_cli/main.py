"""CLI entry point for solbuild.

The group owns process-wide setup (logging level and format, colour) so
subcommands only deal with configuration and the build itself. Subcommand
modules are imported on first use, keeping ``solbuild --help`` free of the
build engine's imports.
"""

from __future__ import annotations

import importlib

import click
import rich_click as rclick

from solbuild_cli import __version__
from solbuild_cli.output import set_no_color

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True

# command name -> (module, attribute)
LAZY_COMMANDS: dict[str, tuple[str, str]] = {
    "compile": ("solbuild_cli.commands.compile", "compile_cmd"),
    "validate": ("solbuild_cli.commands.validate", "validate"),
    "init": ("solbuild_cli.commands.init", "init"),
}


class LazyGroup(rclick.RichGroup):
    """Group that imports a subcommand's module only when it is requested.

    Attributes:
        lazy_subcommands: Command name -> (module, attribute).
    """

    def __init__(
        self,
        *args: object,
        lazy_subcommands: dict[str, tuple[str, str]] | None = None,
        **kwargs: object,
    ) -> None:
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]
        self.lazy_subcommands = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted({*super().list_commands(ctx), *self.lazy_subcommands})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        target = self.lazy_subcommands.get(cmd_name)
        if target is None:
            return super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        module_name, attr_name = target
        command: click.Command = getattr(importlib.import_module(module_name), attr_name)
        return command


def _setup_logging(verbose: bool, log_format: str) -> None:
    from solbuild_core.observability import configure_logging

    configure_logging(
        log_level="DEBUG" if verbose else "WARNING",
        json_format=log_format == "json",
        add_timestamp=log_format == "json",
    )


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="solbuild")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logs.")
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default="console",
    show_default=True,
    help="Log rendering on stderr.",
)
def cli(verbose: bool, log_format: str) -> None:
    """solbuild - Incremental Solidity builds.

    Compiles only the contracts whose source or optimizer setting changed
    for a network, and merges results into per-contract JSON artifacts.

    **Getting Started:**

    - `solbuild init` - Create solbuild.yaml and a contracts directory
    - `solbuild validate` - Check configuration and compiler coverage
    - `solbuild compile` - Compile stale contracts
    """
    _setup_logging(verbose, log_format)


if __name__ == "__main__":
    cli()
