"""Console output for solbuild-cli.

All user-facing text goes through one Rich console. Messages are escaped
before printing because contract names, paths and compiler diagnostics may
contain square brackets that Rich would otherwise read as markup. Colour is
off when NO_COLOR is set or ``--no-color`` is given.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.text import Text

if TYPE_CHECKING:
    from solbuild_core import BuildResult, UnitResult

_env_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create the console, honouring *no_color* and the NO_COLOR variable."""
    disabled = no_color or _env_no_color
    return Console(force_terminal=False if disabled else None, no_color=disabled)


console = create_console()


def set_no_color(no_color: bool) -> None:
    """Replace the module console, e.g. for ``--no-color``."""
    global console
    console = create_console(no_color=no_color)


def _print(symbol: str, style: str, message: str) -> None:
    console.print(f"[{style}]{symbol}[/{style}] {escape(message)}")


def success(message: str) -> None:
    """Print ``✓ message`` in green."""
    _print("✓", "green", message)


def error(message: str) -> None:
    """Print ``✗ message`` in red."""
    _print("✗", "red", message)


def warning(message: str) -> None:
    """Print ``⚠ message`` in yellow."""
    _print("⚠", "yellow", message)


def info(message: str) -> None:
    console.print(escape(message))


def diagnostic(message: str) -> None:
    """Print one deduplicated compiler diagnostic verbatim.

    Used as the Compiler's diagnostic sink, so it is called from worker
    threads.
    """
    console.print(Text.assemble(("⚠ ", "yellow"), message), highlight=False)


def unit_outcome(unit: UnitResult) -> None:
    """Report one unit: saved artifacts and failures are shown, skips are not.

    Example:
        >>> unit_outcome(result.units[0])
        ✓ Token.sol artifact saved
    """
    from solbuild_core import UnitStatus

    if unit.status is UnitStatus.COMPILED:
        success(f"{unit.source_name} artifact saved")
    elif unit.status is UnitStatus.FAILED:
        error(f"{unit.source_name}: {unit.message}")


def build_summary(result: BuildResult) -> None:
    """Print the per-network totals of a build.

    Example:
        >>> build_summary(result)
        Network 50: 2 compiled, 5 up to date, 0 failed (0.42s)
    """
    info(
        f"Network {result.network_id}: {result.compiled_count} compiled, "
        f"{result.skipped_count} up to date, {len(result.failures)} failed "
        f"({result.total_duration_ms / 1000:.2f}s)"
    )
