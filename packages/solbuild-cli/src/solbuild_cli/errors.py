"""CLI error handling for solbuild-cli.

Every failure a command can hit is turned into a CLIError carrying the exit
code for its class of problem:

- 0: every unit compiled or was already up to date
- 1: the user can fix it (configuration, pragma, missing compiler, a failed unit)
- 2: the environment is broken (source root missing, artifacts not writable)
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import click

from solbuild_cli.output import error

if TYPE_CHECKING:
    import yaml
    from pydantic import ValidationError as PydanticValidationError

    from solbuild_core import BuildConfig, SolbuildError

EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2


class CLIError(click.ClickException):
    """Error shown with Rich formatting and exited with *exit_code*."""

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        for line in self.format_message().splitlines():
            error(line)


def exit_code_for(err: SolbuildError) -> int:
    """Return the CLI exit code for a solbuild-core error.

    Missing source roots and unwritable artifact directories are system
    errors; everything else is something the user can fix.
    """
    from solbuild_core import ArtifactWriteError, SourceDirectoryNotFoundError

    if isinstance(err, (SourceDirectoryNotFoundError, ArtifactWriteError)):
        return EXIT_SYSTEM_ERROR
    return EXIT_USER_ERROR


def handle_solbuild_error(err: SolbuildError) -> NoReturn:
    """Re-raise a solbuild-core error as a CLIError with the right exit code."""
    raise CLIError(err.user_message, exit_code=exit_code_for(err)) from None


def format_pydantic_error(err: PydanticValidationError) -> str:
    """List each invalid solbuild.yaml field with its problem.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - max_workers: Input should be greater than or equal to 1"
    """
    lines = ["Validation failed:"]
    for detail in err.errors():
        field = ".".join(str(part) for part in detail["loc"]) or "(root)"
        lines.append(f"  - {field}: {detail['msg']}")
    return "\n".join(lines)


def handle_yaml_error(err: yaml.YAMLError, file_path: str) -> NoReturn:
    """Raise a CLIError pointing at the line and column of a YAML syntax error."""
    mark = getattr(err, "problem_mark", None)
    if mark is not None:
        detail = f"line {mark.line + 1}, column {mark.column + 1}: {getattr(err, 'problem', err)}"
    else:
        detail = str(err)
    raise CLIError(f"Invalid YAML in {file_path}: {detail}")


def handle_validation_error(err: PydanticValidationError, file_path: str) -> NoReturn:
    """Raise a CLIError listing the invalid fields of *file_path*."""
    raise CLIError(f"Invalid configuration in {file_path}:\n{format_pydantic_error(err)}")


def load_build_config(config_path: str | None, **overrides: object) -> BuildConfig:
    """Load solbuild.yaml for a command, converting every failure to a CLIError.

    Args:
        config_path: ``--config`` value, or None to search the usual places.
        **overrides: Command line values that take precedence over the file.

    Returns:
        The validated configuration.
    """
    import yaml
    from pydantic import ValidationError as PydanticValidationError

    from solbuild_core import SolbuildError, load_config
    from solbuild_core.config import CONFIG_FILE_NAME

    shown_path = config_path or CONFIG_FILE_NAME
    try:
        return load_config(Path(config_path) if config_path else None, **overrides)
    except SolbuildError as e:
        handle_solbuild_error(e)
    except yaml.YAMLError as e:
        handle_yaml_error(e, shown_path)
    except PydanticValidationError as e:
        handle_validation_error(e, shown_path)
