"""Custom exception hierarchy for solbuild-core.

This module defines the exception classes used throughout solbuild:
- SolbuildError: Base exception for all solbuild-related errors
- SourceDirectoryNotFoundError: The contracts root cannot be listed
- VersionNotFoundError / UnsupportedVersionError: Compiler selection failures
- CompilationError / BackendTimeoutError: Backend hard failures
- ArtifactWriteError: Persisting an artifact record failed
- NoPathInMessageError: A diagnostic carries no source file token
- ConfigurationError: solbuild.yaml cannot be loaded

User-facing messages are safe to display. Technical details are logged
internally via structlog and never exposed to the user.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class SolbuildError(Exception):
    """Base exception for solbuild.

    All solbuild exceptions inherit from this class. User-facing messages
    are safe to display; technical details are logged internally.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but NEVER exposed to the user.

    Example:
        >>> raise SolbuildError(
        ...     "Compilation failed",
        ...     internal_details="solc exited with status 139",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize SolbuildError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "solbuild_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class SourceDirectoryNotFoundError(SolbuildError):
    """Raised when the contracts root directory cannot be listed.

    This is the only discovery failure that aborts a whole run; failures
    inside nested directories are logged and skipped.

    Attributes:
        path: The directory that could not be listed.
    """

    def __init__(self, path: str, *, internal_details: str | None = None) -> None:
        super().__init__(f"No directory found at {path}", internal_details=internal_details)
        self.path = path


class VersionNotFoundError(SolbuildError):
    """Raised when a source file has no ``pragma solidity`` version declaration.

    Attributes:
        source_name: Base name of the offending source file (if known).
    """

    def __init__(self, source_name: str | None = None) -> None:
        where = f" in {source_name}" if source_name else " in source"
        super().__init__(f"Could not find Solidity version{where}")
        self.source_name = source_name


class UnsupportedVersionError(SolbuildError):
    """Raised when no compiler backend is registered for a version.

    Always includes the list of registered versions for actionable feedback.

    Attributes:
        version: The requested compiler version.
        available_versions: Versions that do have a registered backend.

    Example:
        >>> raise UnsupportedVersionError("0.4.99", ["0.4.11", "0.4.18"])
        # User sees: "No compiler registered for Solidity 0.4.99. Available: 0.4.11, 0.4.18"
    """

    def __init__(self, version: str, available_versions: list[str]) -> None:
        available_str = ", ".join(available_versions) if available_versions else "none"
        super().__init__(
            f"No compiler registered for Solidity {version}. Available: {available_str}"
        )
        self.version = version
        self.available_versions = available_versions


class CompilationError(SolbuildError):
    """Raised when the backend produces no interface or bytecode for a unit.

    Use this exception when:
    - The compiler process cannot be started or crashes
    - The compiler output is not valid JSON
    - The expected ``<source>:<contract>`` entry is missing from the output
    """

    pass


class BackendTimeoutError(CompilationError):
    """Raised when a backend invocation exceeds its deadline.

    Attributes:
        timeout_seconds: The deadline that was exceeded.
    """

    def __init__(self, source_name: str, timeout_seconds: float) -> None:
        super().__init__(f"Compiling {source_name} timed out after {timeout_seconds:g}s")
        self.timeout_seconds = timeout_seconds


class ArtifactWriteError(SolbuildError):
    """Raised when an artifact record cannot be written to disk.

    Attributes:
        path: The artifact file that could not be written.
    """

    def __init__(self, path: str, *, internal_details: str | None = None) -> None:
        super().__init__(f"Could not write artifact {path}", internal_details=internal_details)
        self.path = path


class NoPathInMessageError(SolbuildError):
    """Raised when a compiler diagnostic contains no source file path."""

    def __init__(self) -> None:
        super().__init__("Could not find a path in error message")


class ConfigurationError(SolbuildError):
    """Raised when the solbuild.yaml configuration cannot be loaded.

    Provides file path and field context for actionable error messages.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (if known).

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid compiler path",
        ...     file_path="solbuild.yaml",
        ...     field_path="compilers.0.4.11",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path
