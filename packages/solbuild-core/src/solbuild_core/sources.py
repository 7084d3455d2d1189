"""Solidity source discovery and import resolution.

This module provides:
- discover_contract_sources: Recursive, best-effort source tree walk
- create_find_imports: Import callback handed to compiler backends

Sources are keyed by base file name, not by path. Two files with the same
name in different directories collide; the one visited last wins and a
``duplicate_source_name`` warning is logged. Directories are visited
depth-first in sorted order.
"""

from __future__ import annotations

import posixpath
from collections.abc import Callable, Mapping
from pathlib import Path
from types import MappingProxyType

import structlog
from pydantic import BaseModel, ConfigDict, Field

from solbuild_core.errors import SourceDirectoryNotFoundError

logger = structlog.get_logger(__name__)

SOLIDITY_FILE_EXTENSION = ".sol"


class ImportContents(BaseModel):
    """Result of resolving one import path.

    ``contents`` is None when no discovered source matches; the backend is
    left to report the missing import in its own diagnostics.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    contents: str | None = Field(default=None, description="Source text of the import")

    @property
    def found(self) -> bool:
        return self.contents is not None


FindImports = Callable[[str], ImportContents]


def discover_contract_sources(dir_path: Path | str) -> dict[str, str]:
    """Recursively retrieve Solidity source code from a directory.

    Args:
        dir_path: Directory to search.

    Returns:
        Mapping of source base name (e.g. ``Token.sol``) to exact source text.

    Raises:
        SourceDirectoryNotFoundError: If *dir_path* itself cannot be listed.

    Example:
        >>> sources = discover_contract_sources("contracts")
        >>> sorted(sources)
        ['Ownable.sol', 'Token.sol']
    """
    root = Path(dir_path)
    try:
        entries = sorted(root.iterdir())
    except OSError as e:
        raise SourceDirectoryNotFoundError(str(root), internal_details=str(e)) from e

    sources: dict[str, str] = {}
    origins: dict[str, Path] = {}
    _collect_sources(entries, sources, origins)
    return sources


def _collect_sources(
    entries: list[Path],
    sources: dict[str, str],
    origins: dict[str, Path],
) -> None:
    for entry in entries:
        if entry.suffix == SOLIDITY_FILE_EXTENSION:
            text = _read_source(entry)
            if text is None:
                continue
            previous = origins.get(entry.name)
            if previous is not None:
                logger.warning(
                    "duplicate_source_name",
                    name=entry.name,
                    shadowed=str(previous),
                    kept=str(entry),
                )
            sources[entry.name] = text
            origins[entry.name] = entry
            logger.debug("source_read", name=entry.name, path=str(entry))
        elif entry.is_dir():
            try:
                nested = sorted(entry.iterdir())
            except OSError as e:
                logger.warning("directory_skipped", path=str(entry), reason=str(e))
                continue
            _collect_sources(nested, sources, origins)
        else:
            logger.debug(
                "entry_skipped",
                path=str(entry),
                reason=f"not a directory or {SOLIDITY_FILE_EXTENSION} file",
            )


def _read_source(path: Path) -> str | None:
    # Bytes are decoded directly so line endings survive for hashing
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("source_unreadable", path=str(path), reason=str(e))
        return None


def create_find_imports(sources: Mapping[str, str]) -> FindImports:
    """Create a callback that resolves import paths against discovered sources.

    Any directory prefix on the requested path is ignored; lookup is by base
    name only. The mapping is snapshotted so later changes to *sources* do not
    affect the callback.

    Args:
        sources: Mapping of source base names to source text.

    Returns:
        Function mapping an import path to ImportContents.

    Example:
        >>> find_imports = create_find_imports({"Ownable.sol": "contract Ownable {}"})
        >>> find_imports("zeppelin/ownership/Ownable.sol").found
        True
    """
    snapshot = MappingProxyType(dict(sources))

    def find_imports(import_path: str) -> ImportContents:
        base_name = posixpath.basename(import_path.replace("\\", "/"))
        return ImportContents(contents=snapshot.get(base_name))

    return find_imports
