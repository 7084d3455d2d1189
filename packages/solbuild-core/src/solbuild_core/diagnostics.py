"""Compiler diagnostic normalization and deduplication.

The same warning is typically reported once per unit that imports the
offending file, and with a different directory prefix depending on how the
file was reached. Normalizing the path down to its base name lets those
copies collapse to a single reported message per run.
"""

from __future__ import annotations

import posixpath
import re
import threading
from collections.abc import Callable

import structlog

from solbuild_core.errors import NoPathInMessageError

logger = structlog.get_logger(__name__)

# Optional Windows drive, then any run of path characters ending in .sol
SOURCE_PATH_PATTERN = re.compile(r"(?:\b[A-Za-z]:(?=[\\/]))?[^\s:'\"]*\.sol\b")

DiagnosticSink = Callable[[str], None]


def normalize_error_message(message: str) -> str:
    """Truncate directories from every source path in a diagnostic.

    Both ``/`` and ``\\`` separators are recognised, matching the import
    callback's base-name lookup.

    Example:
        >>> normalize_error_message("base/Token.sol:6:46: Warning: Unused local variable")
        'Token.sol:6:46: Warning: Unused local variable'

    Raises:
        NoPathInMessageError: If *message* contains no ``.sol`` path.
    """
    if SOURCE_PATH_PATTERN.search(message) is None:
        raise NoPathInMessageError()
    return SOURCE_PATH_PATTERN.sub(lambda m: _base_name(m.group(0)), message)


def _base_name(path: str) -> str:
    return posixpath.basename(path.replace("\\", "/"))


class ErrorDeduplicator:
    """Run-scoped set of reported diagnostics.

    Safe to share between worker threads: the membership check and the
    insert happen under one lock, so each normalized message reaches the
    sink exactly once.

    Attributes:
        messages: Reported messages in first-seen order.

    Example:
        >>> dedup = ErrorDeduplicator(sink=print)
        >>> dedup.report("sub/A.sol:3: Warning: x")
        A.sol:3: Warning: x
        True
        >>> dedup.report("other/A.sol:3: Warning: x")
        False
    """

    def __init__(self, sink: DiagnosticSink | None = None) -> None:
        self._sink = sink
        self._seen: set[str] = set()
        self._ordered: list[str] = []
        self._lock = threading.Lock()

    @property
    def messages(self) -> list[str]:
        with self._lock:
            return list(self._ordered)

    def seen(self, normalized_message: str) -> bool:
        with self._lock:
            return normalized_message in self._seen

    def record(self, normalized_message: str) -> bool:
        """Record a message; return False if it had already been recorded."""
        with self._lock:
            if normalized_message in self._seen:
                return False
            self._seen.add(normalized_message)
            self._ordered.append(normalized_message)
            return True

    def report(self, raw_message: str) -> bool:
        """Normalize *raw_message* and forward it to the sink if it is new.

        Messages without a source path are reported unmodified.

        Returns:
            True if the message was emitted, False if it was a repeat.
        """
        try:
            message = normalize_error_message(raw_message)
        except NoPathInMessageError:
            message = raw_message

        if not self.record(message):
            return False

        logger.debug("diagnostic_reported", message=message)
        if self._sink is not None:
            self._sink(message)
        return True
