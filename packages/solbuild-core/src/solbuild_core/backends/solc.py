"""solc executable backend.

Runs a native solc binary in ``--standard-json`` mode. solc cannot call back
into Python during a subprocess run, so imports are resolved up front: the
unit is scanned for import directives, each one is looked up through the
import callback, and found sources are added to the compiler input under the
name solc will ask for. Imports that cannot be found are left out so solc
reports them as ordinary diagnostics.
"""

from __future__ import annotations

import json
import posixpath
import re
import subprocess
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from solbuild_core.backends.base import BackendOutput, CompiledContract, CompilerBackend
from solbuild_core.errors import BackendTimeoutError, CompilationError

if TYPE_CHECKING:
    from solbuild_core.sources import FindImports

logger = structlog.get_logger(__name__)

# import "a.sol"; import "a.sol" as A; import {X} from "a.sol"; import * as A from "a.sol";
IMPORT_PATTERN = re.compile(r"""\bimport\s+(?:[^'";]*?\bfrom\s+)?["']([^"']+)["']""")

DEFAULT_OPTIMIZER_RUNS = 200


def find_import_paths(source: str) -> list[str]:
    """Return import paths referenced by *source*, in order of appearance."""
    return IMPORT_PATTERN.findall(source)


def source_unit_name(importer: str, import_path: str) -> str:
    """Return the name solc uses for *import_path* imported from *importer*.

    Relative imports (``./`` or ``../``) are resolved against the importing
    unit's directory; anything else is used verbatim.
    """
    if import_path.startswith(("./", "../")):
        return posixpath.normpath(posixpath.join(posixpath.dirname(importer), import_path))
    return import_path


def collect_import_sources(
    sources: Mapping[str, str],
    find_imports: FindImports,
) -> dict[str, str]:
    """Expand *sources* with every transitively reachable import.

    Args:
        sources: Initial source name -> text mapping.
        find_imports: Callback resolving an import path to source text.

    Returns:
        New mapping containing *sources* plus every import that resolved.
    """
    resolved: dict[str, str] = dict(sources)
    pending = list(sources.items())
    missing: set[str] = set()

    while pending:
        importer, text = pending.pop()
        for import_path in find_import_paths(text):
            name = source_unit_name(importer, import_path)
            if name in resolved or name in missing:
                continue
            result = find_imports(import_path)
            if result.contents is None:
                missing.add(name)
                logger.debug("import_unresolved", importer=importer, path=import_path)
                continue
            resolved[name] = result.contents
            pending.append((name, result.contents))

    return resolved


class SolcExecutableBackend(CompilerBackend):
    """Compile with a native solc binary.

    Attributes:
        version: Exact Solidity version of the binary.
        executable: Path to the solc binary.
        optimizer_runs: Optimizer runs setting used when the optimizer is on.

    Example:
        >>> backend = SolcExecutableBackend("0.4.11", Path("/opt/solc/solc-v0.4.11"))
        >>> output = backend.compile(
        ...     {"Token.sol": source},
        ...     optimizer_enabled=False,
        ...     find_imports=find_imports,
        ... )
    """

    def __init__(
        self,
        version: str,
        executable: Path,
        *,
        optimizer_runs: int = DEFAULT_OPTIMIZER_RUNS,
    ) -> None:
        super().__init__(version)
        self.executable = executable
        self.optimizer_runs = optimizer_runs

    def build_input(
        self,
        sources: Mapping[str, str],
        *,
        optimizer_enabled: bool,
    ) -> dict[str, Any]:
        """Build the solc standard JSON input document."""
        return {
            "language": "Solidity",
            "sources": {name: {"content": text} for name, text in sources.items()},
            "settings": {
                "optimizer": {
                    "enabled": optimizer_enabled,
                    "runs": self.optimizer_runs,
                },
                "outputSelection": {
                    "*": {"*": ["abi", "evm.bytecode.object"]},
                },
            },
        }

    def compile(
        self,
        sources: Mapping[str, str],
        *,
        optimizer_enabled: bool,
        find_imports: FindImports,
        timeout_seconds: float | None = None,
    ) -> BackendOutput:
        unit_names = ", ".join(sources)
        all_sources = collect_import_sources(sources, find_imports)
        payload = self.build_input(all_sources, optimizer_enabled=optimizer_enabled)

        try:
            completed = subprocess.run(
                [str(self.executable), "--standard-json"],
                input=json.dumps(payload),
                capture_output=True,
                text=True,
                timeout=timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise BackendTimeoutError(unit_names, timeout_seconds or 0.0) from e
        except OSError as e:
            raise CompilationError(
                f"Could not run solc {self.version}",
                internal_details=f"{self.executable}: {e}",
            ) from e

        try:
            output: dict[str, Any] = json.loads(completed.stdout)
        except json.JSONDecodeError as e:
            raise CompilationError(
                f"solc {self.version} produced unreadable output for {unit_names}",
                internal_details=(
                    f"exit status {completed.returncode}; stderr: {completed.stderr.strip()}"
                ),
            ) from e

        return self.parse_output(output)

    @staticmethod
    def parse_output(output: Mapping[str, Any]) -> BackendOutput:
        """Convert a solc standard JSON output document to BackendOutput."""
        errors = [
            entry.get("formattedMessage") or entry.get("message", "")
            for entry in output.get("errors", [])
        ]

        contracts: dict[str, CompiledContract] = {}
        for source_name, by_name in output.get("contracts", {}).items():
            for contract_name, data in by_name.items():
                bytecode = data.get("evm", {}).get("bytecode", {}).get("object", "")
                contracts[f"{source_name}:{contract_name}"] = CompiledContract(
                    abi=data.get("abi", []),
                    bytecode=bytecode,
                )

        return BackendOutput(contracts=contracts, errors=errors)
