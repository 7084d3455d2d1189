"""Compiler class for solbuild.

This module implements the Compiler that turns a tree of Solidity sources
into per-contract JSON artifacts, recompiling only what changed.

For every discovered unit:
1. Hash the exact source text (keccak-256)
2. Load the unit's artifact record, if any
3. Skip the unit if the record is current for the network and optimizer flag
4. Otherwise resolve the pinned solc version and select its backend
5. Compile, funnelling diagnostics through the run's ErrorDeduplicator
6. Merge the new network entry into the record and persist it

Units are independent and run on a bounded thread pool. compile_all returns
only once every unit has finished.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from solbuild_core.artifacts import (
    ArtifactStore,
    ContractNetworkData,
    needs_compilation,
)
from solbuild_core.compiler.models import BuildResult, UnitResult, UnitStatus
from solbuild_core.diagnostics import DiagnosticSink, ErrorDeduplicator
from solbuild_core.errors import CompilationError, SolbuildError
from solbuild_core.hashing import keccak256_hex
from solbuild_core.sources import (
    SOLIDITY_FILE_EXTENSION,
    FindImports,
    create_find_imports,
    discover_contract_sources,
)
from solbuild_core.versions import BackendRegistry, parse_solidity_version

if TYPE_CHECKING:
    from solbuild_core.config import BuildConfig

logger = structlog.get_logger(__name__)


def contract_name_for(source_name: str) -> str:
    """Return the contract name for a source base name (``Token.sol`` -> ``Token``)."""
    return source_name.removesuffix(SOLIDITY_FILE_EXTENSION)


class Compiler:
    """Incrementally compile a Solidity source tree for one network.

    Attributes:
        config: Build settings for the run.
        registry: Available compiler backends keyed by exact version.
        store: Artifact store for config.artifacts_dir.

    Example:
        >>> config = BuildConfig(
        ...     contracts_dir=Path("contracts"),
        ...     artifacts_dir=Path("artifacts"),
        ...     network_id="50",
        ...     compilers={"0.4.11": Path("bin/solc-0.4.11")},
        ... )
        >>> result = Compiler(config).compile_all()
        >>> result.failed
        False
    """

    def __init__(
        self,
        config: BuildConfig,
        registry: BackendRegistry | None = None,
        *,
        diagnostic_sink: DiagnosticSink | None = None,
    ) -> None:
        """Initialize the Compiler.

        Args:
            config: Build settings.
            registry: Backend registry. Defaults to the solc executables
                listed in config.compilers.
            diagnostic_sink: Called once per distinct compiler diagnostic.
        """
        self.config = config
        if registry is None:
            registry = BackendRegistry.from_executables(
                config.compilers,
                optimizer_runs=config.optimizer_runs,
            )
        self.registry = registry
        self.store = ArtifactStore(config.artifacts_dir)
        self._diagnostic_sink = diagnostic_sink
        self._log = logger.bind(component="compiler", network_id=config.network_id)

    def compile_all(self) -> BuildResult:
        """Compile every stale unit found under config.contracts_dir.

        Returns:
            BuildResult with one UnitResult per discovered unit.

        Raises:
            SourceDirectoryNotFoundError: If the contracts directory is missing.
            ArtifactWriteError: If the artifacts directory cannot be created.
        """
        start_time = time.monotonic()
        started_at = datetime.now(UTC)

        self.store.ensure_directory()
        sources = discover_contract_sources(self.config.contracts_dir)
        find_imports = create_find_imports(sources)
        dedup = ErrorDeduplicator(sink=self._diagnostic_sink)

        self._log.info(
            "build_started",
            units=len(sources),
            optimizer_enabled=self.config.optimizer_enabled,
            max_workers=self.config.max_workers,
        )

        results: list[UnitResult] = []
        with ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="solbuild",
        ) as executor:
            future_to_name = {
                executor.submit(self.compile_unit, name, text, find_imports, dedup): name
                for name, text in sources.items()
            }
            for future in as_completed(future_to_name):
                source_name = future_to_name[future]
                try:
                    results.append(future.result())
                except Exception as e:
                    # Failures stay scoped to their unit
                    self._log.exception("contract_crashed", source=source_name)
                    results.append(
                        UnitResult(
                            source_name=source_name,
                            contract_name=contract_name_for(source_name),
                            status=UnitStatus.FAILED,
                            message=f"Unexpected error compiling {source_name}: {e}",
                        )
                    )

        results.sort(key=lambda r: r.source_name)
        total_duration_ms = int((time.monotonic() - start_time) * 1000)
        result = BuildResult(
            network_id=self.config.network_id,
            units=results,
            diagnostics=dedup.messages,
            started_at=started_at,
            finished_at=datetime.now(UTC),
            total_duration_ms=total_duration_ms,
        )

        self._log.info(
            "build_completed",
            compiled=result.compiled_count,
            skipped=result.skipped_count,
            failed=len(result.failures),
            total_duration_ms=total_duration_ms,
        )
        return result

    def compile_unit(
        self,
        source_name: str,
        source: str,
        find_imports: FindImports,
        dedup: ErrorDeduplicator,
    ) -> UnitResult:
        """Decide whether *source_name* is stale and, if so, compile and persist it.

        Version, backend, compilation and write failures are returned as a
        FAILED result rather than raised.
        """
        start_time = time.monotonic()
        contract_name = contract_name_for(source_name)
        log = self._log.bind(source=source_name)

        source_hash = keccak256_hex(source)
        existing = self.store.load(contract_name)

        if not needs_compilation(
            existing,
            self.config.network_id,
            source_hash,
            self.config.optimizer_enabled,
        ):
            log.debug("contract_up_to_date")
            return UnitResult(
                source_name=source_name,
                contract_name=contract_name,
                status=UnitStatus.SKIPPED,
            )

        version: str | None = None
        try:
            version = parse_solidity_version(source, source_name)
            backend = self.registry.select(version)

            log.info("compiling_contract", solc_version=version)
            output = backend.compile(
                {source_name: source},
                optimizer_enabled=self.config.optimizer_enabled,
                find_imports=find_imports,
                timeout_seconds=self.config.backend_timeout_seconds,
            )
            for message in output.errors:
                dedup.report(message)

            compiled = output.get_contract(source_name, contract_name)
            if compiled is None:
                raise CompilationError(
                    f"Compiling {source_name} produced no output for contract {contract_name}"
                )

            network_data = ContractNetworkData(
                solc_version=version,
                keccak256=source_hash,
                optimizer_enabled=self.config.optimizer_enabled,
                abi=compiled.abi,
                unlinked_binary=f"0x{compiled.bytecode}",
                updated_at=int(time.time() * 1000),
            )
            artifact = ArtifactStore.merge(
                existing, contract_name, self.config.network_id, network_data
            )
            path = self.store.persist(artifact)

        except SolbuildError as e:
            log.warning("contract_failed", error_type=type(e).__name__, reason=e.user_message)
            return UnitResult(
                source_name=source_name,
                contract_name=contract_name,
                status=UnitStatus.FAILED,
                message=e.user_message,
                solc_version=version,
                duration_ms=int((time.monotonic() - start_time) * 1000),
            )

        log.info("artifact_saved", path=str(path))
        return UnitResult(
            source_name=source_name,
            contract_name=contract_name,
            status=UnitStatus.COMPILED,
            solc_version=version,
            artifact_path=str(path),
            duration_ms=int((time.monotonic() - start_time) * 1000),
        )

    def find_stale_sources(self, sources: Mapping[str, str]) -> list[str]:
        """Return the source names that compile_all would recompile.

        Args:
            sources: Discovered source name -> text mapping.

        Returns:
            Sorted list of stale source names.
        """
        stale: list[str] = []
        for source_name, source in sources.items():
            existing = self.store.load(contract_name_for(source_name))
            if needs_compilation(
                existing,
                self.config.network_id,
                keccak256_hex(source),
                self.config.optimizer_enabled,
            ):
                stale.append(source_name)
        return sorted(stale)
