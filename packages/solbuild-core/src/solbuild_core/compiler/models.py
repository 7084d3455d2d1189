"""Build result models.

Models for reporting the per-unit outcomes of a compile_all run.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class UnitStatus(str, Enum):
    """Outcome of processing one source unit.

    Attributes:
        COMPILED: Recompiled and artifact written
        SKIPPED: Artifact already up to date for the network
        FAILED: Version, backend, compilation or write failure
    """

    COMPILED = "compiled"
    SKIPPED = "skipped"
    FAILED = "failed"


class UnitResult(BaseModel):
    """Result of processing a single source unit.

    Attributes:
        source_name: Source base name (e.g. ``Token.sol``)
        contract_name: Contract name (e.g. ``Token``)
        status: Unit outcome
        message: Failure reason, empty on success
        solc_version: Compiler version used, if one was resolved
        artifact_path: Written artifact, if compiled
        duration_ms: Processing time in milliseconds

    Example:
        >>> result = UnitResult(
        ...     source_name="Token.sol",
        ...     contract_name="Token",
        ...     status=UnitStatus.COMPILED,
        ...     solc_version="0.4.11",
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    source_name: str = Field(..., min_length=1, description="Source base name")
    contract_name: str = Field(..., min_length=1, description="Contract name")
    status: UnitStatus = Field(..., description="Unit outcome")
    message: str = Field(default="", description="Failure reason")
    solc_version: str | None = Field(default=None, description="Compiler version used")
    artifact_path: str | None = Field(default=None, description="Written artifact path")
    duration_ms: int = Field(default=0, ge=0, description="Duration in milliseconds")

    @property
    def failed(self) -> bool:
        return self.status is UnitStatus.FAILED


class BuildResult(BaseModel):
    """Aggregated result of one compile_all run.

    Attributes:
        network_id: Network the run compiled for
        units: Per-unit results, sorted by source name
        diagnostics: Deduplicated compiler messages in first-seen order
        started_at: When the run started
        finished_at: When the run finished
        total_duration_ms: Total duration in milliseconds
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    network_id: str = Field(..., min_length=1, description="Network id")
    units: list[UnitResult] = Field(default_factory=list, description="Unit results")
    diagnostics: list[str] = Field(default_factory=list, description="Compiler messages")
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Start time"
    )
    finished_at: datetime | None = Field(default=None, description="End time")
    total_duration_ms: int = Field(default=0, ge=0, description="Total duration")

    @property
    def failed(self) -> bool:
        """Check if any unit failed."""
        return any(u.failed for u in self.units)

    @property
    def failures(self) -> list[UnitResult]:
        return [u for u in self.units if u.failed]

    @property
    def compiled_count(self) -> int:
        return sum(1 for u in self.units if u.status is UnitStatus.COMPILED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for u in self.units if u.status is UnitStatus.SKIPPED)
