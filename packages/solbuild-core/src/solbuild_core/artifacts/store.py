"""Artifact persistence, staleness and merge.

ArtifactStore owns one directory of ``<ContractName>.json`` records. Reading
is forgiving: a record that is missing, unreadable, not UTF-8 JSON or not
shaped like a ContractArtifact is reported as absent so the unit gets
recompiled. Writing is strict: any I/O failure raises ArtifactWriteError.
"""

from __future__ import annotations

import json
import os
import uuid
from pathlib import Path

import structlog
from pydantic import ValidationError

from solbuild_core.artifacts.models import ContractArtifact, ContractNetworkData
from solbuild_core.errors import ArtifactWriteError

logger = structlog.get_logger(__name__)

NUMBER_OF_JSON_SPACES = 4
ARTIFACT_FILE_EXTENSION = ".json"


def needs_compilation(
    artifact: ContractArtifact | None,
    network_id: str,
    source_hash: str,
    optimizer_enabled: bool,
) -> bool:
    """Decide whether a unit must be recompiled for *network_id*.

    A unit is stale when there is no record, no entry for the network, the
    stored digest differs, or the stored optimizer flag differs. The compiler
    version is not compared: the digest already covers the pragma.

    Example:
        >>> needs_compilation(None, "50", "0xabc", False)
        True
    """
    if artifact is None:
        return True
    existing = artifact.get_network(network_id)
    if existing is None:
        return True
    return existing.keccak256 != source_hash or existing.optimizer_enabled != optimizer_enabled


class ArtifactStore:
    """Read, merge and write per-contract artifact records.

    Attributes:
        artifacts_dir: Directory holding the JSON records.

    Example:
        >>> store = ArtifactStore(Path("artifacts"))
        >>> store.ensure_directory()
        >>> existing = store.load("Token")
        >>> record = ArtifactStore.merge(existing, "Token", "50", network_data)
        >>> store.persist(record)
    """

    def __init__(self, artifacts_dir: Path) -> None:
        self.artifacts_dir = Path(artifacts_dir)
        self._log = logger.bind(artifacts_dir=str(self.artifacts_dir))

    def artifact_path(self, contract_name: str) -> Path:
        return self.artifacts_dir / f"{contract_name}{ARTIFACT_FILE_EXTENSION}"

    def ensure_directory(self) -> None:
        """Create the artifacts directory if it does not already exist.

        Raises:
            ArtifactWriteError: If the directory cannot be created.
        """
        if self.artifacts_dir.is_dir():
            return
        self._log.info("creating_artifacts_directory")
        try:
            self.artifacts_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArtifactWriteError(str(self.artifacts_dir), internal_details=str(e)) from e

    def load(self, contract_name: str) -> ContractArtifact | None:
        """Load the record for *contract_name*.

        Returns:
            The parsed record, or None if it is missing or malformed.
        """
        path = self.artifact_path(contract_name)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            self._log.warning("artifact_unreadable", path=str(path), reason=str(e))
            return None

        try:
            return ContractArtifact.model_validate(json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            self._log.warning("artifact_malformed", path=str(path), reason=str(e))
            return None

    @staticmethod
    def merge(
        existing: ContractArtifact | None,
        contract_name: str,
        network_id: str,
        network_data: ContractNetworkData,
    ) -> ContractArtifact:
        """Produce a new record with *network_data* stored under *network_id*.

        *existing* is not modified. Every other network entry is carried over
        as the raw JSON it was loaded from, and extra top-level keys are kept.

        Args:
            existing: Current record, or None if there is none.
            contract_name: Contract name for a newly created record.
            network_id: Network whose entry is replaced.
            network_data: New entry for *network_id*.

        Returns:
            The merged record.
        """
        if existing is None:
            return ContractArtifact(
                contract_name=contract_name,
                networks={network_id: network_data.to_json_dict()},
            )
        return existing.model_copy(
            update={
                "networks": {**existing.networks, network_id: network_data.to_json_dict()},
            },
        )

    def persist(self, artifact: ContractArtifact) -> Path:
        """Write *artifact* to ``<artifacts_dir>/<contract_name>.json``.

        The record is written to a sibling temporary file and then renamed over
        the target, so readers never see a partial record. The file is created
        with the process umask like any other build output.

        Returns:
            Path of the written file.

        Raises:
            ArtifactWriteError: On any I/O failure. Not retried.
        """
        path = self.artifact_path(artifact.contract_name)
        content = json.dumps(artifact.to_json_dict(), indent=NUMBER_OF_JSON_SPACES)

        temp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            with temp_path.open("x", encoding="utf-8") as f:
                f.write(content)
            os.replace(temp_path, path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise ArtifactWriteError(str(path), internal_details=str(e)) from e

        self._log.debug("artifact_written", path=str(path))
        return path
