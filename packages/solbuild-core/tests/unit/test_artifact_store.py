"""Unit tests for artifact staleness, merge and persistence."""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path
from typing import Any

import pytest
from structlog.testing import capture_logs

from solbuild_core.artifacts import (
    ArtifactStore,
    ContractArtifact,
    ContractNetworkData,
    needs_compilation,
)
from solbuild_core.errors import ArtifactWriteError


def _network_data(**overrides: Any) -> ContractNetworkData:
    values: dict[str, Any] = {
        "solc_version": "0.4.11",
        "keccak256": "0xabc",
        "optimizer_enabled": False,
        "abi": [{"type": "function", "name": "owner"}],
        "unlinked_binary": "0x6060",
        "updated_at": 1500000000000,
    }
    values.update(overrides)
    return ContractNetworkData(**values)


def _entry(**overrides: Any) -> dict[str, Any]:
    return _network_data(**overrides).to_json_dict()


@pytest.fixture
def store(artifacts_dir: Path) -> ArtifactStore:
    store = ArtifactStore(artifacts_dir)
    store.ensure_directory()
    return store


class TestNeedsCompilation:
    """Tests for needs_compilation."""

    def test_no_record(self) -> None:
        assert needs_compilation(None, "50", "0xabc", False)

    def test_no_entry_for_network(self) -> None:
        artifact = ContractArtifact(contract_name="Token", networks={"1": _entry()})
        assert needs_compilation(artifact, "50", "0xabc", False)

    def test_up_to_date(self) -> None:
        artifact = ContractArtifact(contract_name="Token", networks={"50": _entry()})
        assert not needs_compilation(artifact, "50", "0xabc", False)

    def test_source_changed(self) -> None:
        artifact = ContractArtifact(contract_name="Token", networks={"50": _entry()})
        assert needs_compilation(artifact, "50", "0xdef", False)

    def test_optimizer_changed(self) -> None:
        artifact = ContractArtifact(contract_name="Token", networks={"50": _entry()})
        assert needs_compilation(artifact, "50", "0xabc", True)

    def test_compiler_version_not_compared(self) -> None:
        """Only digest and optimizer flag decide staleness."""
        artifact = ContractArtifact(
            contract_name="Token",
            networks={"50": _entry(solc_version="0.4.18")},
        )
        assert not needs_compilation(artifact, "50", "0xabc", False)

    def test_unparseable_entry_is_stale(self) -> None:
        artifact = ContractArtifact(
            contract_name="Token", networks={"50": {"keccak256": "0xabc"}}
        )

        assert artifact.get_network("50") is None
        assert needs_compilation(artifact, "50", "0xabc", False)

    def test_legacy_optimizer_flag(self) -> None:
        """Entries that stored the optimizer flag as 0/1 still compare equal."""
        artifact = ContractArtifact(
            contract_name="Token", networks={"50": {**_entry(), "optimizer_enabled": 0}}
        )

        assert not needs_compilation(artifact, "50", "0xabc", False)
        assert needs_compilation(artifact, "50", "0xabc", True)


class TestMerge:
    """Tests for ArtifactStore.merge."""

    def test_creates_new_record(self) -> None:
        data = _network_data()

        merged = ArtifactStore.merge(None, "Token", "50", data)

        assert merged.contract_name == "Token"
        assert merged.get_network("50") == data
        assert merged.networks == {"50": data.to_json_dict()}

    def test_other_networks_untouched(self) -> None:
        """Only the target network's entry is replaced."""
        mainnet = _entry(keccak256="0x111", updated_at=1)
        old = _entry(keccak256="0x222", updated_at=2)
        existing = ContractArtifact(contract_name="Token", networks={"1": mainnet, "50": old})
        new = _network_data(keccak256="0x333", updated_at=3)

        merged = ArtifactStore.merge(existing, "Token", "50", new)

        assert merged.networks["1"] == mainnet
        assert merged.get_network("50") == new

    def test_existing_not_mutated(self) -> None:
        old = _entry(keccak256="0x222")
        existing = ContractArtifact(contract_name="Token", networks={"50": old})

        ArtifactStore.merge(existing, "Token", "50", _network_data(keccak256="0x333"))
        ArtifactStore.merge(existing, "Token", "42", _network_data())

        assert existing.networks == {"50": old}

    def test_extra_keys_preserved(self) -> None:
        """Fields written by other tools survive the merge."""
        existing = ContractArtifact.model_validate(
            {
                "contract_name": "Token",
                "schema_version": "1.0",
                "networks": {
                    "1": {**_entry(), "address": "0xdeadbeef"},
                },
            }
        )

        merged = ArtifactStore.merge(existing, "Token", "50", _network_data())
        dumped = merged.to_json_dict()

        assert dumped["schema_version"] == "1.0"
        assert dumped["networks"]["1"]["address"] == "0xdeadbeef"

    def test_other_network_entry_kept_verbatim(self) -> None:
        """Legacy values, key order and unknown keys of other networks survive."""
        legacy = {
            "solc_version": "0.4.11",
            "keccak256": "0x111",
            "address": "0xdeadbeef",
            "optimizer_enabled": 0,
            "abi": [],
            "unlinked_binary": "0x6060",
            "updated_at": 1,
        }
        existing = ContractArtifact.model_validate(
            {"contract_name": "Token", "networks": {"1": legacy}}
        )

        merged = ArtifactStore.merge(existing, "Token", "50", _network_data())

        dumped = merged.to_json_dict()["networks"]["1"]
        assert json.dumps(dumped, indent=4) == json.dumps(legacy, indent=4)


class TestArtifactStoreIO:
    """Tests for load, persist and ensure_directory."""

    def test_ensure_directory_creates_nested(self, tmp_path: Path) -> None:
        store = ArtifactStore(tmp_path / "a" / "b")

        store.ensure_directory()
        store.ensure_directory()

        assert (tmp_path / "a" / "b").is_dir()

    def test_ensure_directory_blocked_by_file(self, tmp_path: Path) -> None:
        blocker = tmp_path / "artifacts"
        blocker.write_text("not a directory")

        with pytest.raises(ArtifactWriteError):
            ArtifactStore(blocker).ensure_directory()

    def test_load_missing(self, store: ArtifactStore) -> None:
        assert store.load("Token") is None

    def test_persist_then_load(self, store: ArtifactStore) -> None:
        artifact = ContractArtifact(contract_name="Token", networks={"50": _entry()})

        path = store.persist(artifact)

        assert path == store.artifacts_dir / "Token.json"
        assert store.load("Token") == artifact

    def test_persist_layout(self, store: ArtifactStore) -> None:
        """Records are pretty-printed with 4-space indentation."""
        artifact = ContractArtifact(contract_name="Token", networks={"50": _entry()})

        path = store.persist(artifact)
        text = path.read_text()

        assert text.startswith('{\n    "contract_name": "Token"')
        data = json.loads(text)
        assert data["networks"]["50"]["keccak256"] == "0xabc"
        assert data["networks"]["50"]["updated_at"] == 1500000000000

    def test_persist_uses_default_file_mode(self, store: ArtifactStore) -> None:
        """Records are created with the process umask, like any other build output."""
        umask = os.umask(0o022)
        os.umask(umask)

        path = store.persist(ContractArtifact(contract_name="Token"))

        assert stat.S_IMODE(path.stat().st_mode) == 0o666 & ~umask

    def test_persist_replaces_existing_record(self, store: ArtifactStore) -> None:
        store.persist(ContractArtifact(contract_name="Token", networks={"1": _entry()}))
        store.persist(ContractArtifact(contract_name="Token", networks={"50": _entry()}))

        loaded = store.load("Token")
        assert loaded is not None
        assert list(loaded.networks) == ["50"]

    def test_persist_leaves_no_temp_files(self, store: ArtifactStore) -> None:
        store.persist(ContractArtifact(contract_name="Token", networks={"50": _entry()}))
        assert [p.name for p in store.artifacts_dir.iterdir()] == ["Token.json"]

    def test_persist_without_directory_raises(self, tmp_path: Path) -> None:
        store = ArtifactStore(tmp_path / "missing")
        artifact = ContractArtifact(contract_name="Token")

        with pytest.raises(ArtifactWriteError) as exc_info:
            store.persist(artifact)

        assert "Token.json" in exc_info.value.user_message

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            "[]",
            b"{not json",
            b"[]",
            b'{"networks": {}}',
            b'{"contract_name": "Token", "networks": []}',
            b"\xff",
            b'{"contract_name": "\xff\xfe"}',
        ],
    )
    def test_malformed_record_treated_as_absent(
        self, store: ArtifactStore, content: bytes
    ) -> None:
        (store.artifacts_dir / "Token.json").write_bytes(content)

        with capture_logs() as logs:
            assert store.load("Token") is None

        assert any(log["event"] == "artifact_malformed" for log in logs)
