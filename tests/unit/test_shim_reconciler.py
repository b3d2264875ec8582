import json
from pathlib import Path

import pytest

from allmind.config import get_settings
from allmind.registry.types import RegistryEntry, ShimBinding
from allmind.shims.reader import read_shim_artifact, read_shim_metadata
from allmind.shims.reconciler import (
    build_ownership,
    reconcile_from_settings,
    reconcile_shims,
    report_payload,
)
from allmind.shims.types import UNKNOWN, CollisionRecord

LAUNCHER = """# Repo: chinvex | generated by strap
# Type: venv
# Venv: P:\\software\\chinvex\\.venv
$exe = "P:\\software\\chinvex\\.venv\\Scripts\\chinvex.exe"
& $exe @args
"""


def _entry(name: str, *shims: str) -> RegistryEntry:
    return RegistryEntry(name=name, shims=tuple(ShimBinding(name=shim) for shim in shims))


def _shims_dir(tmp_path: Path, *names: str, companions: bool = True) -> Path:
    shims_dir = tmp_path / "bin"
    shims_dir.mkdir()
    for name in names:
        (shims_dir / f"{name}.ps1").write_text(f"# Repo: {name}\n", encoding="utf-8")
        if companions:
            (shims_dir / f"{name}.cmd").write_text("@echo off\n", encoding="utf-8")
    return shims_dir


def test_first_claim_wins() -> None:
    owners, collisions = build_ownership([_entry("A", "x"), _entry("B", "x")])
    assert owners == {"x": "A"}
    assert collisions == [CollisionRecord(shim="x", owners=("A", "B"))]


def test_ownership_follows_registry_order() -> None:
    owners, collisions = build_ownership([_entry("B", "x"), _entry("A", "x")])
    assert owners == {"x": "B"}
    assert collisions == [CollisionRecord(shim="x", owners=("B", "A"))]


def test_three_way_collision_lists_every_claimant() -> None:
    _, collisions = build_ownership([_entry("A", "x"), _entry("B", "x"), _entry("C", "x", "y")])
    assert collisions == [CollisionRecord(shim="x", owners=("A", "B", "C"))]


def test_repeat_claim_by_owner_is_not_a_collision() -> None:
    owners, collisions = build_ownership([_entry("A", "x", "x")])
    assert owners == {"x": "A"}
    assert collisions == []


def test_orphans_are_exactly_unclaimed_artifacts(tmp_path: Path) -> None:
    shims_dir = _shims_dir(tmp_path, "owned", "stray", "leftover")
    report = reconcile_shims([_entry("A", "owned", "not-on-disk")], shims_dir)
    assert [artifact.name for artifact in report.artifacts] == ["leftover", "owned", "stray"]
    assert report.orphans == ("leftover", "stray")
    assert report.collisions == ()
    assert report.error is None


def test_missing_shims_dir_is_reported(tmp_path: Path) -> None:
    report = reconcile_shims([_entry("A", "x")], tmp_path / "bin")
    assert report.error == "Shims directory not found"
    assert report.artifacts == ()
    assert report.orphans == ()


def test_registry_error_suppresses_classification(tmp_path: Path) -> None:
    shims_dir = _shims_dir(tmp_path, "one")
    report = reconcile_shims([], shims_dir, registry_error="Registry unreadable: bad")
    assert [artifact.name for artifact in report.artifacts] == ["one"]
    assert report.orphans == ()
    assert report.error == "Registry unreadable: bad"


def test_non_script_files_are_ignored(tmp_path: Path) -> None:
    shims_dir = _shims_dir(tmp_path, "tool")
    (shims_dir / "notes.txt").write_text("hi", encoding="utf-8")
    (shims_dir / "nested.ps1").mkdir()
    report = reconcile_shims([], shims_dir)
    assert [artifact.name for artifact in report.artifacts] == ["tool"]


def test_metadata_header_is_parsed() -> None:
    metadata = read_shim_metadata(LAUNCHER)
    assert metadata is not None
    assert metadata.repo == "chinvex"
    assert metadata.kind == "venv"
    assert metadata.venv == "P:\\software\\chinvex\\.venv"
    assert metadata.exe == "P:\\software\\chinvex\\.venv\\Scripts\\chinvex.exe"


def test_launcher_without_metadata(tmp_path: Path) -> None:
    assert read_shim_metadata("& node index.js @args\n") is None
    script = tmp_path / "plain.ps1"
    script.write_text("& node index.js\n", encoding="utf-8")
    artifact = read_shim_artifact("plain", script, tmp_path / "plain.cmd")
    assert artifact.repo == UNKNOWN
    assert artifact.kind == UNKNOWN
    assert artifact.companion_exists is False
    assert artifact.error is None


def test_report_payload_shape(tmp_path: Path) -> None:
    shims_dir = _shims_dir(tmp_path, "x")
    report = reconcile_shims([_entry("A", "x"), _entry("B", "x")], shims_dir)
    payload = report_payload(report)
    assert payload["collisions"] == [{"shim": "x", "owners": ["A", "B"]}]
    assert payload["orphans"] == []
    row = payload["shims"][0]
    assert row["name"] == "x"
    assert row["cmdExists"] is True
    assert row["repo"] == "x"
    assert "error" not in payload


def test_reconcile_from_settings_without_registry(tmp_path: Path) -> None:
    settings = get_settings()
    settings.shims_path.mkdir(parents=True)
    (settings.shims_path / "lonely.ps1").write_text("", encoding="utf-8")
    report = reconcile_from_settings(settings)
    assert report.orphans == ("lonely",)
    assert report.error is None


def test_reconcile_from_settings_with_registry(tmp_path: Path) -> None:
    settings = get_settings()
    settings.shims_path.mkdir(parents=True)
    (settings.shims_path / "a.ps1").write_text("", encoding="utf-8")
    settings.registry_path.parent.mkdir(parents=True)
    settings.registry_path.write_text(
        json.dumps(
            {"repos": [{"name": "first", "shims": ["a"]}, {"name": "second", "shims": ["a"]}]}
        ),
        encoding="utf-8",
    )
    report = reconcile_from_settings(settings)
    assert report.orphans == ()
    assert report.collisions == (CollisionRecord(shim="a", owners=("first", "second")),)


def test_reconcile_from_settings_with_broken_registry(tmp_path: Path) -> None:
    settings = get_settings()
    settings.shims_path.mkdir(parents=True)
    settings.registry_path.parent.mkdir(parents=True)
    settings.registry_path.write_text("[", encoding="utf-8")
    report = reconcile_from_settings(settings)
    assert report.error is not None
    assert report.error.startswith("Registry unreadable")


def test_reconcile_from_settings_with_undecodable_registry(tmp_path: Path) -> None:
    settings = get_settings()
    settings.shims_path.mkdir(parents=True)
    (settings.shims_path / "a.ps1").write_text("", encoding="utf-8")
    settings.registry_path.parent.mkdir(parents=True)
    settings.registry_path.write_bytes(b'{"repos": [{"name": "\xff", "shims": ["a"]}]}')
    report = reconcile_from_settings(settings)
    assert [artifact.name for artifact in report.artifacts] == ["a"]
    assert report.orphans == ()
    assert report.error is not None
    assert "cannot decode" in report.error


def test_unreadable_launcher_keeps_artifact_with_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    shims_dir = _shims_dir(tmp_path, "locked", "open")
    original_read_text = Path.read_text

    def read_text(self: Path, *args, **kwargs) -> str:
        if self.name == "locked.ps1":
            raise PermissionError(13, "Permission denied", str(self))
        return original_read_text(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", read_text)
    report = reconcile_shims([_entry("A", "open")], shims_dir)
    locked = next(artifact for artifact in report.artifacts if artifact.name == "locked")
    assert locked.repo == UNKNOWN
    assert locked.kind == UNKNOWN
    assert locked.companion_exists is True
    assert locked.error is not None
    assert "Permission denied" in locked.error
    assert report.orphans == ("locked",)
    assert "error" in report_payload(report)["shims"][0]


def test_unreadable_shims_dir_is_reported(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    shims_dir = _shims_dir(tmp_path, "one")

    def iterdir(self: Path):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "iterdir", iterdir)
    report = reconcile_shims([_entry("A", "one")], shims_dir)
    assert report.error is not None
    assert report.error.startswith("Shims directory unreadable")
    assert report.artifacts == ()
    assert report.orphans == ()
