"""Classify on-disk shim launchers against registry shim ownership."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from allmind.config import Settings
from allmind.errors import RegistryError
from allmind.registry.store import load_registry
from allmind.registry.types import RegistryEntry
from allmind.shims.reader import read_shim_artifact
from allmind.shims.types import CollisionRecord, ShimArtifact, ShimReport

logger = logging.getLogger(__name__)


def build_ownership(
    entries: Sequence[RegistryEntry],
) -> tuple[dict[str, str], list[CollisionRecord]]:
    """Map shim name to owning entry; the first entry to claim a name wins.

    Every later entry claiming an owned name is listed after the owner in
    that shim's collision record. Collisions keep the order in which shims
    were first contested.
    """
    owners: dict[str, str] = {}
    claimants: dict[str, list[str]] = {}
    for entry in entries:
        for shim in entry.shim_names:
            owner = owners.get(shim)
            if owner is None:
                owners[shim] = entry.name
                continue
            contested = claimants.setdefault(shim, [owner])
            if entry.name not in contested:
                contested.append(entry.name)
    collisions = [
        CollisionRecord(shim=shim, owners=tuple(names))
        for shim, names in claimants.items()
        if len(names) >= 2
    ]
    return owners, collisions


def enumerate_shims(
    shims_dir: Path, *, script_suffix: str = ".ps1", companion_suffix: str = ".cmd"
) -> list[ShimArtifact]:
    """List one artifact per launcher script. Raises OSError if the dir is unreadable."""
    artifacts: list[ShimArtifact] = []
    for script in sorted(shims_dir.iterdir()):
        if not script.name.endswith(script_suffix) or script.name == script_suffix:
            continue
        if not script.is_file():
            continue
        name = script.name[: -len(script_suffix)]
        artifacts.append(
            read_shim_artifact(name, script, shims_dir / f"{name}{companion_suffix}")
        )
    return artifacts


def reconcile_shims(
    entries: Sequence[RegistryEntry],
    shims_dir: Path,
    *,
    script_suffix: str = ".ps1",
    companion_suffix: str = ".cmd",
    registry_error: str | None = None,
) -> ShimReport:
    if not shims_dir.is_dir():
        return ShimReport(error="Shims directory not found")
    try:
        artifacts = enumerate_shims(
            shims_dir, script_suffix=script_suffix, companion_suffix=companion_suffix
        )
    except OSError as exc:
        logger.warning("Cannot read shims directory %s: %s", shims_dir, exc)
        return ShimReport(error=f"Shims directory unreadable: {exc}")

    if registry_error is not None:
        return ShimReport(artifacts=tuple(artifacts), error=registry_error)

    owners, collisions = build_ownership(entries)
    orphans = sorted({artifact.name for artifact in artifacts} - owners.keys())
    return ShimReport(
        artifacts=tuple(artifacts),
        collisions=tuple(collisions),
        orphans=tuple(orphans),
    )


def reconcile_from_settings(settings: Settings) -> ShimReport:
    entries: Sequence[RegistryEntry] = ()
    registry_error: str | None = None
    try:
        registry = load_registry(settings.registry_path)
    except RegistryError as exc:
        registry_error = f"Registry unreadable: {exc}"
    else:
        if registry is not None:
            entries = registry.entries
    return reconcile_shims(
        entries,
        settings.shims_path,
        script_suffix=settings.shim_script_suffix,
        companion_suffix=settings.shim_companion_suffix,
        registry_error=registry_error,
    )


def report_payload(report: ShimReport) -> dict[str, object]:
    payload: dict[str, object] = {
        "shims": [
            {
                "name": item.name,
                "ps1Path": item.script_path,
                "cmdExists": item.companion_exists,
                "repo": item.repo,
                "type": item.kind,
                "venv": item.venv,
                "exe": item.exe,
                **({"error": item.error} if item.error else {}),
            }
            for item in report.artifacts
        ],
        "collisions": [
            {"shim": item.shim, "owners": list(item.owners)} for item in report.collisions
        ],
        "orphans": list(report.orphans),
    }
    if report.error is not None:
        payload["error"] = report.error
    return payload
