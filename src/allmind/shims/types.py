"""Shim reconciliation data models."""

from __future__ import annotations

from dataclasses import dataclass, field

UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ShimMetadata:
    repo: str | None = None
    kind: str | None = None
    venv: str | None = None
    exe: str | None = None


@dataclass(frozen=True, slots=True)
class ShimArtifact:
    name: str
    script_path: str
    companion_exists: bool
    repo: str = UNKNOWN
    kind: str = UNKNOWN
    venv: str | None = None
    exe: str | None = None
    error: str | None = None


@dataclass(frozen=True, slots=True)
class CollisionRecord:
    shim: str
    owners: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ShimReport:
    artifacts: tuple[ShimArtifact, ...] = ()
    collisions: tuple[CollisionRecord, ...] = ()
    orphans: tuple[str, ...] = ()
    error: str | None = None


@dataclass(frozen=True, slots=True)
class DoctorCheck:
    id: str
    name: str
    passed: bool
    severity: str
    details: dict[str, object] = field(default_factory=dict)
