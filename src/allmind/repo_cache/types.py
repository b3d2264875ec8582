"""Types for reconciled repository snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field

from allmind.probes.types import Commit, GitStatus, IngestionStatus, ToolMarkers


@dataclass(frozen=True, slots=True)
class EntityRecord:
    name: str
    path: str
    exists: bool
    git: GitStatus
    tools: ToolMarkers = field(default_factory=ToolMarkers)
    test_command: str | None = None
    recent_commits: tuple[Commit, ...] = ()
    ingestion: IngestionStatus | None = None
    id: str | None = None
    scope: str | None = None
    tags: tuple[str, ...] = ()
    status: str | None = None
    chinvex_context: str | None = None
    shim_count: int = 0
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True, slots=True)
class SnapshotSummary:
    total: int
    present: int
    missing: int
    dirty: int
    git_errors: int


@dataclass(frozen=True, slots=True)
class Snapshot:
    generation: int
    root: str
    records: tuple[EntityRecord, ...] = ()
    generated_at: str | None = None
    duration_ms: int = 0
    error: str | None = None

    @property
    def count(self) -> int:
        return len(self.records)

    def get(self, name: str) -> EntityRecord | None:
        for record in self.records:
            if record.name == name:
                return record
        return None

    def summary(self) -> SnapshotSummary:
        present = [record for record in self.records if record.exists]
        return SnapshotSummary(
            total=len(self.records),
            present=len(present),
            missing=len(self.records) - len(present),
            dirty=sum(1 for record in present if record.git.dirty),
            git_errors=sum(1 for record in present if not record.git.ok),
        )


@dataclass(frozen=True, slots=True)
class CacheView:
    """What a reader sees: the current snapshot plus freshness flags."""

    snapshot: Snapshot
    pending: bool
    refreshing: bool

    @property
    def generated_at(self) -> str | None:
        return self.snapshot.generated_at
