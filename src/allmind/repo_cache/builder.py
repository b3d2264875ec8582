"""Build one immutable snapshot of registry entries against live state."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

from allmind.errors import RegistryError
from allmind.probes.result import ProbeFailed, ProbeOk, run_probe, value_or
from allmind.probes.types import (
    NOT_A_GIT_REPO,
    GitStatus,
    IngestionStatus,
    RepoProbes,
    ToolMarkers,
)
from allmind.registry.store import load_registry
from allmind.registry.types import RegistryEntry
from allmind.repo_cache.types import EntityRecord, Snapshot

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _base_record(
    entry: RegistryEntry, path: Path, *, exists: bool, git: GitStatus
) -> EntityRecord:
    return EntityRecord(
        name=entry.name,
        path=str(path),
        exists=exists,
        git=git,
        id=entry.id,
        scope=entry.scope,
        tags=entry.tags,
        status=entry.status,
        chinvex_context=entry.chinvex_context,
        shim_count=len(entry.shims),
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )


def missing_record(entry: RegistryEntry, path: Path) -> EntityRecord:
    return _base_record(entry, path, exists=False, git=GitStatus.not_found())


def failed_record(entry: RegistryEntry, root: Path, error: BaseException) -> EntityRecord:
    """Record for an entry whose probing raised; the declared path is left unexpanded."""
    path = Path(entry.path) if entry.path else root / entry.name
    message = str(error) or error.__class__.__name__
    return _base_record(entry, path, exists=False, git=GitStatus.failed(message))


async def _probe_entry(
    entry: RegistryEntry,
    root: Path,
    probes: RepoProbes,
    ingestion: dict[str, IngestionStatus],
    *,
    history_limit: int,
    timeout_s: float,
) -> EntityRecord:
    path = entry.resolve_path(root)
    exists = await run_probe("path_exists", probes.path_exists(path), timeout_s=timeout_s)
    if not value_or(exists, False):
        return missing_record(entry, path)

    is_repo = value_or(
        await run_probe("is_git_repo", probes.is_git_repo(path), timeout_s=timeout_s), False
    )
    if is_repo:
        git_result, markers_result, history_result = await asyncio.gather(
            run_probe("git_status", probes.git_status(path), timeout_s=timeout_s),
            run_probe("tool_markers", probes.tool_markers(path), timeout_s=timeout_s),
            run_probe(
                "commit_history",
                probes.commit_history(path, history_limit),
                timeout_s=timeout_s,
            ),
        )
    else:
        git_result = ProbeOk(GitStatus.failed(NOT_A_GIT_REPO))
        markers_result = await run_probe(
            "tool_markers", probes.tool_markers(path), timeout_s=timeout_s
        )
        history_result = ProbeOk([])

    if isinstance(git_result, ProbeFailed):
        logger.warning("git status failed for %s: %s", entry.name, git_result.error)
        git = GitStatus.failed(git_result.error)
    else:
        git = git_result.value
    markers = value_or(markers_result, ToolMarkers.none())
    test_command = value_or(
        await run_probe("test_command", probes.test_command(path, markers), timeout_s=timeout_s),
        None,
    )
    history = value_or(history_result, [])
    context = entry.chinvex_context
    return replace(
        _base_record(entry, path, exists=True, git=git),
        tools=markers,
        test_command=test_command,
        recent_commits=tuple(history[:history_limit]),
        ingestion=ingestion.get(context) if context else None,
    )


async def build_snapshot(
    entries: Sequence[RegistryEntry],
    *,
    root: Path,
    probes: RepoProbes,
    generation: int,
    history_limit: int = 10,
    max_concurrent: int = 8,
    probe_timeout_s: float = 10.0,
) -> Snapshot:
    """Probe every entry concurrently and return records in registry order."""
    started = time.monotonic()
    ingestion_result = await run_probe(
        "ingestion_contexts", probes.ingestion_contexts(), timeout_s=probe_timeout_s
    )
    ingestion = value_or(ingestion_result, {})
    semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def guarded(entry: RegistryEntry) -> EntityRecord:
        async with semaphore:
            return await _probe_entry(
                entry,
                root,
                probes,
                ingestion,
                history_limit=history_limit,
                timeout_s=probe_timeout_s,
            )

    results = await asyncio.gather(*(guarded(entry) for entry in entries), return_exceptions=True)
    records: list[EntityRecord] = []
    for entry, result in zip(entries, results, strict=True):
        if isinstance(result, EntityRecord):
            records.append(result)
            continue
        if isinstance(result, asyncio.CancelledError):
            raise result
        logger.error("Probing %s failed unexpectedly: %r", entry.name, result)
        records.append(failed_record(entry, root, result))

    return Snapshot(
        generation=generation,
        root=str(root),
        records=tuple(records),
        generated_at=_now_iso(),
        duration_ms=int((time.monotonic() - started) * 1000),
    )


def empty_snapshot(root: Path | str, generation: int, *, error: str | None = None) -> Snapshot:
    return Snapshot(
        generation=generation,
        root=str(root),
        records=(),
        generated_at=_now_iso(),
        error=error,
    )


class SnapshotBuilder:
    """Loads the registry and builds a snapshot from it on each call."""

    def __init__(
        self,
        *,
        registry_path: Path,
        root: Path,
        probes: RepoProbes,
        history_limit: int = 10,
        max_concurrent: int = 8,
        probe_timeout_s: float = 10.0,
    ) -> None:
        self.registry_path = registry_path
        self.root = root
        self.probes = probes
        self.history_limit = history_limit
        self.max_concurrent = max_concurrent
        self.probe_timeout_s = probe_timeout_s

    async def build(self, generation: int) -> Snapshot:
        try:
            registry = await asyncio.to_thread(load_registry, self.registry_path)
        except RegistryError as exc:
            logger.error("Registry unreadable, publishing empty snapshot: %s", exc)
            return empty_snapshot(self.root, generation, error=str(exc))
        if registry is None or not registry.entries:
            logger.warning("No repos found in registry %s", self.registry_path)
            return empty_snapshot(self.root, generation)
        return await build_snapshot(
            registry.entries,
            root=self.root,
            probes=self.probes,
            generation=generation,
            history_limit=self.history_limit,
            max_concurrent=self.max_concurrent,
            probe_timeout_s=self.probe_timeout_s,
        )
