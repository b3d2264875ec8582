"""Repository snapshot cache and its process-wide accessor."""

from __future__ import annotations

from allmind.config import get_settings
from allmind.probes.local import LocalProbes
from allmind.repo_cache.builder import SnapshotBuilder, build_snapshot
from allmind.repo_cache.cache import ReconciliationCache
from allmind.repo_cache.payloads import record_payload, snapshot_payload
from allmind.repo_cache.types import CacheView, EntityRecord, Snapshot

__all__ = [
    "CacheView",
    "EntityRecord",
    "ReconciliationCache",
    "Snapshot",
    "SnapshotBuilder",
    "build_snapshot",
    "build_snapshot_builder",
    "get_repo_cache",
    "record_payload",
    "set_repo_cache",
    "snapshot_payload",
]

_repo_cache: ReconciliationCache | None = None


def build_snapshot_builder() -> SnapshotBuilder:
    settings = get_settings()
    return SnapshotBuilder(
        registry_path=settings.registry_path,
        root=settings.strap_root_path,
        probes=LocalProbes.from_settings(settings),
        history_limit=int(settings.commit_history_limit),
        max_concurrent=int(settings.scan_max_concurrent),
        probe_timeout_s=float(settings.probe_timeout_seconds),
    )


def get_repo_cache() -> ReconciliationCache:
    global _repo_cache
    if _repo_cache is None:
        settings = get_settings()
        _repo_cache = ReconciliationCache(
            build_snapshot_builder(),
            interval_seconds=float(settings.repo_refresh_interval_seconds),
        )
    return _repo_cache


def set_repo_cache(cache: ReconciliationCache) -> None:
    global _repo_cache
    _repo_cache = cache


def _reset() -> None:
    """Drop the process-wide cache (for testing)."""
    global _repo_cache
    _repo_cache = None
