"""Single-flight reconciliation cache for repository snapshots."""

from __future__ import annotations

import asyncio
import itertools
import logging
from pathlib import Path
from typing import Protocol

from allmind.errors import EntityNotFoundError
from allmind.logging import log_context
from allmind.repo_cache.builder import empty_snapshot
from allmind.repo_cache.types import CacheView, EntityRecord, Snapshot

logger = logging.getLogger(__name__)


class Builder(Protocol):
    root: Path

    async def build(self, generation: int) -> Snapshot: ...


class ReconciliationCache:
    """Owns the current snapshot and the single in-flight scan.

    ``read`` never performs I/O. ``refresh`` starts a scan only when none is
    running; concurrent callers all await the same scan task. The finished
    snapshot replaces ``current`` with one assignment, so readers only ever
    see complete snapshots.
    """

    def __init__(self, builder: Builder, *, interval_seconds: float = 30.0) -> None:
        self._builder = builder
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._interval_seconds = float(interval_seconds)
        self._current: Snapshot | None = None
        self._inflight: asyncio.Task[Snapshot] | None = None
        self._generations = itertools.count(1)
        self._shutdown = asyncio.Event()

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    @property
    def refreshing(self) -> bool:
        task = self._inflight
        return task is not None and not task.done()

    def read(self) -> CacheView:
        current = self._current
        if current is None:
            return CacheView(
                snapshot=Snapshot(generation=0, root=str(self._builder.root)),
                pending=True,
                refreshing=self.refreshing,
            )
        return CacheView(snapshot=current, pending=False, refreshing=self.refreshing)

    async def refresh(self) -> Snapshot:
        task = self._inflight
        if task is None or task.done():
            task = asyncio.create_task(self._scan(next(self._generations)))
            self._inflight = task
            task.add_done_callback(self._clear_inflight)
        else:
            logger.debug("Repo cache refresh already in progress, joining")
        return await asyncio.shield(task)

    def _clear_inflight(self, task: asyncio.Task[Snapshot]) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _scan(self, generation: int) -> Snapshot:
        with log_context(scan_generation=generation):
            return await self._build_and_publish(generation)

    async def _build_and_publish(self, generation: int) -> Snapshot:
        logger.info("Starting repo cache refresh (generation %d)", generation)
        try:
            snapshot = await self._builder.build(generation)
        except Exception:
            logger.exception("Repo cache refresh failed (generation %d)", generation)
            if self._current is not None:
                return self._current
            snapshot = empty_snapshot(
                self._builder.root, generation, error="snapshot build failed"
            )
        self._current = snapshot
        logger.info(
            "Repo cache refreshed: %d repos in %dms (generation %d)",
            snapshot.count,
            snapshot.duration_ms,
            generation,
        )
        return snapshot

    async def get_snapshot(self, force_refresh: bool = False) -> CacheView:
        if force_refresh:
            await self.refresh()
        return self.read()

    def get_entity(self, name: str) -> EntityRecord:
        record = self.read().snapshot.get(name)
        if record is None:
            raise EntityNotFoundError(f"repo not found: {name}")
        return record

    async def run(self) -> None:
        """Refresh on a fixed interval until ``shutdown`` is called."""
        while not self._shutdown.is_set():
            await self.refresh()
            try:
                await asyncio.wait_for(self._shutdown.wait(), timeout=self._interval_seconds)
            except TimeoutError:
                continue

    async def shutdown(self) -> None:
        self._shutdown.set()
        task = self._inflight
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
