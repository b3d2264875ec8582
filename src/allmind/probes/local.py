"""Default probe set backed by the local filesystem, git CLI and chinvex."""

from __future__ import annotations

from pathlib import Path

from allmind.config import Settings
from allmind.probes import fs, git
from allmind.probes.chinvex import ChinvexClient, index_contexts
from allmind.probes.types import Commit, GitStatus, IngestionStatus, ToolMarkers


class LocalProbes:
    def __init__(
        self,
        *,
        git_bin: str = "git",
        timeout_s: float = 10.0,
        chinvex: ChinvexClient | None = None,
    ) -> None:
        self._git = git_bin
        # git_status runs two command stages back to back; each stage must fit
        # well inside the per-probe budget the builder enforces.
        self._command_timeout_s = timeout_s / 3
        self._chinvex = chinvex

    @classmethod
    def from_settings(cls, settings: Settings) -> LocalProbes:
        chinvex = ChinvexClient.from_settings(settings) if settings.chinvex_url.strip() else None
        return cls(
            git_bin=settings.git_path,
            timeout_s=float(settings.probe_timeout_seconds),
            chinvex=chinvex,
        )

    async def path_exists(self, path: Path) -> bool:
        return await fs.path_exists(path)

    async def is_git_repo(self, path: Path) -> bool:
        return await fs.is_git_repo(path)

    async def git_status(self, path: Path) -> GitStatus:
        return await git.git_status(path, git=self._git, timeout_s=self._command_timeout_s)

    async def tool_markers(self, path: Path) -> ToolMarkers:
        return await fs.tool_markers(path)

    async def test_command(self, path: Path, markers: ToolMarkers) -> str | None:
        return await fs.detect_test_command(path, markers)

    async def commit_history(self, path: Path, limit: int) -> list[Commit]:
        return await git.commit_history(
            path, limit, git=self._git, timeout_s=self._command_timeout_s
        )

    async def ingestion_contexts(self) -> dict[str, IngestionStatus]:
        if self._chinvex is None:
            return {}
        return index_contexts(await self._chinvex.list_contexts())
