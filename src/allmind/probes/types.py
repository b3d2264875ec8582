"""Value types returned by live-state probes."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

PATH_NOT_FOUND = "Repository path does not exist"
NOT_A_GIT_REPO = "Not a git repository"


@dataclass(frozen=True, slots=True)
class GitRemote:
    name: str
    url: str


@dataclass(frozen=True, slots=True)
class GitStatus:
    status: str
    branch: str | None = None
    dirty: bool = False
    ahead: int = 0
    behind: int = 0
    remotes: tuple[GitRemote, ...] = ()
    error: str | None = None

    @classmethod
    def failed(cls, error: str) -> GitStatus:
        return cls(status="error", error=error)

    @classmethod
    def not_found(cls) -> GitStatus:
        return cls(status="missing", error=PATH_NOT_FOUND)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class ToolMarkers:
    claude_project: bool = False
    venv: bool = False
    node: bool = False
    python: bool = False
    memory: bool = False

    @classmethod
    def none(cls) -> ToolMarkers:
        return cls()

    def any(self) -> bool:
        return self.claude_project or self.venv or self.node or self.python or self.memory


@dataclass(frozen=True, slots=True)
class Commit:
    hash: str
    author: str
    timestamp: str
    message: str


@dataclass(frozen=True, slots=True)
class IngestionStatus:
    status: str
    label: str
    processed_count: int | None = None
    updated_at: str | None = None


@dataclass(frozen=True, slots=True)
class ServiceProcess:
    id: str
    name: str
    status: str
    pid: int | None = None
    pm2_id: int | None = None
    uptime_ms: int | None = None
    restarts: int = 0
    memory: int | None = None
    cpu: float | None = None
    cwd: str | None = None
    script: str | None = None


class RepoProbes(Protocol):
    """Live-state probes consumed by the snapshot builder.

    Implementations may raise freely; the builder wraps every call with
    ``run_probe`` and degrades failures to sentinel values.
    """

    async def path_exists(self, path: Path) -> bool: ...

    async def is_git_repo(self, path: Path) -> bool: ...

    async def git_status(self, path: Path) -> GitStatus: ...

    async def tool_markers(self, path: Path) -> ToolMarkers: ...

    async def test_command(self, path: Path, markers: ToolMarkers) -> str | None: ...

    async def commit_history(self, path: Path, limit: int) -> list[Commit]: ...

    async def ingestion_contexts(self) -> dict[str, IngestionStatus]: ...
