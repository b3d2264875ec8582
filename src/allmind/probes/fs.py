"""Filesystem probes: existence, tooling markers, test command detection."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from allmind.probes.types import ToolMarkers

MEMORY_DIR = Path("docs") / "memory"
MEMORY_DOCS = {"state": "STATE.md", "constraints": "CONSTRAINTS.md"}


async def path_exists(path: Path) -> bool:
    return await asyncio.to_thread(path.exists)


async def is_git_repo(path: Path) -> bool:
    return await asyncio.to_thread((path / ".git").exists)


def _detect_markers(path: Path) -> ToolMarkers:
    return ToolMarkers(
        claude_project=(path / ".claude").exists(),
        venv=(path / ".venv").exists() or (path / "venv").exists(),
        node=(path / "package.json").exists(),
        python=(path / "pyproject.toml").exists(),
        memory=(path / MEMORY_DIR / "STATE.md").exists(),
    )


async def tool_markers(path: Path) -> ToolMarkers:
    return await asyncio.to_thread(_detect_markers, path)


def _has_npm_test(path: Path) -> bool:
    try:
        payload = json.loads((path / "package.json").read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return False
    if not isinstance(payload, dict):
        return False
    scripts = payload.get("scripts")
    return isinstance(scripts, dict) and bool(scripts.get("test"))


def _detect_test_command(path: Path, markers: ToolMarkers) -> str | None:
    if markers.node and _has_npm_test(path):
        return "npm test"
    if markers.python or (path / "tests").is_dir():
        return "pytest"
    return None


async def detect_test_command(path: Path, markers: ToolMarkers) -> str | None:
    return await asyncio.to_thread(_detect_test_command, path, markers)


def read_memory_docs(path: Path) -> dict[str, str] | None:
    """Read the repo's memory docs, or None when it has no ``docs/memory`` dir."""
    memory_dir = path / MEMORY_DIR
    if not memory_dir.is_dir():
        return None
    docs: dict[str, str] = {}
    for key, filename in MEMORY_DOCS.items():
        try:
            docs[key] = (memory_dir / filename).read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
    return docs
