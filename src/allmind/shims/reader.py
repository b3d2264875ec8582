"""Read ownership metadata embedded in generated shim launchers.

Strap writes a comment header into every script launcher::

    # Repo: chinvex | generated by strap
    # Type: venv
    # Venv: P:\\software\\chinvex\\.venv
    $exe = "P:\\software\\chinvex\\.venv\\Scripts\\chinvex.exe"
"""

from __future__ import annotations

import re
from pathlib import Path

from allmind.shims.types import UNKNOWN, ShimArtifact, ShimMetadata

_REPO_RE = re.compile(r"^\s*#\s*Repo:\s*([^\s|]+)", re.MULTILINE)
_TYPE_RE = re.compile(r"^\s*#\s*Type:\s*(\w+)", re.MULTILINE)
_VENV_RE = re.compile(r"^\s*#\s*Venv:\s*(\S+)", re.MULTILINE)
_EXE_RE = re.compile(r"\$exe\s*=\s*\"([^\"]+)\"")


def _first(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1) if match else None


def read_shim_metadata(text: str) -> ShimMetadata | None:
    """Parse a launcher's header, or None when it carries no strap metadata."""
    metadata = ShimMetadata(
        repo=_first(_REPO_RE, text),
        kind=_first(_TYPE_RE, text),
        venv=_first(_VENV_RE, text),
        exe=_first(_EXE_RE, text),
    )
    if metadata == ShimMetadata():
        return None
    return metadata


def read_shim_artifact(name: str, script_path: Path, companion_path: Path) -> ShimArtifact:
    companion_exists = companion_path.exists()
    try:
        text = script_path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        return ShimArtifact(
            name=name,
            script_path=str(script_path),
            companion_exists=companion_exists,
            error=str(exc),
        )
    metadata = read_shim_metadata(text)
    if metadata is None:
        return ShimArtifact(
            name=name, script_path=str(script_path), companion_exists=companion_exists
        )
    return ShimArtifact(
        name=name,
        script_path=str(script_path),
        companion_exists=companion_exists,
        repo=metadata.repo or UNKNOWN,
        kind=metadata.kind or UNKNOWN,
        venv=metadata.venv,
        exe=metadata.exe,
    )
