"""Async subprocess execution for probes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from allmind.errors import CommandError, ProbeTimeoutError

logger = logging.getLogger(__name__)

_DEFAULT_MAX_CAPTURE_BYTES = 256 * 1024


@dataclass(frozen=True, slots=True)
class CommandResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _to_text(value: bytes | None, max_bytes: int = _DEFAULT_MAX_CAPTURE_BYTES) -> str:
    if not value:
        return ""
    return value[:max_bytes].decode("utf-8", errors="replace").strip()


async def run_command(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout_s: float,
) -> CommandResult:
    """Run ``args`` without a shell and capture its output.

    Raises CommandError when the executable cannot be started and
    ProbeTimeoutError when it runs past ``timeout_s`` (the process is killed).
    A non-zero exit status is not an error here; callers inspect ``ok``.
    """
    argv = tuple(str(item) for item in args)
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=str(cwd) if cwd is not None else None,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise CommandError(f"{argv[0]} not found on PATH") from exc
    except OSError as exc:
        raise CommandError(f"failed to start {argv[0]}: {exc}") from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout_s)
    except TimeoutError as exc:
        proc.kill()
        await proc.wait()
        raise ProbeTimeoutError(f"{' '.join(argv)} timed out after {timeout_s:g}s") from exc
    except asyncio.CancelledError:
        if proc.returncode is None:
            proc.kill()
            await proc.wait()
        raise

    result = CommandResult(
        args=argv,
        returncode=int(proc.returncode or 0),
        stdout=_to_text(stdout),
        stderr=_to_text(stderr),
    )
    if not result.ok:
        logger.debug("Command exited %d: %s", result.returncode, " ".join(argv))
    return result
