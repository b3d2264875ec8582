"""Git CLI probes: working-tree status and recent history."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from allmind.errors import CommandError
from allmind.probes.process import CommandResult, run_command
from allmind.probes.types import Commit, GitRemote, GitStatus

logger = logging.getLogger(__name__)

_FIELD_SEP = "\x1f"
_LOG_FORMAT = _FIELD_SEP.join(("%h", "%an", "%aI", "%s"))


def _require_ok(result: CommandResult) -> CommandResult:
    if not result.ok:
        detail = result.stderr or result.stdout or f"exit status {result.returncode}"
        raise CommandError(f"{' '.join(result.args[1:3])} failed: {detail}")
    return result


def parse_remotes(output: str) -> tuple[GitRemote, ...]:
    """Collapse ``git remote -v`` fetch/push pairs into unique remotes."""
    seen: dict[tuple[str, str], GitRemote] = {}
    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        key = (parts[0], parts[1])
        if key not in seen:
            seen[key] = GitRemote(name=parts[0], url=parts[1])
    return tuple(seen.values())


def parse_ahead_behind(output: str) -> tuple[int, int]:
    """Parse ``rev-list --left-right --count upstream...HEAD`` into (ahead, behind)."""
    parts = output.split()
    if len(parts) != 2:
        return 0, 0
    try:
        behind, ahead = int(parts[0]), int(parts[1])
    except ValueError:
        return 0, 0
    return ahead, behind


def parse_log(output: str) -> list[Commit]:
    commits: list[Commit] = []
    for line in output.splitlines():
        fields = line.split(_FIELD_SEP, 3)
        if len(fields) != 4 or not fields[0]:
            continue
        commits.append(
            Commit(hash=fields[0], author=fields[1], timestamp=fields[2], message=fields[3])
        )
    return commits


async def _ahead_behind(
    git: str, path: Path, branch: str, *, timeout_s: float
) -> tuple[int, int]:
    # No upstream (new branch, no remote) is normal; report zero drift.
    try:
        result = await run_command(
            [git, "rev-list", "--left-right", "--count", f"origin/{branch}...HEAD"],
            cwd=path,
            timeout_s=timeout_s,
        )
    except CommandError:
        return 0, 0
    if not result.ok:
        return 0, 0
    return parse_ahead_behind(result.stdout)


async def git_status(path: Path, *, git: str = "git", timeout_s: float = 10.0) -> GitStatus:
    status_res, branch_res, remote_res = await asyncio.gather(
        run_command([git, "status", "--porcelain"], cwd=path, timeout_s=timeout_s),
        run_command([git, "branch", "--show-current"], cwd=path, timeout_s=timeout_s),
        run_command([git, "remote", "-v"], cwd=path, timeout_s=timeout_s),
    )
    _require_ok(status_res)
    dirty = bool(status_res.stdout)
    branch = branch_res.stdout if branch_res.ok and branch_res.stdout else "unknown"
    remotes = parse_remotes(remote_res.stdout) if remote_res.ok else ()
    ahead, behind = (0, 0)
    if branch != "unknown" and remotes:
        ahead, behind = await _ahead_behind(git, path, branch, timeout_s=timeout_s)
    return GitStatus(
        status="dirty" if dirty else "clean",
        branch=branch,
        dirty=dirty,
        ahead=ahead,
        behind=behind,
        remotes=remotes,
    )


async def commit_history(
    path: Path, limit: int, *, git: str = "git", timeout_s: float = 10.0
) -> list[Commit]:
    if limit <= 0:
        return []
    result = await run_command(
        [git, "log", f"-n{limit}", f"--pretty=format:{_LOG_FORMAT}"],
        cwd=path,
        timeout_s=timeout_s,
    )
    # Fresh repos without commits exit non-zero; that is an empty history.
    if not result.ok:
        logger.debug("git log failed in %s: %s", path, result.stderr)
        return []
    return parse_log(result.stdout)[:limit]
