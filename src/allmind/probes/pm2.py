"""pm2 process-manager probe."""

from __future__ import annotations

import json
import time
from typing import Any

from allmind.errors import CommandError
from allmind.probes.process import run_command
from allmind.probes.types import ServiceProcess


def _as_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return int(value)


def parse_jlist(output: str, *, now_ms: int | None = None) -> list[ServiceProcess]:
    try:
        raw = json.loads(output or "[]")
    except json.JSONDecodeError as exc:
        raise CommandError(f"pm2 jlist returned invalid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise CommandError("pm2 jlist returned a non-list payload")
    now = now_ms if now_ms is not None else int(time.time() * 1000)
    processes: list[ServiceProcess] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        env: dict[str, Any] = item.get("pm2_env") or {}
        monit: dict[str, Any] = item.get("monit") or {}
        pm_id = _as_int(item.get("pm_id"))
        started = _as_int(env.get("pm_uptime"))
        cpu = monit.get("cpu")
        processes.append(
            ServiceProcess(
                id=f"pm2-{pm_id}",
                name=str(item.get("name") or f"pm2-{pm_id}"),
                status=str(env.get("status") or "unknown"),
                pid=_as_int(item.get("pid")),
                pm2_id=pm_id,
                uptime_ms=(now - started) if started else None,
                restarts=_as_int(env.get("restart_time")) or 0,
                memory=_as_int(monit.get("memory")),
                cpu=float(cpu) if isinstance(cpu, int | float) else None,
                cwd=env.get("pm_cwd"),
                script=env.get("pm_exec_path"),
            )
        )
    return processes


async def list_processes(*, pm2: str = "pm2", timeout_s: float = 10.0) -> list[ServiceProcess]:
    result = await run_command([pm2, "jlist"], timeout_s=timeout_s)
    if not result.ok:
        raise CommandError(f"pm2 jlist failed: {result.stderr or result.returncode}")
    return parse_jlist(result.stdout)
