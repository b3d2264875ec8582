"""Health and overview routes."""

import asyncio
import platform
import socket

from fastapi import APIRouter

from allmind.config import get_settings
from allmind.errors import ProbeError
from allmind.probes.chinvex import ChinvexClient
from allmind.probes.pm2 import list_processes
from allmind.repo_cache import get_repo_cache

router = APIRouter(tags=["health"])


def _row(
    service_id: str, name: str, kind: str, status: str, **extra: object
) -> dict[str, object]:
    return {"id": service_id, "name": name, "type": kind, "status": status, **extra}


@router.get("/healthz")
async def healthz() -> dict[str, bool]:
    return {"ok": True}


@router.get("/api/health")
async def health() -> dict[str, object]:
    settings = get_settings()
    services: list[dict[str, object]] = []

    client = ChinvexClient.from_settings(settings)
    try:
        details = await client.health()
        services.append(_row("chinvex", "Chinvex API", "chinvex", "online", details=details))
    except ProbeError as exc:
        services.append(_row("chinvex", "Chinvex API", "chinvex", "error", error=str(exc)))

    try:
        processes = await list_processes(
            pm2=settings.pm2_path, timeout_s=float(settings.probe_timeout_seconds)
        )
        services.append(
            _row("pm2", "PM2 Daemon", "pm2", "online", details={"processCount": len(processes)})
        )
    except ProbeError as exc:
        services.append(_row("pm2", "PM2 Daemon", "pm2", "error", error=str(exc)))

    registry_exists, shims_exists = await asyncio.gather(
        asyncio.to_thread(settings.registry_path.is_file),
        asyncio.to_thread(settings.shims_path.is_dir),
    )
    services.append(
        _row(
            "strap",
            "Strap Registry",
            "strap",
            "ok" if registry_exists else "missing",
            details={"path": str(settings.registry_path)},
        )
    )
    services.append(
        _row(
            "shims",
            "Shims Directory",
            "strap",
            "ok" if shims_exists else "missing",
            details={"path": str(settings.shims_path)},
        )
    )

    view = get_repo_cache().read()
    services.append(
        _row(
            "repo-cache",
            "Repo Cache",
            "cache",
            "pending" if view.pending else "ok",
            details={
                "generation": view.snapshot.generation,
                "lastUpdated": view.generated_at,
                "refreshing": view.refreshing,
                "count": view.snapshot.count,
            },
        )
    )

    return {
        "status": "ok",
        "host": {
            "hostname": socket.gethostname(),
            "platform": platform.system().lower(),
            "arch": platform.machine(),
        },
        "config": {
            "strapRoot": str(settings.strap_root_path),
            "chinvexUrl": settings.chinvex_url,
            "refreshIntervalSeconds": settings.repo_refresh_interval_seconds,
        },
        "services": services,
    }
