"""Background service status routes (pm2 processes and the chinvex API)."""

from fastapi import APIRouter

from allmind.config import get_settings
from allmind.errors import ProbeError
from allmind.probes.chinvex import ChinvexClient
from allmind.probes.pm2 import list_processes
from allmind.probes.types import ServiceProcess

router = APIRouter(prefix="/services", tags=["api-services"])


def _process_as_dict(proc: ServiceProcess) -> dict[str, object]:
    return {
        "id": proc.id,
        "name": proc.name,
        "type": "pm2",
        "status": proc.status,
        "pid": proc.pid,
        "pm2Id": proc.pm2_id,
        "uptime": proc.uptime_ms,
        "restarts": proc.restarts,
        "memory": proc.memory,
        "cpu": proc.cpu,
        "cwd": proc.cwd,
        "script": proc.script,
    }


@router.get("")
async def list_services() -> dict[str, object]:
    settings = get_settings()
    services: list[dict[str, object]] = []
    try:
        processes = await list_processes(
            pm2=settings.pm2_path, timeout_s=float(settings.probe_timeout_seconds)
        )
    except ProbeError as exc:
        services.append(
            {
                "id": "pm2",
                "name": "PM2 Daemon",
                "type": "system",
                "status": "error",
                "error": str(exc),
            }
        )
    else:
        services.extend(_process_as_dict(proc) for proc in processes)

    client = ChinvexClient.from_settings(settings)
    row: dict[str, object] = {
        "id": "chinvex-api",
        "name": "Chinvex API",
        "type": "http",
        "url": client.base_url,
    }
    try:
        row["details"] = await client.health()
        row["status"] = "running"
    except ProbeError as exc:
        row["status"] = "error"
        row["error"] = str(exc)
    services.append(row)
    return {"services": services}
