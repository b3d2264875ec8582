"""Repository snapshot API routes."""

import asyncio
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from allmind.config import get_settings
from allmind.errors import EntityNotFoundError
from allmind.probes.fs import read_memory_docs
from allmind.repo_cache import get_repo_cache, record_payload, snapshot_payload

router = APIRouter(prefix="/repos", tags=["api-repos"])
_limiter = Limiter(key_func=get_remote_address)


def _refresh_limit() -> str:
    return f"{max(1, int(get_settings().rate_limit_refresh_per_minute))}/minute"


@router.get("")
async def list_repos(refresh: bool = False) -> dict[str, object]:
    view = await get_repo_cache().get_snapshot(force_refresh=refresh)
    return snapshot_payload(view)


@router.post("/refresh")
@_limiter.limit(_refresh_limit)
async def refresh_repos(request: Request) -> dict[str, object]:
    del request
    view = await get_repo_cache().get_snapshot(force_refresh=True)
    return snapshot_payload(view)


@router.get("/{name}")
async def get_repo(name: str) -> dict[str, object]:
    try:
        record = get_repo_cache().get_entity(name)
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Repo not found: {name}") from exc
    payload = record_payload(record)
    memory = None
    if record.exists:
        memory = await asyncio.to_thread(read_memory_docs, Path(record.path))
    payload["memory"] = memory
    return payload
