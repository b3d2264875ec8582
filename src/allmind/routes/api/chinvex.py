"""Read-only passthrough to the chinvex ingestion API."""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from allmind.config import get_settings
from allmind.errors import UpstreamError
from allmind.probes.chinvex import ChinvexClient

router = APIRouter(prefix="/chinvex", tags=["api-chinvex"])


def get_chinvex_client() -> ChinvexClient:
    return ChinvexClient.from_settings(get_settings())


def _upstream_failure(client: ChinvexClient, exc: UpstreamError) -> JSONResponse:
    return JSONResponse(
        status_code=502, content={"error": str(exc), "upstream": client.base_url}
    )


@router.get("/health", response_model=None)
async def chinvex_health(
    client: ChinvexClient = Depends(get_chinvex_client),  # noqa: B008
) -> dict[str, Any] | JSONResponse:
    try:
        return await client.health()
    except UpstreamError as exc:
        return _upstream_failure(client, exc)


@router.get("/contexts", response_model=None)
async def chinvex_contexts(
    client: ChinvexClient = Depends(get_chinvex_client),  # noqa: B008
) -> dict[str, Any] | JSONResponse:
    try:
        contexts = await client.list_contexts()
    except UpstreamError as exc:
        return _upstream_failure(client, exc)
    return {"contexts": contexts}
