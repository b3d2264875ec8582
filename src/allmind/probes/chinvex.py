"""Chinvex ingestion API client."""

from __future__ import annotations

from typing import Any

import httpx

from allmind.config import Settings
from allmind.errors import UpstreamError
from allmind.probes.types import IngestionStatus


class ChinvexClient:
    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout_s: float = 5.0,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token = token.strip()
        self._timeout_s = timeout_s
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> ChinvexClient:
        return cls(
            settings.chinvex_url,
            token=settings.chinvex_api_token,
            timeout_s=float(settings.chinvex_timeout_seconds),
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_s, transport=self._transport
            ) as client:
                response = await client.get(url, headers=self._headers())
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            raise UpstreamError(
                f"Chinvex API error: {status_code} {exc.response.reason_phrase}",
                retryable=status_code >= 500,
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Chinvex API unreachable: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError("Chinvex API returned invalid JSON") from exc

    async def health(self) -> dict[str, Any]:
        payload = await self.get_json("/health")
        return payload if isinstance(payload, dict) else {"status": payload}

    async def list_contexts(self) -> list[dict[str, Any]]:
        payload = await self.get_json("/v1/contexts")
        raw = payload.get("contexts", []) if isinstance(payload, dict) else payload
        if not isinstance(raw, list):
            raise UpstreamError("unexpected response format from Chinvex /v1/contexts")
        return [item for item in raw if isinstance(item, dict)]


def _as_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def ingestion_status_from_context(context: dict[str, Any]) -> IngestionStatus:
    processed = _as_int(context.get("files_processed"))
    if processed is None:
        processed = _as_int(context.get("file_count"))
    updated_at = context.get("updated_at")
    return IngestionStatus(
        status=str(context.get("status") or "unknown"),
        label=str(context.get("name") or ""),
        processed_count=processed,
        updated_at=str(updated_at) if updated_at else None,
    )


def index_contexts(contexts: list[dict[str, Any]]) -> dict[str, IngestionStatus]:
    """Key ingestion statuses by context name and by each alias."""
    indexed: dict[str, IngestionStatus] = {}
    for context in contexts:
        name = str(context.get("name") or "").strip()
        if not name:
            continue
        status = ingestion_status_from_context(context)
        indexed[name] = status
        aliases = context.get("aliases")
        if isinstance(aliases, list):
            for alias in aliases:
                if isinstance(alias, str) and alias.strip():
                    indexed.setdefault(alias.strip(), status)
    return indexed
