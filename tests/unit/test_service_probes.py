import json

import httpx
import pytest

from allmind.errors import CommandError, UpstreamError
from allmind.probes.chinvex import ChinvexClient, index_contexts
from allmind.probes.pm2 import parse_jlist


def test_parse_jlist() -> None:
    output = json.dumps(
        [
            {
                "pm_id": 0,
                "name": "godex",
                "pid": 4242,
                "pm2_env": {
                    "status": "online",
                    "pm_uptime": 1_000,
                    "restart_time": 2,
                    "pm_cwd": "/srv/godex",
                    "pm_exec_path": "/srv/godex/server.js",
                },
                "monit": {"memory": 1024, "cpu": 1.5},
            },
            {"pm_id": 3, "pm2_env": {}},
            "not-a-process",
        ]
    )
    processes = parse_jlist(output, now_ms=5_000)
    assert [proc.id for proc in processes] == ["pm2-0", "pm2-3"]
    first = processes[0]
    assert first.name == "godex"
    assert first.status == "online"
    assert first.uptime_ms == 4_000
    assert first.restarts == 2
    assert first.cpu == 1.5
    second = processes[1]
    assert second.name == "pm2-3"
    assert second.status == "unknown"
    assert second.uptime_ms is None


def test_parse_jlist_rejects_garbage() -> None:
    with pytest.raises(CommandError):
        parse_jlist("pm2 not running")
    assert parse_jlist("") == []


def test_index_contexts_by_name_and_alias() -> None:
    indexed = index_contexts(
        [
            {
                "name": "chinvex",
                "aliases": ["cx", ""],
                "status": "complete",
                "files_processed": 12,
                "updated_at": "2026-10-01T00:00:00Z",
            },
            {"name": "notes", "file_count": "7"},
            {"status": "orphaned"},
        ]
    )
    assert set(indexed) == {"chinvex", "cx", "notes"}
    assert indexed["cx"] is indexed["chinvex"]
    assert indexed["chinvex"].processed_count == 12
    assert indexed["notes"].processed_count == 7
    assert indexed["notes"].status == "unknown"
    assert indexed["notes"].updated_at is None


def _client(handler) -> ChinvexClient:
    return ChinvexClient(
        "http://chinvex.test/", token="secret", transport=httpx.MockTransport(handler)
    )


@pytest.mark.asyncio
async def test_chinvex_list_contexts_sends_token() -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization", "")
        seen["path"] = request.url.path
        return httpx.Response(200, json={"contexts": [{"name": "a"}, "junk"]})

    contexts = await _client(handler).list_contexts()
    assert contexts == [{"name": "a"}]
    assert seen == {"auth": "Bearer secret", "path": "/v1/contexts"}


@pytest.mark.asyncio
async def test_chinvex_server_error_is_retryable() -> None:
    client = _client(lambda request: httpx.Response(503))
    with pytest.raises(UpstreamError) as excinfo:
        await client.health()
    assert excinfo.value.retryable is True


@pytest.mark.asyncio
async def test_chinvex_client_error_is_not_retryable() -> None:
    client = _client(lambda request: httpx.Response(401))
    with pytest.raises(UpstreamError) as excinfo:
        await client.health()
    assert excinfo.value.retryable is False


@pytest.mark.asyncio
async def test_chinvex_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError, match="unreachable"):
        await _client(handler).health()
