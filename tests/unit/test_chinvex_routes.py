import httpx
import pytest
from fastapi.testclient import TestClient

from allmind.main import app
from allmind.probes.chinvex import ChinvexClient
from allmind.routes.api.chinvex import get_chinvex_client


@pytest.fixture
def upstream():
    handlers: dict[str, object] = {}

    def dispatch(request: httpx.Request) -> httpx.Response:
        handler = handlers.get(request.url.path)
        if handler is None:
            return httpx.Response(404)
        return handler(request)

    client = ChinvexClient("http://chinvex.test", transport=httpx.MockTransport(dispatch))
    app.dependency_overrides[get_chinvex_client] = lambda: client
    yield handlers
    app.dependency_overrides.pop(get_chinvex_client, None)


def test_health_passthrough(upstream) -> None:
    upstream["/health"] = lambda request: httpx.Response(200, json={"status": "ok"})
    response = TestClient(app).get("/api/chinvex/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_health_upstream_down_is_502(upstream) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    upstream["/health"] = refuse
    response = TestClient(app).get("/api/chinvex/health")
    assert response.status_code == 502
    data = response.json()
    assert data["upstream"] == "http://chinvex.test"
    assert "unreachable" in data["error"]


def test_contexts_passthrough(upstream) -> None:
    upstream["/v1/contexts"] = lambda request: httpx.Response(
        200, json={"contexts": [{"name": "chinvex", "files_processed": 3}]}
    )
    response = TestClient(app).get("/api/chinvex/contexts")
    assert response.status_code == 200
    assert response.json() == {"contexts": [{"name": "chinvex", "files_processed": 3}]}


def test_contexts_upstream_error_is_502(upstream) -> None:
    upstream["/v1/contexts"] = lambda request: httpx.Response(500)
    response = TestClient(app).get("/api/chinvex/contexts")
    assert response.status_code == 502
    assert "500" in response.json()["error"]
