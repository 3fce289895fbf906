from shopbot import main


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "rid-123"})

    assert response.headers["X-Request-ID"] == "rid-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_ready_reports_catalog_state(client):
    response = client.get("/ready")

    assert response.status_code == 200
    payload = response.json()
    expected = "ok" if main.product_store.count() else "degraded"
    assert payload["status"] == expected
    assert "products_db" in payload["components"]


def test_metrics_count_turns(client):
    before = client.get("/metrics").json()["total_turns"]
    session_id = client.post("/api/conversations").json()["session_id"]
    client.post(f"/api/conversations/{session_id}/messages", json={"message": "top loader please"})

    payload = client.get("/metrics").json()
    assert payload["total_turns"] == before + 1
    assert payload["sessions_started"] >= 1


def test_search_endpoint(client):
    response = client.get("/api/search", params={"q": "slim top loader under 500", "k": 2})

    assert response.status_code == 200
    payload = response.json()
    assert payload["filter"]["type"] == "top"
    assert payload["filter"]["max_price"] == 500
    assert payload["size_before_rerank"] == 2
    assert [item["id"] for item in payload["results"]] == [6, 7]
    assert payload["explanation"]


def test_search_requires_query(client):
    assert client.get("/api/search").status_code == 400


def test_openapi_contains_expected_paths(client):
    paths = client.get("/openapi.json").json()["paths"]

    for path in (
        "/api/conversations",
        "/api/conversations/{session_id}/messages",
        "/api/conversations/{session_id}/events",
        "/api/search",
        "/health",
        "/ready",
        "/metrics",
    ):
        assert path in paths, f"Missing {path} from OpenAPI paths"
