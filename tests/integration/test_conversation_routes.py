def test_start_conversation(client):
    response = client.post("/api/conversations", json={"locale": "en"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "collecting"
    assert payload["chips"] == ["≤ 500€", "≤ 600€", "≤ 700€"]
    assert [slot["slot"] for slot in payload["slots"]] == ["budget", "type", "capacity", "brand", "dimensions"]


def test_start_conversation_without_body(client):
    response = client.post("/api/conversations")

    assert response.status_code == 200
    assert response.json()["session_id"]


def test_guided_flow_completes(client):
    session_id = client.post("/api/conversations").json()["session_id"]

    first = client.post(f"/api/conversations/{session_id}/messages", json={"message": "I want a front loader under 600"})
    assert first.status_code == 200
    assert first.json()["status"] == "collecting"
    assert first.json()["preview"]["headline"] == "Preview with current filters"

    second = client.post(f"/api/conversations/{session_id}/messages", json={"chip": "8kg"})
    payload = second.json()

    assert second.status_code == 200
    assert payload["status"] == "completed"
    assert len(payload["result"]["items"]) == 3
    assert payload["metrics"]["turn_count"] == 2


def test_unknown_session_returns_404(client):
    response = client.post("/api/conversations/does-not-exist/messages", json={"message": "hello"})

    assert response.status_code == 404
    assert response.json()["error"] == "unknown_session"


def test_add_to_cart_event(client):
    session_id = client.post("/api/conversations").json()["session_id"]

    response = client.post(f"/api/conversations/{session_id}/events", json={"type": "add_to_cart"})

    assert response.status_code == 200
    assert response.json()["assistant"]["text"] == "Noted ✅"
    assert response.json()["metrics"]["add_to_cart_clicks"] == 1


def test_unhandled_errors_return_json(client, conversation_service, monkeypatch):
    session_id = client.post("/api/conversations").json()["session_id"]

    def failing_preview(*args, **kwargs):  # noqa: ANN002, ANN003
        raise RuntimeError("catalog offline")

    monkeypatch.setattr(conversation_service.search, "preview", failing_preview)

    response = client.post(f"/api/conversations/{session_id}/messages", json={"message": "top loader"})

    assert response.status_code == 500
    assert response.json()["error"] == "internal_error"
