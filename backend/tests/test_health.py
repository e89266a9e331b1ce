from civicsense.db import bootstrap


def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok", "service": "CivicSense Schedule API"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"


def test_readiness_reports_schedule_store_and_working_hours(client):
    ready = client.get("/api/health/ready")

    assert ready.status_code == 200
    payload = ready.json()
    assert payload["status"] == "ok"
    assert payload["store"]["reachable"] is True
    assert payload["store"]["schema_ok"] is True
    assert isinstance(payload["store"]["schedule_items"], int)
    assert payload["working_hours"] == {"start_hour": 9, "end_hour": 18}


def test_readiness_is_degraded_when_columns_are_missing(client, monkeypatch):
    monkeypatch.setattr(bootstrap, "schema_gaps", lambda connection: ([], {"schedule_items": ["priority"]}))

    ready = client.get("/api/health/ready")

    assert ready.status_code == 503
    payload = ready.json()
    assert payload["status"] == "degraded"
    assert payload["store"]["missing_columns"] == {"schedule_items": ["priority"]}
    assert payload["store"]["schedule_items"] is None


def test_security_headers_are_set(client):
    response = client.get("/api/health")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_oversized_request_body_is_rejected(client):
    response = client.post(
        "/api/schedules",
        content=b"{}",
        headers={"Content-Type": "application/json", "Content-Length": "999999999"},
    )

    assert response.status_code == 413
    assert response.json()["details"]["declared_bytes"] == 999999999
