from fastapi.testclient import TestClient


def test_create_event(client: TestClient, admin_user, auth_headers):
    """Admins create events open for matching"""
    response = client.post(
        "/api/events",
        json={"title": "Harvest Supper", "description": "Autumn menu", "event_date": "2026-11-14", "total_spots": 36},
        headers=auth_headers(admin_user),
    )

    assert response.status_code == 201
    event_data = response.json()
    assert event_data["title"] == "Harvest Supper"
    assert event_data["event_date"] == "2026-11-14"
    assert event_data["total_spots"] == 36
    assert event_data["matching_status"] == "open"
    assert event_data["matching_triggered_at"] is None


def test_create_event_requires_admin(client: TestClient, make_user, auth_headers):
    response = client.post("/api/events", json={"title": "Potluck"}, headers=auth_headers(make_user()))
    assert response.status_code == 403


def test_create_event_requires_identity(client: TestClient):
    response = client.post("/api/events", json={"title": "Potluck"})
    assert response.status_code == 401


def test_events_rejects_empty_title(client: TestClient, admin_user, auth_headers):
    """Test that events reject an empty title"""
    response = client.post("/api/events", json={"title": "   "}, headers=auth_headers(admin_user))

    assert response.status_code == 422
    error_detail = response.json()["detail"]
    assert any("title cannot be empty" in str(err) for err in error_detail)


def test_events_rejects_negative_spots(client: TestClient, admin_user, auth_headers):
    response = client.post(
        "/api/events",
        json={"title": "Potluck", "total_spots": -1},  # Invalid: must be >= 0
        headers=auth_headers(admin_user),
    )

    assert response.status_code == 422


def test_list_and_get_events(client: TestClient, make_event):
    first = make_event(title="First")
    second = make_event(title="Second")

    response = client.get("/api/events")
    assert response.status_code == 200
    assert [e["id"] for e in response.json()] == [second.id, first.id]

    response = client.get(f"/api/events/{first.id}")
    assert response.status_code == 200
    assert response.json()["title"] == "First"


def test_get_event_not_found(client: TestClient):
    response = client.get("/api/events/999")
    assert response.status_code == 404


def test_health(client: TestClient):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["app_name"] == "Dinner Circles API"
