from datetime import date

import pytest

from civicsense.services.timetable import filter_items_for_day


def schedule_payload(**overrides):
    payload = {
        "title": "Road Maintenance - Main Street",
        "description": "Pothole repair and resurfacing work",
        "start_time": "2024-01-20T08:00:00",
        "end_time": "2024-01-20T16:00:00",
        "location": "Main Street, Downtown",
        "scope": "Public Works",
        "priority": "high",
        "assigned_to": "Public Works Team A",
    }
    payload.update(overrides)
    return payload


def create_schedule(client, **overrides):
    response = client.post("/api/schedules", json=schedule_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


def test_create_schedule_normalizes_text_and_defaults(client):
    created = create_schedule(
        client,
        title="  Bridge Inspection  ",
        location="   ",
        recurrence_pattern="weekly",
    )

    assert created["id"]
    assert created["title"] == "Bridge Inspection"
    assert created["location"] is None
    assert created["is_recurring"] is False
    assert created["recurrence_pattern"] is None
    assert created["status"] == "pending"
    assert created["priority"] == "high"


def test_create_recurring_schedule_keeps_pattern(client):
    created = create_schedule(client, is_recurring=True, recurrence_pattern="monthly")

    assert created["is_recurring"] is True
    assert created["recurrence_pattern"] == "monthly"


def test_create_schedule_rejects_invalid_input(client):
    inverted = client.post(
        "/api/schedules",
        json=schedule_payload(start_time="2024-01-20T10:00:00", end_time="2024-01-20T10:00:00"),
    )
    assert inverted.status_code == 422

    blank_title = client.post("/api/schedules", json=schedule_payload(title="   "))
    assert blank_title.status_code == 422

    bad_pattern = client.post(
        "/api/schedules",
        json=schedule_payload(is_recurring=True, recurrence_pattern="hourly"),
    )
    assert bad_pattern.status_code == 422


def test_created_item_round_trips_through_day_filter_and_delete(client):
    created = create_schedule(client, title="Survey", start_time="2024-01-20T09:30:00", end_time="2024-01-20T10:15:00")

    listed = client.get("/api/schedules", params={"scope": "Public Works"}).json()["schedules"]
    for_day = filter_items_for_day(listed, date(2024, 1, 20))
    assert for_day == [created]

    response = client.delete(f"/api/schedules/{created['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Schedule deleted successfully"}

    listed = client.get("/api/schedules", params={"scope": "Public Works"}).json()["schedules"]
    assert filter_items_for_day(listed, date(2024, 1, 20)) == []


def test_get_missing_schedule_returns_not_found(client):
    response = client.get("/api/schedules/does-not-exist")

    assert response.status_code == 404
    assert response.json()["message"] == "Schedule with id does-not-exist not found"

    assert client.delete("/api/schedules/does-not-exist").status_code == 404
    assert client.patch("/api/schedules/does-not-exist", json={"status": "completed"}).status_code == 404


def test_update_schedule_applies_only_given_fields(client):
    created = create_schedule(client)

    response = client.patch(
        f"/api/schedules/{created['id']}",
        json={"status": "in-progress", "description": None},
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["status"] == "in-progress"
    assert updated["description"] is None
    assert updated["title"] == created["title"]
    assert updated["start_time"] == created["start_time"]


def test_update_rejects_window_that_would_invert(client):
    created = create_schedule(client)

    single_side = client.patch(f"/api/schedules/{created['id']}", json={"end_time": "2024-01-20T07:00:00"})
    assert single_side.status_code == 400
    assert single_side.json()["message"] == "end_time must be after start_time"

    both_sides = client.patch(
        f"/api/schedules/{created['id']}",
        json={"start_time": "2024-01-20T12:00:00", "end_time": "2024-01-20T11:00:00"},
    )
    assert both_sides.status_code == 422

    unchanged = client.get(f"/api/schedules/{created['id']}").json()
    assert unchanged["end_time"] == created["end_time"]


@pytest.mark.parametrize(
    "field",
    ["title", "scope", "start_time", "end_time", "is_recurring", "priority", "status"],
)
def test_update_rejects_null_for_required_fields(client, field):
    created = create_schedule(client)

    response = client.patch(f"/api/schedules/{created['id']}", json={field: None})

    assert response.status_code == 422
    assert client.get(f"/api/schedules/{created['id']}").json() == created


def test_update_accepts_null_for_optional_text(client):
    created = create_schedule(client)

    response = client.patch(
        f"/api/schedules/{created['id']}",
        json={"location": None, "assigned_to": None},
    )

    assert response.status_code == 200
    assert response.json()["location"] is None
    assert response.json()["assigned_to"] is None


def test_turning_off_recurrence_clears_pattern(client):
    created = create_schedule(client, is_recurring=True, recurrence_pattern="weekly")

    updated = client.patch(f"/api/schedules/{created['id']}", json={"is_recurring": False}).json()

    assert updated["is_recurring"] is False
    assert updated["recurrence_pattern"] is None


def test_list_schedules_filters_and_paginates(client):
    create_schedule(client, title="Water Quality Testing", scope="Water Department",
                    start_time="2024-01-20T08:30:00", end_time="2024-01-20T12:30:00")
    create_schedule(client, title="Pipeline Maintenance", scope="Water Department",
                    start_time="2024-01-21T09:00:00", end_time="2024-01-21T15:00:00", is_recurring=True,
                    recurrence_pattern="weekly")
    create_schedule(client, title="Water Meter Reading", scope="Water Department",
                    start_time="2024-01-23T08:00:00", end_time="2024-01-23T17:00:00")
    create_schedule(client, title="Park Cleanup", scope="Parks & Recreation",
                    start_time="2024-01-22T07:00:00", end_time="2024-01-22T11:00:00")

    first_page = client.get("/api/schedules", params={"scope": "Water Department", "limit": 2}).json()
    assert [item["title"] for item in first_page["schedules"]] == ["Water Quality Testing", "Pipeline Maintenance"]
    assert first_page["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

    second_page = client.get("/api/schedules", params={"scope": "Water Department", "limit": 2, "page": 2}).json()
    assert [item["title"] for item in second_page["schedules"]] == ["Water Meter Reading"]

    recurring = client.get("/api/schedules", params={"is_recurring": "true"}).json()
    assert [item["title"] for item in recurring["schedules"]] == ["Pipeline Maintenance"]

    windowed = client.get(
        "/api/schedules",
        params={"start_date": "2024-01-21T00:00:00", "end_date": "2024-01-22T23:59:59"},
    ).json()
    assert [item["title"] for item in windowed["schedules"]] == ["Pipeline Maintenance", "Park Cleanup"]


def test_calendar_and_upcoming_views(client):
    create_schedule(client, title="Already started", start_time="2024-01-20T07:00:00", end_time="2024-01-20T09:00:00")
    create_schedule(client, title="Later today", start_time="2024-01-20T14:00:00", end_time="2024-01-20T15:00:00")
    create_schedule(client, title="Next week", start_time="2024-01-26T09:00:00", end_time="2024-01-26T10:00:00")
    create_schedule(client, title="Far future", start_time="2024-02-15T09:00:00", end_time="2024-02-15T10:00:00")

    calendar = client.get("/api/schedules/calendar/2024-01-20T00:00:00/2024-01-26T23:59:59").json()
    assert [item["title"] for item in calendar] == ["Already started", "Later today", "Next week"]

    # The clock is pinned to 2024-01-20 08:30 by the test client.
    upcoming = client.get("/api/schedules/upcoming").json()
    assert [item["title"] for item in upcoming] == ["Later today", "Next week"]

    limited = client.get("/api/schedules/upcoming", params={"limit": 1}).json()
    assert [item["title"] for item in limited] == ["Later today"]

    backwards = client.get("/api/schedules/calendar/2024-01-26T00:00:00/2024-01-20T00:00:00")
    assert backwards.status_code == 400


def test_schedule_mutations_are_recorded_in_activity_log(client):
    headers = {"X-Actor": "pw-head@civicsense.local"}
    created = client.post("/api/schedules", json=schedule_payload(), headers=headers).json()
    client.patch(f"/api/schedules/{created['id']}", json={"status": "completed"}, headers=headers)
    client.delete(f"/api/schedules/{created['id']}", headers=headers)

    logs = client.get("/api/activity/logs", params={"scope": "Public Works"}).json()

    assert sorted(entry["action"] for entry in logs) == ["schedule.create", "schedule.delete", "schedule.update"]
    assert {entry["actor"] for entry in logs} == {"pw-head@civicsense.local"}
    assert {entry["entity_id"] for entry in logs} == {created["id"]}
    update_entry = next(entry for entry in logs if entry["action"] == "schedule.update")
    assert update_entry["details"] == {"status": "completed"}
