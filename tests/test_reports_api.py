# tests/test_reports_api.py
from datetime import datetime, timedelta, timezone
from http import HTTPStatus

from factories import calendar_event

DAY = datetime(2025, 10, 6, tzinfo=timezone.utc)


def test_stats_for_team_range(client):
    team_id = "team-reports-api"
    client.post(
        "/teams",
        json={"id": team_id, "name": "Reports", "slug": "reports-api"},
    )
    client.post(
        "/internal/calendar-webhook",
        json=calendar_event(
            "rep-1",
            start=DAY + timedelta(hours=10),
            minutes=30,
            team_id=team_id,
            recurring_event_id="rep-weekly",
        ),
    )
    client.post(
        "/internal/calendar-webhook",
        json=calendar_event("rep-2", start=DAY + timedelta(days=1, hours=10), minutes=60, team_id=team_id),
    )
    for user_id, value in (("u1", "worth_it"), ("u2", "async"), ("u3", "waste")):
        client.post("/feedback", json={"meetingId": "rep-1", "userId": user_id, "value": value})

    resp = client.get(
        "/reports/stats",
        params={"start_date": "2025-10-06", "end_date": "2025-10-07", "team_id": team_id},
    )
    assert resp.status_code == HTTPStatus.OK
    assert resp.json() == {
        "total_meetings": 2,
        "total_feedback": 3,
        "worth_it_percentage": 33,
        "async_percentage": 33,
        "waste_percentage": 33,
        "avg_meeting_duration": 45.0,
        "recurring_meeting_percentage": 50,
    }

    # end_date is inclusive; a one-day range only sees the first meeting
    one_day = client.get(
        "/reports/stats",
        params={"start_date": "2025-10-06", "end_date": "2025-10-06", "team_id": team_id},
    ).json()
    assert one_day["total_meetings"] == 1
    assert one_day["avg_meeting_duration"] == 30.0


def test_stats_for_empty_range_are_zero(client):
    resp = client.get(
        "/reports/stats", params={"start_date": "2001-01-01", "end_date": "2001-01-07"}
    )
    assert resp.status_code == HTTPStatus.OK
    data = resp.json()
    assert data["total_meetings"] == 0
    assert data["worth_it_percentage"] == 0
    assert data["avg_meeting_duration"] == 0.0


def test_stats_rejects_reversed_range(client):
    resp = client.get(
        "/reports/stats", params={"start_date": "2025-10-07", "end_date": "2025-10-06"}
    )
    assert resp.status_code == HTTPStatus.BAD_REQUEST


def test_stats_unknown_team(client):
    resp = client.get(
        "/reports/stats",
        params={"start_date": "2025-10-06", "end_date": "2025-10-07", "team_id": "nope"},
    )
    assert resp.status_code == HTTPStatus.NOT_FOUND
