# tests/test_meeting_normalizer.py
from datetime import datetime, timezone

import pytest

from meetingpulse.core.errors import AggregationInputError, ValidationError
from meetingpulse.schemas.calendar import CalendarEvent
from meetingpulse.schemas.meeting import Meeting
from meetingpulse.services.meeting_normalizer import MeetingNormalizer

NOW = datetime(2025, 11, 14, 10, 0, tzinfo=timezone.utc)


def _event(**overrides) -> CalendarEvent:
    payload = {
        "eventType": "meeting.ended",
        "eventId": "meeting-42",
        "googleEventId": "google-event-42",
        "summary": "Weekly Planning",
        "start": "2025-11-14T09:00:00Z",
        "end": "2025-11-14T09:45:00Z",
        "attendees": [{"email": "a@company.com"}, {"email": "b@company.com"}],
        "recurringEventId": "planning-weekly",
        "organizer": {"email": "PM@Company.com"},
        "extendedProperties": {"teamId": "team-eng", "departmentId": "dept-eng"},
    }
    payload.update(overrides)
    return CalendarEvent.model_validate(payload)


def test_normalizer_builds_meeting_from_event():
    """
    All fields are carried over; duration is derived from start/end and the
    organizer email is lowercased.
    """
    meeting = MeetingNormalizer.build_meeting(_event(), now=NOW)

    assert isinstance(meeting, Meeting)
    assert meeting.id == "meeting-42"
    assert meeting.google_event_id == "google-event-42"
    assert meeting.title == "Weekly Planning"
    assert meeting.duration_minutes == 45
    assert meeting.attendee_count == 2
    assert meeting.is_recurring is True
    assert meeting.recurrence_id == "planning-weekly"
    assert meeting.organizer_email == "pm@company.com"
    assert meeting.team_id == "team-eng"
    assert meeting.department_id == "dept-eng"
    assert meeting.created_at == NOW


def test_normalizer_fills_defaults_for_optional_fields():
    event = _event(
        eventId=None,
        googleEventId=None,
        summary=None,
        attendees=None,
        recurringEventId=None,
        extendedProperties=None,
    )

    meeting = MeetingNormalizer.build_meeting(event, now=NOW)

    assert meeting.id.startswith("meeting-")
    assert meeting.google_event_id == meeting.id
    assert meeting.title == "Untitled meeting"
    assert meeting.attendee_count == 0
    assert meeting.is_recurring is False
    assert meeting.recurrence_id is None
    assert meeting.team_id is None


def test_normalizer_converts_offsets_to_utc():
    event = _event(start="2025-11-14T10:00:00+01:00", end="2025-11-14T10:30:00+01:00")

    meeting = MeetingNormalizer.build_meeting(event, now=NOW)

    assert meeting.start_time == datetime(2025, 11, 14, 9, 0, tzinfo=timezone.utc)
    assert meeting.start_time.utcoffset().total_seconds() == 0


@pytest.mark.parametrize(
    "overrides",
    [
        {"start": None},
        {"end": None},
        {"organizer": None},
        {"organizer": {"email": ""}},
    ],
)
def test_normalizer_rejects_incomplete_events(overrides):
    with pytest.raises(ValidationError):
        MeetingNormalizer.build_meeting(_event(**overrides), now=NOW)


@pytest.mark.parametrize(
    "end",
    [
        "2025-11-14T09:00:00Z",  # zero length
        "2025-11-14T08:30:00Z",  # ends before it starts
        "2025-11-14T09:00:20Z",  # rounds to a zero-minute duration
    ],
)
def test_normalizer_rejects_meetings_without_positive_duration(end):
    with pytest.raises(AggregationInputError):
        MeetingNormalizer.build_meeting(_event(end=end), now=NOW)
