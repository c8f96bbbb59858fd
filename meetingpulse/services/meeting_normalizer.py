# meetingpulse/services/meeting_normalizer.py
from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from meetingpulse.core.errors import AggregationInputError, ValidationError
from meetingpulse.schemas.calendar import CalendarEvent
from meetingpulse.schemas.meeting import Meeting, ensure_utc, minutes_between

MEETING_ENDED = "meeting.ended"


class MeetingNormalizer:
    """
    Turns calendar webhook events into validated Meeting records.

    This keeps the feedback and aggregation logic isolated from the raw
    calendar payload shape.
    """

    @staticmethod
    def build_meeting(
        event: CalendarEvent,
        now: datetime | None = None,
    ) -> Meeting:
        """
        Build a Meeting from a `meeting.ended` event.

        Rules
        -----
        - `eventId` becomes the meeting id (a new id is generated when absent);
          `googleEventId` falls back to `eventId`.
        - duration_minutes is derived from start/end, never taken from input.
        - is_recurring is true exactly when `recurringEventId` is present.
        - attendee_count is the number of listed attendees (0 if none).
        - team/department come from `extendedProperties`.

        Raises
        ------
        ValidationError
            Required fields (start, end, organizer email) are missing.
        AggregationInputError
            end is not after start; such meetings are rejected at ingestion.
        """
        if event.start is None or event.end is None:
            raise ValidationError("Calendar event must include start and end.")

        organizer_email = event.organizer.email if event.organizer else None
        if not organizer_email:
            raise ValidationError("Calendar event must include an organizer email.")

        start = ensure_utc(event.start)
        end = ensure_utc(event.end)
        if end <= start:
            raise AggregationInputError(
                f"Meeting end ({end.isoformat()}) must be after start ({start.isoformat()})."
            )

        meeting_id = event.event_id or f"meeting-{uuid4().hex}"
        props = event.extended_properties

        try:
            return Meeting(
                id=meeting_id,
                google_event_id=event.google_event_id or meeting_id,
                title=event.summary or "Untitled meeting",
                start_time=start,
                end_time=end,
                duration_minutes=minutes_between(start, end),
                attendee_count=len(event.attendees or []),
                is_recurring=bool(event.recurring_event_id),
                recurrence_id=event.recurring_event_id,
                organizer_email=organizer_email.strip().lower(),
                team_id=props.team_id if props else None,
                department_id=props.department_id if props else None,
                created_at=now or datetime.now(tz=timezone.utc),
            )
        except PydanticValidationError as exc:
            # e.g. a sub-minute meeting rounds to a zero duration
            raise AggregationInputError(f"Invalid meeting: {exc.errors()[0]['msg']}")
