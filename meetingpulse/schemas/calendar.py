# meetingpulse/schemas/calendar.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CalendarOrganizer(BaseModel):
    email: str | None = None


class CalendarAttendee(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: str | None = None


class CalendarExtendedProperties(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    team_id: str | None = Field(None, alias="teamId")
    department_id: str | None = Field(None, alias="departmentId")


class CalendarEvent(BaseModel):
    """
    Calendar push-notification payload as delivered to the webhook.

    Only the fields needed to build a Meeting are modelled; anything else is
    kept but ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    event_type: str = Field(..., alias="eventType", example="meeting.ended")
    event_id: str | None = Field(None, alias="eventId", example="meeting-1")
    google_event_id: str | None = Field(
        None, alias="googleEventId", example="google-event-1"
    )
    summary: str | None = Field(None, example="Product Sync")
    start: datetime | None = None
    end: datetime | None = None
    attendees: list[CalendarAttendee] | None = None
    recurring_event_id: str | None = Field(
        None, alias="recurringEventId", example="product-sync-weekly"
    )
    organizer: CalendarOrganizer | None = None
    extended_properties: CalendarExtendedProperties | None = Field(
        None, alias="extendedProperties"
    )


class WebhookAck(BaseModel):
    success: bool = True
    meeting_id: str | None = Field(
        None,
        description="Identifier of the meeting stored for a meeting.ended event.",
    )
