# meetingpulse/schemas/meeting.py
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator, model_validator


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to an aware UTC value. Naive input is taken as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def minutes_between(start: datetime, end: datetime) -> int:
    return round((end - start).total_seconds() / 60)


class Meeting(BaseModel):
    """
    A single calendar meeting instance.

    Invariants
    ----------
    - end_time > start_time
    - duration_minutes matches end_time - start_time (whole minutes)
    """

    id: str = Field(..., description="Internal meeting identifier.", example="meeting-1")
    google_event_id: str = Field(
        ...,
        description="External calendar reference of the event.",
        example="google-event-1",
    )
    title: str = Field(..., example="Product Sync")
    start_time: datetime
    end_time: datetime
    duration_minutes: int = Field(
        ...,
        ge=1,
        description="Derived from end_time - start_time.",
        example=30,
    )
    attendee_count: int = Field(0, ge=0, example=5)
    is_recurring: bool = False
    recurrence_id: str | None = Field(None, example="product-sync-weekly")
    organizer_email: str = Field(..., example="pm@company.com")
    team_id: str | None = Field(None, example="team-product")
    department_id: str | None = Field(None, example="dept-product")
    created_at: datetime

    class Config:
        from_attributes = True

    @field_validator("start_time", "end_time", "created_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _check_timing(self) -> "Meeting":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        expected = minutes_between(self.start_time, self.end_time)
        if self.duration_minutes != expected:
            raise ValueError(
                f"duration_minutes={self.duration_minutes} is inconsistent with "
                f"start/end timestamps ({expected} minutes)"
            )
        return self


class PendingFeedback(BaseModel):
    """
    A meeting whose feedback prompt is still actionable for a user.
    """

    meeting: Meeting
    expires_at: datetime = Field(
        ...,
        description="Instant after which the prompt is no longer shown.",
    )


class MeetingList(BaseModel):
    meetings: list[Meeting]
    count: int


class PendingFeedbackList(BaseModel):
    pending: list[PendingFeedback]
    count: int
