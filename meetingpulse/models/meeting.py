# meetingpulse/models/meeting.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String

from meetingpulse.db.base import Base


class MeetingRecord(Base):
    """
    A calendar meeting instance ingested from the calendar webhook.

    `google_event_id` is the natural key: re-ingesting the same event updates
    the row in place.
    """

    __tablename__ = "meetings"

    id = Column(String(64), primary_key=True)
    google_event_id = Column(String(255), nullable=False, unique=True, index=True)

    title = Column(String(512), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False)
    attendee_count = Column(Integer, nullable=False, default=0)

    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_id = Column(String(255), nullable=True, index=True)

    organizer_email = Column(String(320), nullable=False)
    team_id = Column(String(64), nullable=True, index=True)
    department_id = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<MeetingRecord id={self.id} title={self.title!r} "
            f"end_time={self.end_time}>"
        )
