# meetingpulse/services/meeting_store.py
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from meetingpulse.core.errors import ValidationError
from meetingpulse.models.feedback import FeedbackRecord
from meetingpulse.models.meeting import MeetingRecord
from meetingpulse.schemas.feedback import Feedback
from meetingpulse.schemas.meeting import Meeting, ensure_utc

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = (
    "title",
    "start_time",
    "end_time",
    "duration_minutes",
    "attendee_count",
    "is_recurring",
    "recurrence_id",
    "organizer_email",
    "team_id",
    "department_id",
)


def to_meeting(record: MeetingRecord) -> Meeting:
    return Meeting.model_validate(record)


def to_feedback(record: FeedbackRecord) -> Feedback:
    return Feedback.model_validate(record)


async def upsert_meeting(db: AsyncSession, meeting: Meeting) -> Meeting:
    """
    Persist a meeting, keyed by its external calendar reference.

    Idempotent: re-ingesting the same calendar event updates the existing
    row in place (keeping its id and created_at) instead of adding a new one.
    A row matching the meeting id is the same meeting too; its calendar
    reference is updated.

    Raises
    ------
    ValidationError
        The meeting id and the calendar reference belong to two different
        stored meetings.
    """
    record = await _find_meeting_row(db, meeting)

    if record is None:
        record = MeetingRecord(
            id=meeting.id,
            google_event_id=meeting.google_event_id,
            created_at=meeting.created_at,
        )
        db.add(record)
        created = True
    else:
        created = False

    _apply_meeting(record, meeting)

    try:
        await db.commit()
    except IntegrityError:
        # The same event was ingested concurrently; update the stored row.
        await db.rollback()
        record = await _find_meeting_row(db, meeting)
        if record is None:
            raise
        created = False
        _apply_meeting(record, meeting)
        await db.commit()

    if created:
        logger.info("Stored meeting %s (%s)", record.id, meeting.title)
    else:
        logger.info("Updated meeting %s from calendar event %s", record.id, meeting.google_event_id)

    await db.refresh(record)
    return to_meeting(record)


async def _find_meeting_row(db: AsyncSession, meeting: Meeting) -> MeetingRecord | None:
    result = await db.execute(
        select(MeetingRecord).where(
            or_(
                MeetingRecord.google_event_id == meeting.google_event_id,
                MeetingRecord.id == meeting.id,
            )
        )
    )
    rows = result.scalars().all()
    if len(rows) > 1:
        raise ValidationError(
            f"Meeting id '{meeting.id}' and calendar event '{meeting.google_event_id}' "
            "refer to different stored meetings."
        )
    return rows[0] if rows else None


def _apply_meeting(record: MeetingRecord, meeting: Meeting) -> None:
    record.google_event_id = meeting.google_event_id
    for field in _UPDATABLE_FIELDS:
        setattr(record, field, getattr(meeting, field))


async def get_meeting(db: AsyncSession, meeting_id: str) -> Meeting | None:
    result = await db.execute(select(MeetingRecord).where(MeetingRecord.id == meeting_id))
    record = result.scalar_one_or_none()
    return to_meeting(record) if record is not None else None


async def list_meetings_ended_between(
    db: AsyncSession,
    start: datetime,
    end: datetime,
    organizer_email: str | None = None,
) -> list[Meeting]:
    """
    Meetings whose end_time lies in [start, end], oldest first.
    """
    conditions = [
        MeetingRecord.end_time >= ensure_utc(start),
        MeetingRecord.end_time <= ensure_utc(end),
    ]
    if organizer_email:
        conditions.append(MeetingRecord.organizer_email == organizer_email.strip().lower())

    result = await db.execute(
        select(MeetingRecord)
        .where(and_(*conditions))
        .order_by(MeetingRecord.end_time.asc(), MeetingRecord.id.asc())
    )
    return [to_meeting(r) for r in result.scalars().all()]


async def list_meetings_started_between(
    db: AsyncSession,
    start: datetime,
    end: datetime,
    team_id: str | None = None,
) -> list[Meeting]:
    """
    Meetings whose start_time lies in [start, end), optionally for one team.
    """
    conditions = [
        MeetingRecord.start_time >= ensure_utc(start),
        MeetingRecord.start_time < ensure_utc(end),
    ]
    if team_id is not None:
        conditions.append(MeetingRecord.team_id == team_id)

    result = await db.execute(
        select(MeetingRecord)
        .where(and_(*conditions))
        .order_by(MeetingRecord.start_time.asc(), MeetingRecord.id.asc())
    )
    return [to_meeting(r) for r in result.scalars().all()]


async def list_feedback_for_meetings(
    db: AsyncSession,
    meeting_ids: Iterable[str],
) -> list[Feedback]:
    ids = list(meeting_ids)
    if not ids:
        return []
    result = await db.execute(
        select(FeedbackRecord)
        .where(FeedbackRecord.meeting_id.in_(ids))
        .order_by(FeedbackRecord.submitted_at.asc(), FeedbackRecord.id.asc())
    )
    return [to_feedback(r) for r in result.scalars().all()]
