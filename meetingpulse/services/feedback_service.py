# meetingpulse/services/feedback_service.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date as date_type, datetime, time, timedelta, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from meetingpulse.core.config import get_settings
from meetingpulse.core.errors import NotFoundError, ValidationError
from meetingpulse.models.feedback import FeedbackDismissal, FeedbackRecord
from meetingpulse.models.meeting import MeetingRecord
from meetingpulse.schemas.feedback import Feedback
from meetingpulse.schemas.meeting import PendingFeedback, ensure_utc
from meetingpulse.services.eligibility import build_pending_feedback
from meetingpulse.services.feedback_validator import build_feedback, validate_feedback_request
from meetingpulse.services.meeting_store import (
    get_meeting,
    list_meetings_ended_between,
    to_feedback,
)

logger = logging.getLogger(__name__)


async def _find_feedback(
    db: AsyncSession, meeting_id: str, user_id: str
) -> FeedbackRecord | None:
    result = await db.execute(
        select(FeedbackRecord).where(
            FeedbackRecord.meeting_id == meeting_id,
            FeedbackRecord.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


def _apply_answer(record: FeedbackRecord, feedback: Feedback) -> None:
    record.value = feedback.value.value
    record.reason = feedback.reason.value if feedback.reason else None
    record.comment = feedback.comment
    record.submitted_at = feedback.submitted_at


async def record_feedback(
    db: AsyncSession,
    raw: Mapping[str, Any],
    now: datetime | None = None,
) -> tuple[Feedback, bool]:
    """
    Validate and persist a feedback submission.

    Resubmission for the same (meeting, user) pair overwrites the previous
    answer in place: the row keeps its id and gets the new value, reason,
    comment and submission time.

    Returns
    -------
    (Feedback, created)
        The stored feedback and whether a new row was created.

    Raises
    ------
    ValidationError, NotFoundError
    """
    settings = get_settings()
    request = validate_feedback_request(
        raw, comment_max_length=settings.FEEDBACK_COMMENT_MAX_LENGTH
    )
    meeting = await get_meeting(db, request.meeting_id)
    feedback = build_feedback(request, meeting, now=now)

    record = await _find_feedback(db, feedback.meeting_id, feedback.user_id)
    created = record is None

    if record is None:
        record = FeedbackRecord(
            id=feedback.id,
            meeting_id=feedback.meeting_id,
            user_id=feedback.user_id,
        )
        db.add(record)

    _apply_answer(record, feedback)

    try:
        await db.commit()
    except IntegrityError:
        # A concurrent first submission for the same pair won the insert;
        # fall back to overwriting its row.
        await db.rollback()
        record = await _find_feedback(db, feedback.meeting_id, feedback.user_id)
        if record is None:
            raise
        created = False
        _apply_answer(record, feedback)
        await db.commit()

    await db.refresh(record)

    stored = to_feedback(record)
    logger.info(
        "Feedback %s for meeting %s by %s: %s%s",
        "recorded" if created else "updated",
        stored.meeting_id,
        stored.user_id,
        stored.value.value,
        f" ({stored.reason.value})" if stored.reason else "",
    )
    return stored, created


async def dismiss_pending(
    db: AsyncSession,
    meeting_id: str,
    user_id: str,
    now: datetime | None = None,
) -> None:
    """
    Hide a meeting's feedback prompt for a user. Dismissing twice is a no-op.
    """
    if await get_meeting(db, meeting_id) is None:
        raise NotFoundError(f"Meeting with id={meeting_id} not found.")

    existing = await db.execute(
        select(FeedbackDismissal).where(
            FeedbackDismissal.meeting_id == meeting_id,
            FeedbackDismissal.user_id == user_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        return

    db.add(
        FeedbackDismissal(
            id=f"dismissal-{uuid4().hex}",
            meeting_id=meeting_id,
            user_id=user_id,
            dismissed_at=ensure_utc(now) if now else datetime.now(tz=timezone.utc),
        )
    )
    try:
        await db.commit()
    except IntegrityError:
        # Dismissed concurrently; the existing row already hides the prompt.
        await db.rollback()
        return
    logger.info("Feedback prompt for meeting %s dismissed by %s", meeting_id, user_id)


async def list_feedback(
    db: AsyncSession,
    meeting_id: str | None = None,
    team_id: str | None = None,
    start_date: date_type | None = None,
    end_date: date_type | None = None,
) -> list[Feedback]:
    """
    List feedback, optionally filtered by meeting, owning team and an
    inclusive submission-date range (UTC dates).
    """
    if start_date and end_date and end_date < start_date:
        raise ValidationError("endDate must be greater than or equal to startDate")

    stmt = select(FeedbackRecord)
    conditions = []

    if meeting_id:
        conditions.append(FeedbackRecord.meeting_id == meeting_id)
    if team_id:
        stmt = stmt.join(MeetingRecord, FeedbackRecord.meeting_id == MeetingRecord.id)
        conditions.append(MeetingRecord.team_id == team_id)
    if start_date:
        conditions.append(
            FeedbackRecord.submitted_at
            >= datetime.combine(start_date, time.min, tzinfo=timezone.utc)
        )
    if end_date:
        conditions.append(
            FeedbackRecord.submitted_at
            < datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
        )

    if conditions:
        stmt = stmt.where(and_(*conditions))

    result = await db.execute(
        stmt.order_by(FeedbackRecord.submitted_at.asc(), FeedbackRecord.id.asc())
    )
    return [to_feedback(r) for r in result.scalars().all()]


async def list_pending_feedback(
    db: AsyncSession,
    user_id: str,
    now: datetime | None = None,
    ttl: timedelta | None = None,
) -> list[PendingFeedback]:
    """
    Feedback prompts still actionable for `user_id` at `now`.
    """
    settings = get_settings()
    now = ensure_utc(now) if now else datetime.now(tz=timezone.utc)
    if ttl is None:
        ttl = timedelta(minutes=settings.PENDING_FEEDBACK_TTL_MINUTES)

    meetings = await list_meetings_ended_between(db, start=now - ttl, end=now)
    meeting_ids = [m.id for m in meetings]
    if not meeting_ids:
        return []

    answered = await db.execute(
        select(FeedbackRecord.meeting_id).where(
            FeedbackRecord.user_id == user_id,
            FeedbackRecord.meeting_id.in_(meeting_ids),
        )
    )
    dismissed = await db.execute(
        select(FeedbackDismissal.meeting_id).where(
            FeedbackDismissal.user_id == user_id,
            FeedbackDismissal.meeting_id.in_(meeting_ids),
        )
    )

    return build_pending_feedback(
        meetings,
        now=now,
        ttl=ttl,
        answered_meeting_ids=answered.scalars().all(),
        dismissed_meeting_ids=dismissed.scalars().all(),
    )
