# meetingpulse/services/eligibility.py
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from meetingpulse.core.errors import ValidationError
from meetingpulse.schemas.meeting import Meeting, PendingFeedback, ensure_utc


def get_eligible_meetings(
    meetings: Iterable[Meeting],
    now: datetime,
    window: timedelta,
) -> list[Meeting]:
    """
    Select the meetings whose end falls within the feedback window.

    A meeting qualifies when ``now - window <= end_time <= now``: meetings that
    have not ended yet, or ended too long ago, are left out. Each meeting id
    appears at most once (first occurrence wins) and input order is kept.
    """
    if window < timedelta(0):
        raise ValidationError("window must not be negative")

    now = ensure_utc(now)
    earliest = now - window

    seen: set[str] = set()
    eligible: list[Meeting] = []
    for meeting in meetings:
        if meeting.id in seen:
            continue
        if earliest <= meeting.end_time <= now:
            seen.add(meeting.id)
            eligible.append(meeting)
    return eligible


def build_pending_feedback(
    meetings: Iterable[Meeting],
    now: datetime,
    ttl: timedelta,
    answered_meeting_ids: Iterable[str] = (),
    dismissed_meeting_ids: Iterable[str] = (),
) -> list[PendingFeedback]:
    """
    Project the meetings a user can still rate into PendingFeedback prompts.

    A prompt expires ``ttl`` after its meeting ended. Meetings the user has
    already answered or dismissed produce no prompt. Most urgent first.
    """
    skip = set(answered_meeting_ids) | set(dismissed_meeting_ids)
    candidates = [m for m in meetings if m.id not in skip]

    pending = [
        PendingFeedback(meeting=meeting, expires_at=meeting.end_time + ttl)
        for meeting in get_eligible_meetings(candidates, now=now, window=ttl)
    ]
    pending.sort(key=lambda p: (p.expires_at, p.meeting.id))
    return pending
