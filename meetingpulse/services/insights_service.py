# meetingpulse/services/insights_service.py
from __future__ import annotations

from datetime import date as date_type, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from meetingpulse.core.config import get_settings
from meetingpulse.core.errors import NotFoundError, ValidationError
from meetingpulse.models.team import Team
from meetingpulse.schemas.insights import MeetingStats, TeamInsights
from meetingpulse.services.aggregation import (
    compute_meeting_stats,
    compute_team_insights,
    start_of_week,
)
from meetingpulse.services.meeting_store import (
    list_feedback_for_meetings,
    list_meetings_started_between,
)


def report_timezone() -> tzinfo:
    name = get_settings().REPORT_TIMEZONE
    if (name or "UTC").upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown REPORT_TIMEZONE '{name}'.") from None


def _day_start(day: date_type, tz: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


async def get_team(db: AsyncSession, team_id: str) -> Team:
    result = await db.execute(select(Team).where(Team.id == team_id))
    team = result.scalar_one_or_none()
    if team is None:
        raise NotFoundError(f"Team with id={team_id} not found.")
    return team


async def compute_insights_for_team(
    db: AsyncSession,
    team_id: str,
    week_of: date_type,
) -> TeamInsights:
    """
    Load one team's meetings and feedback for the week containing `week_of`
    and fold them into TeamInsights.

    Recomputed from scratch on every call; nothing is cached.
    """
    settings = get_settings()
    tz = report_timezone()
    team = await get_team(db, team_id)

    monday = start_of_week(week_of)
    meetings = await list_meetings_started_between(
        db,
        start=_day_start(monday, tz),
        end=_day_start(monday + timedelta(days=7), tz),
        team_id=team.id,
    )
    feedback = await list_feedback_for_meetings(db, [m.id for m in meetings])

    return compute_team_insights(
        team_id=team.id,
        team_name=team.name,
        week_start=monday,
        meetings=meetings,
        feedback=feedback,
        tz=tz,
        include_async_reasons=settings.WASTE_REASONS_INCLUDE_ASYNC,
    )


async def compute_stats_for_range(
    db: AsyncSession,
    start_date: date_type,
    end_date: date_type,
    team_id: str | None = None,
) -> MeetingStats:
    """
    MeetingStats over meetings starting within [start_date, end_date]
    (inclusive, report timezone), optionally restricted to one team.
    """
    if end_date < start_date:
        raise ValidationError("end_date must be greater than or equal to start_date")

    tz = report_timezone()
    if team_id is not None:
        await get_team(db, team_id)

    meetings = await list_meetings_started_between(
        db,
        start=_day_start(start_date, tz),
        end=_day_start(end_date + timedelta(days=1), tz),
        team_id=team_id,
    )
    feedback = await list_feedback_for_meetings(db, [m.id for m in meetings])
    return compute_meeting_stats(meetings, feedback)
