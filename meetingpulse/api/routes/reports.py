# meetingpulse/api/routes/reports.py
from datetime import date as date_type
from http import HTTPStatus

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from meetingpulse.db.session import get_db
from meetingpulse.schemas.insights import MeetingStats
from meetingpulse.services.insights_service import compute_stats_for_range

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)


@router.get(
    "/stats",
    response_model=MeetingStats,
    status_code=HTTPStatus.OK,
    summary="Meeting statistics for a date range",
    description=(
        "Return MeetingStats over all meetings that started within the range "
        "(inclusive of both `start_date` and `end_date`), optionally limited to "
        "one team.\n\n"
        "- worth_it / async / waste percentages are computed over the feedback "
        "for those meetings and are all 0 when there is none.\n"
        "- `recurring_meeting_percentage` is the share of recurring meetings.\n\n"
        "This endpoint is read-only and intended for dashboards."
    ),
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "total_meetings": 47,
                        "total_feedback": 38,
                        "worth_it_percentage": 42,
                        "async_percentage": 31,
                        "waste_percentage": 27,
                        "avg_meeting_duration": 45.0,
                        "recurring_meeting_percentage": 68,
                    }
                }
            },
        },
        400: {"description": "end_date is before start_date."},
        404: {"description": "team_id given but no such team exists."},
    },
)
async def get_meeting_stats(
    start_date: date_type = Query(
        ...,
        description="Start date (inclusive) in ISO format (YYYY-MM-DD).",
        example="2025-11-10",
    ),
    end_date: date_type = Query(
        ...,
        description="End date (inclusive) in ISO format (YYYY-MM-DD).",
        example="2025-11-16",
    ),
    team_id: str | None = Query(
        default=None,
        description="Restrict the population to one team.",
        example="team-eng",
    ),
    db: AsyncSession = Depends(get_db),
) -> MeetingStats:
    return await compute_stats_for_range(
        db, start_date=start_date, end_date=end_date, team_id=team_id
    )
