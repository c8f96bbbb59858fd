# meetingpulse/api/routes/meetings.py
from datetime import datetime, timedelta, timezone
from http import HTTPStatus

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from meetingpulse.core.config import get_settings
from meetingpulse.db.session import get_db
from meetingpulse.schemas.meeting import MeetingList, PendingFeedbackList
from meetingpulse.services.eligibility import get_eligible_meetings
from meetingpulse.services.feedback_service import list_pending_feedback
from meetingpulse.services.meeting_store import list_meetings_ended_between

router = APIRouter(prefix="/meetings", tags=["Meetings"])


@router.get(
    "/eligible",
    response_model=MeetingList,
    status_code=HTTPStatus.OK,
    summary="List meetings that recently ended and can receive feedback",
    description=(
        "Return meetings whose end time falls within the feedback window "
        "`[now - window_minutes, now]`.\n\n"
        "- Meetings that have not ended yet are excluded.\n"
        "- Meetings that ended before the window are excluded.\n"
        "- `window_minutes` defaults to `FEEDBACK_WINDOW_MINUTES` (120)."
    ),
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "meetings": [
                            {
                                "id": "meeting-1",
                                "google_event_id": "google-event-1",
                                "title": "Product Sync",
                                "start_time": "2025-11-14T09:00:00Z",
                                "end_time": "2025-11-14T09:30:00Z",
                                "duration_minutes": 30,
                                "attendee_count": 5,
                                "is_recurring": True,
                                "recurrence_id": "product-sync-weekly",
                                "organizer_email": "pm@company.com",
                                "team_id": "team-product",
                                "department_id": "dept-product",
                                "created_at": "2025-11-14T09:30:05Z",
                            }
                        ],
                        "count": 1,
                    }
                }
            }
        }
    },
)
async def list_eligible_meetings(
    window_minutes: int | None = Query(
        default=None,
        ge=0,
        le=7 * 24 * 60,
        description="Size of the feedback window in minutes.",
        example=120,
    ),
    organizer_email: str | None = Query(
        default=None,
        description="Only return meetings organized by this address.",
        example="pm@company.com",
    ),
    db: AsyncSession = Depends(get_db),
) -> MeetingList:
    settings = get_settings()
    if window_minutes is None:
        window_minutes = settings.FEEDBACK_WINDOW_MINUTES

    now = datetime.now(tz=timezone.utc)
    window = timedelta(minutes=window_minutes)

    snapshot = await list_meetings_ended_between(
        db, start=now - window, end=now, organizer_email=organizer_email
    )
    meetings = get_eligible_meetings(snapshot, now=now, window=window)
    return MeetingList(meetings=meetings, count=len(meetings))


@router.get(
    "/pending",
    response_model=PendingFeedbackList,
    status_code=HTTPStatus.OK,
    summary="List feedback prompts still open for a user",
    description=(
        "Return the meetings a user can still rate. A prompt expires "
        "`PENDING_FEEDBACK_TTL_MINUTES` (30) after its meeting ended and "
        "disappears once the user answers or dismisses it."
    ),
)
async def list_pending(
    user_id: str = Query(
        ...,
        min_length=1,
        description="Identifier of the user the prompts are for.",
        example="user-1",
    ),
    db: AsyncSession = Depends(get_db),
) -> PendingFeedbackList:
    pending = await list_pending_feedback(db, user_id=user_id)
    return PendingFeedbackList(pending=pending, count=len(pending))
