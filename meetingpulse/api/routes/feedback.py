# meetingpulse/api/routes/feedback.py
from datetime import date as date_type
from http import HTTPStatus

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from meetingpulse.db.session import get_db
from meetingpulse.schemas.feedback import (
    DismissRequest,
    Feedback,
    FeedbackList,
    FeedbackSubmission,
)
from meetingpulse.services.feedback_service import (
    dismiss_pending,
    list_feedback,
    record_feedback,
)

router = APIRouter(prefix="/feedback", tags=["Feedback"])


@router.post(
    "",
    response_model=Feedback,
    status_code=HTTPStatus.CREATED,
    summary="Submit feedback for a meeting",
    description=(
        "Record one user's answer for a meeting.\n\n"
        "- `value` must be one of `worth_it`, `async`, `waste`.\n"
        "- `reason` is optional but must belong to the value's reason set "
        "(`worth_it` accepts none).\n"
        "- Submitting again for the same meeting and user replaces the earlier "
        "answer; the response is then 200 instead of 201."
    ),
    responses={
        201: {
            "description": "Feedback stored.",
            "content": {
                "application/json": {
                    "example": {
                        "id": "feedback-3f1c...",
                        "meeting_id": "meeting-1",
                        "user_id": "user-2",
                        "value": "async",
                        "reason": "could_be_email",
                        "comment": None,
                        "submitted_at": "2025-11-14T09:41:00Z",
                    }
                }
            },
        },
        400: {
            "description": "Missing fields, unknown value, or reason not valid for the value.",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "Reason 'too_long' is not valid for feedback value 'worth_it'.",
                    }
                }
            },
        },
        404: {"description": "The referenced meeting does not exist."},
    },
)
async def submit_feedback(
    payload: FeedbackSubmission,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> Feedback:
    feedback, created = await record_feedback(db, payload.model_dump())
    if not created:
        response.status_code = HTTPStatus.OK
    return feedback


@router.get(
    "",
    response_model=FeedbackList,
    status_code=HTTPStatus.OK,
    summary="List feedback",
    description=(
        "Return feedback filtered by meeting, owning team and/or an inclusive "
        "submission date range (UTC)."
    ),
)
async def get_feedback(
    meeting_id: str | None = Query(default=None, alias="meetingId"),
    team_id: str | None = Query(default=None, alias="teamId"),
    start_date: date_type | None = Query(
        default=None, alias="startDate", example="2025-11-10"
    ),
    end_date: date_type | None = Query(
        default=None, alias="endDate", example="2025-11-16"
    ),
    db: AsyncSession = Depends(get_db),
) -> FeedbackList:
    items = await list_feedback(
        db,
        meeting_id=meeting_id,
        team_id=team_id,
        start_date=start_date,
        end_date=end_date,
    )
    return FeedbackList(
        feedback=items,
        total=len(items),
        filters={
            "meetingId": meeting_id,
            "teamId": team_id,
            "startDate": start_date.isoformat() if start_date else None,
            "endDate": end_date.isoformat() if end_date else None,
        },
    )


@router.post(
    "/dismiss",
    status_code=HTTPStatus.NO_CONTENT,
    summary="Dismiss a pending feedback prompt",
    description="Hide a meeting's prompt for a user without recording an answer.",
    responses={404: {"description": "The referenced meeting does not exist."}},
)
async def dismiss_feedback_prompt(
    payload: DismissRequest,
    db: AsyncSession = Depends(get_db),
) -> Response:
    await dismiss_pending(db, meeting_id=payload.meeting_id, user_id=payload.user_id)
    return Response(status_code=HTTPStatus.NO_CONTENT)
