# meetingpulse/api/routes/internal.py
import logging
from http import HTTPStatus

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from meetingpulse.api.dependencies.internal_auth import verify_internal_api_key
from meetingpulse.api.dependencies.magic_links import get_magic_link_service
from meetingpulse.db.session import get_db
from meetingpulse.schemas.calendar import CalendarEvent, WebhookAck
from meetingpulse.services.magic_link import MagicLinkService
from meetingpulse.services.meeting_normalizer import MEETING_ENDED, MeetingNormalizer
from meetingpulse.services.meeting_store import upsert_meeting

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/internal",
    tags=["Internal"],
    dependencies=[Depends(verify_internal_api_key)],
)


class PurgeSummary(BaseModel):
    purged: int = Field(..., description="Number of expired tokens removed.", example=3)


@router.post(
    "/calendar-webhook",
    response_model=WebhookAck,
    status_code=HTTPStatus.OK,
    summary="Receive calendar push notifications",
    description=(
        "Entry point for calendar change notifications, protected via the "
        "`X-Internal-Api-Key` header when configured.\n\n"
        "For `eventType = meeting.ended` the event is normalized into a "
        "Meeting and stored (idempotently, keyed by `googleEventId`) so it "
        "shows up in feedback prompts. Other event types are acknowledged and "
        "ignored."
    ),
    responses={
        400: {"description": "Event is missing start/end or organizer."},
        401: {"description": "Missing or invalid internal API key (if configured)."},
        422: {"description": "Event end is not after its start."},
    },
)
async def calendar_webhook(
    event: CalendarEvent,
    db: AsyncSession = Depends(get_db),
) -> WebhookAck:
    if event.event_type != MEETING_ENDED:
        logger.debug("Ignoring calendar event of type %s", event.event_type)
        return WebhookAck()

    meeting = MeetingNormalizer.build_meeting(event)
    stored = await upsert_meeting(db, meeting)
    logger.info("Queued feedback collection for meeting %s", stored.id)
    return WebhookAck(meeting_id=stored.id)


@router.post(
    "/purge-expired-tokens",
    response_model=PurgeSummary,
    status_code=HTTPStatus.OK,
    summary="Remove expired magic-link tokens",
    description=(
        "Housekeeping endpoint intended for a scheduler. Expired tokens are "
        "already rejected on use; this only reclaims storage."
    ),
)
async def purge_expired_tokens(
    service: MagicLinkService = Depends(get_magic_link_service),
) -> PurgeSummary:
    return PurgeSummary(purged=await service.purge_expired())
