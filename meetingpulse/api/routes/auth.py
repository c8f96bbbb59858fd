# meetingpulse/api/routes/auth.py
from http import HTTPStatus

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from meetingpulse.api.dependencies.magic_links import get_magic_link_service
from meetingpulse.core.config import get_settings
from meetingpulse.core.errors import ValidationError
from meetingpulse.schemas.auth import MagicLinkRequest, MagicLinkResponse
from meetingpulse.services.email_notifier import send_magic_link_email
from meetingpulse.services.magic_link import MagicLinkService

router = APIRouter(prefix="/auth", tags=["Auth"])

SESSION_COOKIE = "session"


@router.post(
    "/magic-link",
    response_model=MagicLinkResponse,
    response_model_exclude_none=True,
    status_code=HTTPStatus.OK,
    summary="Request a magic sign-in link",
    description=(
        "Issue a single-use sign-in token for the given email and deliver it "
        "as a link. The token expires after `MAGIC_LINK_TTL_MINUTES` (15).\n\n"
        "In local/test/development environments the link is also returned in "
        "the response as `magicLink`; elsewhere it is only emailed."
    ),
    responses={
        400: {
            "description": "Email missing or malformed.",
            "content": {"application/json": {"example": {"detail": "Valid email required"}}},
        },
    },
)
async def request_magic_link(
    payload: MagicLinkRequest,
    service: MagicLinkService = Depends(get_magic_link_service),
) -> MagicLinkResponse:
    settings = get_settings()
    issued = await service.issue(payload.email)
    send_magic_link_email(issued)

    return MagicLinkResponse(
        message="Magic link sent to your email",
        magic_link=issued.link if settings.is_development else None,
    )


@router.get(
    "/verify",
    status_code=HTTPStatus.TEMPORARY_REDIRECT,
    summary="Redeem a magic link",
    description=(
        "Consume the token and start a session: responds with a redirect to "
        "`/` carrying an httponly `session` cookie valid for "
        "`SESSION_TTL_DAYS` (7).\n\n"
        "A token works once. Unknown or already used tokens, and expired "
        "tokens, are rejected with 401."
    ),
    responses={
        400: {"description": "Token parameter missing."},
        401: {
            "description": "Token invalid, already used, or expired.",
            "content": {"application/json": {"example": {"detail": "Token expired"}}},
        },
    },
)
async def verify_magic_link(
    token: str | None = Query(default=None, description="Token from the emailed link."),
    service: MagicLinkService = Depends(get_magic_link_service),
) -> RedirectResponse:
    if not token:
        raise ValidationError("Token required")

    credential = await service.verify(token)
    settings = get_settings()

    response = RedirectResponse(url="/", status_code=HTTPStatus.TEMPORARY_REDIRECT)
    response.set_cookie(
        SESSION_COOKIE,
        credential.session_token,
        httponly=True,
        secure=(settings.APP_ENV or "").lower() in ("prod", "production"),
        samesite="lax",
        max_age=int(service.session_ttl.total_seconds()),
    )
    return response
