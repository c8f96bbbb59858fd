# meetingpulse/main.py
import logging
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from meetingpulse.api.routes import auth, feedback, health, internal, meetings, reports, teams
from meetingpulse.core.config import get_settings
from meetingpulse.core.errors import MeetingPulseError
from meetingpulse.core.logging import configure_logging
from meetingpulse.db.session import AsyncSessionLocal, init_db_for_startup
from meetingpulse.services.magic_link import MagicLinkService
from meetingpulse.services.token_store import SqlTokenStore

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    Application factory for the MeetingPulse service.
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Backend service collecting lightweight post-meeting feedback\n"
            "(worth it / could've been async / waste) and aggregating it into\n"
            "team-level meeting statistics and weekly insights."
        ),
        version="0.1.0",
    )

    app.state.magic_links = MagicLinkService(
        store=SqlTokenStore(AsyncSessionLocal),
        ttl=timedelta(minutes=settings.MAGIC_LINK_TTL_MINUTES),
        session_ttl=timedelta(days=settings.SESSION_TTL_DAYS),
        base_url=settings.BASE_URL,
    )

    @app.exception_handler(MeetingPulseError)
    async def meetingpulse_error_handler(request: Request, exc: MeetingPulseError) -> JSONResponse:
        logger.info(
            "%s %s -> %s: %s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc.detail,
        )
        return JSONResponse(status_code=int(exc.status_code), content={"detail": exc.detail})

    # Routers
    app.include_router(health.router)
    app.include_router(meetings.router)
    app.include_router(feedback.router)
    app.include_router(teams.router)
    app.include_router(reports.router)
    app.include_router(auth.router)
    app.include_router(internal.router)

    @app.on_event("startup")
    async def on_startup() -> None:  # pragma: no cover
        await init_db_for_startup()
        logger.info("%s started (env=%s)", settings.APP_NAME, settings.APP_ENV)

    return app


app = create_app()
