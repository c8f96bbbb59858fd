# meetingpulse/services/magic_link.py
from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from meetingpulse.core.errors import ExpiredTokenError, InvalidTokenError, ValidationError
from meetingpulse.schemas.auth import IssuedMagicLink, SessionCredential, TokenRecord
from meetingpulse.schemas.meeting import ensure_utc
from meetingpulse.services.token_store import TokenStore

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32  # 256 bits


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def normalize_email(email: str | None) -> str:
    """
    Minimal sanity check: non-empty and contains '@'. Lower-cased.
    """
    cleaned = (email or "").strip().lower()
    if not cleaned or "@" not in cleaned:
        raise ValidationError("Valid email required")
    return cleaned


class MagicLinkService:
    """
    Issues and redeems single-use magic-link tokens.

    Lifecycle
    ---------
    issued -> consumed   (verify succeeded, session credential returned)
    issued -> expired    (verify at/after expiry; token removed)
    unknown / consumed   -> InvalidTokenError

    The store is injected so the lifecycle does not depend on where tokens
    live; the only state change is on the store.
    """

    def __init__(
        self,
        store: TokenStore,
        ttl: timedelta = timedelta(minutes=15),
        session_ttl: timedelta = timedelta(days=7),
        base_url: str = "http://localhost:8000",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.ttl = ttl
        self.session_ttl = session_ttl
        self.base_url = base_url.rstrip("/")
        self._clock = clock

    def now(self) -> datetime:
        return ensure_utc(self._clock())

    def build_link(self, token: str) -> str:
        return f"{self.base_url}/auth/verify?token={token}"

    async def issue(self, email: str | None) -> IssuedMagicLink:
        """
        Create a token bound to `email` and store it.

        The returned token is meant for embedding in the delivered link; the
        transport layer decides whether the caller may see it.
        """
        address = normalize_email(email)
        token = secrets.token_hex(TOKEN_BYTES)
        expires = self.now() + self.ttl

        await self.store.put(token, TokenRecord(email=address, expires=expires))
        logger.info("Issued magic link for %s (expires %s)", address, expires.isoformat())

        return IssuedMagicLink(
            token=token,
            email=address,
            expires=expires,
            link=self.build_link(token),
        )

    async def verify(self, token: str | None) -> SessionCredential:
        """
        Redeem a token for a session credential.

        Raises
        ------
        InvalidTokenError
            Token is blank, unknown, or was consumed by a concurrent call.
        ExpiredTokenError
            Current time is at or past expiry. The token is removed.
        """
        if not token:
            raise InvalidTokenError("Token required")

        record = await self.store.get(token)
        if record is None:
            raise InvalidTokenError("Invalid token")

        now = self.now()
        if now >= ensure_utc(record.expires):
            await self.store.delete(token)
            logger.info("Rejected expired magic link for %s", record.email)
            raise ExpiredTokenError("Token expired")

        if not await self.store.compare_and_delete(token, record):
            raise InvalidTokenError("Invalid token")

        logger.info("Magic link redeemed for %s", record.email)
        return SessionCredential(
            session_token=secrets.token_hex(TOKEN_BYTES),
            email=record.email,
            expires_at=now + self.session_ttl,
        )

    async def purge_expired(self) -> int:
        removed = await self.store.purge_expired(self.now())
        if removed:
            logger.info("Purged %d expired magic-link tokens", removed)
        return removed
