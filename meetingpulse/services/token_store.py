# meetingpulse/services/token_store.py
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from meetingpulse.models.magic_link_token import MagicLinkToken
from meetingpulse.schemas.auth import TokenRecord
from meetingpulse.schemas.meeting import ensure_utc


class TokenStore(ABC):
    """
    Storage for magic-link tokens, keyed by token value.

    Implementations must make `compare_and_delete` atomic: of several
    concurrent calls for the same token, at most one may return True.
    """

    @abstractmethod
    async def get(self, token: str) -> TokenRecord | None:
        ...

    @abstractmethod
    async def put(self, token: str, record: TokenRecord) -> None:
        ...

    @abstractmethod
    async def delete(self, token: str) -> bool:
        """Remove the token; returns whether it was present."""

    @abstractmethod
    async def compare_and_delete(self, token: str, expected: TokenRecord) -> bool:
        """
        Remove the token only if it is still bound to `expected.email`.
        Returns True for the single caller that removed it.
        """

    @abstractmethod
    async def purge_expired(self, now: datetime) -> int:
        """Drop every token whose expiry is at or before `now`."""


class InMemoryTokenStore(TokenStore):
    """
    Process-local store guarded by a lock. Suitable for development and tests.
    """

    def __init__(self) -> None:
        self._records: dict[str, TokenRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    async def get(self, token: str) -> TokenRecord | None:
        with self._lock:
            return self._records.get(token)

    async def put(self, token: str, record: TokenRecord) -> None:
        with self._lock:
            self._records[token] = record

    async def delete(self, token: str) -> bool:
        with self._lock:
            return self._records.pop(token, None) is not None

    async def compare_and_delete(self, token: str, expected: TokenRecord) -> bool:
        with self._lock:
            current = self._records.get(token)
            if current is None or current.email != expected.email:
                return False
            del self._records[token]
            return True

    async def purge_expired(self, now: datetime) -> int:
        now = ensure_utc(now)
        with self._lock:
            stale = [t for t, r in self._records.items() if r.expires <= now]
            for token in stale:
                del self._records[token]
            return len(stale)


class SqlTokenStore(TokenStore):
    """
    Durable store backed by the `magic_link_tokens` table.

    Each operation runs in its own short transaction. Compare-and-delete is a
    conditional DELETE; the database decides the single winner through the
    affected row count.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, token: str) -> TokenRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(MagicLinkToken).where(MagicLinkToken.token == token)
            )
            row = result.scalar_one_or_none()
            if row is None:
                return None
            return TokenRecord(email=row.email, expires=ensure_utc(row.expires))

    async def put(self, token: str, record: TokenRecord) -> None:
        async with self._session_factory() as session:
            session.add(
                MagicLinkToken(
                    token=token,
                    email=record.email,
                    expires=ensure_utc(record.expires),
                )
            )
            await session.commit()

    async def delete(self, token: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(MagicLinkToken).where(MagicLinkToken.token == token)
            )
            await session.commit()
            return result.rowcount == 1

    async def compare_and_delete(self, token: str, expected: TokenRecord) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(MagicLinkToken).where(
                    and_(
                        MagicLinkToken.token == token,
                        MagicLinkToken.email == expected.email,
                    )
                )
            )
            await session.commit()
            return result.rowcount == 1

    async def purge_expired(self, now: datetime) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(MagicLinkToken).where(MagicLinkToken.expires <= ensure_utc(now))
            )
            await session.commit()
            return result.rowcount or 0
