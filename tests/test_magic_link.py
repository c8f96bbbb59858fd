# tests/test_magic_link.py
import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from meetingpulse.core.errors import ExpiredTokenError, InvalidTokenError, ValidationError
from meetingpulse.services.magic_link import MagicLinkService
from meetingpulse.services.token_store import InMemoryTokenStore

T0 = datetime(2025, 11, 14, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def _service(clock: FakeClock, store: InMemoryTokenStore | None = None) -> MagicLinkService:
    return MagicLinkService(
        store=store if store is not None else InMemoryTokenStore(),
        ttl=timedelta(minutes=15),
        session_ttl=timedelta(days=7),
        base_url="https://pulse.example.com/",
        clock=clock,
    )


@pytest.mark.asyncio
async def test_issue_binds_token_to_email_with_15_minute_expiry():
    clock = FakeClock(T0)
    store = InMemoryTokenStore()
    service = _service(clock, store)

    issued = await service.issue("A@B.com")

    assert issued.email == "a@b.com"
    assert issued.expires == T0 + timedelta(minutes=15)
    # 32 random bytes, hex encoded
    assert len(issued.token) == 64
    assert issued.link == f"https://pulse.example.com/auth/verify?token={issued.token}"

    record = await store.get(issued.token)
    assert record is not None
    assert record.email == "a@b.com"


@pytest.mark.asyncio
async def test_issued_tokens_are_unique():
    service = _service(FakeClock(T0))

    tokens = {(await service.issue("a@b.com")).token for _ in range(20)}

    assert len(tokens) == 20


@pytest.mark.asyncio
@pytest.mark.parametrize("email", [None, "", "   ", "not-an-email"])
async def test_issue_rejects_invalid_email(email):
    with pytest.raises(ValidationError):
        await _service(FakeClock(T0)).issue(email)


@pytest.mark.asyncio
async def test_token_can_be_redeemed_exactly_once():
    clock = FakeClock(T0)
    service = _service(clock)
    issued = await service.issue("a@b.com")

    clock.advance(minutes=5)
    credential = await service.verify(issued.token)

    assert credential.email == "a@b.com"
    assert credential.expires_at == clock.now + timedelta(days=7)
    assert credential.session_token != issued.token

    with pytest.raises(InvalidTokenError):
        await service.verify(issued.token)


@pytest.mark.asyncio
async def test_expired_token_is_rejected_and_removed():
    clock = FakeClock(T0)
    store = InMemoryTokenStore()
    service = _service(clock, store)
    issued = await service.issue("a@b.com")

    # Expiry is inclusive: at exactly issue + 15 minutes the token is dead
    clock.advance(minutes=15)
    with pytest.raises(ExpiredTokenError):
        await service.verify(issued.token)

    assert await store.get(issued.token) is None
    with pytest.raises(InvalidTokenError):
        await service.verify(issued.token)


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [None, "", "deadbeef"])
async def test_unknown_or_blank_token_is_invalid(token):
    with pytest.raises(InvalidTokenError):
        await _service(FakeClock(T0)).verify(token)


@pytest.mark.asyncio
async def test_concurrent_verification_succeeds_at_most_once():
    service = _service(FakeClock(T0))
    issued = await service.issue("a@b.com")

    results = await asyncio.gather(
        *(service.verify(issued.token) for _ in range(10)),
        return_exceptions=True,
    )

    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 1
    assert all(isinstance(f, InvalidTokenError) for f in failures)


@pytest.mark.asyncio
async def test_purge_expired_only_drops_stale_tokens():
    clock = FakeClock(T0)
    store = InMemoryTokenStore()
    service = _service(clock, store)
    await service.issue("old@b.com")
    clock.advance(minutes=10)
    fresh = await service.issue("new@b.com")
    clock.advance(minutes=6)

    removed = await service.purge_expired()

    assert removed == 1
    assert len(store) == 1
    assert await store.get(fresh.token) is not None


@pytest.mark.asyncio
async def test_compare_and_delete_requires_matching_email():
    store = InMemoryTokenStore()
    service = _service(FakeClock(T0), store)
    issued = await service.issue("a@b.com")
    record = await store.get(issued.token)

    other = record.model_copy(update={"email": "someone@else.com"})
    assert await store.compare_and_delete(issued.token, other) is False
    assert await store.compare_and_delete(issued.token, record) is True
    assert await store.compare_and_delete(issued.token, record) is False
