"""Direct-message authorization."""

from __future__ import annotations

from datetime import timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import select

from veeloo.db.models.core import MessageCount, User
from veeloo.services import messaging
from veeloo.services.exceptions import QuotaExceeded, RecipientNotFound, UsageStoreUnavailable
from veeloo.services.messaging import DirectMessageService
from veeloo.services.usage import UsageCounter


@pytest.fixture(autouse=True)
def stub_settings(monkeypatch):
    settings = SimpleNamespace(usage=SimpleNamespace(tzinfo=timezone.utc))
    monkeypatch.setattr(messaging, "get_settings", lambda: settings)
    return settings


@pytest.mark.asyncio
async def test_authorize_spends_one_message(session, make_user):
    sender = await make_user(plan="free")
    recipient = await make_user(plan="pro", username="Bob")
    service = DirectMessageService(session)

    outgoing = await service.authorize(sender, "@bob")

    assert outgoing.recipient.id == recipient.id
    assert outgoing.decision.allowed is True
    assert outgoing.decision.remaining == 2


@pytest.mark.asyncio
async def test_authorize_raises_when_quota_is_spent(session, make_user):
    sender = await make_user(plan="free")
    await make_user(username="carol")
    service = DirectMessageService(session)
    for _ in range(3):
        await service.authorize(sender, "carol")

    with pytest.raises(QuotaExceeded):
        await service.authorize(sender, "carol")


@pytest.mark.asyncio
async def test_unknown_recipient_does_not_cost_a_message(session, make_user):
    sender = await make_user(plan="free")
    service = DirectMessageService(session)

    with pytest.raises(RecipientNotFound):
        await service.authorize(sender, "nobody")
    with pytest.raises(RecipientNotFound):
        await service.authorize(sender, "  ")

    rows = (await session.execute(select(MessageCount))).scalars().all()
    assert rows == []


@pytest.mark.asyncio
async def test_store_errors_propagate(session, make_user):
    sender = await make_user(plan="free")
    await make_user(username="dave")

    class _BrokenCounter(UsageCounter):
        async def check_and_increment(self, user):
            raise UsageStoreUnavailable("down")

    service = DirectMessageService(session, counter=_BrokenCounter(session))

    with pytest.raises(UsageStoreUnavailable):
        await service.authorize(sender, "dave")


@pytest.mark.asyncio
async def test_anonymous_sender_is_refused(session, make_user):
    await make_user(username="erin")
    service = DirectMessageService(session)

    with pytest.raises(QuotaExceeded):
        await service.authorize(SimpleNamespace(id=None, plan="elite"), "erin")


@pytest.mark.asyncio
async def test_default_counter_uses_configured_timezone(session, stub_settings):
    stub_settings.usage.tzinfo = ZoneInfo("Asia/Tokyo")

    service = DirectMessageService(session)

    assert service.counter.tz == ZoneInfo("Asia/Tokyo")


@pytest.mark.asyncio
async def test_authorized_message_is_already_committed(session_pair):
    first, second = session_pair
    sender = User(telegram_id=6001, username="frank", plan="free")
    recipient = User(telegram_id=6002, username="gina", plan="free")
    first.add_all([sender, recipient])
    await first.commit()

    await DirectMessageService(first).authorize(sender, "gina")

    counts = (await second.execute(select(MessageCount.count))).scalars().all()
    assert counts == [1]
