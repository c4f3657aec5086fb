"""Direct-message authorization against the daily quota."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from veeloo.config import get_settings
from veeloo.db.models.core import User
from veeloo.domain.models import UsageDecision
from veeloo.logging import logger
from veeloo.services.exceptions import QuotaExceeded, RecipientNotFound
from veeloo.services.usage import UsageCounter


@dataclass(frozen=True)
class OutgoingMessage:
    sender: User
    recipient: User
    decision: UsageDecision


class DirectMessageService:
    def __init__(self, session: AsyncSession, counter: UsageCounter | None = None) -> None:
        self.session = session
        self.counter = counter or UsageCounter(session, tz=get_settings().usage.tzinfo)

    async def find_recipient(self, username: str) -> User:
        normalized = (username or "").strip().lstrip("@")
        if not normalized:
            raise RecipientNotFound("Username is required.")
        stmt = select(User).where(func.lower(User.username) == normalized.lower()).limit(1)
        result = await self.session.execute(stmt)
        recipient = result.scalar_one_or_none()
        if recipient is None:
            raise RecipientNotFound(f"User {normalized} not found.")
        return recipient

    async def authorize(self, sender: User, recipient_username: str) -> OutgoingMessage:
        """Resolve the recipient, then spend one unit of the sender's daily quota.

        The quota is only touched once the recipient is known, so a typo in
        the username never costs a message. The increment is committed before
        this returns. ``UsageStoreUnavailable`` from the counter propagates
        unchanged.
        """

        recipient = await self.find_recipient(recipient_username)
        decision = await self.counter.check_and_increment(sender)
        if not decision.allowed:
            raise QuotaExceeded(f"Daily message limit reached for user {sender.id}.")
        logger.info(
            "direct_message_authorized",
            sender_id=sender.id,
            recipient_id=recipient.id,
            remaining=decision.remaining,
        )
        return OutgoingMessage(sender=sender, recipient=recipient, decision=decision)


__all__ = ["DirectMessageService", "OutgoingMessage"]
