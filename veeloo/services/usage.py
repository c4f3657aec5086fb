"""Daily direct-message quota tracking."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, timezone, tzinfo
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from veeloo.db.models.core import MessageCount
from veeloo.domain.models import DENIED, UsageDecision, UsageSnapshot
from veeloo.domain.plans import (
    FALLBACK_TIER,
    PLAN_FEATURES,
    UNBOUNDED,
    entitlements_for,
    user_id_of,
)
from veeloo.logging import logger
from veeloo.services.exceptions import UsageStoreUnavailable
from veeloo.utils.datetime import calendar_day, utc_now


def day_key(user_id: Any, day: date) -> str:
    return f"{user_id}_{day.isoformat()}"


def daily_limit(user: Any) -> float:
    """Messages per day allowed for ``user``; unknown plans get the fallback tier."""

    entitlements = entitlements_for(user) or PLAN_FEATURES[FALLBACK_TIER]
    limit = entitlements.max_messages_per_day
    if limit == UNBOUNDED:
        return UNBOUNDED
    return int(limit)


class UsageCounter:
    """Per-user, per-day message counter.

    The allow/deny decision and the increment are a single conditional
    ``UPDATE``, so concurrent sessions for one user can never push the stored
    count past the plan ceiling, and a denied call never changes it.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.session = session
        self.tz = tz or timezone.utc
        self._clock = clock or utc_now

    async def check_and_increment(self, user: Any) -> UsageDecision:
        """Spend one message of today's quota if the plan ceiling allows it.

        The session is committed before returning, so an allowed decision is
        only reported once the increment is durable. Any store failure,
        including the commit, rolls the session back and raises
        ``UsageStoreUnavailable``.
        """

        user_id = user_id_of(user)
        if user_id is None:
            return DENIED

        limit = daily_limit(user)
        if limit == UNBOUNDED:
            return UsageDecision(allowed=True, remaining=UNBOUNDED)

        now = self._clock()
        day = calendar_day(now, self.tz)
        key = day_key(user_id, day)
        try:
            await self._ensure_counter(key, user_id, day, now)
            stmt = (
                update(MessageCount)
                .where(MessageCount.doc_id == key, MessageCount.count < limit)
                .values(count=MessageCount.count + 1, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            result = await self.session.execute(stmt)
            admitted = result.rowcount > 0
            count = await self._read_count(key) if admitted else None
            # Ends the transaction on denial too, releasing the row lock.
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("usage_store_failed", user_id=user_id, key=key, error=str(exc))
            raise UsageStoreUnavailable(f"Could not update message count {key}.") from exc

        if not admitted:
            logger.info("usage_denied", user_id=user_id, day=day.isoformat(), limit=limit)
            return DENIED
        return UsageDecision(allowed=True, remaining=max(limit - count, 0))

    async def snapshot(self, user: Any) -> UsageSnapshot | None:
        """Return today's usage for display; never creates or changes a counter."""

        user_id = user_id_of(user)
        if user_id is None:
            return None

        limit = daily_limit(user)
        day = calendar_day(self._clock(), self.tz)
        key = day_key(user_id, day)
        try:
            count = await self._read_count(key)
        except SQLAlchemyError as exc:
            logger.error("usage_store_failed", user_id=user_id, key=key, error=str(exc))
            raise UsageStoreUnavailable(f"Could not read message count {key}.") from exc

        return UsageSnapshot(
            day=day,
            count=count,
            limit=limit,
            remaining=max(limit - count, 0),
        )

    async def _read_count(self, key: str) -> int:
        stmt = select(MessageCount.count).where(MessageCount.doc_id == key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() or 0

    async def _ensure_counter(self, key: str, user_id: int, day: date, now: datetime) -> None:
        stmt = select(MessageCount.id).where(MessageCount.doc_id == key)
        result = await self.session.execute(stmt)
        if result.scalar_one_or_none() is not None:
            return

        try:
            async with self.session.begin_nested():
                self.session.add(
                    MessageCount(
                        doc_id=key,
                        user_id=user_id,
                        date=day.isoformat(),
                        count=0,
                        updated_at=now,
                    )
                )
        except IntegrityError:
            # Another session created today's row first.
            logger.debug("usage_counter_exists", key=key)


__all__ = ["UsageCounter", "daily_limit", "day_key"]
