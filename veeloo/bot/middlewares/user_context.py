"""Resolve the Telegram sender to a stored user record."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from veeloo.db.models.core import User
from veeloo.logging import logger
from veeloo.utils.datetime import utc_now


class UserContextMiddleware(BaseMiddleware):
    """Expose ``db_user`` to handlers, creating the record on first contact.

    New users start without a plan; the payment service sets it later.
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        from_user = getattr(event, "from_user", None)
        if from_user is None:
            return await handler(event, data)

        session: AsyncSession = data["session"]
        stmt = select(User).where(User.telegram_id == from_user.id)
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()
        if user is None:
            user = User(
                telegram_id=from_user.id,
                username=from_user.username,
                display_name=from_user.full_name,
                language_code=from_user.language_code or "en",
            )
            session.add(user)
            await session.flush()
            logger.info("user_registered", user_id=user.id, telegram_id=from_user.id)
        elif from_user.username and user.username != from_user.username:
            user.username = from_user.username

        user.last_seen_at = utc_now()
        data["db_user"] = user
        return await handler(event, data)
