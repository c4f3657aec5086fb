"""Application entrypoint."""

from __future__ import annotations

import asyncio

from aiogram import Bot, Dispatcher
from aiogram.client.session.aiohttp import AiohttpSession

from veeloo.bot.middlewares import (
    DbSessionMiddleware,
    FeatureGateMiddleware,
    UserContextMiddleware,
)
from veeloo.bot.routers import setup_routers
from veeloo.config import get_settings
from veeloo.db.session import Database
from veeloo.logging import configure_logging, logger


async def main() -> None:
    settings = get_settings()
    configure_logging(json_output=settings.environment != "dev")
    if settings.telegram_token is None:
        raise RuntimeError("VEELOO_TELEGRAM_TOKEN is not set.")

    session = (
        AiohttpSession(proxy=settings.telegram_proxy) if settings.telegram_proxy else None
    )
    bot = Bot(token=settings.telegram_token.get_secret_value(), session=session)
    dp = Dispatcher()
    dp.include_router(setup_routers())

    database = Database(settings=settings)
    await database.create_schema()

    dp.update.outer_middleware(DbSessionMiddleware(database))
    dp.message.middleware(UserContextMiddleware())
    dp.message.middleware(FeatureGateMiddleware(settings))

    logger.info(
        "bot_starting",
        environment=settings.environment,
        usage_timezone=settings.usage.reference_timezone,
    )
    try:
        await dp.start_polling(bot)
    finally:
        await database.dispose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
