from aiogram import Router

from veeloo.bot.routers import chat


def setup_routers() -> Router:
    router = Router()
    router.include_router(chat.router)
    return router


__all__ = ["setup_routers"]
