"""Refuse media the sender's plan does not allow."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import Message, TelegramObject

from veeloo.config import AppSettings, get_settings
from veeloo.db.models.core import User
from veeloo.i18n import I18nService
from veeloo.services.entitlements import require_feature
from veeloo.services.exceptions import FeatureLocked


class FeatureGateMiddleware(BaseMiddleware):
    def __init__(self, settings: AppSettings | None = None) -> None:
        self.settings = settings or get_settings()

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        if not isinstance(event, Message):
            return await handler(event, data)

        feature = self.required_feature(event)
        if feature is None:
            return await handler(event, data)

        user: User | None = data.get("db_user")
        try:
            require_feature(user, feature)
        except FeatureLocked as exc:
            i18n = I18nService(default_locale=self.settings.default_language)
            locale = getattr(user, "language_code", None) or self.settings.default_language
            if exc.required_tier:
                text = i18n.gettext("feature.locked", locale=locale, tier=exc.required_tier)
            else:
                text = i18n.gettext("feature.locked_generic", locale=locale)
            await event.answer(text, parse_mode=None)
            return None

        return await handler(event, data)

    @staticmethod
    def required_feature(message: Message) -> str | None:
        if message.photo:
            return "can_send_images"
        if message.document or message.video or message.audio or message.voice:
            return "can_send_files"
        return None
