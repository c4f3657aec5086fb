"""Telegram handlers for plan info and direct messages."""

from __future__ import annotations

from aiogram import Router
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from veeloo.bot.utils.telegram import answer_with_retry, bot_send_with_retry
from veeloo.config import get_settings
from veeloo.db.models.core import User
from veeloo.domain.plans import UNBOUNDED, entitlements_for, resolve_tier
from veeloo.i18n import I18nService
from veeloo.logging import logger
from veeloo.services.exceptions import QuotaExceeded, RecipientNotFound, UsageStoreUnavailable
from veeloo.services.messaging import DirectMessageService
from veeloo.services.usage import UsageCounter

router = Router()


def _i18n_for(user: User) -> tuple[I18nService, str]:
    settings = get_settings()
    i18n = I18nService(default_locale=settings.default_language)
    return i18n, user.language_code or settings.default_language


def _format_remaining(i18n: I18nService, locale: str, remaining: float) -> str:
    if remaining == UNBOUNDED:
        return i18n.gettext("plan.unlimited", locale=locale)
    return str(int(remaining))


def _plan_name(user: User, i18n: I18nService, locale: str) -> str:
    tier = resolve_tier(user.plan)
    return tier.value.capitalize() if tier else i18n.gettext("plan.none", locale=locale)


@router.message(CommandStart())
async def handle_start(
    message: Message,
    session: AsyncSession,
    db_user: User | None = None,
) -> None:
    if db_user is None:
        return
    i18n, locale = _i18n_for(db_user)
    greeting = i18n.gettext(
        "start.greeting",
        locale=locale,
        name=message.from_user.full_name,
        plan=_plan_name(db_user, i18n, locale),
    )
    await answer_with_retry(message, greeting, parse_mode=None)


@router.message(Command("plan"))
async def handle_plan(
    message: Message,
    session: AsyncSession,
    db_user: User | None = None,
) -> None:
    if db_user is None:
        return
    i18n, locale = _i18n_for(db_user)
    counter = UsageCounter(session, tz=get_settings().usage.tzinfo)
    try:
        usage = await counter.snapshot(db_user)
    except UsageStoreUnavailable:
        await answer_with_retry(
            message, i18n.gettext("limit.unavailable", locale=locale), parse_mode=None
        )
        return

    entitlements = entitlements_for(db_user)

    def yes_no(feature: str) -> str:
        granted = entitlements is not None and entitlements.value_of(feature) is True
        return i18n.gettext("plan.yes" if granted else "plan.no", locale=locale)

    fee = entitlements.platform_fee if entitlements else None
    boost = entitlements.discovery_boost.value if entitlements else "none"
    summary = i18n.gettext(
        "plan.summary",
        locale=locale,
        plan=_plan_name(db_user, i18n, locale),
        remaining=_format_remaining(i18n, locale, usage.remaining),
        images=yes_no("can_send_images"),
        files=yes_no("can_send_files"),
        hd=yes_no("hd_streaming"),
        fee=f"{fee:.0%}" if fee is not None else "-",
        boost=boost,
    )
    await answer_with_retry(message, summary, parse_mode=None)


@router.message(Command("dm"))
async def handle_direct_message(
    message: Message,
    session: AsyncSession,
    command: CommandObject,
    db_user: User | None = None,
) -> None:
    if db_user is None:
        return
    i18n, locale = _i18n_for(db_user)
    has_media = bool(message.photo or message.document or message.video)
    parts = (command.args or "").split(maxsplit=1)
    if not parts or (len(parts) < 2 and not has_media):
        await answer_with_retry(message, i18n.gettext("dm.usage", locale=locale), parse_mode=None)
        return
    username = parts[0].lstrip("@")
    text = parts[1] if len(parts) > 1 else ""

    service = DirectMessageService(
        session, counter=UsageCounter(session, tz=get_settings().usage.tzinfo)
    )
    try:
        outgoing = await service.authorize(db_user, username)
    except RecipientNotFound:
        reply = i18n.gettext("dm.not_found", locale=locale, username=username)
        await answer_with_retry(message, reply, parse_mode=None)
        return
    except QuotaExceeded:
        await answer_with_retry(
            message, i18n.gettext("limit.exceeded", locale=locale), parse_mode=None
        )
        return
    except UsageStoreUnavailable:
        await answer_with_retry(
            message, i18n.gettext("limit.unavailable", locale=locale), parse_mode=None
        )
        return

    recipient = outgoing.recipient
    sender_name = db_user.username or db_user.display_name or str(db_user.telegram_id)
    incoming = i18n.gettext(
        "dm.incoming",
        locale=recipient.language_code or locale,
        sender=sender_name,
        text=text,
    )
    try:
        if has_media:
            await message.copy_to(chat_id=recipient.telegram_id, caption=incoming, parse_mode=None)
        else:
            await bot_send_with_retry(
                message.bot, chat_id=recipient.telegram_id, text=incoming, parse_mode=None
            )
    except TelegramAPIError as exc:
        # The counter is already committed; a failed delivery is not refunded.
        logger.warning(
            "direct_message_undelivered",
            sender_id=db_user.id,
            recipient_id=recipient.id,
            error=str(exc),
        )
        reply = i18n.gettext(
            "dm.failed",
            locale=locale,
            username=recipient.username or username,
            remaining=_format_remaining(i18n, locale, outgoing.decision.remaining),
        )
        await answer_with_retry(message, reply, parse_mode=None)
        return
    logger.info("direct_message_delivered", sender_id=db_user.id, recipient_id=recipient.id)

    await answer_with_retry(
        message,
        i18n.gettext(
            "dm.sent",
            locale=locale,
            username=recipient.username or username,
            remaining=_format_remaining(i18n, locale, outgoing.decision.remaining),
        ),
        parse_mode=None,
    )
