"""Time utilities with timezone-aware defaults."""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo


def utc_now() -> datetime:
    """Return current UTC time with tzinfo."""

    return datetime.now(timezone.utc)


def calendar_day(moment: datetime, tz: tzinfo = timezone.utc) -> date:
    """Return the calendar day ``moment`` falls on in ``tz``.

    Naive datetimes are taken to be UTC so that a drifting local clock
    cannot move the day boundary.
    """

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).date()


__all__ = ["calendar_day", "utc_now"]
