from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Optional, Tuple
from zoneinfo import ZoneInfo


TODAY_ALIASES = {"today", "hoje"}
TOMORROW_ALIASES = {"tomorrow", "amanha", "amanhã"}

THIS_WEEK_ALIASES = {"this_week", "esta_semana"}
NEXT_WEEK_ALIASES = {"next_week", "proxima_semana", "semana_que_vem"}
THIS_MONTH_ALIASES = {"this_month", "este_mes"}
NEXT_7_DAYS_ALIASES = {"next_7_days", "proximos_7_dias"}


def today_in(tz_name: str) -> date:
    return datetime.now(ZoneInfo(tz_name)).date()


def _week_start(day: date) -> date:
    # weeks run Sunday..Saturday
    return day - timedelta(days=(day.weekday() + 1) % 7)


def resolve_date(value, today: date) -> date:
    """Turn a date, ISO string or a today/tomorrow shortcut into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = str(value).strip()
    text = raw.lower()
    if text in TODAY_ALIASES:
        return today
    if text in TOMORROW_ALIASES:
        return today + timedelta(days=1)

    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    # full ISO datetime; a trailing Z is UTC
    if raw[-1:] in ("Z", "z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError:
        raise ValueError(f"invalid date: {value!r}") from None


def resolve_range(value: str, today: date) -> Optional[Tuple[date, date]]:
    """Named ranges such as this_week or next_7_days; None if not a range name."""
    text = str(value).strip().lower()

    if text in THIS_WEEK_ALIASES:
        start = _week_start(today)
        return start, start + timedelta(days=6)
    if text in NEXT_WEEK_ALIASES:
        start = _week_start(today) + timedelta(days=7)
        return start, start + timedelta(days=6)
    if text in THIS_MONTH_ALIASES:
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    if text in NEXT_7_DAYS_ALIASES:
        return today, today + timedelta(days=7)
    return None
