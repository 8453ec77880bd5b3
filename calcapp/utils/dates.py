"""날짜 헬퍼 — Month arithmetic for the admin jobs and charts."""

import calendar
from datetime import date


def add_months(value: date, months: int) -> date:
    """월 단위 가감 — Shift ``value`` by ``months``; the day is clamped to the month length."""
    index: int = value.year * 12 + value.month - 1 + months
    year, month = divmod(index, 12)
    day: int = min(value.day, calendar.monthrange(year, month + 1)[1])
    return date(year, month + 1, day)


def first_of_month(value: date) -> date:
    return value.replace(day=1)
