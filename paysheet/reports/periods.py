"""Reporting windows: today, this week, a month, or an explicit range."""

import calendar
from datetime import date, timedelta
from typing import Optional

from paysheet.models.report import Period
from paysheet.reports.dates import normalize_date, parse_canonical


PERIODS = ("today", "week", "month", "custom")


class InvalidPeriodError(ValueError):
    """Bad period name or bounds. Carries the offending field."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


def week_range(today: date) -> tuple[date, date]:
    """Sunday through Saturday of the week containing ``today``."""
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def month_range(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def resolve_period(
    period: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    *,
    month: Optional[int] = None,
    year: Optional[int] = None,
    today: Optional[date] = None,
) -> Period:
    today = today or date.today()

    if period == "today":
        return Period(slug="today", start=today, end=today)

    if period == "week":
        week_start, week_end = week_range(today)
        return Period(slug="week", start=week_start, end=week_end)

    if period == "month":
        if (month is None) != (year is None):
            raise InvalidPeriodError("month", "Both month and year are required")
        if month is not None:
            if not 1 <= month <= 12:
                raise InvalidPeriodError("month", "Month must be between 1 and 12")
            if not 1 <= year <= 9999:
                raise InvalidPeriodError("year", "Year is out of range")
            month_start, month_end = month_range(year, month)
        else:
            month_start, month_end = month_range(today.year, today.month)
        return Period(slug="month", start=month_start, end=month_end)

    if period == "custom":
        if not start or not end:
            raise InvalidPeriodError("startDate", "Both startDate and endDate are required")
        start_canonical = normalize_date(start)
        end_canonical = normalize_date(end)
        if start_canonical is None:
            raise InvalidPeriodError("startDate", f"Invalid date: {start}")
        if end_canonical is None:
            raise InvalidPeriodError("endDate", f"Invalid date: {end}")
        if start_canonical > end_canonical:
            raise InvalidPeriodError("startDate", "startDate must not be after endDate")
        return Period(
            slug="custom",
            start=parse_canonical(start_canonical),
            end=parse_canonical(end_canonical),
        )

    raise InvalidPeriodError(
        "period",
        f"Unknown period: {period} (expected one of: {', '.join(PERIODS)})",
    )
