"""Reporting engine package."""

from paysheet.reports.dates import normalize_date
from paysheet.reports.engine import (
    aggregate,
    balance,
    build_report,
    build_summary,
    category_breakdown,
    filter_by_date_range,
    filter_transactions,
)
from paysheet.reports.periods import (
    PERIODS,
    InvalidPeriodError,
    month_range,
    resolve_period,
    week_range,
)

__all__ = [
    "PERIODS",
    "InvalidPeriodError",
    "aggregate",
    "balance",
    "build_report",
    "build_summary",
    "category_breakdown",
    "filter_by_date_range",
    "filter_transactions",
    "month_range",
    "normalize_date",
    "resolve_period",
    "week_range",
]
