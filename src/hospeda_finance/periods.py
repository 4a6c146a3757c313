# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for Hospeda Finance.

This module defines the monthly Period value object used by the DRE and
calendar helpers shared by the projector and the aggregators:

- add_months:  calendar month arithmetic with end-of-month clamping,
- month_key:   (year, month) bucket of an event date,
- period helpers for the current / previous month and a full year.
"""

from calendar import monthrange
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from .models import ProjectedEvent, RawDate, coerce_date


@dataclass(frozen=True)
class Period:
    """A calendar month (``month`` is 1-12) with a human-readable label."""

    month: int
    year: int

    def __post_init__(self) -> None:
        if not 1 <= int(self.month) <= 12:
            raise ValueError(f"Invalid month {self.month!r}, expected 1-12.")

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return date(self.year, self.month, monthrange(self.year, self.month)[1])

    def contains(self, value: RawDate) -> bool:
        return month_key(value) == (self.year, self.month)


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def add_months(base: date, months: int) -> date:
    """Return ``base`` shifted by ``months`` calendar months.

    The day of month is kept when possible and clamped to the last day of
    the target month otherwise:

        2024-01-31 + 1 month  -> 2024-02-29
        2024-01-31 + 2 months -> 2024-03-31
        2024-12-15 + 1 month  -> 2025-01-15
    """
    total = base.month - 1 + months
    year = base.year + total // 12
    month = total % 12 + 1
    day = min(base.day, monthrange(year, month)[1])
    return date(year, month, day)


def add_days(base: date, days: int) -> date:
    return base + timedelta(days=days)


def month_key(value: RawDate) -> tuple[int, int]:
    """Return the (year, month) of a date, reading aware datetimes in UTC."""
    d = coerce_date(value)
    return d.year, d.month


def period_current_month(today: Optional[date] = None) -> Period:
    """Month containing today."""
    today = today or _today()
    return Period(month=today.month, year=today.year)


def period_last_month(today: Optional[date] = None) -> Period:
    """Full previous calendar month."""
    today = today or _today()
    if today.month == 1:
        return Period(month=12, year=today.year - 1)
    return Period(month=today.month - 1, year=today.year)


def periods_of_year(year: int) -> list[Period]:
    """The twelve months of a calendar year, January first."""
    return [Period(month=m, year=year) for m in range(1, 13)]


def determine_period_from_args(args) -> Period:
    """
    Determine the reporting month from CLI args.

    Priority (highest to lowest):

        1. args.month / args.year (a missing one defaults to today's)
        2. args.period ("current" or "last-month")
        3. current month by default
    """
    month = getattr(args, "month", None)
    year = getattr(args, "year", None)
    if month is not None or year is not None:
        today = _today()
        return Period(
            month=int(month) if month is not None else today.month,
            year=int(year) if year is not None else today.year,
        )

    p = getattr(args, "period", None)
    if p in (None, "current"):
        return period_current_month()
    if p == "last-month":
        return period_last_month()
    raise ValueError(f"Unknown period: {p!r}")


def filter_events_by_period(
    events: Iterable[ProjectedEvent], period: Period
) -> list[ProjectedEvent]:
    """
    Keep only the events whose settlement date falls in the period.

    The comparison uses the calendar (year, month) of the event date, so
    the result does not depend on the local timezone.
    """
    key = (period.year, period.month)
    return [e for e in events if (e.date.year, e.date.month) == key]


def filter_events_until(
    events: Iterable[ProjectedEvent], as_of: RawDate
) -> list[ProjectedEvent]:
    """Keep the events settled on or before ``as_of`` (inclusive).

    ``as_of`` may be a date, a datetime or an ISO-8601 string.
    """
    as_of = coerce_date(as_of)
    return [e for e in events if e.date <= as_of]
