# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Multi-period orchestration: project once, report many times.

Fixed recurrences expand into 60 events each, so re-projecting the whole
transaction set for every report or chart is wasteful. This module provides
the building blocks used by the dashboard-like consumers:

- transaction_set_version(): identity of an immutable transaction
  snapshot, used as a cache key;
- ProjectionCache: memoizes the projected events of a snapshot;
- EventIndex: buckets an event list by (year, month) once, so that each
  monthly report only re-slices one bucket;
- ReportCache: memoizes DRE reports keyed by
  (month, year, transaction_set_version);
- build_trend(): one DRE per month of a year, as a long-format DataFrame
  suitable for bar charts.

None of these objects mutate the events or the reference tables they are
given; concurrent readers can share the same event list.
"""

from collections.abc import Hashable, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import pandas as pd

from .config import ProjectionSettings
from .engine import DREReport, build_report
from .logging_setup import get_logger
from .models import Category, PaymentMethod, ProjectedEvent, Transaction
from .periods import Period, periods_of_year
from .projection import ProjectionResult, project_all

logger = get_logger(__name__)

TREND_COLUMNS = [
    "period_label",
    "month",
    "year",
    "gross_revenue",
    "net_revenue",
    "total_expenses",
    "net_profit",
    "margin",
]


def transaction_set_version(
    transactions: Sequence[Transaction],
) -> tuple[Transaction, ...]:
    """Cache identity of a transaction snapshot.

    Transactions are frozen dataclasses, so the tuple itself is hashable and
    compares unequal whenever a transaction is added, removed, reordered or
    edited. Cache lookups compare keys by equality, so two snapshots whose
    hashes happen to collide never share an entry. Callers holding a cheaper
    revision token (e.g. a storage revision number) can pass it instead.
    """
    return tuple(transactions)


class EventIndex:
    """Projected events bucketed by (year, month) of their settlement date."""

    def __init__(self, events: Sequence[ProjectedEvent]) -> None:
        self._events = tuple(events)
        self._buckets: dict[tuple[int, int], list[ProjectedEvent]] = {}
        for e in self._events:
            self._buckets.setdefault((e.date.year, e.date.month), []).append(e)

    @property
    def events(self) -> tuple[ProjectedEvent, ...]:
        return self._events

    def for_period(self, period: Period) -> tuple[ProjectedEvent, ...]:
        return tuple(self._buckets.get((period.year, period.month), ()))

    def for_month(self, month: int, year: int) -> tuple[ProjectedEvent, ...]:
        return self.for_period(Period(month=month, year=year))

    def months(self) -> list[tuple[int, int]]:
        """(year, month) keys holding at least one event, ascending."""
        return sorted(self._buckets)


@dataclass
class ProjectionCache:
    """
    Memoizes projections per (transaction_set_version, payment methods).

    Only the latest snapshot is kept: the application works on one
    transaction set at a time and a new revision invalidates the previous
    one.
    """

    settings: ProjectionSettings = field(default_factory=ProjectionSettings)
    _key: Optional[tuple[Hashable, ...]] = field(default=None, init=False)
    _result: Optional[ProjectionResult] = field(default=None, init=False)
    hits: int = field(default=0, init=False)
    misses: int = field(default=0, init=False)

    def project(
        self,
        transactions: Sequence[Transaction],
        payment_methods: Sequence[PaymentMethod],
        version: Optional[Hashable] = None,
    ) -> ProjectionResult:
        """Return the projection of ``transactions``, computing it if needed.

        ``version`` overrides the computed fingerprint (e.g. a revision
        number maintained by the storage layer).
        """
        if version is None:
            version = transaction_set_version(transactions)
        key = (version, tuple(payment_methods), self.settings)

        if self._result is not None and self._key == key:
            self.hits += 1
            return self._result

        self.misses += 1
        logger.debug("Projecting %d transaction(s).", len(transactions))
        self._result = project_all(transactions, payment_methods, self.settings)
        self._key = key
        return self._result


@dataclass
class ReportCache:
    """Memoizes DRE reports keyed by (month, year, transaction_set_version).

    The reference tables are part of the key as well, so that editing a fee
    or renaming a category does not serve a stale report. Like
    ProjectionCache, only the newest version is kept: asking for a report of
    another version drops every cached report first.
    """

    _reports: dict[tuple[Any, ...], DREReport] = field(default_factory=dict)
    _version: Optional[Hashable] = field(default=None, init=False)
    hits: int = field(default=0, init=False)
    misses: int = field(default=0, init=False)

    def get(
        self,
        index: EventIndex,
        categories: Sequence[Category],
        payment_methods: Sequence[PaymentMethod],
        month: int,
        year: int,
        version: Hashable,
    ) -> DREReport:
        if version != self._version:
            self._reports.clear()
            self._version = version

        key = (month, year, version, tuple(categories), tuple(payment_methods))
        report = self._reports.get(key)
        if report is not None:
            self.hits += 1
            return report

        self.misses += 1
        report = build_report(
            index.for_month(month, year), categories, payment_methods, month, year
        )
        self._reports[key] = report
        return report

    def __len__(self) -> int:
        return len(self._reports)

    def clear(self) -> None:
        self._reports.clear()
        self._version = None


def build_reports(
    events: Union[Sequence[ProjectedEvent], EventIndex],
    categories: Sequence[Category],
    payment_methods: Sequence[PaymentMethod],
    periods: Sequence[Period],
) -> list[DREReport]:
    """Build one DRE per period, bucketing the events only once.

    Raises:
        ValueError: if no periods are provided.
    """
    if not periods:
        raise ValueError("build_reports requires at least one Period.")

    index = events if isinstance(events, EventIndex) else EventIndex(events)
    return [
        build_report(
            index.for_period(p), categories, payment_methods, p.month, p.year
        )
        for p in periods
    ]


def reports_to_trend(reports: Sequence[DREReport]) -> pd.DataFrame:
    """Long-format trend DataFrame, one row per report.

    Monetary columns are floats (presentation data), rounded to 2 decimals.
    """
    rows = [
        {
            "period_label": r.period_label,
            "month": r.month,
            "year": r.year,
            "gross_revenue": round(float(r.gross_revenue), 2),
            "net_revenue": round(float(r.net_revenue), 2),
            "total_expenses": round(float(r.total_expenses), 2),
            "net_profit": round(float(r.net_profit), 2),
            "margin": round(float(r.margin), 2),
        }
        for r in reports
    ]
    if not rows:
        return pd.DataFrame(columns=TREND_COLUMNS)
    return pd.DataFrame(rows, columns=TREND_COLUMNS)


def build_trend(
    events: Union[Sequence[ProjectedEvent], EventIndex],
    categories: Sequence[Category],
    payment_methods: Sequence[PaymentMethod],
    year: int,
) -> pd.DataFrame:
    """Gross revenue, net revenue and profit for each month of ``year``."""
    reports = build_reports(events, categories, payment_methods, periods_of_year(year))
    return reports_to_trend(reports)
