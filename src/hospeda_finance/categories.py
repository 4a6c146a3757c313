# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Breakdowns of projected events by category and payment method.

Every function here is a pure reduction over a list of events (usually
already restricted to one transaction type and / or one period):

- totals_by_category:           sum per income / expense category,
- totals_by_category_group:     sum per income parent group,
- totals_by_payment_method:     gross amount routed through each method,
- totals_by_payment_method_fee: fee kept by each method,
- cash_flow_summary:            total income, total expense and their net
                                over every event given (dashboard figures).

Groups whose total is exactly zero are dropped. Results are returned in the
configured order of the reference table ("config") or by descending total
("value"), as required respectively by statements and chart legends.

Events referencing an unknown category or payment method are excluded from
the breakdown and reported as a warning; they still count for cash flow.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .logging_setup import get_logger
from .models import (
    Category,
    CategoryGroup,
    PaymentMethod,
    ProjectedEvent,
    TransactionType,
)

logger = get_logger(__name__)

ORDERS = ("config", "value")


@dataclass(frozen=True)
class CategoryTotal:
    """
    One line of a breakdown.

    Attributes:
        key: Identifier of the grouped entity (category id, method id or
            group name).
        name: Display name.
        total: Sum of the event values (or fees) of the group.
    """

    key: str
    name: str
    total: Decimal


def sort_by_total(totals: Iterable[CategoryTotal]) -> list[CategoryTotal]:
    """Sort breakdown lines by descending total, ties keeping their order."""
    return sorted(totals, key=lambda t: t.total, reverse=True)


def sum_totals(totals: Iterable[CategoryTotal]) -> Decimal:
    return sum((t.total for t in totals), Decimal("0"))


def _ordered(totals: list[CategoryTotal], order: str) -> list[CategoryTotal]:
    if order not in ORDERS:
        raise ValueError(f"Unknown order {order!r}, expected one of {ORDERS}.")
    if order == "value":
        return sort_by_total(totals)
    return totals


def _find_category(
    categories: Sequence[Category], event: ProjectedEvent
) -> Optional[Category]:
    for cat in categories:
        if cat.matches(event.transaction):
            return cat
    return None


def _report_unattributed(what: str, count: int, total: Decimal) -> None:
    if count:
        logger.warning(
            "%d event(s) totalling %s reference an unknown %s and were left "
            "out of the breakdown.",
            count,
            total,
            what,
        )


def totals_by_category(
    events: Iterable[ProjectedEvent],
    categories: Sequence[Category],
    order: str = "config",
) -> list[CategoryTotal]:
    """Sum event values per category of their originating transaction.

    Args:
        events: Events to group (typically all incomes or all expenses).
        categories: Category table. Its order is the "config" order.
        order: "config" (table order) or "value" (descending total).

    Returns:
        One CategoryTotal per category with a non-zero total.
    """
    sums: dict[int, Decimal] = {}
    missing_count = 0
    missing_total = Decimal("0")

    for e in events:
        if e.type == TransactionType.TRANSFER:
            continue
        # Index in the table rather than the object: two tables may share ids.
        idx = next(
            (i for i, cat in enumerate(categories) if cat.matches(e.transaction)),
            None,
        )
        if idx is None:
            missing_count += 1
            missing_total += e.value
            continue
        sums[idx] = sums.get(idx, Decimal("0")) + e.value

    _report_unattributed("category", missing_count, missing_total)

    totals = [
        CategoryTotal(key=cat.id, name=cat.name, total=sums[i])
        for i, cat in enumerate(categories)
        if i in sums and sums[i] != 0
    ]
    return _ordered(totals, order)


def totals_by_category_group(
    events: Iterable[ProjectedEvent],
    categories: Sequence[Category],
) -> list[CategoryTotal]:
    """Sum income event values per parent group (hospedagem, outras receitas).

    Events whose category has no parent group are left out.
    """
    sums: dict[CategoryGroup, Decimal] = {}
    for e in events:
        if e.type != TransactionType.INCOME:
            continue
        cat = _find_category(categories, e)
        if cat is None or cat.parent_id is None:
            continue
        sums[cat.parent_id] = sums.get(cat.parent_id, Decimal("0")) + e.value

    return [
        CategoryTotal(key=group.value, name=group.value, total=sums[group])
        for group in CategoryGroup
        if group in sums and sums[group] != 0
    ]


def _sums_by_method(
    events: Iterable[ProjectedEvent], payment_methods: Sequence[PaymentMethod]
) -> dict[str, Decimal]:
    known = {pm.id for pm in payment_methods}
    sums: dict[str, Decimal] = {}
    missing_count = 0
    missing_total = Decimal("0")

    for e in events:
        method_id = e.transaction.payment_method_id
        if e.type == TransactionType.TRANSFER or not method_id:
            continue
        if method_id not in known:
            missing_count += 1
            missing_total += e.value
            continue
        sums[method_id] = sums.get(method_id, Decimal("0")) + e.value

    _report_unattributed("payment method", missing_count, missing_total)
    return sums


def totals_by_payment_method(
    events: Iterable[ProjectedEvent],
    payment_methods: Sequence[PaymentMethod],
    order: str = "config",
) -> list[CategoryTotal]:
    """Gross amount of events routed through each payment method."""
    sums = _sums_by_method(events, payment_methods)
    totals = [
        CategoryTotal(key=pm.id, name=pm.name, total=sums[pm.id])
        for pm in payment_methods
        if sums.get(pm.id, Decimal("0")) != 0
    ]
    return _ordered(totals, order)


def totals_by_payment_method_fee(
    events: Iterable[ProjectedEvent],
    payment_methods: Sequence[PaymentMethod],
) -> list[CategoryTotal]:
    """Fee kept by each payment method, in the configured method order.

    The fee of a method is its percentage applied to the gross amount routed
    through it. Methods with a zero fee total are dropped.
    """
    sums = _sums_by_method(events, payment_methods)
    totals: list[CategoryTotal] = []
    for pm in payment_methods:
        gross = sums.get(pm.id, Decimal("0"))
        fee = gross * pm.fee / Decimal("100")
        if fee != 0:
            totals.append(CategoryTotal(key=pm.id, name=pm.name, total=fee))
    return totals


@dataclass(frozen=True)
class CashFlowSummary:
    """Total income and expense of a set of events, and their difference."""

    income: Decimal
    expense: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


def cash_flow_summary(events: Iterable[ProjectedEvent]) -> CashFlowSummary:
    """Sum income and expense events; transfers are internal and ignored.

    Unlike the breakdowns, every event counts, whether or not its category
    or payment method resolves.
    """
    income = Decimal("0")
    expense = Decimal("0")
    for e in events:
        if e.type == TransactionType.INCOME:
            income += e.value
        elif e.type == TransactionType.EXPENSE:
            expense += e.value
    return CashFlowSummary(income=income, expense=expense)
