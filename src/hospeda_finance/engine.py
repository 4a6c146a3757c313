# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period income statement (DRE) engine for Hospeda Finance.

The `build_report()` function computes the DRE ("Demonstração do Resultado
do Exercício") of one calendar month from the projected events:

1. Period selection
   -----------------
   Events are kept when their settlement date falls in the requested
   (month, year). Installments and recurrences therefore land in the month
   they are actually paid, not in the month the transaction was recorded.

2. Revenue and deductions
   -----------------------
   - gross revenue       : sum of income events,
   - fees                : per payment method, fee % applied to the income
                           routed through the method,
   - commissions         : per income event, commission % of the
                           originating transaction,
   - net revenue         : gross revenue - fees - commissions.

3. Expenses and result
   --------------------
   - operating expenses  : sum of expense events, by category,
   - net profit          : net revenue - operating expenses,
   - margin              : net profit / gross revenue * 100 (0 when there
                           is no revenue).

Transfers move money between accounts and never appear in the DRE.

The engine is a pure function of its inputs. Callers building a trend over
several months should project once and reuse the event list (see
``multi_periods.py``).
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from .categories import (
    CategoryTotal,
    sum_totals,
    totals_by_category,
    totals_by_category_group,
    totals_by_payment_method_fee,
)
from .models import Category, PaymentMethod, ProjectedEvent, TransactionType
from .periods import Period, filter_events_by_period

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class DREReport:
    """
    Income statement of one month.

    Attributes
    ----------
    month, year :
        Reporting period (month is 1-12).
    gross_revenue :
        Sum of income events of the period.
    income_by_category :
        Income per category, configured category order.
    income_by_group :
        Income per parent group (hospedagem / outras_receitas).
    fees_by_payment_method :
        Payment-method fees, configured method order.
    total_fees, total_commissions :
        Deductions from gross revenue.
    net_revenue :
        gross_revenue - total_fees - total_commissions.
    expenses_by_category :
        Expenses per category, configured category order.
    total_expenses :
        Sum of expenses_by_category.
    net_profit :
        net_revenue - total_expenses.
    margin :
        net_profit as a percentage of gross_revenue (0 without revenue).
    expense_ratio :
        total_expenses as a percentage of gross_revenue (0 without revenue).
    """

    month: int
    year: int
    gross_revenue: Decimal
    income_by_category: tuple[CategoryTotal, ...]
    income_by_group: tuple[CategoryTotal, ...]
    fees_by_payment_method: tuple[CategoryTotal, ...]
    total_fees: Decimal
    total_commissions: Decimal
    net_revenue: Decimal
    expenses_by_category: tuple[CategoryTotal, ...]
    total_expenses: Decimal
    net_profit: Decimal
    margin: Decimal
    expense_ratio: Decimal

    @property
    def period_label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def _percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """``part / whole * 100``, or 0 when ``whole`` is not positive."""
    if whole > 0:
        return part / whole * HUNDRED
    return Decimal("0")


def compute_commissions(incomes: Iterable[ProjectedEvent]) -> Decimal:
    """Commission owed on each income event, summed.

    Commission is proportional to the event, so an installment only bears
    the commission on its own share of the transaction.
    """
    total = Decimal("0")
    for e in incomes:
        pct = e.transaction.commission_percent
        if pct:
            total += e.value * pct / HUNDRED
    return total


def build_report(
    events: Iterable[ProjectedEvent],
    categories: Sequence[Category],
    payment_methods: Sequence[PaymentMethod],
    month: int,
    year: int,
) -> DREReport:
    """Build the DRE of one calendar month.

    Args:
        events: Projected events (any period; the function filters them).
        categories: Income and expense categories.
        payment_methods: Payment method table (fees).
        month: Reporting month, 1-12.
        year: Reporting year.

    Returns:
        A DREReport. Figures are exact Decimals; rounding is left to the
        presentation layer.

    Raises:
        ValueError: if ``month`` is not in 1-12.
    """
    period = Period(month=month, year=year)
    period_events = filter_events_by_period(events, period)

    incomes = [e for e in period_events if e.type == TransactionType.INCOME]
    expenses = [e for e in period_events if e.type == TransactionType.EXPENSE]

    # 1) Gross revenue
    gross_revenue = sum((e.value for e in incomes), Decimal("0"))
    income_by_category = totals_by_category(incomes, categories)
    income_by_group = totals_by_category_group(incomes, categories)

    # 2) Deductions: payment-method fees and commissions
    fees = totals_by_payment_method_fee(incomes, payment_methods)
    total_fees = sum_totals(fees)
    total_commissions = compute_commissions(incomes)

    # 3) Net revenue
    net_revenue = gross_revenue - total_fees - total_commissions

    # 4) Operating expenses
    expenses_by_category = totals_by_category(expenses, categories)
    total_expenses = sum_totals(expenses_by_category)

    # 5) Result
    net_profit = net_revenue - total_expenses

    return DREReport(
        month=period.month,
        year=period.year,
        gross_revenue=gross_revenue,
        income_by_category=tuple(income_by_category),
        income_by_group=tuple(income_by_group),
        fees_by_payment_method=tuple(fees),
        total_fees=total_fees,
        total_commissions=total_commissions,
        net_revenue=net_revenue,
        expenses_by_category=tuple(expenses_by_category),
        total_expenses=total_expenses,
        net_profit=net_profit,
        margin=_percent_of(net_profit, gross_revenue),
        expense_ratio=_percent_of(total_expenses, gross_revenue),
    )
