# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for Hospeda Finance.

This module turns engine results into pandas DataFrames ready for display
or CSV export. Engine values are exact Decimals; views convert them to
floats rounded to the requested number of decimals.

The main views are:

- report_to_statement: the DRE as statement lines (level, name, amount),
  with category and fee detail lines under their totals,
- report_indicators:   margin and expense-ratio indicators of a DRE,
- totals_to_dataframe: a breakdown (categories, methods, fees) with each
  line's share of the total, as used by chart legends,
- balances_to_dataframe: account balances,
- cash_flow_to_dataframe: income / expense / net headline figures.
"""

from collections.abc import Sequence
from decimal import Decimal

import pandas as pd

from .balances import AccountBalance
from .categories import CashFlowSummary, CategoryTotal, sum_totals
from .engine import DREReport

STATEMENT_COLUMNS = ["display_order", "id", "level", "name", "type", "amount"]


def _money(value: Decimal, decimals: int) -> float:
    return round(float(value), decimals)


def report_to_statement(report: DREReport, decimals: int = 2) -> pd.DataFrame:
    """Return the DRE as ordered statement lines.

    Structure (level 0 = totals, level 1 = detail lines):

        RECEITA OPERACIONAL BRUTA          gross revenue
            <income category>              ...
        (-) Taxas <payment method>         fee per method (negative)
        (-) Comissões                      commissions (negative)
        (=) RECEITA LÍQUIDA                net revenue
        (-) DESPESAS OPERACIONAIS          total expenses (negative)
            <expense category>             ...
        (=) LUCRO LÍQUIDO                  net profit

    Deductions and expenses are shown as negative amounts so that each
    total is the sum of the lines above it.
    """
    rows: list[dict[str, object]] = []

    def _add(row_id: str, level: int, name: str, row_type: str, amount: Decimal):
        rows.append(
            {
                "id": row_id,
                "level": level,
                "name": name,
                "type": row_type,
                "amount": _money(amount, decimals),
            }
        )

    _add("gross_revenue", 0, "RECEITA OPERACIONAL BRUTA", "total", report.gross_revenue)
    for line in report.income_by_category:
        _add(f"income:{line.key}", 1, line.name, "detail", line.total)

    for line in report.fees_by_payment_method:
        _add(f"fee:{line.key}", 1, f"(-) Taxas {line.name}", "deduction", -line.total)
    _add("commissions", 1, "(-) Comissões", "deduction", -report.total_commissions)

    _add("net_revenue", 0, "(=) RECEITA LÍQUIDA", "total", report.net_revenue)

    _add(
        "total_expenses",
        0,
        "(-) DESPESAS OPERACIONAIS",
        "total",
        -report.total_expenses,
    )
    for line in report.expenses_by_category:
        _add(f"expense:{line.key}", 1, line.name, "detail", -line.total)

    _add("net_profit", 0, "(=) LUCRO LÍQUIDO", "total", report.net_profit)

    df = pd.DataFrame(rows)
    df["display_order"] = [(i + 1) * 10 for i in range(len(df))]
    return df[STATEMENT_COLUMNS]


def report_indicators(report: DREReport, decimals: int = 1) -> pd.DataFrame:
    """Key indicators of a DRE (unit hints follow the statement amounts)."""
    rows = [
        {
            "key": "margin",
            "label": "Margem líquida",
            "value": _money(report.margin, decimals),
            "unit": "percent",
        },
        {
            "key": "expense_ratio",
            "label": "Saída sobre entrada",
            "value": _money(report.expense_ratio, decimals),
            "unit": "percent",
        },
        {
            "key": "gross_revenue",
            "label": "Receita bruta",
            "value": _money(report.gross_revenue, 2),
            "unit": "amount",
        },
        {
            "key": "total_deductions",
            "label": "Taxas e comissões",
            "value": _money(report.total_fees + report.total_commissions, 2),
            "unit": "amount",
        },
    ]
    return pd.DataFrame(rows, columns=["key", "label", "value", "unit"])


def totals_to_dataframe(
    totals: Sequence[CategoryTotal], decimals: int = 2
) -> pd.DataFrame:
    """
    Convert a breakdown into a DataFrame with each line's share.

    Columns: key, name, total, share_pct. The share is the line total as a
    percentage of the breakdown total (0 when the breakdown total is not
    positive). Row order is the order of ``totals``.
    """
    columns = ["key", "name", "total", "share_pct"]
    if not totals:
        return pd.DataFrame(columns=columns)

    grand_total = sum_totals(totals)
    rows = []
    for t in totals:
        share = t.total / grand_total * 100 if grand_total > 0 else Decimal("0")
        rows.append(
            {
                "key": t.key,
                "name": t.name,
                "total": _money(t.total, decimals),
                "share_pct": _money(share, 1),
            }
        )
    return pd.DataFrame(rows, columns=columns)


def balances_to_dataframe(
    balances: Sequence[AccountBalance], decimals: int = 2
) -> pd.DataFrame:
    """Account balances, in account order, with opening and current values."""
    columns = ["account_id", "name", "opening_balance", "balance"]
    rows = [
        {
            "account_id": b.account.id,
            "name": b.account.name,
            "opening_balance": _money(b.account.balance, decimals),
            "balance": _money(b.balance, decimals),
        }
        for b in balances
    ]
    return pd.DataFrame(rows, columns=columns)


def cash_flow_to_dataframe(
    summary: CashFlowSummary, decimals: int = 2
) -> pd.DataFrame:
    """Receitas, Despesas and Saldo lines of a cash-flow summary."""
    lines = [
        ("income", "Receitas", summary.income),
        ("expense", "Despesas", summary.expense),
        ("net", "Saldo", summary.net),
    ]
    rows = [
        {"key": key, "name": name, "total": _money(total, decimals)}
        for key, name, total in lines
    ]
    return pd.DataFrame(rows, columns=["key", "name", "total"])
