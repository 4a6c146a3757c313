# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Reference checks for Hospeda Finance.

Transactions reference categories, accounts and payment methods by
identifier. The reference tables are maintained separately, so a
transaction may point to an entry that was deleted or never existed.

Such transactions are not rejected: their events still move money for
cash-flow purposes, but they cannot be attributed to a category or fee line.
This module reports them so the user can fix the data:

- find_unknown_references(): one row per dangling reference,
- unknown_references_summary(): counts per referenced field.
"""

from collections.abc import Sequence

import pandas as pd

from .models import Account, Category, PaymentMethod, Transaction, TransactionType

REPORT_COLUMNS = ["transaction_id", "type", "field", "reference"]


def find_unknown_references(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
    payment_methods: Sequence[PaymentMethod],
    accounts: Sequence[Account],
) -> pd.DataFrame:
    """List the references that do not resolve in the reference tables.

    Checks, per transaction:
    - ``category_id``: incomes and expenses only (must match a category of
      the same kind, or a category without kind),
    - ``payment_method_id``: when set, incomes and expenses only,
    - ``account_id``: always,
    - ``target_account_id``: transfers only.

    Missing optional references (no payment method, no category) are not
    reported: they simply produce no fee or breakdown line.

    Returns:
        DataFrame with columns transaction_id, type, field, reference,
        in transaction order.
    """
    method_ids = {pm.id for pm in payment_methods}
    account_ids = {a.id for a in accounts}

    rows: list[dict[str, str]] = []

    def _flag(t: Transaction, field: str, reference: str) -> None:
        rows.append(
            {
                "transaction_id": t.id,
                "type": t.type.value,
                "field": field,
                "reference": reference,
            }
        )

    for t in transactions:
        if t.type != TransactionType.TRANSFER:
            if t.category_id and not any(c.matches(t) for c in categories):
                _flag(t, "category_id", t.category_id)
            if t.payment_method_id and t.payment_method_id not in method_ids:
                _flag(t, "payment_method_id", t.payment_method_id)

        if t.account_id not in account_ids:
            _flag(t, "account_id", t.account_id)

        if t.type == TransactionType.TRANSFER and (
            t.target_account_id not in account_ids
        ):
            _flag(t, "target_account_id", t.target_account_id or "")

    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def unknown_references_summary(report: pd.DataFrame) -> pd.DataFrame:
    """Number of dangling references per field, most frequent first."""
    if report.empty:
        return pd.DataFrame(columns=["field", "count"])
    summary = report.groupby("field", as_index=False).size()
    summary = summary.rename(columns={"size": "count"})
    return summary.sort_values(
        ["count", "field"], ascending=[False, True], kind="stable"
    ).reset_index(drop=True)
