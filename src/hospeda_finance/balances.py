# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Account balances computed from projected events.

The balance of an account as of a reference date is its opening balance
plus every event settled on or before that date:

- INCOME credited to the account:   + value
- EXPENSE paid from the account:    - value
- TRANSFER out of the account:      - value
- TRANSFER into the account:        + value

Each account is computed independently from the same immutable event list.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from .models import Account, ProjectedEvent, RawDate, TransactionType, coerce_date


@dataclass(frozen=True)
class AccountBalance:
    """Balance of one account as of a date."""

    account: Account
    balance: Decimal


def _signed_value(event: ProjectedEvent, account_id: str) -> Decimal:
    """Contribution of one event to the balance of ``account_id``."""
    t = event.transaction
    if t.type == TransactionType.INCOME:
        return event.value if t.account_id == account_id else Decimal("0")
    if t.type == TransactionType.EXPENSE:
        return -event.value if t.account_id == account_id else Decimal("0")

    # Transfer: debit the source, credit the target.
    delta = Decimal("0")
    if t.account_id == account_id:
        delta -= event.value
    if t.target_account_id == account_id:
        delta += event.value
    return delta


def current_balance(
    account: Account, events: Iterable[ProjectedEvent], as_of: RawDate
) -> Decimal:
    """Return the balance of ``account`` including events up to ``as_of``.

    Args:
        account: Account with its opening (seed) balance.
        events: All projected events (any account).
        as_of: Reference date, inclusive. A datetime or ISO-8601 string is
            reduced to its calendar date (UTC for aware values).

    Raises:
        ValueError: if ``as_of`` is missing or malformed.
    """
    as_of = coerce_date(as_of)
    balance = account.balance
    for e in events:
        if e.date <= as_of:
            balance += _signed_value(e, account.id)
    return balance


def balances_by_account(
    accounts: Sequence[Account], events: Sequence[ProjectedEvent], as_of: RawDate
) -> list[AccountBalance]:
    """Current balance of every account, in the configured account order."""
    as_of = coerce_date(as_of)
    relevant = [e for e in events if e.date <= as_of]
    return [
        AccountBalance(account=a, balance=current_balance(a, relevant, as_of))
        for a in accounts
    ]


def total_balance(balances: Iterable[AccountBalance]) -> Decimal:
    return sum((b.balance for b in balances), Decimal("0"))
