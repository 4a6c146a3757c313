# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Cash-flow projection of stored transactions.

A stored Transaction is expanded into the dated monetary events it produces
over time:

1. Single transactions
   --------------------
   One event with the full value, on the transaction date, or
   ``card_delay_days`` later when paid with a card-class payment method.

2. Installments (PARCELADO, N >= 2)
   ---------------------------------
   N events spaced ``installment_interval_days`` apart, the first one
   offset by the card delay when applicable. The value is split evenly:
   every installment is ``value / N`` truncated to the currency minor unit,
   the last installment absorbing the remainder, so that the installments
   always add up to the original value.

3. Fixed recurrences (FIXO)
   -------------------------
   ``horizon_months`` events (60 by default) with the full value, one per
   calendar month starting at the transaction date.

Projection is a pure function: the transaction and the payment method table
are only read. A transaction with a missing or malformed date is rejected
with ``InvalidTransactionDateError``; ``project_all`` collects such failures
and keeps projecting the rest of the batch.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal
from typing import Optional

from .config import ProjectionSettings
from .logging_setup import get_logger
from .models import (
    PaymentMethod,
    ProjectedEvent,
    RepeatType,
    Transaction,
    coerce_date,
)
from .periods import add_days, add_months

logger = get_logger(__name__)

DEFAULT_SETTINGS = ProjectionSettings()


class ProjectionError(ValueError):
    """Raised when a transaction cannot be projected."""

    def __init__(self, transaction_id: str, reason: str) -> None:
        super().__init__(f"Transaction {transaction_id!r}: {reason}")
        self.transaction_id = transaction_id
        self.reason = reason


class InvalidTransactionDateError(ProjectionError):
    """The transaction date is missing or cannot be parsed."""


@dataclass(frozen=True)
class ProjectionFailure:
    """A transaction rejected during batch projection."""

    transaction_id: str
    reason: str


@dataclass(frozen=True)
class ProjectionResult:
    """Events of a batch projection and the transactions that were rejected."""

    events: tuple[ProjectedEvent, ...] = ()
    failures: tuple[ProjectionFailure, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.failures


def find_payment_method(
    payment_methods: Iterable[PaymentMethod], method_id: Optional[str]
) -> Optional[PaymentMethod]:
    """Return the payment method with the given id, or None."""
    if not method_id:
        return None
    for pm in payment_methods:
        if pm.id == method_id:
            return pm
    return None


def split_value(value: Decimal, count: int, quantum: Decimal) -> list[Decimal]:
    """Split ``value`` in ``count`` parts, the last one absorbing the remainder.

    Each part but the last is ``value / count`` truncated to ``quantum``:

        split_value(Decimal("100"), 3, Decimal("0.01"))
        -> [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    """
    if count <= 1:
        return [value]
    share = (value / count).quantize(quantum, rounding=ROUND_DOWN)
    last = value - share * (count - 1)
    return [share] * (count - 1) + [last]


def project(
    transaction: Transaction,
    payment_methods: Sequence[PaymentMethod],
    settings: Optional[ProjectionSettings] = None,
) -> list[ProjectedEvent]:
    """Expand one transaction into its ordered list of projected events.

    Args:
        transaction: Transaction to project. It is not modified.
        payment_methods: Full payment method table, used to resolve whether
            the transaction was paid with a card-class method.
        settings: Projection policy (horizon, delays, rounding). Defaults
            to the product defaults.

    Returns:
        The events in ascending installment order.

    Raises:
        InvalidTransactionDateError: if the transaction date is missing or
            malformed.
    """
    settings = settings or DEFAULT_SETTINGS

    try:
        base = coerce_date(transaction.date)
    except ValueError as exc:
        raise InvalidTransactionDateError(transaction.id, str(exc)) from exc

    method = find_payment_method(payment_methods, transaction.payment_method_id)
    is_card = method is not None and method.is_card_class

    if transaction.repeat_type == RepeatType.FIXO:
        return [
            ProjectedEvent(
                date=add_months(base, offset),
                value=transaction.value,
                transaction=transaction,
                installment_index=offset + 1,
                is_recurring=True,
            )
            for offset in range(settings.horizon_months)
        ]

    count = transaction.installment_count
    values = split_value(transaction.value, count, settings.money_quantum)
    delay = settings.card_delay_days if is_card else 0

    return [
        ProjectedEvent(
            date=add_days(base, delay + i * settings.installment_interval_days),
            value=values[i],
            transaction=transaction,
            installment_index=i + 1,
        )
        for i in range(count)
    ]


def project_all(
    transactions: Iterable[Transaction],
    payment_methods: Sequence[PaymentMethod],
    settings: Optional[ProjectionSettings] = None,
) -> ProjectionResult:
    """Project a batch of transactions.

    A transaction that cannot be projected is recorded in
    ``ProjectionResult.failures`` (and logged as a warning); the rest of
    the batch is still projected. Events are returned in input order.
    """
    events: list[ProjectedEvent] = []
    failures: list[ProjectionFailure] = []

    for t in transactions:
        try:
            events.extend(project(t, payment_methods, settings))
        except ProjectionError as exc:
            logger.warning("Skipping transaction %s: %s", t.id, exc.reason)
            failures.append(ProjectionFailure(transaction_id=t.id, reason=exc.reason))

    if failures:
        logger.warning(
            "%d transaction(s) rejected during projection.", len(failures)
        )

    return ProjectionResult(events=tuple(events), failures=tuple(failures))
