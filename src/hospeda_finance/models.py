# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Domain model for Hospeda Finance.

This module defines the immutable value objects shared by every component of
the engine:

- Transaction:     a stored income / expense / transfer record,
- PaymentMethod:   how an income or expense was paid (fee, settlement delay),
- Category:        income or expense category (with optional parent group),
- Account:         bank / cash account with its opening balance,
- ProjectedEvent:  one dated monetary event derived from a Transaction.

All monetary amounts and percentages are ``Decimal``. Reference tables are
plain sequences of these dataclasses; the engine never mutates them.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Union

# Substrings (lowercase) identifying a card-class payment method by name.
CARD_NAME_MARKERS: tuple[str, ...] = ("cartão", "crédito")

_HUNDRED = Decimal("100")


class TransactionType(str, Enum):
    """Kind of a stored transaction."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"


class RepeatType(str, Enum):
    """Recurrence descriptor of a transaction."""

    NONE = "NONE"
    FIXO = "FIXO"  # open-ended monthly recurrence
    PARCELADO = "PARCELADO"  # split in N installments


class CategoryGroup(str, Enum):
    """Parent group of an income category."""

    HOSPEDAGEM = "hospedagem"
    OUTRAS_RECEITAS = "outras_receitas"


RawDate = Union[date, datetime, str, None]


def coerce_decimal(value: Any) -> Decimal:
    """Normalize a numeric value (int, float, str, Decimal) to Decimal.

    ``None`` and empty strings are treated as zero. Floats go through
    ``str()`` so that ``0.1`` becomes ``Decimal("0.1")``.

    Raises:
        ValueError: if the value cannot be interpreted as a number.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid monetary value: {value!r}")
    text = str(value).strip()
    if text == "":
        return Decimal("0")
    try:
        result = Decimal(text)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid monetary value: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid monetary value: {value!r}")
    return result


def coerce_date(value: RawDate) -> date:
    """Return the calendar date of a raw date value.

    Accepted inputs:
    - ``date`` objects (returned as-is),
    - ``datetime`` objects (timezone-aware values are converted to UTC first,
      naive values are taken as-is),
    - ISO-8601 strings, either a plain date (``2024-01-05``) or a full
      timestamp (``2024-01-05T10:00:00Z``).

    Raises:
        ValueError: if the value is missing or cannot be parsed.
    """
    if value is None:
        raise ValueError("Missing date.")

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()

    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        raise ValueError("Missing date.")

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    # Full timestamps: 'Z' is not understood by fromisoformat before 3.11.
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD.") from exc
    return coerce_date(parsed)


def check_percent(value: Decimal, what: str) -> None:
    """Raise ValueError unless ``value`` is a percentage between 0 and 100."""
    if not 0 <= value <= _HUNDRED:
        raise ValueError(f"Invalid {what}: {value} is not between 0 and 100.")


@dataclass(frozen=True)
class PaymentMethod:
    """
    Payment method used for an income or expense.

    Attributes
    ----------
    id :
        Identifier referenced by transactions.
    name :
        Display name (e.g. 'Pix Inter', 'Cartão Crédito Stone (1x)').
    fee :
        Percentage (0-100) of the gross income routed through this method
        that is kept by the payment provider.
    settlement_delay :
        Whether money paid with this method settles one cycle later
        (credit-card-like). ``None`` means "not configured": the flag is then
        derived from the display name.
    """

    id: str
    name: str
    fee: Decimal = Decimal("0")
    settlement_delay: Optional[bool] = None

    def __post_init__(self) -> None:
        check_percent(self.fee, f"fee of payment method {self.id!r}")

    @property
    def is_card_class(self) -> bool:
        if self.settlement_delay is not None:
            return self.settlement_delay
        return is_card_class_name(self.name)


def is_card_class_name(name: str) -> bool:
    """Return True if a payment method name looks like a card method."""
    lowered = (name or "").lower()
    return any(marker in lowered for marker in CARD_NAME_MARKERS)


@dataclass(frozen=True)
class Category:
    """Income or expense category.

    ``kind`` restricts the category to transactions of one type; ``None``
    matches any type. ``parent_id`` is only meaningful for income categories.
    """

    id: str
    name: str
    parent_id: Optional[CategoryGroup] = None
    kind: Optional[TransactionType] = None

    def matches(self, transaction: "Transaction") -> bool:
        if self.kind is not None and self.kind != transaction.type:
            return False
        return transaction.category_id == self.id


@dataclass(frozen=True)
class Account:
    """Bank, wallet or cash account with its opening balance."""

    id: str
    name: str
    balance: Decimal = Decimal("0")


@dataclass(frozen=True)
class Transaction:
    """
    Stored income, expense or transfer.

    ``date`` is kept as received from the producer and only validated when
    the transaction is projected (see ``projection.project``).

    For INCOME, ``account_id`` is the account credited; for EXPENSE the
    account debited; for TRANSFER the source account, ``target_account_id``
    being the destination.

    ``value`` must be non-negative and ``commission_percent``, when set,
    between 0 and 100; a ValueError is raised otherwise.
    """

    id: str
    type: TransactionType
    value: Decimal
    date: RawDate
    account_id: str
    category_id: Optional[str] = None
    payment_method_id: Optional[str] = None
    target_account_id: Optional[str] = None
    commission_percent: Optional[Decimal] = None
    repeat_type: RepeatType = RepeatType.NONE
    installments: Optional[int] = None
    description: str = ""
    main_category_id: Optional[CategoryGroup] = None
    origin_id: Optional[str] = None
    supplier_id: Optional[str] = None
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    guests: Optional[int] = None
    notes: str = ""

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(
                f"Transaction {self.id!r}: value cannot be negative ({self.value})."
            )
        if self.commission_percent is not None:
            check_percent(
                self.commission_percent, f"commission of transaction {self.id!r}"
            )

    @property
    def installment_count(self) -> int:
        """Number of events a non-recurring transaction is split into."""
        if (
            self.repeat_type == RepeatType.PARCELADO
            and self.installments is not None
            and self.installments >= 2
        ):
            return self.installments
        return 1


@dataclass(frozen=True)
class ProjectedEvent:
    """
    One dated monetary event derived from a Transaction.

    Attributes
    ----------
    date :
        Settlement date of the event.
    value :
        Amount of this event (a fraction of the transaction value for
        installments, the full value otherwise).
    transaction :
        Originating transaction.
    installment_index :
        1-based position of the event within its transaction.
    is_recurring :
        True for events of an open-ended (FIXO) recurrence.
    """

    date: date
    value: Decimal
    transaction: Transaction
    installment_index: int
    is_recurring: bool = False

    @property
    def type(self) -> TransactionType:
        return self.transaction.type
