from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from hospeda_finance.models import (
    Category,
    PaymentMethod,
    RepeatType,
    Transaction,
    TransactionType,
    coerce_date,
    coerce_decimal,
    is_card_class_name,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, Decimal("0")),
        ("", Decimal("0")),
        ("  12.50 ", Decimal("12.50")),
        (0.1, Decimal("0.1")),
        (7, Decimal("7")),
        (Decimal("3.3"), Decimal("3.3")),
    ],
)
def test_coerce_decimal(raw, expected) -> None:
    assert coerce_decimal(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "NaN", "Infinity", True])
def test_coerce_decimal_rejects_non_numbers(raw) -> None:
    with pytest.raises(ValueError):
        coerce_decimal(raw)


def test_coerce_date_variants() -> None:
    assert coerce_date("2024-01-05") == date(2024, 1, 5)
    assert coerce_date("2024-01-05T23:59:00Z") == date(2024, 1, 5)
    assert coerce_date("2024-01-05T23:00:00-03:00") == date(2024, 1, 6)
    assert coerce_date(datetime(2024, 1, 5, 23, 0)) == date(2024, 1, 5)
    aware = datetime(2024, 1, 5, 23, 0, tzinfo=timezone(timedelta(hours=-3)))
    assert coerce_date(aware) == date(2024, 1, 6)


@pytest.mark.parametrize("raw", [None, "", "   ", "31/01/2024", "2024-02-30"])
def test_coerce_date_rejects_invalid_values(raw) -> None:
    with pytest.raises(ValueError):
        coerce_date(raw)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Cartão Crédito Stone (1x)", True),
        ("CARTÃO débito", True),
        ("Crédito Getnet", True),
        ("Pix Inter", False),
        ("Booking", False),
        ("", False),
    ],
)
def test_card_class_from_name(name: str, expected: bool) -> None:
    assert is_card_class_name(name) is expected
    assert PaymentMethod(id="x", name=name).is_card_class is expected


def test_explicit_settlement_delay_wins_over_name() -> None:
    assert PaymentMethod(id="x", name="Pix", settlement_delay=True).is_card_class
    assert not PaymentMethod(
        id="y", name="Cartão pré-pago", settlement_delay=False
    ).is_card_class


def test_category_matches_type_and_id() -> None:
    income = Transaction(
        id="t", type=TransactionType.INCOME, value=Decimal("1"),
        date="2024-01-01", account_id="1", category_id="1",
    )

    assert Category("1", "Chalé UH 1", kind=TransactionType.INCOME).matches(income)
    assert not Category("1", "Serviços", kind=TransactionType.EXPENSE).matches(income)
    assert Category("1", "Qualquer").matches(income)
    assert not Category("2", "Chalé UH 2").matches(income)


@pytest.mark.parametrize(
    "repeat_type, installments, expected",
    [
        (RepeatType.PARCELADO, 4, 4),
        (RepeatType.PARCELADO, 1, 1),
        (RepeatType.PARCELADO, None, 1),
        (RepeatType.NONE, 4, 1),
        (RepeatType.FIXO, 4, 1),
    ],
)
def test_installment_count(repeat_type, installments, expected) -> None:
    t = Transaction(
        id="t", type=TransactionType.EXPENSE, value=Decimal("1"),
        date="2024-01-01", account_id="1",
        repeat_type=repeat_type, installments=installments,
    )
    assert t.installment_count == expected


def test_transaction_rejects_negative_value() -> None:
    with pytest.raises(ValueError, match="negative"):
        Transaction(
            id="t", type=TransactionType.INCOME, value=Decimal("-300"),
            date="2024-01-01", account_id="1",
        )


@pytest.mark.parametrize("pct", ["-1", "100.01", "250"])
def test_percentages_outside_0_100_are_rejected(pct: str) -> None:
    with pytest.raises(ValueError, match="between 0 and 100"):
        PaymentMethod(id="x", name="Link", fee=Decimal(pct))
    with pytest.raises(ValueError, match="between 0 and 100"):
        Transaction(
            id="t", type=TransactionType.INCOME, value=Decimal("10"),
            date="2024-01-01", account_id="1", commission_percent=Decimal(pct),
        )


@pytest.mark.parametrize("pct", ["0", "16.00", "100"])
def test_percentage_bounds_are_inclusive(pct: str) -> None:
    assert PaymentMethod(id="x", name="Link", fee=Decimal(pct)).fee == Decimal(pct)
    t = Transaction(
        id="t", type=TransactionType.INCOME, value=Decimal("0"),
        date="2024-01-01", account_id="1", commission_percent=Decimal(pct),
    )
    assert t.commission_percent == Decimal(pct)
