# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for Hospeda Finance.

This module reads transactions and reference tables from CSV files (for
example exports of the spreadsheet used by the web application) and turns
them into the immutable model objects consumed by the engine.

Expected input formats
----------------------
Column names are case-insensitive; unknown columns are ignored.

Transactions
    id, type, value, date, category_id, payment_method_id, account_id,
    target_account_id, commission_percent, repeat_type, installments,
    description

    Optional descriptive columns: main_category_id, origin_id, supplier_id,
    check_in, check_out, guests, notes.

    ``date`` is NOT parsed here: it is kept as text and validated by the
    projector, so that one bad row only rejects its own transaction.

Categories
    id, name, kind (INCOME / EXPENSE, optional), parent_id (optional)

Payment methods
    id, name, fee, settlement_delay (optional, true/false)

Accounts
    id, name, balance

Every cell is read as text; empty cells are absent values. Malformed
numbers or enum values raise a ValueError naming the file and the column.
Negative transaction values and percentages outside 0-100 are rejected by
the models, the error naming the file.
"""

import os
from decimal import Decimal
from typing import Any, Callable, Optional, TypeVar, Union

import pandas as pd

from .models import (
    Account,
    Category,
    CategoryGroup,
    PaymentMethod,
    RepeatType,
    Transaction,
    TransactionType,
    coerce_decimal,
)

PathLike = Union[str, "os.PathLike[str]"]
T = TypeVar("T")

TRANSACTION_COLUMNS = {"id", "type", "value", "date", "account_id"}
CATEGORY_COLUMNS = {"id", "name"}
PAYMENT_METHOD_COLUMNS = {"id", "name"}
ACCOUNT_COLUMNS = {"id", "name"}

_TRUE = {"true", "1", "yes", "sim", "y", "s"}
_FALSE = {"false", "0", "no", "nao", "não", "n"}


def _read_csv(path: PathLike, required: set[str]) -> pd.DataFrame:
    """Read a CSV as text, normalize column names and check required ones."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).lower().strip() for c in df.columns]

    missing = required - set(df.columns)
    if missing:
        raise ValueError(
            f"Invalid CSV structure in {path}: missing column(s) "
            f"{', '.join(sorted(missing))}."
        )
    return df


def _cell(row: dict[str, Any], column: str) -> Optional[str]:
    value = row.get(column)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _convert(
    row: dict[str, Any],
    column: str,
    converter: Callable[[str], T],
    path: PathLike,
) -> Optional[T]:
    raw = _cell(row, column)
    if raw is None:
        return None
    try:
        return converter(raw)
    except ValueError as exc:
        raise ValueError(
            f"Invalid value {raw!r} in column '{column}' of {path}."
        ) from exc


def _parse_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"Invalid boolean: {raw!r}")


def _parse_int(raw: str) -> int:
    # Spreadsheet exports often write integers as '3.0'.
    number = coerce_decimal(raw)
    if number != number.to_integral_value():
        raise ValueError(f"Invalid integer: {raw!r}")
    return int(number)


def _build(path: PathLike, model: Callable[..., T], **fields: Any) -> T:
    """Instantiate a model, naming the file when its own checks fail."""
    try:
        return model(**fields)
    except ValueError as exc:
        raise ValueError(f"{exc} (in {path})") from exc


def _enum_parser(enum_cls):
    def _parse(raw: str):
        for candidate in (raw, raw.upper(), raw.lower()):
            try:
                return enum_cls(candidate)
            except ValueError:
                continue
        raise ValueError(f"Invalid {enum_cls.__name__}: {raw!r}")

    return _parse


def read_transactions(path: PathLike) -> list[Transaction]:
    """
    Read transactions from a CSV file.

    Returns
    -------
    list[Transaction]
        Transactions in file order. Dates are kept as raw text.

    Raises
    ------
    ValueError
        If a required column is missing, if an id, type or value is absent,
        or if a value, type, repeat type, percentage or installment count is
        malformed or out of range.
    """
    df = _read_csv(path, TRANSACTION_COLUMNS)
    out: list[Transaction] = []

    for row in df.to_dict(orient="records"):
        tx_id = _cell(row, "id")
        if tx_id is None:
            raise ValueError(f"Missing transaction id in {path}.")

        tx_type = _convert(row, "type", _enum_parser(TransactionType), path)
        if tx_type is None:
            raise ValueError(f"Missing type for transaction {tx_id!r} in {path}.")

        value = _convert(row, "value", coerce_decimal, path)
        if value is None:
            raise ValueError(f"Missing value for transaction {tx_id!r} in {path}.")
        repeat_type = (
            _convert(row, "repeat_type", _enum_parser(RepeatType), path)
            or RepeatType.NONE
        )

        out.append(
            _build(
                path,
                Transaction,
                id=tx_id,
                type=tx_type,
                value=value,
                date=_cell(row, "date"),
                account_id=_cell(row, "account_id") or "",
                category_id=_cell(row, "category_id"),
                payment_method_id=_cell(row, "payment_method_id"),
                target_account_id=_cell(row, "target_account_id"),
                commission_percent=_convert(
                    row, "commission_percent", coerce_decimal, path
                ),
                repeat_type=repeat_type,
                installments=_convert(row, "installments", _parse_int, path),
                description=_cell(row, "description") or "",
                main_category_id=_convert(
                    row, "main_category_id", _enum_parser(CategoryGroup), path
                ),
                origin_id=_cell(row, "origin_id"),
                supplier_id=_cell(row, "supplier_id"),
                check_in=_cell(row, "check_in"),
                check_out=_cell(row, "check_out"),
                guests=_convert(row, "guests", _parse_int, path),
                notes=_cell(row, "notes") or "",
            )
        )

    return out


def read_categories(path: PathLike) -> list[Category]:
    """Read income / expense categories from a CSV file (file order kept)."""
    df = _read_csv(path, CATEGORY_COLUMNS)
    return [
        Category(
            id=_cell(row, "id") or "",
            name=_cell(row, "name") or "",
            parent_id=_convert(row, "parent_id", _enum_parser(CategoryGroup), path),
            kind=_convert(row, "kind", _enum_parser(TransactionType), path),
        )
        for row in df.to_dict(orient="records")
    ]


def read_payment_methods(path: PathLike) -> list[PaymentMethod]:
    """Read payment methods from a CSV file (file order kept)."""
    df = _read_csv(path, PAYMENT_METHOD_COLUMNS)
    return [
        _build(
            path,
            PaymentMethod,
            id=_cell(row, "id") or "",
            name=_cell(row, "name") or "",
            fee=_convert(row, "fee", coerce_decimal, path) or Decimal("0"),
            settlement_delay=_convert(row, "settlement_delay", _parse_bool, path),
        )
        for row in df.to_dict(orient="records")
    ]


def read_accounts(path: PathLike) -> list[Account]:
    """Read accounts and their opening balances from a CSV file."""
    df = _read_csv(path, ACCOUNT_COLUMNS)
    return [
        Account(
            id=_cell(row, "id") or "",
            name=_cell(row, "name") or "",
            balance=_convert(row, "balance", coerce_decimal, path) or Decimal("0"),
        )
        for row in df.to_dict(orient="records")
    ]
