from decimal import Decimal
from pathlib import Path

import pytest

from hospeda_finance.io import (
    read_accounts,
    read_categories,
    read_payment_methods,
    read_transactions,
)
from hospeda_finance.models import CategoryGroup, RepeatType, TransactionType


def _csv(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content.lstrip(), encoding="utf-8")
    return path


def test_read_transactions(tmp_path) -> None:
    path = _csv(
        tmp_path,
        "transactions.csv",
        """
ID,Type,Value,Date,Category_Id,Payment_Method_Id,Account_Id,Target_Account_Id,Commission_Percent,Repeat_Type,Installments,Description,Extra
t1,INCOME,2000.50,2024-01-10,1,6,1,,10,NONE,,Reserva,ignored
t2,expense,300,2024-01-05,2,1,2,,,parcelado,3.0,Compra,
t3,TRANSFER,150,2024-02-01,,,1,2,,,,,
t4,INCOME,10,not-a-date,1,3,1,,,,,,
""",
    )

    txs = read_transactions(path)

    assert [t.id for t in txs] == ["t1", "t2", "t3", "t4"]

    t1 = txs[0]
    assert t1.type == TransactionType.INCOME
    assert t1.value == Decimal("2000.50")
    assert t1.date == "2024-01-10"
    assert t1.commission_percent == Decimal("10")
    assert t1.repeat_type == RepeatType.NONE
    assert t1.installments is None
    assert t1.description == "Reserva"

    t2 = txs[1]
    assert t2.type == TransactionType.EXPENSE
    assert t2.repeat_type == RepeatType.PARCELADO
    assert t2.installments == 3
    assert t2.installment_count == 3

    t3 = txs[2]
    assert t3.type == TransactionType.TRANSFER
    assert t3.target_account_id == "2"
    assert t3.category_id is None
    assert t3.payment_method_id is None

    # Dates are validated by the projector, not by the reader
    assert txs[3].date == "not-a-date"


def test_read_transactions_missing_column(tmp_path) -> None:
    path = _csv(tmp_path, "transactions.csv", "id,type,value\nt1,INCOME,10\n")
    with pytest.raises(ValueError, match="missing column"):
        read_transactions(path)


@pytest.mark.parametrize(
    "row, column",
    [
        ("t1,INCOME,abc,2024-01-10,1,", "value"),
        ("t1,GIFT,10,2024-01-10,1,", "type"),
        ("t1,INCOME,10,2024-01-10,1,2.5", "installments"),
    ],
)
def test_read_transactions_malformed_values(tmp_path, row: str, column: str) -> None:
    path = _csv(
        tmp_path,
        "transactions.csv",
        f"id,type,value,date,account_id,installments\n{row}\n",
    )
    with pytest.raises(ValueError, match=column):
        read_transactions(path)


def test_read_transactions_requires_id_and_type(tmp_path) -> None:
    path = _csv(
        tmp_path,
        "transactions.csv",
        "id,type,value,date,account_id\n,INCOME,10,2024-01-10,1\n",
    )
    with pytest.raises(ValueError, match="Missing transaction id"):
        read_transactions(path)

    path = _csv(
        tmp_path,
        "transactions.csv",
        "id,type,value,date,account_id\nt1,,10,2024-01-10,1\n",
    )
    with pytest.raises(ValueError, match="Missing type"):
        read_transactions(path)


def test_read_reference_tables(tmp_path) -> None:
    categories = read_categories(
        _csv(
            tmp_path,
            "categories.csv",
            """
id,name,kind,parent_id
1,Chalé UH 1,INCOME,hospedagem
4,Frigobar,income,OUTRAS_RECEITAS
1,Serviços e Assinaturas,EXPENSE,
""",
        )
    )
    methods = read_payment_methods(
        _csv(
            tmp_path,
            "payment_methods.csv",
            """
id,name,fee,settlement_delay
2,Pix Stone,0.99,
4,Cartão Crédito Stone (1x),2.96,
10,Cartão pré-pago,,false
""",
        )
    )
    accounts = read_accounts(
        _csv(tmp_path, "accounts.csv", "id,name,balance\n1,Stone,150.25\n2,Inter,\n")
    )

    assert [(c.id, c.name, c.kind, c.parent_id) for c in categories] == [
        ("1", "Chalé UH 1", TransactionType.INCOME, CategoryGroup.HOSPEDAGEM),
        ("4", "Frigobar", TransactionType.INCOME, CategoryGroup.OUTRAS_RECEITAS),
        ("1", "Serviços e Assinaturas", TransactionType.EXPENSE, None),
    ]

    assert [m.fee for m in methods] == [Decimal("0.99"), Decimal("2.96"), Decimal("0")]
    assert [m.settlement_delay for m in methods] == [None, None, False]
    assert [m.is_card_class for m in methods] == [False, True, False]

    assert [(a.name, a.balance) for a in accounts] == [
        ("Stone", Decimal("150.25")),
        ("Inter", Decimal("0")),
    ]


def test_read_payment_methods_bad_flag(tmp_path) -> None:
    path = _csv(
        tmp_path, "payment_methods.csv", "id,name,settlement_delay\n1,Pix,maybe\n"
    )
    with pytest.raises(ValueError, match="settlement_delay"):
        read_payment_methods(path)


def test_bundled_reference_data_is_readable() -> None:
    root = Path(__file__).resolve().parents[1] / "data"

    txs = read_transactions(root / "input" / "transactions.csv")
    methods = read_payment_methods(root / "reference" / "payment_methods.csv")
    categories = read_categories(root / "reference" / "categories.csv")
    accounts = read_accounts(root / "reference" / "accounts.csv")

    assert txs and methods and categories and accounts
    assert any(m.is_card_class for m in methods)


def test_read_transactions_requires_a_value(tmp_path) -> None:
    path = _csv(
        tmp_path,
        "transactions.csv",
        "id,type,value,date,account_id\nt1,INCOME,,2024-01-10,1\n",
    )
    with pytest.raises(ValueError, match="Missing value for transaction 't1'"):
        read_transactions(path)


def test_out_of_range_amounts_name_the_file(tmp_path) -> None:
    path = _csv(
        tmp_path,
        "transactions.csv",
        "id,type,value,date,account_id\nt1,INCOME,-300,2024-01-10,1\n",
    )
    with pytest.raises(ValueError, match="transactions.csv"):
        read_transactions(path)

    path = _csv(
        tmp_path,
        "transactions.csv",
        "id,type,value,date,account_id,commission_percent\n"
        "t1,INCOME,300,2024-01-10,1,110\n",
    )
    with pytest.raises(ValueError, match="between 0 and 100"):
        read_transactions(path)

    path = _csv(tmp_path, "payment_methods.csv", "id,name,fee\n1,Link,250\n")
    with pytest.raises(ValueError, match="payment_methods.csv"):
        read_payment_methods(path)
