from decimal import Decimal

from hospeda_finance.models import (
    Account,
    Category,
    PaymentMethod,
    Transaction,
    TransactionType,
)
from hospeda_finance.references import (
    REPORT_COLUMNS,
    find_unknown_references,
    unknown_references_summary,
)

CATEGORIES = [
    Category("1", "Chalé UH 1", kind=TransactionType.INCOME),
    Category("2", "Aluguel", kind=TransactionType.EXPENSE),
]
METHODS = [PaymentMethod(id="1", name="Pix Inter")]
ACCOUNTS = [Account(id="1", name="Stone"), Account(id="2", name="Inter")]


def _tx(tx_id, tx_type=TransactionType.INCOME, **kw):
    data = {
        "id": tx_id,
        "type": tx_type,
        "value": Decimal("10"),
        "date": "2024-01-01",
        "account_id": "1",
        "category_id": "1",
        "payment_method_id": "1",
    }
    data.update(kw)
    return Transaction(**data)


def test_clean_data_has_no_unknown_references() -> None:
    txs = [
        _tx("a"),
        _tx("b", TransactionType.EXPENSE, category_id="2"),
        _tx("c", TransactionType.TRANSFER, category_id=None,
            payment_method_id=None, target_account_id="2"),
        _tx("d", category_id=None, payment_method_id=None),
    ]

    report = find_unknown_references(txs, CATEGORIES, METHODS, ACCOUNTS)

    assert report.empty
    assert list(report.columns) == REPORT_COLUMNS
    assert unknown_references_summary(report).empty


def test_dangling_references_are_listed_in_transaction_order() -> None:
    txs = [
        _tx("a", category_id="99"),
        # Category '2' exists, but only for expenses
        _tx("b", category_id="2"),
        _tx("c", payment_method_id="42", account_id="7"),
        _tx("d", TransactionType.TRANSFER, target_account_id="8"),
    ]

    report = find_unknown_references(txs, CATEGORIES, METHODS, ACCOUNTS)

    assert report.to_dict(orient="records") == [
        {"transaction_id": "a", "type": "INCOME", "field": "category_id", "reference": "99"},
        {"transaction_id": "b", "type": "INCOME", "field": "category_id", "reference": "2"},
        {"transaction_id": "c", "type": "INCOME", "field": "payment_method_id", "reference": "42"},
        {"transaction_id": "c", "type": "INCOME", "field": "account_id", "reference": "7"},
        {"transaction_id": "d", "type": "TRANSFER", "field": "target_account_id", "reference": "8"},
    ]

    summary = unknown_references_summary(report)
    assert summary.to_dict(orient="records") == [
        {"field": "category_id", "count": 2},
        {"field": "account_id", "count": 1},
        {"field": "payment_method_id", "count": 1},
        {"field": "target_account_id", "count": 1},
    ]
