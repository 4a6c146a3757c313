from datetime import date
from decimal import Decimal

from hospeda_finance.balances import AccountBalance
from hospeda_finance.categories import CashFlowSummary, CategoryTotal
from hospeda_finance.engine import build_report
from hospeda_finance.models import (
    Account,
    Category,
    PaymentMethod,
    Transaction,
    TransactionType,
)
from hospeda_finance.projection import project_all
from hospeda_finance.views import (
    STATEMENT_COLUMNS,
    balances_to_dataframe,
    cash_flow_to_dataframe,
    report_indicators,
    report_to_statement,
    totals_to_dataframe,
)

CATEGORIES = [
    Category("1", "Chalé UH 1", kind=TransactionType.INCOME),
    Category("2", "Aluguel", kind=TransactionType.EXPENSE),
]
METHODS = [PaymentMethod(id="20", name="Link Stone", fee=Decimal("3"))]


def _report():
    txs = [
        Transaction(
            id="stay",
            type=TransactionType.INCOME,
            value=Decimal("2000"),
            date=date(2024, 1, 10),
            account_id="1",
            category_id="1",
            payment_method_id="20",
            commission_percent=Decimal("10"),
        ),
        Transaction(
            id="rent",
            type=TransactionType.EXPENSE,
            value=Decimal("250"),
            date=date(2024, 1, 5),
            account_id="1",
            category_id="2",
        ),
    ]
    events = project_all(txs, METHODS).events
    return build_report(events, CATEGORIES, METHODS, month=1, year=2024)


def test_report_to_statement_structure() -> None:
    """Statement lines follow the DRE layout with signed deductions."""
    df = report_to_statement(_report())

    assert list(df.columns) == STATEMENT_COLUMNS
    assert list(df["id"]) == [
        "gross_revenue",
        "income:1",
        "fee:20",
        "commissions",
        "net_revenue",
        "total_expenses",
        "expense:2",
        "net_profit",
    ]
    assert list(df["display_order"]) == [10, 20, 30, 40, 50, 60, 70, 80]

    amounts = dict(zip(df["id"], df["amount"]))
    assert amounts["gross_revenue"] == 2000.0
    assert amounts["fee:20"] == -60.0
    assert amounts["commissions"] == -200.0
    assert amounts["net_revenue"] == 1740.0
    assert amounts["total_expenses"] == -250.0
    assert amounts["net_profit"] == 1490.0

    names = dict(zip(df["id"], df["name"]))
    assert names["fee:20"] == "(-) Taxas Link Stone"
    assert names["income:1"] == "Chalé UH 1"


def test_totals_add_up_in_statement() -> None:
    df = report_to_statement(_report())
    amounts = dict(zip(df["id"], df["amount"]))

    assert (
        amounts["gross_revenue"] + amounts["fee:20"] + amounts["commissions"]
        == amounts["net_revenue"]
    )
    assert amounts["net_revenue"] + amounts["total_expenses"] == amounts["net_profit"]


def test_report_indicators() -> None:
    df = report_indicators(_report())
    values = dict(zip(df["key"], df["value"]))

    assert values["margin"] == 74.5
    assert values["expense_ratio"] == 12.5
    assert values["gross_revenue"] == 2000.0
    assert values["total_deductions"] == 260.0


def test_totals_to_dataframe_shares() -> None:
    totals = [
        CategoryTotal("1", "Chalé UH 1", Decimal("750")),
        CategoryTotal("2", "Chalé UH 2", Decimal("250")),
    ]
    df = totals_to_dataframe(totals)

    assert list(df.columns) == ["key", "name", "total", "share_pct"]
    assert list(df["total"]) == [750.0, 250.0]
    assert list(df["share_pct"]) == [75.0, 25.0]


def test_totals_to_dataframe_empty() -> None:
    df = totals_to_dataframe([])
    assert df.empty
    assert list(df.columns) == ["key", "name", "total", "share_pct"]


def test_balances_to_dataframe() -> None:
    stone = Account(id="1", name="Stone", balance=Decimal("100"))
    df = balances_to_dataframe([AccountBalance(stone, Decimal("1234.567"))])

    assert df.to_dict(orient="records") == [
        {
            "account_id": "1",
            "name": "Stone",
            "opening_balance": 100.0,
            "balance": 1234.57,
        }
    ]


def test_cash_flow_to_dataframe() -> None:
    summary = CashFlowSummary(income=Decimal("1250.25"), expense=Decimal("400"))
    df = cash_flow_to_dataframe(summary)

    assert df.to_dict(orient="records") == [
        {"key": "income", "name": "Receitas", "total": 1250.25},
        {"key": "expense", "name": "Despesas", "total": 400.0},
        {"key": "net", "name": "Saldo", "total": 850.25},
    ]
