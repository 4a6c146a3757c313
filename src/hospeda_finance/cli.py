# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-line interface for Hospeda Finance.

The CLI reads the transactions and reference tables from the CSV files
configured in ``hospeda_finance_config.toml`` (section [data]), projects
every transaction once, and renders one of the following outputs:

report
    Monthly income statement (DRE) and its indicators:

        python -m hospeda_finance.cli report --month 1 --year 2024

trend
    Gross revenue, net revenue and profit for each month of a year:

        python -m hospeda_finance.cli trend --year 2024

balances
    Balance of every account as of a date (default: today):

        python -m hospeda_finance.cli balances --as-of 2024-02-01

breakdown
    Income or expense totals per category, optionally restricted to one
    month, sorted by value (chart legends) or in configured order:

        python -m hospeda_finance.cli breakdown --kind expense --order value

fees
    Payment-method fees of a month:

        python -m hospeda_finance.cli fees --month 1 --year 2024

summary
    Total income, total expense and net cash flow over every projected
    event (or one month with --month/--year/--period):

        python -m hospeda_finance.cli summary

check
    Transactions rejected by the projector (bad dates) and references to
    unknown categories, accounts or payment methods.

Common options: ``--config``, ``--log-level``, ``--display-mode``
(table / csv / both) and ``--output`` (CSV directory).

Data-quality warnings are emitted through the ``hospeda_finance`` logger on
stderr; results are printed on stdout.
"""

import argparse
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__, periods
from .balances import balances_by_account
from .categories import (
    cash_flow_summary,
    totals_by_category,
    totals_by_payment_method_fee,
)
from .config import AppConfig, load_app_config
from .engine import build_report
from .io import read_accounts, read_categories, read_payment_methods, read_transactions
from .logging_setup import configure_logging, get_logger
from .models import Account, Category, PaymentMethod, Transaction, TransactionType
from .multi_periods import EventIndex, ProjectionCache, build_trend
from .periods import determine_period_from_args, filter_events_by_period
from .projection import ProjectionResult
from .references import find_unknown_references, unknown_references_summary
from .views import (
    balances_to_dataframe,
    cash_flow_to_dataframe,
    report_indicators,
    report_to_statement,
    totals_to_dataframe,
)

logger = get_logger(__name__)


def _add_period_args(p: argparse.ArgumentParser, required: bool = False) -> None:
    p.add_argument(
        "--month",
        type=int,
        choices=range(1, 13),
        metavar="1-12",
        required=required,
        help="Reporting month (1-12). Defaults to the current month.",
    )
    p.add_argument(
        "--year",
        type=int,
        help="Reporting year. Defaults to the current year.",
    )
    p.add_argument(
        "--period",
        choices=["current", "last-month"],
        help="Predefined month, used when --month/--year are not given.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m hospeda_finance.cli",
        description=(
            "Hospeda Finance - cash-flow projection and DRE reports for "
            "hospitality businesses. Reads transactions and reference tables "
            "from CSV files, projects installments, recurrences and card "
            "settlement delays, and renders reports."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of hospeda_finance and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'hospeda_finance_config.toml' in the current directory is used "
            "when present."
        ),
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        help="Override the logging level (DEBUG, INFO, WARNING, ERROR).",
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, 'csv' writes CSV files only, "
            "'both' does both."
        ),
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Output directory for CSV files when the display mode includes "
            "'csv'. Defaults to 'data/output'."
        ),
    )

    sub = ap.add_subparsers(dest="command")

    p_report = sub.add_parser("report", help="Monthly income statement (DRE).")
    _add_period_args(p_report)

    p_trend = sub.add_parser("trend", help="Monthly trend over one year.")
    p_trend.add_argument("--year", type=int, help="Year (default: current year).")

    p_bal = sub.add_parser("balances", help="Account balances as of a date.")
    p_bal.add_argument(
        "--as-of",
        dest="as_of",
        help="Reference date (YYYY-MM-DD), inclusive. Defaults to today.",
    )

    p_break = sub.add_parser("breakdown", help="Totals per category.")
    p_break.add_argument(
        "--kind",
        choices=["income", "expense"],
        default="income",
        help="Which transactions to break down (default: income).",
    )
    p_break.add_argument(
        "--order",
        choices=["value", "config"],
        default="value",
        help="Sort by descending total (value) or category order (config).",
    )
    p_break.add_argument(
        "--all-periods",
        action="store_true",
        help="Use every projected event instead of a single month.",
    )
    _add_period_args(p_break)

    p_fees = sub.add_parser("fees", help="Payment-method fees of a month.")
    _add_period_args(p_fees)

    p_sum = sub.add_parser(
        "summary", help="Total income, total expense and net cash flow."
    )
    _add_period_args(p_sum)

    sub.add_parser("check", help="Report rejected transactions and bad references.")

    return ap


def _load_inputs(
    config: AppConfig, parser: argparse.ArgumentParser
) -> tuple[list[Transaction], list[Category], list[PaymentMethod], list[Account]]:
    """Read the configured CSV files, exiting with a clear error if missing."""
    data = config.data
    paths = {
        "transactions": data.transactions,
        "categories": data.categories,
        "payment_methods": data.payment_methods,
        "accounts": data.accounts,
    }
    for name, path in paths.items():
        if path is None:
            parser.error(f"No [data].{name} CSV configured.")
        if not Path(path).is_file():
            parser.error(f"CSV file for [data].{name} not found: {path}")

    try:
        return (
            read_transactions(data.transactions),
            read_categories(data.categories),
            read_payment_methods(data.payment_methods),
            read_accounts(data.accounts),
        )
    except ValueError as exc:
        parser.error(str(exc))
        raise  # unreachable, parser.error exits


def _render(
    frames: list[tuple[str, str, pd.DataFrame]],
    display_mode: str,
    output_dir: Optional[str],
) -> None:
    """Print and/or export (title, file stem, DataFrame) triples."""
    if display_mode in {"table", "both"}:
        for title, _, df in frames:
            print()
            print(f"=== {title} ===")
            if df.empty:
                print("(no data)")
            else:
                print(df.to_string(index=False))

    if display_mode in {"csv", "both"}:
        out = Path(output_dir) if output_dir else Path("data/output")
        out.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        for _, stem, df in frames:
            path = out / f"{stem}_{timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


def _report_frames(
    args, config: AppConfig, index: EventIndex, categories, payment_methods
) -> list[tuple[str, str, pd.DataFrame]]:
    period = determine_period_from_args(args)
    report = build_report(
        index.for_period(period), categories, payment_methods, period.month, period.year
    )
    return [
        (
            f"DRE {period.label} - {config.company_name} ({config.currency})",
            f"dre_{period.label}",
            report_to_statement(report, decimals=config.decimals),
        ),
        (
            "Indicadores",
            f"indicators_{period.label}",
            report_indicators(report),
        ),
    ]


def _breakdown_frames(
    args, config: AppConfig, index: EventIndex, categories
) -> list[tuple[str, str, pd.DataFrame]]:
    kind = TransactionType.INCOME if args.kind == "income" else TransactionType.EXPENSE
    if args.all_periods:
        events = index.events
        label = "all"
    else:
        period = determine_period_from_args(args)
        events = filter_events_by_period(index.events, period)
        label = period.label

    selected = [e for e in events if e.type == kind]
    totals = totals_by_category(selected, categories, order=args.order)
    return [
        (
            f"{args.kind.capitalize()} by category ({label})",
            f"{args.kind}_by_category_{label}",
            totals_to_dataframe(totals, decimals=config.decimals),
        )
    ]


def _summary_frames(
    args, config: AppConfig, index: EventIndex
) -> list[tuple[str, str, pd.DataFrame]]:
    """Headline figures over every projected event, or one month if asked."""
    if args.month is None and args.year is None and args.period is None:
        events = index.events
        label = "all"
    else:
        period = determine_period_from_args(args)
        events = index.for_period(period)
        label = period.label

    return [
        (
            f"Cash flow ({label})",
            f"cash_flow_{label}",
            cash_flow_to_dataframe(
                cash_flow_summary(events), decimals=config.decimals
            ),
        )
    ]


def _check_frames(
    projection: ProjectionResult, transactions, categories, payment_methods, accounts
) -> list[tuple[str, str, pd.DataFrame]]:
    failures = pd.DataFrame(
        [
            {"transaction_id": f.transaction_id, "reason": f.reason}
            for f in projection.failures
        ],
        columns=["transaction_id", "reason"],
    )
    unknown = find_unknown_references(
        transactions, categories, payment_methods, accounts
    )
    return [
        ("Rejected transactions", "rejected_transactions", failures),
        ("Unknown references", "unknown_references", unknown),
        (
            "Unknown references summary",
            "unknown_references_summary",
            unknown_references_summary(unknown),
        ),
    ]


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the Hospeda Finance CLI.

    This function parses command-line arguments, loads the configuration,
    configures logging, reads the CSV inputs, projects every transaction
    once and renders the requested command as console tables and/or CSV
    files.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"hospeda_finance version {__version__}")
        return

    if not args.command:
        parser.print_help()
        return

    # 1) Configuration and logging
    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    try:
        configure_logging(args.log_level or config.log_level)
    except ValueError as exc:
        parser.error(str(exc))

    # 2) Inputs
    transactions, categories, payment_methods, accounts = _load_inputs(config, parser)
    logger.info(
        "Loaded %d transaction(s), %d categories, %d payment method(s), "
        "%d account(s).",
        len(transactions),
        len(categories),
        len(payment_methods),
        len(accounts),
    )

    # 3) Project once, reuse for every output
    projection = ProjectionCache(settings=config.projection).project(
        transactions, payment_methods
    )
    index = EventIndex(projection.events)

    # 4) Build the requested output
    if args.command == "report":
        frames = _report_frames(args, config, index, categories, payment_methods)
    elif args.command == "trend":
        year = args.year or periods._today().year
        frames = [
            (
                f"Trend {year}",
                f"trend_{year}",
                build_trend(index, categories, payment_methods, year),
            )
        ]
    elif args.command == "balances":
        try:
            as_of = date.fromisoformat(args.as_of) if args.as_of else periods._today()
        except ValueError:
            parser.error(f"Invalid --as-of date {args.as_of!r}, expected YYYY-MM-DD.")
        balances = balances_by_account(accounts, index.events, as_of)
        frames = [
            (
                f"Balances as of {as_of.isoformat()}",
                f"balances_{as_of.isoformat()}",
                balances_to_dataframe(balances, decimals=config.decimals),
            )
        ]
    elif args.command == "breakdown":
        frames = _breakdown_frames(args, config, index, categories)
    elif args.command == "fees":
        period = determine_period_from_args(args)
        incomes = [
            e
            for e in index.for_period(period)
            if e.type == TransactionType.INCOME
        ]
        frames = [
            (
                f"Fees by payment method ({period.label})",
                f"fees_{period.label}",
                totals_to_dataframe(
                    totals_by_payment_method_fee(incomes, payment_methods),
                    decimals=config.decimals,
                ),
            )
        ]
    elif args.command == "summary":
        frames = _summary_frames(args, config, index)
    else:  # check
        frames = _check_frames(
            projection, transactions, categories, payment_methods, accounts
        )

    # 5) Render
    _render(frames, args.display_mode or config.display_mode, args.output_dir)


if __name__ == "__main__":
    main()
