# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Hospeda Finance
---------------

A Python cash-flow projection and reporting engine for small hospitality
businesses (guest houses, chalets, glamping). Income, expense and transfer
records are projected over time and aggregated into financial reports.

Main capabilities:
- projection of transactions into dated cash events (card settlement delay,
  installment plans, fixed monthly recurrences),
- account balances as of any date,
- income / expense breakdowns per category, group and payment method,
- monthly income statement (DRE) with fees, commissions and margin,
- multi-month trends with projection and report caching,
- unknown-reference detection for data-quality checks,
- CSV inputs, TOML configuration and a command-line interface.

The engine is pure: it takes immutable snapshots of transactions and
reference tables, and returns new result objects.

Version: 0.1.0

Usage:
    python -m hospeda_finance.cli --help
"""

__all__ = [
    "balances",
    "categories",
    "engine",
    "models",
    "multi_periods",
    "projection",
]

__version__ = "0.1.0"
