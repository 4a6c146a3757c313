# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Hospeda Finance.

This module is responsible for:
- loading the application configuration from a TOML file,
- exposing typed dataclasses used by the rest of the application,
- providing the projection policy constants (horizon, delays, rounding)
  with their product defaults.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

DEFAULT_CONFIG_FILENAME = "hospeda_finance_config.toml"

# Fixed recurrences (FIXO) are projected over 5 years.
DEFAULT_HORIZON_MONTHS = 60
DEFAULT_CARD_DELAY_DAYS = 30
DEFAULT_INSTALLMENT_INTERVAL_DAYS = 30
DEFAULT_MONEY_DECIMALS = 2


@dataclass(frozen=True)
class ProjectionSettings:
    """
    Policy constants used by the projector.

    Attributes
    ----------
    horizon_months :
        Number of monthly events generated for an open-ended (FIXO)
        recurrence.
    card_delay_days :
        Settlement delay applied to the first event of a card-paid
        transaction.
    installment_interval_days :
        Spacing between consecutive installments of a PARCELADO
        transaction.
    money_decimals :
        Number of decimal places of the currency minor unit, used to split
        installments.
    """

    horizon_months: int = DEFAULT_HORIZON_MONTHS
    card_delay_days: int = DEFAULT_CARD_DELAY_DAYS
    installment_interval_days: int = DEFAULT_INSTALLMENT_INTERVAL_DAYS
    money_decimals: int = DEFAULT_MONEY_DECIMALS

    @property
    def money_quantum(self) -> Decimal:
        return Decimal(1).scaleb(-self.money_decimals)


@dataclass(frozen=True)
class DataPaths:
    """CSV files holding the transactions and the reference tables."""

    transactions: Optional[Path] = None
    categories: Optional[Path] = None
    payment_methods: Optional[Path] = None
    accounts: Optional[Path] = None


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Hospeda Finance.

    This aggregates:
    - the company display settings,
    - the projection policy,
    - the locations of input data,
    - display and logging options.
    """

    company_name: str = "Minha Hospedagem"
    currency: str = "BRL"
    projection: ProjectionSettings = field(default_factory=ProjectionSettings)
    data: DataPaths = field(default_factory=DataPaths)
    display_mode: str = "table"
    decimals: int = 2
    log_level: Optional[str] = None


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        return {}
    return value


def _positive_int(section: Mapping[str, Any], key: str, default: int, where: str) -> int:
    raw_value = section.get(key, default)
    try:
        value = int(raw_value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{where}.{key}' in the configuration. "
            "Expected an integer."
        ) from exc
    if value < 0:
        raise ValueError(f"'{where}.{key}' cannot be negative.")
    return value


def _parse_projection(raw: Mapping[str, Any]) -> ProjectionSettings:
    """
    Extract and validate the [projection] table.

    Raises:
        ValueError: if a value is not a non-negative integer, or if the
            horizon is zero.
    """
    section = _section(raw, "projection")

    horizon = _positive_int(
        section, "horizon_months", DEFAULT_HORIZON_MONTHS, "projection"
    )
    if horizon == 0:
        raise ValueError("'projection.horizon_months' must be at least 1.")

    return ProjectionSettings(
        horizon_months=horizon,
        card_delay_days=_positive_int(
            section, "card_delay_days", DEFAULT_CARD_DELAY_DAYS, "projection"
        ),
        installment_interval_days=_positive_int(
            section,
            "installment_interval_days",
            DEFAULT_INSTALLMENT_INTERVAL_DAYS,
            "projection",
        ),
        money_decimals=_positive_int(
            section, "money_decimals", DEFAULT_MONEY_DECIMALS, "projection"
        ),
    )


def _parse_data_paths(raw: Mapping[str, Any], base_dir: Path) -> DataPaths:
    """Resolve the [data] CSV paths relative to the config file directory."""
    section = _section(raw, "data")

    def _resolve_optional(rel: Optional[str]) -> Optional[Path]:
        if not rel:
            return None
        return (base_dir / str(rel)).resolve()

    return DataPaths(
        transactions=_resolve_optional(section.get("transactions")),
        categories=_resolve_optional(section.get("categories")),
        payment_methods=_resolve_optional(section.get("payment_methods")),
        accounts=_resolve_optional(section.get("accounts")),
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Hospeda Finance application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [company]
        ``name`` and ``currency`` (display only).

    [projection]
        ``horizon_months``, ``card_delay_days``,
        ``installment_interval_days``, ``money_decimals``.

    [data]
        CSV paths for ``transactions``, ``categories``,
        ``payment_methods`` and ``accounts``, resolved relative to the
        directory of the TOML file.

    [display]
        ``mode`` ('table', 'csv' or 'both') and ``decimals``.

    [logging]
        ``level`` of the package logger. When absent, the
        ``HOSPEDA_FINANCE_LOG_LEVEL`` environment variable applies, then
        WARNING.

    When ``config_path`` is None and no ``hospeda_finance_config.toml`` exists
    in the current directory, the defaults are returned. An explicit path
    that does not exist is an error.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILENAME).resolve()
        if not config_file.is_file():
            return AppConfig()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    company = _section(raw, "company")
    display = _section(raw, "display")
    logging_section = _section(raw, "logging")

    display_mode = str(display.get("mode", "table"))
    if display_mode not in {"table", "csv", "both"}:
        raise ValueError(
            f"Invalid display.mode {display_mode!r}, expected table, csv or both."
        )

    log_level = logging_section.get("level")

    try:
        decimals = int(display.get("decimals", 2))
    except (TypeError, ValueError):
        decimals = 2

    return AppConfig(
        company_name=str(company.get("name") or "Minha Hospedagem"),
        currency=str(company.get("currency") or "BRL"),
        projection=_parse_projection(raw),
        data=_parse_data_paths(raw, base_dir),
        display_mode=display_mode,
        decimals=decimals,
        log_level=str(log_level) if log_level else None,
    )
