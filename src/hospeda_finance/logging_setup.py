# Hospeda Finance - Cash-flow projection & DRE engine for hospitality SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Logging for Hospeda Finance.

Engine modules only call ``get_logger(__name__)`` and emit data-quality
warnings (rejected transactions, unknown references). Nothing is printed
until the host application opts in:

- the CLI calls ``configure_logging(level)`` once at startup, which sends
  the ``hospeda_finance`` records to stderr;
- library users attach their own handlers, or rely on propagation to the
  root logger.

Level resolution: an explicit level (``--log-level`` or ``[logging].level``)
wins, then the ``HOSPEDA_FINANCE_LOG_LEVEL`` environment variable, then
WARNING.
"""

import logging
import os
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "hospeda_finance"
LOG_LEVEL_ENV = "HOSPEDA_FINANCE_LOG_LEVEL"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

# Handler installed by configure_logging(), None until then.
_cli_handler: Optional[logging.Handler] = None


def resolve_level(level: Union[int, str, None] = None) -> int:
    """Turn a level name or number into a logging level.

    Raises:
        ValueError: if ``level`` is not a known level name or a number.
    """
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or "WARNING"
    if isinstance(level, int):
        return level

    name = str(level).strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        raise ValueError(
            f"Unknown log level {level!r}, expected DEBUG, INFO, WARNING or ERROR."
        )
    return numeric


def configure_logging(level: Union[int, str, None] = None) -> None:
    """Send package records to stderr at ``level``.

    The handler is installed on the first call; later calls only change the
    level.
    """
    global _cli_handler
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    numeric = resolve_level(level)

    if _cli_handler is None:
        for h in list(pkg_logger.handlers):
            if isinstance(h, logging.NullHandler):
                pkg_logger.removeHandler(h)
        _cli_handler = logging.StreamHandler(sys.stderr)
        _cli_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        pkg_logger.addHandler(_cli_handler)
        pkg_logger.propagate = False

    pkg_logger.setLevel(numeric)


def get_logger(name: str) -> logging.Logger:
    """Logger for an engine module, silent until logging is configured."""
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if _cli_handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
