"""Налаштування логування."""

from __future__ import annotations

import logging
import sys

# Third-party loggers that drown the simulator output at INFO.
_NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "asyncio")


def setup_logging(level: str = "INFO") -> None:
    """Налаштовує стандартний логер з лаконічним форматом.

    SQLAlchemy та asyncio логери піднімаються до WARNING, якщо рівень не DEBUG.

    Args:
        level: Рівень логування (DEBUG, INFO, WARNING, ERROR).
    """
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    third_party = numeric if numeric <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party)
