"""Logging helpers for wagerledger."""

from __future__ import annotations

import logging
from typing import Iterable


def configure_logging(level: int | str = logging.INFO, handlers: Iterable[logging.Handler] | None = None) -> None:
    """Configure root logging for command line runs.

    Violations and discarded records are reported on the
    ``wagerledger.audit`` logger; raising the level to ``INFO`` also shows
    records dropped for unknown players.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=list(handlers) if handlers else None,
    )
