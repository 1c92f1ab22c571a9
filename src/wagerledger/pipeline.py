"""End-to-end run: load rates, apply transactions, build the report."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Sequence

from .config import get_config
from .io import read_rows, write_report
from .ledger import Ledger
from .player import SettlementMode
from .report import LedgerReport, build_report

logger = logging.getLogger(__name__)


def run_pipeline(
    match_rows: Iterable[Sequence[str]],
    player_rows: Iterable[Sequence[str]],
    *,
    settlement: SettlementMode | str = SettlementMode.NET,
    audit_logger: logging.Logger | None = None,
) -> tuple[Ledger, LedgerReport]:
    """Process both streams and return the final ledger with its report.

    The whole rate stream is folded into the catalog before the first
    transaction is applied.
    """

    ledger = Ledger(settlement=settlement, audit_logger=audit_logger)
    ledger.load_rates(match_rows)
    ledger.process(player_rows)
    report = build_report(ledger)
    metrics = ledger.metrics
    logger.info(
        "pipeline.completed",
        extra={
            "players": len(ledger.players),
            "matches": len(ledger.catalog),
            "applied": metrics["applied"],
            "violations": metrics["violations"],
            "dropped": metrics["dropped"],
            "discarded": dict(metrics["discarded"]),
        },
    )
    return ledger, report


def process_files(
    match_path: str | os.PathLike[str],
    player_path: str | os.PathLike[str],
    output_path: str | os.PathLike[str] | None = None,
    *,
    settlement: SettlementMode | str = SettlementMode.NET,
    delimiter: str | None = None,
    encoding: str | None = None,
    audit_logger: logging.Logger | None = None,
) -> tuple[Ledger, LedgerReport]:
    """Run the pipeline on two input files, optionally writing the report."""

    settings = get_config()
    delimiter = delimiter or settings.delimiter
    encoding = encoding or settings.encoding

    # Fail before any processing when an input is missing.
    for path in (match_path, player_path):
        if not Path(path).exists():
            raise FileNotFoundError(f"Input file does not exist: {path}")

    ledger, report = run_pipeline(
        read_rows(match_path, delimiter=delimiter, encoding=encoding),
        read_rows(player_path, delimiter=delimiter, encoding=encoding),
        settlement=settlement,
        audit_logger=audit_logger,
    )
    if output_path is not None:
        destination = write_report(report, output_path, encoding=encoding)
        logger.info("Report written to %s", destination)
    return ledger, report


__all__ = ["process_files", "run_pipeline"]
