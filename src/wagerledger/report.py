"""Report sections built from the final ledger state.

The report has three ordered sections: legitimate players, illegitimate
players, and the operator aggregate.  Selection, ordering and field content
live here; :func:`render_report` produces the plain text layout and
:func:`report_frames` the tabular form used for CSV exports.
"""

from __future__ import annotations

import dataclasses
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Dict, Sequence

import polars as pl

from .ledger import Ledger
from .player import ViolationKind

NULL_MARKER = "null"
ZERO_WIN_RATE = "0.0"
_CENT = Decimal("0.01")


@dataclasses.dataclass(frozen=True, slots=True)
class LegitimateEntry:
    player_id: str
    balance: int
    win_rate: float

    def fields(self) -> tuple[str, ...]:
        return (self.player_id, str(self.balance), f"{self.win_rate:.2f}")


@dataclasses.dataclass(frozen=True, slots=True)
class IllegitimateEntry:
    """First offending operation of a tainted player.

    ``balance``, ``win_rate`` and ``trailing`` are already rendered strings,
    because a ``WITHDRAW`` violation reports the null marker in all three.
    """

    player_id: str
    violation: ViolationKind
    balance: str
    win_rate: str
    trailing: str

    def fields(self) -> tuple[str, ...]:
        return (
            self.player_id,
            self.violation.value,
            self.balance,
            self.win_rate,
            self.trailing,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class LedgerReport:
    legitimate: Sequence[LegitimateEntry]
    illegitimate: Sequence[IllegitimateEntry]
    operator_balance: int


@dataclasses.dataclass(frozen=True, slots=True)
class ReportArtifacts:
    """CSV tables written by :func:`persist_report_tables`."""

    legitimate_path: Path
    illegitimate_path: Path
    summary_path: Path


def round_win_rate(value: float) -> float:
    """Round half up to two decimals on the shortest decimal form of ``value``."""

    return float(Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def build_report(ledger: Ledger) -> LedgerReport:
    """Select, order and summarise players from the final ledger state."""

    ordered = sorted(ledger.players.values(), key=lambda player: player.player_id)

    legitimate = [
        LegitimateEntry(
            player_id=player.player_id,
            balance=player.balance,
            win_rate=round_win_rate(player.win_rate()),
        )
        for player in ordered
        if player.is_legitimate()
    ]

    illegitimate: list[IllegitimateEntry] = []
    for player in ordered:
        violation = player.first_violation()
        if violation is None:
            continue
        if violation is ViolationKind.WITHDRAW:
            illegitimate.append(
                IllegitimateEntry(
                    player_id=player.player_id,
                    violation=violation,
                    balance=NULL_MARKER,
                    win_rate=NULL_MARKER,
                    trailing=NULL_MARKER,
                )
            )
        else:
            illegitimate.append(
                IllegitimateEntry(
                    player_id=player.player_id,
                    violation=violation,
                    balance=str(player.balance),
                    win_rate=ZERO_WIN_RATE,
                    trailing=NULL_MARKER,
                )
            )

    operator_balance = sum(entry.balance for entry in legitimate)
    return LedgerReport(
        legitimate=legitimate,
        illegitimate=illegitimate,
        operator_balance=operator_balance,
    )


def render_lines(report: LedgerReport) -> list[str]:
    lines = [" ".join(entry.fields()) for entry in report.legitimate]
    lines.append("")
    lines.extend(" ".join(entry.fields()) for entry in report.illegitimate)
    lines.append("")
    lines.append(str(report.operator_balance))
    return lines


def render_report(report: LedgerReport) -> str:
    """Render the report as text, one blank line between sections."""

    return "\n".join(render_lines(report)) + "\n"


def report_frames(report: LedgerReport) -> Dict[str, pl.DataFrame]:
    """Return each report section as a Polars DataFrame."""

    legitimate = pl.DataFrame(
        {
            "player_id": [entry.player_id for entry in report.legitimate],
            "balance": [entry.balance for entry in report.legitimate],
            "win_rate": [entry.win_rate for entry in report.legitimate],
        },
        schema={"player_id": pl.Utf8, "balance": pl.Int64, "win_rate": pl.Float64},
    )
    illegitimate = pl.DataFrame(
        {
            "player_id": [entry.player_id for entry in report.illegitimate],
            "violation": [entry.violation.value for entry in report.illegitimate],
            "balance": [entry.balance for entry in report.illegitimate],
            "win_rate": [entry.win_rate for entry in report.illegitimate],
            "trailing": [entry.trailing for entry in report.illegitimate],
        },
        schema={
            "player_id": pl.Utf8,
            "violation": pl.Utf8,
            "balance": pl.Utf8,
            "win_rate": pl.Utf8,
            "trailing": pl.Utf8,
        },
    )
    summary = pl.DataFrame(
        {
            "legitimate_players": [len(report.legitimate)],
            "illegitimate_players": [len(report.illegitimate)],
            "operator_balance": [report.operator_balance],
        },
        schema={
            "legitimate_players": pl.Int64,
            "illegitimate_players": pl.Int64,
            "operator_balance": pl.Int64,
        },
    )
    return {"legitimate": legitimate, "illegitimate": illegitimate, "summary": summary}


def persist_report_tables(
    report: LedgerReport,
    output_dir: str | Path,
    *,
    legitimate_filename: str = "legitimate_players.csv",
    illegitimate_filename: str = "illegitimate_players.csv",
    summary_filename: str = "operator_summary.csv",
) -> ReportArtifacts:
    """Write every report section as a CSV table under ``output_dir``."""

    destination = Path(output_dir)
    destination.mkdir(parents=True, exist_ok=True)

    frames = report_frames(report)
    artifacts = ReportArtifacts(
        legitimate_path=destination / legitimate_filename,
        illegitimate_path=destination / illegitimate_filename,
        summary_path=destination / summary_filename,
    )
    frames["legitimate"].write_csv(artifacts.legitimate_path)
    frames["illegitimate"].write_csv(artifacts.illegitimate_path)
    frames["summary"].write_csv(artifacts.summary_path)
    return artifacts


__all__ = [
    "IllegitimateEntry",
    "LedgerReport",
    "LegitimateEntry",
    "NULL_MARKER",
    "ReportArtifacts",
    "build_report",
    "persist_report_tables",
    "render_lines",
    "render_report",
    "report_frames",
    "round_win_rate",
]
