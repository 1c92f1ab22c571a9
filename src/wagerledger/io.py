"""Reading delimited input lines and writing rendered reports."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

from .report import LedgerReport, render_report


def split_line(line: str, delimiter: str = ",") -> list[str]:
    """Split one raw line into fields, dropping the line terminator."""

    return line.rstrip("\r\n").split(delimiter)


def read_rows(
    path: str | os.PathLike[str],
    *,
    delimiter: str = ",",
    encoding: str = "utf-8",
) -> Iterator[list[str]]:
    """Yield split fields for every non-blank line of ``path`` in order."""

    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Input file does not exist: {source}")
    with source.open("r", encoding=encoding) as handle:
        for line in handle:
            if not line.strip():
                continue
            yield split_line(line, delimiter)


def write_report(
    report: LedgerReport,
    path: str | os.PathLike[str],
    *,
    encoding: str = "utf-8",
) -> Path:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    with destination.open("w", encoding=encoding, newline="\n") as handle:
        handle.write(render_report(report))
    return destination


__all__ = ["read_rows", "split_line", "write_report"]
