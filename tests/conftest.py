from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List

import pytest

from wagerledger.config import reset_config
from wagerledger.io import split_line
from wagerledger.ledger import Ledger

DATA_DIR = Path(__file__).parent / "data"


def rows(text: str) -> List[List[str]]:
    """Split a block of record lines the way the file reader does."""

    return [split_line(line) for line in text.strip().splitlines() if line.strip()]


@pytest.fixture()
def split_rows() -> Callable[[str], List[List[str]]]:
    return rows


@pytest.fixture()
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture()
def match_path(data_dir: Path) -> Path:
    return data_dir / "match_data.txt"


@pytest.fixture()
def player_path(data_dir: Path) -> Path:
    return data_dir / "player_data.txt"


@pytest.fixture()
def audit_logger() -> logging.Logger:
    return logging.getLogger("test.wagerledger.audit")


@pytest.fixture()
def ledger(audit_logger: logging.Logger) -> Ledger:
    ledger = Ledger(audit_logger=audit_logger)
    ledger.load_rates(rows("M1,RATE,2.0\nM2,RATE,1.5"))
    return ledger


@pytest.fixture()
def make_ledger(audit_logger: logging.Logger) -> Callable[..., Ledger]:
    def _factory(rates: str = "", transactions: str = "", **kwargs) -> Ledger:
        kwargs.setdefault("audit_logger", audit_logger)
        instance = Ledger(**kwargs)
        instance.load_rates(rows(rates))
        instance.process(rows(transactions))
        return instance

    return _factory


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_config()
    yield
    reset_config()
