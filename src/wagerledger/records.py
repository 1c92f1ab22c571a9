"""Typed records for the rate and transaction streams.

Each raw input line is split into fields by :mod:`wagerledger.io` and handed
to :func:`parse_record`, which either returns a typed record or a
:class:`ParseError`.  Parsing never raises for bad data; the ledger decides
what to do with the error value.
"""

from __future__ import annotations

import dataclasses
import enum
import math
import re
from typing import Sequence


class RecordKind(str, enum.Enum):
    """Operation keyword found in the second field of every record."""

    RATE = "RATE"
    DEPOSIT = "DEPOSIT"
    BET = "BET"
    WITHDRAW = "WITHDRAW"


class ParseErrorKind(str, enum.Enum):
    SHORT = "short"
    UNKNOWN_KIND = "unknown_kind"
    MISSING_FIELD = "missing_field"
    MALFORMED_NUMBER = "malformed_number"


@dataclasses.dataclass(frozen=True, slots=True)
class RateRecord:
    match_id: str
    rate: float
    kind: RecordKind = dataclasses.field(default=RecordKind.RATE, init=False)


@dataclasses.dataclass(frozen=True, slots=True)
class DepositRecord:
    player_id: str
    amount: int
    kind: RecordKind = dataclasses.field(default=RecordKind.DEPOSIT, init=False)


@dataclasses.dataclass(frozen=True, slots=True)
class BetRecord:
    player_id: str
    match_id: str
    stake: int
    side: str
    result: str
    kind: RecordKind = dataclasses.field(default=RecordKind.BET, init=False)


@dataclasses.dataclass(frozen=True, slots=True)
class WithdrawRecord:
    player_id: str
    amount: int
    kind: RecordKind = dataclasses.field(default=RecordKind.WITHDRAW, init=False)


Record = RateRecord | DepositRecord | BetRecord | WithdrawRecord


@dataclasses.dataclass(frozen=True, slots=True)
class ParseError:
    """Why a single record was discarded."""

    kind: ParseErrorKind
    fields: tuple[str, ...]
    detail: str = ""


ParsedRecord = Record | ParseError

# Minimum field counts per keyword, derived from the fixed positions below.
_REQUIRED_FIELDS: dict[RecordKind, int] = {
    RecordKind.RATE: 3,
    RecordKind.DEPOSIT: 4,
    RecordKind.BET: 7,
    RecordKind.WITHDRAW: 4,
}

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def parse_int(value: str) -> int | None:
    """Parse a signed 64-bit decimal integer, returning ``None`` when malformed."""

    if not _INTEGER_PATTERN.fullmatch(value):
        return None
    number = int(value)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return None
    return number


def parse_rate(value: str) -> float | None:
    """Parse a finite floating point rate, returning ``None`` when malformed."""

    stripped = value.strip()
    if not stripped:
        return None
    try:
        rate = float(stripped)
    except ValueError:
        return None
    if not math.isfinite(rate):
        return None
    return rate


def parse_record(fields: Sequence[str]) -> ParsedRecord:
    """Turn one split input line into a typed record or a parse error."""

    raw = tuple(fields)
    if len(raw) < 2:
        return ParseError(ParseErrorKind.SHORT, raw)

    try:
        kind = RecordKind(raw[1])
    except ValueError:
        return ParseError(ParseErrorKind.UNKNOWN_KIND, raw, raw[1])

    required = _REQUIRED_FIELDS[kind]
    if len(raw) < required:
        return ParseError(
            ParseErrorKind.MISSING_FIELD,
            raw,
            f"{kind.value} expects {required} fields, got {len(raw)}",
        )

    if kind is RecordKind.RATE:
        rate = parse_rate(raw[2])
        if rate is None:
            return ParseError(ParseErrorKind.MALFORMED_NUMBER, raw, f"rate={raw[2]!r}")
        return RateRecord(match_id=raw[0], rate=rate)

    if kind is RecordKind.BET:
        stake = parse_int(raw[4])
        if stake is None:
            return ParseError(ParseErrorKind.MALFORMED_NUMBER, raw, f"stake={raw[4]!r}")
        return BetRecord(
            player_id=raw[0],
            match_id=raw[2],
            stake=stake,
            side=raw[5],
            result=raw[6],
        )

    amount = parse_int(raw[3])
    if amount is None:
        return ParseError(ParseErrorKind.MALFORMED_NUMBER, raw, f"amount={raw[3]!r}")
    if kind is RecordKind.DEPOSIT:
        return DepositRecord(player_id=raw[0], amount=amount)
    return WithdrawRecord(player_id=raw[0], amount=amount)


__all__ = [
    "BetRecord",
    "DepositRecord",
    "ParseError",
    "ParseErrorKind",
    "ParsedRecord",
    "RateRecord",
    "Record",
    "RecordKind",
    "WithdrawRecord",
    "parse_int",
    "parse_rate",
    "parse_record",
]
