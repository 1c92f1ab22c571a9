"""Ledger dispatch engine applying records to the catalog and player table."""

from __future__ import annotations

import collections
import logging
import types
from typing import Any, Dict, Iterable, Mapping, Sequence

from .catalog import MatchCatalog
from .player import Player, SettlementMode, ViolationKind
from .records import (
    BetRecord,
    DepositRecord,
    ParseError,
    RateRecord,
    Record,
    WithdrawRecord,
    parse_record,
)

logger = logging.getLogger(__name__)


class Ledger:
    """Own the match catalog and player accounts for a single run.

    Records are applied strictly in the order they are given.  Business rule
    failures become violation tags on the player, parse failures discard the
    record, and bets or withdrawals for unknown players are dropped without
    creating an account.  Nothing in here raises for bad input.
    """

    def __init__(
        self,
        *,
        settlement: SettlementMode | str = SettlementMode.NET,
        catalog: MatchCatalog | None = None,
        audit_logger: logging.Logger | None = None,
    ) -> None:
        self.settlement = SettlementMode(settlement)
        self.catalog = catalog if catalog is not None else MatchCatalog()
        self._players: Dict[str, Player] = {}
        self._audit_logger = audit_logger or logging.getLogger("wagerledger.audit")
        self._metrics: Dict[str, Any] = {
            "applied": 0,
            "violations": 0,
            "dropped": 0,
            "discarded": collections.Counter(),
        }

    @property
    def players(self) -> Mapping[str, Player]:
        return types.MappingProxyType(self._players)

    @property
    def metrics(self) -> Mapping[str, Any]:
        return self._metrics

    def get(self, player_id: str) -> Player | None:
        return self._players.get(player_id)

    def lookup_or_insert(self, player_id: str) -> Player:
        """Return the account for ``player_id``, creating it on first use."""

        player = self._players.get(player_id)
        if player is None:
            player = Player(player_id)
            self._players[player_id] = player
        return player

    def apply(self, record: Record) -> None:
        """Apply a typed record to the ledger state."""

        if isinstance(record, RateRecord):
            self.catalog.set_rate(record.match_id, record.rate)
            self._metrics["applied"] += 1
            return

        if isinstance(record, DepositRecord):
            player = self.lookup_or_insert(record.player_id)
            accepted = player.deposit(record.amount)
        elif isinstance(record, BetRecord):
            player = self._existing(record)
            if player is None:
                return
            accepted = player.place_bet(
                record.match_id,
                record.stake,
                record.side,
                record.result,
                self.catalog.get_rate(record.match_id),
                settlement=self.settlement,
            )
        elif isinstance(record, WithdrawRecord):
            player = self._existing(record)
            if player is None:
                return
            accepted = player.withdraw(record.amount)
        else:  # pragma: no cover - exhaustive over Record
            raise TypeError(f"Unsupported record type: {type(record).__name__}")

        if accepted:
            self._metrics["applied"] += 1
        else:
            self._record_violation(player, record)

    def apply_fields(self, fields: Sequence[str]) -> ParseError | None:
        """Parse and apply one split line.

        Returns the :class:`ParseError` when the line was discarded so callers
        can inspect it; the error is already logged and counted.
        """

        parsed = parse_record(fields)
        if isinstance(parsed, ParseError):
            self._metrics["discarded"][parsed.kind.value] += 1
            self._audit_logger.warning(
                "ledger.discarded",
                extra={
                    "reason": parsed.kind.value,
                    "fields": list(parsed.fields),
                    "detail": parsed.detail,
                },
            )
            return parsed
        self.apply(parsed)
        return None

    def load_rates(self, rows: Iterable[Sequence[str]]) -> None:
        """Fold the rate stream into the catalog before any bet is evaluated."""

        for fields in rows:
            self.apply_fields(fields)
        logger.debug("Catalog holds %d match rates", len(self.catalog))

    def process(self, rows: Iterable[Sequence[str]]) -> None:
        """Fold the transaction stream into player accounts."""

        for fields in rows:
            self.apply_fields(fields)
        logger.debug("Ledger tracks %d players", len(self._players))

    def _existing(self, record: BetRecord | WithdrawRecord) -> Player | None:
        player = self._players.get(record.player_id)
        if player is None:
            self._metrics["dropped"] += 1
            self._audit_logger.info(
                "ledger.dropped",
                extra={"player_id": record.player_id, "record_kind": record.kind.value},
            )
        return player

    def _record_violation(self, player: Player, record: Record) -> None:
        self._metrics["violations"] += 1
        violation: ViolationKind = player.violations[-1]
        self._audit_logger.warning(
            "ledger.violation",
            extra={
                "player_id": player.player_id,
                "violation": violation.value,
                "record_kind": record.kind.value,
                "first": len(player.violations) == 1,
            },
        )


__all__ = ["Ledger"]
