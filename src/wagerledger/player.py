"""Per-player account state and balance rules."""

from __future__ import annotations

import dataclasses
import enum
import math


class ViolationKind(str, enum.Enum):
    """Operation category recorded when a player attempts an invalid operation."""

    DEPOSIT = "DEPOSIT"
    BET = "BET"
    WITHDRAW = "WITHDRAW"


class SettlementMode(str, enum.Enum):
    """How a winning bet is credited to the balance.

    ``NET`` credits ``floor(stake * rate)`` on top of the current balance.
    ``GROSS`` debits the stake and credits ``floor(stake * rate)``.
    Losing bets debit the stake in both modes.
    """

    NET = "net"
    GROSS = "gross"


def payout(stake: int, rate: float) -> int:
    """Return the amount credited for a winning ``stake`` at ``rate``."""

    return math.floor(stake * rate)


@dataclasses.dataclass(slots=True)
class Player:
    """Account state for a single player.

    A player with an empty ``violations`` trail is legitimate.  The trail is
    append-only, so a tainted player never becomes legitimate again, while
    later operations keep applying their own balance rules.
    """

    player_id: str
    balance: int = 0
    bets_placed: int = 0
    bets_won: int = 0
    violations: list[ViolationKind] = dataclasses.field(default_factory=list)

    def deposit(self, amount: int) -> bool:
        if amount > 0:
            self.balance += amount
            return True
        self.violations.append(ViolationKind.DEPOSIT)
        return False

    def withdraw(self, amount: int) -> bool:
        if 0 < amount <= self.balance:
            self.balance -= amount
            return True
        self.violations.append(ViolationKind.WITHDRAW)
        return False

    def place_bet(
        self,
        match_id: str,
        stake: int,
        side: str,
        result: str,
        rate: float | None,
        *,
        settlement: SettlementMode = SettlementMode.NET,
    ) -> bool:
        """Settle a bet immediately against ``rate``.

        ``rate`` is ``None`` when ``match_id`` is unknown to the catalog.  A
        bet with a non-positive stake, a stake above the balance, or no rate
        is recorded as a ``BET`` violation and changes nothing else.
        """

        if rate is None or not 0 < stake <= self.balance:
            self.violations.append(ViolationKind.BET)
            return False

        self.bets_placed += 1
        if result == side:
            self.bets_won += 1
            credit = payout(stake, rate)
            if settlement is SettlementMode.GROSS:
                credit -= stake
            self.balance += credit
        else:
            self.balance -= stake
        return True

    def is_legitimate(self) -> bool:
        return not self.violations

    def win_rate(self) -> float:
        if self.bets_placed == 0:
            return 0.0
        return self.bets_won / self.bets_placed

    def first_violation(self) -> ViolationKind | None:
        return self.violations[0] if self.violations else None


__all__ = ["Player", "SettlementMode", "ViolationKind", "payout"]
