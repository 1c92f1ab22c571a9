from __future__ import annotations

import pytest

from wagerledger.catalog import MatchCatalog
from wagerledger.player import Player, SettlementMode, ViolationKind, payout


def _funded(amount: int = 100) -> Player:
    player = Player("P1")
    assert player.deposit(amount)
    return player


def test_new_player_defaults() -> None:
    player = Player("P1")
    assert player.balance == 0
    assert player.bets_placed == 0
    assert player.bets_won == 0
    assert player.is_legitimate()
    assert player.win_rate() == 0.0
    assert player.first_violation() is None


@pytest.mark.parametrize("amount", [0, -1, -500])
def test_non_positive_deposit_is_a_violation(amount: int) -> None:
    player = _funded(10)
    assert not player.deposit(amount)
    assert player.balance == 10
    assert player.violations == [ViolationKind.DEPOSIT]


def test_withdraw_within_balance() -> None:
    player = _funded(100)
    assert player.withdraw(100)
    assert player.balance == 0
    assert player.is_legitimate()


@pytest.mark.parametrize("amount", [0, -5, 101])
def test_invalid_withdraw_is_a_violation(amount: int) -> None:
    player = _funded(100)
    assert not player.withdraw(amount)
    assert player.balance == 100
    assert player.first_violation() is ViolationKind.WITHDRAW


def test_winning_bet_credits_payout() -> None:
    player = _funded(100)
    assert player.place_bet("M1", 50, "A", "A", 2.0)
    assert player.balance == 200
    assert (player.bets_placed, player.bets_won) == (1, 1)
    assert player.win_rate() == 1.0


def test_gross_settlement_debits_stake_on_win() -> None:
    player = _funded(100)
    assert player.place_bet("M1", 50, "A", "A", 2.0, settlement=SettlementMode.GROSS)
    assert player.balance == 150
    assert player.win_rate() == 1.0
    assert player.is_legitimate()


@pytest.mark.parametrize("settlement", list(SettlementMode))
def test_losing_bet_debits_stake(settlement: SettlementMode) -> None:
    player = _funded(100)
    assert player.place_bet("M1", 30, "A", "B", 2.0, settlement=settlement)
    assert player.balance == 70
    assert (player.bets_placed, player.bets_won) == (1, 0)


def test_any_result_other_than_side_loses() -> None:
    player = _funded(100)
    assert player.place_bet("M1", 10, "A", "DRAW", 3.0)
    assert player.place_bet("M1", 10, "HOME", "HOME", 1.0)
    assert player.balance == 100
    assert player.bets_won == 1
    assert player.win_rate() == 0.5


def test_payout_is_floored() -> None:
    assert payout(33, 1.5) == 49
    assert payout(10, -0.25) == -3
    player = _funded(100)
    assert player.place_bet("M1", 33, "A", "A", 1.5)
    assert player.balance == 149


def test_negative_rate_can_push_balance_below_zero() -> None:
    player = _funded(10)
    assert player.place_bet("M1", 10, "A", "A", -2.0)
    assert player.balance == -10
    assert player.is_legitimate()


@pytest.mark.parametrize(
    ("stake", "rate"),
    [(0, 2.0), (-10, 2.0), (101, 2.0), (10, None)],
)
def test_rejected_bet_changes_nothing_but_the_trail(stake: int, rate: float | None) -> None:
    player = _funded(100)
    assert not player.place_bet("M1", stake, "A", "A", rate)
    assert player.balance == 100
    assert (player.bets_placed, player.bets_won) == (0, 0)
    assert player.violations == [ViolationKind.BET]


def test_taint_is_permanent_and_first_violation_is_kept() -> None:
    player = _funded(100)
    player.withdraw(500)
    player.deposit(0)
    assert player.deposit(50)
    assert player.place_bet("M1", 10, "A", "A", 2.0)
    assert player.balance == 170
    assert not player.is_legitimate()
    assert player.first_violation() is ViolationKind.WITHDRAW
    assert player.violations == [ViolationKind.WITHDRAW, ViolationKind.DEPOSIT]


def test_catalog_overwrites_and_reports_unknown_matches() -> None:
    catalog = MatchCatalog()
    catalog.set_rate("M1", 1.5)
    catalog.set_rate("M1", -0.5)
    assert catalog.get_rate("M1") == -0.5
    assert catalog.get_rate("M2") is None
    assert "M1" in catalog and "M2" not in catalog
    assert len(catalog) == 1
    assert dict(catalog.items()) == {"M1": -0.5}
