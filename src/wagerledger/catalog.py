"""Match payout rate catalog."""

from __future__ import annotations

from typing import Dict, ItemsView


class MatchCatalog:
    """Mapping from match identifier to payout rate.

    Entries are added or overwritten as rate records arrive and are never
    removed.  Rates are stored exactly as given, negative values included.
    """

    def __init__(self) -> None:
        self._rates: Dict[str, float] = {}

    def set_rate(self, match_id: str, rate: float) -> None:
        self._rates[match_id] = rate

    def get_rate(self, match_id: str) -> float | None:
        return self._rates.get(match_id)

    def items(self) -> ItemsView[str, float]:
        return self._rates.items()

    def __contains__(self, match_id: object) -> bool:
        return match_id in self._rates

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        return f"MatchCatalog(matches={len(self._rates)})"


__all__ = ["MatchCatalog"]
