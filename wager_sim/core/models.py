"""Value types passed between engines, the coordinator and the ledger."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from fractions import Fraction
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class GameId(str, Enum):
    CRASH = "crash"
    ROULETTE = "roulette"
    BLACKJACK = "blackjack"
    SLOTS = "slots"
    DICE = "dice"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class Outcome:
    """
    The resolved result of a round.

    `multiplier` is exact; the payout is floor(bet * multiplier) so that the
    only rounding in the whole ledger is this per-round truncation.
    `detail` is copied into a read-only mapping on construction.
    """

    game: GameId
    bet_amount: int
    multiplier: Fraction
    detail: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.multiplier < 0:
            raise ValueError("multiplier must be non-negative")
        object.__setattr__(self, "detail", MappingProxyType(dict(self.detail)))

    @property
    def win_amount(self) -> int:
        return math.floor(self.bet_amount * self.multiplier)

    @property
    def profit(self) -> int:
        return self.win_amount - self.bet_amount

    @property
    def severity(self) -> str:
        if self.profit > 0:
            return "success"
        if self.profit == 0:
            return "info"
        return "error"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game": self.game.value,
            "bet": self.bet_amount,
            "multiplier": round(float(self.multiplier), 2),
            "win_amount": self.win_amount,
            "profit": self.profit,
            "detail": dict(self.detail),
        }


@dataclass(frozen=True)
class HistoryEntry:
    game: str
    timestamp: str
    bet_amount: int
    multiplier: float
    profit: int

    @classmethod
    def from_outcome(cls, outcome: Outcome, now: Optional[datetime] = None) -> "HistoryEntry":
        now = now or datetime.now(timezone.utc)
        return cls(
            game=outcome.game.display_name,
            timestamp=now.isoformat(),
            bet_amount=outcome.bet_amount,
            multiplier=round(float(outcome.multiplier), 2),
            profit=outcome.profit,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game": self.game,
            "time": self.timestamp,
            "betAmount": self.bet_amount,
            "multiplier": self.multiplier,
            "profit": self.profit,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            game=str(data["game"]),
            timestamp=str(data["time"]),
            bet_amount=int(data["betAmount"]),
            multiplier=float(data["multiplier"]),
            profit=int(data["profit"]),
        )


@dataclass(frozen=True)
class Notification:
    message: str
    severity: str  # success | error | info
    game: Optional[str] = None
    kind: Optional[str] = None
