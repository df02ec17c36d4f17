"""
Crash game - a multiplier climbs from 1.00x until it hits a hidden crash
point. Cash out before it does to win bet * multiplier.

The round advances one tick at a time; whoever owns the schedule calls
tick(). The multiplier is held in integer hundredths so that 50 ticks from
1.00x is exactly 1.50x.
"""

from collections import deque
from enum import Enum
from fractions import Fraction
from typing import Dict, Optional

from wager_sim.config import CrashConfig
from wager_sim.core.exceptions import InvalidBet, NotActive
from wager_sim.core.games.base import BaseGame
from wager_sim.core.logger import get_logger
from wager_sim.core.models import GameId, Outcome

logger = get_logger("games.crash")


class CrashPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    CASHED_OUT = "cashed_out"
    CRASHED = "crashed"


class CrashGame(BaseGame):
    game_id = GameId.CRASH

    START_HUNDREDTHS = 100
    STEP_HUNDREDTHS = 1  # +0.01x per tick

    def __init__(self, ledger, rng=None, config: Optional[CrashConfig] = None):
        super().__init__(ledger, rng)
        self.config = config or CrashConfig()
        self.recent = deque(maxlen=self.config.recent_limit)
        self._reset()

    def _reset(self):
        self.phase = CrashPhase.IDLE
        self.bet = 0
        self.hundredths = self.START_HUNDREDTHS
        self.crash_point: Optional[Fraction] = None
        self.auto_cashout: Optional[Fraction] = None
        self.ticks = 0

    @property
    def is_active(self) -> bool:
        return self.phase == CrashPhase.RUNNING

    @property
    def multiplier(self) -> Fraction:
        return Fraction(self.hundredths, 100)

    def _draw_crash_point(self) -> float:
        return self.rng.uniform(self.config.crash_min, self.config.crash_max)

    @staticmethod
    def _parse_threshold(auto_cashout) -> Fraction:
        """Exact threshold from a number or numeric string; must be above 1.00x."""
        if isinstance(auto_cashout, bool):
            raise InvalidBet("Auto cashout must be a number above 1.00x")
        try:
            # Shortest repr, so 1.1 compares equal to 1.10x. nan and inf are rejected here.
            threshold = Fraction(str(auto_cashout))
        except (ValueError, TypeError, OverflowError, ZeroDivisionError):
            raise InvalidBet("Auto cashout must be a number above 1.00x")
        if threshold <= 1:
            raise InvalidBet("Auto cashout must be above 1.00x")
        return threshold

    def start(self, bet: int, auto_cashout: Optional[float] = None) -> None:
        """Stake `bet` and start climbing. Raises on invalid bet or threshold."""
        threshold = None
        if auto_cashout is not None:
            threshold = self._parse_threshold(auto_cashout)

        self.ledger.open_round(bet)

        self._reset()
        self.phase = CrashPhase.RUNNING
        self.bet = bet
        self.auto_cashout = threshold
        # Shortest repr, so a drawn 1.1 compares equal to 1.10x
        self.crash_point = Fraction(str(self._draw_crash_point()))

        logger.debug(
            "Crash round started",
            extra={"bet": bet, "auto_cashout": auto_cashout},
        )

    def tick(self) -> Optional[Outcome]:
        """
        Advance one step. Returns the Outcome if this tick ended the round,
        None if the round is still running or no round is running at all.
        """
        if self.phase != CrashPhase.RUNNING:
            return None

        self.hundredths += self.STEP_HUNDREDTHS
        self.ticks += 1

        # Auto cashout wins a tie with the crash point
        if self.auto_cashout is not None and self.multiplier >= self.auto_cashout:
            return self._finish(cashed_out=True, auto=True)

        if self.multiplier >= self.crash_point:
            return self._finish(cashed_out=False)

        return None

    def cash_out(self) -> Outcome:
        if self.phase != CrashPhase.RUNNING:
            raise NotActive("No crash round is running")
        return self._finish(cashed_out=True)

    def _finish(self, cashed_out: bool, auto: bool = False) -> Outcome:
        at = self.multiplier
        self.phase = CrashPhase.CASHED_OUT if cashed_out else CrashPhase.CRASHED
        self.recent.appendleft(round(float(at), 2))

        outcome = self._outcome(
            self.bet,
            at if cashed_out else 0,
            result="cashed_out" if cashed_out else "crashed",
            at_multiplier=round(float(at), 2),
            auto=auto,
            ticks=self.ticks,
        )
        logger.debug(
            f"Crash round {outcome.detail['result']} at {format_multiplier(at)}",
            extra={"bet": self.bet},
        )
        self._reset()
        return outcome

    def describe(self, outcome: Outcome) -> str:
        at = outcome.detail["at_multiplier"]
        if outcome.detail["result"] == "cashed_out":
            return f"Cashed out at {at:.2f}x! Won ${outcome.win_amount:,}"
        return f"Crashed at {at:.2f}x! Lost ${outcome.bet_amount:,}"

    def view(self) -> Dict:
        return {
            "game": self.game_id.value,
            "active": self.is_active,
            "phase": self.phase.value,
            "multiplier": round(float(self.multiplier), 2),
            "bet": self.bet,
            "auto_cashout": float(self.auto_cashout) if self.auto_cashout else None,
            "recent": list(self.recent),
        }


def format_multiplier(multiplier: Fraction) -> str:
    return f"{float(multiplier):.2f}x"
