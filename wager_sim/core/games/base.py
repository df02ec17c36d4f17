from fractions import Fraction
from typing import Any, Dict, Optional

from wager_sim.core.ledger import Ledger
from wager_sim.core.models import GameId, Outcome
from wager_sim.core.rng import SystemRNG, rng as default_rng


class BaseGame:
    """Shared wiring for every engine: the ledger it stakes against and its RNG."""

    game_id: GameId

    def __init__(self, ledger: Ledger, rng: Optional[SystemRNG] = None):
        self.ledger = ledger
        self.rng = rng or default_rng

    @property
    def is_active(self) -> bool:
        """True while a round is mid-flight. Single-call games never are."""
        return False

    def view(self) -> Dict[str, Any]:
        return {"game": self.game_id.value, "active": self.is_active}

    def _outcome(self, bet: int, multiplier, **detail) -> Outcome:
        return Outcome(
            game=self.game_id,
            bet_amount=bet,
            multiplier=Fraction(multiplier),
            detail=detail,
        )

    def describe(self, outcome: Outcome) -> str:
        """One-line notification text for a settled round."""
        if outcome.profit > 0:
            return f"{self.game_id.display_name}: won ${outcome.win_amount:,}"
        if outcome.profit == 0:
            return f"{self.game_id.display_name}: push, bet returned"
        return f"{self.game_id.display_name}: lost ${-outcome.profit:,}"
