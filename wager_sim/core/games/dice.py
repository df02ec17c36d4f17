"""
Dice game - roll 2 dice and bet on the total against 7.
over / under pay 2x, an exact seven pays 5x.
"""

from typing import Tuple

from wager_sim.core.exceptions import InvalidBet
from wager_sim.core.games.base import BaseGame
from wager_sim.core.models import GameId, Outcome


class DiceGame(BaseGame):
    game_id = GameId.DICE

    PAYOUTS = {
        "over": 2,
        "under": 2,
        "seven": 5,
    }

    def _roll_dice(self) -> Tuple[int, int]:
        """Roll 2 six-sided dice."""
        die1 = self.rng.random_int(1, 6)
        die2 = self.rng.random_int(1, 6)
        return die1, die2

    @staticmethod
    def _wins(bet_type: str, total: int) -> bool:
        if bet_type == "over":
            return total > 7
        if bet_type == "under":
            return total < 7
        return total == 7

    def roll(self, bet: int, bet_type: str) -> Outcome:
        """
        Roll the dice and resolve the bet.

        Args:
            bet: Amount wagered
            bet_type: "over", "under" or "seven"
        """
        bet_type = str(bet_type).lower().strip()
        if bet_type not in self.PAYOUTS:
            raise InvalidBet(f"Invalid bet type: {bet_type}. Must be 'over', 'under' or 'seven'.")

        self.ledger.open_round(bet)

        die1, die2 = self._roll_dice()
        total = die1 + die2
        win = self._wins(bet_type, total)

        return self._outcome(
            bet,
            self.PAYOUTS[bet_type] if win else 0,
            dice=[die1, die2],
            total=total,
            bet_type=bet_type,
            win=win,
        )

    def describe(self, outcome: Outcome) -> str:
        total = outcome.detail["total"]
        if outcome.detail["win"]:
            return f"Rolled {total}! You won ${outcome.win_amount:,} ({outcome.multiplier}x)"
        return f"Rolled {total}! You lost ${outcome.bet_amount:,}"
