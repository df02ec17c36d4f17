from typing import Dict, List, Tuple

from wager_sim.core.games.base import BaseGame
from wager_sim.core.logger import get_logger
from wager_sim.core.models import GameId, Outcome

logger = get_logger("games.slots")


class SlotsGame(BaseGame):
    """
    3-reel slot machine. Every reel draws uniformly from the same 7 symbols.
    Three of a kind pays the symbol's multiplier; any pair pays a flat 2x.
    """

    game_id = GameId.SLOTS

    SYMBOLS = ["🍒", "🍋", "🍊", "🍇", "🔔", "⭐", "7️⃣"]

    PAYOUTS_3X = {
        "🍒": 5,
        "🍋": 10,
        "🍊": 15,
        "🍇": 20,
        "🔔": 25,
        "⭐": 50,
        "7️⃣": 100,
    }

    PAIR_PAYOUT = 2

    def _spin_reel(self) -> str:
        """Spin a single reel and return the symbol."""
        return self.rng.random_choice(self.SYMBOLS)

    def _calculate_multiplier(self, reels: List[str]) -> Tuple[int, str]:
        """
        Returns: (multiplier, win_type)
        """
        if reels[0] == reels[1] == reels[2]:
            symbol = reels[0]
            win_type = "jackpot" if symbol == "7️⃣" else "triple"
            return self.PAYOUTS_3X[symbol], win_type

        # Any two matching, adjacent or not
        if reels[0] == reels[1] or reels[1] == reels[2] or reels[0] == reels[2]:
            return self.PAIR_PAYOUT, "pair"

        return 0, "lose"

    def spin(self, bet: int) -> Outcome:
        """
        Spin the slot machine.

        Args:
            bet: Amount wagered

        Returns:
            Outcome with the three reel symbols in its detail
        """
        self.ledger.open_round(bet)

        reels = [self._spin_reel() for _ in range(3)]
        multiplier, win_type = self._calculate_multiplier(reels)

        logger.debug(f"Slots spun {' '.join(reels)}", extra={"bet": bet, "win_type": win_type})

        return self._outcome(bet, multiplier, reels=reels, win_type=win_type)

    def describe(self, outcome: Outcome) -> str:
        reels = outcome.detail["reels"]
        win_type = outcome.detail["win_type"]
        won = f"Won ${outcome.win_amount:,} ({outcome.multiplier}x)"
        if win_type in ("triple", "jackpot"):
            return f"Three {reels[0]}! {won}"
        if win_type == "pair":
            paired = reels[1] if reels[1] in (reels[0], reels[2]) else reels[0]
            return f"Two {paired}! {won}"
        return f"No win. Lost ${outcome.bet_amount:,}"

    def paytable(self) -> Dict:
        return {"three_of_a_kind": dict(self.PAYOUTS_3X), "pair": self.PAIR_PAYOUT}
