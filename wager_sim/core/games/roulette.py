from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, Iterable, List, Tuple, Union

from wager_sim.core.exceptions import InvalidBet, NoSelection
from wager_sim.core.games.base import BaseGame
from wager_sim.core.logger import get_logger
from wager_sim.core.models import GameId, Outcome

logger = get_logger("games.roulette")


@dataclass(frozen=True)
class Selection:
    """One bet target: a color ("red", "black", "green") or a number 0-36."""

    type: str  # "color" | "number"
    value: Union[str, int]

    @property
    def payout(self) -> int:
        if self.type == "color":
            return RouletteGame.COLOR_PAYOUTS[self.value]
        return RouletteGame.NUMBER_PAYOUT

    def matches(self, number: int, color: str) -> bool:
        if self.type == "color":
            return self.value == color
        return self.value == number

    def label(self) -> str:
        if self.type == "color":
            return f"{self.value} ({self.payout}x)"
        return f"Number {self.value} ({self.payout}x)"


class RouletteGame(BaseGame):
    """
    European single-zero wheel (37 pockets).
    The stake is split evenly across every selection on the layout; each
    selection is resolved on its own against the one drawn pocket.
    """

    game_id = GameId.ROULETTE

    # Pocket order around the wheel, as (number, color)
    WHEEL: Tuple[Tuple[int, str], ...] = (
        (0, "green"), (32, "red"), (15, "black"), (19, "red"), (4, "black"),
        (21, "red"), (2, "black"), (25, "red"), (17, "black"), (34, "red"),
        (6, "black"), (27, "red"), (13, "black"), (36, "red"), (11, "black"),
        (30, "red"), (8, "black"), (23, "red"), (10, "black"), (5, "red"),
        (24, "black"), (16, "red"), (33, "black"), (1, "red"), (20, "black"),
        (14, "red"), (31, "black"), (9, "red"), (22, "black"), (18, "red"),
        (29, "black"), (7, "red"), (28, "black"), (12, "red"), (35, "black"),
        (3, "red"), (26, "black"),
    )
    COLORS: Dict[int, str] = {number: color for number, color in WHEEL}

    COLOR_PAYOUTS = {"red": 2, "black": 2, "green": 14}
    NUMBER_PAYOUT = 36

    @classmethod
    def parse_selection(cls, raw) -> Selection:
        """Accept a Selection, a {"type", "value"} dict, a color name or a number."""
        if isinstance(raw, Selection):
            selection = raw
        elif isinstance(raw, dict):
            selection = Selection(str(raw.get("type", "")).lower(), raw.get("value"))
        elif isinstance(raw, bool):
            raise InvalidBet(f"Invalid roulette bet: {raw!r}")
        elif isinstance(raw, int):
            selection = Selection("number", raw)
        elif isinstance(raw, str):
            selection = Selection("color", raw.lower().strip())
        else:
            raise InvalidBet(f"Invalid roulette bet: {raw!r}")

        if selection.type == "color":
            if isinstance(selection.value, str):
                selection = Selection("color", selection.value.lower().strip())
            if selection.value not in cls.COLOR_PAYOUTS:
                raise InvalidBet(f"Invalid color: {selection.value}")
        elif selection.type == "number":
            value = selection.value
            if isinstance(value, str) and value.strip().isdigit():
                value = int(value)
                selection = Selection("number", value)
            if isinstance(value, bool) or not isinstance(value, int) or value not in cls.COLORS:
                raise InvalidBet(f"Invalid number: {value}. Must be 0-36.")
        else:
            raise InvalidBet(f"Invalid bet type: {selection.type}")
        return selection

    def _parse_selections(self, selections: Iterable) -> List[Selection]:
        if selections is None:
            return []
        # A lone color, number or dict is one selection, not something to iterate
        if isinstance(selections, (str, int, dict, Selection)):
            selections = [selections]
        try:
            raw_selections = list(selections)
        except TypeError:
            raise InvalidBet(f"Invalid roulette bets: {selections!r}")

        parsed: List[Selection] = []
        for raw in raw_selections:
            selection = self.parse_selection(raw)
            if selection not in parsed:
                parsed.append(selection)
        return parsed

    def _spin_wheel(self) -> Tuple[int, str]:
        index = self.rng.random_int(0, len(self.WHEEL) - 1)
        return self.WHEEL[index]

    def spin(self, bet: int, selections: Iterable) -> Outcome:
        """
        Spin the wheel and resolve every selection.

        Args:
            bet: Total stake, split evenly across selections
            selections: Colors and/or numbers to back

        Returns:
            Outcome whose multiplier is total win / bet
        """
        self.ledger.validate_wager(bet)
        parsed = self._parse_selections(selections)
        if not parsed:
            raise NoSelection()

        self.ledger.open_round(bet)

        number, color = self._spin_wheel()

        total_win = 0
        winning: List[str] = []
        for selection in parsed:
            if selection.matches(number, color):
                # floor(bet / n * payout), computed exactly
                total_win += bet * selection.payout // len(parsed)
                winning.append(selection.label())

        logger.debug(f"Roulette landed on {number} {color}", extra={"bet": bet, "win": total_win})

        return self._outcome(
            bet,
            Fraction(total_win, bet),
            number=number,
            color=color,
            selections=[{"type": s.type, "value": s.value} for s in parsed],
            winning_bets=winning,
        )

    def describe(self, outcome: Outcome) -> str:
        landed = f"Number {outcome.detail['number']} {outcome.detail['color']}!"
        if outcome.win_amount > 0:
            return f"{landed} Won ${outcome.win_amount:,}"
        return f"{landed} Lost ${outcome.bet_amount:,}"
