"""
Ledger - the single owner of the player's balance, wager/win totals,
game history and profit series. Engines debit through it at round start;
the coordinator settles finished rounds through it.
"""

from collections import deque
from datetime import datetime, timezone
from typing import Callable, Deque, Dict, List, Optional

from wager_sim.core.exceptions import InsufficientFunds, InvalidBet
from wager_sim.core.logger import get_logger
from wager_sim.core.models import HistoryEntry, Outcome

logger = get_logger("ledger")

DEFAULT_BALANCE = 10000
MIN_BET = 10
HISTORY_LIMIT = 50


class Ledger:
    """Balance, totals and bounded history for one player."""

    def __init__(
        self,
        balance: Optional[int] = None,
        min_bet: int = MIN_BET,
        history_limit: int = HISTORY_LIMIT,
        starting_balance: int = DEFAULT_BALANCE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.starting_balance = starting_balance
        self.min_bet = min_bet
        self.history_limit = history_limit
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self.balance = starting_balance if balance is None else balance
        self.total_wagered = 0
        self.total_won = 0
        self.games_played = 0
        self.history: Deque[HistoryEntry] = deque(maxlen=history_limit)
        self.profit_series: List[int] = []

    # ==================== Validation ====================

    def validate_wager(self, amount) -> None:
        """Raise InvalidBet / InsufficientFunds unless `amount` can be staked."""
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidBet("Bet amount must be a whole number")
        if amount <= 0 or amount < self.min_bet:
            raise InvalidBet(f"Minimum bet is ${self.min_bet}")
        if amount > self.balance:
            raise InsufficientFunds()

    def can_afford(self, amount) -> bool:
        try:
            self.validate_wager(amount)
        except (InvalidBet, InsufficientFunds):
            return False
        return True

    # ==================== Balance mutation ====================

    def debit(self, amount: int) -> int:
        if amount < 0:
            raise ValueError("debit amount must be non-negative")
        if amount > self.balance:
            raise InsufficientFunds()
        self.balance -= amount
        return self.balance

    def credit(self, amount: int) -> int:
        if amount < 0:
            raise ValueError("credit amount must be non-negative")
        self.balance += amount
        return self.balance

    # ==================== Round bookkeeping ====================

    def open_round(self, amount: int) -> None:
        """Validate and take the stake for a new round."""
        self.validate_wager(amount)
        self.debit(amount)
        self.total_wagered += amount
        self.games_played += 1

    def add_stake(self, amount: int) -> None:
        """Take an additional stake for a round already open (blackjack double)."""
        if amount > self.balance:
            raise InsufficientFunds("Insufficient balance to double")
        self.debit(amount)
        self.total_wagered += amount

    def settle(self, outcome: Outcome) -> HistoryEntry:
        """Pay out a finished round and record it."""
        win_amount = outcome.win_amount
        self.credit(win_amount)
        self.total_won += win_amount

        entry = HistoryEntry.from_outcome(outcome, now=self._clock())
        self.record_round(entry)

        logger.info(
            f"{entry.game} settled",
            extra={"bet": outcome.bet_amount, "win": win_amount, "balance": self.balance},
        )
        return entry

    def record_round(self, entry: HistoryEntry) -> None:
        # deque(maxlen) drops the oldest entry from the right end
        self.history.appendleft(entry)
        self.profit_series.append(entry.profit)

    # ==================== Views ====================

    def totals(self) -> Dict[str, int]:
        return {
            "total_wagered": self.total_wagered,
            "total_won": self.total_won,
            "games_played": self.games_played,
            "net_profit": self.total_won - self.total_wagered,
        }

    def snapshot(self) -> Dict:
        return {
            "balance": self.balance,
            **self.totals(),
            "history": [entry.to_dict() for entry in self.history],
            "profit_series": list(self.profit_series),
        }

    def reset(self) -> None:
        """Back to a fresh account: starting balance, no history, zero totals."""
        self.balance = self.starting_balance
        self.total_wagered = 0
        self.total_won = 0
        self.games_played = 0
        self.history.clear()
        self.profit_series.clear()
        logger.info("Ledger reset", extra={"balance": self.balance})

    # ==================== Persistence shape ====================

    def to_state(self) -> Dict:
        return {
            "balance": self.balance,
            "history": [entry.to_dict() for entry in self.history],
            "stats": {
                "totalWagered": self.total_wagered,
                "totalWon": self.total_won,
                "gamesPlayed": self.games_played,
                "profitHistory": list(self.profit_series),
            },
        }

    def load_state(self, balance: Optional[int], history: Optional[list], stats: Optional[dict]) -> None:
        """Restore from persisted pieces; absent pieces keep their defaults."""
        if balance is not None:
            self.balance = int(balance)
        if history is not None:
            # Stored newest-first; keep the newest `history_limit`
            entries = [HistoryEntry.from_dict(item) for item in history[: self.history_limit]]
            self.history = deque(entries, maxlen=self.history_limit)
        if stats is not None:
            self.total_wagered = int(stats.get("totalWagered", 0))
            self.total_won = int(stats.get("totalWon", 0))
            self.games_played = int(stats.get("gamesPlayed", 0))
            self.profit_series = [int(p) for p in stats.get("profitHistory", [])]
