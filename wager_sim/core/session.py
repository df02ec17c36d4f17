"""
Session coordinator - the one entry point the UI talks to.

Owns the ledger and the five engines, allows a single round in flight at a
time, settles finished rounds into the ledger and saves the result. Engine
errors never escape: every call returns an ActionResult.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from wager_sim.config import AppConfig
from wager_sim.core.exceptions import GameError, InvalidAction, RoundInProgress, UnknownGame
from wager_sim.core.games import BlackjackGame, CrashGame, DiceGame, RouletteGame, SlotsGame
from wager_sim.core.games.base import BaseGame
from wager_sim.core.ledger import Ledger
from wager_sim.core.logger import get_logger
from wager_sim.core.models import GameId, Notification, Outcome
from wager_sim.core.persistence import BlobStore, LedgerRepository
from wager_sim.core.rng import SystemRNG

logger = get_logger("session")

Listener = Callable[[Notification], None]


@dataclass
class ActionResult:
    """What the UI gets back from every intent, accepted or not."""

    ok: bool
    message: str
    severity: str
    balance: int
    game: Optional[str] = None
    outcome: Optional[Outcome] = None
    session: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def settled(self) -> bool:
        return self.outcome is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "message": self.message,
            "severity": self.severity,
            "balance": self.balance,
            "game": self.game,
            "outcome": self.outcome.to_dict() if self.outcome else None,
            "session": self.session,
            "error": self.error,
        }


class SessionCoordinator:
    """Routes intents to engines and applies their outcomes to the ledger."""

    # Mid-round actions each engine accepts, by intent name
    ACTIONS = {
        GameId.BLACKJACK: ("hit", "stand", "double"),
        GameId.CRASH: ("cash_out",),
    }

    def __init__(
        self,
        ledger: Optional[Ledger] = None,
        rng: Optional[SystemRNG] = None,
        repository: Optional[LedgerRepository] = None,
        config: Optional[AppConfig] = None,
    ):
        self.config = config or AppConfig()
        self.repository = repository
        if ledger is None:
            ledger_kwargs = dict(
                min_bet=self.config.ledger.min_bet,
                history_limit=self.config.ledger.history_limit,
                starting_balance=self.config.ledger.starting_balance,
            )
            ledger = repository.load(**ledger_kwargs) if repository else Ledger(**ledger_kwargs)
        self.ledger = ledger

        self.engines: Dict[GameId, BaseGame] = {
            GameId.CRASH: CrashGame(ledger, rng, self.config.crash),
            GameId.ROULETTE: RouletteGame(ledger, rng),
            GameId.BLACKJACK: BlackjackGame(ledger, rng),
            GameId.SLOTS: SlotsGame(ledger, rng),
            GameId.DICE: DiceGame(ledger, rng),
        }
        self._listeners: List[Listener] = []

    @classmethod
    def from_store(cls, store: BlobStore, config: Optional[AppConfig] = None, rng=None) -> "SessionCoordinator":
        return cls(rng=rng, repository=LedgerRepository(store), config=config)

    # ==================== Events ====================

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _notify(self, notification: Notification) -> None:
        for listener in list(self._listeners):
            listener(notification)

    # ==================== Lookup ====================

    def _resolve(self, game: Union[GameId, str]) -> GameId:
        try:
            return GameId(game)
        except ValueError:
            raise UnknownGame(f"Unknown game: {game}")

    @property
    def active_game(self) -> Optional[GameId]:
        for game_id, engine in self.engines.items():
            if engine.is_active:
                return game_id
        return None

    # ==================== Intents ====================

    def start_round(self, game: Union[GameId, str], bet: int, **options) -> ActionResult:
        """
        Stake `bet` on `game` and start (or fully resolve) a round.

        Options by game: crash `auto_cashout`, roulette `selections`,
        dice `bet_type`. Blackjack and slots take none.
        """
        game_name = getattr(game, "value", game)
        try:
            game_id = self._resolve(game)
            active = self.active_game
            if active is not None:
                raise RoundInProgress(f"Finish your {active.display_name} round first")

            outcome = self._launch(game_id, bet, options)
        except GameError as e:
            return self._rejected(e, game_name)

        logger.info(f"{game_id.display_name} round opened", extra={"bet": bet})
        return self._accepted(game_id, outcome)

    def _launch(self, game_id: GameId, bet: int, options: Dict[str, Any]) -> Optional[Outcome]:
        engine = self.engines[game_id]
        if game_id is GameId.CRASH:
            engine.start(bet, auto_cashout=options.get("auto_cashout"))
            return None
        if game_id is GameId.ROULETTE:
            return engine.spin(bet, options.get("selections"))
        if game_id is GameId.BLACKJACK:
            return engine.deal(bet)
        if game_id is GameId.SLOTS:
            return engine.spin(bet)
        return engine.roll(bet, options.get("bet_type", ""))

    def act(self, game: Union[GameId, str], action: str) -> ActionResult:
        """Apply a mid-round action (hit, stand, double, cash_out)."""
        game_name = getattr(game, "value", game)
        try:
            game_id = self._resolve(game)
            if action not in self.ACTIONS.get(game_id, ()):
                raise InvalidAction(f"{game_id.display_name} has no '{action}' action")

            outcome = getattr(self.engines[game_id], action)()
        except GameError as e:
            return self._rejected(e, game_name)

        return self._accepted(game_id, outcome)

    def hit(self) -> ActionResult:
        return self.act(GameId.BLACKJACK, "hit")

    def stand(self) -> ActionResult:
        return self.act(GameId.BLACKJACK, "stand")

    def double(self) -> ActionResult:
        return self.act(GameId.BLACKJACK, "double")

    def cash_out(self) -> ActionResult:
        return self.act(GameId.CRASH, "cash_out")

    def tick(self) -> Optional[ActionResult]:
        """Advance a running crash round; returns a result only when it ends."""
        outcome = self.engines[GameId.CRASH].tick()
        if outcome is None:
            return None
        return self._accepted(GameId.CRASH, outcome)

    def reset_stats(self) -> ActionResult:
        """Restore the starting balance and clear history (not mid-round)."""
        active = self.active_game
        if active is not None:
            return self._rejected(RoundInProgress(f"Finish your {active.display_name} round first"), None)
        self.ledger.reset()
        self._save()
        return ActionResult(
            ok=True,
            message="Stats reset",
            severity="info",
            balance=self.ledger.balance,
        )

    # ==================== Results ====================

    def _accepted(self, game_id: GameId, outcome: Optional[Outcome]) -> ActionResult:
        engine = self.engines[game_id]

        if outcome is None:
            self._save()
            return ActionResult(
                ok=True,
                message="Round in progress",
                severity="info",
                balance=self.ledger.balance,
                game=game_id.value,
                session=engine.view(),
            )

        self.ledger.settle(outcome)
        self._save()

        message = engine.describe(outcome)
        self._notify(Notification(message, outcome.severity, game_id.value))
        return ActionResult(
            ok=True,
            message=message,
            severity=outcome.severity,
            balance=self.ledger.balance,
            game=game_id.value,
            outcome=outcome,
            session=engine.view(),
        )

    def _rejected(self, error: GameError, game_name: Optional[str]) -> ActionResult:
        logger.info(f"Rejected {error.kind}: {error.message}", extra={"game": game_name})
        self._notify(Notification(error.message, error.severity, game_name, error.kind))
        return ActionResult(
            ok=False,
            message=error.message,
            severity=error.severity,
            balance=self.ledger.balance,
            game=game_name,
            error=error.kind,
        )

    def _save(self) -> None:
        if self.repository is None:
            return
        try:
            self.repository.save(self.ledger)
        except OSError as e:
            # The round is already settled in memory; the next save catches up
            logger.error(f"Could not save ledger state: {e}", extra={"balance": self.ledger.balance})

    # ==================== Views ====================

    def state(self) -> Dict[str, Any]:
        active = self.active_game
        return {
            **self.ledger.snapshot(),
            "active_game": active.value if active else None,
            "sessions": {
                GameId.CRASH.value: self.engines[GameId.CRASH].view(),
                GameId.BLACKJACK.value: self.engines[GameId.BLACKJACK].view(),
            },
        }
