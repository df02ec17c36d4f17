"""Game engines. Each one stakes against a Ledger and draws from an injected RNG."""

from .base import BaseGame
from .crash import CrashGame, CrashPhase
from .roulette import RouletteGame, Selection
from .blackjack import BlackjackGame, BlackjackPhase, Card, score_hand
from .slots import SlotsGame
from .dice import DiceGame

__all__ = [
    "BaseGame",
    "CrashGame",
    "CrashPhase",
    "RouletteGame",
    "Selection",
    "BlackjackGame",
    "BlackjackPhase",
    "Card",
    "score_hand",
    "SlotsGame",
    "DiceGame",
]
