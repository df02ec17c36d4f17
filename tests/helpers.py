"""Deterministic randomness for pinning exact outcomes in tests."""

from typing import Iterable, List, Optional

from wager_sim.core.games.blackjack import Card
from wager_sim.core.rng import SystemRNG


class ScriptedRNG(SystemRNG):
    """Hands out pre-arranged draws, in order. Running dry is a test bug."""

    def __init__(
        self,
        floats: Iterable[float] = (),
        ints: Iterable[int] = (),
        decks: Iterable[List[Card]] = (),
    ):
        self.floats = list(floats)
        self.ints = list(ints)
        self.decks = list(decks)

    def random_float(self) -> float:
        assert self.floats, "ScriptedRNG ran out of floats"
        return self.floats.pop(0)

    def random_int(self, min_val: int, max_val: int) -> int:
        assert self.ints, "ScriptedRNG ran out of ints"
        value = self.ints.pop(0)
        assert min_val <= value <= max_val, f"scripted {value} outside [{min_val}, {max_val}]"
        return value

    def shuffle(self, deck: list) -> list:
        if self.decks:
            return self.decks.pop(0)
        return deck[:]


def stacked_deck(*ranks: str, suit: Optional[str] = None) -> List[Card]:
    """
    A 52-card deck whose top cards come off in the given rank order
    (player, player, dealer, dealer, then hits). The rest sits underneath.
    """
    pool = [Card(rank, s) for s in Card.SUITS for rank in Card.RANKS]
    drawn = []
    for rank in ranks:
        card = next(c for c in pool if c.rank == rank and (suit is None or c.suit == suit))
        pool.remove(card)
        drawn.append(card)
    # The engine draws with pop(), so the first card drawn goes last
    return pool + list(reversed(drawn))
