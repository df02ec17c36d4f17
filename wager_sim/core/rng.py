import secrets
import random
from typing import Optional


class SystemRNG:
    """
    A wrapper around Python's `secrets` module to provide cryptographically strong
    random numbers for game outcomes. Every engine receives one of these (or a
    SeededRNG) through its constructor.
    """

    def random_float(self) -> float:
        """Returns a random float in the range [0.0, 1.0)."""
        # secrets.randbelow(n) returns [0, n). We use a large integer range to approximate a float.
        precision = 10**12
        return secrets.randbelow(precision) / precision

    def uniform(self, low: float, high: float) -> float:
        """Returns a random float in the range [low, high)."""
        return low + (high - low) * self.random_float()

    def random_int(self, min_val: int, max_val: int) -> int:
        """Returns a random integer in the range [min_val, max_val] (inclusive)."""
        if min_val > max_val:
            raise ValueError("min_val must be less than or equal to max_val")
        return min_val + secrets.randbelow(max_val - min_val + 1)

    def random_choice(self, options: list):
        """Returns a random element from a non-empty sequence."""
        if not options:
            raise IndexError("Cannot choose from an empty sequence")
        return options[self.random_int(0, len(options) - 1)]

    def shuffle(self, deck: list) -> list:
        """Returns a new list with elements shuffled uniformly (Fisher-Yates)."""
        shuffled_deck = deck[:]
        for i in range(len(shuffled_deck) - 1, 0, -1):
            j = self.random_int(0, i)
            shuffled_deck[i], shuffled_deck[j] = shuffled_deck[j], shuffled_deck[i]
        return shuffled_deck


class SeededRNG(SystemRNG):
    """Reproducible source backed by random.Random, for simulations and tests."""

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def random_float(self) -> float:
        return self._random.random()

    def random_int(self, min_val: int, max_val: int) -> int:
        if min_val > max_val:
            raise ValueError("min_val must be less than or equal to max_val")
        return self._random.randint(min_val, max_val)


rng = SystemRNG()
