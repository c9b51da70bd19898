"""
Seeded pseudo-random generator for reproducible fixture shuffles.

Park-Miller "minimal standard" linear congruential generator. It is not meant to
be unpredictable: its only job is that an integer seed reproduces the exact same
team order on demand, so a previewed or historical fixture can be rebuilt.
"""

import secrets
from typing import List, Sequence, TypeVar

MODULUS = 2147483647
MULTIPLIER = 16807

# Seeds are stored in a BIGINT column
SEED_MIN = -(2**63)
SEED_MAX = 2**63 - 1

T = TypeVar("T")


def normalize_seed(seed: int) -> int:
    """
    Map any integer into the generator's state range [1, MODULUS - 1].

    The remainder keeps the sign of the seed; non-positive remainders are
    shifted up by MODULUS - 1.
    """
    state = abs(seed) % MODULUS
    if seed < 0:
        state = -state
    if state <= 0:
        state += MODULUS - 1
    return state


def generate_seed() -> int:
    """Fresh seed in [1, MODULUS - 1]."""
    return secrets.randbelow(MODULUS - 1) + 1


class SeededRandom:
    def __init__(self, seed: int):
        self.seed = seed
        self._state = normalize_seed(seed)

    def next(self) -> float:
        """Next value in [0, 1)."""
        self._state = (self._state * MULTIPLIER) % MODULUS
        return (self._state - 1) / (MODULUS - 1)

    def randrange(self, stop: int) -> int:
        """Integer in [0, stop)."""
        return int(self.next() * stop)


def seeded_shuffle(items: Sequence[T], seed: int) -> List[T]:
    """
    Fisher-Yates shuffle driven by SeededRandom. Returns a new list.

    Walks i from the last index down to 1, swapping i with j = floor(next() * (i + 1)).
    """
    rng = SeededRandom(seed)
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randrange(i + 1)
        result[i], result[j] = result[j], result[i]
    return result
