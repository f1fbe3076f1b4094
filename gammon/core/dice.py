# =========================================================
# --- core_dice.py ---
# =========================================================

import random
from typing import Optional, Tuple

# =========================================================

#: Die face range
DIE_MIN = 1
DIE_MAX = 6


class DicePair:
    """
    Two six-sided dice sharing one random source.

    Attributes:
        rng (random.Random): Random number generator. Anything with a
            `randint(a, b)` method works, which keeps rolls scriptable in tests.
        values (Tuple[int, ...]): Faces of the last roll, empty before the first roll.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng: random.Random = rng or random.Random()
        self.values: Tuple[int, ...] = ()

    def __repr__(self) -> str:
        return f"<DicePair values={self.values}>"

    def roll(self) -> Tuple[int, int]:
        """Roll both dice and return the two faces."""
        d1, d2 = self.rng.randint(DIE_MIN, DIE_MAX), self.rng.randint(DIE_MIN, DIE_MAX)
        self.values = (d1, d2)
        return d1, d2

    @property
    def doubles(self) -> bool:
        """True if the last roll shows the same value twice."""
        return len(self.values) == 2 and self.values[0] == self.values[1]
