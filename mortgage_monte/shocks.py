"""Random shock sampling (market noise and life events)."""

import math
from random import Random


class ShockGenerator:
    """Standard-normal and Bernoulli samples drawn from an injectable RNG."""

    def __init__(self, rng: Random | None = None):
        self.rng = rng if rng is not None else Random()

    @classmethod
    def seeded(cls, seed: int | None) -> "ShockGenerator":
        return cls(Random(seed))

    def normal_sample(self) -> float:
        """Box-Muller transform over two uniforms.

        u1 is taken from (0, 1] so log(u1) is always finite.
        """
        u1 = 1.0 - self.rng.random()
        u2 = self.rng.random()
        return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)

    def bernoulli_event(self, probability: float, conditional_probability: float = 1.0) -> bool:
        """True if the event fires this period.

        A nonzero conditional_probability requires a second independent draw to
        pass as well (e.g. "job loss occurs AND lasts long enough to matter").
        """
        if not self.rng.random() < probability:
            return False
        if conditional_probability:
            return self.rng.random() < conditional_probability
        return True
