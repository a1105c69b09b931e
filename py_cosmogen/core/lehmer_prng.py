"""
Lehmer (Park-Miller) PRNG used by every generator.

A minimal-standard multiplicative congruential generator: the state is an
integer in [1, 2^31 - 2] and each call advances it by ``state * 16807 mod
(2^31 - 1)``. Outputs depend only on the seed and the number of calls made,
so two streams built from the same seed always agree.
"""

import math
from typing import Sequence, TypeVar

T = TypeVar("T")

MODULUS = 2147483647  # 2^31 - 1
MULTIPLIER = 16807


def _normalize_seed(seed) -> int:
    """Map any integer seed onto the valid state range."""
    state = int(seed) % MODULUS
    if state <= 0:
        state += MODULUS - 1
    return state


class LehmerPRNG:
    """
    Seeded pseudo-random stream producing floats in [0, 1).

    Each generator owns its own instance; nothing is shared between
    streams.
    """

    def __init__(self, seed: int):
        self.seed = int(seed)
        self.call_count = 0
        self._state = _normalize_seed(seed)

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        self._state = (self._state * MULTIPLIER) % MODULUS
        return (self._state - 1) / (MODULUS - 1)

    def uniform(self, low: float, high: float) -> float:
        """Interpolate within [low, high] using one draw."""
        return low + self.random() * (high - low)

    def randint(self, low: int, high: int) -> int:
        """Integer in [low, high] inclusive."""
        return low + min(int(self.random() * (high - low + 1)), high - low)

    def sign(self) -> int:
        """Return +1 or -1 with equal probability."""
        return 1 if self.random() < 0.5 else -1

    def chance(self, probability: float) -> bool:
        return self.random() < probability

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[min(int(self.random() * len(seq)), len(seq) - 1)]

    def point_on_sphere(self, radius: float = 1.0):
        """
        Uniform point on a sphere surface.

        Azimuth comes from the first draw and the polar angle from
        ``acos(2u - 1)`` on the second, which avoids clustering at the poles.

        Returns:
            Tuple of (x, y, z)
        """
        theta = self.random() * 2.0 * math.pi
        phi = math.acos(2.0 * self.random() - 1.0)
        return (
            radius * math.sin(phi) * math.cos(theta),
            radius * math.cos(phi),
            radius * math.sin(phi) * math.sin(theta),
        )

    def fork(self, label: str) -> "LehmerPRNG":
        """Independent stream derived from this stream's seed and a label."""
        from ..utils.random import derive_seed

        return LehmerPRNG(derive_seed(self.seed, label))
