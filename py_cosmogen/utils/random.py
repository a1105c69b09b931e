"""
Seed helpers for independent random streams.

Generators never share a PRNG. Work that can run in parallel (one body per
task, one mesh stage per body) gets its own stream whose seed is derived
from the caller's seed plus a stable label or index.
"""

import zlib
from typing import Optional, Union

from ..core.lehmer_prng import MODULUS, LehmerPRNG

DEFAULT_SEED = 12345


def derive_seed(seed: int, label: Union[str, int]) -> int:
    """
    Derive a child seed from a parent seed and a label.

    Uses CRC32 so the result is stable across processes and Python versions
    (unlike ``hash()``).

    Args:
        seed: Parent seed
        label: Stage name or index

    Returns:
        Seed in [1, 2^31 - 2]
    """
    mixed = zlib.crc32(f"{int(seed)}:{label}".encode("utf-8"))
    child = (int(seed) * 31 + mixed) % MODULUS
    return child if child > 0 else 1


def make_prng(seed: Optional[int] = None) -> LehmerPRNG:
    """
    Build a fresh stream.

    Args:
        seed: Seed to use, DEFAULT_SEED when omitted

    Returns:
        LehmerPRNG instance
    """
    return LehmerPRNG(DEFAULT_SEED if seed is None else seed)
