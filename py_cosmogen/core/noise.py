"""
Deterministic 3D noise sources for surface deformation.

Two interchangeable implementations share the NoiseFunction interface:
- SineHashNoise: the classic ``fract(sin(dot) * 43758.5453)`` hash. Cheap and
  deterministic but not spatially coherent.
- LatticeValueNoise: integer-hashed lattice values blended with a smoothstep,
  coherent across space. Used by default for terrain.

Both return values in [-1, 1] and depend only on the seed and the inputs.
"""

import numpy as np
from typing import Protocol


class NoiseFunction(Protocol):
    """Anything that maps (N, 3) sample positions to (N,) values in [-1, 1]."""

    seed: int

    def sample(self, points: np.ndarray) -> np.ndarray:
        ...


class SineHashNoise:
    """Hash-style value noise built from a scaled sine."""

    def __init__(self, seed: int = 0):
        self.seed = int(seed)

    def __call__(self, x: float, y: float, z: float) -> float:
        return float(self.sample(np.array([[x, y, z]], dtype=np.float64))[0])

    def sample(self, points: np.ndarray) -> np.ndarray:
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        # Keep the sine argument small so precision does not collapse for large seeds
        offset = float(self.seed % 10007)
        n = np.sin(
            points[:, 0] * 12.9898 + points[:, 1] * 78.233 + points[:, 2] * 37.719 + offset
        ) * 43758.5453
        return 2.0 * (n - np.floor(n)) - 1.0


class LatticeValueNoise:
    """Coherent value noise on an integer lattice."""

    def __init__(self, seed: int = 0):
        self.seed = int(seed)

    def __call__(self, x: float, y: float, z: float) -> float:
        return float(self.sample(np.array([[x, y, z]], dtype=np.float64))[0])

    def _hash(self, ix: np.ndarray, iy: np.ndarray, iz: np.ndarray) -> np.ndarray:
        """Integer hash of lattice corners, returned in [-1, 1]."""
        h = (
            ix.view(np.uint64) * np.uint64(73856093)
            ^ iy.view(np.uint64) * np.uint64(19349663)
            ^ iz.view(np.uint64) * np.uint64(83492791)
            ^ np.uint64(self.seed & 0xFFFFFFFF) * np.uint64(2654435761)
        )
        h = (h ^ (h >> np.uint64(13))) * np.uint64(1274126177)
        h = h ^ (h >> np.uint64(16))
        h = h & np.uint64(0x7FFFFFFF)
        return h.astype(np.float64) / float(0x7FFFFFFF) * 2.0 - 1.0

    def sample(self, points: np.ndarray) -> np.ndarray:
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        base = np.floor(points)
        frac = points - base
        # Smoothstep fade
        fade = frac * frac * (3.0 - 2.0 * frac)
        ix, iy, iz = (base[:, i].astype(np.int64) for i in range(3))

        result = np.zeros(len(points), dtype=np.float64)
        for dx in (0, 1):
            wx = fade[:, 0] if dx else 1.0 - fade[:, 0]
            for dy in (0, 1):
                wy = fade[:, 1] if dy else 1.0 - fade[:, 1]
                for dz in (0, 1):
                    wz = fade[:, 2] if dz else 1.0 - fade[:, 2]
                    result += wx * wy * wz * self._hash(ix + dx, iy + dy, iz + dz)
        return result


def fractal_noise(
    noise: NoiseFunction,
    points: np.ndarray,
    octaves: int = 4,
    frequency: float = 1.0,
    persistence: float = 0.5,
    lacunarity: float = 2.0,
) -> np.ndarray:
    """
    Sum octaves of a noise source, normalized back to [-1, 1].

    Args:
        noise: Base noise source
        points: (N, 3) sample positions
        octaves: Number of layers
        frequency: Frequency of the first layer
        persistence: Amplitude multiplier per octave
        lacunarity: Frequency multiplier per octave

    Returns:
        (N,) array of noise values
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    total = np.zeros(len(points), dtype=np.float64)
    amplitude = 1.0
    norm = 0.0
    for _ in range(max(1, octaves)):
        total += noise.sample(points * frequency) * amplitude
        norm += amplitude
        amplitude *= persistence
        frequency *= lacunarity
    return np.clip(total / norm, -1.0, 1.0)
