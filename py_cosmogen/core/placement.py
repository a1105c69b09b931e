"""
Feature and spatial placement.

This module implements:
- Distance-constrained scatter on a sphere (vegetation, sunspots)
- Uniform scatter in a spherical shell (wind particles, lava sparks)
- Power-law spiral-arm scatter with radial color gradients (galaxies)
- Clustered scatter for clumpy structure (star-forming regions)

All functions consume an explicit LehmerPRNG, so output is a pure function
of the stream state and the arguments.
"""

import math
import numpy as np
import structlog
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .lehmer_prng import LehmerPRNG
from ..config.options import GalaxyLayoutConfig

logger = structlog.get_logger()

DEFAULT_MAX_ATTEMPTS = 30  # Tries per point before the slot is dropped


def hex_to_rgb(color: int) -> np.ndarray:
    """Convert 0xRRGGBB to an RGB float array in [0, 1]."""
    return np.array(
        [(color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF], dtype=np.float64
    ) / 255.0


def rgb_to_hex(rgb) -> int:
    r, g, b = (int(round(min(max(c, 0.0), 1.0) * 255)) for c in rgb)
    return (r << 16) | (g << 8) | b


def lerp_color(inside: int, outside: int, t: float) -> np.ndarray:
    """Linear interpolation between two colors, t clamped to [0, 1]."""
    t = min(max(t, 0.0), 1.0)
    return hex_to_rgb(inside) * (1.0 - t) + hex_to_rgb(outside) * t


@dataclass
class SpatialLayout:
    """Ordered positioned points with branch tags and colors."""

    positions: np.ndarray  # (N, 3)
    branches: np.ndarray  # (N,) arm or cluster index
    colors: np.ndarray  # (N, 3) RGB in [0, 1]
    radii: np.ndarray  # (N,) drawn radial distance
    max_radius: float

    def __len__(self) -> int:
        return len(self.positions)

    @property
    def system_ids(self) -> List[str]:
        return [f"system_{i}" for i in range(len(self))]

    @classmethod
    def empty(cls, max_radius: float) -> "SpatialLayout":
        return cls(
            positions=np.zeros((0, 3), dtype=np.float64),
            branches=np.zeros(0, dtype=np.int32),
            colors=np.zeros((0, 3), dtype=np.float64),
            radii=np.zeros(0, dtype=np.float64),
            max_radius=max_radius,
        )

    @classmethod
    def concatenate(cls, chunks: List["SpatialLayout"], max_radius: float) -> "SpatialLayout":
        if not chunks:
            return cls.empty(max_radius)
        return cls(
            positions=np.concatenate([c.positions for c in chunks]),
            branches=np.concatenate([c.branches for c in chunks]),
            colors=np.concatenate([c.colors for c in chunks]),
            radii=np.concatenate([c.radii for c in chunks]),
            max_radius=max_radius,
        )

    def subset(self, indices: np.ndarray) -> "SpatialLayout":
        return SpatialLayout(
            positions=self.positions[indices],
            branches=self.branches[indices],
            colors=self.colors[indices],
            radii=self.radii[indices],
            max_radius=self.max_radius,
        )


def scatter_on_sphere(
    rng: LehmerPRNG,
    count: int,
    radius: float,
    min_distance: float,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> np.ndarray:
    """
    Scatter points on a sphere with a minimum pairwise distance.

    Each slot draws uniform surface points until one is at least
    ``min_distance`` from every accepted point. After ``max_attempts``
    failures the slot is dropped, bounding the worst-case cost.

    Args:
        rng: Random stream
        count: Requested number of points
        radius: Sphere radius
        min_distance: Minimum distance between accepted points
        max_attempts: Draws per slot before giving up

    Returns:
        (K, 3) array with K <= count
    """
    accepted = np.zeros((max(count, 0), 3), dtype=np.float64)
    n_accepted = 0
    dropped = 0
    for _ in range(max(count, 0)):
        for _attempt in range(max_attempts):
            candidate = np.array(rng.point_on_sphere(radius))
            if n_accepted == 0:
                ok = True
            else:
                distances = np.linalg.norm(accepted[:n_accepted] - candidate, axis=1)
                ok = bool(distances.min() >= min_distance)
            if ok:
                accepted[n_accepted] = candidate
                n_accepted += 1
                break
        else:
            dropped += 1

    if dropped:
        logger.debug("Dropped scatter slots", requested=count, accepted=n_accepted, dropped=dropped)
    return accepted[:n_accepted]


def scatter_in_shell(rng: LehmerPRNG, count: int, inner: float, outer: float) -> np.ndarray:
    """
    Scatter points in the shell between two radii.

    Direction is uniform on the sphere; the radius is uniform in [inner, outer].

    Returns:
        (count, 3) array
    """
    points = np.zeros((max(count, 0), 3), dtype=np.float64)
    for i in range(len(points)):
        direction = rng.point_on_sphere(1.0)
        distance = inner + rng.random() * (outer - inner)
        points[i] = np.array(direction) * distance
    return points


def _spiral_point(
    rng: LehmerPRNG, index: int, config: GalaxyLayoutConfig
) -> Tuple[np.ndarray, int, float]:
    """Place one spiral point; returns (position, branch, radius)."""
    max_radius = config.radius
    r = rng.random() * max_radius
    branch = index % config.arms
    branch_angle = branch / config.arms * 2.0 * math.pi
    spin_angle = r * config.spin

    jitter = np.zeros(3)
    for axis in range(3):
        magnitude = math.pow(rng.random(), config.randomness_power) * config.randomness
        jitter[axis] = magnitude * rng.sign()

    height = (rng.random() - 0.5) * max_radius * config.thickness
    position = np.array(
        [
            math.cos(branch_angle + spin_angle) * r + jitter[0],
            height + jitter[1],
            math.sin(branch_angle + spin_angle) * r + jitter[2],
        ]
    )
    norm = float(np.linalg.norm(position))
    if norm > max_radius:
        position *= max_radius / norm
    return position, branch, r


def iter_spiral_arm_chunks(
    rng: LehmerPRNG, config: GalaxyLayoutConfig, chunk_size: int = 2000
) -> Iterator[SpatialLayout]:
    """
    Yield the spiral scatter in chunks of at most ``chunk_size`` points.

    Concatenating the chunks gives exactly the layout produced by
    scatter_spiral_arms for the same stream and config.
    """
    chunk_size = max(1, chunk_size)
    inside = hex_to_rgb(config.inside_color)
    outside = hex_to_rgb(config.outside_color)

    for start in range(0, config.star_count, chunk_size):
        stop = min(start + chunk_size, config.star_count)
        size = stop - start
        positions = np.zeros((size, 3), dtype=np.float64)
        branches = np.zeros(size, dtype=np.int32)
        radii = np.zeros(size, dtype=np.float64)
        for offset, index in enumerate(range(start, stop)):
            positions[offset], branches[offset], radii[offset] = _spiral_point(rng, index, config)

        mix = np.clip(radii / config.radius, 0.0, 1.0)[:, None]
        colors = inside * (1.0 - mix) + outside * mix
        yield SpatialLayout(positions, branches, colors, radii, config.radius)


def scatter_spiral_arms(rng: LehmerPRNG, config: GalaxyLayoutConfig) -> SpatialLayout:
    """
    Power-law radial scatter along spiral arms.

    Each point draws a radius uniformly in [0, radius], takes arm
    ``index % arms``, rotates by ``radius * spin`` and gets per-axis jitter
    of ``rng()^power * randomness`` with an independent sign per axis.
    Points pushed past the maximum radius by jitter are pulled back onto it.

    Args:
        rng: Random stream
        config: Layout parameters

    Returns:
        SpatialLayout with one point per requested star
    """
    layout = SpatialLayout.concatenate(
        list(iter_spiral_arm_chunks(rng, config, chunk_size=max(config.star_count, 1))),
        config.radius,
    )
    logger.debug("Scattered spiral arms", points=len(layout), arms=config.arms, radius=config.radius)
    return layout


def scatter_clusters(
    rng: LehmerPRNG,
    count: int,
    radius: float,
    clumpiness: float,
    clusters: Optional[int] = None,
    flatten: float = 1.0,
) -> SpatialLayout:
    """
    Scatter points around random cluster centers.

    Higher clumpiness shrinks clusters so points bunch tighter. Points are
    kept inside ``radius``.

    Args:
        rng: Random stream
        count: Number of points
        radius: Containing radius
        clumpiness: 0 (diffuse) to 1 (tight clumps)
        clusters: Number of cluster centers, derived from count when omitted
        flatten: Vertical scale applied to positions

    Returns:
        SpatialLayout whose branch index is the cluster index
    """
    count = max(count, 0)
    if count == 0:
        return SpatialLayout.empty(radius)
    n_clusters = clusters or max(1, int(math.sqrt(count) / 2))
    centers = [np.array(rng.point_on_sphere(radius * math.sqrt(rng.random()) * 0.7)) for _ in range(n_clusters)]
    spread = radius * (1.0 - 0.8 * min(max(clumpiness, 0.0), 1.0)) * 0.5

    positions = np.zeros((count, 3), dtype=np.float64)
    branches = np.zeros(count, dtype=np.int32)
    for i in range(count):
        cluster = int(rng.random() * n_clusters) % n_clusters
        offset = np.array(rng.point_on_sphere(spread * rng.random()))
        point = centers[cluster] + offset
        point[1] *= flatten
        norm = float(np.linalg.norm(point))
        if norm > radius:
            point *= radius / norm
        positions[i] = point
        branches[i] = cluster

    radii = np.linalg.norm(positions, axis=1)
    colors = np.ones((count, 3), dtype=np.float64)
    return SpatialLayout(positions, branches, colors, radii, radius)
