"""
Attribute sampling for generated instances.

This module implements:
- Range interpolation for every numeric field of a class
- Age sampling biased away from end-of-life
- Evolutionary stage thresholds
- Resource abundance rolls
"""

import structlog
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .lehmer_prng import LehmerPRNG
from .registry import ClassDefinition, EvolutionStage

logger = structlog.get_logger()

# Unpinned ages are drawn from [0, AGE_FRACTION * lifespan) so most
# instances are not already at the end of their life.
AGE_FRACTION = 0.8

# Upper bounds of age / lifespan for each stage. These are fixed balance
# constants, not caller configuration. Anything at or beyond the last bound
# is a remnant.
STAGE_THRESHOLDS: Tuple[Tuple[float, EvolutionStage], ...] = (
    (0.10, EvolutionStage.FORMATION),
    (0.90, EvolutionStage.MAIN_PHASE),
    (0.95, EvolutionStage.TRANSITIONAL),
    (0.99, EvolutionStage.LATE_PHASE),
)

# Habitability multiplier per stage
STAGE_HABITABILITY = {
    EvolutionStage.FORMATION: 0.6,
    EvolutionStage.MAIN_PHASE: 1.0,
    EvolutionStage.TRANSITIONAL: 0.8,
    EvolutionStage.LATE_PHASE: 0.5,
    EvolutionStage.REMNANT: 0.1,
}


def determine_stage(age: float, lifespan: float) -> EvolutionStage:
    """
    Evolutionary stage from age and lifespan.

    Args:
        age: Current age
        lifespan: Total lifespan in the same unit

    Returns:
        EvolutionStage for the age / lifespan ratio
    """
    if lifespan <= 0:
        return EvolutionStage.REMNANT
    for fraction, stage in STAGE_THRESHOLDS:
        if age < fraction * lifespan:
            return stage
    return EvolutionStage.REMNANT


@dataclass
class SamplerOptions:
    """Attribute sampler options."""

    age_fraction: float = AGE_FRACTION  # Share of the lifespan unpinned ages are drawn from


class AttributeSampler:
    """Draws concrete values for one instance from a class definition."""

    def __init__(self, options: Optional[SamplerOptions] = None):
        self.options = options or SamplerOptions()

    def sample_ranges(self, definition: ClassDefinition, rng: LehmerPRNG) -> Dict[str, float]:
        """
        Sample every numeric range in declaration order.

        Each value is ``min + rng() * (max - min)``, clipped to the range so
        floating-point rounding cannot step outside it.

        Args:
            definition: Class to sample
            rng: Random stream

        Returns:
            Ordered mapping of field name to value
        """
        values = {}
        for field_name, value_range in definition.ranges.items():
            value = rng.uniform(value_range.min, value_range.max)
            values[field_name] = min(max(value, value_range.min), value_range.max)
        logger.debug("Sampled class ranges", class_id=definition.id, values=values)
        return values

    def sample_age(self, lifespan: float, rng: LehmerPRNG, pinned: Optional[float] = None) -> float:
        """Pinned age if given, otherwise a draw from the early part of the lifespan."""
        if pinned is not None:
            return pinned
        return rng.random() * lifespan * self.options.age_fraction

    def sample_resources(self, definition: ClassDefinition, rng: LehmerPRNG) -> Dict[str, float]:
        """
        Roll each class resource.

        A resource with weight p is present when a draw falls below p and
        then gets abundance ``rng() * p``. Absent resources are omitted.

        Returns:
            Mapping of resource tag to abundance in [0, weight]
        """
        resources = {}
        for resource in definition.resources:
            if rng.chance(resource.weight):
                resources[resource.tag] = rng.random() * resource.weight
        return resources
