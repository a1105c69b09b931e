"""
Classification registry for stars, planets and galaxies.

This module implements:
- Immutable ClassDefinition records validated with pydantic
- Habitability baselines with a derived overall score
- Per-stage physics factor tables
- ClassRegistry lookup and two-stage weighted class selection
"""

from __future__ import annotations

import structlog
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Dict, Iterator, List, Mapping, NamedTuple, Optional, Sequence, Tuple
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer, computed_field, model_validator

from .errors import ClassNotFoundError
from .lehmer_prng import LehmerPRNG

logger = structlog.get_logger()


class BodyKind(str, Enum):
    """Kinds of celestial body the generators can produce."""

    STAR = "star"
    PLANET = "planet"
    GALAXY = "galaxy"


class EvolutionStage(str, Enum):
    """Coarse lifecycle phase derived from age / lifespan."""

    FORMATION = "formation"
    MAIN_PHASE = "main-phase"
    TRANSITIONAL = "transitional"
    LATE_PHASE = "late-phase"
    REMNANT = "remnant"


class BaseShape(str, Enum):
    """Base mesh shape used for a class."""

    SPHERE = "sphere"
    ICOSPHERE = "icosphere"
    DODECAHEDRON = "dodecahedron"
    ELLIPSOID = "ellipsoid"
    DISK = "disk"
    IRREGULAR = "irregular"


class ValueRange(NamedTuple):
    """Closed [min, max] interval."""

    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    @property
    def span(self) -> float:
        return self.max - self.min


# Relative weights of the five habitability sub-scores. Equal weights make
# the overall score the plain mean of the sub-scores.
HABITABILITY_WEIGHTS = {
    "temperature": 1,
    "atmosphere": 1,
    "radiation": 1,
    "gravity": 1,
    "water": 1,
}


def combine_habitability(scores: Dict[str, float]) -> float:
    """
    Weighted combination of habitability sub-scores, clamped to [0, 100].

    Args:
        scores: Sub-score per HABITABILITY_WEIGHTS key

    Returns:
        Overall habitability score
    """
    total_weight = sum(HABITABILITY_WEIGHTS.values())
    weighted = sum(HABITABILITY_WEIGHTS[key] * scores[key] for key in HABITABILITY_WEIGHTS)
    return min(100.0, max(0.0, weighted / total_weight))


class HabitabilityProfile(BaseModel):
    """Baseline habitability sub-scores for a class, each in [0, 100]."""

    model_config = ConfigDict(frozen=True)

    temperature: float = Field(0.0, ge=0, le=100, description="Thermal suitability")
    atmosphere: float = Field(0.0, ge=0, le=100, description="Breathable atmosphere")
    radiation: float = Field(0.0, ge=0, le=100, description="Radiation shielding")
    gravity: float = Field(0.0, ge=0, le=100, description="Surface gravity comfort")
    water: float = Field(0.0, ge=0, le=100, description="Liquid water availability")

    @computed_field
    @property
    def overall(self) -> float:
        """Derived overall score; not independently settable."""
        return combine_habitability(self.sub_scores())

    def sub_scores(self) -> Dict[str, float]:
        return {key: getattr(self, key) for key in HABITABILITY_WEIGHTS}


class ResourceWeight(NamedTuple):
    """Resource tag with its abundance weight in [0, 1]."""

    tag: str
    weight: float


class StageFactor(NamedTuple):
    """Multipliers applied to class base constants during one stage."""

    wind: float = 1.0
    mass_loss: float = 1.0
    magnetic: float = 1.0


# Default stage factor table; classes may override individual stages
DEFAULT_STAGE_FACTORS: Dict[EvolutionStage, StageFactor] = {
    EvolutionStage.FORMATION: StageFactor(wind=1.5, mass_loss=10.0, magnetic=2.0),
    EvolutionStage.MAIN_PHASE: StageFactor(wind=1.0, mass_loss=1.0, magnetic=1.0),
    EvolutionStage.TRANSITIONAL: StageFactor(wind=1.2, mass_loss=10.0, magnetic=0.8),
    EvolutionStage.LATE_PHASE: StageFactor(wind=2.0, mass_loss=100.0, magnetic=0.5),
    EvolutionStage.REMNANT: StageFactor(wind=0.0, mass_loss=0.0, magnetic=1.0),
}


class ClassPhysics(BaseModel):
    """Base constants feeding the derived-physics calculators."""

    model_config = ConfigDict(frozen=True)

    wind_base: float = Field(0.0, ge=0, description="Wind speed per unit mass (km/s)")
    mass_loss_base: float = Field(0.0, ge=0, description="Mass loss per unit mass (Msun/yr)")
    magnetic_base: float = Field(0.0, ge=0, description="Field strength per unit mass (gauss)")
    rotation_hours: float = Field(24.0, gt=0, description="Base rotation period")
    metallicity_base: float = Field(0.0, description="Base [Fe/H]")
    stage_factors: Dict[EvolutionStage, StageFactor] = Field(default_factory=dict)

    def factor(self, stage: EvolutionStage) -> StageFactor:
        """Stage factor with class override falling back to the default table."""
        return self.stage_factors.get(stage, DEFAULT_STAGE_FACTORS[stage])


class VisualTraits(BaseModel):
    """Visual feature flags gating optional shells and features."""

    model_config = ConfigDict(frozen=True)

    base_shape: BaseShape = BaseShape.SPHERE
    rings: bool = False
    moons: int = Field(0, ge=0)
    atmosphere: bool = False
    clouds: bool = False
    corona: bool = False
    accretion_disk: bool = False
    jets: bool = False
    magnetosphere: bool = False
    stellar_wind: bool = False
    pulsation: bool = False
    lensing: bool = False
    flares: bool = False
    sunspots: bool = False
    granulation: bool = False
    event_horizon: bool = False
    beams: bool = False
    forests: bool = False
    aurora: bool = False
    spiral_arms: bool = False
    central_bar: bool = False
    active_nucleus: bool = False
    star_forming_regions: bool = False
    surface_effect: Optional[str] = None  # "lava", "ice" or None

    def enabled(self) -> List[str]:
        """Names of the boolean traits that are switched on."""
        return [name for name, value in self if isinstance(value, bool) and value]


def _read_only(value: Mapping) -> Mapping:
    return MappingProxyType(dict(value))


# Mappings that are read-only once validated
RangeTable = Annotated[Mapping[str, ValueRange], AfterValidator(_read_only), PlainSerializer(dict)]
PropertyTable = Annotated[Mapping[str, float], AfterValidator(_read_only), PlainSerializer(dict)]


class ClassDefinition(BaseModel):
    """Static description of one stellar, planetary or galactic class."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Registry identifier, e.g. G_TYPE")
    name: str = Field(description="Human readable name")
    kind: BodyKind
    description: str = ""
    ranges: RangeTable = Field(description="Sampled numeric ranges, in sampling order")
    traits: VisualTraits = Field(default_factory=VisualTraits)
    formation_probability: float = Field(ge=0, le=1)
    habitability: HabitabilityProfile = Field(default_factory=HabitabilityProfile)
    danger_level: int = Field(0, ge=0, le=10)
    scientific_value: int = Field(1, ge=1, le=10)
    resources: Tuple[ResourceWeight, ...] = ()
    biomes: Tuple[str, ...] = ()
    colors: Tuple[int, ...] = (0xFFFFFF,)
    physics: ClassPhysics = Field(default_factory=ClassPhysics)
    properties: PropertyTable = Field(default_factory=dict, validate_default=True, description="Kind-specific constants")
    host_star_types: Tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_invariants(self) -> "ClassDefinition":
        for field_name, value_range in self.ranges.items():
            if value_range.min > value_range.max:
                raise ValueError(f"{self.id}: range '{field_name}' has min > max")
        for resource in self.resources:
            if not 0.0 <= resource.weight <= 1.0:
                raise ValueError(f"{self.id}: resource '{resource.tag}' weight outside [0, 1]")
        if not self.colors:
            raise ValueError(f"{self.id}: at least one color is required")
        return self

    def range_of(self, field_name: str) -> ValueRange:
        return self.ranges[field_name]

    def prop(self, key: str, default: float = 0.0) -> float:
        """Kind-specific constant with a default."""
        return self.properties.get(key, default)

    @property
    def resource_tags(self) -> List[str]:
        return [resource.tag for resource in self.resources]


class ClassRegistry:
    """
    Read-only catalog of ClassDefinitions for one body kind.

    Registries are built once and passed explicitly to the generators, so
    tests and parallel workers can use independent rule sets.
    """

    def __init__(self, kind: BodyKind, definitions: Sequence[ClassDefinition], default_class: str):
        """
        Initialize registry.

        Args:
            kind: Body kind every definition must belong to
            definitions: Class definitions in selection order
            default_class: Identifier substituted when a lookup fails
        """
        self.kind = kind
        self._definitions: Dict[str, ClassDefinition] = {}
        for definition in definitions:
            if definition.kind != kind:
                raise ValueError(f"{definition.id} is a {definition.kind.value}, not a {kind.value}")
            if definition.id in self._definitions:
                raise ValueError(f"Duplicate class id {definition.id}")
            self._definitions[definition.id] = definition
        if default_class not in self._definitions:
            raise ValueError(f"Default class {default_class} is not registered")
        self.default_class = default_class

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[ClassDefinition]:
        return iter(self._definitions.values())

    def __contains__(self, class_id: str) -> bool:
        return class_id in self._definitions

    def lookup(self, class_id: str) -> ClassDefinition:
        """
        Find a class by identifier.

        Raises:
            ClassNotFoundError: If the identifier is unknown
        """
        try:
            return self._definitions[class_id]
        except KeyError:
            raise ClassNotFoundError(class_id, self.kind.value) from None

    def get(self, class_id: str, default: Optional[ClassDefinition] = None) -> Optional[ClassDefinition]:
        return self._definitions.get(class_id, default)

    def default(self) -> ClassDefinition:
        return self._definitions[self.default_class]

    def all_classes(self) -> Tuple[ClassDefinition, ...]:
        return tuple(self._definitions.values())

    def class_ids(self) -> List[str]:
        return list(self._definitions)

    def weighted_random_class(self, rng: LehmerPRNG) -> ClassDefinition:
        """
        Pick a class biased toward common ones.

        Every class is tested independently against its formation probability
        (one draw each, in registry order). A uniform draw over the passing
        classes picks the result; if none pass, the draw is over all classes.

        Args:
            rng: Random stream

        Returns:
            Selected ClassDefinition
        """
        definitions = self.all_classes()
        candidates = [d for d in definitions if rng.random() < d.formation_probability]
        pool = candidates or definitions
        selected = rng.choice(pool)
        logger.debug(
            "Selected weighted class",
            kind=self.kind.value,
            class_id=selected.id,
            candidates=len(candidates),
        )
        return selected


class Registries(NamedTuple):
    """The three registries used by the engine."""

    stars: ClassRegistry
    planets: ClassRegistry
    galaxies: ClassRegistry

    def for_kind(self, kind: BodyKind) -> ClassRegistry:
        return {
            BodyKind.STAR: self.stars,
            BodyKind.PLANET: self.planets,
            BodyKind.GALAXY: self.galaxies,
        }[BodyKind(kind)]

    def find(self, class_id: str) -> ClassDefinition:
        """Look a class up across all kinds."""
        for registry in self:
            definition = registry.get(class_id)
            if definition is not None:
                return definition
        raise ClassNotFoundError(class_id)


def build_default_registries() -> Registries:
    """Build registries from the built-in catalogs."""
    from .galaxy_types import DEFAULT_GALAXY_CLASS, GALAXY_CLASSES
    from .planet_types import DEFAULT_PLANET_CLASS, PLANET_CLASSES
    from .stellar_types import DEFAULT_STAR_CLASS, STELLAR_CLASSES

    return Registries(
        stars=ClassRegistry(BodyKind.STAR, STELLAR_CLASSES, DEFAULT_STAR_CLASS),
        planets=ClassRegistry(BodyKind.PLANET, PLANET_CLASSES, DEFAULT_PLANET_CLASS),
        galaxies=ClassRegistry(BodyKind.GALAXY, GALAXY_CLASSES, DEFAULT_GALAXY_CLASS),
    )
