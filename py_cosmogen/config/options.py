"""
Per-call option structs for generation, rendering and galaxy layout.

Every struct has a documented default instance. Dict input may carry
unrecognized keys; they are ignored. Out-of-range numbers are clamped to
the nearest valid value with a warning instead of failing the call.
"""

import math
import structlog
from typing import Any, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.errors import InvalidConfigError

logger = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)

QUALITY_LEVELS = ("ultra", "high", "medium", "low", "minimal")
MAX_TREE_COUNT = 1000
MAX_GALAXY_STARS = 200000


def _clamp(field: str, value: Any, low: Optional[float] = None, high: Optional[float] = None, cast=float):
    """
    Coerce and clamp a numeric option.

    Raises:
        InvalidConfigError: If the value is not numeric at all
    """
    try:
        number = cast(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidConfigError(field, value, f"{field} must be numeric") from exc
    clamped = number
    if isinstance(number, float) and math.isnan(number):
        clamped = cast(low if low is not None else 0)
    if low is not None and clamped < low:
        clamped = cast(low)
    if high is not None and clamped > high:
        clamped = cast(high)
    if clamped != number or isinstance(number, float) and math.isnan(number):
        logger.warning("Clamped invalid config value", field=field, value=value, clamped=clamped)
    return clamped


class GenerationConfig(BaseModel):
    """Options for generating one instance."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    age: Optional[float] = Field(None, description="Pinned age in Myr; sampled when omitted")
    star_distance: Optional[float] = Field(None, description="Pinned orbital distance in AU (planets)")
    allow_companion: bool = Field(True, description="Allow a binary companion (stars)")

    @field_validator("age", mode="before")
    @classmethod
    def _clamp_age(cls, value):
        return None if value is None else _clamp("age", value, low=0.0)

    @field_validator("star_distance", mode="before")
    @classmethod
    def _clamp_distance(cls, value):
        return None if value is None else _clamp("star_distance", value, low=1e-4)


class RenderConfig(BaseModel):
    """Options for building a renderable mesh."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    detail_level: int = Field(2, description="Geometry detail 1 (coarse) to 5 (fine)")
    radius: float = Field(3.0, description="Display radius of the base body")
    enable_lod: bool = Field(True, description="Build level-of-detail tiers")
    max_features: int = Field(50, description="Cap on discrete features per feature type")
    enable_atmosphere: bool = Field(True, description="Atmosphere and corona shells")
    enable_rings: bool = Field(True, description="Planetary rings and accretion disks")
    enable_moons: bool = Field(True, description="Moons and companions")
    enable_effects: bool = Field(True, description="Particles, jets, magnetospheres and similar effects")
    enable_vegetation: bool = Field(True, description="Instanced vegetation on habitable planets")
    tree_count: int = Field(500, description="Requested vegetation count")
    low_poly: bool = Field(True, description="Triangulate galaxy scatter into a faceted surface")
    quality: str = Field("medium", description="Galaxy quality tier")
    theme: Optional[str] = Field(None, description="Galaxy palette theme")
    variant_seed: Optional[int] = Field(None, description="Seed of a random galaxy layout variant; class layout when omitted")

    @field_validator("detail_level", mode="before")
    @classmethod
    def _clamp_detail(cls, value):
        return _clamp("detail_level", value, low=1, high=5, cast=int)

    @field_validator("radius", mode="before")
    @classmethod
    def _clamp_radius(cls, value):
        return _clamp("radius", value, low=0.01)

    @field_validator("max_features", mode="before")
    @classmethod
    def _clamp_features(cls, value):
        return _clamp("max_features", value, low=0, cast=int)

    @field_validator("tree_count", mode="before")
    @classmethod
    def _clamp_trees(cls, value):
        return _clamp("tree_count", value, low=0, high=MAX_TREE_COUNT, cast=int)

    @field_validator("quality", mode="before")
    @classmethod
    def _known_quality(cls, value):
        quality = str(value).lower()
        if quality not in QUALITY_LEVELS:
            logger.warning("Unknown quality tier", value=value, clamped="medium")
            return "medium"
        return quality


class GalaxyLayoutConfig(BaseModel):
    """Spiral-arm scatter parameters."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    star_count: int = Field(15000, description="Number of scattered points")
    radius: float = Field(150.0, description="Maximum radial distance")
    arms: int = Field(3, description="Number of spiral arms")
    spin: float = Field(1.0, description="Angular offset per unit radius")
    randomness: float = Field(0.2, description="Maximum per-axis jitter off the arm")
    randomness_power: float = Field(6.0, description="Exponent concentrating jitter near the arms")
    thickness: float = Field(0.1, description="Disk half-height relative to radius")
    inside_color: int = Field(0xFFD700, description="Color at the center")
    outside_color: int = Field(0x4B0082, description="Color at the rim")
    low_poly: bool = Field(True, description="Triangulate the scatter")

    @field_validator("star_count", mode="before")
    @classmethod
    def _clamp_count(cls, value):
        return _clamp("star_count", value, low=0, high=MAX_GALAXY_STARS, cast=int)

    @field_validator("radius", mode="before")
    @classmethod
    def _clamp_radius(cls, value):
        return _clamp("radius", value, low=1e-3)

    @field_validator("arms", mode="before")
    @classmethod
    def _clamp_arms(cls, value):
        return _clamp("arms", value, low=1, cast=int)

    @field_validator("randomness", "thickness", mode="before")
    @classmethod
    def _clamp_non_negative(cls, value, info):
        return _clamp(info.field_name, value, low=0.0)

    @field_validator("randomness_power", mode="before")
    @classmethod
    def _clamp_power(cls, value):
        return _clamp("randomness_power", value, low=0.1)

    @field_validator("inside_color", "outside_color", mode="before")
    @classmethod
    def _clamp_color(cls, value, info):
        return _clamp(info.field_name, value, low=0, high=0xFFFFFF, cast=int)


DEFAULT_GENERATION_CONFIG = GenerationConfig()
DEFAULT_RENDER_CONFIG = RenderConfig()
DEFAULT_GALAXY_LAYOUT = GalaxyLayoutConfig()


def coerce_config(model: Type[M], value: Union[None, dict, M], default: Optional[M] = None) -> M:
    """
    Turn None, a dict or a model instance into a validated model.

    Input that cannot be coerced at all falls back to the default with a
    warning.

    Args:
        model: Target model class
        value: Caller-supplied options
        default: Instance used for None and for unusable input

    Returns:
        Model instance
    """
    fallback = default if default is not None else model()
    if value is None:
        return fallback
    if isinstance(value, model):
        return value
    if isinstance(value, BaseModel):
        value = value.model_dump()
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        logger.warning(
            "Unusable config, using defaults",
            config=model.__name__,
            errors=[error["loc"] for error in exc.errors()],
        )
        return fallback
