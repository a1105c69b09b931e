"""Generated instance records and their derived-physics bundles."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from .registry import BodyKind, EvolutionStage, VisualTraits


@dataclass(frozen=True)
class StarPhysics:
    """Derived quantities for a star."""

    lifespan: float  # Myr
    habitable_zone: Tuple[float, float]  # AU (inner, outer)
    escape_velocity: float  # km/s
    surface_gravity: float  # m/s^2
    radiative_luminosity: float  # Lsun from radius and temperature
    absolute_magnitude: float
    energy_output: float  # W
    stellar_wind_speed: float  # km/s
    mass_loss_rate: float  # Msun/yr
    magnetic_field: float  # gauss
    magnetosphere_radius: float  # Rsun
    rotation_period: float  # hours
    tidal_locking_radius: float  # AU
    metallicity: float  # [Fe/H]


@dataclass(frozen=True)
class PlanetPhysics:
    """Derived quantities for a planet."""

    host_star_type: Optional[str]
    host_luminosity: float  # Lsun
    star_distance: float  # AU
    habitable_zone: Tuple[float, float]  # AU around the host
    in_habitable_zone: bool
    equilibrium_temperature: float  # K
    escape_velocity: float  # km/s
    surface_gravity: float  # m/s^2
    density_ratio: float  # relative to Earth
    magnetic_field: float  # gauss
    magnetosphere_radius: float  # Earth radii
    rotation_period: float  # hours
    distance_modifier: float  # habitability multiplier from orbit


@dataclass(frozen=True)
class GalaxyPhysics:
    """Derived quantities for a galaxy."""

    stellar_mass: float  # Msun
    total_mass: float  # Msun
    dark_matter_mass: float  # Msun
    gas_mass: float  # Msun
    black_hole_mass: float  # Msun
    eddington_ratio: float
    mass_to_light_ratio: float
    luminosity: float  # Lsun
    absolute_magnitude: float
    rotation_velocity: float  # km/s
    dynamical_mass: float  # Msun
    escape_velocity: float  # km/s
    star_count: int
    gas_cloud_count: int
    redshift: float
    ellipticity: float
    arm_tightness: float
    uv_luminosity: float  # erg/s/Hz
    ir_luminosity: float  # erg/s/Hz
    xray_luminosity: float  # erg/s
    radio_luminosity: float  # erg/s
    mass_class: str
    characteristic_size: float  # kpc


PhysicsBundle = Union[StarPhysics, PlanetPhysics, GalaxyPhysics]


@dataclass(frozen=True)
class StellarCompanion:
    """Second star of a binary system."""

    class_id: str
    mass: float  # Msun
    separation: float  # AU
    orbital_period: float  # days


@dataclass(frozen=True)
class GeneratedInstance:
    """
    One concretely sampled celestial body.

    Owned by the caller; nothing in it is shared with other instances.
    An age above the lifespan means the body is terminal regardless of the
    recorded stage.
    """

    kind: BodyKind
    class_id: str
    name: str
    seed: int
    attributes: Dict[str, float]  # sampled range values in class order
    age: float  # Myr
    lifespan: float  # Myr
    stage: EvolutionStage
    habitability: float  # [0, 100]
    resources: Dict[str, float]  # tag -> abundance in [0, weight]
    physics: PhysicsBundle
    traits: VisualTraits
    requested_class: Optional[str] = None  # set when an unknown class was substituted
    companion: Optional[StellarCompanion] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def substituted(self) -> bool:
        return self.requested_class is not None

    @property
    def is_terminal(self) -> bool:
        return self.age > self.lifespan or self.stage == EvolutionStage.REMNANT

    def __getitem__(self, key: str) -> float:
        return self.attributes[key]

    def fingerprint_fields(self) -> Dict[str, Any]:
        """Every generation-affecting input, for render cache keys."""
        return {
            "kind": self.kind.value,
            "class_id": self.class_id,
            "seed": self.seed,
            "age": self.age,
            "stage": self.stage.value,
            "attributes": dict(self.attributes),
            "companion": asdict(self.companion) if self.companion else None,
            "extras": dict(self.extras),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "class_id": self.class_id,
            "name": self.name,
            "seed": self.seed,
            "attributes": dict(self.attributes),
            "age": self.age,
            "lifespan": self.lifespan,
            "stage": self.stage.value,
            "habitability": self.habitability,
            "resources": dict(self.resources),
            "physics": asdict(self.physics),
            "traits": self.traits.model_dump(),
            "requested_class": self.requested_class,
            "companion": asdict(self.companion) if self.companion else None,
        }
