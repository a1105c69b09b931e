"""
Galactic class catalog.

Ranges: ``log_stellar_mass`` is log10 of the stellar mass in Msun, ``size``
is the diameter in kpc, ``star_formation_rate`` is in Msun/yr,
``metallicity`` is [Fe/H] and ``age_gyr`` is the age in Gyr, never past the
age of the universe. Morphology follows ``traits.base_shape``: DISK
for spirals, ELLIPSOID for ellipticals, IRREGULAR otherwise.

``colors`` holds (core color, inner arm color, outer arm color).
"""

import math
from typing import Optional

from .registry import (
    BaseShape,
    BodyKind,
    ClassDefinition,
    HabitabilityProfile,
    ResourceWeight,
    VisualTraits,
)

DEFAULT_GALAXY_CLASS = "SPIRAL_SB"

# Size-mass exponent per morphology for the characteristic size relation
SIZE_MASS_EXPONENTS = {
    BaseShape.DISK: 0.14,
    BaseShape.ELLIPSOID: 0.75,
    BaseShape.IRREGULAR: 0.3,
}

# Stellar-mass thresholds (Msun) for coarse mass classification
MASS_CLASSES = (
    (1e8, "ultra-dwarf"),
    (1e9, "dwarf"),
    (1e10, "small"),
    (1e11, "intermediate"),
    (1e12, "massive"),
)


def characteristic_size(stellar_mass: float, morphology: BaseShape) -> float:
    """
    Typical galaxy diameter (kpc) for a stellar mass.

    Args:
        stellar_mass: Stellar mass in Msun
        morphology: Base shape of the class

    Returns:
        Diameter in kpc
    """
    exponent = SIZE_MASS_EXPONENTS.get(morphology, SIZE_MASS_EXPONENTS[BaseShape.DISK])
    return 3.0 * math.pow(max(stellar_mass, 1.0) / 1e11, exponent)


def classify_by_mass(stellar_mass: float) -> str:
    """Coarse mass label for a stellar mass."""
    for threshold, label in MASS_CLASSES:
        if stellar_mass < threshold:
            return label
    return "giant"


def morphology_of(definition: ClassDefinition) -> Optional[str]:
    return {
        BaseShape.DISK: "spiral",
        BaseShape.ELLIPSOID: "elliptical",
        BaseShape.IRREGULAR: "irregular",
    }.get(definition.traits.base_shape)


def _galaxy(class_id, name, log_mass, size, sfr, metallicity, age, **kwargs) -> ClassDefinition:
    return ClassDefinition(
        id=class_id,
        name=name,
        kind=BodyKind.GALAXY,
        ranges={
            "log_stellar_mass": log_mass,
            "size": size,
            "star_formation_rate": sfr,
            "metallicity": metallicity,
            "age_gyr": age,
        },
        **kwargs,
    )


GALAXY_CLASSES = (
    _galaxy(
        "SPIRAL_SB",
        "Spiral Galaxy",
        log_mass=(10.0, 12.0),
        size=(10.0, 50.0),
        sfr=(0.1, 10.0),
        metallicity=(-0.5, 0.5),
        age=(8.0, 13.0),
        description="Rotating disk with two grand-design arms",
        traits=VisualTraits(base_shape=BaseShape.DISK, spiral_arms=True, star_forming_regions=True),
        formation_probability=0.6,
        habitability=HabitabilityProfile(temperature=70, atmosphere=60, radiation=65, gravity=70, water=60),
        danger_level=3,
        scientific_value=8,
        resources=(
            ResourceWeight("stellar_nurseries", 0.8),
            ResourceWeight("heavy_elements", 0.6),
            ResourceWeight("dark_matter", 0.7),
        ),
        colors=(0x4169E1, 0xFFD700, 0x4B0082),
        properties={
            "dark_matter_fraction": 0.85,
            "arm_count": 2,
            "arm_tightness": 15.0,
            "ellipticity": 0.1,
            "clumpiness": 0.3,
            "star_density": 0.7,
            "effect_density": 0.6,
            "discoverability": 0.6,
            "rotation_velocity": 220.0,
            "gas_mass": 5e9,
            "ml_intercept": 2.0,
            "ml_slope": 0.5,
        },
    ),
    _galaxy(
        "BARRED_SBB",
        "Barred Spiral Galaxy",
        log_mass=(10.5, 12.5),
        size=(15.0, 60.0),
        sfr=(0.5, 15.0),
        metallicity=(-0.3, 0.7),
        age=(7.0, 12.0),
        description="Spiral disk whose arms start at the ends of a central bar",
        traits=VisualTraits(
            base_shape=BaseShape.DISK, spiral_arms=True, central_bar=True, star_forming_regions=True
        ),
        formation_probability=0.5,
        habitability=HabitabilityProfile(temperature=70, atmosphere=65, radiation=60, gravity=70, water=65),
        danger_level=3,
        scientific_value=10,
        resources=(
            ResourceWeight("stellar_nurseries", 0.9),
            ResourceWeight("heavy_elements", 0.7),
            ResourceWeight("dark_matter", 0.7),
        ),
        colors=(0x6495ED, 0xFFE4B5, 0x483D8B),
        properties={
            "dark_matter_fraction": 0.82,
            "arm_count": 2,
            "arm_tightness": 12.0,
            "bar_strength": 0.7,
            "ellipticity": 0.15,
            "clumpiness": 0.4,
            "star_density": 0.8,
            "effect_density": 0.7,
            "discoverability": 0.8,
            "rotation_velocity": 240.0,
            "gas_mass": 8e9,
            "ml_intercept": 2.0,
            "ml_slope": 0.5,
        },
    ),
    _galaxy(
        "ELLIPTICAL_E4",
        "Elliptical Galaxy",
        log_mass=(11.0, 13.5),
        size=(20.0, 200.0),
        sfr=(0.0, 0.1),
        metallicity=(0.0, 1.0),
        age=(10.0, 13.0),
        description="Smooth, gas-poor spheroid of old stars",
        traits=VisualTraits(base_shape=BaseShape.ELLIPSOID, active_nucleus=True, jets=True),
        formation_probability=0.3,
        habitability=HabitabilityProfile(temperature=50, atmosphere=40, radiation=70, gravity=60, water=30),
        danger_level=4,
        scientific_value=9,
        resources=(
            ResourceWeight("heavy_elements", 0.9),
            ResourceWeight("dark_matter", 0.9),
            ResourceWeight("exotic_matter", 0.3),
        ),
        colors=(0xFFE4B5, 0xFFDAB9, 0xCD853F),
        properties={
            "dark_matter_fraction": 0.9,
            "ellipticity": 0.4,
            "clumpiness": 0.1,
            "jet_power": 1e44,
            "star_density": 0.9,
            "effect_density": 0.3,
            "discoverability": 0.3,
            "rotation_velocity": 50.0,
            "gas_mass": 1e8,
            "ml_intercept": 5.0,
            "ml_slope": 1.0,
        },
    ),
    _galaxy(
        "IRREGULAR_I",
        "Irregular Galaxy",
        log_mass=(8.0, 11.0),
        size=(3.0, 20.0),
        sfr=(0.1, 50.0),
        metallicity=(-1.5, 0.0),
        age=(0.1, 10.0),
        description="Clumpy galaxy without a regular structure",
        traits=VisualTraits(base_shape=BaseShape.IRREGULAR, star_forming_regions=True),
        formation_probability=0.4,
        habitability=HabitabilityProfile(temperature=55, atmosphere=45, radiation=50, gravity=60, water=50),
        danger_level=5,
        scientific_value=7,
        resources=(
            ResourceWeight("stellar_nurseries", 1.0),
            ResourceWeight("cosmic_dust", 0.8),
            ResourceWeight("dark_matter", 0.5),
        ),
        colors=(0x9370DB, 0xFF69B4, 0x00CED1),
        properties={
            "dark_matter_fraction": 0.7,
            "ellipticity": 0.3,
            "clumpiness": 0.9,
            "star_density": 0.4,
            "effect_density": 0.9,
            "discoverability": 0.7,
            "rotation_velocity": 50.0,
            "gas_mass": 3e9,
            "ml_intercept": 2.0,
            "ml_slope": 0.5,
        },
    ),
    _galaxy(
        "QUASAR",
        "Quasar Host",
        log_mass=(11.5, 13.0),
        size=(10.0, 100.0),
        sfr=(10.0, 1000.0),
        metallicity=(-0.5, 0.5),
        age=(0.5, 3.0),
        description="Young galaxy outshone by an accreting supermassive black hole",
        traits=VisualTraits(
            base_shape=BaseShape.DISK, spiral_arms=True, active_nucleus=True, jets=True, accretion_disk=True
        ),
        formation_probability=0.02,
        habitability=HabitabilityProfile(temperature=10, atmosphere=5, radiation=0, gravity=40, water=10),
        danger_level=10,
        scientific_value=10,
        resources=(
            ResourceWeight("exotic_matter", 1.0),
            ResourceWeight("energy_crystals", 0.9),
            ResourceWeight("dark_matter", 0.8),
        ),
        colors=(0xFFFFFF, 0x00FFFF, 0x8A2BE2),
        properties={
            "dark_matter_fraction": 0.8,
            "arm_count": 2,
            "arm_tightness": 20.0,
            "ellipticity": 0.2,
            "clumpiness": 0.8,
            "jet_power": 1e46,
            "star_density": 0.9,
            "effect_density": 1.0,
            "discoverability": 0.01,
            "rotation_velocity": 400.0,
            "gas_mass": 5e10,
            "ml_intercept": 3.0,
            "ml_slope": 0.0,
        },
    ),
    _galaxy(
        "DWARF_ELLIPTICAL",
        "Dwarf Elliptical Galaxy",
        log_mass=(6.0, 9.0),
        size=(0.5, 5.0),
        sfr=(0.0, 0.01),
        metallicity=(-2.5, -0.5),
        age=(10.0, 13.0),
        description="Faint, dark-matter dominated satellite spheroid",
        traits=VisualTraits(base_shape=BaseShape.ELLIPSOID),
        formation_probability=0.7,
        habitability=HabitabilityProfile(temperature=40, atmosphere=30, radiation=80, gravity=50, water=20),
        danger_level=1,
        scientific_value=6,
        resources=(
            ResourceWeight("dark_matter", 1.0),
            ResourceWeight("ancient_stars", 0.7),
        ),
        colors=(0xD2B48C, 0xF5DEB3, 0xA0522D),
        properties={
            "dark_matter_fraction": 0.95,
            "ellipticity": 0.3,
            "clumpiness": 0.05,
            "star_density": 0.3,
            "effect_density": 0.1,
            "discoverability": 0.9,
            "rotation_velocity": 10.0,
            "gas_mass": 1e5,
            "ml_intercept": 5.0,
            "ml_slope": 1.0,
        },
    ),
    _galaxy(
        "STARBURST",
        "Starburst Galaxy",
        log_mass=(9.0, 12.0),
        size=(5.0, 30.0),
        sfr=(10.0, 1000.0),
        metallicity=(-0.5, 0.5),
        age=(0.01, 1.0),
        description="Galaxy forming stars far faster than it can sustain",
        traits=VisualTraits(base_shape=BaseShape.IRREGULAR, star_forming_regions=True),
        formation_probability=0.1,
        habitability=HabitabilityProfile(temperature=30, atmosphere=20, radiation=10, gravity=50, water=40),
        danger_level=7,
        scientific_value=9,
        resources=(
            ResourceWeight("stellar_nurseries", 1.0),
            ResourceWeight("energy_crystals", 0.7),
            ResourceWeight("cosmic_dust", 0.9),
        ),
        colors=(0xFF1493, 0xFFB6C1, 0x4B0082),
        properties={
            "dark_matter_fraction": 0.75,
            "ellipticity": 0.4,
            "clumpiness": 0.9,
            "star_density": 1.0,
            "effect_density": 1.0,
            "discoverability": 0.2,
            "rotation_velocity": 200.0,
            "gas_mass": 2e10,
            "ml_intercept": 0.5,
            "ml_slope": 0.0,
        },
    ),
)
