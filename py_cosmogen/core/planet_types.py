"""
Planetary class catalog.

Ranges are in Earth units (mass in Earth masses, radius in Earth radii),
density in g/cm^3 and temperature in kelvin. ``host_star_types`` lists the
spectral letters a planet of the class usually orbits; rogue planets have
none. ``properties`` holds:
- star_distance_min / star_distance_max: orbital distance range in AU
- noise_amplitude / terrain_frequency: surface displacement parameters
- ring_inner / ring_outer: ring extent relative to the planet radius
"""

from .registry import (
    BaseShape,
    BodyKind,
    ClassDefinition,
    ClassPhysics,
    HabitabilityProfile,
    ResourceWeight,
    VisualTraits,
)

DEFAULT_PLANET_CLASS = "TERRESTRIAL"

# Nominal host masses (Msun) per spectral letter, used for the host's lifespan
HOST_STAR_MASSES = {
    "O": 30.0,
    "B": 6.0,
    "A": 2.0,
    "F": 1.3,
    "G": 1.0,
    "K": 0.7,
    "M": 0.3,
}

# Lifespan assigned to planets without a host star (Myr)
ROGUE_PLANET_LIFESPAN = 1e5


def _planet(class_id, name, mass, radius, density, temperature, **kwargs) -> ClassDefinition:
    return ClassDefinition(
        id=class_id,
        name=name,
        kind=BodyKind.PLANET,
        ranges={
            "mass": mass,
            "radius": radius,
            "density": density,
            "temperature": temperature,
        },
        **kwargs,
    )


PLANET_CLASSES = (
    _planet(
        "TERRESTRIAL",
        "Terrestrial World",
        mass=(0.1, 5.0),
        radius=(0.3, 2.0),
        density=(3.0, 8.0),
        temperature=(150.0, 800.0),
        description="Rocky world with a solid surface and thin atmosphere",
        traits=VisualTraits(moons=1, atmosphere=True, clouds=True, magnetosphere=True, forests=True),
        formation_probability=0.4,
        habitability=HabitabilityProfile(temperature=70, atmosphere=80, radiation=85, gravity=90, water=75),
        danger_level=2,
        scientific_value=7,
        resources=(
            ResourceWeight("minerals", 0.8),
            ResourceWeight("water", 0.7),
            ResourceWeight("organic_compounds", 0.6),
            ResourceWeight("rare_metals", 0.3),
            ResourceWeight("energy_crystals", 0.2),
        ),
        biomes=("temperate", "desert", "grassland", "forest", "mountain"),
        colors=(0x2E5E1E, 0x6B8E23, 0x8B7355, 0xF5F5F5),
        host_star_types=("G", "K", "F"),
        physics=ClassPhysics(magnetic_base=0.5, rotation_hours=24.0),
        properties={"star_distance_min": 0.5, "star_distance_max": 3.0, "noise_amplitude": 0.08, "terrain_frequency": 1.5},
    ),
    _planet(
        "GAS_GIANT",
        "Gas Giant",
        mass=(10.0, 5000.0),
        radius=(3.0, 25.0),
        density=(0.3, 2.0),
        temperature=(50.0, 2000.0),
        description="Massive hydrogen-helium world with banded clouds",
        traits=VisualTraits(rings=True, moons=15, atmosphere=True, clouds=True, magnetosphere=True, aurora=True),
        formation_probability=0.2,
        habitability=HabitabilityProfile(temperature=20, atmosphere=10, radiation=30, gravity=20, water=0),
        danger_level=8,
        scientific_value=8,
        resources=(
            ResourceWeight("energy_crystals", 0.4),
            ResourceWeight("exotic_gases", 0.6),
            ResourceWeight("wind_energy", 0.9),
            ResourceWeight("quantum_materials", 0.3),
        ),
        biomes=("gas_bands", "storm_systems"),
        colors=(0xD2B48C, 0xCD853F, 0xF4A460, 0xFFE4B5),
        host_star_types=("G", "K", "F", "M"),
        physics=ClassPhysics(magnetic_base=0.1, rotation_hours=10.0),
        properties={"star_distance_min": 3.0, "star_distance_max": 30.0, "noise_amplitude": 0.01, "terrain_frequency": 0.5},
    ),
    _planet(
        "ICE_GIANT",
        "Ice Giant",
        mass=(5.0, 50.0),
        radius=(2.0, 8.0),
        density=(1.0, 2.5),
        temperature=(30.0, 200.0),
        description="Cold giant rich in water, ammonia and methane ices",
        traits=VisualTraits(
            rings=True, moons=8, atmosphere=True, clouds=True, magnetosphere=True, aurora=True, surface_effect="ice"
        ),
        formation_probability=0.15,
        habitability=HabitabilityProfile(temperature=10, atmosphere=5, radiation=40, gravity=30, water=80),
        danger_level=7,
        scientific_value=7,
        resources=(
            ResourceWeight("water", 0.9),
            ResourceWeight("energy_crystals", 0.5),
            ResourceWeight("rare_metals", 0.4),
            ResourceWeight("exotic_gases", 0.3),
        ),
        biomes=("ice_sheets", "methane_clouds"),
        colors=(0x4FD0E7, 0x4169E1, 0xAFEEEE, 0xE0FFFF),
        host_star_types=("G", "K", "F"),
        physics=ClassPhysics(magnetic_base=0.05, rotation_hours=16.0),
        properties={"star_distance_min": 15.0, "star_distance_max": 50.0, "noise_amplitude": 0.01, "terrain_frequency": 0.5},
    ),
    _planet(
        "OCEAN_WORLD",
        "Ocean World",
        mass=(0.5, 10.0),
        radius=(1.0, 4.0),
        density=(2.0, 6.0),
        temperature=(250.0, 400.0),
        description="Planet covered by a global ocean",
        traits=VisualTraits(moons=2, atmosphere=True, clouds=True, magnetosphere=True, forests=True),
        formation_probability=0.1,
        habitability=HabitabilityProfile(temperature=85, atmosphere=70, radiation=80, gravity=75, water=100),
        danger_level=4,
        scientific_value=9,
        resources=(
            ResourceWeight("water", 1.0),
            ResourceWeight("organic_compounds", 0.8),
            ResourceWeight("tidal_energy", 0.9),
            ResourceWeight("minerals", 0.4),
            ResourceWeight("rare_metals", 0.2),
        ),
        biomes=("tropical", "coral_reef", "deep_ocean", "archipelago"),
        colors=(0x000080, 0x1E90FF, 0x32CD32, 0xF0FFFF),
        host_star_types=("G", "K"),
        physics=ClassPhysics(magnetic_base=0.4, rotation_hours=20.0),
        properties={"star_distance_min": 0.7, "star_distance_max": 2.0, "noise_amplitude": 0.03, "terrain_frequency": 1.2},
    ),
    _planet(
        "CARBON_WORLD",
        "Carbon World",
        mass=(0.5, 8.0),
        radius=(0.8, 3.0),
        density=(4.0, 12.0),
        temperature=(500.0, 3000.0),
        description="Carbide and graphite crust over a diamond mantle",
        traits=VisualTraits(moons=1),
        formation_probability=0.05,
        habitability=HabitabilityProfile(temperature=5, atmosphere=0, radiation=20, gravity=60, water=0),
        danger_level=9,
        scientific_value=10,
        resources=(
            ResourceWeight("diamonds", 1.0),
            ResourceWeight("rare_metals", 0.7),
            ResourceWeight("energy_crystals", 0.8),
            ResourceWeight("exotic_gases", 0.4),
            ResourceWeight("quantum_materials", 0.5),
        ),
        biomes=("graphite_plains", "diamond_fields"),
        colors=(0x1C1C1C, 0x363636, 0x696969, 0xB0E0E6),
        host_star_types=("G", "K", "F"),
        physics=ClassPhysics(rotation_hours=30.0),
        properties={"star_distance_min": 0.1, "star_distance_max": 1.0, "noise_amplitude": 0.1, "terrain_frequency": 2.0},
    ),
    _planet(
        "IRON_WORLD",
        "Iron World",
        mass=(0.2, 3.0),
        radius=(0.4, 1.5),
        density=(8.0, 15.0),
        temperature=(100.0, 1200.0),
        description="Dense metal-rich remnant core",
        traits=VisualTraits(magnetosphere=True),
        formation_probability=0.1,
        habitability=HabitabilityProfile(temperature=40, atmosphere=0, radiation=60, gravity=80, water=0),
        danger_level=6,
        scientific_value=8,
        resources=(
            ResourceWeight("rare_metals", 1.0),
            ResourceWeight("minerals", 0.9),
            ResourceWeight("quantum_materials", 0.6),
            ResourceWeight("antimatter", 0.2),
        ),
        biomes=("metal_plains", "crater_fields"),
        colors=(0x4A4A4A, 0x708090, 0xB87333, 0xC0C0C0),
        host_star_types=("G", "K", "M"),
        physics=ClassPhysics(magnetic_base=2.0, rotation_hours=60.0),
        properties={"star_distance_min": 0.05, "star_distance_max": 0.8, "noise_amplitude": 0.12, "terrain_frequency": 2.5},
    ),
    _planet(
        "SUPER_EARTH",
        "Super-Earth",
        mass=(1.5, 10.0),
        radius=(1.2, 2.5),
        density=(4.0, 8.0),
        temperature=(200.0, 600.0),
        description="Large rocky planet with strong gravity and thick air",
        traits=VisualTraits(moons=3, atmosphere=True, clouds=True, magnetosphere=True, forests=True),
        formation_probability=0.25,
        habitability=HabitabilityProfile(temperature=75, atmosphere=85, radiation=70, gravity=60, water=80),
        danger_level=3,
        scientific_value=8,
        resources=(
            ResourceWeight("minerals", 0.9),
            ResourceWeight("water", 0.8),
            ResourceWeight("organic_compounds", 0.7),
            ResourceWeight("rare_metals", 0.5),
            ResourceWeight("geothermal_energy", 0.8),
        ),
        biomes=("temperate", "tropical", "mountain", "forest"),
        colors=(0x228B22, 0x556B2F, 0x8B4513, 0xFFFAFA),
        host_star_types=("G", "K", "M"),
        physics=ClassPhysics(magnetic_base=0.6, rotation_hours=30.0),
        properties={"star_distance_min": 0.5, "star_distance_max": 2.5, "noise_amplitude": 0.1, "terrain_frequency": 1.5},
    ),
    _planet(
        "LAVA_WORLD",
        "Lava World",
        mass=(0.3, 5.0),
        radius=(0.5, 2.0),
        density=(5.0, 10.0),
        temperature=(1500.0, 4000.0),
        description="Molten surface baked by a nearby star",
        traits=VisualTraits(atmosphere=True, surface_effect="lava"),
        formation_probability=0.08,
        habitability=HabitabilityProfile(temperature=0, atmosphere=0, radiation=10, gravity=70, water=0),
        danger_level=10,
        scientific_value=7,
        resources=(
            ResourceWeight("geothermal_energy", 1.0),
            ResourceWeight("rare_metals", 0.8),
            ResourceWeight("energy_crystals", 0.6),
            ResourceWeight("exotic_gases", 0.4),
        ),
        biomes=("lava_flows", "volcanic"),
        colors=(0x1A0A00, 0x8B0000, 0xFF4500, 0xFFD700),
        host_star_types=("G", "K", "F", "M"),
        physics=ClassPhysics(magnetic_base=0.2, rotation_hours=48.0),
        properties={"star_distance_min": 0.01, "star_distance_max": 0.1, "noise_amplitude": 0.12, "terrain_frequency": 2.0},
    ),
    _planet(
        "ROGUE_PLANET",
        "Rogue Planet",
        mass=(0.1, 50.0),
        radius=(0.5, 15.0),
        density=(0.5, 8.0),
        temperature=(3.0, 100.0),
        description="Starless wanderer drifting through interstellar space",
        traits=VisualTraits(moons=2, aurora=True, surface_effect="ice"),
        formation_probability=0.03,
        habitability=HabitabilityProfile(temperature=0, atmosphere=0, radiation=95, gravity=50, water=10),
        danger_level=8,
        scientific_value=10,
        resources=(
            ResourceWeight("dark_matter", 0.8),
            ResourceWeight("exotic_gases", 0.7),
            ResourceWeight("quantum_materials", 0.5),
            ResourceWeight("temporal_crystals", 0.3),
        ),
        biomes=("frozen_wastes",),
        colors=(0x0B0B2A, 0x191970, 0x2F4F4F, 0xDCDCDC),
        physics=ClassPhysics(rotation_hours=40.0),
        properties={"star_distance_min": 1000.0, "star_distance_max": 100000.0, "noise_amplitude": 0.06, "terrain_frequency": 1.0},
    ),
    _planet(
        "TIDALLY_LOCKED",
        "Tidally Locked World",
        mass=(0.2, 8.0),
        radius=(0.5, 2.5),
        density=(3.0, 8.0),
        temperature=(50.0, 1500.0),
        description="One hemisphere in permanent day, the other in night",
        traits=VisualTraits(moons=1, atmosphere=True, clouds=True, magnetosphere=True),
        formation_probability=0.3,
        habitability=HabitabilityProfile(temperature=40, atmosphere=60, radiation=50, gravity=75, water=30),
        danger_level=5,
        scientific_value=8,
        resources=(
            ResourceWeight("solar_energy", 0.5),
            ResourceWeight("minerals", 0.7),
            ResourceWeight("water", 0.4),
            ResourceWeight("wind_energy", 0.9),
        ),
        biomes=("terminator_zone", "day_desert", "night_ice"),
        colors=(0x3B2F2F, 0xC2B280, 0x87CEEB, 0xFFFFFF),
        host_star_types=("M", "K"),
        physics=ClassPhysics(magnetic_base=0.2, rotation_hours=400.0),
        properties={"star_distance_min": 0.02, "star_distance_max": 0.3, "noise_amplitude": 0.06, "terrain_frequency": 1.5},
    ),
)
