"""
Stellar class catalog.

Ranges are in solar units (mass in Msun, radius in Rsun, luminosity in Lsun)
and temperature in kelvin. Physics constants feed the wind, mass-loss and
magnetic-field calculators; ``properties`` holds rendering constants:
- display_scale: base mesh radius relative to the render radius
- noise_amplitude: surface deformation strength
- effect_density: stellar-wind particle density in [0, 1]
- discoverability: how easily the class is detected in [0, 1]
- compact: 1 for degenerate remnants whose visuals ignore the stage
"""

from .registry import (
    BaseShape,
    BodyKind,
    ClassDefinition,
    ClassPhysics,
    EvolutionStage,
    HabitabilityProfile,
    ResourceWeight,
    StageFactor,
    VisualTraits,
)

DEFAULT_STAR_CLASS = "G_TYPE"

# Remnants do not blow winds or shed mass at any stage
_INERT_STAGES = {
    stage: StageFactor(wind=0.0, mass_loss=0.0, magnetic=1.0) for stage in EvolutionStage
}


def _star(class_id, name, mass, radius, temperature, luminosity, **kwargs) -> ClassDefinition:
    return ClassDefinition(
        id=class_id,
        name=name,
        kind=BodyKind.STAR,
        ranges={
            "mass": mass,
            "radius": radius,
            "temperature": temperature,
            "luminosity": luminosity,
        },
        **kwargs,
    )


STELLAR_CLASSES = (
    _star(
        "PROTOSTAR",
        "Protostar",
        mass=(0.01, 50.0),
        radius=(1.0, 100.0),
        temperature=(1000.0, 4000.0),
        luminosity=(1e-4, 1000.0),
        description="Collapsing cloud core still accreting from its envelope",
        traits=VisualTraits(
            base_shape=BaseShape.DODECAHEDRON,
            jets=True,
            accretion_disk=True,
            magnetosphere=True,
            pulsation=True,
        ),
        formation_probability=0.05,
        habitability=HabitabilityProfile(temperature=5, atmosphere=0, radiation=10, gravity=30, water=20),
        danger_level=3,
        scientific_value=9,
        resources=(
            ResourceWeight("hydrogen", 1.0),
            ResourceWeight("cosmic_dust", 0.9),
            ResourceWeight("organic_compounds", 0.4),
        ),
        colors=(0xFF6600, 0xFF3300, 0xCC4400),
        physics=ClassPhysics(
            wind_base=200.0, mass_loss_base=1e-7, magnetic_base=1000.0, rotation_hours=48.0
        ),
        properties={"display_scale": 1.5, "noise_amplitude": 0.2, "effect_density": 0.8, "discoverability": 0.3},
    ),
    _star(
        "G_TYPE",
        "G-type Main Sequence",
        mass=(0.8, 1.2),
        radius=(0.7, 1.3),
        temperature=(5200.0, 6000.0),
        luminosity=(0.6, 1.5),
        description="Sun-like yellow dwarf",
        traits=VisualTraits(
            base_shape=BaseShape.ICOSPHERE,
            corona=True,
            magnetosphere=True,
            stellar_wind=True,
            flares=True,
            sunspots=True,
            granulation=True,
        ),
        formation_probability=0.3,
        habitability=HabitabilityProfile(temperature=80, atmosphere=75, radiation=70, gravity=85, water=80),
        danger_level=2,
        scientific_value=8,
        resources=(
            ResourceWeight("solar_energy", 1.0),
            ResourceWeight("hydrogen", 0.9),
            ResourceWeight("helium_3", 0.6),
        ),
        colors=(0xFFD700, 0xFFA500, 0xFFFF00),
        physics=ClassPhysics(wind_base=400.0, mass_loss_base=2e-14, magnetic_base=1.0, rotation_hours=600.0),
        properties={"display_scale": 1.0, "noise_amplitude": 0.02, "effect_density": 0.5, "discoverability": 0.8},
    ),
    _star(
        "K_TYPE",
        "K-type Orange Dwarf",
        mass=(0.45, 0.8),
        radius=(0.7, 0.96),
        temperature=(3900.0, 5200.0),
        luminosity=(0.08, 0.6),
        description="Long-lived orange dwarf",
        traits=VisualTraits(
            base_shape=BaseShape.ICOSPHERE,
            corona=True,
            magnetosphere=True,
            stellar_wind=True,
            sunspots=True,
        ),
        formation_probability=0.4,
        habitability=HabitabilityProfile(temperature=75, atmosphere=70, radiation=75, gravity=80, water=75),
        danger_level=1,
        scientific_value=6,
        resources=(
            ResourceWeight("solar_energy", 0.8),
            ResourceWeight("hydrogen", 0.9),
            ResourceWeight("helium_3", 0.4),
        ),
        colors=(0xFFA500, 0xFF8C00),
        physics=ClassPhysics(wind_base=350.0, mass_loss_base=1.5e-14, magnetic_base=1.5, rotation_hours=800.0),
        properties={"display_scale": 0.9, "noise_amplitude": 0.02, "effect_density": 0.4, "discoverability": 0.7},
    ),
    _star(
        "M_TYPE",
        "M-type Red Dwarf",
        mass=(0.08, 0.45),
        radius=(0.1, 0.7),
        temperature=(2400.0, 3700.0),
        luminosity=(1e-4, 0.08),
        description="Small, cool and very common red dwarf",
        traits=VisualTraits(
            base_shape=BaseShape.ICOSPHERE,
            magnetosphere=True,
            flares=True,
            sunspots=True,
        ),
        formation_probability=0.7,
        habitability=HabitabilityProfile(temperature=55, atmosphere=50, radiation=40, gravity=70, water=50),
        danger_level=3,
        scientific_value=5,
        resources=(
            ResourceWeight("hydrogen", 0.8),
            ResourceWeight("solar_energy", 0.3),
        ),
        colors=(0xFF4500, 0xFF6347),
        physics=ClassPhysics(
            wind_base=300.0, mass_loss_base=1e-14, magnetic_base=10.0, rotation_hours=720.0, metallicity_base=-0.3
        ),
        properties={"display_scale": 0.7, "noise_amplitude": 0.03, "effect_density": 0.3, "discoverability": 0.5},
    ),
    _star(
        "O_TYPE",
        "O-type Blue Giant",
        mass=(15.0, 90.0),
        radius=(6.6, 17.8),
        temperature=(30000.0, 50000.0),
        luminosity=(3e4, 1e6),
        description="Massive, hot and short-lived blue star",
        traits=VisualTraits(
            base_shape=BaseShape.ICOSPHERE,
            corona=True,
            magnetosphere=True,
            stellar_wind=True,
        ),
        formation_probability=0.01,
        habitability=HabitabilityProfile(temperature=10, atmosphere=5, radiation=0, gravity=20, water=5),
        danger_level=9,
        scientific_value=10,
        resources=(
            ResourceWeight("solar_energy", 1.0),
            ResourceWeight("heavy_elements", 0.7),
            ResourceWeight("exotic_matter", 0.3),
        ),
        colors=(0x0066FF, 0x3399FF, 0x99CCFF),
        physics=ClassPhysics(
            wind_base=3000.0, mass_loss_base=1e-6, magnetic_base=1.0, rotation_hours=24.0, metallicity_base=0.2
        ),
        properties={"display_scale": 1.4, "noise_amplitude": 0.02, "effect_density": 0.9, "discoverability": 0.1},
    ),
    _star(
        "RED_SUPERGIANT",
        "Red Supergiant",
        mass=(10.0, 40.0),
        radius=(200.0, 1700.0),
        temperature=(3000.0, 4500.0),
        luminosity=(1e4, 5e5),
        description="Bloated late-stage massive star",
        traits=VisualTraits(
            base_shape=BaseShape.SPHERE,
            pulsation=True,
            granulation=True,
            stellar_wind=True,
        ),
        formation_probability=0.02,
        habitability=HabitabilityProfile(temperature=15, atmosphere=5, radiation=10, gravity=20, water=5),
        danger_level=10,
        scientific_value=10,
        resources=(
            ResourceWeight("heavy_elements", 0.9),
            ResourceWeight("cosmic_dust", 0.8),
            ResourceWeight("solar_energy", 0.7),
        ),
        colors=(0xFF3300, 0xCC2200, 0xFF6633),
        physics=ClassPhysics(wind_base=30.0, mass_loss_base=1e-4, magnetic_base=1.0, rotation_hours=8760.0),
        properties={"display_scale": 2.0, "noise_amplitude": 0.1, "effect_density": 0.8, "discoverability": 0.05},
    ),
    _star(
        "WHITE_DWARF",
        "White Dwarf",
        mass=(0.17, 1.33),
        radius=(0.008, 0.02),
        temperature=(4000.0, 150000.0),
        luminosity=(1e-4, 100.0),
        description="Cooling degenerate core of a low-mass star",
        traits=VisualTraits(
            base_shape=BaseShape.ICOSPHERE,
            magnetosphere=True,
            lensing=True,
            pulsation=True,
        ),
        formation_probability=0.2,
        habitability=HabitabilityProfile(temperature=20, atmosphere=10, radiation=30, gravity=10, water=10),
        danger_level=7,
        scientific_value=9,
        resources=(
            ResourceWeight("degenerate_matter", 0.8),
            ResourceWeight("carbon_crystals", 0.6),
        ),
        colors=(0xF0F8FF, 0xE6E6FA),
        physics=ClassPhysics(magnetic_base=1e6, rotation_hours=1.0, stage_factors=_INERT_STAGES),
        properties={
            "display_scale": 0.5,
            "noise_amplitude": 0.005,
            "effect_density": 0.3,
            "discoverability": 0.4,
            "compact": 1.0,
        },
    ),
    _star(
        "NEUTRON_STAR",
        "Neutron Star",
        mass=(1.17, 2.16),
        radius=(1.7e-5, 2.3e-5),
        temperature=(6e5, 1.8e6),
        luminosity=(1e-4, 1.0),
        description="Collapsed stellar core spinning at extreme rates",
        traits=VisualTraits(
            base_shape=BaseShape.ICOSPHERE,
            jets=True,
            magnetosphere=True,
            lensing=True,
            pulsation=True,
            beams=True,
        ),
        formation_probability=0.05,
        habitability=HabitabilityProfile(temperature=0, atmosphere=0, radiation=0, gravity=0, water=0),
        danger_level=10,
        scientific_value=10,
        resources=(
            ResourceWeight("neutronium", 0.9),
            ResourceWeight("exotic_matter", 0.7),
            ResourceWeight("quantum_materials", 0.5),
        ),
        colors=(0x99CCFF, 0xCCE5FF),
        physics=ClassPhysics(magnetic_base=1e12, rotation_hours=0.001, stage_factors=_INERT_STAGES),
        properties={
            "display_scale": 0.3,
            "noise_amplitude": 0.001,
            "effect_density": 0.7,
            "discoverability": 0.02,
            "compact": 1.0,
        },
    ),
    _star(
        "BLACK_HOLE",
        "Stellar Black Hole",
        mass=(3.0, 20.0),
        radius=(1e-8, 6e-8),
        temperature=(6e-7, 2e-6),
        luminosity=(0.0, 1e6),
        description="Collapsed remnant whose luminosity comes from its accretion flow",
        traits=VisualTraits(
            base_shape=BaseShape.SPHERE,
            jets=True,
            accretion_disk=True,
            magnetosphere=True,
            lensing=True,
            event_horizon=True,
        ),
        formation_probability=0.02,
        habitability=HabitabilityProfile(temperature=0, atmosphere=0, radiation=0, gravity=0, water=0),
        danger_level=10,
        scientific_value=10,
        resources=(
            ResourceWeight("hawking_radiation", 0.4),
            ResourceWeight("exotic_matter", 0.9),
            ResourceWeight("temporal_crystals", 0.2),
        ),
        colors=(0x000000, 0xFF8800, 0xFFCC66),
        physics=ClassPhysics(magnetic_base=1e4, rotation_hours=0.01, stage_factors=_INERT_STAGES),
        properties={
            "display_scale": 0.3,
            "noise_amplitude": 0.0,
            "effect_density": 1.0,
            "discoverability": 0.001,
            "compact": 1.0,
        },
    ),
    _star(
        "BROWN_DWARF",
        "Brown Dwarf",
        mass=(0.012, 0.08),
        radius=(0.08, 0.15),
        temperature=(300.0, 2500.0),
        luminosity=(1e-6, 1e-3),
        description="Substellar object too light to sustain hydrogen fusion",
        traits=VisualTraits(
            base_shape=BaseShape.SPHERE,
            flares=True,
            magnetosphere=True,
            clouds=True,
        ),
        formation_probability=0.3,
        habitability=HabitabilityProfile(temperature=30, atmosphere=20, radiation=60, gravity=40, water=30),
        danger_level=1,
        scientific_value=7,
        resources=(
            ResourceWeight("hydrogen", 0.7),
            ResourceWeight("methane", 0.6),
            ResourceWeight("lithium", 0.5),
        ),
        colors=(0x8B4513, 0xA0522D, 0x663300),
        physics=ClassPhysics(wind_base=10.0, mass_loss_base=1e-16, magnetic_base=1000.0, rotation_hours=5.0),
        properties={"display_scale": 0.6, "noise_amplitude": 0.04, "effect_density": 0.2, "discoverability": 0.6},
    ),
    _star(
        "WOLF_RAYET",
        "Wolf-Rayet Star",
        mass=(5.0, 25.0),
        radius=(0.5, 20.0),
        temperature=(3e4, 2.1e5),
        luminosity=(3e4, 3e6),
        description="Massive star stripped of its hydrogen envelope",
        traits=VisualTraits(base_shape=BaseShape.ICOSPHERE, corona=True, stellar_wind=True),
        formation_probability=0.01,
        habitability=HabitabilityProfile(temperature=5, atmosphere=0, radiation=0, gravity=20, water=0),
        danger_level=9,
        scientific_value=10,
        resources=(
            ResourceWeight("heavy_elements", 1.0),
            ResourceWeight("exotic_matter", 0.4),
        ),
        colors=(0x66CCFF, 0x3399FF),
        physics=ClassPhysics(
            wind_base=3000.0, mass_loss_base=1e-5, magnetic_base=100.0, rotation_hours=24.0, metallicity_base=0.2
        ),
        properties={"display_scale": 1.2, "noise_amplitude": 0.05, "effect_density": 1.0, "discoverability": 0.03},
    ),
    _star(
        "CARBON_STAR",
        "Carbon Star",
        mass=(0.8, 8.0),
        radius=(100.0, 500.0),
        temperature=(2400.0, 3200.0),
        luminosity=(1e3, 5e4),
        description="Cool giant whose atmosphere holds more carbon than oxygen",
        traits=VisualTraits(base_shape=BaseShape.SPHERE, granulation=True, pulsation=True, stellar_wind=True),
        formation_probability=0.03,
        habitability=HabitabilityProfile(temperature=20, atmosphere=10, radiation=30, gravity=25, water=10),
        danger_level=3,
        scientific_value=8,
        resources=(
            ResourceWeight("carbon_crystals", 1.0),
            ResourceWeight("cosmic_dust", 0.8),
            ResourceWeight("organic_compounds", 0.5),
        ),
        colors=(0xCC3300, 0xB22222),
        physics=ClassPhysics(wind_base=20.0, mass_loss_base=1e-6, magnetic_base=1.0, rotation_hours=8760.0),
        properties={"display_scale": 1.8, "noise_amplitude": 0.08, "effect_density": 0.6, "discoverability": 0.2},
    ),
)
