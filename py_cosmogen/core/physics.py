"""
Derived-physics calculators.

Pure functions of sampled primaries. Every function returns finite values
for inputs drawn from a valid class range; quantities that would otherwise
divide by zero or take the log of zero are floored first.

Units:
- Stars: Msun, Rsun, Lsun, kelvin, Myr, AU
- Planets: Earth masses, Earth radii
- Galaxies: Msun, kpc, km/s
"""

import math
from typing import Tuple

# Floors keeping logs and divisions finite
LUMINOSITY_FLOOR = 1e-12
RADIUS_FLOOR = 1e-12
MASS_FLOOR = 1e-12

# Main-sequence lifespan of a 1 Msun star (Myr) and the mass exponent
SOLAR_LIFESPAN = 10000.0
LIFESPAN_EXPONENT = 2.5

# Habitable-zone effective flux limits (inner, outer) in solar units
HZ_INNER_FLUX = 1.1
HZ_OUTER_FLUX = 0.53

SOLAR_TEMPERATURE = 5772.0
SOLAR_LUMINOSITY_WATTS = 3.828e26
SOLAR_ABSOLUTE_MAGNITUDE = 4.74

# sqrt(2 G Msun / Rsun) in km/s and G Msun / Rsun^2 in m/s^2
SOLAR_ESCAPE_VELOCITY = 617.7
SOLAR_SURFACE_GRAVITY = 274.0
EARTH_ESCAPE_VELOCITY = 11.186
EARTH_SURFACE_GRAVITY = 9.81
EARTH_DENSITY = 5.51

# Gravitational constant in kpc (km/s)^2 / Msun
G_GALACTIC = 4.3e-6

# Age of the universe (Gyr)
HUBBLE_TIME_GYR = 13.8


def _finite(value: float, fallback: float = 0.0) -> float:
    return value if math.isfinite(value) else fallback


def stellar_lifespan(mass: float) -> float:
    """
    Main-sequence lifespan from mass, ``10000 * M^-2.5`` Myr.

    Strictly decreasing in mass for all mass > 0.
    """
    return SOLAR_LIFESPAN * math.pow(max(mass, MASS_FLOOR), -LIFESPAN_EXPONENT)


def galaxy_lifespan() -> float:
    """Galaxy age horizon (Myr): the age of the universe."""
    return HUBBLE_TIME_GYR * 1000.0


def main_sequence_luminosity(mass: float) -> float:
    """Mass-luminosity relation L = M^3.5 (Lsun)."""
    return math.pow(max(mass, MASS_FLOOR), 3.5)


def habitable_zone(luminosity: float) -> Tuple[float, float]:
    """
    Habitable-zone bounds in AU.

    Inner and outer radii scale with sqrt(L); outer is always greater than
    inner because the luminosity is floored above zero.

    Returns:
        Tuple of (inner, outer)
    """
    lum = max(luminosity, LUMINOSITY_FLOOR)
    return math.sqrt(lum / HZ_INNER_FLUX), math.sqrt(lum / HZ_OUTER_FLUX)


def escape_velocity(mass: float, radius: float, scale: float = SOLAR_ESCAPE_VELOCITY) -> float:
    """Escape velocity ``scale * sqrt(M / R)`` (km/s)."""
    return scale * math.sqrt(max(mass, MASS_FLOOR) / max(radius, RADIUS_FLOOR))


def surface_gravity(mass: float, radius: float, scale: float = SOLAR_SURFACE_GRAVITY) -> float:
    """Surface gravity ``scale * M / R^2`` (m/s^2)."""
    return scale * max(mass, MASS_FLOOR) / max(radius, RADIUS_FLOOR) ** 2


def radiative_luminosity(radius: float, temperature: float) -> float:
    """Stefan-Boltzmann luminosity relative to the Sun."""
    return max(radius, 0.0) ** 2 * (max(temperature, 0.0) / SOLAR_TEMPERATURE) ** 4


def absolute_magnitude(luminosity: float) -> float:
    return SOLAR_ABSOLUTE_MAGNITUDE - 2.5 * math.log10(max(luminosity, LUMINOSITY_FLOOR))


def energy_output(luminosity: float) -> float:
    """Radiated power in watts."""
    return max(luminosity, 0.0) * SOLAR_LUMINOSITY_WATTS


def tidal_locking_radius(mass: float) -> float:
    """Orbital distance (AU) inside which planets become tidally locked."""
    return 0.1 * math.pow(max(mass, MASS_FLOOR), 1.0 / 3.0)


def stellar_wind_speed(base: float, mass: float, stage_factor: float) -> float:
    """Class base speed scaled by mass and stage factor (km/s)."""
    return base * mass * stage_factor


def mass_loss_rate(base: float, mass: float, stage_factor: float) -> float:
    """Class base rate scaled by mass and stage factor (Msun/yr)."""
    return base * mass * stage_factor


def magnetic_field(base: float, mass: float, stage_factor: float, variation: float = 0.0) -> float:
    """
    Field strength in gauss.

    Args:
        base: Class base field per unit mass
        mass: Body mass
        stage_factor: Evolutionary stage multiplier
        variation: Random draw in [0, 1) adding up to 50%
    """
    return base * mass * stage_factor * (1.0 + variation * 0.5)


def magnetosphere_radius(radius: float, field_strength: float) -> float:
    """Extent of the magnetosphere, growing logarithmically with field strength."""
    return radius * (1.0 + math.log10(1.0 + max(field_strength, 0.0)))


def rotation_period(base_hours: float, age: float, lifespan: float) -> float:
    """Rotation period in hours; bodies spin down as they age."""
    if lifespan <= 0:
        return base_hours
    return base_hours * (1.0 + min(age / lifespan, 10.0))


def overall_habitability(baseline: float, stage_factor: float, distance_factor: float = 1.0) -> float:
    """Instance habitability from the class baseline, clamped to [0, 100]."""
    return min(100.0, max(0.0, _finite(baseline * stage_factor * distance_factor)))


def binary_orbital_period(separation: float, total_mass: float) -> float:
    """Kepler's third law, period in days for separation in AU and mass in Msun."""
    return math.sqrt(separation ** 3 / max(total_mass, MASS_FLOOR)) * 365.25


def planet_density_ratio(mass: float, radius: float) -> float:
    """Bulk density relative to Earth."""
    return max(mass, MASS_FLOOR) / max(radius, RADIUS_FLOOR) ** 3


def equilibrium_temperature(luminosity: float, distance: float, albedo: float = 0.3) -> float:
    """Blackbody equilibrium temperature (K) at a distance in AU."""
    lum = max(luminosity, 0.0)
    return 278.6 * math.pow(lum * (1.0 - albedo), 0.25) / math.sqrt(max(distance, RADIUS_FLOOR))


def galaxy_total_mass(stellar_mass: float, dark_matter_fraction: float) -> float:
    """Total mass including the dark halo."""
    fraction = min(max(dark_matter_fraction, 0.0), 0.99)
    return stellar_mass / (1.0 - fraction)


def mass_to_light_ratio(intercept: float, slope: float, age_gyr: float) -> float:
    return max(intercept + slope * age_gyr, 0.1)


def dynamical_mass(rotation_velocity: float, radius_kpc: float) -> float:
    """Mass enclosed within a radius from its rotation velocity (Msun)."""
    return rotation_velocity ** 2 * radius_kpc / G_GALACTIC


def galactic_escape_velocity(total_mass: float, radius_kpc: float) -> float:
    """Escape velocity at a galaxy's edge (km/s)."""
    return math.sqrt(2.0 * G_GALACTIC * max(total_mass, MASS_FLOOR) / max(radius_kpc, RADIUS_FLOOR))


def redshift_from_age(age_gyr: float) -> float:
    return max(0.0, (HUBBLE_TIME_GYR - age_gyr) / 5.0)
