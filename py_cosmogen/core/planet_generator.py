"""
Planet generation and mesh building.

This module implements:
- Planet sampling around a compatible host star
- Orbital distance, habitable zone and equilibrium temperature
- Planet meshes with elevation-banded terrain, atmosphere, rings, moons,
  surface effects, aurora and instanced vegetation
"""

import math
import numpy as np
import structlog
from typing import Dict, Optional

from . import physics
from .body_generator import BodyGenerator, MeshBuilder
from .geometry import (
    Geometry,
    Material,
    SceneNode,
    cylinder,
    displace_radially,
    icosphere,
    point_cloud,
    ring,
    uv_sphere,
)
from .instance import GeneratedInstance, PlanetPhysics
from .lehmer_prng import LehmerPRNG
from .placement import hex_to_rgb, scatter_in_shell, scatter_on_sphere
from .planet_types import HOST_STAR_MASSES, ROGUE_PLANET_LIFESPAN
from .registry import BodyKind, ClassDefinition
from .sampler import STAGE_HABITABILITY, determine_stage
from ..config.options import GenerationConfig, RenderConfig

logger = structlog.get_logger()

# Habitability multiplier for orbits outside the class's distance range
OUT_OF_RANGE_DISTANCE_MODIFIER = 0.5

VEGETATION_MIN_HABITABILITY = 70.0
MAX_MOONS = 3

# Elevation bands (noise value thresholds) for the four class colors
ELEVATION_BANDS = (-0.2, 0.2, 0.6)

# Trunk and crown colors per biome; unknown biomes use "temperate"
BIOME_SPECIES = {
    "temperate": (0x5C4033, 0x228B22),
    "forest": (0x4A3728, 0x006400),
    "tropical": (0x6B4423, 0x32CD32),
    "grassland": (0x8B7355, 0x9ACD32),
    "mountain": (0x4B3621, 0x2F4F4F),
    "desert": (0x8B7355, 0x6B8E23),
    "coral_reef": (0xCD5C5C, 0xFF7F50),
    "archipelago": (0x6B4423, 0x3CB371),
}


def banded_colors(values: np.ndarray, palette) -> np.ndarray:
    """
    Vertex colors from elevation noise values.

    Args:
        values: Noise values in [-1, 1], one per vertex
        palette: Class colors ordered low to peak

    Returns:
        (N, 3) RGB array
    """
    rgb = np.array([hex_to_rgb(c) for c in palette])
    bands = np.digitize(values, ELEVATION_BANDS[: len(rgb) - 1])
    return rgb[np.clip(bands, 0, len(rgb) - 1)]


class PlanetGenerator(BodyGenerator):
    """Generates planet instances from the planetary registry."""

    def _derive(
        self,
        definition: ClassDefinition,
        attributes: Dict[str, float],
        rng: LehmerPRNG,
        seed: int,
        config: GenerationConfig,
        requested: Optional[str],
    ) -> GeneratedInstance:
        mass = attributes["mass"]
        radius = attributes["radius"]

        if definition.host_star_types:
            host = rng.choice(definition.host_star_types)
            lifespan = physics.stellar_lifespan(HOST_STAR_MASSES[host])
            host_luminosity = physics.main_sequence_luminosity(HOST_STAR_MASSES[host])
        else:
            host = None
            lifespan = ROGUE_PLANET_LIFESPAN
            host_luminosity = 0.0

        age = self.sampler.sample_age(lifespan, rng, config.age)
        stage = determine_stage(age, lifespan)

        low = definition.prop("star_distance_min", 0.5)
        high = definition.prop("star_distance_max", 3.0)
        if config.star_distance is not None:
            distance = config.star_distance
        else:
            distance = rng.uniform(low, high)
        distance_modifier = 1.0 if low <= distance <= high else OUT_OF_RANGE_DISTANCE_MODIFIER

        zone = physics.habitable_zone(host_luminosity) if host else (0.0, 0.0)
        field_strength = 0.0
        if definition.traits.magnetosphere:
            field_strength = physics.magnetic_field(definition.physics.magnetic_base, mass, 1.0, rng.random())

        bundle = PlanetPhysics(
            host_star_type=host,
            host_luminosity=host_luminosity,
            star_distance=distance,
            habitable_zone=zone,
            in_habitable_zone=host is not None and zone[0] <= distance <= zone[1],
            equilibrium_temperature=physics.equilibrium_temperature(host_luminosity, distance),
            escape_velocity=physics.escape_velocity(mass, radius, physics.EARTH_ESCAPE_VELOCITY),
            surface_gravity=physics.surface_gravity(mass, radius, physics.EARTH_SURFACE_GRAVITY),
            density_ratio=physics.planet_density_ratio(mass, radius),
            magnetic_field=field_strength,
            magnetosphere_radius=physics.magnetosphere_radius(radius, field_strength),
            rotation_period=physics.rotation_period(definition.physics.rotation_hours, age, lifespan),
            distance_modifier=distance_modifier,
        )

        habitability = physics.overall_habitability(
            definition.habitability.overall, STAGE_HABITABILITY[stage], distance_modifier
        )
        resources = self.sampler.sample_resources(definition, rng)

        return GeneratedInstance(
            kind=BodyKind.PLANET,
            class_id=definition.id,
            name=f"{definition.name} {seed}",
            seed=seed,
            attributes=attributes,
            age=age,
            lifespan=lifespan,
            stage=stage,
            habitability=habitability,
            resources=resources,
            physics=bundle,
            traits=definition.traits,
            requested_class=requested,
            extras={"biomes": list(definition.biomes)},
        )


class PlanetMeshBuilder(MeshBuilder):
    """Builds renderable planet scenes."""

    def terrain_factory(self, instance: GeneratedInstance, definition: ClassDefinition, radius: float, detail: int):
        """Icosphere terrain with elevation-banded colors, one subdivision less per LOD tier."""
        noise = self.noise_for(instance)
        amplitude = definition.prop("noise_amplitude", 0.05)
        frequency = definition.prop("terrain_frequency", 1.0)

        def factory(tier: int) -> Geometry:
            geometry = icosphere(radius, max(0, min(detail, 4) + 1 - tier))
            geometry, values = displace_radially(geometry, noise, amplitude, frequency)
            return geometry.with_colors(banded_colors(values, definition.colors))

        return factory

    def build(self, instance: GeneratedInstance, config: RenderConfig) -> SceneNode:
        """
        Build the scene for a planet.

        Args:
            instance: Generated planet
            config: Render options

        Returns:
            Root SceneNode
        """
        definition = self.definition_for(instance)
        traits = instance.traits
        rng = self.mesh_rng(instance)
        radius = config.radius

        root = SceneNode(instance.name, user_data={"kind": "planet", "class_id": instance.class_id})
        surface = self.terrain_factory(instance, definition, radius, config.detail_level)
        material = Material(vertex_colors=True, flat_shading=True)
        root.add(self.base_body("surface", surface, material, config, radius))

        if config.enable_atmosphere and (traits.atmosphere or traits.clouds):
            root.add(
                SceneNode(
                    "atmosphere",
                    geometry=uv_sphere(radius * 1.1, 32, 16),
                    material=Material(color=0x87CEEB, opacity=0.3 if traits.clouds else 0.15, double_sided=True),
                )
            )
        if config.enable_rings and traits.rings:
            root.add(
                SceneNode(
                    "rings",
                    geometry=ring(radius * 1.5, radius * 2.5, 64),
                    material=Material(color=definition.colors[-1], opacity=0.7, double_sided=True),
                    rotation=(math.pi / 2.0 - 0.3 + rng.random() * 0.6, 0.0, 0.0),
                )
            )
        if config.enable_moons and traits.moons:
            self._add_moons(root, traits.moons, radius, rng, config)
        if config.enable_effects:
            self._add_effects(root, instance, definition, radius, rng, config)
        if (
            config.enable_vegetation
            and traits.forests
            and instance.habitability >= VEGETATION_MIN_HABITABILITY
        ):
            self._add_vegetation(root, instance, radius, config)

        logger.debug("Built planet mesh", class_id=instance.class_id, nodes=len(list(root.walk())))
        return root

    def _add_moons(self, root: SceneNode, moons: int, radius: float, rng: LehmerPRNG, config: RenderConfig) -> None:
        count = min(moons, MAX_MOONS, config.max_features)
        for i in range(count):
            distance = (4.0 + i * 0.5) * radius / 3.0
            angle = rng.random() * 2.0 * math.pi
            size = radius * (0.1 + rng.random() * 0.1)
            root.add(
                SceneNode(
                    f"moon_{i}",
                    geometry=icosphere(size, 1),
                    material=Material(color=0xA9A9A9, flat_shading=True),
                    position=(math.cos(angle) * distance, (rng.random() - 0.5) * radius * 0.2, math.sin(angle) * distance),
                )
            )

    def _add_effects(
        self,
        root: SceneNode,
        instance: GeneratedInstance,
        definition: ClassDefinition,
        radius: float,
        rng: LehmerPRNG,
        config: RenderConfig,
    ) -> None:
        traits = instance.traits
        if traits.surface_effect == "lava":
            count = self.particle_budget(config, 0.5)
            sparks = scatter_in_shell(rng, count, radius * 1.01, radius * 1.3)
            root.add(
                SceneNode(
                    "lava_particles",
                    geometry=point_cloud(sparks),
                    material=Material(color=0xFF4500, emissive=1.0, additive=True, point_size=0.05),
                )
            )
        elif traits.surface_effect == "ice":
            root.add(
                SceneNode(
                    "ice_shimmer",
                    geometry=uv_sphere(radius * 1.05, 32, 16),
                    material=Material(color=0xE0FFFF, opacity=0.2, additive=True),
                )
            )
        if traits.aurora:
            root.add(
                SceneNode(
                    "aurora",
                    geometry=uv_sphere(radius * 1.2, 32, 16),
                    material=Material(color=0x00FF7F, opacity=0.15, additive=True, double_sided=True),
                )
            )

    def _add_vegetation(self, root: SceneNode, instance: GeneratedInstance, radius: float, config: RenderConfig) -> None:
        rng = self.mesh_rng(instance, "vegetation")
        count = min(config.tree_count, config.max_features * self.options.particles_per_feature)
        positions = scatter_on_sphere(rng, count, radius, min_distance=0.1 * radius / 3.0)
        if len(positions) == 0:
            return

        biomes = instance.extras.get("biomes") or ["temperate"]
        trunk_color, crown_color = BIOME_SPECIES.get(biomes[0], BIOME_SPECIES["temperate"])
        scale = radius / 3.0
        vegetation = root.add(SceneNode("vegetation", user_data={"species": biomes[0], "count": len(positions)}))
        vegetation.add(
            SceneNode(
                "tree_trunks",
                geometry=cylinder(0.01 * scale, 0.015 * scale, 0.06 * scale, 6),
                material=Material(color=trunk_color),
                instances=positions,
            )
        )
        crowns = positions * (1.0 + 0.06 * scale / radius)
        vegetation.add(
            SceneNode(
                "tree_crowns",
                geometry=icosphere(0.04 * scale, 0),
                material=Material(color=crown_color, flat_shading=True),
                instances=crowns,
            )
        )
