"""
Star generation and mesh building.

This module implements:
- Stellar sampling with mass-driven lifespan and stage-scaled physics
- Binary companions
- Star meshes: class base shape, corona, accretion disk, jets,
  magnetosphere loops, wind particles, sunspots, flares, event horizon,
  pulsar beams and companion bodies
"""

import math
import numpy as np
import structlog
from typing import Dict, Optional

from . import physics
from .body_generator import BodyGenerator, MeshBuilder
from .geometry import Material, SceneNode, cylinder, point_cloud, ring, uv_sphere
from .instance import GeneratedInstance, StarPhysics, StellarCompanion
from .lehmer_prng import LehmerPRNG
from .placement import scatter_in_shell, scatter_on_sphere
from .registry import BodyKind, ClassDefinition, EvolutionStage, VisualTraits
from .sampler import STAGE_HABITABILITY, determine_stage
from ..config.options import GenerationConfig, RenderConfig

logger = structlog.get_logger()

BINARY_PROBABILITY = 0.3
FLARE_PROBABILITY = 0.3
MAX_SUNSPOTS = 10
ACCRETION_RINGS = 5


def stage_traits(definition: ClassDefinition, stage: EvolutionStage) -> VisualTraits:
    """
    Visual traits adjusted for the evolutionary stage.

    Forming stars gain an accretion disk and jets; late-phase stars pulsate
    and blow strong winds. Compact remnants keep their class traits.
    """
    traits = definition.traits
    if definition.prop("compact"):
        return traits
    if stage == EvolutionStage.FORMATION:
        return traits.model_copy(update={"accretion_disk": True, "jets": True})
    if stage == EvolutionStage.LATE_PHASE:
        return traits.model_copy(update={"pulsation": True, "stellar_wind": True})
    return traits


class StarGenerator(BodyGenerator):
    """Generates star instances from the stellar registry."""

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
        luminosity = attributes["luminosity"]

        lifespan = physics.stellar_lifespan(mass)
        age = self.sampler.sample_age(lifespan, rng, config.age)
        stage = determine_stage(age, lifespan)
        factor = definition.physics.factor(stage)
        field_strength = physics.magnetic_field(
            definition.physics.magnetic_base, mass, factor.magnetic, rng.random()
        )
        metallicity = definition.physics.metallicity_base + (rng.random() - 0.5) * 0.4

        bundle = StarPhysics(
            lifespan=lifespan,
            habitable_zone=physics.habitable_zone(luminosity),
            escape_velocity=physics.escape_velocity(mass, radius),
            surface_gravity=physics.surface_gravity(mass, radius),
            radiative_luminosity=physics.radiative_luminosity(radius, attributes["temperature"]),
            absolute_magnitude=physics.absolute_magnitude(luminosity),
            energy_output=physics.energy_output(luminosity),
            stellar_wind_speed=physics.stellar_wind_speed(definition.physics.wind_base, mass, factor.wind),
            mass_loss_rate=physics.mass_loss_rate(definition.physics.mass_loss_base, mass, factor.mass_loss),
            magnetic_field=field_strength,
            magnetosphere_radius=physics.magnetosphere_radius(radius, field_strength),
            rotation_period=physics.rotation_period(definition.physics.rotation_hours, age, lifespan),
            tidal_locking_radius=physics.tidal_locking_radius(mass),
            metallicity=metallicity,
        )

        habitability = physics.overall_habitability(definition.habitability.overall, STAGE_HABITABILITY[stage])
        resources = self.sampler.sample_resources(definition, rng)
        companion = self._companion(mass, rng) if config.allow_companion else None

        return GeneratedInstance(
            kind=BodyKind.STAR,
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
            traits=stage_traits(definition, stage),
            requested_class=requested,
            companion=companion,
        )

    def _companion(self, primary_mass: float, rng: LehmerPRNG) -> Optional[StellarCompanion]:
        """Binary companion, present with BINARY_PROBABILITY."""
        if not rng.chance(BINARY_PROBABILITY):
            return None
        definition = self.registry.weighted_random_class(rng)
        mass_range = definition.range_of("mass")
        mass = mass_range.min + rng.random() * mass_range.span
        separation = rng.uniform(1.0, 11.0)
        return StellarCompanion(
            class_id=definition.id,
            mass=mass,
            separation=separation,
            orbital_period=physics.binary_orbital_period(separation, primary_mass + mass),
        )


class StarMeshBuilder(MeshBuilder):
    """Builds renderable star scenes."""

    def build(self, instance: GeneratedInstance, config: RenderConfig) -> SceneNode:
        """
        Build the scene for a star.

        Args:
            instance: Generated star
            config: Render options

        Returns:
            Root SceneNode
        """
        definition = self.definition_for(instance)
        traits = instance.traits
        rng = self.mesh_rng(instance)
        radius = config.radius * definition.prop("display_scale", 1.0)
        color = rng.choice(definition.colors)

        root = SceneNode(instance.name, user_data={"kind": "star", "class_id": instance.class_id})
        surface = self.surface_factory(
            traits.base_shape,
            radius,
            config.detail_level,
            self.noise_for(instance),
            definition.prop("noise_amplitude", 0.02),
            frequency=4.0 if traits.granulation else 2.0,
        )
        body_material = Material(color=color, emissive=0.0 if traits.event_horizon else 1.0)
        root.add(self.base_body("photosphere", surface, body_material, config, radius))

        if traits.event_horizon:
            self._add_event_horizon(root, radius)
        if config.enable_atmosphere and traits.corona:
            root.add(
                SceneNode(
                    "corona",
                    geometry=uv_sphere(radius * 2.0, 32, 16),
                    material=Material(color=color, opacity=0.15, additive=True, double_sided=True),
                )
            )
        if config.enable_rings and traits.accretion_disk:
            self._add_accretion_disk(root, radius, definition)
        if config.enable_effects:
            self._add_effects(root, instance, definition, radius, color, rng, config)
        if config.enable_moons and instance.companion is not None:
            self._add_companion(root, instance, radius)

        logger.debug("Built star mesh", class_id=instance.class_id, nodes=len(list(root.walk())))
        return root

    def _add_event_horizon(self, root: SceneNode, radius: float) -> None:
        root.add(
            SceneNode(
                "photon_ring",
                geometry=ring(radius * 1.4, radius * 1.6, 64),
                material=Material(color=0xFFCC66, emissive=1.0, additive=True, double_sided=True),
            )
        )
        root.add(
            SceneNode(
                "lensing_halo",
                geometry=uv_sphere(radius * 2.0, 24, 12),
                material=Material(color=0x222244, opacity=0.1, double_sided=True),
            )
        )

    def _add_accretion_disk(self, root: SceneNode, radius: float, definition: ClassDefinition) -> None:
        disk = root.add(SceneNode("accretion_disk"))
        inner, outer = radius * 2.0, radius * 10.0
        step = (outer - inner) / ACCRETION_RINGS
        hot = definition.colors[1] if len(definition.colors) > 1 else 0xFF8800
        for i in range(ACCRETION_RINGS):
            disk.add(
                SceneNode(
                    f"accretion_ring_{i}",
                    geometry=ring(inner + i * step, inner + (i + 1) * step, 64),
                    material=Material(color=hot, opacity=1.0 - i / (ACCRETION_RINGS + 1), emissive=1.0, double_sided=True),
                )
            )

    def _add_effects(
        self,
        root: SceneNode,
        instance: GeneratedInstance,
        definition: ClassDefinition,
        radius: float,
        color: int,
        rng: LehmerPRNG,
        config: RenderConfig,
    ) -> None:
        traits = instance.traits
        bundle = instance.physics

        if traits.jets:
            length = radius * 20.0
            for direction in (1.0, -1.0):
                root.add(
                    SceneNode(
                        "jet_north" if direction > 0 else "jet_south",
                        geometry=cylinder(radius * 0.05, radius * 0.4, length, 16),
                        material=Material(color=0x99CCFF, opacity=0.6, additive=True),
                        position=(0.0, direction * length / 2.0, 0.0),
                        rotation=(0.0 if direction > 0 else math.pi, 0.0, 0.0),
                    )
                )

        if traits.beams:
            for direction in (1.0, -1.0):
                root.add(
                    SceneNode(
                        "pulsar_beam",
                        geometry=cylinder(radius * 1.5, 0.0, radius * 30.0, 12),
                        material=Material(color=0xCCE5FF, opacity=0.4, additive=True),
                        position=(0.0, direction * radius * 15.0, 0.0),
                        rotation=(0.3 if direction > 0 else math.pi + 0.3, 0.0, 0.0),
                    )
                )

        if traits.magnetosphere:
            loops = min(config.max_features, max(4, int(math.log10(1.0 + bundle.magnetic_field) * 2)))
            field_node = root.add(SceneNode("magnetosphere"))
            extent = radius * (1.5 + math.log10(1.0 + bundle.magnetic_field) * 0.25)
            for i in range(loops):
                field_node.add(
                    SceneNode(
                        f"field_line_{i}",
                        geometry=ring(extent * 0.98, extent, 48),
                        material=Material(color=0x6699FF, opacity=0.3, additive=True, double_sided=True),
                        rotation=(math.pi / 2.0, i / max(loops, 1) * math.pi, 0.0),
                    )
                )

        if traits.stellar_wind:
            count = self.particle_budget(config, definition.prop("effect_density", 0.5))
            outer = radius * (1.5 + rng.random() * 10.0)
            particles = scatter_in_shell(rng, count, radius * 1.5, max(outer, radius * 2.0))
            root.add(
                SceneNode(
                    "stellar_wind",
                    geometry=point_cloud(particles),
                    material=Material(color=color, opacity=0.5, additive=True, point_size=0.05),
                )
            )

        if traits.sunspots:
            count = min(int(rng.random() * MAX_SUNSPOTS), config.max_features)
            spots = scatter_on_sphere(rng, count, radius * 1.001, min_distance=radius * 0.3)
            if len(spots):
                root.add(
                    SceneNode(
                        "sunspots",
                        geometry=uv_sphere(radius * 0.06, 8, 4),
                        material=Material(color=0x331100),
                        instances=spots,
                    )
                )

        if traits.flares and rng.chance(FLARE_PROBABILITY):
            anchor = np.array(rng.point_on_sphere(radius))
            root.add(
                SceneNode(
                    "flare",
                    geometry=cylinder(0.0, radius * 0.15, radius * 0.8, 8),
                    material=Material(color=0xFFFFAA, emissive=1.0, additive=True),
                    position=tuple(anchor * 1.2),
                )
            )

    def _add_companion(self, root: SceneNode, instance: GeneratedInstance, radius: float) -> None:
        companion = instance.companion
        definition = self.registry.get(companion.class_id) or self.registry.default()
        primary_mass = max(instance.attributes["mass"], 1e-6)
        size = radius * min(max(companion.mass / primary_mass, 0.2), 1.5)
        distance = radius * (3.0 + companion.separation)
        root.add(
            SceneNode(
                "companion",
                geometry=uv_sphere(size, 24, 12),
                material=Material(color=definition.colors[0], emissive=1.0),
                position=(distance, 0.0, 0.0),
                user_data={"class_id": companion.class_id},
            )
        )
