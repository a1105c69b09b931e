"""
Galaxy generation and mesh building.

This module implements:
- Galaxy sampling from log stellar mass, size, star formation and metallicity
- Mass budget, mass-to-light ratio, dynamics and multi-band luminosities
- Class-derived spiral layouts stored on the instance
- Galaxy meshes: spiral scatter as a low-poly Delaunay surface or point
  cloud, Sersic-like ellipsoids, clumpy irregulars, bar, active nucleus
  with jets and star-forming regions
"""

import math
import numpy as np
import structlog
from typing import Callable, Dict, Iterator, Optional

from . import physics
from .body_generator import BodyGenerator, MeshBuilder
from .galaxy_themes import QUALITY_TIERS, random_variant_layout, themed_layout
from .galaxy_types import characteristic_size, classify_by_mass, morphology_of
from .geometry import Geometry, Material, SceneNode, cylinder, icosphere, polar_disk, uv_sphere
from .instance import GalaxyPhysics, GeneratedInstance
from .lehmer_prng import LehmerPRNG
from .placement import (
    SpatialLayout,
    hex_to_rgb,
    iter_spiral_arm_chunks,
    scatter_clusters,
    scatter_spiral_arms,
)
from .registry import BaseShape, BodyKind, ClassDefinition
from .sampler import STAGE_HABITABILITY, determine_stage
from .triangulation import decimate_indices, triangulate_layout
from ..config.options import GalaxyLayoutConfig, GenerationConfig, RenderConfig

logger = structlog.get_logger()

BLACK_HOLE_MASS_FRACTION = 1e-4
INACTIVE_EDDINGTON_RATIO = 0.001

# Luminosity per unit star formation rate (erg/s/Hz per Msun/yr)
UV_PER_SFR = 1.4e28
IR_PER_SFR = 3.0e28
XRAY_EDDINGTON_SCALE = 1.3e38

# Arm tightness giving spin 1.0 in the scatter layout
REFERENCE_ARM_TIGHTNESS = 15.0

MAX_STAR_FORMING_REGIONS = 50


class GalaxyGenerator(BodyGenerator):
    """Generates galaxy instances from the galactic registry."""

    def _derive(
        self,
        definition: ClassDefinition,
        attributes: Dict[str, float],
        rng: LehmerPRNG,
        seed: int,
        config: GenerationConfig,
        requested: Optional[str],
    ) -> GeneratedInstance:
        prop = definition.prop
        stellar_mass = math.pow(10.0, attributes["log_stellar_mass"])
        size = attributes["size"]
        sfr = attributes["star_formation_rate"]

        lifespan = physics.galaxy_lifespan()
        age = config.age if config.age is not None else attributes["age_gyr"] * 1000.0
        stage = determine_stage(age, lifespan)
        age_gyr = age / 1000.0

        total_mass = physics.galaxy_total_mass(stellar_mass, prop("dark_matter_fraction", 0.85))
        black_hole_mass = stellar_mass * BLACK_HOLE_MASS_FRACTION
        if definition.traits.active_nucleus:
            eddington_ratio = 0.01 + rng.random() * 0.99
        else:
            eddington_ratio = INACTIVE_EDDINGTON_RATIO
        ml_ratio = physics.mass_to_light_ratio(prop("ml_intercept", 2.0), prop("ml_slope", 0.5), age_gyr)
        luminosity = stellar_mass / ml_ratio
        rotation_velocity = prop("rotation_velocity", 200.0)
        radius_kpc = size / 2.0

        ellipticity = min(max(prop("ellipticity", 0.1) + (rng.random() - 0.5) * 0.2, 0.0), 0.95)
        arm_tightness = max(0.0, prop("arm_tightness", 0.0) + (rng.random() - 0.5) * 5.0)

        bundle = GalaxyPhysics(
            stellar_mass=stellar_mass,
            total_mass=total_mass,
            dark_matter_mass=total_mass - stellar_mass,
            gas_mass=prop("gas_mass", stellar_mass * 0.1),
            black_hole_mass=black_hole_mass,
            eddington_ratio=eddington_ratio,
            mass_to_light_ratio=ml_ratio,
            luminosity=luminosity,
            absolute_magnitude=physics.absolute_magnitude(luminosity),
            rotation_velocity=rotation_velocity,
            dynamical_mass=physics.dynamical_mass(rotation_velocity, radius_kpc),
            escape_velocity=physics.galactic_escape_velocity(total_mass, radius_kpc),
            star_count=int(stellar_mass / 1e8 * prop("star_density", 0.5) * 1000),
            gas_cloud_count=int(sfr * 100),
            redshift=physics.redshift_from_age(age_gyr),
            ellipticity=ellipticity,
            arm_tightness=arm_tightness,
            uv_luminosity=sfr * UV_PER_SFR,
            ir_luminosity=sfr * IR_PER_SFR,
            xray_luminosity=eddington_ratio * XRAY_EDDINGTON_SCALE * (black_hole_mass / 1e8) * 0.1,
            radio_luminosity=prop("jet_power", 0.0) * 0.01,
            mass_class=classify_by_mass(stellar_mass),
            characteristic_size=characteristic_size(stellar_mass, definition.traits.base_shape),
        )

        habitability = physics.overall_habitability(definition.habitability.overall, STAGE_HABITABILITY[stage])
        resources = self.sampler.sample_resources(definition, rng)
        layout = self.class_layout(definition, arm_tightness)

        return GeneratedInstance(
            kind=BodyKind.GALAXY,
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
            extras={"layout": layout.model_dump(), "morphology": morphology_of(definition)},
        )

    @staticmethod
    def class_layout(definition: ClassDefinition, arm_tightness: float) -> GalaxyLayoutConfig:
        """Scatter layout matching a class's arms, winding, clumpiness and colors."""
        colors = definition.colors
        return GalaxyLayoutConfig(
            arms=int(definition.prop("arm_count", 3)),
            spin=arm_tightness / REFERENCE_ARM_TIGHTNESS if arm_tightness else 1.0,
            randomness=0.1 + definition.prop("clumpiness", 0.3) * 0.3,
            inside_color=colors[1] if len(colors) > 1 else colors[0],
            outside_color=colors[2] if len(colors) > 2 else colors[-1],
        )


def sersic_points(rng: LehmerPRNG, count: int, radius: float, ellipticity: float) -> SpatialLayout:
    """
    Centrally concentrated ellipsoidal scatter.

    Radii follow ``radius * u^2`` so density falls off steeply from the
    core; the vertical axis is flattened by ``1 - ellipticity``.
    """
    if count <= 0:
        return SpatialLayout.empty(radius)
    positions = np.zeros((count, 3), dtype=np.float64)
    for i in range(count):
        r = radius * rng.random() ** 2
        positions[i] = rng.point_on_sphere(r)
    positions[:, 1] *= 1.0 - ellipticity
    radii = np.linalg.norm(positions, axis=1)
    return SpatialLayout(positions, np.zeros(count, dtype=np.int32), np.ones((count, 3)), radii, radius)


def apply_radial_colors(layout: SpatialLayout, inside: int, outside: int) -> SpatialLayout:
    """Layout with colors graded from inside (center) to outside (rim)."""
    mix = np.clip(layout.radii / max(layout.max_radius, 1e-12), 0.0, 1.0)[:, None]
    layout.colors = hex_to_rgb(inside) * (1.0 - mix) + hex_to_rgb(outside) * mix
    return layout


class GalaxyMeshBuilder(MeshBuilder):
    """Builds renderable galaxy scenes."""

    def layout_for(self, instance: GeneratedInstance, config: RenderConfig) -> GalaxyLayoutConfig:
        """Class layout with the random variant, render quality tier and theme applied."""
        base = GalaxyLayoutConfig(**instance.extras.get("layout", {}))
        if config.variant_seed is not None:
            base = random_variant_layout(LehmerPRNG(config.variant_seed), base)
        layout = themed_layout(config.theme, config.quality, base=base, tier_arms=False)
        if not config.low_poly and layout.low_poly:
            layout = layout.model_copy(update={"low_poly": False})
        return layout

    def scatter(self, instance: GeneratedInstance, layout: GalaxyLayoutConfig) -> SpatialLayout:
        """Star positions for the galaxy's morphology."""
        definition = self.definition_for(instance)
        rng = self.mesh_rng(instance, "scatter")
        shape = definition.traits.base_shape
        if definition.traits.spiral_arms:
            return scatter_spiral_arms(rng, layout)
        if shape == BaseShape.ELLIPSOID:
            points = sersic_points(rng, layout.star_count, layout.radius, instance.physics.ellipticity)
        else:
            points = scatter_clusters(
                rng, layout.star_count, layout.radius, definition.prop("clumpiness", 0.5), flatten=0.5
            )
        return apply_radial_colors(points, layout.inside_color, layout.outside_color)

    def iter_scatter(
        self, instance: GeneratedInstance, layout: GalaxyLayoutConfig, chunk_size: int
    ) -> Iterator[SpatialLayout]:
        """
        Yield the star scatter in chunks of at most ``chunk_size`` points.

        Concatenated chunks equal scatter() for the same instance and layout.
        """
        chunk_size = max(1, chunk_size)
        if self.definition_for(instance).traits.spiral_arms:
            yield from iter_spiral_arm_chunks(self.mesh_rng(instance, "scatter"), layout, chunk_size)
            return
        points = self.scatter(instance, layout)
        for start in range(0, len(points), chunk_size):
            yield points.subset(np.arange(start, min(start + chunk_size, len(points))))

    def star_factory(self, points: SpatialLayout, low_poly: bool, levels: int) -> Callable[[int], Geometry]:
        """
        Geometry factory for the star field; each LOD tier keeps every
        ``2**tier``-th point and is re-triangulated when low-poly.
        """

        def factory(tier: int) -> Geometry:
            factor = 2 ** min(tier, levels)
            subset = points if factor == 1 else points.subset(decimate_indices(len(points), factor))
            if low_poly:
                vertices, faces = triangulate_layout(subset)
                return Geometry(vertices, faces, subset.colors)
            return Geometry(subset.positions, None, subset.colors)

        return factory

    def build(self, instance: GeneratedInstance, config: RenderConfig) -> SceneNode:
        """
        Build the scene for a galaxy.

        Args:
            instance: Generated galaxy
            config: Render options; ``quality`` and ``theme`` select the layout

        Returns:
            Root SceneNode
        """
        definition = self.definition_for(instance)
        traits = instance.traits
        layout = self.layout_for(instance, config)
        radius = layout.radius
        tier = QUALITY_TIERS.get(config.quality, QUALITY_TIERS["medium"])

        root = SceneNode(
            instance.name,
            user_data={"kind": "galaxy", "class_id": instance.class_id, "layout": layout.model_dump()},
        )
        points = self.scatter(instance, layout)
        material = Material(vertex_colors=True, flat_shading=layout.low_poly, point_size=0.0 if layout.low_poly else 0.5)
        factory = self.star_factory(points, layout.low_poly, tier.triangulation_level)
        if config.enable_lod and tier.triangulation_level > 0:
            stars = self.base_body("stars", factory, material, config, radius, max_tiers=tier.triangulation_level + 1)
        else:
            stars = SceneNode("stars", geometry=factory(0), material=material)
            stars.user_data["role"] = "body"
        stars.user_data["points"] = len(points)
        root.add(stars)

        self._add_morphology(root, instance, definition, radius)
        if traits.central_bar:
            strength = definition.prop("bar_strength", 0.5)
            root.add(
                SceneNode(
                    "bar",
                    geometry=icosphere(1.0, 2).transformed(
                        scale=(radius * 0.3 * strength, radius * 0.03, radius * 0.06)
                    ),
                    material=Material(color=definition.colors[0], opacity=0.6, additive=True),
                )
            )
        if traits.active_nucleus:
            self._add_nucleus(root, traits.jets and config.enable_effects, radius)
        if config.enable_effects and traits.star_forming_regions:
            self._add_star_forming_regions(root, instance, definition, radius, config)

        logger.debug(
            "Built galaxy mesh",
            class_id=instance.class_id,
            points=len(points),
            low_poly=layout.low_poly,
            quality=config.quality,
        )
        return root

    def _add_morphology(
        self, root: SceneNode, instance: GeneratedInstance, definition: ClassDefinition, radius: float
    ) -> None:
        shape = definition.traits.base_shape
        core_color = definition.colors[0]
        root.add(
            SceneNode(
                "bulge",
                geometry=uv_sphere(radius * 0.05, 24, 12),
                material=Material(color=core_color, emissive=1.0),
            )
        )
        if shape == BaseShape.DISK:
            halo = polar_disk(radius * 0.6, 8, 32)
        elif shape == BaseShape.ELLIPSOID:
            halo = uv_sphere(radius * 0.5, 24, 12).transformed(scale=(1.0, 1.0 - instance.physics.ellipticity, 1.0))
        else:
            return
        root.add(
            SceneNode(
                "halo",
                geometry=halo,
                material=Material(color=core_color, opacity=0.1, additive=True, double_sided=True),
            )
        )

    def _add_nucleus(self, root: SceneNode, with_jets: bool, radius: float) -> None:
        root.add(
            SceneNode(
                "active_nucleus",
                geometry=uv_sphere(radius * 0.02, 16, 8),
                material=Material(color=0xFFFFFF, emissive=2.0, additive=True),
            )
        )
        if not with_jets:
            return
        length = radius * 0.5
        for direction in (1.0, -1.0):
            root.add(
                SceneNode(
                    "agn_jet",
                    geometry=cylinder(radius * 0.002, radius * 0.02, length, 12),
                    material=Material(color=0x99CCFF, opacity=0.5, additive=True),
                    position=(0.0, direction * length / 2.0, 0.0),
                    rotation=(0.0 if direction > 0 else math.pi, 0.0, 0.0),
                )
            )

    def _add_star_forming_regions(
        self,
        root: SceneNode,
        instance: GeneratedInstance,
        definition: ClassDefinition,
        radius: float,
        config: RenderConfig,
    ) -> None:
        rng = self.mesh_rng(instance, "star_forming")
        count = min(config.max_features, MAX_STAR_FORMING_REGIONS, 5 + int(instance["star_formation_rate"]))
        regions = scatter_clusters(rng, count, radius * 0.8, definition.prop("clumpiness", 0.5), flatten=0.1)
        if len(regions) == 0:
            return
        root.add(
            SceneNode(
                "star_forming_regions",
                geometry=icosphere(radius * 0.01, 1),
                material=Material(color=0xFF69B4, emissive=1.0, additive=True),
                instances=regions.positions,
            )
        )
