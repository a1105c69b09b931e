"""
Shared generation pipeline for every body kind.

A BodyGenerator resolves the class (weighted random or by identifier,
substituting the registry default for unknown identifiers), samples its
ranges, and hands off to the kind-specific ``_derive`` step. MeshBuilder
holds what all three mesh builders share: the per-instance random stream,
the noise source and the base-body LOD construction.
"""

import structlog
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .errors import ClassNotFoundError
from .geometry import (
    Geometry,
    Material,
    SceneNode,
    build_lod,
    displace_radially,
    dodecahedron,
    icosphere,
    polar_disk,
    sphere_segments,
    uv_sphere,
)
from .instance import GeneratedInstance
from .lehmer_prng import LehmerPRNG
from .noise import LatticeValueNoise, NoiseFunction
from .registry import BaseShape, ClassDefinition, ClassRegistry
from .sampler import AttributeSampler
from ..config.options import GenerationConfig, RenderConfig
from ..utils.random import derive_seed

logger = structlog.get_logger()

RANDOM_CLASS = "random"

# Start distances (in display radii) of up to four LOD tiers
LOD_TIER_DISTANCES = (0.0, 10.0, 30.0, 60.0)


class BodyGenerator:
    """Base class for star, planet and galaxy generators."""

    def __init__(self, registry: ClassRegistry, sampler: Optional[AttributeSampler] = None):
        """
        Initialize generator.

        Args:
            registry: Read-only class registry for this body kind
            sampler: Attribute sampler, a default one when omitted
        """
        self.registry = registry
        self.sampler = sampler or AttributeSampler()

    def resolve_class(self, class_id: str, rng: LehmerPRNG) -> Tuple[ClassDefinition, Optional[str]]:
        """
        Class for a request.

        Returns:
            Tuple of (definition, requested id when it was substituted)
        """
        if class_id == RANDOM_CLASS:
            return self.registry.weighted_random_class(rng), None
        try:
            return self.registry.lookup(class_id), None
        except ClassNotFoundError as exc:
            default = self.registry.default()
            logger.warning(
                "Unknown class, using default",
                kind=self.registry.kind.value,
                requested=class_id,
                default=default.id,
                error=str(exc),
            )
            return default, class_id

    def generate(
        self, class_id: str = RANDOM_CLASS, seed: int = 0, config: Optional[GenerationConfig] = None
    ) -> GeneratedInstance:
        """
        Generate one instance.

        Args:
            class_id: Class identifier or "random"
            seed: Seed for the instance's private random stream
            config: Generation options

        Returns:
            GeneratedInstance
        """
        config = config or GenerationConfig()
        rng = LehmerPRNG(seed)
        definition, requested = self.resolve_class(class_id, rng)
        attributes = self.sampler.sample_ranges(definition, rng)
        instance = self._derive(definition, attributes, rng, seed, config, requested)
        logger.info(
            "Generated body",
            kind=instance.kind.value,
            class_id=instance.class_id,
            seed=seed,
            stage=instance.stage.value,
            habitability=round(instance.habitability, 2),
        )
        return instance

    def _derive(
        self,
        definition: ClassDefinition,
        attributes: Dict[str, float],
        rng: LehmerPRNG,
        seed: int,
        config: GenerationConfig,
        requested: Optional[str],
    ) -> GeneratedInstance:
        raise NotImplementedError


@dataclass
class MeshBuilderOptions:
    """Options shared by the mesh builders."""

    noise_factory: Callable[[int], NoiseFunction] = LatticeValueNoise  # Builds the surface noise for a seed
    particles_per_feature: int = 20  # Particle budget per unit of max_features
    lod_tiers: int = 3  # Number of LOD tiers when LOD is enabled


class MeshBuilder:
    """Base class for the per-kind mesh builders."""

    def __init__(self, registry: ClassRegistry, options: Optional[MeshBuilderOptions] = None):
        self.registry = registry
        self.options = options or MeshBuilderOptions()

    def definition_for(self, instance: GeneratedInstance) -> ClassDefinition:
        return self.registry.get(instance.class_id) or self.registry.default()

    def mesh_rng(self, instance: GeneratedInstance, stage: str = "mesh") -> LehmerPRNG:
        """Random stream for a mesh stage, independent of the sampling stream."""
        return LehmerPRNG(derive_seed(instance.seed, stage))

    def noise_for(self, instance: GeneratedInstance) -> NoiseFunction:
        return self.options.noise_factory(derive_seed(instance.seed, "noise"))

    def particle_budget(self, config: RenderConfig, density: float = 1.0) -> int:
        return int(min(density * 1000, config.max_features * self.options.particles_per_feature))

    def base_body(
        self,
        name: str,
        factory: Callable[[int], Geometry],
        material: Material,
        config: RenderConfig,
        radius: float,
        max_tiers: Optional[int] = None,
    ) -> SceneNode:
        """
        Node for the main body, with LOD tiers when enabled.

        Args:
            name: Node name
            factory: Builds the geometry for an LOD tier (0 = full detail)
            material: Surface material
            config: Render options
            radius: Display radius scaling LOD distances
            max_tiers: Cap on the tier count for factories with fewer distinct tiers

        Returns:
            SceneNode whose geometry is the full-detail tier
        """
        if config.enable_lod:
            count = max(2, min(self.options.lod_tiers, len(LOD_TIER_DISTANCES)))
            if max_tiers is not None:
                count = min(count, max(1, max_tiers))
            distances = LOD_TIER_DISTANCES[:count]
            lod = build_lod(factory, scale=radius, distances=distances)
            body = SceneNode(name, geometry=lod.select_tier(0), material=material, lod=lod)
        else:
            body = SceneNode(name, geometry=factory(0), material=material)
        body.user_data["role"] = "body"
        return body

    def surface_factory(
        self,
        shape: BaseShape,
        radius: float,
        detail_level: int,
        noise: Optional[NoiseFunction] = None,
        amplitude: float = 0.0,
        frequency: float = 2.0,
    ) -> Callable[[int], Geometry]:
        """
        Geometry factory for a base shape, one resolution step coarser per LOD tier.

        Args:
            shape: Base shape of the class
            radius: Display radius
            detail_level: Render detail 1..5
            noise: Noise source for radial displacement
            amplitude: Displacement as a fraction of the radius
            frequency: Noise frequency on the unit sphere

        Returns:
            Callable taking the tier index
        """
        detail = max(1, min(int(detail_level), 5))

        def factory(tier: int) -> Geometry:
            if shape in (BaseShape.ICOSPHERE, BaseShape.IRREGULAR):
                geometry = icosphere(radius, max(0, min(detail, 4) + 1 - tier))
            elif shape == BaseShape.DODECAHEDRON:
                geometry = dodecahedron(radius, max(0, min(detail, 3) + 1 - tier))
            elif shape == BaseShape.DISK:
                rings = max(2, (4 + 4 * detail) >> tier)
                geometry = polar_disk(radius, rings, rings * 3)
            else:
                width, height = sphere_segments(detail)
                geometry = uv_sphere(radius, max(6, width >> tier), max(3, height >> tier))
            if noise is not None and amplitude > 0:
                geometry, _ = displace_radially(geometry, noise, amplitude, frequency)
            return geometry

        return factory

    def build(self, instance: GeneratedInstance, config: RenderConfig) -> SceneNode:
        raise NotImplementedError


def feature_count(root: SceneNode) -> int:
    """Feature nodes (not the root or the main body), counting instances individually."""
    total = 0
    for node in root.walk():
        if node is root or node.geometry is None or node.user_data.get("role") == "body":
            continue
        total += len(node.instances) if node.instances is not None else 1
    return total


def fallback_scene(radius: float, name: str = "fallback") -> SceneNode:
    """Minimal gray sphere used when mesh construction fails."""
    return SceneNode(name, geometry=uv_sphere(radius, 16, 16), material=Material(color=0x808080))

