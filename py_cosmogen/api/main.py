"""Public facade for celestial body generation and rendering."""

import asyncio
import logging
import sys
import threading
import time
import structlog
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Union

from ..config import Settings, settings as default_settings
from ..config.options import GenerationConfig, RenderConfig, coerce_config
from ..core.body_generator import RANDOM_CLASS, BodyGenerator, MeshBuilder, fallback_scene, feature_count
from ..core.errors import GenerationFailure
from ..core.galaxy_generator import GalaxyGenerator, GalaxyMeshBuilder
from ..core.instance import GeneratedInstance
from ..core.placement import SpatialLayout
from ..core.planet_generator import PlanetGenerator, PlanetMeshBuilder
from ..core.registry import BodyKind, ClassDefinition, Registries, build_default_registries
from ..core.render_cache import MeshHandle, RenderCache, RenderMetadata, fingerprint, quality_label
from ..core.sampler import AttributeSampler
from ..core.star_generator import StarGenerator, StarMeshBuilder


def configure_logging(config: Settings) -> None:
    """Route structlog through stdlib logging at the configured level and format."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, config.log_level.upper(), logging.INFO),
    )
    renderer = (
        structlog.dev.ConsoleRenderer()
        if config.log_format == "console"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure logging
configure_logging(default_settings)

logger = structlog.get_logger()

# Classes rendered by preload_common_types
COMMON_CLASSES = {
    BodyKind.STAR: ("G_TYPE", "K_TYPE", "M_TYPE"),
    BodyKind.PLANET: ("TERRESTRIAL", "GAS_GIANT", "OCEAN_WORLD"),
    BodyKind.GALAXY: ("SPIRAL_SB", "ELLIPTICAL_E4"),
}

ConfigInput = Union[None, Dict[str, Any], GenerationConfig]
RenderInput = Union[None, Dict[str, Any], RenderConfig]


def _dispose_abandoned(future) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    future.result().dispose()


class CelestialEngine:
    """
    Generation and rendering entry points over explicit registries.

    Public methods never raise for unknown classes, bad options or mesh
    failures: unknown classes are substituted, options are clamped or reset
    to defaults, and failed meshes come back as degraded fallbacks. Only
    MemoryError propagates.
    """

    def __init__(
        self,
        registries: Optional[Registries] = None,
        settings: Optional[Settings] = None,
        cache: Optional[RenderCache] = None,
    ):
        """
        Initialize engine.

        Args:
            registries: Class registries, the built-in catalogs when omitted
            settings: Process settings, the module singleton when omitted
            cache: Render cache, a new one sized from settings when omitted
        """
        self.settings = settings or default_settings
        self.registries = registries or build_default_registries()
        self.cache = cache or RenderCache(self.settings.cache_max_entries)
        self.detail_level = self.settings.default_detail_level

        sampler = AttributeSampler()
        self.generators: Dict[BodyKind, BodyGenerator] = {
            BodyKind.STAR: StarGenerator(self.registries.stars, sampler),
            BodyKind.PLANET: PlanetGenerator(self.registries.planets, sampler),
            BodyKind.GALAXY: GalaxyGenerator(self.registries.galaxies, sampler),
        }
        self.builders: Dict[BodyKind, MeshBuilder] = {
            BodyKind.STAR: StarMeshBuilder(self.registries.stars),
            BodyKind.PLANET: PlanetMeshBuilder(self.registries.planets),
            BodyKind.GALAXY: GalaxyMeshBuilder(self.registries.galaxies),
        }
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    # Generation

    def _kind(self, kind: Union[str, BodyKind]) -> BodyKind:
        try:
            return BodyKind(kind)
        except ValueError:
            logger.warning("Unknown body kind, generating a star", kind=kind)
            return BodyKind.STAR

    def generate(
        self,
        kind: Union[str, BodyKind],
        class_id: str = RANDOM_CLASS,
        seed: int = 0,
        config: ConfigInput = None,
    ) -> GeneratedInstance:
        """
        Generate one body.

        Args:
            kind: "star", "planet" or "galaxy"
            class_id: Class identifier or "random"
            seed: Seed of the body's private random stream
            config: GenerationConfig or dict of its fields

        Returns:
            GeneratedInstance
        """
        options = coerce_config(GenerationConfig, config)
        return self.generators[self._kind(kind)].generate(class_id, seed, options)

    def generate_star(self, class_id: str = RANDOM_CLASS, seed: int = 0, config: ConfigInput = None) -> GeneratedInstance:
        return self.generate(BodyKind.STAR, class_id, seed, config)

    def generate_planet(self, class_id: str = RANDOM_CLASS, seed: int = 0, config: ConfigInput = None) -> GeneratedInstance:
        return self.generate(BodyKind.PLANET, class_id, seed, config)

    def generate_galaxy(self, class_id: str = RANDOM_CLASS, seed: int = 0, config: ConfigInput = None) -> GeneratedInstance:
        return self.generate(BodyKind.GALAXY, class_id, seed, config)

    def generate_many(self, requests: Iterable[Dict[str, Any]]) -> List[GeneratedInstance]:
        """
        Generate independent bodies on the worker pool.

        Args:
            requests: Dicts with ``kind`` and optional ``class_id``, ``seed``
                and ``config``

        Returns:
            Instances in request order
        """
        requests = list(requests)
        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as pool:
            futures = [
                pool.submit(
                    self.generate,
                    request.get("kind", BodyKind.STAR),
                    request.get("class_id", RANDOM_CLASS),
                    request.get("seed", 0),
                    request.get("config"),
                )
                for request in requests
            ]
            instances = [future.result() for future in futures]
        logger.info("Generated batch", count=len(instances))
        return instances

    # Rendering

    def default_render_config(self) -> RenderConfig:
        return RenderConfig(detail_level=self.detail_level, quality=self.settings.default_quality)

    def _render_config(self, value: RenderInput) -> RenderConfig:
        base = self.default_render_config()
        if isinstance(value, dict):
            value = {**base.model_dump(), **value}
        return coerce_config(RenderConfig, value, base)

    def _build_handle(self, builder: MeshBuilder, instance: GeneratedInstance, config: RenderConfig) -> MeshHandle:
        start = time.perf_counter()
        degraded, error = False, None
        try:
            root = builder.build(instance, config)
        except MemoryError:
            raise
        except Exception as exc:
            failure = exc if isinstance(exc, GenerationFailure) else GenerationFailure(str(exc), instance.class_id)
            logger.error(
                "Mesh construction failed",
                kind=instance.kind.value,
                class_id=instance.class_id,
                seed=instance.seed,
                error=str(failure),
                exc_info=True,
            )
            logger.warning("Using fallback mesh", class_id=instance.class_id)
            root = fallback_scene(config.radius, name=instance.name)
            degraded, error = True, str(failure)

        polygons = root.polygon_count()
        metadata = RenderMetadata(
            polygon_count=polygons,
            vertex_count=root.vertex_count(),
            feature_count=feature_count(root),
            quality_level=quality_label(polygons),
            render_time_ms=(time.perf_counter() - start) * 1000.0,
            lod_tiers=max((len(node.lod) for node in root.walk() if node.lod is not None), default=0),
        )
        logger.info(
            "Rendered mesh",
            kind=instance.kind.value,
            class_id=instance.class_id,
            polygons=polygons,
            features=metadata.feature_count,
            degraded=degraded,
            render_time_ms=round(metadata.render_time_ms, 2),
        )
        return MeshHandle.create(root, metadata, degraded, error)

    def render_key(self, instance: GeneratedInstance, config: RenderConfig) -> str:
        return fingerprint(instance.fingerprint_fields(), config.model_dump())

    def render(self, instance: GeneratedInstance, render_config: RenderInput = None) -> MeshHandle:
        """
        Build, or fetch from the cache, a renderable mesh for an instance.

        Args:
            instance: Generated body
            render_config: RenderConfig or dict of its fields

        Returns:
            MeshHandle owned by the caller
        """
        config = self._render_config(render_config)
        builder = self.builders[instance.kind]
        return self.cache.get_or_generate(
            self.render_key(instance, config),
            lambda: self._build_handle(builder, instance, config),
        )

    def _pool(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.settings.max_workers, thread_name_prefix="cosmogen-render"
                )
            return self._executor

    async def render_async(self, instance: GeneratedInstance, render_config: RenderInput = None) -> MeshHandle:
        """
        Render on the worker pool without blocking the event loop.

        Cancelling the awaiting task does not stop the build; the finished
        mesh stays cached and the handle meant for the caller is disposed.
        """
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(self._pool(), self.render, instance, render_config)
        try:
            return await asyncio.shield(future)
        except asyncio.CancelledError:
            future.add_done_callback(_dispose_abandoned)
            logger.info("Render hand-off cancelled", class_id=instance.class_id)
            raise

    def stream_galaxy_points(
        self, instance: GeneratedInstance, render_config: RenderInput = None
    ) -> Iterator[SpatialLayout]:
        """
        Yield a galaxy's star scatter in chunks of ``settings.stream_chunk_size`` points.

        Hosts can hand each chunk to the renderer and yield to their event
        loop in between. Non-galaxy instances yield nothing.
        """
        if instance.kind != BodyKind.GALAXY:
            logger.warning("Point streaming needs a galaxy", kind=instance.kind.value, class_id=instance.class_id)
            return
        config = self._render_config(render_config)
        builder = self.builders[BodyKind.GALAXY]
        layout = builder.layout_for(instance, config)
        yield from builder.iter_scatter(instance, layout, self.settings.stream_chunk_size)

    def dispose(self, handle: Optional[MeshHandle]) -> None:
        if handle is not None:
            handle.dispose()

    def clear_cache(self) -> int:
        return self.cache.clear()

    def preload_common_types(self, seed: int = 0) -> int:
        """
        Render one instance of each common class into the cache.

        Returns:
            Number of meshes rendered
        """
        count = 0
        for kind, class_ids in COMMON_CLASSES.items():
            registry = self.registries.for_kind(kind)
            for class_id in class_ids:
                if class_id not in registry:
                    continue
                with self.render(self.generate(kind, class_id, seed)):
                    count += 1
        logger.info("Preloaded common classes", count=count)
        return count

    def update_quality(self, level: int) -> int:
        """
        Change the default detail level (clamped to 1..5) and clear the cache.

        A level that is not numeric keeps the current one.

        Returns:
            The detail level now in effect
        """
        current = self.default_render_config()
        config = coerce_config(RenderConfig, {"detail_level": level}, current)
        if config is current:
            return self.detail_level
        self.detail_level = config.detail_level
        self.cache.clear()
        logger.info("Updated default detail level", detail_level=self.detail_level)
        return self.detail_level

    # Introspection

    def list_classes(self, kind: Union[None, str, BodyKind] = None) -> List[str]:
        if kind is None:
            return [class_id for registry in self.registries for class_id in registry.class_ids()]
        return self.registries.for_kind(self._kind(kind)).class_ids()

    def class_info(self, class_id: str) -> Optional[ClassDefinition]:
        """Definition for a class identifier of any kind, or None if unknown."""
        for registry in self.registries:
            definition = registry.get(class_id)
            if definition is not None:
                return definition
        logger.warning("Unknown class requested", class_id=class_id)
        return None

    def stats(self) -> Dict[str, Any]:
        return {**self.cache.stats(), "detail_level": self.detail_level}

    def shutdown(self) -> None:
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None


_engine: Optional[CelestialEngine] = None
_engine_lock = threading.Lock()


def get_engine() -> CelestialEngine:
    """Process-wide default engine, created on first use."""
    global _engine
    with _engine_lock:
        if _engine is None:
            _engine = CelestialEngine()
        return _engine


def generate(
    kind: Union[str, BodyKind], class_id: str = RANDOM_CLASS, seed: int = 0, config: ConfigInput = None
) -> GeneratedInstance:
    return get_engine().generate(kind, class_id, seed, config)


def render(instance: GeneratedInstance, render_config: RenderInput = None) -> MeshHandle:
    return get_engine().render(instance, render_config)


def dispose(handle: Optional[MeshHandle]) -> None:
    get_engine().dispose(handle)


def clear_cache() -> int:
    return get_engine().clear_cache()


def list_classes(kind: Union[None, str, BodyKind] = None) -> Sequence[str]:
    return get_engine().list_classes(kind)


def class_info(class_id: str) -> Optional[ClassDefinition]:
    return get_engine().class_info(class_id)
