"""Tests for the public generation and rendering facade."""

import asyncio

import pytest

from py_cosmogen import api
from py_cosmogen.api.main import COMMON_CLASSES, CelestialEngine
from py_cosmogen.config import Settings
from py_cosmogen.core.errors import GenerationFailure
from py_cosmogen.core.registry import BodyKind, EvolutionStage
from py_cosmogen.core.render_cache import RenderCache


@pytest.fixture
def engine():
    engine = CelestialEngine(cache=RenderCache(64))
    yield engine
    engine.clear_cache()
    engine.shutdown()


@pytest.fixture
def g_star(engine):
    return engine.generate("star", "G_TYPE", seed=42)


class TestGenerate:
    """Test generation entry points."""

    def test_generate_by_kind(self, engine):
        assert engine.generate("star", "G_TYPE", 1).kind == BodyKind.STAR
        assert engine.generate_planet("GAS_GIANT", 1).kind == BodyKind.PLANET
        assert engine.generate_galaxy("QUASAR", 1).kind == BodyKind.GALAXY

    def test_unknown_kind_generates_star(self, engine):
        instance = engine.generate("comet", "G_TYPE", 1)
        assert instance.kind == BodyKind.STAR

    def test_unknown_class_substituted(self, engine):
        instance = engine.generate("galaxy", "NOT_A_GALAXY", 2)
        assert instance.class_id == "SPIRAL_SB"
        assert instance.requested_class == "NOT_A_GALAXY"

    def test_dict_config_clamped(self, engine):
        instance = engine.generate("star", "G_TYPE", 1, {"age": -10.0, "comet_tail": True})
        assert instance.age == 0.0
        assert instance.stage == EvolutionStage.FORMATION

    def test_generate_many_keeps_order(self, engine):
        requests = [
            {"kind": "star", "class_id": "M_TYPE", "seed": 1},
            {"kind": "planet", "class_id": "ICE_GIANT", "seed": 2},
            {"kind": "galaxy", "class_id": "STARBURST", "seed": 3},
            {"kind": "star", "seed": 4},
        ]
        instances = engine.generate_many(requests)
        assert [i.class_id for i in instances[:3]] == ["M_TYPE", "ICE_GIANT", "STARBURST"]
        assert instances[3].to_dict() == engine.generate("star", "random", 4).to_dict()


class TestRender:
    """Test rendering, caching and fallbacks."""

    def test_render_metadata(self, engine, g_star):
        handle = engine.render(g_star)
        assert not handle.degraded
        assert handle.metadata.polygon_count == handle.root.polygon_count()
        assert handle.metadata.lod_tiers == 3
        assert not handle.metadata.from_cache
        engine.dispose(handle)
        assert handle.disposed

    def test_cache_hit(self, engine, g_star):
        first = engine.render(g_star)
        second = engine.render(g_star, {"detail_level": 2})
        assert second.metadata.from_cache
        assert first.shares_buffers_with is second.shares_buffers_with
        third = engine.render(g_star, {"detail_level": 3})
        assert not third.metadata.from_cache
        for handle in (first, second, third):
            handle.dispose()

    def test_dispose_none(self, engine):
        engine.dispose(None)

    def test_fallback_on_build_failure(self, engine, g_star, monkeypatch):
        def broken(instance, config):
            raise GenerationFailure("surface exploded", instance.class_id)

        monkeypatch.setattr(engine.builders[BodyKind.STAR], "build", broken)
        handle = engine.render(g_star)
        assert handle.degraded
        assert "surface exploded" in handle.error
        assert handle.metadata.polygon_count == 480
        assert handle.metadata.feature_count == 0

        cached = engine.render(g_star)
        assert cached.degraded
        assert cached.metadata.from_cache

    def test_unexpected_error_degrades(self, engine, g_star, monkeypatch):
        def broken(instance, config):
            raise ZeroDivisionError("bad ratio")

        monkeypatch.setattr(engine.builders[BodyKind.STAR], "build", broken)
        handle = engine.render(g_star)
        assert handle.degraded
        assert handle.error == "bad ratio"

    def test_memory_error_propagates(self, engine, g_star, monkeypatch):
        def exhausted(instance, config):
            raise MemoryError()

        monkeypatch.setattr(engine.builders[BodyKind.STAR], "build", exhausted)
        with pytest.raises(MemoryError):
            engine.render(g_star)
        assert len(engine.cache) == 0

    def test_render_config_merges_defaults(self, engine):
        config = engine._render_config({"detail_level": 99, "wireframe": True})
        assert config.detail_level == 5
        assert config.quality == "medium"

    def test_unusable_render_config_uses_defaults(self, engine):
        config = engine._render_config({"detail_level": "fine"})
        assert config == engine.default_render_config()

    def test_galaxy_quality_switch(self, engine):
        galaxy = engine.generate_galaxy("SPIRAL_SB", 5)
        with engine.render(galaxy, {"quality": "minimal"}) as handle:
            assert handle.root.find("stars").geometry.is_points
        with engine.render(galaxy, {"quality": "medium", "enable_lod": False}) as handle:
            assert handle.root.find("stars").geometry.face_count > 0

    def test_render_async(self, engine, g_star):
        handle = asyncio.run(engine.render_async(g_star))
        assert not handle.degraded
        assert handle.root.find("photosphere") is not None
        handle.dispose()

    def test_stream_galaxy_points(self):
        engine = CelestialEngine(settings=Settings(stream_chunk_size=500))
        galaxy = engine.generate("galaxy", "SPIRAL_SB", seed=3)
        chunks = list(engine.stream_galaxy_points(galaxy, {"quality": "minimal"}))
        assert len(chunks) == 6
        assert sum(len(chunk) for chunk in chunks) == 3000
        assert list(engine.stream_galaxy_points(engine.generate("star", "G_TYPE", seed=3))) == []
        engine.shutdown()


class TestLifecycle:
    """Test cache management and quality updates."""

    def test_clear_cache(self, engine, g_star):
        held = engine.render(g_star)
        assert engine.clear_cache() == 1
        assert len(engine.cache) == 0
        assert not held.root.geometry.disposed
        held.dispose()
        again = engine.render(g_star)
        assert not again.metadata.from_cache
        again.dispose()

    def test_update_quality(self, engine, g_star):
        engine.render(g_star).dispose()
        assert engine.update_quality(9) == 5
        assert len(engine.cache) == 0
        assert engine.default_render_config().detail_level == 5
        assert engine.update_quality(-1) == 1
        assert engine.stats()["detail_level"] == 1

    def test_update_quality_non_numeric_keeps_level(self, engine, g_star):
        engine.update_quality(3)
        held = engine.render(g_star)
        assert engine.update_quality("high") == 3
        assert engine.update_quality(None) == 3
        assert engine.default_render_config().detail_level == 3
        assert len(engine.cache) == 1
        held.dispose()

    def test_preload_common_types(self, engine):
        expected = sum(len(class_ids) for class_ids in COMMON_CLASSES.values())
        assert engine.preload_common_types() == expected
        assert len(engine.cache) == expected


class TestIntrospection:
    """Test class listing and lookup."""

    def test_list_classes(self, engine):
        assert len(engine.list_classes()) == 29
        assert len(engine.list_classes("star")) == 12
        assert len(engine.list_classes(BodyKind.PLANET)) == 10
        assert len(engine.list_classes("galaxy")) == 7
        assert "G_TYPE" in engine.list_classes("star")

    def test_class_info(self, engine):
        info = engine.class_info("QUASAR")
        assert info.id == "QUASAR"
        assert info.traits.active_nucleus
        assert engine.class_info("NOT_A_CLASS") is None


class TestModuleFacade:
    """Test the process-wide convenience functions."""

    def test_round_trip(self):
        instance = api.generate("planet", "TERRESTRIAL", 7)
        handle = api.render(instance, {"detail_level": 1})
        assert handle.root.find("surface") is not None
        api.dispose(handle)
        assert handle.disposed
        assert api.clear_cache() >= 1

    def test_shared_engine(self):
        assert api.get_engine() is api.get_engine()
        assert api.list_classes("galaxy") == api.get_engine().list_classes("galaxy")
        assert api.class_info("TERRESTRIAL").id == "TERRESTRIAL"
