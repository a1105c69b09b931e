"""Tests for attribute sampling and evolutionary stages."""

import pytest

from py_cosmogen.core.lehmer_prng import LehmerPRNG
from py_cosmogen.core.registry import EvolutionStage, build_default_registries
from py_cosmogen.core.sampler import AGE_FRACTION, AttributeSampler, SamplerOptions, determine_stage


class TestDetermineStage:
    """Test stage thresholds."""

    @pytest.mark.parametrize(
        "fraction, expected",
        [
            (0.0, EvolutionStage.FORMATION),
            (0.099, EvolutionStage.FORMATION),
            (0.10, EvolutionStage.MAIN_PHASE),
            (0.5, EvolutionStage.MAIN_PHASE),
            (0.90, EvolutionStage.TRANSITIONAL),
            (0.95, EvolutionStage.LATE_PHASE),
            (0.99, EvolutionStage.REMNANT),
            (1.0, EvolutionStage.REMNANT),
            (3.0, EvolutionStage.REMNANT),
        ],
    )
    def test_thresholds(self, fraction, expected):
        assert determine_stage(fraction * 1000.0, 1000.0) == expected

    def test_zero_lifespan_is_remnant(self):
        assert determine_stage(0.0, 0.0) == EvolutionStage.REMNANT


class TestAttributeSampler:
    """Test range, age and resource sampling."""

    @pytest.fixture
    def sampler(self):
        return AttributeSampler()

    @pytest.fixture(scope="class")
    def registries(self):
        return build_default_registries()

    def test_ranges_contained(self, sampler, registries):
        """Every sampled value lies inside its declared range."""
        for registry in registries:
            for definition in registry:
                for seed in range(25):
                    values = sampler.sample_ranges(definition, LehmerPRNG(seed))
                    assert list(values) == list(definition.ranges)
                    for key, value in values.items():
                        assert definition.ranges[key].contains(value)

    def test_ranges_deterministic(self, sampler, registries):
        definition = registries.stars.lookup("G_TYPE")
        assert sampler.sample_ranges(definition, LehmerPRNG(42)) == sampler.sample_ranges(
            definition, LehmerPRNG(42)
        )

    def test_age_pinned(self, sampler):
        rng = LehmerPRNG(1)
        assert sampler.sample_age(1000.0, rng, pinned=250.0) == 250.0
        assert rng.call_count == 0

    def test_age_below_fraction(self, sampler):
        rng = LehmerPRNG(8)
        for _ in range(500):
            assert 0.0 <= sampler.sample_age(1000.0, rng) < 1000.0 * AGE_FRACTION

    def test_custom_age_fraction(self):
        sampler = AttributeSampler(SamplerOptions(age_fraction=0.1))
        rng = LehmerPRNG(8)
        assert all(sampler.sample_age(1000.0, rng) < 100.0 for _ in range(200))

    def test_resource_abundance_bounded(self, sampler, registries):
        for definition in registries.planets:
            weights = dict(definition.resources)
            for seed in range(20):
                resources = sampler.sample_resources(definition, LehmerPRNG(seed))
                for tag, abundance in resources.items():
                    assert 0.0 <= abundance <= weights[tag]
