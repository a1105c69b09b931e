"""Tests for star, planet and galaxy generation."""

import pytest

from py_cosmogen.config.options import GenerationConfig
from py_cosmogen.core.galaxy_generator import GalaxyGenerator
from py_cosmogen.core.planet_generator import OUT_OF_RANGE_DISTANCE_MODIFIER, PlanetGenerator
from py_cosmogen.core.planet_types import ROGUE_PLANET_LIFESPAN
from py_cosmogen.core.registry import BodyKind, EvolutionStage, build_default_registries
from py_cosmogen.core.star_generator import StarGenerator, stage_traits


@pytest.fixture(scope="module")
def registries():
    return build_default_registries()


@pytest.fixture
def stars(registries):
    return StarGenerator(registries.stars)


@pytest.fixture
def planets(registries):
    return PlanetGenerator(registries.planets)


@pytest.fixture
def galaxies(registries):
    return GalaxyGenerator(registries.galaxies)


class TestGenerationCommon:
    """Behavior shared by every generator."""

    @pytest.mark.parametrize("kind", ["stars", "planets", "galaxies"])
    def test_same_seed_same_instance(self, kind, request):
        generator = request.getfixturevalue(kind)
        first = generator.generate("random", seed=1234)
        second = generator.generate("random", seed=1234)
        assert first.to_dict() == second.to_dict()

    def test_different_seeds_differ(self, stars):
        first = stars.generate("G_TYPE", seed=1)
        second = stars.generate("G_TYPE", seed=2)
        assert first.attributes != second.attributes

    @pytest.mark.parametrize("kind", ["stars", "planets", "galaxies"])
    def test_attributes_within_ranges(self, kind, request):
        generator = request.getfixturevalue(kind)
        for definition in generator.registry:
            for seed in range(5):
                instance = generator.generate(definition.id, seed=seed)
                assert instance.class_id == definition.id
                for name, value_range in definition.ranges.items():
                    assert value_range.min <= instance[name] <= value_range.max
                assert 0.0 <= instance.habitability <= 100.0
                for tag, abundance in instance.resources.items():
                    weight = dict((r.tag, r.weight) for r in definition.resources)[tag]
                    assert 0.0 <= abundance <= weight

    @pytest.mark.parametrize("kind", ["stars", "planets", "galaxies"])
    def test_random_class_from_registry(self, kind, request):
        generator = request.getfixturevalue(kind)
        for seed in range(20):
            assert generator.generate("random", seed=seed).class_id in generator.registry

    @pytest.mark.parametrize(
        "kind,default", [("stars", "G_TYPE"), ("planets", "TERRESTRIAL"), ("galaxies", "SPIRAL_SB")]
    )
    def test_unknown_class_substitutes_default(self, kind, default, request):
        instance = request.getfixturevalue(kind).generate("NOT_A_CLASS", seed=3)
        assert instance.class_id == default
        assert instance.requested_class == "NOT_A_CLASS"
        assert instance.substituted

    def test_name_includes_seed(self, stars):
        assert stars.generate("G_TYPE", seed=77).name == "G-type Main Sequence 77"

    def test_unpinned_age_in_early_lifespan(self, stars):
        for seed in range(20):
            instance = stars.generate("K_TYPE", seed=seed)
            assert 0.0 <= instance.age < 0.8 * instance.lifespan


class TestStarGenerator:
    """Test star-specific generation."""

    def test_formation_then_late_phase(self, stars):
        young = stars.generate("G_TYPE", seed=42, config=GenerationConfig(age=0.0))
        assert young.stage == EvolutionStage.FORMATION
        assert young.traits.accretion_disk
        assert young.traits.jets

        old = stars.generate("G_TYPE", seed=42, config=GenerationConfig(age=0.95 * young.lifespan))
        assert old.lifespan == young.lifespan
        assert old.stage == EvolutionStage.LATE_PHASE
        assert old.traits.pulsation
        assert old.traits.stellar_wind
        assert old.habitability < young.habitability

    def test_main_phase_keeps_class_traits(self, stars, registries):
        instance = stars.generate("G_TYPE", seed=5, config=GenerationConfig(age=0.0))
        lifespan = instance.lifespan
        instance = stars.generate("G_TYPE", seed=5, config=GenerationConfig(age=0.5 * lifespan))
        assert instance.stage == EvolutionStage.MAIN_PHASE
        assert instance.traits == registries.stars.lookup("G_TYPE").traits

    def test_past_lifespan_is_terminal(self, stars):
        instance = stars.generate("M_TYPE", seed=9)
        old = stars.generate("M_TYPE", seed=9, config=GenerationConfig(age=instance.lifespan * 2))
        assert old.stage == EvolutionStage.REMNANT
        assert old.is_terminal

    @pytest.mark.parametrize("class_id", ["WHITE_DWARF", "NEUTRON_STAR", "BLACK_HOLE"])
    def test_compact_traits_ignore_stage(self, stars, registries, class_id):
        instance = stars.generate(class_id, seed=1, config=GenerationConfig(age=0.0))
        assert instance.stage == EvolutionStage.FORMATION
        assert instance.traits == registries.stars.lookup(class_id).traits

    def test_stage_traits_helper(self, registries):
        definition = registries.stars.lookup("K_TYPE")
        assert stage_traits(definition, EvolutionStage.FORMATION).accretion_disk
        assert stage_traits(definition, EvolutionStage.MAIN_PHASE) == definition.traits

    def test_companion_disabled(self, stars):
        for seed in range(30):
            instance = stars.generate("G_TYPE", seed=seed, config=GenerationConfig(allow_companion=False))
            assert instance.companion is None

    def test_companions_occur(self, stars, registries):
        companions = [stars.generate("G_TYPE", seed=seed).companion for seed in range(60)]
        found = [c for c in companions if c is not None]
        assert 0 < len(found) < 60
        for companion in found:
            assert companion.class_id in registries.stars
            assert 1.0 <= companion.separation <= 11.0
            assert companion.orbital_period > 0

    def test_physics_bundle(self, stars):
        instance = stars.generate("G_TYPE", seed=11)
        inner, outer = instance.physics.habitable_zone
        assert 0 < inner < outer
        assert instance.physics.lifespan == instance.lifespan
        assert instance.kind == BodyKind.STAR


class TestPlanetGenerator:
    """Test planet-specific generation."""

    def test_terrestrial_main_phase_habitability(self, planets):
        first = planets.generate("TERRESTRIAL", seed=42)
        config = GenerationConfig(age=0.5 * first.lifespan, star_distance=1.0)
        instance = planets.generate("TERRESTRIAL", seed=42, config=config)
        assert instance.stage == EvolutionStage.MAIN_PHASE
        assert instance.physics.star_distance == 1.0
        assert instance.physics.distance_modifier == 1.0
        assert instance.habitability == pytest.approx(80.0)

    def test_out_of_range_distance_halves_habitability(self, planets):
        first = planets.generate("TERRESTRIAL", seed=42)
        config = GenerationConfig(age=0.5 * first.lifespan, star_distance=10.0)
        instance = planets.generate("TERRESTRIAL", seed=42, config=config)
        assert instance.physics.distance_modifier == OUT_OF_RANGE_DISTANCE_MODIFIER
        assert instance.habitability == pytest.approx(40.0)

    def test_host_from_class(self, planets, registries):
        definition = registries.planets.lookup("TERRESTRIAL")
        for seed in range(10):
            instance = planets.generate("TERRESTRIAL", seed=seed)
            assert instance.physics.host_star_type in definition.host_star_types
            assert instance.physics.host_luminosity > 0
            low = definition.prop("star_distance_min")
            high = definition.prop("star_distance_max")
            assert low <= instance.physics.star_distance <= high

    def test_rogue_planet(self, planets):
        instance = planets.generate("ROGUE_PLANET", seed=4)
        assert instance.physics.host_star_type is None
        assert instance.physics.host_luminosity == 0.0
        assert instance.physics.habitable_zone == (0.0, 0.0)
        assert not instance.physics.in_habitable_zone
        assert instance.lifespan == ROGUE_PLANET_LIFESPAN

    def test_biomes_recorded(self, planets):
        instance = planets.generate("TERRESTRIAL", seed=1)
        assert instance.extras["biomes"][0] == "temperate"


class TestGalaxyGenerator:
    """Test galaxy-specific generation."""

    def test_mass_budget(self, galaxies):
        instance = galaxies.generate("SPIRAL_SB", seed=8)
        bundle = instance.physics
        assert bundle.total_mass > bundle.stellar_mass
        assert bundle.dark_matter_mass == pytest.approx(bundle.total_mass - bundle.stellar_mass)
        assert bundle.luminosity > 0
        assert bundle.star_count > 0

    def test_class_layout_recorded(self, galaxies):
        instance = galaxies.generate("SPIRAL_SB", seed=8)
        layout = instance.extras["layout"]
        assert layout["arms"] >= 1
        assert 0.1 <= layout["randomness"] <= 0.4
        assert "morphology" in instance.extras

    @pytest.mark.parametrize("class_id", ["SPIRAL_SB", "ELLIPTICAL_E4", "DWARF_ELLIPTICAL", "STARBURST"])
    def test_age_within_universe(self, galaxies, class_id):
        definition = galaxies.registry.get(class_id)
        for seed in range(50):
            instance = galaxies.generate(class_id, seed=seed)
            assert instance.age / 1000.0 <= 13.8
            age_range = definition.ranges["age_gyr"]
            assert age_range.min - 1e-9 <= instance.age / 1000.0 <= age_range.max + 1e-9
            assert instance.physics.redshift > 0.0
            assert instance.stage != EvolutionStage.REMNANT

    def test_pinned_galaxy_age(self, galaxies):
        instance = galaxies.generate("SPIRAL_SB", seed=1, config=GenerationConfig(age=500.0))
        assert instance.age == 500.0
        assert instance.stage == EvolutionStage.FORMATION
        assert instance.physics.redshift == pytest.approx((13.8 - 0.5) / 5.0)

    def test_active_nucleus_eddington_ratio(self, galaxies):
        for seed in range(5):
            assert 0.01 <= galaxies.generate("QUASAR", seed=seed).physics.eddington_ratio <= 1.0
            assert galaxies.generate("SPIRAL_SB", seed=seed).physics.eddington_ratio == pytest.approx(0.001)
