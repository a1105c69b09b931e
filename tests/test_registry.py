"""Tests for class definitions and registries."""

import pytest
from pydantic import ValidationError

from py_cosmogen.core.errors import ClassNotFoundError
from py_cosmogen.core.galaxy_types import characteristic_size, classify_by_mass
from py_cosmogen.core.lehmer_prng import LehmerPRNG
from py_cosmogen.core.registry import (
    BaseShape,
    BodyKind,
    ClassDefinition,
    ClassRegistry,
    EvolutionStage,
    HabitabilityProfile,
    ResourceWeight,
    ValueRange,
    build_default_registries,
    combine_habitability,
)


@pytest.fixture(scope="module")
def registries():
    return build_default_registries()


class TestCatalogs:
    """Test the built-in catalogs."""

    def test_catalog_sizes(self, registries):
        assert len(registries.stars) == 12
        assert len(registries.planets) == 10
        assert len(registries.galaxies) == 7

    def test_definitions_belong_to_their_kind(self, registries):
        for kind in BodyKind:
            for definition in registries.for_kind(kind):
                assert definition.kind == kind

    def test_ranges_ordered(self, registries):
        """Every declared range has min <= max."""
        for registry in registries:
            for definition in registry:
                for value_range in definition.ranges.values():
                    assert value_range.min <= value_range.max

    def test_resource_weights_in_unit_interval(self, registries):
        for registry in registries:
            for definition in registry:
                for resource in definition.resources:
                    assert 0.0 <= resource.weight <= 1.0

    def test_range_keys_per_kind(self, registries):
        expected = {
            BodyKind.STAR: ["mass", "radius", "temperature", "luminosity"],
            BodyKind.PLANET: ["mass", "radius", "density", "temperature"],
            BodyKind.GALAXY: ["log_stellar_mass", "size", "star_formation_rate", "metallicity", "age_gyr"],
        }
        for kind, keys in expected.items():
            for definition in registries.for_kind(kind):
                assert list(definition.ranges) == keys

    def test_planet_hosts_are_known_letters(self, registries):
        for definition in registries.planets:
            assert set(definition.host_star_types) <= set("OBAFGKM")

    def test_terrestrial_habitability(self, registries):
        """Equal weights make the overall score the exact mean."""
        terrestrial = registries.planets.lookup("TERRESTRIAL")
        assert terrestrial.habitability.sub_scores() == {
            "temperature": 70,
            "atmosphere": 80,
            "radiation": 85,
            "gravity": 90,
            "water": 75,
        }
        assert terrestrial.habitability.overall == 80.0

    def test_stage_factor_fallback(self, registries):
        g_type = registries.stars.lookup("G_TYPE")
        for stage in EvolutionStage:
            factor = g_type.physics.factor(stage)
            assert factor.wind >= 0
            assert factor.mass_loss >= 0


class TestClassRegistry:
    """Test registry lookup and selection."""

    def test_lookup_unknown_raises(self, registries):
        with pytest.raises(ClassNotFoundError) as info:
            registries.stars.lookup("NOT_A_STAR")
        assert info.value.class_id == "NOT_A_STAR"
        assert isinstance(info.value, KeyError)

    def test_get_unknown_returns_default_argument(self, registries):
        assert registries.stars.get("NOT_A_STAR") is None

    def test_defaults(self, registries):
        assert registries.stars.default().id == "G_TYPE"
        assert registries.planets.default().id == "TERRESTRIAL"
        assert registries.galaxies.default().id == "SPIRAL_SB"

    def test_find_across_kinds(self, registries):
        assert registries.find("QUASAR").kind == BodyKind.GALAXY
        with pytest.raises(ClassNotFoundError):
            registries.find("UNKNOWN")

    def test_weighted_selection_is_deterministic(self, registries):
        picks_a = [registries.planets.weighted_random_class(LehmerPRNG(s)).id for s in range(30)]
        picks_b = [registries.planets.weighted_random_class(LehmerPRNG(s)).id for s in range(30)]
        assert picks_a == picks_b

    def test_weighted_selection_favors_common_classes(self, registries):
        rng = LehmerPRNG(2024)
        counts = {}
        for _ in range(2000):
            class_id = registries.planets.weighted_random_class(rng).id
            counts[class_id] = counts.get(class_id, 0) + 1
        # TERRESTRIAL (0.4) is far more common than ROGUE_PLANET (0.03)
        assert counts.get("TERRESTRIAL", 0) > counts.get("ROGUE_PLANET", 0)

    def test_rejects_wrong_kind(self, registries):
        with pytest.raises(ValueError):
            ClassRegistry(BodyKind.PLANET, list(registries.stars), "G_TYPE")

    def test_rejects_unknown_default(self, registries):
        with pytest.raises(ValueError):
            ClassRegistry(BodyKind.STAR, list(registries.stars), "MISSING")


class TestClassDefinition:
    """Test definition validation."""

    def test_inverted_range_rejected(self):
        with pytest.raises(ValidationError):
            ClassDefinition(
                id="BAD", name="Bad", kind=BodyKind.STAR, ranges={"mass": (2.0, 1.0)}, formation_probability=0.1
            )

    def test_resource_weight_rejected(self):
        with pytest.raises(ValidationError):
            ClassDefinition(
                id="BAD",
                name="Bad",
                kind=BodyKind.STAR,
                ranges={"mass": (1.0, 2.0)},
                formation_probability=0.1,
                resources=(ResourceWeight("gold", 1.5),),
            )

    def test_tables_read_only(self, registries):
        definition = registries.stars.lookup("G_TYPE")
        with pytest.raises(TypeError):
            definition.ranges["mass"] = ValueRange(5.0, 1.0)
        with pytest.raises(TypeError):
            definition.properties["flare_rate"] = 1.0
        assert definition.range_of("mass").min <= definition.range_of("mass").max
        assert isinstance(definition.model_dump()["ranges"], dict)

    def test_empty_properties_read_only(self):
        definition = ClassDefinition(
            id="BARE", name="Bare", kind=BodyKind.STAR, ranges={"mass": (1.0, 2.0)}, formation_probability=0.1
        )
        with pytest.raises(TypeError):
            definition.properties["anything"] = 1.0
        assert definition.prop("anything", 3.0) == 3.0

    def test_sub_score_bounds(self):
        with pytest.raises(ValidationError):
            HabitabilityProfile(temperature=120)

    def test_combine_habitability_clamped(self):
        scores = {"temperature": 100, "atmosphere": 100, "radiation": 100, "gravity": 100, "water": 100}
        assert combine_habitability(scores) == 100.0


class TestGalaxyHelpers:
    """Test mass-based galaxy helpers."""

    def test_characteristic_size_reference(self):
        assert characteristic_size(1e11, BaseShape.DISK) == pytest.approx(3.0)

    def test_characteristic_size_grows_with_mass(self):
        for shape in (BaseShape.DISK, BaseShape.ELLIPSOID, BaseShape.IRREGULAR):
            assert characteristic_size(1e12, shape) > characteristic_size(1e10, shape)

    def test_mass_classes(self):
        assert classify_by_mass(5e7) == "ultra-dwarf"
        assert classify_by_mass(5e10) == "intermediate"
        assert classify_by_mass(5e12) == "giant"
