"""Tests for galaxy themes, quality tiers and random variants."""

import pytest

from py_cosmogen.config.options import GalaxyLayoutConfig
from py_cosmogen.core.galaxy_themes import (
    QUALITY_TIERS,
    THEMES,
    contrast_ratio,
    has_sufficient_contrast,
    random_variant_layout,
    relative_luminance,
    themed_layout,
)
from py_cosmogen.core.lehmer_prng import LehmerPRNG
from py_cosmogen.core.placement import hex_to_rgb


class TestContrast:
    """Test WCAG luminance and contrast."""

    def test_luminance_extremes(self):
        assert relative_luminance(0x000000) == 0.0
        assert relative_luminance(0xFFFFFF) == pytest.approx(1.0)

    def test_black_white_ratio(self):
        assert contrast_ratio(0xFFFFFF, 0x000000) == pytest.approx(21.0)
        assert contrast_ratio(0x000000, 0xFFFFFF) == pytest.approx(21.0)
        assert contrast_ratio(0x123456, 0x123456) == pytest.approx(1.0)

    def test_cosmic_theme_passes(self):
        cosmic = THEMES["cosmic"]
        assert has_sufficient_contrast(cosmic.inside_color, cosmic.outside_color)

    @pytest.mark.parametrize("name", ["tropical", "desert"])
    def test_low_contrast_themes(self, name):
        theme = THEMES[name]
        assert not has_sufficient_contrast(theme.inside_color, theme.outside_color)

    def test_low_contrast_theme_still_applies(self):
        layout = themed_layout("tropical")
        assert layout.inside_color == THEMES["tropical"].inside_color


class TestThemedLayout:
    """Test theme and quality tier application."""

    @pytest.mark.parametrize("quality", list(QUALITY_TIERS))
    def test_quality_tiers(self, quality):
        tier = QUALITY_TIERS[quality]
        layout = themed_layout(quality=quality)
        assert layout.star_count == tier.star_count
        assert layout.low_poly == tier.low_poly
        assert layout.arms == tier.arms

    def test_theme_arms_override_tier(self):
        layout = themed_layout("volcanic", "high")
        assert layout.arms == 2
        assert layout.star_count == 25000
        assert layout.spin == 2.5
        assert layout.randomness == 0.4

    def test_theme_without_arms_keeps_tier_arms(self):
        assert themed_layout("cosmic", "ultra").arms == 5

    def test_tier_arms_disabled(self):
        base = GalaxyLayoutConfig(arms=7)
        assert themed_layout(None, "minimal", base=base, tier_arms=False).arms == 7
        assert themed_layout(None, "minimal", base=base).arms == 2

    def test_unknown_theme_keeps_base_colors(self):
        base = GalaxyLayoutConfig(inside_color=0x010203)
        layout = themed_layout("plaid", "low", base=base)
        assert layout.inside_color == 0x010203
        assert layout.star_count == 8000

    def test_unknown_quality_keeps_base_count(self):
        base = GalaxyLayoutConfig(star_count=1234)
        assert themed_layout(quality="extreme", base=base).star_count == 1234

    def test_base_fields_preserved(self):
        base = GalaxyLayoutConfig(radius=42.0, thickness=0.3)
        layout = themed_layout("ocean", "medium", base=base)
        assert layout.radius == 42.0
        assert layout.thickness == 0.3


class TestRandomVariant:
    """Test random variant layouts."""

    @pytest.mark.parametrize("seed", range(10))
    def test_ranges(self, seed):
        layout = random_variant_layout(LehmerPRNG(seed))
        assert 2 <= layout.arms <= 5
        assert -3.0 <= layout.spin <= 3.0
        assert 0.1 <= layout.randomness <= 0.5

    @pytest.mark.parametrize("seed", range(10))
    def test_warm_inside_color(self, seed):
        r, g, b = hex_to_rgb(random_variant_layout(LehmerPRNG(seed)).inside_color)
        assert r >= g >= b

    def test_deterministic(self):
        assert random_variant_layout(LehmerPRNG(5)) == random_variant_layout(LehmerPRNG(5))

    def test_keeps_base_count(self):
        base = GalaxyLayoutConfig(star_count=999)
        assert random_variant_layout(LehmerPRNG(1), base).star_count == 999
