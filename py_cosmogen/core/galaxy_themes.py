"""
Galaxy palettes, quality tiers and random variants.

This module implements:
- Seven themed palettes with spin, randomness and arm overrides
- WCAG relative luminance and contrast checks for boundary colors
- Quality tiers mapping to star count, low-poly flag, arms and triangulation detail
- Random variant layouts with warm/cool boundary colors
"""

import colorsys
import math
import structlog
from typing import Dict, NamedTuple, Optional

from .lehmer_prng import LehmerPRNG
from .placement import hex_to_rgb, rgb_to_hex
from ..config.options import GalaxyLayoutConfig

logger = structlog.get_logger()

MIN_CONTRAST_RATIO = 2.0


class GalaxyTheme(NamedTuple):
    """Boundary colors and layout overrides for a themed galaxy."""

    inside_color: int
    outside_color: int
    spin: float
    randomness: float
    arms: Optional[int] = None


class QualityTier(NamedTuple):
    """Scatter budget for a quality level."""

    star_count: int
    low_poly: bool
    arms: int
    triangulation_level: int  # 0 disables decimated LOD tiers


THEMES: Dict[str, GalaxyTheme] = {
    "temperate": GalaxyTheme(0x7CFC00, 0x1E90FF, spin=1.2, randomness=0.15),
    "tropical": GalaxyTheme(0x32CD32, 0xFF1493, spin=1.4, randomness=0.25),
    "desert": GalaxyTheme(0xDAA520, 0xFF4500, spin=1.8, randomness=0.3),
    "arctic": GalaxyTheme(0xE8F4F8, 0x40E0D0, spin=0.8, randomness=0.1, arms=6),
    "volcanic": GalaxyTheme(0xFF4500, 0x330000, spin=2.5, randomness=0.4, arms=2),
    "ocean": GalaxyTheme(0x1E90FF, 0x000080, spin=1.0, randomness=0.2, arms=4),
    "cosmic": GalaxyTheme(0xFFD700, 0x4B0082, spin=1.0, randomness=0.2),
}

QUALITY_TIERS: Dict[str, QualityTier] = {
    "ultra": QualityTier(50000, True, 5, 4),
    "high": QualityTier(25000, True, 4, 3),
    "medium": QualityTier(15000, True, 3, 2),
    "low": QualityTier(8000, False, 3, 1),
    "minimal": QualityTier(3000, False, 2, 0),
}


def relative_luminance(color: int) -> float:
    """WCAG 2 relative luminance of a 0xRRGGBB color."""
    channels = []
    for c in hex_to_rgb(color):
        channels.append(c / 12.92 if c <= 0.03928 else math.pow((c + 0.055) / 1.055, 2.4))
    r, g, b = channels
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(first: int, second: int) -> float:
    """WCAG contrast ratio in [1, 21]."""
    lighter, darker = sorted((relative_luminance(first), relative_luminance(second)), reverse=True)
    return (lighter + 0.05) / (darker + 0.05)


def has_sufficient_contrast(inside: int, outside: int) -> bool:
    return contrast_ratio(inside, outside) > MIN_CONTRAST_RATIO


def themed_layout(
    theme: Optional[str] = None,
    quality: str = "medium",
    base: Optional[GalaxyLayoutConfig] = None,
    tier_arms: bool = True,
) -> GalaxyLayoutConfig:
    """
    Layout combining a base config, a quality tier and a theme.

    The quality tier sets the star count, low-poly flag and (with
    ``tier_arms``) the arm count; the theme then overrides colors, spin,
    randomness and, where it names one, the arm count. Unknown theme or
    quality names are ignored with a warning.

    Args:
        theme: Palette name or None for the base colors
        quality: Quality tier name
        base: Layout to start from
        tier_arms: Take the arm count from the quality tier

    Returns:
        New GalaxyLayoutConfig
    """
    values = (base or GalaxyLayoutConfig()).model_dump()

    tier = QUALITY_TIERS.get(quality)
    if tier is None:
        logger.warning("Unknown quality tier, keeping base layout", quality=quality)
    else:
        values.update(star_count=tier.star_count, low_poly=tier.low_poly)
        if tier_arms:
            values["arms"] = tier.arms

    if theme is not None:
        palette = THEMES.get(theme)
        if palette is None:
            logger.warning("Unknown galaxy theme, keeping base colors", theme=theme)
        else:
            values.update(
                inside_color=palette.inside_color,
                outside_color=palette.outside_color,
                spin=palette.spin,
                randomness=palette.randomness,
            )
            if palette.arms is not None:
                values["arms"] = palette.arms
            if not has_sufficient_contrast(palette.inside_color, palette.outside_color):
                logger.warning("Low contrast galaxy theme", theme=theme)

    return GalaxyLayoutConfig(**values)


def _hsl_color(hue_degrees: float, saturation: float, lightness: float) -> int:
    r, g, b = colorsys.hls_to_rgb((hue_degrees % 360.0) / 360.0, lightness, saturation)
    return rgb_to_hex((r, g, b))


def random_variant_layout(rng: LehmerPRNG, base: Optional[GalaxyLayoutConfig] = None) -> GalaxyLayoutConfig:
    """
    Random spiral layout variant.

    Draws 2-5 arms, spin in [-3, 3], randomness in [0.1, 0.5], a warm
    inside color (hue 0-60) and a cool outside color (hue 180-360).

    Args:
        rng: Random stream
        base: Layout supplying every other field

    Returns:
        New GalaxyLayoutConfig
    """
    values = (base or GalaxyLayoutConfig()).model_dump()
    values.update(
        arms=2 + int(rng.random() * 4),
        spin=rng.random() * 6.0 - 3.0,
        randomness=0.1 + rng.random() * 0.4,
        inside_color=_hsl_color(rng.random() * 60.0, 0.8, 0.6),
        outside_color=_hsl_color(180.0 + rng.random() * 180.0, 0.8, 0.6),
    )
    return GalaxyLayoutConfig(**values)
