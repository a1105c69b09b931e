"""
Configuration for celestial generation.
"""

from .config import Settings, settings
from .options import (
    DEFAULT_GALAXY_LAYOUT,
    DEFAULT_GENERATION_CONFIG,
    DEFAULT_RENDER_CONFIG,
    GalaxyLayoutConfig,
    GenerationConfig,
    RenderConfig,
    coerce_config,
)

__all__ = ['Settings', 'settings', 'GenerationConfig', 'RenderConfig', 'GalaxyLayoutConfig',
           'DEFAULT_GENERATION_CONFIG', 'DEFAULT_RENDER_CONFIG', 'DEFAULT_GALAXY_LAYOUT',
           'coerce_config']
