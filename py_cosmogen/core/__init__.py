"""
Core celestial generation functionality.
"""

from .lehmer_prng import LehmerPRNG
from .errors import ClassNotFoundError, CosmogenError, GenerationFailure, InvalidConfigError
from .registry import BodyKind, ClassDefinition, ClassRegistry, EvolutionStage, Registries, build_default_registries
from .instance import GeneratedInstance
from .render_cache import MeshHandle, RenderCache

__all__ = ['LehmerPRNG', 'CosmogenError', 'ClassNotFoundError', 'InvalidConfigError', 'GenerationFailure',
           'BodyKind', 'ClassDefinition', 'ClassRegistry', 'EvolutionStage', 'Registries',
           'build_default_registries', 'GeneratedInstance', 'MeshHandle', 'RenderCache']
