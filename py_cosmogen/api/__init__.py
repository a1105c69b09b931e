"""
Public generation and rendering interface.
"""

from .main import (
    CelestialEngine,
    class_info,
    clear_cache,
    configure_logging,
    dispose,
    generate,
    get_engine,
    list_classes,
    render,
)

__all__ = ['CelestialEngine', 'configure_logging', 'get_engine', 'generate', 'render', 'dispose',
           'clear_cache', 'list_classes', 'class_info']
