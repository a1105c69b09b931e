"""
Procedural generation of stars, planets and galaxies.
"""

__version__ = "0.1.0"
