"""
Error taxonomy for celestial generation.

Every public entry point recovers from these locally:
- ClassNotFoundError: substitute the documented default class
- InvalidConfigError: option values that cannot be clamped; the options fall back to defaults
- GenerationFailure: fall back to a minimal primitive flagged as degraded
"""

from typing import Optional


class CosmogenError(Exception):
    """Base class for generator errors."""


class ClassNotFoundError(CosmogenError, KeyError):
    """Unknown class identifier."""

    def __init__(self, class_id: str, kind: Optional[str] = None):
        self.class_id = class_id
        self.kind = kind
        where = f" in {kind} registry" if kind else ""
        super().__init__(f"Unknown class '{class_id}'{where}")

    def __str__(self) -> str:
        return self.args[0]


class InvalidConfigError(CosmogenError, ValueError):
    """Configuration value outside its valid domain."""

    def __init__(self, field: str, value, message: Optional[str] = None):
        self.field = field
        self.value = value
        super().__init__(message or f"Invalid value for '{field}': {value!r}")


class GenerationFailure(CosmogenError, RuntimeError):
    """Mesh construction failed for a generated instance."""

    def __init__(self, message: str, class_id: Optional[str] = None):
        self.class_id = class_id
        super().__init__(message)
