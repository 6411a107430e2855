"""Terrain Bounded Context - Error Hierarchy.

Custom exceptions for terrain operations.

All of these are construction-time errors: they are raised while a
TerrainGrid or GridSampler is being built and never from elevation queries.
"""

from __future__ import annotations


class TerrainError(Exception):
    """Base error for terrain operations."""


class InvalidGridError(TerrainError):
    """Grid dimensions, buffer length or array shape are malformed."""


class InvalidResolutionError(TerrainError):
    """Grid spacing is not a positive finite number.

    Attributes:
        resolution: The offending spacing value
    """

    def __init__(self, resolution: float) -> None:
        self.resolution = resolution
        super().__init__(f"Resolution must be positive and finite, got {resolution!r}")
