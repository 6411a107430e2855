"""Terrain Bounded Context.

Responsible for elevation queries against a regular DEM grid:
- Value Objects: TerrainGrid, DemMetadata
- Services: elevation_at, GridSampler, describe_grid
"""

from dem_mapping.terrain.errors import (
    InvalidGridError,
    InvalidResolutionError,
    TerrainError,
)
from dem_mapping.terrain.services import GridSampler, describe_grid, elevation_at
from dem_mapping.terrain.value_objects import DemMetadata, TerrainGrid

__all__ = [
    "DemMetadata",
    "GridSampler",
    "InvalidGridError",
    "InvalidResolutionError",
    "TerrainError",
    "TerrainGrid",
    "describe_grid",
    "elevation_at",
]
