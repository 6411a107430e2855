"""Terrain Bounded Context - Domain Services.

Pure domain logic for elevation queries against a TerrainGrid.
NO I/O operations - grids are built and handed in by the caller.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from dem_mapping.terrain.errors import InvalidGridError
from dem_mapping.terrain.value_objects import DemMetadata, TerrainGrid

# Module-level logger (reused across all calls)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Bilinear Interpolation
# ---------------------------------------------------------------------------
def elevation_at(grid: TerrainGrid, x: float, y: float) -> float:
    """Interpolate elevation at an arbitrary world coordinate.

    Blends the four grid nodes surrounding (x, y) with bilinear weights.

    Boundary behavior:
        Continuous grid coordinates are clamped to the footprint before the
        base cell is chosen, so the cell always lies inside the grid and both
        weights stay in [0, 1]. A query outside the footprint returns the
        value on the nearest edge (flat extrapolation), never a slope
        continued past the boundary. Every finite (x, y) yields a value, even
        when the offset overflows to +-inf in grid units.

    Stored NaN/Inf elevations are not filtered: a non-finite corner makes the
    result non-finite, even when its weight is zero.

    Args:
        grid: TerrainGrid with elevation data
        x: World X coordinate (finite)
        y: World Y coordinate (finite)

    Returns:
        Interpolated elevation
    """
    rows, cols = grid.elevations.shape

    # Continuous grid coordinates, saturated to the grid footprint. Clamping
    # before the floor keeps huge offsets (which may divide out to +-inf)
    # on the edge node.
    col_f = (float(x) - grid.origin_x) / grid.resolution
    row_f = (float(y) - grid.origin_y) / grid.resolution
    col_f = min(max(col_f, 0.0), cols - 1.0)
    row_f = min(max(row_f, 0.0), rows - 1.0)

    # Base cell; the last node is reached through the last cell at weight 1
    col0 = min(math.floor(col_f), cols - 2)
    row0 = min(math.floor(row_f), rows - 2)

    # Fractional weights, in [0, 1] by construction
    wx = col_f - col0
    wy = row_f - row0

    data = grid.elevations
    z00 = float(data[row0, col0])
    z10 = float(data[row0, col0 + 1])
    z01 = float(data[row0 + 1, col0])
    z11 = float(data[row0 + 1, col0 + 1])

    # Blend along X on both rows, then along Y; a flat cell reproduces its
    # value exactly
    bottom = z00 + wx * (z10 - z00)
    top = z01 + wx * (z11 - z01)
    return bottom + wy * (top - bottom)


class GridSampler:
    """Elevation sampler bound to one shared, read-only TerrainGrid.

    Holds the grid by reference and keeps no per-query state, so a single
    sampler can serve any number of threads. Batches are a plain loop or
    executor map over ``elevation_at``.

    Parameters
    ----------
    grid: TerrainGrid
        The grid to sample.
    expected_shape: tuple[int, int] | None
        Optional fixed (rows, cols) for the deployment, e.g.
        REFERENCE_GRID_SHAPE. A grid of any other shape raises
        InvalidGridError here.
    """

    def __init__(
        self, grid: TerrainGrid, expected_shape: tuple[int, int] | None = None
    ) -> None:
        if expected_shape is not None and grid.shape != tuple(expected_shape):
            raise InvalidGridError(
                f"Grid shape {grid.shape} does not match expected "
                f"{tuple(expected_shape)}"
            )
        self._grid = grid
        logger.debug(
            "GridSampler bound to %dx%d grid at (%g, %g), resolution %g",
            grid.rows,
            grid.cols,
            grid.origin_x,
            grid.origin_y,
            grid.resolution,
        )

    @property
    def grid(self) -> TerrainGrid:
        return self._grid

    def elevation_at(self, x: float, y: float) -> float:
        """Return the bilinearly interpolated elevation at world (x, y)."""
        return elevation_at(self._grid, x, y)


# ---------------------------------------------------------------------------
# Descriptive Metadata
# ---------------------------------------------------------------------------
def describe_grid(grid: TerrainGrid, terrain_type: str = "") -> DemMetadata:
    """Compute descriptive metadata for a grid.

    Extents are the world coordinates of the first and last nodes.
    Statistics cover finite elevations only; the standard deviation is the
    sample one (ddof=1), and a single finite value gives 0.0.

    Args:
        grid: TerrainGrid to describe
        terrain_type: Free-form tag stored on the result

    Returns:
        DemMetadata for the grid
    """
    x_min, y_min = grid.node_coordinates(0, 0)
    x_max, y_max = grid.node_coordinates(grid.rows - 1, grid.cols - 1)

    valid = grid.elevations[np.isfinite(grid.elevations)]
    if valid.size == 0:
        logger.warning(
            "Grid %dx%d has no finite elevations; statistics are NaN",
            grid.rows,
            grid.cols,
        )
        nan = float("nan")
        stats = (nan, nan, nan, nan)
    else:
        std = float(np.std(valid, ddof=1)) if valid.size > 1 else 0.0
        stats = (
            float(valid.min()),
            float(valid.max()),
            float(valid.mean()),
            std,
        )

    min_elevation, max_elevation, mean_elevation, std_elevation = stats
    return DemMetadata(
        x_min=x_min,
        x_max=x_max,
        y_min=y_min,
        y_max=y_max,
        min_elevation=min_elevation,
        max_elevation=max_elevation,
        mean_elevation=mean_elevation,
        std_elevation=std_elevation,
        terrain_type=terrain_type,
    )
