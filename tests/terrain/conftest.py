"""Pytest configuration for terrain domain tests.

Grids are built directly from numpy arrays; terrain tests never touch the
filesystem.
"""

from __future__ import annotations

import numpy as np
import pytest

from dem_mapping.terrain.value_objects import REFERENCE_GRID_SHAPE, TerrainGrid


@pytest.fixture
def peak_grid() -> TerrainGrid:
    """3x3 grid, origin (0, 0), resolution 10, single 100 m peak in the center."""
    data = np.array(
        [[0.0, 0.0, 0.0], [0.0, 100.0, 0.0], [0.0, 0.0, 0.0]], dtype=np.float64
    )
    return TerrainGrid(elevations=data, origin_x=0.0, origin_y=0.0, resolution=10.0)


@pytest.fixture
def reference_grid() -> TerrainGrid:
    """101x101 synthetic hills at 10 m spacing, UTM-like origin."""
    rows, cols = REFERENCE_GRID_SHAPE
    yy, xx = np.mgrid[0:rows, 0:cols]
    rng = np.random.default_rng(42)
    data = (
        200.0
        + 50.0 * np.sin(xx / 12.0)
        + 30.0 * np.cos(yy / 9.0)
        + rng.normal(0.0, 2.0, size=(rows, cols))
    )
    return TerrainGrid(
        elevations=data.astype(np.float64),
        origin_x=500000.0,
        origin_y=5400000.0,
        resolution=10.0,
    )
