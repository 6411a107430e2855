"""Terrain Bounded Context - Value Objects.

Immutable data structures describing a DEM grid.
All validation occurs at construction time via Pydantic.

Axis convention used throughout the terrain context: grid columns follow
world X and grid rows follow world Y, so ``elevations[row, col]`` is the node
at ``(origin_x + col * resolution, origin_y + row * resolution)``.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Literal

import numpy as np
from affine import Affine
from numpy.typing import ArrayLike, NDArray
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from dem_mapping.terrain.errors import InvalidGridError, InvalidResolutionError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Grid Constants
# ---------------------------------------------------------------------------
MIN_GRID_DIM = 2  # Bilinear needs an upper neighbour on both axes
REFERENCE_GRID_SHAPE = (101, 101)  # Fixed (rows, cols) of the reference deployment

# Relative tolerance when comparing mesh spacing against the declared resolution
MESH_SPACING_RTOL = 1e-6


def _check_resolution(resolution: float) -> None:
    """Raise InvalidResolutionError unless resolution is positive and finite."""
    if not math.isfinite(resolution) or resolution <= 0:
        raise InvalidResolutionError(resolution)


class DemMetadata(BaseModel):
    """Descriptive DEM metadata (Value Object).

    Carried alongside a TerrainGrid for reporting. Nothing in the sampling
    path reads these fields.
    """

    x_min: float
    x_max: float
    y_min: float
    y_max: float
    min_elevation: float  # NaN when the grid holds no finite values
    max_elevation: float
    mean_elevation: float
    std_elevation: float  # Sample standard deviation (ddof=1)
    terrain_type: str = ""  # Free-form tag, e.g. "hills"

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_extent(self) -> "DemMetadata":
        if not (self.x_min <= self.x_max):
            raise ValueError(
                f"Invalid x ordering: x_min={self.x_min} > x_max={self.x_max}"
            )
        if not (self.y_min <= self.y_max):
            raise ValueError(
                f"Invalid y ordering: y_min={self.y_min} > y_max={self.y_max}"
            )
        return self


class TerrainGrid(BaseModel):
    """Immutable regular elevation grid (Value Object).

    The elevation array is copied and made read-only at construction time.
    Attempts to modify it afterwards raise ValueError, so a grid can be
    shared freely between threads.

    Stored elevations are not inspected: NaN or Inf nodes are accepted and
    propagate into any interpolation that touches them.
    """

    elevations: NDArray[np.float64]  # 2D float64 array (rows x cols), read-only
    origin_x: float  # World X of node (0, 0)
    origin_y: float  # World Y of node (0, 0)
    resolution: float  # Node spacing in world units
    metadata: DemMetadata | None = None  # Informational only

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def validate_grid(self) -> "TerrainGrid":
        # 2D array
        if self.elevations.ndim != 2:
            raise ValueError(f"Elevations must be 2D, got {self.elevations.ndim}D")
        # Room for an upper neighbour on both axes
        rows, cols = self.elevations.shape
        if rows < MIN_GRID_DIM or cols < MIN_GRID_DIM:
            raise ValueError(
                f"Grid must be at least {MIN_GRID_DIM}x{MIN_GRID_DIM}, got {rows}x{cols}"
            )
        # dtype
        if self.elevations.dtype != np.float64:
            raise ValueError(f"Elevations must be float64, got {self.elevations.dtype}")
        # Spacing
        if not math.isfinite(self.resolution) or self.resolution <= 0:
            raise ValueError(
                f"Resolution must be positive and finite: {self.resolution}"
            )
        # Origin
        if not (math.isfinite(self.origin_x) and math.isfinite(self.origin_y)):
            raise ValueError(
                f"Origin must be finite: ({self.origin_x}, {self.origin_y})"
            )

        # Own a contiguous copy and freeze it; the caller's array is never
        # touched, and nobody can write through the grid afterwards.
        immutable = np.array(self.elevations, dtype=np.float64, copy=True, order="C")
        immutable.flags.writeable = False
        object.__setattr__(self, "elevations", immutable)

        return self

    # -----------------------------------------------------------------------
    # Derived geometry
    # -----------------------------------------------------------------------
    @property
    def rows(self) -> int:
        return int(self.elevations.shape[0])

    @property
    def cols(self) -> int:
        return int(self.elevations.shape[1])

    @property
    def shape(self) -> tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def transform(self) -> Affine:
        """Affine mapping from (col, row) grid coordinates to world (x, y)."""
        return Affine.translation(self.origin_x, self.origin_y) @ Affine.scale(
            self.resolution
        )

    def node_coordinates(self, row: int, col: int) -> tuple[float, float]:
        """Return the world (x, y) of grid node (row, col)."""
        x, y = self.transform @ (col, row)
        return (float(x), float(y))

    # -----------------------------------------------------------------------
    # Constructors for loader-shaped inputs
    # -----------------------------------------------------------------------
    @classmethod
    def from_buffer(
        cls,
        elevations: ArrayLike,
        rows: int,
        cols: int,
        *,
        origin_x: float,
        origin_y: float,
        resolution: float,
        order: Literal["C", "F"] = "C",
        metadata: DemMetadata | None = None,
    ) -> "TerrainGrid":
        """Build a grid from a flat elevation buffer.

        Args:
            elevations: 1D buffer of rows * cols values
            rows: Number of grid rows (world Y axis)
            cols: Number of grid columns (world X axis)
            origin_x: World X of node (0, 0)
            origin_y: World Y of node (0, 0)
            resolution: Node spacing in world units
            order: "C" for row-major buffers, "F" for column-major buffers
            metadata: Optional descriptive metadata

        Returns:
            A validated, read-only TerrainGrid

        Raises:
            InvalidGridError: Unknown order, dimensions below 2, non-numeric
                data, or buffer length different from rows * cols
            InvalidResolutionError: Resolution not positive and finite
        """
        if order not in ("C", "F"):
            raise InvalidGridError(f"Unknown buffer order: {order!r}")
        if rows < MIN_GRID_DIM or cols < MIN_GRID_DIM:
            raise InvalidGridError(
                f"Grid must be at least {MIN_GRID_DIM}x{MIN_GRID_DIM}, got {rows}x{cols}"
            )
        _check_resolution(resolution)

        try:
            flat = np.asarray(elevations, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidGridError(f"Elevations are not numeric: {e}") from e
        if flat.ndim != 1:
            raise InvalidGridError(f"Buffer must be 1D, got {flat.ndim}D")
        if flat.size != rows * cols:
            raise InvalidGridError(
                f"Buffer holds {flat.size} values, expected {rows}x{cols}={rows * cols}"
            )

        return _build_grid(
            cls,
            elevations=flat.reshape((rows, cols), order=order),
            origin_x=origin_x,
            origin_y=origin_y,
            resolution=resolution,
            metadata=metadata,
        )

    @classmethod
    def from_mesh(
        cls,
        x: ArrayLike,
        y: ArrayLike,
        z: ArrayLike,
        resolution: float,
        *,
        metadata: DemMetadata | None = None,
    ) -> "TerrainGrid":
        """Build a grid from meshgrid-style coordinate and elevation arrays.

        ``x[row, col]`` and ``y[row, col]`` hold the world coordinates of each
        node and ``z[row, col]`` its elevation. Only ``x[0, 0]`` and
        ``y[0, 0]`` are used (as the origin); a mesh whose spacing disagrees
        with ``resolution`` is logged, not rejected.

        Raises:
            InvalidGridError: Arrays are not 2D, differ in shape, or are
                smaller than 2x2
            InvalidResolutionError: Resolution not positive and finite
        """
        _check_resolution(resolution)
        try:
            xs = np.asarray(x, dtype=np.float64)
            ys = np.asarray(y, dtype=np.float64)
            zs = np.asarray(z, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidGridError(f"Mesh arrays are not numeric: {e}") from e

        if zs.ndim != 2:
            raise InvalidGridError(f"Elevations must be 2D, got {zs.ndim}D")
        if xs.shape != zs.shape or ys.shape != zs.shape:
            raise InvalidGridError(
                f"Mesh shapes differ: x={xs.shape}, y={ys.shape}, z={zs.shape}"
            )
        rows, cols = zs.shape
        if rows < MIN_GRID_DIM or cols < MIN_GRID_DIM:
            raise InvalidGridError(
                f"Grid must be at least {MIN_GRID_DIM}x{MIN_GRID_DIM}, got {rows}x{cols}"
            )

        dx = float(xs[0, 1] - xs[0, 0])
        dy = float(ys[1, 0] - ys[0, 0])
        if not (
            math.isclose(dx, resolution, rel_tol=MESH_SPACING_RTOL)
            and math.isclose(dy, resolution, rel_tol=MESH_SPACING_RTOL)
        ):
            logger.warning(
                "Mesh spacing (%g, %g) differs from declared resolution %g",
                dx,
                dy,
                resolution,
            )

        return _build_grid(
            cls,
            elevations=zs,
            origin_x=float(xs[0, 0]),
            origin_y=float(ys[0, 0]),
            resolution=resolution,
            metadata=metadata,
        )


def _build_grid(cls: type[TerrainGrid], **fields: Any) -> TerrainGrid:
    """Construct a grid and translate validation failures into InvalidGridError."""
    try:
        grid = cls(**fields)
    except ValidationError as e:
        raise InvalidGridError(str(e)) from e
    logger.debug(
        "Built %dx%d terrain grid (resolution=%g)",
        grid.rows,
        grid.cols,
        grid.resolution,
    )
    return grid
