"""DEM Mapping Domain Layer.

This package contains the core terrain logic used by the mapping pipeline,
organized by bounded context:
- terrain: Elevation grids and bilinear elevation sampling
"""

from dem_mapping import terrain

__all__ = ["terrain"]
