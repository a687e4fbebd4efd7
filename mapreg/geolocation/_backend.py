# -*- coding: utf-8 -*-
"""
Geolocation Backend Detection - Detect available projection libraries.

Probes for rasterio (specifically ``rasterio.transform.Affine``) and pyproj
at import time. Provides boolean flags and helper functions that the
georeferencing and projection code use to verify required packages are
installed before doing any coordinate work.

Dependencies
------------
rasterio
pyproj

Author
------
Duane Smalley, PhD
duane.d.smalley@gmail.com

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-14

Modified
--------
2026-10-15
"""

# Standard library
from typing import List

# mapreg internal
from mapreg.exceptions import DependencyError

_HAS_RASTERIO = False
_HAS_PYPROJ = False

try:
    from rasterio.transform import Affine  # noqa: F401
    _HAS_RASTERIO = True
except ImportError:
    pass

try:
    import pyproj  # noqa: F401
    _HAS_PYPROJ = True
except ImportError:
    pass


def _require(feature: str, missing: List[str]) -> None:
    if missing:
        packages = ' '.join(missing)
        raise DependencyError(
            f"{feature} requires {', '.join(missing)}. "
            f"Install with: pip install {packages}"
        )


def require_affine_backend() -> None:
    """Verify that rasterio is installed for ``Affine`` transforms.

    Raises
    ------
    DependencyError
        If rasterio is not installed.
    """
    _require('Affine georeferencing', [] if _HAS_RASTERIO else ['rasterio'])


def require_projection_backend() -> None:
    """Verify that pyproj is installed for CRS reprojection.

    Raises
    ------
    DependencyError
        If pyproj is not installed.
    """
    _require('CoordinateProjector', [] if _HAS_PYPROJ else ['pyproj'])
