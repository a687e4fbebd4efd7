# -*- coding: utf-8 -*-
"""
Geolocation Module - Reference georeferencing and coordinate projection.

Resolves a reference image's pixel-to-world affine and CRS from sidecars
or GeoTIFF tags, and projects reference pixels into geodetic, UTM, and
local metric coordinates.

Key Classes
-----------
- Georef: Affine coefficients plus CRS text
- CoordinateProjector: pyproj-backed pixel projection
- CrsInfo, CrsSuggestion: CRS descriptions for display and export

Dependencies
------------
pyproj
rasterio

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
2026-10-16
"""

from mapreg.geolocation.georef import (
    Georef,
    pixel_to_world,
    resolve_georeferencing,
)
from mapreg.geolocation.projector import (
    CoordinateProjector,
    CrsInfo,
    CrsSuggestion,
    describe_crs,
    local_plane_crs,
    suggest_utm_crs,
    utm_zone,
)

__all__ = [
    'Georef',
    'pixel_to_world',
    'resolve_georeferencing',
    'CoordinateProjector',
    'CrsInfo',
    'CrsSuggestion',
    'describe_crs',
    'local_plane_crs',
    'suggest_utm_crs',
    'utm_zone',
]
