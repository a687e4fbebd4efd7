# -*- coding: utf-8 -*-
"""
IO Module - Georeferencing sidecars, GeoTIFF tags, and raster inspection.

Reads and writes world files and ``.prj`` projection sidecars, decodes
embedded GeoTIFF georeferencing tags, and reports raster dimensions.

Dependencies
------------
tifffile
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
2026-10-13

Modified
--------
2026-10-16
"""

from mapreg.IO.worldfile import (
    GENERIC_WORLD_FILE_EXTENSION,
    WORLD_FILE_EXTENSIONS,
    find_world_file,
    format_float,
    parse_world_file,
    read_prj_sidecar,
    read_world_file,
    world_file_candidates,
    world_file_extension,
    write_prj,
    write_world_file,
)
from mapreg.IO.geotiff import (
    GeoTiffGeoreferencing,
    affine_from_model_transformation,
    affine_from_tiepoint,
    parse_geo_keys,
    read_geotiff_georeferencing,
)
from mapreg.IO.raster import image_dimensions

__all__ = [
    'GENERIC_WORLD_FILE_EXTENSION',
    'WORLD_FILE_EXTENSIONS',
    'find_world_file',
    'format_float',
    'parse_world_file',
    'read_prj_sidecar',
    'read_world_file',
    'world_file_candidates',
    'world_file_extension',
    'write_prj',
    'write_world_file',
    'GeoTiffGeoreferencing',
    'affine_from_model_transformation',
    'affine_from_tiepoint',
    'parse_geo_keys',
    'read_geotiff_georeferencing',
    'image_dimensions',
]
