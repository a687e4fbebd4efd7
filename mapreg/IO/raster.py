# -*- coding: utf-8 -*-
"""
Raster Inspection - Pixel dimensions of map and reference images.

Opens any GDAL-readable raster with rasterio to report its size. Plain
scans (PNG, JPEG) carry no georeferencing; the warning rasterio emits for
those is suppressed since an ungeoreferenced map is the normal case here.

Dependencies
------------
rasterio

Author
------
Steven Siebert

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

# Standard library
import warnings
from pathlib import Path
from typing import Tuple, Union

try:
    import rasterio
    from rasterio.errors import NotGeoreferencedWarning, RasterioIOError
    _HAS_RASTERIO = True
except ImportError:
    _HAS_RASTERIO = False

# mapreg internal
from mapreg.exceptions import DependencyError, IOFailure


def image_dimensions(path: Union[str, Path]) -> Tuple[int, int]:
    """Width and height of a raster in pixels.

    Parameters
    ----------
    path : str or Path
        Image file path.

    Returns
    -------
    Tuple[int, int]
        ``(width, height)``.

    Raises
    ------
    DependencyError
        If rasterio is not installed.
    IOFailure
        If the file cannot be opened as a raster.
    """
    if not _HAS_RASTERIO:
        raise DependencyError(
            "rasterio is required for raster inspection. "
            "Install with: pip install rasterio"
        )
    try:
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', NotGeoreferencedWarning)
            with rasterio.open(str(path)) as dataset:
                return dataset.width, dataset.height
    except RasterioIOError as e:
        raise IOFailure(f"cannot open raster {path}: {e}") from e
