# -*- coding: utf-8 -*-
"""
Georeferencing Resolver - Recover a reference image's pixel-to-world affine.

Resolution order for a reference image:

1. A world-file sidecar (``.tfw``, ``.jgw``, ``.pgw``, ... or ``.wld``).
2. For TIFFs without a world file, the embedded GeoTIFF tags.

The CRS comes from a ``.prj`` sidecar when one exists, else from the
GeoTIFF GeoKey directory as ``EPSG:<code>``. Every parse or decode failure
is logged at DEBUG and resolves to "no georeferencing" so the caller can
keep working with plain pixel coordinates.

Dependencies
------------
tifffile
rasterio (optional, for ``Georef.transform``)

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
2026-10-17
"""

# Standard library
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union, TYPE_CHECKING

# Third-party
import numpy as np

# mapreg internal
from mapreg.exceptions import IOFailure, ParseFailure, ValidationError
from mapreg.geolocation._backend import require_affine_backend
from mapreg.IO.geotiff import read_geotiff_georeferencing
from mapreg.IO.worldfile import find_world_file, read_prj_sidecar, read_world_file

if TYPE_CHECKING:
    from rasterio.transform import Affine

logger = logging.getLogger(__name__)

TIFF_SUFFIXES = ('.tif', '.tiff')


@dataclass
class Georef:
    """Pixel-to-world affine of a reference image plus its CRS text.

    The coefficients are stored in world-file order ``(A, B, D, E, C, F)``
    and map pixel ``(u, v)`` to world ``(x, y)`` as::

        x = A * u + B * v + C
        y = D * u + E * v + F

    Attributes
    ----------
    affine : Tuple[float, ...]
        Six coefficients in world-file order.
    crs : str, optional
        WKT or CRS identifier (e.g. ``'EPSG:32633'``). None when unknown.
    source : str
        ``'worldfile'`` or ``'geotiff'``.
    """

    affine: Tuple[float, float, float, float, float, float]
    crs: Optional[str] = None
    source: str = 'worldfile'

    def __post_init__(self) -> None:
        if len(self.affine) != 6:
            raise ValidationError(
                f"Georef affine needs 6 coefficients, got {len(self.affine)}"
            )
        self.affine = tuple(float(v) for v in self.affine)

    @property
    def transform(self) -> 'Affine':
        """The affine as ``rasterio.transform.Affine(A, B, C, D, E, F)``."""
        require_affine_backend()
        from rasterio.transform import Affine
        a, b, d, e, c, f = self.affine
        return Affine(a, b, c, d, e, f)

    @property
    def pixel_size(self) -> float:
        """Ground units per pixel: mean length of the two basis vectors."""
        a, b, d, e, _, _ = self.affine
        return (math.hypot(a, d) + math.hypot(b, e)) / 2.0

    def pixel_to_world(
        self,
        u: Union[float, np.ndarray],
        v: Union[float, np.ndarray],
    ) -> Tuple[Union[float, np.ndarray], Union[float, np.ndarray]]:
        """Apply the affine to pixel coordinates (scalars or arrays)."""
        a, b, d, e, c, f = self.affine
        return a * u + b * v + c, d * u + e * v + f

    def world_to_pixel(self, x: float, y: float) -> Tuple[float, float]:
        """Invert the affine for one world coordinate."""
        u, v = ~self.transform @ (x, y)
        return float(u), float(v)


def resolve_georeferencing(
    image_path: Union[str, Path],
) -> Optional[Georef]:
    """Resolve the georeferencing of *image_path*.

    Parameters
    ----------
    image_path : str or Path
        Reference image path. The image itself is only opened for TIFF
        tag fallback.

    Returns
    -------
    Georef or None
        None when no usable affine was found.
    """
    image_path = Path(image_path)
    crs = read_prj_sidecar(image_path)

    affine = None
    source = 'worldfile'
    world_file = find_world_file(image_path)
    if world_file is not None:
        try:
            affine = read_world_file(world_file)
        except (IOFailure, ParseFailure) as e:
            logger.debug("Ignoring world file %s: %s", world_file, e)

    if image_path.suffix.lower() in TIFF_SUFFIXES and (affine is None or crs is None):
        try:
            tags = read_geotiff_georeferencing(image_path)
        except (IOFailure, ParseFailure) as e:
            logger.debug("Ignoring GeoTIFF tags of %s: %s", image_path, e)
            tags = None
        if tags is not None:
            if affine is None and tags.affine is not None:
                affine = tags.affine
                source = 'geotiff'
            if crs is None:
                crs = tags.crs

    if affine is None:
        logger.debug("No georeferencing found for %s", image_path)
        return None
    logger.debug(
        "Georeferencing for %s from %s (crs %s)",
        image_path.name, source, 'known' if crs else 'unknown',
    )
    return Georef(affine=affine, crs=crs, source=source)


def pixel_to_world(georef: Georef, point: Sequence[float]) -> Tuple[float, float]:
    """World coordinate of pixel ``(u, v)`` under *georef*."""
    x, y = georef.pixel_to_world(float(point[0]), float(point[1]))
    return float(x), float(y)
