# -*- coding: utf-8 -*-
"""
GeoTIFF Tags - Extract embedded georeferencing from GeoTIFF metadata.

Reads the first page of a TIFF with ``tifffile`` and decodes the GeoTIFF
tags that define the raster-to-model affine:

- ``ModelTransformationTag`` (34264): a 4x4 row-major matrix whose first
  two rows carry the affine coefficients.
- ``ModelPixelScaleTag`` (33550) with ``ModelTiepointTag`` (33922): a
  north-up affine back-solved from the first tie point.

The GeoKey directory (34735) supplies the raster type (pixel-is-area or
pixel-is-point) and the EPSG code of the projected or geographic CRS.
GeoTIFF tags reference the pixel corner under pixel-is-area, while world
files reference pixel centres, so area rasters are shifted by half a pixel
when converting to world-file coefficients.

Dependencies
------------
tifffile

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

# Standard library
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple, Union

# Third-party
import tifffile

# mapreg internal
from mapreg.exceptions import IOFailure, ParseFailure

logger = logging.getLogger(__name__)

AffineParams = Tuple[float, float, float, float, float, float]

# TIFF tag codes
MODEL_PIXEL_SCALE_TAG = 33550
MODEL_TIEPOINT_TAG = 33922
MODEL_TRANSFORMATION_TAG = 34264
GEO_KEY_DIRECTORY_TAG = 34735

# GeoKey ids and values
GT_RASTER_TYPE_GEO_KEY = 1025
GEOGRAPHIC_TYPE_GEO_KEY = 2048
PROJECTED_CS_TYPE_GEO_KEY = 3072
RASTER_PIXEL_IS_AREA = 1
RASTER_PIXEL_IS_POINT = 2
USER_DEFINED_GEO_KEY_VALUE = 32767


@dataclass
class GeoTiffGeoreferencing:
    """Georeferencing decoded from GeoTIFF tags.

    Attributes
    ----------
    affine : Tuple[float, ...], optional
        World-file ordered ``(A, B, D, E, C, F)`` referencing pixel
        centres, or None if the file has no transform tags.
    epsg : int, optional
        EPSG code from the GeoKey directory. Projected CRS codes take
        precedence over geographic ones.
    pixel_is_point : bool
        True when the raster type key declares pixel-is-point.
    """

    affine: Optional[AffineParams] = None
    epsg: Optional[int] = None
    pixel_is_point: bool = False

    @property
    def crs(self) -> Optional[str]:
        """CRS identifier string, e.g. ``'EPSG:32633'``."""
        return f"EPSG:{self.epsg}" if self.epsg is not None else None


def parse_geo_keys(values: Sequence[int]) -> Dict[int, int]:
    """Decode inline GeoKey entries into ``{key_id: value}``.

    Entries whose value lives in another tag (location != 0) are skipped.

    Parameters
    ----------
    values : Sequence[int]
        Raw ``GeoKeyDirectoryTag`` contents: a 4-value header followed by
        ``(key_id, location, count, value)`` quadruples.

    Raises
    ------
    ParseFailure
        If the header is missing or the key count exceeds the entries.
    """
    raw = [int(v) for v in values]
    if len(raw) < 4:
        raise ParseFailure(
            f"GeoKey directory has {len(raw)} values; header needs 4"
        )
    key_count = raw[3]
    if len(raw) < 4 + 4 * key_count:
        raise ParseFailure(
            f"GeoKey directory declares {key_count} keys but holds "
            f"{(len(raw) - 4) // 4}"
        )
    keys: Dict[int, int] = {}
    for idx in range(4, 4 + 4 * key_count, 4):
        key_id, location, count, value = raw[idx:idx + 4]
        if location == 0 and count == 1:
            keys[key_id] = value
    return keys


def epsg_from_geo_keys(keys: Dict[int, int]) -> Optional[int]:
    """EPSG code from decoded GeoKeys, ignoring user-defined values."""
    for key_id in (PROJECTED_CS_TYPE_GEO_KEY, GEOGRAPHIC_TYPE_GEO_KEY):
        code = keys.get(key_id)
        if code is not None and 0 < code < USER_DEFINED_GEO_KEY_VALUE:
            return code
    return None


def _to_pixel_centre(affine: AffineParams) -> AffineParams:
    # Move the origin from the corner of pixel (0, 0) to its centre.
    a, b, d, e, c, f = affine
    return (a, b, d, e, c + 0.5 * a + 0.5 * b, f + 0.5 * d + 0.5 * e)


def affine_from_model_transformation(
    matrix: Sequence[float],
    pixel_is_point: bool = False,
) -> AffineParams:
    """World-file coefficients from a 16-value ``ModelTransformationTag``.

    Raises
    ------
    ParseFailure
        If fewer than 8 values are given.
    """
    m = [float(v) for v in matrix]
    if len(m) < 8:
        raise ParseFailure(
            f"ModelTransformationTag has {len(m)} values; need 16"
        )
    affine = (m[0], m[1], m[4], m[5], m[3], m[7])
    return affine if pixel_is_point else _to_pixel_centre(affine)


def affine_from_tiepoint(
    pixel_scale: Sequence[float],
    tiepoints: Sequence[float],
    pixel_is_point: bool = False,
) -> AffineParams:
    """North-up world-file coefficients from pixel scale and first tie point.

    The tie point ``(i, j, k, x, y, z)`` maps raster ``(i, j)`` to model
    ``(x, y)``; the origin is back-solved as ``C = x - i*sx`` and
    ``F = y + j*sy`` with ``E = -sy``.

    Raises
    ------
    ParseFailure
        If the scale has fewer than 2 values or the tie point fewer than 6.
    """
    scale = [float(v) for v in pixel_scale]
    tie = [float(v) for v in tiepoints]
    if len(scale) < 2 or len(tie) < 6:
        raise ParseFailure(
            f"invalid pixel scale / tie point tags "
            f"({len(scale)} scale values, {len(tie)} tie values)"
        )
    sx, sy = scale[0], scale[1]
    i, j, x, y = tie[0], tie[1], tie[3], tie[4]
    affine = (sx, 0.0, 0.0, -sy, x - i * sx, y + j * sy)
    return affine if pixel_is_point else _to_pixel_centre(affine)


def read_geotiff_georeferencing(
    path: Union[str, Path],
) -> Optional[GeoTiffGeoreferencing]:
    """Decode GeoTIFF georeferencing from the first page of a TIFF.

    Parameters
    ----------
    path : str or Path
        TIFF file path.

    Returns
    -------
    GeoTiffGeoreferencing or None
        None when the file carries neither transform tags nor GeoKeys.

    Raises
    ------
    IOFailure
        If the file cannot be opened.
    ParseFailure
        If the file is not a TIFF or its GeoTIFF tags are malformed.
    """
    path = Path(path)
    try:
        with tifffile.TiffFile(path) as tif:
            if len(tif.pages) == 0:
                raise ParseFailure(f"TIFF {path} has no pages")
            tags = tif.pages[0].tags
            geo_key_tag = tags.get(GEO_KEY_DIRECTORY_TAG)
            transform_tag = tags.get(MODEL_TRANSFORMATION_TAG)
            scale_tag = tags.get(MODEL_PIXEL_SCALE_TAG)
            tie_tag = tags.get(MODEL_TIEPOINT_TAG)
            geo_keys_raw = geo_key_tag.value if geo_key_tag is not None else None
            transform = transform_tag.value if transform_tag is not None else None
            scale = scale_tag.value if scale_tag is not None else None
            tie = tie_tag.value if tie_tag is not None else None
    except ParseFailure:
        raise
    except OSError as e:
        raise IOFailure(f"cannot open {path}: {e}") from e
    except Exception as e:
        raise ParseFailure(f"not a readable TIFF {path}: {e}") from e

    keys = parse_geo_keys(geo_keys_raw) if geo_keys_raw is not None else {}
    pixel_is_point = keys.get(GT_RASTER_TYPE_GEO_KEY) == RASTER_PIXEL_IS_POINT

    affine: Optional[AffineParams] = None
    if transform is not None:
        affine = affine_from_model_transformation(transform, pixel_is_point)
    elif scale is not None and tie is not None:
        affine = affine_from_tiepoint(scale, tie, pixel_is_point)

    if affine is None and not keys:
        return None
    georef = GeoTiffGeoreferencing(
        affine=affine,
        epsg=epsg_from_geo_keys(keys),
        pixel_is_point=pixel_is_point,
    )
    logger.debug(
        "GeoTIFF tags in %s: epsg=%s pixel_is_point=%s",
        path.name, georef.epsg, pixel_is_point,
    )
    return georef
