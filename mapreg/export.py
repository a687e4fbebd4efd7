# -*- coding: utf-8 -*-
"""
Export - Serialize fitted transforms to proj pipelines and world files.

A fitted map-to-reference transform can be exported three ways:

- As a PROJ pipeline string with a single ``affine`` step.
- As a world file describing map pixel to reference pixel.
- As a world file composed with the reference image's own world file,
  describing map pixel to reference world coordinates, together with a
  ``.prj`` sidecar.

Similarity transforms are exported through their equivalent affine, so
the pipeline string and world files share one pixel convention (pixel
centres, no half-pixel shift). The affine parameter order
``(a, b, c, d, tx, ty)`` coincides with world-file order
``(A, B, D, E, C, F)``.

Dependencies
------------
numpy

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
2026-10-15

Modified
--------
2026-10-17
"""

# Standard library
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

# mapreg internal
from mapreg.config import NAD83_2011_WKT
from mapreg.coregistration.algebra import compose
from mapreg.exceptions import IOFailure, ParseFailure, UnsupportedMethodError
from mapreg.IO.worldfile import (
    find_world_file,
    format_float,
    read_world_file,
    write_prj,
    write_world_file,
)
from mapreg.models.transforms import Affine, Similarity, TransformKind

logger = logging.getLogger(__name__)

IDENTITY_AFFINE = Affine((1.0, 0.0, 0.0, 1.0, 0.0, 0.0))


def as_affine(transform: TransformKind) -> Affine:
    """Equivalent ``Affine`` of a similarity or affine transform.

    Raises
    ------
    UnsupportedMethodError
        For transform kinds without an affine form.
    """
    if isinstance(transform, Affine):
        return transform
    if isinstance(transform, Similarity):
        return transform.to_affine()
    raise UnsupportedMethodError(
        f"{type(transform).__name__} transforms cannot be exported"
    )


def affine_to_proj(transform: Affine) -> str:
    """PROJ pipeline string for an affine transform.

    Examples
    --------
    >>> affine_to_proj(Affine((1, 0, 0, 1, 5, -2)))
    '+proj=pipeline +step +proj=affine +xoff=5 +yoff=-2 +s11=1 +s12=0 +s21=0 +s22=1'
    """
    a, b, c, d, tx, ty = (format_float(v) for v in transform.params)
    return (
        f"+proj=pipeline +step +proj=affine +xoff={tx} +yoff={ty} "
        f"+s11={a} +s12={b} +s21={c} +s22={d}"
    )


def similarity_to_proj(transform: Similarity) -> str:
    """PROJ pipeline string for a similarity via its equivalent affine."""
    return affine_to_proj(transform.to_affine())


def transform_to_proj(transform: TransformKind) -> str:
    """PROJ pipeline string for a similarity or affine transform."""
    return affine_to_proj(as_affine(transform))


def world_file_params(
    transform: TransformKind,
) -> Tuple[float, float, float, float, float, float]:
    """World-file coefficients ``(A, B, D, E, C, F)`` of a transform."""
    return as_affine(transform).params


def compose_with_reference(map_to_ref: TransformKind, ref_world: Affine) -> Affine:
    """Map-pixel to reference-world affine.

    Applies *map_to_ref* first, then the reference image's pixel-to-world
    affine *ref_world*.
    """
    return compose(as_affine(map_to_ref), ref_world)


def read_reference_world(reference_path: Union[str, Path]) -> Affine:
    """Reference image pixel-to-world affine from its world file.

    Falls back to the identity when the reference has no readable world
    file.
    """
    world_file = find_world_file(reference_path)
    if world_file is None:
        logger.debug("No world file for %s; composing with identity", reference_path)
        return IDENTITY_AFFINE
    try:
        return Affine(read_world_file(world_file))
    except (IOFailure, ParseFailure) as e:
        logger.debug("Ignoring reference world file %s: %s", world_file, e)
        return IDENTITY_AFFINE


def export_world_file(
    path_without_ext: Union[str, Path],
    transform: TransformKind,
    extension: str = 'tfw',
) -> Path:
    """Write a transform as a world file.

    Parameters
    ----------
    path_without_ext : str or Path
        Output path without extension.
    transform : TransformKind
        Fitted similarity or affine.
    extension : str
        World-file extension. Default ``'tfw'``.

    Returns
    -------
    Path
        The written world file.
    """
    return write_world_file(
        path_without_ext, world_file_params(transform), extension=extension,
    )


def export_georeferenced_world_file(
    output_without_ext: Union[str, Path],
    map_to_ref: TransformKind,
    reference_path: Union[str, Path],
    crs_text: Optional[str] = None,
    fallback_wkt: str = NAD83_2011_WKT,
    extension: str = 'tfw',
    reference_world: Optional[Affine] = None,
) -> Tuple[Path, Path]:
    """Write a map-pixel to reference-world world file and ``.prj``.

    Parameters
    ----------
    output_without_ext : str or Path
        Output path without extension; receives ``.<extension>`` and
        ``.prj``.
    map_to_ref : TransformKind
        Fitted map-to-reference-pixel transform.
    reference_path : str or Path
        Reference image whose world file supplies the second stage when
        *reference_world* is None.
    crs_text : str, optional
        Reference CRS text written to the ``.prj``. *fallback_wkt* is
        written when None.
    fallback_wkt : str
        Projection text used when the reference CRS is unknown.
    extension : str
        World-file extension. Default ``'tfw'``.
    reference_world : Affine, optional
        Reference pixel-to-world affine, e.g. from a resolved ``Georef``
        whose coefficients came from GeoTIFF tags. Read from the
        reference world file when None.

    Returns
    -------
    Tuple[Path, Path]
        Written world file and projection file.
    """
    if reference_world is None:
        reference_world = read_reference_world(reference_path)
    composed = compose_with_reference(map_to_ref, reference_world)
    world_path = write_world_file(output_without_ext, composed.params, extension=extension)
    prj_path = write_prj(output_without_ext, crs_text if crs_text is not None else fallback_wkt)
    logger.debug("Exported georeferenced world file %s", world_path)
    return world_path, prj_path
