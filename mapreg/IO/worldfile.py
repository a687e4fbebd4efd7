# -*- coding: utf-8 -*-
"""
World File IO - Read and write ESRI world files and projection sidecars.

A world file holds six ASCII lines, one float each, in the order
``A, B, D, E, C, F``, defining the pixel-to-world affine

    x = A * col + B * row + C
    y = D * col + E * row + F

The sidecar extension follows the image extension by convention (``.tif``
-> ``.tfw``, ``.png`` -> ``.pgw``, ...), with ``.wld`` as the generic
fallback. Projection sidecars (``.prj``) hold WKT or a CRS identifier and
are read verbatim.

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
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

# mapreg internal
from mapreg.exceptions import IOFailure, InvalidParameterError, ParseFailure

logger = logging.getLogger(__name__)

AffineParams = Tuple[float, float, float, float, float, float]

WORLD_FILE_EXTENSIONS = {
    'tif': 'tfw',
    'tiff': 'tfw',
    'jpg': 'jgw',
    'jpeg': 'jgw',
    'jp2': 'j2w',
    'png': 'pgw',
    'gif': 'gfw',
    'bmp': 'bpw',
}
GENERIC_WORLD_FILE_EXTENSION = 'wld'
PRJ_EXTENSIONS = ('prj', 'PRJ', 'Prj')


def _with_extension(path_without_ext: Union[str, Path], ext: str) -> Path:
    # Append rather than replace so bases containing dots keep their name.
    return Path(f"{path_without_ext}.{ext}")


def format_float(value: float) -> str:
    """Shortest round-trip text for a float, without a trailing ``.0``."""
    text = repr(float(value))
    if text.endswith('.0'):
        text = text[:-2]
    return text


def world_file_extension(image_path: Union[str, Path]) -> str:
    """Conventional world-file extension for an image path."""
    ext = Path(image_path).suffix.lstrip('.').lower()
    return WORLD_FILE_EXTENSIONS.get(ext, GENERIC_WORLD_FILE_EXTENSION)


def world_file_candidates(image_path: Union[str, Path]) -> List[Path]:
    """Sidecar paths searched for an image's world file, in priority order."""
    image_path = Path(image_path)
    base = image_path.with_suffix('')
    names: List[str] = []
    for ext in (world_file_extension(image_path), GENERIC_WORLD_FILE_EXTENSION):
        for variant in (ext, ext.upper()):
            if variant not in names:
                names.append(variant)
    return [_with_extension(base, ext) for ext in names]


def find_world_file(image_path: Union[str, Path]) -> Optional[Path]:
    """First existing world-file sidecar for *image_path*, or None."""
    for candidate in world_file_candidates(image_path):
        if candidate.is_file():
            logger.debug("Found world file %s", candidate)
            return candidate
    return None


def parse_world_file(text: str) -> AffineParams:
    """Parse world-file text into ``(A, B, D, E, C, F)``.

    Blank lines are skipped; only the first six values are used.

    Raises
    ------
    ParseFailure
        If a line is not numeric or fewer than six values are present.
    """
    values: List[float] = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            values.append(float(line))
        except ValueError:
            raise ParseFailure(
                f"world file line {len(values) + 1} is not numeric: {line!r}"
            ) from None
        if len(values) == 6:
            return tuple(values)
    raise ParseFailure(f"world file has {len(values)} values, expected 6")


def read_world_file(path: Union[str, Path]) -> AffineParams:
    """Read a world file into ``(A, B, D, E, C, F)``.

    Parameters
    ----------
    path : str or Path
        World-file path (with its extension).

    Returns
    -------
    Tuple[float, float, float, float, float, float]

    Raises
    ------
    IOFailure
        If the file is missing or unreadable.
    ParseFailure
        If the content is malformed.
    """
    try:
        text = Path(path).read_text()
    except (OSError, UnicodeDecodeError) as e:
        raise IOFailure(f"cannot read world file {path}: {e}") from e
    return parse_world_file(text)


def write_world_file(
    path_without_ext: Union[str, Path],
    affine: Sequence[float],
    extension: str = 'tfw',
) -> Path:
    """Write ``(A, B, D, E, C, F)`` as a world file.

    Parameters
    ----------
    path_without_ext : str or Path
        Output path without extension.
    affine : Sequence[float]
        Six world-file coefficients in file order.
    extension : str
        World-file extension. Default ``'tfw'``.

    Returns
    -------
    Path
        The written file.

    Raises
    ------
    IOFailure
        If the file cannot be written.
    """
    if len(affine) != 6:
        raise InvalidParameterError(
            f"world file needs 6 values, got {len(affine)}"
        )
    out = _with_extension(path_without_ext, extension.lstrip('.'))
    text = ''.join(f"{format_float(v)}\n" for v in affine)
    try:
        out.write_text(text)
    except OSError as e:
        raise IOFailure(f"cannot write world file {out}: {e}") from e
    return out


def prj_candidates(image_path: Union[str, Path]) -> List[Path]:
    """Sidecar paths searched for an image's projection description."""
    image_path = Path(image_path)
    base = image_path.with_suffix('')
    candidates = [_with_extension(base, ext) for ext in PRJ_EXTENSIONS]
    candidates.append(_with_extension(image_path, 'prj'))
    return candidates


def read_prj_sidecar(image_path: Union[str, Path]) -> Optional[str]:
    """Projection text next to *image_path*, read verbatim, or None.

    Unreadable or empty sidecars are skipped.
    """
    for candidate in prj_candidates(image_path):
        if not candidate.is_file():
            continue
        try:
            text = candidate.read_text()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Skipping unreadable projection file %s: %s", candidate, e)
            continue
        if text.strip():
            logger.debug("Found projection file %s", candidate)
            return text
    return None


def write_prj(path_without_ext: Union[str, Path], text: str) -> Path:
    """Write projection text to ``<path_without_ext>.prj``.

    Raises
    ------
    IOFailure
        If the file cannot be written.
    """
    out = _with_extension(path_without_ext, 'prj')
    try:
        out.write_text(text)
    except OSError as e:
        raise IOFailure(f"cannot write projection file {out}: {e}") from e
    return out
