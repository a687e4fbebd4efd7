# -*- coding: utf-8 -*-
"""
Tests for GeoTIFF georeferencing tag decoding.

Synthetic GeoTIFFs are written with tifffile ``extratags`` so each test
controls exactly which GeoTIFF tags are present.

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

import pytest
import numpy as np

try:
    import tifffile
    _HAS_TIFFFILE = True
except ImportError:
    _HAS_TIFFFILE = False

pytestmark = pytest.mark.skipif(
    not _HAS_TIFFFILE, reason="tifffile not installed"
)

from mapreg.exceptions import IOFailure, ParseFailure
from mapreg.IO.geotiff import (
    GEO_KEY_DIRECTORY_TAG,
    MODEL_PIXEL_SCALE_TAG,
    MODEL_TIEPOINT_TAG,
    MODEL_TRANSFORMATION_TAG,
    affine_from_model_transformation,
    affine_from_tiepoint,
    epsg_from_geo_keys,
    parse_geo_keys,
    read_geotiff_georeferencing,
)


def _geo_keys(raster_type=1, projected=None, geographic=None):
    entries = [(1024, 0, 1, 1), (1025, 0, 1, raster_type)]
    if geographic is not None:
        entries.append((2048, 0, 1, geographic))
    if projected is not None:
        entries.append((3072, 0, 1, projected))
    flat = [1, 1, 0, len(entries)]
    for entry in entries:
        flat.extend(entry)
    return tuple(flat)


def _write_tiff(path, extratags):
    data = np.zeros((8, 12), dtype=np.uint8)
    tifffile.imwrite(str(path), data, metadata=None, extratags=extratags)
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tiepoint_tiff(tmp_path):
    """Pixel-is-area GeoTIFF, 10 m pixels, UTM 33N."""
    keys = _geo_keys(raster_type=1, projected=32633)
    return _write_tiff(tmp_path / 'area.tif', [
        (MODEL_PIXEL_SCALE_TAG, 'd', 3, (10.0, 10.0, 0.0), False),
        (MODEL_TIEPOINT_TAG, 'd', 6, (0.0, 0.0, 0.0, 500000.0, 4650000.0, 0.0), False),
        (GEO_KEY_DIRECTORY_TAG, 'H', len(keys), keys, False),
    ])


@pytest.fixture
def transformation_tiff(tmp_path):
    """Pixel-is-point GeoTIFF with a rotated model transformation."""
    keys = _geo_keys(raster_type=2, geographic=4326)
    matrix = (2.0, 0.5, 0.0, 100.0,
              0.25, -2.0, 0.0, 200.0,
              0.0, 0.0, 0.0, 0.0,
              0.0, 0.0, 0.0, 1.0)
    return _write_tiff(tmp_path / 'point.tif', [
        (MODEL_TRANSFORMATION_TAG, 'd', 16, matrix, False),
        (GEO_KEY_DIRECTORY_TAG, 'H', len(keys), keys, False),
    ])


# ---------------------------------------------------------------------------
# GeoKey directory
# ---------------------------------------------------------------------------

class TestGeoKeys:

    def test_parse_inline_keys(self):
        keys = parse_geo_keys(_geo_keys(raster_type=2, projected=32610))
        assert keys == {1024: 1, 1025: 2, 3072: 32610}

    def test_skips_keys_stored_elsewhere(self):
        raw = (1, 1, 0, 2, 1026, 34737, 12, 0, 3072, 0, 1, 26915)
        assert parse_geo_keys(raw) == {3072: 26915}

    def test_truncated_directory(self):
        with pytest.raises(ParseFailure, match='declares 3 keys'):
            parse_geo_keys((1, 1, 0, 3, 1024, 0, 1, 1))

    def test_short_header(self):
        with pytest.raises(ParseFailure, match='header'):
            parse_geo_keys((1, 1))

    def test_projected_preferred(self):
        assert epsg_from_geo_keys({2048: 4326, 3072: 32633}) == 32633
        assert epsg_from_geo_keys({2048: 4269}) == 4269

    def test_user_defined_ignored(self):
        assert epsg_from_geo_keys({3072: 32767}) is None
        assert epsg_from_geo_keys({}) is None


# ---------------------------------------------------------------------------
# Affine construction
# ---------------------------------------------------------------------------

class TestAffineFromTags:

    def test_tiepoint_pixel_is_area(self):
        affine = affine_from_tiepoint((10.0, 10.0, 0.0), (0, 0, 0, 500000.0, 4650000.0, 0))
        assert affine == (10.0, 0.0, 0.0, -10.0, 500005.0, 4649995.0)

    def test_tiepoint_offset_pixel_is_point(self):
        affine = affine_from_tiepoint(
            (2.0, 4.0), (2.0, 3.0, 0.0, 1000.0, 2000.0, 0.0), pixel_is_point=True
        )
        assert affine == (2.0, 0.0, 0.0, -4.0, 996.0, 2012.0)

    def test_tiepoint_too_short(self):
        with pytest.raises(ParseFailure):
            affine_from_tiepoint((1.0,), (0, 0, 0, 1, 1, 0))
        with pytest.raises(ParseFailure):
            affine_from_tiepoint((1.0, 1.0), (0, 0, 0))

    def test_model_transformation_pixel_is_area(self):
        matrix = [2.0, 0.5, 0, 100.0, 0.25, -2.0, 0, 200.0] + [0] * 7 + [1]
        affine = affine_from_model_transformation(matrix)
        np.testing.assert_allclose(affine, (2.0, 0.5, 0.25, -2.0, 101.25, 199.125))

    def test_model_transformation_too_short(self):
        with pytest.raises(ParseFailure):
            affine_from_model_transformation([1.0, 0.0, 0.0])


# ---------------------------------------------------------------------------
# Reading files
# ---------------------------------------------------------------------------

class TestReadGeoTiff:

    def test_tiepoint_file(self, tiepoint_tiff):
        georef = read_geotiff_georeferencing(tiepoint_tiff)
        assert georef.affine == (10.0, 0.0, 0.0, -10.0, 500005.0, 4649995.0)
        assert georef.epsg == 32633
        assert georef.crs == 'EPSG:32633'
        assert not georef.pixel_is_point

    def test_transformation_file(self, transformation_tiff):
        georef = read_geotiff_georeferencing(transformation_tiff)
        np.testing.assert_allclose(georef.affine, (2.0, 0.5, 0.25, -2.0, 100.0, 200.0))
        assert georef.pixel_is_point
        assert georef.crs == 'EPSG:4326'

    def test_plain_tiff(self, tmp_path):
        path = _write_tiff(tmp_path / 'plain.tif', [])
        assert read_geotiff_georeferencing(path) is None

    def test_keys_without_transform(self, tmp_path):
        keys = _geo_keys(projected=32633)
        path = _write_tiff(tmp_path / 'keys.tif', [
            (GEO_KEY_DIRECTORY_TAG, 'H', len(keys), keys, False),
        ])
        georef = read_geotiff_georeferencing(path)
        assert georef.affine is None
        assert georef.epsg == 32633

    def test_not_a_tiff(self, tmp_path):
        path = tmp_path / 'fake.tif'
        path.write_text('not a tiff at all')
        with pytest.raises(ParseFailure):
            read_geotiff_georeferencing(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(IOFailure):
            read_geotiff_georeferencing(tmp_path / 'missing.tif')
