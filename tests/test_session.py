# -*- coding: utf-8 -*-
"""
Tests for RegistrationSession state, solving, export, and coordinate queries.

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

import dataclasses
import logging
import threading

import numpy as np
import pytest

from mapreg.config import RegistrationConfig
from mapreg.coregistration.algebra import apply_transform
from mapreg.coregistration.utils import LOW_VARIANCE_WARNING
from mapreg.exceptions import (
    ConversionUnavailableError,
    InsufficientDataError,
    UnsupportedMethodError,
    ValidationError,
)
from mapreg.models.constraints import Anchor, PointPair, Polyline
from mapreg.models.transforms import Affine, Similarity, TransformStack
from mapreg.session import RegistrationSession
from mapreg.vocabulary import ErrorUnit

try:
    import pyproj  # noqa: F401
    _HAS_PYPROJ = True
except ImportError:
    _HAS_PYPROJ = False

try:
    import rasterio  # noqa: F401
    import tifffile
    from mapreg.IO.geotiff import (
        GEO_KEY_DIRECTORY_TAG,
        MODEL_PIXEL_SCALE_TAG,
        MODEL_TIEPOINT_TAG,
    )
    _HAS_RASTER_STACK = True
except ImportError:
    _HAS_RASTER_STACK = False


TRUTH = Similarity((2.0, 0.3, 10.0, -5.0))
SOURCES = [(0.0, 0.0), (100.0, 0.0), (0.0, 80.0), (120.0, 90.0), (40.0, 30.0)]
WORLD_TEXT = '2\n0\n0\n-2\n1000\n5000\n'


def _pairs(transform=TRUTH, sources=SOURCES, start_id=1):
    out = []
    for k, src in enumerate(sources):
        dst = apply_transform(transform, src)
        out.append(PointPair(start_id + k, src, (float(dst[0]), float(dst[1]))))
    return out


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def session():
    return RegistrationSession(RegistrationConfig(ransac_seed=7))


@pytest.fixture
def exact_session(session):
    for pair in _pairs():
        session.add_constraint(pair)
    return session


@pytest.fixture
def noisy_session(session):
    pairs = _pairs()
    pairs[3] = PointPair(4, pairs[3].src, (pairs[3].dst[0] + 1.5, pairs[3].dst[1] - 0.5))
    for pair in pairs:
        session.add_constraint(pair)
    return session


@pytest.fixture
def reference_png(tmp_path):
    """Reference with a 2 m world file and a projection sidecar."""
    (tmp_path / 'ref.pgw').write_text(WORLD_TEXT)
    (tmp_path / 'ref.prj').write_text('EPSG:32633')
    return tmp_path / 'ref.png'


# ---------------------------------------------------------------------------
# Constraint store
# ---------------------------------------------------------------------------

class TestConstraints:

    def test_add_and_get(self, session):
        pairs = _pairs()
        updated = session.add_constraint(pairs[0])
        assert updated == [pairs[0]]
        session.add_constraint(pairs[1])
        assert [c.id for c in session.get_constraints()] == [1, 2]

    def test_get_returns_copy(self, exact_session):
        constraints = exact_session.get_constraints()
        constraints.clear()
        assert len(exact_session.get_constraints()) == len(SOURCES)

    def test_stored_constraints_are_immutable(self, exact_session):
        stored = exact_session.get_constraints()[0]
        with pytest.raises(dataclasses.FrozenInstanceError):
            stored.dst = (0.0, 0.0)
        assert exact_session.get_constraints()[0] == stored

    def test_duplicate_id_rejected(self, session):
        session.add_constraint(PointPair(9, (0, 0), (1, 1)))
        with pytest.raises(ValidationError, match='already exists'):
            session.add_constraint(PointPair(9, (5, 5), (6, 6)))
        assert len(session.get_constraints()) == 1

    def test_delete(self, exact_session):
        remaining = exact_session.delete_constraint(2)
        assert [c.id for c in remaining] == [1, 3, 4, 5]

    def test_delete_unknown_is_noop(self, exact_session):
        assert len(exact_session.delete_constraint(999)) == len(SOURCES)

    def test_next_constraint_id_increases(self):
        first = RegistrationSession.next_constraint_id()
        assert RegistrationSession.next_constraint_id() > first

    def test_dst_world_filled_from_reference(self, session, reference_png):
        session.set_reference_path(reference_png)
        session.add_constraint(PointPair(1, (0, 0), (5, 5)))
        stored = session.get_constraints()[0]
        assert stored.dst_world == (1010.0, 4990.0)

    def test_explicit_dst_world_kept(self, session, reference_png):
        session.set_reference_path(reference_png)
        session.add_constraint(PointPair(1, (0, 0), (5, 5), dst_world=(1.0, 2.0)))
        assert session.get_constraints()[0].dst_world == (1.0, 2.0)

    def test_no_reference_leaves_pair_untouched(self, session):
        pair = PointPair(1, (0, 0), (5, 5))
        session.add_constraint(pair)
        assert session.get_constraints()[0] == pair

    def test_concurrent_adds(self, session):
        def worker(base):
            for k in range(50):
                session.add_constraint(PointPair(base + k, (k, 0), (k + 1, 1)))

        threads = [threading.Thread(target=worker, args=(i * 1000,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(session.get_constraints()) == 200


# ---------------------------------------------------------------------------
# Solving
# ---------------------------------------------------------------------------

class TestSolve:

    def test_similarity_recovers_truth(self, exact_session):
        stack, metrics = exact_session.solve('similarity')
        assert isinstance(stack, TransformStack)
        assert len(stack) == 1
        np.testing.assert_allclose(stack.transforms[0].params, TRUTH.params, atol=1e-9)
        assert metrics.rmse == pytest.approx(0.0, abs=1e-9)
        assert metrics.unit is ErrorUnit.PIXELS
        assert len(metrics.residuals) == len(SOURCES)

    def test_affine_recovers_truth(self, exact_session):
        stack, metrics = exact_session.solve('affine')
        assert isinstance(stack.transforms[0], Affine)
        np.testing.assert_allclose(
            stack.transforms[0].params, TRUTH.to_affine().params, atol=1e-8,
        )
        assert metrics.rmse == pytest.approx(0.0, abs=1e-8)

    def test_ransac_rejects_outlier(self, session):
        sources = [(float(i * 10), float((i * 37) % 50)) for i in range(10)]
        pairs = _pairs(sources=sources)
        pairs[4] = PointPair(5, pairs[4].src, (pairs[4].dst[0] + 300.0, pairs[4].dst[1]))
        for pair in pairs:
            session.add_constraint(pair)
        stack, metrics = session.solve('ransac')
        np.testing.assert_allclose(stack.transforms[0].params, TRUTH.params, atol=1e-6)
        assert metrics.residual_for(5) == pytest.approx(300.0, rel=1e-6)

    def test_residuals_keep_constraint_order(self, noisy_session):
        _, metrics = noisy_session.solve('similarity')
        assert [cid for cid, _ in metrics.residuals_by_id] == [1, 2, 3, 4, 5]
        worst = max(metrics.residuals_by_id, key=lambda item: item[1])
        assert worst[0] == 4

    def test_non_point_constraints_ignored(self, exact_session):
        exact_session.add_constraint(Anchor(100, (1.0, 1.0)))
        exact_session.add_constraint(Polyline(101, [(0.0, 0.0), (5.0, 5.0)]))
        stack, _ = exact_session.solve('similarity')
        np.testing.assert_allclose(stack.transforms[0].params, TRUTH.params, atol=1e-9)

    def test_insufficient_pairs(self, session):
        session.add_constraint(PointPair(1, (0, 0), (10, 10)))
        with pytest.raises(InsufficientDataError, match='need >=2 pairs for similarity; got 1'):
            session.solve('similarity')

    def test_affine_needs_three(self, session):
        for pair in _pairs(sources=SOURCES[:2]):
            session.add_constraint(pair)
        with pytest.raises(InsufficientDataError, match='got 2'):
            session.solve('affine')

    def test_identity_pairs_dropped(self, session):
        session.add_constraint(PointPair(1, (0, 0), (0, 0)))
        session.add_constraint(PointPair(2, (5, 5), (5, 5)))
        with pytest.raises(InsufficientDataError, match='got 0'):
            session.solve('similarity')

    def test_unknown_method(self, exact_session):
        with pytest.raises(UnsupportedMethodError):
            exact_session.solve('tps')

    def test_low_variance_warning(self, session, caplog):
        session.add_constraint(PointPair(1, (0.0, 0.0), (100.0, 100.0)))
        session.add_constraint(PointPair(2, (1e-4, 0.0), (100.0002, 100.0)))
        with caplog.at_level(logging.WARNING, logger='mapreg.session'):
            _, metrics = session.solve('similarity')
        assert LOW_VARIANCE_WARNING in metrics.warnings
        assert 'Low source-point variance' in caplog.text

    def test_fit_matches_solve(self, noisy_session):
        stack, _ = noisy_session.solve('affine')
        assert noisy_session.fit('affine') == stack.transforms[0]


# ---------------------------------------------------------------------------
# Error units
# ---------------------------------------------------------------------------

class TestErrorUnits:

    def test_pixels_store_map_scale(self, noisy_session):
        _, metrics = noisy_session.solve('similarity', 'pixels', map_scale=25000)
        assert metrics.unit is ErrorUnit.PIXELS
        assert metrics.map_scale == 25000

    def test_unknown_unit_falls_back_to_pixels(self, noisy_session):
        _, metrics = noisy_session.solve('similarity', 'furlongs')
        assert metrics.unit is ErrorUnit.PIXELS

    def test_meters_use_reference_pixel_size(self, noisy_session, reference_png):
        noisy_session.set_reference_path(reference_png)
        _, px = noisy_session.solve('similarity', 'pixels')
        _, m = noisy_session.solve('similarity', 'meters')
        assert m.unit is ErrorUnit.METERS
        assert m.rmse == pytest.approx(2.0 * px.rmse)
        assert m.p90_error == pytest.approx(2.0 * px.p90_error)
        np.testing.assert_allclose(m.residuals, [2.0 * r for r in px.residuals])

    def test_meters_without_reference_use_unit_pixel(self, noisy_session):
        _, px = noisy_session.solve('similarity', 'pixels')
        _, m = noisy_session.solve('similarity', 'meters')
        assert m.rmse == pytest.approx(px.rmse)

    def test_map_millimeters(self, noisy_session, reference_png):
        noisy_session.set_reference_path(reference_png)
        _, px = noisy_session.solve('similarity', 'pixels')
        _, mm = noisy_session.solve('similarity', 'mapmm', map_scale=10000)
        assert mm.unit is ErrorUnit.MAP_MILLIMETERS
        assert mm.map_scale == 10000
        assert mm.rmse == pytest.approx(px.rmse * 2.0 * 1000.0 / 10000)

    def test_map_millimeters_without_scale(self, noisy_session, caplog):
        _, px = noisy_session.solve('similarity', 'pixels')
        with caplog.at_level(logging.WARNING, logger='mapreg.models.metrics'):
            _, mm = noisy_session.solve('similarity', 'mapmm')
        assert mm.unit is ErrorUnit.MAP_MILLIMETERS
        assert mm.rmse == pytest.approx(px.rmse)
        assert 'No map scale' in caplog.text


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

class TestSessionExport:

    def test_proj_string(self, exact_session):
        text = exact_session.proj_string('affine')
        assert text.startswith('+proj=pipeline +step +proj=affine')

    def test_export_world_file(self, exact_session, tmp_path):
        out = exact_session.export_world_file(tmp_path / 'map', 'similarity')
        assert out == tmp_path / 'map.tfw'
        assert len(out.read_text().splitlines()) == 6

    def test_export_world_file_config_extension(self, tmp_path):
        session = RegistrationSession(RegistrationConfig(world_file_extension='jgw'))
        for pair in _pairs():
            session.add_constraint(pair)
        assert session.export_world_file(tmp_path / 'map', 'similarity').suffix == '.jgw'

    def test_georeferenced_needs_reference(self, exact_session, tmp_path):
        with pytest.raises(ConversionUnavailableError):
            exact_session.export_georeferenced_world_file('affine', tmp_path / 'out')

    def test_georeferenced_export(self, exact_session, reference_png, tmp_path):
        exact_session.set_reference_path(reference_png)
        world, prj = exact_session.export_georeferenced_world_file(
            'affine', tmp_path / 'out',
        )
        params = [float(line) for line in world.read_text().splitlines()]
        truth = TRUTH.to_affine().params
        # Reference world doubles the scale, flips y, and offsets the origin
        expected = (
            2 * truth[0], 2 * truth[1], -2 * truth[2], -2 * truth[3],
            2 * truth[4] + 1000, -2 * truth[5] + 5000,
        )
        np.testing.assert_allclose(params, expected, atol=1e-6)
        assert prj.read_text() == 'EPSG:32633'

    def test_georeferenced_fallback_wkt(self, exact_session, tmp_path):
        (tmp_path / 'ref.pgw').write_text(WORLD_TEXT)
        exact_session.set_reference_path(tmp_path / 'ref.png')
        _, prj = exact_session.export_georeferenced_world_file(
            'similarity', tmp_path / 'out',
        )
        assert prj.read_text() == exact_session.config.fallback_wkt

    @pytest.mark.skipif(not _HAS_RASTER_STACK, reason="rasterio/tifffile not installed")
    def test_georeferenced_export_geotiff_tags_only(self, session, tmp_path):
        # No .tfw or .prj: georeferencing comes from the GeoTIFF tags alone
        keys = (1, 1, 0, 2, 1025, 0, 1, 1, 3072, 0, 1, 32633)
        reference = tmp_path / 'ref.tif'
        tifffile.imwrite(
            str(reference),
            np.zeros((4, 4), dtype=np.uint8),
            metadata=None,
            extratags=[
                (MODEL_PIXEL_SCALE_TAG, 'd', 3, (10.0, 10.0, 0.0), False),
                (MODEL_TIEPOINT_TAG, 'd', 6, (0, 0, 0, 500000.0, 4650000.0, 0), False),
                (GEO_KEY_DIRECTORY_TAG, 'H', len(keys), keys, False),
            ],
        )
        for pair in _pairs(transform=Affine((1.0, 0.0, 0.0, 1.0, 5.0, 0.0))):
            session.add_constraint(pair)
        session.set_reference_path(reference)

        world, prj = session.export_georeferenced_world_file('affine', tmp_path / 'out')

        params = [float(line) for line in world.read_text().splitlines()]
        # Pixel-is-area tags put the pixel centre half a pixel in; map x is shifted 5 px
        np.testing.assert_allclose(
            params, [10.0, 0.0, 0.0, -10.0, 500055.0, 4649995.0], atol=1e-6,
        )
        assert prj.read_text() == 'EPSG:32633'


# ---------------------------------------------------------------------------
# Reference georeferencing and coordinate queries
# ---------------------------------------------------------------------------

class TestReference:

    def test_paths(self, session, reference_png, tmp_path):
        assert session.map_path is None
        session.set_map_path(tmp_path / 'map.jpg')
        assert session.map_path == tmp_path / 'map.jpg'
        georef = session.set_reference_path(reference_png)
        assert session.reference_path == reference_png
        assert session.reference_georef() is georef

    def test_reference_replaced(self, session, reference_png, tmp_path):
        session.set_reference_path(reference_png)
        assert session.set_reference_path(tmp_path / 'other.png') is None
        assert session.reference_georef() is None

    def test_reference_crs(self, session, reference_png):
        assert session.reference_crs() is None
        session.set_reference_path(reference_png)
        info = session.reference_crs()
        assert info.code == 'EPSG:32633'

    def test_reference_crs_unknown(self, session, tmp_path):
        (tmp_path / 'ref.pgw').write_text(WORLD_TEXT)
        session.set_reference_path(tmp_path / 'ref.png')
        assert session.reference_crs().name == 'Unknown'

    def test_pixel_to_without_georef(self, session):
        assert session.pixel_to('lonlat', 1, 2) is None
        assert session.pixel_to('pixel', 1, 2) is None
        assert session.metric_scale_at(1, 2) is None
        assert session.suggest_output_crs() is None

    def test_pixel_mode_echoes(self, session, reference_png):
        session.set_reference_path(reference_png)
        assert session.pixel_to('pixel', 3, 4) == (3.0, 4.0)

    def test_unknown_mode(self, session, reference_png):
        session.set_reference_path(reference_png)
        with pytest.raises(ValidationError):
            session.pixel_to('furlongs', 0, 0)


@pytest.mark.skipif(
    not (_HAS_PYPROJ and _HAS_RASTER_STACK),
    reason="pyproj, rasterio and tifffile required",
)
class TestGeodeticQueries:

    @pytest.fixture
    def utm_session(self, session, tmp_path):
        """100 x 100 reference, 10 m pixels in UTM 33N, pixel (0, 0) at 15E 42N."""
        path = tmp_path / 'ortho.tif'
        tifffile.imwrite(str(path), np.zeros((100, 100), dtype=np.uint8))
        (tmp_path / 'ortho.tfw').write_text('10\n0\n0\n-10\n500000\n4649776.22\n')
        (tmp_path / 'ortho.prj').write_text('EPSG:32633')
        session.set_reference_path(path)
        return session

    def test_lonlat(self, utm_session):
        lon, lat = utm_session.pixel_to('lonlat', 0, 0)
        assert lon == pytest.approx(15.0, abs=1e-7)
        assert lat == pytest.approx(42.0, abs=1e-6)

    def test_local_meters_from_centre(self, utm_session):
        assert utm_session.pixel_to('local_m', 50, 50) == pytest.approx((0.0, 0.0), abs=1e-6)
        east, north = utm_session.pixel_to('local_m', 60, 50)
        assert east == pytest.approx(100.0 / 0.9996, rel=1e-3)
        assert north == pytest.approx(0.0, abs=0.5)

    def test_utm(self, utm_session):
        for mode in ('utm', 'projected_m'):
            x, y = utm_session.pixel_to(mode, 0, 0)
            assert x == pytest.approx(500000.0, abs=1e-3)
            assert y == pytest.approx(4649776.22, abs=1e-3)

    def test_suggest_output_crs(self, utm_session):
        assert utm_session.suggest_output_crs().epsg == 'EPSG:32633'
        nad83 = utm_session.suggest_output_crs('NAD83_2011')
        assert nad83.epsg is None
        assert nad83.zone == 33

    def test_metric_scale(self, utm_session):
        assert utm_session.metric_scale_at(10, 10) == pytest.approx(10.0 / 0.9996, rel=1e-3)

    def test_dst_local_filled(self, utm_session):
        utm_session.add_constraint(PointPair(1, (3, 3), (0, 0)))
        stored = utm_session.get_constraints()[0]
        assert stored.dst_world == (500000.0, 4649776.22)
        assert stored.dst_local == pytest.approx((0.0, 0.0), abs=1e-6)
