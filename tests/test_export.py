# -*- coding: utf-8 -*-
"""
Tests for PROJ pipeline and world-file export of fitted transforms.

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

import math

import numpy as np
import pytest

from mapreg.config import NAD83_2011_WKT
from mapreg.coregistration.algebra import apply_transform
from mapreg.exceptions import UnsupportedMethodError
from mapreg.export import (
    IDENTITY_AFFINE,
    affine_to_proj,
    as_affine,
    compose_with_reference,
    export_georeferenced_world_file,
    export_world_file,
    read_reference_world,
    similarity_to_proj,
    transform_to_proj,
    world_file_params,
)
from mapreg.IO.worldfile import read_world_file
from mapreg.models.transforms import Affine, Homography, Similarity


# ---------------------------------------------------------------------------
# PROJ pipeline strings
# ---------------------------------------------------------------------------

class TestProjString:

    def test_affine_pipeline(self):
        text = affine_to_proj(Affine((1, 0, 0, 1, 5, -2)))
        assert text == (
            '+proj=pipeline +step +proj=affine +xoff=5 +yoff=-2 '
            '+s11=1 +s12=0 +s21=0 +s22=1'
        )

    def test_affine_coefficient_placement(self):
        text = affine_to_proj(Affine((1.5, 0.25, -0.5, 2.0, 100.0, 200.5)))
        assert '+s11=1.5 +s12=0.25 +s21=-0.5 +s22=2' in text
        assert '+xoff=100 +yoff=200.5' in text

    def test_similarity_goes_through_affine(self):
        sim = Similarity((2.0, math.pi / 6, 3.0, 4.0))
        assert similarity_to_proj(sim) == affine_to_proj(sim.to_affine())
        assert transform_to_proj(sim) == similarity_to_proj(sim)

    def test_unsupported_kind(self):
        with pytest.raises(UnsupportedMethodError):
            transform_to_proj(Homography(tuple(range(9))))

    def test_as_affine_passthrough(self):
        aff = Affine((1, 2, 3, 4, 5, 6))
        assert as_affine(aff) is aff


# ---------------------------------------------------------------------------
# World files
# ---------------------------------------------------------------------------

class TestWorldFileExport:

    def test_world_file_params_order(self):
        assert world_file_params(Affine((1, 2, 3, 4, 5, 6))) == (1, 2, 3, 4, 5, 6)

    def test_export_affine(self, tmp_path):
        out = export_world_file(tmp_path / 'map', Affine((0.5, 0, 0, -0.5, 10, 20)))
        assert out == tmp_path / 'map.tfw'
        assert out.read_text() == '0.5\n0\n0\n-0.5\n10\n20\n'

    def test_export_similarity_extension(self, tmp_path):
        sim = Similarity((2.0, math.pi / 2, 3.0, 4.0))
        out = export_world_file(tmp_path / 'map', sim, extension='jgw')
        assert out.suffix == '.jgw'
        np.testing.assert_allclose(
            read_world_file(out), (0.0, -2.0, 2.0, 0.0, 3.0, 4.0), atol=1e-12,
        )


# ---------------------------------------------------------------------------
# Georeferenced export
# ---------------------------------------------------------------------------

class TestGeoreferencedExport:

    def test_compose_applies_map_to_ref_first(self):
        map_to_ref = Affine((2.0, 0.0, 0.0, 2.0, 10.0, 20.0))
        ref_world = Affine((0.5, 0.0, 0.0, -0.5, 1000.0, 2000.0))
        composed = compose_with_reference(map_to_ref, ref_world)
        assert composed.params == pytest.approx((1.0, 0.0, 0.0, -1.0, 1005.0, 1990.0))
        p = np.array([7.0, 3.0])
        np.testing.assert_allclose(
            apply_transform(composed, p),
            apply_transform(ref_world, apply_transform(map_to_ref, p)),
        )

    def test_reference_world_missing_is_identity(self, tmp_path):
        assert read_reference_world(tmp_path / 'ref.png') == IDENTITY_AFFINE

    def test_reference_world_unreadable_is_identity(self, tmp_path):
        (tmp_path / 'ref.pgw').write_text('garbage\n')
        assert read_reference_world(tmp_path / 'ref.png') == IDENTITY_AFFINE

    def test_export_with_reference(self, tmp_path):
        (tmp_path / 'ref.pgw').write_text('0.5\n0\n0\n-0.5\n1000\n2000\n')
        world, prj = export_georeferenced_world_file(
            tmp_path / 'out',
            Affine((2.0, 0.0, 0.0, 2.0, 10.0, 20.0)),
            tmp_path / 'ref.png',
            crs_text='EPSG:32633',
        )
        assert world == tmp_path / 'out.tfw'
        assert world.read_text() == '1\n0\n0\n-1\n1005\n1990\n'
        assert prj == tmp_path / 'out.prj'
        assert prj.read_text() == 'EPSG:32633'

    def test_export_without_reference_world(self, tmp_path):
        world, prj = export_georeferenced_world_file(
            tmp_path / 'out',
            Affine((2.0, 0.0, 0.0, 2.0, 10.0, 20.0)),
            tmp_path / 'ref.png',
        )
        assert read_world_file(world) == (2.0, 0.0, 0.0, 2.0, 10.0, 20.0)
        assert prj.read_text() == NAD83_2011_WKT

    def test_explicit_reference_world_wins(self, tmp_path):
        (tmp_path / 'ref.pgw').write_text('0.5\n0\n0\n-0.5\n1000\n2000\n')
        world, _ = export_georeferenced_world_file(
            tmp_path / 'out',
            Affine((2.0, 0.0, 0.0, 2.0, 10.0, 20.0)),
            tmp_path / 'ref.png',
            reference_world=Affine((10.0, 0.0, 0.0, -10.0, 500000.0, 4650000.0)),
        )
        assert read_world_file(world) == pytest.approx(
            (20.0, 0.0, 0.0, -20.0, 500100.0, 4649800.0)
        )
