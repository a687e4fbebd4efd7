# -*- coding: utf-8 -*-
"""
Registration Session - Owned state and operations for a hosting layer.

``RegistrationSession`` holds the state of one map registration: the map
and reference image paths, the constraint list, and the reference image's
cached ``Georef``. Each state slot sits behind its own ``threading.Lock``;
every operation acquires a lock, reads or mutates, and releases it before
any fitting, file IO, or reprojection runs, so concurrent callers on the
same slot simply serialize.

Operations take and return plain values (strings, tuples, dataclasses) so
a UI command layer can marshal them without touching the solver.

Usage
-----
    >>> session = RegistrationSession()
    >>> session.set_reference_path('ortho.tif')
    >>> session.add_constraint(PointPair(session.next_constraint_id(),
    ...                                  (10, 20), (110, 240)))
    >>> stack, metrics = session.solve('similarity', 'meters')

Dependencies
------------
numpy
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
2026-10-15

Modified
--------
2026-10-17
"""

# Standard library
import dataclasses
import logging
import threading
from pathlib import Path
from typing import List, Optional, Tuple, Union

# mapreg internal
from mapreg.config import RegistrationConfig, load_config
from mapreg.coregistration.affine import AffineCoRegistration
from mapreg.coregistration.base import CoRegistration
from mapreg.coregistration.pairs import Pair, extract_pairs
from mapreg.coregistration.ransac import RansacSimilarityCoRegistration
from mapreg.coregistration.similarity import SimilarityCoRegistration
from mapreg.coregistration.utils import (
    LOW_VARIANCE_WARNING,
    evaluate,
    is_variance_low,
)
from mapreg.exceptions import (
    ConversionUnavailableError,
    DependencyError,
    GeolocationError,
    InsufficientDataError,
    ValidationError,
)
from mapreg.export import (
    export_georeferenced_world_file,
    export_world_file,
    transform_to_proj,
)
from mapreg.geolocation.georef import Georef, resolve_georeferencing
from mapreg.geolocation.projector import (
    CoordinateProjector,
    CrsInfo,
    CrsSuggestion,
    describe_crs,
)
from mapreg.IO.raster import image_dimensions
from mapreg.models.constraints import Constraint, PointPair, next_constraint_id
from mapreg.models.metrics import QualityMetrics
from mapreg.models.transforms import Affine, TransformKind, TransformStack
from mapreg.vocabulary import ConversionMode, DatumPolicy, ErrorUnit, FitMethod

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class RegistrationSession:
    """Thread-safe store of one map-to-reference registration.

    Parameters
    ----------
    config : RegistrationConfig, optional
        Fitting and export defaults. Loaded from the packaged
        ``config.yaml`` when omitted.
    """

    def __init__(self, config: Optional[RegistrationConfig] = None) -> None:
        self.config = config if config is not None else load_config()
        self._map_path: Optional[Path] = None
        self._map_lock = threading.Lock()
        self._reference_path: Optional[Path] = None
        self._reference_lock = threading.Lock()
        self._constraints: List[Constraint] = []
        self._constraints_lock = threading.Lock()
        self._georef: Optional[Georef] = None
        self._georef_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Paths and georeferencing
    # ------------------------------------------------------------------

    @property
    def map_path(self) -> Optional[Path]:
        with self._map_lock:
            return self._map_path

    @property
    def reference_path(self) -> Optional[Path]:
        with self._reference_lock:
            return self._reference_path

    def set_map_path(self, path: PathLike) -> None:
        with self._map_lock:
            self._map_path = Path(path)

    def set_reference_path(self, path: PathLike) -> Optional[Georef]:
        """Select the reference image and cache its georeferencing.

        Returns
        -------
        Georef or None
            The resolved georeferencing, replacing any previous one.
        """
        path = Path(path)
        georef = resolve_georeferencing(path)
        with self._georef_lock:
            self._georef = georef
        with self._reference_lock:
            self._reference_path = path
        return georef

    def reference_georef(self) -> Optional[Georef]:
        with self._georef_lock:
            return self._georef

    def reference_crs(self) -> Optional[CrsInfo]:
        """Display summary of the reference CRS; None without a Georef."""
        georef = self.reference_georef()
        if georef is None:
            return None
        return describe_crs(georef.crs)

    # ------------------------------------------------------------------
    # Constraints
    # ------------------------------------------------------------------

    @staticmethod
    def next_constraint_id() -> int:
        return next_constraint_id()

    def get_constraints(self) -> List[Constraint]:
        with self._constraints_lock:
            return list(self._constraints)

    def add_constraint(self, constraint: Constraint) -> List[Constraint]:
        """Append a constraint and return the updated list.

        A PointPair added while a Georef is cached gets its missing
        ``dst_world`` and ``dst_local`` filled in.

        Raises
        ------
        ValidationError
            If a constraint with the same id is already present.
        """
        georef = self.reference_georef()
        if isinstance(constraint, PointPair) and georef is not None:
            constraint = self._with_reference_coordinates(constraint, georef)
        with self._constraints_lock:
            if any(c.id == constraint.id for c in self._constraints):
                raise ValidationError(
                    f"constraint id {constraint.id} already exists"
                )
            self._constraints.append(constraint)
            return list(self._constraints)

    def delete_constraint(self, constraint_id: int) -> List[Constraint]:
        """Remove the constraint with *constraint_id*; unknown ids are ignored."""
        with self._constraints_lock:
            self._constraints = [
                c for c in self._constraints if c.id != constraint_id
            ]
            return list(self._constraints)

    @staticmethod
    def _with_reference_coordinates(pair: PointPair, georef: Georef) -> PointPair:
        dst_world = pair.dst_world
        if dst_world is None:
            x, y = georef.pixel_to_world(pair.dst[0], pair.dst[1])
            dst_world = (float(x), float(y))
        dst_local = pair.dst_local
        if dst_local is None:
            try:
                dst_local = CoordinateProjector(georef).pixel_to_local_meters(
                    pair.dst, (0.0, 0.0),
                )
            except (GeolocationError, DependencyError) as e:
                logger.debug("No local coordinate for constraint %d: %s", pair.id, e)
        return dataclasses.replace(pair, dst_world=dst_world, dst_local=dst_local)

    # ------------------------------------------------------------------
    # Fitting
    # ------------------------------------------------------------------

    def _estimator(self, method: FitMethod) -> CoRegistration:
        if method is FitMethod.AFFINE:
            return AffineCoRegistration(rcond=self.config.affine_rcond)
        if method is FitMethod.RANSAC:
            return RansacSimilarityCoRegistration(
                threshold=self.config.ransac_threshold,
                iterations=self.config.ransac_iterations,
                seed=self.config.ransac_seed,
            )
        return SimilarityCoRegistration()

    def _pairs(self) -> Tuple[List[Constraint], List[Pair]]:
        constraints = self.get_constraints()
        return constraints, extract_pairs(
            constraints, self.config.degenerate_tolerance,
        )

    def fit(self, method: str) -> TransformKind:
        """Fit a transform of *method* to the current constraints.

        Raises
        ------
        UnsupportedMethodError
            If *method* is not ``similarity``, ``affine`` or ``ransac``.
        InsufficientDataError
            If too few usable pairs remain after filtering.
        DegenerateGeometryError
            If the pair geometry does not determine the transform.
        """
        fit_method = FitMethod.parse(method)
        _, pairs = self._pairs()
        return self._estimator(fit_method).estimate(pairs).transform

    def solve(
        self,
        method: str,
        error_unit: str = 'pixels',
        map_scale: Optional[float] = None,
    ) -> Tuple[TransformStack, QualityMetrics]:
        """Fit the constraints and score the fit.

        Parameters
        ----------
        method : str
            ``'similarity'``, ``'affine'`` or ``'ransac'``.
        error_unit : str
            ``'pixels'``, ``'meters'`` or ``'mapmm'``. Unknown names fall
            back to pixels.
        map_scale : float, optional
            Map-scale denominator, e.g. 10000 for 1:10000.

        Returns
        -------
        Tuple[TransformStack, QualityMetrics]
            Single-element stack and metrics in the requested unit.
        """
        fit_method = FitMethod.parse(method)
        unit = ErrorUnit.parse(error_unit)
        constraints, pairs = self._pairs()

        estimator = self._estimator(fit_method)
        if len(pairs) < estimator.min_pairs:
            raise InsufficientDataError(
                f"need >={estimator.min_pairs} pairs for {fit_method.value}; "
                f"got {len(pairs)}"
            )
        warnings = []
        if is_variance_low(pairs, self.config.variance_tolerance):
            logger.warning(
                "Low source-point variance across %d pairs", len(pairs),
            )
            warnings.append(LOW_VARIANCE_WARNING)

        result = estimator.estimate(pairs)
        metrics = evaluate(result.transform, pairs, constraints, warnings)

        if unit is ErrorUnit.PIXELS:
            metrics.map_scale = map_scale
        else:
            georef = self.reference_georef()
            pixel_size = georef.pixel_size if georef is not None else 1.0
            metrics.convert_units(pixel_size, map_scale, unit)

        logger.info(
            "Solved %s with %d pairs: rmse %.4g %s",
            fit_method.value, len(pairs), metrics.rmse, metrics.unit.value,
        )
        return TransformStack([result.transform]), metrics

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def proj_string(self, method: str) -> str:
        """PROJ pipeline string of the fitted map-to-reference transform."""
        return transform_to_proj(self.fit(method))

    def export_world_file(self, path_without_ext: PathLike, method: str) -> Path:
        """Write the fitted map-to-reference-pixel transform as a world file."""
        return export_world_file(
            path_without_ext,
            self.fit(method),
            extension=self.config.world_file_extension,
        )

    def export_georeferenced_world_file(
        self,
        method: str,
        output_without_ext: PathLike,
    ) -> Tuple[Path, Path]:
        """Write a map-pixel to reference-world world file and ``.prj``.

        The second stage is the cached reference ``Georef`` affine, so
        references georeferenced only by GeoTIFF tags compose correctly.
        Without a Georef the reference pixel frame is used as is.

        Raises
        ------
        ConversionUnavailableError
            If no reference image is set.
        """
        reference = self.reference_path
        if reference is None:
            raise ConversionUnavailableError("reference path not set")
        transform = self.fit(method)
        georef = self.reference_georef()
        # World-file order (A, B, D, E, C, F) is Affine order (a, b, c, d, tx, ty)
        return export_georeferenced_world_file(
            output_without_ext,
            transform,
            reference,
            crs_text=georef.crs if georef is not None else None,
            fallback_wkt=self.config.fallback_wkt,
            extension=self.config.world_file_extension,
            reference_world=Affine(georef.affine) if georef is not None else None,
        )

    # ------------------------------------------------------------------
    # Coordinate queries
    # ------------------------------------------------------------------

    def _reference_center(self) -> Tuple[float, float]:
        reference = self.reference_path
        if reference is None:
            raise ConversionUnavailableError("reference path not set")
        width, height = image_dimensions(reference)
        return width / 2.0, height / 2.0

    def pixel_to(
        self,
        mode: str,
        u: float,
        v: float,
        policy: str = 'WGS84',
    ) -> Optional[Tuple[float, float]]:
        """Coordinate of reference pixel ``(u, v)`` under *mode*.

        Modes are ``lonlat``, ``local_m`` (metres from the reference image
        centre), ``utm`` / ``projected_m`` (UTM under *policy*) and
        ``pixel``. Returns None when no Georef or CRS is available.
        """
        conversion = ConversionMode.parse(mode)
        georef = self.reference_georef()
        if georef is None:
            return None
        if conversion is ConversionMode.PIXEL:
            return float(u), float(v)
        projector = CoordinateProjector(georef)
        if conversion is ConversionMode.LOCAL_METERS:
            origin = self._reference_center()
            try:
                return projector.convert(conversion, u, v, origin_px=origin)
            except GeolocationError as e:
                logger.debug("Local metric conversion failed: %s", e)
                return None
        return projector.convert(conversion, u, v, DatumPolicy.parse(policy))

    def suggest_output_crs(self, policy: str = 'WGS84') -> Optional[CrsSuggestion]:
        """UTM output CRS for the geodetic location of the reference centre."""
        georef = self.reference_georef()
        if georef is None or self.reference_path is None:
            return None
        u, v = self._reference_center()
        return CoordinateProjector(georef).suggest_output_crs(
            u, v, DatumPolicy.parse(policy),
        )

    def metric_scale_at(self, u: float, v: float) -> Optional[float]:
        """Local metres per reference pixel at ``(u, v)``, or None."""
        georef = self.reference_georef()
        if georef is None:
            return None
        try:
            return CoordinateProjector(georef).metric_scale_at(u, v)
        except GeolocationError as e:
            logger.debug("Metric scale unavailable at (%s, %s): %s", u, v, e)
            return None
