# -*- coding: utf-8 -*-
"""
Quality Metrics - Residual statistics for a fitted transform.

Defines ``QualityMetrics``, created fresh by each solve and immutable once
returned except through ``convert_units``, which rescales every numeric
field and rewrites the unit tag in place.

Unit conversion factors, with ``pixel_size`` in ground meters per
reference pixel and ``S`` the map-scale denominator (e.g. 10000 for
1:10000):

    Pixels          -> Meters           pixel_size
    Pixels          -> MapMillimeters   pixel_size * 1000 / S
    Meters          -> MapMillimeters   1000 / S

and the reciprocals for the reverse directions. When a conversion
involving map millimeters is requested without ``S`` the factor is 1.

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
2026-10-12

Modified
--------
2026-10-16
"""

# Standard library
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

# mapreg internal
from mapreg.vocabulary import ErrorUnit

logger = logging.getLogger(__name__)


@dataclass
class QualityMetrics:
    """Error statistics of a transform over its correspondence pairs.

    Parameters
    ----------
    rmse : float
        Root mean square residual.
    p90_error : float
        Nearest-rank 90th percentile residual.
    residuals : List[float]
        Per-pair residuals, in the order of the fitted pair list.
    residuals_by_id : List[Tuple[int, float]]
        ``(constraint id, residual)`` for every PointPair constraint.
    warnings : List[str]
        Human-readable stability warnings.
    unit : ErrorUnit
        Unit of every numeric field.
    map_scale : float, optional
        Map-scale denominator the metrics refer to.
    """

    rmse: float = 0.0
    p90_error: float = 0.0
    residuals: List[float] = field(default_factory=list)
    residuals_by_id: List[Tuple[int, float]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    unit: ErrorUnit = ErrorUnit.PIXELS
    map_scale: Optional[float] = None

    def residual_for(self, constraint_id: int) -> Optional[float]:
        """Residual attributed to a constraint id, or None."""
        for cid, value in self.residuals_by_id:
            if cid == constraint_id:
                return value
        return None

    def convert_units(
        self,
        pixel_size: float,
        map_scale: Optional[float],
        target: ErrorUnit,
    ) -> None:
        """Rescale all metrics to *target* in place.

        Parameters
        ----------
        pixel_size : float
            Ground meters represented by one reference pixel.
        map_scale : float, optional
            Map-scale denominator. Required for any conversion touching
            ``MAP_MILLIMETERS``; when absent the values are left
            unchanged and only the unit tag moves.
        target : ErrorUnit
            Unit to convert to.
        """
        factor = _conversion_factor(self.unit, target, pixel_size, map_scale)
        self.rmse *= factor
        self.p90_error *= factor
        self.residuals = [r * factor for r in self.residuals]
        self.residuals_by_id = [
            (cid, r * factor) for cid, r in self.residuals_by_id
        ]
        self.unit = target
        if target is ErrorUnit.MAP_MILLIMETERS:
            self.map_scale = map_scale

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rmse': self.rmse,
            'p90_error': self.p90_error,
            'residuals': list(self.residuals),
            'residuals_by_id': [list(item) for item in self.residuals_by_id],
            'warnings': list(self.warnings),
            'unit': self.unit.value,
            'map_scale': self.map_scale,
        }


def _conversion_factor(
    source: ErrorUnit,
    target: ErrorUnit,
    pixel_size: float,
    map_scale: Optional[float],
) -> float:
    if source is target:
        return 1.0
    if source is ErrorUnit.PIXELS and target is ErrorUnit.METERS:
        return pixel_size
    if source is ErrorUnit.METERS and target is ErrorUnit.PIXELS:
        return 1.0 / pixel_size

    if map_scale is None:
        logger.warning(
            "No map scale given for %s -> %s conversion; values left unscaled",
            source.value, target.value,
        )
        return 1.0

    if source is ErrorUnit.PIXELS:
        return pixel_size * (1000.0 / map_scale)
    if target is ErrorUnit.PIXELS:
        return (map_scale / 1000.0) / pixel_size
    if source is ErrorUnit.METERS:
        return 1000.0 / map_scale
    return map_scale / 1000.0
