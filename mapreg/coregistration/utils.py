# -*- coding: utf-8 -*-
"""
Co-Registration Utilities - Residuals and quality metrics.

Provides helper functions for converting pair lists to arrays, computing
per-pair residuals, RMSE and nearest-rank 90th percentile error,
attributing residuals to constraint ids, and detecting source point sets
whose spread is too small for a stable fit.

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
2026-10-12

Modified
--------
2026-10-16
"""

# Standard library
import math
from typing import Iterable, List, Optional, Sequence, Tuple

# Third-party
import numpy as np

# mapreg internal
from mapreg.coregistration.algebra import apply_transform
from mapreg.coregistration.pairs import Pair
from mapreg.models.constraints import Constraint, PointPair
from mapreg.models.metrics import QualityMetrics
from mapreg.models.transforms import TransformKind

LOW_VARIANCE_WARNING = "Low variance in source points; results may be unstable"
VARIANCE_TOLERANCE = 1e-6


def pairs_to_arrays(pairs: Sequence[Pair]) -> Tuple[np.ndarray, np.ndarray]:
    """Split a pair list into source and destination arrays.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        ``(src, dst)``, each shape (N, 2), float64.
    """
    if len(pairs) == 0:
        empty = np.zeros((0, 2), dtype=np.float64)
        return empty, empty.copy()
    src = np.array([p[0] for p in pairs], dtype=np.float64)
    dst = np.array([p[1] for p in pairs], dtype=np.float64)
    return src, dst


def compute_residuals(
    transform: TransformKind,
    pairs: Sequence[Pair],
) -> np.ndarray:
    """Compute per-pair residuals after applying a transform.

    Applies the transform to the source points and computes the
    Euclidean distance to the corresponding destination points.

    Parameters
    ----------
    transform : Similarity or Affine
        Fitted transform.
    pairs : Sequence[Pair]
        ``(src, dst)`` correspondences.

    Returns
    -------
    np.ndarray
        Per-pair Euclidean residuals in pixels, input order. Shape (N,).
    """
    src, dst = pairs_to_arrays(pairs)
    if src.shape[0] == 0:
        return np.zeros(0, dtype=np.float64)
    diff = apply_transform(transform, src) - dst
    return np.sqrt(np.sum(diff ** 2, axis=1))


def compute_rms(residuals: np.ndarray) -> float:
    """Root mean square of residual errors (0.0 for an empty set)."""
    residuals = np.asarray(residuals, dtype=np.float64)
    if residuals.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(residuals ** 2)))


def compute_p90(residuals: np.ndarray) -> float:
    """Nearest-rank 90th percentile residual.

    Sorts ascending and takes index ``floor(0.9 * n)`` clamped to
    ``n - 1``. No interpolation.
    """
    residuals = np.sort(np.asarray(residuals, dtype=np.float64))
    n = residuals.size
    if n == 0:
        return 0.0
    idx = min(int(math.floor(n * 0.9)), n - 1)
    return float(residuals[idx])


def residuals_by_id(
    transform: TransformKind,
    constraints: Iterable[Constraint],
) -> List[Tuple[int, float]]:
    """Residual of every PointPair constraint, keyed by constraint id.

    Uses the raw constraint coordinates rather than the filtered pair
    list, so duplicates and degenerate pairs are still attributed.
    Other constraint kinds are skipped.
    """
    out: List[Tuple[int, float]] = []
    for c in constraints:
        if not isinstance(c, PointPair):
            continue
        pred = apply_transform(transform, c.src)
        out.append((c.id, float(np.hypot(*(pred - np.asarray(c.dst))))))
    return out


def source_variance(pairs: Sequence[Pair]) -> float:
    """Pooled variance of the source points.

    Mean squared distance of the source points from their centroid,
    summed over both axes.
    """
    src, _ = pairs_to_arrays(pairs)
    if src.shape[0] == 0:
        return 0.0
    centered = src - src.mean(axis=0)
    return float(np.sum(centered ** 2) / src.shape[0])


def is_variance_low(
    pairs: Sequence[Pair],
    tolerance: float = VARIANCE_TOLERANCE,
) -> bool:
    """Whether the source points are too tightly pooled for a stable fit.

    An empty pair list counts as low variance.
    """
    if len(pairs) == 0:
        return True
    return source_variance(pairs) < tolerance


def evaluate(
    transform: TransformKind,
    pairs: Sequence[Pair],
    constraints: Optional[Iterable[Constraint]] = None,
    warnings: Optional[List[str]] = None,
) -> QualityMetrics:
    """Score a fitted transform in pixel units.

    Parameters
    ----------
    transform : Similarity or Affine
        Fitted transform.
    pairs : Sequence[Pair]
        Pairs the transform was fit on.
    constraints : Iterable[Constraint], optional
        Raw constraints for per-id attribution. Defaults to none.
    warnings : List[str], optional
        Warnings gathered before fitting.

    Returns
    -------
    QualityMetrics
        Metrics in ``ErrorUnit.PIXELS``.
    """
    residuals = compute_residuals(transform, pairs)
    return QualityMetrics(
        rmse=compute_rms(residuals),
        p90_error=compute_p90(residuals),
        residuals=[float(r) for r in residuals],
        residuals_by_id=residuals_by_id(transform, constraints or []),
        warnings=list(warnings or []),
    )
