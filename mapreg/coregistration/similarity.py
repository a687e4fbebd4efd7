# -*- coding: utf-8 -*-
"""
Similarity Co-Registration - Closed-form least-squares similarity fit.

Estimates a 2D similarity transform (uniform scale, rotation,
translation; 4 degrees of freedom) from point correspondences with the
Procrustes / Umeyama construction: centre both point sets, take the SVD
of the cross-covariance, and force a proper rotation by flipping the
second left singular vector when the SVD yields a reflection.

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
2026-10-15
"""

# Standard library
import math
from typing import Sequence

# Third-party
import numpy as np

# mapreg internal
from mapreg.coregistration.base import CoRegistration, RegistrationResult
from mapreg.coregistration.pairs import Pair
from mapreg.coregistration.utils import (
    compute_residuals,
    compute_rms,
    pairs_to_arrays,
)
from mapreg.exceptions import DegenerateGeometryError, InsufficientDataError
from mapreg.models.transforms import Similarity
from mapreg.versioning import estimator_version


def fit_similarity(pairs: Sequence[Pair]) -> Similarity:
    """Least-squares similarity mapping pair sources onto destinations.

    Parameters
    ----------
    pairs : Sequence[Pair]
        At least 2 ``(src, dst)`` correspondences.

    Returns
    -------
    Similarity
        ``(scale, theta, tx, ty)``. Deterministic for a fixed pair order.

    Raises
    ------
    InsufficientDataError
        If fewer than 2 pairs are given.
    DegenerateGeometryError
        If the centred source points have (near) zero total variance.
    """
    if len(pairs) < 2:
        raise InsufficientDataError(
            f"need >=2 pairs for a similarity fit; got {len(pairs)}"
        )
    src, dst = pairs_to_arrays(pairs)

    src_mean = src.mean(axis=0)
    dst_mean = dst.mean(axis=0)
    src_c = src - src_mean
    dst_c = dst - dst_mean

    # Cross-covariance sum((dst_i - dst_mean)(src_i - src_mean)^T)
    cov = dst_c.T @ src_c
    U, _, Vt = np.linalg.svd(cov)
    R = U @ Vt
    if np.linalg.det(R) < 0:
        U[:, 1] *= -1.0
        R = U @ Vt

    var_src = float(np.sum(src_c ** 2))
    if not math.isfinite(var_src) or var_src <= np.finfo(np.float64).eps:
        raise DegenerateGeometryError(
            "source points have no spread; similarity is undetermined"
        )

    scale = float(np.trace(cov.T @ R)) / var_src
    t = dst_mean - scale * (R @ src_mean)
    theta = math.atan2(R[1, 0], R[0, 0])
    return Similarity((scale, theta, float(t[0]), float(t[1])))


@estimator_version('0.1.0')
class SimilarityCoRegistration(CoRegistration):
    """Similarity co-registration from control point correspondences.

    Requires a minimum of 2 distinct source points.

    Examples
    --------
    >>> pairs = [((0, 0), (10, 5)), ((10, 0), (10, 25)), ((0, 10), (-10, 5))]
    >>> result = SimilarityCoRegistration().estimate(pairs)
    >>> round(result.transform.scale, 6)
    2.0
    """

    min_pairs = 2

    def estimate(self, pairs: Sequence[Pair]) -> RegistrationResult:
        """Estimate a similarity by Procrustes least squares.

        Parameters
        ----------
        pairs : Sequence[Pair]
            ``(src, dst)`` correspondences.

        Returns
        -------
        RegistrationResult
            Similarity transform and quality metrics.
        """
        self._check_pairs(pairs)
        transform = fit_similarity(pairs)
        residuals = compute_residuals(transform, pairs)
        return RegistrationResult(
            transform=transform,
            residual_rms=compute_rms(residuals),
            num_matches=len(pairs),
            inlier_ratio=1.0,
            metadata={
                'method': 'similarity_least_squares',
                'estimator_version': self.__estimator_version__,
                'max_residual': float(np.max(residuals)),
            },
        )
