# -*- coding: utf-8 -*-
"""
Affine Co-Registration - Least-squares affine transform estimation.

Estimates a 2D affine transform (translation, rotation, scale, shear;
6 degrees of freedom) from point correspondences. Each pair contributes
two rows to a dense ``(2N, 6)`` design matrix:

    x' = a * sx + b * sy + tx
    y' = c * sx + d * sy + ty

which is solved with an SVD-based least-squares solve using a relative
singular-value cutoff so that near-singular systems are reported rather
than amplified.

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
from mapreg.models.transforms import Affine
from mapreg.versioning import estimator_version

AFFINE_RCOND = 1e-6


def fit_affine(pairs: Sequence[Pair], rcond: float = AFFINE_RCOND) -> Affine:
    """Least-squares affine mapping pair sources onto destinations.

    Parameters
    ----------
    pairs : Sequence[Pair]
        At least 3 ``(src, dst)`` correspondences.
    rcond : float
        Singular values below ``rcond * max(singular value)`` are treated
        as zero.

    Returns
    -------
    Affine
        ``(a, b, c, d, tx, ty)``.

    Raises
    ------
    InsufficientDataError
        If fewer than 3 pairs are given.
    DegenerateGeometryError
        If the system is rank deficient after the cutoff (e.g. all
        source points collinear) or the solve fails.
    """
    n = len(pairs)
    if n < 3:
        raise InsufficientDataError(
            f"need >=3 pairs for an affine fit; got {n}"
        )
    src, dst = pairs_to_arrays(pairs)

    # Rows 2i / 2i+1 hold the x' / y' equations of pair i
    A = np.zeros((2 * n, 6), dtype=np.float64)
    A[0::2, 0] = src[:, 0]
    A[0::2, 1] = src[:, 1]
    A[0::2, 4] = 1.0
    A[1::2, 2] = src[:, 0]
    A[1::2, 3] = src[:, 1]
    A[1::2, 5] = 1.0
    b = dst.reshape(-1)

    try:
        params, _, rank, _ = np.linalg.lstsq(A, b, rcond=rcond)
    except np.linalg.LinAlgError as e:
        raise DegenerateGeometryError(f"affine solve failed: {e}") from e

    if rank < 6 or not np.all(np.isfinite(params)):
        raise DegenerateGeometryError(
            f"affine system is rank deficient (rank {rank} of 6); "
            f"source points may be collinear"
        )
    return Affine(tuple(float(p) for p in params))


@estimator_version('0.1.0')
class AffineCoRegistration(CoRegistration):
    """Affine co-registration from control point correspondences.

    Requires a minimum of 3 non-collinear point pairs.

    Parameters
    ----------
    rcond : float
        Relative singular-value cutoff for the least-squares solve.
        Default is 1e-6.

    Examples
    --------
    >>> pairs = [((0, 0), (5, 6)), ((1, 0), (6, 9)), ((0, 1), (7, 10))]
    >>> result = AffineCoRegistration().estimate(pairs)
    >>> np.round(result.transform.params, 6)
    array([1., 2., 3., 4., 5., 6.])
    """

    min_pairs = 3

    def __init__(self, rcond: float = AFFINE_RCOND) -> None:
        self._rcond = rcond

    def estimate(self, pairs: Sequence[Pair]) -> RegistrationResult:
        """Estimate an affine transform by least squares.

        Parameters
        ----------
        pairs : Sequence[Pair]
            ``(src, dst)`` correspondences.

        Returns
        -------
        RegistrationResult
            Affine transform and quality metrics.
        """
        self._check_pairs(pairs)
        transform = fit_affine(pairs, rcond=self._rcond)
        residuals = compute_residuals(transform, pairs)
        return RegistrationResult(
            transform=transform,
            residual_rms=compute_rms(residuals),
            num_matches=len(pairs),
            inlier_ratio=1.0,
            metadata={
                'method': 'affine_least_squares',
                'estimator_version': self.__estimator_version__,
                'rcond': self._rcond,
                'max_residual': float(np.max(residuals)),
            },
        )
