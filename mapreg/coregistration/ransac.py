# -*- coding: utf-8 -*-
"""
RANSAC Co-Registration - Outlier-robust similarity estimation.

Random-sample consensus over minimal two-pair similarity fits. Each
iteration draws two distinct pairs, fits a similarity to them, and counts
the pairs whose residual under that candidate is strictly below the
inlier threshold. Whenever a candidate beats the best inlier count seen
so far, the similarity is refit on all of its inliers and kept as the
new best model.

The sampler is an explicit ``numpy.random.Generator``; pass ``seed`` or
``rng`` for reproducible fits.

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
2026-10-13

Modified
--------
2026-10-16
"""

# Standard library
import logging
import math
from typing import Optional, Sequence, Tuple

# Third-party
import numpy as np

# mapreg internal
from mapreg.coregistration.base import CoRegistration, RegistrationResult
from mapreg.coregistration.pairs import Pair
from mapreg.coregistration.similarity import fit_similarity
from mapreg.coregistration.utils import compute_residuals, compute_rms
from mapreg.exceptions import (
    DegenerateGeometryError,
    InsufficientDataError,
    InvalidParameterError,
    NoModelFoundError,
)
from mapreg.models.transforms import Similarity
from mapreg.versioning import estimator_version

logger = logging.getLogger(__name__)


def ransac_fit_similarity(
    pairs: Sequence[Pair],
    threshold: float,
    iterations: int,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> Tuple[Similarity, np.ndarray]:
    """Robust similarity fit by random-sample consensus.

    Parameters
    ----------
    pairs : Sequence[Pair]
        At least 2 ``(src, dst)`` correspondences.
    threshold : float
        Inlier residual threshold in pixels. Must be finite and > 0.
    iterations : int
        Number of minimal samples to draw. Must be >= 1.
    rng : numpy.random.Generator, optional
        Random source. Takes precedence over *seed*.
    seed : int, optional
        Seed for a new ``default_rng`` when *rng* is not given.

    Returns
    -------
    Tuple[Similarity, np.ndarray]
        Best model and the boolean inlier mask of its candidate, shape (N,).

    Raises
    ------
    InsufficientDataError
        If fewer than 2 pairs are given.
    InvalidParameterError
        If *threshold* is not finite and positive or *iterations* < 1.
    NoModelFoundError
        If no iteration produced a single inlier.
    """
    if len(pairs) < 2:
        raise InsufficientDataError(
            f"need >=2 pairs for RANSAC; got {len(pairs)}"
        )
    if not math.isfinite(threshold) or threshold <= 0.0:
        raise InvalidParameterError(
            f"RANSAC threshold must be finite and > 0, got {threshold}"
        )
    if iterations < 1:
        raise InvalidParameterError(
            f"RANSAC iterations must be >= 1, got {iterations}"
        )
    if rng is None:
        rng = np.random.default_rng(seed)

    n = len(pairs)
    best_model: Optional[Similarity] = None
    best_mask = np.zeros(n, dtype=bool)
    best_count = 0

    for _ in range(iterations):
        i, j = rng.choice(n, size=2, replace=False)
        try:
            candidate = fit_similarity([pairs[i], pairs[j]])
        except DegenerateGeometryError:
            continue

        mask = compute_residuals(candidate, pairs) < threshold
        count = int(np.count_nonzero(mask))
        if count <= best_count:
            continue

        inliers = [p for p, keep in zip(pairs, mask) if keep]
        try:
            model = fit_similarity(inliers)
        except (InsufficientDataError, DegenerateGeometryError):
            model = candidate
        best_model, best_mask, best_count = model, mask, count

    if best_model is None:
        raise NoModelFoundError(
            f"RANSAC found no model with any inlier in {iterations} iterations"
        )
    logger.debug(
        "RANSAC kept %d of %d pairs as inliers (threshold %.3g px)",
        best_count, n, threshold,
    )
    return best_model, best_mask


@estimator_version('0.1.0')
class RansacSimilarityCoRegistration(CoRegistration):
    """Outlier-robust similarity co-registration.

    Parameters
    ----------
    threshold : float
        Inlier residual threshold in pixels. Default 1.0.
    iterations : int
        RANSAC iteration budget. Default 1000.
    seed : int, optional
        Seed for the sampler. None draws fresh OS entropy per estimate.

    Examples
    --------
    >>> coreg = RansacSimilarityCoRegistration(threshold=1.0, seed=7)
    >>> result = coreg.estimate(pairs)
    >>> result.inlier_ratio
    0.95
    """

    min_pairs = 2

    def __init__(
        self,
        threshold: float = 1.0,
        iterations: int = 1000,
        seed: Optional[int] = None,
    ) -> None:
        if not math.isfinite(threshold) or threshold <= 0.0:
            raise InvalidParameterError(
                f"RANSAC threshold must be finite and > 0, got {threshold}"
            )
        self._threshold = threshold
        self._iterations = iterations
        self._seed = seed

    def estimate(self, pairs: Sequence[Pair]) -> RegistrationResult:
        """Estimate a similarity with RANSAC outlier rejection.

        Parameters
        ----------
        pairs : Sequence[Pair]
            ``(src, dst)`` correspondences.

        Returns
        -------
        RegistrationResult
            Best similarity; ``residual_rms`` is computed over its inliers.
        """
        self._check_pairs(pairs)
        transform, mask = ransac_fit_similarity(
            pairs,
            self._threshold,
            self._iterations,
            seed=self._seed,
        )
        num_inliers = int(np.count_nonzero(mask))
        inliers = [p for p, keep in zip(pairs, mask) if keep]
        residuals = compute_residuals(transform, inliers)
        return RegistrationResult(
            transform=transform,
            residual_rms=compute_rms(residuals),
            num_matches=len(pairs),
            inlier_ratio=num_inliers / len(pairs),
            metadata={
                'method': 'similarity_ransac',
                'estimator_version': self.__estimator_version__,
                'num_inliers': num_inliers,
                'ransac_threshold': self._threshold,
                'ransac_iterations': self._iterations,
            },
        )
