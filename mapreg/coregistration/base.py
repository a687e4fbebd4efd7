# -*- coding: utf-8 -*-
"""
Co-Registration Base Classes - Abstract interface for transform estimators.

Defines the ``CoRegistration`` ABC and the ``RegistrationResult`` data
class that all estimators produce. Co-registration estimates a spatial
transform that maps map (moving image) pixel coordinates to reference
(fixed image) pixel coordinates from a list of point correspondences.

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
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

# Third-party
import numpy as np

# mapreg internal
from mapreg.coregistration.algebra import apply_transform, invert
from mapreg.coregistration.pairs import Pair
from mapreg.exceptions import InsufficientDataError
from mapreg.models.transforms import Affine, Similarity, TransformKind


class RegistrationResult:
    """Result of a transform estimation.

    Parameters
    ----------
    transform : Similarity or Affine
        Fitted transform mapping map pixels to reference pixels.
    residual_rms : float
        Root mean square residual in pixels over the pairs used.
    num_matches : int
        Number of correspondences supplied to the estimator.
    inlier_ratio : float
        Fraction of correspondences classified as inliers (0.0 to 1.0).
        Set to 1.0 for least-squares methods without outlier rejection.
    metadata : Dict[str, Any]
        Estimator-specific metadata (method, RANSAC threshold, ...).
    """

    def __init__(
        self,
        transform: TransformKind,
        residual_rms: float,
        num_matches: int,
        inlier_ratio: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.transform = transform
        self.residual_rms = residual_rms
        self.num_matches = num_matches
        self.inlier_ratio = inlier_ratio
        self.metadata = metadata or {}

    @property
    def transform_matrix(self) -> np.ndarray:
        """Transform as a (2, 3) ``[M | t]`` matrix."""
        return self.transform.to_matrix()

    @property
    def is_similarity(self) -> bool:
        return isinstance(self.transform, Similarity)

    @property
    def is_affine(self) -> bool:
        return isinstance(self.transform, Affine)

    def transform_points(
        self,
        points: np.ndarray,
        inverse: bool = False,
    ) -> np.ndarray:
        """Transform 2D points with this result (or its inverse).

        Parameters
        ----------
        points : np.ndarray
            Points, shape (N, 2) or (2,), columns ``(x, y)``.
        inverse : bool
            If True, map reference pixels back to map pixels.

        Returns
        -------
        np.ndarray
            Transformed points, same shape as the input.

        Raises
        ------
        NotInvertibleError
            If *inverse* is requested for a singular transform.
        """
        transform = invert(self.transform) if inverse else self.transform
        return apply_transform(transform, points)

    def __repr__(self) -> str:
        kind = type(self.transform).__name__.lower()
        return (
            f"RegistrationResult({kind}, "
            f"rms={self.residual_rms:.4f}px, "
            f"matches={self.num_matches}, "
            f"inliers={self.inlier_ratio:.1%})"
        )


class CoRegistration(ABC):
    """Abstract base class for transform estimators.

    Subclasses set ``min_pairs`` and implement ``estimate``.
    """

    min_pairs: int = 1

    @abstractmethod
    def estimate(self, pairs: Sequence[Pair]) -> RegistrationResult:
        """Estimate the transform that maps pair sources onto destinations.

        Parameters
        ----------
        pairs : Sequence[Pair]
            ``(src, dst)`` correspondences, typically from
            ``extract_pairs``.

        Returns
        -------
        RegistrationResult
            Fitted transform and quality metrics.

        Raises
        ------
        InsufficientDataError
            If fewer than ``min_pairs`` pairs are given.
        DegenerateGeometryError
            If the pair geometry does not determine a transform.
        """
        ...

    def _check_pairs(self, pairs: Sequence[Pair]) -> None:
        if len(pairs) < self.min_pairs:
            raise InsufficientDataError(
                f"{type(self).__name__} requires at least {self.min_pairs} "
                f"pairs, got {len(pairs)}"
            )
