# -*- coding: utf-8 -*-
"""
Transform Models - Parameter containers for the supported transform kinds.

Defines the closed set of transform kinds a registration can produce and
the ``TransformStack`` that orders them. ``Similarity`` and ``Affine`` are
fit and applied by ``mapreg.coregistration``; ``Homography``, ``Tps`` and
``Ffd`` are representable in the schema but have no fitting
implementation.

Parameter conventions:

    Similarity  (scale, theta, tx, ty)
        p' = scale * R(theta) @ p + t
    Affine      (a, b, c, d, tx, ty)
        x' = a * x + b * y + tx
        y' = c * x + d * y + ty

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
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple, Union

# Third-party
import numpy as np

# mapreg internal
from mapreg.exceptions import ValidationError


def _as_params(values: Sequence[float], count: int, kind: str) -> Tuple[float, ...]:
    params = tuple(float(v) for v in values)
    if len(params) != count:
        raise ValidationError(
            f"{kind} requires {count} parameters, got {len(params)}"
        )
    return params


@dataclass
class Similarity:
    """Uniform scale, rotation, and translation.

    Parameters
    ----------
    params : Sequence[float]
        ``(scale, theta, tx, ty)`` with ``theta`` in radians.
    """

    params: Tuple[float, float, float, float]

    def __post_init__(self) -> None:
        self.params = _as_params(self.params, 4, 'Similarity')

    @property
    def scale(self) -> float:
        return self.params[0]

    @property
    def theta(self) -> float:
        return self.params[1]

    @property
    def translation(self) -> Tuple[float, float]:
        return (self.params[2], self.params[3])

    def to_affine(self) -> 'Affine':
        """Equivalent affine transform ``(a, b, c, d, tx, ty)``.

        Returns
        -------
        Affine
            ``a = d = s*cos(theta)``, ``b = -s*sin(theta)``,
            ``c = s*sin(theta)``.
        """
        s, theta, tx, ty = self.params
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        return Affine((s * cos_t, -s * sin_t, s * sin_t, s * cos_t, tx, ty))

    def to_matrix(self) -> np.ndarray:
        """Transform as a (2, 3) ``[M | t]`` matrix."""
        return self.to_affine().to_matrix()


@dataclass
class Affine:
    """General 2x2 linear map plus translation.

    Parameters
    ----------
    params : Sequence[float]
        ``(a, b, c, d, tx, ty)``.
    """

    params: Tuple[float, float, float, float, float, float]

    def __post_init__(self) -> None:
        self.params = _as_params(self.params, 6, 'Affine')

    @property
    def linear(self) -> np.ndarray:
        """The 2x2 linear block ``[[a, b], [c, d]]``."""
        a, b, c, d, _, _ = self.params
        return np.array([[a, b], [c, d]], dtype=np.float64)

    @property
    def translation(self) -> Tuple[float, float]:
        return (self.params[4], self.params[5])

    @property
    def determinant(self) -> float:
        a, b, c, d, _, _ = self.params
        return a * d - b * c

    def to_matrix(self) -> np.ndarray:
        """Transform as a (2, 3) ``[M | t]`` matrix."""
        a, b, c, d, tx, ty = self.params
        return np.array([[a, b, tx], [c, d, ty]], dtype=np.float64)


@dataclass
class Homography:
    """Projective transform, row-major 3x3 (schema only)."""

    params: Tuple[float, ...]

    def __post_init__(self) -> None:
        self.params = _as_params(self.params, 9, 'Homography')


@dataclass
class Tps:
    """Thin-plate spline (schema only).

    Parameters
    ----------
    control_points : List[Tuple[float, float]]
        Spline control points.
    smoothing : float
        Regularization weight (lambda).
    """

    control_points: List[Tuple[float, float]] = field(default_factory=list)
    smoothing: float = 0.0


@dataclass
class Ffd:
    """Free-form deformation lattice (schema only)."""

    control_points: List[Tuple[float, float]] = field(default_factory=list)
    grid_size: Tuple[int, int] = (0, 0)


TransformKind = Union[Similarity, Affine, Homography, Tps, Ffd]


def transform_to_dict(transform: TransformKind) -> Dict[str, Any]:
    """Serialize a transform kind to a plain dict tagged with ``kind``."""
    kind = type(transform).__name__
    if isinstance(transform, (Similarity, Affine, Homography)):
        return {'kind': kind, 'params': list(transform.params)}
    if isinstance(transform, Tps):
        return {
            'kind': kind,
            'control_points': [list(p) for p in transform.control_points],
            'smoothing': transform.smoothing,
        }
    return {
        'kind': kind,
        'control_points': [list(p) for p in transform.control_points],
        'grid_size': list(transform.grid_size),
    }


@dataclass
class TransformStack:
    """Ordered sequence of transforms applied in composition order.

    The solving path always produces a single-element stack.
    """

    transforms: List[TransformKind] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.transforms)

    def apply(self, points: Union[Sequence[float], np.ndarray]) -> np.ndarray:
        """Apply the stack to a point ``(2,)`` or points ``(N, 2)``."""
        from mapreg.coregistration.algebra import apply_stack
        return apply_stack(self, points)

    def to_dict(self) -> Dict[str, Any]:
        return {'transforms': [transform_to_dict(t) for t in self.transforms]}
