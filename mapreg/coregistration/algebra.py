# -*- coding: utf-8 -*-
"""
Transform Algebra - Apply, invert, and compose fitted transforms.

Works on the ``Similarity`` and ``Affine`` kinds from
``mapreg.models.transforms``. The schema-only kinds (``Homography``,
``Tps``, ``Ffd``) raise ``UnsupportedMethodError``.

Composition conventions:

    compose_similarity(a, b) :  p -> a(b(p))
        s = sa * sb,  theta = theta_a + theta_b,  t = sa * R(theta_a) @ tb + ta
    compose_affine(a, b)     :  p -> b(a(p))
        M = Mb @ Ma,  t = Mb @ ta + tb
    compose(first, then)     :  p -> then(first(p))
        dispatches to the two above; mixed kinds compose as affines

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
2026-10-17
"""

# Standard library
import math
from typing import Sequence, Union

# Third-party
import numpy as np

# mapreg internal
from mapreg.exceptions import NotInvertibleError, UnsupportedMethodError
from mapreg.models.transforms import (
    Affine,
    Similarity,
    TransformKind,
    TransformStack,
)

_EPS = np.finfo(np.float64).eps


def rotation(theta: float) -> np.ndarray:
    """2x2 counter-clockwise rotation matrix."""
    c, s = math.cos(theta), math.sin(theta)
    return np.array([[c, -s], [s, c]], dtype=np.float64)


def apply_transform(
    transform: TransformKind,
    points: Union[Sequence[float], np.ndarray],
) -> np.ndarray:
    """Apply a transform to one point or a set of points.

    Parameters
    ----------
    transform : Similarity or Affine
        Transform to apply.
    points : array-like
        A single ``(x, y)`` point, shape (2,), or a set of points,
        shape (N, 2).

    Returns
    -------
    np.ndarray
        Transformed point(s), same shape as the input.

    Raises
    ------
    UnsupportedMethodError
        If *transform* is a schema-only kind.
    """
    pts = np.asarray(points, dtype=np.float64)
    single = pts.ndim == 1
    pts = np.atleast_2d(pts)

    if isinstance(transform, Similarity):
        s, theta, tx, ty = transform.params
        out = s * (pts @ rotation(theta).T) + np.array([tx, ty])
    elif isinstance(transform, Affine):
        out = pts @ transform.linear.T + np.array(transform.translation)
    else:
        raise UnsupportedMethodError(
            f"{type(transform).__name__} transforms cannot be applied"
        )

    return out[0] if single else out


def apply_stack(
    stack: TransformStack,
    points: Union[Sequence[float], np.ndarray],
) -> np.ndarray:
    """Apply every transform of *stack* in order, first element first."""
    out = np.asarray(points, dtype=np.float64)
    for transform in stack.transforms:
        out = apply_transform(transform, out)
    return out


def invert_similarity(t: Similarity) -> Similarity:
    """Inverse similarity: ``1/s``, ``-theta``, ``-(1/s) R(-theta) t``.

    Raises
    ------
    NotInvertibleError
        If the scale is zero.
    """
    s, theta, tx, ty = t.params
    if abs(s) < _EPS:
        raise NotInvertibleError("similarity with zero scale is not invertible")
    s_inv = 1.0 / s
    theta_inv = -theta
    t_inv = -s_inv * (rotation(theta_inv) @ np.array([tx, ty]))
    return Similarity((s_inv, theta_inv, t_inv[0], t_inv[1]))


def invert_affine(t: Affine) -> Affine:
    """Inverse affine via the 2x2 determinant.

    Raises
    ------
    NotInvertibleError
        If ``|det(M)|`` is below machine epsilon.
    """
    a, b, c, d, tx, ty = t.params
    det = a * d - b * c
    if abs(det) < _EPS:
        raise NotInvertibleError(
            f"affine transform is not invertible (det={det:g})"
        )
    ia, ib = d / det, -b / det
    ic, id_ = -c / det, a / det
    itx = -(ia * tx + ib * ty)
    ity = -(ic * tx + id_ * ty)
    return Affine((ia, ib, ic, id_, itx, ity))


def invert(transform: TransformKind) -> TransformKind:
    """Invert a similarity or affine transform."""
    if isinstance(transform, Similarity):
        return invert_similarity(transform)
    if isinstance(transform, Affine):
        return invert_affine(transform)
    raise UnsupportedMethodError(
        f"{type(transform).__name__} transforms cannot be inverted"
    )


def compose_similarity(a: Similarity, b: Similarity) -> Similarity:
    """Similarity equivalent to applying *b* and then *a*."""
    sa, theta_a, tax, tay = a.params
    sb, theta_b, tbx, tby = b.params
    t = sa * (rotation(theta_a) @ np.array([tbx, tby])) + np.array([tax, tay])
    return Similarity((sa * sb, theta_a + theta_b, t[0], t[1]))


def compose_affine(a: Affine, b: Affine) -> Affine:
    """Affine equivalent to applying *a* and then *b*."""
    m_a, m_b = a.linear, b.linear
    m = m_b @ m_a
    t = m_b @ np.array(a.translation) + np.array(b.translation)
    return Affine((m[0, 0], m[0, 1], m[1, 0], m[1, 1], t[0], t[1]))


def compose(first: TransformKind, then: TransformKind) -> TransformKind:
    """Transform equivalent to applying *first* and then *then*.

    Two similarities compose to a similarity; any other pairing of
    similarity and affine composes to an affine.

    Raises
    ------
    UnsupportedMethodError
        If either transform is a schema-only kind.
    """
    if isinstance(first, Similarity) and isinstance(then, Similarity):
        return compose_similarity(then, first)
    return compose_affine(_as_affine(first), _as_affine(then))


def _as_affine(transform: TransformKind) -> Affine:
    if isinstance(transform, Affine):
        return transform
    if isinstance(transform, Similarity):
        return transform.to_affine()
    raise UnsupportedMethodError(
        f"{type(transform).__name__} transforms cannot be composed"
    )
