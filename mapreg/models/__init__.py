# -*- coding: utf-8 -*-
"""
Models - Typed entities shared by the solver, quality engine, and session.

Key Classes
-----------
- PointPair, Point, Polyline, Polygon, AnisotropicPin, Anchor: constraints
- Similarity, Affine, Homography, Tps, Ffd, TransformStack: transforms
- QualityMetrics: residual and error statistics for a fitted transform

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
2026-10-12
"""

from mapreg.models.constraints import (
    Anchor,
    AnisotropicPin,
    Constraint,
    Point,
    PointPair,
    Polygon,
    Polyline,
    constraint_from_dict,
    constraint_to_dict,
    next_constraint_id,
)
from mapreg.models.transforms import (
    Affine,
    Ffd,
    Homography,
    Similarity,
    Tps,
    TransformKind,
    TransformStack,
)
from mapreg.models.metrics import QualityMetrics

__all__ = [
    'Anchor',
    'AnisotropicPin',
    'Constraint',
    'Point',
    'PointPair',
    'Polygon',
    'Polyline',
    'constraint_from_dict',
    'constraint_to_dict',
    'next_constraint_id',
    'Affine',
    'Ffd',
    'Homography',
    'Similarity',
    'Tps',
    'TransformKind',
    'TransformStack',
    'QualityMetrics',
]
