# -*- coding: utf-8 -*-
"""
Co-Registration Module - Map-to-reference transform estimation.

Provides the constraint filter, least-squares and RANSAC estimators,
transform algebra, and quality metrics used to register a scanned map
onto a reference image from user-placed point correspondences.

Key Classes
-----------
- CoRegistration: Abstract base class for transform estimators
- RegistrationResult: Result container with transform and quality metrics
- SimilarityCoRegistration: Procrustes least-squares similarity fit
- AffineCoRegistration: Least-squares affine fit
- RansacSimilarityCoRegistration: Outlier-robust similarity fit

Usage
-----
    >>> from mapreg.coregistration import extract_pairs, fit_similarity
    >>> pairs = extract_pairs(constraints)
    >>> transform = fit_similarity(pairs)
    >>> metrics = evaluate(transform, pairs, constraints)

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

from mapreg.coregistration.pairs import Pair, extract_pairs
from mapreg.coregistration.algebra import (
    apply_stack,
    apply_transform,
    compose,
    compose_affine,
    compose_similarity,
    invert,
    invert_affine,
    invert_similarity,
)
from mapreg.coregistration.base import CoRegistration, RegistrationResult
from mapreg.coregistration.similarity import (
    SimilarityCoRegistration,
    fit_similarity,
)
from mapreg.coregistration.affine import AffineCoRegistration, fit_affine
from mapreg.coregistration.ransac import (
    RansacSimilarityCoRegistration,
    ransac_fit_similarity,
)
from mapreg.coregistration.utils import (
    LOW_VARIANCE_WARNING,
    compute_p90,
    compute_residuals,
    compute_rms,
    evaluate,
    is_variance_low,
    residuals_by_id,
)

__all__ = [
    'Pair',
    'extract_pairs',
    'apply_stack',
    'apply_transform',
    'compose',
    'compose_affine',
    'compose_similarity',
    'invert',
    'invert_affine',
    'invert_similarity',
    'CoRegistration',
    'RegistrationResult',
    'SimilarityCoRegistration',
    'fit_similarity',
    'AffineCoRegistration',
    'fit_affine',
    'RansacSimilarityCoRegistration',
    'ransac_fit_similarity',
    'LOW_VARIANCE_WARNING',
    'compute_p90',
    'compute_residuals',
    'compute_rms',
    'evaluate',
    'is_variance_low',
    'residuals_by_id',
]
