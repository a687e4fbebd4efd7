# -*- coding: utf-8 -*-
"""
Correspondence Extraction - Usable point pairs from a raw constraint list.

Keeps only ``PointPair`` constraints and silently drops entries that
cannot contribute to a fit: non-finite coordinates, pairs whose source
and destination coincide, and exact repeats of an earlier pair. The
output preserves input order. An empty result is valid; the fitters
raise their own ``InsufficientDataError``.

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
2026-10-13
"""

# Standard library
import math
from typing import Iterable, List, Set, Tuple

# mapreg internal
from mapreg.models.constraints import Constraint, Point2, PointPair

Pair = Tuple[Point2, Point2]

DEGENERATE_TOLERANCE = 1e-24


def extract_pairs(
    constraints: Iterable[Constraint],
    degenerate_tolerance: float = DEGENERATE_TOLERANCE,
) -> List[Pair]:
    """Extract ``(src, dst)`` correspondence pairs from constraints.

    Parameters
    ----------
    constraints : Iterable[Constraint]
        Raw constraint list in session order.
    degenerate_tolerance : float
        Pairs whose squared src/dst distance is at or below this value
        are dropped.

    Returns
    -------
    List[Tuple[Tuple[float, float], Tuple[float, float]]]
        Filtered pairs, first occurrence wins for exact duplicates.
    """
    pairs: List[Pair] = []
    seen: Set[Pair] = set()
    for c in constraints:
        if not isinstance(c, PointPair):
            continue
        src = (float(c.src[0]), float(c.src[1]))
        dst = (float(c.dst[0]), float(c.dst[1]))
        if not all(math.isfinite(v) for v in (*src, *dst)):
            continue
        dx = dst[0] - src[0]
        dy = dst[1] - src[1]
        if dx * dx + dy * dy <= degenerate_tolerance:
            continue
        if (src, dst) in seen:
            continue
        seen.add((src, dst))
        pairs.append((src, dst))
    return pairs
