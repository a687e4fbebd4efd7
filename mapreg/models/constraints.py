# -*- coding: utf-8 -*-
"""
Constraint Models - Typed user constraints placed on the map and reference.

Defines the closed set of constraint variants a registration session
stores. Every variant carries an ``id`` that is unique within a
constraint collection and is used for lookup, deletion, and per-constraint
error attribution. Only ``PointPair`` currently participates in fitting;
the other variants are stored and round-tripped but are inert for solving.
Records are frozen; derive updated copies with ``dataclasses.replace``.

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
import itertools
from dataclasses import asdict, dataclass, field, fields as dc_fields
from typing import Any, Dict, List, Optional, Tuple, Union

# mapreg internal
from mapreg.exceptions import ValidationError

Point2 = Tuple[float, float]

_ID_COUNTER = itertools.count(1)


def next_constraint_id() -> int:
    """Return a new process-unique constraint id."""
    return next(_ID_COUNTER)


@dataclass(frozen=True)
class Point:
    """Single point of interest.

    Parameters
    ----------
    id : int
        Constraint identifier.
    point : Tuple[float, float]
        Pixel coordinate ``(x, y)``.
    weight : float
        Relative weight.
    """

    id: int
    point: Point2
    weight: float = 1.0


@dataclass(frozen=True)
class PointPair:
    """Correspondence between a map pixel and a reference pixel.

    Parameters
    ----------
    id : int
        Constraint identifier.
    src : Tuple[float, float]
        Map (moving image) pixel ``(x, y)``.
    dst : Tuple[float, float]
        Reference (fixed image) pixel ``(x, y)``.
    dst_world : Tuple[float, float], optional
        Cached reference world coordinate of ``dst`` in CRS units.
    dst_local : Tuple[float, float], optional
        Cached local tangent-plane coordinate of ``dst`` in meters,
        relative to the reference origin pixel.
    weight : float
        Relative weight.
    """

    id: int
    src: Point2
    dst: Point2
    dst_world: Optional[Point2] = None
    dst_local: Optional[Point2] = None
    weight: float = 1.0


@dataclass(frozen=True)
class Polyline:
    id: int
    points: List[Point2] = field(default_factory=list)
    weight: float = 1.0


@dataclass(frozen=True)
class Polygon:
    id: int
    points: List[Point2] = field(default_factory=list)
    weight: float = 1.0


@dataclass(frozen=True)
class AnisotropicPin:
    """Point with an elliptical uncertainty.

    Parameters
    ----------
    id : int
        Constraint identifier.
    point : Tuple[float, float]
        Pixel coordinate ``(x, y)``.
    sigma_major : float
        Standard deviation along the major axis (pixels).
    sigma_minor : float
        Standard deviation along the minor axis (pixels).
    angle : float
        Major-axis orientation in radians.
    """

    id: int
    point: Point2
    sigma_major: float
    sigma_minor: float
    angle: float


@dataclass(frozen=True)
class Anchor:
    id: int
    point: Point2


Constraint = Union[Point, PointPair, Polyline, Polygon, AnisotropicPin, Anchor]

_KINDS = {
    'Point': Point,
    'PointPair': PointPair,
    'Polyline': Polyline,
    'Polygon': Polygon,
    'AnisotropicPin': AnisotropicPin,
    'Anchor': Anchor,
}


def constraint_to_dict(constraint: Constraint) -> Dict[str, Any]:
    """Serialize a constraint to a plain dict tagged with ``kind``."""
    payload = asdict(constraint)
    payload['kind'] = type(constraint).__name__
    return payload


def constraint_from_dict(payload: Dict[str, Any]) -> Constraint:
    """Build a constraint from a dict produced by ``constraint_to_dict``.

    Coordinate lists are converted to tuples. Unknown keys are ignored.

    Raises
    ------
    ValidationError
        If ``kind`` is missing or unknown, or a required field is absent.
    """
    kind = payload.get('kind')
    cls = _KINDS.get(kind)
    if cls is None:
        raise ValidationError(
            f"Unknown constraint kind {kind!r}; expected one of "
            f"{sorted(_KINDS)}"
        )
    kwargs: Dict[str, Any] = {}
    for f in dc_fields(cls):
        if f.name not in payload:
            continue
        value = payload[f.name]
        if f.name == 'points':
            value = [_as_point(p) for p in value]
        elif f.name in ('point', 'src', 'dst', 'dst_world', 'dst_local'):
            value = None if value is None else _as_point(value)
        kwargs[f.name] = value
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ValidationError(f"Invalid {kind} constraint: {e}") from e


def _as_point(value: Any) -> Point2:
    x, y = value
    return (float(x), float(y))
