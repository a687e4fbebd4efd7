# -*- coding: utf-8 -*-
"""
Vocabulary - Canonical enums for the mapreg package.

Defines the controlled vocabularies exchanged with the hosting command
layer: error reporting units, fit method names, reference-pixel
conversion modes, and UTM datum policies. Hosting layers pass plain
strings; ``parse`` helpers map them onto these enums.

Author
------
Steven Siebert

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

from enum import Enum

from mapreg.exceptions import UnsupportedMethodError, ValidationError


class ErrorUnit(Enum):
    """Units used to report positional error metrics."""

    PIXELS = "pixels"
    METERS = "meters"
    MAP_MILLIMETERS = "mapmm"

    @classmethod
    def parse(cls, name: str) -> 'ErrorUnit':
        """Map a unit name onto an ``ErrorUnit``.

        Unknown names fall back to ``PIXELS``.
        """
        for unit in cls:
            if unit.value == name:
                return unit
        return cls.PIXELS


class FitMethod(Enum):
    """Global fit methods available to a solve request."""

    SIMILARITY = "similarity"
    AFFINE = "affine"
    RANSAC = "ransac"

    @classmethod
    def parse(cls, name: str) -> 'FitMethod':
        """Map a method name onto a ``FitMethod``.

        Raises
        ------
        UnsupportedMethodError
            If *name* is not a known method.
        """
        try:
            return cls(name)
        except ValueError:
            raise UnsupportedMethodError(f"unknown method {name}") from None


class ConversionMode(Enum):
    """Target coordinate systems for a reference-pixel query."""

    LONLAT = "lonlat"
    LOCAL_METERS = "local_m"
    UTM = "utm"
    PROJECTED_METERS = "projected_m"
    PIXEL = "pixel"

    @classmethod
    def parse(cls, name: str) -> 'ConversionMode':
        try:
            return cls(name)
        except ValueError:
            raise ValidationError(
                f"unknown conversion mode {name!r}; expected one of "
                f"{[m.value for m in cls]}"
            ) from None


class DatumPolicy(Enum):
    """Datum used when projecting into UTM."""

    WGS84 = "WGS84"
    NAD83_2011 = "NAD83_2011"

    @classmethod
    def parse(cls, name: str) -> 'DatumPolicy':
        """Map a policy name onto a ``DatumPolicy``; anything else is WGS84."""
        if name == cls.NAD83_2011.value:
            return cls.NAD83_2011
        return cls.WGS84
