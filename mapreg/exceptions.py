# -*- coding: utf-8 -*-
"""
mapreg Exception Hierarchy - Domain-specific exceptions for map registration.

Provides a small exception hierarchy that lets hosting layers catch
registration errors distinctly from Python built-in exceptions. All mapreg
exceptions subclass both ``MapregError`` and the appropriate built-in
exception, so callers that only know about ``ValueError`` or
``RuntimeError`` keep working.

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
2026-10-14
"""


class MapregError(Exception):
    """Base exception for all mapreg errors."""


class ValidationError(MapregError, ValueError):
    """Invalid input data, parameters, or configuration.

    Raised for duplicate constraint ids, malformed constraint payloads,
    and other input validation failures.
    """


class InvalidParameterError(ValidationError):
    """A numeric parameter is non-finite or out of range.

    Raised for a non-positive or non-finite RANSAC inlier threshold and
    a non-positive iteration budget.
    """


class InsufficientDataError(ValidationError):
    """Fewer correspondences than the requested fit method requires."""


class UnsupportedMethodError(ValidationError):
    """Unrecognized fit method name, or an operation on a transform kind
    that is representable but has no working implementation."""


class ParseFailure(MapregError, ValueError):
    """Malformed numeric line in a sidecar file or malformed binary tag."""


class IOFailure(MapregError, OSError):
    """Missing or unreadable file."""


class ProcessorError(MapregError, RuntimeError):
    """Algorithm failure during estimation.

    Raised when a fit encounters a non-recoverable error that is not an
    input validation issue.
    """


class DegenerateGeometryError(ProcessorError):
    """Near-zero source variance or a singular linear system."""


class NotInvertibleError(DegenerateGeometryError):
    """Transform linear part has a (near) zero determinant."""


class NoModelFoundError(ProcessorError):
    """RANSAC exhausted its iteration budget without a single inlier."""


class DependencyError(MapregError, ImportError):
    """Missing optional dependency required for a specific module.

    Raised when a module requires an optional package (pyproj,
    rasterio, tifffile) that is not installed.
    """


class GeolocationError(MapregError, RuntimeError):
    """Coordinate transformation or reprojection failure.

    Raised when the projection engine rejects a CRS definition or a
    coordinate cannot be reprojected.
    """


class ConversionUnavailableError(GeolocationError):
    """A coordinate query needs state that is not available (no CRS, no
    reference image)."""
