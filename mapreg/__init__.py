# -*- coding: utf-8 -*-
"""
mapreg - Map registration and georeferencing.

Fits similarity and affine transforms that register a scanned map onto a
georeferenced reference image from user-placed point correspondences,
scores the fit in pixel, ground, or map units, and exports the result as
PROJ pipelines and world files.

Dependencies
------------
numpy
pyproj
rasterio
tifffile
PyYAML

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

__version__ = "0.1.0"
__author__ = "Duane Smalley"

from mapreg.exceptions import (
    MapregError,
    ValidationError,
    ProcessorError,
    DependencyError,
    GeolocationError,
)
from mapreg.vocabulary import (
    ConversionMode,
    DatumPolicy,
    ErrorUnit,
    FitMethod,
)
from mapreg.config import RegistrationConfig, load_config
from mapreg.models import (
    Affine,
    PointPair,
    QualityMetrics,
    Similarity,
    TransformStack,
)
from mapreg.coregistration import (
    AffineCoRegistration,
    CoRegistration,
    RansacSimilarityCoRegistration,
    RegistrationResult,
    SimilarityCoRegistration,
)
from mapreg.session import RegistrationSession

__all__ = [
    'MapregError',
    'ValidationError',
    'ProcessorError',
    'DependencyError',
    'GeolocationError',
    'ConversionMode',
    'DatumPolicy',
    'ErrorUnit',
    'FitMethod',
    'RegistrationConfig',
    'load_config',
    'Affine',
    'PointPair',
    'QualityMetrics',
    'Similarity',
    'TransformStack',
    'AffineCoRegistration',
    'CoRegistration',
    'RansacSimilarityCoRegistration',
    'RegistrationResult',
    'SimilarityCoRegistration',
    'RegistrationSession',
]
