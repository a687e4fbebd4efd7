# -*- coding: utf-8 -*-
"""
Configuration - Solver and export defaults loaded from YAML.

Reads ``config.yaml`` shipped next to this module (or a caller-supplied
file with the same layout) into a ``RegistrationConfig``. Missing keys
keep their built-in defaults so partial override files are valid.

Dependencies
------------
pyyaml

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
2026-10-15
"""

# Standard library
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

# Third-party
import yaml

# mapreg internal
from mapreg.exceptions import IOFailure, ValidationError

CONFIG_PATH = Path(__file__).parent / "config.yaml"

NAD83_2011_WKT = (
    'GEOGCS["NAD83(2011)",DATUM["NAD83_National_Spatial_Reference_System_2011",'
    'SPHEROID["GRS 1980",6378137,298.257222101]],PRIMEM["Greenwich",0],'
    'UNIT["degree",0.0174532925199433]]'
)


@dataclass
class RegistrationConfig:
    """Tunable defaults for fitting, quality checks, and export.

    Parameters
    ----------
    ransac_threshold : float
        RANSAC inlier threshold in pixels.
    ransac_iterations : int
        RANSAC iteration budget.
    ransac_seed : int, optional
        Seed for the RANSAC sampler. None draws fresh OS entropy.
    variance_tolerance : float
        Pooled source variance below which a low-variance warning is
        attached to the quality metrics.
    degenerate_tolerance : float
        Squared src/dst distance at or below which a pair is discarded.
    affine_rcond : float
        Relative singular-value cutoff for the affine least-squares solve.
    world_file_extension : str
        Extension used when exporting world files.
    fallback_wkt : str
        Projection text written next to a composed world file when the
        reference image has no known CRS.
    """

    ransac_threshold: float = 1.0
    ransac_iterations: int = 1000
    ransac_seed: Optional[int] = None
    variance_tolerance: float = 1e-6
    degenerate_tolerance: float = 1e-24
    affine_rcond: float = 1e-6
    world_file_extension: str = 'tfw'
    fallback_wkt: str = NAD83_2011_WKT

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> 'RegistrationConfig':
        """Build a config from the nested YAML layout."""
        defaults = cls()
        ransac = cfg.get('ransac') or {}
        quality = cfg.get('quality') or {}
        pairs = cfg.get('pairs') or {}
        affine = cfg.get('affine') or {}
        export = cfg.get('export') or {}
        try:
            seed = ransac.get('seed', defaults.ransac_seed)
            return cls(
                ransac_threshold=float(
                    ransac.get('threshold_px', defaults.ransac_threshold)),
                ransac_iterations=int(
                    ransac.get('iterations', defaults.ransac_iterations)),
                ransac_seed=None if seed is None else int(seed),
                variance_tolerance=float(
                    quality.get('variance_tolerance',
                                defaults.variance_tolerance)),
                degenerate_tolerance=float(
                    pairs.get('degenerate_tolerance',
                              defaults.degenerate_tolerance)),
                affine_rcond=float(affine.get('rcond', defaults.affine_rcond)),
                world_file_extension=str(
                    export.get('world_file_extension',
                               defaults.world_file_extension)).lstrip('.'),
                fallback_wkt=str(
                    export.get('fallback_wkt', defaults.fallback_wkt)).strip(),
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid mapreg configuration: {e}") from e


def load_config(
    path: Optional[Union[str, Path]] = None,
) -> RegistrationConfig:
    """Load a ``RegistrationConfig`` from YAML.

    Parameters
    ----------
    path : str or Path, optional
        Configuration file. Defaults to the packaged ``config.yaml``.

    Returns
    -------
    RegistrationConfig

    Raises
    ------
    IOFailure
        If the file cannot be read.
    ValidationError
        If the file is not a YAML mapping or holds non-numeric values.
    """
    config_path = Path(path) if path is not None else CONFIG_PATH
    try:
        with open(config_path) as f:
            cfg = yaml.safe_load(f) or {}
    except OSError as e:
        raise IOFailure(f"cannot read configuration {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in {config_path}: {e}") from e
    if not isinstance(cfg, dict):
        raise ValidationError(
            f"Configuration {config_path} must be a mapping, "
            f"got {type(cfg).__name__}"
        )
    return RegistrationConfig.from_dict(cfg)
