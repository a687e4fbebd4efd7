# -*- coding: utf-8 -*-
"""
Estimator Versioning - Version decorator for transform estimators.

Provides the ``@estimator_version`` class decorator for stamping semantic
version strings on co-registration estimator classes. The version is the
single source of truth for the fitting algorithm revision and is echoed
into ``RegistrationResult.metadata`` so persisted results can be traced
back to the estimator that produced them.

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
2026-10-12
"""

# Standard library
from typing import Optional, Type, TypeVar, overload
import importlib.metadata

T = TypeVar('T')


@overload
def estimator_version(version: str):
    ...

@overload
def estimator_version():
    ...

def estimator_version(version: Optional[str] = None):
    """Class decorator that stamps a version on an estimator class.

    Sets ``__estimator_version__`` as a class attribute. If a version is
    not provided, it is inferred from the installed package metadata.

    Parameters
    ----------
    version : str, optional
        Semantic version string (e.g., ``'1.0.0'``).

    Returns
    -------
    Callable
        Class decorator that sets ``__estimator_version__`` on the class.

    Examples
    --------
    >>> @estimator_version('1.0.0')
    ... class MyEstimator(CoRegistration):
    ...     def estimate(self, pairs):
    ...         ...
    >>>
    >>> MyEstimator.__estimator_version__
    '1.0.0'
    """
    def decorator(cls: Type[T]) -> Type[T]:
        if version:
            cls.__estimator_version__ = version
        else:
            try:
                cls.__estimator_version__ = importlib.metadata.version('mapreg')
            except importlib.metadata.PackageNotFoundError:
                cls.__estimator_version__ = "unknown"
        return cls
    return decorator
