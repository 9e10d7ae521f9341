# dimred/__init__.py
"""
dimred - Principal Component Analysis with distance-preservation checks

Computes the principal components of a real-valued data matrix (column
means, ranked orthonormal directions, per-direction variances and scores)
and checks how well pairwise Euclidean distances survive when only the
first k components are kept.

The package provides:
- compute_pca / PCA: eigendecomposition of the covariance matrix, or the
  equivalent thin SVD, delegated to LAPACK through SciPy
- compare_distances: correlation between full and k-dimensional pairwise
  distances
- compare_feature_truncation: the same check for naive raw-column truncation
- Numba-accelerated kernels for the covariance matrix and pairwise distances

This module serves as the main entry point for the dimred package.
"""

import logging
from typing import Union

# Set up package-wide logger
logger = logging.getLogger("dimred")
logger.setLevel(logging.INFO)
_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logger.addHandler(_handler)

from .version import __version__, __title__, __description__, __license__

from . import core
from . import models
from . import utils
from .core.config import initialize_config, set_config
from .core.exceptions import (
    DimRedError, InvalidInputError, DimensionError, DataError, ParameterError,
    NumericalDegeneracyError, ConfigurationError, NotFittedError,
    DimRedWarning, NumericWarning
)
from .models.decomposition import (
    PCA, PrincipalComponents, compute_pca,
    DistanceReport, compare_distances, compare_feature_truncation
)


def get_version() -> str:
    """
    Return the version of dimred.

    Returns:
        str: Version string in format MAJOR.MINOR.PATCH
    """
    return __version__


def set_log_level(level: Union[str, int]) -> None:
    """
    Set the logging level for dimred.

    Args:
        level: Logging level, either as string ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
              or as an integer constant from the logging module
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)
    logger.info(f"Log level set to {logging.getLevelName(level)}")


def enable_numba(enabled: bool = True) -> None:
    """
    Enable or disable the Numba kernels for calls that do not pass use_numba.

    Args:
        enabled: Whether to use Numba acceleration by default
    """
    set_config("performance", "enable_numba", enabled)
    logger.info(f"Numba acceleration {'enabled' if enabled else 'disabled'}")


# Initialize the package
initialize_config()

__all__ = [
    # Subpackages
    'core',
    'models',
    'utils',

    # PCA
    'PCA',
    'PrincipalComponents',
    'compute_pca',

    # Distance checks
    'DistanceReport',
    'compare_distances',
    'compare_feature_truncation',

    # Exceptions and warnings
    'DimRedError',
    'InvalidInputError',
    'DimensionError',
    'DataError',
    'ParameterError',
    'NumericalDegeneracyError',
    'ConfigurationError',
    'NotFittedError',
    'DimRedWarning',
    'NumericWarning',

    # Public functions
    'get_version',
    'set_log_level',
    'enable_numba',

    # Version info
    '__version__',
]

logger.debug(f"dimred v{__version__} initialized successfully")
