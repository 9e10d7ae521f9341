"""
dimred utility functions.

Matrix helpers and column-wise data transformations used by the PCA engine
and available to callers that prepare their own input.
"""

import logging

logger = logging.getLogger("dimred.utils")

from .matrix_ops import (
    ensure_symmetric,
    is_orthonormal,
    covariance_matrix,
    correlation_matrix
)
from .data_transformations import (
    center_columns,
    sanitize_nonfinite
)

__all__ = [
    # Matrix operations
    'ensure_symmetric',
    'is_orthonormal',
    'covariance_matrix',
    'correlation_matrix',

    # Data transformations
    'center_columns',
    'sanitize_nonfinite',
]
