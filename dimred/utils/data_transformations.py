# dimred/utils/data_transformations.py
"""
Data Transformation Module

Column-wise preprocessing for data matrices: centering, which PCA.fit applies
before decomposing, and non-finite sanitization, which is left to callers
because the engine itself rejects NaN and infinite input.
"""

import logging
from typing import Tuple

import numpy as np

from dimred.core.types import DataMatrixLike, Matrix, Vector
from dimred.core.validation import as_float_matrix

logger = logging.getLogger("dimred.utils.data_transformations")


def center_columns(data: DataMatrixLike) -> Tuple[Matrix, Vector]:
    """
    Subtract the column means from every row.

    Args:
        data: N x P data matrix

    Returns:
        Tuple of (centered copy of the data, length-P vector of column means)

    Examples:
        >>> import numpy as np
        >>> from dimred.utils.data_transformations import center_columns
        >>> centered, means = center_columns(np.array([[1.0, 10.0], [3.0, 20.0]]))
        >>> means
        array([ 2., 15.])
        >>> centered
        array([[-1., -5.],
               [ 1.,  5.]])
    """
    array = as_float_matrix(data, "data")
    means = array.mean(axis=0)
    return array - means, means


def sanitize_nonfinite(data: DataMatrixLike, fill_value: float = 0.0) -> Matrix:
    """
    Replace NaN and infinite entries with fill_value.

    Returns a new matrix; the input is never modified.

    Args:
        data: 2-D data matrix
        fill_value: Replacement for every non-finite entry

    Returns:
        Copy of the data with all entries finite
    """
    array = as_float_matrix(data, "data")
    bad = ~np.isfinite(array)
    if bad.any():
        logger.debug(f"Replacing {int(bad.sum())} non-finite entries with {fill_value}")
        array[bad] = fill_value
    return array
