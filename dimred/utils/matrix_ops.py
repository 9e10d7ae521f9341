# dimred/utils/matrix_ops.py
"""
Matrix Operations Module

Small matrix helpers used around the PCA engine: forcing symmetry before a
symmetric eigensolver, checking that a basis is orthonormal, and building
covariance and correlation matrices.

correlation_matrix() is meant for callers that prepare data themselves, such
as the digit-image case, where blank pixel columns have zero variance and
their correlation entries would otherwise be NaN.

Functions:
    ensure_symmetric: Ensure a matrix is symmetric
    is_orthonormal: Check that the columns of a matrix are orthonormal
    covariance_matrix: Population covariance matrix of the columns
    correlation_matrix: Column correlation matrix with zero-variance fill
"""

import logging

import numpy as np

from dimred.core.exceptions import raise_dimension_error
from dimred.core.types import CorrelationMatrix, CovarianceMatrix, Matrix
from dimred.core.validation import as_float_matrix

logger = logging.getLogger("dimred.utils.matrix_ops")


def ensure_symmetric(matrix: Matrix, tol: float = 1e-8) -> Matrix:
    """
    Ensure a matrix is symmetric by averaging with its transpose.

    If the matrix is already symmetric within the specified tolerance, it is
    returned unchanged.

    Args:
        matrix: Matrix to make symmetric
        tol: Tolerance for checking symmetry

    Returns:
        Symmetric matrix

    Raises:
        DimensionError: If the input matrix is not square

    Examples:
        >>> import numpy as np
        >>> from dimred.utils.matrix_ops import ensure_symmetric
        >>> ensure_symmetric(np.array([[1.0, 2.0], [3.0, 4.0]]))
        array([[1. , 2.5],
               [2.5, 4. ]])
    """
    matrix = np.asarray(matrix)

    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise_dimension_error(
            "Input must be a square matrix",
            array_name="matrix",
            expected_shape="(n, n)",
            actual_shape=matrix.shape
        )

    if np.allclose(matrix, matrix.T, rtol=tol, atol=tol):
        return matrix

    return (matrix + matrix.T) / 2


def is_orthonormal(matrix: Matrix, tol: float = 1e-6) -> bool:
    """
    Check that the columns of a matrix are orthonormal.

    Every pair of distinct columns must have a dot product within tol of 0
    and every column a sum of squares within tol of 1.

    Args:
        matrix: P x K matrix whose columns are checked
        tol: Absolute tolerance on the entries of Q'Q - I

    Returns:
        True if the columns are orthonormal, False otherwise
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[1] > matrix.shape[0]:
        return False
    if not np.isfinite(matrix).all():
        return False

    gram = matrix.T @ matrix
    return bool(np.all(np.abs(gram - np.eye(matrix.shape[1])) <= tol))


def covariance_matrix(centered: Matrix) -> CovarianceMatrix:
    """
    Population covariance matrix of already-centered columns.

    Entry (i, j) is the mean over rows of centered[:, i] * centered[:, j],
    i.e. the divisor is N rather than N - 1.

    Args:
        centered: N x P matrix with zero column means

    Returns:
        P x P symmetric covariance matrix
    """
    centered = np.asarray(centered, dtype=np.float64)
    n_samples = centered.shape[0]
    return ensure_symmetric(centered.T @ centered / n_samples)


def correlation_matrix(data: Matrix, fill_value: float = 0.0) -> CorrelationMatrix:
    """
    Pearson correlation matrix of the columns of data.

    Columns with zero variance have no defined correlation. Their off-diagonal
    entries are set to fill_value and their diagonal entry to 1 instead of
    letting NaN propagate.

    Args:
        data: N x P data matrix (N >= 2)
        fill_value: Value used for entries involving a zero-variance column

    Returns:
        P x P correlation matrix

    Raises:
        DimensionError: If data is not a 2-D matrix with at least two rows
        DataError: If data contains non-numeric values

    Examples:
        >>> import numpy as np
        >>> from dimred.utils.matrix_ops import correlation_matrix
        >>> x = np.array([[1.0, 0.0, 2.0], [2.0, 0.0, 4.0], [3.0, 0.0, 7.0]])
        >>> correlation_matrix(x)[1]
        array([0., 1., 0.])
    """
    data = as_float_matrix(data, "data")
    if data.shape[0] < 2:
        raise_dimension_error(
            "Correlation requires at least two rows",
            array_name="data",
            expected_shape="(>= 2, n_features)",
            actual_shape=data.shape
        )

    centered = data - data.mean(axis=0)
    cov = centered.T @ centered / data.shape[0]
    std_devs = np.sqrt(np.diag(cov))
    constant = std_devs == 0

    if constant.any():
        logger.debug(f"{int(constant.sum())} zero-variance columns filled with {fill_value}")

    safe_std = np.where(constant, 1.0, std_devs)
    corr = cov / np.outer(safe_std, safe_std)
    corr[constant, :] = fill_value
    corr[:, constant] = fill_value
    np.fill_diagonal(corr, 1.0)

    return (corr + corr.T) / 2
