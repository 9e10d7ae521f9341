# dimred/core/validation.py

"""
Validation utilities for dimred.

Input checks shared by the PCA engine and the distance comparator. Every
function either returns a validated value or raises one of the
InvalidInputError subclasses from dimred.core.exceptions, so callers never see
a bare TypeError or ValueError for malformed input.
"""

import numbers
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from dimred.core.exceptions import (
    raise_data_error, raise_dimension_error, raise_parameter_error
)
from dimred.core.types import DataMatrixLike, Matrix


def as_float_matrix(data: DataMatrixLike, matrix_name: str = "matrix") -> Matrix:
    """Return a fresh C-contiguous float64 copy of a 2-D array-like.

    Args:
        data: NumPy array, pandas DataFrame or nested sequence of numbers
        matrix_name: Name of the matrix for error messages

    Returns:
        np.ndarray: A copy that never aliases the caller's data

    Raises:
        DataError: If the values cannot be interpreted as real numbers
        DimensionError: If the data is not 2-dimensional
    """
    if isinstance(data, pd.DataFrame):
        data = data.to_numpy()

    try:
        array = np.array(data, dtype=np.float64, copy=True, order="C")
    except (TypeError, ValueError) as e:
        raise_data_error(
            f"{matrix_name} cannot be interpreted as a real-valued matrix",
            data_name=matrix_name,
            issue="non-numeric or ragged values",
            details=str(e)
        )

    if array.ndim != 2:
        raise_dimension_error(
            f"{matrix_name} must be 2-dimensional, got {array.ndim} dimensions",
            array_name=matrix_name,
            expected_shape="(n_samples, n_features)",
            actual_shape=array.shape
        )

    return array


def validate_finite(array: np.ndarray, array_name: str = "array") -> np.ndarray:
    """Validate that an array contains no NaN or infinite values.

    Raises:
        DataError: If array contains non-finite values; the error's index
            points at the first offending element
    """
    finite = np.isfinite(array)
    if not finite.all():
        first_bad = tuple(int(i) for i in np.argwhere(~finite)[0])
        issue = "contains NaN values" if np.isnan(array).any() else "contains infinite values"
        raise_data_error(
            f"{array_name} {issue}; replace or drop them before calling",
            data_name=array_name,
            issue=issue,
            index=first_bad
        )
    return array


def validate_data_matrix(
    data: DataMatrixLike,
    matrix_name: str = "matrix",
    min_rows: int = 2,
    min_cols: int = 1
) -> Tuple[Matrix, Optional[List[str]]]:
    """Validate an N x P data matrix.

    Args:
        data: Input data matrix (samples x features)
        matrix_name: Name of the matrix for error messages
        min_rows: Minimum number of observations
        min_cols: Minimum number of features

    Returns:
        Tuple containing:
            - float64 copy of the data
            - column labels when data is a DataFrame, otherwise None

    Raises:
        DimensionError: If the shape is not 2-D or too small
        DataError: If the data contains non-numeric or non-finite values
    """
    feature_names = None
    if isinstance(data, pd.DataFrame):
        feature_names = [str(c) for c in data.columns]

    array = as_float_matrix(data, matrix_name)
    n_rows, n_cols = array.shape

    if n_rows < min_rows:
        raise_dimension_error(
            f"{matrix_name} must have at least {min_rows} rows, got {n_rows}",
            array_name=matrix_name,
            expected_shape=f"(>= {min_rows}, n_features)",
            actual_shape=array.shape
        )

    if n_cols < min_cols:
        raise_dimension_error(
            f"{matrix_name} must have at least {min_cols} columns, got {n_cols}",
            array_name=matrix_name,
            expected_shape=f"(n_samples, >= {min_cols})",
            actual_shape=array.shape
        )

    validate_finite(array, matrix_name)

    return array, feature_names


def validate_compatible_shapes(
    arrays: Sequence[np.ndarray],
    array_names: Sequence[str],
    axis: int = 0
) -> None:
    """Validate that arrays have the same length along an axis.

    Raises:
        DimensionError: If arrays have incompatible shapes
    """
    if len(arrays) < 2:
        return

    ref_shape = arrays[0].shape[axis]
    ref_name = array_names[0]

    for array, name in zip(arrays[1:], array_names[1:]):
        if array.shape[axis] != ref_shape:
            raise_dimension_error(
                f"{name} has shape {array.shape} which is incompatible with "
                f"{ref_name} shape {arrays[0].shape} along axis {axis}",
                array_name=name,
                expected_shape=f"compatible with {ref_name} (dim {axis} = {ref_shape})",
                actual_shape=array.shape
            )


def validate_int_in_range(
    value: int,
    param_name: str,
    lower: int,
    upper: Optional[int] = None
) -> int:
    """Validate an integer parameter against inclusive bounds.

    Raises:
        ParameterError: If value is not an integer or lies outside the bounds
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise_parameter_error(
            f"{param_name} must be an integer, got {type(value).__name__}",
            param_name=param_name,
            param_value=value
        )

    constraint = f"between {lower} and {upper}" if upper is not None else f">= {lower}"
    if value < lower or (upper is not None and value > upper):
        raise_parameter_error(
            f"{param_name} must be {constraint}, got {value}",
            param_name=param_name,
            param_value=value,
            constraint=constraint
        )

    return int(value)
