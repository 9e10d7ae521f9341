# dimred/core/types.py

"""
Core type annotations for dimred.

Type aliases that give the array arguments of the PCA engine and the distance
comparator a readable contract. NumPy does not encode shapes in its types, so
these aliases are documentation first and static-checking aids second.
"""

from typing import Any, Dict, Literal, Sequence, TypeVar, Union

import numpy as np
import pandas as pd

R = TypeVar('R')  # Result type
D = TypeVar('D')  # Data type

Vector = np.ndarray  # 1D array
Matrix = np.ndarray  # 2D array
CovarianceMatrix = np.ndarray  # Symmetric positive semi-definite matrix
CorrelationMatrix = np.ndarray  # Symmetric with ones on the diagonal
OrthogonalMatrix = np.ndarray  # Columns are orthonormal (Q'Q = I)

# Anything the engine accepts as an N x P data matrix
DataMatrixLike = Union[np.ndarray, pd.DataFrame, Sequence[Sequence[float]]]

# Condensed list of (i, j) row-index pairs with i < j
IndexPairs = np.ndarray

DecompositionMethod = Literal["eigh", "svd"]
RandomStateLike = Union[None, int, np.random.Generator]

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
ConfigDict = Dict[str, Dict[str, Any]]
