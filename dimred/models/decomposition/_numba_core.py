'''
Numba-Accelerated Core Functions for Decomposition and Distance Checks

Parallel kernels for the two O(N * P^2) and O(N^2 * P) loops of the package:
the covariance matrix of a centered data matrix and the condensed vector of
pairwise Euclidean distances between its rows. Each kernel parallelises over
independent output rows with prange, so no two threads ever write the same
element and the results match the NumPy/SciPy paths up to rounding.

Functions:
    _covariance_core: Population covariance of centered columns
    _pairwise_distances_core: Condensed pairwise Euclidean distances
'''

import logging

import numpy as np
from numba import jit, prange

logger = logging.getLogger("dimred.models.decomposition._numba_core")


@jit(nopython=True, parallel=True, cache=True)
def _covariance_core(centered: np.ndarray) -> np.ndarray:
    """
    Numba-accelerated population covariance of centered columns.

    Args:
        centered: Centered data matrix (n_samples x n_features), C-contiguous
            float64

    Returns:
        Symmetric covariance matrix (n_features x n_features) with divisor
        n_samples
    """
    n_samples, n_features = centered.shape
    cov = np.zeros((n_features, n_features))

    # Thread i owns row i from the diagonal rightwards and column i below it
    for i in prange(n_features):
        for j in range(i, n_features):
            acc = 0.0
            for r in range(n_samples):
                acc += centered[r, i] * centered[r, j]
            value = acc / n_samples
            cov[i, j] = value
            cov[j, i] = value

    return cov


@jit(nopython=True, parallel=True, cache=True)
def _pairwise_distances_core(data: np.ndarray) -> np.ndarray:
    """
    Numba-accelerated condensed pairwise Euclidean distances.

    The output follows the ordering of scipy.spatial.distance.pdist: pairs
    (i, j) with i < j in lexicographic order.

    Args:
        data: Data matrix (n_samples x n_features), C-contiguous float64

    Returns:
        Vector of n_samples * (n_samples - 1) / 2 distances
    """
    n_samples, n_features = data.shape
    n_pairs = n_samples * (n_samples - 1) // 2
    distances = np.empty(n_pairs)

    for i in prange(n_samples - 1):
        # Number of pairs that precede row i in condensed order
        offset = i * n_samples - (i * (i + 1)) // 2
        for j in range(i + 1, n_samples):
            acc = 0.0
            for f in range(n_features):
                diff = data[i, f] - data[j, f]
                acc += diff * diff
            distances[offset + j - i - 1] = np.sqrt(acc)

    return distances


def covariance(centered: np.ndarray) -> np.ndarray:
    """Run _covariance_core on a contiguous float64 copy of centered."""
    return _covariance_core(np.ascontiguousarray(centered, dtype=np.float64))


def pairwise_distances(data: np.ndarray) -> np.ndarray:
    """Run _pairwise_distances_core on a contiguous float64 copy of data."""
    return _pairwise_distances_core(np.ascontiguousarray(data, dtype=np.float64))
