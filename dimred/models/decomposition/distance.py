# dimred/models/decomposition/distance.py
"""
Distance Preservation Checks

Compares the pairwise Euclidean distances between the rows of a data matrix
with the distances between the same rows in a k-dimensional representation,
usually the first k principal component scores. A high Pearson correlation
between the two sequences means the low-dimensional view keeps the relative
positions of the observations.

compare_feature_truncation() is the naive alternative of simply keeping the
first k raw columns without rotating first. On strongly correlated data it
systematically underestimates distances, which scale_factor() exposes.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import numpy as np
import pandas as pd
from scipy import stats
from scipy.spatial.distance import pdist

from dimred.core.base import readonly
from dimred.core.config import get_config
from dimred.core.exceptions import raise_dimension_error, warn_numeric
from dimred.core.types import DataMatrixLike, IndexPairs, Matrix, RandomStateLike, Vector
from dimred.core.validation import (
    as_float_matrix, validate_compatible_shapes, validate_data_matrix, validate_finite,
    validate_int_in_range
)
from dimred.models.decomposition._numba_core import pairwise_distances as numba_pairwise_distances
from dimred.models.decomposition.pca import PrincipalComponents

logger = logging.getLogger("dimred.models.decomposition.distance")


@dataclass(frozen=True)
class DistanceReport:
    """
    Full versus k-dimensional pairwise distances over the same row pairs.

    Attributes:
        full_distances: Euclidean distances in the original feature space
        approx_distances: Euclidean distances using the first k score columns
        pairs: Row indices (i, j), i < j, of every distance, in
            lexicographic order (n_pairs x 2)
        k: Number of score columns used for approx_distances
        correlation: Pearson correlation of the two distance sequences, NaN
            when undefined
    """

    full_distances: np.ndarray
    approx_distances: np.ndarray
    pairs: np.ndarray
    k: int
    correlation: float

    def __post_init__(self) -> None:
        full = readonly(np.asarray(self.full_distances, dtype=np.float64))
        approx = readonly(np.asarray(self.approx_distances, dtype=np.float64))
        pairs = readonly(np.asarray(self.pairs, dtype=np.int64).reshape(-1, 2))

        if full.shape != approx.shape or pairs.shape[0] != full.shape[0]:
            raise_dimension_error(
                "full_distances, approx_distances and pairs must be parallel",
                array_name="approx_distances",
                expected_shape=full.shape,
                actual_shape=approx.shape
            )

        object.__setattr__(self, "full_distances", full)
        object.__setattr__(self, "approx_distances", approx)
        object.__setattr__(self, "pairs", pairs)
        object.__setattr__(self, "correlation", float(self.correlation))

    @property
    def n_pairs(self) -> int:
        return self.full_distances.shape[0]

    def scale_factor(self) -> float:
        """
        Least-squares factor c minimising sum((full - c * approx) ** 2).

        Close to 1 when the approximate distances need no correction; close
        to sqrt(2) for single-column truncation of two nearly identical
        features. NaN (with a NumericWarning) when every approximate distance
        is zero.
        """
        denominator = float(np.dot(self.approx_distances, self.approx_distances))
        if denominator == 0:
            warn_numeric(
                "Scale factor is undefined because all approximate distances are zero",
                operation="scale_factor",
                issue="zero approximate distances"
            )
            return float("nan")
        return float(np.dot(self.full_distances, self.approx_distances)) / denominator

    def residual_std(self, scale: float = 1.0) -> float:
        """Standard deviation of full_distances - scale * approx_distances."""
        return float(np.std(self.full_distances - scale * self.approx_distances))

    def to_frame(self) -> pd.DataFrame:
        """One row per pair with columns i, j, full and approx."""
        return pd.DataFrame({
            "i": self.pairs[:, 0],
            "j": self.pairs[:, 1],
            "full": self.full_distances,
            "approx": self.approx_distances,
        })

    def summary(self) -> str:
        header = f"Distance preservation (k={self.k})\n"
        header += "=" * (len(header) - 1) + "\n\n"

        body = f"Number of pairs: {self.n_pairs}\n"
        body += f"Correlation: {self.correlation:.6f}\n"
        if self.n_pairs:
            ratio = self.approx_distances.sum() / self.full_distances.sum() \
                if self.full_distances.sum() > 0 else float("nan")
            body += f"Mean full distance: {self.full_distances.mean():.6g}\n"
            body += f"Mean approximate distance: {self.approx_distances.mean():.6g}\n"
            body += f"Approximate / full (aggregate): {ratio:.4f}\n"
        return header + body

    def to_dict(self) -> Dict[str, Any]:
        return {
            "k": self.k,
            "n_pairs": self.n_pairs,
            "correlation": self.correlation,
            "pairs": self.pairs.tolist(),
            "full_distances": self.full_distances.tolist(),
            "approx_distances": self.approx_distances.tolist(),
        }


def _distances(data: Matrix, use_numba: bool) -> Vector:
    if use_numba:
        return numba_pairwise_distances(data)
    return pdist(data, metric="euclidean")


def _pearson(full: Vector, approx: Vector) -> float:
    """Pearson correlation, NaN with a warning where it is undefined."""
    if full.size < 2:
        warn_numeric(
            f"Correlation is undefined for {full.size} distance pair(s)",
            operation="compare_distances",
            issue="fewer than two pairs",
            value=full.size
        )
        return float("nan")

    if np.ptp(full) == 0 or np.ptp(approx) == 0:
        warn_numeric(
            "Correlation is undefined because a distance sequence is constant",
            operation="compare_distances",
            issue="constant distances"
        )
        return float("nan")

    return float(stats.pearsonr(full, approx).statistic)


def _sample_rows(
    n_rows: int,
    sample_size: Optional[int],
    random_state: RandomStateLike
) -> np.ndarray:
    """Sorted row indices to compare, all rows when sample_size is None."""
    if sample_size is None:
        return np.arange(n_rows)

    sample_size = validate_int_in_range(sample_size, "sample_size", 2, n_rows)
    rng = np.random.default_rng(random_state)
    return np.sort(rng.choice(n_rows, size=sample_size, replace=False))


def compare_distances(
    matrix: DataMatrixLike,
    scores: Union[DataMatrixLike, PrincipalComponents],
    k: int,
    sample_size: Optional[int] = None,
    random_state: RandomStateLike = None,
    use_numba: Optional[bool] = None
) -> DistanceReport:
    """
    Compare full pairwise distances with distances over the first k scores.

    Args:
        matrix: N x P data matrix
        scores: N x K score matrix, or a PrincipalComponents whose scores are
            used
        k: Number of leading score columns, 1 <= k <= K
        sample_size: Compare only this many randomly chosen rows; the number
            of pairs grows quadratically, so large inputs such as digit
            images are usually subsampled
        random_state: Seed or numpy Generator for the row sample
        use_numba: Compute distances with the parallel numba kernel instead
            of scipy.spatial.distance.pdist (None uses the configured
            performance.enable_numba)

    Returns:
        DistanceReport over the pairs (i, j), i < j, in lexicographic order;
        indices always refer to rows of the original matrix

    Raises:
        DimensionError: If matrix and scores have different numbers of rows
        ParameterError: If k or sample_size is out of range
        DataError: If either input contains non-finite values

    Examples:
        >>> import numpy as np
        >>> from dimred import compare_distances, compute_pca
        >>> x = np.array([[0.0, 0.0], [1.0, 1.0], [3.0, 3.1]])
        >>> report = compare_distances(x, compute_pca(x), k=1)
        >>> report.n_pairs
        3
    """
    array, _ = validate_data_matrix(matrix, "matrix", min_rows=2, min_cols=1)

    if isinstance(scores, PrincipalComponents):
        score_array = np.array(scores.scores)
    else:
        score_array = validate_finite(as_float_matrix(scores, "scores"), "scores")

    validate_compatible_shapes([array, score_array], ["matrix", "scores"])

    k = validate_int_in_range(k, "k", 1, score_array.shape[1])

    if use_numba is None:
        use_numba = get_config("performance", "enable_numba", True)

    rows = _sample_rows(array.shape[0], sample_size, random_state)
    logger.debug(
        f"Comparing distances over {rows.size} rows using {k} of "
        f"{score_array.shape[1]} score columns"
    )

    full = _distances(array[rows], use_numba)
    approx = _distances(score_array[rows, :k], use_numba)

    first, second = np.triu_indices(rows.size, 1)
    pairs: IndexPairs = np.column_stack((rows[first], rows[second]))

    return DistanceReport(
        full_distances=full,
        approx_distances=approx,
        pairs=pairs,
        k=k,
        correlation=_pearson(full, approx)
    )


def compare_feature_truncation(
    matrix: DataMatrixLike,
    k: int,
    sample_size: Optional[int] = None,
    random_state: RandomStateLike = None,
    use_numba: Optional[bool] = None
) -> DistanceReport:
    """
    Compare full distances with distances over the first k raw columns.

    This is truncation without rotation. For two highly correlated features
    the single-column distances are about 1/sqrt(2) of the full ones, so the
    report's scale_factor() is about sqrt(2), whereas PCA truncation of the
    same data gives a factor near 1.

    Args:
        matrix: N x P data matrix
        k: Number of leading columns to keep, 1 <= k <= P
        sample_size: See compare_distances
        random_state: See compare_distances
        use_numba: See compare_distances

    Returns:
        DistanceReport comparing the full matrix with its first k columns
    """
    array, _ = validate_data_matrix(matrix, "matrix", min_rows=2, min_cols=1)
    return compare_distances(
        array,
        array,
        k,
        sample_size=sample_size,
        random_state=random_state,
        use_numba=use_numba
    )
