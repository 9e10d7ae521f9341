# dimred/models/decomposition/pca.py
"""
Principal Component Analysis (PCA) Module

This module computes the principal components of a real-valued data matrix:
an ordered, orthonormal basis of directions ranked by the variance of the
data along each of them, together with the projections (scores) of every
observation onto that basis.

Two decompositions are supported and yield the same ranked directions:
- 'eigh': symmetric eigendecomposition of the P x P covariance matrix
  (divisor N), whose eigenvectors are the directions and whose eigenvalues
  are the variances
- 'svd': thin singular value decomposition of the centered N x P matrix,
  whose right singular vectors are the directions and whose squared singular
  values divided by N are the variances

Both are delegated to LAPACK through scipy.linalg. The sign of each direction
is arbitrary; by default it is normalised so that the largest-magnitude
loading is positive, which makes the two methods agree, but consumers should
still compare directions up to sign.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple, cast

import numpy as np
import pandas as pd
from scipy import linalg

from dimred.core.base import ModelBase, ModelResult, readonly
from dimred.core.config import get_config
from dimred.core.exceptions import (
    NumericalDegeneracyError, raise_dimension_error, raise_numerical_degeneracy_error,
    raise_parameter_error
)
from dimred.core.types import DataMatrixLike, DecompositionMethod, Matrix, OrthogonalMatrix, Vector
from dimred.core.validation import (
    as_float_matrix, validate_data_matrix, validate_finite, validate_int_in_range
)
from dimred.models.decomposition._numba_core import covariance as numba_covariance
from dimred.utils.data_transformations import center_columns
from dimred.utils.matrix_ops import covariance_matrix, ensure_symmetric, is_orthonormal

logger = logging.getLogger("dimred.models.decomposition.pca")

_METHODS = ("eigh", "svd")


@dataclass(frozen=True)
class PrincipalComponents(ModelResult):
    """
    Result container for Principal Component Analysis.

    All arrays are read-only copies; methods that change the components
    (truncate, flip_sign) return new objects.

    Attributes:
        model_name: Name of the model that produced the result
        means: Column means of the original data (n_features)
        directions: Orthonormal loadings, one column per component
            (n_features x n_components), ordered by descending variance
        variances: Variance explained by each component (n_components),
            non-increasing
        scores: Projection of each centered observation onto each direction
            (n_samples x n_components)
        total_variance: Total variance of the centered data, i.e. the sum of
            all eigenvalues whether or not they were retained
        method: Decomposition used ('eigh' or 'svd')
        feature_names: Column labels of the original data, if known
    """

    means: np.ndarray
    directions: OrthogonalMatrix
    variances: np.ndarray
    scores: np.ndarray
    total_variance: float
    method: str = "eigh"
    feature_names: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        """Validate shapes, take read-only copies and enforce ordering."""
        means = readonly(np.asarray(self.means, dtype=np.float64))
        directions = readonly(np.asarray(self.directions, dtype=np.float64))
        variances = readonly(np.asarray(self.variances, dtype=np.float64))
        scores = readonly(np.asarray(self.scores, dtype=np.float64))

        if directions.ndim != 2 or directions.shape[0] != means.shape[0]:
            raise_dimension_error(
                "directions must have one row per feature",
                array_name="directions",
                expected_shape=f"({means.shape[0]}, n_components)",
                actual_shape=directions.shape
            )

        n_components = directions.shape[1]
        if variances.shape != (n_components,):
            raise_dimension_error(
                "variances must have one entry per component",
                array_name="variances",
                expected_shape=(n_components,),
                actual_shape=variances.shape
            )

        if scores.ndim != 2 or scores.shape[1] != n_components:
            raise_dimension_error(
                "scores must have one column per component",
                array_name="scores",
                expected_shape=f"(n_samples, {n_components})",
                actual_shape=scores.shape
            )

        if not np.all(np.diff(variances) <= 0):
            logger.warning("Variances are not sorted in descending order. Sorting now.")
            idx = np.argsort(-variances, kind="stable")
            variances = readonly(variances[idx])
            directions = readonly(directions[:, idx])
            scores = readonly(scores[:, idx])

        object.__setattr__(self, "means", means)
        object.__setattr__(self, "directions", directions)
        object.__setattr__(self, "variances", variances)
        object.__setattr__(self, "scores", scores)
        object.__setattr__(self, "total_variance", float(self.total_variance))
        if self.feature_names is not None:
            object.__setattr__(self, "feature_names", tuple(str(n) for n in self.feature_names))

    @property
    def n_components(self) -> int:
        return self.directions.shape[1]

    @property
    def n_samples(self) -> int:
        return self.scores.shape[0]

    @property
    def n_features(self) -> int:
        return self.directions.shape[0]

    @property
    def explained_variance_ratio(self) -> Vector:
        """Proportion of the total variance explained by each component.

        All zeros when the data has no variance at all.
        """
        if self.total_variance <= 0:
            return np.zeros(self.n_components)
        return self.variances / self.total_variance

    @property
    def cumulative_explained_variance(self) -> Vector:
        return np.cumsum(self.explained_variance_ratio)

    def _component_labels(self) -> List[str]:
        return [f"PC{i + 1}" for i in range(self.n_components)]

    def _feature_labels(self) -> List[str]:
        if self.feature_names is not None:
            return list(self.feature_names)
        return [f"x{i + 1}" for i in range(self.n_features)]

    def transform(self, data: DataMatrixLike) -> Matrix:
        """
        Project new observations onto the principal directions.

        The stored column means are subtracted before projecting, so
        transforming the original data reproduces the scores.

        Args:
            data: Data matrix (samples x features)

        Returns:
            np.ndarray: Scores of the new observations (samples x n_components)

        Raises:
            DimensionError: If data does not have n_features columns
            DataError: If data contains non-finite values
        """
        array, _ = validate_data_matrix(data, "data", min_rows=1)

        if array.shape[1] != self.n_features:
            raise_dimension_error(
                f"Data has {array.shape[1]} features, but the components were computed "
                f"from {self.n_features} features",
                array_name="data",
                expected_shape=f"(n_samples, {self.n_features})",
                actual_shape=array.shape
            )

        return (array - self.means) @ self.directions

    def inverse_transform(self, scores: DataMatrixLike) -> Matrix:
        """
        Map scores back to the original feature space.

        Uses the first scores.shape[1] components, so truncated scores give
        the best rank-k reconstruction of the data.

        Args:
            scores: Scores (samples x k) with k <= n_components

        Returns:
            np.ndarray: Reconstructed data (samples x n_features)

        Raises:
            DimensionError: If scores has more columns than there are components
        """
        array = validate_finite(as_float_matrix(scores, "scores"), "scores")

        if array.shape[1] > self.n_components:
            raise_dimension_error(
                f"scores has {array.shape[1]} columns, but there are only "
                f"{self.n_components} components",
                array_name="scores",
                expected_shape=f"(n_samples, <= {self.n_components})",
                actual_shape=array.shape
            )

        return array @ self.directions[:, :array.shape[1]].T + self.means

    def truncate(self, k: int) -> "PrincipalComponents":
        """
        Keep only the first k components.

        Raises:
            ParameterError: If k is not between 1 and n_components
        """
        k = validate_int_in_range(k, "k", 1, self.n_components)
        return replace(
            self,
            directions=self.directions[:, :k],
            variances=self.variances[:k],
            scores=self.scores[:, :k]
        )

    def flip_sign(self, component: int) -> "PrincipalComponents":
        """
        Negate one direction and the matching score column.

        The result is an equally valid decomposition; this is useful for
        matching the sign convention of another tool.

        Args:
            component: Zero-based index of the component to flip

        Raises:
            ParameterError: If component is out of range
        """
        component = validate_int_in_range(component, "component", 0, self.n_components - 1)
        signs = np.ones(self.n_components)
        signs[component] = -1.0
        return replace(self, directions=self.directions * signs, scores=self.scores * signs)

    def find_n_components(self, explained_variance_threshold: float = 0.95) -> int:
        """
        Smallest number of components whose cumulative explained variance
        reaches the threshold.

        Returns n_components when the retained components never reach it.

        Raises:
            ParameterError: If the threshold is not in (0, 1]
        """
        if not 0 < explained_variance_threshold <= 1:
            raise_parameter_error(
                f"explained_variance_threshold must be between 0 and 1, got {explained_variance_threshold}",
                param_name="explained_variance_threshold",
                param_value=explained_variance_threshold,
                constraint="0 < threshold <= 1"
            )

        # Rounding can leave the full cumulative sum a hair below 1
        reached = self.cumulative_explained_variance >= explained_variance_threshold - 1e-12
        if not reached.any():
            return self.n_components
        return int(np.argmax(reached)) + 1

    def loadings_frame(self) -> pd.DataFrame:
        """Directions as a DataFrame indexed by feature, one column per PC."""
        return pd.DataFrame(
            np.array(self.directions),
            index=self._feature_labels(),
            columns=self._component_labels()
        )

    def scores_frame(self) -> pd.DataFrame:
        """Scores as a DataFrame, one column per PC."""
        return pd.DataFrame(np.array(self.scores), columns=self._component_labels())

    def summary(self) -> str:
        """
        Generate a text summary of the PCA results.

        Returns:
            str: A formatted string containing the PCA results summary
        """
        header = f"Principal Component Analysis ({self.method})\n"
        header += "=" * (len(header) - 1) + "\n\n"

        info = f"Number of samples: {self.n_samples}\n"
        info += f"Number of features: {self.n_features}\n"
        info += f"Number of components: {self.n_components}\n"
        info += f"Total variance: {self.total_variance:.6g}\n\n"

        ratio = self.explained_variance_ratio
        cumulative = self.cumulative_explained_variance

        variance_table = "Explained Variance:\n"
        variance_table += "-" * 60 + "\n"
        variance_table += "Component |     Variance |  Ratio | Cumulative\n"
        variance_table += "-" * 60 + "\n"

        for i in range(min(self.n_components, 10)):
            variance_table += f"{i + 1:9d} | {self.variances[i]:12.4f} | "
            variance_table += f"{ratio[i]:6.2%} | {cumulative[i]:10.2%}\n"

        if self.n_components > 10:
            variance_table += "...\n"

        variance_table += "-" * 60 + "\n\n"

        loadings_info = "Top Feature Loadings:\n"
        loadings_info += "-" * 60 + "\n"

        labels = self._feature_labels()
        n_top_features = min(self.n_features, 5)
        for i in range(min(self.n_components, 5)):
            loadings = self.directions[:, i]
            top_indices = np.argsort(np.abs(loadings))[::-1][:n_top_features]

            loadings_info += f"Component {i + 1}:\n"
            for idx in top_indices:
                loadings_info += f"  {labels[idx]}: {loadings[idx]:+.4f}\n"

        return header + info + variance_table + loadings_info

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the PCA result to a dictionary of plain Python values.

        Returns:
            Dict[str, Any]: Dictionary representation of the PCA result
        """
        result = super().to_dict()
        result.update({
            "method": self.method,
            "n_components": self.n_components,
            "n_samples": self.n_samples,
            "n_features": self.n_features,
            "feature_names": list(self.feature_names) if self.feature_names else None,
            "means": self.means.tolist(),
            "directions": self.directions.tolist(),
            "variances": self.variances.tolist(),
            "scores": self.scores.tolist(),
            "total_variance": self.total_variance,
            "explained_variance_ratio": self.explained_variance_ratio.tolist(),
        })
        return result


def _flip_signs(directions: OrthogonalMatrix) -> OrthogonalMatrix:
    """Make the largest-magnitude loading of every direction positive."""
    rows = np.argmax(np.abs(directions), axis=0)
    signs = np.sign(directions[rows, np.arange(directions.shape[1])])
    signs[signs == 0] = 1.0
    return directions * signs


class PCA(ModelBase[PrincipalComponents, DataMatrixLike]):
    """
    Principal Component Analysis model.

    Attributes:
        n_components: Number of components to retain (None keeps
            min(n_samples, n_features))
        method: Decomposition, 'eigh' or 'svd' (None uses the configured
            numerical.default_method)
        flip_signs: Whether to normalise direction signs
        use_numba: Whether the covariance matrix is built with the numba
            kernel (None uses the configured performance.enable_numba)
    """

    def __init__(
        self,
        n_components: Optional[int] = None,
        method: Optional[DecompositionMethod] = None,
        flip_signs: bool = True,
        use_numba: Optional[bool] = None,
        name: str = "PCA"
    ) -> None:
        """
        Initialize the PCA model.

        Raises:
            ParameterError: If method is unknown or n_components is not a
                positive integer
        """
        super().__init__(name=name)

        if method is not None and method not in _METHODS:
            raise_parameter_error(
                f"Invalid decomposition method: {method}. Must be one of 'eigh' or 'svd'.",
                param_name="method",
                param_value=method,
                constraint="one of 'eigh' or 'svd'"
            )

        if n_components is not None:
            n_components = validate_int_in_range(n_components, "n_components", 1)

        self.n_components = n_components
        self.method = method
        self.flip_signs = flip_signs
        self.use_numba = use_numba

    def validate_data(self, data: DataMatrixLike) -> Tuple[Matrix, Optional[List[str]]]:
        """
        Validate the input data for PCA.

        Returns:
            Tuple of (float64 copy of the data, feature names or None)

        Raises:
            DimensionError: If data is not 2-D with at least 2 rows and 1 column
            DataError: If data contains non-numeric or non-finite values
        """
        return validate_data_matrix(data, "data", min_rows=2, min_cols=1)

    def _covariance(self, centered: Matrix) -> Matrix:
        use_numba = self.use_numba
        if use_numba is None:
            use_numba = get_config("performance", "enable_numba", True)

        if use_numba:
            return ensure_symmetric(numba_covariance(centered))
        return covariance_matrix(centered)

    def _decompose_eigh(self, centered: Matrix) -> Tuple[Vector, OrthogonalMatrix]:
        """
        Eigendecomposition of the covariance matrix.

        Returns:
            Tuple of (eigenvalues, eigenvectors) in LAPACK's ascending order
        """
        cov = self._covariance(centered)

        if not np.isfinite(cov).all():
            raise_numerical_degeneracy_error(
                "Covariance matrix contains non-finite entries; the data overflows "
                "double precision",
                operation="covariance",
                error_type="overflow"
            )

        try:
            eigenvalues, eigenvectors = linalg.eigh(cov)
        except (linalg.LinAlgError, ValueError) as e:
            raise NumericalDegeneracyError(
                f"Eigendecomposition failed: {e}",
                operation="PCA eigh",
                error_type="eigendecomposition_failed"
            ) from e

        return eigenvalues, eigenvectors

    def _decompose_svd(self, centered: Matrix) -> Tuple[Vector, OrthogonalMatrix]:
        """
        Thin SVD of the centered matrix.

        Returns:
            Tuple of (variances, right singular vectors as columns)
        """
        try:
            _, singular_values, vt = linalg.svd(centered, full_matrices=False)
        except (linalg.LinAlgError, ValueError) as e:
            raise NumericalDegeneracyError(
                f"Singular value decomposition failed: {e}",
                operation="PCA svd",
                error_type="svd_failed"
            ) from e

        return singular_values ** 2 / centered.shape[0], vt.T

    def _clip_eigenvalues(self, eigenvalues: Vector) -> Vector:
        """
        Zero out negative eigenvalues that are rounding noise.

        Raises:
            NumericalDegeneracyError: If an eigenvalue is negative beyond the
                configured relative tolerance
        """
        tol = get_config("numerical", "eigenvalue_tolerance", 1e-10)
        scale = max(float(eigenvalues.max(initial=0.0)), 1.0)

        if np.any(eigenvalues < -tol * scale):
            raise_numerical_degeneracy_error(
                "Covariance matrix has substantively negative eigenvalues",
                operation="PCA eigh",
                values=eigenvalues,
                error_type="not_positive_semidefinite"
            )

        return np.clip(eigenvalues, 0.0, None)

    def fit(self, data: DataMatrixLike, **kwargs: Any) -> PrincipalComponents:
        """
        Compute the principal components of the data.

        Args:
            data: Input data matrix (samples x features)
            **kwargs: Additional keyword arguments (not used)

        Returns:
            PrincipalComponents: PCA results

        Raises:
            DimensionError: If data is not 2-D with at least 2 rows and 1 column
            DataError: If data contains non-numeric or non-finite values
            ParameterError: If n_components exceeds min(n_samples, n_features)
            NumericalDegeneracyError: If the decomposition fails or yields an
                invalid basis
        """
        array, feature_names = self.validate_data(data)
        n_samples, n_features = array.shape
        max_components = min(n_samples, n_features)

        if self.n_components is not None:
            validate_int_in_range(self.n_components, "n_components", 1, max_components)
        n_components = self.n_components or max_components

        method = self.method or get_config("numerical", "default_method", "eigh")
        if method not in _METHODS:
            raise_parameter_error(
                f"Invalid configured decomposition method: {method}",
                param_name="method",
                param_value=method,
                constraint="one of 'eigh' or 'svd'"
            )

        logger.debug(f"Fitting PCA ({method}) on {n_samples} x {n_features} matrix")

        centered, means = center_columns(array)
        with np.errstate(over="ignore"):
            total_variance = float(np.einsum("ij,ij->", centered, centered) / n_samples)

        if method == "svd":
            variances, directions = self._decompose_svd(centered)
        else:
            eigenvalues, directions = self._decompose_eigh(centered)
            variances = self._clip_eigenvalues(eigenvalues)

        order = np.argsort(-variances, kind="stable")[:n_components]
        variances = variances[order]
        directions = directions[:, order]

        if self.flip_signs:
            directions = _flip_signs(directions)

        tol = get_config("numerical", "orthonormality_tolerance", 1e-6)
        if (not np.isfinite(total_variance) or not np.isfinite(variances).all()
                or not is_orthonormal(directions, tol)):
            raise_numerical_degeneracy_error(
                "Decomposition did not produce a finite orthonormal basis",
                operation=f"PCA {method}",
                values=variances,
                error_type="invalid_basis"
            )

        scores = centered @ directions

        self._results = PrincipalComponents(
            model_name=self.name,
            means=means,
            directions=directions,
            variances=variances,
            scores=scores,
            total_variance=total_variance,
            method=method,
            feature_names=tuple(feature_names) if feature_names else None
        )
        self._fitted = True

        if total_variance > 0:
            logger.debug(f"First component explains {variances[0] / total_variance:.2%} of variance")

        return cast(PrincipalComponents, self._results)

    def transform(self, data: DataMatrixLike) -> Matrix:
        """Project data with the fitted components. See PrincipalComponents.transform."""
        self._check_fitted("transform")
        return self.results.transform(data)

    def inverse_transform(self, scores: DataMatrixLike) -> Matrix:
        """Reconstruct data from scores. See PrincipalComponents.inverse_transform."""
        self._check_fitted("inverse_transform")
        return self.results.inverse_transform(scores)


def compute_pca(
    matrix: DataMatrixLike,
    n_components: Optional[int] = None,
    method: Optional[DecompositionMethod] = None,
    flip_signs: bool = True,
    use_numba: Optional[bool] = None
) -> PrincipalComponents:
    """
    Compute the principal components of a data matrix.

    Pure function: the input is copied on entry and the returned arrays are
    fresh and read-only.

    Args:
        matrix: N x P data matrix with N >= 2, P >= 1 and only finite values
        n_components: Number of components to keep (default min(N, P))
        method: 'eigh' (covariance eigendecomposition) or 'svd'
        flip_signs: Normalise each direction so its largest loading is positive
        use_numba: Build the covariance matrix with the parallel numba kernel

    Returns:
        PrincipalComponents with means, directions, variances and scores

    Raises:
        InvalidInputError: If the matrix is malformed or contains non-finite values
        NumericalDegeneracyError: If no valid orthonormal basis can be computed

    Examples:
        >>> import numpy as np
        >>> from dimred import compute_pca
        >>> x = np.array([[1.0, 1.0], [2.0, 2.0], [3.0, 3.0]])
        >>> pcs = compute_pca(x)
        >>> pcs.explained_variance_ratio.round(6)
        array([1., 0.])
    """
    model = PCA(
        n_components=n_components,
        method=method,
        flip_signs=flip_signs,
        use_numba=use_numba
    )
    return model.fit(matrix)
