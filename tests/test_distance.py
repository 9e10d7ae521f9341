# tests/test_distance.py
"""
Tests for the distance preservation checks.

This module verifies that compare_distances pairs full and k-dimensional
distances over the same row pairs, that the correlation behaves as PCA
theory predicts (high for Iris at k=2, non-decreasing in k, exactly 1 under
orthogonal transformations), and that naive raw-column truncation of the
twin heights data underestimates distances by about 1/sqrt(2) while PCA
truncation needs no correction.
"""

import dataclasses
import itertools

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose, assert_array_equal
from hypothesis import given, settings
from scipy.spatial.distance import pdist

from dimred import (
    DataError, DimensionError, DistanceReport, NumericWarning, ParameterError,
    compare_distances, compare_feature_truncation, compute_pca
)
from tests.conftest import data_matrices


# ---- Pairing ----

class TestPairing:
    """Tests for the pairs and distances reported."""

    def test_pairs_are_lexicographic(self, rng):
        data = rng.standard_normal((5, 3))
        report = compare_distances(data, compute_pca(data), k=2)

        assert report.n_pairs == 10
        assert [tuple(p) for p in report.pairs] == list(itertools.combinations(range(5), 2))

    def test_full_distances(self, rng):
        data = rng.standard_normal((8, 3))
        report = compare_distances(data, data, k=3)

        expected = [np.linalg.norm(data[i] - data[j]) for i, j in report.pairs]
        assert_allclose(report.full_distances, expected)

    def test_approx_distances_use_first_k_columns(self, rng):
        data = rng.standard_normal((8, 3))
        scores = rng.standard_normal((8, 4))
        report = compare_distances(data, scores, k=2)

        assert_allclose(report.approx_distances, pdist(scores[:, :2]))
        assert report.k == 2

    @pytest.mark.parametrize("k", [1, 2, 3, 4])
    def test_numba_and_scipy_agree(self, iris, k):
        pcs = compute_pca(iris)
        with_numba = compare_distances(iris, pcs, k, use_numba=True)
        without_numba = compare_distances(iris, pcs, k, use_numba=False)

        assert_allclose(with_numba.full_distances, without_numba.full_distances, rtol=1e-12)
        assert_allclose(with_numba.approx_distances, without_numba.approx_distances,
                        rtol=1e-12, atol=1e-12)
        assert with_numba.correlation == pytest.approx(without_numba.correlation, abs=1e-12)

    def test_principal_components_and_array_scores_agree(self, iris):
        pcs = compute_pca(iris)
        from_result = compare_distances(iris, pcs, k=2)
        from_array = compare_distances(iris, np.array(pcs.scores), k=2)

        assert_array_equal(from_result.approx_distances, from_array.approx_distances)

    def test_dataframe_inputs(self, iris_frame):
        features = iris_frame.drop(columns="species")
        pcs = compute_pca(features)
        report = compare_distances(features, pcs.scores_frame(), k=2)
        assert report.n_pairs == 150 * 149 // 2


# ---- Distance Preservation ----

class TestDistancePreservation:
    """Tests of how well truncated PCA scores preserve distances."""

    def test_iris_two_components(self, iris):
        report = compare_distances(iris, compute_pca(iris), k=2)
        assert report.correlation >= 0.95

    @pytest.mark.parametrize("fixture_name", ["iris", "anisotropic"])
    def test_correlation_non_decreasing_in_k(self, fixture_name, request):
        data = request.getfixturevalue(fixture_name)
        pcs = compute_pca(data)
        correlations = [
            compare_distances(data, pcs, k).correlation
            for k in range(1, pcs.n_components + 1)
        ]

        assert np.all(np.diff(correlations) >= -1e-12)
        assert correlations[-1] == pytest.approx(1.0)

    def test_all_components_preserve_distances(self, anisotropic):
        report = compare_distances(anisotropic, compute_pca(anisotropic), k=5)
        assert_allclose(report.approx_distances, report.full_distances, rtol=1e-8)
        assert report.scale_factor() == pytest.approx(1.0)

    @pytest.mark.parametrize("k", [1, 2, 3])
    def test_truncation_is_a_contraction(self, anisotropic, k):
        """Projected distances never exceed the full ones."""
        report = compare_distances(anisotropic, compute_pca(anisotropic), k)
        assert np.all(report.approx_distances <= report.full_distances * (1 + 1e-12) + 1e-12)

    def test_orthogonal_transformation(self, twin_heights):
        """An orthonormal rotation preserves distances exactly."""
        rotation = np.array([[1.0, 1.0], [1.0, -1.0]]) / np.sqrt(2)
        report = compare_distances(twin_heights, twin_heights @ rotation, k=2)

        assert_allclose(report.approx_distances, report.full_distances, rtol=1e-10)
        assert report.correlation == pytest.approx(1.0)

    def test_sign_flip_does_not_change_distances(self, iris):
        pcs = compute_pca(iris)
        original = compare_distances(iris, pcs, k=2)
        flipped = compare_distances(iris, pcs.flip_sign(0).flip_sign(1), k=2)

        assert_allclose(flipped.approx_distances, original.approx_distances, rtol=1e-12)
        assert flipped.correlation == pytest.approx(original.correlation)


class TestFeatureTruncation:
    """Raw-column truncation versus PCA truncation on the twin heights."""

    def test_raw_truncation_is_biased_low(self, twin_heights):
        raw = compare_feature_truncation(twin_heights, k=1)
        pca = compare_distances(twin_heights, compute_pca(twin_heights), k=1)

        ratio = raw.approx_distances.sum() / raw.full_distances.sum()
        assert 0.6 < ratio < 0.8
        assert raw.approx_distances.mean() < 0.8 * pca.approx_distances.mean()

    def test_raw_truncation_needs_sqrt2_correction(self, twin_heights):
        report = compare_feature_truncation(twin_heights, k=1)

        assert 1.3 < report.scale_factor() < 1.55
        assert report.residual_std(np.sqrt(2)) < report.residual_std(1.0)
        # Biased, but still strongly related to the true distances
        assert report.correlation > 0.8

    def test_pca_truncation_needs_no_correction(self, twin_heights):
        report = compare_distances(twin_heights, compute_pca(twin_heights), k=1)

        assert 1.0 <= report.scale_factor() < 1.05
        assert report.residual_std(1.0) < report.residual_std(np.sqrt(2))
        assert report.correlation > 0.95

    def test_all_columns(self, iris):
        report = compare_feature_truncation(iris, k=4)
        assert_allclose(report.approx_distances, report.full_distances)

    def test_k_out_of_range(self, iris):
        with pytest.raises(ParameterError):
            compare_feature_truncation(iris, k=5)


# ---- Row Sampling ----

class TestSampling:
    """Tests for random row subsampling."""

    def test_sample_size(self, iris):
        report = compare_distances(iris, compute_pca(iris), k=2, sample_size=20, random_state=0)

        assert report.n_pairs == 190
        assert np.all(report.pairs[:, 0] < report.pairs[:, 1])
        assert report.pairs.max() < 150

    def test_pairs_refer_to_original_rows(self, iris):
        report = compare_distances(iris, iris, k=2, sample_size=15, random_state=3)

        i, j = report.pairs[:, 0], report.pairs[:, 1]
        assert_allclose(report.full_distances, np.linalg.norm(iris[i] - iris[j], axis=1))
        assert_allclose(report.approx_distances, np.linalg.norm(iris[i, :2] - iris[j, :2], axis=1))

    def test_reproducible(self, iris):
        first = compare_distances(iris, iris, k=1, sample_size=30, random_state=7)
        second = compare_distances(iris, iris, k=1, sample_size=30, random_state=7)
        assert_array_equal(first.pairs, second.pairs)

    def test_generator_random_state(self, iris):
        report = compare_distances(
            iris, iris, k=1, sample_size=10, random_state=np.random.default_rng(1)
        )
        assert report.n_pairs == 45

    def test_full_sample(self, iris):
        sampled = compare_distances(iris, iris, k=2, sample_size=150, random_state=0)
        full = compare_distances(iris, iris, k=2)
        assert_array_equal(sampled.pairs, full.pairs)

    @pytest.mark.parametrize("sample_size", [1, 151, 2.5])
    def test_bad_sample_size(self, iris, sample_size):
        with pytest.raises(ParameterError):
            compare_distances(iris, iris, k=1, sample_size=sample_size)


# ---- Errors and Degenerate Cases ----

class TestValidation:
    """Tests for argument validation and undefined correlations."""

    @pytest.mark.parametrize("k", [0, 3, -1, True, 1.0])
    def test_bad_k(self, rng, k):
        data = rng.standard_normal((6, 2))
        with pytest.raises(ParameterError):
            compare_distances(data, data, k)

    def test_row_mismatch(self, rng):
        with pytest.raises(DimensionError) as exc_info:
            compare_distances(rng.standard_normal((6, 2)), rng.standard_normal((5, 2)), k=1)
        assert exc_info.value.array_name == "scores"
        assert exc_info.value.context["Actual Shape"] == (5, 2)

    def test_components_from_other_data(self, iris, rng):
        with pytest.raises(DimensionError):
            compare_distances(rng.standard_normal((20, 4)), compute_pca(iris), k=2)

    def test_non_finite_scores(self, rng):
        data = rng.standard_normal((6, 2))
        scores = data.copy()
        scores[2, 0] = np.nan
        with pytest.raises(DataError):
            compare_distances(data, scores, k=1)

    def test_single_row(self):
        with pytest.raises(DimensionError):
            compare_distances([[1.0, 2.0]], [[1.0]], k=1)

    def test_single_pair_correlation_undefined(self):
        with pytest.warns(NumericWarning):
            report = compare_distances([[0.0, 0.0], [1.0, 1.0]], [[0.0], [1.0]], k=1)

        assert report.n_pairs == 1
        assert np.isnan(report.correlation)

    def test_constant_distances_correlation_undefined(self, rng):
        data = rng.standard_normal((4, 2))

        with pytest.warns(NumericWarning):
            report = compare_distances(data, np.zeros((4, 1)), k=1)
        assert np.isnan(report.correlation)

        with pytest.warns(NumericWarning):
            assert np.isnan(report.scale_factor())


# ---- Report Object ----

class TestDistanceReport:
    """Tests for the DistanceReport result object."""

    def test_immutable(self, iris):
        report = compare_distances(iris, iris, k=2)

        with pytest.raises(dataclasses.FrozenInstanceError):
            report.k = 3
        with pytest.raises(ValueError):
            report.full_distances[0] = 0.0

    def test_to_frame(self, rng):
        data = rng.standard_normal((4, 2))
        frame = compare_distances(data, data, k=1).to_frame()

        assert isinstance(frame, pd.DataFrame)
        assert list(frame.columns) == ["i", "j", "full", "approx"]
        assert len(frame) == 6
        assert tuple(frame.iloc[0][["i", "j"]]) == (0, 1)

    def test_residual_std(self):
        report = DistanceReport(
            full_distances=np.array([2.0, 4.0, 6.0]),
            approx_distances=np.array([1.0, 2.0, 3.0]),
            pairs=np.array([[0, 1], [0, 2], [1, 2]]),
            k=1,
            correlation=1.0
        )

        assert report.scale_factor() == pytest.approx(2.0)
        assert report.residual_std(2.0) == pytest.approx(0.0)
        assert report.residual_std() == pytest.approx(np.std([1.0, 2.0, 3.0]))

    def test_parallel_sequences_required(self):
        with pytest.raises(DimensionError):
            DistanceReport(
                full_distances=np.ones(3),
                approx_distances=np.ones(2),
                pairs=np.array([[0, 1], [0, 2], [1, 2]]),
                k=1,
                correlation=1.0
            )

    def test_summary_and_to_dict(self, iris):
        report = compare_distances(iris, compute_pca(iris), k=2)

        assert "Distance preservation (k=2)" in report.summary()
        assert "Correlation" in report.summary()
        result = report.to_dict()
        assert result["k"] == 2
        assert result["n_pairs"] == 11175
        assert len(result["pairs"]) == 11175


# ---- Property-Based Tests ----

class TestPropertyBasedTests:
    """Property-based tests of the distance checks."""

    @given(data=data_matrices(min_rows=3, max_rows=15))
    @settings(max_examples=30, deadline=None)
    def test_contraction(self, data):
        pcs = compute_pca(data)
        full = pdist(data)
        for k in range(1, pcs.n_components + 1):
            approx = pdist(np.asarray(pcs.scores)[:, :k])
            assert np.all(approx <= full * (1 + 1e-9) + 1e-9)

    @given(data=data_matrices(min_rows=3, max_rows=15))
    @settings(max_examples=30, deadline=None)
    def test_all_components_preserve_distances(self, data):
        pcs = compute_pca(data)
        approx = pdist(np.asarray(pcs.scores))
        assert_allclose(approx, pdist(data), rtol=1e-7, atol=1e-7)
