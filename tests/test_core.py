# tests/test_core.py
"""
Tests for the core infrastructure: the exception hierarchy and its helper
functions, input validation and the model/result base classes.
"""

import warnings

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_array_equal

from dimred.core.base import ModelBase, ModelResult, readonly
from dimred.core.exceptions import (
    ConfigurationError, DataError, DimensionError, DimRedError, DimRedWarning,
    InvalidInputError, NotFittedError, NumericalDegeneracyError, NumericWarning,
    ParameterError, raise_data_error, raise_dimension_error,
    raise_numerical_degeneracy_error, raise_parameter_error, warn_numeric
)
from dimred.core.validation import (
    as_float_matrix, validate_compatible_shapes, validate_data_matrix,
    validate_finite, validate_int_in_range
)


# ---- Exceptions ----

class TestExceptions:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize("error_class", [DimensionError, DataError, ParameterError])
    def test_invalid_input_family(self, error_class):
        assert issubclass(error_class, InvalidInputError)
        assert issubclass(error_class, DimRedError)

    @pytest.mark.parametrize("error_class", [
        NumericalDegeneracyError, ConfigurationError, NotFittedError
    ])
    def test_not_invalid_input(self, error_class):
        assert issubclass(error_class, DimRedError)
        assert not issubclass(error_class, InvalidInputError)

    def test_warning_hierarchy(self):
        assert issubclass(NumericWarning, DimRedWarning)
        assert issubclass(DimRedWarning, Warning)

    def test_message_includes_context(self):
        with pytest.raises(DimensionError) as exc_info:
            raise_dimension_error(
                "bad shape", array_name="scores", expected_shape=(3, 2), actual_shape=(4, 2)
            )

        error = exc_info.value
        assert error.message == "bad shape"
        assert error.array_name == "scores"
        assert error.context["Expected Shape"] == (3, 2)
        assert "Actual Shape: (4, 2)" in str(error)

    def test_location_points_at_caller(self):
        with pytest.raises(ParameterError) as exc_info:
            raise_parameter_error("bad k", param_name="k", param_value=0)
        assert "Location: test_core.py" in str(exc_info.value)

    def test_data_error_attributes(self):
        with pytest.raises(DataError) as exc_info:
            raise_data_error("nan", data_name="matrix", issue="contains NaN values", index=(1, 2))

        error = exc_info.value
        assert error.index == (1, 2)
        assert error.issue == "contains NaN values"

    def test_numerical_degeneracy_error(self):
        with pytest.raises(NumericalDegeneracyError) as exc_info:
            raise_numerical_degeneracy_error(
                "overflow", operation="covariance", error_type="overflow", details="inf"
            )

        error = exc_info.value
        assert error.operation == "covariance"
        assert error.error_type == "overflow"
        assert "Details: inf" in str(error)

    def test_warn_numeric(self):
        with pytest.warns(NumericWarning) as record:
            warn_numeric("undefined", operation="compare", issue="constant")

        warning = record[0].message
        assert warning.operation == "compare"
        assert "Issue: constant" in str(warning)

    def test_warn_numeric_can_be_filtered(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", DimRedWarning)
            with pytest.raises(NumericWarning):
                warn_numeric("undefined")


# ---- Validation ----

class TestValidation:
    """Tests for input validation helpers."""

    def test_as_float_matrix_copies(self):
        data = np.array([[1, 2], [3, 4]])
        result = as_float_matrix(data)

        assert result.dtype == np.float64
        assert result.flags.c_contiguous
        result[0, 0] = 99
        assert data[0, 0] == 1

    def test_as_float_matrix_dataframe(self):
        frame = pd.DataFrame({"a": [1, 2], "b": [3.5, 4.5]})
        assert_array_equal(as_float_matrix(frame), [[1.0, 3.5], [2.0, 4.5]])

    def test_as_float_matrix_errors(self):
        with pytest.raises(DimensionError):
            as_float_matrix([1.0, 2.0])
        with pytest.raises(DataError):
            as_float_matrix([["a"]])

    def test_validate_finite(self):
        data = np.ones((3, 3))
        assert validate_finite(data) is data

        data[2, 1] = np.inf
        with pytest.raises(DataError) as exc_info:
            validate_finite(data, "data")
        assert exc_info.value.index == (2, 1)
        assert exc_info.value.issue == "contains infinite values"

    def test_validate_data_matrix(self, iris_frame):
        features = iris_frame.drop(columns="species")
        array, names = validate_data_matrix(features)

        assert array.shape == (150, 4)
        assert names == list(features.columns)
        assert validate_data_matrix(np.ones((2, 1)))[1] is None

    def test_validate_data_matrix_minimums(self):
        with pytest.raises(DimensionError):
            validate_data_matrix(np.ones((3, 2)), min_rows=4)
        with pytest.raises(DimensionError):
            validate_data_matrix(np.ones((3, 2)), min_cols=3)

    def test_validate_data_matrix_non_numeric_frame(self, iris_frame):
        with pytest.raises(DataError):
            validate_data_matrix(iris_frame)

    def test_validate_compatible_shapes(self):
        validate_compatible_shapes([np.ones((3, 2)), np.ones((3, 5))], ["a", "b"])
        with pytest.raises(DimensionError):
            validate_compatible_shapes([np.ones((3, 2)), np.ones((4, 2))], ["a", "b"])

    def test_validate_int_in_range(self):
        assert validate_int_in_range(np.int64(3), "k", 1, 5) == 3
        assert isinstance(validate_int_in_range(np.int64(3), "k", 1), int)

        for bad in (0, 6, 2.0, "2", True, None):
            with pytest.raises(ParameterError):
                validate_int_in_range(bad, "k", 1, 5)


# ---- Base Classes ----

class _MeanModel(ModelBase):
    """Minimal concrete model for exercising ModelBase."""

    def fit(self, data, **kwargs):
        self._results = ModelResult(model_name=self.name)
        self._fitted = True
        return self._results


class TestBaseClasses:
    """Tests for ModelBase, ModelResult and readonly."""

    def test_readonly(self):
        data = np.arange(3.0)
        frozen = readonly(data)

        assert not frozen.flags.writeable
        data[0] = 10.0
        assert frozen[0] == 0.0

    def test_model_result(self):
        result = ModelResult(model_name="demo")
        assert result.to_dict() == {"model_name": "demo"}
        assert result.summary().startswith("Model: demo")

    def test_model_lifecycle(self):
        model = _MeanModel(name="demo")

        assert not model.fitted
        with pytest.raises(NotFittedError) as exc_info:
            _ = model.results
        assert exc_info.value.model_type == "_MeanModel"

        result = model.fit(np.ones((2, 2)))
        assert model.fitted
        assert model.results is result
        assert str(model).startswith("Model: demo")
