'''
Pytest configuration and fixtures for the dimred test suite.

This module provides the data matrices shared across the tests (the twin
heights example, the Iris measurements, an anisotropic random matrix and a
matrix with a constant column) together with a fixture that isolates the
configuration system from the user's environment.
'''

import os
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from hypothesis import strategies as st
from hypothesis.extra import numpy as hnp

from dimred.core.config import get_config_manager, reset_config

DATA_DIR = Path(__file__).parent / "data"


# ---- Basic Data Generation Fixtures ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def twin_heights(rng: np.random.Generator) -> np.ndarray:
    """
    100 pairs of twin heights in inches.

    Both columns have mean 69 and standard deviation 3, and the twins are
    correlated at about 0.92.
    """
    cov = 9.0 * np.array([[1.0, 0.92], [0.92, 1.0]])
    return rng.multivariate_normal([69.0, 69.0], cov, size=100)


@pytest.fixture(scope="session")
def iris_frame() -> pd.DataFrame:
    """Fisher's Iris measurements (150 x 4) plus the species label."""
    return pd.read_csv(DATA_DIR / "iris.csv")


@pytest.fixture
def iris(iris_frame: pd.DataFrame) -> np.ndarray:
    """The four numeric Iris columns as a float matrix."""
    return iris_frame.drop(columns="species").to_numpy(dtype=np.float64)


@pytest.fixture
def anisotropic(rng: np.random.Generator) -> np.ndarray:
    """
    60 x 5 Gaussian data with clearly separated variances, randomly rotated.

    The column standard deviations before rotation are 5, 3, 2, 1 and 0.5.
    """
    raw = rng.standard_normal((60, 5)) * np.array([5.0, 3.0, 2.0, 1.0, 0.5])
    rotation, _ = np.linalg.qr(rng.standard_normal((5, 5)))
    return raw @ rotation.T + rng.uniform(-10, 10, size=5)


@pytest.fixture
def constant_column(rng: np.random.Generator) -> np.ndarray:
    """30 x 4 matrix whose third column is constant, like a blank pixel."""
    data = rng.standard_normal((30, 4))
    data[:, 2] = 7.0
    return data


# ---- Configuration Fixtures ----

@pytest.fixture
def clean_config(tmp_path, monkeypatch):
    """
    Point the configuration system at an empty directory and restore the
    defaults before and after the test.
    """
    monkeypatch.setenv("DIMRED_CONFIG_DIR", str(tmp_path))
    for name in list(os.environ):
        if name.startswith("DIMRED_") and name != "DIMRED_CONFIG_DIR":
            monkeypatch.delenv(name)

    manager = get_config_manager()
    reset_config()
    yield manager
    reset_config()


# ---- Hypothesis Strategies ----

def data_matrices(min_rows: int = 2, max_rows: int = 25, max_cols: int = 6):
    """Strategy for well-scaled finite N x P data matrices."""
    shapes = st.tuples(
        st.integers(min_value=min_rows, max_value=max_rows),
        st.integers(min_value=1, max_value=max_cols)
    )
    elements = st.floats(
        min_value=-100, max_value=100, allow_nan=False, allow_infinity=False, width=64
    )
    return hnp.arrays(np.float64, shapes, elements=elements)
