"""
dimred Test Suite

Tests for the PCA engine, the distance comparator and the supporting core,
configuration and utility modules.
"""

# Import commonly used test utilities
from tests.conftest import (
    # Hypothesis strategies
    data_matrices,
)
