"""
dimred models.

Currently a single family, decomposition, holding the PCA engine and the
distance comparator.
"""

import logging

logger = logging.getLogger("dimred.models")

from . import decomposition
from .decomposition import (
    PCA, PrincipalComponents, compute_pca,
    DistanceReport, compare_distances, compare_feature_truncation
)

__all__ = [
    'decomposition',
    'PCA',
    'PrincipalComponents',
    'compute_pca',
    'DistanceReport',
    'compare_distances',
    'compare_feature_truncation',
]
