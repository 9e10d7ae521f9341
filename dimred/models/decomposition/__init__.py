"""
dimred Decomposition Module

Principal Component Analysis and the distance-preservation checks built on
top of it.

Key components:
- PCA / compute_pca: ranked orthonormal directions, variances and scores
- PrincipalComponents: immutable result of a PCA fit
- compare_distances: full versus k-dimensional pairwise distances
- compare_feature_truncation: the same check for the first k raw columns
- DistanceReport: immutable result of a distance comparison
"""

import logging

logger = logging.getLogger("dimred.models.decomposition")

from .pca import PCA, PrincipalComponents, compute_pca
from .distance import DistanceReport, compare_distances, compare_feature_truncation

__all__ = [
    # PCA
    'PCA',
    'PrincipalComponents',
    'compute_pca',

    # Distance checks
    'DistanceReport',
    'compare_distances',
    'compare_feature_truncation',
]
