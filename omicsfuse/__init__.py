"""
omicsfuse: Similarity network fusion of patient-aligned omics views, spectral
partitioning of the fused patient graph, and NMI-based feature ranking.
"""

from .core import SimilarityNetworkFusion, SpectralPartitioner, estimate_cluster_count
from .evaluation import evaluate_clustering, rank_features_by_nmi, FeatureRelevanceRanker
from .pipeline import IntegrationState, run_integration

__version__ = "1.0.0"

__all__ = [
    'SimilarityNetworkFusion',
    'SpectralPartitioner',
    'estimate_cluster_count',
    'evaluate_clustering',
    'rank_features_by_nmi',
    'FeatureRelevanceRanker',
    'IntegrationState',
    'run_integration',
]
