"""
omicsfuse Evaluation Module
"""
from .metrics import (
    clustering_accuracy,
    clustering_nmi,
    clustering_ari,
    clustering_purity,
    evaluate_clustering,
    print_metrics,
    block_contrast,
    concordance_nmi,
    MetricTracker
)
from .ranking import (
    feature_nmi,
    rank_view,
    rank_features_by_nmi,
    top_features,
    FeatureRelevanceRanker
)

__all__ = [
    'clustering_accuracy',
    'clustering_nmi',
    'clustering_ari',
    'clustering_purity',
    'evaluate_clustering',
    'print_metrics',
    'block_contrast',
    'concordance_nmi',
    'MetricTracker',
    'feature_nmi',
    'rank_view',
    'rank_features_by_nmi',
    'top_features',
    'FeatureRelevanceRanker'
]
