"""
omicsfuse Core Module

Distance Engine, Affinity Builder, Network Fusion Engine, Cluster Count
Estimator and Spectral Partitioner.
"""
from .distance import (
    check_view,
    check_views,
    pairwise_distances,
    standard_normalize,
)
from .affinity import (
    local_scale,
    make_affinity,
    make_affinities,
)
from .fusion import (
    status_matrix,
    kernel_matrix,
    cross_diffusion,
    fuse_networks,
    SimilarityNetworkFusion,
)
from .spectral import (
    spectral_embedding,
    discretize,
    count_components,
    SpectralPartitioner,
)
from .estimation import (
    laplacian_eigenvalues,
    eigengap_scores,
    rotation_cost_scores,
    estimate_cluster_count,
    ClusterCountEstimate,
)

__all__ = [
    'check_view',
    'check_views',
    'pairwise_distances',
    'standard_normalize',
    'local_scale',
    'make_affinity',
    'make_affinities',
    'status_matrix',
    'kernel_matrix',
    'cross_diffusion',
    'fuse_networks',
    'SimilarityNetworkFusion',
    'spectral_embedding',
    'discretize',
    'count_components',
    'SpectralPartitioner',
    'laplacian_eigenvalues',
    'eigengap_scores',
    'rotation_cost_scores',
    'estimate_cluster_count',
    'ClusterCountEstimate',
]
