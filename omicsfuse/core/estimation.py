"""
Cluster Count Estimator

Advisory scores for candidate cluster counts on a similarity graph. The
final C is always chosen by the caller.

- eigengap: lambda_{C+1} - lambda_C of the normalized Laplacian (1-based,
  ascending eigenvalues). Larger gaps indicate more stable partitions.
- rotation cost: misalignment left by the rotation discretization of the
  C-dimensional spectral embedding. Lower is better.
"""

from collections import namedtuple

import numpy as np
import pandas as pd

from ..config import check_int_param
from ..exceptions import InvalidParameter
from .linalg import normalized_laplacian, symmetric_eigvalsh
from .spectral import check_graph, spectral_embedding, discretize


ClusterCountEstimate = namedtuple(
    'ClusterCountEstimate',
    ['best_eigengap', 'best_rotation_cost', 'scores', 'eigenvalues']
)


def _check_candidates(candidates, n_patients):
    if candidates is None:
        raise InvalidParameter("candidates must be given, e.g. range(2, 11)")
    candidates = [check_int_param('candidate cluster count', c, 2) for c in candidates]
    if len(candidates) == 0:
        raise InvalidParameter("candidates must not be empty")
    too_large = [c for c in candidates if c > n_patients - 1]
    if too_large:
        raise InvalidParameter(
            f"candidate cluster counts {too_large} exceed n_patients - 1 = {n_patients - 1}"
        )
    return sorted(set(candidates))


def laplacian_eigenvalues(W):
    """Ascending eigenvalues of the symmetric normalized Laplacian of W."""
    W = check_graph(W)
    L, _ = normalized_laplacian(W)
    return symmetric_eigvalsh(L)


def eigengap_scores(W, candidates):
    """
    Eigengap score per candidate cluster count.

    Parameters
    ----------
    W : ndarray of shape (n_patients, n_patients)
        Fused graph or affinity matrix.
    candidates : iterable of int
        Candidate cluster counts, each in [2, n_patients - 1].

    Returns
    -------
    scores : Series
        Eigengap indexed by candidate count (higher is better).
    """
    W = check_graph(W)
    candidates = _check_candidates(candidates, W.shape[0])
    eigenvalues = laplacian_eigenvalues(W)

    gaps = [eigenvalues[c] - eigenvalues[c - 1] for c in candidates]
    return pd.Series(gaps, index=pd.Index(candidates, name='n_clusters'), name='eigengap')


def rotation_cost_scores(W, candidates, random_state=0):
    """
    Rotation cost per candidate cluster count (lower is better).

    The cost is the residual misalignment 1 - sum(singular values) / n left
    by the rotation discretization at each candidate C.
    """
    W = check_graph(W)
    candidates = _check_candidates(candidates, W.shape[0])

    costs = []
    for c in candidates:
        embedding, _ = spectral_embedding(W, c)
        _, info = discretize(embedding, random_state=random_state, return_info=True)
        costs.append(info['cost'])

    return pd.Series(costs, index=pd.Index(candidates, name='n_clusters'), name='rotation_cost')


def estimate_cluster_count(W, candidates, random_state=0):
    """
    Score candidate cluster counts with both statistics.

    Parameters
    ----------
    W : ndarray of shape (n_patients, n_patients)
        Fused graph or affinity matrix.
    candidates : iterable of int
        Candidate cluster counts, each in [2, n_patients - 1].
    random_state : int, default=0
        Seed for the discretization used by the rotation cost.

    Returns
    -------
    estimate : ClusterCountEstimate
        ``best_eigengap`` and ``best_rotation_cost`` are the preferred
        candidates under each statistic (ties go to the smaller count);
        ``scores`` is a DataFrame with both columns; ``eigenvalues`` holds
        the ascending Laplacian spectrum.
    """
    W = check_graph(W)
    eigengap = eigengap_scores(W, candidates)
    rotation_cost = rotation_cost_scores(W, candidates, random_state=random_state)

    scores = pd.concat([eigengap, rotation_cost], axis=1)

    # argmax / argmin return the first occurrence, i.e. the smaller count
    best_eigengap = int(eigengap.index[np.argmax(eigengap.to_numpy())])
    best_rotation_cost = int(rotation_cost.index[np.argmin(rotation_cost.to_numpy())])

    return ClusterCountEstimate(
        best_eigengap=best_eigengap,
        best_rotation_cost=best_rotation_cost,
        scores=scores,
        eigenvalues=laplacian_eigenvalues(W),
    )
