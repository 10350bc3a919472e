"""
Affinity Builder

Converts a distance matrix into a locally scaled similarity graph over
patients. The bandwidth of every pair adapts to the density around both
patients, so dense and sparse regions of patient space do not distort each
other's similarities.

    rho_i    = mean distance from i to its K nearest neighbours
    sigma_ij = alpha * (rho_i + rho_j + d_ij) / 3
    W_ij     = exp(-d_ij / (2 * sigma_ij))

Since d_ij / sigma_ij <= 3 / alpha, every off-diagonal entry is bounded in
(0, 1]; entries that underflow for very small alpha are clipped to the
smallest positive float. Self-similarity is damped to machine epsilon
instead of 1.
"""

import numpy as np

from ..config import check_k_neighbors, check_alpha
from ..exceptions import InvalidInput
from .distance import check_views, pairwise_distances


def check_distance_matrix(D):
    """Validate a square, finite, non-negative distance matrix."""
    D = np.asarray(D, dtype=np.float64)
    if D.ndim != 2 or D.shape[0] != D.shape[1]:
        raise InvalidInput(f"Distance matrix must be square, got shape {D.shape}")
    if D.shape[0] < 2:
        raise InvalidInput("Distance matrix needs at least 2 patients")
    if not np.all(np.isfinite(D)):
        raise InvalidInput("Distance matrix contains non-finite values")
    if np.any(D < 0):
        raise InvalidInput("Distance matrix contains negative values")
    return D


def local_scale(D, k_neighbors):
    """
    Mean distance from each patient to its K nearest neighbours.

    The patient itself is excluded; K is clipped to n-1 so that K >= n-1
    uses every other patient.
    """
    n = D.shape[0]
    k = min(k_neighbors, n - 1)

    D_off = D.copy()
    np.fill_diagonal(D_off, np.inf)
    D_sorted = np.sort(D_off, axis=1)

    return D_sorted[:, :k].mean(axis=1)


def make_affinity(D, k_neighbors, alpha):
    """
    Locally scaled exponential affinity from a distance matrix.

    Parameters
    ----------
    D : ndarray of shape (n_patients, n_patients)
        Distance matrix (squared Euclidean by default upstream).
    k_neighbors : int
        Neighbourhood size K used for the local scale (typically 10-30).
    alpha : float
        Bandwidth scaling hyperparameter (typically 0.3-0.8).

    Returns
    -------
    W : ndarray of shape (n_patients, n_patients)
        Symmetric affinity matrix with entries in (0, 1].
    """
    k_neighbors = check_k_neighbors(k_neighbors)
    alpha = check_alpha(alpha)
    D = check_distance_matrix(D)
    D = (D + D.T) / 2

    rho = local_scale(D, k_neighbors)

    # Pair bandwidth, clipped for duplicate patients (rho = d = 0)
    sigma = alpha * (rho[:, np.newaxis] + rho[np.newaxis, :] + D) / 3.0
    sigma = np.maximum(sigma, np.finfo(np.float64).tiny)

    W = np.exp(-D / (2.0 * sigma))
    # Small alpha can underflow the kernel to 0 on far pairs
    W = np.maximum(W, np.finfo(np.float64).tiny)
    W = (W + W.T) / 2
    np.fill_diagonal(W, np.finfo(np.float64).eps)

    return W


def make_affinities(X_views, k_neighbors, alpha, metric='sqeuclidean',
                    return_distances=False):
    """
    Distance + affinity for every view of an aligned multi-view dataset.

    Parameters
    ----------
    X_views : list of array-like
        Aligned views, each of shape (n_patients, n_features_v).
    k_neighbors : int
        Neighbourhood size K.
    alpha : float
        Bandwidth scaling hyperparameter.
    metric : str, default='sqeuclidean'
        Distance metric passed to the Distance Engine.
    return_distances : bool, default=False
        Also return the per-view distance matrices.

    Returns
    -------
    affinities : list of ndarray
    distances : list of ndarray
        Only when ``return_distances`` is True.
    """
    views = check_views(X_views)

    distances = [pairwise_distances(X, metric=metric) for X in views]
    affinities = [make_affinity(D, k_neighbors, alpha) for D in distances]

    if return_distances:
        return affinities, distances
    return affinities
