"""
Network Fusion Engine

Similarity network fusion by iterative cross-diffusion. For each view v:

- status matrix P_v : affinity with half of each row's mass kept on the
  patient itself and the other half spread over its neighbours in
  proportion to the affinity (global similarity)
- kernel matrix S_v : affinity restricted to each patient's K nearest
  neighbours, row-normalized (local similarity)

Each iteration replaces every P_v with the status matrix of

    S_v . mean_{u != v}(P_u) . S_v^T

reading only the previous iteration's snapshot of all views. After T
iterations the fused graph is the average of the P_v, symmetrized and
balanced so that every row sums to 1.
"""

import numpy as np

from ..config import DEFAULT_PARAMS, check_k_neighbors, check_alpha, check_n_iter
from ..exceptions import InvalidInput, DimensionMismatch
from .affinity import make_affinities
from .linalg import row_normalize, symmetric_sinkhorn


def check_affinities(affinities):
    """Validate a list of per-view affinity matrices of identical shape."""
    if affinities is None or len(affinities) < 2:
        n = 0 if affinities is None else len(affinities)
        raise InvalidInput(f"At least 2 affinity matrices are required, got {n}")

    checked = []
    for v, W in enumerate(affinities):
        W = np.array(W, dtype=np.float64)
        if W.ndim != 2 or W.shape[0] != W.shape[1]:
            raise InvalidInput(f"affinity {v} must be square, got shape {W.shape}")
        if not np.all(np.isfinite(W)):
            raise InvalidInput(f"affinity {v} contains non-finite values")
        if np.any(W < 0):
            raise InvalidInput(f"affinity {v} contains negative values")
        checked.append(W)

    n = checked[0].shape[0]
    for v, W in enumerate(checked[1:], start=1):
        if W.shape[0] != n:
            raise DimensionMismatch(
                f"affinity {v} covers {W.shape[0]} patients, affinity 0 covers {n}"
            )
    if n < 2:
        raise InvalidInput("Fusion needs at least 2 patients")

    return checked


def status_matrix(W):
    """
    Full status matrix with rows summing to 1.

        P_ii = 1/2,    P_ij = W_ij / (2 * sum_{k != i} W_ik)

    The affinity diagonal is damped, so the self-mass is set here. Without
    it repeated diffusion flattens every P_v towards a rank-one matrix.
    """
    P = W.copy()
    np.fill_diagonal(P, 0)
    P = row_normalize(P) / 2
    np.fill_diagonal(P, 0.5)
    return P


def kernel_matrix(W, k_neighbors):
    """
    Sparse local kernel keeping the K largest off-diagonal entries per row.

    Ties are broken by column index. K is clipped to n-1. Kept entries are
    renormalized to sum to 1 per row.
    """
    n = W.shape[0]
    k = min(k_neighbors, n - 1)

    ranked = W.copy()
    np.fill_diagonal(ranked, -np.inf)
    # Stable sort on the negated values keeps lower column indices first on ties
    neighbors = np.argsort(-ranked, axis=1, kind='stable')[:, :k]

    rows = np.arange(n)[:, np.newaxis]
    S = np.zeros_like(W)
    S[rows, neighbors] = W[rows, neighbors]

    return row_normalize(S)


def cross_diffusion(status, kernels, n_iter):
    """
    Run the cross-diffusion iterations.

    Parameters
    ----------
    status : list of ndarray
        Initial status matrices P_v.
    kernels : list of ndarray
        Local kernel matrices S_v.
    n_iter : int
        Number of iterations T.

    Yields
    ------
    snapshot : tuple of ndarray
        The status matrices after each iteration. Every update reads the
        previous snapshot only, never a partially updated one.
    """
    n_views = len(status)
    current = tuple(status)

    for _ in range(n_iter):
        updated = []
        for v in range(n_views):
            others = np.mean([current[u] for u in range(n_views) if u != v], axis=0)
            S = kernels[v]
            updated.append(status_matrix(S @ others @ S.T))
        current = tuple(updated)
        yield current


def fuse_networks(affinities, k_neighbors, n_iter, return_status=False):
    """
    Fuse per-view affinity matrices into one patient similarity graph.

    Parameters
    ----------
    affinities : list of ndarray
        Per-view affinity matrices, all of shape (n_patients, n_patients).
    k_neighbors : int
        Neighbourhood size K for the local kernels.
    n_iter : int
        Number of cross-diffusion iterations T (typically 10-20).
    return_status : bool, default=False
        Also return the final per-view status matrices.

    Returns
    -------
    fused : ndarray of shape (n_patients, n_patients)
        Symmetric fused graph whose rows sum to 1.
    status : list of ndarray
        Final status matrices, only when ``return_status`` is True.
    """
    k_neighbors = check_k_neighbors(k_neighbors)
    n_iter = check_n_iter(n_iter)
    affinities = check_affinities(affinities)

    status = [status_matrix(W) for W in affinities]
    kernels = [kernel_matrix(W, k_neighbors) for W in affinities]

    for snapshot in cross_diffusion(status, kernels, n_iter):
        status = list(snapshot)

    fused = np.mean(status, axis=0)
    fused = (fused + fused.T) / 2
    fused = symmetric_sinkhorn(fused)

    if return_status:
        return fused, status
    return fused


class SimilarityNetworkFusion:
    """
    Similarity network fusion of aligned omics views.

    Runs the Distance Engine and Affinity Builder on every view, then fuses
    the per-view graphs by cross-diffusion.

    Parameters
    ----------
    k_neighbors : int, default=20
        Neighbourhood size K for local scaling and for the local kernels.
    alpha : float, default=0.5
        Bandwidth scaling hyperparameter of the affinity kernel.
    n_iter : int, default=20
        Number of cross-diffusion iterations T.
    metric : str, default='sqeuclidean'
        Distance metric for every view.
    verbose : bool, default=False
        Whether to print progress.

    Attributes
    ----------
    distances_ : list of ndarray
        Per-view distance matrices.
    affinities_ : list of ndarray
        Per-view affinity matrices.
    status_matrices_ : list of ndarray
        Per-view status matrices after the last iteration.
    fused_graph_ : ndarray of shape (n_patients, n_patients)
        The fused similarity graph.
    """

    def __init__(
        self,
        k_neighbors=DEFAULT_PARAMS['k_neighbors'],
        alpha=DEFAULT_PARAMS['alpha'],
        n_iter=DEFAULT_PARAMS['n_iter'],
        metric=DEFAULT_PARAMS['metric'],
        verbose=False
    ):
        self.k_neighbors = k_neighbors
        self.alpha = alpha
        self.n_iter = n_iter
        self.metric = metric
        self.verbose = verbose

        # Attributes set after fitting
        self.distances_ = None
        self.affinities_ = None
        self.status_matrices_ = None
        self.fused_graph_ = None

    def fit(self, X_views):
        """
        Fuse multi-view data.

        Parameters
        ----------
        X_views : list of array-like
            List of aligned views, each of shape (n_patients, n_features_v).

        Returns
        -------
        self : SimilarityNetworkFusion
            Fitted estimator.
        """
        k_neighbors = check_k_neighbors(self.k_neighbors)
        alpha = check_alpha(self.alpha)
        n_iter = check_n_iter(self.n_iter)

        if self.verbose:
            n = len(X_views) if X_views is not None else 0
            print(f"SNF: Building affinities for {n} views "
                  f"(K={k_neighbors}, alpha={alpha}, metric={self.metric})")

        self.affinities_, self.distances_ = make_affinities(
            X_views, k_neighbors, alpha, metric=self.metric, return_distances=True
        )

        if self.verbose:
            print(f"SNF: Cross-diffusion over {n_iter} iterations...")

        self.fused_graph_, self.status_matrices_ = fuse_networks(
            self.affinities_, k_neighbors, n_iter, return_status=True
        )

        if self.verbose:
            print(f"SNF: Fused graph of {self.fused_graph_.shape[0]} patients")

        return self

    def fit_transform(self, X_views):
        """Fit and return the fused graph."""
        self.fit(X_views)
        return self.fused_graph_
