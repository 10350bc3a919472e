"""
Integration pipeline.

One analysis is an immutable ``IntegrationState``. Every stage takes a state
plus its parameters and returns a new state with the stage's artifacts
filled in; nothing is mutated in place, so re-running a stage always yields a
fresh labeling or ranking.

    state = IntegrationState.from_views(views, view_names)
    state = build_affinities(state, k_neighbors=20, alpha=0.5)
    state = fuse(state, k_neighbors=20, n_iter=20)
    state = score_cluster_counts(state, candidates=range(2, 8))
    state = partition(state, n_clusters=3)
    state = rank(state)
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import pandas as pd

from .config import check_k_neighbors, check_alpha, check_n_iter, check_n_clusters, check_top_k
from .core.affinity import make_affinities
from .core.distance import check_views
from .core.estimation import estimate_cluster_count
from .core.fusion import fuse_networks
from .core.spectral import SpectralPartitioner
from .evaluation.metrics import concordance_nmi
from .evaluation.ranking import rank_features_by_nmi, top_features
from .exceptions import InvalidInput, DimensionMismatch


@dataclass(frozen=True, eq=False)
class IntegrationState:
    """
    Artifacts of one integration run.

    Attributes
    ----------
    views : tuple of ndarray
        Validated aligned views.
    view_names : tuple of str
    raw_views : tuple
        Views as supplied (DataFrames keep their column names for ranking).
    params : dict
        Parameters used by the stages run so far.
    distances, affinities : tuple of ndarray or None
        Per-view Distance and Affinity Matrices.
    fused_graph : ndarray or None
    cluster_scores : DataFrame or None
        Eigengap and rotation cost per candidate count.
    labels : ndarray or None
        Fused-graph cluster labeling.
    view_labels : dict or None
        Single-view cluster labelings for comparison.
    concordance : DataFrame or None
        Pairwise NMI between view labelings and the fused labeling.
    rankings : dict or None
        View name -> feature ranking DataFrame.
    """

    views: tuple
    view_names: tuple
    raw_views: tuple
    params: dict = field(default_factory=dict)
    distances: Optional[tuple] = None
    affinities: Optional[tuple] = None
    fused_graph: Optional[np.ndarray] = None
    cluster_scores: Optional[pd.DataFrame] = None
    labels: Optional[np.ndarray] = None
    view_labels: Optional[dict] = None
    concordance: Optional[pd.DataFrame] = None
    rankings: Optional[dict] = None

    @classmethod
    def from_views(cls, X_views, view_names=None):
        views = check_views(X_views)
        if view_names is None:
            view_names = [f'view_{v}' for v in range(len(views))]
        if len(view_names) != len(views):
            raise DimensionMismatch(f"{len(view_names)} view names for {len(views)} views")
        return cls(
            views=tuple(views),
            view_names=tuple(view_names),
            raw_views=tuple(X_views),
        )

    @property
    def n_patients(self):
        return self.views[0].shape[0]

    def _with(self, params=None, **artifacts):
        merged = dict(self.params)
        if params:
            merged.update(params)
        return dataclasses.replace(self, params=merged, **artifacts)


def _require(state, attribute, stage):
    if getattr(state, attribute) is None:
        raise InvalidInput(f"'{stage}' needs {attribute}; run the earlier stage first")


def build_affinities(state, k_neighbors, alpha, metric='sqeuclidean'):
    """Distance Engine + Affinity Builder on every view."""
    k_neighbors = check_k_neighbors(k_neighbors)
    alpha = check_alpha(alpha)

    affinities, distances = make_affinities(
        state.views, k_neighbors, alpha, metric=metric, return_distances=True
    )
    return state._with(
        params={'k_neighbors': k_neighbors, 'alpha': alpha, 'metric': metric},
        distances=tuple(distances),
        affinities=tuple(affinities),
        fused_graph=None, cluster_scores=None, labels=None,
        view_labels=None, concordance=None, rankings=None,
    )


def fuse(state, k_neighbors, n_iter):
    """Network Fusion Engine on the per-view affinities."""
    _require(state, 'affinities', 'fuse')
    k_neighbors = check_k_neighbors(k_neighbors)
    n_iter = check_n_iter(n_iter)

    fused = fuse_networks(list(state.affinities), k_neighbors, n_iter)
    return state._with(
        params={'fusion_k_neighbors': k_neighbors, 'n_iter': n_iter},
        fused_graph=fused,
        cluster_scores=None, labels=None, concordance=None, rankings=None,
    )


def score_cluster_counts(state, candidates, random_state=0):
    """Cluster Count Estimator on the fused graph (advisory)."""
    _require(state, 'fused_graph', 'score_cluster_counts')
    estimate = estimate_cluster_count(state.fused_graph, candidates, random_state=random_state)
    return state._with(
        params={
            'best_eigengap': estimate.best_eigengap,
            'best_rotation_cost': estimate.best_rotation_cost,
        },
        cluster_scores=estimate.scores,
    )


def partition(state, n_clusters, random_state=0):
    """Spectral Partitioner on the fused graph."""
    _require(state, 'fused_graph', 'partition')
    n_clusters = check_n_clusters(n_clusters)

    labels = SpectralPartitioner(n_clusters, random_state=random_state).fit_predict(
        state.fused_graph
    )
    return state._with(
        params={'n_clusters': n_clusters, 'random_state': random_state},
        labels=labels,
        concordance=None, rankings=None,
    )


def partition_views(state, n_clusters, random_state=0):
    """
    Single-view spectral clusterings for comparison with the fused one.

    Also computes the concordance table when fused labels exist.
    """
    _require(state, 'affinities', 'partition_views')
    n_clusters = check_n_clusters(n_clusters)

    view_labels = {}
    for name, W in zip(state.view_names, state.affinities):
        view_labels[name] = SpectralPartitioner(
            n_clusters, random_state=random_state
        ).fit_predict(W)

    concordance = None
    if state.labels is not None:
        concordance = concordance_nmi({**view_labels, 'fused': state.labels})

    return state._with(view_labels=view_labels, concordance=concordance)


def rank(state, n_bins=None, top_k=None):
    """
    Feature Relevance Ranker on the raw views against the fused labels.

    With ``top_k`` only the first ``top_k`` features of every view are kept.
    """
    _require(state, 'labels', 'rank')

    rankings = rank_features_by_nmi(
        list(state.raw_views), labels=state.labels, n_bins=n_bins,
        view_names=list(state.view_names)
    )
    params = {'n_bins': n_bins}
    if top_k is not None:
        top_k = check_top_k(top_k)
        rankings = top_features(rankings, top_k)
        params['top_k'] = top_k

    return state._with(params=params, rankings=rankings)


def run_integration(X_views, k_neighbors, alpha, n_iter, n_clusters,
                    view_names=None, metric='sqeuclidean', candidates=None,
                    n_bins=None, top_k=None, compare_views=False,
                    random_state=0, verbose=False):
    """
    Run every stage in order and return the final state.

    Parameters
    ----------
    X_views : list of array-like
        Aligned views.
    k_neighbors : int
        K for local scaling and for the fusion kernels.
    alpha : float
        Affinity bandwidth hyperparameter.
    n_iter : int
        Cross-diffusion iterations T.
    n_clusters : int
        Number of clusters C.
    view_names : list of str, optional
    metric : str, default='sqeuclidean'
    candidates : iterable of int, optional
        Candidate cluster counts to score; skipped when None.
    n_bins : int, optional
        Bins per feature for the ranking; Sturges' rule when None.
    top_k : int, optional
        Keep only the top-K features per view.
    compare_views : bool, default=False
        Also cluster each view alone and report concordance.
    random_state : int, default=0
        Seed of the spectral discretization.
    verbose : bool, default=False

    Returns
    -------
    state : IntegrationState
    """
    state = IntegrationState.from_views(X_views, view_names)

    if verbose:
        print(f"Integration: {len(state.views)} views, {state.n_patients} patients")

    state = build_affinities(state, k_neighbors, alpha, metric=metric)
    state = fuse(state, k_neighbors, n_iter)

    if candidates is not None:
        state = score_cluster_counts(state, candidates, random_state=random_state)
        if verbose:
            print(f"Integration: best C by eigengap = {state.params['best_eigengap']}, "
                  f"by rotation cost = {state.params['best_rotation_cost']}")

    state = partition(state, n_clusters, random_state=random_state)
    if verbose:
        print(f"Integration: cluster sizes {np.bincount(state.labels).tolist()}")

    if compare_views:
        state = partition_views(state, n_clusters, random_state=random_state)

    state = rank(state, n_bins=n_bins, top_k=top_k)
    return state
