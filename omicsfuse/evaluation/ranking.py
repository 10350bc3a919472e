"""
Feature Relevance Ranker

Ranks the original features of every view by normalized mutual information
(NMI) between the discretized feature and the patient grouping derived from
the fused graph.

Binning policy: each feature is cut into ``n_bins`` equal-width bins over its
observed range. By default ``n_bins`` follows Sturges' rule,
ceil(log2(n_patients)) + 1. Constant features score exactly 0.
"""

import numpy as np
import pandas as pd

from ..config import check_int_param, check_n_clusters, check_top_k
from ..core.distance import check_views
from ..core.linalg import equal_width_codes, sturges_bins, discrete_nmi
from ..core.spectral import SpectralPartitioner
from ..exceptions import InvalidInput, DimensionMismatch


def _feature_names(X, n_features):
    if isinstance(X, pd.DataFrame):
        return [str(c) for c in X.columns]
    return [f'f{j}' for j in range(n_features)]


def feature_nmi(X, labels, n_bins=None):
    """
    NMI of every feature of one view with a labeling.

    Parameters
    ----------
    X : ndarray of shape (n_patients, n_features)
    labels : ndarray of shape (n_patients,)
    n_bins : int, optional
        Number of equal-width bins. Sturges' rule when None.

    Returns
    -------
    scores : ndarray of shape (n_features,)
        Values in [0, 1].
    """
    n_patients, n_features = X.shape
    if n_bins is None:
        n_bins = sturges_bins(n_patients)
    n_bins = check_int_param('n_bins', n_bins, 2)

    scores = np.zeros(n_features)
    for j in range(n_features):
        column = X[:, j]
        if np.ptp(column) == 0:
            # Constant feature: zero mutual information
            continue
        scores[j] = discrete_nmi(equal_width_codes(column, n_bins), labels)

    return scores


def rank_view(X, labels, n_bins=None, feature_names=None):
    """
    Ranking table for one view.

    Returns
    -------
    ranking : DataFrame
        Columns ``feature`` (original column index), ``name``, ``nmi`` and
        ``rank`` (1-based), sorted by NMI descending with ties broken by
        original index.
    """
    scores = feature_nmi(X, labels, n_bins=n_bins)
    if feature_names is None:
        feature_names = [f'f{j}' for j in range(X.shape[1])]

    ranking = pd.DataFrame({
        'feature': np.arange(X.shape[1]),
        'name': feature_names,
        'nmi': scores,
    })
    # mergesort is stable, so equal scores keep their original order
    ranking = ranking.sort_values(
        ['nmi', 'feature'], ascending=[False, True], kind='mergesort'
    ).reset_index(drop=True)
    ranking['rank'] = np.arange(1, len(ranking) + 1)

    return ranking


def rank_features_by_nmi(X_views, labels=None, fused_graph=None, n_clusters=None,
                         n_bins=None, view_names=None, random_state=0):
    """
    Rank the features of every view by NMI with the fused graph's grouping.

    Either ``labels`` or both ``fused_graph`` and ``n_clusters`` must be
    given; in the latter case labels come from the Spectral Partitioner.

    Parameters
    ----------
    X_views : list of array-like
        Raw aligned views. DataFrame column names become feature names.
    labels : array-like of shape (n_patients,), optional
        Cluster labeling of the patients.
    fused_graph : ndarray of shape (n_patients, n_patients), optional
        Fused graph used to derive labels.
    n_clusters : int, optional
        Number of clusters for deriving labels.
    n_bins : int, optional
        Equal-width bins per feature; Sturges' rule when None.
    view_names : list of str, optional
        Keys of the returned dict. Defaults to 'view_0', 'view_1', ...
    random_state : int, default=0
        Seed of the spectral discretization when labels are derived.

    Returns
    -------
    rankings : dict
        View name -> ranking DataFrame (see ``rank_view``).
    """
    views = check_views(X_views)
    n_patients = views[0].shape[0]

    if labels is None:
        if fused_graph is None or n_clusters is None:
            raise InvalidInput("Give either labels or fused_graph with n_clusters")
        n_clusters = check_n_clusters(n_clusters)
        labels = SpectralPartitioner(
            n_clusters, random_state=random_state
        ).fit_predict(fused_graph)

    labels = np.asarray(labels)
    if labels.ndim != 1 or labels.shape[0] != n_patients:
        raise DimensionMismatch(
            f"labels must have length {n_patients}, got shape {labels.shape}"
        )

    if view_names is None:
        view_names = [f'view_{v}' for v in range(len(views))]
    if len(view_names) != len(views):
        raise DimensionMismatch(
            f"{len(view_names)} view names for {len(views)} views"
        )

    rankings = {}
    for name, X_raw, X in zip(view_names, X_views, views):
        rankings[name] = rank_view(
            X, labels, n_bins=n_bins,
            feature_names=_feature_names(X_raw, X.shape[1])
        )

    return rankings


def top_features(ranking, top_k):
    """
    First ``top_k`` rows of a ranking (or of every ranking in a dict).
    """
    top_k = check_top_k(top_k)
    if isinstance(ranking, dict):
        return {name: table.head(top_k) for name, table in ranking.items()}
    return ranking.head(top_k)


class FeatureRelevanceRanker:
    """
    Estimator wrapper around ``rank_features_by_nmi``.

    Parameters
    ----------
    n_bins : int, optional
        Equal-width bins per feature; Sturges' rule when None.
    top_k : int, optional
        If given, ``top_features_`` keeps this many features per view.

    Attributes
    ----------
    rankings_ : dict
        View name -> full ranking DataFrame.
    top_features_ : dict or None
        View name -> top ``top_k`` rows.
    """

    def __init__(self, n_bins=None, top_k=None):
        self.n_bins = n_bins
        self.top_k = top_k

        self.rankings_ = None
        self.top_features_ = None

    def fit(self, X_views, labels, view_names=None):
        self.rankings_ = rank_features_by_nmi(
            X_views, labels=labels, n_bins=self.n_bins, view_names=view_names
        )
        if self.top_k is not None:
            self.top_features_ = top_features(self.rankings_, self.top_k)
        return self
