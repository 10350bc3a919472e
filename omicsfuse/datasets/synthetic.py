"""
Synthetic Multi-View Omics Datasets

Aligned patient-by-feature views with a known cluster structure, used by the
tests, the demo and the experiment scripts. Loading and validating real omics
files happens upstream of this package.
"""

import numpy as np
from sklearn.preprocessing import StandardScaler

from ..core.distance import check_view
from ..exceptions import DimensionMismatch


DEFAULT_VIEW_NAMES = ['expression', 'methylation', 'mirna']


class MultiViewDataset:
    """
    Container for aligned omics views.

    Attributes
    ----------
    views : list of ndarray
        Feature matrices, patients in rows, identical row order.
    view_names : list of str
        Name of each view.
    labels : ndarray or None
        Reference cluster labels, when known.
    informative_features : list of ndarray or None
        Column indices carrying the cluster signal in each view.
    n_views : int
    n_samples : int
    n_clusters : int
    name : str
    """

    def __init__(self, name='unknown'):
        self.views = []
        self.view_names = []
        self.labels = None
        self.informative_features = None
        self.n_views = 0
        self.n_samples = 0
        self.n_clusters = 0
        self.name = name

    def add_view(self, X, name=None):
        """Append a view; its row count must match the existing views."""
        X = check_view(X, name=name or 'view')
        if self.views and X.shape[0] != self.n_samples:
            raise DimensionMismatch(
                f"view has {X.shape[0]} patients, dataset has {self.n_samples}"
            )
        self.views.append(X)
        self.view_names.append(name if name is not None else f'view_{len(self.views) - 1}')
        self.n_views = len(self.views)
        self.n_samples = X.shape[0]
        return self

    def normalize(self, method='standard'):
        """
        Normalize each view.

        Parameters
        ----------
        method : str
            'standard' (z-score per feature)
        """
        for i in range(self.n_views):
            if method == 'standard':
                self.views[i] = StandardScaler().fit_transform(self.views[i])
            else:
                raise ValueError(f"Unknown normalization: {method}")

        return self

    def get_view_dimensions(self):
        """Get dimensions of each view."""
        return [v.shape[1] for v in self.views]

    def __repr__(self):
        dims = dict(zip(self.view_names, self.get_view_dimensions()))
        return (f"MultiViewDataset({self.name}): "
                f"{self.n_samples} patients, {self.n_views} views, "
                f"{self.n_clusters} clusters, dims={dims}")


def make_blob_views(n_per_cluster=10, n_clusters=2, n_views=3, n_informative=2,
                    n_noise=5, separation=8.0, view_scales=None,
                    shuffle_features=True, random_state=42):
    """
    Gaussian blobs shared across views, plus pure-noise features.

    Patients are ordered by cluster (the first ``n_per_cluster`` belong to
    cluster 0 and so on). In every view, informative features put cluster c
    at ``c * separation`` with unit noise; noise features are standard
    normal. Each view is then multiplied by its own native scale.

    Parameters
    ----------
    n_per_cluster : int, default=10
    n_clusters : int, default=2
    n_views : int, default=3
    n_informative : int, default=2
        Informative features per view.
    n_noise : int, default=5
        Noise features per view.
    separation : float, default=8.0
        Distance between consecutive cluster centres on every informative
        feature, in units of the within-cluster standard deviation.
    view_scales : list of float, optional
        Multiplier per view. Defaults to 10 ** v.
    shuffle_features : bool, default=True
        Permute feature columns within each view.
    random_state : int, default=42

    Returns
    -------
    dataset : MultiViewDataset
    """
    rng = np.random.RandomState(random_state)

    n_samples = n_per_cluster * n_clusters
    labels = np.repeat(np.arange(n_clusters), n_per_cluster)

    if view_scales is None:
        view_scales = [10.0 ** v for v in range(n_views)]
    if n_views == len(DEFAULT_VIEW_NAMES):
        view_names = list(DEFAULT_VIEW_NAMES)
    else:
        view_names = [f'view_{v}' for v in range(n_views)]

    dataset = MultiViewDataset('Blobs (Synthetic)')
    dataset.labels = labels
    dataset.n_clusters = n_clusters
    dataset.informative_features = []

    for v in range(n_views):
        centers = np.arange(n_clusters)[:, np.newaxis] * separation * np.ones((1, n_informative))
        informative = centers[labels] + rng.randn(n_samples, n_informative)
        noise = rng.randn(n_samples, n_noise)
        X = np.hstack([informative, noise]) * view_scales[v]

        n_features = n_informative + n_noise
        order = rng.permutation(n_features) if shuffle_features else np.arange(n_features)
        X = X[:, order]
        # New column positions of the informative features
        informative_idx = np.sort(np.flatnonzero(order < n_informative))

        dataset.add_view(X, view_names[v])
        dataset.informative_features.append(informative_idx)

    return dataset


def make_tcga_like(n_samples=105, n_clusters=3, view_dims=(500, 400, 120),
                   informative_fraction=0.05, random_state=42):
    """
    Expression / methylation / miRNA-shaped views with a shared subtype.

    Roughly mimics a small cohort: log-scale expression, methylation beta
    values in (0, 1) and sparse-ish miRNA counts on a log scale. Only a
    fraction of the features in each view carries the subtype signal.

    Returns
    -------
    dataset : MultiViewDataset
    """
    rng = np.random.RandomState(random_state)

    labels = np.repeat(np.arange(n_clusters), int(np.ceil(n_samples / n_clusters)))[:n_samples]
    labels = labels[rng.permutation(n_samples)]

    dataset = MultiViewDataset('TCGA-like (Synthetic)')
    dataset.labels = labels
    dataset.n_clusters = n_clusters
    dataset.informative_features = []

    for name, dim in zip(DEFAULT_VIEW_NAMES, view_dims):
        n_inf = max(1, int(round(dim * informative_fraction)))
        informative_idx = np.sort(rng.choice(dim, n_inf, replace=False))

        # Subtype-specific shifts on the informative features
        shifts = rng.randn(n_clusters, n_inf) * 2.0
        latent = rng.randn(n_samples, dim)
        latent[:, informative_idx] += shifts[labels]

        if name == 'expression':
            X = 6.0 + 1.5 * latent
        elif name == 'methylation':
            X = 1.0 / (1.0 + np.exp(-0.8 * latent))
        else:
            X = np.log1p(np.exp(1.0 + latent))

        dataset.add_view(X, name)
        dataset.informative_features.append(informative_idx)

    return dataset


def load_dataset(name, **kwargs):
    """
    Build a synthetic dataset by name.

    Parameters
    ----------
    name : str
        'blobs' or 'tcga-like'.
    **kwargs
        Passed to the generator.

    Returns
    -------
    dataset : MultiViewDataset
    """
    name_lower = name.lower().replace('-', '').replace('_', '')

    generators = {
        'blobs': make_blob_views,
        'tcgalike': make_tcga_like,
    }

    if name_lower in generators:
        return generators[name_lower](**kwargs)
    raise ValueError(f"Unknown dataset: {name}. Available: {get_available_datasets()}")


def get_available_datasets():
    """Get list of available dataset names."""
    return ['blobs', 'tcga-like']
