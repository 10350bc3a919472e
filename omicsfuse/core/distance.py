"""
Distance Engine

Pairwise patient dissimilarities within one omics view. Each view keeps its
native scale; differences in scale between views are absorbed later by the
local scaling of the affinity kernel.
"""

import numpy as np
import pandas as pd
from scipy.spatial.distance import cdist
from sklearn.preprocessing import StandardScaler

from ..exceptions import InvalidInput, DimensionMismatch, NumericalFailure


def check_view(X, name='view'):
    """
    Validate one view and return it as a float64 ndarray copy.

    Parameters
    ----------
    X : array-like or DataFrame of shape (n_patients, n_features)
        Omics measurements, patients in rows.
    name : str
        Used in error messages.

    Returns
    -------
    X : ndarray of shape (n_patients, n_features)
    """
    if isinstance(X, pd.DataFrame):
        X = X.to_numpy()

    try:
        X = np.array(X, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"{name} is not numeric: {e}") from e

    if X.ndim != 2:
        raise InvalidInput(f"{name} must be 2-D (patients x features), got {X.ndim}-D")
    if X.shape[0] < 2:
        raise InvalidInput(f"{name} needs at least 2 patients, got {X.shape[0]}")
    if X.shape[1] < 1:
        raise InvalidInput(f"{name} has no features")
    if not np.all(np.isfinite(X)):
        n_bad = int(np.sum(~np.isfinite(X)))
        raise InvalidInput(f"{name} contains {n_bad} non-finite value(s)")

    return X


def check_views(X_views):
    """
    Validate a list of aligned views.

    At least two views are required, all with the same number of patients.

    Returns
    -------
    views : list of ndarray
    """
    if X_views is None or len(X_views) < 2:
        n = 0 if X_views is None else len(X_views)
        raise InvalidInput(f"At least 2 views are required for fusion, got {n}")

    views = [check_view(X, name=f'view {v}') for v, X in enumerate(X_views)]

    n_patients = views[0].shape[0]
    for v, X in enumerate(views[1:], start=1):
        if X.shape[0] != n_patients:
            raise DimensionMismatch(
                f"view {v} has {X.shape[0]} patients, view 0 has {n_patients}"
            )

    return views


def pairwise_distances(X, metric='sqeuclidean'):
    """
    Pairwise distance matrix between the patients of one view.

    Parameters
    ----------
    X : array-like of shape (n_patients, n_features)
        One omics view.
    metric : str, default='sqeuclidean'
        Any metric understood by ``scipy.spatial.distance.cdist``.

    Returns
    -------
    D : ndarray of shape (n_patients, n_patients)
        Symmetric, non-negative, exactly zero on the diagonal.
    """
    X = check_view(X)

    D = cdist(X, X, metric=metric)
    if not np.all(np.isfinite(D)):
        raise NumericalFailure(
            f"metric '{metric}' produced non-finite distances "
            f"(e.g. a constant patient profile under correlation distance)"
        )

    D = (D + D.T) / 2
    D = np.maximum(D, 0)
    np.fill_diagonal(D, 0)

    return D


def standard_normalize(X):
    """
    Z-score each feature of a view (mean 0, unit variance).

    Constant features become all zeros instead of dividing by zero.
    """
    X = check_view(X)
    return StandardScaler().fit_transform(X)
