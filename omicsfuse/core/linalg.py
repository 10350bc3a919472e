"""
Narrow linear-algebra and statistics interface.

Fusion, partitioning and ranking only talk to numerical libraries through the
helpers in this module:

- eigenvalues / eigenvectors of a symmetric matrix (scipy.linalg.eigh)
- row normalization and symmetric Sinkhorn balancing of similarity matrices
- the symmetric normalized graph Laplacian
- histogram (equal-width bin) codes and NMI between discrete variables
"""

import numpy as np
from scipy import linalg
from sklearn.metrics import normalized_mutual_info_score

from ..exceptions import InvalidInput, NumericalFailure


def symmetric_eigh(M, n_components=None):
    """
    Eigendecomposition of a real symmetric matrix.

    Parameters
    ----------
    M : ndarray of shape (n, n)
        Symmetric matrix.
    n_components : int, optional
        If given, only the ``n_components`` smallest eigenpairs are returned.

    Returns
    -------
    eigenvalues : ndarray
        Ascending eigenvalues.
    eigenvectors : ndarray
        Matching eigenvectors as columns.
    """
    if not np.all(np.isfinite(M)):
        raise NumericalFailure("Cannot decompose a matrix with non-finite entries")

    n = M.shape[0]
    subset = None
    if n_components is not None and n_components < n:
        subset = [0, n_components - 1]

    try:
        eigenvalues, eigenvectors = linalg.eigh(M, subset_by_index=subset)
    except linalg.LinAlgError as e:
        raise NumericalFailure(f"Eigendecomposition did not converge: {e}") from e

    return eigenvalues, eigenvectors


def symmetric_eigvalsh(M):
    """Ascending eigenvalues of a real symmetric matrix."""
    if not np.all(np.isfinite(M)):
        raise NumericalFailure("Cannot decompose a matrix with non-finite entries")
    try:
        return linalg.eigvalsh(M)
    except linalg.LinAlgError as e:
        raise NumericalFailure(f"Eigendecomposition did not converge: {e}") from e


def row_normalize(W):
    """
    Scale each row of a non-negative matrix to sum to 1.

    Raises NumericalFailure when a row sums to zero (a patient with no
    similarity to anyone), since dividing it out has no meaning.
    """
    row_sums = W.sum(axis=1)
    bad = ~(row_sums > 0) | ~np.isfinite(row_sums)
    if np.any(bad):
        rows = np.flatnonzero(bad)[:5].tolist()
        raise NumericalFailure(
            f"Row normalization failed: {int(bad.sum())} row(s) with zero or "
            f"non-finite similarity mass (first rows: {rows})"
        )
    return W / row_sums[:, np.newaxis]


def symmetric_sinkhorn(W, tol=1e-10, max_iter=10000):
    """
    Balance a symmetric non-negative matrix to be doubly stochastic.

    Finds a positive vector x such that diag(x) W diag(x) has unit row
    (and column) sums, using the damped fixed point x <- sqrt(x / (W x)).
    The result stays symmetric.

    Parameters
    ----------
    W : ndarray of shape (n, n)
        Symmetric, non-negative matrix with no all-zero row.
    tol : float
        Maximum allowed deviation of any row sum from 1.
    max_iter : int
        Iteration cap.

    Returns
    -------
    B : ndarray of shape (n, n)
        Symmetric doubly stochastic matrix.
    """
    n = W.shape[0]
    if np.any(~(W.sum(axis=1) > 0)):
        raise NumericalFailure("Cannot balance a matrix with an all-zero row")

    x = np.ones(n) / np.sqrt(W.sum() / n)

    for _ in range(max_iter):
        Wx = W @ x
        err = np.max(np.abs(x * Wx - 1.0))
        if err < tol:
            break
        x = np.sqrt(x / Wx)
    else:
        Wx = W @ x
        err = np.max(np.abs(x * Wx - 1.0))
        if err >= tol:
            raise NumericalFailure(
                f"Symmetric Sinkhorn balancing did not converge in {max_iter} "
                f"iterations (max row-sum error {err:.2e})"
            )

    B = x[:, np.newaxis] * W * x[np.newaxis, :]
    return (B + B.T) / 2


def normalized_laplacian(W):
    """
    Symmetric normalized graph Laplacian L = I - D^{-1/2} W D^{-1/2}.

    Returns
    -------
    L : ndarray of shape (n, n)
    degrees : ndarray of shape (n,)
    """
    degrees = W.sum(axis=1)
    if np.any(~(degrees > 0)):
        isolated = np.flatnonzero(~(degrees > 0))[:5].tolist()
        raise NumericalFailure(
            f"Graph has isolated patients with zero degree: {isolated}"
        )

    d_inv_sqrt = 1.0 / np.sqrt(degrees)
    L = np.eye(W.shape[0]) - d_inv_sqrt[:, np.newaxis] * W * d_inv_sqrt[np.newaxis, :]
    L = (L + L.T) / 2
    return L, degrees


def equal_width_codes(x, n_bins):
    """
    Discretize a 1-D array into ``n_bins`` equal-width bins.

    Bin edges span [min(x), max(x)]; the maximum falls in the last bin.
    A constant array maps to a single bin (all zeros).
    """
    x = np.asarray(x, dtype=float)
    lo, hi = x.min(), x.max()
    if hi <= lo:
        return np.zeros(x.shape[0], dtype=np.int64)
    edges = np.linspace(lo, hi, n_bins + 1)
    return np.digitize(x, edges[1:-1]).astype(np.int64)


def sturges_bins(n_samples):
    """Sturges' rule: ceil(log2(n)) + 1 bins."""
    return int(np.ceil(np.log2(n_samples))) + 1


def discrete_nmi(a, b):
    """
    Normalized mutual information between two discrete variables.

    Uses the arithmetic mean of the two entropies as normalizer, giving a
    score in [0, 1]. If either variable is constant the mutual information
    is zero and so is the score.
    """
    a = np.asarray(a)
    b = np.asarray(b)
    if a.shape != b.shape:
        raise InvalidInput(f"Label arrays differ in length: {a.shape} vs {b.shape}")
    if np.unique(a).size < 2 or np.unique(b).size < 2:
        return 0.0
    score = normalized_mutual_info_score(a, b, average_method='arithmetic')
    return float(min(max(score, 0.0), 1.0))
