"""
Clustering Evaluation Metrics

Agreement between a patient labeling and reference labels (ACC, NMI, ARI,
Purity), block contrast of a similarity graph under a labeling, and the
concordance between per-view and fused clusterings.
"""

from collections import Counter

import numpy as np
import pandas as pd
from scipy.optimize import linear_sum_assignment
from sklearn.metrics import normalized_mutual_info_score, adjusted_rand_score

from ..exceptions import InvalidInput, DimensionMismatch


def _contingency(y_true, y_pred):
    y_true = np.asarray(y_true).astype(np.int64)
    y_pred = np.asarray(y_pred).astype(np.int64)
    if y_true.shape[0] != y_pred.shape[0]:
        raise DimensionMismatch(
            f"Label arrays differ in length: {y_true.shape[0]} vs {y_pred.shape[0]}"
        )

    n_classes = max(y_true.max(), y_pred.max()) + 1
    table = np.zeros((n_classes, n_classes), dtype=np.int64)
    np.add.at(table, (y_pred, y_true), 1)
    return table


def clustering_accuracy(y_true, y_pred):
    """
    Clustering accuracy under the best one-to-one cluster/label matching.

    The matching is found with the Hungarian algorithm.

    Returns
    -------
    acc : float
        Fraction of patients whose matched label is correct (0-1).
    """
    table = _contingency(y_true, y_pred)
    row_ind, col_ind = linear_sum_assignment(-table)
    return table[row_ind, col_ind].sum() / len(y_true)


def clustering_nmi(y_true, y_pred):
    """Normalized Mutual Information (arithmetic normalization, 0-1)."""
    return normalized_mutual_info_score(y_true, y_pred, average_method='arithmetic')


def clustering_ari(y_true, y_pred):
    """Adjusted Rand Index (-1 to 1, 1 is perfect)."""
    return adjusted_rand_score(y_true, y_pred)


def clustering_purity(y_true, y_pred):
    """
    Purity = (1/N) * sum_k max_j |C_k ∩ T_j|
    """
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)

    total = 0
    for cluster in np.unique(y_pred):
        counter = Counter(y_true[y_pred == cluster])
        total += counter.most_common(1)[0][1]

    return total / y_true.shape[0]


def evaluate_clustering(y_true, y_pred, metrics=None):
    """
    Evaluate a labeling against reference labels.

    Parameters
    ----------
    y_true : array-like
        Reference labels.
    y_pred : array-like
        Cluster labels.
    metrics : list, optional
        Subset of 'ACC', 'NMI', 'ARI', 'Purity'. All by default.

    Returns
    -------
    results : dict
        Metric name -> value.
    """
    if metrics is None:
        metrics = ['ACC', 'NMI', 'ARI', 'Purity']

    metric_funcs = {
        'ACC': clustering_accuracy,
        'NMI': clustering_nmi,
        'ARI': clustering_ari,
        'Purity': clustering_purity,
    }

    results = {}
    for metric in metrics:
        if metric in metric_funcs:
            results[metric] = metric_funcs[metric](y_true, y_pred)

    return results


def print_metrics(results, name='Dataset'):
    """Print evaluation metrics in a formatted table."""
    print(f"\n{'='*60}")
    print(f"Clustering Results on {name}")
    print(f"{'='*60}")

    for metric, value in results.items():
        print(f"  {metric:12s}: {value:.4f}")

    print(f"{'='*60}\n")


def block_contrast(W, labels):
    """
    Mean within-cluster similarity divided by mean cross-cluster similarity.

    The diagonal is ignored. Values well above 1 indicate block structure.
    """
    W = np.asarray(W, dtype=np.float64)
    labels = np.asarray(labels)
    if W.shape != (labels.shape[0], labels.shape[0]):
        raise DimensionMismatch(
            f"Graph of shape {W.shape} does not match {labels.shape[0]} labels"
        )

    same = labels[:, np.newaxis] == labels[np.newaxis, :]
    off_diagonal = ~np.eye(labels.shape[0], dtype=bool)

    within = W[same & off_diagonal]
    cross = W[~same]
    if within.size == 0 or cross.size == 0:
        raise InvalidInput("block_contrast needs at least two non-singleton clusters")

    cross_mean = cross.mean()
    if cross_mean == 0:
        return np.inf
    return within.mean() / cross_mean


def concordance_nmi(label_sets):
    """
    Pairwise NMI between several labelings of the same patients.

    Typically the per-view clusterings plus the fused clustering, to show
    how much each view agrees with the integrated result.

    Parameters
    ----------
    label_sets : dict
        Name -> label array, all of the same length.

    Returns
    -------
    nmi : DataFrame
        Symmetric matrix of NMI values with unit diagonal.
    """
    names = list(label_sets.keys())
    lengths = {len(label_sets[name]) for name in names}
    if len(lengths) > 1:
        raise DimensionMismatch(f"Labelings differ in length: {sorted(lengths)}")

    nmi = pd.DataFrame(np.eye(len(names)), index=names, columns=names)
    for i, a in enumerate(names):
        for j in range(i + 1, len(names)):
            b = names[j]
            score = clustering_nmi(label_sets[a], label_sets[b])
            nmi.iloc[i, j] = score
            nmi.iloc[j, i] = score

    return nmi


class MetricTracker:
    """
    Track metrics across multiple runs for statistical analysis.
    """

    def __init__(self, metrics=None):
        if metrics is None:
            metrics = ['ACC', 'NMI', 'ARI', 'Purity']
        self.metrics = metrics
        self.history = {m: [] for m in metrics}

    def add(self, results):
        """Add results from one run."""
        for metric in self.metrics:
            if metric in results:
                self.history[metric].append(results[metric])

    def get_stats(self):
        """Mean, std, min, max and run count for each tracked metric."""
        stats = {}
        for metric in self.metrics:
            values = np.array(self.history[metric])
            if values.size == 0:
                continue
            stats[metric] = {
                'mean': np.mean(values),
                'std': np.std(values),
                'min': np.min(values),
                'max': np.max(values),
                'n_runs': len(values)
            }
        return stats

    def print_summary(self, name='Dataset'):
        """Print summary statistics."""
        stats = self.get_stats()
        n_runs = max((s['n_runs'] for s in stats.values()), default=0)

        print(f"\n{'='*70}")
        print(f"Summary Statistics on {name} ({n_runs} runs)")
        print(f"{'='*70}")
        print(f"{'Metric':12s} {'Mean':>10s} {'Std':>10s} {'Min':>10s} {'Max':>10s}")
        print(f"{'-'*70}")

        for metric, s in stats.items():
            print(f"{metric:12s} {s['mean']:10.4f} {s['std']:10.4f} "
                  f"{s['min']:10.4f} {s['max']:10.4f}")

        print(f"{'='*70}\n")

    def reset(self):
        """Reset all tracked metrics."""
        self.history = {m: [] for m in self.metrics}
