"""
Unit Tests for Evaluation Metrics
"""

import numpy as np
import pytest

from omicsfuse.evaluation.metrics import (
    clustering_accuracy,
    clustering_purity,
    evaluate_clustering,
    block_contrast,
    concordance_nmi,
    MetricTracker,
)
from omicsfuse.exceptions import InvalidInput, DimensionMismatch


class TestClusteringMetrics:

    def test_permuted_labels_are_perfect(self):
        y_true = np.array([0, 0, 1, 1, 2, 2])
        y_pred = np.array([2, 2, 0, 0, 1, 1])
        results = evaluate_clustering(y_true, y_pred)
        assert set(results) == {'ACC', 'NMI', 'ARI', 'Purity'}
        for value in results.values():
            assert value == pytest.approx(1.0)

    def test_accuracy_partial(self):
        y_true = np.array([0, 0, 0, 1, 1, 1])
        y_pred = np.array([1, 1, 0, 0, 0, 0])
        assert clustering_accuracy(y_true, y_pred) == pytest.approx(5 / 6)

    def test_purity(self):
        y_true = np.array([0, 0, 1, 1])
        y_pred = np.array([0, 0, 0, 0])
        assert clustering_purity(y_true, y_pred) == pytest.approx(0.5)

    def test_subset(self):
        results = evaluate_clustering([0, 1], [1, 0], metrics=['ACC'])
        assert list(results) == ['ACC']

    def test_length_mismatch(self):
        with pytest.raises(DimensionMismatch):
            clustering_accuracy([0, 1, 1], [0, 1])


class TestBlockContrast:

    def test_three_blocks(self, three_block_graph):
        W, labels = three_block_graph
        assert block_contrast(W, labels) == pytest.approx(100.0)

    def test_single_cluster(self, three_block_graph):
        W, _ = three_block_graph
        with pytest.raises(InvalidInput):
            block_contrast(W, np.zeros(15, dtype=int))

    def test_shape_mismatch(self, three_block_graph):
        W, labels = three_block_graph
        with pytest.raises(DimensionMismatch):
            block_contrast(W, labels[:-1])


class TestConcordance:

    def test_symmetric_unit_diagonal(self):
        table = concordance_nmi({
            'expression': [0, 0, 1, 1],
            'methylation': [1, 1, 0, 0],
            'fused': [0, 1, 0, 1],
        })
        assert list(table.columns) == ['expression', 'methylation', 'fused']
        assert np.allclose(np.diag(table.values), 1.0)
        assert np.allclose(table.values, table.values.T)
        assert table.loc['expression', 'methylation'] == pytest.approx(1.0)
        assert table.loc['expression', 'fused'] == pytest.approx(0.0, abs=1e-12)

    def test_length_mismatch(self):
        with pytest.raises(DimensionMismatch):
            concordance_nmi({'a': [0, 1], 'b': [0, 1, 1]})


class TestMetricTracker:

    def test_stats(self, capsys):
        tracker = MetricTracker(metrics=['ACC'])
        tracker.add({'ACC': 0.5})
        tracker.add({'ACC': 1.0, 'NMI': 0.3})
        stats = tracker.get_stats()
        assert stats['ACC']['mean'] == pytest.approx(0.75)
        assert stats['ACC']['n_runs'] == 2
        assert 'NMI' not in stats

        tracker.print_summary('unit')
        assert '2 runs' in capsys.readouterr().out

        tracker.reset()
        assert tracker.get_stats() == {}
