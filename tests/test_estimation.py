"""
Unit Tests for the Cluster Count Estimator
"""

import warnings

import numpy as np
import pandas as pd
import pytest

from omicsfuse.core.estimation import (
    eigengap_scores,
    rotation_cost_scores,
    estimate_cluster_count,
    laplacian_eigenvalues,
)
from omicsfuse.exceptions import InvalidParameter


@pytest.fixture(autouse=True)
def quiet_discretization():
    # Degenerate eigenspaces at large candidate counts may hit the iteration cap
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", UserWarning)
        yield


class TestEigengap:

    def test_three_blocks(self, three_block_graph):
        W, _ = three_block_graph
        scores = eigengap_scores(W, range(2, 8))
        assert isinstance(scores, pd.Series)
        assert scores.index.tolist() == [2, 3, 4, 5, 6, 7]
        assert scores.idxmax() == 3

    def test_eigenvalues_ascending(self, three_block_graph):
        W, _ = three_block_graph
        eigenvalues = laplacian_eigenvalues(W)
        assert eigenvalues.shape == (15,)
        assert np.all(np.diff(eigenvalues) >= -1e-12)
        assert eigenvalues[0] == pytest.approx(0.0, abs=1e-10)


class TestRotationCost:

    def test_three_blocks(self, three_block_graph):
        W, _ = three_block_graph
        costs = rotation_cost_scores(W, [2, 3, 4, 5])
        assert costs.idxmin() == 3
        assert np.all((costs >= 0) & (costs <= 1))


class TestEstimateClusterCount:
    """Tests for the combined estimate"""

    def test_three_blocks(self, three_block_graph):
        W, _ = three_block_graph
        estimate = estimate_cluster_count(W, range(2, 8))
        assert estimate.best_eigengap == 3
        assert estimate.best_rotation_cost == 3
        assert list(estimate.scores.columns) == ['eigengap', 'rotation_cost']
        assert len(estimate.eigenvalues) == 15

    def test_fused_blobs(self, fused_blobs):
        estimate = estimate_cluster_count(fused_blobs, range(2, 6))
        assert estimate.best_eigengap == 2

    def test_duplicate_candidates_collapse(self, three_block_graph):
        W, _ = three_block_graph
        estimate = estimate_cluster_count(W, [4, 3, 3, 2])
        assert estimate.scores.index.tolist() == [2, 3, 4]

    def test_candidates_required(self, three_block_graph):
        W, _ = three_block_graph
        with pytest.raises(InvalidParameter):
            estimate_cluster_count(W, None)
        with pytest.raises(InvalidParameter):
            estimate_cluster_count(W, [])

    def test_candidate_below_two(self, three_block_graph):
        W, _ = three_block_graph
        with pytest.raises(InvalidParameter):
            estimate_cluster_count(W, [1, 2, 3])

    def test_candidate_above_n_minus_one(self, three_block_graph):
        W, _ = three_block_graph
        with pytest.raises(InvalidParameter):
            estimate_cluster_count(W, [2, 15])
