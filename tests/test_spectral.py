"""
Unit Tests for the Spectral Partitioner
"""

import warnings

import numpy as np
import pytest
from sklearn.metrics import adjusted_rand_score

from omicsfuse.core.spectral import (
    spectral_embedding,
    discretize,
    count_components,
    SpectralPartitioner,
)
from omicsfuse.exceptions import InvalidInput, InvalidParameter, NumericalFailure


class TestSpectralEmbedding:

    def test_shape_and_eigenvalues(self, three_block_graph):
        W, _ = three_block_graph
        embedding, eigenvalues = spectral_embedding(W, 3)
        assert embedding.shape == (15, 3)
        assert eigenvalues.shape == (3,)
        assert eigenvalues[0] == pytest.approx(0.0, abs=1e-10)
        assert np.all(np.diff(eigenvalues) >= -1e-12)

    def test_too_many_clusters(self):
        W = np.ones((4, 4))
        with pytest.raises(InvalidParameter):
            spectral_embedding(W, 5)


class TestDiscretize:

    def test_info(self, three_block_graph):
        W, labels = three_block_graph
        embedding, _ = spectral_embedding(W, 3)
        found, info = discretize(embedding, random_state=0, return_info=True)
        assert adjusted_rand_score(labels, found) == pytest.approx(1.0)
        assert info['converged']
        assert 0.0 <= info['cost'] <= 1.0
        assert info['n_iter'] >= 1

    def test_labels_by_first_appearance(self, three_block_graph):
        W, _ = three_block_graph
        embedding, _ = spectral_embedding(W, 3)
        found = discretize(embedding, random_state=3)
        assert found.tolist() == [0] * 5 + [1] * 5 + [2] * 5

    def test_invalid_max_iter(self, three_block_graph):
        W, _ = three_block_graph
        embedding, _ = spectral_embedding(W, 3)
        with pytest.raises(InvalidParameter):
            discretize(embedding, max_iter=0)


class TestSpectralPartitioner:
    """Tests for labels on fused and single-view graphs"""

    def test_recovers_blobs(self, blobs, fused_blobs):
        labels = SpectralPartitioner(2).fit_predict(fused_blobs)
        assert adjusted_rand_score(blobs.labels, labels) == pytest.approx(1.0)

    def test_exactly_c_labels(self, three_block_graph):
        W, _ = three_block_graph
        part = SpectralPartitioner(3).fit(W)
        assert set(part.labels_.tolist()) == {0, 1, 2}
        assert part.embedding_.shape == (15, 3)
        assert part.n_components_ == 1
        assert part.rotation_cost_ >= 0

    def test_deterministic(self, fused_blobs):
        a = SpectralPartitioner(2, random_state=5).fit_predict(fused_blobs)
        b = SpectralPartitioner(2, random_state=5).fit_predict(fused_blobs)
        assert np.array_equal(a, b)

    def test_single_view_affinity(self, blobs, blob_affinities):
        labels = SpectralPartitioner(2).fit_predict(blob_affinities[0])
        assert labels.shape == (blobs.n_samples,)
        assert set(labels.tolist()) <= {0, 1}

    def test_disconnected_graph_warns(self):
        block = np.ones((4, 4))
        W = np.zeros((12, 12))
        for start in (0, 4, 8):
            W[start:start + 4, start:start + 4] = block
        assert count_components(W) == 3

        with pytest.warns(UserWarning, match="connected components"):
            SpectralPartitioner(2).fit(W)

    def test_no_warning_when_connected(self, three_block_graph):
        W, _ = three_block_graph
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            SpectralPartitioner(3).fit(W)

    def test_zero_degree(self):
        W = np.ones((4, 4))
        W[3, :] = 0
        W[:, 3] = 0
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            with pytest.raises(NumericalFailure):
                SpectralPartitioner(2).fit(W)

    def test_invalid_graph(self):
        W = np.ones((3, 3))
        W[0, 1] = np.nan
        with pytest.raises(InvalidInput):
            SpectralPartitioner(2).fit(W)
        with pytest.raises(InvalidInput):
            SpectralPartitioner(2).fit(np.ones((3, 4)))

    def test_invalid_n_clusters(self, fused_blobs):
        with pytest.raises(InvalidParameter):
            SpectralPartitioner(1).fit(fused_blobs)
        with pytest.raises(InvalidParameter):
            SpectralPartitioner(25).fit(fused_blobs)
