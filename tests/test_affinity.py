"""
Unit Tests for the Affinity Builder
"""

import numpy as np
import pytest

from omicsfuse.core.affinity import local_scale, make_affinity, make_affinities
from omicsfuse.core.distance import pairwise_distances
from omicsfuse.exceptions import InvalidInput, InvalidParameter, DimensionMismatch


class TestMakeAffinity:
    """Tests for locally scaled affinities"""

    def test_symmetric_in_unit_interval(self, blob_affinities):
        for W in blob_affinities:
            assert np.allclose(W, W.T)
            assert np.all(W > 0)
            assert np.all(W <= 1)

    def test_self_similarity_damped(self, blob_affinities):
        for W in blob_affinities:
            diag = np.diag(W)
            assert np.all(diag > 0)
            assert np.all(diag < 1e-10)

    def test_within_blob_more_similar(self, blobs, blob_affinities):
        same = blobs.labels[:, None] == blobs.labels[None, :]
        off = ~np.eye(blobs.n_samples, dtype=bool)
        for W in blob_affinities:
            assert W[same & off].mean() > 2 * W[~same].mean()

    def test_scale_invariant(self, blobs):
        D = pairwise_distances(blobs.views[0])
        assert np.allclose(make_affinity(D, 5, 0.5), make_affinity(D * 1e4, 5, 0.5))

    def test_small_alpha_stays_positive(self, blobs):
        W = make_affinity(pairwise_distances(blobs.views[0]), 5, 1e-3)
        off = ~np.eye(W.shape[0], dtype=bool)
        assert np.all(W[off] > 0)
        assert np.all(W <= 1)

    def test_duplicate_patients(self):
        X = np.array([[0.0, 0.0], [0.0, 0.0], [5.0, 5.0]])
        W = make_affinity(pairwise_distances(X), 1, 0.5)
        assert np.all(np.isfinite(W))
        assert W[0, 1] == pytest.approx(1.0)

    def test_k_larger_than_n_minus_one(self, blobs):
        D = pairwise_distances(blobs.views[1])
        n = D.shape[0]
        W_all = make_affinity(D, n - 1, 0.5)
        W_big = make_affinity(D, 10 * n, 0.5)
        assert np.array_equal(W_all, W_big)

    def test_invalid_k(self):
        D = pairwise_distances(np.random.RandomState(0).randn(5, 3))
        with pytest.raises(InvalidParameter):
            make_affinity(D, 0, 0.5)
        with pytest.raises(InvalidParameter):
            make_affinity(D, 2.5, 0.5)

    def test_invalid_alpha(self):
        D = pairwise_distances(np.random.RandomState(0).randn(5, 3))
        with pytest.raises(InvalidParameter):
            make_affinity(D, 3, 0.0)
        with pytest.raises(InvalidParameter):
            make_affinity(D, 3, -1.0)

    def test_invalid_distance_matrix(self):
        with pytest.raises(InvalidInput):
            make_affinity(np.ones((3, 4)), 2, 0.5)
        with pytest.raises(InvalidInput):
            make_affinity(-np.ones((3, 3)), 2, 0.5)


class TestLocalScale:

    def test_excludes_self(self):
        D = np.array([[0.0, 1.0, 4.0],
                      [1.0, 0.0, 9.0],
                      [4.0, 9.0, 0.0]])
        assert np.allclose(local_scale(D, 1), [1.0, 1.0, 4.0])
        assert np.allclose(local_scale(D, 2), [2.5, 5.0, 6.5])


class TestMakeAffinities:

    def test_one_per_view(self, blobs):
        affinities, distances = make_affinities(blobs.views, 5, 0.5, return_distances=True)
        assert len(affinities) == len(distances) == blobs.n_views

    def test_misaligned_views(self):
        with pytest.raises(DimensionMismatch):
            make_affinities([np.ones((4, 2)), np.ones((3, 2))], 2, 0.5)
