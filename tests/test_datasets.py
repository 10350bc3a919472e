"""
Unit Tests for the synthetic multi-view datasets
"""

import numpy as np
import pytest

from omicsfuse.datasets import (
    MultiViewDataset,
    make_blob_views,
    make_tcga_like,
    load_dataset,
    get_available_datasets,
)
from omicsfuse.exceptions import DimensionMismatch, InvalidInput


class TestBlobViews:

    def test_shapes(self, blobs):
        assert blobs.n_views == 3
        assert blobs.n_samples == 20
        assert blobs.get_view_dimensions() == [7, 7, 7]
        assert blobs.view_names == ['expression', 'methylation', 'mirna']
        assert blobs.labels.tolist() == [0] * 10 + [1] * 10

    def test_informative_columns_separate_clusters(self, blobs):
        for X, informative in zip(blobs.views, blobs.informative_features):
            assert len(informative) == 2
            for j in informative:
                means = [X[blobs.labels == c, j].mean() for c in (0, 1)]
                assert abs(means[1] - means[0]) > 3 * X[blobs.labels == 0, j].std()

    def test_native_scales_differ(self, blobs):
        spreads = [np.abs(X).max() for X in blobs.views]
        assert spreads[0] < spreads[1] < spreads[2]

    def test_reproducible(self):
        a = make_blob_views(random_state=3)
        b = make_blob_views(random_state=3)
        for X, Y in zip(a.views, b.views):
            assert np.array_equal(X, Y)

    def test_generic_view_names(self):
        ds = make_blob_views(n_views=2)
        assert ds.view_names == ['view_0', 'view_1']


class TestTcgaLike:

    def test_shapes(self):
        ds = make_tcga_like(n_samples=30, view_dims=(40, 30, 20))
        assert ds.get_view_dimensions() == [40, 30, 20]
        assert ds.labels.shape == (30,)
        assert set(ds.labels.tolist()) == {0, 1, 2}
        methylation = ds.views[1]
        assert np.all((methylation > 0) & (methylation < 1))


class TestMultiViewDataset:

    def test_add_view_mismatch(self):
        ds = MultiViewDataset('unit').add_view(np.ones((4, 2)), 'a')
        with pytest.raises(DimensionMismatch):
            ds.add_view(np.ones((5, 2)), 'b')

    def test_add_view_nan(self):
        X = np.ones((4, 2))
        X[0, 0] = np.nan
        with pytest.raises(InvalidInput):
            MultiViewDataset().add_view(X)

    def test_normalize(self):
        ds = make_blob_views().normalize('standard')
        for X in ds.views:
            assert np.allclose(X.mean(axis=0), 0)
        with pytest.raises(ValueError):
            ds.normalize('log')
        with pytest.raises(ValueError):
            ds.normalize('minmax')

    def test_repr(self, blobs):
        assert '20 patients' in repr(blobs)


class TestLoadDataset:

    def test_names(self):
        assert load_dataset('blobs', n_per_cluster=5).n_samples == 10
        assert load_dataset('TCGA_like', n_samples=12, view_dims=(10, 10, 10)).n_samples == 12
        assert get_available_datasets() == ['blobs', 'tcga-like']

    def test_unknown(self):
        with pytest.raises(ValueError):
            load_dataset('mnist')
