"""
Unit Tests for the Feature Relevance Ranker
"""

import numpy as np
import pandas as pd
import pytest

from omicsfuse.core.linalg import equal_width_codes, sturges_bins
from omicsfuse.evaluation.ranking import (
    feature_nmi,
    rank_view,
    rank_features_by_nmi,
    top_features,
    FeatureRelevanceRanker,
)
from omicsfuse.exceptions import InvalidInput, InvalidParameter, DimensionMismatch


class TestBinning:

    def test_equal_width_codes(self):
        codes = equal_width_codes([0.0, 1.0, 2.0, 3.0, 4.0], 2)
        assert codes.tolist() == [0, 0, 1, 1, 1]

    def test_constant_column(self):
        assert equal_width_codes(np.full(6, 3.5), 4).tolist() == [0] * 6

    def test_sturges(self):
        assert sturges_bins(20) == 6
        assert sturges_bins(16) == 5


class TestFeatureNMI:

    def test_scores_in_unit_interval(self, blobs):
        for X in blobs.views:
            scores = feature_nmi(X, blobs.labels)
            assert np.all((scores >= 0) & (scores <= 1))

    def test_constant_feature_scores_zero(self):
        X = np.column_stack([np.full(6, 2.0), np.arange(6.0)])
        labels = np.array([0, 0, 0, 1, 1, 1])
        scores = feature_nmi(X, labels, n_bins=2)
        assert scores[0] == 0.0
        assert scores[1] == pytest.approx(1.0)

    def test_invalid_bins(self):
        with pytest.raises(InvalidParameter):
            feature_nmi(np.ones((4, 2)), np.array([0, 0, 1, 1]), n_bins=1)


class TestRankView:

    def test_ties_keep_original_order(self):
        X = np.column_stack([np.full(4, 1.0), np.array([0.0, 0.0, 1.0, 1.0]), np.full(4, 7.0)])
        ranking = rank_view(X, np.array([0, 0, 1, 1]), n_bins=2)
        assert ranking['feature'].tolist() == [1, 0, 2]
        assert ranking['rank'].tolist() == [1, 2, 3]
        assert ranking['name'].tolist() == ['f1', 'f0', 'f2']


class TestRankFeaturesByNMI:
    """Tests for multi-view rankings"""

    def test_informative_features_first(self, blobs):
        rankings = rank_features_by_nmi(
            blobs.views, labels=blobs.labels, view_names=blobs.view_names
        )
        assert list(rankings) == blobs.view_names
        for name, informative in zip(blobs.view_names, blobs.informative_features):
            top = sorted(rankings[name]['feature'].head(2).tolist())
            assert top == informative.tolist()

    def test_labels_from_fused_graph(self, blobs, fused_blobs):
        derived = rank_features_by_nmi(blobs.views, fused_graph=fused_blobs, n_clusters=2)
        given = rank_features_by_nmi(blobs.views, labels=blobs.labels)
        # Label permutation does not change NMI
        for name in derived:
            pd.testing.assert_frame_equal(derived[name], given[name])

    def test_default_view_names(self, blobs):
        rankings = rank_features_by_nmi(blobs.views, labels=blobs.labels)
        assert list(rankings) == ['view_0', 'view_1', 'view_2']

    def test_dataframe_feature_names(self, blobs):
        X = pd.DataFrame(blobs.views[0], columns=[f'gene{j}' for j in range(7)])
        rankings = rank_features_by_nmi([X, blobs.views[1]], labels=blobs.labels)
        informative = {f'gene{j}' for j in blobs.informative_features[0]}
        assert set(rankings['view_0']['name'].head(2)) == informative

    def test_needs_labels_or_graph(self, blobs, fused_blobs):
        with pytest.raises(InvalidInput):
            rank_features_by_nmi(blobs.views)
        with pytest.raises(InvalidInput):
            rank_features_by_nmi(blobs.views, fused_graph=fused_blobs)

    def test_label_length(self, blobs):
        with pytest.raises(DimensionMismatch):
            rank_features_by_nmi(blobs.views, labels=blobs.labels[:-1])


class TestTopFeatures:

    def test_top_k(self, blobs):
        rankings = rank_features_by_nmi(blobs.views, labels=blobs.labels)
        top = top_features(rankings, 3)
        assert all(len(table) == 3 for table in top.values())
        assert len(top_features(rankings['view_0'], 100)) == 7

    def test_invalid_top_k(self, blobs):
        rankings = rank_features_by_nmi(blobs.views, labels=blobs.labels)
        with pytest.raises(InvalidParameter):
            top_features(rankings, 0)


class TestFeatureRelevanceRanker:

    def test_fit(self, blobs):
        ranker = FeatureRelevanceRanker(top_k=2).fit(
            blobs.views, blobs.labels, view_names=blobs.view_names
        )
        assert set(ranker.rankings_) == set(blobs.view_names)
        assert all(len(t) == 2 for t in ranker.top_features_.values())
