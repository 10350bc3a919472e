"""Shared fixtures: the three-view, twenty-patient two-blob scenario."""
import numpy as np
import pytest

from omicsfuse.core import make_affinities, fuse_networks
from omicsfuse.datasets import make_blob_views


K_NEIGHBORS = 5
ALPHA = 0.5
N_ITER = 20


@pytest.fixture(scope="session")
def blobs():
    """3 views x 20 patients, 2 blobs of 10, 2 informative + 5 noise features."""
    return make_blob_views(
        n_per_cluster=10, n_clusters=2, n_views=3,
        n_informative=2, n_noise=5, separation=8.0, random_state=7
    )


@pytest.fixture(scope="session")
def blob_affinities(blobs):
    return make_affinities(blobs.views, K_NEIGHBORS, ALPHA)


@pytest.fixture(scope="session")
def fused_blobs(blob_affinities):
    return fuse_networks(blob_affinities, K_NEIGHBORS, N_ITER)


@pytest.fixture
def three_block_graph():
    """15 patients in 3 dense blocks of 5 with weak cross-block links."""
    labels = np.repeat(np.arange(3), 5)
    same = labels[:, None] == labels[None, :]
    W = np.where(same, 1.0, 0.01)
    np.fill_diagonal(W, 0.0)
    return W, labels
