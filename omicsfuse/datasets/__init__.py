"""
omicsfuse Datasets Module
"""
from .synthetic import (
    MultiViewDataset,
    make_blob_views,
    make_tcga_like,
    load_dataset,
    get_available_datasets,
    DEFAULT_VIEW_NAMES,
)

__all__ = [
    'MultiViewDataset',
    'make_blob_views',
    'make_tcga_like',
    'load_dataset',
    'get_available_datasets',
    'DEFAULT_VIEW_NAMES',
]
