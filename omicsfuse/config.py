"""
Parameter defaults, sweep ranges and validation.

The stage functions never fall back to these values on their own; they are
the documented typical settings used by the estimator constructors and the
experiment scripts.
"""

import json
import numbers
import os

from .exceptions import InvalidParameter


# Typical values (K in 10-30, alpha in 0.3-0.8, T in 10-20)
DEFAULT_PARAMS = {
    'k_neighbors': 20,
    'alpha': 0.5,
    'n_iter': 20,
    'metric': 'sqeuclidean',
}

# Grids for sensitivity analysis
PARAM_RANGES = {
    'k_neighbors': [5, 10, 15, 20, 30],
    'alpha': [0.3, 0.4, 0.5, 0.6, 0.8],
    'n_iter': [1, 5, 10, 15, 20, 30],
}


def check_int_param(name, value, minimum):
    """Validate an integer parameter and return it as a Python int."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameter(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidParameter(f"{name} must be >= {minimum}, got {value}")
    return int(value)


def check_positive_float(name, value):
    """Validate a strictly positive, finite float parameter."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameter(f"{name} must be a real number, got {value!r}")
    value = float(value)
    if not value > 0 or value == float('inf'):
        raise InvalidParameter(f"{name} must be > 0 and finite, got {value}")
    return value


def check_k_neighbors(k_neighbors):
    return check_int_param('k_neighbors', k_neighbors, 1)


def check_alpha(alpha):
    return check_positive_float('alpha', alpha)


def check_n_iter(n_iter):
    return check_int_param('n_iter', n_iter, 1)


def check_n_clusters(n_clusters):
    return check_int_param('n_clusters', n_clusters, 2)


def check_top_k(top_k):
    return check_int_param('top_k', top_k, 1)


def load_params(path, dataset_name):
    """
    Load fusion parameters for a dataset from a JSON file.

    The file maps lower-cased dataset names to ``{"params": {...}}``.
    Unknown keys are rejected so a typo never silently falls back to
    defaults.

    Parameters
    ----------
    path : str
        Path to the JSON file.
    dataset_name : str
        Name of the dataset.

    Returns
    -------
    params : dict or None
        Parameters merged over ``DEFAULT_PARAMS``, or None when the file or
        the dataset entry does not exist.
    """
    if not os.path.exists(path):
        return None

    with open(path, 'r') as f:
        all_params = json.load(f)

    key = dataset_name.lower()
    if key not in all_params:
        return None

    params = dict(DEFAULT_PARAMS)
    for name, value in all_params[key]['params'].items():
        if name not in DEFAULT_PARAMS:
            raise InvalidParameter(f"Unknown parameter in {path}: {name}")
        params[name] = value

    check_k_neighbors(params['k_neighbors'])
    check_alpha(params['alpha'])
    check_n_iter(params['n_iter'])
    return params
