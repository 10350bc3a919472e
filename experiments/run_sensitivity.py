"""
Parameter Sensitivity Analysis for omicsfuse

Analyzes the impact of the fusion hyperparameters:
- K (k_neighbors): neighbourhood size for local scaling and kernels
- alpha: affinity bandwidth
- T (n_iter): number of cross-diffusion iterations

Usage:
    python run_sensitivity.py --dataset tcga-like --param alpha
"""

import os
import sys
import argparse
import numpy as np
import pandas as pd
from datetime import datetime
from tqdm import tqdm

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from omicsfuse import SimilarityNetworkFusion, SpectralPartitioner
from omicsfuse.config import DEFAULT_PARAMS, PARAM_RANGES
from omicsfuse.datasets import load_dataset
from omicsfuse.evaluation import evaluate_clustering, block_contrast, MetricTracker


def run_sensitivity_analysis(dataset_name, param_name, n_runs=5,
                             save_dir='./results/sensitivity', random_seed=42):
    """
    Run sensitivity analysis for a single parameter.

    Fusion is deterministic, so only the discretization seed varies between
    runs of one setting.

    Parameters
    ----------
    dataset_name : str
        Name of the dataset.
    param_name : str
        Name of the parameter to analyze.
    n_runs : int
        Number of discretization seeds per setting.
    save_dir : str
        Directory to save results.
    random_seed : int
        Base random seed.

    Returns
    -------
    results_df : DataFrame
        Sensitivity results.
    """
    print(f"\n{'='*70}")
    print(f"Sensitivity Analysis: {param_name} on {dataset_name}")
    print(f"{'='*70}")

    if param_name not in PARAM_RANGES:
        raise ValueError(f"Unknown parameter: {param_name}. "
                         f"Available: {list(PARAM_RANGES.keys())}")

    param_values = PARAM_RANGES[param_name]

    dataset = load_dataset(dataset_name)
    print(dataset)

    X_views = dataset.views
    y_true = dataset.labels
    n_clusters = dataset.n_clusters

    all_results = []

    for param_value in tqdm(param_values, desc=f"Testing {param_name}"):
        params = dict(DEFAULT_PARAMS)
        params[param_name] = param_value

        fused = SimilarityNetworkFusion(**params).fit_transform(X_views)
        contrast = block_contrast(fused, y_true)

        tracker = MetricTracker(metrics=['ACC', 'NMI', 'ARI'])
        for run in range(n_runs):
            labels = SpectralPartitioner(
                n_clusters, random_state=random_seed + run
            ).fit_predict(fused)
            tracker.add(evaluate_clustering(y_true, labels))

        stats = tracker.get_stats()
        row = {'param': param_name, 'value': param_value, 'block_contrast': contrast}
        for metric in ['ACC', 'NMI', 'ARI']:
            row[f'{metric}_mean'] = stats[metric]['mean']
            row[f'{metric}_std'] = stats[metric]['std']
        all_results.append(row)

    results_df = pd.DataFrame(all_results)

    print(f"\n{param_name} sensitivity:")
    print(results_df.to_string(index=False, float_format=lambda x: f"{x:.4f}"))

    os.makedirs(save_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    results_path = os.path.join(save_dir, f'{dataset_name}_{param_name}_{timestamp}.csv')
    results_df.to_csv(results_path, index=False)
    print(f"\nResults saved to: {results_path}")

    return results_df


def run_all_sensitivity(dataset_name, n_runs=5, save_dir='./results/sensitivity',
                        random_seed=42):
    """Run sensitivity analysis for every parameter in PARAM_RANGES."""
    all_results = {}
    for param_name in PARAM_RANGES:
        all_results[param_name] = run_sensitivity_analysis(
            dataset_name, param_name, n_runs=n_runs,
            save_dir=save_dir, random_seed=random_seed
        )

    # Best value per parameter by mean NMI
    print(f"\n{'='*70}")
    print(f"Best settings on {dataset_name} (by NMI)")
    print(f"{'='*70}")
    for param_name, df in all_results.items():
        best = df.loc[df['NMI_mean'].idxmax()]
        print(f"  {param_name:12s}: {best['value']}  (NMI {best['NMI_mean']:.4f})")

    return all_results


def main():
    parser = argparse.ArgumentParser(description='omicsfuse Parameter Sensitivity Analysis')
    parser.add_argument('--dataset', type=str, default='tcga-like',
                        help='Dataset name')
    parser.add_argument('--param', type=str, default='all',
                        help=f'Parameter to analyze or "all" ({list(PARAM_RANGES.keys())})')
    parser.add_argument('--n_runs', type=int, default=5,
                        help='Number of discretization seeds per setting')
    parser.add_argument('--save_dir', type=str, default='./results/sensitivity',
                        help='Directory to save results')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed')

    args = parser.parse_args()
    np.random.seed(args.seed)

    if args.param == 'all':
        run_all_sensitivity(args.dataset, n_runs=args.n_runs,
                            save_dir=args.save_dir, random_seed=args.seed)
    else:
        run_sensitivity_analysis(args.dataset, args.param, n_runs=args.n_runs,
                                 save_dir=args.save_dir, random_seed=args.seed)


if __name__ == '__main__':
    main()
