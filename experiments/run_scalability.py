"""
Scalability Analysis for omicsfuse

Times every stage of the integration on cohorts of increasing size.
Distances, affinities and fusion are dense O(n^2) memory and O(n^3) time
per iteration, so cohorts stay in the low thousands.

Usage:
    python run_scalability.py --max_samples 2000
"""

import os
import sys
import argparse
import time
import numpy as np
import pandas as pd
from datetime import datetime
from tqdm import tqdm

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from omicsfuse.config import DEFAULT_PARAMS
from omicsfuse.core import make_affinities, fuse_networks, SpectralPartitioner
from omicsfuse.datasets import make_tcga_like
from omicsfuse.evaluation import rank_features_by_nmi, evaluate_clustering


STAGES = ['affinities', 'fusion', 'partition', 'ranking']


def time_stages(views, n_clusters, params, random_state=0):
    """Wall-clock seconds spent in each stage, plus the labels."""
    timings = {}

    start = time.time()
    affinities = make_affinities(views, params['k_neighbors'], params['alpha'],
                                 metric=params['metric'])
    timings['affinities'] = time.time() - start

    start = time.time()
    fused = fuse_networks(affinities, params['k_neighbors'], params['n_iter'])
    timings['fusion'] = time.time() - start

    start = time.time()
    labels = SpectralPartitioner(n_clusters, random_state=random_state).fit_predict(fused)
    timings['partition'] = time.time() - start

    start = time.time()
    rank_features_by_nmi(views, labels=labels)
    timings['ranking'] = time.time() - start

    return timings, labels


def run_scalability_test(sample_sizes, n_runs=3, save_dir='./results/scalability',
                         random_seed=42, view_dims=(500, 400, 120), n_clusters=3):
    """
    Run scalability test.

    Parameters
    ----------
    sample_sizes : list
        List of cohort sizes to test.
    n_runs : int
        Number of runs per size.
    save_dir : str
        Directory to save results.
    random_seed : int
        Random seed.
    view_dims : tuple of int
        Features per view.
    n_clusters : int
        Number of subtypes.

    Returns
    -------
    results_df : DataFrame
        Timing results, one row per size and stage.
    """
    print(f"\n{'='*70}")
    print("Scalability Analysis")
    print(f"Sample sizes: {sample_sizes}")
    print(f"{'='*70}")

    params = dict(DEFAULT_PARAMS)
    all_results = []

    for n_samples in tqdm(sample_sizes, desc="Testing sample sizes"):
        print(f"\nTesting n_samples = {n_samples}")

        dataset = make_tcga_like(n_samples=n_samples, n_clusters=n_clusters,
                                 view_dims=view_dims, random_state=random_seed)

        stage_times = {stage: [] for stage in STAGES}
        nmi = []
        for run in range(n_runs):
            timings, labels = time_stages(dataset.views, n_clusters, params,
                                          random_state=random_seed + run)
            for stage in STAGES:
                stage_times[stage].append(timings[stage])
            nmi.append(evaluate_clustering(dataset.labels, labels, metrics=['NMI'])['NMI'])

        for stage in STAGES:
            all_results.append({
                'n_samples': n_samples,
                'stage': stage,
                'time_mean': np.mean(stage_times[stage]),
                'time_std': np.std(stage_times[stage]),
            })

        total = sum(np.mean(stage_times[stage]) for stage in STAGES)
        print(f"  total: {total:.2f}s  "
              + "  ".join(f"{stage}={np.mean(stage_times[stage]):.2f}s" for stage in STAGES)
              + f"  NMI={np.mean(nmi):.3f}")

    results_df = pd.DataFrame(all_results)

    # Save results
    os.makedirs(save_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    results_path = os.path.join(save_dir, f'scalability_{timestamp}.csv')
    results_df.to_csv(results_path, index=False)
    print(f"\nResults saved to: {results_path}")

    summary = results_df.pivot(index='n_samples', columns='stage', values='time_mean')[STAGES]
    print("\nMean seconds per stage:")
    print(summary.to_string(float_format=lambda x: f"{x:.3f}"))

    return results_df


def main():
    parser = argparse.ArgumentParser(description='omicsfuse Scalability Analysis')
    parser.add_argument('--max_samples', type=int, default=1000,
                        help='Maximum number of patients to test')
    parser.add_argument('--n_runs', type=int, default=3,
                        help='Number of runs per size')
    parser.add_argument('--save_dir', type=str, default='./results/scalability',
                        help='Directory to save results')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed')

    args = parser.parse_args()

    sample_sizes = [100, 200, 500, 1000, 2000, 5000]
    sample_sizes = [s for s in sample_sizes if s <= args.max_samples]

    run_scalability_test(
        sample_sizes,
        n_runs=args.n_runs,
        save_dir=args.save_dir,
        random_seed=args.seed
    )


if __name__ == '__main__':
    main()
