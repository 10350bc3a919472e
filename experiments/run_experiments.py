"""
Main Experiment Script for omicsfuse

Runs the full integration (affinities, fusion, cluster count scores,
partition, feature ranking) on a synthetic dataset or on aligned CSV views
and saves every artifact.

Usage Examples:
    # Synthetic three-view cohort, C=3
    python run_experiments.py --dataset tcga-like --n_clusters 3

    # All synthetic datasets, scoring C in 2..8
    python run_experiments.py --dataset all --candidates 2 8

    # Own data: one CSV per view, patients in rows, first column = patient id
    python run_experiments.py --views expr.csv meth.csv mirna.csv --n_clusters 4

    # Parameters from a JSON file ({"<dataset>": {"params": {...}}})
    python run_experiments.py --dataset tcga-like --params config/params.json
"""

import os
import sys
import argparse
import time
from datetime import datetime
import numpy as np
import pandas as pd
from tqdm import tqdm

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from omicsfuse import run_integration
from omicsfuse.config import DEFAULT_PARAMS, load_params
from omicsfuse.datasets import load_dataset, get_available_datasets
from omicsfuse.evaluation import evaluate_clustering, print_metrics, MetricTracker
from omicsfuse.exceptions import OmicsFuseError, DimensionMismatch


def load_csv_views(paths):
    """
    Read aligned views from CSV files.

    Each file holds patients in rows with the patient id in the first
    column. Rows are aligned on the ids of the first file.

    Returns
    -------
    views : list of DataFrame
    view_names : list of str
    """
    frames = [pd.read_csv(path, index_col=0) for path in paths]
    patients = frames[0].index

    views = []
    for path, frame in zip(paths, frames):
        missing = patients.difference(frame.index)
        if len(missing) > 0:
            raise DimensionMismatch(
                f"{path} is missing {len(missing)} patient(s), e.g. {list(missing[:3])}"
            )
        views.append(frame.loc[patients])

    view_names = [os.path.splitext(os.path.basename(path))[0] for path in paths]
    return views, view_names


def save_artifacts(state, name, save_dir, patients=None):
    """Write labels, fused graph, cluster scores and rankings as CSV files."""
    os.makedirs(save_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    prefix = os.path.join(save_dir, f'{name}_{timestamp}')

    if patients is None:
        patients = pd.RangeIndex(state.n_patients, name='patient')

    pd.Series(state.labels, index=patients, name='cluster').to_csv(f'{prefix}_labels.csv')
    pd.DataFrame(state.fused_graph, index=patients, columns=patients).to_csv(
        f'{prefix}_fused_graph.csv'
    )
    if state.cluster_scores is not None:
        state.cluster_scores.to_csv(f'{prefix}_cluster_scores.csv')
    if state.concordance is not None:
        state.concordance.to_csv(f'{prefix}_concordance.csv')

    rankings = pd.concat(
        [table.assign(view=view) for view, table in state.rankings.items()],
        ignore_index=True
    )
    rankings.to_csv(f'{prefix}_rankings.csv', index=False)

    print(f"\nArtifacts saved with prefix: {prefix}")
    return prefix


def run_experiment(name, X_views, view_names, params, n_clusters, y_true=None,
                   candidates=None, top_k=None, compare_views=False, n_runs=1,
                   save_dir='./results', random_seed=42, patients=None):
    """
    Run the integration on one dataset.

    The discretization seed is varied over ``n_runs`` runs; when reference
    labels are known every run is scored and summarized.

    Returns
    -------
    state : IntegrationState
        State of the first run.
    """
    print(f"\n{'='*70}")
    print(f"Dataset: {name}")
    print(f"Parameters: {params}")
    print(f"{'='*70}")

    tracker = MetricTracker()
    first_state = None

    for run in tqdm(range(n_runs), desc=f"Running {n_runs} experiments"):
        seed = random_seed + run
        start_time = time.time()

        state = run_integration(
            X_views,
            k_neighbors=params['k_neighbors'],
            alpha=params['alpha'],
            n_iter=params['n_iter'],
            n_clusters=n_clusters,
            view_names=view_names,
            metric=params['metric'],
            candidates=candidates if run == 0 else None,
            top_k=top_k,
            compare_views=compare_views and run == 0,
            random_state=seed,
            verbose=(run == 0),
        )
        elapsed = time.time() - start_time

        if y_true is not None:
            results = evaluate_clustering(y_true, state.labels)
            results['Time'] = elapsed
            tracker.add(results)

        if first_state is None:
            first_state = state

    if y_true is not None:
        if n_runs == 1:
            print_metrics(evaluate_clustering(y_true, first_state.labels), name)
        else:
            tracker.print_summary(name)

    if first_state.cluster_scores is not None:
        print("Cluster count scores:")
        print(first_state.cluster_scores.to_string(float_format=lambda x: f"{x:.4f}"))

    if first_state.concordance is not None:
        print("\nView / fused concordance (NMI):")
        print(first_state.concordance.round(3).to_string())

    print("\nTop features per view:")
    for view, table in first_state.rankings.items():
        names = ', '.join(f"{n} ({s:.3f})" for n, s in zip(table['name'].head(5), table['nmi'].head(5)))
        print(f"  {view:<14s} {names}")

    save_artifacts(first_state, name, save_dir, patients=patients)
    return first_state


def run_all_experiments(params_path=None, **kwargs):
    """Run the integration on every synthetic dataset."""
    all_states = {}

    for dataset_name in get_available_datasets():
        dataset = load_dataset(dataset_name)
        params = resolve_params(params_path, dataset_name)
        try:
            all_states[dataset_name] = run_experiment(
                dataset_name, dataset.views, dataset.view_names, params,
                n_clusters=dataset.n_clusters, y_true=dataset.labels, **kwargs
            )
        except OmicsFuseError as e:
            print(f"Error processing {dataset_name}: {e}")
            continue

    return all_states


def resolve_params(params_path, name, overrides=None):
    """Defaults, then the JSON entry for ``name``, then command-line overrides."""
    params = dict(DEFAULT_PARAMS)
    if params_path is not None:
        loaded = load_params(params_path, name)
        if loaded:
            print(f"Using parameters from {params_path} for {name}")
            params = loaded
        else:
            print(f"No parameters found for {name} in {params_path}, using defaults")
    if overrides:
        params.update({k: v for k, v in overrides.items() if v is not None})
    return params


def main():
    parser = argparse.ArgumentParser(
        description='omicsfuse Experiments',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_experiments.py --dataset blobs --n_clusters 2
  python run_experiments.py --dataset tcga-like --candidates 2 8 --compare_views
  python run_experiments.py --views expr.csv meth.csv --n_clusters 3 --top_k 20
        """
    )

    # Data
    data_group = parser.add_argument_group('Data')
    data_group.add_argument('--dataset', type=str, default='all',
                            help='Synthetic dataset name or "all"')
    data_group.add_argument('--views', type=str, nargs='+',
                            help='CSV files, one per view (overrides --dataset)')
    data_group.add_argument('--n_clusters', type=int, default=None,
                            help='Number of clusters (required with --views)')

    # Fusion parameters
    param_group = parser.add_argument_group('Fusion Parameters')
    param_group.add_argument('--params', type=str, default=None,
                             help='JSON file with per-dataset parameters')
    param_group.add_argument('--k_neighbors', type=int, default=None)
    param_group.add_argument('--alpha', type=float, default=None)
    param_group.add_argument('--n_iter', type=int, default=None)
    param_group.add_argument('--metric', type=str, default=None)

    # Analysis
    parser.add_argument('--candidates', type=int, nargs=2, metavar=('MIN', 'MAX'),
                        help='Score candidate cluster counts MIN..MAX')
    parser.add_argument('--top_k', type=int, default=None,
                        help='Keep the top-K features per view')
    parser.add_argument('--compare_views', action='store_true',
                        help='Also cluster each view alone')
    parser.add_argument('--n_runs', type=int, default=1,
                        help='Number of discretization seeds')
    parser.add_argument('--save_dir', type=str, default='./results',
                        help='Directory to save results')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed')

    args = parser.parse_args()

    overrides = {
        'k_neighbors': args.k_neighbors,
        'alpha': args.alpha,
        'n_iter': args.n_iter,
        'metric': args.metric,
    }
    candidates = None
    if args.candidates is not None:
        candidates = range(args.candidates[0], args.candidates[1] + 1)

    common = dict(
        candidates=candidates,
        top_k=args.top_k,
        compare_views=args.compare_views,
        n_runs=args.n_runs,
        save_dir=args.save_dir,
        random_seed=args.seed,
    )

    # Print configuration
    print("\n" + "="*70)
    print("omicsfuse Experiment Configuration")
    print("="*70)
    print(f"Data: {args.views if args.views else args.dataset}")
    print(f"Number of runs: {args.n_runs}")
    print(f"Random seed: {args.seed}")
    print(f"Candidates: {list(candidates) if candidates is not None else None}")

    if args.views:
        if args.n_clusters is None:
            parser.error('--n_clusters is required with --views')
        views, view_names = load_csv_views(args.views)
        name = 'custom'
        run_experiment(
            name, views, view_names, resolve_params(args.params, name, overrides),
            n_clusters=args.n_clusters, patients=views[0].index, **common
        )
    elif args.dataset.lower() == 'all':
        run_all_experiments(params_path=args.params, **common)
    else:
        dataset = load_dataset(args.dataset)
        n_clusters = args.n_clusters or dataset.n_clusters
        run_experiment(
            args.dataset, dataset.views, dataset.view_names,
            resolve_params(args.params, args.dataset, overrides),
            n_clusters=n_clusters, y_true=dataset.labels, **common
        )


if __name__ == '__main__':
    main()
