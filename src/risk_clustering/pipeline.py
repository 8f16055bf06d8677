"""
End-to-end clustering pipeline.

raw table -> encode -> select top rows -> prepare features -> K-Means
-> summary report

Every stage works on its own copy; the caller's dataset is never modified.
"""
from typing import List, Optional

import pandas as pd

from risk_clustering.clustering import assign_clusters, check_n_clusters, evaluate_clustering
from risk_clustering.config import merge_config
from risk_clustering.data_quality import validate_dataset
from risk_clustering.encoding import encode_variables
from risk_clustering.errors import InvalidInput
from risk_clustering.preparation import prepare_feature_matrix
from risk_clustering.reporting import build_summary_report
from risk_clustering.selection import resolve_row_count, select_top_rows


def validate_request(
    dataset: pd.DataFrame,
    clustering_vars: List[str],
    display_vars: List[str],
    score_var: str,
    n_clusters: int,
    n_rows: Optional[int] = None,
    fraction: Optional[float] = None,
) -> int:
    """
    Check every request parameter before any work is done.

    Returns:
        Number of rows that will be selected
    """
    if not clustering_vars:
        raise InvalidInput("At least one clustering variable is required")

    n_keep = resolve_row_count(len(dataset), n_rows=n_rows, fraction=fraction)
    validate_dataset(dataset, list(clustering_vars) + list(display_vars or []), score_var)
    check_n_clusters(n_clusters, n_keep)

    return n_keep


def run(
    dataset: pd.DataFrame,
    clustering_vars: List[str],
    display_vars: Optional[List[str]],
    score_var: str,
    n_clusters: int,
    n_rows: Optional[int] = None,
    fraction: Optional[float] = None,
    scale_data: bool = True,
    config: Optional[dict] = None,
) -> dict:
    """
    Run the complete clustering pipeline.

    Args:
        dataset: Full input table (not modified)
        clustering_vars: Variables K-Means clusters on
        display_vars: Extra variables shown in the report
        score_var: Numeric column ranking rows for selection
        n_clusters: Number of clusters (1..selected rows)
        n_rows: Number of top rows to cluster
        fraction: Share of top rows to cluster (give n_rows or fraction)
        scale_data: Standardize features before clustering
        config: Overrides for DEFAULT_CONFIG (seed, verbosity, labels)

    Returns:
        Dictionary with labeled_subset and summary_report plus the
        intermediate artifacts
    """
    config = merge_config(config)
    verbose = config['verbose']
    display_vars = list(display_vars or [])

    if verbose:
        print("=" * 60)
        print("CLUSTERING PIPELINE")
        print("=" * 60)
        print(f"Rows: {len(dataset):,}")
        print("=" * 60)

    n_keep = validate_request(
        dataset, clustering_vars, display_vars, score_var, n_clusters,
        n_rows=n_rows, fraction=fraction,
    )

    # STEP 1: Encode categorical variables on the full table
    encoded, roles = encode_variables(dataset, clustering_vars, display_vars, verbose=verbose)

    # STEP 2: Keep the top-scoring rows
    subset, population = select_top_rows(encoded, score_var, n_rows=n_keep, verbose=verbose)

    # STEP 3: Feature matrix
    X, scaler = prepare_feature_matrix(subset, roles.feature_columns, scale_data=scale_data, verbose=verbose)

    # STEP 4: K-Means with size-ordered labels
    labeled, model, label_mapping = assign_clusters(subset, X, n_clusters, config)
    metrics = evaluate_clustering(X, labeled[config['cluster_column']])

    # STEP 5: Summary report
    report = build_summary_report(
        labeled,
        roles.treated,
        clustering_columns=roles.feature_columns,
        population=population if config['include_population'] else None,
        config=config,
    )

    if verbose:
        print("\n" + "=" * 60)
        print("CLUSTERING COMPLETE")
        print("=" * 60)
        print(f"Final model: K-Means with K={n_clusters} on {len(labeled):,} rows")
        print(f"Silhouette score: {metrics['silhouette']:.3f}")

    return {
        'labeled_subset': labeled,
        'summary_report': report,
        'feature_matrix': X,
        'feature_columns': roles.feature_columns,
        'roles': roles,
        'population': population,
        'model': model,
        'scaler': scaler,
        'label_mapping': label_mapping,
        'metrics': metrics,
        'config': config,
    }
