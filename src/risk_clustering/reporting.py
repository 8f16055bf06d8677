"""
Cluster summary report.

Builds a comparison table with one row per variable and one column per
group: each cluster, the whole selected subset ("Top Risky") and
optionally the whole population. Columns are ordered by group size.
"""
from typing import List, Optional

import numpy as np
import pandas as pd

from risk_clustering.config import DEFAULT_CONFIG
from risk_clustering.errors import InvalidInput


# =============================================================================
# CONSTANTS
# =============================================================================

GROUP_COLUMN = 'Cluster'
SIZE_COLUMN = 'clusterSize'
PERCENTAGE_COLUMN = 'clusterPercentage'
USED_COLUMN = 'usedForClustering'


# =============================================================================
# GROUP TABLES
# =============================================================================

def _group_frame(df: pd.DataFrame, variables: List[str], name, size, percentage) -> pd.DataFrame:
    frame = df.reindex(columns=variables).copy()
    frame[GROUP_COLUMN] = name
    frame[SIZE_COLUMN] = size
    frame[PERCENTAGE_COLUMN] = percentage
    return frame


def cluster_groups(labeled: pd.DataFrame, variables: List[str], cluster_column: str) -> pd.DataFrame:
    """Rows of each cluster with its size and share of the labeled subset."""
    labels = labeled[cluster_column]
    sizes = labels.map(labels.value_counts())
    return _group_frame(labeled, variables, labels.values, sizes.values, (sizes / len(labeled)).values)


def compute_group_means(long_df: pd.DataFrame, variables: List[str], group_order: List[str]) -> pd.DataFrame:
    """
    Mean of every variable per group, ignoring missing values.

    Returns:
        One row per group ordered ascending by clusterSize (stable over
        ``group_order``)
    """
    value_columns = variables + [SIZE_COLUMN, PERCENTAGE_COLUMN]
    values = long_df[value_columns].apply(pd.to_numeric, errors='coerce').astype(float)
    values[GROUP_COLUMN] = long_df[GROUP_COLUMN].values

    means = values.groupby(GROUP_COLUMN, sort=False)[value_columns].mean()
    means = means.reindex(group_order)

    return means.sort_values(SIZE_COLUMN, kind='mergesort')


def transpose_summary(means: pd.DataFrame, variables: List[str]) -> pd.DataFrame:
    """Variables become rows (leading 'Cluster' column), groups become columns."""
    table = means[[SIZE_COLUMN, PERCENTAGE_COLUMN] + variables].T
    table.columns = [str(c) for c in table.columns]
    for col in table.columns:
        table[col] = pd.to_numeric(table[col], errors='coerce')

    table.index.name = GROUP_COLUMN
    return table.reset_index()


# =============================================================================
# REPORT
# =============================================================================

def build_summary_report(
    labeled: pd.DataFrame,
    variables: List[str],
    clustering_columns: Optional[List[str]] = None,
    population: Optional[pd.DataFrame] = None,
    config: Optional[dict] = None,
) -> pd.DataFrame:
    """
    Build the cluster comparison report.

    Args:
        labeled: Selected rows with the cluster label column
        variables: Numeric (or encoded) columns to summarize
        clustering_columns: Columns used by K-Means; adds usedForClustering
        population: Full table before selection, for the population column
        config: Pipeline configuration (labels, column names, verbosity)

    Returns:
        DataFrame with columns: Cluster, <groups by size>, [usedForClustering]
    """
    config = config or DEFAULT_CONFIG
    cluster_column = config['cluster_column']
    variables = list(dict.fromkeys(variables))

    missing = [v for v in variables if v not in labeled.columns]
    if missing:
        raise InvalidInput(f"Report variables not found in labeled subset: {missing}")
    if cluster_column not in labeled.columns:
        raise InvalidInput(f"Labeled subset has no '{cluster_column}' column")

    verbose = config.get('verbose', True)
    if verbose:
        print(f"📊 Summarizing {len(variables)} variables")

    n_subset = len(labeled)
    parts = [
        cluster_groups(labeled, variables, cluster_column),
        _group_frame(labeled, variables, config['top_risky_label'], n_subset, 1.0),
    ]
    group_order = sorted(labeled[cluster_column].unique()) + [config['top_risky_label']]

    if population is not None:
        parts.append(_group_frame(population, variables, config['population_label'], len(population), 1.0))
        group_order.append(config['population_label'])

    long_df = pd.concat(parts, ignore_index=True)
    means = compute_group_means(long_df, variables, group_order)
    report = transpose_summary(means, variables)

    if clustering_columns:
        report[USED_COLUMN] = np.where(report[GROUP_COLUMN].isin(clustering_columns), 'Yes', 'No')

    if verbose:
        print(f"  ✓ Report: {report.shape[0]} rows × {report.shape[1]} cols")

    return report
