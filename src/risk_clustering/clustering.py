"""
K-Means clustering of the selected rows.

This module handles:
1. K-Means with a fixed seed
2. Size-ordered relabeling (Cluster_01 is always the smallest cluster)
3. Clustering quality metrics
4. Saving and loading clustering artifacts
"""
import json
import numbers
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import joblib
import numpy as np
import pandas as pd
from sklearn.cluster import KMeans
from sklearn.metrics import silhouette_score, davies_bouldin_score, calinski_harabasz_score
from sklearn.preprocessing import StandardScaler

from risk_clustering.config import DEFAULT_CONFIG
from risk_clustering.errors import InvalidInput


# =============================================================================
# K-MEANS CLUSTERING
# =============================================================================

def check_n_clusters(n_clusters, n_rows: int) -> None:
    """Raise InvalidInput unless 1 <= n_clusters <= n_rows."""
    if isinstance(n_clusters, bool) or not isinstance(n_clusters, numbers.Integral):
        raise InvalidInput(f"Number of clusters must be an integer, got {n_clusters!r}")
    if n_clusters < 1:
        raise InvalidInput(f"Number of clusters must be positive, got {n_clusters}")
    if n_clusters > n_rows:
        raise InvalidInput(
            f"Requested {n_clusters} clusters but only {n_rows} rows were selected"
        )


def perform_kmeans(
    X,
    n_clusters: int,
    random_state: int = 42,
    n_init: int = 10,
    max_iter: int = 300,
    verbose: bool = True,
) -> Tuple[KMeans, np.ndarray]:
    """
    Perform K-Means clustering with specified K.

    Args:
        X: Prepared feature matrix (no missing values)
        n_clusters: Number of clusters
        random_state: Random seed

    Returns:
        Tuple of (fitted KMeans model, raw cluster labels)
    """
    X = np.asarray(X, dtype=float)
    check_n_clusters(n_clusters, len(X))

    if verbose:
        print(f"📊 Training K-Means with K={n_clusters}")

    kmeans = KMeans(
        n_clusters=int(n_clusters),
        random_state=random_state,
        n_init=n_init,
        max_iter=max_iter,
    )
    labels = kmeans.fit_predict(X)

    return kmeans, labels


def relabel_by_size(
    raw_labels: np.ndarray,
    prefix: str = 'Cluster_',
) -> Tuple[np.ndarray, Dict[int, int]]:
    """
    Rename raw K-Means ids by ascending cluster size.

    Rank 1 is the smallest cluster. Clusters of equal size keep the order of
    their raw ids.

    Returns:
        Tuple of (labels like 'Cluster_01', {raw id: rank})
    """
    ids, counts = np.unique(raw_labels, return_counts=True)
    order = np.argsort(counts, kind='stable')
    mapping = {int(ids[i]): rank for rank, i in enumerate(order, start=1)}

    labels = np.array([f"{prefix}{mapping[int(raw)]:02d}" for raw in raw_labels], dtype=object)
    return labels, mapping


def assign_clusters(
    subset: pd.DataFrame,
    X: pd.DataFrame,
    n_clusters: int,
    config: Optional[dict] = None,
) -> Tuple[pd.DataFrame, KMeans, Dict[int, int]]:
    """
    Cluster the selected rows and attach size-ordered labels.

    Args:
        subset: Selected rows, aligned row-for-row with X
        X: Prepared feature matrix
        n_clusters: Number of clusters
        config: Pipeline configuration (seed, K-Means settings, column name)

    Returns:
        Tuple of (labeled copy of subset, fitted model, {raw id: rank})
    """
    config = config or DEFAULT_CONFIG
    verbose = config.get('verbose', True)

    model, raw_labels = perform_kmeans(
        X,
        n_clusters,
        random_state=config['random_state'],
        n_init=config['n_init'],
        max_iter=config['max_iter'],
        verbose=verbose,
    )
    labels, mapping = relabel_by_size(raw_labels, prefix=config['cluster_prefix'])

    labeled = subset.copy()
    labeled[config['cluster_column']] = labels

    if verbose:
        unique, counts = np.unique(labels, return_counts=True)
        print("  Cluster distribution:")
        for cluster, count in zip(unique, counts):
            pct = count / len(labels) * 100
            print(f"    {cluster}: {count:,} ({pct:.1f}%)")

    return labeled, model, mapping


# =============================================================================
# CLUSTERING EVALUATION
# =============================================================================

def evaluate_clustering(X, labels) -> Dict:
    """
    Evaluate clustering quality with multiple metrics.

    Scores need at least 2 clusters and fewer clusters than rows; otherwise
    they are NaN.
    """
    X = np.asarray(X, dtype=float)
    labels = np.asarray(labels)
    n_clusters = len(set(labels))

    if n_clusters < 2 or n_clusters >= len(labels):
        return {
            'n_clusters': n_clusters,
            'silhouette': np.nan,
            'davies_bouldin': np.nan,
            'calinski_harabasz': np.nan,
        }

    return {
        'n_clusters': n_clusters,
        'silhouette': float(silhouette_score(X, labels)),
        'davies_bouldin': float(davies_bouldin_score(X, labels)),
        'calinski_harabasz': float(calinski_harabasz_score(X, labels)),
    }


# =============================================================================
# ARTIFACT SAVING
# =============================================================================

def save_clustering_artifacts(
    model: KMeans,
    scaler: Optional[StandardScaler],
    report: pd.DataFrame,
    feature_columns: List[str],
    label_mapping: Dict[int, int],
    models_dir: str = "models",
    config: Optional[dict] = None,
) -> Path:
    """
    Save all clustering artifacts.

    Args:
        model: Fitted K-Means model
        scaler: Fitted StandardScaler, or None when data was not scaled
        report: Summary report table
        feature_columns: Columns the model was trained on
        label_mapping: {raw K-Means id: size rank}
        models_dir: Output directory

    Returns:
        Path of the output directory
    """
    models_dir = Path(models_dir)
    models_dir.mkdir(parents=True, exist_ok=True)
    config = config or DEFAULT_CONFIG
    verbose = config.get('verbose', True)

    joblib.dump(model, models_dir / "clustering_model.joblib")
    if verbose:
        print("✓ Saved clustering_model.joblib")

    if scaler is not None:
        joblib.dump(scaler, models_dir / "cluster_scaler.joblib")
        if verbose:
            print("✓ Saved cluster_scaler.joblib")

    report.to_csv(models_dir / "cluster_report.csv", index=False)
    if verbose:
        print("✓ Saved cluster_report.csv")

    cluster_config = {
        'feature_columns': list(feature_columns),
        'label_mapping': {str(raw): rank for raw, rank in label_mapping.items()},
        'cluster_prefix': config['cluster_prefix'],
        'n_clusters': len(label_mapping),
        'scaled': scaler is not None,
        'algorithm': 'KMeans',
    }
    with open(models_dir / "cluster_config.json", 'w') as f:
        json.dump(cluster_config, f, indent=2)
    if verbose:
        print("✓ Saved cluster_config.json")

    return models_dir


def load_clustering_artifacts(models_dir: str = "models") -> Dict:
    """Load saved clustering artifacts."""
    models_dir = Path(models_dir)

    artifacts = {
        'model': joblib.load(models_dir / "clustering_model.joblib"),
        'report': pd.read_csv(models_dir / "cluster_report.csv"),
        'scaler': None,
    }

    scaler_path = models_dir / "cluster_scaler.joblib"
    if scaler_path.exists():
        artifacts['scaler'] = joblib.load(scaler_path)

    with open(models_dir / "cluster_config.json") as f:
        artifacts['config'] = json.load(f)

    return artifacts
