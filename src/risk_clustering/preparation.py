"""
Feature matrix preparation for clustering.

Steps:
1. Infinite values become missing
2. Columns with at most one distinct value are rejected
3. Optional z-score standardization (StandardScaler, NaN-aware)
4. Remaining missing values are filled with the column median
"""
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from risk_clustering.errors import DegenerateColumn, InvalidInput


def replace_infinite(df: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    """Return a copy of ``df[columns]`` as floats with ±inf replaced by NaN."""
    return df[columns].astype(float).replace([np.inf, -np.inf], np.nan)


def find_degenerate_columns(df: pd.DataFrame, columns: List[str]) -> List[str]:
    """Columns with at most one distinct non-missing value."""
    return [col for col in columns if df[col].nunique(dropna=True) <= 1]


def prepare_feature_matrix(
    subset: pd.DataFrame,
    feature_columns: List[str],
    scale_data: bool = True,
    verbose: bool = True,
) -> Tuple[pd.DataFrame, Optional[StandardScaler]]:
    """
    Build the numeric, missing-free matrix fed to K-Means.

    Args:
        subset: Selected rows (encoded)
        feature_columns: Clustering columns in model order
        scale_data: Standardize each column to zero mean, unit variance

    Returns:
        Tuple of (feature DataFrame aligned with ``subset``, fitted scaler or None)
    """
    if not feature_columns:
        raise InvalidInput("At least one clustering variable is required")

    if verbose:
        print("📊 Preparing clustering data")

    X = replace_infinite(subset, feature_columns)

    degenerate = find_degenerate_columns(X, feature_columns)
    if degenerate:
        raise DegenerateColumn(degenerate)

    scaler = None
    if scale_data:
        scaler = StandardScaler()
        X = pd.DataFrame(scaler.fit_transform(X), index=X.index, columns=feature_columns)

    # median is computed after scaling, over observed values only
    n_missing = int(X.isna().sum().sum())
    X = X.fillna(X.median())

    if verbose:
        print(f"  ✓ Features: {feature_columns}")
        print(f"  ✓ Scaled: {scale_data}")
        print(f"  ✓ Imputed {n_missing:,} missing values with column medians")
        print(f"  ✓ Shape: {X.shape}")

    return X, scaler
