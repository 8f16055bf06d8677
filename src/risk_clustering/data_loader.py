"""
Dataset loading utilities.

This module handles:
1. Reading delimited text files (delimiter sniffed when not given)
2. Reading parquet files
3. Quick summaries of a loaded table
"""
from pathlib import Path
from typing import Optional

import pandas as pd

from risk_clustering.errors import InvalidInput


# =============================================================================
# CONSTANTS
# =============================================================================

TEXT_SUFFIXES = {'.csv', '.txt', '.tsv'}
PARQUET_SUFFIXES = {'.parquet', '.pq'}


# =============================================================================
# DATA LOADING
# =============================================================================

def load_dataset(data_path: str, sep: Optional[str] = None, verbose: bool = True) -> pd.DataFrame:
    """
    Load a tabular dataset from disk.

    Args:
        data_path: Path to a delimited text file or a parquet file
        sep: Column delimiter for text files (sniffed when None)
        verbose: Print a one-line summary after loading

    Returns:
        Loaded DataFrame

    Example:
        >>> df = load_dataset("data/raw/claims.csv")
        >>> df.shape
        (120000, 45)
    """
    data_path = Path(data_path)
    if not data_path.exists():
        raise FileNotFoundError(f"Missing file: {data_path}")

    suffix = data_path.suffix.lower()
    if suffix in PARQUET_SUFFIXES:
        df = pd.read_parquet(data_path)
    elif suffix in TEXT_SUFFIXES:
        if sep is None and suffix == '.tsv':
            sep = '\t'
        if sep is None:
            # python engine sniffs the delimiter from the first rows
            df = pd.read_csv(data_path, sep=None, engine='python')
        else:
            df = pd.read_csv(data_path, sep=sep)
    else:
        raise InvalidInput(f"Unsupported file type '{suffix}' for {data_path}")

    if verbose:
        print(f"✓ Loaded {data_path.name}: {df.shape[0]:,} rows × {df.shape[1]} cols")

    return df


def get_data_summary(df: pd.DataFrame) -> dict:
    """Get a summary of the DataFrame for quick inspection."""
    return {
        "rows": len(df),
        "columns": len(df.columns),
        "memory_mb": df.memory_usage(deep=True).sum() / 1024**2,
        "missing_total": int(df.isnull().sum().sum()),
        "dtypes": df.dtypes.astype(str).value_counts().to_dict(),
    }
