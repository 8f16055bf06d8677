"""
Row selection: keep the top-scoring rows of a dataset.

Rows are ranked by the score column, highest first. Ties keep their
original order and rows without a score go last.
"""
import math
import numbers
from typing import Optional, Tuple

import pandas as pd

from risk_clustering.errors import InvalidInput


def resolve_row_count(
    n_total: int,
    n_rows: Optional[int] = None,
    fraction: Optional[float] = None,
) -> int:
    """
    Turn a row count or a row fraction into a number of rows.

    Exactly one of ``n_rows`` and ``fraction`` must be given. Fractions are
    rounded up (ceiling of fraction × n_total). The result is clamped to
    [0, n_total].
    """
    if (n_rows is None) == (fraction is None):
        raise InvalidInput("select rows by count or by fraction, not both/neither")

    if n_rows is not None:
        if isinstance(n_rows, bool) or not isinstance(n_rows, numbers.Integral):
            raise InvalidInput(f"Row count must be an integer, got {n_rows!r}")
        count = int(n_rows)
    else:
        if isinstance(fraction, bool) or not isinstance(fraction, numbers.Real) or not math.isfinite(fraction):
            raise InvalidInput(f"Row fraction must be a finite number, got {fraction!r}")
        # 0.07 * 100 is 7.000000000000001 in floating point
        count = math.ceil(round(fraction * n_total, 9))

    return max(0, min(count, n_total))


def sort_by_score(df: pd.DataFrame, score_var: str) -> pd.DataFrame:
    """Sort descending by score; stable, missing scores last."""
    return df.sort_values(score_var, ascending=False, kind='mergesort', na_position='last')


def select_top_rows(
    df: pd.DataFrame,
    score_var: str,
    n_rows: Optional[int] = None,
    fraction: Optional[float] = None,
    verbose: bool = True,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Select the highest-scoring rows.

    Args:
        df: Full dataset
        score_var: Numeric column used for ranking
        n_rows: Number of rows to keep
        fraction: Share of rows to keep (0-1)

    Returns:
        Tuple of (selected subset, full table sorted by score)
    """
    n_keep = resolve_row_count(len(df), n_rows=n_rows, fraction=fraction)
    population = sort_by_score(df, score_var)
    subset = population.iloc[:n_keep].copy()

    if verbose:
        pct = n_keep / len(df) * 100 if len(df) else 0.0
        print(f"📊 Selecting top rows by '{score_var}'")
        print(f"  ✓ Kept {n_keep:,} of {len(df):,} rows ({pct:.1f}%)")

    return subset, population
