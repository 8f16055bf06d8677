"""
Categorical encoding for clustering inputs.

This module handles:
1. Splitting requested variables into categorical and numeric
2. Dummification: one 0/1 indicator column per observed category value
3. Computing the column roles (clustering / display / numeric) once so the
   rest of the pipeline never recomputes name-set algebra
"""
from typing import Iterable, List, NamedTuple, Tuple

import pandas as pd

from risk_clustering.errors import InvalidInput


# Suffix used for the indicator of missing category values
MISSING_LEVEL = 'NA'


class ColumnRoles(NamedTuple):
    """Column names produced by encode_variables, in pipeline order."""
    treated: List[str]             # everything reported: clustering dummies, numeric, other dummies
    clustering_dummies: List[str]
    display_dummies: List[str]
    numeric_clustering: List[str]
    feature_columns: List[str]     # clustering dummies then numeric clustering columns


def _unique(names: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(names))


def split_variable_types(df: pd.DataFrame, variables: Iterable[str]) -> Tuple[List[str], List[str]]:
    """
    Split variables into categorical and numeric.

    Numeric and boolean dtypes count as numeric; text, category and mixed
    object columns count as categorical.

    Returns:
        Tuple of (categorical, numeric), each in request order
    """
    variables = _unique(variables)
    missing = [v for v in variables if v not in df.columns]
    if missing:
        raise InvalidInput(f"Variables not found in dataset: {missing}")

    categorical, numeric = [], []
    for var in variables:
        if pd.api.types.is_numeric_dtype(df[var]):
            numeric.append(var)
        else:
            categorical.append(var)

    return categorical, numeric


def _missing_indicator_name(variable: str, level_names: List[str]) -> str:
    name = f"{variable}_{MISSING_LEVEL}"
    # a real "NA" level keeps its name; the missing indicator moves aside
    while name in level_names:
        name = f"{name}_missing"
    return name


def dummify(df: pd.DataFrame, variables: Iterable[str]) -> Tuple[pd.DataFrame, dict]:
    """
    Add one float indicator column per observed value of each variable.

    The original columns are kept. Missing values never match a level;
    they get their own ``<variable>_NA`` indicator when present.

    Args:
        df: Source DataFrame (not modified)
        variables: Categorical columns to encode

    Returns:
        Tuple of (new DataFrame, {variable: [indicator columns]})

    Raises:
        InvalidInput: an indicator name is already a column of ``df`` or is
            generated twice
    """
    frames = []
    generated = {}

    for var in _unique(variables):
        values = df[var]
        present = values.notna()
        as_text = values.astype(str).where(present)

        dummies = pd.get_dummies(as_text, prefix=var, prefix_sep='_', dtype=float)
        dummies = dummies.reindex(columns=sorted(dummies.columns))

        if not present.all():
            name = _missing_indicator_name(var, list(dummies.columns))
            dummies[name] = (~present).astype(float)

        frames.append(dummies)
        generated[var] = list(dummies.columns)

    names = [c for cols in generated.values() for c in cols]
    clashes = sorted(set(c for c in names if c in df.columns or names.count(c) > 1))
    if clashes:
        raise InvalidInput(f"Indicator columns clash with existing or generated columns: {clashes}")

    if not frames:
        return df.copy(), generated

    return pd.concat([df] + frames, axis=1), generated


def encode_variables(
    df: pd.DataFrame,
    clustering_vars: List[str],
    display_vars: List[str],
    verbose: bool = True,
) -> Tuple[pd.DataFrame, ColumnRoles]:
    """
    Encode clustering and display variables.

    Args:
        df: Dataset (not modified)
        clustering_vars: Variables that feed the distance computation
        display_vars: Variables shown in the report only

    Returns:
        Tuple of (encoded DataFrame, ColumnRoles)
    """
    clustering_vars = _unique(clustering_vars)
    display_vars = _unique(display_vars)
    all_vars = _unique(clustering_vars + display_vars)

    categorical, numeric = split_variable_types(df, all_vars)
    encoded, generated = dummify(df, categorical)

    clustering_dummies = [c for v in clustering_vars if v in generated for c in generated[v]]
    display_dummies = [c for v in display_vars if v in generated for c in generated[v]]
    numeric_clustering = [v for v in clustering_vars if v in numeric]

    other_dummies = [c for v in categorical for c in generated[v] if c not in clustering_dummies]
    treated = _unique(clustering_dummies + numeric + other_dummies)

    roles = ColumnRoles(
        treated=treated,
        clustering_dummies=clustering_dummies,
        display_dummies=display_dummies,
        numeric_clustering=numeric_clustering,
        feature_columns=clustering_dummies + numeric_clustering,
    )

    if verbose:
        print("📊 Encoding variables")
        print(f"  ✓ Categorical: {categorical}")
        print(f"  ✓ Numeric: {numeric}")
        print(f"  ✓ Indicator columns created: {sum(len(v) for v in generated.values())}")

    return encoded, roles
