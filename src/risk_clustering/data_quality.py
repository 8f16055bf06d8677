"""
Schema validation for pipeline input tables.

The schema checks:
- Column names are unique
- Every requested variable is present
- The score column is numeric

Validation failures are reported as InvalidInput so callers handle one
error type for every rejected request.
"""
from typing import Iterable, List

import pandas as pd
import pandera as pa
from pandera import Column, Check

from risk_clustering.errors import InvalidInput


def is_numeric_series(series: pd.Series) -> bool:
    """True for numeric, non-boolean dtypes."""
    return (
        pd.api.types.is_numeric_dtype(series)
        and not pd.api.types.is_bool_dtype(series)
    )


# =============================================================================
# SCHEMA VALIDATION WITH PANDERA
# =============================================================================

def create_dataset_schema(required_columns: Iterable[str], score_var: str) -> pa.DataFrameSchema:
    """
    Create a Pandera schema for a clustering request.

    Args:
        required_columns: Clustering and display variables
        score_var: Column used to rank rows

    Returns:
        DataFrameSchema that tolerates extra columns and missing values
    """
    columns = {name: Column(nullable=True) for name in required_columns}
    columns[score_var] = Column(
        nullable=True,
        checks=Check(is_numeric_series, error=f"score column '{score_var}' must be numeric"),
    )

    return pa.DataFrameSchema(columns=columns, strict=False, coerce=False)


def validate_dataset(df: pd.DataFrame, required_columns: List[str], score_var: str) -> None:
    """
    Validate a dataset against the request's schema.

    Raises:
        InvalidInput: listing duplicated columns, missing columns and a
            non-numeric score column together
    """
    duplicated = sorted(set(df.columns[df.columns.duplicated()]))
    if duplicated:
        raise InvalidInput(f"Column names must be unique, duplicated: {duplicated}")

    schema = create_dataset_schema(required_columns, score_var)

    try:
        schema.validate(df, lazy=True)
    except pa.errors.SchemaErrors as e:
        problems = []
        missing = [c for c in dict.fromkeys([*required_columns, score_var]) if c not in df.columns]
        if missing:
            problems.append(f"missing columns {missing}")
        if score_var in df.columns and not is_numeric_series(df[score_var]):
            problems.append(f"score column '{score_var}' is not numeric ({df[score_var].dtype})")
        if not problems:
            problems.append(str(e.failure_cases.to_dict(orient='records')))
        raise InvalidInput("Invalid dataset: " + "; ".join(problems)) from e
