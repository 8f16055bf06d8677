"""Shared fixtures for the pipeline tests."""
import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def claims_df():
    """120 rows: three numeric blobs, a categorical column and a risk score."""
    rng = np.random.default_rng(7)
    sizes = [20, 40, 60]
    centers = [(0.0, 0.0), (8.0, 8.0), (-8.0, 8.0)]

    amount, tenure = [], []
    for size, (cx, cy) in zip(sizes, centers):
        amount.extend(rng.normal(cx, 0.5, size))
        tenure.extend(rng.normal(cy, 0.5, size))

    n = sum(sizes)
    return pd.DataFrame({
        'claim_amount': amount,
        'tenure': tenure,
        'region': rng.choice(['north', 'south', 'west'], size=n),
        'age': rng.integers(18, 80, size=n).astype(float),
        'risk_score': rng.uniform(0, 1, size=n),
    })
