"""Correlation plot of the clustering features."""
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns


def plot_feature_correlations(
    feature_df: pd.DataFrame,
    save_path: str,
    sample_size: int = 1000,
    random_state: int = 42,
    title: Optional[str] = None,
) -> plt.Figure:
    """
    Plot pairwise correlations of a random sample of the clustering features.

    Args:
        feature_df: Clustering feature columns
        save_path: Output image path
        sample_size: Rows sampled before computing correlations
        random_state: Sampling seed

    Returns:
        The matplotlib figure (already saved to ``save_path``)
    """
    sample = feature_df
    if len(feature_df) > sample_size:
        sample = feature_df.sample(n=sample_size, random_state=random_state)

    corr = sample.astype(float).corr()

    size = max(6, 0.6 * len(corr.columns))
    fig, ax = plt.subplots(figsize=(size, size * 0.8))
    sns.heatmap(
        corr,
        ax=ax,
        cmap='RdBu_r',
        vmin=-1,
        vmax=1,
        center=0,
        annot=len(corr.columns) <= 12,
        fmt='.2f',
        square=True,
    )
    ax.set_title(title or f'Feature Correlations (n={len(sample):,})', fontsize=14, fontweight='bold')

    plt.tight_layout()

    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(save_path, dpi=150, bbox_inches='tight')
    plt.close(fig)

    return fig
