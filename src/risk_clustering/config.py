"""
Configuration for the clustering pipeline.

Settings live in a plain dict. Defaults can be overridden from the
``clustering`` section of a YAML file, e.g. configs/config.yaml.
"""
from pathlib import Path
from typing import Optional

import yaml

from risk_clustering.errors import InvalidInput


# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_CONFIG = {
    'random_state': 42,       # KMeans seed, also used for plot sampling
    'n_init': 10,             # KMeans restarts
    'max_iter': 300,
    'verbose': True,
    'cluster_column': 'cluster',
    'cluster_prefix': 'Cluster_',
    'top_risky_label': 'Top Risky',
    'population_label': 'Total Population',
    'include_population': True,
    'plot_sample_size': 1000,
}


def load_config(config_path: Optional[str] = None) -> dict:
    """
    Load pipeline configuration.

    Args:
        config_path: YAML file with a ``clustering`` section (optional)

    Returns:
        DEFAULT_CONFIG updated with the file's values
    """
    config = dict(DEFAULT_CONFIG)
    if config_path is None:
        return config

    with open(Path(config_path)) as f:
        raw = yaml.safe_load(f) or {}

    return merge_config(raw.get('clustering', {}), base=config)


def merge_config(overrides: Optional[dict], base: Optional[dict] = None) -> dict:
    """Return ``base`` (defaults if None) updated with ``overrides``."""
    config = dict(DEFAULT_CONFIG if base is None else base)
    if not overrides:
        return config

    unknown = sorted(set(overrides) - set(DEFAULT_CONFIG))
    if unknown:
        raise InvalidInput(f"Unknown configuration keys: {unknown}")

    config.update(overrides)
    return config
