"""Tests for K-Means clustering and relabeling."""
import numpy as np
import pandas as pd
import pytest

from risk_clustering.clustering import (
    assign_clusters,
    evaluate_clustering,
    load_clustering_artifacts,
    perform_kmeans,
    relabel_by_size,
    save_clustering_artifacts,
)
from risk_clustering.config import merge_config
from risk_clustering.errors import InvalidInput


@pytest.fixture
def blobs():
    """Three separated groups of 2, 5 and 3 points."""
    points = (
        [[0.0, 0.0], [0.1, 0.0]]
        + [[10.0, 10.0], [10.1, 10.0], [10.0, 10.1], [9.9, 10.0], [10.0, 9.9]]
        + [[-10.0, 10.0], [-10.1, 10.0], [-10.0, 10.1]]
    )
    return pd.DataFrame(points, columns=['a', 'b'])


class TestRelabelBySize:
    """Tests for relabel_by_size function."""

    def test_smallest_cluster_gets_rank_one(self):
        """Test that ranks follow ascending cluster size."""
        labels, mapping = relabel_by_size(np.array([2, 2, 2, 0, 1, 1]))

        assert mapping == {0: 1, 1: 2, 2: 3}
        assert labels.tolist() == ['Cluster_03'] * 3 + ['Cluster_01'] + ['Cluster_02'] * 2

    def test_ties_follow_raw_id(self):
        """Test that equally sized clusters keep raw id order."""
        _, mapping = relabel_by_size(np.array([1, 0, 1, 0]))
        assert mapping == {0: 1, 1: 2}

    def test_custom_prefix(self):
        """Test that the label prefix is configurable."""
        labels, _ = relabel_by_size(np.array([0, 0, 1]), prefix='Seg')
        assert labels.tolist() == ['Seg02', 'Seg02', 'Seg01']


class TestPerformKMeans:
    """Tests for perform_kmeans function."""

    @pytest.mark.parametrize('k', [0, -1, 11, True, 2.0])
    def test_invalid_k_raises(self, blobs, k):
        """Test that K must be a positive integer no larger than the row count."""
        with pytest.raises(InvalidInput):
            perform_kmeans(blobs, k, verbose=False)

    def test_k_equal_to_rows(self, blobs):
        """Test that one cluster per row is accepted."""
        _, labels = perform_kmeans(blobs, len(blobs), verbose=False)
        assert len(set(labels)) == len(blobs)


class TestAssignClusters:
    """Tests for assign_clusters function."""

    def test_labels_ordered_by_size(self, blobs):
        """Test that Cluster_01 is the smallest and Cluster_03 the largest group."""
        config = merge_config({'verbose': False})
        labeled, _, _ = assign_clusters(blobs, blobs, 3, config)

        counts = labeled['cluster'].value_counts()
        assert counts['Cluster_01'] == 2
        assert counts['Cluster_02'] == 3
        assert counts['Cluster_03'] == 5
        assert labeled['cluster'].iloc[:2].tolist() == ['Cluster_01', 'Cluster_01']

    def test_repeated_runs_are_identical(self, blobs):
        """Test that a fixed seed gives the same row-to-label mapping."""
        config = merge_config({'verbose': False})
        first, _, _ = assign_clusters(blobs, blobs, 3, config)
        second, _, _ = assign_clusters(blobs, blobs, 3, config)
        assert first['cluster'].tolist() == second['cluster'].tolist()

    def test_input_not_modified(self, blobs):
        """Test that the label column is added to a copy."""
        assign_clusters(blobs, blobs, 2, merge_config({'verbose': False}))
        assert 'cluster' not in blobs.columns


class TestEvaluateClustering:
    """Tests for evaluate_clustering function."""

    def test_metrics_for_valid_clustering(self, blobs):
        """Test that separated blobs score a high silhouette."""
        _, labels = perform_kmeans(blobs, 3, verbose=False)
        metrics = evaluate_clustering(blobs, labels)
        assert metrics['n_clusters'] == 3
        assert metrics['silhouette'] > 0.8

    def test_single_cluster_gives_nan(self, blobs):
        """Test that metrics are NaN with fewer than 2 clusters."""
        metrics = evaluate_clustering(blobs, np.zeros(len(blobs)))
        assert np.isnan(metrics['silhouette'])


class TestArtifacts:
    """Tests for saving and loading clustering artifacts."""

    def test_save_and_load(self, blobs, tmp_path):
        """Test that saved artifacts load back with the same content."""
        config = merge_config({'verbose': False})
        _, model, mapping = assign_clusters(blobs, blobs, 3, config)
        report = pd.DataFrame({'Cluster': ['clusterSize'], 'Cluster_01': [2.0]})

        save_clustering_artifacts(model, None, report, ['a', 'b'], mapping, tmp_path, config=config)
        artifacts = load_clustering_artifacts(tmp_path)

        assert artifacts['scaler'] is None
        assert artifacts['config']['feature_columns'] == ['a', 'b']
        assert artifacts['config']['n_clusters'] == 3
        np.testing.assert_allclose(artifacts['model'].cluster_centers_, model.cluster_centers_)
        assert artifacts['report']['Cluster_01'].tolist() == [2.0]
