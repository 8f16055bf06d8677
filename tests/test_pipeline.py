"""End-to-end tests for the clustering pipeline."""
import numpy as np
import pandas as pd
import pytest

from risk_clustering import DegenerateColumn, InvalidInput, run


def _run(df, **overrides):
    params = dict(
        clustering_vars=['claim_amount', 'tenure', 'region'],
        display_vars=['age'],
        score_var='risk_score',
        n_clusters=3,
        fraction=0.5,
        config={'verbose': False},
    )
    params.update(overrides)
    return run(df, **params)


class TestRun:
    """Tests for the run function."""

    def test_outputs(self, claims_df):
        """Test that run returns the labeled top half and a report."""
        results = _run(claims_df)
        labeled = results['labeled_subset']
        report = results['summary_report']

        assert len(labeled) == 60
        assert labeled['risk_score'].min() >= claims_df['risk_score'].median() - 1e-12
        assert set(labeled['cluster']) == {'Cluster_01', 'Cluster_02', 'Cluster_03'}
        assert list(report.columns) == [
            'Cluster', 'Cluster_01', 'Cluster_02', 'Cluster_03',
            'Top Risky', 'Total Population', 'usedForClustering',
        ]

    def test_cluster_01_is_smallest(self, claims_df):
        """Test that cluster labels increase with cluster size."""
        counts = _run(claims_df)['labeled_subset']['cluster'].value_counts()
        assert counts['Cluster_01'] <= counts['Cluster_02'] <= counts['Cluster_03']

    def test_report_rows(self, claims_df):
        """Test that the report lists encoded clustering columns first and flags them."""
        report = _run(claims_df)['summary_report'].set_index('Cluster')

        assert report.index.tolist() == [
            'clusterSize', 'clusterPercentage',
            'region_north', 'region_south', 'region_west',
            'claim_amount', 'tenure', 'age',
        ]
        assert report.loc['claim_amount', 'usedForClustering'] == 'Yes'
        assert report.loc['region_west', 'usedForClustering'] == 'Yes'
        assert report.loc['age', 'usedForClustering'] == 'No'
        assert report.loc['clusterSize', 'Total Population'] == 120
        assert report.loc['age', 'Total Population'] == pytest.approx(claims_df['age'].mean())

    def test_report_means_match_labels(self, claims_df):
        """Test that each cluster column is the mean over its labeled rows."""
        results = _run(claims_df)
        labeled = results['labeled_subset']
        report = results['summary_report'].set_index('Cluster')

        for label, rows in labeled.groupby('cluster'):
            assert report.loc['age', label] == pytest.approx(rows['age'].mean())
            assert report.loc['clusterPercentage', label] == pytest.approx(len(rows) / 60)
        assert report.loc['age', 'Top Risky'] == pytest.approx(labeled['age'].mean())

    def test_idempotent(self, claims_df):
        """Test that two runs on the same data give identical reports."""
        first = _run(claims_df)['summary_report']
        second = _run(claims_df)['summary_report']
        pd.testing.assert_frame_equal(first, second)

    def test_dataset_not_modified(self, claims_df):
        """Test that the caller's dataset gains no columns and keeps its order."""
        before = claims_df.copy()
        _run(claims_df)
        pd.testing.assert_frame_equal(claims_df, before)

    def test_without_scaling_or_population(self, claims_df):
        """Test the unscaled run without the population column."""
        results = _run(claims_df, scale_data=False, config={'verbose': False, 'include_population': False})
        assert results['scaler'] is None
        assert 'Total Population' not in results['summary_report'].columns

    def test_quiet_config_prints_nothing(self, claims_df, capsys):
        """Test that verbose=False silences every stage."""
        _run(claims_df)
        assert capsys.readouterr().out == ''

    def test_k_equal_to_selected_rows(self, claims_df):
        """Test that K may equal the number of selected rows."""
        results = _run(claims_df, n_clusters=5, fraction=None, n_rows=5,
                       clustering_vars=['claim_amount', 'tenure'])
        assert results['labeled_subset']['cluster'].value_counts().max() == 1


class TestRunValidation:
    """Tests for request validation in run."""

    def test_count_and_fraction_raises(self, claims_df):
        """Test that giving both row count and fraction fails."""
        with pytest.raises(InvalidInput):
            _run(claims_df, n_rows=10, fraction=0.1)

    def test_k_larger_than_selection_raises(self, claims_df):
        """Test that K above the selected row count fails before clustering."""
        with pytest.raises(InvalidInput, match='only 6 rows'):
            _run(claims_df, fraction=0.05, n_clusters=7)

    def test_missing_variable_raises(self, claims_df):
        """Test that unknown variables fail."""
        with pytest.raises(InvalidInput, match='nope'):
            _run(claims_df, display_vars=['nope'])

    def test_text_score_raises(self, claims_df):
        """Test that the score column must be numeric."""
        with pytest.raises(InvalidInput, match='numeric'):
            _run(claims_df, score_var='region')

    def test_no_clustering_vars_raises(self, claims_df):
        """Test that at least one clustering variable is needed."""
        with pytest.raises(InvalidInput):
            _run(claims_df, clustering_vars=[])

    def test_constant_column_raises(self, claims_df):
        """Test that a constant clustering column is never clustered on."""
        df = claims_df.assign(constant=1.0)
        df.loc[df.index[:3], 'constant'] = np.nan
        with pytest.raises(DegenerateColumn) as exc:
            _run(df, clustering_vars=['claim_amount', 'constant'])
        assert exc.value.columns == ['constant']
