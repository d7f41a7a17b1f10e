"""
Test Suite for Cleaning Module
==============================

Tests for the SensorDataCleaner class and clean_data pipeline.
"""

import pytest
import numpy as np
import pandas as pd

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from exercise_quality.cleaning import (
    SensorDataCleaner, clean_data, drop_unlabeled_rows, find_incomplete_columns,
    remove_summary_rows, DEFAULT_METADATA_COLUMNS
)
from exercise_quality.data_loader import ROW_INDEX_COLUMNS, validate_data
from exercise_quality.partitioning import partition_dataset

METADATA_COLUMNS = [
    "X",
    "user_name",
    "raw_timestamp_part_1",
    "raw_timestamp_part_2",
    "cvtd_timestamp",
    "new_window",
    "num_window",
]


class TestRemoveSummaryRows:
    """Tests for the window-summary row filter."""

    def test_removes_flagged_rows(self, raw_data):
        """Rows flagged 'yes' are removed, others kept."""
        rows = remove_summary_rows(raw_data)

        assert len(rows) == 100
        assert (rows['new_window'] != 'yes').all()

    def test_flag_match_ignores_case_and_whitespace(self):
        """' YES ' is treated as a summary flag."""
        df = pd.DataFrame({'new_window': ['no', ' YES ', 'Yes', 'no'], 'v': [1, 2, 3, 4]})

        rows = remove_summary_rows(df)

        assert rows['v'].tolist() == [1, 4]

    def test_missing_flag_column_is_noop(self):
        """Tables without the flag column pass through."""
        df = pd.DataFrame({'v': [1, 2, 3]})

        rows = remove_summary_rows(df)

        assert rows.equals(df)


class TestFindIncompleteColumns:
    """Tests for missing-value column detection."""

    def test_detects_nan_and_blank_strings(self):
        """NaN, None and blank strings all mark a column incomplete."""
        df = pd.DataFrame({
            'full': [1.0, 2.0, 3.0],
            'nan': [1.0, np.nan, 3.0],
            'none': ['a', None, 'c'],
            'blank': ['a', '  ', 'c'],
            'empty': [np.nan, np.nan, np.nan]
        })

        incomplete = find_incomplete_columns(df)

        assert set(incomplete) == {'nan', 'none', 'blank', 'empty'}


class TestSensorDataCleaner:
    """Tests for SensorDataCleaner class."""

    @pytest.fixture
    def cleaner(self):
        """Create a cleaner instance."""
        return SensorDataCleaner(label_column='classe')

    def test_init(self, cleaner):
        """Test cleaner initialization."""
        assert cleaner.label_column == 'classe'
        assert cleaner.flag_column == 'new_window'
        assert cleaner.flag_value == 'yes'
        assert cleaner.metadata_columns == DEFAULT_METADATA_COLUMNS
        assert cleaner._is_fitted == False

    def test_no_summary_rows_in_output(self, cleaner, raw_data):
        """No output row comes from a window-summary row."""
        cleaned = cleaner.fit_transform(raw_data)

        assert len(cleaned) == 100
        summary_index = raw_data.index[raw_data['new_window'] == 'yes']
        assert not cleaned.index.isin(summary_index).any()

    def test_no_missing_values_in_output(self, cleaner, raw_data):
        """No output column contains a missing value."""
        cleaned = cleaner.fit_transform(raw_data)

        assert not cleaned.isna().any().any()
        for col in ['avg_roll_belt', 'kurtosis_yaw_belt', 'amplitude_yaw_belt']:
            assert col not in cleaned.columns

    def test_metadata_columns_removed(self, cleaner, raw_data):
        """All metadata columns are absent from the output."""
        cleaned = cleaner.fit_transform(raw_data)

        for col in METADATA_COLUMNS:
            assert col not in cleaned.columns

    def test_output_is_label_plus_numeric_predictors(self, cleaner, raw_data):
        """Label comes first, every other column is numeric."""
        cleaned = cleaner.fit_transform(raw_data)

        assert cleaned.columns[0] == 'classe'
        predictors = cleaned.drop(columns=['classe'])
        assert predictors.shape[1] == 60
        assert len(predictors.select_dtypes(include=[np.number]).columns) == 60

    def test_removed_columns_recorded(self, cleaner, raw_data):
        """Dropped columns are grouped by reason."""
        cleaner.fit(raw_data)

        assert set(cleaner.removed_columns['incomplete']) == {
            'avg_roll_belt', 'kurtosis_yaw_belt', 'amplitude_yaw_belt'
        }
        assert set(cleaner.removed_columns['metadata']) == set(METADATA_COLUMNS)
        assert cleaner.removed_columns['non_numeric'] == []
        assert cleaner.n_rows_removed == 10

    def test_stray_text_column_dropped(self, cleaner, raw_data):
        """Complete non-numeric columns other than the label are removed."""
        raw_data['device'] = 'arm'

        cleaned = cleaner.fit_transform(raw_data)

        assert 'device' not in cleaned.columns
        assert cleaner.removed_columns['non_numeric'] == ['device']

    def test_transform_before_fit(self, cleaner, raw_data):
        """Test that transform raises error before fit."""
        with pytest.raises(ValueError, match="must be fitted"):
            cleaner.transform(raw_data)

    def test_transform_applies_training_schema(self, cleaner, sensor_frame_factory, raw_data):
        """A scoring table without labels gets the training columns."""
        cleaner.fit(raw_data)
        scoring = sensor_frame_factory(n_rows=20, n_summary_rows=0, seed=7).drop(columns=['classe'])

        cleaned = cleaner.transform(scoring)

        assert cleaned.columns.tolist() == cleaner.feature_columns
        assert len(cleaned) == 20

    def test_transform_missing_feature_raises(self, cleaner, raw_data):
        """Scoring tables lacking a fitted predictor are rejected."""
        cleaner.fit(raw_data)

        with pytest.raises(ValueError, match="missing from input"):
            cleaner.transform(raw_data.drop(columns=['sensor_3']))


class TestCleanData:
    """Tests for the clean_data function."""

    def test_returns_expected_keys(self, raw_data):
        """Test that the pipeline returns all expected keys."""
        result = clean_data(raw_data)

        expected_keys = [
            'data', 'cleaner', 'feature_names', 'removed_columns',
            'n_rows_removed', 'n_unlabeled_rows', 'input_shape', 'output_shape'
        ]
        for key in expected_keys:
            assert key in result, f"Missing key: {key}"

        assert result['output_shape'] == (100, 61)
        assert result['n_rows_removed'] == 10

    def test_idempotent(self, raw_data):
        """Cleaning the cleaned table removes nothing further."""
        once = clean_data(raw_data)['data']
        twice_result = clean_data(once)

        pd.testing.assert_frame_equal(twice_result['data'], once)
        assert twice_result['n_rows_removed'] == 0
        assert twice_result['removed_columns'] == {
            'incomplete': [], 'metadata': [], 'non_numeric': []
        }

    def test_custom_metadata_columns(self, raw_data):
        """A custom metadata list only drops what it names."""
        result = clean_data(raw_data, metadata_columns=['X', 'user_name', 'cvtd_timestamp', 'new_window'])

        cleaned = result['data']
        assert 'num_window' in cleaned.columns
        assert 'raw_timestamp_part_1' in cleaned.columns
        assert 'user_name' not in cleaned.columns


class TestMissingLabels:
    """Tests for rows without an outcome label."""

    def test_drop_unlabeled_rows(self):
        """NaN, None and blank labels are dropped."""
        df = pd.DataFrame({'classe': ['A', np.nan, None, ' ', 'B'], 'f1': np.arange(5.0)})

        kept = drop_unlabeled_rows(df)

        assert kept['classe'].tolist() == ['A', 'B']

    def test_no_label_column_is_noop(self):
        """Scoring tables without a label pass through."""
        df = pd.DataFrame({'f1': [1.0, 2.0]})

        assert drop_unlabeled_rows(df) is df

    def test_missing_label_removed_from_cleaned_table(self, sensor_frame_factory):
        """A missing label drops its row, not the label column."""
        raw = sensor_frame_factory(n_rows=100, n_features=60)
        raw.loc[3, 'classe'] = np.nan

        result = clean_data(raw)
        cleaned = result['data']

        assert not cleaned.isna().any().any()
        assert len(cleaned) == 99
        assert 3 not in cleaned.index
        assert result['n_unlabeled_rows'] == 1
        assert result['n_rows_removed'] == 0

    def test_cleaned_table_can_be_partitioned(self, sensor_frame_factory):
        """Stratified partitioning succeeds after a label went missing."""
        raw = sensor_frame_factory(n_rows=100, n_features=60)
        raw.loc[3, 'classe'] = np.nan

        partitions = partition_dataset(clean_data(raw)['data'])

        assert sum(len(part) for part in partitions.values()) == 99

    def test_transform_drops_unlabeled_rows(self, sensor_frame_factory):
        """The fitted cleaner filters unlabeled rows of a new table too."""
        cleaner = SensorDataCleaner().fit(sensor_frame_factory(n_rows=50, n_features=10))
        new = sensor_frame_factory(n_rows=20, n_features=10, seed=7)
        new.loc[[0, 5], 'classe'] = ""

        cleaned = cleaner.transform(new)

        assert len(cleaned) == 18
        assert (cleaned['classe'] != "").all()


class TestRowIndexColumns:
    """Tests for the shared row-index column names."""

    def test_metadata_defaults_cover_row_index(self):
        """Both row-index headers are dropped as metadata."""
        for col in ROW_INDEX_COLUMNS:
            assert col in DEFAULT_METADATA_COLUMNS

    def test_validation_accepts_default_metadata(self, raw_data):
        """Only one of the row-index headers needs to be present."""
        is_valid, report = validate_data(
            raw_data, metadata_columns=DEFAULT_METADATA_COLUMNS, strict=False
        )

        assert is_valid
        assert report['issues'] == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
