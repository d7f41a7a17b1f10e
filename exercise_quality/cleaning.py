"""
Data Cleaning Module
====================

Reduces the raw sensor export to a table of numeric predictors plus the
outcome label.

Steps:
    1. Drop window-summary rows (new_window == "yes") and rows without a label
    2. Drop every column holding a missing value anywhere
    3. Drop the identifier/timestamp/window metadata columns
    4. Drop any other non-numeric column except the label

Assumption: the window-summary rows are the only rows carrying the derived
statistics (averages, variances, kurtosis...), so once they are removed the
remaining columns hold raw sensor readings. This is not checked.
"""

import logging
from typing import Dict, Any, List, Optional

import pandas as pd
import numpy as np

from exercise_quality.data_loader import ROW_INDEX_COLUMNS

logger = logging.getLogger(__name__)

SUMMARY_FLAG_COLUMN = "new_window"
SUMMARY_FLAG_VALUE = "yes"

DEFAULT_METADATA_COLUMNS = [
    *ROW_INDEX_COLUMNS,
    "user_name",
    "raw_timestamp_part_1",
    "raw_timestamp_part_2",
    "cvtd_timestamp",
    "new_window",
    "num_window",
]


def remove_summary_rows(
    df: pd.DataFrame,
    flag_column: str = SUMMARY_FLAG_COLUMN,
    flag_value: str = SUMMARY_FLAG_VALUE
) -> pd.DataFrame:
    """
    Drop rows flagged as window-summary statistics.

    Matching ignores case and surrounding whitespace. Tables without the
    flag column are returned unchanged.
    """
    if flag_column not in df.columns:
        logger.debug(f"No '{flag_column}' column, skipping summary row filter")
        return df

    flags = df[flag_column].astype(str).str.strip().str.lower()
    keep = flags != str(flag_value).strip().lower()
    logger.info(f"Removing {int((~keep).sum())} window-summary rows")
    return df.loc[keep]


def drop_unlabeled_rows(df: pd.DataFrame, label_column: str = "classe") -> pd.DataFrame:
    """
    Drop rows whose label is missing or blank.

    Tables without the label column are returned unchanged.
    """
    if label_column not in df.columns:
        return df

    labels = df[label_column]
    blank = labels.map(lambda v: isinstance(v, str) and v.strip() == "").astype(bool)
    keep = ~(labels.isna() | blank)
    if not keep.all():
        logger.warning(f"Removing {int((~keep).sum())} rows with a missing '{label_column}' value")
    return df.loc[keep]


def find_incomplete_columns(df: pd.DataFrame) -> List[str]:
    """
    Return columns holding at least one missing value.

    NaN, None and blank strings all count as missing, so columns that are
    empty for every row are included.
    """
    missing = df.isna()

    for col in df.select_dtypes(include=["object", "string"]).columns:
        values = df[col]
        blank = values.map(lambda v: isinstance(v, str) and v.strip() == "")
        missing[col] = missing[col] | blank.astype(bool)

    return missing.columns[missing.any(axis=0)].tolist()


class SensorDataCleaner:
    """
    Cleaning step for the raw sensor table.

    ``fit`` learns which predictor columns survive on the training export;
    ``transform`` applies the row filter and selects exactly those columns,
    so a scoring table ends up with the training schema.
    """

    def __init__(
        self,
        label_column: str = "classe",
        flag_column: str = SUMMARY_FLAG_COLUMN,
        flag_value: str = SUMMARY_FLAG_VALUE,
        metadata_columns: Optional[List[str]] = None
    ):
        """
        Initialize the cleaner.

        Args:
            label_column: Name of the outcome column
            flag_column: Column marking window-summary rows
            flag_value: Flag value identifying a summary row
            metadata_columns: Non-sensor columns to drop
        """
        self.label_column = label_column
        self.flag_column = flag_column
        self.flag_value = flag_value
        self.metadata_columns = (
            list(metadata_columns) if metadata_columns is not None
            else list(DEFAULT_METADATA_COLUMNS)
        )

        self.feature_columns: Optional[List[str]] = None
        self.removed_columns: Dict[str, List[str]] = {}
        self.n_rows_removed: int = 0
        self.n_unlabeled_rows: int = 0
        self._is_fitted = False

    def fit(self, df: pd.DataFrame) -> 'SensorDataCleaner':
        """
        Learn the predictor columns that survive cleaning.

        Args:
            df: Raw DataFrame

        Returns:
            Self for method chaining
        """
        rows = remove_summary_rows(df, self.flag_column, self.flag_value)
        labeled = drop_unlabeled_rows(rows, self.label_column)

        incomplete = [
            col for col in find_incomplete_columns(labeled) if col != self.label_column
        ]
        remaining = labeled.drop(columns=incomplete)

        metadata = [col for col in self.metadata_columns if col in remaining.columns]
        remaining = remaining.drop(columns=metadata)

        non_numeric = [
            col for col in remaining.select_dtypes(exclude=[np.number]).columns
            if col != self.label_column
        ]
        remaining = remaining.drop(columns=non_numeric)

        self.feature_columns = [col for col in remaining.columns if col != self.label_column]
        self.removed_columns = {
            'incomplete': incomplete,
            'metadata': metadata,
            'non_numeric': non_numeric
        }
        self.n_rows_removed = len(df) - len(rows)
        self.n_unlabeled_rows = len(rows) - len(labeled)

        logger.info(f"Dropped {len(incomplete)} columns with missing values")
        logger.info(f"Dropped {len(metadata)} metadata columns: {metadata}")
        if non_numeric:
            logger.warning(f"Dropped {len(non_numeric)} non-numeric columns: {non_numeric}")
        logger.info(f"Kept {len(self.feature_columns)} predictor columns")

        self._is_fitted = True
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Apply the row filter and select the fitted columns.

        The label column is kept when present, so unlabeled scoring tables
        can be transformed too.

        Args:
            df: Raw DataFrame

        Returns:
            Cleaned DataFrame (label first, then predictors)
        """
        if not self._is_fitted:
            raise ValueError("Cleaner must be fitted before transform. Call fit() first.")

        absent = [col for col in self.feature_columns if col not in df.columns]
        if absent:
            raise ValueError(f"Columns missing from input: {absent}")

        rows = remove_summary_rows(df, self.flag_column, self.flag_value)
        labeled = drop_unlabeled_rows(rows, self.label_column)

        columns = list(self.feature_columns)
        if self.label_column in labeled.columns:
            columns = [self.label_column] + columns

        return labeled[columns].copy()

    def fit_transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Fit and transform in one step."""
        self.fit(df)
        return self.transform(df)


def clean_data(
    df: pd.DataFrame,
    label_column: str = "classe",
    flag_column: str = SUMMARY_FLAG_COLUMN,
    flag_value: str = SUMMARY_FLAG_VALUE,
    metadata_columns: Optional[List[str]] = None
) -> Dict[str, Any]:
    """
    Complete cleaning pipeline for the raw sensor table.

    Args:
        df: Raw DataFrame
        label_column: Name of the outcome column
        flag_column: Column marking window-summary rows
        flag_value: Flag value identifying a summary row
        metadata_columns: Non-sensor columns to drop

    Returns:
        Dictionary containing:
            - data: Cleaned DataFrame
            - cleaner: Fitted SensorDataCleaner
            - feature_names: Kept predictor columns
            - removed_columns: Dropped columns grouped by reason
            - n_rows_removed: Number of summary rows dropped
            - n_unlabeled_rows: Number of rows dropped for a missing label
            - input_shape / output_shape
    """
    logger.info("=" * 60)
    logger.info("STARTING DATA CLEANING")
    logger.info("=" * 60)

    cleaner = SensorDataCleaner(
        label_column=label_column,
        flag_column=flag_column,
        flag_value=flag_value,
        metadata_columns=metadata_columns
    )
    cleaned = cleaner.fit_transform(df)

    result = {
        'data': cleaned,
        'cleaner': cleaner,
        'feature_names': list(cleaner.feature_columns),
        'removed_columns': cleaner.removed_columns,
        'n_rows_removed': cleaner.n_rows_removed,
        'n_unlabeled_rows': cleaner.n_unlabeled_rows,
        'input_shape': df.shape,
        'output_shape': cleaned.shape
    }

    logger.info("=" * 60)
    logger.info("CLEANING COMPLETE")
    logger.info(f"  Input: {df.shape[0]} rows × {df.shape[1]} columns")
    logger.info(f"  Output: {cleaned.shape[0]} rows × {cleaned.shape[1]} columns")
    logger.info("=" * 60)

    return result


def print_cleaning_summary(result: Dict[str, Any]) -> None:
    """
    Print a summary of the cleaning results.

    Args:
        result: Dictionary from clean_data
    """
    removed = result['removed_columns']

    print("\n" + "=" * 50)
    print("CLEANING SUMMARY")
    print("=" * 50)
    print(f"Input shape: {result['input_shape'][0]} rows × {result['input_shape'][1]} columns")
    print(f"Window-summary rows removed: {result['n_rows_removed']}")
    if result.get('n_unlabeled_rows'):
        print(f"Unlabeled rows removed: {result['n_unlabeled_rows']}")
    print(f"Columns with missing values removed: {len(removed['incomplete'])}")
    print(f"Metadata columns removed: {', '.join(removed['metadata']) or 'none'}")
    if removed['non_numeric']:
        print(f"Non-numeric columns removed: {', '.join(removed['non_numeric'])}")
    print(f"\nPredictors kept: {len(result['feature_names'])}")
    print(f"Output shape: {result['output_shape'][0]} rows × {result['output_shape'][1]} columns")
    print("=" * 50 + "\n")
