"""
Data Loader Module
==================

Handles configuration, CSV ingestion and basic data quality checks for the
Weight Lifting Exercise sensor dataset.

Functions:
    - load_config: Load YAML configuration file
    - load_data: Load CSV data, mapping the export's missing-value tokens to NaN
    - validate_data: Check data quality constraints
    - get_data_summary: Generate basic statistics
"""

import os
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional, Sequence, Tuple

import pandas as pd
import numpy as np
import yaml

logger = logging.getLogger(__name__)

# Tokens the raw export writes for missing or undefined values
DEFAULT_NA_VALUES = ["NA", "", "#DIV/0!"]

LABEL_COLUMN = "classe"

# The row index is exported as "X" or read back by pandas as "Unnamed: 0"
ROW_INDEX_COLUMNS = ("X", "Unnamed: 0")


def load_config(config_path: str = "config/config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to the configuration file

    Returns:
        Dictionary containing configuration parameters

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is malformed
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    logger.info(f"Loaded configuration from {config_path}")
    return config


def load_data(
    file_path: str,
    na_values: Optional[Sequence[str]] = None,
    expected_columns: Optional[int] = None
) -> pd.DataFrame:
    """
    Load the sensor CSV into a DataFrame.

    Args:
        file_path: Path to the CSV file
        na_values: Strings to read as missing (default: NA, empty, #DIV/0!)
        expected_columns: Expected number of columns (optional validation)

    Returns:
        DataFrame containing the loaded data

    Raises:
        FileNotFoundError: If data file doesn't exist
        ValueError: If the column count doesn't match expected_columns
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Data file not found: {file_path}")

    if na_values is None:
        na_values = DEFAULT_NA_VALUES

    df = pd.read_csv(file_path, na_values=list(na_values), low_memory=False)
    logger.info(f"Loaded data from {file_path}: {df.shape[0]} rows × {df.shape[1]} columns")

    if expected_columns is not None and df.shape[1] != expected_columns:
        raise ValueError(
            f"Expected {expected_columns} columns, but found {df.shape[1]}. "
            f"Columns: {list(df.columns)}"
        )

    return df


def validate_data(
    df: pd.DataFrame,
    label_column: str = LABEL_COLUMN,
    metadata_columns: Optional[List[str]] = None,
    strict: bool = True
) -> Tuple[bool, Dict[str, Any]]:
    """
    Validate data quality constraints before cleaning.

    Checks:
        - Label column is present and has no missing values
        - Expected metadata columns are present
        - Every label class has enough rows to stratify
        - Missing values and duplicate rows

    Args:
        df: DataFrame to validate
        label_column: Name of the outcome column
        metadata_columns: Non-sensor columns expected in the raw export
        strict: If True, raise errors on validation failure

    Returns:
        Tuple of (is_valid, validation_report)
    """
    report = {
        "total_rows": len(df),
        "total_columns": len(df.columns),
        "issues": []
    }

    if label_column not in df.columns:
        issue = f"Label column '{label_column}' not found"
        report["issues"].append(issue)
        logger.warning(issue)
    else:
        labels = df[label_column]
        n_missing_labels = int(labels.isna().sum())
        if n_missing_labels > 0:
            issue = f"Label column '{label_column}' has {n_missing_labels} missing values"
            report["issues"].append(issue)
            logger.warning(issue)

        class_counts = labels.value_counts().sort_index()
        report["class_counts"] = {str(k): int(v) for k, v in class_counts.items()}

        # Two splits need at least one row per class in each of three partitions
        sparse = class_counts[class_counts < 3]
        if len(sparse) > 0:
            issue = f"Classes with fewer than 3 rows cannot be stratified: {list(sparse.index)}"
            report["issues"].append(issue)
            logger.warning(issue)

    if metadata_columns:
        absent = [col for col in metadata_columns if col not in df.columns]
        # The row index is exported under one of two headers
        absent = [col for col in absent if col not in ROW_INDEX_COLUMNS]
        if absent:
            issue = f"Metadata columns not found: {absent}"
            report["issues"].append(issue)
            logger.warning(issue)

    missing_counts = df.isnull().sum()
    total_missing = int(missing_counts.sum())
    report["columns_with_missing"] = int((missing_counts > 0).sum())
    if total_missing > 0:
        missing_pct = (total_missing / (df.shape[0] * df.shape[1])) * 100
        # Expected on the raw export, so informational only
        logger.info(
            f"Missing values: {total_missing} ({missing_pct:.2f}%) "
            f"across {report['columns_with_missing']} columns"
        )

    duplicates = int(df.duplicated().sum())
    if duplicates > 0:
        issue = f"Duplicate rows found: {duplicates}"
        report["issues"].append(issue)
        logger.warning(issue)

    is_valid = len(report["issues"]) == 0
    report["is_valid"] = is_valid

    if strict and not is_valid:
        raise ValueError(f"Data validation failed: {report['issues']}")

    return is_valid, report


def get_data_summary(df: pd.DataFrame, label_column: str = LABEL_COLUMN) -> Dict[str, Any]:
    """
    Generate summary statistics for the dataset.

    Args:
        df: DataFrame to summarize
        label_column: Name of the outcome column

    Returns:
        Dictionary containing summary statistics
    """
    missing = df.isnull().sum()

    summary = {
        "shape": df.shape,
        "n_numeric": len(df.select_dtypes(include=[np.number]).columns),
        "n_non_numeric": len(df.select_dtypes(exclude=[np.number]).columns),
        "memory_usage_mb": df.memory_usage(deep=True).sum() / 1024 / 1024,
        "n_complete_columns": int((missing == 0).sum()),
        "n_empty_columns": int((missing == len(df)).sum()),
        "class_distribution": {}
    }

    if label_column in df.columns:
        counts = df[label_column].value_counts().sort_index()
        summary["class_distribution"] = {str(k): int(v) for k, v in counts.items()}

    return summary


def print_data_summary(df: pd.DataFrame, label_column: str = LABEL_COLUMN) -> None:
    """
    Print a formatted summary of the dataset to console.

    Args:
        df: DataFrame to summarize
        label_column: Name of the outcome column
    """
    summary = get_data_summary(df, label_column)

    print("\n" + "=" * 60)
    print("DATASET SUMMARY")
    print("=" * 60)
    print(f"Shape: {df.shape[0]} rows × {df.shape[1]} columns")
    print(f"Memory Usage: {summary['memory_usage_mb'] * 1024:.2f} KB")
    print(f"Numeric columns: {summary['n_numeric']}")
    print(f"Non-numeric columns: {summary['n_non_numeric']}")
    print(f"Complete columns (no missing values): {summary['n_complete_columns']}")
    print(f"Entirely empty columns: {summary['n_empty_columns']}")

    if summary["class_distribution"]:
        print(f"\nClass distribution ({label_column}):")
        print("-" * 40)
        total = sum(summary["class_distribution"].values())
        for label, count in summary["class_distribution"].items():
            print(f"  {label}: {count} ({count / total * 100:.1f}%)")

    print("=" * 60 + "\n")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    try:
        config = load_config()
        print("Configuration loaded successfully!")
        print(f"Train fraction: {config['partition']['train_fraction']}")
    except FileNotFoundError as e:
        print(f"Config not found: {e}")

    data_path = "data/raw/pml-training.csv"
    if os.path.exists(data_path):
        df = load_data(data_path)
        print_data_summary(df)
        is_valid, report = validate_data(df, strict=False)
        print(f"Validation passed: {is_valid}")
    else:
        print(f"No data file found at {data_path}")
        print("Place the training CSV there to test the data loader.")
