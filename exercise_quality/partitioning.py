"""
Partitioning Module
===================

Stratified train / test / cross-validation split of the cleaned table.

The training partition is drawn first (60% by default); the remainder is
halved into test and cross-validation partitions. Every split is stratified
on the label so each class keeps its share in every partition.
"""

import logging
from typing import Dict, Tuple

import pandas as pd
from sklearn.model_selection import train_test_split

logger = logging.getLogger(__name__)

PARTITION_NAMES = ('train', 'test', 'cv')


class StratifiedPartitioner:
    """Three-way stratified splitter keyed on the label column."""

    def __init__(
        self,
        label_column: str = "classe",
        train_fraction: float = 0.6,
        random_state: int = 42
    ):
        """
        Initialize the partitioner.

        Args:
            label_column: Column to stratify on
            train_fraction: Share of rows for the training partition
            random_state: Random seed for reproducibility
        """
        if not 0.0 < train_fraction < 1.0:
            raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")

        self.label_column = label_column
        self.train_fraction = train_fraction
        self.random_state = random_state

    def split(self, df: pd.DataFrame) -> Dict[str, pd.DataFrame]:
        """
        Split rows into train, test and cross-validation partitions.

        Args:
            df: Cleaned DataFrame including the label column

        Returns:
            Dictionary with 'train', 'test' and 'cv' DataFrames
        """
        if self.label_column not in df.columns:
            raise ValueError(f"Label column '{self.label_column}' not found")

        train, remainder = train_test_split(
            df,
            train_size=self.train_fraction,
            stratify=df[self.label_column],
            random_state=self.random_state
        )

        test, cv = train_test_split(
            remainder,
            test_size=0.5,
            stratify=remainder[self.label_column],
            random_state=self.random_state
        )

        logger.info(
            f"Stratified split: {len(train)} train, {len(test)} test, {len(cv)} cv "
            f"(seed={self.random_state})"
        )

        return {'train': train, 'test': test, 'cv': cv}


def split_features_labels(
    df: pd.DataFrame,
    label_column: str = "classe"
) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Separate predictors from the label.

    Args:
        df: DataFrame including the label column
        label_column: Name of the outcome column

    Returns:
        Tuple of (X, y)
    """
    return df.drop(columns=[label_column]), df[label_column]


def partition_dataset(
    df: pd.DataFrame,
    label_column: str = "classe",
    train_fraction: float = 0.6,
    random_state: int = 42
) -> Dict[str, pd.DataFrame]:
    """Split a cleaned table using a freshly configured StratifiedPartitioner."""
    partitioner = StratifiedPartitioner(
        label_column=label_column,
        train_fraction=train_fraction,
        random_state=random_state
    )
    return partitioner.split(df)


def print_partition_summary(
    partitions: Dict[str, pd.DataFrame],
    label_column: str = "classe"
) -> None:
    """
    Print partition sizes and per-class proportions.

    Args:
        partitions: Dictionary from StratifiedPartitioner.split
        label_column: Name of the outcome column
    """
    total = sum(len(partitions[name]) for name in PARTITION_NAMES)

    print("\n" + "=" * 50)
    print("PARTITION SUMMARY")
    print("=" * 50)

    for name in PARTITION_NAMES:
        part = partitions[name]
        print(f"{name:<6} {len(part):>7} rows ({len(part) / total * 100:.1f}%)")

    shares = pd.DataFrame({
        name: partitions[name][label_column].value_counts(normalize=True)
        for name in PARTITION_NAMES
    }).sort_index()

    print("\nClass proportions per partition:")
    print("-" * 40)
    print(shares.round(3).to_string())
    print("=" * 50 + "\n")
