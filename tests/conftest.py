"""Shared fixtures: synthetic tables shaped like the raw sensor export."""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

CLASSES = ["A", "B", "C", "D", "E"]


def make_sensor_frame(
    n_rows: int = 100,
    n_features: int = 60,
    n_summary_rows: int = 0,
    seed: int = 42
) -> pd.DataFrame:
    """
    Build a raw-export-like table.

    Sensor rows carry balanced labels A-E and numeric readings. Summary rows
    (new_window == "yes") additionally fill the derived-statistic columns,
    which are missing or blank on every sensor row.
    """
    rng = np.random.RandomState(seed)
    n_total = n_rows + n_summary_rows

    labels = np.array(CLASSES)[np.arange(n_total) % len(CLASSES)]
    class_index = np.arange(n_total) % len(CLASSES)

    data = {
        "X": np.arange(1, n_total + 1),
        "user_name": np.array(["carlitos", "pedro", "adelmo", "charles"])[np.arange(n_total) % 4],
        "raw_timestamp_part_1": 1323084231 + np.arange(n_total),
        "raw_timestamp_part_2": rng.randint(0, 999999, n_total),
        "cvtd_timestamp": ["05/12/2011 11:23"] * n_total,
        "new_window": ["no"] * n_rows + ["yes"] * n_summary_rows,
        "num_window": np.arange(n_total) // 10 + 1,
    }

    for i in range(n_features):
        values = rng.randn(n_total)
        if i < 5:
            # A few informative predictors so the forest has something to learn
            values = values + class_index * 3.0
        data[f"sensor_{i + 1}"] = values

    summary_values = rng.randn(n_total)
    is_summary = np.arange(n_total) >= n_rows
    data["avg_roll_belt"] = np.where(is_summary, summary_values, np.nan)
    data["kurtosis_yaw_belt"] = np.where(is_summary, summary_values.round(3).astype(str), "")
    data["amplitude_yaw_belt"] = np.full(n_total, np.nan)

    data["classe"] = labels

    return pd.DataFrame(data)


@pytest.fixture
def sensor_frame_factory():
    """Factory for raw sensor tables of custom size."""
    return make_sensor_frame


@pytest.fixture
def raw_data():
    """100 sensor rows, 60 predictors, 10 window-summary rows."""
    return make_sensor_frame(n_rows=100, n_features=60, n_summary_rows=10)
