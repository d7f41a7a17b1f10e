"""
Test Suite for Learning Curve Module
====================================
"""

import pytest
import matplotlib.pyplot as plt

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from exercise_quality.cleaning import clean_data
from exercise_quality.partitioning import partition_dataset
from exercise_quality.learning_curve import (
    complexity_limits, run_complexity_sweep, plot_learning_curve, print_sweep_summary
)


@pytest.fixture
def partitions(sensor_frame_factory):
    """Stratified partitions of a small cleaned table."""
    cleaned = clean_data(sensor_frame_factory(n_rows=150, n_features=10))['data']
    return partition_dataset(cleaned, random_state=0)


@pytest.fixture
def sweep(partitions):
    """Three-point sweep with tiny forests."""
    return run_complexity_sweep(
        partitions['train'],
        partitions['cv'],
        limits=[2, 8, 32],
        n_estimators=5,
        random_state=0,
        n_jobs=1
    )


class TestComplexityLimits:
    """Tests for the sweep range helper."""

    def test_default_range(self):
        """Default sweep is 100 to 1000 in steps of 100, inclusive."""
        assert complexity_limits() == [100, 200, 300, 400, 500, 600, 700, 800, 900, 1000]

    def test_custom_range(self):
        """Custom ranges include the stop value when on a step."""
        assert complexity_limits(start=10, stop=30, step=10) == [10, 20, 30]

    @pytest.mark.parametrize("start,stop,step", [(1, 10, 1), (100, 50, 10), (100, 200, 0)])
    def test_invalid_range(self, start, stop, step):
        """Limits below two leaves, reversed ranges and zero steps are rejected."""
        with pytest.raises(ValueError, match="Invalid sweep range"):
            complexity_limits(start=start, stop=stop, step=step)


class TestRunComplexitySweep:
    """Tests for run_complexity_sweep."""

    def test_one_row_per_limit(self, sweep):
        """The sweep records a (limit, train, cv) triple per limit."""
        assert sweep.columns.tolist() == ['max_leaf_nodes', 'train_accuracy', 'cv_accuracy']
        assert sweep['max_leaf_nodes'].tolist() == [2, 8, 32]

    def test_accuracies_are_fractions(self, sweep):
        """Accuracy values lie in [0, 1]."""
        for col in ('train_accuracy', 'cv_accuracy'):
            assert sweep[col].between(0.0, 1.0).all()

    def test_more_leaves_fit_training_better(self, sweep):
        """Training accuracy at the largest limit beats a two-leaf forest."""
        assert sweep['train_accuracy'].iloc[-1] > sweep['train_accuracy'].iloc[0]


class TestReporting:
    """Tests for plotting and printing the sweep."""

    def test_plot_learning_curve_saves(self, sweep, tmp_path):
        """The plot is written to disk."""
        path = tmp_path / "curve.png"

        fig = plot_learning_curve(sweep, save_path=str(path))

        assert path.exists()
        assert len(fig.axes[0].lines) == 2
        plt.close(fig)

    def test_print_sweep_summary(self, sweep, capsys):
        """The summary lists every limit and the best cv value."""
        print_sweep_summary(sweep)

        out = capsys.readouterr().out
        assert "COMPLEXITY SWEEP" in out
        assert "Best cv accuracy" in out
        for limit in (2, 8, 32):
            assert str(limit) in out


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
