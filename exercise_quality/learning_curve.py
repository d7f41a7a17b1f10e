"""
Learning Curve Module
=====================

Sweeps the random-forest complexity limit (maximum terminal nodes per tree)
and records training and cross-validation accuracy at each value. A train
curve that keeps rising while the cv curve flattens is the overfitting
signal this diagnostic looks for.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from .model import ExerciseQualityClassifier
from .partitioning import split_features_labels

logger = logging.getLogger(__name__)


def complexity_limits(start: int = 100, stop: int = 1000, step: int = 100) -> List[int]:
    """Inclusive sequence of max_leaf_nodes values to sweep."""
    if start < 2 or step < 1 or stop < start:
        raise ValueError(
            f"Invalid sweep range: start={start}, stop={stop}, step={step}"
        )
    return list(range(start, stop + 1, step))


def run_complexity_sweep(
    train: pd.DataFrame,
    cv: pd.DataFrame,
    label_column: str = "classe",
    limits: Optional[Sequence[int]] = None,
    n_estimators: int = 500,
    random_state: int = 42,
    n_jobs: int = -1
) -> pd.DataFrame:
    """
    Fit one forest per complexity limit and score it on train and cv.

    Args:
        train: Training partition
        cv: Cross-validation partition
        label_column: Name of the outcome column
        limits: max_leaf_nodes values (default: 100 to 1000, step 100)
        n_estimators: Trees per forest
        random_state: Random seed for reproducibility
        n_jobs: Number of parallel jobs (-1 for all cores)

    Returns:
        DataFrame with columns max_leaf_nodes, train_accuracy, cv_accuracy
    """
    if limits is None:
        limits = complexity_limits()

    X_train, y_train = split_features_labels(train, label_column)
    X_cv, y_cv = split_features_labels(cv, label_column)

    logger.info("=" * 60)
    logger.info(f"STARTING COMPLEXITY SWEEP ({len(limits)} values)")
    logger.info("=" * 60)

    rows = []
    for limit in limits:
        model = ExerciseQualityClassifier(
            n_estimators=n_estimators,
            max_leaf_nodes=limit,
            random_state=random_state,
            n_jobs=n_jobs
        )
        model.fit(X_train, y_train)

        train_accuracy = model.score(X_train, y_train)
        cv_accuracy = model.score(X_cv, y_cv)

        logger.info(
            f"max_leaf_nodes={limit}: train={train_accuracy:.4f}, cv={cv_accuracy:.4f}"
        )
        rows.append({
            'max_leaf_nodes': int(limit),
            'train_accuracy': train_accuracy,
            'cv_accuracy': cv_accuracy
        })

    sweep = pd.DataFrame(rows, columns=['max_leaf_nodes', 'train_accuracy', 'cv_accuracy'])

    logger.info("=" * 60)
    logger.info("COMPLEXITY SWEEP COMPLETE")
    logger.info("=" * 60)

    return sweep


def plot_learning_curve(
    sweep: pd.DataFrame,
    figsize: Tuple[int, int] = (10, 6),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Plot train and cv accuracy against the complexity limit.

    Args:
        sweep: DataFrame from run_complexity_sweep
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    ax.plot(sweep['max_leaf_nodes'], sweep['train_accuracy'], 'o-',
            linewidth=2, label='Training')
    ax.plot(sweep['max_leaf_nodes'], sweep['cv_accuracy'], 's--',
            linewidth=2, label='Cross-validation')

    ax.set_xlabel('Max terminal nodes per tree')
    ax.set_ylabel('Accuracy')
    ax.set_title('Learning Curve - Accuracy vs Complexity Limit',
                 fontsize=14, fontweight='bold')
    ax.set_xticks(sweep['max_leaf_nodes'])
    ax.legend(loc='lower right')

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Learning curve saved to {save_path}")

    return fig


def print_sweep_summary(sweep: pd.DataFrame) -> None:
    """
    Print the sweep table with the train/cv gap for each limit.

    Args:
        sweep: DataFrame from run_complexity_sweep
    """
    print("\n" + "=" * 60)
    print("COMPLEXITY SWEEP")
    print("=" * 60)
    print(f"{'Max nodes':<12} {'Train (%)':<12} {'CV (%)':<12} {'Gap (pts)':<12}")
    print("-" * 60)

    for row in sweep.itertuples(index=False):
        gap = (row.train_accuracy - row.cv_accuracy) * 100
        print(f"{row.max_leaf_nodes:<12} {row.train_accuracy * 100:<12.2f} "
              f"{row.cv_accuracy * 100:<12.2f} {gap:<12.2f}")

    print("-" * 60)
    if len(sweep) > 0:
        best = sweep.loc[sweep['cv_accuracy'].idxmax()]
        print(f"Best cv accuracy: {best['cv_accuracy'] * 100:.2f}% "
              f"at max_leaf_nodes={int(best['max_leaf_nodes'])}")
        widest = float(np.max(sweep['train_accuracy'] - sweep['cv_accuracy'])) * 100
        print(f"Largest train/cv gap: {widest:.2f} pts")
    print("=" * 60 + "\n")
