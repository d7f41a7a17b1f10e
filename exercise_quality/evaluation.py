"""
Model Evaluation Module
=======================

Accuracy on every partition plus diagnostics for the final model.

Features:
    - Accuracy on train, cross-validation and test partitions
    - Per-class precision / recall / F1 and confusion matrix (test)
    - Ranked impurity importance, optional permutation importance
    - Confusion matrix and feature importance plots
"""

import logging
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from sklearn.metrics import accuracy_score, classification_report, confusion_matrix

from .model import ExerciseQualityClassifier
from .partitioning import PARTITION_NAMES, split_features_labels

logger = logging.getLogger(__name__)


def calculate_accuracy(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Fraction of predicted labels equal to the true labels."""
    return float(accuracy_score(y_true, y_pred))


def evaluate_partitions(
    model: ExerciseQualityClassifier,
    partitions: Dict[str, pd.DataFrame],
    label_column: str = "classe"
) -> Dict[str, Any]:
    """
    Score the model on each partition.

    Args:
        model: Trained model
        partitions: Dictionary with 'train', 'test' and 'cv' DataFrames
        label_column: Name of the outcome column

    Returns:
        Dictionary with per-partition accuracy, test classification report
        and test confusion matrix
    """
    metrics = {'accuracy': {}}

    for name in PARTITION_NAMES:
        X, y = split_features_labels(partitions[name], label_column)
        y_pred = model.predict(X)
        metrics['accuracy'][name] = calculate_accuracy(y, y_pred)

        if name == 'test':
            labels = list(model.classes_)
            metrics['classification_report'] = classification_report(
                y, y_pred, labels=labels, output_dict=True, zero_division=0
            )
            metrics['confusion_matrix'] = pd.DataFrame(
                confusion_matrix(y, y_pred, labels=labels),
                index=labels,
                columns=labels
            )

    metrics['out_of_sample_error'] = 1.0 - metrics['accuracy']['test']
    return metrics


def plot_confusion_matrix(
    matrix: pd.DataFrame,
    figsize: Tuple[int, int] = (8, 6),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Heatmap of the confusion matrix (rows: actual, columns: predicted).

    Args:
        matrix: Confusion matrix DataFrame
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    sns.heatmap(
        matrix,
        annot=True,
        fmt='d',
        cmap='Blues',
        linewidths=0.5,
        cbar_kws={"shrink": 0.8, "label": "Count"},
        ax=ax
    )

    ax.set_xlabel('Predicted')
    ax.set_ylabel('Actual')
    ax.set_title('Confusion Matrix - Test Partition', fontsize=14, fontweight='bold')
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Confusion matrix saved to {save_path}")

    return fig


def plot_feature_importance(
    importances: pd.Series,
    top_n: int = 20,
    figsize: Tuple[int, int] = (10, 8),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Horizontal bar chart of the top-N most important predictors.

    Args:
        importances: Importance scores indexed by feature name
        top_n: Number of predictors to show
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    top = importances.sort_values(ascending=False).head(top_n)[::-1]

    fig, ax = plt.subplots(figsize=figsize)
    ax.barh(top.index, top.values, color='steelblue', alpha=0.8)
    ax.set_xlabel('Mean decrease in impurity')
    ax.set_title(f'Top {len(top)} Predictors by Importance', fontsize=14, fontweight='bold')

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Feature importance plot saved to {save_path}")

    return fig


def evaluate_model(
    model: ExerciseQualityClassifier,
    partitions: Dict[str, pd.DataFrame],
    label_column: str = "classe",
    output_dir: str = "reports/figures/",
    top_n: int = 20,
    permutation_repeats: int = 0,
    show_plots: bool = False
) -> Dict[str, Any]:
    """
    Run the complete evaluation of the final model.

    Args:
        model: Trained model
        partitions: Dictionary with 'train', 'test' and 'cv' DataFrames
        label_column: Name of the outcome column
        output_dir: Directory for figures
        top_n: Number of predictors in the importance plot
        permutation_repeats: Shuffles per feature for permutation importance
            on the cv partition (0 disables it)
        show_plots: Whether to display plots interactively

    Returns:
        Dictionary containing metrics, importances and figure names
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.info("=" * 60)
    logger.info("STARTING MODEL EVALUATION")
    logger.info("=" * 60)

    metrics = evaluate_partitions(model, partitions, label_column)
    importances = model.get_feature_importances()

    permutation = None
    if permutation_repeats > 0:
        logger.info(f"Computing permutation importance ({permutation_repeats} repeats)...")
        X_cv, y_cv = split_features_labels(partitions['cv'], label_column)
        permutation = model.get_permutation_importances(X_cv, y_cv, n_repeats=permutation_repeats)

    figures: List[str] = []

    logger.info("Generating confusion matrix...")
    plot_confusion_matrix(
        metrics['confusion_matrix'],
        save_path=str(output_dir / "eval_confusion_matrix.png")
    )
    figures.append("eval_confusion_matrix.png")

    logger.info("Generating feature importance plot...")
    plot_feature_importance(
        importances,
        top_n=top_n,
        save_path=str(output_dir / "eval_feature_importance.png")
    )
    figures.append("eval_feature_importance.png")

    if show_plots:
        plt.show()
    else:
        plt.close('all')

    result = {
        'metrics': metrics,
        'feature_importances': importances,
        'permutation_importances': permutation,
        'figures': figures
    }

    logger.info("=" * 60)
    logger.info("EVALUATION COMPLETE")
    for name in PARTITION_NAMES:
        logger.info(f"  {name} accuracy: {metrics['accuracy'][name]:.6f}")
    logger.info("=" * 60)

    return result


def print_evaluation_report(result: Dict[str, Any], top_n: int = 20) -> None:
    """
    Print a formatted evaluation report to console.

    Args:
        result: Result dictionary from evaluate_model
        top_n: Number of predictors listed in the importance table
    """
    metrics = result['metrics']

    print("\n" + "=" * 70)
    print("MODEL EVALUATION REPORT")
    print("=" * 70)

    print("\nAccuracy:")
    print("-" * 70)
    labels = {'train': 'Training', 'cv': 'Cross-validation', 'test': 'Test'}
    for name in ('train', 'cv', 'test'):
        print(f"  • {labels[name]:<18} {metrics['accuracy'][name] * 100:.2f}%")
    print(f"  • Estimated out-of-sample error: {metrics['out_of_sample_error'] * 100:.2f}%")

    print("\nPer-Class Metrics (test):")
    print("-" * 70)
    print(f"{'Class':<10} {'Precision':<12} {'Recall':<12} {'F1':<12} {'Support':<10}")
    print("-" * 70)
    report = metrics['classification_report']
    for label in metrics['confusion_matrix'].index:
        row = report[str(label)]
        print(f"{str(label):<10} {row['precision']:<12.4f} {row['recall']:<12.4f} "
              f"{row['f1-score']:<12.4f} {int(row['support']):<10}")

    print("\nConfusion Matrix (test, rows = actual):")
    print("-" * 70)
    print(metrics['confusion_matrix'].to_string())

    importances = result['feature_importances'].head(top_n)
    permutation = result.get('permutation_importances')

    print(f"\nVariable Importance (top {len(importances)}):")
    print("-" * 70)
    if permutation is not None:
        print(f"{'Rank':<6} {'Predictor':<24} {'Impurity':<12} {'Permutation':<12}")
        print("-" * 70)
        for rank, (name, score) in enumerate(importances.items(), start=1):
            perm = permutation.loc[name, 'importance_mean']
            print(f"{rank:<6} {name:<24} {score:<12.4f} {perm:<12.4f}")
    else:
        print(f"{'Rank':<6} {'Predictor':<24} {'Impurity':<12}")
        print("-" * 70)
        for rank, (name, score) in enumerate(importances.items(), start=1):
            print(f"{rank:<6} {name:<24} {score:<12.4f}")

    print("=" * 70 + "\n")
