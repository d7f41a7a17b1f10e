"""
Exploratory Data Analysis (EDA) Module
======================================

Visual checks on the cleaned training partition.

Functions:
    - plot_correlation_matrix: Correlation heatmap of the predictors
    - plot_class_distribution: Bar chart of label counts
    - find_correlated_pairs: Predictor pairs above a correlation threshold
    - generate_eda_report: Full EDA report with all visualizations
"""

import logging
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

import pandas as pd
import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns

logger = logging.getLogger(__name__)

# Set style for all plots
plt.style.use('seaborn-v0_8-whitegrid')
sns.set_palette("husl")


def plot_correlation_matrix(
    df: pd.DataFrame,
    method: str = 'pearson',
    figsize: Tuple[int, int] = (16, 14),
    annot: Optional[bool] = None,
    save_path: Optional[str] = None
) -> Tuple[plt.Figure, pd.DataFrame]:
    """
    Create a correlation heatmap for all numerical columns.

    Args:
        df: DataFrame with numerical data
        method: Correlation method ('pearson', 'spearman', 'kendall')
        figsize: Figure size (width, height)
        annot: Print coefficients in cells (default: only for up to 12 columns)
        save_path: Path to save the figure (optional)

    Returns:
        Tuple of (Figure, correlation matrix DataFrame)
    """
    corr_matrix = df.select_dtypes(include=[np.number]).corr(method=method)

    if annot is None:
        annot = len(corr_matrix.columns) <= 12

    fig, ax = plt.subplots(figsize=figsize)

    mask = np.triu(np.ones_like(corr_matrix, dtype=bool), k=1)
    sns.heatmap(
        corr_matrix,
        mask=mask,
        annot=annot,
        fmt='.2f',
        cmap='RdYlBu_r',
        center=0,
        square=True,
        linewidths=0.5 if annot else 0,
        cbar_kws={"shrink": 0.8, "label": "Correlation"},
        ax=ax,
        vmin=-1,
        vmax=1
    )

    ax.set_title(f'Predictor Correlation Matrix ({method.capitalize()})',
                 fontsize=14, fontweight='bold')
    ax.tick_params(axis='both', labelsize=7)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Correlation matrix saved to {save_path}")

    return fig, corr_matrix


def plot_class_distribution(
    df: pd.DataFrame,
    label_column: str = "classe",
    figsize: Tuple[int, int] = (8, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Bar chart of rows per label class.

    Args:
        df: DataFrame including the label column
        label_column: Name of the outcome column
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    counts = df[label_column].value_counts().sort_index()

    fig, ax = plt.subplots(figsize=figsize)
    ax.bar(counts.index.astype(str), counts.values, alpha=0.8)

    for x, count in enumerate(counts.values):
        ax.text(x, count, f'{count}', ha='center', va='bottom', fontsize=9)

    ax.set_xlabel(label_column)
    ax.set_ylabel('Rows')
    ax.set_title('Class Distribution', fontsize=14, fontweight='bold')
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Class distribution plot saved to {save_path}")

    return fig


def find_correlated_pairs(
    corr_matrix: pd.DataFrame,
    threshold: float = 0.8
) -> List[Dict[str, Any]]:
    """
    List predictor pairs with |r| >= threshold, strongest first.

    Args:
        corr_matrix: Correlation matrix DataFrame
        threshold: Absolute correlation cut-off

    Returns:
        List of dicts with col1, col2 and correlation
    """
    pairs = []
    columns = corr_matrix.columns
    for i in range(len(columns)):
        for j in range(i + 1, len(columns)):
            corr_val = corr_matrix.iloc[i, j]
            if abs(corr_val) >= threshold:
                pairs.append({
                    "col1": columns[i],
                    "col2": columns[j],
                    "correlation": float(corr_val)
                })

    return sorted(pairs, key=lambda x: abs(x["correlation"]), reverse=True)


def generate_eda_report(
    df: pd.DataFrame,
    label_column: str = "classe",
    output_dir: str = "reports/figures/",
    correlation_threshold: float = 0.8,
    show_plots: bool = False
) -> Dict[str, Any]:
    """
    Generate the EDA report with all visualizations.

    Args:
        df: Cleaned DataFrame (typically the training partition)
        label_column: Name of the outcome column
        output_dir: Directory to save figures
        correlation_threshold: Minimum absolute correlation reported as a pair
        show_plots: Whether to display plots interactively

    Returns:
        Dictionary containing EDA results and file names
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    predictors = df.drop(columns=[label_column])

    report = {
        "data_shape": df.shape,
        "n_predictors": predictors.shape[1],
        "figures": [],
        "correlation_matrix": None,
        "correlated_pairs": []
    }

    logger.info("=" * 60)
    logger.info("STARTING EXPLORATORY DATA ANALYSIS")
    logger.info("=" * 60)

    logger.info("Plotting class distribution...")
    plot_class_distribution(
        df,
        label_column=label_column,
        save_path=str(output_dir / "01_class_distribution.png")
    )
    report["figures"].append("01_class_distribution.png")

    logger.info("Computing correlation matrix...")
    _, corr_matrix = plot_correlation_matrix(
        predictors,
        save_path=str(output_dir / "02_correlation_matrix.png")
    )
    report["figures"].append("02_correlation_matrix.png")
    report["correlation_matrix"] = corr_matrix
    report["correlated_pairs"] = find_correlated_pairs(corr_matrix, correlation_threshold)

    if show_plots:
        plt.show()
    else:
        plt.close('all')

    logger.info("=" * 60)
    logger.info("EDA COMPLETE - All figures saved to: %s", output_dir)
    logger.info("=" * 60)

    return report


def print_correlation_insights(corr_matrix: pd.DataFrame, threshold: float = 0.8) -> None:
    """
    Print insights about strongly correlated predictors.

    Args:
        corr_matrix: Correlation matrix DataFrame
        threshold: Correlation threshold for "strong" correlation
    """
    print("\n" + "=" * 50)
    print("CORRELATION INSIGHTS")
    print("=" * 50)

    strong_corr = find_correlated_pairs(corr_matrix, threshold)

    if strong_corr:
        print(f"\n{len(strong_corr)} predictor pairs with |r| >= {threshold}:")
        for item in strong_corr:
            direction = "positive" if item["correlation"] > 0 else "negative"
            print(f"  • {item['col1']} ↔ {item['col2']}: {item['correlation']:.3f} ({direction})")

        involved = {item["col1"] for item in strong_corr} | {item["col2"] for item in strong_corr}
        print(f"\n{len(involved)} of {len(corr_matrix.columns)} predictors are involved.")
        print("  - Random forests tolerate correlated inputs, so none are removed")
    else:
        print(f"\nNo strong correlations found (|r| >= {threshold})")

    print("=" * 50 + "\n")
