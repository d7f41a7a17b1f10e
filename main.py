#!/usr/bin/env python3
"""
Exercise Quality Analysis - Main Pipeline
=========================================

Orchestrates the analysis of the Weight Lifting Exercise sensor dataset.

Phases:
    1. Cleaning - Drop summary rows, incomplete and metadata columns
    2. Partitioning - Stratified 60/20/20 train/test/cv split
    3. EDA - Class distribution and predictor correlation matrix
    4. Sweep - Learning curve over the random-forest complexity limit
    5. Training - Final unrestricted random forest
    6. Evaluation - Accuracy per partition and variable importance

Usage:
    # Run complete pipeline
    python main.py --data data/raw/pml-training.csv

    # Run up to a specific phase
    python main.py --data data/raw/pml-training.csv --phase sweep

    # Run with custom config
    python main.py --data data/raw/pml-training.csv --config config/config.yaml
"""

import argparse
import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional

import pandas as pd
import matplotlib.pyplot as plt

from exercise_quality.data_loader import load_config, load_data, validate_data, print_data_summary
from exercise_quality.cleaning import clean_data, print_cleaning_summary
from exercise_quality.partitioning import StratifiedPartitioner, split_features_labels, print_partition_summary
from exercise_quality.eda import generate_eda_report, print_correlation_insights
from exercise_quality.learning_curve import (
    complexity_limits, run_complexity_sweep, plot_learning_curve, print_sweep_summary
)
from exercise_quality.model import train_model, print_model_summary, ExerciseQualityClassifier
from exercise_quality.evaluation import evaluate_model, print_evaluation_report

PHASES = ['clean', 'split', 'eda', 'sweep', 'train', 'evaluate']


def setup_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """Configure logging for the pipeline."""
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        log_file = Path(log_dir) / f'pipeline_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def _label_column(config: Dict[str, Any]) -> str:
    return config.get('cleaning', {}).get('label_column', 'classe')


def _figures_dir(config: Dict[str, Any]) -> str:
    return config.get('output', {}).get('figures_path', 'reports/figures/')


def run_cleaning(df: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Execute Phase 1: Data Cleaning.

    Args:
        df: Raw data
        config: Configuration dictionary

    Returns:
        Cleaning result dictionary
    """
    print("\n" + "=" * 70)
    print("PHASE 1: DATA CLEANING")
    print("=" * 70)

    clean_config = config.get('cleaning', {})

    result = clean_data(
        df,
        label_column=_label_column(config),
        flag_column=clean_config.get('flag_column', 'new_window'),
        flag_value=clean_config.get('flag_value', 'yes'),
        metadata_columns=clean_config.get('metadata_columns')
    )

    print_cleaning_summary(result)

    return result


def run_partitioning(cleaned: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, pd.DataFrame]:
    """
    Execute Phase 2: Stratified Partitioning.

    Args:
        cleaned: Cleaned data
        config: Configuration dictionary

    Returns:
        Dictionary with 'train', 'test' and 'cv' partitions
    """
    print("\n" + "=" * 70)
    print("PHASE 2: PARTITIONING")
    print("=" * 70)

    part_config = config.get('partition', {})

    partitioner = StratifiedPartitioner(
        label_column=_label_column(config),
        train_fraction=part_config.get('train_fraction', 0.6),
        random_state=part_config.get('random_state', 42)
    )
    partitions = partitioner.split(cleaned)

    print_partition_summary(partitions, _label_column(config))

    return partitions


def run_eda(train: pd.DataFrame, config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Execute Phase 3: Exploratory Data Analysis on the training partition.

    Args:
        train: Training partition
        config: Configuration dictionary

    Returns:
        EDA report dictionary
    """
    print("\n" + "=" * 70)
    print("PHASE 3: EXPLORATORY DATA ANALYSIS")
    print("=" * 70)

    output_dir = _figures_dir(config)

    threshold = config.get('eda', {}).get('correlation_threshold', 0.8)

    report = generate_eda_report(
        train,
        label_column=_label_column(config),
        output_dir=output_dir,
        correlation_threshold=threshold,
        show_plots=False
    )

    print_correlation_insights(report["correlation_matrix"], threshold=threshold)

    print(f"\n✓ EDA complete. {len(report['figures'])} figures saved to {output_dir}")

    return report


def run_sweep(partitions: Dict[str, pd.DataFrame], config: Dict[str, Any]) -> pd.DataFrame:
    """
    Execute Phase 4: Complexity Sweep (learning curve).

    Args:
        partitions: Partition dictionary
        config: Configuration dictionary

    Returns:
        Sweep DataFrame
    """
    print("\n" + "=" * 70)
    print("PHASE 4: COMPLEXITY SWEEP")
    print("=" * 70)

    sweep_config = config.get('sweep', {})
    model_config = config.get('model', {})

    limits = complexity_limits(
        start=sweep_config.get('start', 100),
        stop=sweep_config.get('stop', 1000),
        step=sweep_config.get('step', 100)
    )

    sweep = run_complexity_sweep(
        partitions['train'],
        partitions['cv'],
        label_column=_label_column(config),
        limits=limits,
        n_estimators=sweep_config.get('n_estimators', model_config.get('n_estimators', 500)),
        random_state=model_config.get('random_state', 42),
        n_jobs=model_config.get('n_jobs', -1)
    )

    figures_dir = Path(_figures_dir(config))
    figures_dir.mkdir(parents=True, exist_ok=True)
    plot_learning_curve(sweep, save_path=str(figures_dir / "sweep_learning_curve.png"))
    plt.close('all')

    print_sweep_summary(sweep)

    return sweep


def run_training(partitions: Dict[str, pd.DataFrame], config: Dict[str, Any]) -> ExerciseQualityClassifier:
    """
    Execute Phase 5: Final Model Training.

    Args:
        partitions: Partition dictionary
        config: Configuration dictionary

    Returns:
        Trained model
    """
    print("\n" + "=" * 70)
    print("PHASE 5: MODEL TRAINING")
    print("=" * 70)

    X_train, y_train = split_features_labels(partitions['train'], _label_column(config))

    model = train_model(
        X_train,
        y_train,
        config,
        save_path=config.get('output', {}).get('model_path')
    )

    print_model_summary(model)

    return model


def run_evaluation(
    model: ExerciseQualityClassifier,
    partitions: Dict[str, pd.DataFrame],
    config: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Execute Phase 6: Model Evaluation.

    Args:
        model: Trained model
        partitions: Partition dictionary
        config: Configuration dictionary

    Returns:
        Evaluation result dictionary
    """
    print("\n" + "=" * 70)
    print("PHASE 6: MODEL EVALUATION")
    print("=" * 70)

    eval_config = config.get('evaluation', {})
    top_n = eval_config.get('top_n', 20)

    result = evaluate_model(
        model,
        partitions,
        label_column=_label_column(config),
        output_dir=_figures_dir(config),
        top_n=top_n,
        permutation_repeats=eval_config.get('permutation_repeats', 0),
        show_plots=False
    )

    print_evaluation_report(result, top_n=top_n)

    return result


def run_pipeline(
    data_path: str,
    config_path: str = "config/config.yaml",
    until: str = 'evaluate',
    verbose: bool = False
) -> Dict[str, Any]:
    """
    Execute the pipeline from loading up to and including a phase.

    Args:
        data_path: Path to input CSV file
        config_path: Path to configuration file
        until: Last phase to run (one of PHASES)
        verbose: Force DEBUG logging

    Returns:
        Dictionary containing all phase results
    """
    if until not in PHASES:
        raise ValueError(f"Unknown phase: {until}. Choose from: {', '.join(PHASES)}")

    config = load_config(config_path)
    log_config = config.get('logging', {})
    setup_logging(
        'DEBUG' if verbose else log_config.get('level', 'INFO'),
        log_dir=log_config.get('log_dir')
    )

    print("\n" + "=" * 70)
    print("EXERCISE QUALITY ANALYSIS PIPELINE")
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 70)

    print("\n📊 Loading data...")
    df = load_data(data_path, na_values=config.get('data', {}).get('na_values'))
    print_data_summary(df, _label_column(config))

    is_valid, _ = validate_data(
        df,
        label_column=_label_column(config),
        metadata_columns=config.get('cleaning', {}).get('metadata_columns'),
        strict=False
    )
    if not is_valid:
        print("⚠️  Data validation warnings detected. Proceeding anyway...")

    results = {'config': config, 'data_shape': df.shape}
    stop = PHASES.index(until)

    results['cleaning'] = run_cleaning(df, config)
    if stop >= PHASES.index('split'):
        results['partitions'] = run_partitioning(results['cleaning']['data'], config)
    if stop >= PHASES.index('eda'):
        results['eda'] = run_eda(results['partitions']['train'], config)
    if stop >= PHASES.index('sweep') and config.get('sweep', {}).get('enabled', True):
        results['sweep'] = run_sweep(results['partitions'], config)
    if stop >= PHASES.index('train'):
        results['model'] = run_training(results['partitions'], config)
    if stop >= PHASES.index('evaluate'):
        results['evaluation'] = run_evaluation(results['model'], results['partitions'], config)

    print("\n" + "=" * 70)
    print("PIPELINE COMPLETE")
    print("=" * 70)
    print(f"  • Input data: {df.shape[0]} rows × {df.shape[1]} columns")
    print(f"  • Predictors kept: {len(results['cleaning']['feature_names'])}")
    if 'evaluation' in results:
        accuracy = results['evaluation']['metrics']['accuracy']
        print(f"  • Test accuracy: {accuracy['test'] * 100:.2f}%")
    print(f"Completed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 70 + "\n")

    return results


def main():
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        description="Random-forest analysis of weight lifting exercise quality",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --data data/raw/pml-training.csv
  python main.py --data data/raw/pml-training.csv --phase eda
  python main.py --data data/raw/pml-training.csv --config config/custom.yaml
        """
    )

    parser.add_argument(
        '--data', '-d',
        type=str,
        required=True,
        help='Path to the input CSV file'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        default='config/config.yaml',
        help='Path to configuration file (default: config/config.yaml)'
    )

    parser.add_argument(
        '--phase', '-p',
        type=str,
        choices=PHASES + ['all'],
        default='all',
        help='Last phase to run (default: all)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args()

    if not Path(args.data).exists():
        print(f"Error: Data file not found: {args.data}")
        print("\nPlease place the sensor CSV file in the specified location.")
        sys.exit(1)

    if not Path(args.config).exists():
        print(f"Error: Config file not found: {args.config}")
        sys.exit(1)

    until = PHASES[-1] if args.phase == 'all' else args.phase

    try:
        run_pipeline(args.data, args.config, until=until, verbose=args.verbose)
        return 0

    except Exception as e:
        logging.error(f"Pipeline failed: {e}", exc_info=True)
        print(f"\n❌ Pipeline failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
