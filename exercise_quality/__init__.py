"""
Exercise Quality Analysis
=========================

Random-forest classification of weight lifting exercise quality from
wearable sensor readings.

Modules:
    - data_loader: Configuration, CSV ingestion and validation
    - cleaning: Summary-row, incomplete and metadata column removal
    - partitioning: Stratified train/test/cross-validation split
    - eda: Class distribution and correlation matrix
    - learning_curve: Accuracy sweep over the complexity limit
    - model: Random-forest training with RandomForestClassifier
    - evaluation: Accuracy per partition and variable importance
"""

__version__ = "1.0.0"
__author__ = "Exercise Quality Analysis Team"
