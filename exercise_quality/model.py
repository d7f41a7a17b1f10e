"""
Model Training Module
=====================

Handles model training using scikit-learn's RandomForestClassifier.

Features:
    - Complexity limit via max_leaf_nodes (terminal nodes per tree)
    - Hyperparameter configuration via config file
    - Impurity and permutation feature importance
    - Model persistence (save/load)
    - Training progress logging
"""

import logging
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from datetime import datetime

import numpy as np
import pandas as pd
import joblib
from sklearn.ensemble import RandomForestClassifier
from sklearn.inspection import permutation_importance
from sklearn.metrics import accuracy_score

logger = logging.getLogger(__name__)

ArrayLike = Union[np.ndarray, pd.DataFrame]


class ExerciseQualityClassifier:
    """
    Random-forest classifier for exercise-performance quality.

    Keeps track of the predictor names it was trained on so importance
    scores can be reported per sensor column.
    """

    def __init__(
        self,
        n_estimators: int = 500,
        max_leaf_nodes: Optional[int] = None,
        random_state: int = 42,
        n_jobs: int = -1
    ):
        """
        Initialize the model with hyperparameters.

        Args:
            n_estimators: Number of trees in the forest
            max_leaf_nodes: Maximum terminal nodes per tree (None for unrestricted)
            random_state: Random seed for reproducibility
            n_jobs: Number of parallel jobs (-1 for all cores)
        """
        self.n_estimators = n_estimators
        self.max_leaf_nodes = max_leaf_nodes
        self.random_state = random_state
        self.n_jobs = n_jobs

        self.model: Optional[RandomForestClassifier] = None
        self.feature_names_: Optional[List[str]] = None
        self.classes_: Optional[np.ndarray] = None
        self.training_info: Dict[str, Any] = {}
        self._is_fitted = False

    def _create_estimator(self) -> RandomForestClassifier:
        """Create the underlying RandomForestClassifier."""
        return RandomForestClassifier(
            n_estimators=self.n_estimators,
            max_leaf_nodes=self.max_leaf_nodes,
            random_state=self.random_state,
            n_jobs=self.n_jobs
        )

    def _check_features(self, X: ArrayLike) -> ArrayLike:
        if isinstance(X, pd.DataFrame):
            absent = [col for col in self.feature_names_ if col not in X.columns]
            if absent:
                raise ValueError(f"Missing feature columns: {absent}")
            return X[self.feature_names_]

        if X.shape[1] != len(self.feature_names_):
            raise ValueError(
                f"Expected {len(self.feature_names_)} features, but got {X.shape[1]}"
            )
        return X

    def fit(self, X: ArrayLike, y: ArrayLike) -> 'ExerciseQualityClassifier':
        """
        Train the model on the provided data.

        Args:
            X: Predictors of shape (n_samples, n_features)
            y: Class labels of shape (n_samples,)

        Returns:
            Self for method chaining
        """
        start_time = datetime.now()

        logger.info(f"Training data shape: X={X.shape}, y={np.shape(y)}")
        logger.info(
            f"Hyperparameters: n_estimators={self.n_estimators}, "
            f"max_leaf_nodes={self.max_leaf_nodes}"
        )

        if isinstance(X, pd.DataFrame):
            self.feature_names_ = X.columns.tolist()
        else:
            self.feature_names_ = [f"feature_{i+1}" for i in range(X.shape[1])]

        self.model = self._create_estimator()
        self.model.fit(X, y)
        self.classes_ = self.model.classes_

        end_time = datetime.now()
        training_duration = (end_time - start_time).total_seconds()

        self.training_info = {
            'training_duration_seconds': training_duration,
            'n_samples': X.shape[0],
            'n_features': X.shape[1],
            'n_classes': len(self.classes_),
            'trained_at': end_time.isoformat(),
            'hyperparameters': {
                'n_estimators': self.n_estimators,
                'max_leaf_nodes': self.max_leaf_nodes
            }
        }

        self._is_fitted = True

        logger.info(f"Random forest trained in {training_duration:.2f} seconds")

        return self

    def predict(self, X: ArrayLike) -> np.ndarray:
        """
        Predict class labels.

        Args:
            X: Predictors of shape (n_samples, n_features)

        Returns:
            Predicted labels of shape (n_samples,)
        """
        if not self._is_fitted:
            raise ValueError("Model must be trained before prediction. Call fit() first.")

        return self.model.predict(self._check_features(X))

    def score(self, X: ArrayLike, y: ArrayLike) -> float:
        """Fraction of correctly predicted labels."""
        return float(accuracy_score(y, self.predict(X)))

    def get_feature_importances(self) -> pd.Series:
        """
        Get impurity-based feature importances.

        Returns:
            Series indexed by feature name, sorted from most to least important
        """
        if not self._is_fitted:
            raise ValueError("Model must be trained first.")

        importances = pd.Series(
            self.model.feature_importances_,
            index=self.feature_names_,
            name='importance'
        )
        return importances.sort_values(ascending=False)

    def get_permutation_importances(
        self,
        X: ArrayLike,
        y: ArrayLike,
        n_repeats: int = 5
    ) -> pd.DataFrame:
        """
        Mean decrease in accuracy when each feature is shuffled.

        Args:
            X: Held-out predictors
            y: Held-out labels
            n_repeats: Number of shuffles per feature

        Returns:
            DataFrame with 'importance_mean' and 'importance_std', sorted descending
        """
        if not self._is_fitted:
            raise ValueError("Model must be trained first.")

        result = permutation_importance(
            self.model,
            self._check_features(X),
            y,
            scoring='accuracy',
            n_repeats=n_repeats,
            random_state=self.random_state,
            n_jobs=self.n_jobs
        )

        importances = pd.DataFrame(
            {
                'importance_mean': result.importances_mean,
                'importance_std': result.importances_std
            },
            index=self.feature_names_
        )
        return importances.sort_values('importance_mean', ascending=False)

    def save(self, filepath: str) -> None:
        """
        Save the trained model to disk.

        Args:
            filepath: Path to save the model
        """
        if not self._is_fitted:
            raise ValueError("Cannot save untrained model.")

        state = {
            'model': self.model,
            'hyperparameters': {
                'n_estimators': self.n_estimators,
                'max_leaf_nodes': self.max_leaf_nodes,
                'random_state': self.random_state,
                'n_jobs': self.n_jobs
            },
            'feature_names_': self.feature_names_,
            'classes_': self.classes_,
            'training_info': self.training_info,
            '_is_fitted': self._is_fitted
        }

        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(state, filepath)
        logger.info(f"Model saved to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> 'ExerciseQualityClassifier':
        """
        Load a trained model from disk.

        Args:
            filepath: Path to the saved model

        Returns:
            Loaded ExerciseQualityClassifier instance
        """
        state = joblib.load(filepath)

        model = cls(**state['hyperparameters'])
        model.model = state['model']
        model.feature_names_ = state['feature_names_']
        model.classes_ = state['classes_']
        model.training_info = state['training_info']
        model._is_fitted = state['_is_fitted']

        logger.info(f"Model loaded from {filepath}")
        return model


def train_model(
    X_train: ArrayLike,
    y_train: ArrayLike,
    config: Dict[str, Any],
    save_path: Optional[str] = None
) -> ExerciseQualityClassifier:
    """
    Train the final model using configuration parameters.

    Args:
        X_train: Training predictors
        y_train: Training labels
        config: Full configuration dictionary (reads the 'model' section)
        save_path: Path to save the trained model (optional)

    Returns:
        Trained ExerciseQualityClassifier
    """
    model_config = config.get('model', {})

    model = ExerciseQualityClassifier(
        n_estimators=model_config.get('n_estimators', 500),
        max_leaf_nodes=model_config.get('max_leaf_nodes'),
        random_state=model_config.get('random_state', 42),
        n_jobs=model_config.get('n_jobs', -1)
    )

    logger.info("=" * 60)
    logger.info("STARTING MODEL TRAINING")
    logger.info("=" * 60)

    model.fit(X_train, y_train)

    logger.info("=" * 60)
    logger.info("MODEL TRAINING COMPLETE")
    logger.info("=" * 60)

    if save_path:
        model.save(save_path)

    return model


def print_model_summary(model: ExerciseQualityClassifier) -> None:
    """
    Print a summary of the trained model.

    Args:
        model: Trained model instance
    """
    print("\n" + "=" * 50)
    print("MODEL SUMMARY")
    print("=" * 50)
    print("Model Type: RandomForestClassifier")
    print(f"Number of trees: {model.n_estimators}")
    print(f"Max terminal nodes per tree: {model.max_leaf_nodes or 'unrestricted'}")

    if model.feature_names_ is not None:
        print(f"Number of predictors: {len(model.feature_names_)}")
    if model.classes_ is not None:
        print(f"Classes: {', '.join(str(c) for c in model.classes_)}")

    if model.training_info:
        print(f"\nTraining Info:")
        print(f"  - Duration: {model.training_info.get('training_duration_seconds', 0.0):.2f}s")
        print(f"  - Samples: {model.training_info.get('n_samples', 'N/A')}")

    print("=" * 50 + "\n")
