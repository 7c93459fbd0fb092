# Model implementations for sentiment classification

from .logistic_regression import (
    LassoClassifier,
    Model,
    Prediction,
    SentimentEstimator,
    create_lasso_factory,
    top_coefficients,
)
from .null_baseline import NullBaseline

__all__ = [
    "LassoClassifier",
    "Model",
    "Prediction",
    "SentimentEstimator",
    "create_lasso_factory",
    "top_coefficients",
    "NullBaseline",
]
