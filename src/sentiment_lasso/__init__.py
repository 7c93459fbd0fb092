"""
Sentence-level sentiment classification with TF-IDF features and an
L1-regularized multinomial logistic regression, tuned by stratified k-fold
cross-validation.

Key modules:
- data: Label / Document records, corpus construction, hold-out split
- features: tokenizer, bounded vocabulary, TF-IDF transformer
- core: stratified fold splitter and from-scratch metrics
- models: L1 logistic regression and the majority-class baseline
- experiments: lambda tuning, nested CV, test evaluation, pipeline runner
"""

from .config import ExperimentConfig, make_lambda_grid
from .data import LABEL_ORDER, Document, Label
from .errors import (
    ConvergenceWarning,
    DataError,
    DegenerateFoldError,
    SentimentLassoError,
    VocabularyEmptyError,
)

__version__ = "0.1.0"

__all__ = [
    "ExperimentConfig",
    "make_lambda_grid",
    "LABEL_ORDER",
    "Document",
    "Label",
    "ConvergenceWarning",
    "DataError",
    "DegenerateFoldError",
    "SentimentLassoError",
    "VocabularyEmptyError",
]
