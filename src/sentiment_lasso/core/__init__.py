# Core components for sentiment classification

from .cross_validation import FoldAssignment, stratified_kfold, iter_splits, check_folds
from .metrics import (
    accuracy_score,
    sensitivity_score,
    specificity_score,
    precision_score,
    f1_score,
    roc_auc_score,
    confusion_matrix,
    classification_report,
    compute_all_metrics,
)

__all__ = [
    "FoldAssignment",
    "stratified_kfold",
    "iter_splits",
    "check_folds",
    "accuracy_score",
    "sensitivity_score",
    "specificity_score",
    "precision_score",
    "f1_score",
    "roc_auc_score",
    "confusion_matrix",
    "classification_report",
    "compute_all_metrics",
]
