#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Classification Metrics Implementation from Scratch

This module implements the evaluation metrics used during tuning and testing
without sklearn.metrics:
- Accuracy
- Sensitivity (recall) and specificity, one-vs-rest per class
- Precision and F1 (macro)
- ROC-AUC, one-vs-rest, macro-averaged
- Confusion Matrix (rows = true label, columns = predicted label)
- Classification Report

Labels default to the fixed three-way sentiment order, so every confusion
matrix is 3x3 with the same row/column meaning.
"""

import numpy as np
from typing import Dict, List, Optional, Sequence, Union
from scipy.stats import rankdata

from ..data import LABEL_ORDER


def _check_lengths(y_true, y_pred):
    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")


def _labels(labels: Optional[Sequence]) -> List:
    return list(LABEL_ORDER) if labels is None else list(labels)


def confusion_matrix(
    y_true: Sequence, y_pred: Sequence, labels: Optional[Sequence] = None
) -> np.ndarray:
    """
    Compute confusion matrix from scratch.

    Args:
        y_true: Ground truth labels
        y_pred: Predicted labels
        labels: Row/column order (defaults to LABEL_ORDER)

    Returns:
        Confusion matrix as 2D numpy array
    """
    _check_lengths(y_true, y_pred)
    labels = _labels(labels)
    label_to_idx = {label: i for i, label in enumerate(labels)}

    cm = np.zeros((len(labels), len(labels)), dtype=int)
    for true_label, pred_label in zip(y_true, y_pred):
        try:
            cm[label_to_idx[true_label], label_to_idx[pred_label]] += 1
        except KeyError as exc:
            raise ValueError(f"Label {exc.args[0]!r} not in {labels}") from None
    return cm


def accuracy_score(y_true: Sequence, y_pred: Sequence) -> float:
    """
    Compute accuracy score from scratch.

    Returns:
        Fraction of predictions equal to the ground truth (0.0 for empty input)
    """
    _check_lengths(y_true, y_pred)
    if len(y_true) == 0:
        return 0.0
    correct = sum(1 for t, p in zip(y_true, y_pred) if t == p)
    return correct / len(y_true)


def _one_vs_rest_counts(cm: np.ndarray):
    tp = np.diag(cm).astype(float)
    fn = cm.sum(axis=1) - tp
    fp = cm.sum(axis=0) - tp
    tn = cm.sum() - tp - fn - fp
    return tp, fp, fn, tn


def _safe_ratio(num: np.ndarray, den: np.ndarray) -> np.ndarray:
    out = np.zeros_like(num, dtype=float)
    np.divide(num, den, out=out, where=den > 0)
    return out


def _average(per_class: np.ndarray, support: np.ndarray, average: Optional[str]):
    if average is None:
        return per_class
    if average == "macro":
        # classes absent from y_true carry no information
        present = support > 0
        if not present.any():
            return 0.0
        return float(np.mean(per_class[present]))
    if average == "weighted":
        if support.sum() == 0:
            return 0.0
        return float(np.average(per_class, weights=support))
    raise ValueError(f"Unknown averaging strategy: {average}")


def sensitivity_score(
    y_true: Sequence,
    y_pred: Sequence,
    average: Optional[str] = "macro",
    labels: Optional[Sequence] = None,
) -> Union[float, np.ndarray]:
    """
    Sensitivity (true positive rate, recall) per class, one-vs-rest.

    Args:
        average: 'macro' (over classes present in y_true), 'weighted', or None
            for the per-class array in label order
    """
    cm = confusion_matrix(y_true, y_pred, labels)
    tp, fp, fn, tn = _one_vs_rest_counts(cm)
    return _average(_safe_ratio(tp, tp + fn), cm.sum(axis=1), average)


def specificity_score(
    y_true: Sequence,
    y_pred: Sequence,
    average: Optional[str] = "macro",
    labels: Optional[Sequence] = None,
) -> Union[float, np.ndarray]:
    """Specificity (true negative rate) per class, one-vs-rest."""
    cm = confusion_matrix(y_true, y_pred, labels)
    tp, fp, fn, tn = _one_vs_rest_counts(cm)
    return _average(_safe_ratio(tn, tn + fp), cm.sum(axis=1), average)


def precision_score(
    y_true: Sequence,
    y_pred: Sequence,
    average: Optional[str] = "macro",
    labels: Optional[Sequence] = None,
) -> Union[float, np.ndarray]:
    """Precision per class; classes never predicted score 0."""
    cm = confusion_matrix(y_true, y_pred, labels)
    tp, fp, fn, tn = _one_vs_rest_counts(cm)
    return _average(_safe_ratio(tp, tp + fp), cm.sum(axis=1), average)


def f1_score(
    y_true: Sequence,
    y_pred: Sequence,
    average: Optional[str] = "macro",
    labels: Optional[Sequence] = None,
) -> Union[float, np.ndarray]:
    """Per-class F1 (harmonic mean of precision and recall), then averaged."""
    cm = confusion_matrix(y_true, y_pred, labels)
    tp, fp, fn, tn = _one_vs_rest_counts(cm)
    return _average(_safe_ratio(2 * tp, 2 * tp + fp + fn), cm.sum(axis=1), average)


def roc_auc_score(
    y_true: Sequence,
    y_score: np.ndarray,
    average: Optional[str] = "macro",
    labels: Optional[Sequence] = None,
) -> Union[float, np.ndarray]:
    """
    One-vs-rest ROC-AUC from scratch (Mann-Whitney U with tie-averaged ranks).

    Args:
        y_true: Ground truth labels
        y_score: (n_samples, n_labels) class probabilities, columns in label order
        average: 'macro' over classes that have both positives and negatives,
            or None for the per-class array (nan where undefined)

    Returns:
        AUC score(s); nan when no class is scorable
    """
    labels = _labels(labels)
    y_score = np.asarray(y_score, dtype=float)
    if y_score.ndim != 2 or y_score.shape != (len(y_true), len(labels)):
        raise ValueError(
            f"y_score must have shape ({len(y_true)}, {len(labels)}), got {y_score.shape}"
        )

    aucs = np.full(len(labels), np.nan)
    for i, lab in enumerate(labels):
        pos = np.array([t == lab for t in y_true], dtype=bool)
        n_pos = int(pos.sum())
        n_neg = len(pos) - n_pos
        if n_pos == 0 or n_neg == 0:
            continue
        ranks = rankdata(y_score[:, i])
        aucs[i] = (ranks[pos].sum() - n_pos * (n_pos + 1) / 2.0) / (n_pos * n_neg)

    if average is None:
        return aucs
    if average != "macro":
        raise ValueError(f"Unknown averaging strategy: {average}")
    valid = ~np.isnan(aucs)
    return float(np.mean(aucs[valid])) if valid.any() else float("nan")


def classification_report(
    y_true: Sequence,
    y_pred: Sequence,
    labels: Optional[Sequence] = None,
    digits: int = 2,
) -> str:
    """
    Generate classification report from scratch.

    Returns:
        Formatted table of precision, sensitivity, specificity, F1 and support
    """
    labels = _labels(labels)
    names = [getattr(lab, "value", str(lab)) for lab in labels]
    cm = confusion_matrix(y_true, y_pred, labels)
    support = cm.sum(axis=1)

    precision = precision_score(y_true, y_pred, average=None, labels=labels)
    sens = sensitivity_score(y_true, y_pred, average=None, labels=labels)
    spec = specificity_score(y_true, y_pred, average=None, labels=labels)
    f1 = f1_score(y_true, y_pred, average=None, labels=labels)

    width = max(max(len(n) for n in names), len("macro avg"))
    cols = ("precision", "sens", "spec", "f1-score", "support")
    report = f"{'':>{width}} " + " ".join(f"{c:>9}" for c in cols) + "\n\n"
    for name, p, r, s, f, n in zip(names, precision, sens, spec, f1, support):
        report += (
            f"{name:>{width}} {p:>9.{digits}f} {r:>9.{digits}f} "
            f"{s:>9.{digits}f} {f:>9.{digits}f} {n:>9}\n"
        )
    report += "\n"
    report += f"{'accuracy':>{width}} {'':>9} {'':>9} {'':>9} {accuracy_score(y_true, y_pred):>9.{digits}f} {support.sum():>9}\n"
    present = support > 0
    report += (
        f"{'macro avg':>{width}} {precision[present].mean():>9.{digits}f} "
        f"{sens[present].mean():>9.{digits}f} {spec[present].mean():>9.{digits}f} "
        f"{f1[present].mean():>9.{digits}f} {support.sum():>9}\n"
    )
    return report


def compute_all_metrics(
    y_true: Sequence,
    y_pred: Sequence,
    y_score: Optional[np.ndarray] = None,
    labels: Optional[Sequence] = None,
) -> Dict[str, float]:
    """
    Compute all standard classification metrics.

    Args:
        y_true: Ground truth labels
        y_pred: Predicted labels
        y_score: Optional class probabilities for ROC-AUC

    Returns:
        Dictionary containing all metrics (roc_auc is nan without scores)
    """
    return {
        "accuracy": accuracy_score(y_true, y_pred),
        "sensitivity": sensitivity_score(y_true, y_pred, average="macro", labels=labels),
        "specificity": specificity_score(y_true, y_pred, average="macro", labels=labels),
        "roc_auc": (
            roc_auc_score(y_true, y_score, average="macro", labels=labels)
            if y_score is not None
            else float("nan")
        ),
        "precision": precision_score(y_true, y_pred, average="macro", labels=labels),
        "f1": f1_score(y_true, y_pred, average="macro", labels=labels),
    }
