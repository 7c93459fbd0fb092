import math

import numpy as np
import pytest

from sentiment_lasso.core.metrics import (
    accuracy_score,
    classification_report,
    compute_all_metrics,
    confusion_matrix,
    f1_score,
    roc_auc_score,
    sensitivity_score,
    specificity_score,
)
from sentiment_lasso.data import Label

P, N, U = Label.POSITIVE, Label.NEGATIVE, Label.NEUTRAL

Y_TRUE = [P, P, P, N, N, U]
Y_PRED = [P, P, N, N, U, U]


def test_confusion_matrix_fixed_order():
    cm = confusion_matrix(Y_TRUE, Y_PRED)
    # rows = true (Positive, Negative, Neutral), columns = predicted
    assert cm.tolist() == [[2, 1, 0], [0, 1, 1], [0, 0, 1]]
    # labels missing from the data still get a row and column
    assert confusion_matrix([P], [P]).shape == (3, 3)


def test_accuracy():
    assert accuracy_score(Y_TRUE, Y_PRED) == pytest.approx(4 / 6)
    assert accuracy_score([], []) == 0.0
    with pytest.raises(ValueError):
        accuracy_score([P], [P, N])


def test_sensitivity_and_specificity_one_vs_rest():
    sens = sensitivity_score(Y_TRUE, Y_PRED, average=None)
    spec = specificity_score(Y_TRUE, Y_PRED, average=None)
    np.testing.assert_allclose(sens, [2 / 3, 1 / 2, 1.0])
    # Positive: tn=3, fp=0; Negative: tn=3, fp=1; Neutral: tn=4, fp=1
    np.testing.assert_allclose(spec, [1.0, 3 / 4, 4 / 5])
    assert sensitivity_score(Y_TRUE, Y_PRED) == pytest.approx((2 / 3 + 1 / 2 + 1) / 3)


def test_macro_average_skips_absent_classes():
    assert sensitivity_score([P, P, N], [P, N, N]) == pytest.approx((0.5 + 1.0) / 2)


def test_f1_per_class():
    f1 = f1_score(Y_TRUE, Y_PRED, average=None)
    np.testing.assert_allclose(f1, [0.8, 0.5, 2 / 3])


def test_roc_auc_perfect_and_uninformative():
    y = [P, P, N, N]
    perfect = np.array([[0.9, 0.1, 0.0], [0.8, 0.2, 0.0], [0.3, 0.7, 0.0], [0.1, 0.9, 0.0]])
    assert roc_auc_score(y, perfect) == pytest.approx(1.0)
    flat = np.full((4, 3), 1 / 3)
    assert roc_auc_score(y, flat) == pytest.approx(0.5)


def test_roc_auc_per_class_nan_when_class_absent():
    y = [P, P, N, N]
    scores = np.array([[0.6, 0.4, 0.0], [0.4, 0.6, 0.0], [0.7, 0.3, 0.0], [0.2, 0.8, 0.0]])
    per_class = roc_auc_score(y, scores, average=None)
    # positives ranked 3 and 2 among 4 for class P -> (5 - 3) / 4
    assert per_class[0] == pytest.approx(0.5)
    assert math.isnan(per_class[2])


def test_roc_auc_shape_checked():
    with pytest.raises(ValueError):
        roc_auc_score([P, N], np.zeros((2, 2)))


def test_compute_all_metrics_keys():
    m = compute_all_metrics(Y_TRUE, Y_PRED)
    assert set(m) == {"accuracy", "sensitivity", "specificity", "roc_auc", "precision", "f1"}
    assert math.isnan(m["roc_auc"])


def test_classification_report_lists_labels():
    report = classification_report(Y_TRUE, Y_PRED)
    for name in ("Positive", "Negative", "Neutral", "accuracy", "macro avg"):
        assert name in report
