import warnings

import numpy as np
import pytest

from sentiment_lasso.config import ExperimentConfig
from sentiment_lasso.core.metrics import accuracy_score
from sentiment_lasso.data import LABEL_ORDER, Label
from sentiment_lasso.errors import ConvergenceWarning, DataError
from sentiment_lasso.features.pipeline import FeaturePipeline
from sentiment_lasso.features.tokenizer import Tokenizer
from sentiment_lasso.models.logistic_regression import (
    LassoClassifier,
    SentimentEstimator,
    create_lasso_factory,
    top_coefficients,
)


@pytest.fixture
def features(corpus):
    pipe = FeaturePipeline(Tokenizer(), max_tokens=100)
    fitted, X = pipe.fit_transform([d.text for d in corpus])
    return fitted, X, [d.label for d in corpus]


def test_probabilities_sum_to_one(features):
    _, X, y = features
    clf = LassoClassifier(max_iter=3000)
    model = clf.fit(X, y, lam=1e-3)
    pred = clf.predict(model, X)
    assert pred.probabilities.shape == (len(y), len(LABEL_ORDER))
    np.testing.assert_allclose(pred.probabilities.sum(axis=1), 1.0)
    assert accuracy_score(y, pred.labels) > 0.9


def test_model_shape_and_classes(features):
    fitted, X, y = features
    model = LassoClassifier(max_iter=3000).fit(X, y, lam=1e-3)
    assert model.coefficients.shape == (3, len(fitted.vocabulary))
    assert model.intercepts.shape == (3,)
    assert model.classes == LABEL_ORDER
    assert model.n_train == len(y)


def test_nonzero_count_shrinks_with_lambda(features):
    _, X, y = features
    clf = LassoClassifier(max_iter=5000)
    counts = [clf.fit(X, y, lam=lam).nonzero_count() for lam in (1e-3, 5e-2, 1.0)]
    assert counts[0] >= counts[1] >= counts[2]
    assert counts[0] > counts[2]
    # a huge penalty is the null model
    assert counts[2] == 0


def test_binary_model_single_row(binary_corpus):
    pipe = FeaturePipeline(Tokenizer(), max_tokens=100)
    fitted, X = pipe.fit_transform([d.text for d in binary_corpus])
    y = [d.label for d in binary_corpus]
    clf = LassoClassifier(max_iter=3000)
    model = clf.fit(X, y, lam=1e-3)
    assert model.coefficients.shape[0] == 1
    assert model.classes == (Label.POSITIVE, Label.NEGATIVE)
    pred = clf.predict(model, X)
    np.testing.assert_allclose(pred.probabilities.sum(axis=1), 1.0)
    # never trained on Neutral
    assert np.all(pred.probabilities[:, LABEL_ORDER.index(Label.NEUTRAL)] == 0.0)


def test_convergence_failure_is_recorded_not_fatal(features):
    _, X, y = features
    with pytest.warns(ConvergenceWarning):
        model = LassoClassifier(max_iter=1, tol=1e-12).fit(X, y, lam=1e-4)
    assert not model.converged
    assert model.warnings
    assert model.coefficients.shape[0] == 3


def test_single_label_rejected(features):
    _, X, _ = features
    with pytest.raises(DataError):
        LassoClassifier().fit(X, [Label.POSITIVE] * X.shape[0], lam=0.1)


def test_negative_lambda_rejected(features):
    _, X, y = features
    with pytest.raises(ValueError):
        LassoClassifier().fit(X, y, lam=-1.0)


def test_estimator_refits_features_per_fit(corpus):
    cfg = ExperimentConfig(max_tokens=50, max_iter=3000)
    factory = create_lasso_factory(cfg)
    est = factory(1e-3)
    assert isinstance(est, SentimentEstimator)
    est.fit(corpus[:45])
    first_vocab = est.vocabulary
    est.fit(corpus[45:])
    assert est.vocabulary.n_documents == len(corpus) - 45
    assert first_vocab.n_documents == 45
    labels = est.predict(["what a great and wonderful film", "awful boring mess"])
    assert labels == [Label.POSITIVE, Label.NEGATIVE]


def test_predict_before_fit_raises():
    with pytest.raises(RuntimeError):
        SentimentEstimator(ExperimentConfig(), 0.1).predict(["anything"])


def test_top_coefficients_table(corpus):
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConvergenceWarning)
        est = SentimentEstimator(ExperimentConfig(max_tokens=100, max_iter=3000), 1e-3).fit(corpus)
    table = top_coefficients(est.model, est.vocabulary, top_n=3)
    assert list(table.columns) == ["class", "token", "coefficient"]
    assert set(table["class"]) <= {lab.value for lab in LABEL_ORDER}
    assert (table.groupby("class").size() <= 3).all()
    pos = table[table["class"] == "Positive"]
    assert pos["coefficient"].abs().is_monotonic_decreasing


def test_fit_does_not_leak_penalty_deprecation_notices(features):
    _, X, y = features
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        LassoClassifier(max_iter=3000).fit(X, y, lam=1e-3)
    assert not [w for w in caught if "penalty" in str(w.message)]
