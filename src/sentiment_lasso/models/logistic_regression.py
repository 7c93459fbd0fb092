# logistic_regression.py
import logging
import warnings
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy.special import expit, softmax
from sklearn.exceptions import ConvergenceWarning as SklearnConvergenceWarning
from sklearn.linear_model import LogisticRegression

from ..data import LABEL_ORDER, Document, Label
from ..errors import ConvergenceWarning, DataError
from ..features.pipeline import FeaturePipeline, FittedFeatures
from ..features.vocabulary import Vocabulary

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Model:
    """Fitted coefficients for one lambda on one training partition.

    With two classes the matrix has a single row (sklearn's binary convention):
    positive weights push towards classes[1].
    """

    coefficients: np.ndarray
    intercepts: np.ndarray
    classes: Tuple[Label, ...]
    lam: float
    n_train: int
    warnings: Tuple[str, ...] = ()

    @property
    def converged(self) -> bool:
        return not self.warnings

    def nonzero_count(self) -> int:
        return int(np.count_nonzero(self.coefficients))


@dataclass(frozen=True, eq=False)
class Prediction:
    labels: Tuple[Label, ...]
    # (n_docs, 3) in LABEL_ORDER, rows sum to 1
    probabilities: np.ndarray


def _lambda_to_c(lam: float, n_samples: int) -> float:
    # glmnet scaling: mean log-loss + lam * |w|_1  <=>  C = 1 / (lam * n)
    if lam == 0:
        return np.inf
    return 1.0 / (lam * n_samples)


class LassoClassifier:
    """Multinomial logistic regression with an L1 penalty (saga solver)."""

    def __init__(self, max_iter: int = 1000, tol: float = 1e-4, random_state: int = 42):
        self.max_iter = max_iter
        self.tol = tol
        self.random_state = random_state

    def fit(self, X, labels: Sequence[Label], lam: float) -> Model:
        if lam < 0:
            raise ValueError("lambda must be >= 0")
        if X.shape[0] != len(labels):
            raise DataError(
                f"{X.shape[0]} feature rows but {len(labels)} labels", stage="fit", lam=lam
            )
        y = np.array([LABEL_ORDER.index(Label.parse(lab)) for lab in labels])
        if len(np.unique(y)) < 2:
            raise DataError("Need at least two distinct labels to fit", stage="fit", lam=lam)

        clf = LogisticRegression(
            penalty="l1",
            C=_lambda_to_c(lam, X.shape[0]),
            solver="saga",
            max_iter=self.max_iter,
            tol=self.tol,
            random_state=self.random_state,
        )
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            # newer sklearn deprecates `penalty`; the fit is still pure L1
            warnings.filterwarnings("ignore", message=r".*\bpenalty\b", category=FutureWarning)
            warnings.filterwarnings("ignore", message=r"Inconsistent values: penalty", category=UserWarning)
            clf.fit(X, y)

        notes = []
        for w in caught:
            if issubclass(w.category, SklearnConvergenceWarning):
                notes.append(str(w.message))
            else:
                warnings.warn_explicit(w.message, w.category, w.filename, w.lineno)
        if notes:
            logger.debug("[fit] lambda=%.6g did not converge: %s", lam, notes[0])
            warnings.warn(
                f"Solver did not converge at lambda={lam:.6g}; coefficients are best-effort",
                ConvergenceWarning,
                stacklevel=2,
            )

        return Model(
            coefficients=clf.coef_.copy(),
            intercepts=clf.intercept_.copy(),
            classes=tuple(LABEL_ORDER[i] for i in clf.classes_),
            lam=float(lam),
            n_train=int(X.shape[0]),
            warnings=tuple(notes),
        )

    def predict(self, model: Model, X) -> Prediction:
        scores = np.asarray(X @ model.coefficients.T) + model.intercepts
        if len(model.classes) == 2:
            p1 = expit(scores[:, 0])
            proba = np.column_stack([1.0 - p1, p1])
        else:
            proba = softmax(scores, axis=1)

        full = np.zeros((proba.shape[0], len(LABEL_ORDER)))
        for j, lab in enumerate(model.classes):
            full[:, LABEL_ORDER.index(lab)] = proba[:, j]
        winners = np.argmax(proba, axis=1)
        return Prediction(
            labels=tuple(model.classes[j] for j in winners), probabilities=full
        )


class SentimentEstimator:
    """TF-IDF features + L1 logistic regression for one fixed lambda.

    Every fit() learns a fresh vocabulary and idf table from the documents it
    is given; predict() only transforms.
    """

    def __init__(self, config, lam: float):
        self.config = config
        self.lam = lam
        self.pipeline = FeaturePipeline.from_config(config)
        self.classifier = LassoClassifier(
            max_iter=config.max_iter, tol=config.tol, random_state=config.random_seed
        )
        self.features: Optional[FittedFeatures] = None
        self.model: Optional[Model] = None

    def fit(self, documents: Sequence[Document]) -> "SentimentEstimator":
        self.features, X = self.pipeline.fit_transform([d.text for d in documents])
        self.model = self.classifier.fit(X, [d.label for d in documents], self.lam)
        return self

    def _check_fitted(self):
        if self.model is None:
            raise RuntimeError("SentimentEstimator must be fit before predicting")

    def predict_full(self, texts: Sequence[str]) -> Prediction:
        self._check_fitted()
        X = self.pipeline.transform(list(texts), self.features)
        return self.classifier.predict(self.model, X)

    def predict(self, texts: Sequence[str]) -> List[Label]:
        return list(self.predict_full(texts).labels)

    def predict_proba(self, texts: Sequence[str]) -> np.ndarray:
        return self.predict_full(texts).probabilities

    @property
    def vocabulary(self) -> Vocabulary:
        self._check_fitted()
        return self.features.vocabulary


def create_lasso_factory(config) -> Callable[[float], SentimentEstimator]:
    """lambda -> unfitted SentimentEstimator; picklable, so joblib workers can use it."""
    return partial(SentimentEstimator, config)


def top_coefficients(model: Model, vocabulary: Vocabulary, top_n: int = 20) -> pd.DataFrame:
    """Largest nonzero coefficients per class, by absolute value."""
    row_classes = model.classes[1:] if len(model.classes) == 2 else model.classes
    rows = []
    for lab, coefs in zip(row_classes, model.coefficients):
        nz = np.flatnonzero(coefs)
        order = nz[np.argsort(-np.abs(coefs[nz]), kind="stable")][:top_n]
        for j in order:
            rows.append(
                {"class": lab.value, "token": vocabulary.tokens[j], "coefficient": float(coefs[j])}
            )
    return pd.DataFrame(rows, columns=["class", "token", "coefficient"])
