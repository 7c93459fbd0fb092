# errors.py
"""
Error taxonomy for the sentiment classification core.

Structural problems (bad input, degenerate folds, empty vocabularies) abort the
run; solver convergence problems are warnings attached to the (fold, lambda)
cell that produced them.
"""

from typing import Optional

from sklearn.exceptions import ConvergenceWarning as _SklearnConvergenceWarning


class SentimentLassoError(Exception):
    """Base error; carries the pipeline stage and, when known, the (fold, lambda) cell."""

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        fold: Optional[int] = None,
        lam: Optional[float] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.fold = fold
        self.lam = lam

    def with_context(
        self,
        stage: Optional[str] = None,
        fold: Optional[int] = None,
        lam: Optional[float] = None,
    ) -> "SentimentLassoError":
        # keep whatever was already known closer to the failure
        if self.stage is None:
            self.stage = stage
        if self.fold is None:
            self.fold = fold
        if self.lam is None:
            self.lam = lam
        return self

    def __str__(self) -> str:
        where = []
        if self.stage is not None:
            where.append(f"stage={self.stage}")
        if self.fold is not None:
            where.append(f"fold={self.fold}")
        if self.lam is not None:
            where.append(f"lambda={self.lam:.6g}")
        if not where:
            return self.message
        return f"[{', '.join(where)}] {self.message}"

    def __reduce__(self):
        # joblib workers pickle exceptions back to the parent
        return (type(self), (self.message, self.stage, self.fold, self.lam))


class DataError(SentimentLassoError):
    """Malformed or unlabeled input, rejected before any fold work starts."""


class DegenerateFoldError(SentimentLassoError):
    """A fold has no examples of a label that exists in the corpus."""


class VocabularyEmptyError(SentimentLassoError):
    """No token survived filtering across a whole training partition."""


class ConvergenceWarning(_SklearnConvergenceWarning):
    """The solver stopped before converging; coefficients are best-effort."""
