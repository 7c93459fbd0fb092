#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Hyperparameter Tuning Implementation

This module selects the L1 penalty (lambda) of the sentiment classifier by
stratified k-fold cross-validation.

Features:
- One independent fit per (fold, lambda) cell, sequential or on a joblib pool
- Append-only metric records per cell, convergence warnings attached
- Per-lambda aggregation (mean, standard error) across folds
- Best-metric and one-standard-error selection rules
- Nested CV for an unbiased estimate of the whole tuning procedure
"""

import logging
import math
import warnings
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from ..config import ExperimentConfig
from ..core.cross_validation import check_folds, iter_splits, stratified_kfold
from ..core.metrics import accuracy_score, compute_all_metrics
from ..data import Document, validate_documents
from ..errors import ConvergenceWarning, SentimentLassoError
from ..models.logistic_regression import SentimentEstimator, create_lasso_factory
from ..models.null_baseline import NullBaseline

logger = logging.getLogger(__name__)

# metrics recorded for every cell; "nonzero" is the coefficient count
CELL_METRICS = ("accuracy", "sensitivity", "specificity", "roc_auc")


@dataclass(frozen=True)
class MetricRecord:
    fold: int
    lam: float
    metric: str
    value: float
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LambdaSummary:
    lam: float
    metric: str
    mean: float
    std_err: float
    n_folds: int


@dataclass(frozen=True)
class TuningResult:
    records: Tuple[MetricRecord, ...]
    summaries: Tuple[LambdaSummary, ...]
    selection_metric: str
    selection_rule: str
    best_lambda: float
    selected_lambda: float
    null_accuracy: Tuple[float, ...]

    def summary_for(self, metric: str) -> List[LambdaSummary]:
        return sorted((s for s in self.summaries if s.metric == metric), key=lambda s: s.lam)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "fold": r.fold,
                    "lambda": r.lam,
                    "metric": r.metric,
                    "value": r.value,
                    "warnings": "; ".join(r.warnings),
                }
                for r in self.records
            ],
            columns=["fold", "lambda", "metric", "value", "warnings"],
        )

    def summary_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {"lambda": s.lam, "metric": s.metric, "mean": s.mean,
                 "std_err": s.std_err, "n_folds": s.n_folds}
                for s in self.summaries
            ],
            columns=["lambda", "metric", "mean", "std_err", "n_folds"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selection_metric": self.selection_metric,
            "selection_rule": self.selection_rule,
            "best_lambda": self.best_lambda,
            "selected_lambda": self.selected_lambda,
            "null_accuracy": list(self.null_accuracy),
            "summaries": self.summary_frame().to_dict(orient="records"),
            "unconverged_cells": sorted(
                {(r.fold, r.lam) for r in self.records if r.warnings}
            ),
        }


def run_cell(
    estimator_factory: Callable[[float], SentimentEstimator],
    fold_id: int,
    lam: float,
    train_docs: Sequence[Document],
    val_docs: Sequence[Document],
) -> List[MetricRecord]:
    """Fit on one fold's training slice at one lambda, score its validation slice."""
    try:
        with warnings.catch_warnings():
            # kept on the model and copied onto every record of this cell
            warnings.simplefilter("ignore", ConvergenceWarning)
            est = estimator_factory(lam).fit(train_docs)
        pred = est.predict_full([d.text for d in val_docs])
    except SentimentLassoError as exc:
        raise exc.with_context(stage="tuning", fold=fold_id, lam=lam)

    y_val = [d.label for d in val_docs]
    metrics = compute_all_metrics(y_val, pred.labels, pred.probabilities)
    notes = est.model.warnings
    records = [MetricRecord(fold_id, lam, m, float(metrics[m]), notes) for m in CELL_METRICS]
    records.append(MetricRecord(fold_id, lam, "nonzero", float(est.model.nonzero_count()), notes))
    return records


def aggregate_records(records: Sequence[MetricRecord]) -> Tuple[LambdaSummary, ...]:
    """Group by (lambda, metric); mean and standard error over folds (nan folds skipped)."""
    df = pd.DataFrame(
        [(r.lam, r.metric, r.value) for r in records], columns=["lam", "metric", "value"]
    )
    if df.empty:
        return ()
    agg = df.groupby(["lam", "metric"])["value"].agg(mean="mean", std="std", n="count").reset_index()
    out = []
    for row in agg.itertuples(index=False):
        n = int(row.n)
        se = float(row.std) / math.sqrt(n) if n > 1 and not np.isnan(row.std) else 0.0
        out.append(LambdaSummary(float(row.lam), row.metric, float(row.mean), se, n))
    return tuple(sorted(out, key=lambda s: (s.lam, s.metric)))


def select_lambda(
    summaries: Sequence[LambdaSummary], metric: str, rule: str
) -> Tuple[float, float]:
    """
    Returns (best_lambda, selected_lambda).

    best-metric: highest mean, ties going to the larger lambda.
    one-standard-error: largest lambda whose mean is within one standard error
    of the best mean.
    """
    rows = sorted(
        (s for s in summaries if s.metric == metric and not np.isnan(s.mean)),
        key=lambda s: s.lam,
    )
    if not rows:
        raise SentimentLassoError(f"No finite '{metric}' values to select on", stage="selection")

    best = rows[0]
    for s in rows[1:]:
        if s.mean >= best.mean:
            best = s
    if rule == "best-metric":
        return best.lam, best.lam
    if rule == "one-standard-error":
        threshold = best.mean - best.std_err
        selected = max(s.lam for s in rows if s.mean >= threshold)
        return best.lam, selected
    raise ValueError(f"Unknown selection rule: {rule}")


class HyperparameterTuner:
    """
    Lambda search with stratified k-fold cross-validation.

    Each call to tune() returns a new TuningResult; nothing is carried over
    between runs.
    """

    def __init__(
        self,
        config: ExperimentConfig,
        estimator_factory: Optional[Callable[[float], SentimentEstimator]] = None,
    ):
        self.config = config
        self.estimator_factory = estimator_factory or create_lasso_factory(config)

    def tune(self, documents: Sequence[Document]) -> TuningResult:
        cfg = self.config
        validate_documents(documents)
        assignment = stratified_kfold(documents, cfg.k_folds, cfg.random_seed)
        check_folds(documents, assignment)
        splits = list(iter_splits(documents, assignment))

        logger.info(
            "[tune] %d documents, %d folds x %d lambdas = %d fits (n_jobs=%d)",
            len(documents), cfg.k_folds, len(cfg.lambda_grid),
            cfg.k_folds * len(cfg.lambda_grid), cfg.n_jobs,
        )

        null_acc = []
        for fi, train, val in splits:
            baseline = NullBaseline().fit([d.label for d in train])
            null_acc.append(accuracy_score([d.label for d in val], baseline.predict(val)))

        factory = self.estimator_factory
        cells = [(fi, lam, train, val) for fi, train, val in splits for lam in cfg.lambda_grid]
        if cfg.n_jobs == 1:
            results = [run_cell(factory, fi, lam, tr, va) for fi, lam, tr, va in cells]
        else:
            results = Parallel(n_jobs=cfg.n_jobs)(
                delayed(run_cell)(factory, fi, lam, tr, va) for fi, lam, tr, va in cells
            )

        records = tuple(
            sorted(
                (r for cell in results for r in cell),
                key=lambda r: (r.lam, r.fold, r.metric),
            )
        )
        unconverged = sorted({(r.fold, r.lam) for r in records if r.warnings})
        if unconverged:
            logger.warning(
                "[tune] solver did not converge in %d cell(s), e.g. fold=%d lambda=%.6g",
                len(unconverged), unconverged[0][0], unconverged[0][1],
            )

        summaries = aggregate_records(records)
        best, selected = select_lambda(summaries, cfg.selection_metric, cfg.selection_rule)
        by_lam = {s.lam: s for s in summaries if s.metric == cfg.selection_metric}
        logger.info(
            "[tune] best lambda=%.6g (%s=%.4f +/- %.4f); selected lambda=%.6g by %s",
            best, cfg.selection_metric, by_lam[best].mean, by_lam[best].std_err,
            selected, cfg.selection_rule,
        )
        logger.info("[tune] null baseline accuracy: %.4f", float(np.mean(null_acc)))

        return TuningResult(
            records=records,
            summaries=summaries,
            selection_metric=cfg.selection_metric,
            selection_rule=cfg.selection_rule,
            best_lambda=best,
            selected_lambda=selected,
            null_accuracy=tuple(float(a) for a in null_acc),
        )


@dataclass(frozen=True)
class OuterFoldResult:
    fold: int
    selected_lambda: float
    metrics: Dict[str, float]


@dataclass(frozen=True)
class NestedCVResult:
    folds: Tuple[OuterFoldResult, ...]
    metric: str

    @property
    def mean(self) -> float:
        return float(np.nanmean([f.metrics[self.metric] for f in self.folds]))

    @property
    def std(self) -> float:
        return float(np.nanstd([f.metrics[self.metric] for f in self.folds]))


def nested_cv(
    documents: Sequence[Document],
    config: ExperimentConfig,
    outer_k: int = 5,
    factory_builder: Optional[Callable[[ExperimentConfig], Callable[[float], SentimentEstimator]]] = None,
) -> NestedCVResult:
    """
    Tune on each outer training fold, refit at the chosen lambda, score the outer fold.

    factory_builder maps the inner config to a lambda -> estimator factory
    (defaults to create_lasso_factory).
    """
    validate_documents(documents)
    outer = stratified_kfold(documents, outer_k, config.random_seed)
    check_folds(documents, outer)

    make_factory = factory_builder or create_lasso_factory
    results = []
    for oi, train, test in iter_splits(documents, outer):
        logger.info("[nested] outer fold %d/%d", oi + 1, outer_k)
        inner_cfg = config.override(random_seed=config.random_seed + oi + 1)
        try:
            factory = make_factory(inner_cfg)
            tuning = HyperparameterTuner(inner_cfg, factory).tune(train)
        except SentimentLassoError as exc:
            raise exc.with_context(stage=f"nested outer fold {oi}")

        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConvergenceWarning)
            est = factory(tuning.selected_lambda).fit(train)
        pred = est.predict_full([d.text for d in test])
        metrics = compute_all_metrics([d.label for d in test], pred.labels, pred.probabilities)
        results.append(OuterFoldResult(oi, tuning.selected_lambda, metrics))
        logger.info(
            "[nested] fold %d: lambda=%.6g acc=%.4f %s=%.4f",
            oi, tuning.selected_lambda, metrics["accuracy"],
            config.selection_metric, metrics[config.selection_metric],
        )

    res = NestedCVResult(folds=tuple(results), metric=config.selection_metric)
    logger.info("[nested] mean %s: %.4f +/- %.4f", res.metric, res.mean, res.std)
    return res
