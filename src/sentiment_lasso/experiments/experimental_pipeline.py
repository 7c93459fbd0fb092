#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Main Experimental Pipeline for Sentence-Level Sentiment Classification

The pipeline coordinates:
1. Loading labeled sentences into immutable Documents
2. Stratified train/test hold-out
3. Lambda selection by stratified k-fold CV on the training partition
4. Optional nested CV estimate of the tuning procedure
5. Final refit and held-out test evaluation
6. Saving plain structured results (CSV/JSON) for downstream reporting
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..config import ExperimentConfig, configure_logging, make_lambda_grid
from ..data import Document, holdout_split, label_distribution, load_documents, validate_documents
from ..errors import SentimentLassoError
from .hyperparameter_tuning import HyperparameterTuner, NestedCVResult, TuningResult, nested_cv
from .test_evaluation import FinalEvaluation, evaluate_on_test

logger = logging.getLogger(__name__)


class ExperimentalPipeline:
    """
    Orchestrates one full experiment from a labeled corpus to saved results.

    Each step stores its (immutable) result on the pipeline so later steps and
    save_results() can use it; rerunning a step replaces the result wholesale.
    """

    def __init__(
        self,
        config: ExperimentConfig,
        results_dir: str = "results",
        nested_outer_k: Optional[int] = None,
    ):
        self.config = config
        self.results_dir = Path(results_dir)
        self.nested_outer_k = nested_outer_k
        self.documents: Optional[List[Document]] = None
        self.train_docs: Optional[List[Document]] = None
        self.test_docs: Optional[List[Document]] = None
        self.tuning: Optional[TuningResult] = None
        self.nested: Optional[NestedCVResult] = None
        self.final: Optional[FinalEvaluation] = None

    def load_documents(self, csv_path, text_col: str = "text", label_col: str = "label",
                       id_col: Optional[str] = None) -> List[Document]:
        logger.info("STEP 1: Loading data from %s", csv_path)
        self.documents = load_documents(csv_path, text_col=text_col, label_col=label_col, id_col=id_col)
        validate_documents(self.documents)
        return self.documents

    def split(self) -> None:
        logger.info("STEP 2: Train/test split (test_size=%.2f)", self.config.test_size)
        self.train_docs, self.test_docs = holdout_split(
            self.documents, test_size=self.config.test_size, random_state=self.config.random_seed
        )

    def run_hyperparameter_tuning(self) -> TuningResult:
        logger.info("STEP 3: Hyperparameter tuning (%s, %s)",
                    self.config.selection_rule, self.config.selection_metric)
        self.tuning = HyperparameterTuner(self.config).tune(self.train_docs)
        return self.tuning

    def run_nested_cv(self) -> NestedCVResult:
        logger.info("STEP 4: Nested CV (%d outer folds)", self.nested_outer_k)
        self.nested = nested_cv(self.train_docs, self.config, outer_k=self.nested_outer_k)
        return self.nested

    def run_test_evaluation(self) -> FinalEvaluation:
        logger.info("STEP 5: Final refit and test evaluation")
        self.final = evaluate_on_test(self.train_docs, self.test_docs, self.config, self.tuning)
        return self.final

    def run(self, documents: Sequence[Document]) -> FinalEvaluation:
        """Split, tune, optionally nest, evaluate, save. Strictly in that order."""
        self.documents = list(documents)
        validate_documents(self.documents)
        self.split()
        self.run_hyperparameter_tuning()
        if self.nested_outer_k:
            self.run_nested_cv()
        self.run_test_evaluation()
        self.save_results()
        return self.final

    def results_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"config": self.config.to_dict()}
        if self.train_docs is not None:
            out["data"] = {
                "train_size": len(self.train_docs),
                "test_size": len(self.test_docs),
                "train_balance": {k.value: v for k, v in label_distribution(self.train_docs).items()},
                "test_balance": {k.value: v for k, v in label_distribution(self.test_docs).items()},
            }
        if self.tuning is not None:
            out["hyperparameter_tuning"] = self.tuning.to_dict()
        if self.nested is not None:
            out["nested_cv"] = {
                "metric": self.nested.metric,
                "mean": self.nested.mean,
                "std": self.nested.std,
                "folds": [
                    {"fold": f.fold, "selected_lambda": f.selected_lambda, "metrics": f.metrics}
                    for f in self.nested.folds
                ],
            }
        if self.final is not None:
            out["test_evaluation"] = self.final.to_dict()
        return out

    def save_results(self) -> Path:
        logger.info("STEP 6: Saving results to %s", self.results_dir)
        self.results_dir.mkdir(parents=True, exist_ok=True)

        if self.tuning is not None:
            self.tuning.to_frame().to_csv(self.results_dir / "tuning_records.csv", index=False)
            self.tuning.summary_frame().to_csv(self.results_dir / "lambda_summary.csv", index=False)
        if self.final is not None:
            self.final.coefficients.to_csv(self.results_dir / "coefficients.csv", index=False)
            (self.results_dir / "classification_report.txt").write_text(
                self.final.report, encoding="utf-8"
            )

        results_path = self.results_dir / "experiment_results.json"
        with open(results_path, "w", encoding="utf-8") as f:
            # nan (e.g. undefined roc_auc) is written as NaN, which json.load reads back
            json.dump(self.results_dict(), f, indent=2, ensure_ascii=False)
        logger.info("Results saved to: %s", results_path)
        return results_path


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Tune and evaluate an L1 TF-IDF sentiment classifier")
    ap.add_argument("--csv", type=Path, required=True, help="CSV with one sentence per row")
    ap.add_argument("--text-col", default="text")
    ap.add_argument("--label-col", default="label")
    ap.add_argument("--id-col", default=None)
    ap.add_argument("--config", type=Path, default=None, help="JSON file with ExperimentConfig fields")
    ap.add_argument("--results-dir", type=Path, default=Path("results"))

    ap.add_argument("--max-tokens", type=int, default=None)
    ap.add_argument("--gram-size", type=int, default=None)
    ap.add_argument("--min-gram-size", type=int, default=None)
    ap.add_argument("--keep-numeric", action="store_true", help="Do not drop numeric tokens")
    ap.add_argument("--stopwords", default=None, help="'english' or a path to a word list")
    ap.add_argument("--k-folds", type=int, default=None)
    ap.add_argument("--n-lambdas", type=int, default=None, help="Size of the log-spaced lambda grid")
    ap.add_argument("--lambda-range", type=float, nargs=2, default=None, metavar=("LO", "HI"),
                    help="log10 bounds of the lambda grid")
    ap.add_argument("--selection-rule", choices=["best-metric", "one-standard-error"], default=None)
    ap.add_argument("--selection-metric", choices=["roc_auc", "accuracy", "sensitivity", "specificity"],
                    default=None)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--test-size", type=float, default=None)
    ap.add_argument("--n-jobs", type=int, default=None)
    ap.add_argument("--nested-outer-k", type=int, default=None, help="Also run nested CV with this many outer folds")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def config_from_args(args: argparse.Namespace) -> ExperimentConfig:
    cfg = ExperimentConfig.from_json(args.config) if args.config else ExperimentConfig()
    grid = None
    if args.n_lambdas is not None or args.lambda_range is not None:
        lo, hi = args.lambda_range if args.lambda_range is not None else (-4.0, 0.0)
        grid = make_lambda_grid(lo, hi, args.n_lambdas or len(cfg.lambda_grid))
    return cfg.override(
        max_tokens=args.max_tokens,
        gram_size=args.gram_size,
        min_gram_size=args.min_gram_size,
        strip_numeric=False if args.keep_numeric else None,
        stopwords=args.stopwords,
        k_folds=args.k_folds,
        lambda_grid=grid,
        selection_rule=args.selection_rule,
        selection_metric=args.selection_metric,
        random_seed=args.seed,
        test_size=args.test_size,
        n_jobs=args.n_jobs,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = config_from_args(args)
        pipeline = ExperimentalPipeline(
            config, results_dir=args.results_dir, nested_outer_k=args.nested_outer_k
        )
        pipeline.load_documents(args.csv, text_col=args.text_col, label_col=args.label_col, id_col=args.id_col)
        final = pipeline.run(pipeline.documents)
    except SentimentLassoError as exc:
        logger.error("Aborted: %s", exc)
        return 1

    print("\n" + "=" * 60)
    print(f"Selected lambda: {final.lam:.6g}")
    print(f"Test accuracy:   {final.test_metrics['accuracy']:.4f} (null {final.null_accuracy:.4f})")
    print(f"Test ROC-AUC:    {final.test_metrics['roc_auc']:.4f}")
    print("=" * 60)
    print(final.report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
