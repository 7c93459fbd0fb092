# config.py
"""
Experiment configuration.

A single frozen ExperimentConfig drives tokenization, the lambda sweep, fold
construction and model selection. It can be built in code, loaded from JSON, or
assembled from command-line flags by the experiment runner.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

SELECTION_RULES = ("best-metric", "one-standard-error")
SELECTION_METRICS = ("roc_auc", "accuracy", "sensitivity", "specificity")


def make_lambda_grid(lo: float = -4.0, hi: float = 0.0, n: int = 30) -> Tuple[float, ...]:
    """Ascending log-spaced grid of n penalties between 10**lo and 10**hi."""
    if n < 1:
        raise ValueError("lambda grid needs at least one value")
    return tuple(float(v) for v in np.logspace(lo, hi, n))


@dataclass(frozen=True)
class ExperimentConfig:
    # tokenization / features
    max_tokens: int = 1000
    gram_size: int = 1
    min_gram_size: Optional[int] = None
    strip_numeric: bool = True
    stopwords: Union[str, Tuple[str, ...]] = ()
    # resampling / tuning
    k_folds: int = 5
    lambda_grid: Tuple[float, ...] = field(default_factory=make_lambda_grid)
    selection_rule: str = "one-standard-error"
    selection_metric: str = "roc_auc"
    random_seed: int = 42
    test_size: float = 0.25
    n_jobs: int = 1
    # solver
    max_iter: int = 1000
    tol: float = 1e-4

    def __post_init__(self):
        if self.min_gram_size is None:
            object.__setattr__(self, "min_gram_size", self.gram_size)
        if not isinstance(self.stopwords, str):
            object.__setattr__(self, "stopwords", tuple(self.stopwords))
        object.__setattr__(self, "lambda_grid", tuple(float(v) for v in self.lambda_grid))

        if self.max_tokens < 1:
            raise ValueError("max_tokens must be >= 1")
        if self.gram_size < 1:
            raise ValueError("gram_size must be >= 1")
        if not 1 <= self.min_gram_size <= self.gram_size:
            raise ValueError("min_gram_size must be between 1 and gram_size")
        if self.k_folds < 2:
            raise ValueError("k_folds must be >= 2")
        if not self.lambda_grid:
            raise ValueError("lambda_grid must not be empty")
        if any(v < 0 for v in self.lambda_grid):
            raise ValueError("lambda values must be >= 0")
        if list(self.lambda_grid) != sorted(self.lambda_grid):
            raise ValueError("lambda_grid must be in ascending order")
        if self.selection_rule not in SELECTION_RULES:
            raise ValueError(f"Unknown selection rule: {self.selection_rule}")
        if self.selection_metric not in SELECTION_METRICS:
            raise ValueError(f"Unknown selection metric: {self.selection_metric}")
        if not 0.0 < self.test_size < 1.0:
            raise ValueError("test_size must be in (0, 1)")

    def override(self, **changes: Any) -> "ExperimentConfig":
        """Copy with the non-None entries of `changes` applied."""
        changes = {k: v for k, v in changes.items() if v is not None}
        if "gram_size" in changes and "min_gram_size" not in changes:
            # a new gram size means a single-order window unless asked otherwise
            changes["min_gram_size"] = changes["gram_size"]
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["lambda_grid"] = list(self.lambda_grid)
        if not isinstance(self.stopwords, str):
            d["stopwords"] = list(self.stopwords)
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ExperimentConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(d) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        d = dict(d)
        if "lambda_grid" in d and isinstance(d["lambda_grid"], dict):
            # {"lo": -4, "hi": 0, "n": 30}
            d["lambda_grid"] = make_lambda_grid(**d["lambda_grid"])
        return cls(**d)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "ExperimentConfig":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
