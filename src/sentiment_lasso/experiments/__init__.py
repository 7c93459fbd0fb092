# Experimental components for sentiment classification

from .hyperparameter_tuning import (
    HyperparameterTuner,
    LambdaSummary,
    MetricRecord,
    NestedCVResult,
    TuningResult,
    aggregate_records,
    nested_cv,
    select_lambda,
)
from .test_evaluation import FinalEvaluation, evaluate_on_test
from .experimental_pipeline import ExperimentalPipeline

__all__ = [
    "HyperparameterTuner",
    "LambdaSummary",
    "MetricRecord",
    "NestedCVResult",
    "TuningResult",
    "aggregate_records",
    "nested_cv",
    "select_lambda",
    "FinalEvaluation",
    "evaluate_on_test",
    "ExperimentalPipeline",
]
