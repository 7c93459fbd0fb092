import json
import pickle

import pytest

from sentiment_lasso.config import ExperimentConfig, make_lambda_grid
from sentiment_lasso.errors import DegenerateFoldError, SentimentLassoError, VocabularyEmptyError


def test_default_config():
    cfg = ExperimentConfig()
    assert cfg.min_gram_size == cfg.gram_size == 1
    assert len(cfg.lambda_grid) == 30
    assert list(cfg.lambda_grid) == sorted(cfg.lambda_grid)
    assert cfg.lambda_grid[0] == pytest.approx(1e-4)
    assert cfg.lambda_grid[-1] == pytest.approx(1.0)


def test_make_lambda_grid():
    grid = make_lambda_grid(-2, 0, 3)
    assert grid == pytest.approx((0.01, 0.1, 1.0))
    with pytest.raises(ValueError):
        make_lambda_grid(n=0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_tokens": 0},
        {"gram_size": 0},
        {"gram_size": 2, "min_gram_size": 3},
        {"k_folds": 1},
        {"lambda_grid": ()},
        {"lambda_grid": (0.1, 0.01)},
        {"lambda_grid": (-1.0, 0.1)},
        {"selection_rule": "fastest"},
        {"selection_metric": "f1"},
        {"test_size": 1.0},
    ],
)
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        ExperimentConfig(**kwargs)


def test_override_resets_min_gram_size():
    cfg = ExperimentConfig().override(gram_size=2, k_folds=None)
    assert (cfg.gram_size, cfg.min_gram_size, cfg.k_folds) == (2, 2, 5)
    mixed = ExperimentConfig().override(gram_size=3, min_gram_size=1)
    assert mixed.min_gram_size == 1


def test_config_json_roundtrip(tmp_path):
    cfg = ExperimentConfig(gram_size=2, min_gram_size=1, stopwords=("the",), lambda_grid=(0.01, 0.1))
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps(cfg.to_dict()), encoding="utf-8")
    assert ExperimentConfig.from_json(path) == cfg


def test_config_from_dict_grid_spec_and_unknown_keys():
    cfg = ExperimentConfig.from_dict({"lambda_grid": {"lo": -3, "hi": -1, "n": 5}})
    assert len(cfg.lambda_grid) == 5
    with pytest.raises(ValueError):
        ExperimentConfig.from_dict({"learning_rate": 0.1})


def test_error_message_names_stage_and_cell():
    err = VocabularyEmptyError("no tokens", stage="vocabulary").with_context(
        stage="tuning", fold=2, lam=0.01
    )
    text = str(err)
    assert "stage=vocabulary" in text
    assert "fold=2" in text
    assert "lambda=0.01" in text
    assert isinstance(err, SentimentLassoError)


def test_errors_pickle_with_context():
    err = DegenerateFoldError("missing Neutral", stage="split", fold=1)
    clone = pickle.loads(pickle.dumps(err))
    assert type(clone) is DegenerateFoldError
    assert (clone.stage, clone.fold, clone.lam) == ("split", 1, None)
    assert str(clone) == str(err)
