"""
Shared fixtures: small synthetic sentiment corpora and fast configs.
"""

import random

import pytest

from sentiment_lasso.config import ExperimentConfig
from sentiment_lasso.data import Document, Label

CLASS_WORDS = {
    Label.POSITIVE: ["great", "excellent", "love", "wonderful", "happy", "fantastic"],
    Label.NEGATIVE: ["terrible", "awful", "hate", "boring", "sad", "horrible"],
    Label.NEUTRAL: ["okay", "average", "fine", "ordinary", "plain", "standard"],
}
FILLER = ["the", "movie", "was", "plot", "story", "acting", "really", "quite"]


def make_corpus(n_per_class=30, labels=tuple(CLASS_WORDS), seed=0):
    """Sentences with two class-specific words and three filler words each."""
    rng = random.Random(seed)
    docs = []
    for lab in labels:
        for _ in range(n_per_class):
            words = rng.sample(CLASS_WORDS[lab], 2) + rng.sample(FILLER, 3)
            rng.shuffle(words)
            docs.append((" ".join(words).capitalize() + ".", lab))
    rng.shuffle(docs)
    return [Document(id=i, text=t, label=lab) for i, (t, lab) in enumerate(docs)]


@pytest.fixture
def corpus():
    return make_corpus()


@pytest.fixture
def binary_corpus():
    return make_corpus(n_per_class=30, labels=(Label.POSITIVE, Label.NEGATIVE), seed=1)


@pytest.fixture
def fast_config():
    return ExperimentConfig(
        max_tokens=200,
        strip_numeric=True,
        k_folds=3,
        lambda_grid=(1e-3, 1e-2, 1e-1),
        selection_rule="one-standard-error",
        selection_metric="accuracy",
        random_seed=7,
        max_iter=2000,
    )
