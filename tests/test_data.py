import dataclasses
from collections import Counter

import pandas as pd
import pytest

from sentiment_lasso.data import (
    Document,
    Label,
    build_documents,
    documents_from_flags,
    holdout_split,
    load_documents,
    validate_documents,
)
from sentiment_lasso.errors import DataError


def test_label_parse():
    assert Label.parse("positive") == Label.POSITIVE
    assert Label.parse(" NEG ") == Label.NEGATIVE
    assert Label.parse(Label.NEUTRAL) is Label.NEUTRAL
    with pytest.raises(DataError):
        Label.parse("mixed")


def test_documents_are_immutable():
    doc = Document(id=1, text="fine", label=Label.NEUTRAL)
    with pytest.raises(dataclasses.FrozenInstanceError):
        doc.label = Label.POSITIVE


def test_build_documents_from_label_column():
    df = pd.DataFrame({"sentence": ["good", "bad"], "sentiment": ["Positive", "negative"], "sid": [7, 9]})
    docs = build_documents(df, text_col="sentence", label_col="sentiment", id_col="sid")
    assert docs == [
        Document(7, "good", Label.POSITIVE),
        Document(9, "bad", Label.NEGATIVE),
    ]


def test_build_documents_rejects_missing_label():
    df = pd.DataFrame({"text": ["good", "bad"], "label": ["Positive", None]})
    with pytest.raises(DataError):
        build_documents(df)


def test_documents_from_flag_columns():
    df = pd.DataFrame(
        {
            "text": ["good", "bad", "meh"],
            "pos": [1, 0, 0],
            "neg": [0, 1, 0],
            "neu": [0, 0, 1],
        }
    )
    flags = {"pos": Label.POSITIVE, "neg": Label.NEGATIVE, "neu": Label.NEUTRAL}
    docs = documents_from_flags(df, flags)
    assert [d.label for d in docs] == [Label.POSITIVE, Label.NEGATIVE, Label.NEUTRAL]
    assert [d.id for d in docs] == [0, 1, 2]


def test_flag_rows_need_exactly_one_flag():
    df = pd.DataFrame({"text": ["a", "b"], "pos": [1, 1], "neg": [1, 0]})
    with pytest.raises(DataError):
        documents_from_flags(df, {"pos": Label.POSITIVE, "neg": Label.NEGATIVE})


def test_load_documents_drops_unlabeled(tmp_path):
    path = tmp_path / "sentences.csv"
    pd.DataFrame({"text": ["good", "bad", "??"], "label": ["Positive", "Negative", None]}).to_csv(
        path, index=False
    )
    docs = load_documents(path)
    assert len(docs) == 2


def test_validate_documents():
    good = [Document(0, "a", Label.POSITIVE), Document(1, "b", Label.NEGATIVE)]
    validate_documents(good)
    with pytest.raises(DataError):
        validate_documents([])
    with pytest.raises(DataError):
        validate_documents(good + [Document(1, "c", Label.NEUTRAL)])
    with pytest.raises(DataError):
        validate_documents([Document(0, "a", "Positive"), Document(1, "b", Label.NEGATIVE)])
    with pytest.raises(DataError):
        validate_documents([Document(0, "a", Label.POSITIVE)])


def test_holdout_split_is_stratified(corpus):
    train, test = holdout_split(corpus, test_size=0.2, random_state=0)
    assert len(train) + len(test) == len(corpus)
    assert not {d.id for d in train} & {d.id for d in test}
    counts = Counter(d.label for d in test)
    assert set(counts.values()) == {6}


def test_holdout_split_rejects_singleton_label(corpus):
    docs = [d for d in corpus if d.label != Label.NEUTRAL]
    docs.append(Document(id=999, text="plain enough", label=Label.NEUTRAL))
    with pytest.raises(DataError) as exc_info:
        holdout_split(docs)
    assert exc_info.value.stage == "split"
    assert "Neutral" in str(exc_info.value)
