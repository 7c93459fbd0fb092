#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Labeled sentence corpus:
- Label: the fixed three-way sentiment label set
- Document: immutable (id, text, label) record
- Construction from a dataframe with either a label column or one flag column
  per label, in one explicit step
- Stratified train/test hold-out

Everything downstream consumes Documents; it never touches the dataframe.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd
from sklearn.model_selection import train_test_split

from .errors import DataError

logger = logging.getLogger(__name__)


class Label(str, Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"

    @classmethod
    def parse(cls, value) -> "Label":
        if isinstance(value, Label):
            return value
        key = str(value).strip().lower()
        lab = _LABEL_MAP.get(key)
        if lab is None:
            raise DataError(f"Unknown label: {value!r}", stage="load")
        return lab


# confusion matrix rows/columns and probability columns use this order
LABEL_ORDER: Tuple[Label, ...] = (Label.POSITIVE, Label.NEGATIVE, Label.NEUTRAL)

_LABEL_MAP: Dict[str, Label] = {
    "positive": Label.POSITIVE,
    "pos": Label.POSITIVE,
    "negative": Label.NEGATIVE,
    "neg": Label.NEGATIVE,
    "neutral": Label.NEUTRAL,
    "neu": Label.NEUTRAL,
}


@dataclass(frozen=True)
class Document:
    id: int
    text: str
    label: Label


def label_distribution(documents: Iterable[Document]) -> Dict[Label, int]:
    counts = Counter(d.label for d in documents)
    return {lab: counts[lab] for lab in LABEL_ORDER if counts[lab]}


def validate_documents(documents: Sequence[Document], min_labels: int = 2) -> None:
    """Fail fast on input the core cannot work with."""
    if len(documents) == 0:
        raise DataError("No documents supplied", stage="validate")
    seen = set()
    for d in documents:
        if not isinstance(d, Document):
            raise DataError(f"Expected Document, got {type(d).__name__}", stage="validate")
        if not isinstance(d.label, Label):
            raise DataError(f"Document {d.id} has no valid label: {d.label!r}", stage="validate")
        if not isinstance(d.text, str):
            raise DataError(f"Document {d.id} text is not a string", stage="validate")
        if d.id in seen:
            raise DataError(f"Duplicate document id: {d.id}", stage="validate")
        seen.add(d.id)
    n_labels = len(label_distribution(documents))
    if n_labels < min_labels:
        raise DataError(
            f"Need at least {min_labels} distinct labels, found {n_labels}",
            stage="validate",
        )


def build_documents(
    df: pd.DataFrame,
    text_col: str = "text",
    label_col: str = "label",
    id_col: Optional[str] = None,
) -> List[Document]:
    """Turn a text/label dataframe into Documents. Ids default to row position."""
    for c in (text_col, label_col):
        if c not in df.columns:
            raise DataError(f"Missing column: {c}", stage="load")

    ids = df[id_col].tolist() if id_col is not None else range(len(df))
    docs = []
    for pos, (doc_id, text, raw_label) in enumerate(zip(ids, df[text_col], df[label_col])):
        if pd.isna(raw_label):
            raise DataError(f"Row {pos} has no label", stage="load")
        if pd.isna(text):
            raise DataError(f"Row {pos} has no text", stage="load")
        docs.append(Document(id=int(doc_id), text=str(text), label=Label.parse(raw_label)))
    return docs


def documents_from_flags(
    df: pd.DataFrame,
    flag_columns: Mapping[str, Label],
    text_col: str = "text",
    id_col: Optional[str] = None,
) -> List[Document]:
    """
    Recode one-hot flag columns (e.g. {"is_pos": POSITIVE, ...}) into labels.

    Exactly one flag must be set per row.
    """
    missing = [c for c in list(flag_columns) + [text_col] if c not in df.columns]
    if missing:
        raise DataError(f"Missing columns: {missing}", stage="load")

    flags = df[list(flag_columns)].fillna(0).astype(bool).astype(int)
    n_set = flags.sum(axis=1)
    bad = n_set[n_set != 1]
    if len(bad):
        raise DataError(
            f"{len(bad)} rows do not have exactly one label flag set "
            f"(first row: {bad.index[0]})",
            stage="load",
        )
    labels = flags.idxmax(axis=1).map(lambda c: Label.parse(flag_columns[c]))
    out = pd.DataFrame({"text": df[text_col], "label": labels})
    if id_col is not None:
        out["id"] = df[id_col]
    return build_documents(out, id_col="id" if id_col is not None else None)


def load_documents(
    csv_path: str | Path,
    text_col: str = "text",
    label_col: str = "label",
    id_col: Optional[str] = None,
    drop_unlabeled: bool = True,
) -> List[Document]:
    """Read a CSV and build Documents; unlabeled rows are dropped here, not in the core."""
    df = pd.read_csv(csv_path)
    if drop_unlabeled and label_col in df.columns:
        before = len(df)
        df = df.dropna(subset=[label_col]).reset_index(drop=True)
        if len(df) < before:
            logger.info("[load] dropped %d unlabeled rows", before - len(df))
    docs = build_documents(df, text_col=text_col, label_col=label_col, id_col=id_col)
    logger.info(
        "[load] rows=%d, balance=%s",
        len(docs),
        {k.value: v for k, v in label_distribution(docs).items()},
    )
    return docs


def holdout_split(
    documents: Sequence[Document], test_size: float = 0.25, random_state: int = 42
) -> Tuple[List[Document], List[Document]]:
    """Stratified train/test split of the corpus."""
    validate_documents(documents)
    too_small = [lab.value for lab, n in label_distribution(documents).items() if n < 2]
    if too_small:
        raise DataError(
            f"Stratified hold-out needs at least 2 documents per label; too few: {too_small}",
            stage="split",
        )
    try:
        train, test = train_test_split(
            list(documents),
            test_size=test_size,
            random_state=random_state,
            stratify=[d.label.value for d in documents],
        )
    except ValueError as exc:
        # e.g. a test set smaller than the number of labels
        raise DataError(str(exc), stage="split") from exc
    logger.info("[split] %d train, %d test", len(train), len(test))
    return train, test
