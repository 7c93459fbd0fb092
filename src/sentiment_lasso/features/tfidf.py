# tfidf.py
"""
TF-IDF weighting over a frozen vocabulary.

    tf(t, d)  = count(t in d) / total_tokens(d)
    idf(t)    = ln(N / df(t))      N, df from the training partition
    weight    = tf * idf

A token that occurs in every training document has idf 0 and so weight 0
everywhere. Tokens outside the vocabulary still count towards total_tokens(d)
but contribute no column.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
from scipy.sparse import csr_matrix

from .vocabulary import Vocabulary


@dataclass(frozen=True, eq=False)
class IdfTable:
    vocabulary: Vocabulary
    idf: np.ndarray

    def __post_init__(self):
        idf = np.asarray(self.idf, dtype=np.float64).copy()
        idf.setflags(write=False)
        object.__setattr__(self, "idf", idf)


class TfidfTransformer:
    def fit(self, tokenized_docs: Sequence[Iterable[str]], vocabulary: Vocabulary) -> IdfTable:
        """Compute idf from the same training partition the vocabulary came from."""
        n_docs = 0
        df = np.zeros(len(vocabulary), dtype=np.float64)
        for toks in tokenized_docs:
            n_docs += 1
            for t in set(toks):
                j = vocabulary.get(t)
                if j is not None:
                    df[j] += 1
        if n_docs != vocabulary.n_documents:
            raise ValueError(
                f"idf must be fit on the vocabulary's training partition "
                f"({vocabulary.n_documents} documents), got {n_docs}"
            )
        return IdfTable(vocabulary=vocabulary, idf=np.log(n_docs / df))

    def transform(self, tokenized_docs: Sequence[Iterable[str]], table: IdfTable) -> csr_matrix:
        vocab = table.vocabulary
        data, indices, indptr = [], [], [0]
        for toks in tokenized_docs:
            counts = Counter(toks)
            total = sum(counts.values())
            row = {}
            for t, c in counts.items():
                j = vocab.get(t)
                if j is None:
                    continue
                w = (c / total) * table.idf[j]
                if w != 0.0:
                    row[j] = w
            for j in sorted(row):
                indices.append(j)
                data.append(row[j])
            indptr.append(len(indices))
        return csr_matrix(
            (np.asarray(data, dtype=np.float64), np.asarray(indices, dtype=np.int64), indptr),
            shape=(len(indptr) - 1, len(vocab)),
        )

    def fit_transform(self, tokenized_docs, vocabulary: Vocabulary):
        docs = [list(t) for t in tokenized_docs]
        table = self.fit(docs, vocabulary)
        return table, self.transform(docs, table)
