# pipeline.py
"""
Explicit text -> features pipeline.

fit() runs tokenizer -> vocabulary -> idf on training texts and returns frozen
parameters; transform() applies those parameters to any texts without learning
anything new, so validation and test data never leak into training statistics.
"""

from dataclasses import dataclass
from typing import Sequence

from scipy.sparse import csr_matrix

from .tfidf import IdfTable, TfidfTransformer
from .tokenizer import Tokenizer
from .vocabulary import Vocabulary, VocabularyBuilder


@dataclass(frozen=True)
class FittedFeatures:
    idf_table: IdfTable

    @property
    def vocabulary(self) -> Vocabulary:
        return self.idf_table.vocabulary


class FeaturePipeline:
    def __init__(self, tokenizer: Tokenizer, max_tokens: int = 1000):
        self.tokenizer = tokenizer
        self.vocab_builder = VocabularyBuilder(max_tokens)
        self.tfidf = TfidfTransformer()

    @classmethod
    def from_config(cls, config) -> "FeaturePipeline":
        return cls(Tokenizer.from_config(config), max_tokens=config.max_tokens)

    def fit(self, texts: Sequence[str]) -> FittedFeatures:
        tokenized = self.tokenizer.tokenize_all(texts)
        vocabulary = self.vocab_builder.fit(tokenized)
        return FittedFeatures(self.tfidf.fit(tokenized, vocabulary))

    def transform(self, texts: Sequence[str], fitted: FittedFeatures) -> csr_matrix:
        return self.tfidf.transform(self.tokenizer.tokenize_all(texts), fitted.idf_table)

    def fit_transform(self, texts: Sequence[str]):
        tokenized = self.tokenizer.tokenize_all(texts)
        vocabulary = self.vocab_builder.fit(tokenized)
        table = self.tfidf.fit(tokenized, vocabulary)
        return FittedFeatures(table), self.tfidf.transform(tokenized, table)
