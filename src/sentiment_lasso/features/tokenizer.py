# tokenizer.py
from pathlib import Path
from typing import FrozenSet, Iterable, Iterator, List, Union

import regex as re
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

# punctuation / symbols hugging a word, e.g. "great." or "(really)"
_EDGE_RE = re.compile(r"^[\p{P}\p{S}]+|[\p{P}\p{S}]+$")
_NUMERIC_RE = re.compile(r"\d+(?:[.,]\d+)*")


def load_stopwords(path: Union[str, Path]) -> FrozenSet[str]:
    """One stopword per line; blank lines and '#' comments are skipped."""
    words = set()
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            w = line.strip().lower()
            if w and not w.startswith("#"):
                words.add(w)
    return frozenset(words)


def resolve_stopwords(stopwords) -> FrozenSet[str]:
    if not stopwords:
        return frozenset()
    if isinstance(stopwords, str):
        if stopwords == "english":
            return frozenset(ENGLISH_STOP_WORDS)
        return load_stopwords(stopwords)
    return frozenset(w.lower() for w in stopwords)


class Tokenizer:
    """Sentence -> normalized words -> n-grams.

    params:
      - strip_numeric: drop purely numeric words before windowing
      - stopwords:     n-grams containing any of these words are dropped ("english"
                       for sklearn's list, a path, or an iterable of words)
      - gram_size:     largest window size n
      - min_gram_size: smallest window size; < n gives mixed-order output
    """

    def __init__(
        self,
        strip_numeric: bool = False,
        stopwords=(),
        gram_size: int = 1,
        min_gram_size: int = None,
    ):
        if min_gram_size is None:
            min_gram_size = gram_size
        if gram_size < 1:
            raise ValueError("gram_size must be >= 1")
        if not 1 <= min_gram_size <= gram_size:
            raise ValueError("min_gram_size must be between 1 and gram_size")
        self.strip_numeric = strip_numeric
        self.stopwords = resolve_stopwords(stopwords)
        self.gram_size = gram_size
        self.min_gram_size = min_gram_size

    @classmethod
    def from_config(cls, config) -> "Tokenizer":
        return cls(
            strip_numeric=config.strip_numeric,
            stopwords=config.stopwords,
            gram_size=config.gram_size,
            min_gram_size=config.min_gram_size,
        )

    def words(self, text: str) -> List[str]:
        out = []
        for raw in text.lower().split():
            w = _EDGE_RE.sub("", raw)
            if not w:
                continue
            if self.strip_numeric and _NUMERIC_RE.fullmatch(w):
                continue
            out.append(w)
        return out

    def iter_tokens(self, text: str) -> Iterator[str]:
        words = self.words(text)
        for n in range(self.min_gram_size, self.gram_size + 1):
            for i in range(len(words) - n + 1):
                window = words[i : i + n]
                # a stopword anywhere in the window drops the whole n-gram
                if self.stopwords and any(w in self.stopwords for w in window):
                    continue
                yield " ".join(window)

    def tokenize(self, text: str) -> List[str]:
        return list(self.iter_tokens(text))

    def tokenize_all(self, texts: Iterable[str]) -> List[List[str]]:
        return [self.tokenize(t) for t in texts]

    def __repr__(self) -> str:
        return (
            f"Tokenizer(gram_size={self.gram_size}, min_gram_size={self.min_gram_size}, "
            f"strip_numeric={self.strip_numeric}, stopwords={len(self.stopwords)})"
        )
