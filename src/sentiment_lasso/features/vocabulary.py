# vocabulary.py
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import VocabularyEmptyError


@dataclass(frozen=True)
class Vocabulary:
    """Frozen token -> column index map learned from one training partition."""

    tokens: Tuple[str, ...]
    doc_freq: Tuple[int, ...]
    n_documents: int

    def __post_init__(self):
        object.__setattr__(self, "_index", {t: i for i, t in enumerate(self.tokens)})

    @property
    def index(self) -> Mapping[str, int]:
        return MappingProxyType(self._index)

    def get(self, token: str) -> Optional[int]:
        # out-of-vocabulary tokens are simply absent
        return self._index.get(token)

    def __contains__(self, token: str) -> bool:
        return token in self._index

    def __len__(self) -> int:
        return len(self.tokens)


class VocabularyBuilder:
    def __init__(self, max_tokens: int = 1000):
        if max_tokens < 1:
            raise ValueError("max_tokens must be >= 1")
        self.max_tokens = max_tokens

    def fit(self, tokenized_docs: Sequence[Iterable[str]]) -> Vocabulary:
        df = Counter()
        n_docs = 0
        for toks in tokenized_docs:
            n_docs += 1
            df.update(set(toks))
        if not df:
            raise VocabularyEmptyError(
                f"No tokens survived filtering across {n_docs} training documents",
                stage="vocabulary",
            )
        # highest document frequency first, ties lexically
        ranked: List[Tuple[str, int]] = sorted(df.items(), key=lambda kv: (-kv[1], kv[0]))
        ranked = ranked[: self.max_tokens]
        return Vocabulary(
            tokens=tuple(t for t, _ in ranked),
            doc_freq=tuple(c for _, c in ranked),
            n_documents=n_docs,
        )
