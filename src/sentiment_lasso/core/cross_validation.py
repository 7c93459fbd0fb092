# cross_validation.py
from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence, Tuple
import random

from ..data import LABEL_ORDER, Document, Label, label_distribution
from ..errors import DataError, DegenerateFoldError


@dataclass(frozen=True)
class FoldAssignment:
    """k disjoint groups of document ids; fold i is the validation set of round i."""

    folds: Tuple[Tuple[int, ...], ...]
    seed: int

    @property
    def k(self) -> int:
        return len(self.folds)

    def fold_of(self) -> Dict[int, int]:
        return {doc_id: fi for fi, ids in enumerate(self.folds) for doc_id in ids}


def stratified_kfold(documents: Sequence[Document], k: int, seed: int = 42) -> FoldAssignment:
    if k < 2:
        raise DataError(f"k must be >= 2, got {k}", stage="split")
    if k > len(documents):
        raise DataError(f"k={k} exceeds number of documents ({len(documents)})", stage="split")

    rng = random.Random(seed)
    # bucket by label, in input order
    buckets: Dict[Label, List[int]] = {lab: [] for lab in LABEL_ORDER}
    for d in documents:
        buckets[d.label].append(d.id)

    val_splits: List[List[int]] = [[] for _ in range(k)]
    for lab in LABEL_ORDER:
        ids = buckets[lab]
        rng.shuffle(ids)
        size, r = divmod(len(ids), k)
        start = 0
        for j in range(k):
            take = size + (1 if j < r else 0)
            val_splits[j].extend(ids[start : start + take])
            start += take
    return FoldAssignment(folds=tuple(tuple(sorted(v)) for v in val_splits), seed=seed)


def iter_splits(
    documents: Sequence[Document], assignment: FoldAssignment
) -> Iterator[Tuple[int, List[Document], List[Document]]]:
    """Yield (fold_id, train_docs, val_docs), keeping input order inside each side."""
    fold_of = assignment.fold_of()
    for fi in range(assignment.k):
        train = [d for d in documents if fold_of[d.id] != fi]
        val = [d for d in documents if fold_of[d.id] == fi]
        yield fi, train, val


def check_folds(documents: Sequence[Document], assignment: FoldAssignment) -> None:
    """Every fold must see every corpus label on both its training and validation side."""
    all_ids = sorted(d.id for d in documents)
    assigned = sorted(i for ids in assignment.folds for i in ids)
    if assigned != all_ids:
        raise DataError("Fold assignment does not cover the corpus exactly once", stage="split")

    present = set(label_distribution(documents))
    for fi, train, val in iter_splits(documents, assignment):
        for side, docs in (("validation", val), ("training", train)):
            missing = present - set(label_distribution(docs))
            if missing:
                names = ", ".join(sorted(lab.value for lab in missing))
                raise DegenerateFoldError(
                    f"{side} side has no examples of: {names}", stage="split", fold=fi
                )
