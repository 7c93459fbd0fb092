# null_baseline.py
from collections import Counter
from typing import List, Optional, Sequence

import numpy as np

from ..data import LABEL_ORDER, Label


class NullBaseline:
    """Majority-class predictor: the floor any real model has to beat.

    Features are ignored; ties between equally frequent labels go to the one
    earlier in LABEL_ORDER.
    """

    def __init__(self):
        self.majority: Optional[Label] = None
        self.priors: Optional[np.ndarray] = None

    def fit(self, labels: Sequence[Label]) -> "NullBaseline":
        if len(labels) == 0:
            raise ValueError("NullBaseline needs at least one training label")
        counts = Counter(Label.parse(lab) for lab in labels)
        self.majority = max(LABEL_ORDER, key=lambda lab: (counts[lab], -LABEL_ORDER.index(lab)))
        self.priors = np.array([counts[lab] / len(labels) for lab in LABEL_ORDER])
        return self

    def predict(self, inputs: Sequence) -> List[Label]:
        if self.majority is None:
            raise RuntimeError("NullBaseline must be fit before predicting")
        return [self.majority] * len(inputs)

    def predict_proba(self, inputs: Sequence) -> np.ndarray:
        if self.priors is None:
            raise RuntimeError("NullBaseline must be fit before predicting")
        return np.tile(self.priors, (len(inputs), 1))
