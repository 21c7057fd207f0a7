"""
Miscellaneous things not depending on anything else from sklearn_concept.
"""

from itertools import chain, combinations
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, \
    TypeVar

import numpy as np

from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.preprocessing import LabelEncoder
from sklearn.utils.multiclass import type_of_target

T = TypeVar('T')


def nonempty_subsets(items: Iterable[T]) -> Iterator[Tuple[T, ...]]:
    """All non-empty subsets of `items`, smallest first; subsets of equal
    size in lexicographic order of their positions in `items`.

    nonempty_subsets([1,2,3]) --> (1,) (2,) (3,) (1,2) (1,3) (2,3) (1,2,3)
    """
    items = list(items)
    return chain.from_iterable(combinations(items, size)
                               for size in range(1, len(items) + 1))


def build_feature_names(feature_names: Optional[Sequence[str]],
                        n_features: int) -> List[str]:
    """:return: `feature_names` as list of str, or generic names
        `feature_1 ... feature_n` if None.
    """
    if feature_names is None:
        return ["feature_{}".format(i + 1) for i in range(n_features)]
    if len(feature_names) != n_features:
        raise ValueError("feature_names must contain %d elements, got %d"
                         % (n_features, len(feature_names)))
    names = [str(name) for name in feature_names]
    if len(set(names)) != len(names):
        raise ValueError("feature_names must be unique, got %s" % names)
    return names


# noinspection PyAttributeOutsideInit
class ConceptLabelEncoder(TransformerMixin, BaseEstimator):
    """Encode binary labels as boolean goal values.

    Uses LabelEncoder to find the classes: the last of them (in sorted order)
    is the positive class, encoded as True, the first one is the negative
    class. If `y` contains only one class, it is the positive class.

    Attributes
    -----
    le_ : LabelEncoder
        Delegate doing the actual encoding, we only map to bool.

    classes_ : np.ndarray
        The sorted class labels, `classes_[-1]` is the positive class.
    """

    def fit(self, y):
        """Learn labels present in `y`."""
        target_type = type_of_target(y)
        if target_type not in {'binary'}:
            raise ValueError("Concept learning needs a binary target, got %s "
                             "(of y=%s)" % (target_type, y))
        self.le_: LabelEncoder = LabelEncoder().fit(y)
        self.classes_ = self.le_.classes_
        return self

    def transform(self, y) -> np.ndarray:
        """Transform `y` to an array of goal values."""
        return self.le_.transform(y) == len(self.classes_) - 1

    def inverse_transform(self, goals) -> np.ndarray:
        """Transform goal values back to the original labels."""
        return np.where(np.asarray(goals, dtype=bool),
                        self.classes_[-1],  # positive class
                        self.classes_[0])  # negative class
