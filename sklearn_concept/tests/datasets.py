"""Artificial datasets (generator functions) for the sklearn_concept
unittests."""

import itertools
from typing import List, Optional, Sequence

import numpy as np
from sklearn.utils import Bunch

from sklearn_concept.common import GOAL, Example, Vocabulary, as_example


class Dataset(Bunch):
    """A sequence of `examples`, and the same data as `X`, `y` arrays for
    the estimators (features named by `feature_names`, positive class 1).
    """

    def __init__(self,
                 examples: Sequence,
                 feature_names: Optional[List[str]] = None,
                 **kwargs):
        examples = [as_example(e) for e in examples]
        if feature_names is None:
            feature_names = list(Vocabulary.from_examples(examples))
        X = np.array([[e[name] for name in feature_names] for e in examples],
                     dtype=object)
        y = np.array([int(e.goal) for e in examples])
        super().__init__(examples=examples, feature_names=feature_names,
                         x_train=X, y_train=y, **kwargs)

    @property
    def positives(self) -> List[Example]:
        return [e for e in self.examples if e.goal]

    @property
    def negatives(self) -> List[Example]:
        return [e for e in self.examples if not e.goal]


def party() -> Dataset:
    """Likes the party iff there is pizza."""
    return Dataset([
        {'Pizza': 'Yes', 'Soda': 'No', GOAL: True},
        {'Pizza': 'Yes', 'Soda': 'Yes', GOAL: True},
        {'Pizza': 'No', 'Soda': 'No', GOAL: False},
    ])


def animals() -> Dataset:
    return Dataset([
        {'Species': 'Cat', 'Rain': 'Yes', 'Coat': 'No', GOAL: True},
        {'Species': 'Dog', 'Rain': 'Yes', 'Coat': 'No', GOAL: False},
    ])


def single_attribute() -> Dataset:
    return Dataset([{'A': 'x', GOAL: True},
                    {'A': 'y', GOAL: False}])


def three_values() -> Dataset:
    return Dataset([{'A': 'x', GOAL: True},
                    {'A': 'y', GOAL: False},
                    {'A': 'z', GOAL: True}])


def contradiction() -> Dataset:
    """The same example, once positive and once negative."""
    return Dataset([{'A': 'x', GOAL: True},
                    {'A': 'x', GOAL: False}])


def backtracking_dilemma() -> Dataset:
    """Greedy Current-Best learning generalizes to `(true)` on the second
    example, which then can't be specialized to exclude the third."""
    return Dataset([
        {'A': 'a1', 'B': 'b1', 'C': 'c1', GOAL: True},
        {'A': 'a2', 'B': 'b2', 'C': 'c1', GOAL: True},
        {'A': 'a1', 'B': 'b2', 'C': 'c1', GOAL: False},
    ])


def conjunctive_concept() -> Dataset:
    """All combinations of three binary attributes, the concept is
    `Color == red and Size == big`."""
    examples = []
    for color, shape, size in itertools.product(['blue', 'red'],
                                                ['box', 'round'],
                                                ['big', 'small']):
        examples.append({'Color': color, 'Shape': shape, 'Size': size,
                         GOAL: color == 'red' and size == 'big'})
    return Dataset(examples)
