"""
Implementation of Version-Space learning (candidate elimination) over the
hypothesis space of all disjunctions of conjunctions of literals.

The version space is not materialized: a hypothesis is consistent with all
evidence iff none of its disjuncts covers a negative example and each
positive example is covered by some disjunct. `VersionSpace` thus only keeps
a mask of admissible conjunctions (covering no negative example) and which
conjunctions cover which positive example. Its members are enumerated on
demand.
"""

import logging
import warnings
from collections.abc import Set
from itertools import combinations, islice, product
from typing import Iterator, List, Mapping, NamedTuple, Optional, Sequence, \
    Union

import numpy as np
from sklearn.utils.validation import check_is_fitted

from sklearn_concept.abstract import StepCallback, _BaseConceptEstimator
from sklearn_concept.common import \
    Conjunction, Example, Hypothesis, HypothesisSpaceTooLarge, LearningStep, \
    Literal, Vocabulary, _is_hypothesis_like, as_example, as_hypothesis
from sklearn_concept.util import nonempty_subsets

logger = logging.getLogger(__name__)


class SpaceLimits(NamedTuple):
    """Bounds on the size of an enumerated hypothesis space.

    Fields
    -----
    max_attributes : int
        Maximal number of attributes of the vocabulary.
    max_values : int
        Maximal domain size of each attribute.
    max_conjunctions : int
        Maximal number of conjunctions over the vocabulary.
    max_disjuncts : int
        Maximal number of conjunctions whose non-empty subsets are
        enumerated as hypotheses.
    """
    max_attributes: int = 8
    max_values: int = 8
    max_conjunctions: int = 10_000
    max_disjuncts: int = 20


def count_conjunctions(vocabulary: Vocabulary) -> int:
    """:return: the number of non-empty conjunctions over `vocabulary`, with
        at most one (possibly negated) literal per attribute."""
    count = 1
    for domain in vocabulary.values():
        count *= 1 + 2 * len(domain)
    return count - 1


def check_vocabulary(vocabulary: Vocabulary, limits: SpaceLimits) -> None:
    """:raise HypothesisSpaceTooLarge: if enumerating the conjunctions over
        `vocabulary` would exceed `limits`."""
    if len(vocabulary) > limits.max_attributes:
        raise HypothesisSpaceTooLarge(
            "{} attributes exceed max_attributes={}"
            .format(len(vocabulary), limits.max_attributes))
    for attribute, domain in vocabulary.items():
        if len(domain) > limits.max_values:
            raise HypothesisSpaceTooLarge(
                "attribute {!r} has {} values, exceeding max_values={}"
                .format(attribute, len(domain), limits.max_values))
    n_conjunctions = count_conjunctions(vocabulary)
    if n_conjunctions > limits.max_conjunctions:
        raise HypothesisSpaceTooLarge(
            "{} conjunctions exceed max_conjunctions={}"
            .format(n_conjunctions, limits.max_conjunctions))


def all_conjunctions(vocabulary: Vocabulary,
                     limits: Optional[SpaceLimits] = None
                     ) -> List[Conjunction]:
    """Enumerate all non-empty conjunctions over `vocabulary`.

    Attribute subsets are ordered by size, then lexically. Within a subset,
    each attribute ranges over its values in domain order, each value first
    as positive, then as negated literal.

    :raise HypothesisSpaceTooLarge: if `limits` (default `SpaceLimits()`)
        would be exceeded.
    """
    check_vocabulary(vocabulary, limits or SpaceLimits())
    options = {attribute: [Literal(attribute, value, negated)
                           for value in domain
                           for negated in (False, True)]
               for attribute, domain in vocabulary.items()}
    conjunctions = []
    for attributes in nonempty_subsets(vocabulary):
        for literals in product(*(options[a] for a in attributes)):
            conjunctions.append(Conjunction(literals))
    return conjunctions


def all_hypotheses(vocabulary: Vocabulary,
                   limits: Optional[SpaceLimits] = None
                   ) -> Iterator[Hypothesis]:
    """Lazily enumerate all hypotheses over `vocabulary`, i.e. every
    non-empty subset of `all_conjunctions`, by size then index order.

    :raise HypothesisSpaceTooLarge: if `limits` would be exceeded.
    """
    limits = limits or SpaceLimits()
    conjunctions = all_conjunctions(vocabulary, limits)
    _check_disjuncts(len(conjunctions), limits)
    return (Hypothesis(subset) for subset in nonempty_subsets(conjunctions))


def _check_disjuncts(n_conjunctions: int, limits: SpaceLimits):
    if n_conjunctions > limits.max_disjuncts:
        raise HypothesisSpaceTooLarge(
            "enumerating subsets of {} conjunctions exceeds max_disjuncts={}"
            .format(n_conjunctions, limits.max_disjuncts))


class HypothesisSpace(Set):
    """All hypotheses over a vocabulary, as a read-only set.

    Attributes
    -----
    vocabulary : Vocabulary
    limits : SpaceLimits
    conjunctions : tuple of Conjunction
        All conjunctions over the vocabulary, see `all_conjunctions`.
    """

    def __init__(self, vocabulary: Vocabulary,
                 limits: Optional[SpaceLimits] = None):
        self.vocabulary = vocabulary
        self.limits = limits or SpaceLimits()
        self.conjunctions = tuple(all_conjunctions(vocabulary, self.limits))
        self._index = {c: i for i, c in enumerate(self.conjunctions)}

    def __len__(self):
        return 2 ** len(self.conjunctions) - 1

    def __iter__(self) -> Iterator[Hypothesis]:
        _check_disjuncts(len(self.conjunctions), self.limits)
        return (Hypothesis(subset)
                for subset in nonempty_subsets(self.conjunctions))

    @classmethod
    def _from_iterable(cls, it):
        return frozenset(it)

    def indices(self, hypothesis) -> Optional[List[int]]:
        """:return: the sorted conjunction indices of `hypothesis`, or None
            if it is no member of this space."""
        if not _is_hypothesis_like(hypothesis):
            return None
        hypothesis = as_hypothesis(hypothesis)
        indices = {self._index.get(d) for d in hypothesis}
        if not hypothesis or None in indices or len(indices) < len(hypothesis):
            return None
        return sorted(indices)

    def __contains__(self, hypothesis):
        return self.indices(hypothesis) is not None

    def match_vector(self, example: Example) -> np.ndarray:
        """:return: A bool array telling which conjunctions match
            `example`."""
        return np.fromiter((c.matches(example) for c in self.conjunctions),
                           dtype=bool, count=len(self.conjunctions))

    def version_space(self) -> 'VersionSpace':
        """:return: The initial version space, i.e. all hypotheses."""
        n = len(self.conjunctions)
        return VersionSpace(self, np.ones(n, dtype=bool),
                            np.zeros((0, n), dtype=bool))


class VersionSpace(Set):
    """The hypotheses of a `HypothesisSpace` consistent with the examples
    seen so far, as a read-only set.

    Members are iterated in canonical order (smallest first, disjuncts and
    hypotheses of equal size in enumeration order of the conjunctions).
    Membership ignores the order of disjuncts. `update` returns a new
    instance, a `VersionSpace` is never modified.

    Attributes
    -----
    space : HypothesisSpace
    admissible : np.ndarray
        Bool array telling which conjunctions cover no negative example.
    coverage : np.ndarray
        Bool array of shape `(n_positives, n_conjunctions)`, telling which
        conjunctions cover which positive example.
    """

    def __init__(self, space: HypothesisSpace, admissible: np.ndarray,
                 coverage: np.ndarray):
        self.space = space
        self.admissible = admissible
        self.coverage = coverage
        self._len = None

    def update(self, example: Example) -> 'VersionSpace':
        """:return: the members consistent with `example`, too."""
        matches = self.space.match_vector(example)
        if example.goal:
            return VersionSpace(self.space, self.admissible,
                                np.vstack([self.coverage, matches]))
        return VersionSpace(self.space, self.admissible & ~matches,
                            self.coverage)

    @property
    def n_admissible(self) -> int:
        """The number of conjunctions covering no negative example."""
        return int(np.count_nonzero(self.admissible))

    def admissible_conjunctions(self) -> List[Conjunction]:
        return [self.space.conjunctions[i]
                for i in np.flatnonzero(self.admissible)]

    def _admissible_coverage(self) -> np.ndarray:
        """Coverage of the positives by admissible conjunctions, reduced to
        the rows which are not implied by another one."""
        coverage = np.unique(self.coverage[:, self.admissible], axis=0)
        # covering a subset of the conjunctions of another row implies
        # covering that row
        minimal = [i for i, row in enumerate(coverage)
                   if not any(j != i and np.all(coverage[j] <= row)
                              for j in range(len(coverage)))]
        return coverage[minimal]

    def __bool__(self):
        if not self.admissible.any():
            return False
        # then all admissible conjunctions together are a member, if any
        return bool(self.coverage[:, self.admissible].any(axis=1).all())

    def __len__(self):
        if self._len is None:
            self._len = self._count() if self else 0
        return self._len

    def _count(self) -> int:
        n_admissible = self.n_admissible
        if not len(self.coverage):
            return 2 ** n_admissible - 1
        coverage = self._admissible_coverage()
        if len(coverage) > n_admissible:
            return sum(1 for _ in self)
        _check_disjuncts(len(coverage), self.space.limits)
        # inclusion-exclusion over the sets of positives left uncovered
        count = 0
        for size in range(len(coverage) + 1):
            for rows in combinations(range(len(coverage)), size):
                covering = np.count_nonzero(coverage[list(rows)].any(axis=0))
                count += (-1) ** size * 2 ** (n_admissible - covering)
        return count

    def __iter__(self) -> Iterator[Hypothesis]:
        if not self:
            return
        _check_disjuncts(self.n_admissible, self.space.limits)
        yield from self.members()

    def members(self) -> Iterator[Hypothesis]:
        """Iterate the members lazily, like `iter`, but without checking
        `SpaceLimits.max_disjuncts` first. Only use this bounded, e.g. with
        `itertools.islice`.
        """
        if not self:
            return
        indices = np.flatnonzero(self.admissible)
        conjunctions = self.space.conjunctions
        # bitmask over `indices` of the conjunctions covering each positive
        row_masks = [sum(1 << int(j) for j in np.flatnonzero(row))
                     for row in self.coverage[:, self.admissible]]
        for subset in nonempty_subsets(range(len(indices))):
            mask = sum(1 << j for j in subset)
            if all(row_mask & mask for row_mask in row_masks):
                yield Hypothesis(conjunctions[indices[j]] for j in subset)

    @classmethod
    def _from_iterable(cls, it):
        return frozenset(it)

    def __contains__(self, hypothesis):
        indices = self.space.indices(hypothesis)
        if indices is None or not self.admissible[indices].all():
            return False
        return bool(self.coverage[:, indices].any(axis=1).all())

    def guess(self, example: Union[Example, Mapping]) -> bool:
        """:return: True iff any member predicts `example` to be positive.
            False for an empty version space.
        """
        if not isinstance(example, Example):
            example = Example(example, False)
        self.space.vocabulary.check(example)
        if not self:
            return False
        # any matching admissible conjunction is part of the member
        # consisting of all admissible conjunctions
        return bool((self.space.match_vector(example)
                     & self.admissible).any())

    def __repr__(self):
        return '<VersionSpace of {} admissible of {} conjunctions>'.format(
            self.n_admissible, len(self.space.conjunctions))


def version_space_learning(
        examples: Sequence[Union[Example, Mapping]],
        vocabulary: Optional[Vocabulary] = None,
        limits: Optional[SpaceLimits] = None,
        callback: Optional[StepCallback] = None,
) -> VersionSpace:
    """Candidate elimination: Start with all hypotheses over `vocabulary`,
    and for each example remove those misclassifying it.

    :param examples: `Example`s, or mappings with a boolean `GOAL` key.
    :param vocabulary: Default: induced from `examples`.
    :param limits: Bounds of the hypothesis space, default `SpaceLimits()`.
    :param callback: Called with a `LearningStep` per processed example.
    :return: The version space, possibly empty.
    :raise HypothesisSpaceTooLarge: if `limits` are exceeded.
    :raise MalformedExample: on invalid examples.
    """
    examples = [as_example(e) for e in examples]
    if vocabulary is None:
        vocabulary = Vocabulary.from_examples(examples)
    for example in examples:
        vocabulary.check(example)

    version_space = HypothesisSpace(vocabulary, limits).version_space()
    for index, example in enumerate(examples):
        version_space = version_space.update(example)
        outcome = 'CONSISTENT' if version_space else 'EMPTY'
        logger.debug("example %d: %s, %d admissible conjunctions", index,
                     outcome, version_space.n_admissible)
        if callback is not None:
            callback(LearningStep(index, example.goal, outcome, 'eliminate',
                                  version_space.n_admissible))

    logger.info("version space with %d admissible conjunctions from %d "
                "examples", version_space.n_admissible, len(examples))
    return version_space


# noinspection PyAttributeOutsideInit
class VersionSpaceEstimator(_BaseConceptEstimator):
    """A classifier predicting the positive class iff any hypothesis of the
    version space does.

    Parameters
    -----
    feature_names : None or list of str
        Attribute names of the features. If None, generic names will be
        generated.

    limits : None or SpaceLimits
        Bounds of the hypothesis space. None means `SpaceLimits()`.

    Attributes
    -----
    version_space_ : VersionSpace
    """

    def __init__(self, feature_names=None, limits=None):
        self.feature_names = feature_names
        self.limits = limits

    def _learn(self, examples, callback=None):
        self.version_space_ = version_space_learning(
            examples, limits=self.limits, callback=callback)
        if not self.version_space_:
            warnings.warn("No hypothesis is consistent with the training "
                          "data, all predictions will be negative.")

    def _guess(self, example):
        return self.version_space_.guess(example)

    def export_text(self, max_hypotheses: int = 10) -> str:
        """Build a text report listing (at most `max_hypotheses`) members of
        the version space, each as rule for the positive class.
        """
        check_is_fitted(self, 'version_space_')
        positive, negative = self.classes_[-1], self.classes_[0]
        members = islice(self.version_space_.members(), max_hypotheses)
        lines = ['{!s} => {!s}'.format(h, positive) for h in members]
        n_more = len(self.version_space_) - max_hypotheses
        if n_more > 0:
            lines.append('... ({} more)'.format(n_more))
        lines.append('(true) => {!s}'.format(negative))
        return '\n'.join(lines)
