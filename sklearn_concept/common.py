"""
Implementation of Current-Best and Version-Space learning:
Common data model (`Literal`, `Conjunction`, `Hypothesis`, `Example`,
`Vocabulary`) and the consistency evaluator.
"""

import enum
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence as SequenceABC
from typing import Iterable, Iterator, Tuple, NamedTuple, Sequence, \
    Union, Any, Collection

import numpy as np

GOAL = 'GOAL'


class MalformedExample(ValueError):
    """An example without boolean `GOAL`, with non-string attributes or
    values, or with an attribute outside the established vocabulary."""


class NoConsistentRefinement(ValueError):
    """Current-Best search found no refinement of `hypothesis` consistent with
    all evidence up to and including example number `index`.

    Attributes
    -----
    index : int
        Position of the offending example in the input sequence.
    example : Example
    hypothesis : Hypothesis
        The hypothesis that misclassified `example` and could not be fixed.
    """

    def __init__(self, index: int, example: 'Example',
                 hypothesis: 'Hypothesis'):
        super().__init__(
            "No consistent refinement of {!s} for example #{} ({!r})"
            .format(hypothesis, index, example))
        self.index = index
        self.example = example
        self.hypothesis = hypothesis


class HypothesisSpaceTooLarge(ValueError):
    """Enumerating the hypothesis space would exceed a `SpaceLimits` bound."""


class Literal(NamedTuple):
    """A test of one attribute: `attribute == value`, or `attribute != value`
    if `negated`.
    """
    attribute: str
    value: str
    negated: bool = False

    def matches(self, example: 'Example') -> bool:
        """:return: False if `example` lacks the attribute, otherwise the
        result of the (in)equality test."""
        if self.attribute not in example:
            return False
        return (example[self.attribute] == self.value) != self.negated

    def negate(self) -> 'Literal':
        return self._replace(negated=not self.negated)

    def __str__(self):
        return '({} {} {})'.format(self.attribute,
                                   '!=' if self.negated else '==',
                                   self.value)


class Conjunction(Mapping):
    """An immutable conjunction of literals, mapping each tested attribute to
    its `Literal`. At most one literal per attribute.

    The empty conjunction matches every example. Iteration yields the
    attribute names in lexical order.
    """

    __slots__ = ('_literals', '_hash')

    def __init__(self, literals: Iterable[Literal] = ()):
        by_attribute = {}
        for literal in literals:
            if not isinstance(literal, Literal):
                raise TypeError("expected Literal, got {!r}".format(literal))
            if literal.attribute in by_attribute:
                raise ValueError("duplicate attribute {!r} in conjunction"
                                 .format(literal.attribute))
            by_attribute[literal.attribute] = literal
        self._literals = dict(sorted(by_attribute.items()))
        self._hash = hash(frozenset(self._literals.values()))

    @classmethod
    def from_dict(cls, mapping: 'Mapping[str, str]',
                  negated: Collection[str] = ()) -> 'Conjunction':
        """Build from `{attribute: value}`. Attributes named in `negated` get
        a negated literal, all others a positive one.
        """
        unknown = set(negated) - set(mapping)
        if unknown:
            raise ValueError("negated attributes {} not in mapping"
                             .format(sorted(unknown)))
        return cls(Literal(attribute, value, attribute in negated)
                   for attribute, value in mapping.items())

    def __getitem__(self, attribute: str) -> Literal:
        return self._literals[attribute]

    def __iter__(self) -> Iterator[str]:
        return iter(self._literals)

    def __len__(self):
        return len(self._literals)

    def __eq__(self, other):
        if isinstance(other, Conjunction):
            return self._literals == other._literals
        return NotImplemented

    def __hash__(self):
        return self._hash

    def literals(self) -> Tuple[Literal, ...]:
        return tuple(self._literals.values())

    def matches(self, example: 'Example') -> bool:
        """:return: True iff every literal matches `example`."""
        return all(literal.matches(example)
                   for literal in self._literals.values())

    def with_literal(self, literal: Literal) -> 'Conjunction':
        """:return: a copy specialized by `literal`."""
        return Conjunction(self.literals() + (literal,))

    def without(self, attribute: str) -> 'Conjunction':
        """:return: a copy generalized by dropping the test of `attribute`."""
        return Conjunction(literal for literal in self._literals.values()
                           if literal.attribute != attribute)

    def __str__(self):
        if not self._literals:
            return '(true)'
        return ' and '.join(map(str, self._literals.values()))

    def __repr__(self):
        return 'Conjunction({!r})'.format(list(self._literals.values()))


class Hypothesis(SequenceABC):
    """An immutable, ordered disjunction of `Conjunction`s.

    The empty hypothesis is the "always false" sentinel. Order does not
    change the semantics, but is kept to make refinement deterministic, so
    equality is sequence equality.
    """

    __slots__ = ('_disjuncts',)

    def __init__(self, disjuncts: Iterable[Union[Conjunction, Mapping]] = ()):
        self._disjuncts = tuple(
            d if isinstance(d, Conjunction) else Conjunction.from_dict(d)
            for d in disjuncts)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Hypothesis(self._disjuncts[index])
        return self._disjuncts[index]

    def __len__(self):
        return len(self._disjuncts)

    def __eq__(self, other):
        if isinstance(other, Hypothesis):
            return self._disjuncts == other._disjuncts
        return NotImplemented

    def __hash__(self):
        return hash(self._disjuncts)

    @property
    def n_literals(self) -> int:
        """The number of literals summed over all disjuncts."""
        return sum(len(d) for d in self._disjuncts)

    def matches(self, example: 'Example') -> bool:
        """:return: True iff any disjunct matches `example`."""
        return any(d.matches(example) for d in self._disjuncts)

    def replace(self, index: int, disjunct: Conjunction) -> 'Hypothesis':
        disjuncts = list(self._disjuncts)
        disjuncts[index] = disjunct
        return Hypothesis(disjuncts)

    def drop(self, index: int) -> 'Hypothesis':
        return Hypothesis(self._disjuncts[:index] + self._disjuncts[index + 1:])

    def append(self, disjunct: Conjunction) -> 'Hypothesis':
        return Hypothesis(self._disjuncts + (disjunct,))

    def __str__(self):
        if not self._disjuncts:
            return '(false)'
        return ' or '.join('[{!s}]'.format(d) for d in self._disjuncts)

    def __repr__(self):
        return 'Hypothesis({!r})'.format(list(self._disjuncts))


class Example(Mapping):
    """An immutable attribute-value example with boolean classification
    `goal`. Maps attribute names to values; the goal is not part of the
    mapping.
    """

    __slots__ = ('_attributes', 'goal')

    def __init__(self, attributes: 'Mapping[str, str]', goal: bool):
        if not isinstance(goal, (bool, np.bool_)):
            raise MalformedExample("GOAL must be boolean, got {!r}"
                                   .format(goal))
        for attribute, value in attributes.items():
            if attribute == GOAL:
                continue
            if not isinstance(attribute, str) or not isinstance(value, str):
                raise MalformedExample(
                    "attributes and values must be strings, got {!r}: {!r}"
                    .format(attribute, value))
        self._attributes = {k: v for k, v in attributes.items() if k != GOAL}
        self.goal = bool(goal)

    @classmethod
    def from_dict(cls, mapping: Mapping) -> 'Example':
        """Build from `{attribute: value, ..., 'GOAL': bool}`."""
        if GOAL not in mapping:
            raise MalformedExample("example without {} key: {!r}"
                                   .format(GOAL, mapping))
        return cls(mapping, mapping[GOAL])

    def to_dict(self) -> dict:
        return dict(self._attributes, **{GOAL: self.goal})

    def __getitem__(self, attribute: str) -> str:
        return self._attributes[attribute]

    def __iter__(self):
        return iter(self._attributes)

    def __len__(self):
        return len(self._attributes)

    def __eq__(self, other):
        if isinstance(other, Example):
            return (self.goal == other.goal
                    and self._attributes == other._attributes)
        return NotImplemented

    def __hash__(self):
        return hash((frozenset(self._attributes.items()), self.goal))

    def __repr__(self):
        return 'Example({!r})'.format(self.to_dict())


def as_example(obj: Union[Example, Mapping]) -> Example:
    """:return: `obj` if it is an `Example`, else `Example.from_dict(obj)`."""
    if isinstance(obj, Example):
        return obj
    if not isinstance(obj, Mapping):
        raise MalformedExample("examples have to be mappings, got {!r}"
                               .format(obj))
    return Example.from_dict(obj)


def as_hypothesis(obj: Union[Hypothesis, Iterable[Mapping], None]
                  ) -> Hypothesis:
    """:return: `obj` as `Hypothesis`; None means the empty hypothesis."""
    if obj is None:
        return Hypothesis()
    if isinstance(obj, Hypothesis):
        return obj
    if isinstance(obj, (Mapping, str)):
        raise TypeError("a hypothesis is a sequence of conjunctions, got {!r}"
                        .format(obj))
    return Hypothesis(obj)


class Vocabulary(Mapping):
    """The attribute vocabulary: maps each attribute name to its domain.

    Attributes are iterated in lexical order, each domain is a lexically
    sorted tuple. This order is the enumeration order of all refinement and
    enumeration generators.
    """

    __slots__ = ('_domains',)

    def __init__(self, domains: 'Mapping[str, Iterable[str]]'):
        self._domains = {attribute: tuple(sorted(set(values)))
                         for attribute, values in sorted(domains.items())}

    @classmethod
    def from_examples(cls, examples: Iterable[Example]) -> 'Vocabulary':
        """The values table: every value seen per attribute in `examples`."""
        domains = {}
        for example in examples:
            for attribute, value in example.items():
                domains.setdefault(attribute, set()).add(value)
        return cls(domains)

    def __getitem__(self, attribute: str) -> Tuple[str, ...]:
        return self._domains[attribute]

    def __iter__(self):
        return iter(self._domains)

    def __len__(self):
        return len(self._domains)

    def check(self, example: Example) -> Example:
        """:return: `example`, after making sure it uses only attributes of
        this vocabulary.
        :raise MalformedExample: otherwise.
        """
        unknown = [attribute for attribute in example
                   if attribute not in self._domains]
        if unknown:
            raise MalformedExample("attributes {} of {!r} not in vocabulary"
                                   .format(unknown, example))
        return example

    def __repr__(self):
        return 'Vocabulary({!r})'.format(self._domains)


# consistency evaluation


class Outcome(enum.Enum):
    """How a hypothesis classifies one example."""
    CONSISTENT = 'consistent'
    FALSE_POSITIVE = 'false positive'
    FALSE_NEGATIVE = 'false negative'


def guess(example: Example, hypothesis: Hypothesis) -> bool:
    """:return: the classification of `example` predicted by `hypothesis`."""
    return hypothesis.matches(example)


def classify(example: Example, hypothesis: Hypothesis) -> Outcome:
    predicted = guess(example, hypothesis)
    if predicted == example.goal:
        return Outcome.CONSISTENT
    return Outcome.FALSE_POSITIVE if predicted else Outcome.FALSE_NEGATIVE


def guess_any(example: Example, version_space: Iterable[Hypothesis]) -> bool:
    """:return: True iff any hypothesis in `version_space` predicts True.
    Vacuously False for an empty space.

    Version spaces with a `guess` method (i.e. `VersionSpace`) are asked
    directly instead of enumerating their members.
    """
    direct_guess = getattr(version_space, 'guess', None)
    if direct_guess is not None:
        return direct_guess(example)
    return any(guess(example, as_hypothesis(h)) for h in version_space)


def _is_hypothesis_like(obj) -> bool:
    if isinstance(obj, Hypothesis):
        return True
    if isinstance(obj, (list, tuple)):
        return all(isinstance(d, (Conjunction, Mapping)) for d in obj)
    return False


def guess_example_value(example: Union[Example, Mapping],
                        hypothesis_or_space: Any) -> bool:
    """The prediction shared by both learning algorithms.

    :param example: An `Example` or a mapping of attributes. `GOAL` is
        optional here, but must be a bool if present.
    :param hypothesis_or_space: A `Hypothesis` (or a list of conjunction
        mappings), or a set of hypotheses such as a `VersionSpace`.
    """
    if not isinstance(example, Example):
        example = Example({k: v for k, v in example.items() if k != GOAL},
                          example.get(GOAL, False))
    if _is_hypothesis_like(hypothesis_or_space):
        return guess(example, as_hypothesis(hypothesis_or_space))
    return guess_any(example, hypothesis_or_space)


def all_consistent(examples: Iterable[Example],
                   hypothesis: Hypothesis) -> bool:
    return all(classify(e, hypothesis) is Outcome.CONSISTENT
               for e in examples)


def all_negatives_consistent(examples: Iterable[Example],
                             hypothesis: Hypothesis) -> bool:
    """Like `all_consistent`, but only checks the negative examples."""
    return all(not guess(e, hypothesis) for e in examples if not e.goal)


def match_matrix(conjunctions: Sequence[Conjunction],
                 examples: Sequence[Example]) -> np.ndarray:
    """Apply all `conjunctions` to all `examples`.

    :return: An array of shape `(n_examples, n_conjunctions)` and type bool.
    """
    matches = np.zeros((len(examples), len(conjunctions)), dtype=bool)
    for i_example, example in enumerate(examples):
        matches[i_example] = np.fromiter(
            (c.matches(example) for c in conjunctions),
            dtype=bool, count=len(conjunctions))
    return matches


# refinement search


class Refinement(NamedTuple):
    """A candidate hypothesis and the name of the operator producing it:
    one of `keep`, `specialize`, `drop_disjunct`, `drop_literal`,
    `add_disjunct`.
    """
    operator: str
    hypothesis: Hypothesis


class LearningStep(NamedTuple):
    """Report of one processed example, passed to learning callbacks.

    `size` is the number of literals of the resulting hypothesis for
    Current-Best learning, and the number of admissible conjunctions for
    Version-Space learning.
    """
    index: int
    goal: bool
    outcome: str
    operator: str
    size: int


class RefinementContext:
    """State variables while refining a hypothesis on one example.

    Attributes
    -----
    vocabulary : Vocabulary
    evidence : Sequence[Example]
        All examples processed so far, the triggering one last.
    """

    def __init__(self, vocabulary: Vocabulary, evidence: Sequence[Example]):
        self.vocabulary = vocabulary
        self.evidence = evidence
        self._other_values = {}

    @property
    def example(self) -> Example:
        """The triggering example, i.e. the last one of `evidence`."""
        return self.evidence[-1]

    @property
    def index(self) -> int:
        return len(self.evidence) - 1

    def other_values(self, attribute: str) -> Tuple[str, ...]:
        """:return: The domain of `attribute` without the triggering
        example's value, in vocabulary order."""
        if attribute not in self._other_values:
            value = self.example.get(attribute)
            self._other_values[attribute] = tuple(
                v for v in self.vocabulary.get(attribute, ()) if v != value)
        return self._other_values[attribute]


class AbstractCurrentBestImplementation(ABC):
    """The callbacks needed by `abstract_current_best`; subclasses represent
    concrete refinement operators, composed as mixins.

    Fields
    -----
    backtracking : bool, default False
        If True, a dead end resumes the most recent earlier step with its
        next candidate instead of failing.
    """

    backtracking: bool = False

    @classmethod
    @abstractmethod
    def specializations(cls, hypothesis: Hypothesis,
                        context: RefinementContext) -> Iterable[Refinement]:
        """Refinements fixing a false positive, consistent with
        `context.evidence`."""
        raise NotImplementedError

    @classmethod
    @abstractmethod
    def generalizations(cls, hypothesis: Hypothesis,
                        context: RefinementContext) -> Iterable[Refinement]:
        """Candidate refinements fixing a false negative."""
        raise NotImplementedError

    @classmethod
    def refinements(cls, hypothesis: Hypothesis, outcome: Outcome,
                    context: RefinementContext) -> Iterator[Refinement]:
        """:return: all candidates for `hypothesis` given `outcome` on
        `context.example`, in preference order, each consistent with all of
        `context.evidence`.
        """
        if outcome is Outcome.CONSISTENT:
            return iter([Refinement('keep', hypothesis)])
        if outcome is Outcome.FALSE_POSITIVE:
            candidates = cls.specializations(hypothesis, context)
        else:
            candidates = cls.generalizations(hypothesis, context)
        evidence = context.evidence
        return (r for r in candidates
                if all_consistent(evidence, r.hypothesis))
