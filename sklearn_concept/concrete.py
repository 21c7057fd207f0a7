"""
Implementation of Current-Best learning:
The refinement operators & known instantiations of the abstract base
algorithm.

Implemented as Mixins of `AbstractCurrentBestImplementation`; all operators
are generators, so the search stops generating candidates as soon as the
first consistent one is found.
"""

from itertools import combinations
from typing import Iterable, Iterator, Optional, Sequence, Union, Mapping

from sklearn_concept.abstract import \
    CurrentBestEstimator, StepCallback, abstract_current_best
from sklearn_concept.common import \
    AbstractCurrentBestImplementation, Conjunction, Example, Hypothesis, \
    Literal, Refinement, RefinementContext, all_negatives_consistent, \
    as_hypothesis


def specializations(hypothesis: Hypothesis, context: RefinementContext
                    ) -> Iterator[Refinement]:
    """Candidates fixing a false positive: add one literal to one disjunct,
    so that it no longer matches the triggering example.

    For each disjunct (ascending) matching the example, for each vocabulary
    attribute the example has and the disjunct does not test: first
    `attribute != value`, then `attribute == other` for each other value of
    the domain.
    """
    example = context.example
    for index, disjunct in enumerate(hypothesis):
        if not disjunct.matches(example):
            # adding literals here can't stop the example from being covered
            continue
        for attribute in context.vocabulary:
            if attribute in disjunct or attribute not in example:
                continue
            literals = [Literal(attribute, example[attribute], negated=True)]
            literals += [Literal(attribute, value)
                         for value in context.other_values(attribute)]
            for literal in literals:
                yield Refinement('specialize', hypothesis.replace(
                    index, disjunct.with_literal(literal)))


def drop_disjuncts(hypothesis: Hypothesis, context: RefinementContext
                   ) -> Iterator[Refinement]:
    for index in range(len(hypothesis)):
        yield Refinement('drop_disjunct', hypothesis.drop(index))


def drop_literals(hypothesis: Hypothesis, context: RefinementContext
                  ) -> Iterator[Refinement]:
    for index, disjunct in enumerate(hypothesis):
        for attribute in disjunct:
            yield Refinement('drop_literal', hypothesis.replace(
                index, disjunct.without(attribute)))


def add_disjunct(hypothesis: Hypothesis, context: RefinementContext
                 ) -> Iterator[Refinement]:
    """Append a conjunction of some of the triggering example's attribute
    values, covering no negative example seen so far.

    Smallest conjunctions first; those of equal size ordered lexically by
    attribute names.
    """
    example = context.example
    attributes = sorted(example)
    for size in range(1, len(attributes) + 1):
        for subset in combinations(attributes, size):
            conjunction = Conjunction(Literal(attribute, example[attribute])
                                      for attribute in subset)
            if all_negatives_consistent(context.evidence,
                                        Hypothesis([conjunction])):
                yield Refinement('add_disjunct',
                                 hypothesis.append(conjunction))


def generalizations(hypothesis: Hypothesis, context: RefinementContext
                    ) -> Iterator[Refinement]:
    """Candidates fixing a false negative, in three phases: drop a whole
    disjunct, drop one literal, add a new disjunct.
    """
    yield from drop_disjuncts(hypothesis, context)
    yield from drop_literals(hypothesis, context)
    yield from add_disjunct(hypothesis, context)


class NegatedLiteralSpecialization(AbstractCurrentBestImplementation):
    """Mixin specializing by adding a literal excluding the triggering
    example, see `specializations`.
    """

    @classmethod
    def specializations(cls, hypothesis: Hypothesis,
                        context: RefinementContext) -> Iterable[Refinement]:
        return specializations(hypothesis, context)


class ThreePhaseGeneralization(AbstractCurrentBestImplementation):
    """Mixin generalizing by dropping disjuncts, then literals, then adding
    a disjunct, see `generalizations`.
    """

    @classmethod
    def generalizations(cls, hypothesis: Hypothesis,
                        context: RefinementContext) -> Iterable[Refinement]:
        return generalizations(hypothesis, context)


class Backtracking(AbstractCurrentBestImplementation):
    """Mixin making the search revisit earlier choices on a dead end."""
    backtracking = True


# estimators


class CurrentBestLearner(CurrentBestEstimator):
    """Current-Best learning, committing to the first consistent refinement
    of each misclassified example."""

    class implementation(NegatedLiteralSpecialization,
                         ThreePhaseGeneralization):
        pass


class BacktrackingCurrentBestLearner(CurrentBestEstimator):
    """Current-Best learning as a depth-first search: if an example can't be
    fixed, earlier refinement choices are revised."""

    class implementation(Backtracking,
                         NegatedLiteralSpecialization,
                         ThreePhaseGeneralization):
        pass


def current_best_learning(
        examples: Sequence[Union[Example, Mapping]],
        initial_hypothesis: Union[Hypothesis, Sequence[Mapping]] = (),
        backtracking: bool = False,
        callback: Optional[StepCallback] = None,
) -> Hypothesis:
    """Learn a hypothesis consistent with `examples` by Current-Best
    learning, starting from `initial_hypothesis`.

    :param examples: `Example`s, or mappings with a boolean `GOAL` key.
    :param initial_hypothesis: The seed, default is the empty ("always
        false") hypothesis.
    :param backtracking: Revise earlier refinements instead of failing.
    :param callback: Called with a `LearningStep` per processed example.
    :raise NoConsistentRefinement: if an example cannot be fixed.
    :raise MalformedExample: on invalid examples.
    """
    learner = (BacktrackingCurrentBestLearner if backtracking
               else CurrentBestLearner)
    return abstract_current_best(examples, as_hypothesis(initial_hypothesis),
                                 learner.implementation, callback=callback)
