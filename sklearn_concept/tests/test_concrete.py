"""Tests for `sklearn_concept.concrete`, i.e. Current-Best learning."""

import pytest

from sklearn_concept.common import \
    Literal, Conjunction, Hypothesis, Example, Vocabulary, \
    NoConsistentRefinement, MalformedExample, RefinementContext, \
    LearningStep, all_consistent
from sklearn_concept.concrete import \
    specializations, generalizations, add_disjunct, current_best_learning
from .datasets import \
    party, animals, contradiction, backtracking_dilemma, conjunctive_concept


def test_unchanged_if_consistent():
    """Both examples are already consistent with the seed."""
    seed = Hypothesis([{'Species': 'Cat'}])
    assert current_best_learning(animals().examples, seed) == seed


def test_false_positive_specializes():
    seed = [{'Species': 'Cat'}]
    negative = {'Species': 'Cat', 'Rain': 'No', 'Coat': 'No', 'GOAL': False}
    learned = current_best_learning([negative], seed)
    assert learned == Hypothesis([Conjunction([
        Literal('Coat', 'No', negated=True), Literal('Species', 'Cat')])])

    positive = {'Species': 'Cat', 'Rain': 'Yes', 'Coat': 'No', 'GOAL': True}
    learned = current_best_learning([positive, negative], seed)
    assert learned == Hypothesis([Conjunction([
        Literal('Rain', 'No', negated=True), Literal('Species', 'Cat')])])


def test_false_negative_adds_disjunct():
    examples = [{'Pizza': 'Yes', 'Soda': 'No', 'GOAL': True},
                {'Pizza': 'No', 'Soda': 'No', 'GOAL': False},
                {'Pizza': 'No', 'Soda': 'Yes', 'GOAL': True}]
    learned = current_best_learning(examples, [{'Pizza': 'Yes', 'Soda': 'No'}])
    assert learned == Hypothesis([{'Pizza': 'Yes', 'Soda': 'No'},
                                  {'Soda': 'Yes'}])


def test_party_from_empty_hypothesis():
    assert current_best_learning(party().examples) \
        == Hypothesis([{'Pizza': 'Yes'}])


def test_conjunctive_concept(record_hypothesis):
    dataset = conjunctive_concept()
    learned = current_best_learning(dataset.examples)
    record_hypothesis(learned)
    assert all_consistent(dataset.examples, learned)
    assert learned == Hypothesis([Conjunction([
        Literal('Color', 'red'), Literal('Size', 'small', negated=True)])])


@pytest.mark.parametrize('backtracking', [False, True])
def test_contradiction_raises(backtracking):
    with pytest.raises(NoConsistentRefinement) as excinfo:
        current_best_learning(contradiction().examples,
                              backtracking=backtracking)
    assert excinfo.value.index == 1
    assert excinfo.value.example == contradiction().examples[1]
    assert excinfo.value.hypothesis == Hypothesis([{'A': 'x'}])
    assert isinstance(excinfo.value, ValueError)


def test_backtracking_recovers():
    examples = backtracking_dilemma().examples
    with pytest.raises(NoConsistentRefinement) as excinfo:
        current_best_learning(examples)
    assert excinfo.value.index == 2
    assert excinfo.value.hypothesis == Hypothesis([Conjunction()])

    steps = []
    learned = current_best_learning(examples, backtracking=True,
                                    callback=steps.append)
    assert learned == Hypothesis([
        Conjunction([Literal('A', 'a1'), Literal('B', 'b2', negated=True)]),
        {'A': 'a2'}])
    assert all_consistent(examples, learned)
    # example #1 is processed twice
    assert [s.index for s in steps] == [0, 1, 1, 2]
    assert [s.operator for s in steps] == \
        ['add_disjunct', 'drop_literal', 'add_disjunct', 'specialize']


def test_callback():
    steps = []
    current_best_learning(party().examples, callback=steps.append)
    assert steps == [
        LearningStep(0, True, 'FALSE_NEGATIVE', 'add_disjunct', 1),
        LearningStep(1, True, 'CONSISTENT', 'keep', 1),
        LearningStep(2, False, 'CONSISTENT', 'keep', 1),
    ]


def test_malformed_examples():
    with pytest.raises(MalformedExample):
        current_best_learning([{'A': 'x'}])
    with pytest.raises(MalformedExample):
        current_best_learning([{'A': 1, 'GOAL': True}])


def _context(*examples) -> RefinementContext:
    examples = [Example.from_dict(e) for e in examples]
    return RefinementContext(Vocabulary.from_examples(examples), examples)


def test_specializations_order():
    context = _context(
        {'A': 'a2', 'B': 'b1', 'GOAL': True},
        {'A': 'a3', 'B': 'b2', 'GOAL': True},
        {'A': 'a1', 'B': 'b1', 'GOAL': False})
    h = Hypothesis([Conjunction()])
    candidates = [r.hypothesis[0].literals()[0]
                  for r in specializations(h, context)]
    assert candidates == [Literal('A', 'a1', negated=True),
                          Literal('A', 'a2'),
                          Literal('A', 'a3'),
                          Literal('B', 'b1', negated=True),
                          Literal('B', 'b2')]


def test_specializations_skip_tested_attributes():
    context = _context({'A': 'a2', 'B': 'b2', 'GOAL': True},
                       {'A': 'a1', 'B': 'b1', 'GOAL': False})
    h = Hypothesis([{'A': 'a1'}, {'B': 'b1'}])
    refinements = list(specializations(h, context))
    assert {r.operator for r in refinements} == {'specialize'}
    assert refinements[0].hypothesis == Hypothesis([
        Conjunction([Literal('A', 'a1'), Literal('B', 'b1', negated=True)]),
        {'B': 'b1'}])
    # every candidate specializes exactly one disjunct by one literal
    assert all(r.hypothesis.n_literals == 3 for r in refinements)


def test_generalizations_order():
    context = _context({'A': 'a1', 'B': 'b1', 'C': 'c1', 'GOAL': True})
    h = Hypothesis([{'A': 'a2', 'B': 'b1'}, {'C': 'c2'}])
    operators = [r.operator for r in generalizations(h, context)]
    assert operators == ['drop_disjunct'] * 2 + ['drop_literal'] * 3 \
        + ['add_disjunct'] * 7
    hypotheses = [r.hypothesis for r in generalizations(h, context)]
    assert hypotheses[0] == Hypothesis([{'C': 'c2'}])
    assert hypotheses[2] == Hypothesis([{'B': 'b1'}, {'C': 'c2'}])
    assert hypotheses[4] == Hypothesis([{'A': 'a2', 'B': 'b1'}, {}])


def test_add_disjunct_order():
    context = _context({'C': 'c1', 'A': 'a1', 'B': 'b1', 'GOAL': True})
    added = [tuple(r.hypothesis[-1])
             for r in add_disjunct(Hypothesis(), context)]
    assert added == [('A',), ('B',), ('C',),
                     ('A', 'B'), ('A', 'C'), ('B', 'C'),
                     ('A', 'B', 'C')]


def test_add_disjunct_avoids_negatives():
    context = _context({'A': 'a1', 'B': 'b1', 'GOAL': False},
                       {'A': 'a1', 'B': 'b2', 'GOAL': True})
    added = [r.hypothesis[-1] for r in add_disjunct(Hypothesis(), context)]
    assert added == [Conjunction.from_dict({'B': 'b2'}),
                     Conjunction.from_dict({'A': 'a1', 'B': 'b2'})]
