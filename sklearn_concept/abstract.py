"""
Implementation of Current-Best and Version-Space learning: Abstract base
algorithm and the scikit-learn estimator interface.
"""

import logging
from typing import Callable, List, Optional, Sequence, Type, Iterator, Tuple

import numpy as np

from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils import check_X_y, check_array
from sklearn.utils.multiclass import check_classification_targets
from sklearn.utils.validation import check_is_fitted

from sklearn_concept.common import \
    AbstractCurrentBestImplementation, Example, Hypothesis, LearningStep, \
    NoConsistentRefinement, Outcome, Refinement, RefinementContext, \
    Vocabulary, as_example, as_hypothesis, classify
from sklearn_concept.util import ConceptLabelEncoder, build_feature_names

logger = logging.getLogger(__name__)

StepCallback = Callable[[LearningStep], None]


def abstract_current_best(
        examples: Sequence[Example],
        hypothesis: Hypothesis,
        implementation: Type[AbstractCurrentBestImplementation],
        vocabulary: Optional[Vocabulary] = None,
        callback: Optional[StepCallback] = None,
) -> Hypothesis:
    """Main loop of Current-Best learning.

    Processes `examples` in order. Each misclassified example is fixed by
    the first refinement `implementation.refinements` offers, which is
    consistent with all examples up to and including it.

    :param vocabulary: Domain of the refinement operators. Default: induced
        from `examples`.
    :param callback: Called with a `LearningStep` for every processed
        example (again for examples revisited by backtracking).
    :raise NoConsistentRefinement: if some example cannot be fixed (and, if
        `implementation.backtracking`, no alternative is left).
    """
    examples = [as_example(e) for e in examples]
    if vocabulary is None:
        vocabulary = Vocabulary.from_examples(examples)
    for example in examples:
        vocabulary.check(example)

    # resolve methods once for performance
    refinements = implementation.refinements
    backtracking = implementation.backtracking

    # for each step taken: (index, outcome, remaining candidates)
    alternatives: List[Tuple[int, Outcome, Iterator[Refinement]]] = []
    index = 0
    while index < len(examples):
        example = examples[index]
        context = RefinementContext(vocabulary, examples[:index + 1])
        outcome = classify(example, hypothesis)
        candidates = refinements(hypothesis, outcome, context)
        refinement = next(candidates, None)
        if refinement is None:
            failure = NoConsistentRefinement(index, example, hypothesis)
            while refinement is None:
                if not backtracking or not alternatives:
                    raise failure
                index, outcome, candidates = alternatives.pop()
                logger.debug("backtracking to example %d", index)
                refinement = next(candidates, None)
        if backtracking:
            alternatives.append((index, outcome, candidates))

        hypothesis = refinement.hypothesis
        logger.debug("example %d: %s, %s => %s", index, outcome.name,
                     refinement.operator, hypothesis)
        if callback is not None:
            callback(LearningStep(index, examples[index].goal, outcome.name,
                                  refinement.operator, hypothesis.n_literals))
        index += 1

    logger.info("learned hypothesis with %d disjuncts from %d examples",
                len(hypothesis), len(examples))
    return hypothesis


def make_examples(X: np.ndarray, goals: Optional[np.ndarray],
                  feature_names: Sequence[str]) -> List[Example]:
    """:return: one `Example` per row of `X`, with attributes named by
        `feature_names`. If `goals` is None, all goals are False.
    """
    if goals is None:
        goals = np.zeros(len(X), dtype=bool)
    return [Example(dict(zip(feature_names, row)), bool(goal))
            for row, goal in zip(X.astype(str).tolist(), goals)]


# noinspection PyAttributeOutsideInit
class _BaseConceptEstimator(ClassifierMixin, BaseEstimator):
    """Binary concept learning on categorical features.

    `fit` turns every row of `X` into an `Example` (features named by
    `feature_names_`, all values converted to str) and delegates to `_learn`.
    Subclasses implement `_learn` and `_guess`.

    Attributes
    -----
    classes_ : np.ndarray
        Class labels, `classes_[-1]` is the positive class (the concept) and
        `classes_[0]` the negative one.

    n_features_ : int
        The number of features in (training) data `X`.

    feature_names_ : List[str]
        Attribute names used for the examples.

    label_encoder_ : ConceptLabelEncoder
        Maps class labels to goal values.
    """

    def fit(self, X, y):
        """Fit to data, i.e. learn the concept.

        :param X: 2d array-like of categorical values.
        :param y: Binary classification labels for `X`.
        """
        X, y = check_X_y(X, y, dtype=None)
        check_classification_targets(y)
        self.label_encoder_ = ConceptLabelEncoder().fit(y)
        self.classes_ = self.label_encoder_.classes_
        self.n_features_ = X.shape[1]
        self.feature_names_ = build_feature_names(self.feature_names,
                                                  self.n_features_)
        examples = make_examples(X, self.label_encoder_.transform(y),
                                 self.feature_names_)
        self._learn(examples)
        return self

    def _learn(self, examples: List[Example],
               callback: Optional[StepCallback] = None) -> None:
        raise NotImplementedError

    def _guess(self, example: Example) -> bool:
        raise NotImplementedError

    def _check_X(self, X) -> np.ndarray:
        check_is_fitted(self, ['classes_', 'feature_names_'])
        X = check_array(X, dtype=None)
        if self.n_features_ != X.shape[1]:
            raise ValueError("Number of features of the model must "
                             "match the input. Model n_features is %s and "
                             "input n_features is %s "
                             % (self.n_features_, X.shape[1]))
        return X

    def decision_function(self, X) -> np.ndarray:
        """:return: An array of shape `(n_samples,)`, values strictly greater
        than zero indicate the positive class.
        """
        examples = make_examples(self._check_X(X), None, self.feature_names_)
        return np.fromiter((1.0 if self._guess(e) else -1.0
                            for e in examples),
                           dtype=float, count=len(examples))

    def predict(self, X) -> np.ndarray:
        """Make a prediction for each sample in `X`."""
        return self.label_encoder_.inverse_transform(
            self.decision_function(X) > 0)


# noinspection PyAttributeOutsideInit
class CurrentBestEstimator(_BaseConceptEstimator):
    """A classifier using a hypothesis learned with Current-Best learning.

    The concrete refinement operators are defined by `implementation`, see
    `sklearn_concept.concrete` for predefined ones.

    Fields
    -----
    implementation : subclass of AbstractCurrentBestImplementation

    Parameters
    -----
    initial_hypothesis : None or Hypothesis or sequence of mappings
        The seed hypothesis. None (the default) is the empty, "always
        false" hypothesis.

    feature_names : None or list of str
        Attribute names of the features, used in the hypothesis.
        If None, generic names will be generated.

    Attributes
    -----
    hypothesis_ : Hypothesis
        The learned hypothesis.
    """

    implementation: Type[AbstractCurrentBestImplementation]

    def __init__(self, initial_hypothesis=None, feature_names=None):
        self.initial_hypothesis = initial_hypothesis
        self.feature_names = feature_names

    def _learn(self, examples, callback=None):
        self.hypothesis_ = abstract_current_best(
            examples, as_hypothesis(self.initial_hypothesis),
            self.implementation, callback=callback)

    def _guess(self, example):
        return self.hypothesis_.matches(example)

    def export_text(self) -> str:
        """Build a text report showing the disjuncts of the learned
        hypothesis, each as a rule for the positive class.
        """
        check_is_fitted(self, 'hypothesis_')
        positive, negative = self.classes_[-1], self.classes_[0]
        return '\n'.join(
            ['{!s} => {!s}'.format(d, positive) for d in self.hypothesis_]
            + ['(true) => {!s}'.format(negative)])
