"""Implementation of Current-Best and Version-Space concept learning.

Limitations / Assumptions
=====

- binary problems only: a concept is learned for the "positive class", i.e.
  the last class label in sorted order.
- categorical features only, every value is converted to str. No numerical
  tests, no ordering of values.
- operator set of literals: == and != per attribute, at most one literal per
  attribute and conjunction.
- the version space is restricted to disjunctions of distinct conjunctions
  over the attribute values seen in the training data. Enumeration is
  bounded by `version_space.SpaceLimits`.
- no missing values: an example lacking an attribute matches no literal
  testing it.
- no weighting, no noise handling: Current-Best learning fails with
  `common.NoConsistentRefinement` on contradictory examples, and
  Version-Space learning results in an empty version space.
"""

__all__ = ['abstract', 'common', 'concrete', 'extra', 'tests', 'util',
           'version_space']
