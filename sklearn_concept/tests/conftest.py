"""pytest fixtures for the test cases in this directory."""
from typing import Type

import matplotlib
import pytest

from sklearn_concept.abstract import CurrentBestEstimator
from sklearn_concept.common import Hypothesis
from sklearn_concept.concrete import \
    CurrentBestLearner, BacktrackingCurrentBestLearner
from sklearn_concept.version_space import VersionSpaceEstimator

from .datasets import \
    party, animals, three_values, conjunctive_concept

matplotlib.use('Agg')


# pytest plugin, to print hypothesis on test failure
@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    default = yield
    report = default.get_result()
    if report.failed and report.user_properties:
        for name, prop in report.user_properties:
            if name == 'hypothesis':
                report.longrepr.addsection(name, str(prop))
                break
    return default


@pytest.fixture
def record_hypothesis(record_property):
    def _record(hypothesis: Hypothesis):
        record_property("hypothesis", hypothesis)
    return _record


@pytest.fixture(params=[CurrentBestLearner,
                        BacktrackingCurrentBestLearner])
def current_best_class(request) -> Type[CurrentBestEstimator]:
    """Fixture running for each of the pre-defined Current-Best estimator
    classes from `sklearn_concept.concrete`.
    """
    return request.param


@pytest.fixture(params=[CurrentBestLearner,
                        BacktrackingCurrentBestLearner,
                        VersionSpaceEstimator])
def concept_estimator_class(request):
    """Fixture running for each of the pre-defined estimator classes."""
    return request.param


@pytest.fixture(params=[party, animals, three_values, conjunctive_concept])
def consistent_dataset(request):
    """Datasets for which both algorithms find a consistent hypothesis."""
    return request.param()
