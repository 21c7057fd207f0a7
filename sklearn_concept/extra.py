"""
Implementation of Current-Best and Version-Space learning:
Helpers in addition to the algorithms, i.e. tracing learning runs.
"""

import json
import warnings
from typing import Callable, Dict, IO, List, Optional, Type, Union

import matplotlib.pyplot as plt
from matplotlib.figure import Figure  # needed only for type hints

from sklearn_concept.abstract import _BaseConceptEstimator
from sklearn_concept.common import LearningStep


class Trace:
    """Trace of a learning run, i.e. one `fit` of a concept estimator.

    Attributes
    -----
    - `algorithm`: str
      Name of the traced estimator class.

    - `steps`: List[LearningStep]
      One item per processed example, in processing order. When Current-Best
      learning backtracks, the revisited examples appear again.
    """

    _JSON_DUMP_DESCRIPTION = "sklearn_concept.extra.trace_learning dump"
    _JSON_DUMP_VERSION = 1

    steps: List[LearningStep]

    def __init__(self, algorithm: str):
        self.algorithm = algorithm
        self.steps = []

    def append_step(self, step: LearningStep):
        self.steps.append(step)

    def __eq__(self, other):
        if type(other) is type(self):
            return self.__dict__ == other.__dict__
        return NotImplemented

    def plot(self, **kwargs):
        """Plot the trace, see :func:`plot_trace`."""
        return plot_trace(self, **kwargs)

    def to_json(self):
        """:return: A string containing a JSON representation of the trace."""
        return json.dumps({
            "description": Trace._JSON_DUMP_DESCRIPTION,
            "version": Trace._JSON_DUMP_VERSION,
            "algorithm": self.algorithm,
            "steps": [step._asdict() for step in self.steps],
        }, allow_nan=False)

    @staticmethod
    def from_json(dump: Union[str, IO]) -> 'Trace':
        """
        :param dump: A file-like object or string containing JSON.
        :return: The trace dumped previously with `to_json`.
        """
        loader = json.loads if isinstance(dump, str) else json.load
        dec: Dict = loader(dump)

        if dec.get("description") != Trace._JSON_DUMP_DESCRIPTION:
            raise ValueError("No/invalid learning trace json: %s" % repr(dec))
        if dec["version"] != Trace._JSON_DUMP_VERSION:
            raise ValueError("Unsupported learning trace version: %s"
                             % dec["version"])
        trace = Trace(dec['algorithm'])
        trace.steps = [LearningStep(**step) for step in dec['steps']]
        return trace


LogTraceCallback = Callable[[Trace], None]


def trace_learning(est_cls: Type[_BaseConceptEstimator],
                   log_trace_callback: LogTraceCallback,
                   ) -> Type[_BaseConceptEstimator]:
    """Decorator for concept estimators that adds tracing of the learning
    steps. Traces can be plotted with `plot_trace`.

    After each successful `fit`, the collected trace is submitted to
    `log_trace_callback`.

    Usage
    =====
    >>> def callback(trace):
    ...     plot_trace(trace).show()
    >>> TracedLearner = trace_learning(CurrentBestLearner, callback)
    """

    class TracedEstimator(est_cls):
        def _learn(self, examples, callback=None):
            trace = Trace(est_cls.__name__)
            super()._learn(examples, callback=trace.append_step)
            log_trace_callback(trace)

    TracedEstimator.__name__ = 'Traced' + est_cls.__name__
    TracedEstimator.__qualname__ = TracedEstimator.__name__
    return TracedEstimator


def plot_trace(trace: Trace,
               *,
               title: Optional[str] = None,
               figure: Optional[Figure] = None,
               ) -> Figure:
    """Plot the size of the hypothesis (resp. the number of admissible
    conjunctions) after each step of `trace`. Steps which changed the
    hypothesis are labelled with their operator.

    :param trace: collected `Trace`, see also `trace_learning`.
    :param title: If not None, set as figure title.
    :param figure: If None, use `plt.figure()` to create a figure,
      otherwise draw into this one.
    :return: The figure.
    """
    if not trace.steps:
        # issue a warning, user can decide handling. See module `warnings`
        warnings.warn("Empty trace collected, useless plot.")

    if figure is None:
        figure = plt.figure()
    ax = figure.add_subplot(xlabel='step', ylabel='size')
    ax.locator_params(integer=True)

    sizes = [step.size for step in trace.steps]
    ax.plot(range(len(sizes)), sizes, '.-', color='grey')
    for i, step in enumerate(trace.steps):
        if step.operator == 'keep':
            continue
        ax.plot(i, step.size, 'o' if step.goal else 'x',
                color='green' if step.goal else 'red')
        if step.operator != 'eliminate':
            ax.annotate(step.operator, xy=(i, step.size),
                        xytext=(3, 3), textcoords='offset points',
                        fontsize='x-small')

    if title is not None:
        ax.set_title("%s: %s" % (title, trace.algorithm))
    else:
        ax.set_title(trace.algorithm)
    return figure
