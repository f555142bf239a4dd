"""Common protocol of the fit-then-read computation components."""

from abc import ABC, abstractmethod
from typing import Any


class BaseAnalyser(ABC):
    """Abstract base for analyzers over a :class:`~cohort_tlbx.data.views.FeatureMatrix`.

    An analyzer receives its preprocessed input and configuration in the
    constructor, does the work in :meth:`fit` and hands out an immutable result
    object through :meth:`result`. Analyzers never draw; the functions in
    ``cohort_tlbx.plotting`` take the result objects.

    Typical use goes through a dataset factory::

        ds = FraminghamDataset.from_csv()
        projection = ds.make_projection_analyzer(features, "tsne", random_state=0).fit().result()

    A new reduction needs a :class:`ReductionMethod` member and a reducer
    function in ``cohort_tlbx.analysis.projection.REDUCERS``; the projection
    analyzer and the dashboard then offer it without further changes.
    """

    @abstractmethod
    def fit(self) -> "BaseAnalyser":
        """Run the computation and return ``self``."""
        ...

    @abstractmethod
    def result(self) -> Any:
        """Frozen result of the last :meth:`fit`.

        Raises:
            ValueError: If :meth:`fit` has not run yet.
        """
        ...
