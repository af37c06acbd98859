from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from imbstream.core.base import SplitCriterion
from imbstream.core.data_structures import ClassWeightMap
from imbstream.core.splitting.suggestion import AttributeSplitSuggestion, HistogramSplitSuggestion
from imbstream.utils.errors import UnsupportedModeError


class AttributeClassObserver(ABC):
    """Per-attribute class statistics held by a tree node.

    Two variants exist, numeric and nominal. Both can draw a synthetic value
    for a class through ``sample_for_class`` so instance synthesis never needs
    to know which variant it is talking to.
    """

    @abstractmethod
    def observe_attribute_class(self, att_val: float, class_val: int, weight: float) -> None:
        pass

    def observe_attribute_target(self, att_val: float, target: float) -> None:
        """Regression observations are not supported by classification observers."""
        raise UnsupportedModeError(
            f"{type(self).__name__} observes class labels only; regression targets are not supported"
        )

    @abstractmethod
    def probability_of_attribute_value_given_class(self, att_val: float, class_val: int) -> float:
        pass

    @abstractmethod
    def get_best_evaluated_split_suggestion(
        self,
        criterion: SplitCriterion,
        pre_split_dist: ClassWeightMap,
        att_index: int,
        binary_only: bool = True
    ) -> Optional[AttributeSplitSuggestion]:
        pass

    @abstractmethod
    def get_best_evaluated_split_suggestion_histogram(
        self,
        criterion: SplitCriterion,
        pre_split_dist: ClassWeightMap,
        att_index: int,
        binary_only: bool = True
    ) -> Optional[HistogramSplitSuggestion]:
        pass

    @abstractmethod
    def has_class(self, class_val: int) -> bool:
        """Whether any value was recorded for ``class_val``."""
        pass

    @abstractmethod
    def sample_for_class(self, class_val: int, rng: np.random.Generator) -> Optional[float]:
        """Draw a synthetic attribute value for ``class_val``.

        Returns ``None`` when the class has no recorded distribution.
        """
        pass
