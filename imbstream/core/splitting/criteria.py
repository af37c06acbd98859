import math
from abc import ABC, abstractmethod
from typing import Sequence

from imbstream.constants import SplitCriterionType
from imbstream.core.data_structures import ClassWeightMap
from imbstream.interfaces.registry import Registry


class BaseSplitCriterion(ABC):
    """Base class for split-merit criteria used by the statistics tree."""

    @abstractmethod
    def get_merit_of_split(self, pre_split_dist: ClassWeightMap, post_split_dists: Sequence[ClassWeightMap]) -> float:
        pass

    @abstractmethod
    def get_range_of_merit(self, pre_split_dist: ClassWeightMap) -> float:
        pass


def _weights(dist: ClassWeightMap) -> list:
    return [w for w in dist.values() if w > 0.0]


class InfoGainSplitCriterion(BaseSplitCriterion):
    """Entropy reduction.

    A split that leaves fewer than two branches holding at least
    ``min_branch_frac`` of the weight scores ``-inf``.
    """

    def __init__(self, min_branch_frac: float = 0.01):
        self.min_branch_frac = min_branch_frac

    def get_merit_of_split(self, pre_split_dist, post_split_dists):
        if self.num_subsets_greater_than_frac(post_split_dists, self.min_branch_frac) < 2:
            return -math.inf
        return self.compute_entropy(pre_split_dist) - self.compute_split_entropy(post_split_dists)

    def get_range_of_merit(self, pre_split_dist):
        num_classes = max(len(pre_split_dist), 2)
        return math.log2(num_classes)

    @staticmethod
    def compute_entropy(dist: ClassWeightMap) -> float:
        weights = _weights(dist)
        total = sum(weights)
        if total <= 0.0:
            return 0.0
        return -sum((w / total) * math.log2(w / total) for w in weights)

    @classmethod
    def compute_split_entropy(cls, dists: Sequence[ClassWeightMap]) -> float:
        totals = [sum(_weights(d)) for d in dists]
        overall = sum(totals)
        if overall <= 0.0:
            return 0.0
        return sum(t * cls.compute_entropy(d) for d, t in zip(dists, totals)) / overall

    @staticmethod
    def num_subsets_greater_than_frac(dists: Sequence[ClassWeightMap], min_frac: float) -> int:
        totals = [sum(_weights(d)) for d in dists]
        overall = sum(totals)
        if overall <= 0.0:
            return 0
        return sum(1 for t in totals if t / overall > min_frac)


class GiniSplitCriterion(BaseSplitCriterion):
    """Reduction of the Gini impurity."""

    def get_merit_of_split(self, pre_split_dist, post_split_dists):
        totals = [sum(_weights(d)) for d in post_split_dists]
        overall = sum(totals)
        if overall <= 0.0:
            return 0.0
        split_gini = sum(t / overall * self.compute_gini(d) for d, t in zip(post_split_dists, totals))
        return self.compute_gini(pre_split_dist) - split_gini

    def get_range_of_merit(self, pre_split_dist):
        return 1.0

    @staticmethod
    def compute_gini(dist: ClassWeightMap) -> float:
        weights = _weights(dist)
        total = sum(weights)
        if total <= 0.0:
            return 0.0
        return 1.0 - sum((w / total) ** 2 for w in weights)


split_criterion_registry: Registry[BaseSplitCriterion] = Registry(BaseSplitCriterion, "split criterion")
split_criterion_registry.register(SplitCriterionType.INFO_GAIN, InfoGainSplitCriterion)
split_criterion_registry.register(SplitCriterionType.GINI, GiniSplitCriterion)
