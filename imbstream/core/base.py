from typing import Any, Protocol, Sequence, runtime_checkable

import numpy as np

from imbstream.core.data_structures import ClassWeightMap, Instance


@runtime_checkable
class Learner(Protocol):
    """Protocol for the base classifier wrapped by the rebalancing handler.

    Learners are trained one instance at a time and must be able to forget
    everything they learned when a drift reset is triggered.
    """

    def train(self, instance: Instance) -> None:
        """Update the learner with a single labeled instance."""
        ...

    def predict_proba(self, instance: Instance) -> np.ndarray:
        """Return the per-class score vector for an instance.

        The vector has one entry per class of the instance schema.
        """
        ...

    def reset(self) -> None:
        """Discard everything learned so far."""
        ...


@runtime_checkable
class StatisticsProvider(Protocol):
    """Protocol for the secondary model whose leaves feed instance synthesis.

    The rebalancing handler only trains it and reads it; growing, splitting
    and pruning are entirely up to the implementation.
    """

    @property
    def observed_class_distribution(self) -> ClassWeightMap:
        """Class weights of every instance the provider was trained on."""
        ...

    def train(self, instance: Instance) -> None:
        ...

    def get_leaves(self, min_size: int = -1) -> Sequence[Any]:
        """Leaf positions as ``FoundNode`` objects, filtered by ``min_size`` (-1 disables)."""
        ...


@runtime_checkable
class SplitCriterion(Protocol):
    """Scores candidate splits; higher merit is better."""

    def get_merit_of_split(self, pre_split_dist: ClassWeightMap, post_split_dists: Sequence[ClassWeightMap]) -> float:
        ...

    def get_range_of_merit(self, pre_split_dist: ClassWeightMap) -> float:
        ...
