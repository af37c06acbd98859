import math
from typing import Any, Dict, List, Optional, Union

import numpy as np

from imbstream.constants import (
    DEFAULT_HISTOGRAM_MAX_BINS,
    DEFAULT_NUM_BINS,
    UNBOUNDED_MINORITY_SIZE,
    NumericSamplingPolicy,
    SplitCriterionType
)
from imbstream.core.classifiers.base import BaseAdaptiveClassifier
from imbstream.core.data_structures import (
    Attribute,
    ClassWeightMap,
    Instance,
    add_to_distribution,
    distribution_to_array
)
from imbstream.core.observers import AttributeClassObserver, GaussianNumericObserverHistogram, NominalObserverHistogram
from imbstream.core.splitting import BaseSplitCriterion, HistogramSplitSuggestion, split_criterion_registry
from imbstream.core.tree.nodes import FoundNode, LearningNode, Node, SplitNode
from imbstream.utils.errors import ConfigError, InvalidInputError
from imbstream.utils.logging import setup_logger

logger = setup_logger(__name__)


def build_split_criterion(split_criterion: Union[str, SplitCriterionType, BaseSplitCriterion]) -> BaseSplitCriterion:
    if isinstance(split_criterion, BaseSplitCriterion):
        return split_criterion
    try:
        return split_criterion_registry.create(split_criterion)
    except KeyError:
        raise ConfigError(f"Unknown split criterion: {split_criterion}")


def compute_hoeffding_bound(range_val: float, confidence: float, n: float) -> float:
    """Hoeffding bound ``sqrt(R^2 ln(1/delta) / 2n)``."""
    return math.sqrt((range_val * range_val * math.log(1.0 / confidence)) / (2.0 * n))


class HoeffdingTreeHistogram(BaseAdaptiveClassifier):
    """Incremental decision tree whose leaves keep histogram attribute observers.

    The tree serves two roles. As the statistics model of the rebalancing
    handler its leaves (reported by ``get_leaves``) hold the per-class
    attribute statistics synthetic instances are drawn from. It is also a
    regular classifier predicting the normalised class distribution of the
    leaf an instance reaches.

    A leaf attempts a split every ``grace_period`` units of weight. The best
    candidate wins when its merit beats the runner-up by more than the
    Hoeffding bound, or when the bound has shrunk below ``tie_threshold``.
    Children of a split start from the whole-instance counts of the histogram
    split suggestion; branches receiving no instances stay empty until an
    instance reaches them.
    """

    def __init__(
        self,
        grace_period: int = 200,
        split_confidence: float = 1e-7,
        tie_threshold: float = 0.05,
        max_depth: int = 20,
        num_bins: int = DEFAULT_NUM_BINS,
        histogram_max_bins: int = DEFAULT_HISTOGRAM_MAX_BINS,
        split_criterion: Union[str, SplitCriterionType, BaseSplitCriterion] = SplitCriterionType.INFO_GAIN,
        binary_only: bool = False,
        numeric_sampling_policy: Union[str, NumericSamplingPolicy] = NumericSamplingPolicy.GAUSSIAN
    ):
        if grace_period < 1:
            raise ConfigError(f"grace_period must be positive, got {grace_period}")
        if not 0.0 < split_confidence < 1.0:
            raise ConfigError(f"split_confidence must be in (0, 1), got {split_confidence}")
        if max_depth < 0:
            raise ConfigError(f"max_depth must be non-negative, got {max_depth}")
        self.grace_period = grace_period
        self.split_confidence = split_confidence
        self.tie_threshold = tie_threshold
        self.max_depth = max_depth
        self.num_bins = num_bins
        self.histogram_max_bins = histogram_max_bins
        self.split_criterion = build_split_criterion(split_criterion)
        self.binary_only = binary_only
        self.numeric_sampling_policy = NumericSamplingPolicy(numeric_sampling_policy)

        self.root: Optional[Node] = None
        self._observed_class_distribution: ClassWeightMap = {}
        self.n_split_attempts = 0
        self.n_splits = 0

    @property
    def observed_class_distribution(self) -> ClassWeightMap:
        return self._observed_class_distribution

    def new_attribute_observer(self, attribute: Attribute) -> AttributeClassObserver:
        if attribute.nominal:
            return NominalObserverHistogram(attribute.num_values)
        return GaussianNumericObserverHistogram(
            num_bins=self.num_bins,
            histogram_max_bins=self.histogram_max_bins,
            sampling_policy=self.numeric_sampling_policy
        )

    def train(self, instance: Instance) -> None:
        if not instance.has_label:
            raise InvalidInputError("Cannot train on an unlabeled instance")
        add_to_distribution(self._observed_class_distribution, instance.class_value, instance.weight)

        if self.root is None:
            self.root = LearningNode()

        found = self.root.filter_instance_to_leaf(instance, None, -1)
        leaf = found.node
        if leaf is None:
            leaf = LearningNode(depth=found.parent.depth + 1)
            found.parent.set_child(found.parent_branch, leaf)

        if not isinstance(leaf, LearningNode):
            # Stopped at a split node on a missing value
            return

        leaf.learn_from_instance(instance, self)
        weight_seen = leaf.total_weight
        if weight_seen - leaf.weight_seen_at_last_split_evaluation >= self.grace_period:
            self._attempt_to_split(leaf, found.parent, found.parent_branch)
            leaf.weight_seen_at_last_split_evaluation = weight_seen

    def _attempt_to_split(self, node: LearningNode, parent: Optional[SplitNode], parent_branch: int) -> None:
        if node.depth >= self.max_depth or node.observed_class_distribution_is_pure():
            return
        self.n_split_attempts += 1

        best_split_suggestions = sorted(
            node.get_best_split_suggestions(self.split_criterion, self),
            key=lambda suggestion: suggestion.merit
        )
        if len(best_split_suggestions) < 2:
            return

        best = best_split_suggestions[-1]
        second_best = best_split_suggestions[-2]
        if best.split_test is None or best.merit == -math.inf:
            return

        hoeffding_bound = compute_hoeffding_bound(
            self.split_criterion.get_range_of_merit(node.observed_class_distribution),
            self.split_confidence,
            node.total_weight
        )
        if best.merit - second_best.merit <= hoeffding_bound and hoeffding_bound >= self.tie_threshold:
            return

        new_split = SplitNode(
            best.split_test,
            node.observed_class_distribution,
            depth=node.depth,
            attribute_observers=node.attribute_observers,
            size=best.num_splits
        )
        for i in range(best.num_splits):
            if isinstance(best, HistogramSplitSuggestion):
                child_dist = best.resulting_instance_distribution_from_split(i)
            else:
                child_dist = best.resulting_class_distribution_from_split(i)
            if sum(child_dist.values()) > 0:
                new_split.set_child(i, LearningNode(child_dist, depth=node.depth + 1))

        if parent is None:
            self.root = new_split
        else:
            parent.set_child(parent_branch, new_split)
        self.n_splits += 1
        logger.debug(
            f"Split leaf at depth {node.depth} on {best.split_test.describe_condition(0)} "
            f"(merit={best.merit:.4f}, bound={hoeffding_bound:.4f})"
        )

    def filter_instance_to_leaf(self, instance: Instance) -> Optional[FoundNode]:
        if self.root is None:
            return None
        return self.root.filter_instance_to_leaf(instance, None, -1)

    def predict_proba(self, instance: Instance) -> np.ndarray:
        num_classes = instance.schema.num_classes
        found = self.filter_instance_to_leaf(instance)
        if found is None:
            return np.zeros(num_classes)
        votes = distribution_to_array(found.resolve().observed_class_distribution, num_classes)
        total = votes.sum()
        return votes / total if total > 0 else votes

    def get_leaves(self, min_size: int = UNBOUNDED_MINORITY_SIZE) -> List[FoundNode]:
        """Every leaf position in left-to-right order, empty branch slots included.

        Args:
            min_size: When not -1, only leaves whose resolved node has observed
                at least ``min_size`` weight are returned
        """
        leaves: List[FoundNode] = []
        if self.root is not None:
            self._find_leaves(self.root, None, -1, leaves)
        if min_size == UNBOUNDED_MINORITY_SIZE:
            return leaves
        return [found for found in leaves if found.resolve().total_weight >= min_size]

    def _find_leaves(self, node: Optional[Node], parent: Optional[SplitNode], parent_branch: int, found: List[FoundNode]) -> None:
        if node is None:
            found.append(FoundNode(None, parent, parent_branch))
        elif isinstance(node, SplitNode):
            for i, child in enumerate(node.children):
                self._find_leaves(child, node, i, found)
        else:
            found.append(FoundNode(node, parent, parent_branch))

    def measure_tree_depth(self) -> int:
        return self.root.subtree_depth() if self.root is not None else 0

    def count_nodes(self) -> Dict[str, int]:
        counts = {"split_nodes": 0, "leaves": 0, "empty_slots": 0}
        stack: List[Optional[Node]] = [self.root] if self.root is not None else []
        while stack:
            node = stack.pop()
            if node is None:
                counts["empty_slots"] += 1
            elif isinstance(node, SplitNode):
                counts["split_nodes"] += 1
                stack.extend(node.children)
            else:
                counts["leaves"] += 1
        return counts

    def reset(self) -> None:
        self.root = None
        self._observed_class_distribution = {}
        self.n_split_attempts = 0
        self.n_splits = 0

    def get_performance_metrics(self) -> Dict[str, Any]:
        metrics: Dict[str, Any] = {
            "observed_weight": sum(self._observed_class_distribution.values()),
            "tree_depth": self.measure_tree_depth(),
            "split_attempts": self.n_split_attempts,
            "splits": self.n_splits
        }
        metrics.update(self.count_nodes())
        return metrics
