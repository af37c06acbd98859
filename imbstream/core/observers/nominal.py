from typing import Dict, List, Optional

import numpy as np

from imbstream.core.data_structures import ClassWeightMap, add_to_distribution, is_missing
from imbstream.core.observers.base import AttributeClassObserver
from imbstream.core.splitting.conditional_tests import NominalAttributeBinaryTest, NominalAttributeMultiwayTest
from imbstream.core.splitting.suggestion import AttributeSplitSuggestion, HistogramSplitSuggestion


class NominalObserverHistogram(AttributeClassObserver):
    """Per-class category weights of one nominal attribute.

    A synthetic value for a class is its most frequent recorded category.
    The histogram split flavour uses per-class instance counts instead of
    weights.
    """

    def __init__(self, num_values: int):
        self.num_values = num_values
        self.total_weight_observed = 0.0
        self.missing_weight_observed = 0.0
        self.att_val_dist_per_class: Dict[int, ClassWeightMap] = {}
        self.att_count_per_class: Dict[int, ClassWeightMap] = {}

    def observe_attribute_class(self, att_val, class_val, weight):
        if is_missing(att_val):
            self.missing_weight_observed += weight
            return
        att_index = int(att_val)
        add_to_distribution(self.att_val_dist_per_class.setdefault(class_val, {}), att_index, weight)
        add_to_distribution(self.att_count_per_class.setdefault(class_val, {}), att_index, 1.0)
        self.total_weight_observed += weight

    def probability_of_attribute_value_given_class(self, att_val, class_val):
        # Laplace smoothing over the known categories
        dist = self.att_val_dist_per_class.get(class_val)
        if dist is None:
            return 0.0
        value = dist.get(int(att_val), 0.0)
        return (value + 1.0) / (sum(dist.values()) + max(self.num_values, len(dist)))

    def has_class(self, class_val):
        return class_val in self.att_val_dist_per_class

    def _dists_per_value(self, source: Dict[int, ClassWeightMap]) -> List[ClassWeightMap]:
        dists: List[ClassWeightMap] = [{} for _ in range(self.num_values)]
        for class_val, att_dist in source.items():
            for att_index, weight in att_dist.items():
                while att_index >= len(dists):
                    dists.append({})
                add_to_distribution(dists[att_index], class_val, weight)
        return dists

    def _binary_dists(self, source: Dict[int, ClassWeightMap], att_value: int) -> List[ClassWeightMap]:
        equal: ClassWeightMap = {}
        not_equal: ClassWeightMap = {}
        for class_val, att_dist in source.items():
            for att_index, weight in att_dist.items():
                target = equal if att_index == att_value else not_equal
                add_to_distribution(target, class_val, weight)
        return [equal, not_equal]

    def get_best_evaluated_split_suggestion(self, criterion, pre_split_dist, att_index, binary_only=True):
        best_suggestion = None
        if not binary_only:
            post_split_dists = self._dists_per_value(self.att_val_dist_per_class)
            merit = criterion.get_merit_of_split(pre_split_dist, post_split_dists)
            best_suggestion = AttributeSplitSuggestion(
                NominalAttributeMultiwayTest(att_index, len(post_split_dists)), post_split_dists, merit
            )
        for value in range(self.num_values):
            post_split_dists = self._binary_dists(self.att_val_dist_per_class, value)
            merit = criterion.get_merit_of_split(pre_split_dist, post_split_dists)
            if best_suggestion is None or merit > best_suggestion.merit:
                best_suggestion = AttributeSplitSuggestion(
                    NominalAttributeBinaryTest(att_index, value), post_split_dists, merit
                )
        return best_suggestion

    def get_best_evaluated_split_suggestion_histogram(self, criterion, pre_split_dist, att_index, binary_only=True):
        best_suggestion = None
        if not binary_only:
            post_split_dists = self._dists_per_value(self.att_val_dist_per_class)
            post_split_counts = self._dists_per_value(self.att_count_per_class)
            merit = criterion.get_merit_of_split(pre_split_dist, post_split_dists)
            best_suggestion = HistogramSplitSuggestion(
                NominalAttributeMultiwayTest(att_index, len(post_split_dists)),
                post_split_dists,
                merit,
                resulting_instance_distributions=post_split_counts
            )
        for value in range(self.num_values):
            post_split_dists = self._binary_dists(self.att_val_dist_per_class, value)
            merit = criterion.get_merit_of_split(pre_split_dist, post_split_dists)
            if best_suggestion is None or merit > best_suggestion.merit:
                best_suggestion = HistogramSplitSuggestion(
                    NominalAttributeBinaryTest(att_index, value),
                    post_split_dists,
                    merit,
                    resulting_instance_distributions=self._binary_dists(self.att_count_per_class, value)
                )
        return best_suggestion

    def most_frequent_value(self, class_val: int) -> Optional[int]:
        dist = self.att_val_dist_per_class.get(class_val)
        if not dist:
            return None
        best_weight = max(dist.values())
        return min(att_index for att_index, weight in dist.items() if weight == best_weight)

    def sample_for_class(self, class_val, rng: np.random.Generator):
        value = self.most_frequent_value(class_val)
        return None if value is None else float(value)
