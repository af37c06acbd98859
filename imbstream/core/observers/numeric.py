from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from imbstream.constants import DEFAULT_HISTOGRAM_MAX_BINS, DEFAULT_NUM_BINS, NumericSamplingPolicy
from imbstream.core.data_structures import ClassWeightMap, add_to_distribution, is_missing
from imbstream.core.observers.base import AttributeClassObserver
from imbstream.core.observers.estimator import GaussianEstimatorHistogram
from imbstream.core.splitting.conditional_tests import NumericAttributeBinaryTest
from imbstream.core.splitting.suggestion import AttributeSplitSuggestion, HistogramSplitSuggestion
from imbstream.utils.errors import InvalidInputError, NumericDomainError


class GaussianNumericObserverHistogram(AttributeClassObserver):
    """Observes one numeric attribute with a Gaussian/histogram estimator per class.

    Besides density and split evaluation it can draw synthetic values for a
    class. The drawing strategy is chosen by ``sampling_policy``:

    - ``GAUSSIAN``: ``mean + N(0, 1) * variance`` over the simple statistics.
      The spread uses the variance, not the standard deviation.
    - ``BETA``: method-of-moments Beta fit on the class ``[min, max]`` range.
    - ``GAMMA``: method-of-moments Gamma fit on the same scaled moments.
    """

    def __init__(
        self,
        num_bins: int = DEFAULT_NUM_BINS,
        histogram_max_bins: int = DEFAULT_HISTOGRAM_MAX_BINS,
        sampling_policy: Union[str, NumericSamplingPolicy] = NumericSamplingPolicy.GAUSSIAN
    ):
        if num_bins < 1:
            raise InvalidInputError(f"num_bins must be positive, got {num_bins}")
        self.num_bins = num_bins
        self.histogram_max_bins = histogram_max_bins
        self.sampling_policy = NumericSamplingPolicy(sampling_policy)

        self.att_val_dist_per_class: Dict[int, GaussianEstimatorHistogram] = {}
        self.min_value_observed_per_class: Dict[int, float] = {}
        self.max_value_observed_per_class: Dict[int, float] = {}

    def observe_attribute_class(self, att_val, class_val, weight):
        if is_missing(att_val):
            return
        val_dist = self.att_val_dist_per_class.get(class_val)
        if val_dist is None:
            val_dist = GaussianEstimatorHistogram(max_bins=self.histogram_max_bins)
            self.att_val_dist_per_class[class_val] = val_dist
            self.min_value_observed_per_class[class_val] = att_val
            self.max_value_observed_per_class[class_val] = att_val
        else:
            if att_val < self.min_value_observed_per_class[class_val]:
                self.min_value_observed_per_class[class_val] = att_val
            if att_val > self.max_value_observed_per_class[class_val]:
                self.max_value_observed_per_class[class_val] = att_val
        val_dist.add_observation(att_val, weight)

    def probability_of_attribute_value_given_class(self, att_val, class_val):
        estimator = self.att_val_dist_per_class.get(class_val)
        return estimator.probability_density(att_val) if estimator is not None else 0.0

    def has_class(self, class_val):
        return class_val in self.att_val_dist_per_class

    def estimator(self, class_val: int) -> Optional[GaussianEstimatorHistogram]:
        return self.att_val_dist_per_class.get(class_val)

    def get_split_point_suggestions(self) -> List[float]:
        """Equally spaced candidates strictly inside the global observed range."""
        if not self.att_val_dist_per_class:
            return []
        min_value = min(self.min_value_observed_per_class[c] for c in self.att_val_dist_per_class)
        max_value = max(self.max_value_observed_per_class[c] for c in self.att_val_dist_per_class)
        value_range = max_value - min_value
        suggested = set()
        for i in range(self.num_bins):
            split_value = value_range / (self.num_bins + 1.0) * (i + 1) + min_value
            if min_value < split_value < max_value:
                suggested.add(split_value)
        return sorted(suggested)

    def get_class_dists_resulting_from_binary_split(self, split_value: float) -> Tuple[ClassWeightMap, ClassWeightMap]:
        # values equal to split_value go left
        lhs_dist: ClassWeightMap = {}
        rhs_dist: ClassWeightMap = {}
        for class_val, estimator in self.att_val_dist_per_class.items():
            if split_value < self.min_value_observed_per_class[class_val]:
                add_to_distribution(rhs_dist, class_val, estimator.total_weight_observed)
            elif split_value >= self.max_value_observed_per_class[class_val]:
                add_to_distribution(lhs_dist, class_val, estimator.total_weight_observed)
            else:
                less_or_equal, greater = estimator.weight_split(split_value)
                add_to_distribution(lhs_dist, class_val, less_or_equal)
                add_to_distribution(rhs_dist, class_val, greater)
        return lhs_dist, rhs_dist

    def get_class_dists_resulting_from_binary_split_histogram(self, split_value: float) -> Tuple[ClassWeightMap, ClassWeightMap]:
        """Instance counts per side, rounded to whole instances."""
        lhs_dist: ClassWeightMap = {}
        rhs_dist: ClassWeightMap = {}
        for class_val, estimator in self.att_val_dist_per_class.items():
            if split_value < self.min_value_observed_per_class[class_val]:
                add_to_distribution(rhs_dist, class_val, estimator.total_instances_observed)
            elif split_value >= self.max_value_observed_per_class[class_val]:
                add_to_distribution(lhs_dist, class_val, estimator.total_instances_observed)
            else:
                less_or_equal, greater = estimator.instance_split_rounded(split_value)
                add_to_distribution(lhs_dist, class_val, less_or_equal)
                add_to_distribution(rhs_dist, class_val, greater)
        return lhs_dist, rhs_dist

    def get_best_evaluated_split_suggestion(self, criterion, pre_split_dist, att_index, binary_only=True):
        best_suggestion = None
        for split_value in self.get_split_point_suggestions():
            post_split_dists = list(self.get_class_dists_resulting_from_binary_split(split_value))
            merit = criterion.get_merit_of_split(pre_split_dist, post_split_dists)
            if best_suggestion is None or merit > best_suggestion.merit:
                best_suggestion = AttributeSplitSuggestion(
                    NumericAttributeBinaryTest(att_index, split_value, True), post_split_dists, merit
                )
        return best_suggestion

    def get_best_evaluated_split_suggestion_histogram(self, criterion, pre_split_dist, att_index, binary_only=True):
        best_suggestion = None
        for split_value in self.get_split_point_suggestions():
            post_split_dists = list(self.get_class_dists_resulting_from_binary_split(split_value))
            post_split_counts = list(self.get_class_dists_resulting_from_binary_split_histogram(split_value))
            merit = criterion.get_merit_of_split(pre_split_dist, post_split_dists)
            if best_suggestion is None or merit > best_suggestion.merit:
                best_suggestion = HistogramSplitSuggestion(
                    NumericAttributeBinaryTest(att_index, split_value, True),
                    post_split_dists,
                    merit,
                    resulting_instance_distributions=post_split_counts
                )
        return best_suggestion

    def _scaled_moments(self, class_val: int) -> Tuple[float, float, float, float]:
        estimator = self.att_val_dist_per_class.get(class_val)
        if estimator is None:
            raise NumericDomainError(f"No distribution recorded for class {class_val}")
        low = self.min_value_observed_per_class[class_val]
        high = self.max_value_observed_per_class[class_val]
        value_range = high - low
        if value_range <= 0.0:
            raise NumericDomainError(f"Degenerate range [{low}, {high}] for class {class_val}")
        mean_scaled = (estimator.simple_mean - low) / value_range
        variance_scaled = (estimator.simple_std_dev / value_range) ** 2
        if variance_scaled <= 0.0:
            raise NumericDomainError(f"Zero variance for class {class_val}")
        return low, value_range, mean_scaled, variance_scaled

    def sample_from_beta(self, class_val: int, rng: np.random.Generator) -> float:
        low, value_range, mean_scaled, variance_scaled = self._scaled_moments(class_val)
        if not 0.0 < mean_scaled < 1.0:
            raise NumericDomainError(f"Scaled mean {mean_scaled} outside (0, 1) for class {class_val}")
        alpha = mean_scaled ** 2 * (((1.0 - mean_scaled) / variance_scaled) - (1.0 / mean_scaled))
        beta = alpha * ((1.0 / mean_scaled) - 1.0)
        if alpha <= 0.0 or beta <= 0.0:
            raise NumericDomainError(
                f"Beta shape parameters must be positive (alpha={alpha}, beta={beta}) for class {class_val}"
            )
        return low + value_range * rng.beta(alpha, beta)

    def sample_from_gamma(self, class_val: int, rng: np.random.Generator) -> float:
        low, value_range, mean_scaled, variance_scaled = self._scaled_moments(class_val)
        if mean_scaled <= 0.0:
            raise NumericDomainError(f"Scaled mean {mean_scaled} must be positive for class {class_val}")
        shape = mean_scaled ** 2 / variance_scaled
        scale = variance_scaled / mean_scaled
        return low + value_range * rng.gamma(shape, scale)

    def sample_for_class(self, class_val, rng):
        estimator = self.att_val_dist_per_class.get(class_val)
        if estimator is None:
            return None
        if self.sampling_policy is NumericSamplingPolicy.BETA:
            return self.sample_from_beta(class_val, rng)
        if self.sampling_policy is NumericSamplingPolicy.GAMMA:
            return self.sample_from_gamma(class_val, rng)
        return estimator.simple_mean + rng.standard_normal() * estimator.simple_variance
