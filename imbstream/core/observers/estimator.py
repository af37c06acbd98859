import bisect
import math
from typing import List, Tuple

from imbstream.constants import DEFAULT_HISTOGRAM_MAX_BINS
from imbstream.core.data_structures import is_missing
from imbstream.utils.errors import InvalidInputError

NORMAL_CONSTANT = math.sqrt(2 * math.pi)


def normal_probability(z: float) -> float:
    """Standard normal cumulative distribution at ``z``."""
    return 0.5 * (1.0 + math.erf(z / math.sqrt(2.0)))


class GaussianEstimatorHistogram:
    """Incremental statistics of one numeric attribute for one class.

    Two parallel summaries are kept:

    - the *simple* form: weighted running mean and variance (Welford), total
      weight and instance count, observed min/max. Exact, constant memory.
    - the *histogram* form: at most ``max_bins`` centroids, each holding an
      instance count and a weight. When a new value would exceed the bin limit
      the two closest centroids are merged. Used for instance-count split
      estimates and for the histogram mean/variance.

    Density and weight-split queries model the class as a normal distribution
    parameterised by the simple statistics.
    """

    def __init__(self, max_bins: int = DEFAULT_HISTOGRAM_MAX_BINS):
        if max_bins < 1:
            raise InvalidInputError(f"max_bins must be positive, got {max_bins}")
        self.max_bins = max_bins

        self._weight_sum = 0.0
        self._instance_count = 0
        self._mean = 0.0
        self._variance_sum = 0.0
        self.min_value = math.inf
        self.max_value = -math.inf

        # Sorted by centroid
        self._centroids: List[float] = []
        self._counts: List[float] = []
        self._weights: List[float] = []

    def add_observation(self, value: float, weight: float) -> None:
        """Fold ``value`` with ``weight`` into both summaries.

        Missing values are ignored. A weight of zero is accepted and leaves the
        statistics untouched.
        """
        if is_missing(value):
            return
        if weight < 0:
            raise InvalidInputError(f"Observation weight must be non-negative, got {weight}")
        if weight == 0:
            return

        if self._weight_sum > 0.0:
            self._weight_sum += weight
            last_mean = self._mean
            self._mean += weight * (value - last_mean) / self._weight_sum
            self._variance_sum += weight * (value - last_mean) * (value - self._mean)
        else:
            self._mean = value
            self._weight_sum = weight

        self._instance_count += 1
        self.min_value = min(self.min_value, value)
        self.max_value = max(self.max_value, value)
        self._insert_bin(value, weight)

    def _insert_bin(self, value: float, weight: float) -> None:
        pos = bisect.bisect_left(self._centroids, value)
        if pos < len(self._centroids) and self._centroids[pos] == value:
            self._counts[pos] += 1
            self._weights[pos] += weight
            return
        self._centroids.insert(pos, value)
        self._counts.insert(pos, 1.0)
        self._weights.insert(pos, weight)
        if len(self._centroids) > self.max_bins:
            self._merge_closest()

    def _merge_closest(self) -> None:
        gaps = [self._centroids[i + 1] - self._centroids[i] for i in range(len(self._centroids) - 1)]
        i = gaps.index(min(gaps))
        count = self._counts[i] + self._counts[i + 1]
        centroid = (self._centroids[i] * self._counts[i] + self._centroids[i + 1] * self._counts[i + 1]) / count
        self._centroids[i:i + 2] = [centroid]
        self._counts[i:i + 2] = [count]
        self._weights[i:i + 2] = [self._weights[i] + self._weights[i + 1]]

    @property
    def total_weight_observed(self) -> float:
        return self._weight_sum

    @property
    def total_instances_observed(self) -> int:
        return self._instance_count

    @property
    def num_bins(self) -> int:
        return len(self._centroids)

    def bins(self) -> List[Tuple[float, float, float]]:
        """``(centroid, count, weight)`` triples in increasing centroid order."""
        return list(zip(self._centroids, self._counts, self._weights))

    # simple form

    @property
    def simple_mean(self) -> float:
        return self._mean

    @property
    def simple_variance(self) -> float:
        return self._variance_sum / (self._weight_sum - 1.0) if self._weight_sum > 1.0 else 0.0

    @property
    def simple_std_dev(self) -> float:
        return math.sqrt(self.simple_variance)

    # histogram form

    @property
    def mean(self) -> float:
        total = sum(self._weights)
        if total <= 0.0:
            return 0.0
        return sum(c * w for c, w in zip(self._centroids, self._weights)) / total

    @property
    def variance(self) -> float:
        total = sum(self._weights)
        if total <= 1.0:
            return 0.0
        mean = self.mean
        return sum(w * (c - mean) ** 2 for c, w in zip(self._centroids, self._weights)) / (total - 1.0)

    @property
    def std_dev(self) -> float:
        return math.sqrt(self.variance)

    # queries

    def probability_density(self, value: float) -> float:
        if self._weight_sum > 0.0:
            std_dev = self.simple_std_dev
            if std_dev > 0.0:
                diff = value - self._mean
                return (1.0 / (NORMAL_CONSTANT * std_dev)) * math.exp(-(diff * diff / (2.0 * std_dev * std_dev)))
            return 1.0 if value == self._mean else 0.0
        return 0.0

    def estimated_weight_lt_eq_gt(self, value: float) -> Tuple[float, float, float]:
        """Estimated weight below, at and above ``value`` under the normal model."""
        equal_to = self.probability_density(value) * self._weight_sum
        std_dev = self.simple_std_dev
        if std_dev > 0.0:
            less_than = normal_probability((value - self._mean) / std_dev) * self._weight_sum - equal_to
        else:
            less_than = self._weight_sum - equal_to if value < self._mean else 0.0
        less_than = max(less_than, 0.0)
        greater_than = max(self._weight_sum - equal_to - less_than, 0.0)
        return less_than, equal_to, greater_than

    def weight_split(self, threshold: float) -> Tuple[float, float]:
        """Partition the observed weight into ``(<= threshold, > threshold)``."""
        total = self._weight_sum
        if self._instance_count == 0:
            return 0.0, 0.0
        if threshold < self.min_value:
            return 0.0, total
        if threshold >= self.max_value:
            return total, 0.0
        less_than, equal_to, _ = self.estimated_weight_lt_eq_gt(threshold)
        less_or_equal = min(max(less_than + equal_to, 0.0), total)
        return less_or_equal, total - less_or_equal

    def instance_split(self, threshold: float) -> Tuple[float, float]:
        """Partition the instance count into ``(<= threshold, > threshold)`` from the histogram."""
        total = float(self._instance_count)
        if self._instance_count == 0:
            return 0.0, 0.0
        if threshold < self.min_value:
            return 0.0, total
        if threshold >= self.max_value:
            return total, 0.0
        less_or_equal = min(max(self._histogram_sum(threshold), 0.0), total)
        return less_or_equal, total - less_or_equal

    def instance_split_rounded(self, threshold: float) -> Tuple[int, int]:
        """Instance-count partition rounded to whole instances."""
        less_or_equal, greater = self.instance_split(threshold)
        total = int(round(less_or_equal + greater))
        rounded = int(math.floor(less_or_equal + 0.5))
        return rounded, total - rounded

    def _histogram_sum(self, b: float) -> float:
        """Estimated number of instances with value <= ``b``.

        Each centroid is assumed to spread half its mass on either side;
        counts are interpolated linearly between neighbouring centroids.
        """
        centroids, counts = self._centroids, self._counts
        total = sum(counts)
        first, last = centroids[0], centroids[-1]
        if b < first:
            if first <= self.min_value:
                return 0.0
            return counts[0] / 2.0 * (b - self.min_value) / (first - self.min_value)
        if b >= last:
            if self.max_value <= last:
                return total
            return total - counts[-1] / 2.0 * (self.max_value - b) / (self.max_value - last)

        i = bisect.bisect_right(centroids, b) - 1
        p_i, p_next = centroids[i], centroids[i + 1]
        m_i, m_next = counts[i], counts[i + 1]
        frac = (b - p_i) / (p_next - p_i)
        m_b = m_i + (m_next - m_i) * frac
        s = (m_i + m_b) / 2.0 * frac
        return sum(counts[:i]) + m_i / 2.0 + s
