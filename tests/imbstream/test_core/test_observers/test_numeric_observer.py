"""Tests for the numeric attribute observer and its synthetic value sampling."""

import numpy as np
import pytest

from imbstream.constants import NumericSamplingPolicy
from imbstream.core.observers import GaussianNumericObserverHistogram
from imbstream.core.splitting import InfoGainSplitCriterion, NumericAttributeBinaryTest
from imbstream.utils.errors import InvalidInputError, NumericDomainError, UnsupportedModeError


def _observe(observer, values, class_val, weight=1.0):
    for value in values:
        observer.observe_attribute_class(value, class_val, weight)


@pytest.fixture
def separated_observer():
    observer = GaussianNumericObserverHistogram(num_bins=10)
    _observe(observer, [1.0, 2.0, 3.0], 0)
    _observe(observer, [10.0, 11.0, 12.0], 1)
    return observer


def test_invalid_bin_count():
    with pytest.raises(InvalidInputError):
        GaussianNumericObserverHistogram(num_bins=0)


def test_split_point_suggestions(separated_observer):
    suggestions = separated_observer.get_split_point_suggestions()
    assert suggestions == pytest.approx([float(v) for v in range(2, 12)])
    assert all(1.0 < s < 12.0 for s in suggestions)


def test_no_suggestions_when_empty_or_degenerate():
    observer = GaussianNumericObserverHistogram()
    assert observer.get_split_point_suggestions() == []

    _observe(observer, [5.0, 5.0, 5.0], 0)
    assert observer.get_split_point_suggestions() == []


def test_min_max_tracked_per_class(separated_observer):
    assert separated_observer.min_value_observed_per_class == {0: 1.0, 1: 10.0}
    assert separated_observer.max_value_observed_per_class == {0: 3.0, 1: 12.0}


def test_missing_values_are_dropped():
    observer = GaussianNumericObserverHistogram()
    observer.observe_attribute_class(float("nan"), 0, 1.0)
    assert not observer.has_class(0)


def test_probability_for_unseen_class_is_zero(separated_observer):
    assert separated_observer.probability_of_attribute_value_given_class(2.0, 5) == 0.0
    assert separated_observer.probability_of_attribute_value_given_class(2.0, 0) > 0.0


def test_observe_attribute_target_unsupported(separated_observer):
    with pytest.raises(UnsupportedModeError):
        separated_observer.observe_attribute_target(1.0, 2.0)


def test_binary_split_outside_class_ranges(separated_observer):
    lhs, rhs = separated_observer.get_class_dists_resulting_from_binary_split(5.0)
    assert lhs == {0: 3.0}
    assert rhs == {1: 3.0}


def test_best_split_suggestion_separates_classes(separated_observer):
    criterion = InfoGainSplitCriterion()
    suggestion = separated_observer.get_best_evaluated_split_suggestion(criterion, {0: 3.0, 1: 3.0}, 0)
    assert isinstance(suggestion.split_test, NumericAttributeBinaryTest)
    assert suggestion.split_test.att_index == 0
    assert suggestion.split_test.split_value == pytest.approx(3.0)
    assert suggestion.merit == pytest.approx(1.0)


def test_histogram_suggestion_carries_whole_instance_counts(separated_observer):
    criterion = InfoGainSplitCriterion()
    suggestion = separated_observer.get_best_evaluated_split_suggestion_histogram(criterion, {0: 3.0, 1: 3.0}, 0)
    assert suggestion.resulting_instance_distributions == [{0: 3.0}, {1: 3.0}]
    for split_value in separated_observer.get_split_point_suggestions():
        for dist in separated_observer.get_class_dists_resulting_from_binary_split_histogram(split_value):
            for count in dist.values():
                assert count >= 0
                assert float(count).is_integer()


def test_no_split_suggestion_without_candidates():
    observer = GaussianNumericObserverHistogram()
    assert observer.get_best_evaluated_split_suggestion(InfoGainSplitCriterion(), {}, 0) is None


def test_gaussian_sample_uses_variance_as_spread():
    observer = GaussianNumericObserverHistogram()
    _observe(observer, [0.0, 4.0], 0)
    estimator = observer.estimator(0)
    assert estimator.simple_mean == pytest.approx(2.0)
    assert estimator.simple_variance == pytest.approx(8.0)

    expected = 2.0 + np.random.default_rng(7).standard_normal() * 8.0
    assert observer.sample_for_class(0, np.random.default_rng(7)) == pytest.approx(expected)


def test_gaussian_sample_with_single_value_is_constant():
    observer = GaussianNumericObserverHistogram()
    _observe(observer, [5.0], 1)
    assert observer.sample_for_class(1, np.random.default_rng(0)) == 5.0


def test_sample_for_unseen_class_is_none(rng):
    observer = GaussianNumericObserverHistogram()
    _observe(observer, [1.0, 2.0], 1)
    assert observer.sample_for_class(0, rng) is None


@pytest.fixture
def spread_observer():
    observer = GaussianNumericObserverHistogram(sampling_policy=NumericSamplingPolicy.BETA)
    _observe(observer, [float(v) for v in range(11)], 0)
    return observer


def test_beta_samples_stay_in_class_range(spread_observer, rng):
    samples = [spread_observer.sample_for_class(0, rng) for _ in range(200)]
    assert all(0.0 <= s <= 10.0 for s in samples)


def test_gamma_samples_start_at_class_minimum(rng):
    observer = GaussianNumericObserverHistogram(sampling_policy="gamma")
    _observe(observer, [float(v) for v in range(11)], 0)
    samples = [observer.sample_for_class(0, rng) for _ in range(200)]
    assert all(s >= 0.0 for s in samples)


def test_beta_and_gamma_reject_degenerate_range(rng):
    observer = GaussianNumericObserverHistogram()
    _observe(observer, [3.0, 3.0], 0)
    with pytest.raises(NumericDomainError):
        observer.sample_from_beta(0, rng)
    with pytest.raises(NumericDomainError):
        observer.sample_from_gamma(0, rng)


def test_beta_rejects_unseen_class(rng):
    observer = GaussianNumericObserverHistogram()
    with pytest.raises(NumericDomainError):
        observer.sample_from_beta(0, rng)


def test_beta_rejects_non_positive_shape(rng):
    # Mean in the middle but spread too wide for a Beta fit
    observer = GaussianNumericObserverHistogram()
    _observe(observer, [1.0, 2.0, 3.0], 0)
    with pytest.raises(NumericDomainError):
        observer.sample_from_beta(0, rng)
