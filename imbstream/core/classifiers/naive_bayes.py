from typing import Any, Dict

import numpy as np

from imbstream.constants import DEFAULT_NUM_BINS
from imbstream.core.classifiers.base import BaseAdaptiveClassifier
from imbstream.core.data_structures import ClassWeightMap, Instance, add_to_distribution, distribution_to_array
from imbstream.core.observers import AttributeClassObserver, GaussianNumericObserverHistogram, NominalObserverHistogram
from imbstream.utils.errors import InvalidInputError
from imbstream.utils.logging import setup_logger

logger = setup_logger(__name__)


class GaussianNaiveBayes(BaseAdaptiveClassifier):
    """Incremental naive Bayes built on the attribute observers.

    Numeric likelihoods come from the per-class normal model of
    ``GaussianNumericObserverHistogram``; nominal likelihoods are Laplace
    smoothed category frequencies. Scores are normalised to sum to 1; when every
    likelihood product underflows to 0 the class prior is returned instead.
    """

    def __init__(self, num_bins: int = DEFAULT_NUM_BINS):
        self.num_bins = num_bins
        self.observed_class_distribution: ClassWeightMap = {}
        self.observers: Dict[int, AttributeClassObserver] = {}

    def train(self, instance: Instance) -> None:
        if not instance.has_label:
            raise InvalidInputError("Cannot train on an unlabeled instance")
        class_val = instance.class_value
        add_to_distribution(self.observed_class_distribution, class_val, instance.weight)
        for att_index in instance.schema.input_indices():
            observer = self.observers.get(att_index)
            if observer is None:
                attribute = instance.schema.attribute(att_index)
                if attribute.nominal:
                    observer = NominalObserverHistogram(attribute.num_values)
                else:
                    observer = GaussianNumericObserverHistogram(num_bins=self.num_bins)
                self.observers[att_index] = observer
            observer.observe_attribute_class(instance.value(att_index), class_val, instance.weight)

    def predict_proba(self, instance: Instance) -> np.ndarray:
        num_classes = instance.schema.num_classes
        prior = distribution_to_array(self.observed_class_distribution, num_classes)
        total = prior.sum()
        if total <= 0.0:
            return np.zeros(num_classes)
        prior /= total

        votes = prior.copy()
        for class_val in range(num_classes):
            if votes[class_val] == 0.0:
                continue
            for att_index, observer in self.observers.items():
                if instance.is_missing(att_index):
                    continue
                votes[class_val] *= observer.probability_of_attribute_value_given_class(
                    instance.value(att_index), class_val
                )

        vote_total = votes.sum()
        if vote_total <= 0.0 or not np.isfinite(vote_total):
            return prior
        return votes / vote_total

    def reset(self) -> None:
        self.observed_class_distribution = {}
        self.observers = {}

    def get_performance_metrics(self) -> Dict[str, Any]:
        return {
            "observed_weight": sum(self.observed_class_distribution.values()),
            "attribute_count": len(self.observers)
        }
