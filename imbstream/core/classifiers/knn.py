import time
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from imbstream.core.classifiers.base import BaseAdaptiveClassifier
from imbstream.core.data_structures import Instance, Schema
from imbstream.utils.errors import InvalidInputError
from imbstream.utils.logging import setup_logger

logger = setup_logger(__name__)


class DistanceMetric(str, Enum):
    """Enumeration of supported distance metrics."""
    EUCLIDEAN = "euclidean"  # d(a,b) = sqrt(sum((a_i - b_i)^2))
    MANHATTAN = "manhattan"  # d(a,b) = sum(|a_i - b_i|)
    COSINE = "cosine"        # d(a,b) = 1 - (a·b)/(||a||·||b||)


class LightweightKNN(BaseAdaptiveClassifier):
    """A lightweight k-Nearest Neighbors classifier over a bounded sample memory.

    Features:
    - Multiple distance metrics: euclidean, manhattan, cosine
    - Nominal attributes compared by equality (0 when equal, 1 otherwise)
    - Missing values skipped attribute-wise
    - Maximum sample limit; the oldest sample is replaced once full
    - Optional inverse-distance vote weighting
    """

    def __init__(
        self,
        k: int = 5,
        distance_metric: Union[str, DistanceMetric] = DistanceMetric.EUCLIDEAN,
        max_samples: int = 1000,
        weight_by_distance: bool = False
    ):
        """Initialize the k-NN classifier.

        Args:
            k: Number of neighbors to consider
            distance_metric: Distance metric to use (euclidean, manhattan, cosine)
            max_samples: Maximum number of training samples to store
            weight_by_distance: Whether to weight votes by inverse distance
        """
        if k < 1:
            raise InvalidInputError(f"k must be positive, got {k}")
        if max_samples < 1:
            raise InvalidInputError(f"max_samples must be positive, got {max_samples}")
        self.k = k

        # Convert string to enum if needed
        if isinstance(distance_metric, str):
            try:
                distance_metric = DistanceMetric(distance_metric.lower())
            except ValueError:
                logger.warning(f"Unknown distance metric: {distance_metric}, using euclidean instead")
                distance_metric = DistanceMetric.EUCLIDEAN

        self.distance_metric = distance_metric
        self.max_samples = max_samples
        self.weight_by_distance = weight_by_distance

        # Training data
        self.X_train: List[np.ndarray] = []
        self.y_train: List[int] = []
        self.weights: List[float] = []
        self._insertion_order: List[int] = []
        self._insertions = 0
        self._nominal_mask: Optional[np.ndarray] = None

        # Performance metrics
        self._total_prediction_time = 0.0
        self._total_predictions = 0

        logger.debug(
            f"Initialized LightweightKNN with k={k}, "
            f"metric={distance_metric}, max_samples={max_samples}"
        )

    def train(self, instance: Instance) -> None:
        if not instance.has_label:
            raise InvalidInputError("Cannot train on an unlabeled instance")
        if self._nominal_mask is None:
            self._nominal_mask = self._build_nominal_mask(instance.schema)

        feature = instance.features()
        label = instance.class_value

        # Check if we're at max capacity
        if len(self.X_train) >= self.max_samples:
            oldest_idx = self._insertion_order.index(min(self._insertion_order))
            self.X_train[oldest_idx] = feature
            self.y_train[oldest_idx] = label
            self.weights[oldest_idx] = instance.weight
            self._insertion_order[oldest_idx] = self._insertions
        else:
            self.X_train.append(feature)
            self.y_train.append(label)
            self.weights.append(instance.weight)
            self._insertion_order.append(self._insertions)
        self._insertions += 1

    @staticmethod
    def _build_nominal_mask(schema: Schema) -> np.ndarray:
        return np.array([schema.attribute(i).nominal for i in schema.input_indices()], dtype=bool)

    def predict_proba(self, instance: Instance) -> np.ndarray:
        start_time = time.time()
        num_classes = instance.schema.num_classes
        votes = np.zeros(num_classes)

        if not self.X_train:
            logger.debug("Classifier has not been trained yet - returning zero scores")
            return votes

        for neighbor, distance in self._find_neighbors(instance.features()):
            label = self.y_train[neighbor]
            if not 0 <= label < num_classes:
                continue
            if self.weight_by_distance:
                # Avoid division by zero
                votes[label] += self.weights[neighbor] / (distance + 1e-6)
            else:
                votes[label] += self.weights[neighbor]

        total = votes.sum()
        if total > 0:
            votes /= total

        self._total_prediction_time += time.time() - start_time
        self._total_predictions += 1
        return votes

    def _find_neighbors(self, feature: np.ndarray) -> List[Tuple[int, float]]:
        """Find the k nearest neighbors for a feature vector.

        Ties in distance prefer the more recently inserted sample.

        Returns:
            List of tuples (neighbor_index, distance)
        """
        distances = []
        for i, train_feature in enumerate(self.X_train):
            distance = self._calculate_distance(feature, train_feature)
            distances.append((i, distance, self._insertion_order[i]))

        distances.sort(key=lambda x: (x[1], -x[2]))
        return [(idx, dist) for idx, dist, _ in distances[:self.k]]

    def _calculate_distance(self, a: np.ndarray, b: np.ndarray) -> float:
        """Distance between two feature vectors over the attributes present in both."""
        present = ~(np.isnan(a) | np.isnan(b))
        nominal = self._nominal_mask if self._nominal_mask is not None else np.zeros(a.shape, dtype=bool)

        numeric = present & ~nominal
        categorical = present & nominal
        mismatches = (a[categorical] != b[categorical]).astype(float)

        if self.distance_metric == DistanceMetric.EUCLIDEAN:
            return self._euclidean_distance(a[numeric], b[numeric], mismatches)
        elif self.distance_metric == DistanceMetric.MANHATTAN:
            return self._manhattan_distance(a[numeric], b[numeric], mismatches)
        elif self.distance_metric == DistanceMetric.COSINE:
            return self._cosine_distance(a[numeric], b[numeric], mismatches)
        else:
            raise InvalidInputError(f"Unsupported distance metric: {self.distance_metric}")

    @staticmethod
    def _euclidean_distance(a: np.ndarray, b: np.ndarray, mismatches: np.ndarray) -> float:
        return float(np.sqrt(np.sum((a - b) ** 2) + np.sum(mismatches)))

    @staticmethod
    def _manhattan_distance(a: np.ndarray, b: np.ndarray, mismatches: np.ndarray) -> float:
        return float(np.sum(np.abs(a - b)) + np.sum(mismatches))

    @staticmethod
    def _cosine_distance(a: np.ndarray, b: np.ndarray, mismatches: np.ndarray) -> float:
        """Cosine distance on numeric attributes (0 = identical, 2 = opposite) plus nominal mismatches."""
        magnitude_a = np.sqrt(np.sum(a ** 2))
        magnitude_b = np.sqrt(np.sum(b ** 2))
        if magnitude_a > 0 and magnitude_b > 0:
            cosine_similarity = np.dot(a, b) / (magnitude_a * magnitude_b)
            # Ensure it's within valid range due to floating point errors
            cosine_similarity = max(-1.0, min(1.0, cosine_similarity))
        else:
            cosine_similarity = 0.0
        return float(1.0 - cosine_similarity + np.sum(mismatches))

    def reset(self) -> None:
        self.X_train = []
        self.y_train = []
        self.weights = []
        self._insertion_order = []
        self._insertions = 0
        logger.debug("Cleared all training samples from classifier")

    def get_performance_metrics(self) -> Dict[str, Any]:
        avg_time = 0.0
        if self._total_predictions > 0:
            avg_time = self._total_prediction_time / self._total_predictions

        return {
            "total_prediction_time": self._total_prediction_time,
            "total_predictions": self._total_predictions,
            "avg_prediction_time": avg_time,
            "sample_count": len(self.X_train),
            "class_count": len(set(self.y_train))
        }
