from abc import ABC, abstractmethod
from typing import Any, Dict

import numpy as np

from imbstream.core.data_structures import Instance, max_index
from imbstream.utils.logging import setup_logger

logger = setup_logger(__name__)


class BaseAdaptiveClassifier(ABC):
    """Base abstract class for all incremental classifiers.

    Classifiers learn one instance at a time and can forget everything on
    ``reset``. Scores are returned as a vector with one entry per class of the
    instance schema.
    """

    @abstractmethod
    def train(self, instance: Instance) -> None:
        """Update the classifier with one labeled instance.

        Args:
            instance: Labeled instance; its weight scales the update
        """
        pass

    @abstractmethod
    def predict_proba(self, instance: Instance) -> np.ndarray:
        """Score every class for an instance.

        Args:
            instance: Instance to score; the class slot is ignored

        Returns:
            Vector of length ``instance.schema.num_classes``. An untrained
            classifier returns all zeros.
        """
        pass

    def predict(self, instance: Instance) -> int:
        """Index of the highest score, lowest index on ties."""
        return max_index(self.predict_proba(instance))

    @abstractmethod
    def reset(self) -> None:
        """Forget everything learned so far."""
        pass

    def get_performance_metrics(self) -> Dict[str, Any]:
        return {}
