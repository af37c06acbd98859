import math
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from imbstream.core.data_structures import Instance, max_index
from imbstream.utils.config import Config, get_config
from imbstream.utils.errors import ConfigError

NO_GRADUAL_DRIFT_WIDTH = -1


class WindowEstimator:
    """Mean of the values added since the current window started.

    The window is a fixed-size buffer that restarts empty once full; the
    restart happens lazily on the next ``add``. With ``gradual_drift_width``
    set, consecutive windows alternate between ``width`` and
    ``gradual_drift_width``, imitating a stable phase followed by a transition
    phase. NaN values occupy a slot but do not contribute to the mean.
    """

    def __init__(self, width: int, gradual_drift_width: int = NO_GRADUAL_DRIFT_WIDTH):
        if width < 1:
            raise ConfigError(f"Window width must be positive, got {width}")
        if gradual_drift_width != NO_GRADUAL_DRIFT_WIDTH and gradual_drift_width < 1:
            raise ConfigError(f"Gradual drift width must be positive or -1, got {gradual_drift_width}")
        self.width = width
        self.gradual_drift_width = gradual_drift_width
        self.window = np.zeros(width)
        self.position = 0
        self.length = 0
        self.sum = 0.0
        self.num_nans = 0

    def _restart(self, size: int) -> None:
        self.window = np.zeros(size)
        self.position = 0
        self.length = 0
        self.sum = 0.0
        self.num_nans = 0

    def add(self, value: float) -> None:
        if self.gradual_drift_width != NO_GRADUAL_DRIFT_WIDTH:
            if self.position == self.width and len(self.window) == self.width:
                self._restart(self.gradual_drift_width)
            elif self.position == self.gradual_drift_width and len(self.window) == self.gradual_drift_width:
                self._restart(self.width)
        elif self.position == self.width:
            self._restart(self.width)

        if math.isnan(value):
            self.num_nans += 1
        else:
            self.sum += value
        self.window[self.position] = value
        self.position += 1
        self.length += 1

    @property
    def current_width(self) -> int:
        return len(self.window)

    @property
    def estimation(self) -> float:
        """Mean of the non-NaN values in the window, NaN when there are none."""
        count = self.length - self.num_nans
        if count <= 0:
            return math.nan
        return self.sum / count


class WindowClassificationEvaluator:
    """Windowed accuracy, per-class precision and recall, and their G-mean.

    Per-class windows receive NaN for instances that do not concern the class,
    so every window advances in step while each mean only covers relevant
    instances.
    """

    def __init__(self, width: int = 1000, gradual_drift_width: int = NO_GRADUAL_DRIFT_WIDTH):
        self.width = width
        self.gradual_drift_width = gradual_drift_width
        self.num_classes: Optional[int] = None
        self.reset()

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> 'WindowClassificationEvaluator':
        config = config or get_config()
        section = config.get_component_config("window_evaluator") or {}
        return cls(
            width=section.get("width", 1000),
            gradual_drift_width=section.get("gradual_drift_width", NO_GRADUAL_DRIFT_WIDTH)
        )

    def _new_estimator(self) -> WindowEstimator:
        return WindowEstimator(self.width, self.gradual_drift_width)

    def reset(self, num_classes: Optional[int] = None) -> None:
        self.num_classes = num_classes
        self.weight_observed = 0.0
        self.weight_correct = self._new_estimator()
        self.precision_estimators: List[WindowEstimator] = [self._new_estimator() for _ in range(num_classes or 0)]
        self.recall_estimators: List[WindowEstimator] = [self._new_estimator() for _ in range(num_classes or 0)]

    def add_result(self, instance: Instance, votes: Sequence[float]) -> None:
        """Record the prediction ``votes`` made for a labeled ``instance``."""
        weight = instance.weight
        if weight <= 0.0 or not instance.has_label:
            return
        if self.num_classes is None:
            self.reset(instance.schema.num_classes)

        true_class = instance.class_value
        predicted_class = max_index(votes)
        correct = 1.0 if predicted_class == true_class else 0.0
        self.weight_observed += weight
        self.weight_correct.add(weight * correct)
        for class_index in range(self.num_classes):
            self.precision_estimators[class_index].add(
                weight * correct if predicted_class == class_index else math.nan
            )
            self.recall_estimators[class_index].add(
                weight * correct if true_class == class_index else math.nan
            )

    @property
    def accuracy(self) -> float:
        return self.weight_correct.estimation

    def precision(self, class_index: int) -> float:
        return self.precision_estimators[class_index].estimation

    def recall(self, class_index: int) -> float:
        return self.recall_estimators[class_index].estimation

    def g_mean(self) -> float:
        """Geometric mean of the per-class recalls, NaN while a class has no recall yet."""
        if not self.recall_estimators:
            return math.nan
        product = 1.0
        for estimator in self.recall_estimators:
            product *= estimator.estimation
        return product ** (1.0 / len(self.recall_estimators))

    def get_metrics(self) -> Dict[str, Any]:
        metrics: Dict[str, Any] = {
            "instances_weight": self.weight_observed,
            "accuracy": self.accuracy,
            "g_mean": self.g_mean()
        }
        for class_index in range(self.num_classes or 0):
            metrics[f"precision_{class_index}"] = self.precision(class_index)
            metrics[f"recall_{class_index}"] = self.recall(class_index)
        return metrics
