from dataclasses import dataclass
from typing import Optional

from imbstream.core.drift_detection.base import DriftDetector
from imbstream.utils.errors import InvalidInputError
from imbstream.utils.logging import setup_logger

logger = setup_logger(__name__)


@dataclass
class CUSUMState:
    """Cumulative sum, its minimum, and the sample counters of a CUSUM detector."""
    cumsum: float = 0.0
    min_cumsum: float = float('inf')
    min_cumsum_index: int = 0
    n_samples: int = 0
    accuracy_sum: float = 0.0
    drift_point_index: Optional[int] = None


class AccuracyCUSUM(DriftDetector):
    """One-sided CUSUM detector over the per-event correctness indicator.

    The detector accumulates how far the observed accuracy falls below
    ``baseline_accuracy - drift_magnitude`` and signals a change once the sum
    exceeds ``threshold``. ``estimation`` is the mean of every input since the
    last reset.
    """

    def __init__(
        self,
        baseline_accuracy: float = 0.9,
        threshold: float = 5.0,
        drift_magnitude: float = 0.1,
        min_samples_for_detection: int = 10
    ):
        """Initialize the CUSUM detector.

        Args:
            baseline_accuracy: Expected accuracy of the classifier under normal conditions
            threshold: Detection threshold for the cumulative sum
            drift_magnitude: Expected magnitude of accuracy drop (delta)
            min_samples_for_detection: Minimum number of samples before drift can be detected
        """
        super().__init__()
        self.baseline_accuracy = baseline_accuracy
        self.threshold = threshold
        self.drift_magnitude = drift_magnitude
        self.min_samples_for_detection = min_samples_for_detection

        self.state = CUSUMState()

        logger.debug(
            f"Initialized AccuracyCUSUM with baseline={baseline_accuracy}, "
            f"threshold={threshold}, drift_magnitude={drift_magnitude}"
        )

    def set_input(self, value: float) -> bool:
        if value is None or not (0 <= value <= 1):
            raise InvalidInputError(f"Accuracy input must be in [0, 1], got {value}")

        self.state.n_samples += 1
        self.state.accuracy_sum += value

        # Don't check for drift until we have enough samples
        if self.state.n_samples < self.min_samples_for_detection:
            return False

        # Deviation from baseline, adjusted by drift magnitude
        deviation = self.baseline_accuracy - value - self.drift_magnitude
        self.state.cumsum = max(0.0, self.state.cumsum + deviation)

        if self.state.cumsum < self.state.min_cumsum:
            self.state.min_cumsum = self.state.cumsum
            self.state.min_cumsum_index = self.state.n_samples - 1

        if self.state.cumsum <= self.threshold:
            return False

        # The drift began where the sum last left its minimum
        self.state.drift_point_index = self.state.min_cumsum_index
        self.n_detections += 1
        logger.debug(
            f"CUSUM change at sample {self.state.n_samples} "
            f"(cumsum={self.state.cumsum:.4f}, drift point={self.state.drift_point_index})"
        )
        self._notify_callbacks({
            'detector': 'AccuracyCUSUM',
            'detected_at_sample': self.state.drift_point_index,
            'estimation': self.estimation,
            'baseline_accuracy': self.baseline_accuracy,
            'cumsum': self.state.cumsum,
            'threshold': self.threshold
        })
        return True

    @property
    def estimation(self) -> float:
        if self.state.n_samples == 0:
            return 0.0
        return self.state.accuracy_sum / self.state.n_samples

    def reset(self) -> None:
        self.state = CUSUMState()
        logger.debug("CUSUM detector reset")
