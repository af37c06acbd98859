"""ADWIN (Adaptive Windowing) drift detector.

Wraps River's ADWIN implementation for detecting change in the mean of a
stream via adaptive window sizing.
"""

from river.drift import ADWIN

from imbstream.core.drift_detection.base import DriftDetector
from imbstream.utils.errors import InvalidInputError
from imbstream.utils.logging import setup_logger

logger = setup_logger(__name__)


class ADWINDetector(DriftDetector):
    """Adaptive windowing drift detector backed by River.

    Args:
        delta: Confidence parameter for ADWIN (default 0.002). Lower values
            make detection more conservative.
        grace_period: Minimum number of observations before detection
            activates (default 30).
    """

    def __init__(self, delta: float = 0.002, grace_period: int = 30):
        super().__init__()
        if not 0.0 < delta < 1.0:
            raise InvalidInputError(f"delta must be in (0, 1), got {delta}")
        self.delta = delta
        self.grace_period = grace_period
        self.detector = ADWIN(delta=delta, grace_period=grace_period)
        self.n_samples = 0

    def set_input(self, value: float) -> bool:
        self.detector.update(value)
        self.n_samples += 1
        detected = self.detector.drift_detected
        if detected:
            self.n_detections += 1
            logger.debug(f"ADWIN change at sample {self.n_samples} (estimation={self.estimation:.4f})")
            self._notify_callbacks({
                'detector': 'ADWINDetector',
                'detected_at_sample': self.n_samples,
                'estimation': self.estimation,
                'width': self.detector.width
            })
        return detected

    @property
    def estimation(self) -> float:
        """Current mean estimate from the adaptive window."""
        return self.detector.estimation

    @property
    def width(self) -> int:
        return self.detector.width

    def reset(self) -> None:
        """Reset detector to initial state with same parameters."""
        self.detector = ADWIN(delta=self.delta, grace_period=self.grace_period)
        self.n_samples = 0
        self.n_detections = 0
