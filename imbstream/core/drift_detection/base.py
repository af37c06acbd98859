import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List

from imbstream.utils.logging import setup_logger

logger = setup_logger(__name__)


class DriftDetector(ABC):
    """Base abstract class for streaming drift detectors.

    Detectors consume one scalar per event (for the rebalancing handler this
    is the correctness indicator: 1.0 correct, 0.0 wrong) and keep an estimate
    of the monitored mean.
    """

    def __init__(self):
        self.callbacks: List[Callable[[Dict[str, Any]], None]] = []
        self.n_detections = 0

    @abstractmethod
    def set_input(self, value: float) -> bool:
        """Feed a new observation.

        Args:
            value: New observation

        Returns:
            True if a change was detected at this step
        """
        pass

    @property
    @abstractmethod
    def estimation(self) -> float:
        """Current estimate of the monitored mean."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Reset the detector state after drift has been handled."""
        pass

    def register_callback(self, callback: Callable[[Dict[str, Any]], None]) -> None:
        """Register a callback function to be called when drift is detected.

        Args:
            callback: Function to call when drift is detected. It receives a dictionary
                    with information about the detected drift.
        """
        self.callbacks.append(callback)

    def _notify_callbacks(self, drift_info: Dict[str, Any]) -> None:
        """Notify all registered callbacks about detected drift.

        Failing callbacks are logged and do not interrupt detection.
        """
        if "timestamp" not in drift_info:
            drift_info["timestamp"] = time.time()
        for callback in self.callbacks:
            try:
                callback(drift_info)
            except Exception as e:
                logger.error(f"Error in drift callback: {str(e)}")
