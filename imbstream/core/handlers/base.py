from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from imbstream.core.base import Learner
from imbstream.core.data_structures import AdaptationEvent, Instance
from imbstream.utils.logging import setup_logger

logger = setup_logger(__name__)


class BaseAdaptiveHandler(ABC):
    """Base abstract class for all adaptive handlers.

    Adaptive handlers wrap a base learner and decide, event by event, how it is
    trained and when it has to be rebuilt. They report per-event metrics and
    adaptation events through optional callbacks.
    """

    def __init__(
        self,
        learner: Learner,
        metrics_callback: Optional[Callable[[Dict[str, Any]], None]] = None,
        adaptation_callback: Optional[Callable[[AdaptationEvent], None]] = None
    ):
        """Initialize the adaptive handler.

        Args:
            learner: The base learner to manage
            metrics_callback: Optional callback for reporting metrics
            adaptation_callback: Optional callback for adaptation events
        """
        self.learner = learner
        self.metrics_callback = metrics_callback
        self.adaptation_callback = adaptation_callback

        # Track performance metrics
        self.n_samples_processed = 0
        self.n_samples_misclassified = 0
        self.n_adaptations = 0
        self.adaptation_history: List[AdaptationEvent] = []

        # Flag to enable or disable adaptation
        self.adaptation_enabled = True

    def get_learner(self) -> Learner:
        """Get the base learner currently managed by this handler."""
        return self.learner

    @abstractmethod
    def train_on_instance(self, instance: Instance) -> List[AdaptationEvent]:
        """Process one labeled instance according to the adaptation strategy.

        Args:
            instance: A labeled instance of the stream

        Returns:
            The adaptation events triggered by this instance, possibly empty
        """
        pass

    def disable_adaptation(self) -> None:
        """Disable adaptation of the learner."""
        self.adaptation_enabled = False
        logger.debug("Adaptation disabled")

    def enable_adaptation(self) -> None:
        """Enable adaptation of the learner."""
        self.adaptation_enabled = True
        logger.debug("Adaptation enabled")

    def report_metrics(self, metrics: Dict[str, Any]) -> None:
        """Report metrics to the registered callback."""
        if self.metrics_callback:
            self.metrics_callback(metrics)

    def report_adaptation(self, event: AdaptationEvent) -> None:
        """Record an adaptation event and forward it to the registered callback."""
        self.n_adaptations += 1
        self.adaptation_history.append(event)
        if self.adaptation_callback:
            self.adaptation_callback(event)

    def get_metrics(self) -> Dict[str, Any]:
        accuracy = 0.0
        if self.n_samples_processed > 0:
            accuracy = 1.0 - self.n_samples_misclassified / self.n_samples_processed
        return {
            "n_samples_processed": self.n_samples_processed,
            "n_samples_misclassified": self.n_samples_misclassified,
            "accuracy": accuracy,
            "n_adaptations": self.n_adaptations,
            "adaptation_enabled": self.adaptation_enabled
        }
