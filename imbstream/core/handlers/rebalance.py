import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from imbstream.constants import (
    DEFAULT_MAX_OVERSAMPLING_ITERATIONS,
    UNBOUNDED_MINORITY_SIZE,
    BaseLearnerType,
    DriftDetectorType,
    NumericSamplingPolicy,
    StatisticsModelType
)
from imbstream.core.base import Learner, StatisticsProvider
from imbstream.core.data_structures import (
    AdaptationEvent,
    ClassWeightMap,
    Instance,
    add_to_distribution,
    max_index,
    min_weight,
    num_populated
)
from imbstream.core.drift_detection import ADWINDetector, DriftDetector
from imbstream.core.handlers.base import BaseAdaptiveHandler
from imbstream.core.oversampling import InstanceSynthesizer
from imbstream.core.registry import create_drift_detector, create_learner, create_statistics_model
from imbstream.core.tree import HoeffdingTreeHistogram
from imbstream.utils.config import Config, get_config
from imbstream.utils.errors import ConfigError, InvalidInputError, OversamplingLimitError
from imbstream.utils.logging import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class RebalanceConfig:
    """Immutable settings of the rebalancing handler, validated on construction.

    ``minimum_minority_size`` of -1 disables both the minority floor and the
    leaf size filter.
    """
    ratio_threshold: float = 0.0
    correctly_classified_save_fraction: float = 0.5
    minimum_minority_size: int = 100
    drift_detection_enabled: bool = True
    max_oversampling_iterations: int = DEFAULT_MAX_OVERSAMPLING_ITERATIONS
    base_learner: str = BaseLearnerType.KNN.value
    statistics_model: str = StatisticsModelType.HOEFFDING_TREE_HISTOGRAM.value
    drift_detector: str = DriftDetectorType.ADWIN.value
    numeric_sampling_policy: str = NumericSamplingPolicy.GAUSSIAN.value
    seed: Optional[int] = None

    def __post_init__(self):
        if not 0.0 <= self.ratio_threshold <= 1.0:
            raise ConfigError(f"ratio_threshold must be in [0, 1], got {self.ratio_threshold}")
        if not 0.0 <= self.correctly_classified_save_fraction <= 1.0:
            raise ConfigError(
                f"correctly_classified_save_fraction must be in [0, 1], got {self.correctly_classified_save_fraction}"
            )
        if self.minimum_minority_size < UNBOUNDED_MINORITY_SIZE:
            raise ConfigError(f"minimum_minority_size must be >= -1, got {self.minimum_minority_size}")
        if self.max_oversampling_iterations < 1:
            raise ConfigError(f"max_oversampling_iterations must be positive, got {self.max_oversampling_iterations}")
        try:
            NumericSamplingPolicy(self.numeric_sampling_policy)
        except ValueError:
            raise ConfigError(f"Unknown numeric sampling policy: {self.numeric_sampling_policy}")

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> 'RebalanceConfig':
        """Build from the ``rebalance`` section of ``config`` (the global config when omitted)."""
        config = config or get_config()
        section = config.get_component_config("rebalance") or {}
        known = {f.name for f in fields(cls)}
        unknown = set(section) - known
        if unknown:
            logger.warning(f"Ignoring unknown rebalance settings: {sorted(unknown)}")
        return cls(**{key: value for key, value in section.items() if key in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class RebalanceHandler(BaseAdaptiveHandler):
    """Online class-imbalance correction by synthetic minority oversampling.

    Every labeled instance goes through the same sequence:

    1. The base learner is trained on it and then predicts it.
    2. Misclassified instances always train the statistics model. Correctly
       classified ones train it only while the saved count lags
       ``floor(correctly_classified_save_fraction * seen)``.
    3. With drift detection enabled the correctness indicator (1.0 correct,
       0.0 wrong) feeds the detector. When it signals a change and its
       estimation went up, the base learner is reset and the detector is
       replaced by a fresh one. The statistics model is never reset.
    4. If the statistics model has seen both classes, and the smaller one
       exceeds ``minimum_minority_size`` (unless -1), synthetic instances of
       the minority class are drawn from its leaves and trained into the base
       learner until ``current_ratio(minority) >= ratio_threshold``.

    Only binary streams are supported: the minority is chosen between class 0
    and class 1.
    """

    def __init__(
        self,
        learner: Learner,
        statistics_model: Optional[StatisticsProvider] = None,
        config: Optional[RebalanceConfig] = None,
        drift_detector_factory: Optional[Callable[[], DriftDetector]] = None,
        rng: Optional[np.random.Generator] = None,
        metrics_callback: Optional[Callable[[Dict[str, Any]], None]] = None,
        adaptation_callback: Optional[Callable[[AdaptationEvent], None]] = None
    ):
        """Initialize the rebalancing handler.

        Args:
            learner: Base learner trained on real and synthetic instances
            statistics_model: Tree whose leaves feed synthesis; a default
                ``HoeffdingTreeHistogram`` when omitted
            config: Handler settings, defaults when omitted
            drift_detector_factory: Builds a fresh detector, initially and after
                every drift reset; ``ADWINDetector`` when omitted
            rng: Random source for synthesis, kept for the whole stream; seeded
                from ``config.seed`` when omitted
            metrics_callback: Optional callback for reporting metrics
            adaptation_callback: Optional callback for adaptation events
        """
        super().__init__(learner, metrics_callback, adaptation_callback)
        self.config = config or RebalanceConfig()
        if statistics_model is None:
            statistics_model = HoeffdingTreeHistogram(numeric_sampling_policy=self.config.numeric_sampling_policy)
        self.statistics_model = statistics_model
        self.drift_detector_factory = drift_detector_factory or ADWINDetector
        self.drift_detector = self.drift_detector_factory()
        self.synthesizer = InstanceSynthesizer(rng if rng is not None else np.random.default_rng(self.config.seed))

        self.correctly_classified_seen = 0
        self.correctly_classified_saved = 0
        self.generated_class_distribution: ClassWeightMap = {}
        self.n_drift_resets = 0

        logger.debug(f"Initialized RebalanceHandler with {self.config}")

    @classmethod
    def from_config(
        cls,
        config: Optional[Config] = None,
        learner: Optional[Learner] = None,
        statistics_model: Optional[StatisticsProvider] = None,
        **kwargs: Any
    ) -> 'RebalanceHandler':
        """Build a handler with every component selected by the ``rebalance`` section."""
        config = config or get_config()
        rebalance_config = RebalanceConfig.from_config(config)
        if learner is None:
            learner = create_learner(rebalance_config.base_learner, config)
        if statistics_model is None:
            statistics_model = create_statistics_model(
                rebalance_config.statistics_model,
                config,
                numeric_sampling_policy=rebalance_config.numeric_sampling_policy
            )
        return cls(
            learner,
            statistics_model,
            rebalance_config,
            drift_detector_factory=lambda: create_drift_detector(rebalance_config.drift_detector, config),
            **kwargs
        )

    def train_on_instance(self, instance: Instance) -> List[AdaptationEvent]:
        if not instance.has_label:
            raise InvalidInputError("Cannot rebalance on an unlabeled instance")
        num_classes = instance.schema.num_classes
        if num_classes != 2:
            raise InvalidInputError(f"Only binary class attributes are supported, got {num_classes} classes")

        events: List[AdaptationEvent] = []
        self.n_samples_processed += 1

        self.learner.train(instance)
        correct = max_index(self.learner.predict_proba(instance)) == instance.class_value
        if not correct:
            self.n_samples_misclassified += 1
            self.statistics_model.train(instance)
        else:
            self.correctly_classified_seen += 1
            target = math.floor(self.config.correctly_classified_save_fraction * self.correctly_classified_seen)
            if target > self.correctly_classified_saved:
                self.correctly_classified_saved += 1
                self.statistics_model.train(instance)

        if self.config.drift_detection_enabled:
            drift_event = self._check_drift(correct)
            if drift_event is not None:
                # Reported before oversampling, which may raise
                self.report_adaptation(drift_event)
                events.append(drift_event)

        if self.adaptation_enabled:
            oversampling_event = self._oversample(instance)
            if oversampling_event is not None:
                self.report_adaptation(oversampling_event)
                events.append(oversampling_event)

        if self.metrics_callback:
            self.report_metrics(self.get_metrics())
        return events

    def _check_drift(self, correct: bool) -> Optional[AdaptationEvent]:
        estimation_before = self.drift_detector.estimation
        change = self.drift_detector.set_input(1.0 if correct else 0.0)
        estimation_after = self.drift_detector.estimation
        if not (change and estimation_after > estimation_before):
            return None

        self.learner.reset()
        self.drift_detector = self.drift_detector_factory()
        self.n_drift_resets += 1
        logger.info(
            f"Drift detected after {self.n_samples_processed} samples "
            f"(estimation {estimation_before:.4f} -> {estimation_after:.4f}), base learner reset"
        )
        return AdaptationEvent(
            event_type="drift_reset",
            drift_detected=True,
            metadata={
                "estimation_before": estimation_before,
                "estimation_after": estimation_after,
                "n_samples_processed": self.n_samples_processed
            }
        )

    def _oversample(self, template: Instance) -> Optional[AdaptationEvent]:
        try:
            if not self.allow_oversampling(template.schema.num_classes):
                return None
            leaves = self.statistics_model.get_leaves(self.config.minimum_minority_size)
            if not leaves:
                return None

            minority_class = self.minority_class()
            ratio_before = self.current_ratio(minority_class)
            generated = 0
            while self.config.ratio_threshold > self.current_ratio(minority_class):
                if generated >= self.config.max_oversampling_iterations:
                    raise OversamplingLimitError(
                        f"Ratio {self.current_ratio(minority_class):.4f} of class {minority_class} still below "
                        f"{self.config.ratio_threshold} after {generated} synthetic instances"
                    )
                synthetic = self.synthesizer.generate(leaves, template, minority_class)
                add_to_distribution(self.generated_class_distribution, minority_class, 1.0)
                self.learner.train(synthetic)
                generated += 1
        finally:
            self.synthesizer.clear_used()

        if generated == 0:
            return None
        ratio_after = self.current_ratio(minority_class)
        logger.debug(
            f"Generated {generated} instances of class {minority_class} from {len(leaves)} leaves "
            f"(ratio {ratio_before:.4f} -> {ratio_after:.4f})"
        )
        return AdaptationEvent(
            event_type="oversampling",
            samples_generated=generated,
            minority_class=minority_class,
            ratio_before=ratio_before,
            ratio_after=ratio_after,
            metadata={"num_leaves": len(leaves)}
        )

    def allow_oversampling(self, num_classes: int = 2) -> bool:
        """Both classes observed by the statistics model and the smaller one above the floor."""
        observed = self.statistics_model.observed_class_distribution
        populated = num_populated(observed)
        if populated != 2 or populated != num_classes:
            return False
        if self.config.minimum_minority_size == UNBOUNDED_MINORITY_SIZE:
            return True
        return min_weight(observed) > self.config.minimum_minority_size

    def _class_total(self, class_index: int) -> float:
        observed = self.statistics_model.observed_class_distribution
        return observed.get(class_index, 0.0) + self.generated_class_distribution.get(class_index, 0.0)

    def minority_class(self) -> int:
        """Class 0 or 1 with the smaller observed plus generated weight, 0 on ties."""
        return 0 if self._class_total(0) <= self._class_total(1) else 1

    def current_ratio(self, minority_class: int) -> float:
        """Share of ``minority_class`` in the observed plus generated weight, 0.0 when empty."""
        classes = set(self.statistics_model.observed_class_distribution) | set(self.generated_class_distribution)
        total = sum(self._class_total(class_index) for class_index in classes)
        if total <= 0.0:
            return 0.0
        return self._class_total(minority_class) / total

    def predict_proba(self, instance: Instance) -> np.ndarray:
        return self.learner.predict_proba(instance)

    def predict(self, instance: Instance) -> int:
        return max_index(self.predict_proba(instance))

    def get_metrics(self) -> Dict[str, Any]:
        metrics = super().get_metrics()
        observed = self.statistics_model.observed_class_distribution
        metrics.update({
            "correctly_classified_seen": self.correctly_classified_seen,
            "correctly_classified_saved": self.correctly_classified_saved,
            "observed_class_distribution": dict(observed),
            "generated_class_distribution": dict(self.generated_class_distribution),
            "n_generated": sum(self.generated_class_distribution.values()),
            "n_drift_resets": self.n_drift_resets,
            "drift_estimation": self.drift_detector.estimation
        })
        if observed:
            minority_class = self.minority_class()
            metrics["minority_class"] = minority_class
            metrics["minority_ratio"] = self.current_ratio(minority_class)
        return metrics
