"""Selector-name registries for the pluggable components of the rebalancing handler."""

from typing import Any, Dict, Optional, Union

from imbstream.constants import BaseLearnerType, DriftDetectorType, StatisticsModelType
from imbstream.core.classifiers import BaseAdaptiveClassifier, GaussianNaiveBayes, LightweightKNN
from imbstream.core.drift_detection import AccuracyCUSUM, ADWINDetector, DriftDetector
from imbstream.core.splitting import split_criterion_registry
from imbstream.core.tree import HoeffdingTreeHistogram
from imbstream.interfaces.registry import Registry
from imbstream.utils.config import Config, get_config
from imbstream.utils.errors import ConfigError

learner_registry: Registry[BaseAdaptiveClassifier] = Registry(BaseAdaptiveClassifier, "base learner")
learner_registry.register(BaseLearnerType.KNN, LightweightKNN)
learner_registry.register(BaseLearnerType.NAIVE_BAYES, GaussianNaiveBayes)
learner_registry.register(BaseLearnerType.HOEFFDING_TREE, HoeffdingTreeHistogram)

statistics_model_registry: Registry[HoeffdingTreeHistogram] = Registry(HoeffdingTreeHistogram, "statistics model")
statistics_model_registry.register(StatisticsModelType.HOEFFDING_TREE_HISTOGRAM, HoeffdingTreeHistogram)

drift_detector_registry: Registry[DriftDetector] = Registry(DriftDetector, "drift detector")
drift_detector_registry.register(DriftDetectorType.ADWIN, ADWINDetector)
drift_detector_registry.register(DriftDetectorType.CUSUM, AccuracyCUSUM)

# Config section holding the constructor arguments of each selector
_COMPONENT_SECTIONS: Dict[str, str] = {
    BaseLearnerType.KNN.value: "knn",
    BaseLearnerType.NAIVE_BAYES.value: "naive_bayes",
    BaseLearnerType.HOEFFDING_TREE.value: "statistics_tree",
    StatisticsModelType.HOEFFDING_TREE_HISTOGRAM.value: "statistics_tree",
    DriftDetectorType.ADWIN.value: "adwin",
    DriftDetectorType.CUSUM.value: "cusum"
}


def _create(registry: Registry, name: Union[str, Any], config: Optional[Config], **overrides: Any):
    config = config or get_config()
    try:
        cls = registry.get(name)
    except KeyError as e:
        raise ConfigError(str(e.args[0]))
    key = name.value if hasattr(name, "value") else str(name).lower()
    kwargs = dict(config.get_component_config(_COMPONENT_SECTIONS.get(key, key)) or {})
    kwargs.update(overrides)
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ConfigError(f"Invalid configuration for {key}: {str(e)}")


def create_learner(name: Union[str, BaseLearnerType], config: Optional[Config] = None, **overrides: Any) -> BaseAdaptiveClassifier:
    """Build the base learner registered under ``name`` from its config section."""
    return _create(learner_registry, name, config, **overrides)


def create_statistics_model(
    name: Union[str, StatisticsModelType],
    config: Optional[Config] = None,
    **overrides: Any
) -> HoeffdingTreeHistogram:
    return _create(statistics_model_registry, name, config, **overrides)


def create_drift_detector(name: Union[str, DriftDetectorType], config: Optional[Config] = None, **overrides: Any) -> DriftDetector:
    return _create(drift_detector_registry, name, config, **overrides)


__all__ = [
    'learner_registry',
    'statistics_model_registry',
    'drift_detector_registry',
    'split_criterion_registry',
    'create_learner',
    'create_statistics_model',
    'create_drift_detector'
]
