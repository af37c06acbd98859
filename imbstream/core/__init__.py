"""Core components of imbstream.

This module provides the building blocks of online imbalance correction:
- data_structures: Schema, Instance and class weight helpers
- observers: Per-attribute, per-class statistics with synthetic value sampling
- tree: The Hoeffding statistics tree whose leaves feed synthesis
- classifiers: Incremental base learners
- drift_detection: Detectors over the per-event correctness indicator
- handlers: The rebalancing handler wrapping a base learner
- evaluation: Sliding-window prequential evaluation
"""

from imbstream.core.data_structures import Attribute, Schema, Instance, AdaptationEvent, ClassWeightMap
from imbstream.core.base import Learner, StatisticsProvider, SplitCriterion

# Statistics
from imbstream.core.observers import (
    GaussianEstimatorHistogram,
    AttributeClassObserver,
    GaussianNumericObserverHistogram,
    NominalObserverHistogram
)
from imbstream.core.splitting import InfoGainSplitCriterion, GiniSplitCriterion
from imbstream.core.tree import HoeffdingTreeHistogram, FoundNode

# Learners and drift detection
from imbstream.core.classifiers import BaseAdaptiveClassifier, LightweightKNN, GaussianNaiveBayes
from imbstream.core.drift_detection import DriftDetector, ADWINDetector, AccuracyCUSUM

# Rebalancing
from imbstream.core.oversampling import InstanceSynthesizer
from imbstream.core.handlers import BaseAdaptiveHandler, RebalanceConfig, RebalanceHandler

# Evaluation
from imbstream.core.evaluation import WindowEstimator, WindowClassificationEvaluator, prequential_evaluation

__all__ = [
    # Data structures
    'Attribute',
    'Schema',
    'Instance',
    'AdaptationEvent',
    'ClassWeightMap',

    # Interfaces
    'Learner',
    'StatisticsProvider',
    'SplitCriterion',

    # Statistics
    'GaussianEstimatorHistogram',
    'AttributeClassObserver',
    'GaussianNumericObserverHistogram',
    'NominalObserverHistogram',
    'InfoGainSplitCriterion',
    'GiniSplitCriterion',
    'HoeffdingTreeHistogram',
    'FoundNode',

    # Learners and drift detection
    'BaseAdaptiveClassifier',
    'LightweightKNN',
    'GaussianNaiveBayes',
    'DriftDetector',
    'ADWINDetector',
    'AccuracyCUSUM',

    # Rebalancing
    'InstanceSynthesizer',
    'BaseAdaptiveHandler',
    'RebalanceConfig',
    'RebalanceHandler',

    # Evaluation
    'WindowEstimator',
    'WindowClassificationEvaluator',
    'prequential_evaluation'
]
