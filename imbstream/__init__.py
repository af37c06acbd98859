# imbstream/__init__.py
"""
imbstream - Online class-imbalance correction for labeled data streams.

imbstream wraps an incremental base learner and keeps it trained on a more
balanced view of a binary stream, with a focus on:

1. Bounded-memory per-attribute, per-class statistics (Gaussian + histogram)
2. On-the-fly synthesis of minority instances from the leaves of a Hoeffding tree
3. Drift detection that resets the base learner when its accuracy changes
4. Sliding-window prequential evaluation

Typical use::

    handler = RebalanceHandler.from_config()
    for instance in stream:
        handler.train_on_instance(instance)
"""

__version__ = "0.1.0"

from imbstream.core.data_structures import Attribute, Schema, Instance, AdaptationEvent
from imbstream.core.classifiers import LightweightKNN, GaussianNaiveBayes
from imbstream.core.tree import HoeffdingTreeHistogram
from imbstream.core.drift_detection import ADWINDetector, AccuracyCUSUM
from imbstream.core.handlers import RebalanceConfig, RebalanceHandler
from imbstream.core.evaluation import WindowClassificationEvaluator, prequential_evaluation
from imbstream.utils.config import Config, get_config, load_config
from imbstream.utils.errors import ImbStreamError

__all__ = [
    "__version__",

    # Data structures
    "Attribute",
    "Schema",
    "Instance",
    "AdaptationEvent",

    # Components
    "LightweightKNN",
    "GaussianNaiveBayes",
    "HoeffdingTreeHistogram",
    "ADWINDetector",
    "AccuracyCUSUM",

    # Rebalancing
    "RebalanceConfig",
    "RebalanceHandler",

    # Evaluation
    "WindowClassificationEvaluator",
    "prequential_evaluation",

    # Configuration and errors
    "Config",
    "get_config",
    "load_config",
    "ImbStreamError"
]
