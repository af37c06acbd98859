from enum import Enum
from typing import Any, Dict, Final

VERSION: Final[str] = "0.1.0"

MISSING_VALUE: Final[float] = float("nan")

class BaseLearnerType(str, Enum):
    KNN = "knn"
    NAIVE_BAYES = "naive_bayes"
    HOEFFDING_TREE = "hoeffding_tree"

class StatisticsModelType(str, Enum):
    HOEFFDING_TREE_HISTOGRAM = "hoeffding_tree_histogram"

class DriftDetectorType(str, Enum):
    ADWIN = "adwin"
    CUSUM = "cusum"

class SplitCriterionType(str, Enum):
    INFO_GAIN = "info_gain"
    GINI = "gini"

class NumericSamplingPolicy(str, Enum):
    GAUSSIAN = "gaussian"
    BETA = "beta"
    GAMMA = "gamma"

BASE_LEARNER_KNN: Final[str] = BaseLearnerType.KNN.value
BASE_LEARNER_NAIVE_BAYES: Final[str] = BaseLearnerType.NAIVE_BAYES.value
BASE_LEARNER_HOEFFDING_TREE: Final[str] = BaseLearnerType.HOEFFDING_TREE.value

STATISTICS_MODEL_HOEFFDING_TREE_HISTOGRAM: Final[str] = StatisticsModelType.HOEFFDING_TREE_HISTOGRAM.value

DRIFT_DETECTOR_ADWIN: Final[str] = DriftDetectorType.ADWIN.value
DRIFT_DETECTOR_CUSUM: Final[str] = DriftDetectorType.CUSUM.value

DEFAULT_CONFIG_FILE: Final[str] = "imbstream_config.json"

DEFAULT_NUM_BINS: Final[int] = 10
DEFAULT_HISTOGRAM_MAX_BINS: Final[int] = 32
DEFAULT_MAX_OVERSAMPLING_ITERATIONS: Final[int] = 10000
UNBOUNDED_MINORITY_SIZE: Final[int] = -1

DEFAULT_CONFIG: Final[Dict[str, Dict[str, Any]]] = {
    "rebalance": {
        "base_learner": BASE_LEARNER_KNN,
        "statistics_model": STATISTICS_MODEL_HOEFFDING_TREE_HISTOGRAM,
        "drift_detector": DRIFT_DETECTOR_ADWIN,
        "ratio_threshold": 0.0,
        "correctly_classified_save_fraction": 0.5,
        "minimum_minority_size": 100,  # -1 disables the floor
        "drift_detection_enabled": True,
        "max_oversampling_iterations": DEFAULT_MAX_OVERSAMPLING_ITERATIONS,
        "numeric_sampling_policy": NumericSamplingPolicy.GAUSSIAN.value,
        "seed": None
    },
    "statistics_tree": {
        "grace_period": 200,
        "split_confidence": 1e-7,
        "tie_threshold": 0.05,
        "max_depth": 20,
        "num_bins": DEFAULT_NUM_BINS,
        "histogram_max_bins": DEFAULT_HISTOGRAM_MAX_BINS,
        "split_criterion": SplitCriterionType.INFO_GAIN.value,
        "binary_only": False
    },
    "knn": {
        "k": 5,
        "distance_metric": "euclidean",
        "max_samples": 1000,
        "weight_by_distance": False
    },
    "naive_bayes": {
        "num_bins": DEFAULT_NUM_BINS
    },
    "adwin": {
        "delta": 0.002,
        "grace_period": 30
    },
    "cusum": {
        "baseline_accuracy": 0.9,
        "threshold": 5.0,
        "drift_magnitude": 0.1,
        "min_samples_for_detection": 10
    },
    "window_evaluator": {
        "width": 1000,
        "gradual_drift_width": -1  # -1 keeps a single fixed width
    },
    "logging": {
        "level": "INFO",
        "log_file": None,
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    }
}
