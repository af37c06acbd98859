"""Drift detection on the stream of per-event correctness indicators."""

from imbstream.core.drift_detection.base import DriftDetector
from imbstream.core.drift_detection.adwin import ADWINDetector
from imbstream.core.drift_detection.cusum import AccuracyCUSUM, CUSUMState

__all__ = [
    'DriftDetector',
    'ADWINDetector',
    'AccuracyCUSUM',
    'CUSUMState'
]
