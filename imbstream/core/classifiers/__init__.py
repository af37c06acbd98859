"""Incremental base classifiers that can be wrapped by the rebalancing handler."""

from imbstream.core.classifiers.base import BaseAdaptiveClassifier
from imbstream.core.classifiers.knn import LightweightKNN, DistanceMetric
from imbstream.core.classifiers.naive_bayes import GaussianNaiveBayes

__all__ = [
    'BaseAdaptiveClassifier',
    'LightweightKNN',
    'DistanceMetric',
    'GaussianNaiveBayes'
]
