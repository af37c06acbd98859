from imbstream.core.observers.estimator import GaussianEstimatorHistogram, normal_probability
from imbstream.core.observers.base import AttributeClassObserver
from imbstream.core.observers.numeric import GaussianNumericObserverHistogram
from imbstream.core.observers.nominal import NominalObserverHistogram

__all__ = [
    'GaussianEstimatorHistogram',
    'normal_probability',
    'AttributeClassObserver',
    'GaussianNumericObserverHistogram',
    'NominalObserverHistogram'
]
