from imbstream.core.evaluation.window import WindowEstimator, WindowClassificationEvaluator
from imbstream.core.evaluation.prequential import prequential_evaluation

__all__ = [
    'WindowEstimator',
    'WindowClassificationEvaluator',
    'prequential_evaluation'
]
