from typing import Iterable, List, Optional, Union

from imbstream.core.data_structures import Instance
from imbstream.core.evaluation.window import WindowClassificationEvaluator
from imbstream.core.handlers.base import BaseAdaptiveHandler
from imbstream.core.base import Learner
from imbstream.utils.logging import setup_logger

logger = setup_logger(__name__)


def prequential_evaluation(
    stream: Iterable[Instance],
    learner: Union[Learner, BaseAdaptiveHandler],
    evaluator: Optional[WindowClassificationEvaluator] = None,
    log_every: int = 0
) -> List[float]:
    """Test-then-train over ``stream``.

    Each instance is first scored by ``learner`` and recorded in ``evaluator``,
    then used for training (through ``train_on_instance`` for a handler).

    Args:
        stream: Labeled instances in arrival order
        learner: A base learner or an adaptive handler
        evaluator: Windowed evaluator, a default one when omitted
        log_every: Log the metrics every ``log_every`` instances; 0 disables

    Returns:
        The windowed accuracy after every instance
    """
    evaluator = evaluator or WindowClassificationEvaluator()
    accuracy_trace: List[float] = []
    for count, instance in enumerate(stream, start=1):
        evaluator.add_result(instance, learner.predict_proba(instance))
        if isinstance(learner, BaseAdaptiveHandler):
            learner.train_on_instance(instance)
        else:
            learner.train(instance)
        accuracy_trace.append(evaluator.accuracy)
        if log_every and count % log_every == 0:
            logger.info(f"Processed {count} instances: {evaluator.get_metrics()}")
    return accuracy_trace
