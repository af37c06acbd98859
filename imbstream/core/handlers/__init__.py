"""Adaptive handlers wrapping a base learner."""

from imbstream.core.handlers.base import BaseAdaptiveHandler
from imbstream.core.handlers.rebalance import RebalanceConfig, RebalanceHandler

__all__ = [
    'BaseAdaptiveHandler',
    'RebalanceConfig',
    'RebalanceHandler'
]
