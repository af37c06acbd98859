# Split evaluation for the statistics tree

from imbstream.core.splitting.criteria import (
    BaseSplitCriterion,
    InfoGainSplitCriterion,
    GiniSplitCriterion,
    split_criterion_registry
)
from imbstream.core.splitting.conditional_tests import (
    InstanceConditionalTest,
    NumericAttributeBinaryTest,
    NominalAttributeMultiwayTest,
    NominalAttributeBinaryTest
)
from imbstream.core.splitting.suggestion import AttributeSplitSuggestion, HistogramSplitSuggestion

__all__ = [
    'BaseSplitCriterion',
    'InfoGainSplitCriterion',
    'GiniSplitCriterion',
    'split_criterion_registry',
    'InstanceConditionalTest',
    'NumericAttributeBinaryTest',
    'NominalAttributeMultiwayTest',
    'NominalAttributeBinaryTest',
    'AttributeSplitSuggestion',
    'HistogramSplitSuggestion'
]
