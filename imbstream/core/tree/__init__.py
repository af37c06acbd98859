from imbstream.core.tree.nodes import Node, FoundNode, LearningNode, SplitNode
from imbstream.core.tree.hoeffding_tree import HoeffdingTreeHistogram, build_split_criterion, compute_hoeffding_bound

__all__ = [
    'Node',
    'FoundNode',
    'LearningNode',
    'SplitNode',
    'HoeffdingTreeHistogram',
    'build_split_criterion',
    'compute_hoeffding_bound'
]
