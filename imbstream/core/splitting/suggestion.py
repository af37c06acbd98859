from dataclasses import dataclass, field
from typing import List, Optional

from imbstream.core.data_structures import ClassWeightMap
from imbstream.core.splitting.conditional_tests import InstanceConditionalTest


@dataclass
class AttributeSplitSuggestion:
    """A candidate split with the class distributions it would produce.

    ``split_test`` is ``None`` for the "do not split" suggestion.
    """
    split_test: Optional[InstanceConditionalTest]
    resulting_class_distributions: List[ClassWeightMap]
    merit: float

    @property
    def num_splits(self) -> int:
        return len(self.resulting_class_distributions)

    def resulting_class_distribution_from_split(self, split_index: int) -> ClassWeightMap:
        return dict(self.resulting_class_distributions[split_index])


@dataclass
class HistogramSplitSuggestion(AttributeSplitSuggestion):
    """Split suggestion that also carries whole-instance counts per branch.

    The instance counts seed the class distributions of new child leaves.
    """
    resulting_instance_distributions: List[ClassWeightMap] = field(default_factory=list)

    def resulting_instance_distribution_from_split(self, split_index: int) -> ClassWeightMap:
        if not self.resulting_instance_distributions:
            return self.resulting_class_distribution_from_split(split_index)
        return dict(self.resulting_instance_distributions[split_index])
