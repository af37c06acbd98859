from typing import Dict, List, Optional

from imbstream.core.data_structures import ClassWeightMap, Instance, add_to_distribution
from imbstream.core.observers import AttributeClassObserver
from imbstream.core.splitting import AttributeSplitSuggestion, InstanceConditionalTest


class Node:
    """Base class for nodes of the statistics tree.

    Args:
        class_observations: Class weights seen at the node, ``{}`` when omitted
        depth: Distance from the root
    """

    def __init__(self, class_observations: Optional[ClassWeightMap] = None, depth: int = 0):
        self.observed_class_distribution: ClassWeightMap = dict(class_observations or {})
        self.depth = depth

    @staticmethod
    def is_leaf() -> bool:
        return True

    @property
    def total_weight(self) -> float:
        return sum(self.observed_class_distribution.values())

    def filter_instance_to_leaf(self, instance: Instance, parent: Optional['SplitNode'], parent_branch: int) -> 'FoundNode':
        """Traverse down the tree to locate the leaf position for an instance."""
        return FoundNode(self, parent, parent_branch)

    def observed_class_distribution_is_pure(self) -> bool:
        """True if fewer than two classes carry weight."""
        count = 0
        for weight in self.observed_class_distribution.values():
            if weight != 0:
                count += 1
                if count == 2:
                    break
        return count < 2

    def subtree_depth(self) -> int:
        return 0


class FoundNode:
    """Result of routing an instance down the tree.

    ``node`` is ``None`` when the instance reached an empty branch slot of
    ``parent``; ``parent_branch`` is then the index of that slot.
    """

    def __init__(self, node: Optional[Node], parent: Optional['SplitNode'], parent_branch: int):
        self.node = node
        self.parent = parent
        self.parent_branch = parent_branch

    def resolve(self) -> Optional[Node]:
        """The node itself, or its parent for an empty slot."""
        return self.node if self.node is not None else self.parent

    def __repr__(self):
        return f"FoundNode(node={self.node!r}, parent_branch={self.parent_branch})"


class LearningNode(Node):
    """Leaf that accumulates one attribute observer per input attribute."""

    def __init__(self, class_observations: Optional[ClassWeightMap] = None, depth: int = 0):
        super().__init__(class_observations, depth)
        self.attribute_observers: Dict[int, AttributeClassObserver] = {}
        self.weight_seen_at_last_split_evaluation = self.total_weight

    def learn_from_instance(self, instance: Instance, tree) -> None:
        class_val = instance.class_value
        add_to_distribution(self.observed_class_distribution, class_val, instance.weight)
        for att_index in instance.schema.input_indices():
            observer = self.attribute_observers.get(att_index)
            if observer is None:
                observer = tree.new_attribute_observer(instance.schema.attribute(att_index))
                self.attribute_observers[att_index] = observer
            observer.observe_attribute_class(instance.value(att_index), class_val, instance.weight)

    def get_best_split_suggestions(self, criterion, tree) -> List[AttributeSplitSuggestion]:
        """One histogram suggestion per attribute plus the "do not split" suggestion."""
        pre_split_dist = self.observed_class_distribution
        best_suggestions: List[AttributeSplitSuggestion] = [
            AttributeSplitSuggestion(None, [dict(pre_split_dist)], criterion.get_merit_of_split(pre_split_dist, [pre_split_dist]))
        ]
        for att_index, observer in self.attribute_observers.items():
            suggestion = observer.get_best_evaluated_split_suggestion_histogram(
                criterion, pre_split_dist, att_index, tree.binary_only
            )
            if suggestion is not None:
                best_suggestions.append(suggestion)
        return best_suggestions


class SplitNode(Node):
    """Inner node routing instances by ``split_test``.

    Keeps the attribute observers it collected as a leaf so synthesis can still
    draw from it when an instance stops here or reaches an empty slot below it.
    """

    def __init__(
        self,
        split_test: InstanceConditionalTest,
        class_observations: Optional[ClassWeightMap] = None,
        depth: int = 0,
        attribute_observers: Optional[Dict[int, AttributeClassObserver]] = None,
        size: int = 0
    ):
        super().__init__(class_observations, depth)
        self.split_test = split_test
        self.attribute_observers: Dict[int, AttributeClassObserver] = attribute_observers or {}
        self.children: List[Optional[Node]] = [None] * size

    @staticmethod
    def is_leaf() -> bool:
        return False

    def num_children(self) -> int:
        return len(self.children)

    def set_child(self, index: int, child: Optional[Node]) -> None:
        while index >= len(self.children):
            self.children.append(None)
        self.children[index] = child

    def get_child(self, index: int) -> Optional[Node]:
        return self.children[index] if 0 <= index < len(self.children) else None

    def instance_child_index(self, instance: Instance) -> int:
        return self.split_test.branch_for_instance(instance)

    def filter_instance_to_leaf(self, instance, parent, parent_branch):
        child_index = self.instance_child_index(instance)
        if child_index < 0:
            # Missing value for the tested attribute; stop here
            return FoundNode(self, parent, parent_branch)
        child = self.get_child(child_index)
        if child is None:
            return FoundNode(None, self, child_index)
        return child.filter_instance_to_leaf(instance, self, child_index)

    def subtree_depth(self) -> int:
        max_child_depth = 0
        for child in self.children:
            if child is not None:
                max_child_depth = max(max_child_depth, child.subtree_depth())
        return max_child_depth + 1
