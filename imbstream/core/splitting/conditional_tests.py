from abc import ABC, abstractmethod

from imbstream.core.data_structures import Instance


class InstanceConditionalTest(ABC):
    """Routes an instance to a branch of a split node.

    ``branch_for_instance`` returns -1 when the tested value is missing.
    """

    def __init__(self, att_index: int):
        self.att_index = att_index

    @abstractmethod
    def branch_for_instance(self, instance: Instance) -> int:
        pass

    @abstractmethod
    def max_branches(self) -> int:
        pass

    @abstractmethod
    def describe_condition(self, branch: int) -> str:
        pass


class NumericAttributeBinaryTest(InstanceConditionalTest):
    """``value <= split_value`` goes left (branch 0)."""

    def __init__(self, att_index: int, split_value: float, equals_passes_test: bool = True):
        super().__init__(att_index)
        self.split_value = split_value
        self.equals_passes_test = equals_passes_test

    def branch_for_instance(self, instance):
        if instance.is_missing(self.att_index):
            return -1
        value = instance.value(self.att_index)
        if value == self.split_value:
            return 0 if self.equals_passes_test else 1
        return 0 if value < self.split_value else 1

    def max_branches(self):
        return 2

    def describe_condition(self, branch):
        op = "<=" if branch == 0 else ">"
        return f"[att {self.att_index}] {op} {self.split_value:.6g}"


class NominalAttributeMultiwayTest(InstanceConditionalTest):
    """One branch per category index."""

    def __init__(self, att_index: int, num_values: int):
        super().__init__(att_index)
        self.num_values = num_values

    def branch_for_instance(self, instance):
        if instance.is_missing(self.att_index):
            return -1
        branch = int(instance.value(self.att_index))
        return branch if 0 <= branch < self.num_values else -1

    def max_branches(self):
        return self.num_values

    def describe_condition(self, branch):
        return f"[att {self.att_index}] = {branch}"


class NominalAttributeBinaryTest(InstanceConditionalTest):
    """``value == att_value`` goes left (branch 0)."""

    def __init__(self, att_index: int, att_value: int):
        super().__init__(att_index)
        self.att_value = att_value

    def branch_for_instance(self, instance):
        if instance.is_missing(self.att_index):
            return -1
        return 0 if int(instance.value(self.att_index)) == self.att_value else 1

    def max_branches(self):
        return 2

    def describe_condition(self, branch):
        op = "=" if branch == 0 else "!="
        return f"[att {self.att_index}] {op} {self.att_value}"
