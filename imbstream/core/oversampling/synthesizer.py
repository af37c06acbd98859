from typing import Optional, Sequence, Set

import numpy as np

from imbstream.core.data_structures import Instance
from imbstream.core.tree.nodes import FoundNode
from imbstream.utils.errors import InvalidInputError
from imbstream.utils.logging import setup_logger

logger = setup_logger(__name__)


class InstanceSynthesizer:
    """Draws synthetic minority instances from the leaves of the statistics tree.

    Each call picks a leaf uniformly among those not yet used during the
    current oversampling burst, then asks every attribute observer of the
    backing node for a value of the minority class. Attributes without an
    observer, or whose observer has no record of the class, fall back to a
    uniform category (nominal) or 0 (numeric).

    The random generator is owned for the lifetime of the stream: the same
    seed over the same stream reproduces the same synthetic instances.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.already_used: Set[int] = set()
        self.n_generated = 0

    def clear_used(self) -> None:
        """Forget the leaves drawn during the current burst."""
        self.already_used.clear()

    def draw_leaf_index(self, num_leaves: int) -> int:
        """Uniform leaf index outside the used set; the set restarts once every leaf was used."""
        if num_leaves <= 0:
            raise InvalidInputError("Cannot draw from an empty leaf list")
        if len(self.already_used) >= num_leaves:
            self.already_used.clear()
        available = [i for i in range(num_leaves) if i not in self.already_used]
        index = available[int(self.rng.integers(len(available)))]
        self.already_used.add(index)
        return index

    def generate(self, leaves: Sequence[FoundNode], template: Instance, minority_class: int) -> Instance:
        """Build one synthetic instance labeled ``minority_class``.

        Args:
            leaves: Candidate leaf positions of the statistics tree
            template: Instance whose schema, weight and metadata are copied
            minority_class: Class index written to the class slot
        """
        found = leaves[self.draw_leaf_index(len(leaves))]
        node = found.resolve()
        observers = getattr(node, "attribute_observers", None) or {}
        schema = template.schema

        values = np.zeros(schema.num_attributes)
        for att_index in schema.input_indices():
            attribute = schema.attribute(att_index)
            observer = observers.get(att_index)
            value = observer.sample_for_class(minority_class, self.rng) if observer is not None else None
            if value is None:
                value = float(self.rng.integers(attribute.num_values)) if attribute.nominal else 0.0
            values[att_index] = value
        values[schema.class_index] = minority_class

        self.n_generated += 1
        return template.copy_with_values(values)
