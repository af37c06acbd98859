import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

import numpy as np

from imbstream.utils.errors import SchemaError

# Sparse class index -> accumulated weight; absent keys weigh 0.
ClassWeightMap = Dict[int, float]


def is_missing(value: float) -> bool:
    """Missing attribute values are encoded as NaN."""
    return value is None or math.isnan(value)


def add_to_distribution(dist: ClassWeightMap, class_index: int, weight: float) -> None:
    dist[class_index] = dist.get(class_index, 0.0) + weight


def num_populated(dist: ClassWeightMap) -> int:
    return sum(1 for weight in dist.values() if weight > 0)


def min_weight(dist: ClassWeightMap) -> float:
    """Smallest non-zero weight in the map, 0.0 for an empty map."""
    populated = [weight for weight in dist.values() if weight > 0]
    return min(populated) if populated else 0.0


def distribution_to_array(dist: ClassWeightMap, num_classes: int) -> np.ndarray:
    array = np.zeros(num_classes)
    for class_index, weight in dist.items():
        if 0 <= class_index < num_classes:
            array[class_index] = weight
    return array


def max_index(values: Sequence[float]) -> int:
    """Index of the largest value, lowest index on ties, 0 for an empty sequence."""
    best_index = 0
    best_value = None
    for i, value in enumerate(values):
        if best_value is None or value > best_value:
            best_index = i
            best_value = value
    return best_index


@dataclass(frozen=True)
class Attribute:
    """Describes one column of the stream.

    Nominal attributes store their category index as a float; ``values`` holds
    the category labels and fixes ``num_values``.
    """
    name: str
    nominal: bool = False
    values: Tuple[str, ...] = ()

    @property
    def num_values(self) -> int:
        return len(self.values) if self.nominal else 0

    @classmethod
    def numeric(cls, name: str) -> 'Attribute':
        return cls(name=name)

    @classmethod
    def categorical(cls, name: str, values: Sequence[Any]) -> 'Attribute':
        labels = tuple(str(v) for v in values)
        if not labels:
            raise SchemaError(f"Nominal attribute '{name}' needs at least one category")
        return cls(name=name, nominal=True, values=labels)


@dataclass(frozen=True)
class Schema:
    """Ordered attribute list including the class attribute."""
    attributes: Tuple[Attribute, ...]
    class_index: int

    def __post_init__(self):
        if not 0 <= self.class_index < len(self.attributes):
            raise SchemaError(f"Class index {self.class_index} out of range for {len(self.attributes)} attributes")
        if not self.attributes[self.class_index].nominal:
            raise SchemaError("The class attribute must be nominal")

    @classmethod
    def build(cls, attributes: Sequence[Attribute], class_attribute: Attribute) -> 'Schema':
        """Create a schema with the class attribute appended as the last column."""
        return cls(attributes=tuple(attributes) + (class_attribute,), class_index=len(attributes))

    @property
    def num_attributes(self) -> int:
        return len(self.attributes)

    @property
    def class_attribute(self) -> Attribute:
        return self.attributes[self.class_index]

    @property
    def num_classes(self) -> int:
        return self.class_attribute.num_values

    def attribute(self, index: int) -> Attribute:
        return self.attributes[index]

    def input_indices(self) -> List[int]:
        """Attribute indices excluding the class slot."""
        return [i for i in range(self.num_attributes) if i != self.class_index]


@dataclass
class Instance:
    """One labeled event of the stream.

    ``values`` is a dense vector over every attribute of the schema, class slot
    included. Missing values are NaN.
    """
    values: np.ndarray
    schema: Schema
    weight: float = 1.0
    timestamp: Optional[float] = None
    instance_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.values = np.asarray(self.values, dtype=float)
        if self.values.shape != (self.schema.num_attributes,):
            raise SchemaError(
                f"Instance has {self.values.shape} values, schema expects {self.schema.num_attributes}"
            )
        if self.timestamp is None:
            self.timestamp = time.time()
        if self.instance_id is None:
            self.instance_id = str(uuid4())

    @classmethod
    def from_features(
        cls,
        features: Sequence[float],
        label: Optional[int],
        schema: Schema,
        weight: float = 1.0,
        **kwargs: Any
    ) -> 'Instance':
        """Build an instance from the input features and a class index."""
        values = np.empty(schema.num_attributes)
        inputs = schema.input_indices()
        if len(features) != len(inputs):
            raise SchemaError(f"Expected {len(inputs)} features, got {len(features)}")
        values[inputs] = np.asarray(features, dtype=float)
        values[schema.class_index] = np.nan if label is None else float(label)
        return cls(values=values, schema=schema, weight=weight, **kwargs)

    @property
    def num_attributes(self) -> int:
        return self.schema.num_attributes

    @property
    def class_index(self) -> int:
        return self.schema.class_index

    @property
    def class_value(self) -> int:
        return int(self.values[self.schema.class_index])

    @property
    def has_label(self) -> bool:
        return not np.isnan(self.values[self.schema.class_index])

    def value(self, attribute_index: int) -> float:
        return float(self.values[attribute_index])

    def is_missing(self, attribute_index: int) -> bool:
        return bool(np.isnan(self.values[attribute_index]))

    def features(self) -> np.ndarray:
        """Input attribute values without the class slot."""
        return self.values[self.schema.input_indices()]

    def copy_with_values(self, values: Sequence[float]) -> 'Instance':
        """Structural copy carrying ``values``; weight and metadata are preserved."""
        return Instance(
            values=np.array(values, dtype=float),
            schema=self.schema,
            weight=self.weight,
            metadata=dict(self.metadata)
        )


@dataclass
class AdaptationEvent:
    """Records a drift reset or an oversampling burst of the rebalancing handler."""
    event_type: str  # 'drift_reset', 'oversampling'
    timestamp: float = field(default_factory=time.time)
    event_id: str = field(default_factory=lambda: str(uuid4()))
    samples_generated: int = 0
    minority_class: Optional[int] = None
    drift_detected: bool = False
    ratio_before: Optional[float] = None
    ratio_after: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the event to a dictionary for reporting."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "timestamp": self.timestamp,
            "samples_generated": self.samples_generated,
            "minority_class": self.minority_class,
            "drift_detected": self.drift_detected,
            "ratio_before": self.ratio_before,
            "ratio_after": self.ratio_after,
            "metadata": self.metadata
        }
