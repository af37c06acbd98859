"""Tests for schemas, instances and class weight helpers."""

import math

import numpy as np
import pytest

from imbstream.core.data_structures import (
    AdaptationEvent,
    Attribute,
    Instance,
    Schema,
    add_to_distribution,
    distribution_to_array,
    is_missing,
    max_index,
    min_weight,
    num_populated
)
from imbstream.utils.errors import InvalidInputError, SchemaError


def test_distribution_helpers():
    dist = {}
    add_to_distribution(dist, 1, 2.0)
    add_to_distribution(dist, 1, 1.0)
    add_to_distribution(dist, 3, 0.0)
    assert dist == {1: 3.0, 3: 0.0}
    assert num_populated(dist) == 1
    assert min_weight(dist) == 3.0
    assert min_weight({}) == 0.0
    assert distribution_to_array({0: 1.0, 1: 2.0, 5: 9.0}, 2).tolist() == [1.0, 2.0]


def test_max_index_prefers_lowest_on_ties():
    assert max_index([0.2, 0.5, 0.5]) == 1
    assert max_index([0.0, 0.0]) == 0
    assert max_index([]) == 0


def test_is_missing():
    assert is_missing(float("nan"))
    assert is_missing(None)
    assert not is_missing(0.0)


def test_schema_build(numeric_schema):
    assert numeric_schema.num_attributes == 3
    assert numeric_schema.class_index == 2
    assert numeric_schema.num_classes == 2
    assert numeric_schema.input_indices() == [0, 1]
    assert numeric_schema.class_attribute.values == ("negative", "positive")


def test_schema_requires_nominal_class():
    with pytest.raises(SchemaError):
        Schema.build([Attribute.numeric("x")], Attribute.numeric("y"))
    with pytest.raises(SchemaError):
        Attribute.categorical("empty", [])


def test_instance_from_features(numeric_schema):
    instance = Instance.from_features([1.0, float("nan")], 1, numeric_schema, weight=2.0)
    assert instance.class_value == 1
    assert instance.has_label
    assert instance.is_missing(1)
    assert not instance.is_missing(0)
    assert instance.features().shape == (2,)
    assert instance.weight == 2.0
    assert instance.instance_id is not None


def test_unlabeled_instance(numeric_schema):
    instance = Instance.from_features([1.0, 2.0], None, numeric_schema)
    assert not instance.has_label
    assert math.isnan(instance.values[numeric_schema.class_index])


def test_instance_shape_checked(numeric_schema):
    with pytest.raises(SchemaError):
        Instance(values=np.zeros(5), schema=numeric_schema)
    with pytest.raises(InvalidInputError):
        Instance.from_features([1.0], 0, numeric_schema)


def test_copy_with_values(numeric_schema):
    original = Instance.from_features([1.0, 2.0], 0, numeric_schema, weight=3.0, metadata={"k": "v"})
    copy = original.copy_with_values([5.0, 6.0, 1.0])
    assert copy.features().tolist() == [5.0, 6.0]
    assert copy.class_value == 1
    assert copy.weight == 3.0
    assert copy.metadata == {"k": "v"}
    assert copy.metadata is not original.metadata
    assert original.features().tolist() == [1.0, 2.0]


def test_adaptation_event_to_dict():
    event = AdaptationEvent(event_type="oversampling", samples_generated=4, minority_class=0)
    data = event.to_dict()
    assert data["event_type"] == "oversampling"
    assert data["samples_generated"] == 4
    assert data["drift_detected"] is False
