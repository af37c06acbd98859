"""Configuration for pytest fixtures."""

import os
import shutil
import tempfile

import numpy as np
import pytest

from imbstream.core.data_structures import Attribute, Instance, Schema


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    dir_path = tempfile.mkdtemp()
    yield dir_path
    shutil.rmtree(dir_path)


@pytest.fixture
def class_attribute():
    return Attribute.categorical("class", ["negative", "positive"])


@pytest.fixture
def numeric_schema(class_attribute):
    """Two numeric inputs and a binary class."""
    return Schema.build([Attribute.numeric("x0"), Attribute.numeric("x1")], class_attribute)


@pytest.fixture
def nominal_schema(class_attribute):
    """One nominal input with three categories and a binary class."""
    return Schema.build([Attribute.categorical("color", ["red", "green", "blue"])], class_attribute)


@pytest.fixture
def mixed_schema(class_attribute):
    return Schema.build(
        [Attribute.numeric("size"), Attribute.categorical("color", ["red", "green", "blue"])],
        class_attribute
    )


@pytest.fixture
def make_instance():
    """Factory building an instance from features, a label and an optional weight."""
    def _make(schema, features, label, weight=1.0):
        return Instance.from_features(features, label, schema, weight=weight)
    return _make


@pytest.fixture
def rng():
    return np.random.default_rng(42)


class ContrarianLearner:
    """Learner that always predicts the wrong class of a binary instance."""

    def __init__(self):
        self.trained = []
        self.reset_count = 0

    def train(self, instance):
        self.trained.append(instance)

    def predict_proba(self, instance):
        votes = np.zeros(2)
        votes[1 - instance.class_value] = 1.0
        return votes

    def reset(self):
        self.reset_count += 1


class OracleLearner(ContrarianLearner):
    """Learner that always predicts the true class."""

    def predict_proba(self, instance):
        votes = np.zeros(2)
        votes[instance.class_value] = 1.0
        return votes


class ScriptedDetector:
    """Drift detector replaying a fixed change signal and estimation."""

    def __init__(self, change=False, estimation_before=0.0, estimation_after=0.0):
        self.change = change
        self.estimation_after = estimation_after
        self.current = estimation_before
        self.inputs = []

    def set_input(self, value):
        self.inputs.append(value)
        self.current = self.estimation_after
        return self.change

    @property
    def estimation(self):
        return self.current

    def reset(self):
        self.inputs = []


@pytest.fixture
def contrarian_learner():
    return ContrarianLearner()


@pytest.fixture
def oracle_learner():
    return OracleLearner()


@pytest.fixture
def scripted_detector_factory():
    """Factory of ``ScriptedDetector`` that remembers every detector it built."""
    def _factory(**kwargs):
        created = []

        def build():
            detector = ScriptedDetector(**kwargs)
            created.append(detector)
            return detector

        build.created = created
        return build
    return _factory


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep IMBSTREAM_* overrides from the outer environment out of the tests."""
    for name in list(os.environ):
        if name.startswith("IMBSTREAM_"):
            monkeypatch.delenv(name, raising=False)
