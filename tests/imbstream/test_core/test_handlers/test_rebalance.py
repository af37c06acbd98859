"""Tests for the rebalancing handler."""

import numpy as np
import pytest

from imbstream.core.data_structures import Attribute, Schema
from imbstream.core.drift_detection import ADWINDetector, AccuracyCUSUM
from imbstream.core.classifiers import GaussianNaiveBayes, LightweightKNN
from imbstream.core.handlers import RebalanceConfig, RebalanceHandler
from imbstream.core.tree import HoeffdingTreeHistogram
from imbstream.utils.config import Config
from imbstream.utils.errors import ConfigError, InvalidInputError, OversamplingLimitError


def _handler(learner, detector_factory=None, **config_kwargs):
    config_kwargs.setdefault("drift_detection_enabled", False)
    return RebalanceHandler(
        learner,
        HoeffdingTreeHistogram(grace_period=1000),
        RebalanceConfig(**config_kwargs),
        drift_detector_factory=detector_factory,
        rng=np.random.default_rng(0)
    )


def _imbalanced_stream(schema, make_instance, num_majority=9):
    """One class-0 instance followed by ``num_majority`` class-1 instances."""
    stream = [make_instance(schema, [0.5, 1.5], 0)]
    stream.extend(make_instance(schema, [float(i), 2.0 * i], 1) for i in range(num_majority))
    return stream


class TestOversampling:
    def test_minority_brought_up_to_threshold(self, contrarian_learner, numeric_schema, make_instance):
        handler = _handler(
            contrarian_learner,
            ratio_threshold=0.5,
            minimum_minority_size=-1,
            correctly_classified_save_fraction=0.0
        )
        for instance in _imbalanced_stream(numeric_schema, make_instance):
            handler.train_on_instance(instance)

        assert handler.statistics_model.observed_class_distribution == {0: 1.0, 1: 9.0}
        assert handler.generated_class_distribution == {0: 8.0}
        assert handler.current_ratio(0) == pytest.approx(0.5)
        assert handler.minority_class() == 0
        # 10 real instances plus 8 synthetic ones
        assert len(contrarian_learner.trained) == 18
        synthetic = contrarian_learner.trained[2:]
        assert any(instance.class_value == 0 for instance in synthetic)

    def test_ratio_stays_in_unit_interval(self, contrarian_learner, numeric_schema, make_instance):
        handler = _handler(contrarian_learner, ratio_threshold=0.3, minimum_minority_size=-1)
        for instance in _imbalanced_stream(numeric_schema, make_instance, num_majority=30):
            handler.train_on_instance(instance)
            for class_index in (0, 1):
                assert 0.0 <= handler.current_ratio(class_index) <= 1.0

    def test_oversampling_event_reported(self, contrarian_learner, numeric_schema, make_instance):
        received = []
        handler = _handler(contrarian_learner, ratio_threshold=0.5, minimum_minority_size=-1)
        handler.adaptation_callback = received.append
        events = []
        for instance in _imbalanced_stream(numeric_schema, make_instance, num_majority=3):
            events.extend(handler.train_on_instance(instance))

        assert events
        assert all(event.event_type == "oversampling" for event in events)
        assert events[0].minority_class == 0
        assert events[0].samples_generated == 1
        assert events[0].ratio_after >= 0.5
        assert received == events
        assert handler.n_adaptations == len(events)

    def test_no_oversampling_with_single_class(self, contrarian_learner, numeric_schema, make_instance):
        handler = _handler(contrarian_learner, ratio_threshold=1.0, minimum_minority_size=-1)
        for i in range(10):
            handler.train_on_instance(make_instance(numeric_schema, [float(i), 0.0], 1))
        assert not handler.allow_oversampling()
        assert handler.generated_class_distribution == {}
        assert handler.current_ratio(0) == 0.0

    def test_no_oversampling_below_minimum_minority_size(self, contrarian_learner, numeric_schema, make_instance):
        handler = _handler(contrarian_learner, ratio_threshold=0.5, minimum_minority_size=100)
        for instance in _imbalanced_stream(numeric_schema, make_instance):
            handler.train_on_instance(instance)
        assert not handler.allow_oversampling()
        assert handler.generated_class_distribution == {}

    def test_disabled_adaptation_skips_oversampling(self, contrarian_learner, numeric_schema, make_instance):
        handler = _handler(contrarian_learner, ratio_threshold=0.5, minimum_minority_size=-1)
        handler.disable_adaptation()
        for instance in _imbalanced_stream(numeric_schema, make_instance):
            handler.train_on_instance(instance)
        assert handler.generated_class_distribution == {}

    def test_iteration_cap(self, contrarian_learner, numeric_schema, make_instance):
        handler = _handler(
            contrarian_learner,
            ratio_threshold=1.0,
            minimum_minority_size=-1,
            max_oversampling_iterations=5
        )
        stream = _imbalanced_stream(numeric_schema, make_instance, num_majority=1)
        handler.train_on_instance(stream[0])
        with pytest.raises(OversamplingLimitError):
            handler.train_on_instance(stream[1])
        assert handler.generated_class_distribution == {0: 5.0}
        assert handler.synthesizer.already_used == set()

    def test_minority_ties_go_to_class_zero(self, contrarian_learner, numeric_schema, make_instance):
        handler = _handler(contrarian_learner, minimum_minority_size=-1)
        handler.train_on_instance(make_instance(numeric_schema, [0.0, 0.0], 0))
        handler.train_on_instance(make_instance(numeric_schema, [1.0, 1.0], 1))
        assert handler.minority_class() == 0
        assert handler.current_ratio(0) == pytest.approx(0.5)


class TestStatisticsQuota:
    @pytest.mark.parametrize("fraction,expected_saved", [(0.0, 0), (0.5, 5), (1.0, 10)])
    def test_correctly_classified_quota(self, oracle_learner, numeric_schema, make_instance, fraction, expected_saved):
        handler = _handler(oracle_learner, correctly_classified_save_fraction=fraction)
        for i in range(10):
            handler.train_on_instance(make_instance(numeric_schema, [float(i), 0.0], i % 2))
        assert handler.correctly_classified_seen == 10
        assert handler.correctly_classified_saved == expected_saved
        assert sum(handler.statistics_model.observed_class_distribution.values()) == expected_saved

    def test_misclassified_always_saved(self, contrarian_learner, numeric_schema, make_instance):
        handler = _handler(contrarian_learner, correctly_classified_save_fraction=0.0)
        for i in range(6):
            handler.train_on_instance(make_instance(numeric_schema, [float(i), 0.0], i % 2))
        assert handler.n_samples_misclassified == 6
        assert sum(handler.statistics_model.observed_class_distribution.values()) == 6.0


class TestDriftReset:
    def test_disabled_detection_never_feeds_detector(self, oracle_learner, scripted_detector_factory, numeric_schema, make_instance):
        factory = scripted_detector_factory(change=True, estimation_before=0.0, estimation_after=1.0)
        handler = _handler(oracle_learner, detector_factory=factory, drift_detection_enabled=False)
        for i in range(5):
            handler.train_on_instance(make_instance(numeric_schema, [float(i), 0.0], 1))
        assert factory.created[0].inputs == []
        assert oracle_learner.reset_count == 0

    @pytest.mark.parametrize("change,before,after,expect_reset", [
        (True, 0.0, 1.0, True),
        (True, 0.5, 0.5, False),
        (True, 0.5, 0.2, False),
        (False, 0.0, 1.0, False),
    ])
    def test_reset_only_on_change_with_increase(
        self, oracle_learner, scripted_detector_factory, numeric_schema, make_instance,
        change, before, after, expect_reset
    ):
        factory = scripted_detector_factory(change=change, estimation_before=before, estimation_after=after)
        handler = _handler(oracle_learner, detector_factory=factory, drift_detection_enabled=True)
        first_detector = handler.drift_detector

        events = handler.train_on_instance(make_instance(numeric_schema, [1.0, 0.0], 1))

        assert first_detector.inputs == [1.0]
        assert oracle_learner.reset_count == (1 if expect_reset else 0)
        assert (handler.drift_detector is not first_detector) == expect_reset
        assert handler.n_drift_resets == (1 if expect_reset else 0)
        assert [event.event_type for event in events] == (["drift_reset"] if expect_reset else [])

    def test_wrong_prediction_feeds_zero(self, contrarian_learner, scripted_detector_factory, numeric_schema, make_instance):
        factory = scripted_detector_factory()
        handler = _handler(contrarian_learner, detector_factory=factory, drift_detection_enabled=True)
        handler.train_on_instance(make_instance(numeric_schema, [1.0, 0.0], 1))
        assert factory.created[0].inputs == [0.0]

    def test_statistics_model_survives_reset(self, oracle_learner, scripted_detector_factory, numeric_schema, make_instance):
        factory = scripted_detector_factory(change=True, estimation_before=0.0, estimation_after=1.0)
        handler = _handler(
            oracle_learner,
            detector_factory=factory,
            drift_detection_enabled=True,
            correctly_classified_save_fraction=1.0
        )
        for i in range(3):
            handler.train_on_instance(make_instance(numeric_schema, [float(i), 0.0], 1))
        assert oracle_learner.reset_count == 3
        assert handler.statistics_model.observed_class_distribution == {1: 3.0}
        assert len(factory.created) == 4

    def test_reset_reported_when_oversampling_fails(
        self, contrarian_learner, scripted_detector_factory, numeric_schema, make_instance
    ):
        received = []
        factory = scripted_detector_factory(change=True, estimation_before=0.0, estimation_after=1.0)
        handler = _handler(
            contrarian_learner,
            detector_factory=factory,
            drift_detection_enabled=True,
            ratio_threshold=1.0,
            minimum_minority_size=-1,
            max_oversampling_iterations=3
        )
        handler.adaptation_callback = received.append
        stream = _imbalanced_stream(numeric_schema, make_instance, num_majority=1)

        handler.train_on_instance(stream[0])
        with pytest.raises(OversamplingLimitError):
            handler.train_on_instance(stream[1])

        assert handler.n_drift_resets == 2
        assert contrarian_learner.reset_count == 2
        assert [event.event_type for event in received] == ["drift_reset", "drift_reset"]
        assert handler.adaptation_history == received
        assert handler.n_adaptations == 2


class TestInputValidation:
    def test_unlabeled_instance_rejected(self, oracle_learner, numeric_schema, make_instance):
        handler = _handler(oracle_learner)
        with pytest.raises(InvalidInputError):
            handler.train_on_instance(make_instance(numeric_schema, [0.0, 0.0], None))

    def test_multiclass_schema_rejected(self, oracle_learner, make_instance):
        schema = Schema.build([Attribute.numeric("x")], Attribute.categorical("class", ["a", "b", "c"]))
        handler = _handler(oracle_learner)
        with pytest.raises(InvalidInputError):
            handler.train_on_instance(make_instance(schema, [0.0], 2))


class TestRebalanceConfig:
    @pytest.mark.parametrize("kwargs", [
        {"ratio_threshold": 1.5},
        {"ratio_threshold": -0.1},
        {"correctly_classified_save_fraction": 2.0},
        {"minimum_minority_size": -2},
        {"max_oversampling_iterations": 0},
        {"numeric_sampling_policy": "poisson"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            RebalanceConfig(**kwargs)

    def test_defaults(self):
        config = RebalanceConfig()
        assert config.ratio_threshold == 0.0
        assert config.correctly_classified_save_fraction == 0.5
        assert config.minimum_minority_size == 100
        assert config.drift_detection_enabled is True

    def test_from_config(self):
        config = Config()
        config.set("rebalance", "ratio_threshold", 0.3)
        config.set("rebalance", "not_a_setting", 1)
        rebalance_config = RebalanceConfig.from_config(config)
        assert rebalance_config.ratio_threshold == 0.3
        assert rebalance_config.to_dict()["base_learner"] == "knn"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("IMBSTREAM_REBALANCE_RATIO_THRESHOLD", "0.25")
        assert RebalanceConfig.from_config(Config()).ratio_threshold == 0.25


class TestFromConfig:
    def test_default_components(self):
        handler = RebalanceHandler.from_config(Config())
        assert isinstance(handler.learner, LightweightKNN)
        assert isinstance(handler.statistics_model, HoeffdingTreeHistogram)
        assert isinstance(handler.drift_detector, ADWINDetector)
        assert handler.learner.k == 5

    def test_selected_components(self):
        config = Config()
        config.set("rebalance", "base_learner", "naive_bayes")
        config.set("rebalance", "drift_detector", "cusum")
        config.set("cusum", "threshold", 3.0)
        handler = RebalanceHandler.from_config(config)
        assert isinstance(handler.learner, GaussianNaiveBayes)
        assert isinstance(handler.drift_detector, AccuracyCUSUM)
        assert handler.drift_detector.threshold == 3.0

    def test_unknown_component(self):
        config = Config()
        config.set("rebalance", "base_learner", "random_forest")
        with pytest.raises(ConfigError):
            RebalanceHandler.from_config(config)

    def test_seeded_handlers_generate_identically(self, numeric_schema, make_instance):
        def run():
            config = Config()
            config.set("rebalance", "seed", 5)
            config.set("rebalance", "ratio_threshold", 0.5)
            config.set("rebalance", "minimum_minority_size", -1)
            config.set("rebalance", "drift_detection_enabled", False)
            config.set("rebalance", "correctly_classified_save_fraction", 1.0)
            handler = RebalanceHandler.from_config(config, learner=LightweightKNN(k=1))
            for instance in _imbalanced_stream(numeric_schema, make_instance, num_majority=6):
                handler.train_on_instance(instance)
            return [x.tolist() for x in handler.learner.X_train]

        assert run() == run()


def test_metrics(contrarian_learner, numeric_schema, make_instance):
    received = []
    handler = _handler(contrarian_learner, ratio_threshold=0.5, minimum_minority_size=-1)
    handler.metrics_callback = received.append
    for instance in _imbalanced_stream(numeric_schema, make_instance, num_majority=4):
        handler.train_on_instance(instance)

    metrics = handler.get_metrics()
    assert metrics["n_samples_processed"] == 5
    assert metrics["minority_class"] == 0
    assert metrics["minority_ratio"] == pytest.approx(0.5)
    assert metrics["n_generated"] == 3.0
    assert len(received) == 5
