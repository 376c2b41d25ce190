"""Unit tests for ParameterStore: clamping, readings, observers, snapshot."""

import math

import pytest

from thermo_reader.control.parameter_store import ParameterStore, clamp
from thermo_reader.control.types import Reading, Thresholds


class TestClamp:

    @pytest.mark.parametrize(
        "value, bounds, expected",
        [
            (-5, (0.0, 250.0), 0.0),
            (9999, (0.0, 250.0), 250.0),
            (-1, (0.0, 30.0), 0.0),
            (99, (0.0, 30.0), 30.0),
            (17.5, (0.0, 30.0), 17.5),
        ],
    )
    def test_clamp(self, value, bounds, expected):
        assert clamp(value, bounds) == expected


class TestThresholds:

    def test_defaults(self):
        store = ParameterStore()
        assert store.get_thresholds() == Thresholds(15.0, 120.0, True)

    def test_initial_values_are_clamped(self):
        store = ParameterStore(Thresholds(temperature_c=45.0, distance_cm=-10.0))
        thresholds = store.get_thresholds()
        assert thresholds.temperature_c == 30.0
        assert thresholds.distance_cm == 0.0

    def test_distance_is_clamped(self):
        store = ParameterStore()
        assert store.set_thresholds(distance_cm=-5).distance_cm == 0.0
        assert store.set_thresholds(distance_cm=9999).distance_cm == 250.0

    def test_temperature_is_clamped(self):
        store = ParameterStore()
        assert store.set_thresholds(temperature_c=-1).temperature_c == 0.0
        assert store.set_thresholds(temperature_c=99).temperature_c == 30.0

    def test_partial_update_keeps_other_fields(self):
        store = ParameterStore(Thresholds(17.0, 100.0, True))
        store.set_thresholds(alarm_enabled=False)
        assert store.get_thresholds() == Thresholds(17.0, 100.0, False)


class TestObservers:

    def test_observer_sees_previous_and_updated(self):
        store = ParameterStore()
        seen = []
        store.subscribe(lambda previous, updated: seen.append((previous, updated)))

        store.set_thresholds(temperature_c=20.0)

        assert len(seen) == 1
        previous, updated = seen[0]
        assert previous.temperature_c == 15.0
        assert updated.temperature_c == 20.0

    def test_no_notification_without_change(self):
        store = ParameterStore()
        seen = []
        store.subscribe(lambda previous, updated: seen.append(updated))

        store.set_thresholds(temperature_c=15.0)

        assert seen == []

    def test_unsubscribe(self):
        store = ParameterStore()
        seen = []
        unsubscribe = store.subscribe(lambda previous, updated: seen.append(updated))
        unsubscribe()

        store.set_thresholds(distance_cm=50.0)

        assert seen == []

    def test_failing_observer_does_not_break_update(self):
        store = ParameterStore()
        seen = []

        def broken(previous, updated):
            raise RuntimeError("boom")

        store.subscribe(broken)
        store.subscribe(lambda previous, updated: seen.append(updated))

        updated = store.set_thresholds(distance_cm=60.0)

        assert updated.distance_cm == 60.0
        assert store.get_thresholds().distance_cm == 60.0
        assert seen == [updated]


class TestReadings:

    def test_no_reading_initially(self):
        store = ParameterStore()
        assert store.latest_reading() is None
        assert store.latest_temperature() is None

    def test_publish_overwrites(self):
        store = ParameterStore()
        store.publish_reading(Reading(temperature_c=18.0, distance_cm=50.0))
        store.publish_reading(Reading(temperature_c=19.5, distance_cm=40.0))

        assert store.latest_reading().temperature_c == 19.5
        assert store.latest_temperature() == 19.5

    def test_snapshot_renders_infinite_distance(self):
        store = ParameterStore(Thresholds(17.0, 120.0, True))
        store.publish_reading(Reading(temperature_c=16.25, distance_cm=math.inf, timestamp=1.0))
        store.publish_mode("idle")

        snapshot = store.snapshot()

        assert snapshot == {
            "temperature": 16.25,
            "distance": "infinite",
            "timestamp": 1.0,
            "temperatureThreshold": 17.0,
            "distanceThreshold": 120.0,
            "alarmEnabled": True,
            "mode": "idle",
        }

    def test_snapshot_before_first_reading(self):
        snapshot = ParameterStore().snapshot()
        assert snapshot["temperature"] is None
        assert snapshot["distance"] is None
        assert snapshot["mode"] is None
