"""Unit tests for the value types shared by the loops."""

import math

from thermo_reader.control.types import DisplayFrame, Reading, distance_to_json, is_near


class TestIsNear:

    def test_finite_below_threshold(self):
        assert is_near(80.0, 120.0)

    def test_equal_is_not_near(self):
        assert not is_near(120.0, 120.0)

    def test_infinite_is_never_near(self):
        assert not is_near(math.inf, 250.0)

    def test_missing_is_not_near(self):
        assert not is_near(None, 120.0)


def test_distance_to_json():
    assert distance_to_json(math.inf) == "infinite"
    assert distance_to_json(None) is None
    assert distance_to_json(42.04) == 42.0


def test_reading_merge_keeps_unsampled_values():
    first = Reading(temperature_c=18.0, distance_cm=90.0, timestamp=1.0)
    second = first.merge(distance_cm=70.0, timestamp=2.0)

    assert second.temperature_c == 18.0
    assert second.distance_cm == 70.0
    assert second.timestamp == 2.0
    assert first.distance_cm == 90.0


class TestDisplayFrame:

    def test_build_pads_to_grid(self):
        frame = DisplayFrame.build(["Temp: 20.0C"])
        assert len(frame.lines) == 4
        assert all(len(line) == 20 for line in frame.lines)
        assert frame.lines[0] == "Temp: 20.0C".ljust(20)
        assert frame.lines[3] == " " * 20

    def test_build_truncates_long_lines(self):
        frame = DisplayFrame.build(["x" * 30])
        assert frame.lines[0] == "x" * 20

    def test_blank(self):
        assert DisplayFrame.blank() == DisplayFrame.build([])
