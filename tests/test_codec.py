"""Tests for observation decoding."""

from __future__ import annotations

import json

import pytest

from playtest_agent.modules.codec import (
    decode_observation,
    load_mapping,
    parse_or_default,
    payload_text,
    short_observation,
)
from playtest_agent.schemas import Observation, Vector3


class TestParseOrDefault:
    """Tests for the parse-or-default combinator."""

    def test_returns_parsed_value(self) -> None:
        parse = parse_or_default(int, -1)
        assert parse("42") == 42

    def test_returns_default_on_error(self) -> None:
        parse = parse_or_default(int, -1)
        assert parse("forty-two") == -1
        assert parse(None) == -1

    def test_other_exceptions_propagate(self) -> None:
        def boom(_):
            raise RuntimeError("not a decode error")

        with pytest.raises(RuntimeError):
            parse_or_default(boom, 0)("x")


class TestDecodeObservation:
    """Tests for decode_observation."""

    def test_full_payload(self) -> None:
        payload = json.dumps({
            "position": {"x": 1.5, "y": 0.2, "z": -3.0},
            "yaw": 90.0,
            "goalFound": 2,
            "goalTotal": 5,
            "time": 12.5,
            "forwardHit": 0.8,
        })
        obs = decode_observation(payload)
        assert obs.position == Vector3(x=1.5, y=0.2, z=-3.0)
        assert obs.yaw == 90.0
        assert obs.goal_found == 2
        assert obs.goal_total == 5
        assert obs.time == 12.5
        assert obs.forward_hit == 0.8
        assert obs.left_hit == -1.0

    @pytest.mark.parametrize(
        "payload",
        [None, "", "not json", "[1, 2, 3]", 42, b"\xff\xfe", "[" * 100000, "{\"a\":" * 100000],
    )
    def test_garbage_yields_default(self, payload) -> None:
        assert decode_observation(payload) == Observation()

    def test_oversized_integers_default(self) -> None:
        huge = "1" + "0" * 400
        obs = decode_observation(
            f'{{"goalFound": {huge}, "goalTotal": 4, "yaw": {huge}, '
            f'"position": {{"x": {huge}, "y": 1, "z": 2}}}}'
        )
        assert obs.goal_found == 0
        assert obs.goal_total == 4
        assert obs.yaw == 0.0
        assert obs.position == Vector3()

    def test_missing_fields_default_independently(self) -> None:
        obs = decode_observation('{"goalFound": 3}')
        assert obs.goal_found == 3
        assert obs.position == Vector3()
        assert obs.yaw == 0.0
        assert obs.goal_total == 0

    def test_non_numeric_fields_default(self) -> None:
        obs = decode_observation(json.dumps({
            "position": {"x": "left", "y": 1.0, "z": None},
            "yaw": "north",
            "goalFound": True,
            "goalTotal": -4,
        }))
        assert obs.position == Vector3(x=0.0, y=1.0, z=0.0)
        assert obs.yaw == 0.0
        assert obs.goal_found == 0
        assert obs.goal_total == 0

    def test_non_finite_numbers_default(self) -> None:
        obs = decode_observation('{"yaw": NaN, "position": [Infinity, 2, 3]}')
        assert obs.yaw == 0.0
        assert obs.position == Vector3(x=0.0, y=2.0, z=3.0)

    def test_mapping_payload(self) -> None:
        obs = decode_observation({"position": [1, 2, 3], "yaw": 45})
        assert obs.position.as_tuple() == (1.0, 2.0, 3.0)
        assert obs.yaw == 45.0

    def test_bytes_payload(self) -> None:
        obs = decode_observation(b'{"goalFound": 1, "goalTotal": 1}')
        assert obs.goal_found == 1

    def test_legacy_chest_fields(self) -> None:
        obs = decode_observation(json.dumps({
            "position": {"x": 0, "y": 0, "z": 0},
            "rotation": {"x": 0, "y": 270.0, "z": 0},
            "chestsFound": 1,
            "totalChests": 3,
            "nearestChestDistance": 4.2,
        }))
        assert obs.yaw == 270.0
        assert obs.goal_found == 1
        assert obs.goal_total == 3
        assert obs.nearest_goal_distance == 4.2

    def test_yaw_takes_precedence_over_rotation(self) -> None:
        obs = decode_observation('{"yaw": 10, "rotation": {"y": 200}}')
        assert obs.yaw == 10.0


class TestHelpers:
    """Tests for payload helpers."""

    def test_load_mapping_never_raises(self) -> None:
        assert load_mapping("{") == {}
        assert load_mapping('{"a": 1}') == {"a": 1}
        assert load_mapping("[" * 100000) == {}

    def test_payload_text(self) -> None:
        assert payload_text(None) == ""
        assert payload_text("raw") == "raw"
        assert payload_text(b"raw") == "raw"
        assert payload_text({"a": 1}) == '{"a":1}'

    def test_short_observation_flattens_and_truncates(self) -> None:
        assert short_observation("a\n  b\tc") == "a b c"
        text = "x" * 150
        assert short_observation(text) == "x" * 120 + "..."
        assert short_observation("") == ""
