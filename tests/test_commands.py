"""Tests for the actor command grammar."""

from __future__ import annotations

import pytest

from playtest_agent.schemas import Command, CommandKind, command_verb, parse_command


class TestParseCommand:
    """Tests for parse_command."""

    @pytest.mark.parametrize(
        "text, kind, parameter",
        [
            ("move_fwd:1.0", CommandKind.MOVE_FWD, 1.0),
            ("move_back:0.5", CommandKind.MOVE_BACK, 0.5),
            ("turn_left:90", CommandKind.TURN_LEFT, 90.0),
            ("turn_right:45.5", CommandKind.TURN_RIGHT, 45.5),
            ("  MOVE_FWD : 2 ", CommandKind.MOVE_FWD, 2.0),
            ("jump", CommandKind.JUMP, None),
            ("JUMP", CommandKind.JUMP, None),
        ],
    )
    def test_valid(self, text, kind, parameter) -> None:
        command = parse_command(text)
        assert command is not None
        assert command.kind == kind
        assert command.parameter == parameter

    @pytest.mark.parametrize(
        "text",
        ["", "   ", "fly:1", "move_fwd", "move_fwd:", "move_fwd:far",
         "turn_left:nan", "turn_left:inf", "jump:3", None, 12],
    )
    def test_invalid(self, text) -> None:
        assert parse_command(text) is None


class TestCommand:
    """Tests for the Command variant."""

    def test_to_wire(self) -> None:
        assert Command.move_forward(1).to_wire() == "move_fwd:1.0"
        assert Command.turn_right(90).to_wire() == "turn_right:90.0"
        assert Command.jump().to_wire() == "jump"

    def test_wire_form_parses_back(self) -> None:
        command = Command.move_back(0.25)
        assert parse_command(command.to_wire()) == command

    def test_command_verb(self) -> None:
        assert command_verb("move_fwd:0.5") == "move_fwd"
        assert command_verb("jump") == "jump"
