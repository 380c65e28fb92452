"""Actor command grammar.

The actor understands a small string grammar (``move_fwd:1.0``,
``turn_left:90``, ``jump``). Inside the orchestrator commands are a
tagged variant; the string form only exists at the boundary.
"""

from __future__ import annotations

import math
from enum import Enum

from pydantic import BaseModel, Field

COMMAND_SEPARATOR = ":"


class CommandKind(str, Enum):
    """Commands the actor can execute."""

    MOVE_FWD = "move_fwd"       # move forward for <seconds>
    MOVE_BACK = "move_back"     # move backward for <seconds>
    TURN_LEFT = "turn_left"     # rotate left by <degrees>
    TURN_RIGHT = "turn_right"   # rotate right by <degrees>
    JUMP = "jump"               # no parameter


_PARAMETERLESS = {CommandKind.JUMP}


class Command(BaseModel):
    """A parsed actor command."""

    kind: CommandKind = Field(..., description="Command verb")
    parameter: float | None = Field(
        default=None,
        description="Seconds for moves, degrees for turns, None for jump",
    )

    model_config = {"frozen": True}

    def to_wire(self) -> str:
        """Serialize to the actor's string grammar."""
        if self.kind in _PARAMETERLESS or self.parameter is None:
            return self.kind.value
        return f"{self.kind.value}{COMMAND_SEPARATOR}{float(self.parameter)}"

    @classmethod
    def move_forward(cls, seconds: float) -> "Command":
        return cls(kind=CommandKind.MOVE_FWD, parameter=seconds)

    @classmethod
    def move_back(cls, seconds: float) -> "Command":
        return cls(kind=CommandKind.MOVE_BACK, parameter=seconds)

    @classmethod
    def turn_left(cls, degrees: float) -> "Command":
        return cls(kind=CommandKind.TURN_LEFT, parameter=degrees)

    @classmethod
    def turn_right(cls, degrees: float) -> "Command":
        return cls(kind=CommandKind.TURN_RIGHT, parameter=degrees)

    @classmethod
    def jump(cls) -> "Command":
        return cls(kind=CommandKind.JUMP)


def parse_command(text: object) -> Command | None:
    """Parse a wire command, returning None when it is not in the grammar.

    Matching is case-insensitive and tolerant of surrounding whitespace,
    like the actor's own parser.
    """
    if not isinstance(text, str):
        return None
    cleaned = text.strip().lower()
    if not cleaned:
        return None

    verb, sep, arg = cleaned.partition(COMMAND_SEPARATOR)
    try:
        kind = CommandKind(verb.strip())
    except ValueError:
        return None

    if kind in _PARAMETERLESS:
        return Command(kind=kind) if not sep or not arg.strip() else None

    if not sep:
        return None
    try:
        value = float(arg.strip())
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return Command(kind=kind, parameter=value)


def command_verb(text: str) -> str:
    """Return the verb of a wire command (text before the first separator)."""
    return text.split(COMMAND_SEPARATOR, 1)[0].strip()
