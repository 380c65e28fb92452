"""Observation codec: raw actor payloads to typed observations.

The actor serializes its state every frame and partial or garbled
payloads are routine. Decoding therefore never raises: every field is
decoded independently through ``parse_or_default`` and falls back to
its neutral value.

Accepted payload shapes:
- JSON text (``str`` or ``bytes``) holding an object
- an already-decoded mapping
- anything else decodes to the default observation

Field names follow the actor's serializer (``position``, ``yaw``,
``goalFound``, ``goalTotal``, ``forwardHit``...). The treasure-hunt
level's legacy names (``chestsFound``, ``totalChests``,
``nearestChestDistance``) are accepted as aliases.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from typing import Any, Callable, TypeVar

from playtest_agent.schemas import Observation, Vector3

logger = logging.getLogger(__name__)

T = TypeVar("T")

# OverflowError: integers too large for a float. RecursionError: deeply nested JSON.
_DECODE_ERRORS = (
    ValueError,
    TypeError,
    KeyError,
    IndexError,
    AttributeError,
    OverflowError,
    RecursionError,
)


def parse_or_default(parser: Callable[[Any], T], default: T) -> Callable[[Any], T]:
    """Wrap ``parser`` so that any decode failure yields ``default``.

    Args:
        parser: Function that either returns a valid value or raises.
        default: Value returned when ``parser`` raises a decode error.

    Returns:
        A function with the same input as ``parser`` that never raises
        a decode error.
    """
    def parse(raw: Any) -> T:
        try:
            return parser(raw)
        except _DECODE_ERRORS:
            return default

    return parse


# =============================================================================
# Primitive parsers (raise on bad input)
# =============================================================================

def _load_mapping(payload: Any) -> Mapping[str, Any]:
    if isinstance(payload, Mapping):
        return payload
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8")
    if not isinstance(payload, str):
        raise TypeError(f"unsupported payload type: {type(payload).__name__}")
    data = json.loads(payload)
    if not isinstance(data, Mapping):
        raise TypeError("observation payload is not a JSON object")
    return data


def _finite_float(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        raise TypeError("not a number")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError("non-finite number")
    return number


def _count(value: Any) -> int:
    number = _finite_float(value)
    if number < 0:
        raise ValueError("negative count")
    return int(number)


def _vector(value: Any) -> Vector3:
    if isinstance(value, Mapping):
        axes = [value.get("x"), value.get("y"), value.get("z")]
    elif isinstance(value, (list, tuple)) and len(value) == 3:
        axes = list(value)
    else:
        raise TypeError("position is neither an {x,y,z} object nor a 3-list")
    axis = parse_or_default(_finite_float, 0.0)
    return Vector3(x=axis(axes[0]), y=axis(axes[1]), z=axis(axes[2]))


def _rotation_yaw(value: Any) -> float:
    if isinstance(value, Mapping):
        return _finite_float(value["y"])
    if isinstance(value, (list, tuple)) and len(value) == 3:
        return _finite_float(value[1])
    raise TypeError("rotation is neither an {x,y,z} object nor a 3-list")


load_mapping = parse_or_default(_load_mapping, {})


def _first_present(data: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _float_field(data: Mapping[str, Any], keys: tuple[str, ...], default: float) -> float:
    return parse_or_default(_finite_float, default)(_first_present(data, keys))


def _count_field(data: Mapping[str, Any], keys: tuple[str, ...]) -> int:
    return parse_or_default(_count, 0)(_first_present(data, keys))


# =============================================================================
# Public API
# =============================================================================

def decode_observation(payload: Any) -> Observation:
    """Decode a raw actor payload into an ``Observation``.

    Never raises. Missing, non-numeric, boolean or non-finite fields take
    their defaults; an unparsable payload yields ``Observation()``.
    """
    data = load_mapping(payload)
    if not data:
        return Observation()

    yaw_raw = data.get("yaw")
    if yaw_raw is None:
        yaw = parse_or_default(_rotation_yaw, 0.0)(data.get("rotation"))
    else:
        yaw = parse_or_default(_finite_float, 0.0)(yaw_raw)

    return Observation(
        position=parse_or_default(_vector, Vector3())(data.get("position")),
        yaw=yaw,
        goal_found=_count_field(data, ("goalFound", "goal_found", "chestsFound")),
        goal_total=_count_field(data, ("goalTotal", "goal_total", "totalChests")),
        time=_float_field(data, ("time",), 0.0),
        forward_hit=_float_field(data, ("forwardHit", "forward_hit"), -1.0),
        left_hit=_float_field(data, ("leftHit", "left_hit"), -1.0),
        right_hit=_float_field(data, ("rightHit", "right_hit"), -1.0),
        nearest_goal_distance=_float_field(
            data,
            ("nearestGoalDistance", "nearest_goal_distance", "nearestChestDistance"),
            -1.0,
        ),
    )


def payload_text(payload: Any) -> str:
    """Render a raw payload as text for the audit trail."""
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload
    if isinstance(payload, (bytes, bytearray)):
        return payload.decode("utf-8", errors="replace")
    try:
        return json.dumps(payload, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return str(payload)


def short_observation(text: str, max_len: int = 120) -> str:
    """Flatten whitespace and truncate an observation for log lines."""
    if not text:
        return ""
    flat = " ".join(text.split())
    if len(flat) <= max_len:
        return flat
    return f"{flat[:max_len]}..."
