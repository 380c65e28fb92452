"""Decoded actor observation data contracts."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Vector3(BaseModel):
    """A world-space position."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    model_config = {"frozen": True}

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


class Observation(BaseModel):
    """Typed snapshot of the actor decoded from one raw payload.

    Every field has a neutral default so a garbled payload still decodes
    into a usable observation. Ray distances use ``-1`` for "nothing hit
    within sensor range", mirroring the actor's own convention.
    """

    position: Vector3 = Field(default_factory=Vector3)
    yaw: float = Field(default=0.0, description="Heading in degrees")
    goal_found: int = Field(default=0, ge=0, description="Goals discovered so far")
    goal_total: int = Field(default=0, ge=0, description="Goals present in the level")

    # Extra sensor fields the actor reports alongside the pose
    time: float = Field(default=0.0, description="Actor-side clock in seconds")
    forward_hit: float = Field(default=-1.0, description="Forward ray hit distance")
    left_hit: float = Field(default=-1.0, description="Left ray hit distance")
    right_hit: float = Field(default=-1.0, description="Right ray hit distance")
    nearest_goal_distance: float = Field(
        default=-1.0,
        description="Distance to the nearest undiscovered goal",
    )

    model_config = {"frozen": True}
