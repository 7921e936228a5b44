"""
Simulation state representation
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Vec2:
    """Plain two-component vector"""

    x: float
    y: float


class LineMode(Enum):
    """How the reference line is driven each tick"""

    PERIODIC = "periodic"
    NOISE_FIELD = "noise_field"
    MANUAL = "manual"


@dataclass(frozen=True)
class ControlSignal:
    """Raw and normalised controller inputs for one tick"""

    raw_offset: float  # line_x - car_x (px)
    normalized_offset: float  # [-1, 1]
    raw_velocity: float  # previous offset - offset (px/tick), positive when shrinking
    normalized_velocity: float  # [-1, 1]


@dataclass(frozen=True)
class VehicleState:
    """State carried by the control loop between ticks"""

    position: float  # Longitudinal-axis position (px); lateral axis is fixed
    heading: float  # Heading angle (degrees)
    previous_offset: float  # Raw offset of the previous tick (px)
    command: Vec2 = Vec2(0.0, 0.0)  # Last applied command vector
