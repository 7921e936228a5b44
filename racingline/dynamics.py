"""
Vehicle kinematics
"""

import math
from typing import Tuple

from racingline.errors import InvalidParameterError
from racingline.geometry import signed_angle_degrees
from racingline.state import Vec2


class VehicleIntegrator:
    """Kinematic point-mass with instantaneous heading"""

    def heading(self, command: Vec2) -> float:
        """
        Heading of a command vector

        The angle is measured from straight up (0, 1): atan2(cross, dot) with
        cross = -command.x and dot = command.y.

        Args:
            command: Limited command vector

        Returns:
            Heading in degrees
        """
        return signed_angle_degrees(command)

    def step(self, command: Vec2, speed: float, dt: float, position: float) -> Tuple[float, float]:
        """
        Advance the vehicle by one frame using explicit Euler integration

        No sub-stepping or dt clamping is done, so trajectories depend on frame rate.

        Args:
            command: Limited command vector
            speed: Vehicle speed (px/s)
            dt: Frame time (s)
            position: Current longitudinal-axis position (px)

        Returns:
            Tuple of (new_position, heading_degrees)
        """
        if not math.isfinite(speed) or speed < 0:
            raise InvalidParameterError(f"speed must be finite and >= 0, got {speed!r}")
        if not math.isfinite(dt) or dt < 0:
            raise InvalidParameterError(f"dt must be finite and >= 0, got {dt!r}")

        new_position = position - command.x * speed * dt
        return new_position, self.heading(command)
