"""
Steering command limiting
"""

from racingline.geometry import clamp_vec
from racingline.params import SteeringLimits
from racingline.state import Vec2


def limit(direction: float, max_x: float, max_y: float) -> Vec2:
    """
    Map an engine direction to a bounded command vector

    Args:
        direction: Engine output, nominally in [-1, 1]
        max_x: Maximum |x| component
        max_y: Maximum |y| component (also the constant forward-lean)

    Returns:
        Command vector within [-max_x, max_x] x [-max_y, max_y]
    """
    # x clamp only bites when the engine output is out of range
    return clamp_vec(Vec2(direction * max_x, max_y), max_x, max_y)


class SteeringLimiter:
    """Applies the operator's steering limits to engine outputs"""

    def __init__(self, limits: SteeringLimits) -> None:
        self.limits = limits

    def limit(self, direction: float) -> Vec2:
        return limit(direction, self.limits.max_x, self.limits.max_y)
