"""
Shared numeric helpers for command vectors
"""

import math
from typing import Optional, Tuple

from racingline.state import Vec2

# Heading is measured against straight up the screen
REFERENCE_VECTOR = Vec2(0.0, 1.0)


def clamp(value: float, low: float, high: float) -> float:
    """Saturate value to [low, high]"""
    return max(low, min(high, value))


def clamp_vec(vec: Vec2, max_x: float, max_y: float) -> Vec2:
    """Clamp each component of vec independently to [-max, max]"""
    return Vec2(clamp(vec.x, -max_x, max_x), clamp(vec.y, -max_y, max_y))


def dot_cross(vec: Vec2, reference: Vec2 = REFERENCE_VECTOR) -> Tuple[float, float]:
    """
    Dot product and 2D cross product (determinant) of reference and vec

    Args:
        vec: Command vector
        reference: Vector the angle is measured from

    Returns:
        Tuple of (dot, cross); for the default reference this reduces to (vec.y, -vec.x)
    """
    dot = reference.x * vec.x + reference.y * vec.y
    cross = reference.x * vec.y - reference.y * vec.x
    return dot, cross


def signed_angle_degrees(vec: Vec2, reference: Vec2 = REFERENCE_VECTOR) -> float:
    """Signed angle from reference to vec, in degrees"""
    dot, cross = dot_cross(vec, reference)
    return math.degrees(math.atan2(cross, dot))


def command_ratio(vec: Vec2) -> Optional[float]:
    """
    Diagnostic dot/cross ratio of a command vector

    Returns:
        The ratio, or None when the cross term is zero (vehicle pointing straight)
    """
    dot, cross = dot_cross(vec)
    if cross == 0:
        return None
    return dot / cross
