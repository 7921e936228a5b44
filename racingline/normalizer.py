"""
Controller input normalisation
"""

from racingline.errors import InvalidParameterError
from racingline.geometry import clamp
from racingline.state import ControlSignal


class SignalNormalizer:
    """Converts lateral offset and its per-tick change into [-1, 1] controller inputs"""

    def __init__(self, distance_modifier: float, velocity_modifier: float, screen_width: float) -> None:
        """
        Initialize normalizer

        Args:
            distance_modifier: Offset divisor, as a fraction of screen width
            velocity_modifier: Offset-velocity divisor, as a fraction of screen width
            screen_width: Screen width (px)

        Raises:
            InvalidParameterError: Any divisor is not strictly positive
        """
        for name, value in (
            ("distance_modifier", distance_modifier),
            ("velocity_modifier", velocity_modifier),
            ("screen_width", screen_width),
        ):
            if not value > 0:
                raise InvalidParameterError(f"{name} must be > 0, got {value!r}")

        self.distance_scale = screen_width * distance_modifier
        self.velocity_scale = screen_width * velocity_modifier

    def update(self, line_x: float, car_x: float, previous_offset: float) -> ControlSignal:
        """
        Compute this tick's control signal

        Args:
            line_x: Reference line lateral coordinate (px)
            car_x: Vehicle lateral coordinate (px)
            previous_offset: Raw offset of the previous tick (px)

        Returns:
            ControlSignal with saturated normalised fields
        """
        raw_offset = line_x - car_x
        raw_velocity = previous_offset - raw_offset  # positive while the offset shrinks
        return ControlSignal(
            raw_offset=raw_offset,
            normalized_offset=clamp(raw_offset / self.distance_scale, -1.0, 1.0),
            raw_velocity=raw_velocity,
            normalized_velocity=clamp(raw_velocity / self.velocity_scale, -1.0, 1.0),
        )
