"""
Simulation parameters
"""

from dataclasses import dataclass, field

from racingline.errors import InvalidParameterError

SPEED_MIN = 100.0  # px/s
SPEED_MAX = 500.0  # px/s
MAX_TURN_COMPONENT = 0.75


def _require_positive(name: str, value: float) -> None:
    if not value > 0:
        raise InvalidParameterError(f"{name} must be > 0, got {value!r}")


@dataclass
class SteeringLimits:
    """Per-axis maximum magnitude of the command vector"""

    max_x: float = 0.75  # scaled by the engine's direction output
    max_y: float = 0.2  # constant forward-lean component

    def __post_init__(self) -> None:
        """Validate limits"""
        for name in ("max_x", "max_y"):
            value = getattr(self, name)
            _require_positive(name, value)
            if value > MAX_TURN_COMPONENT:
                raise InvalidParameterError(
                    f"{name} must be <= {MAX_TURN_COMPONENT}, got {value!r}"
                )


@dataclass
class NoiseParams:
    """Fractal noise configuration for the noise-field reference line"""

    seed: int = 42
    frequency: float = 0.2
    gain: float = 0.4  # amplitude multiplier per octave
    lacunarity: float = 1.5  # frequency multiplier per octave
    octaves: int = 3
    axis_offset: float = 42.0  # decorrelates the two sample axes

    def __post_init__(self) -> None:
        """Validate noise configuration"""
        _require_positive("frequency", self.frequency)
        _require_positive("gain", self.gain)
        _require_positive("lacunarity", self.lacunarity)
        if self.octaves < 1:
            raise InvalidParameterError(f"octaves must be >= 1, got {self.octaves!r}")


@dataclass
class SimulationParams:
    """Tunable parameters of the control loop"""

    screen_width: float = 800.0  # px
    screen_height: float = 600.0  # px
    car_start_x: float = 200.0  # px
    car_speed: float = 250.0  # px/s
    # Normalisation divisors, as fractions of the screen width
    distance_modifier: float = 0.25
    velocity_modifier: float = 1.0 / 12.0
    steering: SteeringLimits = field(default_factory=SteeringLimits)
    noise: NoiseParams = field(default_factory=NoiseParams)
    # Derived
    line_center: float = 0.0
    line_amplitude: float = 0.0
    manual_min: float = 0.0
    manual_max: float = 0.0

    def __post_init__(self) -> None:
        """Validate preconditions and calculate derived parameters"""
        _require_positive("screen_width", self.screen_width)
        _require_positive("screen_height", self.screen_height)
        _require_positive("distance_modifier", self.distance_modifier)
        _require_positive("velocity_modifier", self.velocity_modifier)
        if not SPEED_MIN <= self.car_speed <= SPEED_MAX:
            raise InvalidParameterError(
                f"car_speed must be within [{SPEED_MIN}, {SPEED_MAX}], got {self.car_speed!r}"
            )

        self.line_center = self.screen_width / 2
        self.line_amplitude = self.screen_width / 4
        self.manual_min = self.line_center - self.line_amplitude
        self.manual_max = self.line_center + self.line_amplitude
