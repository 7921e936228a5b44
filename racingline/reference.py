"""
Reference line drivers
"""

import math
from typing import List, Optional

from opensimplex import OpenSimplex

from racingline.geometry import clamp
from racingline.params import NoiseParams, SimulationParams
from racingline.state import LineMode


class FractalNoiseField:
    """Fractal Brownian motion over 2D simplex noise"""

    def __init__(self, params: NoiseParams) -> None:
        """
        Initialize noise field

        Args:
            params: Seed, frequency and fractal settings
        """
        self.params = params
        # One generator per octave, seeded consecutively
        self._octaves: List[OpenSimplex] = [
            OpenSimplex(seed=params.seed + i) for i in range(params.octaves)
        ]
        amplitude = 1.0
        total = 0.0
        for _ in range(params.octaves):
            total += amplitude
            amplitude *= params.gain
        self._bounding = 1.0 / total

    def sample(self, x: float, y: float) -> float:
        """Sample the field at (x, y); the result lies within [-1, 1]"""
        x *= self.params.frequency
        y *= self.params.frequency
        amplitude = 1.0
        total = 0.0
        for generator in self._octaves:
            total += generator.noise2(x, y) * amplitude
            x *= self.params.lacunarity
            y *= self.params.lacunarity
            amplitude *= self.params.gain
        return total * self._bounding


class ReferenceLineDriver:
    """Produces the reference line's lateral coordinate each tick"""

    def __init__(self, params: SimulationParams) -> None:
        """
        Initialize driver

        Args:
            params: Simulation parameters (line centre, amplitude, noise settings)
        """
        self.params = params
        self.noise = FractalNoiseField(params.noise)
        self.manual_value = params.line_center

    def periodic(self, elapsed_time: float) -> float:
        """Sine oscillation with a period of 2*pi time units"""
        return self.params.line_center - math.sin(elapsed_time) * self.params.line_amplitude

    def noise_field(self, elapsed_time: float) -> float:
        """Noise sampled at a point scrolling with time along both axes"""
        offset = self.params.noise.axis_offset
        sample = self.noise.sample(offset + elapsed_time, -offset + elapsed_time)
        return self.params.line_center - sample * self.params.line_amplitude

    def set_manual(self, value: float) -> float:
        """Set the held manual position, limited to the line's travel range"""
        self.manual_value = clamp(value, self.params.manual_min, self.params.manual_max)
        return self.manual_value

    def advance(
        self, mode: LineMode, elapsed_time: float, manual_input: Optional[float] = None
    ) -> float:
        """
        Lateral coordinate of the line for this tick

        Args:
            mode: Active driving mode
            elapsed_time: Time since simulation start (s)
            manual_input: New operator value for MANUAL mode; None keeps the held value

        Returns:
            Line lateral coordinate (px)
        """
        if mode is LineMode.PERIODIC:
            return self.periodic(elapsed_time)
        if mode is LineMode.NOISE_FIELD:
            return self.noise_field(elapsed_time)
        if manual_input is not None:
            self.set_manual(manual_input)
        return self.manual_value
