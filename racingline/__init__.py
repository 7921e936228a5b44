"""
Fuzzy Racing Line Simulation

This package simulates a vehicle steering toward a moving reference line
using a selectable fuzzy inference system as the controller.
"""

from racingline.params import NoiseParams, SimulationParams, SteeringLimits
from racingline.state import ControlSignal, LineMode, Vec2, VehicleState
from racingline.engines import (
    EngineId,
    EngineSet,
    FaultKind,
    InferenceEngineAdapter,
    InferenceResult,
    load_engine_set,
)
from racingline.simulator import FallbackPolicy, RacingLineSimulator, TickInputs, TickResult, tick
from racingline.comparison import run_engine_comparison

__all__ = [
    "NoiseParams",
    "SimulationParams",
    "SteeringLimits",
    "ControlSignal",
    "LineMode",
    "Vec2",
    "VehicleState",
    "EngineId",
    "EngineSet",
    "FaultKind",
    "InferenceEngineAdapter",
    "InferenceResult",
    "load_engine_set",
    "FallbackPolicy",
    "RacingLineSimulator",
    "TickInputs",
    "TickResult",
    "tick",
    "run_engine_comparison",
]
