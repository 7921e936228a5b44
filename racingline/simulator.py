"""
Main racing line simulator
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Set, Tuple
import numpy as np

from racingline.analysis import HISTORY_COLUMNS, TrackingAnalyzer
from racingline.dynamics import VehicleIntegrator
from racingline.engines import (
    EngineId,
    EngineSet,
    FaultKind,
    InferenceEngineAdapter,
    InferenceResult,
    load_engine_set,
)
from racingline.errors import ControllerOutputFault, EngineNotReadyError, InvalidParameterError
from racingline.geometry import clamp, clamp_vec
from racingline.normalizer import SignalNormalizer
from racingline.params import SimulationParams
from racingline.reference import ReferenceLineDriver
from racingline.state import ControlSignal, LineMode, Vec2, VehicleState
from racingline.steering import SteeringLimiter

logger = logging.getLogger(__name__)

DEFAULT_DT = 1.0 / 60.0  # s, one frame at 60 Hz


class FallbackPolicy(Enum):
    """What the loop does when the controller cannot produce a direction"""

    HOLD = "hold"  # keep the previous command
    ZERO = "zero"  # steer straight ahead
    RAISE = "raise"  # propagate the fault to the caller


@dataclass(frozen=True)
class TickInputs:
    """Per-tick inputs to the control loop"""

    line_x: float
    engine: InferenceEngineAdapter
    fallback: FallbackPolicy = FallbackPolicy.HOLD


@dataclass(frozen=True)
class TickResult:
    """Everything one tick produced"""

    state: VehicleState
    line_x: float
    signal: ControlSignal
    direction: float  # NaN when faulted
    command: Vec2
    fault: Optional[FaultKind] = None


def initial_state(params: SimulationParams, line_x: float) -> VehicleState:
    """Vehicle state at startup"""
    return VehicleState(
        position=params.car_start_x,
        heading=0.0,
        previous_offset=line_x - params.car_start_x,
        command=Vec2(0.0, params.steering.max_y),
    )


def _fallback_command(
    state: VehicleState, inputs: TickInputs, result: InferenceResult, params: SimulationParams
) -> Vec2:
    limits = params.steering
    if inputs.fallback is FallbackPolicy.RAISE:
        if result.fault is FaultKind.ENGINE_NOT_READY:
            raise EngineNotReadyError(
                f"Engine '{inputs.engine.name}' is not ready: {inputs.engine.diagnostic_message()}"
            )
        raise ControllerOutputFault(inputs.engine.name, result.direction)
    if inputs.fallback is FallbackPolicy.ZERO:
        return Vec2(0.0, limits.max_y)
    # Limits may have changed since the held command was produced
    return clamp_vec(state.command, limits.max_x, limits.max_y)


def tick(state: VehicleState, inputs: TickInputs, dt: float, params: SimulationParams) -> TickResult:
    """
    Run one control-loop tick without side effects

    Args:
        state: Vehicle state from the previous tick
        inputs: Line position, active engine and fault policy
        dt: Frame time (s)
        params: Simulation parameters

    Returns:
        TickResult holding the new state

    Raises:
        ControllerOutputFault: Malformed output under FallbackPolicy.RAISE
        EngineNotReadyError: Engine not ready under FallbackPolicy.RAISE
    """
    normalizer = SignalNormalizer(params.distance_modifier, params.velocity_modifier, params.screen_width)
    signal = normalizer.update(inputs.line_x, state.position, state.previous_offset)

    if inputs.engine.is_ready():
        result = inputs.engine.infer(signal.normalized_offset, signal.normalized_velocity)
    else:
        result = InferenceResult(float("nan"), FaultKind.ENGINE_NOT_READY)

    if result.ok:
        command = SteeringLimiter(params.steering).limit(result.direction)
    else:
        # A not-ready engine faults every tick; RacingLineSimulator warns about it once
        level = logging.DEBUG if result.fault is FaultKind.ENGINE_NOT_READY else logging.WARNING
        logger.log(
            level,
            "Controller fault (%s) from engine %s, applying %s fallback",
            result.fault.value,
            inputs.engine.name,
            inputs.fallback.value,
        )
        command = _fallback_command(state, inputs, result, params)

    position, heading = VehicleIntegrator().step(command, params.car_speed, dt, state.position)
    logger.debug(
        "tick line=%.2f car=%.2f offset=%.3f velocity=%.3f direction=%.5f heading=%.3f",
        inputs.line_x,
        position,
        signal.normalized_offset,
        signal.normalized_velocity,
        result.direction,
        heading,
    )

    return TickResult(
        state=VehicleState(position, heading, signal.raw_offset, command),
        line_x=inputs.line_x,
        signal=signal,
        direction=result.direction,
        command=command,
        fault=result.fault,
    )


class RacingLineSimulator:
    """Owns the simulation context and runs the control loop"""

    def __init__(
        self,
        params: Optional[SimulationParams] = None,
        engines: Optional[EngineSet] = None,
        line_mode: LineMode = LineMode.PERIODIC,
        fallback: FallbackPolicy = FallbackPolicy.HOLD,
    ) -> None:
        """
        Initialize simulator

        Args:
            params: Simulation parameters (defaults used when None)
            engines: Engine roster (the bundled engines are loaded when None)
            line_mode: Initial reference line mode
            fallback: Policy applied on controller faults
        """
        self.params = params if params is not None else SimulationParams()
        self.engines = engines if engines is not None else load_engine_set()
        self.line_mode = line_mode
        self.fallback = fallback
        self.line_driver = ReferenceLineDriver(self.params)
        self.analyzer = TrackingAnalyzer(self.params)
        self._warned_not_ready: Set[str] = set()
        self.reset()

    def reset(self) -> None:
        """Return the vehicle and clock to their startup values"""
        self.elapsed = 0.0
        self.line_x = self.params.line_center
        self.state = initial_state(self.params, self.line_x)
        self._stop_requested = False

    def select_engine(self, engine_id: EngineId) -> InferenceEngineAdapter:
        return self.engines.select(engine_id)

    def set_line_mode(self, mode: LineMode) -> None:
        if mode is LineMode.MANUAL:
            # Hold the line where it is when switching to manual
            self.line_driver.set_manual(self.line_x)
        self.line_mode = mode

    def set_manual_line(self, value: float) -> float:
        """Set the held line position used in MANUAL mode"""
        return self.line_driver.set_manual(value)

    def set_params(self, params: SimulationParams) -> None:
        """Replace the tunable parameters between ticks"""
        manual_value = self.line_driver.manual_value
        self.params = params
        self.line_driver = ReferenceLineDriver(params)
        self.line_driver.set_manual(manual_value)
        self.analyzer = TrackingAnalyzer(params)

    def request_stop(self) -> None:
        """End a running simulate() loop after the in-flight tick"""
        self._stop_requested = True

    def step(self, dt: float = DEFAULT_DT) -> TickResult:
        """
        Advance the simulation by one frame

        Args:
            dt: Frame time (s)

        Returns:
            TickResult of this frame
        """
        if not dt > 0:
            raise InvalidParameterError(f"dt must be > 0, got {dt!r}")
        self.elapsed += dt
        self.line_x = self.line_driver.advance(self.line_mode, self.elapsed)
        result = tick(
            self.state,
            TickInputs(self.line_x, self.engines.active, self.fallback),
            dt,
            self.params,
        )
        self.state = result.state
        if result.fault is FaultKind.ENGINE_NOT_READY:
            engine = self.engines.active
            if engine.name not in self._warned_not_ready:
                self._warned_not_ready.add(engine.name)
                logger.warning(
                    "Engine %s is not ready, applying %s fallback: %s",
                    engine.name,
                    self.fallback.value,
                    engine.diagnostic_message(),
                )
        return result

    def simulate(
        self, duration: float = 10.0, dt: float = DEFAULT_DT
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Run the control loop for a fixed duration

        Args:
            duration: Simulated time (s); at least one tick is run
            dt: Frame time (s)

        Returns:
            Tuple of (time_array, history [N x len(HISTORY_COLUMNS)], fault_flags)
        """
        if not duration > 0:
            raise InvalidParameterError(f"duration must be > 0, got {duration!r}")
        if not dt > 0:
            raise InvalidParameterError(f"dt must be > 0, got {dt!r}")

        n_steps = max(1, int(round(duration / dt)))
        t = np.zeros(n_steps)
        history = np.zeros((n_steps, len(HISTORY_COLUMNS)))
        faults = np.zeros(n_steps, dtype=bool)

        self._stop_requested = False
        count = 0
        while count < n_steps and not self._stop_requested:
            result = self.step(dt)
            t[count] = self.elapsed
            history[count] = [
                result.line_x,
                result.state.position,
                result.signal.raw_offset,
                result.signal.normalized_offset,
                result.signal.raw_velocity,
                result.signal.normalized_velocity,
                result.direction,
                result.command.x,
                result.command.y,
                result.state.heading,
            ]
            faults[count] = result.fault is not None
            count += 1

        return t[:count], history[:count], faults[:count]

    def manual_inference(
        self, distance: float, velocity: float, engine_id: Optional[EngineId] = None
    ) -> InferenceResult:
        """
        Query an engine directly with operator-chosen inputs

        Args:
            distance: Normalised distance, clamped to [-1, 1]
            velocity: Normalised velocity, clamped to [-1, 1]
            engine_id: Engine to query (the selected engine when None)

        Returns:
            InferenceResult; ENGINE_NOT_READY instead of querying a not-ready engine
        """
        engine = self.engines[self.engines.selected if engine_id is None else engine_id]
        if not engine.is_ready():
            return InferenceResult(float("nan"), FaultKind.ENGINE_NOT_READY)
        return engine.infer(clamp(distance, -1.0, 1.0), clamp(velocity, -1.0, 1.0))

    def analyze_tracking(
        self, t: np.ndarray, history: np.ndarray, faults: Optional[np.ndarray] = None
    ) -> Dict[str, Any]:
        return self.analyzer.analyze(t, history, faults)
