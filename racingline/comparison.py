"""
Engine comparison runs
"""

from typing import Any, Dict, Iterable, Optional

from racingline.engines import EngineId, EngineSet, load_engine_set
from racingline.params import SimulationParams
from racingline.simulator import DEFAULT_DT, RacingLineSimulator
from racingline.state import LineMode


def run_engine_comparison(
    engine_ids: Optional[Iterable[EngineId]] = None,
    line_mode: LineMode = LineMode.PERIODIC,
    duration: float = 10.0,
    dt: float = DEFAULT_DT,
    params: Optional[SimulationParams] = None,
    engines: Optional[EngineSet] = None,
) -> Dict[EngineId, Dict[str, Any]]:
    """
    Run the same scenario once per engine

    Args:
        engine_ids: Engines to compare (all loaded engines when None)
        line_mode: Reference line mode for every run
        duration: Simulated time per run (s)
        dt: Frame time (s)
        params: Simulation parameters shared by all runs
        engines: Engine roster (the bundled engines are loaded when None)

    Returns:
        Dictionary with results for each engine; engines that are not ready
        carry their diagnostic instead of run data
    """
    params = params if params is not None else SimulationParams()
    engines = engines if engines is not None else load_engine_set()
    engine_ids = list(engine_ids) if engine_ids is not None else list(engines)
    results: Dict[EngineId, Dict[str, Any]] = {}

    for engine_id in engine_ids:
        engine = engines[engine_id]
        if not engine.is_ready():
            results[engine_id] = {
                "name": engine.name,
                "ready": False,
                "diagnostic": engine.diagnostic_message(),
            }
            continue

        # Each run selects on its own roster; the caller's selection is unchanged
        roster = EngineSet({other: engines[other] for other in engines}, selected=engine_id)
        simulator = RacingLineSimulator(params, roster, line_mode=line_mode)
        t, history, faults = simulator.simulate(duration=duration, dt=dt)
        analysis = simulator.analyze_tracking(t, history, faults)

        results[engine_id] = {
            "name": engine.name,
            "ready": True,
            "time": t,
            "history": history,
            "faults": faults,
            "analysis": analysis,
            "simulator": simulator,
        }

    return results
