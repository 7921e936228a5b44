"""
Inference engine adapter and engine roster
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from racingline.errors import EngineLoadError, EngineNotReadyError, FisFormatError
from racingline.fis_format import load_fis
from racingline.inference import FuzzyInferenceSystem

logger = logging.getLogger(__name__)

FIS_DIRECTORY = Path(__file__).resolve().parent / "fis"

DISTANCE_INPUT = "distance"
VELOCITY_INPUT = "velocity"
DIRECTION_OUTPUT = "direction"


class EngineId(Enum):
    """The configured engines, in selector order"""

    MAMDANI_1 = 0
    MAMDANI_2 = 1
    SUGENO_1 = 2
    SUGENO_2 = 3
    LEGACY = 4


@dataclass(frozen=True)
class EngineInfo:
    """Static description of an engine"""

    display_name: str
    filename: str
    summary: str


ENGINE_CATALOG: Dict[EngineId, EngineInfo] = {
    EngineId.MAMDANI_1: EngineInfo(
        "Mamdani 1",
        "frl_mamdani1.fis",
        "A basic mamdani fuzzy inference system. Membership functions are either "
        "trapeziums or triangles and do not extend beyond [-1, 1]. Uses centroid "
        "defuzzification.",
    ),
    EngineId.MAMDANI_2: EngineInfo(
        "Mamdani 2",
        "frl_mamdani2.fis",
        "A slightly more complicated mamdani system mixing pi-shaped and triangular "
        "membership functions, giving smooth transitions between output values.",
    ),
    EngineId.SUGENO_1: EngineInfo(
        "Sugeno 1",
        "frl_sugeno1.fis",
        "A sugeno system with constant outputs, using pi-shaped and triangular "
        "membership functions for its inputs.",
    ),
    EngineId.SUGENO_2: EngineInfo(
        "Sugeno 2",
        "frl_sugeno2.fis",
        "A sugeno system with linear outputs, using pi-shaped and triangular "
        "membership functions for its inputs.",
    ),
    EngineId.LEGACY: EngineInfo(
        "Last Year's Fuzzy System",
        "old_fuzzyracingline.fis",
        "An early two-rule system, kept for comparison.",
    ),
}


class FaultKind(Enum):
    """Why an inference pass did not yield a usable direction"""

    MALFORMED_OUTPUT = "malformed_output"
    ENGINE_NOT_READY = "engine_not_ready"


@dataclass(frozen=True)
class InferenceResult:
    """Direction from one inference pass, or the fault that prevented it"""

    direction: float
    fault: Optional[FaultKind] = None

    @property
    def ok(self) -> bool:
        return self.fault is None


class InferenceEngineAdapter:
    """Uniform capability interface over one fuzzy inference system"""

    def __init__(
        self,
        name: str,
        system: Optional[FuzzyInferenceSystem] = None,
        diagnostic: str = "",
    ) -> None:
        """
        Initialize adapter

        Args:
            name: Engine name, used in diagnostics
            system: Loaded inference system, or None if loading failed
            diagnostic: Load failure description (ignored when system is ready)
        """
        self.name = name
        self.system = system
        self._inputs: Dict[str, float] = {}
        self._outputs: Dict[str, float] = {}

        if system is None:
            self._ready = False
            self._diagnostic = diagnostic or f"Engine '{name}' was not loaded"
        else:
            self._ready, self._diagnostic = self._check(system)

    @classmethod
    def from_file(cls, name: str, path: Union[str, Path]) -> "InferenceEngineAdapter":
        """
        Load an engine from a .fis file

        A missing or malformed file yields a not-ready adapter rather than an exception.
        """
        try:
            system = load_fis(path)
        except FileNotFoundError:
            return cls(name, diagnostic=f"Configuration file not found: {path}")
        except (OSError, UnicodeDecodeError, FisFormatError) as exc:
            return cls(name, diagnostic=f"Could not load {path}: {exc}")
        return cls(name, system)

    @staticmethod
    def _check(system: FuzzyInferenceSystem) -> tuple:
        ready, diagnostic = system.check_ready()
        missing = [
            name for name in (DISTANCE_INPUT, VELOCITY_INPUT) if system.input_index(name) is None
        ]
        if system.output_index(DIRECTION_OUTPUT) is None:
            missing.append(DIRECTION_OUTPUT)
        if missing:
            ready = False
            extra = "missing variables: " + ", ".join(missing)
            diagnostic = f"{diagnostic}; {extra}" if diagnostic else extra
        return ready, diagnostic

    def is_ready(self) -> bool:
        return self._ready

    def diagnostic_message(self) -> str:
        """Description of why the engine is not ready (empty when ready)"""
        return "" if self._ready else self._diagnostic

    def _require_ready(self) -> None:
        if not self._ready:
            raise EngineNotReadyError(f"Engine '{self.name}' is not ready: {self._diagnostic}")

    def set_input(self, name: str, value: float) -> None:
        """Set a named crisp input for the next process() call"""
        if self.system is not None and self.system.input_index(name) is None:
            raise KeyError(f"Engine '{self.name}' has no input '{name}'")
        self._inputs[name] = float(value)

    def process(self) -> None:
        """
        Evaluate the rule base with the current inputs

        Raises:
            EngineNotReadyError: The engine is not ready
        """
        self._require_ready()
        values = [self._inputs.get(variable.name, 0.0) for variable in self.system.inputs]
        results = self.system.evaluate(values)
        self._outputs = {variable.name: value for variable, value in zip(self.system.outputs, results)}

    def get_output(self, name: str) -> float:
        """
        Crisp output from the last process() call (NaN before the first call)

        Raises:
            EngineNotReadyError: The engine is not ready
        """
        self._require_ready()
        if self.system.output_index(name) is None:
            raise KeyError(f"Engine '{self.name}' has no output '{name}'")
        return self._outputs.get(name, float("nan"))

    def infer(self, distance: float, velocity: float) -> InferenceResult:
        """
        Run one steering inference

        Args:
            distance: Normalised offset from the line
            velocity: Normalised offset velocity

        Returns:
            InferenceResult carrying the direction, or MALFORMED_OUTPUT if it is NaN

        Raises:
            EngineNotReadyError: The engine is not ready; callers check is_ready() first
        """
        self._require_ready()
        self.set_input(DISTANCE_INPUT, distance)
        self.set_input(VELOCITY_INPUT, velocity)
        self.process()
        direction = self.get_output(DIRECTION_OUTPUT)
        if math.isnan(direction):
            return InferenceResult(direction, FaultKind.MALFORMED_OUTPUT)
        return InferenceResult(direction)


class EngineSet:
    """Ordered collection of engines with exactly one selected"""

    def __init__(
        self,
        engines: Dict[EngineId, InferenceEngineAdapter],
        selected: EngineId = EngineId.MAMDANI_1,
    ) -> None:
        if not engines:
            raise ValueError("EngineSet needs at least one engine")
        self._engines = dict(sorted(engines.items(), key=lambda item: item[0].value))
        self._selected = selected
        self.select(selected)

    def __len__(self) -> int:
        return len(self._engines)

    def __iter__(self) -> Iterator[EngineId]:
        return iter(self._engines)

    def __getitem__(self, engine_id: EngineId) -> InferenceEngineAdapter:
        return self._engines[engine_id]

    @property
    def selected(self) -> EngineId:
        return self._selected

    @property
    def active(self) -> InferenceEngineAdapter:
        return self._engines[self._selected]

    def select(self, engine_id: EngineId) -> InferenceEngineAdapter:
        """Select the active engine; allowed even when it is not ready"""
        if engine_id not in self._engines:
            raise KeyError(f"Unknown engine {engine_id}")
        self._selected = engine_id
        engine = self._engines[engine_id]
        if not engine.is_ready():
            logger.warning("Selected engine %s is not ready: %s", engine.name, engine.diagnostic_message())
        return engine

    def require_ready(self, engine_id: Optional[EngineId] = None) -> InferenceEngineAdapter:
        """
        Get an engine, raising if it failed to load

        Raises:
            EngineLoadError: The engine is not ready
        """
        engine = self._engines[self._selected if engine_id is None else engine_id]
        if not engine.is_ready():
            raise EngineLoadError(engine.diagnostic_message())
        return engine

    def status(self) -> List[Dict[str, object]]:
        """Readiness and diagnostic of every engine, in selector order"""
        return [
            {
                "id": engine_id,
                "name": engine.name,
                "ready": engine.is_ready(),
                "diagnostic": engine.diagnostic_message(),
                "selected": engine_id == self._selected,
            }
            for engine_id, engine in self._engines.items()
        ]


def load_engine_set(
    directory: Optional[Union[str, Path]] = None,
    selected: EngineId = EngineId.MAMDANI_1,
) -> EngineSet:
    """
    Load every catalogued engine, one after another

    A failure on one engine is logged and leaves it not ready; the others are unaffected.

    Args:
        directory: Directory holding the .fis files (defaults to the bundled set)
        selected: Initially selected engine

    Returns:
        The loaded EngineSet
    """
    directory = Path(directory) if directory is not None else FIS_DIRECTORY
    engines: Dict[EngineId, InferenceEngineAdapter] = {}
    for engine_id, info in ENGINE_CATALOG.items():
        engine = InferenceEngineAdapter.from_file(info.display_name, directory / info.filename)
        if engine.is_ready():
            logger.info("Loaded engine %s from %s", info.display_name, info.filename)
        else:
            logger.warning("Engine %s not ready: %s", info.display_name, engine.diagnostic_message())
        engines[engine_id] = engine
    return EngineSet(engines, selected)
