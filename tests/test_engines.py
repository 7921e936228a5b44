"""
Unit tests for inference engine adapters and the engine roster.
"""

import math
import shutil
from pathlib import Path

import pytest

from racingline.engines import (
    ENGINE_CATALOG,
    FIS_DIRECTORY,
    EngineId,
    EngineSet,
    FaultKind,
    InferenceEngineAdapter,
    load_engine_set,
)
from racingline.errors import EngineLoadError, EngineNotReadyError


class TestBundledEngines:
    """Test suite for the bundled engine set"""

    @pytest.fixture
    def engines(self) -> EngineSet:
        """Load the bundled engines"""
        return load_engine_set()

    def test_all_engines_ready(self, engines: EngineSet) -> None:
        """Test that every catalogued engine loads and is ready"""
        assert len(engines) == len(ENGINE_CATALOG)
        for engine_id in engines:
            engine = engines[engine_id]
            assert engine.is_ready(), engine.diagnostic_message()
            assert engine.diagnostic_message() == ""

    def test_selector_order(self, engines: EngineSet) -> None:
        """Test that engines iterate in selector order"""
        assert list(engines) == list(EngineId)

    def test_default_selection(self, engines: EngineSet) -> None:
        """Test that the first Mamdani engine is selected by default"""
        assert engines.selected is EngineId.MAMDANI_1
        assert engines.active is engines[EngineId.MAMDANI_1]

    @pytest.mark.parametrize("engine_id", list(EngineId))
    def test_centred_input_steers_straight(self, engines: EngineSet, engine_id: EngineId) -> None:
        """Test that zero distance and velocity give a near-zero direction"""
        result = engines[engine_id].infer(0.0, 0.0)
        assert result.ok
        assert result.direction == pytest.approx(0.0, abs=1e-6)

    @pytest.mark.parametrize(
        "engine_id", [e for e in EngineId if e is not EngineId.SUGENO_2]
    )
    def test_outputs_within_range(self, engines: EngineSet, engine_id: EngineId) -> None:
        """Test that directions stay within [-1, 1] across the input square"""
        engine = engines[engine_id]
        for distance in (-1.0, -0.5, 0.0, 0.5, 1.0):
            for velocity in (-1.0, 0.0, 1.0):
                result = engine.infer(distance, velocity)
                assert result.ok
                assert -1.0 <= result.direction <= 1.0

    def test_linear_outputs_finite(self, engines: EngineSet) -> None:
        """Test that the linear sugeno engine gives a finite direction everywhere"""
        engine = engines[EngineId.SUGENO_2]
        for distance in (-1.0, -0.5, 0.0, 0.5, 1.0):
            for velocity in (-1.0, 0.0, 1.0):
                result = engine.infer(distance, velocity)
                assert result.ok
                assert math.isfinite(result.direction)

    def test_switching_engines_changes_output(self, engines: EngineSet) -> None:
        """Test that two engines give their own direction for the same inputs"""
        engines.select(EngineId.MAMDANI_1)
        mamdani = engines.active.infer(1.0, 0.0)
        engines.select(EngineId.SUGENO_1)
        sugeno = engines.active.infer(1.0, 0.0)
        engines.select(EngineId.MAMDANI_1)
        repeat = engines.active.infer(1.0, 0.0)

        assert mamdani.direction == pytest.approx(-0.6, abs=1e-6)
        assert sugeno.direction == pytest.approx(-0.8, abs=1e-9)
        assert repeat.direction == pytest.approx(mamdani.direction)

    def test_process_and_get_output(self, engines: EngineSet) -> None:
        """Test the set_input/process/get_output sequence"""
        engine = engines[EngineId.SUGENO_1]
        engine.set_input("distance", 1.0)
        engine.set_input("velocity", 0.0)
        engine.process()
        assert engine.get_output("direction") == pytest.approx(-0.8)

    def test_unknown_variable_names(self, engines: EngineSet) -> None:
        """Test that unknown input and output names raise KeyError"""
        engine = engines.active
        with pytest.raises(KeyError):
            engine.set_input("throttle", 0.0)
        with pytest.raises(KeyError):
            engine.get_output("throttle")

    def test_status(self, engines: EngineSet) -> None:
        """Test that status reports every engine with the selection marked"""
        status = engines.status()
        assert len(status) == len(ENGINE_CATALOG)
        assert sum(entry["selected"] for entry in status) == 1
        assert all(entry["ready"] for entry in status)


class TestNotReadyEngines:
    """Test suite for engines whose configuration failed to load"""

    @pytest.fixture
    def fis_dir(self, tmp_path: Path) -> Path:
        """Copy the bundled files, then break two of them"""
        for path in FIS_DIRECTORY.glob("*.fis"):
            shutil.copy(path, tmp_path / path.name)
        (tmp_path / ENGINE_CATALOG[EngineId.MAMDANI_2].filename).unlink()
        (tmp_path / ENGINE_CATALOG[EngineId.SUGENO_2].filename).write_text(
            "[System]\nName='broken'\nNumInputs=x\n", encoding="utf-8"
        )
        return tmp_path

    @pytest.fixture
    def engines(self, fis_dir: Path) -> EngineSet:
        return load_engine_set(fis_dir)

    def test_missing_file_not_ready(self, engines: EngineSet) -> None:
        """Test that a missing file leaves the engine not ready with a diagnostic"""
        engine = engines[EngineId.MAMDANI_2]
        assert not engine.is_ready()
        assert "not found" in engine.diagnostic_message()

    def test_malformed_file_not_ready(self, engines: EngineSet) -> None:
        """Test that a malformed file leaves the engine not ready with a diagnostic"""
        engine = engines[EngineId.SUGENO_2]
        assert not engine.is_ready()
        assert engine.diagnostic_message() != ""

    def test_other_engines_unaffected(self, engines: EngineSet) -> None:
        """Test that one failed engine does not affect the rest"""
        for engine_id in (EngineId.MAMDANI_1, EngineId.SUGENO_1, EngineId.LEGACY):
            assert engines[engine_id].is_ready()

    def test_not_ready_engine_refuses_processing(self, engines: EngineSet) -> None:
        """Test that processing a not-ready engine raises EngineNotReadyError"""
        engine = engines[EngineId.MAMDANI_2]
        with pytest.raises(EngineNotReadyError):
            engine.process()
        with pytest.raises(EngineNotReadyError):
            engine.get_output("direction")
        with pytest.raises(EngineNotReadyError):
            engine.infer(0.0, 0.0)

    def test_selecting_not_ready_engine_allowed(self, engines: EngineSet) -> None:
        """Test that a not-ready engine can still be selected"""
        engine = engines.select(EngineId.MAMDANI_2)
        assert engines.selected is EngineId.MAMDANI_2
        assert not engine.is_ready()

    def test_require_ready(self, engines: EngineSet) -> None:
        """Test that require_ready raises EngineLoadError for a failed engine"""
        assert engines.require_ready(EngineId.MAMDANI_1).is_ready()
        with pytest.raises(EngineLoadError):
            engines.require_ready(EngineId.MAMDANI_2)


class TestAdapter:
    """Test suite for InferenceEngineAdapter construction"""

    def test_unloaded_adapter(self) -> None:
        """Test that an adapter without a system is not ready"""
        engine = InferenceEngineAdapter("empty")
        assert not engine.is_ready()
        assert "empty" in engine.diagnostic_message()

    def test_missing_variables_reported(self, tmp_path: Path) -> None:
        """Test that a system without the expected variables is not ready"""
        text = (FIS_DIRECTORY / "old_fuzzyracingline.fis").read_text(encoding="utf-8")
        path = tmp_path / "renamed.fis"
        path.write_text(text.replace("Name='velocity'", "Name='speed'"), encoding="utf-8")
        engine = InferenceEngineAdapter.from_file("renamed", path)
        assert not engine.is_ready()
        assert "velocity" in engine.diagnostic_message()

    def test_uncovered_input_is_malformed_output(self, tmp_path: Path) -> None:
        """Test that an input no rule covers is reported as MALFORMED_OUTPUT"""
        text = (FIS_DIRECTORY / "old_fuzzyracingline.fis").read_text(encoding="utf-8")
        text = text.replace("MF1='left':'trimf',[-1 -1 1]", "MF1='left':'trimf',[-1 -1 -0.5]")
        text = text.replace("MF2='right':'trimf',[-1 1 1]", "MF2='right':'trimf',[0.5 1 1]")
        path = tmp_path / "gap.fis"
        path.write_text(text, encoding="utf-8")
        engine = InferenceEngineAdapter.from_file("gap", path)
        assert engine.is_ready()

        result = engine.infer(0.0, 0.0)
        assert not result.ok
        assert result.fault is FaultKind.MALFORMED_OUTPUT
        assert math.isnan(result.direction)
