"""
Unit tests for fuzzy inference evaluation.

Tests Mamdani and Sugeno evaluation against hand-computed values.
"""

import math

import numpy as np
import pytest

from racingline.engines import FIS_DIRECTORY
from racingline.fis_format import load_fis
from racingline.inference import FuzzyInferenceSystem, Rule, Term, Variable, defuzzify


def two_term_system(kind: str = "mamdani", **overrides) -> FuzzyInferenceSystem:
    """Single-input system with one rule per side"""
    distance = Variable(
        "distance",
        (-1.0, 1.0),
        [Term("left", "trimf", (-1.0, -1.0, 1.0)), Term("right", "trimf", (-1.0, 1.0, 1.0))],
    )
    if kind == "sugeno":
        outputs = [Term("right", "constant", (-1.0,)), Term("left", "constant", (1.0,))]
    else:
        outputs = [Term("right", "trimf", (-1.0, -1.0, 0.0)), Term("left", "trimf", (0.0, 1.0, 1.0))]
    direction = Variable("direction", (-1.0, 1.0), outputs)
    rules = [Rule((1,), (2,)), Rule((2,), (1,))]
    settings = {"defuzz_method": "wtaver" if kind == "sugeno" else "centroid"}
    settings.update(overrides)
    return FuzzyInferenceSystem("two_term", kind, [distance], [direction], rules, **settings)


class TestMamdani:
    """Test suite for Mamdani evaluation"""

    def test_symmetric_system_centred(self) -> None:
        """Test that a symmetric system outputs zero at zero input"""
        system = two_term_system()
        assert system.evaluate([0.0])[0] == pytest.approx(0.0, abs=1e-9)

    def test_output_sign_follows_rules(self) -> None:
        """Test that the output sign follows the dominant rule"""
        system = two_term_system()
        assert system.evaluate([-0.8])[0] > 0.0
        assert system.evaluate([0.8])[0] < 0.0

    def test_inputs_clipped_to_range(self) -> None:
        """Test that out-of-range inputs are clipped before fuzzification"""
        system = two_term_system()
        assert system.evaluate([5.0])[0] == pytest.approx(system.evaluate([1.0])[0])

    def test_bundled_mamdani_hand_value(self) -> None:
        """Test that frl_mamdani1 yields the centroid of steer_right at distance 1"""
        system = load_fis(FIS_DIRECTORY / "frl_mamdani1.fis")
        assert system.evaluate([1.0, 0.0])[0] == pytest.approx(-0.6, abs=1e-6)

    def test_negated_antecedent(self) -> None:
        """Test that a negative antecedent index uses the complement"""
        system = two_term_system()
        system.rules = [Rule((-1,), (2,))]
        # NOT left at x=1 is 1, so only 'left' fires at full strength
        assert system.evaluate([1.0])[0] == pytest.approx(2 / 3, abs=1e-2)

    def test_no_rule_fires_gives_nan(self) -> None:
        """Test that an empty aggregated set yields NaN"""
        system = two_term_system()
        system.inputs[0].terms = [Term("far_left", "trimf", (-1.0, -1.0, -0.5))]
        system.rules = [Rule((1,), (2,))]
        assert math.isnan(system.evaluate([0.5])[0])


class TestSugeno:
    """Test suite for Sugeno evaluation"""

    def test_weighted_average(self) -> None:
        """Test that the output is the weighted average of the rule levels"""
        system = two_term_system("sugeno")
        # left = 0.25, right = 0.75 at x=0.5
        assert system.evaluate([0.5])[0] == pytest.approx((0.25 * 1.0 + 0.75 * -1.0) / 1.0)

    def test_weighted_sum(self) -> None:
        """Test that wtsum does not normalise by the total weight"""
        system = two_term_system("sugeno", defuzz_method="wtsum")
        assert system.evaluate([0.5])[0] == pytest.approx(-0.5)

    def test_linear_term(self) -> None:
        """Test that a linear term is a dot product plus constant"""
        term = Term("lin", "linear", (-0.5, 0.2, 0.4))
        assert term.sugeno_value([1.0, 0.5]) == pytest.approx(-0.5 + 0.1 + 0.4)

    @pytest.mark.parametrize(
        "filename,expected", [("frl_sugeno1.fis", -0.8), ("frl_sugeno2.fis", -0.9)]
    )
    def test_bundled_sugeno_hand_values(self, filename: str, expected: float) -> None:
        """Test that the sugeno systems yield their hard_right level at distance 1"""
        system = load_fis(FIS_DIRECTORY / filename)
        assert system.evaluate([1.0, 0.0])[0] == pytest.approx(expected, abs=1e-9)


class TestReadiness:
    """Test suite for check_ready"""

    def test_unsupported_defuzzification(self) -> None:
        """Test that an unknown defuzzification method is reported"""
        ready, diagnostic = two_term_system(defuzz_method="median").check_ready()
        assert not ready
        assert "defuzzification" in diagnostic

    def test_rule_references_missing_term(self) -> None:
        """Test that a rule pointing at a missing term is reported"""
        system = two_term_system()
        system.rules.append(Rule((3,), (1,)))
        ready, diagnostic = system.check_ready()
        assert not ready
        assert "missing term" in diagnostic

    def test_no_rules(self) -> None:
        """Test that a system without rules is not ready"""
        system = two_term_system()
        system.rules = []
        assert not system.check_ready()[0]

    def test_sugeno_rejects_shaped_outputs(self) -> None:
        """Test that a sugeno system with membership-function outputs is not ready"""
        system = two_term_system()
        system.kind = "sugeno"
        system.defuzz_method = "wtaver"
        assert not system.check_ready()[0]


class TestDefuzzify:
    """Test suite for defuzzify"""

    @pytest.fixture
    def universe(self) -> np.ndarray:
        return np.linspace(-1, 1, 101)

    def test_centroid_of_symmetric_set(self, universe: np.ndarray) -> None:
        """Test that a symmetric set defuzzifies to its centre"""
        aggregated = np.maximum(0.0, 1 - np.abs(universe - 0.4) / 0.2)
        assert defuzzify(universe, aggregated, "centroid") == pytest.approx(0.4)
        assert defuzzify(universe, aggregated, "bisector") == pytest.approx(0.4)
        assert defuzzify(universe, aggregated, "mom") == pytest.approx(0.4)

    def test_plateau_maxima(self, universe: np.ndarray) -> None:
        """Test smallest, largest and mean of maximum over a plateau"""
        aggregated = np.where((universe >= -0.2) & (universe <= 0.2 + 1e-9), 1.0, 0.0)
        assert defuzzify(universe, aggregated, "som") == pytest.approx(-0.2)
        assert defuzzify(universe, aggregated, "lom") == pytest.approx(0.2)
        assert defuzzify(universe, aggregated, "mom") == pytest.approx(0.0, abs=1e-9)

    def test_empty_set_is_nan(self, universe: np.ndarray) -> None:
        """Test that an all-zero set yields NaN"""
        assert math.isnan(defuzzify(universe, np.zeros_like(universe), "centroid"))
