"""
Unit tests for membership functions.
"""

import numpy as np
import pytest

from racingline.errors import FisFormatError
from racingline.membership import (
    gaussmf,
    gbellmf,
    get_membership_function,
    pimf,
    sigmf,
    smf,
    trapmf,
    trimf,
    zmf,
)


class TestMembershipFunctions:
    """Test suite for membership function shapes"""

    def test_trimf_peak_and_feet(self) -> None:
        """Test that a triangle is 1 at its peak and 0 at its feet"""
        params = (-0.5, 0.0, 0.5)
        assert trimf(0.0, params) == 1.0
        assert trimf(-0.5, params) == 0.0
        assert trimf(0.5, params) == 0.0
        assert trimf(0.25, params) == pytest.approx(0.5)

    def test_trimf_shoulder(self) -> None:
        """Test that a triangle with a == b is 1 at its left edge"""
        params = (-1.0, -1.0, 1.0)
        assert trimf(-1.0, params) == 1.0
        assert trimf(0.0, params) == pytest.approx(0.5)
        assert trimf(1.0, params) == 0.0

    def test_trapmf_plateau(self) -> None:
        """Test that a trapezium is 1 across its plateau"""
        params = (-1.0, -1.0, -0.5, 0.0)
        assert trapmf(-1.0, params) == 1.0
        assert trapmf(-0.75, params) == 1.0
        assert trapmf(-0.25, params) == pytest.approx(0.5)
        assert trapmf(0.5, params) == 0.0

    def test_vectorised_evaluation(self) -> None:
        """Test that functions accept arrays and preserve their shape"""
        x = np.linspace(-1, 1, 11)
        y = trimf(x, (-1.0, 0.0, 1.0))
        assert y.shape == x.shape
        assert np.all((y >= 0) & (y <= 1))

    def test_smf_and_zmf_are_complementary(self) -> None:
        """Test that smf and zmf with the same parameters sum to 1"""
        x = np.linspace(-1, 1, 21)
        np.testing.assert_allclose(smf(x, (-0.5, 0.5)) + zmf(x, (-0.5, 0.5)), 1.0)

    def test_pimf_shape(self) -> None:
        """Test that a pi curve is flat between b and c and 0 outside a..d"""
        params = (-1.0, -0.25, 0.25, 1.0)
        assert pimf(0.0, params) == 1.0
        assert pimf(-1.0, params) == 0.0
        assert pimf(1.0, params) == 0.0
        assert 0.0 < pimf(0.5, params) < 1.0

    def test_smooth_functions(self) -> None:
        """Test gaussian, bell and sigmoid at their characteristic points"""
        assert gaussmf(0.0, (0.3, 0.0)) == pytest.approx(1.0)
        assert gbellmf(0.0, (0.5, 2.0, 0.0)) == pytest.approx(1.0)
        assert gbellmf(0.5, (0.5, 2.0, 0.0)) == pytest.approx(0.5)
        assert sigmf(0.0, (10.0, 0.0)) == pytest.approx(0.5)


class TestMembershipLookup:
    """Test suite for get_membership_function"""

    def test_known_function(self) -> None:
        """Test that known names resolve to their function"""
        assert get_membership_function("trimf", (0.0, 0.5, 1.0)) is trimf

    def test_unknown_function_rejected(self) -> None:
        """Test that unknown names raise FisFormatError"""
        with pytest.raises(FisFormatError):
            get_membership_function("dsigmf", (1.0, 2.0, 3.0, 4.0))

    def test_wrong_parameter_count_rejected(self) -> None:
        """Test that a wrong number of parameters raises FisFormatError"""
        with pytest.raises(FisFormatError):
            get_membership_function("trapmf", (0.0, 0.5, 1.0))
