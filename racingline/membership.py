"""
Membership functions

All functions follow MATLAB Fuzzy Logic Toolbox semantics and accept either a
scalar or a numpy array, returning an array of the same shape.
"""

from typing import Callable, Dict, Sequence
import numpy as np

from racingline.errors import FisFormatError


def _as_array(x) -> np.ndarray:
    return np.asarray(x, dtype=float)


def trimf(x, params: Sequence[float]) -> np.ndarray:
    """Triangular membership function, params [a, b, c] with a <= b <= c"""
    a, b, c = params
    x = _as_array(x)
    y = np.zeros_like(x)
    if a != b:
        rising = (a < x) & (x < b)
        y = np.where(rising, (x - a) / (b - a), y)
    if b != c:
        falling = (b < x) & (x < c)
        y = np.where(falling, (c - x) / (c - b), y)
    return np.where(x == b, 1.0, y)


def trapmf(x, params: Sequence[float]) -> np.ndarray:
    """Trapezoidal membership function, params [a, b, c, d] with a <= b <= c <= d"""
    a, b, c, d = params
    x = _as_array(x)

    left = np.where(x >= b, 1.0, 0.0)
    if a != b:
        left = np.where((a <= x) & (x < b), (x - a) / (b - a), left)

    right = np.where(x <= c, 1.0, 0.0)
    if c != d:
        right = np.where((c < x) & (x <= d), (d - x) / (d - c), right)

    return np.minimum(left, right)


def smf(x, params: Sequence[float]) -> np.ndarray:
    """S-shaped membership function, params [a, b]"""
    a, b = params
    x = _as_array(x)
    if a >= b:
        return np.where(x >= (a + b) / 2, 1.0, 0.0)

    mid = (a + b) / 2
    y = np.where(x >= b, 1.0, 0.0)
    y = np.where((a < x) & (x <= mid), 2 * ((x - a) / (b - a)) ** 2, y)
    y = np.where((mid < x) & (x < b), 1 - 2 * ((x - b) / (b - a)) ** 2, y)
    return y


def zmf(x, params: Sequence[float]) -> np.ndarray:
    """Z-shaped membership function, params [a, b]"""
    a, b = params
    x = _as_array(x)
    if a >= b:
        return np.where(x <= (a + b) / 2, 1.0, 0.0)

    mid = (a + b) / 2
    y = np.where(x <= a, 1.0, 0.0)
    y = np.where((a < x) & (x <= mid), 1 - 2 * ((x - a) / (b - a)) ** 2, y)
    y = np.where((mid < x) & (x < b), 2 * ((x - b) / (b - a)) ** 2, y)
    return y


def pimf(x, params: Sequence[float]) -> np.ndarray:
    """Pi-shaped membership function, params [a, b, c, d]: smf(a, b) * zmf(c, d)"""
    a, b, c, d = params
    return smf(x, (a, b)) * zmf(x, (c, d))


def gaussmf(x, params: Sequence[float]) -> np.ndarray:
    """Gaussian membership function, params [sigma, c]"""
    sigma, c = params
    x = _as_array(x)
    return np.exp(-((x - c) ** 2) / (2 * sigma**2))


def gbellmf(x, params: Sequence[float]) -> np.ndarray:
    """Generalised bell membership function, params [a, b, c]"""
    a, b, c = params
    x = _as_array(x)
    return 1.0 / (1.0 + np.abs((x - c) / a) ** (2 * b))


def sigmf(x, params: Sequence[float]) -> np.ndarray:
    """Sigmoid membership function, params [a, c]"""
    a, c = params
    x = _as_array(x)
    return 1.0 / (1.0 + np.exp(-a * (x - c)))


MembershipFunction = Callable[..., np.ndarray]

# name -> (function, number of parameters)
MEMBERSHIP_FUNCTIONS: Dict[str, tuple] = {
    "trimf": (trimf, 3),
    "trapmf": (trapmf, 4),
    "smf": (smf, 2),
    "zmf": (zmf, 2),
    "pimf": (pimf, 4),
    "gaussmf": (gaussmf, 2),
    "gbellmf": (gbellmf, 3),
    "sigmf": (sigmf, 2),
}

# Sugeno output terms are evaluated against the crisp inputs, not a universe
SUGENO_OUTPUT_TYPES = ("constant", "linear")


def get_membership_function(kind: str, params: Sequence[float]) -> MembershipFunction:
    """
    Look up a membership function and validate its parameter count

    Args:
        kind: MATLAB membership function name (e.g. 'trimf')
        params: Function parameters

    Returns:
        The membership function

    Raises:
        FisFormatError: Unknown function or wrong number of parameters
    """
    try:
        func, n_params = MEMBERSHIP_FUNCTIONS[kind]
    except KeyError:
        raise FisFormatError(f"Unsupported membership function '{kind}'") from None
    if len(params) != n_params:
        raise FisFormatError(
            f"Membership function '{kind}' expects {n_params} parameters, got {len(params)}"
        )
    return func
