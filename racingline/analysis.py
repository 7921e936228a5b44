"""
Tracking performance analysis
"""

from typing import Any, Dict, Optional
import numpy as np
from scipy.signal import find_peaks

from racingline.params import SimulationParams

# Column layout of the history array produced by RacingLineSimulator.simulate
HISTORY_COLUMNS = (
    "line_x",
    "position",
    "raw_offset",
    "normalized_offset",
    "raw_velocity",
    "normalized_velocity",
    "direction",
    "command_x",
    "command_y",
    "heading",
)
COLUMN = {name: i for i, name in enumerate(HISTORY_COLUMNS)}


class TrackingAnalyzer:
    """Summarises how well a run followed the reference line"""

    def __init__(
        self,
        params: SimulationParams,
        peak_prominence: float = 5.0,
        tracking_tolerance: float = 0.25,
    ) -> None:
        """
        Initialize tracking analyzer

        Args:
            params: Simulation parameters (line amplitude sets the scale)
            peak_prominence: Minimum prominence of an |offset| peak to count as an overshoot (px)
            tracking_tolerance: Settled mean |offset| allowed, as a fraction of line amplitude
        """
        self.params = params
        self.peak_prominence = peak_prominence
        self.tracking_tolerance = tracking_tolerance

    def analyze(
        self, t: np.ndarray, history: np.ndarray, faults: Optional[np.ndarray] = None
    ) -> Dict[str, Any]:
        """
        Analyze a simulation run

        Args:
            t: Time array
            history: History array [N x len(HISTORY_COLUMNS)]
            faults: Per-tick controller fault flags [N]

        Returns:
            Dictionary with analysis results
        """
        if len(t) == 0:
            raise ValueError("Cannot analyze an empty run")
        if faults is None:
            faults = np.zeros(len(t), dtype=bool)

        offset = history[:, COLUMN["raw_offset"]]
        heading = history[:, COLUMN["heading"]]
        abs_offset = np.abs(offset)

        offset_rms = float(np.sqrt(np.mean(offset**2)))
        offset_max = float(np.max(abs_offset))
        offset_std = float(np.std(offset))
        heading_max = float(np.max(np.abs(heading)))

        # Each sign change of the offset is the vehicle crossing the line
        signs = np.sign(offset)
        signs = signs[signs != 0]
        zero_crossings = int(np.sum(np.diff(signs) != 0)) if len(signs) > 1 else 0
        oscillation_frequency = float(zero_crossings / (2 * t[-1])) if t[-1] > 0 else 0.0

        peaks, _ = find_peaks(abs_offset, prominence=self.peak_prominence)
        peak_count = int(len(peaks))

        # Trend of the offset envelope across the run
        n_windows = 5
        window_size = max(len(offset) // n_windows, 1)
        amplitudes: list[float] = []
        for i in range(n_windows):
            start_idx = i * window_size
            end_idx = (i + 1) * window_size if i < n_windows - 1 else len(offset)
            window = abs_offset[start_idx:end_idx]
            if len(window):
                amplitudes.append(float(np.max(window)))

        if len(amplitudes) >= 2:
            amplitude_trend = float(np.polyfit(range(len(amplitudes)), amplitudes, 1)[0])
        else:
            amplitude_trend = 0.0
        is_growing = amplitude_trend > 1.0  # px per window

        tail = abs_offset[-max(len(abs_offset) // 5, 1):]
        settled_offset = float(np.mean(tail))

        fault_count = int(np.sum(faults))
        fault_rate = fault_count / len(faults) if len(faults) else 0.0

        is_tracking = (
            fault_count == 0
            and not is_growing
            and settled_offset < self.tracking_tolerance * self.params.line_amplitude
        )

        return {
            "offset_rms": offset_rms,
            "offset_max": offset_max,
            "offset_std": offset_std,
            "settled_offset": settled_offset,
            "heading_max": heading_max,
            "zero_crossings": zero_crossings,
            "oscillation_frequency": oscillation_frequency,
            "peak_count": peak_count,
            "amplitude_trend": amplitude_trend,
            "is_growing": is_growing,
            "fault_count": fault_count,
            "fault_rate": fault_rate,
            "is_tracking": is_tracking,
        }
