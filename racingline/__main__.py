"""
Print an engine comparison report
"""

import logging

from racingline.comparison import run_engine_comparison
from racingline.state import LineMode


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    for line_mode in (LineMode.PERIODIC, LineMode.NOISE_FIELD):
        results = run_engine_comparison(line_mode=line_mode, duration=20.0)

        print(f"Engine Comparison Results ({line_mode.value}):")
        print("-" * 80)
        for engine_id, data in results.items():
            print(f"\nEngine: {data['name']}")
            if not data["ready"]:
                print(f"  Not ready: {data['diagnostic']}")
                continue
            analysis = data["analysis"]
            print(f"  Tracking: {analysis['is_tracking']}")
            print(f"  RMS offset: {analysis['offset_rms']:.2f}px")
            print(f"  Max offset: {analysis['offset_max']:.2f}px")
            print(f"  Settled offset: {analysis['settled_offset']:.2f}px")
            print(f"  Max heading: {analysis['heading_max']:.2f} deg")
            print(f"  Oscillation frequency: {analysis['oscillation_frequency']:.2f} Hz")
            print(f"  Overshoot peaks: {analysis['peak_count']}")
            print(f"  Controller faults: {analysis['fault_count']}")
        print()


if __name__ == "__main__":
    main()
