"""
Convenience launcher — starts the reading load engine and (optionally) the
scripted reader simulator against it.

Usage:
    python start.py                       # engine only
    python start.py --simulate struggling # engine + simulator scenario
"""

from __future__ import annotations

import argparse
import subprocess
import sys
import time


def start_engine() -> subprocess.Popen:
    return subprocess.Popen(
        [sys.executable, "-m", "readload.main"],
        stdout=sys.stdout,
        stderr=sys.stderr,
    )


def start_simulator(scenario: str) -> subprocess.Popen:
    return subprocess.Popen(
        [sys.executable, "scripts/simulate.py", "--scenario", scenario],
        stdout=sys.stdout,
        stderr=sys.stderr,
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Start the reading load engine")
    parser.add_argument(
        "--simulate",
        metavar="SCENARIO",
        help="Also run scripts/simulate.py with this scenario (or 'cycle')",
    )
    args = parser.parse_args()

    print("Starting reading load engine…")
    engine_proc = start_engine()

    if args.simulate:
        time.sleep(1.5)  # give engine a moment to bind
        print(f"Starting simulator ({args.simulate})…")
        start_simulator(args.simulate)

    print("\nEngine → http://127.0.0.1:8765")
    print("Press Ctrl+C to stop.\n")

    try:
        engine_proc.wait()
    except KeyboardInterrupt:
        print("\nShutting down…")
        engine_proc.terminate()
        engine_proc.wait()


if __name__ == "__main__":
    main()
