"""
Reader Simulator — drives the reading load engine with scripted scroll and
dwell traffic so you can watch load, reading state, focus mode and friction
evolve without a real reading view.

Usage:
    # Make sure the engine is running first:
    #   python start.py
    # Then in a separate terminal:
    python scripts/simulate.py                       # default: cycle all scenarios
    python scripts/simulate.py --scenario struggling # specific scenario
    python scripts/simulate.py --loop                # repeat forever
    python scripts/simulate.py --speed 2.0           # 2× faster
"""

from __future__ import annotations

import argparse
import json
import random
import time
import urllib.error
import urllib.request
from typing import Iterator

API = "http://127.0.0.1:8765"

UNITS = [
    {"id": "h1", "kind": "heading", "expected_dwell_seconds": 5},
    {"id": "p1", "kind": "paragraph", "expected_dwell_seconds": 20},
    {"id": "p2", "kind": "paragraph", "expected_dwell_seconds": 35, "has_figure_reference": True},
    {"id": "p3", "kind": "paragraph", "expected_dwell_seconds": 25},
    {"id": "h2", "kind": "heading", "expected_dwell_seconds": 5},
    {"id": "p4", "kind": "paragraph", "expected_dwell_seconds": 40},
    {"id": "p5", "kind": "paragraph", "expected_dwell_seconds": 15},
]

Step = tuple[str, list[tuple[str, str, dict]], float]


# ---------------------------------------------------------------------------
# Low-level HTTP helper
# ---------------------------------------------------------------------------

def _request(method: str, path: str, body: list | dict | None = None) -> dict | None:
    try:
        data = json.dumps(body).encode() if body is not None else None
        req = urllib.request.Request(
            f"{API}{path}",
            data=data,
            headers={"Content-Type": "application/json"},
            method=method,
        )
        with urllib.request.urlopen(req, timeout=3) as r:
            return json.loads(r.read())
    except (urllib.error.URLError, OSError) as e:
        print(f"  [!] Engine unreachable: {e}")
        return None


def _get(path: str) -> dict | None:
    return _request("GET", path)


# ---------------------------------------------------------------------------
# Scenario generators — each yields (description, requests, delay)
# ---------------------------------------------------------------------------

class _Viewport:
    """Tracks a fake scroll position so scroll samples are consistent."""

    def __init__(self):
        self.position = 0.0

    def scroll(self, delta: float) -> tuple[str, str, dict]:
        self.position = max(self.position + delta, 0.0)
        return ("POST", "/signals/scroll", {"position": self.position, "timestamp": time.time()})


def _visible(unit_id: str) -> tuple[str, str, dict]:
    return ("POST", "/signals/visible", {"unit_id": unit_id})


def _dwell(unit_id: str, seconds: float, periodic: bool) -> tuple[str, str, dict]:
    return ("POST", "/signals/dwell",
            {"unit_id": unit_id, "dwell_seconds": seconds, "is_periodic": periodic})


def _event(kind: str, **fields) -> tuple[str, str, dict]:
    return ("POST", "/signals/event", {"kind": kind, **fields})


def scenario_steady(speed: float = 1.0) -> Iterator[Step]:
    """Reader moving through the text at roughly the expected pace."""
    vp = _Viewport()
    for unit in UNITS:
        if unit["kind"] == "heading":
            continue
        expected = unit["expected_dwell_seconds"]
        yield (
            f"Steady: reading {unit['id']}",
            [_visible(unit["id"]), vp.scroll(random.uniform(80, 200)),
             _dwell(unit["id"], expected * 0.5, True)],
            1.0 / speed,
        )
        yield (
            f"Steady: leaving {unit['id']}",
            [vp.scroll(random.uniform(80, 200)),
             _dwell(unit["id"], expected * random.uniform(0.8, 1.1), False)],
            1.0 / speed,
        )


def scenario_skimmer(speed: float = 1.0) -> Iterator[Step]:
    """Reader racing through: large fast scrolls, very short dwell."""
    vp = _Viewport()
    for unit in UNITS:
        yield (
            f"Skimmer: flying past {unit['id']}",
            [_visible(unit["id"]), vp.scroll(900), vp.scroll(900),
             _dwell(unit["id"], max(unit["expected_dwell_seconds"] * 0.2, 2.5), False)],
            0.3 / speed,
        )


def scenario_struggling(speed: float = 1.0) -> Iterator[Step]:
    """Reader stuck in a dense section: scroll-backs, hesitation, long dwell."""
    vp = _Viewport()
    vp.position = 1200.0
    for i in range(12):
        yield (
            f"Struggling [{i+1}/12]: rereading p2",
            [_visible("p2"), vp.scroll(-random.choice([30, 90, 200])), _event("hesitation"),
             _dwell("p2", 35 * (1.3 + 0.1 * i), True)],
            1.0 / speed,
        )
    yield (
        "Struggling: finally leaving p2",
        [_dwell("p2", 35 * 2.5, False), vp.scroll(150)],
        1.0 / speed,
    )


SCENARIOS = {
    "steady": scenario_steady,
    "skimmer": scenario_skimmer,
    "struggling": scenario_struggling,
}

CYCLE = ["steady", "struggling", "steady", "skimmer"]


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

def run_scenario(name: str, speed: float) -> None:
    gen_fn = SCENARIOS[name]
    print(f"\n{'─' * 60}")
    print(f"  SCENARIO: {name.upper()}")
    print(f"{'─' * 60}")

    for description, requests, delay in gen_fn(speed):
        ok = all(_request(method, path, body) is not None for method, path, body in requests)
        state = _get("/session")
        score = state["score"] if state else 0.0
        label = state["state"] if state else "unknown"
        focus = "F" if state and state["focus_mode_active"] else " "
        bar = "█" * int(score / 5) + "░" * (20 - int(score / 5))

        status = "✓" if ok else "✗"
        print(f"  {status} [{bar}] {score:5.1f} {focus} {label:<12}  {description}")
        time.sleep(delay)


def main() -> None:
    parser = argparse.ArgumentParser(description="Reading load engine simulator")
    parser.add_argument(
        "--scenario",
        choices=list(SCENARIOS.keys()) + ["cycle"],
        default="cycle",
        help="Which scenario to run (default: cycle through all)",
    )
    parser.add_argument("--loop", action="store_true", help="Repeat indefinitely")
    parser.add_argument("--speed", type=float, default=1.0, help="Speed multiplier (default 1.0)")
    args = parser.parse_args()

    health = _get("/health")
    if not health:
        print(f"[!] Cannot reach engine at {API}")
        print("    Start it first: python start.py")
        return
    print(f"[✓] Engine connected — v{health.get('version', '?')}")
    print(f"    Speed: {args.speed}×  |  Scenario: {args.scenario}")

    _request("PUT", "/session/units", UNITS)
    _request("POST", "/session/reset")
    _request("POST", "/session/start")

    sequence = CYCLE if args.scenario == "cycle" else [args.scenario]

    while True:
        for name in sequence:
            run_scenario(name, args.speed)
        if not args.loop:
            break
        print("\n[↺] Looping...\n")
        time.sleep(2.0)

    _request("POST", "/session/end")
    top = _get("/friction/top") or {"units": []}
    print("\n  Top friction:")
    for u in top["units"]:
        print(f"    {u['id']:<6} score={u['friction_score']}  rereads={u['reread_count']}")
    print("\n[✓] Simulation complete.")


if __name__ == "__main__":
    main()
