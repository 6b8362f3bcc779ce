"""
Shared threshold table for the signal classifier, the load state machine
and the friction aggregator.

Fixed for the lifetime of the engine.
"""

from __future__ import annotations

# ── Load score ─────────────────────────────────────────────────────────────
INITIAL_SCORE = 20.0
SCORE_MIN = 0.0
SCORE_MAX = 100.0

STRAIN_SCORE = 65.0              # score >= this (with confirmation) → strain
HIGH_EFFORT_SCORE = 35.0         # score >= this → high-effort

DECAY_STEADY = 0.99              # per tick while steady
DECAY_ELEVATED = 0.995           # per tick while high-effort / strain

TICK_SECONDS = 1.0                # each tick adds one second to the time counters

HIGH_EFFORT_STREAK_FOR_STRAIN = 2

# ── Focus mode hysteresis ──────────────────────────────────────────────────
FOCUS_ENTER_SCORE = 70.0
FOCUS_EXIT_SCORE = 50.0
FOCUS_EXIT_SMOOTH_SECONDS = 25.0

# ── Load deltas ────────────────────────────────────────────────────────────
SCROLL_UP_DELTA = {"small": 0.5, "medium": 1.0, "large": 2.0}
SCROLL_UP_REREADS = {"small": 1, "medium": 2, "large": 3}

STRAIN_DWELL_DELTA = 1.0
HIGH_EFFORT_DWELL_DELTA = 0.5
STEADY_DWELL_DELTA = -1.0
HESITATION_DELTA = 1.0
SMOOTH_READING_DELTA = -1.0

# ── Dwell ratio (observed / expected) ──────────────────────────────────────
SKIM_RATIO = 0.6                 # below → skimmed
HIGH_EFFORT_RATIO = 1.2          # above → high-effort
STRAIN_RATIO = 1.6               # above → possible strain / long pause

# Threshold markers used for "newly crossed" bookkeeping on periodic reports.
# The bookkeeping starts at 1.0, between the steady and high-effort markers.
THRESHOLD_SKIM = 0.0
THRESHOLD_STEADY = SKIM_RATIO
THRESHOLD_HIGH_EFFORT = HIGH_EFFORT_RATIO
THRESHOLD_STRAIN = STRAIN_RATIO
THRESHOLD_RESET = 1.0

# ── Scroll ─────────────────────────────────────────────────────────────────
SMALL_SCROLL_PX = 40.0
MEDIUM_SCROLL_PX = 120.0

SMOOTH_SCROLL_MAX_PX = 300.0
SMOOTH_SCROLL_MIN_INTERVAL_MS = 150.0

VELOCITY_HISTORY_WEIGHT = 0.8    # EMA weight on previous value
SKIMMING_VELOCITY = 1.5          # px/ms, triggers the transient skim signal
SKIMMING_SIGNAL_SECONDS = 2.0

SKIM_OVERRIDE_RATIO = 0.3
SKIM_OVERRIDE_VELOCITY = 1.2

# ── Friction ───────────────────────────────────────────────────────────────
REREAD_WEIGHT = 2
LONG_PAUSE_WEIGHT = 1
EXCESSIVE_TIME_WEIGHT = 1
HIGH_FRICTION_SCORE = 6          # report: "high" vs "moderate"
