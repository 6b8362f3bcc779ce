"""
Load State Machine — maintains a bounded [0, 100] load score for the current
reading session, decays it once per tick, and classifies it into a discrete
reading state.

State rules:
  strain       score >= 65 AND (behavioral confirmation OR high-effort streak >= 2)
  high-effort  score >= 35
  steady       otherwise

Dwell time alone never declares strain: a scroll-back or hesitation (or two
consecutive high-effort unit exits) must corroborate it.

Focus mode is hysteretic: it turns on at score >= 70 and only turns off once
the score is back to <= 50 AND the reader has been reading smoothly for at
least 25 seconds.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional

from . import thresholds as T
from .signal_classifier import (
    DwellBucket,
    ScrollIntensity,
    bucket_threshold,
    classify_dwell_ratio,
    dwell_ratio,
)

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    STEADY = "steady"
    HIGH_EFFORT = "high-effort"
    STRAIN = "strain"


def _empty_state_times() -> Dict[LoadState, int]:
    return {s: 0 for s in LoadState}


@dataclass
class _SessionTotals:
    score: float = T.INITIAL_SCORE
    focus_mode_active: bool = False
    focus_mode_activation_count: int = 0
    cumulative_time_in_state: Dict[LoadState, int] = field(default_factory=_empty_state_times)
    active_session_seconds: int = 0
    session_running: bool = False
    sustained_strain_seconds: int = 0


@dataclass
class SessionMetrics:
    """Snapshot returned by metrics(); `state` is derived from the score at read time."""
    score: float = T.INITIAL_SCORE
    state: LoadState = LoadState.STEADY
    focus_mode_active: bool = False
    focus_mode_activation_count: int = 0
    cumulative_time_in_state: Dict[LoadState, int] = field(default_factory=_empty_state_times)
    active_session_seconds: int = 0
    session_running: bool = False
    sustained_strain_seconds: int = 0


@dataclass
class DwellVerdict:
    is_strain: bool = False
    is_high_effort: bool = False
    is_skimmed: bool = False


class LoadStateMachine:
    """
    Owns one session's running totals. All operations are synchronous and take
    effect immediately; the host calls `tick()` once per second.

    `clock` returns seconds and is only used to time the smooth-reading run
    for focus-mode exit.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._metrics = _SessionTotals()
        self._behavioral_confirmation = False
        self._high_effort_streak = 0
        self._smooth_reading_started: Optional[float] = None
        self._last_reported_unit: Optional[str] = None
        self._last_reported_threshold = T.THRESHOLD_RESET

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def score(self) -> float:
        return self._metrics.score

    @property
    def state(self) -> LoadState:
        score = self._metrics.score
        if score >= T.STRAIN_SCORE and self._strain_corroborated():
            return LoadState.STRAIN
        if score >= T.HIGH_EFFORT_SCORE:
            return LoadState.HIGH_EFFORT
        return LoadState.STEADY

    @property
    def session_running(self) -> bool:
        return self._metrics.session_running

    @property
    def behavioral_confirmation(self) -> bool:
        return self._behavioral_confirmation

    @property
    def high_effort_streak(self) -> int:
        return self._high_effort_streak

    def metrics(self) -> SessionMetrics:
        m = self._metrics
        return SessionMetrics(
            score=m.score,
            state=self.state,
            focus_mode_active=m.focus_mode_active,
            focus_mode_activation_count=m.focus_mode_activation_count,
            cumulative_time_in_state=dict(m.cumulative_time_in_state),
            active_session_seconds=m.active_session_seconds,
            session_running=m.session_running,
            sustained_strain_seconds=m.sustained_strain_seconds,
        )

    # ------------------------------------------------------------------
    # Interaction signals
    # ------------------------------------------------------------------

    def report_scroll_up(self, intensity: ScrollIntensity) -> int:
        """Apply a scroll-back; returns the reread count to attribute to the visible unit."""
        intensity = ScrollIntensity(intensity)
        self._smooth_reading_started = None
        self._behavioral_confirmation = True
        self._adjust(T.SCROLL_UP_DELTA[intensity.value])
        return T.SCROLL_UP_REREADS[intensity.value]

    def report_relative_time(
        self,
        dwell_seconds: float,
        expected_seconds: Optional[float],
        unit_id: Optional[str] = None,
        is_periodic: bool = False,
    ) -> DwellVerdict:
        ratio = dwell_ratio(dwell_seconds, expected_seconds)
        if ratio is None:
            return DwellVerdict()

        bucket = classify_dwell_ratio(ratio)
        threshold = bucket_threshold(bucket)

        # An anonymous report always counts as a new unit
        is_new_unit = not unit_id or unit_id != self._last_reported_unit
        crossed = threshold > self._last_reported_threshold

        # Repeated periodic reports on one unit only count when a higher threshold is crossed
        if is_new_unit or crossed or not is_periodic:
            if bucket is DwellBucket.POSSIBLE_STRAIN:
                self._adjust(T.STRAIN_DWELL_DELTA)
            elif bucket is DwellBucket.HIGH_EFFORT:
                self._adjust(T.HIGH_EFFORT_DWELL_DELTA)
                if not is_periodic:
                    self._high_effort_streak += 1
            elif bucket is DwellBucket.STEADY and not is_periodic:
                self._adjust(T.STEADY_DWELL_DELTA)
                self._high_effort_streak = 0
                self._behavioral_confirmation = False

            if is_periodic:
                self._last_reported_unit = unit_id or None
                self._last_reported_threshold = threshold
            else:
                self._last_reported_unit = None
                self._last_reported_threshold = T.THRESHOLD_RESET

        verdict = DwellVerdict(
            is_strain=bucket is DwellBucket.POSSIBLE_STRAIN and self._strain_corroborated(),
            is_high_effort=bucket is DwellBucket.HIGH_EFFORT,
            is_skimmed=bucket is DwellBucket.SKIMMED,
        )
        logger.debug(
            "Dwell %s ratio=%.2f bucket=%s periodic=%s → %s",
            unit_id, ratio, bucket.value, is_periodic, verdict,
        )
        return verdict

    def report_hesitation(self) -> None:
        self._behavioral_confirmation = True
        self._adjust(T.HESITATION_DELTA)

    def report_smooth_reading(self) -> None:
        if self._smooth_reading_started is None:
            self._smooth_reading_started = self._clock()
        self._adjust(T.SMOOTH_READING_DELTA)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_session(self) -> None:
        self._metrics.session_running = True
        logger.info("Reading session started")

    def pause_session(self) -> None:
        self._metrics.session_running = False
        logger.info("Reading session paused")

    def end_session(self) -> None:
        self._metrics.session_running = False
        logger.info(
            "Reading session ended after %ds (%d focus activations)",
            self._metrics.active_session_seconds,
            self._metrics.focus_mode_activation_count,
        )

    def reset_session(self) -> None:
        self._metrics = _SessionTotals()
        self._behavioral_confirmation = False
        self._high_effort_streak = 0
        self._smooth_reading_started = None
        self._last_reported_unit = None
        self._last_reported_threshold = T.THRESHOLD_RESET
        logger.info("Reading session reset")

    def tick(self) -> None:
        """Once-per-second decay and time bookkeeping; no-op unless running."""
        m = self._metrics
        if not m.session_running:
            return

        state = self.state
        decay = T.DECAY_STEADY if state is LoadState.STEADY else T.DECAY_ELEVATED
        m.active_session_seconds += 1
        m.cumulative_time_in_state[state] += 1
        if state is LoadState.STRAIN:
            m.sustained_strain_seconds += 1
        else:
            m.sustained_strain_seconds = 0
        self._set_score(m.score * decay)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _strain_corroborated(self) -> bool:
        return (
            self._behavioral_confirmation
            or self._high_effort_streak >= T.HIGH_EFFORT_STREAK_FOR_STRAIN
        )

    def _adjust(self, delta: float) -> None:
        self._set_score(self._metrics.score + delta)

    def _set_score(self, value: float) -> None:
        clamped = max(T.SCORE_MIN, min(value, T.SCORE_MAX))
        if clamped == self._metrics.score:
            return
        self._metrics.score = clamped
        self._evaluate_focus_mode()

    def _smooth_reading_seconds(self) -> float:
        if self._smooth_reading_started is None:
            return 0.0
        return self._clock() - self._smooth_reading_started

    def _evaluate_focus_mode(self) -> None:
        m = self._metrics
        if not m.focus_mode_active and m.score >= T.FOCUS_ENTER_SCORE:
            m.focus_mode_active = True
            m.focus_mode_activation_count += 1
            self._smooth_reading_started = None
            logger.info("Focus mode on (score=%.1f, activation #%d)",
                        m.score, m.focus_mode_activation_count)
        elif (
            m.focus_mode_active
            and m.score <= T.FOCUS_EXIT_SCORE
            and self._smooth_reading_started is not None
            and self._smooth_reading_seconds() >= T.FOCUS_EXIT_SMOOTH_SECONDS
        ):
            m.focus_mode_active = False
            logger.info("Focus mode off (score=%.1f)", m.score)
