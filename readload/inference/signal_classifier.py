"""
Signal Classifier — pure rules that turn raw scroll and dwell observations
into discrete signals for the load state machine and the friction aggregator.

Everything here is stateless except VelocityTracker, which only holds the
smoothed scroll velocity and the time of the last skimming trigger.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional

from . import thresholds as T

logger = logging.getLogger(__name__)


class ScrollIntensity(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class DwellBucket(str, Enum):
    SKIMMED = "skimmed"
    STEADY = "steady"
    HIGH_EFFORT = "high-effort"
    POSSIBLE_STRAIN = "possible-strain"


# Marker each bucket contributes to the "newly crossed threshold" bookkeeping
_BUCKET_THRESHOLD = {
    DwellBucket.SKIMMED: T.THRESHOLD_SKIM,
    DwellBucket.STEADY: T.THRESHOLD_STEADY,
    DwellBucket.HIGH_EFFORT: T.THRESHOLD_HIGH_EFFORT,
    DwellBucket.POSSIBLE_STRAIN: T.THRESHOLD_STRAIN,
}


# ---------------------------------------------------------------------------
# Scroll
# ---------------------------------------------------------------------------

def classify_scroll_up(reverse_px: float) -> Optional[ScrollIntensity]:
    """
    Bucket a reverse-scroll magnitude (positive = scrolled back up).
    Forward scrolls and zero movement are not classified.
    """
    if reverse_px <= 0:
        return None
    if reverse_px < T.SMALL_SCROLL_PX:
        return ScrollIntensity.SMALL
    if reverse_px < T.MEDIUM_SCROLL_PX:
        return ScrollIntensity.MEDIUM
    return ScrollIntensity.LARGE


def is_smooth_forward(forward_px: float, interval_ms: float) -> bool:
    """Short, unhurried forward scroll — evidence of uninterrupted progress."""
    return (
        forward_px > 0
        and forward_px < T.SMOOTH_SCROLL_MAX_PX
        and interval_ms > T.SMOOTH_SCROLL_MIN_INTERVAL_MS
    )


# ---------------------------------------------------------------------------
# Dwell
# ---------------------------------------------------------------------------

def dwell_ratio(dwell_seconds: float, expected_seconds: Optional[float]) -> Optional[float]:
    if not expected_seconds:
        return None
    return dwell_seconds / expected_seconds


def classify_dwell_ratio(ratio: float) -> DwellBucket:
    if ratio < T.SKIM_RATIO:
        return DwellBucket.SKIMMED
    if ratio <= T.HIGH_EFFORT_RATIO:
        return DwellBucket.STEADY
    if ratio <= T.STRAIN_RATIO:
        return DwellBucket.HIGH_EFFORT
    return DwellBucket.POSSIBLE_STRAIN


def bucket_threshold(bucket: DwellBucket) -> float:
    return _BUCKET_THRESHOLD[bucket]


def is_skim_override(ratio: float, smoothed_velocity: float) -> bool:
    """Very short dwell while scrolling fast is conclusive skim evidence."""
    return ratio < T.SKIM_OVERRIDE_RATIO and smoothed_velocity > T.SKIM_OVERRIDE_VELOCITY


# ---------------------------------------------------------------------------
# Velocity
# ---------------------------------------------------------------------------

class VelocityTracker:
    """
    Exponential moving average of scroll speed in px/ms, plus a transient
    "skimming" signal raised whenever the smoothed speed exceeds the skim
    threshold and cleared two seconds after the last trigger.

    Timestamps are in seconds (time.time() style); the clock is only used
    to age the skimming signal.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.velocity: float = 0.0
        self._last_position: float = 0.0
        self._last_timestamp: Optional[float] = None
        self._skim_triggered_at: Optional[float] = None

    def push(self, position: float, timestamp: float) -> tuple[float, float]:
        """
        Record a scroll position sample.

        Returns (delta_px, interval_ms) relative to the previous sample, where
        delta_px is positive for forward (downward) movement. The very first
        sample only sets the baseline and returns (0, 0).
        """
        if self._last_timestamp is None:
            self._last_position = position
            self._last_timestamp = timestamp
            return 0.0, 0.0

        delta = position - self._last_position
        interval_ms = (timestamp - self._last_timestamp) * 1000.0

        if interval_ms > 0:
            sample = abs(delta) / interval_ms
            w = T.VELOCITY_HISTORY_WEIGHT
            self.velocity = self.velocity * w + sample * (1 - w)
            if self.velocity > T.SKIMMING_VELOCITY:
                self._skim_triggered_at = self._clock()
                logger.debug("Skimming signal raised at %.2f px/ms", self.velocity)

        self._last_position = position
        self._last_timestamp = timestamp
        return delta, interval_ms

    @property
    def skimming(self) -> bool:
        if self._skim_triggered_at is None:
            return False
        return self._clock() - self._skim_triggered_at < T.SKIMMING_SIGNAL_SECONDS

    def reset(self) -> None:
        """Clear speed and the skimming signal; the viewport position stays the baseline."""
        self.velocity = 0.0
        self._skim_triggered_at = None
