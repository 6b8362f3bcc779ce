"""
Reading Session — wires raw reader interaction into the inference engine.

One ReadingSession owns one LoadStateMachine, one FrictionAggregator and one
VelocityTracker, plus the ordered content units of the document being read
and which of them is currently active. It is the single owner of all engine
state; every public method holds the session lock so the host may call in
from several threads (API workers and the tick loop).

Usage:
    session = ReadingSession(units)
    session.start_session()
    session.on_unit_visible("p3")
    session.on_scroll(position=1840.0, timestamp=time.time())
    session.on_dwell("p3", dwell_seconds=14.0, is_periodic=True)
    session.tick()                     # once per second, from the host
    snap = session.snapshot()
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from ..config import config
from ..inference.events import (
    DwellEvent,
    EngineEvent,
    HesitationEvent,
    ScrollUpEvent,
    SmoothReadingEvent,
)
from ..inference.friction import FrictionAggregator, FrictionRecord, FrictionUpdate, RankedFriction
from ..inference.load_state_machine import DwellVerdict, LoadState, LoadStateMachine, SessionMetrics
from ..inference.signal_classifier import (
    ScrollIntensity,
    VelocityTracker,
    classify_scroll_up,
    dwell_ratio,
    is_skim_override,
    is_smooth_forward,
)
from .content import ContentUnit, UnitKind

logger = logging.getLogger(__name__)


@dataclass
class ScrollOutcome:
    intensity: Optional[ScrollIntensity] = None
    rereads: int = 0
    smooth: bool = False


@dataclass
class DwellOutcome:
    verdict: DwellVerdict = field(default_factory=DwellVerdict)
    skim_override: bool = False
    ignored: bool = False


@dataclass
class SessionSnapshot:
    metrics: SessionMetrics
    velocity: float
    skimming: bool
    break_suggested: bool
    active_unit_id: Optional[str]
    unit_count: int


@dataclass
class ReportInputs:
    metrics: SessionMetrics
    units: List[ContentUnit]
    top: List[RankedFriction]
    friction_map: Dict[str, FrictionRecord]


class ReadingSession:

    def __init__(
        self,
        units: Iterable[ContentUnit] = (),
        clock: Callable[[], float] = time.monotonic,
        break_suggestion_seconds: Optional[int] = None,
        min_dwell_report_seconds: Optional[float] = None,
    ):
        self._lock = threading.RLock()
        self.machine = LoadStateMachine(clock=clock)
        self.friction = FrictionAggregator()
        self.velocity = VelocityTracker(clock=clock)
        self._break_after = (
            config.break_suggestion_seconds
            if break_suggestion_seconds is None else break_suggestion_seconds
        )
        self._min_dwell = (
            config.min_dwell_report_seconds
            if min_dwell_report_seconds is None else min_dwell_report_seconds
        )
        self._units: List[ContentUnit] = []
        self._positions: Dict[str, int] = {}
        self._active_index = 0
        self.load_units(units)

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def load_units(self, units: Iterable[ContentUnit]) -> None:
        with self._lock:
            self._units = list(units)
            self._positions = {u.id: i for i, u in enumerate(self._units)}
            self._active_index = 0
            logger.info("Loaded %d content units", len(self._units))

    @property
    def units(self) -> List[ContentUnit]:
        return list(self._units)

    def unit(self, unit_id: str) -> Optional[ContentUnit]:
        pos = self._positions.get(unit_id)
        return self._units[pos] if pos is not None else None

    @property
    def active_unit_id(self) -> Optional[str]:
        if 0 <= self._active_index < len(self._units):
            return self._units[self._active_index].id
        return None

    def on_unit_visible(self, unit_id: str) -> bool:
        """Make `unit_id` the active unit. Returns False for ids not in the document."""
        with self._lock:
            pos = self._positions.get(unit_id)
            if pos is None:
                return False
            if pos != self._active_index:
                self._active_index = pos
                logger.debug("Active unit → %s", unit_id)
            return True

    # ------------------------------------------------------------------
    # Raw signals
    # ------------------------------------------------------------------

    def on_scroll(self, position: float, timestamp: Optional[float] = None) -> ScrollOutcome:
        """Feed one viewport scroll position sample (px from top)."""
        with self._lock:
            if timestamp is None:
                timestamp = time.time()
            delta, interval_ms = self.velocity.push(position, timestamp)
            outcome = ScrollOutcome()

            intensity = classify_scroll_up(-delta)
            if intensity is not None:
                outcome.intensity = intensity
                outcome.rereads = self._apply_scroll_up(intensity, None)

            if is_smooth_forward(delta, interval_ms):
                self.machine.report_smooth_reading()
                outcome.smooth = True
            return outcome

    def on_dwell(
        self,
        unit_id: str,
        dwell_seconds: float,
        expected_seconds: Optional[float] = None,
        is_periodic: bool = False,
    ) -> DwellOutcome:
        """Report time spent on a unit so far (periodic) or on leaving it (final)."""
        with self._lock:
            unit = self.unit(unit_id)
            if unit is not None and unit.kind is UnitKind.HEADING:
                return DwellOutcome(ignored=True)
            if dwell_seconds <= self._min_dwell:
                return DwellOutcome(ignored=True)
            if expected_seconds is None and unit is not None:
                expected_seconds = unit.expected_dwell_seconds

            ratio = dwell_ratio(dwell_seconds, expected_seconds)
            if ratio is not None and is_skim_override(ratio, self.velocity.velocity):
                self.friction.mark_as_skimmed(unit_id)
                return DwellOutcome(verdict=DwellVerdict(is_skimmed=True), skim_override=True)

            verdict = self.machine.report_relative_time(
                dwell_seconds, expected_seconds, unit_id, is_periodic
            )
            self.friction.update_friction(
                unit_id,
                FrictionUpdate(kind="visit_time", time=dwell_seconds, expected=expected_seconds),
            )
            return DwellOutcome(verdict=verdict)

    def dispatch(self, event: EngineEvent):
        """Route a tagged engine event to the matching handler."""
        with self._lock:
            if isinstance(event, ScrollUpEvent):
                return self._apply_scroll_up(ScrollIntensity(event.intensity), event.unit_id)
            if isinstance(event, DwellEvent):
                return self.on_dwell(
                    event.unit_id, event.dwell_seconds, event.expected_seconds, event.is_periodic
                )
            if isinstance(event, HesitationEvent):
                return self.machine.report_hesitation()
            if isinstance(event, SmoothReadingEvent):
                return self.machine.report_smooth_reading()
        raise TypeError(f"Unsupported engine event: {type(event).__name__}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_session(self) -> None:
        with self._lock:
            self.machine.start_session()

    def pause_session(self) -> None:
        with self._lock:
            self.machine.pause_session()

    def end_session(self) -> None:
        with self._lock:
            self.machine.end_session()

    def reset(self) -> None:
        """Clear session metrics and all friction records; units stay loaded."""
        with self._lock:
            self.machine.reset_session()
            self.friction.reset()
            self.velocity.reset()
            self._active_index = 0

    def tick(self) -> None:
        """Host-driven once-per-second step: decay, time bookkeeping, load sampling."""
        with self._lock:
            if not self.machine.session_running:
                return
            self.machine.tick()
            active = self.active_unit_id
            if active is not None:
                self.friction.record_load_sample(active, self.machine.score)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def break_suggested(self) -> bool:
        with self._lock:
            m = self.machine.metrics()
        return m.state is LoadState.STRAIN and m.sustained_strain_seconds >= self._break_after

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                metrics=self.machine.metrics(),
                velocity=self.velocity.velocity,
                skimming=self.velocity.skimming,
                break_suggested=self.break_suggested,
                active_unit_id=self.active_unit_id,
                unit_count=len(self._units),
            )

    def report_inputs(self, n: int = 3) -> ReportInputs:
        """Everything the post-session report reads, taken under one lock."""
        with self._lock:
            return ReportInputs(
                metrics=self.machine.metrics(),
                units=list(self._units),
                top=self.friction.get_top_friction_chunks(n),
                friction_map=self.friction.friction_map(),
            )

    def top_friction(self, n: int = 3) -> List[RankedFriction]:
        with self._lock:
            return self.friction.get_top_friction_chunks(n)

    def friction_map(self) -> Dict[str, FrictionRecord]:
        with self._lock:
            return self.friction.friction_map()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _apply_scroll_up(self, intensity: ScrollIntensity, unit_id: Optional[str]) -> int:
        rereads = self.machine.report_scroll_up(intensity)
        target = unit_id or self.active_unit_id
        if target is not None and rereads > 0:
            self.friction.update_friction(target, FrictionUpdate(kind="reread", amount=rereads))
        logger.debug("Scroll-up %s → %d rereads on %s", intensity.value, rereads, target)
        return rereads
