"""
Engine events — the tagged inputs the reading session dispatches to the
load state machine and friction aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .signal_classifier import ScrollIntensity


@dataclass(frozen=True)
class ScrollUpEvent:
    intensity: ScrollIntensity
    unit_id: Optional[str] = None      # defaults to the active unit


@dataclass(frozen=True)
class DwellEvent:
    unit_id: str
    dwell_seconds: float
    expected_seconds: Optional[float] = None   # defaults to the unit's estimate
    is_periodic: bool = False


@dataclass(frozen=True)
class HesitationEvent:
    pass


@dataclass(frozen=True)
class SmoothReadingEvent:
    pass


EngineEvent = Union[ScrollUpEvent, DwellEvent, HesitationEvent, SmoothReadingEvent]
