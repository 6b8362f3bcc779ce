"""
/signals — ingest raw scroll samples, dwell reports, visibility changes and
tagged engine events from the reading view.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from ...api.schemas import (
    DwellIn,
    DwellOutcomeOut,
    EngineEventIn,
    ScrollOutcomeOut,
    ScrollSampleIn,
    VisibleIn,
)
from ...inference.events import (
    DwellEvent,
    HesitationEvent,
    ScrollUpEvent,
    SmoothReadingEvent,
)
from ...inference.signal_classifier import ScrollIntensity
from ...session.reading_session import DwellOutcome

router = APIRouter(prefix="/signals", tags=["signals"])


def _get_session(request: Request):
    """Dependency — resolved by the app lifespan state."""
    return request.app.state.session


def _dwell_out(outcome: DwellOutcome) -> DwellOutcomeOut:
    return DwellOutcomeOut(
        is_strain=outcome.verdict.is_strain,
        is_high_effort=outcome.verdict.is_high_effort,
        is_skimmed=outcome.verdict.is_skimmed,
        skim_override=outcome.skim_override,
        ignored=outcome.ignored,
    )


def _to_event(event: EngineEventIn):
    """Map a validated request body onto the engine's event variant."""
    if event.kind == "scroll_up":
        return ScrollUpEvent(intensity=ScrollIntensity(event.intensity), unit_id=event.unit_id)
    if event.kind == "dwell":
        return DwellEvent(
            unit_id=event.unit_id,
            dwell_seconds=event.dwell_seconds,
            expected_seconds=event.expected_seconds,
            is_periodic=event.is_periodic,
        )
    if event.kind == "hesitation":
        return HesitationEvent()
    return SmoothReadingEvent()


@router.post("/scroll", response_model=ScrollOutcomeOut)
def ingest_scroll(sample: ScrollSampleIn, session=Depends(_get_session)):
    """Accept one viewport scroll position sample."""
    outcome = session.on_scroll(sample.position, sample.timestamp)
    return ScrollOutcomeOut(
        intensity=outcome.intensity.value if outcome.intensity else None,
        rereads=outcome.rereads,
        smooth=outcome.smooth,
    )


@router.post("/dwell", response_model=DwellOutcomeOut)
def ingest_dwell(report: DwellIn, session=Depends(_get_session)):
    """Accept a periodic or final dwell-time report for one unit."""
    outcome = session.on_dwell(
        report.unit_id, report.dwell_seconds, report.expected_seconds, report.is_periodic
    )
    return _dwell_out(outcome)


@router.post("/visible")
def ingest_visible(body: VisibleIn, session=Depends(_get_session)):
    """The reading view scrolled a new unit into the active position."""
    known = session.on_unit_visible(body.unit_id)
    return {"known": known, "active_unit_id": session.active_unit_id}


@router.post("/event", status_code=status.HTTP_202_ACCEPTED)
def ingest_event(event: EngineEventIn, session=Depends(_get_session)):
    """Accept a single tagged engine event."""
    session.dispatch(_to_event(event))
    return {"status": "accepted"}


@router.post("/batch", status_code=status.HTTP_202_ACCEPTED)
def ingest_batch(events: list[EngineEventIn], session=Depends(_get_session)):
    """Accept a batch of tagged events, applied in arrival order."""
    for event in events:
        session.dispatch(_to_event(event))
    return {"accepted": len(events)}
